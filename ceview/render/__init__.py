"""Terminal rendering: ANSI shaping, syntax colors, and the split view."""
