"""Module entrypoint for ``python -m ceview``.

All argument parsing and command dispatch happen in ``ceview.cli``.
"""

from .cli import main


if __name__ == "__main__":
    raise SystemExit(main())
