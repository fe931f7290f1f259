"""Exception types raised by the Compiler Explorer client layer."""

from __future__ import annotations


class CompilerExplorerError(Exception):
    """Base class for failures reported to the user as notifications."""


class RemoteServiceError(CompilerExplorerError):
    """A request to the Compiler Explorer service failed.

    ``message`` carries the service's own text when it sent one, so it can be
    shown to the user verbatim.
    """

    def __init__(self, message: str, status: int | None = None, endpoint: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.endpoint = endpoint

    def __str__(self) -> str:
        if self.status is None:
            return self.message
        return f"{self.message} (HTTP {self.status})"
