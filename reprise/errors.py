"""Exceptions raised by the Bitrise client, each carrying a process exit code."""

from __future__ import annotations

# Exit codes follow the BSD sysexits convention.
EX_GENERAL = 1
EX_USAGE = 64
EX_DATAERR = 65
EX_NOINPUT = 66
EX_UNAVAILABLE = 69
EX_TEMPFAIL = 75
EX_NOPERM = 77


class RepriseError(Exception):
    """Base class for every error the package raises."""

    def exit_code(self) -> int:
        """Return the process exit code that fits this error."""
        return EX_GENERAL


class ApiError(RepriseError):
    """The API answered with a non-success HTTP status."""

    def __init__(self, status: int, message: str) -> None:
        self.status = status
        self.message = message
        super().__init__(f"API error ({status}): {message}")

    def exit_code(self) -> int:
        if self.status in (401, 403):
            return EX_NOPERM
        if self.status == 404:
            return EX_NOINPUT
        if self.status == 429:
            return EX_TEMPFAIL
        return EX_UNAVAILABLE


class InvalidArgumentError(RepriseError, ValueError):
    """An argument given by the caller, such as a URL, was rejected."""

    def exit_code(self) -> int:
        return EX_USAGE


class ResponseFormatError(RepriseError):
    """A response body could not be decoded into the expected shape."""

    def exit_code(self) -> int:
        return EX_DATAERR