"""Custom exceptions for awsp."""

from pathlib import Path


class AwspError(Exception):
    """Base exception for all awsp errors.

    All awsp-specific exceptions inherit from this class, allowing
    callers to catch all awsp errors with a single except clause.
    """

    pass


class ConfigNotFoundError(AwspError):
    """AWS config file does not exist."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Config not found: {path}")


class NoProfilesError(AwspError):
    """AWS config contains no profiles."""

    def __init__(self, message: str = "No profiles found."):
        super().__init__(message)


class NotATerminalError(AwspError):
    """Standard input cannot be switched into raw mode."""

    def __init__(self, message: str = "stdin is not a terminal; cannot select interactively"):
        super().__init__(message)


class InputClosedError(AwspError):
    """Standard input reached EOF while the selector was running."""

    def __init__(self, message: str = "stdin closed before a profile was selected"):
        super().__init__(message)
