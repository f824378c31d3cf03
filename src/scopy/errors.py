"""
Error types raised by scopy.

Every failure that aborts a run is a ScopyError subclass. The core never
retries or reports; the CLI turns these into a message and exit status 1.
"""

from typing import Optional


class ScopyError(Exception):
    """Base class for all scopy errors."""


class ConfigError(ScopyError):
    """Raised when the run configuration is invalid (before any traversal)."""


class IgnoreFileError(ScopyError):
    """Raised when an existing .gitignore cannot be read."""
    def __init__(self, path: str, error: OSError):
        self.path = path
        self.error = error
        super().__init__(f"error loading .gitignore: {path}: {error}")


class TraversalError(ScopyError):
    """Raised when the directory walk hits a fatal filesystem error."""
    def __init__(self, path: str, error: OSError):
        self.path = path
        self.error = error
        super().__init__(f"error walking {path}: {error}")


class FileReadError(ScopyError):
    """Raised when an admitted file cannot be opened or read."""
    def __init__(self, path: str, error: Optional[Exception] = None):
        self.path = path
        self.error = error
        super().__init__(f"error reading {path}: {error}")
