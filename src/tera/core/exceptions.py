"""Base exceptions shared by every Tera component."""

from pathlib import Path


class TeraError(Exception):
    """Base exception for Tera operations."""

    pass


class PersistenceError(TeraError):
    """Base exception for on-disk store failures."""

    def __init__(self, path: Path, message: str):
        self.path = Path(path)
        super().__init__(message)


class PersistenceReadError(PersistenceError):
    """Raised when a store file exists but cannot be read."""

    pass


class PersistenceWriteError(PersistenceError):
    """Raised when a store file cannot be written or replaced."""

    pass


class DocumentParseError(PersistenceError):
    """Raised when a store file is not a valid document.

    Never swallowed: discarding a malformed file would lose user data.
    """

    pass
