"""Blocklist-specific exceptions for error handling."""

from tera.core.exceptions import TeraError


class BlocklistError(TeraError):
    """Base exception for blocklist operations."""

    pass


class AlreadyBlockedError(BlocklistError):
    """Raised when blocking a station that is already blocked."""

    def __init__(self, station_uuid: str, message: str = None):
        self.station_uuid = station_uuid
        super().__init__(message or "Station is already blocked")


class NotBlockedError(BlocklistError):
    """Raised when unblocking a station that is not blocked."""

    def __init__(self, station_uuid: str, message: str = None):
        self.station_uuid = station_uuid
        super().__init__(message or "Station is not blocked")


class RuleAlreadyExistsError(BlocklistError):
    """Raised when adding a rule equivalent to an existing one."""

    pass


class RuleNotFoundError(BlocklistError):
    """Raised when removing a rule that does not exist."""

    pass
