"""Playback-specific exceptions for error handling."""

from tera.core.exceptions import TeraError


class PlaybackError(TeraError):
    """Base exception for playback operations."""

    pass


class PlayerUnavailableError(PlaybackError):
    """Raised when the mpv binary cannot be found."""

    def __init__(self, binary: str, message: str = None):
        self.binary = binary
        super().__init__(
            message or f"{binary} not found in PATH. Please install mpv to play stations."
        )


class ProcessSpawnError(PlaybackError):
    """Raised when the mpv process fails to start."""

    pass
