"""Playback domain - mpv process supervision.

This domain handles:
- Starting/stopping one mpv process per station
- Recovering to idle when mpv exits on its own
- Volume and mute over mpv JSON IPC
- Now-playing track history
"""

from .exceptions import PlaybackError, PlayerUnavailableError, ProcessSpawnError
from .player import (
    MAX_TRACK_HISTORY,
    PlaybackSession,
    PlayerStatus,
    StreamPlayer,
    build_mpv_command,
    get_mpv_property,
    send_mpv_command,
)

__all__ = [
    "StreamPlayer",
    "PlayerStatus",
    "PlaybackSession",
    "MAX_TRACK_HISTORY",
    "build_mpv_command",
    "send_mpv_command",
    "get_mpv_property",
    # Errors
    "PlaybackError",
    "PlayerUnavailableError",
    "ProcessSpawnError",
]
