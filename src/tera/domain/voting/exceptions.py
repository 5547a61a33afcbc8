"""Voting-specific exceptions."""

from datetime import timedelta

from tera.core.exceptions import TeraError


class VoteCooldownActiveError(TeraError):
    """Raised when a new vote is attempted before the cooldown has elapsed."""

    def __init__(self, station_uuid: str, remaining: timedelta):
        self.station_uuid = station_uuid
        self.remaining = remaining
        minutes, seconds = divmod(max(int(remaining.total_seconds()), 0), 60)
        super().__init__(f"Already voted recently. Try again in {minutes}m {seconds:02d}s")
