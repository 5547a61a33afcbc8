"""
Vote tracker: permanent record of voted stations with a resend cooldown.

A record means "voted at least once, ever" and is only removed on explicit
request. The cooldown only decides whether a new upstream vote is worth
sending.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Optional

from loguru import logger

from tera.core.exceptions import DocumentParseError, PersistenceWriteError
from tera.core.jsonstore import (
    format_timestamp,
    parse_timestamp,
    read_json_document,
    utc_now,
    write_json_atomic,
)
from tera.core.locks import ReadWriteLock

from .exceptions import VoteCooldownActiveError

# Radio Browser accepts one vote per station per client every 10 minutes
VOTE_COOLDOWN = timedelta(minutes=10)


@dataclass(frozen=True)
class VotedStation:
    """Last vote time for a station."""

    station_uuid: str
    voted_at: datetime

    def to_dict(self) -> dict[str, str]:
        return {
            "station_uuid": self.station_uuid,
            "voted_at": format_timestamp(self.voted_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VotedStation":
        if not isinstance(data, dict):
            raise ValueError("voted station entry must be an object")
        station_uuid = data.get("station_uuid")
        if not station_uuid or not isinstance(station_uuid, str):
            raise ValueError("voted station entry has no station_uuid")
        if "voted_at" not in data:
            raise ValueError(f"voted station {station_uuid} has no voted_at")
        return cls(station_uuid=station_uuid, voted_at=parse_timestamp(data["voted_at"]))


class VoteTracker:
    """Thread-safe vote store backed by a JSON document."""

    def __init__(
        self,
        voted_path: Path,
        cooldown: timedelta = VOTE_COOLDOWN,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.voted_path = Path(voted_path)
        self.cooldown = cooldown
        self._clock = clock or utc_now
        self._lock = ReadWriteLock()
        self._votes: dict[str, VotedStation] = {}

    def load(self) -> None:
        """Read votes from disk. A missing file means no votes.

        Raises:
            PersistenceReadError: File could not be read
            DocumentParseError: File is not a valid vote document
        """
        with self._lock.write():
            document = read_json_document(self.voted_path)
            if document is None:
                self._votes = {}
                return

            try:
                entries = [
                    VotedStation.from_dict(entry)
                    for entry in document.get("stations") or []
                ]
            except (ValueError, TypeError) as e:
                raise DocumentParseError(
                    self.voted_path, f"Failed to parse voted stations {self.voted_path}: {e}"
                ) from e

            self._votes = {}
            for entry in entries:
                # Keep the latest vote if a station appears twice
                existing = self._votes.get(entry.station_uuid)
                if existing is None or entry.voted_at > existing.voted_at:
                    self._votes[entry.station_uuid] = entry

        logger.debug(f"Loaded {len(self._votes)} voted stations")

    def _save(self) -> None:
        # Caller must hold the write lock
        document = {"stations": [vote.to_dict() for vote in self._votes.values()]}
        write_json_atomic(self.voted_path, document)

    def add_vote(self, station_uuid: str) -> VotedStation:
        """Record a vote now, updating the existing record if there is one.

        Raises:
            PersistenceWriteError: Save failed (nothing was changed)
        """
        with self._lock.write():
            previous = self._votes.get(station_uuid)
            vote = VotedStation(station_uuid=station_uuid, voted_at=self._clock())
            self._votes[station_uuid] = vote

            try:
                self._save()
            except PersistenceWriteError:
                if previous is None:
                    del self._votes[station_uuid]
                else:
                    self._votes[station_uuid] = previous
                raise

        logger.info(f"Recorded vote for {station_uuid}")
        return vote

    def has_voted(self, station_uuid: str) -> bool:
        """True if the station was ever voted for, regardless of age."""
        with self._lock.read():
            return station_uuid in self._votes

    def get_voted_at(self, station_uuid: str) -> Optional[datetime]:
        with self._lock.read():
            vote = self._votes.get(station_uuid)
            return vote.voted_at if vote else None

    def time_until_vote(self, station_uuid: str) -> timedelta:
        """Remaining cooldown; zero when a new vote may be sent."""
        with self._lock.read():
            vote = self._votes.get(station_uuid)
            if vote is None:
                return timedelta(0)
            remaining = self.cooldown - (self._clock() - vote.voted_at)
            return max(remaining, timedelta(0))

    def can_vote_again(self, station_uuid: str) -> bool:
        """True if no vote exists or the cooldown has elapsed."""
        return self.time_until_vote(station_uuid) == timedelta(0)

    def ensure_can_vote(self, station_uuid: str) -> None:
        """Raise VoteCooldownActiveError while the cooldown is running."""
        remaining = self.time_until_vote(station_uuid)
        if remaining > timedelta(0):
            raise VoteCooldownActiveError(station_uuid, remaining)

    def count(self) -> int:
        with self._lock.read():
            return len(self._votes)

    def remove_vote(self, station_uuid: str) -> bool:
        """Forget a single vote.

        Returns:
            True if a vote was removed, False if there was none
        """
        with self._lock.write():
            removed = self._votes.pop(station_uuid, None)
            if removed is None:
                return False

            try:
                self._save()
            except PersistenceWriteError:
                self._votes[station_uuid] = removed
                raise

        logger.info(f"Removed vote for {station_uuid}")
        return True

    def clear_all(self) -> None:
        """Forget every vote."""
        with self._lock.write():
            previous = self._votes
            self._votes = {}

            try:
                self._save()
            except PersistenceWriteError:
                self._votes = previous
                raise

        logger.info(f"Cleared {len(previous)} votes")
