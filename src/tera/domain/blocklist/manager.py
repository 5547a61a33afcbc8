"""
Blocklist manager: durable set of blocked stations plus block rules.

Every mutation persists the whole document. The change is applied under
the write lock, committed to disk, and reverted in memory if the write
fails, so memory and disk never disagree after an error.
"""

from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from loguru import logger

from tera.core.exceptions import DocumentParseError, PersistenceWriteError
from tera.core.jsonstore import read_json_document, utc_now, write_json_atomic
from tera.core.locks import ReadWriteLock
from tera.domain.stations.models import Station

from .exceptions import (
    AlreadyBlockedError,
    NotBlockedError,
    RuleAlreadyExistsError,
    RuleNotFoundError,
)
from .models import (
    BLOCK_LARGE_THRESHOLD,
    BLOCK_WARNING_THRESHOLD,
    BLOCKLIST_VERSION,
    BlockedStation,
    BlockRule,
    BlockRuleType,
)


class BlocklistManager:
    """Thread-safe blocklist backed by a single JSON document.

    Undo keeps only the most recent block. Only `block()` sets it; it is
    dropped by `undo_last_block()`, `clear()`, `load()`, and by unblocking
    that same station.
    """

    def __init__(
        self,
        blocklist_path: Path,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.blocklist_path = Path(blocklist_path)
        self._clock = clock or utc_now
        self._lock = ReadWriteLock()
        self._blocked: dict[str, BlockedStation] = {}
        self._rules: list[BlockRule] = []
        self._last_block: Optional[BlockedStation] = None

    def load(self) -> None:
        """Read the blocklist from disk, replacing the in-memory state.

        A missing file means an empty blocklist.

        Raises:
            PersistenceReadError: File could not be read
            DocumentParseError: File is not a valid blocklist document
        """
        with self._lock.write():
            document = read_json_document(self.blocklist_path)

            if document is None:
                self._blocked = {}
                self._rules = []
                self._last_block = None
                logger.debug(f"No blocklist at {self.blocklist_path}, starting empty")
                return

            try:
                stations = [
                    BlockedStation.from_dict(entry)
                    for entry in document.get("blocked_stations") or []
                ]
                rules = [
                    BlockRule.from_dict(entry)
                    for entry in document.get("block_rules") or []
                ]
            except (ValueError, TypeError) as e:
                raise DocumentParseError(
                    self.blocklist_path,
                    f"Failed to parse blocklist {self.blocklist_path}: {e}",
                ) from e

            self._blocked = {station.station_uuid: station for station in stations}
            self._rules = rules
            # Undo target can't be reconstructed from disk
            self._last_block = None

        logger.info(
            f"Loaded blocklist: {len(stations)} stations, {len(rules)} rules"
        )

    def save(self) -> None:
        """Write the current blocklist to disk."""
        with self._lock.write():
            self._save()

    def _save(self) -> None:
        # Caller must hold the write lock
        document = {
            "version": BLOCKLIST_VERSION,
            "blocked_stations": [s.to_dict() for s in self._sorted_stations()],
            "block_rules": [rule.to_dict() for rule in self._rules],
        }
        write_json_atomic(self.blocklist_path, document)

    def _sorted_stations(self) -> list[BlockedStation]:
        # Most recent first; stable for equal timestamps
        return sorted(self._blocked.values(), key=lambda s: s.blocked_at, reverse=True)

    def block(self, station: Station) -> str:
        """Add a station to the blocklist.

        Returns:
            Confirmation message, with a warning line when the blocklist
            reaches a size threshold

        Raises:
            ValueError: station is None
            AlreadyBlockedError: Station is already blocked
            PersistenceWriteError: Save failed (nothing was changed)
        """
        if station is None:
            raise ValueError("station cannot be None")

        with self._lock.write():
            if station.station_uuid in self._blocked:
                raise AlreadyBlockedError(station.station_uuid)

            blocked = BlockedStation.from_station(station, blocked_at=self._clock())
            previous_last_block = self._last_block

            self._blocked[station.station_uuid] = blocked
            self._last_block = blocked

            try:
                self._save()
            except PersistenceWriteError:
                del self._blocked[station.station_uuid]
                self._last_block = previous_last_block
                logger.exception(f"Failed to save block of {station.station_uuid}")
                raise

            count = len(self._blocked)

        logger.info(f"Blocked station {station.station_uuid} ({station.trim_name()})")

        msg = f"🚫 Blocked: {station.trim_name()}"
        if count == BLOCK_WARNING_THRESHOLD:
            msg += (
                f"\n⚠️ You've blocked {count} stations. "
                "Consider using Block Rules to filter by country, language or tag."
            )
        elif count == BLOCK_LARGE_THRESHOLD:
            msg += f"\n⚠️ Large blocklist ({count} stations). Export recommended."
        return msg

    def unblock(self, station_uuid: str) -> None:
        """Remove a station from the blocklist.

        Raises:
            NotBlockedError: Station is not blocked
            PersistenceWriteError: Save failed (nothing was changed)
        """
        with self._lock.write():
            removed = self._blocked.pop(station_uuid, None)
            if removed is None:
                raise NotBlockedError(station_uuid)

            previous_last_block = self._last_block
            if previous_last_block and previous_last_block.station_uuid == station_uuid:
                self._last_block = None

            try:
                self._save()
            except PersistenceWriteError:
                self._blocked[station_uuid] = removed
                self._last_block = previous_last_block
                raise

        logger.info(f"Unblocked station {station_uuid}")

    def is_blocked(self, station_uuid: str) -> bool:
        """Check if a station is individually blocked."""
        with self._lock.read():
            return station_uuid in self._blocked

    def is_blocked_by_rule(self, station: Optional[Station]) -> bool:
        """Check if any block rule matches the station."""
        with self._lock.read():
            return any(rule.matches(station) for rule in self._rules)

    def is_blocked_by_any(self, station: Optional[Station]) -> bool:
        """Check if a station is blocked individually or by a rule."""
        if station is None:
            return False
        return self.is_blocked(station.station_uuid) or self.is_blocked_by_rule(station)

    def get_all(self) -> list[BlockedStation]:
        """All blocked stations, most recently blocked first."""
        with self._lock.read():
            return self._sorted_stations()

    def count(self) -> int:
        with self._lock.read():
            return len(self._blocked)

    def get_last_blocked(self) -> Optional[BlockedStation]:
        """The station `undo_last_block()` would remove, if any."""
        with self._lock.read():
            return self._last_block

    def clear(self) -> None:
        """Remove all blocked stations. Block rules are kept."""
        with self._lock.write():
            previous_blocked = self._blocked
            previous_last_block = self._last_block

            self._blocked = {}
            self._last_block = None

            try:
                self._save()
            except PersistenceWriteError:
                self._blocked = previous_blocked
                self._last_block = previous_last_block
                raise

        logger.info(f"Cleared blocklist ({len(previous_blocked)} stations)")

    def undo_last_block(self) -> bool:
        """Unblock the most recently blocked station.

        Returns:
            True if a block was undone, False if there was nothing to undo
        """
        with self._lock.write():
            undone = self._last_block
            if undone is None:
                return False

            self._blocked.pop(undone.station_uuid, None)
            self._last_block = None

            try:
                self._save()
            except PersistenceWriteError:
                self._blocked[undone.station_uuid] = undone
                self._last_block = undone
                raise

        logger.info(f"Undid block of {undone.station_uuid}")
        return True

    def add_block_rule(self, rule_type: BlockRuleType | str, value: str) -> BlockRule:
        """Add a block rule.

        Raises:
            ValueError: Unknown rule type or blank value
            RuleAlreadyExistsError: An equivalent rule exists (case-insensitive)
            PersistenceWriteError: Save failed (nothing was changed)
        """
        rule_type = BlockRuleType(rule_type)
        value = value.strip()
        if not value:
            raise ValueError("rule value cannot be empty")

        with self._lock.write():
            for rule in self._rules:
                if rule.is_equivalent(rule_type, value):
                    raise RuleAlreadyExistsError(f"Rule already exists: {rule.describe()}")

            new_rule = BlockRule(type=rule_type, value=value)
            self._rules.append(new_rule)

            try:
                self._save()
            except PersistenceWriteError:
                self._rules.pop()
                raise

        logger.info(f"Added block rule {new_rule.describe()}")
        return new_rule

    def remove_block_rule(self, rule_type: BlockRuleType | str, value: str) -> None:
        """Remove a block rule (value compared case-insensitively).

        Raises:
            RuleNotFoundError: No matching rule
            PersistenceWriteError: Save failed (nothing was changed)
        """
        rule_type = BlockRuleType(rule_type)
        value = value.strip()

        with self._lock.write():
            for index, rule in enumerate(self._rules):
                if rule.is_equivalent(rule_type, value):
                    break
            else:
                raise RuleNotFoundError(f"Rule not found: {rule_type.value} {value}")

            removed = self._rules.pop(index)
            try:
                self._save()
            except PersistenceWriteError:
                self._rules.insert(index, removed)
                raise

        logger.info(f"Removed block rule {removed.describe()}")

    def get_block_rules(self) -> list[BlockRule]:
        """Copy of all active block rules."""
        with self._lock.read():
            return list(self._rules)
