"""
Blocklist domain models.

Contains the persisted record types and the rule matching logic.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from tera.core.jsonstore import format_timestamp, parse_timestamp
from tera.domain.stations.models import Station

# Block count warnings
BLOCK_WARNING_THRESHOLD = 100
BLOCK_LARGE_THRESHOLD = 500

BLOCKLIST_VERSION = "1.0"

# Optional station fields omitted from the document when empty
_OPTIONAL_FIELDS = ("tags", "country", "countrycode", "state", "language", "codec")


@dataclass(frozen=True)
class BlockedStation:
    """A blocked station with the metadata needed to display it later."""

    station_uuid: str
    name: str
    blocked_at: datetime
    tags: str = ""
    country: str = ""
    countrycode: str = ""
    state: str = ""
    language: str = ""
    codec: str = ""
    bitrate: int = 0

    @classmethod
    def from_station(cls, station: Station, blocked_at: datetime) -> "BlockedStation":
        return cls(
            station_uuid=station.station_uuid,
            name=station.name,
            blocked_at=blocked_at,
            tags=station.tags,
            country=station.country,
            countrycode=station.countrycode,
            state=station.state,
            language=station.language,
            codec=station.codec,
            bitrate=station.bitrate,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"station_uuid": self.station_uuid, "name": self.name}
        for key in _OPTIONAL_FIELDS:
            value = getattr(self, key)
            if value:
                data[key] = value
        if self.bitrate:
            data["bitrate"] = self.bitrate
        data["blocked_at"] = format_timestamp(self.blocked_at)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BlockedStation":
        """Parse a document entry.

        Raises:
            ValueError: Entry is missing its id or timestamp, or has bad types
        """
        if not isinstance(data, dict):
            raise ValueError("blocked station entry must be an object")
        # Older documents use the Radio Browser key
        station_uuid = data.get("station_uuid") or data.get("stationuuid")
        if not station_uuid or not isinstance(station_uuid, str):
            raise ValueError("blocked station entry has no station_uuid")
        if "blocked_at" not in data:
            raise ValueError(f"blocked station {station_uuid} has no blocked_at")

        optional = {}
        for key in _OPTIONAL_FIELDS:
            value = data.get(key) or ""
            if not isinstance(value, str):
                raise ValueError(f"blocked station {station_uuid}: {key} must be a string")
            optional[key] = value

        bitrate = data.get("bitrate") or 0
        if not isinstance(bitrate, int):
            raise ValueError(f"blocked station {station_uuid}: bitrate must be an integer")

        return cls(
            station_uuid=station_uuid,
            name=str(data.get("name") or ""),
            blocked_at=parse_timestamp(data["blocked_at"]),
            bitrate=bitrate,
            **optional,
        )


class BlockRuleType(str, Enum):
    """Station field a block rule matches against."""

    COUNTRY = "country"
    LANGUAGE = "language"
    TAG = "tag"


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",")]


@dataclass(frozen=True)
class BlockRule:
    """Blocks every station whose country, language or tag matches `value`."""

    type: BlockRuleType
    value: str

    def matches(self, station: Optional[Station]) -> bool:
        """Check if a station matches this rule (case-insensitive)."""
        if station is None:
            return False

        wanted = self.value.casefold()

        if self.type is BlockRuleType.COUNTRY:
            # Match against both country name and ISO code
            return (
                station.country.casefold() == wanted
                or station.countrycode.casefold() == wanted
            )
        if self.type is BlockRuleType.LANGUAGE:
            return any(lang.casefold() == wanted for lang in _split_list(station.language))
        if self.type is BlockRuleType.TAG:
            return any(tag.casefold() == wanted for tag in _split_list(station.tags))
        return False

    def is_equivalent(self, rule_type: BlockRuleType, value: str) -> bool:
        return self.type is rule_type and self.value.casefold() == value.casefold()

    def describe(self) -> str:
        """Human-readable form for rule lists."""
        labels = {
            BlockRuleType.COUNTRY: "Country",
            BlockRuleType.LANGUAGE: "Language",
            BlockRuleType.TAG: "Tag",
        }
        return f"{labels[self.type]}: {self.value}"

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type.value, "value": self.value}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BlockRule":
        """Parse a document entry.

        Raises:
            ValueError: Unknown rule type or missing value
        """
        if not isinstance(data, dict):
            raise ValueError("block rule entry must be an object")
        value = data.get("value")
        if not isinstance(value, str) or not value.strip():
            raise ValueError("block rule has no value")
        return cls(type=BlockRuleType(data.get("type")), value=value)
