"""
Station domain models.

Stations come from the Radio Browser directory; this core only reads them.
"""

from dataclasses import dataclass, fields
from typing import Any, Optional


@dataclass(frozen=True)
class Station:
    """A streamable radio station.

    Identity is `station_uuid`. The comma-separated `tags` and `language`
    fields are kept as the directory returns them.
    """

    station_uuid: str
    name: str = ""
    url_resolved: str = ""
    tags: str = ""
    country: str = ""
    countrycode: str = ""
    state: str = ""
    language: str = ""
    votes: int = 0
    codec: str = ""
    bitrate: int = 0
    volume: Optional[int] = None  # Per-station volume (0-100), None = player default

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Station":
        """Build a station from a Radio Browser JSON object.

        Unknown keys are ignored; missing keys take the field defaults.
        """
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in data.items() if key in known}
        # Radio Browser sends "stationuuid"
        if "station_uuid" not in values and "stationuuid" in data:
            values["station_uuid"] = data["stationuuid"]
        return cls(**values)

    def trim_name(self) -> str:
        """Return station name with whitespace trimmed."""
        return self.name.strip()
