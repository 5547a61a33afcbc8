"""Shared fixtures for Tera tests."""

from datetime import datetime, timedelta, timezone

import pytest

from tera.domain.stations.models import Station


class FakeClock:
    """Manually advanced clock for the stores."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def station() -> Station:
    """A typical Radio Browser station."""
    return Station(
        station_uuid="test-uuid-123",
        name="  Test Radio  ",
        url_resolved="http://stream.example.com/live.mp3",
        tags="rock, classic",
        country="The United States Of America",
        countrycode="US",
        language="english",
        codec="MP3",
        bitrate=128,
    )


@pytest.fixture
def make_station():
    """Factory for stations with distinct ids."""

    def _make(uuid: str, **kwargs) -> Station:
        kwargs.setdefault("name", f"Station {uuid}")
        kwargs.setdefault("url_resolved", f"http://stream.example.com/{uuid}")
        return Station(station_uuid=uuid, **kwargs)

    return _make
