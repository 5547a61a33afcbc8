"""Tests for block rule matching and blocklist records."""

from datetime import datetime, timezone

import pytest

from tera.domain.blocklist.models import BlockedStation, BlockRule, BlockRuleType
from tera.domain.stations.models import Station


class TestBlockRuleMatches:
    """Tests for BlockRule.matches."""

    @pytest.mark.parametrize(
        "country, countrycode",
        [
            ("US", ""),
            ("us", ""),
            ("", "US"),
            ("The United States Of America", "us"),
        ],
    )
    def test_country_matches_name_or_code(self, country, countrycode) -> None:
        rule = BlockRule(BlockRuleType.COUNTRY, "US")
        station = Station(station_uuid="s", country=country, countrycode=countrycode)
        assert rule.matches(station)

    def test_country_no_partial_match(self) -> None:
        rule = BlockRule(BlockRuleType.COUNTRY, "US")
        station = Station(station_uuid="s", country="Russia", countrycode="RU")
        assert not rule.matches(station)

    def test_language_matches_any_list_element(self) -> None:
        rule = BlockRule(BlockRuleType.LANGUAGE, "Arabic")
        station = Station(station_uuid="s", language="english, arabic ,french")
        assert rule.matches(station)

    def test_language_requires_whole_element(self) -> None:
        rule = BlockRule(BlockRuleType.LANGUAGE, "arab")
        station = Station(station_uuid="s", language="arabic")
        assert not rule.matches(station)

    def test_tag_matches_case_insensitively(self) -> None:
        rule = BlockRule(BlockRuleType.TAG, "sports")
        station = Station(station_uuid="s", tags="news,SPORTS,talk")
        assert rule.matches(station)

    def test_tag_ignores_other_fields(self) -> None:
        rule = BlockRule(BlockRuleType.TAG, "english")
        station = Station(station_uuid="s", language="english", tags="pop")
        assert not rule.matches(station)

    def test_none_station_never_matches(self) -> None:
        assert not BlockRule(BlockRuleType.TAG, "pop").matches(None)


class TestBlockRuleSerialization:
    """Tests for BlockRule document conversion."""

    def test_describe(self) -> None:
        assert BlockRule(BlockRuleType.COUNTRY, "US").describe() == "Country: US"
        assert BlockRule(BlockRuleType.LANGUAGE, "arabic").describe() == "Language: arabic"
        assert BlockRule(BlockRuleType.TAG, "sports").describe() == "Tag: sports"

    def test_to_dict(self) -> None:
        assert BlockRule(BlockRuleType.TAG, "sports").to_dict() == {
            "type": "tag",
            "value": "sports",
        }

    def test_from_dict(self) -> None:
        rule = BlockRule.from_dict({"type": "language", "value": "arabic"})
        assert rule == BlockRule(BlockRuleType.LANGUAGE, "arabic")

    @pytest.mark.parametrize(
        "data",
        [
            {"type": "genre", "value": "rock"},
            {"type": "tag"},
            {"type": "tag", "value": "  "},
            ["tag", "rock"],
        ],
    )
    def test_from_dict_rejects_invalid(self, data) -> None:
        with pytest.raises(ValueError):
            BlockRule.from_dict(data)


class TestBlockedStation:
    """Tests for BlockedStation document conversion."""

    def test_to_dict_omits_empty_fields(self) -> None:
        blocked = BlockedStation(
            station_uuid="abc",
            name="Quiet FM",
            blocked_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
            country="Norway",
        )
        assert blocked.to_dict() == {
            "station_uuid": "abc",
            "name": "Quiet FM",
            "country": "Norway",
            "blocked_at": "2025-01-01T00:00:00+00:00",
        }

    def test_from_station_copies_metadata(self, station) -> None:
        when = datetime(2025, 1, 1, tzinfo=timezone.utc)
        blocked = BlockedStation.from_station(station, blocked_at=when)
        assert blocked.station_uuid == station.station_uuid
        assert blocked.tags == station.tags
        assert blocked.countrycode == "US"
        assert blocked.bitrate == 128
        assert blocked.blocked_at == when

    def test_from_dict_accepts_legacy_key(self) -> None:
        blocked = BlockedStation.from_dict(
            {"stationuuid": "abc", "name": "Old", "blocked_at": "2024-06-01T10:00:00Z"}
        )
        assert blocked.station_uuid == "abc"

    def test_from_dict_requires_timestamp(self) -> None:
        with pytest.raises(ValueError):
            BlockedStation.from_dict({"station_uuid": "abc", "name": "x"})

    def test_from_dict_rejects_bad_bitrate(self) -> None:
        with pytest.raises(ValueError):
            BlockedStation.from_dict(
                {"station_uuid": "abc", "bitrate": "fast", "blocked_at": "2024-06-01T10:00:00Z"}
            )
