"""Top tier computation from standings payloads."""

import pytest

from conftest import FakeExtractor, standings_entry
from pipelines.top_tier import (
    PointsFromPosition,
    TopNByConference,
    TopTierResolver,
    extract_stat,
    parse_stat_value,
    points_from_position,
    tier_sources,
    top_n_by_conference,
)
from schemas.competitions import Competition


def premier_league_payload(points: list[int]) -> dict:
    entries = [standings_entry(str(i + 1), points=p) for i, p in enumerate(points)]
    return {"children": [{"standings": {"entries": entries}}]}


def conference(entries: list[dict]) -> dict:
    return {"standings": {"entries": entries}}


@pytest.mark.parametrize("value, expected", [("45", 45), (12.0, 12), ("7-3", 7), (None, 0), ("", 0), (True, 0)])
def test_parse_stat_value(value, expected):
    assert parse_stat_value(value) == expected


def test_extract_stat_by_name():
    entry = standings_entry("1", wins=40, losses="12", points=80)
    assert extract_stat(entry, "losses") == 12
    assert extract_stat(entry, "ties") == 0


def test_points_from_position_threshold():
    # 5th place has 40, threshold is 37: 38 is in, 37 is out
    teams = [("a", 50), ("b", 45), ("c", 42), ("d", 41), ("e", 40), ("f", 38), ("g", 37)]
    assert points_from_position(teams, position=5, offset=3) == ["a", "b", "c", "d", "e", "f"]


def test_points_from_position_needs_enough_teams():
    assert points_from_position([("a", 3)], position=5, offset=3) == []


def test_top_n_by_conference():
    east = [("1", 50), ("2", 60), ("3", 10)]
    west = [("4", 5), ("5", 55)]
    assert top_n_by_conference([east, west], 2) == ["2", "1", "5", "4"]


def test_premier_league_rule_returns_all_ids():
    top, all_ids = PointsFromPosition().apply(premier_league_payload([60, 55, 50, 48, 46, 44, 43, 20]))

    assert top == ["1", "2", "3", "4", "5", "6"]
    assert all_ids == ["1", "2", "3", "4", "5", "6", "7", "8"]


def test_conference_rule_aggregates_divisions():
    payload = {
        "children": [
            {
                "children": [
                    conference([standings_entry("1", wins=30), standings_entry("2", wins=10)]),
                    conference([standings_entry("3", wins=25)]),
                ]
            },
            {"children": [conference([standings_entry("4", wins=5), standings_entry("5", wins=40)])]},
        ]
    }

    top, all_ids = TopNByConference(n=2, aggregate_divisions=True).apply(payload)

    assert top == ["1", "3", "5", "4"]
    assert sorted(all_ids) == ["1", "2", "3", "4", "5"]


def test_empty_standings_raise():
    with pytest.raises(ValueError):
        PointsFromPosition().apply({})
    with pytest.raises(ValueError):
        TopNByConference(n=6).apply({"children": []})


def test_tier_sources():
    assert tier_sources() == [Competition.PREMIER_LEAGUE, Competition.NBA, Competition.NHL]


async def test_resolve_shares_premier_league_tiers_with_cups():
    extractor = FakeExtractor()
    extractor.standings["soccer/eng.1"] = premier_league_payload([60, 55, 50, 48, 46, 20])
    extractor.standings["basketball/nba"] = {
        "children": [
            conference([standings_entry("13", wins=50), standings_entry("2", wins=5)]),
            conference([standings_entry("5", wins=40)]),
        ]
    }

    tiers = await TopTierResolver(extractor).resolve()

    assert set(tiers) == set(Competition)
    premier = tiers[Competition.PREMIER_LEAGUE]
    assert premier.top_tier_ids == frozenset({"1", "2", "3", "4", "5"})
    assert premier.domestic_ids == frozenset({"1", "2", "3", "4", "5", "6"})
    assert tiers[Competition.CHAMPIONS_LEAGUE] == premier
    assert tiers[Competition.FA_CUP] == premier
    assert tiers[Competition.NBA].top_tier_ids == frozenset({"13", "2", "5"})
    # NHL standings were never scripted
    assert tiers[Competition.NHL].error
    assert tiers[Competition.NHL].top_tier_ids == frozenset()
    assert len([c for c in extractor.calls if c[0] == "standings"]) == 3


def test_standings_without_groups_are_an_error():
    extractor = FakeExtractor()
    extractor.standings["basketball/nba"] = {"children": []}

    result = TopTierResolver(extractor).resolve_source(Competition.NBA)

    assert result.error
    assert result.top_tier_ids == frozenset()
