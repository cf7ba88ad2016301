"""Favorite team schedules: schedule endpoint, scoreboard fallback and display filtering."""

from datetime import timedelta

from conftest import NOW, FakeExtractor, days_from_now, make_event, make_team
from pipelines.team_schedules import TeamSchedulePipeline, has_games_in_window, select_upcoming, unique_events
from schemas.games import ScheduledGame
from services.favorites import DEFAULT_TEAMS

EVERTON = DEFAULT_TEAMS[0]
LAKERS = make_team("13", "Los Angeles Lakers")


def game(game_id: str, offset: timedelta, label=None) -> ScheduledGame:
    return ScheduledGame(id=game_id, date=NOW + offset, season_label=label)


def test_select_upcoming_window_grace_and_limit():
    games = [
        game("old", -timedelta(hours=3)),
        game("live", -timedelta(hours=1)),
        game("later", timedelta(days=2)),
        game("soon", timedelta(days=1)),
        game("far", timedelta(days=31)),
    ]

    assert [g.id for g in select_upcoming(games, NOW, 30, True, 5)] == ["live", "soon", "later"]
    assert [g.id for g in select_upcoming(games, NOW, 30, True, 2)] == ["live", "soon"]


def test_select_upcoming_can_hide_preseason():
    games = [game("pre", timedelta(days=1), "Preseason"), game("st", timedelta(days=2), "Spring Training"),
             game("reg", timedelta(days=3)), game("po", timedelta(days=4), "Playoffs")]

    assert [g.id for g in select_upcoming(games, NOW, 30, False, 5)] == ["reg", "po"]
    assert len(select_upcoming(games, NOW, 30, True, 5)) == 4


def test_has_games_in_window():
    past = make_event("1", NOW - timedelta(days=1), ("13", "L"), ("2", "B"))
    future = make_event("2", NOW + timedelta(days=3), ("13", "L"), ("2", "B"))
    undated = {"id": "3", "date": "tbd"}

    assert not has_games_in_window([past, undated], NOW, 30)
    assert has_games_in_window([past, future], NOW, 30)
    assert not has_games_in_window([future], NOW, 2)


def test_unique_events_keeps_first():
    first = {"id": 1, "n": "a"}
    assert unique_events([first, {"id": "1", "n": "b"}, {"id": "2"}]) == [first, {"id": "2"}]


async def test_soccer_team_scans_scoreboards():
    extractor = FakeExtractor()
    extractor.team_info[("soccer/eng.1", "368")] = {"color": "003399", "alternateColor": "ffffff"}
    match = make_event("740", days_from_now(2, 15), ("368", "Everton"), ("359", "Arsenal"), broadcasts=["USA"])
    extractor.add_event("soccer/eng.1", match)
    extractor.add_event("soccer/eng.1", make_event("741", days_from_now(2, 17), ("1", "A"), ("2", "B")))

    schedule = await TeamSchedulePipeline(extractor).run(now=NOW, team=EVERTON)

    assert not schedule.error
    assert schedule.color == "#003399"
    assert [(g.id, g.opponent, g.is_home, g.channel) for g in schedule.games] == [("740", "Arsenal", True, "USA")]
    assert not any(c[0] == "schedule" for c in extractor.calls)


async def test_other_sports_use_the_team_schedule():
    extractor = FakeExtractor()
    extractor.schedules[("basketball/nba", "13")] = {
        "team": {"color": "552583", "alternateColor": "fdb927"},
        "events": [
            make_event("1", days_from_now(1), ("13", "Los Angeles Lakers"), ("2", "Boston Celtics")),
            make_event("2", days_from_now(-5), ("3", "Denver Nuggets"), ("13", "Los Angeles Lakers"), completed=True),
        ],
    }

    schedule = await TeamSchedulePipeline(extractor).run(now=NOW, team=LAKERS)

    assert not schedule.error
    assert schedule.color == "#552583"
    assert [g.id for g in schedule.games] == ["1"]
    assert not any(c[0] == "scoreboard" for c in extractor.calls)


async def test_empty_schedule_window_falls_back_to_scoreboards():
    extractor = FakeExtractor()
    extractor.schedules[("basketball/nba", "13")] = {"team": {"color": "552583"}, "events": []}
    extractor.add_event("basketball/nba", make_event("7", days_from_now(3), ("2", "Boston Celtics"), ("13", "Los Angeles Lakers")))

    schedule = await TeamSchedulePipeline(extractor).run(now=NOW, team=LAKERS)

    assert [g.id for g in schedule.games] == ["7"]
    assert schedule.color == "#552583"
    # Color came from the schedule payload, so team info is not fetched
    assert not any(c[0] == "team_info" for c in extractor.calls)


async def test_failed_schedule_falls_back_and_hides_preseason():
    extractor = FakeExtractor()
    extractor.add_event("basketball/nba", make_event("8", days_from_now(1), ("13", "L"), ("2", "B"), season_type=1))
    extractor.add_event("basketball/nba", make_event("9", days_from_now(2), ("13", "L"), ("2", "B")))

    schedule = await TeamSchedulePipeline(extractor).run(now=NOW, team=LAKERS, show_preseason=False)

    assert not schedule.error
    assert schedule.color is None
    assert [g.id for g in schedule.games] == ["9"]


async def test_mostly_failed_scoreboards_mark_the_schedule_incomplete():
    extractor = FakeExtractor()
    extractor.failing.add("soccer/eng.1")

    schedule = await TeamSchedulePipeline(extractor).run(now=NOW, team=EVERTON)

    assert schedule.error
    assert schedule.games == []
    assert schedule.team == EVERTON


async def test_partially_failed_scoreboards_keep_the_games_that_loaded():
    extractor = FakeExtractor()
    extractor.add_event("soccer/eng.1", make_event("740", days_from_now(2), ("368", "Everton"), ("362", "Aston Villa")))
    # 24 of the 30 scoreboard days fail
    extractor.failing_days = {
        ("soccer/eng.1", (NOW + timedelta(days=i)).strftime("%Y%m%d")) for i in range(6, 30)
    }

    schedule = await TeamSchedulePipeline(extractor).run(now=NOW, team=EVERTON)

    assert schedule.error
    assert [g.id for g in schedule.games] == ["740"]
