"""
Team Schedule Pipeline

Upcoming games for one favorite team.

Soccer schedules on ESPN omit future fixtures, so soccer teams are found by
scanning daily scoreboards. Other sports use the team schedule endpoint and
fall back to the scoreboard scan when it fails or has nothing inside the
window (offseason, spring training).
"""

import asyncio
from datetime import datetime, timedelta
from typing import Any, Iterable, Optional

from core.settings import settings
from pipelines.base import BasePipeline
from pipelines.config import PipelineConfig
from pipelines.context import PipelineContext
from pipelines.transformers.events import involves_team, parse_event, parse_event_date, team_color
from pipelines.transformers.ids import normalize_team_id
from schemas.competitions import Sport
from schemas.documents import FavoriteTeam
from schemas.games import ScheduledGame, TeamSchedule


# Completed games stay visible this long after kickoff
RECENT_GAME_GRACE = timedelta(hours=2)


def has_games_in_window(events: Iterable[dict], now: datetime, days_ahead: int) -> bool:
    window_end = now + timedelta(days=days_ahead)
    for event in events:
        try:
            event_date = parse_event_date(event.get("date") or "")
        except ValueError:
            continue
        if now < event_date <= window_end:
            return True
    return False


def unique_events(events: Iterable[dict]) -> list[dict]:
    seen: set[str] = set()
    unique = []
    for event in events:
        event_id = normalize_team_id(event.get("id"))
        if event_id in seen:
            continue
        seen.add(event_id)
        unique.append(event)
    return unique


def select_upcoming(
    games: Iterable[ScheduledGame],
    now: datetime,
    days_ahead: int,
    show_preseason: bool,
    limit: int,
) -> list[ScheduledGame]:
    """
    Games for display: in-window, started no more than two hours ago,
    preseason only when enabled, soonest first, at most `limit`.
    """
    window_end = now + timedelta(days=days_ahead)
    cutoff = now - RECENT_GAME_GRACE
    upcoming = [
        game
        for game in sorted(games, key=lambda g: g.date)
        if cutoff < game.date <= window_end and (show_preseason or not game.is_preseason)
    ]
    return upcoming[:limit]


class TeamSchedulePipeline(BasePipeline[TeamSchedule]):
    """Fetches and shapes one team's upcoming schedule."""

    config = PipelineConfig(
        name="team_schedule",
        display_name="Team Schedule",
        description="Upcoming games for a favorite team from schedules or scoreboards",
    )

    def empty_result(self, team: FavoriteTeam, **kwargs: Any) -> TeamSchedule:
        return TeamSchedule(team=team, games=[], error=True)

    async def execute(
        self,
        ctx: PipelineContext,
        team: FavoriteTeam,
        show_preseason: bool = True,
        **kwargs: Any,
    ) -> TeamSchedule:
        ctx.log.debug("team_schedule_started", team_id=team.id, league=team.league)
        days_ahead = self.config.days_ahead or settings.days_ahead

        color: Optional[str] = None
        events: Optional[list[dict]] = None
        error = False

        if team.sport != Sport.SOCCER.value:
            schedule = await asyncio.to_thread(self.extractor.get_team_schedule, team.espn_path, team.id)
            if not schedule.error:
                info = schedule.data.get("team") or {}
                color = team_color(team.id, info.get("color"), info.get("alternateColor"))
                candidate = schedule.data.get("events") or []
                if has_games_in_window(candidate, ctx.now, days_ahead):
                    events = candidate
                else:
                    ctx.log.info("schedule_window_empty", team_id=team.id, league=team.league)

        if events is None:
            events, color_from_info, error = await self._scan_scoreboards(
                ctx, team, days_ahead, need_color=color is None
            )
            color = color or color_from_info

        if error:
            ctx.flag_error(source="team_schedule", team=team.name)

        games = [g for g in (parse_event(event, team) for event in events) if g is not None]
        upcoming = select_upcoming(games, ctx.now, days_ahead, show_preseason, settings.games_to_show)
        ctx.increment_records(len(upcoming))
        return TeamSchedule(team=team, color=color, games=upcoming, error=error)

    async def _scan_scoreboards(
        self,
        ctx: PipelineContext,
        team: FavoriteTeam,
        days_ahead: int,
        need_color: bool,
    ) -> tuple[list[dict], Optional[str], bool]:
        """
        Collect the team's events from daily scoreboards.

        Returns:
            (events, color, error). error is set when more than half of the
            scoreboard dates failed.
        """
        dates = ctx.upcoming_dates(days_ahead)
        scoreboards = self.fan_out(self.extractor.get_scoreboard, [(team.espn_path, d) for d in dates])

        color = None
        if need_color:
            results, info = await asyncio.gather(
                scoreboards,
                asyncio.to_thread(self.extractor.get_team_info, team.espn_path, team.id),
            )
            if not info.error:
                color = team_color(team.id, info.data.get("color"), info.data.get("alternateColor"))
        else:
            results = await scoreboards

        error_count = sum(1 for r in results if r.error)
        events = [
            event
            for result in results
            for event in result.data
            if involves_team(event, team.id)
        ]
        return unique_events(events), color, error_count > len(dates) / 2
