"""
Sports Tracker

Composition root. Owns the stores, the read cache, the response cache and
the watch party overlay, and runs one refresh cycle at a time:

    invalidate read caches
    -> favorite team schedules and Big Games, concurrently
    -> must-watch cleanup and auto-marking
    -> RefreshReport
"""

import asyncio
from datetime import datetime, timedelta
from typing import Optional

from core.logging import get_logger, new_cycle_id
from core.settings import settings
from pipelines.big_games import BigGamesPipeline
from pipelines.context import as_local, local_now
from pipelines.extractors.espn import ESPNExtractor
from pipelines.team_schedules import TeamSchedulePipeline
from pipelines.transformers.events import league_team_to_favorite
from schemas.competitions import LEAGUES
from schemas.documents import FavoriteTeam, WatchPartySnapshot
from schemas.games import FetchResult, RefreshReport
from services.big_game_settings import BigGameSettingsStore
from services.favorites import FavoriteTeamsStore
from services.kv_store import KeyValueStore
from services.preferences import MustWatchStore, PreferencesStore
from services.read_cache import ReadCache
from services.response_cache import ResponseCache
from services.watch_party import WatchPartyOverlay, build_share_url, token_from_url


log = get_logger("tracker")


class SportsTracker:
    """
    Args:
        store: Persistent key-value store (favorites, settings, cache)
        session_store: Session-scoped store for the watch party (in-memory by default)
        extractor: ESPN extractor; one backed by the response cache is built if omitted
    """

    def __init__(
        self,
        store: KeyValueStore,
        session_store: Optional[KeyValueStore] = None,
        extractor: Optional[ESPNExtractor] = None,
    ):
        self.store = store
        self.read_cache = ReadCache()
        self.overlay = WatchPartyOverlay(session_store)
        self.response_cache = ResponseCache(store)
        self.extractor = extractor or ESPNExtractor(cache=self.response_cache)

        self.favorites = FavoriteTeamsStore(store, self.read_cache, self.overlay)
        self.big_game_settings = BigGameSettingsStore(store, self.read_cache, self.overlay)
        self.preferences = PreferencesStore(store, self.overlay)
        self.must_watch = MustWatchStore(store, self.read_cache, self.overlay)

        self.big_games_pipeline = BigGamesPipeline(
            self.extractor, self.big_game_settings, self.favorites
        )
        self.schedule_pipeline = TeamSchedulePipeline(self.extractor)

    # ------------------------------------------------------------ watch party

    def join_watch_party(self, url_or_token: str) -> Optional[WatchPartySnapshot]:
        """Activate a watch party from a share link or a bare token."""
        token = token_from_url(url_or_token) if "?" in url_or_token else url_or_token
        self.read_cache.invalidate()
        return self.overlay.get_active(token)

    def leave_watch_party(self) -> None:
        self.overlay.clear()
        self.read_cache.invalidate()

    def share_url(self, base_url: str) -> str:
        """Share link for the local setup, even while viewing a watch party."""
        local_cache = ReadCache()
        snapshot = WatchPartySnapshot(
            teams=FavoriteTeamsStore(self.store, local_cache).get_all(),
            big_games={
                competition.value: categories
                for competition, categories in BigGameSettingsStore(self.store, local_cache)
                .load()
                .per_competition.items()
            },
            show_preseason=PreferencesStore(self.store).show_preseason(),
            must_watch=MustWatchStore(self.store, local_cache).get_all(),
        )
        return build_share_url(base_url, snapshot)

    # ---------------------------------------------------------------- refresh

    async def refresh(self, now: Optional[datetime] = None) -> RefreshReport:
        """Run one refresh cycle. Upstream failures degrade the report, they never raise."""
        cycle_id = new_cycle_id()
        now = as_local(now) if now else local_now()

        self.read_cache.invalidate()
        watch_party = self.overlay.get_active()
        teams = self.favorites.get_all()
        show_preseason = self.preferences.show_preseason()

        log.info("refresh_started", teams=len(teams), watch_party=watch_party is not None)

        schedules, big_games = await asyncio.gather(
            asyncio.gather(
                *[
                    self.schedule_pipeline.run(now=now, team=team, show_preseason=show_preseason)
                    for team in teams
                ]
            ),
            self.big_games_pipeline.run(now=now),
        )

        errors = [f"{s.team.name} schedule may be incomplete" for s in schedules if s.error]
        if big_games.error:
            errors.append("Big Games data may be incomplete")

        loaded_ids = [g.id for s in schedules for g in s.games] + [g.id for g in big_games.games]
        self.must_watch.cleanup(loaded_ids)
        self.must_watch.auto_mark(g.id for g in big_games.games if g.involves_favorite)

        window_end = now + timedelta(days=settings.big_games_days)
        upcoming_big_games = [g for g in big_games.games if g.date <= window_end]

        starred = set(self.must_watch.get_all())
        must_watch = [g.id for s in schedules for g in s.games if g.id in starred]
        must_watch += [
            g.id for g in upcoming_big_games if g.involves_favorite or g.id in starred
        ]

        report = RefreshReport(
            cycle_id=cycle_id,
            refreshed_at=now,
            schedules=list(schedules),
            big_games=upcoming_big_games,
            must_watch=list(dict.fromkeys(must_watch)),
            errors=errors,
            watch_party=watch_party is not None,
        )
        log.info("refresh_completed", **report.summary())
        return report

    async def run_forever(self, interval_minutes: Optional[int] = None) -> None:
        """Poll on a fixed interval until cancelled."""
        interval = (interval_minutes or settings.refresh_interval_minutes) * 60
        while True:
            report = await self.refresh()
            if report.notice:
                log.warning("refresh_incomplete", notice=report.notice)
            await asyncio.sleep(interval)

    # ------------------------------------------------------------------ misc

    def clear_cache(self) -> int:
        """Drop every cached upstream response (the manual refresh button)."""
        self.read_cache.invalidate()
        return self.response_cache.clear()

    def league_teams(self, league_key: str) -> FetchResult:
        """Teams that can be picked as favorites for a league, sorted by name."""
        league = LEAGUES[league_key]
        result = self.extractor.get_league_teams(league.espn_path)
        teams: list[FavoriteTeam] = sorted(
            (league_team_to_favorite(entry, league_key) for entry in result.data),
            key=lambda t: t.name.lower(),
        )
        return FetchResult(data=teams, error=result.error, from_cache=result.from_cache)
