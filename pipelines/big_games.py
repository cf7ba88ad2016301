"""
Big Games Pipeline

Scans every competition's scoreboards for the upcoming window and keeps the
games whose category is enabled for that competition.

Flow:
    standings -> TopTierSet per competition
    scoreboards (competition x date, fetched concurrently)
    -> per event: tiers -> category -> enabled? -> BigGame
    -> dedupe by event id, sort by date
"""

from typing import Any, Iterable, Optional

from core.settings import settings
from pipelines.base import BasePipeline
from pipelines.config import PipelineConfig
from pipelines.context import PipelineContext
from pipelines.extractors.espn import ESPNExtractor
from pipelines.top_tier import TopTierResolver
from pipelines.transformers.categories import TeamProfile, categorize_for_competition, category_value
from pipelines.transformers.events import (
    broadcast_channels,
    first_competition,
    home_and_away,
    is_completed,
    parse_event_date,
    score_value,
    team_logo,
    team_name,
)
from pipelines.transformers.ids import competitor_team_id, normalize_id_set, normalize_team_id
from pipelines.transformers.tiers import classify_team
from schemas.competitions import COMPETITIONS, Competition, CompetitionConfig
from schemas.documents import BigGameSettings
from schemas.games import BigGame, BigGamesResult, GameTeam, TopTierSet
from services.big_game_settings import BigGameSettingsStore
from services.favorites import FavoriteTeamsStore


def build_big_game(
    event: dict,
    config: CompetitionConfig,
    top_tier: TopTierSet,
    favorite_ids: Iterable[str],
) -> Optional[BigGame]:
    """
    Categorize one scoreboard event.

    Returns None for events without exactly one home and one away
    competitor, completed events, undated events and uncategorized games.
    Enablement is checked by the caller.
    """
    sides = home_and_away(event)
    if sides is None or is_completed(event):
        return None
    home, away = sides

    try:
        game_date = parse_event_date(event.get("date") or "")
    except ValueError:
        return None

    favorites = normalize_id_set(favorite_ids)
    home_id, away_id = competitor_team_id(home), competitor_team_id(away)
    home_tier = classify_team(home_id, top_tier.top_tier_ids, favorites)
    away_tier = classify_team(away_id, top_tier.top_tier_ids, favorites)

    category = category_value(
        categorize_for_competition(
            config.key,
            TeamProfile(home_tier, home_id in top_tier.domestic_ids),
            TeamProfile(away_tier, away_id in top_tier.domestic_ids),
        )
    )
    if category is None:
        return None

    return BigGame(
        id=normalize_team_id(event.get("id")),
        date=game_date,
        sport=config.sport.value,
        league=config.key.value,
        home_team=GameTeam(
            id=home_id,
            name=team_name(home),
            logo=team_logo(home),
            score=score_value(home),
            tier=home_tier,
        ),
        away_team=GameTeam(
            id=away_id,
            name=team_name(away),
            logo=team_logo(away),
            score=score_value(away),
            tier=away_tier,
        ),
        is_completed=False,
        channel=broadcast_channels(first_competition(event) or {}),
        involves_favorite=home_id in favorites or away_id in favorites,
        category=category,
    )


def select_big_games(
    events: Iterable[dict],
    config: CompetitionConfig,
    top_tier: TopTierSet,
    favorite_ids: Iterable[str],
    big_game_settings: BigGameSettings,
) -> list[BigGame]:
    """Big games among one competition's events, per that competition's enabled categories."""
    enabled = set(big_game_settings.categories_for(config.key) or [])
    if not enabled:
        return []

    favorites = normalize_id_set(favorite_ids)
    games = []
    for event in events:
        game = build_big_game(event, config, top_tier, favorites)
        if game is not None and game.category in enabled:
            games.append(game)
    return games


def dedupe_and_sort(games: Iterable[BigGame]) -> list[BigGame]:
    """First occurrence of each event id wins; order by kickoff."""
    seen: set[str] = set()
    unique = []
    for game in games:
        if game.id in seen:
            continue
        seen.add(game.id)
        unique.append(game)
    return sorted(unique, key=lambda g: g.date)


class BigGamesPipeline(BasePipeline[BigGamesResult]):
    """Finds upcoming Big Games across all competitions."""

    config = PipelineConfig(
        name="big_games",
        display_name="Big Games",
        description="Categorizes upcoming games from standings tiers and Big Game settings",
    )

    def __init__(
        self,
        extractor: ESPNExtractor,
        big_game_settings: BigGameSettingsStore,
        favorites: FavoriteTeamsStore,
        resolver: Optional[TopTierResolver] = None,
    ):
        super().__init__(extractor)
        self.big_game_settings = big_game_settings
        self.favorites = favorites
        self.resolver = resolver or TopTierResolver(extractor)

    def empty_result(self, **kwargs: Any) -> BigGamesResult:
        return BigGamesResult(games=[], error=True)

    async def execute(self, ctx: PipelineContext, **kwargs: Any) -> BigGamesResult:
        top_tiers = await self.resolver.resolve()
        for competition, tier_set in top_tiers.items():
            if tier_set.error:
                ctx.flag_error(source="standings", competition=competition.value)

        big_game_settings = self.big_game_settings.load()
        dates = ctx.upcoming_dates(self.config.days_ahead or settings.days_ahead)
        configs = list(COMPETITIONS.values())

        pairs = [(cfg, day) for cfg in configs for day in dates]
        results = await self.fan_out(
            self.extractor.get_scoreboard, [(cfg.espn_path, day) for cfg, day in pairs]
        )

        events_by_competition: dict[Competition, list[dict]] = {cfg.key: [] for cfg in configs}
        for (cfg, day), result in zip(pairs, results):
            if result.error:
                ctx.flag_error(source="scoreboard", competition=cfg.key.value, date=day.isoformat())
            events_by_competition[cfg.key].extend(result.data)

        games: list[BigGame] = []
        for cfg in configs:
            selected = select_big_games(
                events_by_competition[cfg.key],
                cfg,
                top_tiers[cfg.key],
                self.favorites.ids_for_sport(cfg.sport.value),
                big_game_settings,
            )
            ctx.log.debug("competition_scanned", competition=cfg.key.value, big_games=len(selected))
            games.extend(selected)

        unique = dedupe_and_sort(games)
        ctx.increment_records(len(unique))
        return BigGamesResult(games=unique, error=ctx.had_errors)
