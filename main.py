"""
Sports Tracker

Command line entry point. Runs refresh cycles against the local store and
prints the resulting report.

Usage:
    python main.py refresh [--watch-party URL] [--clear-cache] [--json]
    python main.py watch [--interval MINUTES]
    python main.py share --base-url https://example.com/tracker
    python main.py clear-cache
    python main.py favorites list
    python main.py favorites add LEAGUE TEAM_ID
    python main.py favorites remove LEAGUE TEAM_ID
    python main.py big-games list
    python main.py big-games enable|disable COMPETITION CATEGORY

Environment Variables:
    DATABASE_PATH - SQLite file for the local key-value store
    LOG_LEVEL, LOG_FORMAT - structlog configuration
"""

import argparse
import asyncio
import sys

from core.logging import get_logger, setup_logging
from core.settings import settings
from db.base import close_db, init_db
from schemas.categories import (
    CATEGORY_DESCRIPTIONS,
    CATEGORY_DISPLAY_NAMES,
    TIER_LABELS,
    TeamTier,
    categories_for_scheme,
)
from schemas.competitions import COMPETITIONS, LEAGUES, Competition, is_soccer_league
from schemas.games import GameTeam, RefreshReport
from services.favorites import FavoriteLimitError
from services.kv_store import DatabaseKeyValueStore
from services.tracker import SportsTracker
from services.watch_party import WatchPartyReadOnlyError


log = get_logger("cli")


def team_label(team: GameTeam) -> str:
    label = TIER_LABELS.get(TeamTier(team.tier), "")
    return f"{team.name} ({label})" if label else team.name


def format_report(report: RefreshReport) -> str:
    tz = report.refreshed_at.tzinfo
    lines = [f"Refreshed {report.refreshed_at:%a %b %d %I:%M %p}"]
    if report.watch_party:
        lines.append("Viewing a watch party (read only)")
    if report.notice:
        lines.append(report.notice)

    starred = set(report.must_watch)
    for schedule in report.schedules:
        lines.append("")
        lines.append(schedule.team.name)
        if not schedule.games:
            lines.append("  No upcoming games")
        for game in schedule.games:
            marker = "*" if game.id in starred else " "
            where = "vs" if game.is_home else "@"
            when = game.date.astimezone(tz) if tz else game.date
            lines.append(f" {marker}{when:%a %b %d %I:%M %p}  {where} {game.opponent}  [{game.channel}]")

    lines.append("")
    lines.append("Big Games")
    if not report.big_games:
        lines.append("  None this week")
    for game in report.big_games:
        marker = "*" if game.id in starred else " "
        joiner = "v." if is_soccer_league(game.league) else "@"
        first, second = (
            (game.home_team, game.away_team) if joiner == "v." else (game.away_team, game.home_team)
        )
        when = game.date.astimezone(tz) if tz else game.date
        lines.append(
            f" {marker}{when:%a %b %d %I:%M %p}  {team_label(first)} {joiner} {team_label(second)}"
            f"  ({game.category}, {game.league})  [{game.channel}]"
        )
    return "\n".join(lines)


def cmd_refresh(tracker: SportsTracker, args: argparse.Namespace) -> int:
    if args.watch_party:
        if tracker.join_watch_party(args.watch_party) is None:
            print("Watch party link could not be read; showing your own teams", file=sys.stderr)
    if args.clear_cache:
        tracker.clear_cache()

    report = asyncio.run(tracker.refresh())
    print(report.model_dump_json(indent=2) if args.json else format_report(report))
    return 0


def cmd_watch(tracker: SportsTracker, args: argparse.Namespace) -> int:
    try:
        asyncio.run(tracker.run_forever(args.interval))
    except KeyboardInterrupt:
        log.info("watch_stopped")
    return 0


def cmd_share(tracker: SportsTracker, args: argparse.Namespace) -> int:
    print(tracker.share_url(args.base_url))
    return 0


def cmd_clear_cache(tracker: SportsTracker, args: argparse.Namespace) -> int:
    removed = tracker.clear_cache()
    print(f"Removed {removed} cached responses")
    return 0


def cmd_favorites(tracker: SportsTracker, args: argparse.Namespace) -> int:
    favorites = tracker.favorites

    if args.action == "list":
        for position, team in enumerate(favorites.get_all(), start=1):
            league = LEAGUES[team.league].name if team.league in LEAGUES else team.league
            print(f"{position:>2}. {team.name} ({league}, id {team.id})")
        return 0

    if args.action == "remove":
        if not favorites.remove(args.team_id, args.league):
            print(f"Team {args.team_id} is not a favorite in {args.league}", file=sys.stderr)
            return 1
        return 0

    result = tracker.league_teams(args.league)
    if result.error:
        print(f"Could not load {args.league} teams; try again later", file=sys.stderr)
        return 1
    team = next((t for t in result.data if t.id == str(args.team_id)), None)
    if team is None:
        print(f"No team {args.team_id} in {args.league}", file=sys.stderr)
        return 1
    try:
        added = favorites.add(team)
    except FavoriteLimitError as e:
        print(str(e), file=sys.stderr)
        return 1
    if not added:
        print(f"{team.name} is already a favorite", file=sys.stderr)
        return 1
    print(f"Added {team.name}")
    return 0


def cmd_big_games(tracker: SportsTracker, args: argparse.Namespace) -> int:
    store = tracker.big_game_settings

    if args.action == "list":
        for config in COMPETITIONS.values():
            print(config.display_name)
            for category in categories_for_scheme(config.scheme):
                mark = "x" if store.is_enabled(category, config.key) else " "
                print(f"  [{mark}] {CATEGORY_DISPLAY_NAMES[category]:<22} {CATEGORY_DESCRIPTIONS[category]}")
        return 0

    config = COMPETITIONS[Competition(args.competition)]
    if args.category not in categories_for_scheme(config.scheme):
        print(f"{args.category} is not a {config.display_name} category", file=sys.stderr)
        return 1
    store.set_category_enabled(config.key, args.category, args.action == "enable")
    state = "enabled" if args.action == "enable" else "disabled"
    print(f"{CATEGORY_DISPLAY_NAMES[args.category]} {state} for {config.display_name}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sports-tracker", description=__doc__.splitlines()[1])
    subparsers = parser.add_subparsers(dest="command", required=True)

    refresh = subparsers.add_parser("refresh", help="Run one refresh cycle and print the report")
    refresh.add_argument("--watch-party", metavar="URL", help="Share link or token to view")
    refresh.add_argument("--clear-cache", action="store_true", help="Drop cached responses first")
    refresh.add_argument("--json", action="store_true", help="Print the report as JSON")
    refresh.set_defaults(handler=cmd_refresh)

    watch = subparsers.add_parser("watch", help="Refresh on an interval until interrupted")
    watch.add_argument("--interval", type=int, metavar="MINUTES", default=None)
    watch.set_defaults(handler=cmd_watch)

    share = subparsers.add_parser("share", help="Print a watch party link for your setup")
    share.add_argument("--base-url", required=True)
    share.set_defaults(handler=cmd_share)

    clear = subparsers.add_parser("clear-cache", help="Drop every cached upstream response")
    clear.set_defaults(handler=cmd_clear_cache)

    favorites = subparsers.add_parser("favorites", help="Manage favorite teams")
    actions = favorites.add_subparsers(dest="action", required=True)
    actions.add_parser("list")
    for action in ("add", "remove"):
        sub = actions.add_parser(action)
        sub.add_argument("league", choices=sorted(LEAGUES))
        sub.add_argument("team_id")
    favorites.set_defaults(handler=cmd_favorites)

    big_games = subparsers.add_parser("big-games", help="Show or change which Big Game categories are on")
    toggles = big_games.add_subparsers(dest="action", required=True)
    toggles.add_parser("list")
    for action in ("enable", "disable"):
        sub = toggles.add_parser(action)
        sub.add_argument("competition", choices=[c.value for c in Competition])
        sub.add_argument("category", choices=sorted(CATEGORY_DISPLAY_NAMES))
    big_games.set_defaults(handler=cmd_big_games)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(settings.log_level, settings.log_format == "json", settings.service_name)

    init_db()
    try:
        tracker = SportsTracker(DatabaseKeyValueStore())
        return args.handler(tracker, args)
    except WatchPartyReadOnlyError as e:
        print(str(e), file=sys.stderr)
        return 1
    finally:
        close_db()


if __name__ == "__main__":
    sys.exit(main())
