"""
Watch Party Overlay

A watch party is someone else's setup (teams, Big Game settings, preseason
flag, must-watch list) shared as a link. While one is active it replaces the
local values everywhere and every local write is rejected.

Tokens are compact JSON in URL-safe base64 without padding, carried in the
`watchParty` query parameter.
"""

import base64
import json
from typing import Iterable, Optional
from urllib.parse import parse_qs, urlencode, urlsplit, urlunsplit

from core.logging import get_logger
from schemas.documents import FavoriteTeam, WatchPartySnapshot
from services.kv_store import KeyValueStore, MemoryKeyValueStore


WATCH_PARTY_SESSION_KEY = "sports-tracker-watch-party"
WATCH_PARTY_PARAM = "watchParty"

log = get_logger("watch_party")


class WatchPartyReadOnlyError(Exception):
    """Raised when something tries to write local state during a watch party."""

    def __init__(self, what: str = "settings"):
        super().__init__(f"Cannot modify {what} while viewing a watch party")
        self.what = what


def encode(snapshot: WatchPartySnapshot) -> str:
    payload = json.dumps(snapshot.to_payload(), separators=(",", ":"))
    return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii").rstrip("=")


def decode(token: str | None) -> Optional[WatchPartySnapshot]:
    """Decode a share token. Anything malformed decodes to None."""
    if not token:
        return None
    try:
        token = token.strip()
        padded = token + "=" * (-len(token) % 4)
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
        return WatchPartySnapshot.model_validate(json.loads(raw.decode("utf-8")))
    except (ValueError, TypeError) as e:
        # binascii, JSON, unicode and pydantic errors are all ValueErrors
        log.warning("watch_party_decode_failed", error=str(e))
        return None


def token_from_url(url: str) -> Optional[str]:
    """Pull the watchParty parameter out of a share link."""
    values = parse_qs(urlsplit(url).query).get(WATCH_PARTY_PARAM)
    return values[0] if values else None


def build_share_url(base_url: str, snapshot: WatchPartySnapshot) -> str:
    parts = urlsplit(base_url)
    query = parse_qs(parts.query)
    query[WATCH_PARTY_PARAM] = [encode(snapshot)]
    return urlunsplit(parts._replace(query=urlencode(query, doseq=True)))


def resolve_teams(
    snapshot: WatchPartySnapshot,
    known_teams: Iterable[FavoriteTeam],
) -> list[FavoriteTeam]:
    """
    Full team objects for a snapshot.

    Old links carry "<sport>-<id>" strings; those are matched against
    known teams and dropped when nothing matches.
    """
    known = list(known_teams)
    resolved: list[FavoriteTeam] = []
    for entry in snapshot.teams:
        if isinstance(entry, FavoriteTeam):
            resolved.append(entry)
            continue

        sport, _, team_id = entry.partition("-")
        match = next((t for t in known if t.sport == sport and t.id == team_id), None)
        if match is None:
            log.debug("watch_party_team_unresolved", team=entry)
            continue
        resolved.append(match)
    return resolved


class WatchPartyOverlay:
    """
    Session-scoped watch party state.

    The session store outlives individual page loads (here: refresh cycles)
    but not the process.
    """

    def __init__(self, session_store: KeyValueStore | None = None):
        self.session_store = session_store or MemoryKeyValueStore()

    def get_active(self, url_token: str | None = None) -> Optional[WatchPartySnapshot]:
        """
        Active watch party, if any.

        The session copy wins; otherwise a decodable URL token starts a new
        session.
        """
        stored = self.session_store.get_item(WATCH_PARTY_SESSION_KEY)
        if stored:
            try:
                return WatchPartySnapshot.model_validate_json(stored)
            except ValueError as e:
                log.warning("watch_party_session_invalid", error=str(e))
                self.session_store.remove_item(WATCH_PARTY_SESSION_KEY)

        snapshot = decode(url_token)
        if snapshot is None:
            return None

        self.session_store.set_item(
            WATCH_PARTY_SESSION_KEY,
            json.dumps(snapshot.to_payload(), separators=(",", ":")),
        )
        log.info("watch_party_started", teams=len(snapshot.teams))
        return snapshot

    @property
    def is_active(self) -> bool:
        return self.get_active() is not None

    def guard(self, what: str = "settings") -> None:
        """Raise WatchPartyReadOnlyError while a watch party is active."""
        if self.is_active:
            raise WatchPartyReadOnlyError(what)

    def clear(self) -> None:
        self.session_store.remove_item(WATCH_PARTY_SESSION_KEY)
        log.info("watch_party_cleared")
