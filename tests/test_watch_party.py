"""Watch party tokens, share links and the read-only overlay."""

import base64

import pytest

from conftest import make_team
from schemas.documents import WatchPartySnapshot
from services.watch_party import (
    WATCH_PARTY_SESSION_KEY,
    WatchPartyOverlay,
    WatchPartyReadOnlyError,
    build_share_url,
    decode,
    encode,
    resolve_teams,
    token_from_url,
)


@pytest.fixture
def snapshot() -> WatchPartySnapshot:
    return WatchPartySnapshot(
        teams=[make_team("13", "Los Angeles Lakers")],
        big_games={"nba": ["rob-lowe", "house-divided"]},
        show_preseason=False,
        must_watch=["401585001"],
    )


def test_token_round_trip(snapshot):
    token = encode(snapshot)

    assert "=" not in token and "+" not in token and "/" not in token
    assert decode(token) == snapshot


def test_token_is_compact_json(snapshot):
    token = encode(snapshot)
    raw = base64.urlsafe_b64decode(token + "=" * (-len(token) % 4)).decode()

    assert raw.startswith('{"teams":[{"id":"13"')
    assert ", " not in raw
    assert '"showPreseason":false' in raw


@pytest.mark.parametrize(
    "token",
    [None, "", "!!!", "bm90IGpzb24", base64.urlsafe_b64encode(b'{"teams": 5}').decode()],
)
def test_malformed_tokens_decode_to_none(token):
    assert decode(token) is None


def test_numeric_must_watch_ids_are_strings():
    token = base64.urlsafe_b64encode(b'{"mustWatch": [401, "402"]}').decode().rstrip("=")

    assert decode(token).must_watch == ["401", "402"]


def test_share_url_round_trip(snapshot):
    url = build_share_url("https://example.com/tracker?tab=big", snapshot)

    assert url.startswith("https://example.com/tracker?")
    assert "tab=big" in url
    assert decode(token_from_url(url)) == snapshot
    assert token_from_url("https://example.com/tracker") is None


def test_legacy_team_strings_resolve_against_known_teams():
    lakers = make_team("13", "Los Angeles Lakers")
    everton = make_team("368", "Everton", league="premier-league", sport="soccer", espn_path="soccer/eng.1")
    snapshot = WatchPartySnapshot(teams=["basketball-13", "soccer-368", "hockey-13", "garbage"])

    assert resolve_teams(snapshot, [lakers, everton]) == [lakers, everton]


def test_overlay_persists_decoded_token_at_session_scope(session_store, snapshot):
    overlay = WatchPartyOverlay(session_store)

    assert overlay.get_active() is None
    assert overlay.get_active(encode(snapshot)) == snapshot
    assert session_store.get_item(WATCH_PARTY_SESSION_KEY)
    # Later reads need no token
    assert overlay.get_active() == snapshot
    assert overlay.is_active


def test_session_copy_wins_over_a_new_token(session_store, snapshot):
    overlay = WatchPartyOverlay(session_store)
    overlay.get_active(encode(snapshot))

    other = WatchPartySnapshot(big_games={"nhl": []})
    assert overlay.get_active(encode(other)) == snapshot


def test_bad_token_means_no_watch_party(session_store):
    overlay = WatchPartyOverlay(session_store)

    assert overlay.get_active("not-a-token") is None
    assert not overlay.is_active
    overlay.guard()


def test_guard_and_clear(session_store, snapshot):
    overlay = WatchPartyOverlay(session_store)
    overlay.get_active(encode(snapshot))

    with pytest.raises(WatchPartyReadOnlyError, match="favorite teams"):
        overlay.guard("favorite teams")

    overlay.clear()
    assert not overlay.is_active
    overlay.guard()


def test_corrupt_session_copy_is_discarded(session_store):
    session_store.set_item(WATCH_PARTY_SESSION_KEY, "{broken")
    overlay = WatchPartyOverlay(session_store)

    assert overlay.get_active() is None
    assert session_store.get_item(WATCH_PARTY_SESSION_KEY) is None
