"""Big Game settings store: load, migrate, persist, toggle and watch-party mode."""

import json

import pytest

from conftest import RecordingStore
from schemas.categories import CONTINENTAL_CATEGORIES, GENERIC_CATEGORIES, GameCategory
from schemas.competitions import Competition
from schemas.documents import WatchPartySnapshot
from services.big_game_settings import BIG_GAME_SETTINGS_KEY, BigGameSettingsStore
from services.read_cache import ReadCache
from services.settings_migrations import SCHEMA_VERSION, default_document
from services.watch_party import WatchPartyOverlay, WatchPartyReadOnlyError, encode


def stored(store) -> dict:
    return json.loads(store.get_item(BIG_GAME_SETTINGS_KEY))


def test_v1_document_migrates_and_persists_exactly_once():
    store = RecordingStore(
        {
            BIG_GAME_SETTINGS_KEY: json.dumps(
                {"schemaVersion": 1, "perCompetition": {"premier-league": ["rob-lowe"]}}
            )
        }
    )
    settings_store = BigGameSettingsStore(store)

    settings = settings_store.load()

    assert settings.schema_version == SCHEMA_VERSION
    assert settings.per_competition[Competition.PREMIER_LEAGUE] == ["rob-lowe", "playoff-preview"]
    for competition in Competition:
        if competition != Competition.PREMIER_LEAGUE:
            assert settings.per_competition[competition], competition
    assert len(store.writes) == 1
    assert stored(store)["schemaVersion"] == SCHEMA_VERSION

    # Reloading a fresh store object over migrated data writes nothing
    BigGameSettingsStore(store).load()
    assert len(store.writes) == 1


def test_absent_settings_persist_defaults(store):
    settings = BigGameSettingsStore(store).load()

    assert settings.per_competition[Competition.NBA] == list(GENERIC_CATEGORIES)
    assert settings.per_competition[Competition.CHAMPIONS_LEAGUE] == list(CONTINENTAL_CATEGORIES)
    assert stored(store) == default_document()


def test_current_document_is_not_rewritten():
    store = RecordingStore({BIG_GAME_SETTINGS_KEY: json.dumps(default_document())})

    BigGameSettingsStore(store).load()

    assert store.writes == []


def test_malformed_json_falls_back_to_defaults(store):
    store.set_item(BIG_GAME_SETTINGS_KEY, "{not json")

    settings = BigGameSettingsStore(store).load()

    assert settings.per_competition[Competition.NHL] == list(GENERIC_CATEGORIES)
    assert stored(store) == default_document()


def test_legacy_list_is_upgraded(store):
    store.set_item(BIG_GAME_SETTINGS_KEY, json.dumps(["rob-lowe"]))

    settings = BigGameSettingsStore(store).load()

    assert settings.per_competition[Competition.NBA] == ["rob-lowe", "playoff-preview"]
    assert settings.per_competition[Competition.CHAMPIONS_LEAGUE] == list(CONTINENTAL_CATEGORIES)
    assert stored(store)["schemaVersion"] == SCHEMA_VERSION


def test_is_enabled(store):
    store.set_item(
        BIG_GAME_SETTINGS_KEY,
        json.dumps({"schemaVersion": 3, "perCompetition": {"nba": ["rob-lowe"], "nhl": []}}),
    )
    settings_store = BigGameSettingsStore(store)

    assert settings_store.is_enabled("rob-lowe", "nba")
    assert settings_store.is_enabled(GameCategory.ROB_LOWE, Competition.NBA)
    assert not settings_store.is_enabled("beat-em-off", "nba")
    assert not settings_store.is_enabled("rob-lowe", "nhl")
    assert not settings_store.is_enabled("rob-lowe", "la-liga")
    assert not settings_store.is_enabled(GameCategory.NONE, "nba")
    assert not settings_store.is_big_game(None, "nba")
    assert not settings_store.is_big_game("rob-lowe", None)
    assert settings_store.is_enabled_anywhere("english-derby")


def test_competition_dropped_from_saved_settings_is_backfilled(store):
    settings_store = BigGameSettingsStore(store)
    settings = settings_store.load()
    del settings.per_competition[Competition.NHL]
    settings_store.save(settings)

    assert settings_store.is_enabled("rob-lowe", "nhl")


def test_save_invalidates_the_read_cache(store):
    cache = ReadCache()
    settings_store = BigGameSettingsStore(store, cache)
    settings = settings_store.load()
    assert BIG_GAME_SETTINGS_KEY in cache

    settings.per_competition[Competition.NBA] = ["house-divided"]
    settings_store.save(settings)

    assert BIG_GAME_SETTINGS_KEY not in cache
    assert settings_store.load().per_competition[Competition.NBA] == ["house-divided"]


def test_loaded_copies_are_independent(store):
    settings_store = BigGameSettingsStore(store)
    settings_store.load().per_competition[Competition.NBA].clear()

    assert settings_store.load().per_competition[Competition.NBA] == list(GENERIC_CATEGORIES)


def test_set_category_enabled(store):
    settings_store = BigGameSettingsStore(store)

    settings_store.set_category_enabled("nba", "rob-lowe", False)
    assert not settings_store.is_enabled("rob-lowe", "nba")
    assert stored(store)["perCompetition"]["nba"] == [c for c in GENERIC_CATEGORIES if c != "rob-lowe"]

    settings_store.set_category_enabled("nba", GameCategory.ROB_LOWE, True)
    assert settings_store.is_enabled("rob-lowe", "nba")

    with pytest.raises(ValueError):
        settings_store.set_category_enabled("nba", GameCategory.NONE, True)


def test_watch_party_settings_are_read_only(store, overlay):
    snapshot = WatchPartySnapshot(big_games={"nba": ["house-divided"], "la-liga": ["rob-lowe"]})
    overlay.get_active(encode(snapshot))
    settings_store = BigGameSettingsStore(store, overlay=overlay)

    settings = settings_store.load()

    assert settings.per_competition == {Competition.NBA: ["house-divided"]}
    assert settings_store.is_enabled("house-divided", "nba")
    assert not settings_store.is_enabled("rob-lowe", "nhl")
    with pytest.raises(WatchPartyReadOnlyError):
        settings_store.save(settings)
    with pytest.raises(WatchPartyReadOnlyError):
        settings_store.set_category_enabled("nba", "rob-lowe", True)
    assert store.get_item(BIG_GAME_SETTINGS_KEY) is None


def test_leaving_a_watch_party_restores_local_settings(store, overlay):
    overlay.get_active(encode(WatchPartySnapshot(big_games={"nba": []})))
    settings_store = BigGameSettingsStore(store, overlay=overlay)
    assert not settings_store.is_enabled("rob-lowe", "nba")

    overlay.clear()
    assert settings_store.is_enabled("rob-lowe", "nba")
