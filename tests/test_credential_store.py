"""Tests for credential and token persistence."""

import json

import pytest

from strava_stats.models.strava import ClientCredentials, TokenPair
from strava_stats.services.credential_store import (
    TOKENS_KEY,
    CredentialStore,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
)

TOKENS = TokenPair(access_token="a1", refresh_token="r1", expires_at=1_700_000_000)
CREDENTIALS = ClientCredentials(client_id="12345", client_secret="s3cret")


@pytest.fixture(params=["memory", "file"])
def store(request, tmp_path):
    if request.param == "memory":
        return CredentialStore(InMemoryKeyValueStore())
    return CredentialStore(JsonFileKeyValueStore(str(tmp_path / "state" / "strava.json")))


def test_empty_store_returns_none(store):
    assert store.get_tokens() is None
    assert store.get_client_credentials() is None


def test_tokens_survive_persistence(store):
    store.put_tokens(TOKENS)

    assert store.get_tokens() == TOKENS


def test_new_tokens_replace_old(store):
    store.put_tokens(TOKENS)
    replacement = TokenPair(access_token="a2", refresh_token="r2", expires_at=1_700_021_600)

    store.put_tokens(replacement)

    assert store.get_tokens() == replacement


def test_clear_tokens_keeps_credentials(store):
    store.put_client_credentials(CREDENTIALS)
    store.put_tokens(TOKENS)

    store.clear_tokens()

    assert store.get_tokens() is None
    assert store.get_client_credentials() == CREDENTIALS


def test_clear_forgets_everything(store):
    store.put_client_credentials(CREDENTIALS)
    store.put_tokens(TOKENS)

    store.clear()

    assert store.get_tokens() is None
    assert store.get_client_credentials() is None


def test_clearing_missing_keys_is_harmless(store):
    store.clear()
    assert store.get_tokens() is None


def test_unreadable_tokens_are_treated_as_absent():
    store = CredentialStore(InMemoryKeyValueStore({TOKENS_KEY: '{"access_token": "a1"}'}))

    assert store.get_tokens() is None


def test_file_store_layout(tmp_path):
    path = tmp_path / "strava.json"
    store = CredentialStore(JsonFileKeyValueStore(str(path)))

    store.put_tokens(TOKENS)
    store.put_client_credentials(CREDENTIALS)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert set(data) == {"strava_tokens", "strava_client_credentials"}
    assert json.loads(data["strava_tokens"]) == {
        "access_token": "a1",
        "refresh_token": "r1",
        "expires_at": 1_700_000_000,
    }
    assert not (tmp_path / "strava.json.tmp").exists()


def test_corrupted_state_file_reads_as_empty(tmp_path):
    path = tmp_path / "strava.json"
    path.write_text("{not json", encoding="utf-8")
    store = CredentialStore(JsonFileKeyValueStore(str(path)))

    assert store.get_tokens() is None

    store.put_tokens(TOKENS)
    assert store.get_tokens() == TOKENS
