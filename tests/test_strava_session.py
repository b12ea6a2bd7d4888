"""Tests for the session context."""

import asyncio

import httpx
import pytest

from strava_stats.config import Settings
from strava_stats.models.strava import TokenPair
from strava_stats.services.credential_store import InMemoryKeyValueStore
from strava_stats.services.strava_session import StravaSession

ACTIVITIES_PATH = "/api/v3/athlete/activities"


@pytest.fixture
def slow_session(fake_strava):
    """Session whose Strava answers only after yielding to the event loop."""
    async def slow_handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(0.01)
        return fake_strava.handler(request)

    settings = Settings(
        strava_client_id="12345",
        strava_client_secret="s3cret",
        activities_page_size=2,
        _env_file=None,
    )
    session = StravaSession.from_settings(
        settings, backend=InMemoryKeyValueStore(), transport=httpx.MockTransport(slow_handler)
    )
    session.store.put_tokens(TokenPair(access_token="old", refresh_token="old-refresh", expires_at=0))
    return session


@pytest.mark.asyncio
async def test_concurrent_syncs_refresh_once_and_do_not_interleave(slow_session, fake_strava):
    fake_strava.add_pages(2, 1)

    first, second = await asyncio.gather(slow_session.sync_activities(), slow_session.sync_activities())

    assert [a.id for a in first] == [1, 2, 3]
    assert [a.id for a in second] == [1, 2, 3]
    assert len(fake_strava.requests_to("/oauth/token")) == 1
    assert [(r.url.path, r.url.params.get("page")) for r in fake_strava.requests] == [
        ("/oauth/token", None),
        (ACTIVITIES_PATH, "1"),
        (ACTIVITIES_PATH, "2"),
        (ACTIVITIES_PATH, "1"),
        (ACTIVITIES_PATH, "2"),
    ]


@pytest.mark.asyncio
async def test_concurrent_athlete_and_sync_refresh_once(slow_session, fake_strava):
    fake_strava.add_pages(1)

    athlete, activities = await asyncio.gather(slow_session.get_athlete(), slow_session.sync_activities())

    assert athlete.id == 42
    assert len(activities) == 1
    assert len(fake_strava.requests_to("/oauth/token")) == 1
    assert all(
        r.headers["authorization"] == "Bearer access-refresh_token"
        for r in fake_strava.requests
        if r.url.path.startswith("/api/v3")
    )
