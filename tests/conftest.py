"""Shared fixtures: activity factories and a fake Strava served through httpx.MockTransport."""

import json
from typing import Any, Dict, List, Optional

import httpx
import pytest

from strava_stats.models.strava import ActivityRecord
from strava_stats.services.credential_store import CredentialStore, InMemoryKeyValueStore


def activity_json(
    activity_id: int,
    sport: Optional[str] = "Run",
    start_date_local: str = "2023-05-01T08:00:00",
    distance: float = 1000.0,
    moving_time: int = 600
) -> Dict[str, Any]:
    return {
        "id": activity_id,
        "name": f"Activity {activity_id}",
        "distance": distance,
        "moving_time": moving_time,
        "elapsed_time": moving_time + 30,
        "total_elevation_gain": 12.5,
        "type": sport,
        "sport_type": sport,
        "start_date": start_date_local + "Z",
        "start_date_local": start_date_local + "Z",
        "timezone": "(GMT+00:00) Europe/London",
        "kudos_count": 3,
    }


@pytest.fixture
def make_activity_json():
    return activity_json


@pytest.fixture
def make_activity():
    def factory(activity_id: int = 1, **kwargs) -> ActivityRecord:
        return ActivityRecord.model_validate(activity_json(activity_id, **kwargs))
    return factory


class FakeStrava:
    """Minimal Strava: token endpoint, athlete and paginated activities."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.pages: List[Any] = []
        self.page_status: Dict[int, int] = {}
        self.token_status = 200
        self.token_body: Any = None
        self.athlete = {"id": 42, "username": "runner", "firstname": "Ada", "lastname": "Lovelace"}

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def requests_to(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == "/oauth/token":
            if self.token_status != 200:
                return httpx.Response(self.token_status, json={"message": "Bad Request"})
            form = dict(httpx.QueryParams(request.content.decode()))
            body = self.token_body or {
                "token_type": "Bearer",
                "access_token": f"access-{form['grant_type']}",
                "refresh_token": f"refresh-{form['grant_type']}",
                "expires_at": 2_000_000_000,
                "expires_in": 21600,
            }
            return httpx.Response(200, json=body)

        if path == "/api/v3/athlete":
            return httpx.Response(200, json=self.athlete)

        if path == "/api/v3/athlete/activities":
            page = int(request.url.params["page"])
            status = self.page_status.get(page, 200)
            if status != 200:
                return httpx.Response(status, json={"message": f"status {status}", "errors": []})
            if page > len(self.pages):
                return httpx.Response(200, json=[])
            payload = self.pages[page - 1]
            if isinstance(payload, str):
                return httpx.Response(200, content=payload.encode())
            return httpx.Response(200, content=json.dumps(payload).encode())

        return httpx.Response(404, json={"message": "Record Not Found"})

    def add_pages(self, *sizes: int) -> None:
        """Queue pages with the given number of activities, ids counting from 1."""
        next_id = 1
        for size in sizes:
            self.pages.append([activity_json(next_id + i) for i in range(size)])
            next_id += size


@pytest.fixture
def fake_strava():
    return FakeStrava()


@pytest.fixture
def credential_store():
    return CredentialStore(InMemoryKeyValueStore())
