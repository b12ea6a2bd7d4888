"""Paginated retrieval of the athlete's activities."""

import logging
from typing import Any, Callable, Dict, List, Optional

import httpx
from pydantic import ValidationError

from strava_stats.models.strava import ActivityRecord, Athlete, FetchProgress
from strava_stats.services.errors import Forbidden, MalformedResponse, RemoteError, Unauthorized

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 200
DEFAULT_MAX_PAGES = 1000

ProgressObserver = Callable[[FetchProgress], None]


def is_last_page(page_length: int, page_size: int) -> bool:
    """An empty or short page ends the listing."""
    return page_length < page_size


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.text


def classify_error(response: httpx.Response) -> Exception:
    """Map a non-success response to the matching exception."""
    if response.status_code == 401:
        return Unauthorized()
    if response.status_code == 403:
        return Forbidden()
    return RemoteError(response.status_code, _error_message(response))


class ActivityFetcher:
    """Reads activities from the Strava API with a caller-supplied access token.

    Never refreshes tokens; a 401 surfaces as ``Unauthorized`` for the caller
    to act on.
    """

    def __init__(
        self,
        base_url: str = "https://www.strava.com/api/v3",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        max_pages: int = DEFAULT_MAX_PAGES
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_pages = max_pages
        self._transport = transport

    async def _get(
        self,
        client: httpx.AsyncClient,
        endpoint: str,
        access_token: str,
        params: Optional[Dict[str, Any]] = None
    ) -> Any:
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        headers = {"Authorization": f"Bearer {access_token}"}
        try:
            response = await client.get(url, headers=headers, params=params)
        except httpx.RequestError as e:
            raise RemoteError(None, f"Request error: {e}") from e

        if response.is_error:
            raise classify_error(response)

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponse(f"Invalid JSON from {endpoint}: {e}") from e

    async def fetch_all(
        self,
        access_token: str,
        page_size: int = MAX_PAGE_SIZE,
        on_page: Optional[ProgressObserver] = None
    ) -> List[ActivityRecord]:
        """Fetch every activity, one page at a time in page order.

        Any failed page aborts the whole fetch and nothing gathered so far is
        returned.
        """
        if not 1 <= page_size <= MAX_PAGE_SIZE:
            raise ValueError(f"page_size must be between 1 and {MAX_PAGE_SIZE}, got {page_size}")

        activities: List[ActivityRecord] = []
        async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
            for page in range(1, self.max_pages + 1):
                data = await self._get(
                    client,
                    "/athlete/activities",
                    access_token,
                    params={"page": page, "per_page": page_size},
                )
                if not isinstance(data, list):
                    raise MalformedResponse(f"Expected a list of activities on page {page}")
                try:
                    activities.extend(ActivityRecord.model_validate(item) for item in data)
                except ValidationError as e:
                    raise MalformedResponse(f"Unreadable activity on page {page}: {e}") from e

                logger.info(f"Fetched page {page}: {len(data)} activities ({len(activities)} total)")
                if on_page is not None:
                    on_page(FetchProgress(page=page, page_records=len(data), total_records=len(activities)))

                if is_last_page(len(data), page_size):
                    break
            else:
                raise RemoteError(None, f"Still receiving full pages after {self.max_pages} pages, giving up")

        return activities

    async def get_athlete(self, access_token: str) -> Athlete:
        """Get the authenticated athlete's information."""
        async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
            data = await self._get(client, "/athlete", access_token)
        try:
            return Athlete.model_validate(data)
        except ValidationError as e:
            raise MalformedResponse(f"Unreadable athlete: {e}") from e
