"""Session context tying credentials, tokens, fetching and statistics together."""

import asyncio
import logging
from typing import List, Optional

import httpx

from strava_stats.config import Settings
from strava_stats.models.strava import (
    ActivityRecord,
    ActivitySummary,
    Athlete,
    ChartData,
    ClientCredentials,
    Metric,
    SessionStatus,
    SportYearlyStats,
    SyncResult,
)
from strava_stats.services.activity_fetcher import ActivityFetcher, ProgressObserver
from strava_stats.services.aggregation import sport_yearly_stats, summarize
from strava_stats.services.chart_data import build_chart_data
from strava_stats.services.credential_store import CredentialStore, JsonFileKeyValueStore, KeyValueStore
from strava_stats.services.errors import (
    AuthorizationDenied,
    MissingAuthorizationCode,
    MissingClientCredentials,
    NotAuthenticated,
    StravaAPIError,
    Unauthorized,
)
from strava_stats.services.token_manager import TokenLifecycleManager

logger = logging.getLogger(__name__)


class StravaSession:
    """One connected (or not yet connected) Strava user.

    Holds the activities of the last successful sync in memory. They are never
    persisted and each sync replaces them wholesale.
    """

    def __init__(
        self,
        store: CredentialStore,
        token_manager: TokenLifecycleManager,
        fetcher: ActivityFetcher,
        redirect_uri: str,
        default_credentials: Optional[ClientCredentials] = None,
        page_size: int = 200
    ):
        self.store = store
        self.token_manager = token_manager
        self.fetcher = fetcher
        self.redirect_uri = redirect_uri
        self.default_credentials = default_credentials
        self.page_size = page_size
        self.activities: List[ActivityRecord] = []
        # One token check and one listing at a time per session
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        backend: Optional[KeyValueStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> "StravaSession":
        store = CredentialStore(backend or JsonFileKeyValueStore(settings.strava_state_file))
        default_credentials = None
        if settings.strava_client_id and settings.strava_client_secret:
            default_credentials = ClientCredentials(
                client_id=settings.strava_client_id,
                client_secret=settings.strava_client_secret,
            )
        return cls(
            store=store,
            token_manager=TokenLifecycleManager(
                store,
                oauth_base_url=settings.strava_oauth_base_url,
                refresh_margin_seconds=settings.token_refresh_margin_seconds,
                timeout=settings.http_timeout_seconds,
                transport=transport,
            ),
            fetcher=ActivityFetcher(
                base_url=settings.strava_api_base_url,
                timeout=settings.http_timeout_seconds,
                transport=transport,
                max_pages=settings.activities_max_pages,
            ),
            redirect_uri=settings.strava_redirect_uri,
            default_credentials=default_credentials,
            page_size=settings.activities_page_size,
        )

    # Credentials

    def client_credentials(self) -> Optional[ClientCredentials]:
        """Credentials entered by the operator, else the configured ones."""
        return self.store.get_client_credentials() or self.default_credentials

    def require_client_credentials(self) -> ClientCredentials:
        credentials = self.client_credentials()
        if credentials is None:
            raise MissingClientCredentials()
        return credentials

    def save_client_credentials(self, client_id: str, client_secret: str) -> ClientCredentials:
        """Store operator-entered credentials, replacing any previous ones."""
        client_id = client_id.strip()
        client_secret = client_secret.strip()
        if not client_id:
            raise MissingClientCredentials("Please enter your Client ID")
        if not client_secret:
            raise MissingClientCredentials("Please enter your Client Secret")
        credentials = ClientCredentials(client_id=client_id, client_secret=client_secret)
        self.store.put_client_credentials(credentials)
        return credentials

    def forget_client_credentials(self) -> None:
        self.store.clear_client_credentials()

    # Authorization

    @property
    def is_authenticated(self) -> bool:
        return self.store.get_tokens() is not None

    def authorization_url(self, redirect_uri: Optional[str] = None) -> str:
        credentials = self.require_client_credentials()
        return self.token_manager.build_authorization_url(
            credentials.client_id, redirect_uri or self.redirect_uri
        )

    async def handle_callback(self, code: Optional[str] = None, error: Optional[str] = None) -> SyncResult:
        """Consume the parameters Strava appends to the redirect URI.

        On success the activities are loaded right away. If that first sync
        fails while the new tokens are still good, the session stays connected
        and the failure is reported in ``sync_error``.
        """
        if error:
            logger.info(f"Authorization declined at Strava: {error}")
            raise AuthorizationDenied(error)
        if not code:
            raise MissingAuthorizationCode()

        credentials = self.require_client_credentials()
        async with self._lock:
            await self.token_manager.connect(code, credentials.client_id, credentials.client_secret)

        try:
            activities = await self.sync_activities()
        except (Unauthorized, NotAuthenticated):
            raise
        except StravaAPIError as e:
            logger.warning(f"Connected to Strava but the first sync failed: {e}")
            return SyncResult(status="connected", activities=len(self.activities), sync_error=str(e))
        return SyncResult(status="connected", activities=len(activities))

    def disconnect(self, forget_client_credentials: bool = False) -> None:
        """Drop the tokens and the in-memory activities."""
        self.store.clear_tokens()
        if forget_client_credentials:
            self.store.clear_client_credentials()
        self.activities = []
        logger.info("Disconnected from Strava")

    # Activities

    async def access_token(self) -> str:
        """Valid access token; callers hold ``_lock``."""
        credentials = self.require_client_credentials()
        return await self.token_manager.get_valid_access_token(
            credentials.client_id, credentials.client_secret
        )

    async def sync_activities(self, on_page: Optional[ProgressObserver] = None) -> List[ActivityRecord]:
        """Replace the in-memory activities with a fresh full listing.

        A failed listing leaves the previous activities in place.
        """
        async with self._lock:
            access_token = await self.access_token()
            try:
                activities = await self.fetcher.fetch_all(access_token, self.page_size, on_page)
            except Unauthorized:
                logger.warning("Strava rejected the access token, tearing down the session")
                self.store.clear_tokens()
                raise
            self.activities = activities
        logger.info(f"Synced {len(activities)} activities")
        return activities

    async def get_athlete(self) -> Athlete:
        async with self._lock:
            access_token = await self.access_token()
            try:
                return await self.fetcher.get_athlete(access_token)
            except Unauthorized:
                self.store.clear_tokens()
                raise

    # Derived views

    def sport_stats(self) -> List[SportYearlyStats]:
        return sport_yearly_stats(self.activities)

    def chart_data(self, metric: Metric = Metric.DISTANCE, sports: Optional[List[str]] = None) -> ChartData:
        return build_chart_data(self.sport_stats(), metric, sports)

    def summary(self) -> ActivitySummary:
        return summarize(self.activities)

    def status(self) -> SessionStatus:
        tokens = self.store.get_tokens()
        return SessionStatus(
            has_client_credentials=self.client_credentials() is not None,
            authenticated=tokens is not None,
            activity_count=len(self.activities),
            token_expires_at=tokens.expires_at if tokens else None,
        )
