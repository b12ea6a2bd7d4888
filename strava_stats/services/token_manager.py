"""Strava OAuth token lifecycle: authorization URL, code exchange and refresh."""

import logging
import time
from typing import Any, Dict, Optional, Type

import httpx
from pydantic import ValidationError

from strava_stats.models.strava import TokenPair, TokenResponse
from strava_stats.services.credential_store import CredentialStore
from strava_stats.services.errors import (
    AuthExchangeError,
    AuthRefreshError,
    MalformedResponse,
    NotAuthenticated,
    TokenEndpointError,
)

logger = logging.getLogger(__name__)

SCOPE = "activity:read_all"
APPROVAL_PROMPT = "auto"
DEFAULT_REFRESH_MARGIN_SECONDS = 3600


def is_expiring_soon(
    tokens: TokenPair,
    now: Optional[float] = None,
    margin_seconds: int = DEFAULT_REFRESH_MARGIN_SECONDS
) -> bool:
    """True when the access token expires within ``margin_seconds`` of ``now``."""
    if now is None:
        now = time.time()
    return tokens.expires_at - now < margin_seconds


class TokenLifecycleManager:
    """Keeps one Strava access token valid for the lifetime of a session.

    Neither the exchange nor the refresh is ever retried: an authorization
    code is single use and a rejected refresh token stays rejected.
    """

    def __init__(
        self,
        store: CredentialStore,
        oauth_base_url: str = "https://www.strava.com/oauth",
        refresh_margin_seconds: int = DEFAULT_REFRESH_MARGIN_SECONDS,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.store = store
        self.oauth_base_url = oauth_base_url.rstrip("/")
        self.refresh_margin_seconds = refresh_margin_seconds
        self.timeout = timeout
        self._transport = transport

    @property
    def token_url(self) -> str:
        return f"{self.oauth_base_url}/token"

    def build_authorization_url(self, client_id: str, redirect_uri: str) -> str:
        """Generate Strava OAuth authorization URL."""
        params = {
            "client_id": client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "approval_prompt": APPROVAL_PROMPT,
            "scope": SCOPE,
        }
        return str(httpx.URL(f"{self.oauth_base_url}/authorize", params=params))

    async def _post_token(
        self,
        data: Dict[str, Any],
        error_cls: Type[TokenEndpointError]
    ) -> TokenPair:
        async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
            try:
                response = await client.post(self.token_url, data=data)
            except httpx.RequestError as e:
                raise error_cls(None, f"Request error: {e}") from e

        if response.is_error:
            raise error_cls(response.status_code, response.text)

        try:
            return TokenResponse.model_validate(response.json()).to_token_pair()
        except (ValueError, ValidationError) as e:
            raise MalformedResponse(f"Unreadable token response: {e}") from e

    async def exchange_code(self, code: str, client_id: str, client_secret: str) -> TokenPair:
        """Exchange a one-time authorization code for a token pair."""
        logger.info("Exchanging authorization code for Strava tokens")
        tokens = await self._post_token(
            {
                "client_id": client_id,
                "client_secret": client_secret,
                "code": code,
                "grant_type": "authorization_code",
            },
            AuthExchangeError,
        )
        logger.info(f"Authorization code exchanged, token expires at {tokens.expires_at}")
        return tokens

    async def refresh(self, refresh_token: str, client_id: str, client_secret: str) -> TokenPair:
        """Trade the refresh token for a new token pair."""
        logger.info("Refreshing Strava access token")
        tokens = await self._post_token(
            {
                "client_id": client_id,
                "client_secret": client_secret,
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
            },
            AuthRefreshError,
        )
        logger.info(f"Strava access token refreshed, new expiry {tokens.expires_at}")
        return tokens

    def is_expiring_soon(self, tokens: TokenPair, now: Optional[float] = None) -> bool:
        return is_expiring_soon(tokens, now, self.refresh_margin_seconds)

    async def connect(self, code: str, client_id: str, client_secret: str) -> TokenPair:
        """Complete the authorization redirect and persist the new pair.

        A failed exchange leaves the session disconnected.
        """
        try:
            tokens = await self.exchange_code(code, client_id, client_secret)
        except (AuthExchangeError, MalformedResponse):
            logger.warning("Authorization code exchange failed, clearing stored tokens")
            self.store.clear_tokens()
            raise
        self.store.put_tokens(tokens)
        return tokens

    async def get_valid_access_token(
        self,
        client_id: str,
        client_secret: str,
        now: Optional[float] = None
    ) -> str:
        """Return an access token good for at least the refresh margin."""
        tokens = self.store.get_tokens()
        if tokens is None:
            raise NotAuthenticated("No stored tokens. Please authenticate with Strava.")

        if not self.is_expiring_soon(tokens, now):
            return tokens.access_token

        logger.info(f"Strava token expiring soon (expires_at: {tokens.expires_at}). Refreshing...")
        try:
            tokens = await self.refresh(tokens.refresh_token, client_id, client_secret)
        except (AuthRefreshError, MalformedResponse) as e:
            logger.warning(f"Token refresh failed, clearing stored tokens: {e}")
            self.store.clear_tokens()
            raise NotAuthenticated("Failed to refresh token. Please re-authenticate.") from e

        self.store.put_tokens(tokens)
        return tokens.access_token
