"""Exceptions raised while talking to Strava.

Every class carries a message meant for the person operating the app and the
HTTP status the web layer answers with.
"""

from typing import Optional


class StravaAPIError(Exception):
    """Base exception for Strava API errors."""

    http_status = 502
    user_message = "The remote service returned an unexpected error. Please try again later."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.user_message)


class NotAuthenticated(StravaAPIError):
    """No stored tokens, or the stored ones could not be refreshed."""

    http_status = 401
    user_message = "Your Strava session has expired. Please reconnect to Strava."


class MissingClientCredentials(StravaAPIError):
    """Client ID or secret has not been provided."""

    http_status = 400
    user_message = "Client credentials not found. Please enter your Client ID and Client Secret first."


class AuthorizationDenied(StravaAPIError):
    """The user declined the authorization request on Strava."""

    http_status = 403
    user_message = "Access denied. Please try again and grant the required permissions."

    def __init__(self, reason: str = "access_denied"):
        self.reason = reason
        super().__init__(self.user_message)


class MissingAuthorizationCode(StravaAPIError):
    """The redirect came back with neither a code nor an error."""

    http_status = 400
    user_message = "No authorization code was returned by Strava. Please connect again."


class TokenEndpointError(StravaAPIError):
    """The token endpoint answered with an error or not at all."""

    http_status = 401

    def __init__(self, status_code: Optional[int], body: str = ""):
        self.status_code = status_code
        self.body = body
        status = status_code if status_code is not None else "no response"
        super().__init__(f"{self.user_message} ({status}: {body})")


class AuthExchangeError(TokenEndpointError):
    """Strava rejected the authorization code."""

    user_message = "Strava rejected the authorization code. Please connect again."


class AuthRefreshError(TokenEndpointError):
    """Strava rejected the refresh token."""

    user_message = "Failed to refresh your Strava session. Please reconnect to Strava."


class Unauthorized(StravaAPIError):
    """Strava answered 401 to an API call."""

    http_status = 401
    user_message = "Your Strava session has expired. Please reconnect to Strava."


class Forbidden(StravaAPIError):
    """Strava answered 403, usually a missing scope."""

    http_status = 403
    user_message = "Strava refused access to your activities. Please reconnect and grant activity access."


class RemoteError(StravaAPIError):
    """Any other non-success answer, or no answer at all."""

    def __init__(self, status_code: Optional[int], message: str = ""):
        self.status_code = status_code
        self.message = message
        status = status_code if status_code is not None else "no response"
        super().__init__(f"{self.user_message} ({status}: {message})")


class MalformedResponse(StravaAPIError):
    """A success response whose body could not be decoded."""

    user_message = "The remote service returned a response that could not be read."
