"""Pydantic models for Strava API data structures and derived statistics."""

from datetime import datetime
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field


class ClientCredentials(BaseModel):
    """OAuth client identity of the Strava application."""
    model_config = ConfigDict(frozen=True)

    client_id: str = Field(..., min_length=1, description="Strava API Client ID")
    client_secret: str = Field(..., min_length=1, description="Strava API Client Secret")


class TokenPair(BaseModel):
    """The single live access/refresh token pair of a session."""
    model_config = ConfigDict(frozen=True)

    access_token: str
    refresh_token: str
    expires_at: int


class Athlete(BaseModel):
    """Strava athlete model."""
    id: int
    username: Optional[str] = None
    resource_state: Optional[int] = None
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    profile: Optional[str] = None


class TokenResponse(BaseModel):
    """Body returned by the Strava token endpoint."""
    access_token: str
    refresh_token: str
    expires_at: int
    expires_in: Optional[int] = None
    token_type: str = "Bearer"
    athlete: Optional[Athlete] = None

    def to_token_pair(self) -> TokenPair:
        return TokenPair(
            access_token=self.access_token,
            refresh_token=self.refresh_token,
            expires_at=self.expires_at,
        )


class ActivityRecord(BaseModel):
    """Summary activity as listed by /athlete/activities.

    Only the fields used for statistics are modelled; anything else the API
    returns is ignored.
    """
    model_config = ConfigDict(frozen=True)

    id: int
    name: str = ""
    distance: float = Field(0.0, description="Distance in meters")
    moving_time: int = Field(0, description="Moving time in seconds")
    elapsed_time: int = Field(0, description="Elapsed time in seconds")
    total_elevation_gain: float = 0.0
    type: Optional[str] = None
    sport_type: Optional[str] = None
    start_date: datetime
    start_date_local: datetime
    timezone: Optional[str] = None

    @property
    def year(self) -> int:
        """Calendar year of the activity on the athlete's local clock."""
        return self.start_date_local.year


class YearlyStat(BaseModel):
    """Totals of one sport for one calendar year, in raw units."""
    year: int
    distance_meters: float = 0.0
    moving_time_seconds: float = 0.0


class SportYearlyStats(BaseModel):
    """Per-year totals of one sport, ascending by year."""
    sport: str
    yearly: List[YearlyStat]


class SyncResult(BaseModel):
    """Outcome of a sync, or of the sync that follows a new connection."""
    status: str
    activities: int
    sync_error: Optional[str] = None


class FetchProgress(BaseModel):
    """Reported to the progress observer after every fetched page."""
    page: int
    page_records: int
    total_records: int


class Metric(str, Enum):
    """Chart Y axis."""
    DISTANCE = "distance"
    TIME = "time"


class ChartDataset(BaseModel):
    """One line of the yearly chart."""
    label: str
    data: List[Optional[float]]


class ChartData(BaseModel):
    """Chart-ready series over a shared year axis."""
    metric: Metric
    unit: str
    years: List[int]
    datasets: List[ChartDataset]
    total: ChartDataset


class ActivitySummary(BaseModel):
    """Numbers for the summary tiles."""
    total_activities: int
    sport_count: int
    year_count: int


class SessionStatus(BaseModel):
    """Connection state of the session."""
    has_client_credentials: bool
    authenticated: bool
    activity_count: int
    token_expires_at: Optional[int] = None
