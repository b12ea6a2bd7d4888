"""Data models for Strava API integration."""

from .strava import (
    ActivityRecord,
    ActivitySummary,
    Athlete,
    ChartData,
    ChartDataset,
    ClientCredentials,
    FetchProgress,
    Metric,
    SessionStatus,
    SportYearlyStats,
    SyncResult,
    TokenPair,
    TokenResponse,
    YearlyStat,
)

__all__ = [
    "ActivityRecord",
    "ActivitySummary",
    "Athlete",
    "ChartData",
    "ChartDataset",
    "ClientCredentials",
    "FetchProgress",
    "Metric",
    "SessionStatus",
    "SportYearlyStats",
    "SyncResult",
    "TokenPair",
    "TokenResponse",
    "YearlyStat",
]
