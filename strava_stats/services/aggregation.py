"""Reduce activities to per-sport, per-year totals.

Distances stay in meters and times in seconds here; unit conversion happens
where the numbers are presented.
"""

from typing import Dict, Iterable, List

from strava_stats.models.strava import ActivityRecord, ActivitySummary, SportYearlyStats, YearlyStat

UNKNOWN_SPORT = "Unknown"


def sport_of(activity: ActivityRecord) -> str:
    """Sport key of an activity: sport_type, then the legacy type field."""
    return activity.sport_type or activity.type or UNKNOWN_SPORT


def group_by_sport(activities: Iterable[ActivityRecord]) -> Dict[str, List[ActivityRecord]]:
    """Group activities by sport, keeping first-seen sport order."""
    groups: Dict[str, List[ActivityRecord]] = {}
    for activity in activities:
        groups.setdefault(sport_of(activity), []).append(activity)
    return groups


def yearly_stats(activities: Iterable[ActivityRecord]) -> List[YearlyStat]:
    """Sum distance and moving time per local calendar year, ascending."""
    totals: Dict[int, List[float]] = {}
    for activity in activities:
        bucket = totals.setdefault(activity.year, [0.0, 0.0])
        bucket[0] += activity.distance
        bucket[1] += activity.moving_time

    return [
        YearlyStat(year=year, distance_meters=distance, moving_time_seconds=moving_time)
        for year, (distance, moving_time) in sorted(totals.items())
    ]


def sport_yearly_stats(activities: Iterable[ActivityRecord]) -> List[SportYearlyStats]:
    """Yearly totals for every sport present in ``activities``."""
    return [
        SportYearlyStats(sport=sport, yearly=yearly_stats(group))
        for sport, group in group_by_sport(activities).items()
    ]


def summarize(activities: List[ActivityRecord]) -> ActivitySummary:
    return ActivitySummary(
        total_activities=len(activities),
        sport_count=len({sport_of(a) for a in activities}),
        year_count=len({a.year for a in activities}),
    )
