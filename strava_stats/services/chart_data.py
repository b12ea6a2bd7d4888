"""Shape yearly stats into chart series in display units."""

from typing import Dict, List, Optional, Sequence

from strava_stats.models.strava import ChartData, ChartDataset, Metric, SportYearlyStats, YearlyStat

UNITS = {Metric.DISTANCE: "km", Metric.TIME: "hours"}


def meters_to_kilometers(meters: float) -> float:
    return meters / 1000


def seconds_to_hours(seconds: float) -> float:
    return seconds / 3600


def metric_value(stat: YearlyStat, metric: Metric) -> float:
    if metric == Metric.DISTANCE:
        return meters_to_kilometers(stat.distance_meters)
    return seconds_to_hours(stat.moving_time_seconds)


def build_chart_data(
    sport_stats: Sequence[SportYearlyStats],
    metric: Metric = Metric.DISTANCE,
    selected_sports: Optional[Sequence[str]] = None
) -> ChartData:
    """Build one series per selected sport plus a combined total.

    The year axis covers every sport, selected or not, so toggling sports
    doesn't shift it. A year without data is ``None`` in a series.
    """
    years = sorted({stat.year for sport in sport_stats for stat in sport.yearly})

    if selected_sports is None:
        selected = list(sport_stats)
    else:
        wanted = set(selected_sports)
        selected = [sport for sport in sport_stats if sport.sport in wanted]

    datasets = []
    combined: Dict[int, YearlyStat] = {}
    for sport in selected:
        by_year = {stat.year: stat for stat in sport.yearly}
        datasets.append(ChartDataset(
            label=sport.sport,
            data=[metric_value(by_year[year], metric) if year in by_year else None for year in years],
        ))
        for stat in sport.yearly:
            total = combined.setdefault(stat.year, YearlyStat(year=stat.year))
            total.distance_meters += stat.distance_meters
            total.moving_time_seconds += stat.moving_time_seconds

    total_series: List[Optional[float]] = [
        metric_value(combined[year], metric) if year in combined else None for year in years
    ]

    return ChartData(
        metric=metric,
        unit=UNITS[metric],
        years=years,
        datasets=datasets,
        total=ChartDataset(label="Total", data=total_series),
    )
