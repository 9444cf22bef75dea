"""Trends and projections derived from stored statistics snapshots."""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta, timezone
from typing import TypeVar

from doplan.stats_types import (
    CompletionRates,
    QualityMetrics,
    StatisticsMetrics,
    Trends,
    VelocityMetrics,
)
from doplan.storage import HistoricalData

IMPROVING = "improving"
DECLINING = "declining"
STABLE = "stable"

_LOOKBACK = timedelta(days=7)

_T = TypeVar("_T")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _previous(
    history: Sequence[HistoricalData],
    pick: Callable[[StatisticsMetrics], _T | None],
) -> _T | None:
    """Find the comparison value for a trend.

    The newest snapshot older than a week is preferred; failing that, the
    oldest snapshot that has the value at all.
    """

    def value_of(entry: HistoricalData) -> _T | None:
        return None if entry.metrics is None else pick(entry.metrics)

    cutoff = _now() - _LOOKBACK
    for entry in reversed(history):
        value = value_of(entry)
        if entry.timestamp < cutoff and value is not None:
            return value
    return next(
        (value for value in map(value_of, history) if value is not None),
        None,
    )


class TrendCalculator:
    """Compares current metrics with historical snapshots.

    Snapshot timestamps are expected to be timezone-aware.
    """

    def calculate_trends(
        self, current: StatisticsMetrics, history: Sequence[HistoricalData]
    ) -> Trends:
        """Compute velocity, completion and quality trends."""
        if not history:
            return Trends(velocity_trend=STABLE, completion_trend=STABLE, quality_trend=STABLE)

        trends = Trends()
        if current.velocity is not None:
            trends.velocity_trend, trends.velocity_change = self.calculate_velocity_trend(
                current.velocity, history
            )
        if current.completion is not None:
            trends.completion_trend, trends.completion_change = self.calculate_completion_trend(
                current.completion, history
            )
        if current.quality is not None:
            trends.quality_trend = self.calculate_quality_trend(current.quality, history)
        return trends

    def calculate_velocity_trend(
        self, current: VelocityMetrics, history: Sequence[HistoricalData]
    ) -> tuple[str, float]:
        """Return the trend of features per day and its change in percent."""
        if len(history) < 2:
            return STABLE, 0.0

        previous = _previous(history, lambda m: m.velocity)
        if previous is None:
            return STABLE, 0.0

        current_rate = current.features_per_day
        previous_rate = previous.features_per_day
        if previous_rate == 0:
            if current_rate > 0:
                return IMPROVING, 100.0
            return STABLE, 0.0

        change = (current_rate - previous_rate) / previous_rate * 100.0
        if change > 10.0:
            return IMPROVING, change
        if change < -10.0:
            return DECLINING, change
        return STABLE, change

    def calculate_completion_trend(
        self, current: CompletionRates, history: Sequence[HistoricalData]
    ) -> tuple[str, float]:
        """Return the trend of overall completion and its change in points."""
        if len(history) < 2:
            return STABLE, 0.0

        previous = _previous(history, lambda m: m.completion)
        if previous is None:
            return STABLE, 0.0

        change = float(current.overall) - float(previous.overall)
        if change > 5.0:
            return IMPROVING, change
        if change < -5.0:
            return DECLINING, change
        return STABLE, change

    def calculate_quality_trend(
        self, current: QualityMetrics, history: Sequence[HistoricalData]
    ) -> str:
        """Return the trend of the pull request merge rate."""
        if len(history) < 2:
            return STABLE

        previous = _previous(history, lambda m: m.quality)
        if previous is None:
            return STABLE

        change = current.pr_merge_rate - previous.pr_merge_rate
        if change > 5.0:
            return IMPROVING
        if change < -5.0:
            return DECLINING
        return STABLE

    def calculate_average_velocity(
        self, history: Sequence[HistoricalData], days: int
    ) -> VelocityMetrics:
        """Average the velocity of snapshots taken within the last ``days`` days."""
        cutoff = _now() - timedelta(days=days)
        recent = [
            entry.metrics.velocity
            for entry in history
            if entry.timestamp > cutoff
            and entry.metrics is not None
            and entry.metrics.velocity is not None
        ]
        if not recent:
            return VelocityMetrics()

        count = len(recent)
        return VelocityMetrics(
            features_per_day=sum(v.features_per_day for v in recent) / count,
            features_per_week=sum(v.features_per_week for v in recent) / count,
            commits_per_day=sum(v.commits_per_day for v in recent) / count,
            commits_per_week=sum(v.commits_per_week for v in recent) / count,
            tasks_per_day=sum(v.tasks_per_day for v in recent) / count,
            prs_per_week=sum(v.prs_per_week for v in recent) / count,
        )

    def calculate_projection(
        self, current: StatisticsMetrics, history: Sequence[HistoricalData]
    ) -> datetime | None:
        """Project a completion date; None when no estimate can be made."""
        if current.velocity is None or current.completion is None:
            return None

        velocity = self.calculate_average_velocity(history, 7)
        if velocity.features_per_day == 0:
            velocity = current.velocity

        remaining = 100.0 - float(current.completion.overall)
        if remaining <= 0:
            return _now()

        rate = velocity.features_per_day * 10.0
        if rate == 0:
            return None
        days_remaining = remaining / rate
        if math.isinf(days_remaining) or math.isnan(days_remaining) or days_remaining < 0:
            return None
        return _now() + timedelta(days=int(days_remaining))