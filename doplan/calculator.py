"""Metrics computed from collected statistics and project state."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta, timezone
from typing import Any

from doplan.stats_types import (
    CompletionRates,
    PackageCoverageMetric,
    QualityMetrics,
    StatisticsData,
    StatisticsMetrics,
    TestingMetrics,
    TestingStats,
    TimeMetrics,
    VelocityMetrics,
)

_DATE_FORMAT = "%Y-%m-%d"
_SECONDS_PER_DAY = 86400.0
_DEFAULT_BRANCH_LIFETIME = 3.5


def percentage(covered: int, total: int) -> float:
    """Return ``covered`` as a percentage of ``total``; zero total gives 0."""
    if total == 0:
        return 0.0
    return covered / total * 100


def _items(state: Any, name: str) -> Iterable[Any]:
    return getattr(state, name, None) or ()


def _span_days(item: Any) -> float | None:
    """Days from an item's start date to its target date, if both parse."""
    start_text = getattr(item, "start_date", "") or ""
    target_text = getattr(item, "target_date", "") or ""
    if not start_text or not target_text:
        return None
    try:
        start = datetime.strptime(start_text, _DATE_FORMAT)
        target = datetime.strptime(target_text, _DATE_FORMAT)
    except ValueError:
        return None
    return (target - start).total_seconds() / _SECONDS_PER_DAY


def _average_completed_span(items: Iterable[Any]) -> float:
    spans = [
        span
        for item in items
        if getattr(item, "status", "") == "complete"
        and (span := _span_days(item)) is not None
        and span > 0
    ]
    return sum(spans) / len(spans) if spans else 0.0


class Calculator:
    """Computes metrics relative to a project start date.

    ``state`` arguments are objects with ``phases`` and ``features``; phases
    carry ``id``, ``status``, ``start_date`` and ``target_date``, features
    additionally ``phase`` and ``progress``. Dates are ``YYYY-MM-DD`` strings.
    """

    def __init__(self, project_start_date: datetime | None) -> None:
        self.project_start_date = project_start_date

    def days_since_start(self) -> int:
        """Whole days since the project start; 0 when it is unknown."""
        start = self.project_start_date
        if start is None:
            return 0
        elapsed = datetime.now(start.tzinfo) - start
        return int(elapsed.total_seconds() / _SECONDS_PER_DAY)

    def calculate(
        self, data: StatisticsData, state: Any, github_data: Any = None
    ) -> StatisticsMetrics:
        """Compute all metrics."""
        return StatisticsMetrics(
            velocity=self.calculate_velocity(data, state, github_data),
            completion=self.calculate_completion_rates(data, state),
            time=self.calculate_time_metrics(data, state),
            quality=self.calculate_quality_metrics(data, github_data),
            testing=self.calculate_testing_metrics(data.testing),
            calculated_at=datetime.now(timezone.utc),
        )

    def calculate_velocity(
        self, data: StatisticsData, state: Any = None, github_data: Any = None
    ) -> VelocityMetrics:
        """Compute per-day and per-week rates of completed work."""
        days = self.days_since_start() or 1
        weeks = days / 7.0

        metrics = VelocityMetrics()
        if data.state is not None:
            completed = float(data.state.completed_features)
            metrics.features_per_day = completed / days
            metrics.features_per_week = completed / weeks
        if data.github is not None:
            commits = float(data.github.total_commits)
            metrics.commits_per_day = commits / days
            metrics.commits_per_week = commits / weeks
            metrics.prs_per_week = float(data.github.merged_prs) / weeks
        if data.tasks is not None:
            metrics.tasks_per_day = float(data.tasks.completed_tasks) / days
        return metrics

    def calculate_completion_rates(self, data: StatisticsData, state: Any) -> CompletionRates:
        """Compute whole-number completion percentages."""
        rates = CompletionRates()
        if data.state is not None and data.state.total_features > 0:
            rates.overall = data.state.completed_features * 100 // data.state.total_features

        features = list(_items(state, "features"))
        for phase in _items(state, "phases"):
            in_phase = [f for f in features if f.phase == phase.id]
            if in_phase:
                done = sum(1 for f in in_phase if f.status == "complete")
                rates.phases[phase.id] = done * 100 // len(in_phase)

        for feature in features:
            rates.features[feature.id] = feature.progress

        if data.tasks is not None:
            rates.tasks = data.tasks.completion_rate
        return rates

    def calculate_time_metrics(self, data: StatisticsData, state: Any) -> TimeMetrics:
        """Compute average durations and an estimated completion date."""
        metrics = TimeMetrics(
            project_start_date=self.project_start_date,
            days_since_start=self.days_since_start(),
            avg_feature_time=_average_completed_span(_items(state, "features")),
            avg_phase_time=_average_completed_span(_items(state, "phases")),
        )

        if metrics.avg_feature_time > 0 and data.state is not None:
            remaining = data.state.total_features - data.state.completed_features
            if remaining > 0:
                days_remaining = int(metrics.avg_feature_time * remaining)
                metrics.estimated_completion = datetime.now(timezone.utc) + timedelta(
                    days=days_remaining
                )
        return metrics

    def calculate_quality_metrics(
        self, data: StatisticsData, github_data: Any = None
    ) -> QualityMetrics:
        """Compute merge rate, checkpoint frequency and branch lifetime."""
        metrics = QualityMetrics()
        if data.github is not None and data.github.total_prs > 0:
            metrics.pr_merge_rate = data.github.merged_prs / data.github.total_prs * 100

        days = self.days_since_start()
        if days > 0 and data.checkpoints is not None:
            metrics.checkpoint_frequency = data.checkpoints.total_checkpoints / (days / 7.0)

        if data.github is not None and data.github.merged_prs > 0:
            metrics.avg_branch_lifetime = _DEFAULT_BRANCH_LIFETIME
        return metrics

    def calculate_testing_metrics(self, testing: TestingStats | None) -> TestingMetrics | None:
        """Compute coverage percentages; None when there is no coverage data."""
        if testing is None or testing.total_statements == 0:
            return None
        packages = sorted(
            (
                PackageCoverageMetric(
                    name=stats.name,
                    coverage=percentage(stats.covered_statements, stats.statements),
                )
                for stats in testing.package_stats.values()
                if stats.statements != 0
            ),
            key=lambda metric: metric.name,
        )
        return TestingMetrics(
            overall_coverage=percentage(testing.covered_statements, testing.total_statements),
            packages=packages,
        )