from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import pytest

from doplan.calculator import Calculator, percentage
from doplan.stats_types import (
    CheckpointStats,
    GitHubStats,
    PackageCoverageStats,
    StateData,
    StatisticsData,
    TaskStats,
    TestingStats,
)


@dataclass
class Phase:
    id: str
    name: str = ""
    status: str = ""
    start_date: str = ""
    target_date: str = ""


@dataclass
class Feature:
    id: str
    phase: str = ""
    status: str = ""
    progress: int = 0
    start_date: str = ""
    target_date: str = ""


@dataclass
class State:
    phases: list = field(default_factory=list)
    features: list = field(default_factory=list)


def _days_ago(days: int) -> datetime:
    return datetime.now(timezone.utc) - timedelta(days=days)


def _date(days_ago: int) -> str:
    return (datetime.now() - timedelta(days=days_ago)).strftime("%Y-%m-%d")


def test_new_calculator_keeps_start_date():
    start = _days_ago(30)
    assert Calculator(start).project_start_date == start


def test_calculate_velocity():
    calculator = Calculator(_days_ago(30))
    data = StatisticsData(
        state=StateData(completed_features=15),
        github=GitHubStats(total_commits=90, merged_prs=6),
        tasks=TaskStats(completed_tasks=60),
    )
    velocity = calculator.calculate_velocity(data, State(), None)
    assert velocity.features_per_day == pytest.approx(0.5, abs=0.1)
    assert velocity.commits_per_day == pytest.approx(3.0, abs=0.1)
    assert velocity.tasks_per_day == pytest.approx(2.0, abs=0.1)
    assert velocity.prs_per_week == pytest.approx(1.4, abs=0.1)


def test_calculate_velocity_without_start_date_uses_one_day():
    velocity = Calculator(None).calculate_velocity(
        StatisticsData(state=StateData(completed_features=7)), State(), None
    )
    assert velocity.features_per_day == pytest.approx(7.0)
    assert velocity.features_per_week == pytest.approx(49.0)


def test_calculate_completion_rates():
    calculator = Calculator(datetime.now(timezone.utc))
    data = StatisticsData(
        state=StateData(total_features=10, completed_features=6),
        tasks=TaskStats(total_tasks=20, completed_tasks=15, completion_rate=75),
    )
    state = State(
        phases=[Phase("phase-1", "Phase 1"), Phase("phase-2", "Phase 2")],
        features=[
            Feature("f1", phase="phase-1", status="complete", progress=100),
            Feature("f2", phase="phase-1", status="complete", progress=100),
            Feature("f3", phase="phase-1", status="in-progress", progress=50),
            Feature("f4", phase="phase-2", status="complete", progress=100),
            Feature("f5", phase="phase-2", status="pending", progress=0),
        ],
    )
    rates = calculator.calculate_completion_rates(data, state)
    assert rates.overall == 60
    assert rates.tasks == 75
    assert rates.phases["phase-1"] == 66
    assert rates.phases["phase-2"] == 50
    assert rates.features["f1"] == 100
    assert rates.features["f3"] == 50


def test_completion_rates_skip_empty_phases():
    state = State(phases=[Phase("empty")], features=[])
    rates = Calculator(None).calculate_completion_rates(StatisticsData(), state)
    assert rates.phases == {}
    assert rates.overall == 0


def test_calculate_time_metrics():
    start = _days_ago(30)
    calculator = Calculator(start)
    data = StatisticsData(state=StateData(total_features=10, completed_features=5))
    state = State(
        features=[
            Feature("f1", status="complete", start_date=_date(20), target_date=_date(10)),
            Feature("f2", status="complete", start_date=_date(15), target_date=_date(5)),
        ]
    )
    metrics = calculator.calculate_time_metrics(data, state)
    assert metrics.project_start_date == start
    assert metrics.days_since_start == 30
    assert metrics.avg_feature_time == pytest.approx(10.0, abs=1.0)
    expected = datetime.now(timezone.utc) + timedelta(days=50)
    assert abs(metrics.estimated_completion - expected) < timedelta(days=6)


def test_time_metrics_ignore_bad_and_incomplete_dates():
    state = State(
        features=[
            Feature("a", status="complete", start_date="bad", target_date="2024-01-05"),
            Feature("b", status="pending", start_date="2024-01-01", target_date="2024-01-05"),
            Feature("c", status="complete", start_date="2024-01-05", target_date="2024-01-01"),
        ],
        phases=[
            Phase("p", status="complete", start_date="2024-01-01", target_date="2024-01-31")
        ],
    )
    metrics = Calculator(None).calculate_time_metrics(StatisticsData(), state)
    assert metrics.avg_feature_time == 0.0
    assert metrics.avg_phase_time == pytest.approx(30.0)
    assert metrics.estimated_completion is None


def test_calculate_quality_metrics():
    calculator = Calculator(_days_ago(30))
    data = StatisticsData(
        github=GitHubStats(total_prs=10, merged_prs=8),
        checkpoints=CheckpointStats(total_checkpoints=12),
    )
    metrics = calculator.calculate_quality_metrics(data, None)
    assert metrics.pr_merge_rate == 80.0
    assert metrics.checkpoint_frequency == pytest.approx(2.8, abs=0.1)
    assert metrics.avg_branch_lifetime == 3.5


def test_calculate_testing_metrics_sorts_and_skips_empty():
    testing = TestingStats(
        total_statements=5,
        covered_statements=3,
        package_stats={
            "z/pkg": PackageCoverageStats(name="z/pkg", statements=4, covered_statements=2),
            "a/pkg": PackageCoverageStats(name="a/pkg", statements=1, covered_statements=1),
            "empty": PackageCoverageStats(name="empty", statements=0),
        },
    )
    metrics = Calculator(None).calculate_testing_metrics(testing)
    assert metrics.overall_coverage == pytest.approx(60.0)
    assert [p.name for p in metrics.packages] == ["a/pkg", "z/pkg"]
    assert [p.coverage for p in metrics.packages] == [100.0, 50.0]


@pytest.mark.parametrize("testing", [None, TestingStats()])
def test_calculate_testing_metrics_without_data(testing):
    assert Calculator(None).calculate_testing_metrics(testing) is None


def test_percentage():
    assert percentage(3, 4) == 75.0
    assert percentage(5, 0) == 0.0


def test_calculate_combines_all_metrics():
    calculator = Calculator(_days_ago(14))
    data = StatisticsData(
        state=StateData(total_features=4, completed_features=2),
        github=GitHubStats(total_prs=4, merged_prs=1),
    )
    metrics = calculator.calculate(data, State(), None)
    assert metrics.completion.overall == 50
    assert metrics.quality.pr_merge_rate == 25.0
    assert metrics.velocity.features_per_week == pytest.approx(1.0)
    assert metrics.testing is None
    assert metrics.calculated_at is not None


def test_days_since_start():
    assert Calculator(_days_ago(15)).days_since_start() == 15


def test_days_since_start_zero():
    assert Calculator(None).days_since_start() == 0