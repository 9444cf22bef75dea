"""Data types for collected statistics and calculated metrics."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any

_FRACTION = re.compile(r"(T\d{2}:\d{2}:\d{2})\.(\d+)")


def _parse_time(raw: Any) -> datetime | None:
    """Parse an RFC 3339 timestamp; the zero time and null give None."""
    if not raw or str(raw).startswith("0001-01-01"):
        return None
    text = str(raw)
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(
        lambda m: f"{m.group(1)}.{m.group(2)[:6].ljust(6, '0')}", text
    )
    value = datetime.fromisoformat(text)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _format_time(value: datetime | None) -> str | None:
    return None if value is None else value.isoformat()


def _json(name: str, default: Any) -> Any:
    return field(default=default, metadata={"json": name})


def _int_map(raw: Any) -> dict[str, int]:
    return {str(key): int(value) for key, value in (raw or {}).items()}


def _opt_dict(obj: Any) -> Any:
    return None if obj is None else obj.to_dict()


def _opt(cls: Any, raw: Any) -> Any:
    return None if raw is None else cls.from_dict(raw)


class _Scalars:
    """JSON mapping for dataclasses whose fields are all plain scalars."""

    def to_dict(self) -> dict[str, Any]:
        return {f.metadata["json"]: getattr(self, f.name) for f in fields(self)}  # type: ignore[arg-type]

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | None) -> Any:
        raw = raw or {}
        kwargs = {}
        for f in fields(cls):  # type: ignore[arg-type]
            value = raw.get(f.metadata["json"])
            if value is not None:
                kwargs[f.name] = type(f.default)(value)
        return cls(**kwargs)


@dataclass
class StateData(_Scalars):
    """Counts of phases and features by status."""

    total_phases: int = _json("totalPhases", 0)
    total_features: int = _json("totalFeatures", 0)
    completed_phases: int = _json("completedPhases", 0)
    completed_features: int = _json("completedFeatures", 0)
    in_progress_features: int = _json("inProgressFeatures", 0)
    pending_features: int = _json("pendingFeatures", 0)


@dataclass
class GitHubStats(_Scalars):
    """Counts of branches, commits and pull requests."""

    total_branches: int = _json("totalBranches", 0)
    total_commits: int = _json("totalCommits", 0)
    total_prs: int = _json("totalPRs", 0)
    merged_prs: int = _json("mergedPRs", 0)
    open_prs: int = _json("openPRs", 0)
    closed_prs: int = _json("closedPRs", 0)
    active_branches: int = _json("activeBranches", 0)


@dataclass
class CheckpointStats:
    """Counts of checkpoints by type and the time of the latest one."""

    total_checkpoints: int = 0
    manual_checkpoints: int = 0
    feature_checkpoints: int = 0
    phase_checkpoints: int = 0
    last_checkpoint: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "totalCheckpoints": self.total_checkpoints,
            "manualCheckpoints": self.manual_checkpoints,
            "featureCheckpoints": self.feature_checkpoints,
            "phaseCheckpoints": self.phase_checkpoints,
        }
        if self.last_checkpoint is not None:
            out["lastCheckpoint"] = _format_time(self.last_checkpoint)
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | None) -> CheckpointStats:
        raw = raw or {}
        return cls(
            total_checkpoints=int(raw.get("totalCheckpoints") or 0),
            manual_checkpoints=int(raw.get("manualCheckpoints") or 0),
            feature_checkpoints=int(raw.get("featureCheckpoints") or 0),
            phase_checkpoints=int(raw.get("phaseCheckpoints") or 0),
            last_checkpoint=_parse_time(raw.get("lastCheckpoint")),
        )


@dataclass
class ProgressHistory:
    """Progress percentages of the project, its phases and features."""

    overall_progress: int = 0
    phase_progress: dict[str, int] = field(default_factory=dict)
    feature_progress: dict[str, int] = field(default_factory=dict)
    last_updated: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "overallProgress": self.overall_progress,
            "phaseProgress": dict(self.phase_progress),
            "featureProgress": dict(self.feature_progress),
            "lastUpdated": _format_time(self.last_updated),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | None) -> ProgressHistory:
        raw = raw or {}
        return cls(
            overall_progress=int(raw.get("overallProgress") or 0),
            phase_progress=_int_map(raw.get("phaseProgress")),
            feature_progress=_int_map(raw.get("featureProgress")),
            last_updated=_parse_time(raw.get("lastUpdated")),
        )


@dataclass
class TaskStats(_Scalars):
    """Task counts and the completion rate as a whole percentage."""

    total_tasks: int = _json("totalTasks", 0)
    completed_tasks: int = _json("completedTasks", 0)
    pending_tasks: int = _json("pendingTasks", 0)
    completion_rate: int = _json("completionRate", 0)


@dataclass
class PackageCoverageStats(_Scalars):
    """Statement totals for one package."""

    name: str = _json("name", "")
    statements: int = _json("statements", 0)
    covered_statements: int = _json("coveredStatements", 0)


@dataclass
class TestingStats:
    """Statement coverage totals, overall and per package."""

    __test__ = False

    total_statements: int = 0
    covered_statements: int = 0
    package_stats: dict[str, PackageCoverageStats] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalStatements": self.total_statements,
            "coveredStatements": self.covered_statements,
            "packageStats": {k: v.to_dict() for k, v in self.package_stats.items()},
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | None) -> TestingStats:
        raw = raw or {}
        return cls(
            total_statements=int(raw.get("totalStatements") or 0),
            covered_statements=int(raw.get("coveredStatements") or 0),
            package_stats={
                str(k): PackageCoverageStats.from_dict(v)
                for k, v in (raw.get("packageStats") or {}).items()
            },
        )


@dataclass
class StatisticsData:
    """Everything collected from the project at one moment."""

    state: StateData | None = None
    github: GitHubStats | None = None
    checkpoints: CheckpointStats | None = None
    progress: ProgressHistory | None = None
    tasks: TaskStats | None = None
    testing: TestingStats | None = None
    collected_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": _opt_dict(self.state),
            "github": _opt_dict(self.github),
            "checkpoints": _opt_dict(self.checkpoints),
            "progress": _opt_dict(self.progress),
            "tasks": _opt_dict(self.tasks),
            "testing": _opt_dict(self.testing),
            "collectedAt": _format_time(self.collected_at),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | None) -> StatisticsData:
        raw = raw or {}
        return cls(
            state=_opt(StateData, raw.get("state")),
            github=_opt(GitHubStats, raw.get("github")),
            checkpoints=_opt(CheckpointStats, raw.get("checkpoints")),
            progress=_opt(ProgressHistory, raw.get("progress")),
            tasks=_opt(TaskStats, raw.get("tasks")),
            testing=_opt(TestingStats, raw.get("testing")),
            collected_at=_parse_time(raw.get("collectedAt")),
        )


@dataclass
class VelocityMetrics(_Scalars):
    """Development velocity rates."""

    features_per_day: float = _json("featuresPerDay", 0.0)
    features_per_week: float = _json("featuresPerWeek", 0.0)
    commits_per_day: float = _json("commitsPerDay", 0.0)
    commits_per_week: float = _json("commitsPerWeek", 0.0)
    tasks_per_day: float = _json("tasksPerDay", 0.0)
    prs_per_week: float = _json("prsPerWeek", 0.0)


@dataclass
class CompletionRates:
    """Completion percentages overall, per phase, per feature and of tasks."""

    overall: int = 0
    phases: dict[str, int] = field(default_factory=dict)
    features: dict[str, int] = field(default_factory=dict)
    tasks: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "overall": self.overall,
            "phases": dict(self.phases),
            "features": dict(self.features),
            "tasks": self.tasks,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | None) -> CompletionRates:
        raw = raw or {}
        return cls(
            overall=int(raw.get("overall") or 0),
            phases=_int_map(raw.get("phases")),
            features=_int_map(raw.get("features")),
            tasks=int(raw.get("tasks") or 0),
        )


@dataclass
class TimeMetrics:
    """Time-related statistics; average times are in days."""

    project_start_date: datetime | None = None
    days_since_start: int = 0
    avg_feature_time: float = 0.0
    avg_phase_time: float = 0.0
    estimated_completion: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "projectStartDate": _format_time(self.project_start_date),
            "daysSinceStart": self.days_since_start,
            "avgFeatureTime": self.avg_feature_time,
            "avgPhaseTime": self.avg_phase_time,
        }
        if self.estimated_completion is not None:
            out["estimatedCompletion"] = _format_time(self.estimated_completion)
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | None) -> TimeMetrics:
        raw = raw or {}
        return cls(
            project_start_date=_parse_time(raw.get("projectStartDate")),
            days_since_start=int(raw.get("daysSinceStart") or 0),
            avg_feature_time=float(raw.get("avgFeatureTime") or 0.0),
            avg_phase_time=float(raw.get("avgPhaseTime") or 0.0),
            estimated_completion=_parse_time(raw.get("estimatedCompletion")),
        )


@dataclass
class QualityMetrics(_Scalars):
    """Code quality indicators."""

    avg_pr_review_time: float = _json("avgPRReviewTime", 0.0)
    pr_merge_rate: float = _json("prMergeRate", 0.0)
    avg_branch_lifetime: float = _json("avgBranchLifetime", 0.0)
    checkpoint_frequency: float = _json("checkpointFrequency", 0.0)


@dataclass
class Trends(_Scalars):
    """Direction of change: "improving", "declining" or "stable"."""

    velocity_trend: str = _json("velocityTrend", "")
    completion_trend: str = _json("completionTrend", "")
    quality_trend: str = _json("qualityTrend", "")
    velocity_change: float = _json("velocityChange", 0.0)
    completion_change: float = _json("completionChange", 0.0)


@dataclass
class PackageCoverageMetric(_Scalars):
    """Coverage percentage of one package."""

    name: str = _json("name", "")
    coverage: float = _json("coverage", 0.0)


@dataclass
class TestingMetrics:
    """Overall and per-package coverage percentages."""

    __test__ = False

    overall_coverage: float = 0.0
    packages: list[PackageCoverageMetric] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "overallCoverage": self.overall_coverage,
            "packages": [p.to_dict() for p in self.packages],
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | None) -> TestingMetrics:
        raw = raw or {}
        return cls(
            overall_coverage=float(raw.get("overallCoverage") or 0.0),
            packages=[PackageCoverageMetric.from_dict(p) for p in raw.get("packages") or []],
        )


@dataclass
class StatisticsMetrics:
    """All metrics calculated from one collection."""

    velocity: VelocityMetrics | None = None
    completion: CompletionRates | None = None
    time: TimeMetrics | None = None
    quality: QualityMetrics | None = None
    testing: TestingMetrics | None = None
    trends: Trends | None = None
    calculated_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "velocity": _opt_dict(self.velocity),
            "completion": _opt_dict(self.completion),
            "time": _opt_dict(self.time),
            "quality": _opt_dict(self.quality),
        }
        if self.testing is not None:
            out["testing"] = self.testing.to_dict()
        if self.trends is not None:
            out["trends"] = self.trends.to_dict()
        out["calculatedAt"] = _format_time(self.calculated_at)
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | None) -> StatisticsMetrics:
        raw = raw or {}
        return cls(
            velocity=_opt(VelocityMetrics, raw.get("velocity")),
            completion=_opt(CompletionRates, raw.get("completion")),
            time=_opt(TimeMetrics, raw.get("time")),
            quality=_opt(QualityMetrics, raw.get("quality")),
            testing=_opt(TestingMetrics, raw.get("testing")),
            trends=_opt(Trends, raw.get("trends")),
            calculated_at=_parse_time(raw.get("calculatedAt")),
        )


def metrics_to_dict(metrics: StatisticsMetrics) -> dict[str, Any]:
    """Return the JSON-ready mapping of a metrics object."""
    return metrics.to_dict()


def metrics_from_dict(data: dict[str, Any] | None) -> StatisticsMetrics:
    """Build a metrics object from its JSON mapping."""
    return StatisticsMetrics.from_dict(data)


def data_to_dict(data: StatisticsData) -> dict[str, Any]:
    """Return the JSON-ready mapping of collected data."""
    return data.to_dict()


def data_from_dict(data: dict[str, Any] | None) -> StatisticsData:
    """Build collected data from its JSON mapping."""
    return StatisticsData.from_dict(data)