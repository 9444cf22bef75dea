"""Gathering of raw statistics from a project directory."""

from __future__ import annotations

import json
import os
import posixpath
import re
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from doplan.stats_types import (
    CheckpointStats,
    GitHubStats,
    PackageCoverageStats,
    ProgressHistory,
    StateData,
    StatisticsData,
    TaskStats,
    TestingStats,
)

_COVERAGE_CANDIDATES = (
    Path("coverage.out"),
    Path("coverage") / "coverage.out",
    Path(".coverage") / "coverage.out",
)
_INTEGER = re.compile(r"[+-]?\d+")
_FRACTION = re.compile(r"\.(\d+)")


def _to_int(text: str) -> int | None:
    return int(text) if _INTEGER.fullmatch(text) else None


def _parse_timestamp(raw: str) -> datetime:
    """Parse an RFC 3339 timestamp, allowing nanosecond fractions."""
    text = raw[:-1] + "+00:00" if raw.endswith(("Z", "z")) else raw
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    value = datetime.fromisoformat(text)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _read_checkpoint_metadata(path: Path) -> tuple[str, datetime | None] | None:
    """Return the type and creation time of a checkpoint, or None if unreadable."""
    try:
        metadata = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return None
    if not isinstance(metadata, dict):
        return None
    kind = metadata.get("type")
    if kind is None:
        kind = ""
    if not isinstance(kind, str):
        return None
    created_raw = metadata.get("createdAt")
    if created_raw is None:
        return kind, None
    if not isinstance(created_raw, str):
        return None
    try:
        return kind, _parse_timestamp(created_raw)
    except ValueError:
        return None


class Collector:
    """Collects statistics from a project.

    ``state_loader`` returns the project state: an object with ``phases``
    (``id``, ``status``), ``features`` (``id``, ``status``, ``progress``,
    ``task_phases`` holding ``tasks`` with ``completed``) and ``progress``
    (``overall``, ``phases``). ``github_loader`` returns an object with
    ``branches`` (``commit_count``), ``commits`` and ``prs`` (``status``).
    A missing loader makes the sources that need it fail.
    """

    def __init__(
        self,
        project_root: str | os.PathLike[str],
        state_loader: Callable[[], Any] | None = None,
        github_loader: Callable[[], Any] | None = None,
    ) -> None:
        self.project_root = Path(project_root)
        self._state_loader = state_loader
        self._github_loader = github_loader

    def _load_state(self) -> Any:
        if self._state_loader is None:
            raise LookupError("no project state loader configured")
        return self._state_loader()

    def _load_github(self) -> Any:
        if self._github_loader is None:
            raise LookupError("no GitHub data loader configured")
        return self._github_loader()

    def collect(self) -> StatisticsData:
        """Collect all sources in parallel; a failing source is left empty."""
        sources: dict[str, Callable[[], Any]] = {
            "state": self.collect_state,
            "github": self.collect_github,
            "checkpoints": self.collect_checkpoints,
            "progress": self.collect_progress,
            "tasks": self.collect_tasks,
            "testing": self.collect_testing,
        }
        data = StatisticsData(collected_at=datetime.now(timezone.utc))
        with ThreadPoolExecutor(max_workers=len(sources)) as pool:
            futures = {name: pool.submit(source) for name, source in sources.items()}
        for name, future in futures.items():
            if future.exception() is None:
                setattr(data, name, future.result())
        return data

    def collect_state(self) -> StateData:
        """Count phases and features by status."""
        state = self._load_state()
        phases = list(getattr(state, "phases", None) or ())
        features = list(getattr(state, "features", None) or ())
        statuses = [feature.status for feature in features]
        return StateData(
            total_phases=len(phases),
            total_features=len(features),
            completed_phases=sum(1 for phase in phases if phase.status == "complete"),
            completed_features=statuses.count("complete"),
            in_progress_features=statuses.count("in-progress"),
            pending_features=statuses.count("pending"),
        )

    def collect_github(self) -> GitHubStats:
        """Count branches, commits and pull requests by status."""
        github = self._load_github()
        branches = list(getattr(github, "branches", None) or ())
        commits = list(getattr(github, "commits", None) or ())
        prs = list(getattr(github, "prs", None) or ())
        statuses = [pr.status for pr in prs]
        return GitHubStats(
            total_branches=len(branches),
            total_commits=len(commits),
            total_prs=len(prs),
            merged_prs=statuses.count("merged"),
            open_prs=statuses.count("open"),
            closed_prs=statuses.count("closed"),
            active_branches=sum(1 for branch in branches if branch.commit_count > 0),
        )

    def collect_checkpoints(self) -> CheckpointStats:
        """Count checkpoints under ``.doplan/checkpoints`` by type."""
        checkpoint_dir = self.project_root / ".doplan" / "checkpoints"
        if not checkpoint_dir.exists():
            return CheckpointStats()

        entries = list(checkpoint_dir.iterdir())
        stats = CheckpointStats(total_checkpoints=len(entries))
        counters = {
            "manual": "manual_checkpoints",
            "feature": "feature_checkpoints",
            "phase": "phase_checkpoints",
        }
        latest: datetime | None = None
        for entry in entries:
            if not entry.is_dir():
                continue
            metadata = _read_checkpoint_metadata(entry / "metadata.json")
            if metadata is None:
                continue
            kind, created_at = metadata
            counter = counters.get(kind)
            if counter is not None:
                setattr(stats, counter, getattr(stats, counter) + 1)
            if created_at is not None and (latest is None or created_at > latest):
                latest = created_at
        stats.last_checkpoint = latest
        return stats

    def collect_progress(self) -> ProgressHistory:
        """Snapshot the progress of the project, its phases and features."""
        state = self._load_state()
        progress = getattr(state, "progress", None)
        return ProgressHistory(
            overall_progress=getattr(progress, "overall", 0) or 0,
            phase_progress=dict(getattr(progress, "phases", None) or {}),
            feature_progress={
                feature.id: feature.progress
                for feature in getattr(state, "features", None) or ()
            },
            last_updated=datetime.now(timezone.utc),
        )

    def collect_tasks(self) -> TaskStats:
        """Count tasks of all features and their completion rate."""
        state = self._load_state()
        done = [
            bool(task.completed)
            for feature in getattr(state, "features", None) or ()
            for task_phase in getattr(feature, "task_phases", None) or ()
            for task in getattr(task_phase, "tasks", None) or ()
        ]
        total = len(done)
        completed = sum(done)
        return TaskStats(
            total_tasks=total,
            completed_tasks=completed,
            pending_tasks=total - completed,
            completion_rate=completed * 100 // total if total else 0,
        )

    def collect_testing(self) -> TestingStats | None:
        """Read a coverage profile; None when there is none or it is empty."""
        coverage_path = next(
            (
                self.project_root / candidate
                for candidate in _COVERAGE_CANDIDATES
                if (self.project_root / candidate).exists()
            ),
            None,
        )
        if coverage_path is None:
            return None

        stats = TestingStats()
        line = 0
        with coverage_path.open(encoding="utf-8") as handle:
            for raw in handle:
                text = raw.strip()
                if not text:
                    continue
                if line == 0 and text.startswith("mode:"):
                    line += 1
                    continue
                fields = text.split()
                if len(fields) < 3:
                    continue
                statements = _to_int(fields[1])
                count = _to_int(fields[2])
                if statements is None or count is None:
                    continue

                covered = statements if count > 0 else 0
                stats.total_statements += statements
                stats.covered_statements += covered

                file_path = fields[0].split(":", 1)[0]
                package = posixpath.dirname(file_path) or "."
                package_stats = stats.package_stats.setdefault(
                    package, PackageCoverageStats(name=package)
                )
                package_stats.statements += statements
                package_stats.covered_statements += covered
                line += 1

        if stats.total_statements == 0:
            return None
        return stats