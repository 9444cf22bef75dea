"""Historical statistics snapshots kept in a JSON file."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from doplan.stats_types import StatisticsData, StatisticsMetrics

MAX_ENTRIES = 100


class NoHistoryError(LookupError):
    """Raised when no historical data is stored."""


@dataclass
class HistoricalData:
    """One stored statistics snapshot."""

    timestamp: datetime
    metrics: StatisticsMetrics | None = None
    data: StatisticsData | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "metrics": None if self.metrics is None else self.metrics.to_dict(),
            "data": None if self.data is None else self.data.to_dict(),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> HistoricalData:
        timestamp = datetime.fromisoformat(raw["timestamp"])
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        metrics = raw.get("metrics")
        data = raw.get("data")
        return cls(
            timestamp=timestamp,
            metrics=None if metrics is None else StatisticsMetrics.from_dict(metrics),
            data=None if data is None else StatisticsData.from_dict(data),
        )


class Storage:
    """Stores up to the last 100 statistics snapshots of a project."""

    def __init__(self, project_root: str | os.PathLike[str]) -> None:
        self.project_root = Path(project_root)
        self.storage_path = self.project_root / ".doplan" / "stats" / "statistics.json"

    def save(self, metrics: StatisticsMetrics | None, data: StatisticsData | None) -> None:
        """Append a snapshot stamped with the current time."""
        self.storage_path.parent.mkdir(parents=True, exist_ok=True)
        history = self.load_all()
        history.append(
            HistoricalData(timestamp=datetime.now(timezone.utc), metrics=metrics, data=data)
        )
        history = history[-MAX_ENTRIES:]
        payload = json.dumps([entry.to_dict() for entry in history], indent=2)
        self.storage_path.write_text(payload, encoding="utf-8")

    def load_all(self) -> list[HistoricalData]:
        """Return every stored snapshot, oldest first."""
        if not self.storage_path.exists():
            return []
        raw = json.loads(self.storage_path.read_text(encoding="utf-8"))
        return [HistoricalData.from_dict(entry) for entry in raw or []]

    def load_since(self, since: datetime) -> list[HistoricalData]:
        """Return snapshots taken at or after ``since``."""
        return [entry for entry in self.load_all() if entry.timestamp >= since]

    def load_range(self, start: datetime, end: datetime) -> list[HistoricalData]:
        """Return snapshots taken between ``start`` and ``end`` inclusive."""
        return [entry for entry in self.load_all() if start <= entry.timestamp <= end]

    def get_latest(self) -> HistoricalData:
        """Return the most recent snapshot."""
        history = self.load_all()
        if not history:
            raise NoHistoryError("no historical data available")
        return history[-1]

    def clear(self) -> None:
        """Remove all stored snapshots."""
        self.storage_path.unlink(missing_ok=True)