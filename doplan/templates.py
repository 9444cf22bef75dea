"""Management of markdown templates and their configuration."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


class TemplateNotFoundError(LookupError):
    """Raised when a named template cannot be read."""


@dataclass
class TemplateConfig:
    """Default template names and a map of named template paths."""

    default_plan: str = "plan-template.md"
    default_design: str = "design-template.md"
    default_tasks: str = "tasks-template.md"
    templates: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "defaultPlan": self.default_plan,
            "defaultDesign": self.default_design,
            "defaultTasks": self.default_tasks,
            "templates": dict(self.templates),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any] | None) -> TemplateConfig:
        raw = raw or {}
        return cls(
            default_plan=raw.get("defaultPlan") or "",
            default_design=raw.get("defaultDesign") or "",
            default_tasks=raw.get("defaultTasks") or "",
            templates={str(k): str(v) for k, v in (raw.get("templates") or {}).items()},
        )


class TemplateManager:
    """Reads and writes templates under ``doplan/templates`` of a project."""

    def __init__(self, project_root: str | os.PathLike[str]) -> None:
        root = Path(project_root)
        self.templates_dir = root / "doplan" / "templates"
        self.config_path = root / ".doplan" / "templates.json"

    def list_templates(self) -> list[str]:
        """Return the names of all markdown templates, sorted."""
        if not self.templates_dir.exists():
            return []
        return sorted(
            entry.name
            for entry in self.templates_dir.iterdir()
            if not entry.is_dir() and entry.name.endswith(".md")
        )

    def get_template(self, name: str) -> str:
        """Return the content of a template."""
        try:
            return (self.templates_dir / name).read_text(encoding="utf-8")
        except OSError as err:
            raise TemplateNotFoundError(f"template not found: {name}") from err

    def add_template(self, name: str, content: str) -> None:
        """Write a template, creating the templates directory if needed."""
        self.templates_dir.mkdir(parents=True, exist_ok=True)
        (self.templates_dir / name).write_text(content, encoding="utf-8")

    def remove_template(self, name: str) -> None:
        """Delete a template; a missing one raises FileNotFoundError."""
        (self.templates_dir / name).unlink()

    def load_config(self) -> TemplateConfig:
        """Load the configuration, or the defaults when none is saved."""
        if not self.config_path.exists():
            return TemplateConfig()
        raw = json.loads(self.config_path.read_text(encoding="utf-8"))
        return TemplateConfig.from_dict(raw)

    def save_config(self, config: TemplateConfig) -> None:
        """Save the configuration as indented JSON."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        self.config_path.write_text(json.dumps(config.to_dict(), indent=2), encoding="utf-8")

    def get_default_template(self, template_type: str) -> str:
        """Return the default template name for "plan", "design" or "tasks"."""
        config = self.load_config()
        defaults = {
            "plan": config.default_plan,
            "design": config.default_design,
            "tasks": config.default_tasks,
        }
        try:
            return defaults[template_type]
        except KeyError:
            raise ValueError(f"unknown template type: {template_type}") from None