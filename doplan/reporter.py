"""Rendering of statistics metrics as terminal output, JSON, Markdown and HTML."""

from __future__ import annotations

import json
import math
import os
import sys
import time
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path

from termcolor import colored

from doplan.stats_types import (
    CompletionRates,
    QualityMetrics,
    StatisticsMetrics,
    TestingMetrics,
    TimeMetrics,
    Trends,
    VelocityMetrics,
)
from doplan.terminal import animations_enabled

CLI_PROGRESS_BAR_WIDTH = 24
MARKDOWN_PROGRESS_BAR_WIDTH = 20
_ANIMATION_DELAY = 0.04
_DATE_FORMAT = "%Y-%m-%d"


def clamp_percent(value: float) -> float:
    """Limit a percentage to the range 0 to 100."""
    if value < 0:
        return 0.0
    if value > 100:
        return 100.0
    return value


def _round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def render_progress_bar(width: int, percent: float) -> str:
    """Render a bracketed bar of ``width`` cells filled to ``percent``."""
    percent = clamp_percent(percent)
    filled = min(max(_round_half_up(percent / 100 * width), 0), width)
    return "[" + "█" * filled + "░" * (width - filled) + "]"


def _markdown_bar(percent: float) -> str:
    return render_progress_bar(MARKDOWN_PROGRESS_BAR_WIDTH, percent)


def _html_bar(percent: float) -> str:
    return (
        '<div class="progress-bar"><span style="width: '
        f'{clamp_percent(percent):.1f}%"></span></div>'
    )


def _generated_stamp() -> str:
    stamp = datetime.now().astimezone().isoformat(timespec="seconds")
    return stamp[:-6] + "Z" if stamp.endswith("+00:00") else stamp


def _sorted_keys(data: Mapping[str, int]) -> list[str]:
    return sorted(data)


def _emit(text: str) -> None:
    sys.stdout.write(text)
    sys.stdout.flush()


def _export(content: str, path: str | os.PathLike[str] | None) -> None:
    if path:
        Path(path).write_text(content, encoding="utf-8")
        print(colored(f"✅ Statistics exported to: {path}", "green"))
    else:
        _emit(content)


_HTML_STYLE = (
    "body { font-family: Arial, sans-serif; margin: 20px; }\n"
    "h1 { color: #333; }\n"
    "h2 { color: #666; margin-top: 30px; }\n"
    "table { border-collapse: collapse; width: 100%; margin: 20px 0; }\n"
    "th, td { border: 1px solid #ddd; padding: 8px; text-align: left; }\n"
    "th { background-color: #f2f2f2; }\n"
    ".progress-group { margin: 12px 0; }\n"
    ".progress-label { font-weight: bold; display: block; margin-bottom: 4px; }\n"
    ".progress-bar { background: #e5e7eb; border-radius: 9999px; overflow: hidden; "
    "height: 16px; }\n"
    ".progress-bar span { display: block; height: 100%; "
    "background: linear-gradient(90deg,#10b981,#3b82f6); }\n"
)


class Reporter:
    """Formats statistics metrics for people and for other tools."""

    def report_cli(self, metrics: StatisticsMetrics) -> None:
        """Print the metrics as an aligned summary with progress bars."""
        animate = animations_enabled()
        _emit(colored("\n📊 DoPlan Statistics\n", "cyan"))
        _emit(colored("===================\n\n", "cyan"))

        self._print_velocity(metrics.velocity)
        self._print_completion(metrics.completion, animate)
        self._print_time(metrics.time)
        self._print_quality(metrics.quality)
        self._print_testing(metrics.testing, animate)
        self._print_trends(metrics.trends)

    def report_json(
        self, metrics: StatisticsMetrics, path: str | os.PathLike[str] | None = None
    ) -> str:
        """Write the metrics as indented JSON to ``path`` or standard output."""
        content = json.dumps(metrics.to_dict(), indent=2, ensure_ascii=False)
        if path:
            _export(content, path)
        else:
            _emit(content + "\n")
        return content

    def report_markdown(
        self, metrics: StatisticsMetrics, path: str | os.PathLike[str] | None = None
    ) -> str:
        """Write the metrics as Markdown to ``path`` or standard output."""
        out = ["# DoPlan Statistics\n\n", f"*Generated: {_generated_stamp()}*\n\n"]

        velocity = metrics.velocity
        if velocity is not None:
            out += [
                "## Velocity Metrics\n\n",
                "| Metric | Value |\n",
                "|--------|-------|\n",
                f"| Features/day | {velocity.features_per_day:.2f} |\n",
                f"| Features/week | {velocity.features_per_week:.2f} |\n",
                f"| Commits/day | {velocity.commits_per_day:.2f} |\n",
                f"| Commits/week | {velocity.commits_per_week:.2f} |\n",
                f"| Tasks/day | {velocity.tasks_per_day:.2f} |\n",
                f"| PRs/week | {velocity.prs_per_week:.2f} |\n\n",
            ]

        completion = metrics.completion
        if completion is not None:
            overall = float(completion.overall)
            tasks = float(completion.tasks)
            out += [
                "## Completion Rates\n\n",
                f"- **Overall:** {_markdown_bar(overall)} {overall:.1f}%\n",
                f"- **Tasks:** {_markdown_bar(tasks)} {tasks:.1f}%\n\n",
            ]
            if completion.phases:
                out.append("### Phases\n\n")
                out.append("| Phase | Progress |\n|-------|----------|\n")
                for phase_id in _sorted_keys(completion.phases):
                    val = float(completion.phases[phase_id])
                    out.append(f"| {phase_id} | {_markdown_bar(val)} {val:.1f}% |\n")
                out.append("\n")
            if completion.features:
                out.append("### Key Features\n\n")
                out.append("| Feature | Progress |\n|---------|----------|\n")
                keys = _sorted_keys(completion.features)
                for feature_id in keys[:10]:
                    val = float(completion.features[feature_id])
                    out.append(f"| {feature_id} | {_markdown_bar(val)} {val:.1f}% |\n")
                if len(keys) > 10:
                    out.append(f"| ... | {len(keys) - 10} more features |\n")
                out.append("\n")

        time_metrics = metrics.time
        if time_metrics is not None:
            out.append("## Time Metrics\n\n")
            out.append(f"- **Days since start:** {time_metrics.days_since_start}\n")
            if time_metrics.avg_feature_time > 0:
                out.append(f"- **Avg feature time:** {time_metrics.avg_feature_time:.1f} days\n")
            if time_metrics.estimated_completion is not None:
                date = time_metrics.estimated_completion.strftime(_DATE_FORMAT)
                out.append(f"- **Estimated completion:** {date}\n")
            out.append("\n")

        quality = metrics.quality
        if quality is not None:
            out += [
                "## Quality Metrics\n\n",
                f"- **PR merge rate:** {quality.pr_merge_rate:.1f}%\n",
                f"- **Checkpoint frequency:** {quality.checkpoint_frequency:.1f} per week\n",
                "\n",
            ]

        testing = metrics.testing
        if testing is not None:
            cov = testing.overall_coverage
            out.append("## Testing Metrics\n\n")
            out.append(f"- **Overall Coverage:** {_markdown_bar(cov)} {cov:.1f}%\n\n")
            if testing.packages:
                out.append("| Package | Coverage |\n|---------|----------|\n")
                for pkg in testing.packages[:10]:
                    out.append(
                        f"| {pkg.name} | {_markdown_bar(pkg.coverage)} {pkg.coverage:.1f}% |\n"
                    )
                if len(testing.packages) > 10:
                    out.append(f"| ... | {len(testing.packages) - 10} more packages |\n")
                out.append("\n")

        content = "".join(out)
        _export(content, path)
        return content

    def report_html(
        self, metrics: StatisticsMetrics, path: str | os.PathLike[str] | None = None
    ) -> str:
        """Write the metrics as a standalone HTML page to ``path`` or standard output."""
        out = [
            "<!DOCTYPE html>\n",
            "<html>\n<head>\n",
            "<title>DoPlan Statistics</title>\n",
            "<style>\n",
            _HTML_STYLE,
            "</style>\n",
            "</head>\n<body>\n",
            "<h1>📊 DoPlan Statistics</h1>\n",
            f"<p><em>Generated: {_generated_stamp()}</em></p>\n",
        ]

        velocity = metrics.velocity
        if velocity is not None:
            rows = (
                ("Features/day", velocity.features_per_day),
                ("Features/week", velocity.features_per_week),
                ("Commits/day", velocity.commits_per_day),
                ("Commits/week", velocity.commits_per_week),
                ("Tasks/day", velocity.tasks_per_day),
                ("PRs/week", velocity.prs_per_week),
            )
            out.append("<h2>Velocity Metrics</h2>\n")
            out.append("<table>\n")
            out.append("<tr><th>Metric</th><th>Value</th></tr>\n")
            out += [f"<tr><td>{label}</td><td>{value:.2f}</td></tr>\n" for label, value in rows]
            out.append("</table>\n")

        completion = metrics.completion
        if completion is not None:
            out.append("<h2>Completion Rates</h2>\n")
            for label, raw in (("Overall", completion.overall), ("Tasks", completion.tasks)):
                val = float(raw)
                out.append(
                    f'<div class="progress-group"><span class="progress-label">{label}</span>'
                    f"{_html_bar(val)}<p>{val:.1f}%</p></div>\n"
                )
            if completion.phases:
                out.append("<h3>Phases</h3>\n")
                out.append("<table><tr><th>Phase</th><th>Progress</th></tr>\n")
                for phase_id in _sorted_keys(completion.phases):
                    val = float(completion.phases[phase_id])
                    out.append(f"<tr><td>{phase_id}</td><td>{_html_bar(val)} {val:.1f}%</td></tr>\n")
                out.append("</table>\n")

        time_metrics = metrics.time
        if time_metrics is not None:
            out.append("<h2>Time Metrics</h2>\n")
            out.append(
                f"<p><strong>Days since start:</strong> {time_metrics.days_since_start}</p>\n"
            )
            if time_metrics.avg_feature_time > 0:
                out.append(
                    "<p><strong>Avg feature time:</strong> "
                    f"{time_metrics.avg_feature_time:.1f} days</p>\n"
                )
            if time_metrics.estimated_completion is not None:
                date = time_metrics.estimated_completion.strftime(_DATE_FORMAT)
                out.append(f"<p><strong>Estimated completion:</strong> {date}</p>\n")

        quality = metrics.quality
        if quality is not None:
            out.append("<h2>Quality Metrics</h2>\n")
            out.append(f"<p><strong>PR merge rate:</strong> {quality.pr_merge_rate:.1f}%</p>\n")
            out.append(
                "<p><strong>Checkpoint frequency:</strong> "
                f"{quality.checkpoint_frequency:.1f} per week</p>\n"
            )

        testing = metrics.testing
        if testing is not None:
            cov = testing.overall_coverage
            out.append("<h2>Testing Metrics</h2>\n")
            out.append(
                '<div class="progress-group"><span class="progress-label">Overall Coverage</span>'
                f"{_html_bar(cov)}<p>{cov:.1f}%</p></div>\n"
            )
            if testing.packages:
                out.append("<table><tr><th>Package</th><th>Coverage</th></tr>\n")
                for pkg in testing.packages[:10]:
                    out.append(
                        f"<tr><td>{pkg.name}</td><td>{_html_bar(pkg.coverage)} "
                        f"{pkg.coverage:.1f}%</td></tr>\n"
                    )
                if len(testing.packages) > 10:
                    out.append(
                        f"<tr><td>...</td><td>{len(testing.packages) - 10} more packages</td></tr>\n"
                    )
                out.append("</table>\n")

        out.append("</body>\n</html>\n")
        content = "".join(out)
        _export(content, path)
        return content

    def _print_velocity(self, velocity: VelocityMetrics | None) -> None:
        if velocity is None:
            return
        print(colored("Velocity Metrics:", "yellow"))
        print(f"  Features/day:    {velocity.features_per_day:.2f}")
        print(f"  Features/week:   {velocity.features_per_week:.2f}")
        print(f"  Commits/day:     {velocity.commits_per_day:.2f}")
        print(f"  Commits/week:    {velocity.commits_per_week:.2f}")
        print(f"  Tasks/day:       {velocity.tasks_per_day:.2f}")
        print(f"  PRs/week:        {velocity.prs_per_week:.2f}\n")

    def _print_completion(self, completion: CompletionRates | None, animate: bool) -> None:
        if completion is None:
            return
        print(colored("Completion Rates:", "yellow"))
        self._print_bar("Overall", float(completion.overall), 2, animate)
        self._print_bar("Tasks", float(completion.tasks), 2, animate)

        if completion.phases:
            print("  Phases:")
            for phase_id in _sorted_keys(completion.phases):
                self._print_bar(phase_id, float(completion.phases[phase_id]), 4, animate)

        if completion.features:
            print("  Key Features:")
            keys = _sorted_keys(completion.features)
            for feature_id in keys[:5]:
                self._print_bar(feature_id, float(completion.features[feature_id]), 4, animate)
            if len(keys) > 5:
                print(f"    ...and {len(keys) - 5} more features")
        print()

    def _print_time(self, time_metrics: TimeMetrics | None) -> None:
        if time_metrics is None:
            return
        print(colored("Time Metrics:", "yellow"))
        print(f"  Days since start: {time_metrics.days_since_start}")
        if time_metrics.avg_feature_time > 0:
            print(f"  Avg feature time: {time_metrics.avg_feature_time:.1f} days")
        if time_metrics.avg_phase_time > 0:
            print(f"  Avg phase time:   {time_metrics.avg_phase_time:.1f} days")
        if time_metrics.estimated_completion is not None:
            date = time_metrics.estimated_completion.strftime(_DATE_FORMAT)
            print(f"  Estimated completion: {date}")
        print()

    def _print_quality(self, quality: QualityMetrics | None) -> None:
        if quality is None:
            return
        print(colored("Quality Metrics:", "yellow"))
        print(f"  PR merge rate:        {quality.pr_merge_rate:.1f}%")
        print(f"  Checkpoint frequency: {quality.checkpoint_frequency:.1f} per week")
        if quality.avg_branch_lifetime > 0:
            print(f"  Avg branch lifetime:  {quality.avg_branch_lifetime:.1f} days")
        print()

    def _print_testing(self, testing: TestingMetrics | None, animate: bool) -> None:
        if testing is None:
            return
        print(colored("Testing Metrics:", "yellow"))
        self._print_bar("Coverage", testing.overall_coverage, 2, animate)
        if testing.packages:
            print("  Packages:")
            for pkg in testing.packages[:5]:
                self._print_bar(pkg.name, pkg.coverage, 4, animate)
            if len(testing.packages) > 5:
                print(f"    ...and {len(testing.packages) - 5} more packages")
        print()

    def _print_trends(self, trends: Trends | None) -> None:
        if trends is None:
            return
        print(colored("Trends:", "yellow"))
        line = f"  Velocity:   {trends.velocity_trend}"
        if trends.velocity_change != 0:
            line += f" ({trends.velocity_change:.1f}%)"
        print(line)
        line = f"  Completion: {trends.completion_trend}"
        if trends.completion_change != 0:
            line += f" ({trends.completion_change:.1f}%)"
        print(line)

    def _print_bar(self, label: str, percent: float, indent: int, animate: bool) -> None:
        percent = clamp_percent(percent)
        prefix = f"{' ' * indent}{label}:"
        if animate and percent > 0:
            _animate_bar(prefix, percent)
            return
        print(f"{prefix} {render_progress_bar(CLI_PROGRESS_BAR_WIDTH, percent)} {percent:5.1f}%")


def _animate_bar(prefix: str, target: float) -> None:
    target = clamp_percent(target)
    steps = max(5, _round_half_up(target / 5))
    increment = target / steps
    current = 0.0
    while current <= target:
        _emit(f"\r{prefix} {render_progress_bar(CLI_PROGRESS_BAR_WIDTH, current)} {current:5.1f}%")
        time.sleep(_ANIMATION_DELAY)
        if current >= target:
            break
        current = min(current + increment, target)
    _emit(f"\r{prefix} {render_progress_bar(CLI_PROGRESS_BAR_WIDTH, target)} {target:5.1f}%\n")