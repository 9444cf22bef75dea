# doplan

A library for tracking a planned project. It gathers statistics about phases,
features, tasks, checkpoints and test coverage, calculates velocity,
completion, time and quality metrics, follows trends across stored
snapshots, and reports the results as terminal output, JSON, Markdown or
HTML. It also manages Markdown templates and wraps common Git and GitHub CLI
tasks: feature branches, commits, pushes and pull requests.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

| Module | Contents |
|--------|----------|
| `doplan.stats_types` | Dataclasses for collected data (`StatisticsData`, `StateData`, `GitHubStats`, `CheckpointStats`, `ProgressHistory`, `TaskStats`, `TestingStats`, `PackageCoverageStats`) and calculated metrics (`StatisticsMetrics`, `VelocityMetrics`, `CompletionRates`, `TimeMetrics`, `QualityMetrics`, `Trends`, `TestingMetrics`, `PackageCoverageMetric`), each with `to_dict()` / `from_dict()`; plus `metrics_to_dict`, `metrics_from_dict`, `data_to_dict`, `data_from_dict` |
| `doplan.collector` | `Collector` – gathers raw statistics from a project directory |
| `doplan.calculator` | `Calculator` – computes metrics; `percentage(covered, total)` |
| `doplan.trends` | `TrendCalculator` – trends, average velocity and a completion projection |
| `doplan.storage` | `Storage`, `HistoricalData`, `NoHistoryError` – snapshot history |
| `doplan.reporter` | `Reporter`; `render_progress_bar(width, percent)`, `clamp_percent(value)` |
| `doplan.templates` | `TemplateManager`, `TemplateConfig`, `TemplateNotFoundError` |
| `doplan.git_branches` | `BranchManager`, `generate_branch_name`, `GitError` |
| `doplan.git_commits` | `CommitManager`, `format_commit_message` |
| `doplan.pull_requests` | `PRManager`, `generate_pr_body`, `PullRequestError` |
| `doplan.files` | `write_json`, `ensure_dir`, `batch_write_json` |
| `doplan.terminal` | `animations_enabled()` |

## Statistics

```python
from datetime import datetime, timedelta

from doplan.collector import Collector
from doplan.calculator import Calculator
from doplan.trends import TrendCalculator
from doplan.storage import Storage
from doplan.reporter import Reporter

collector = Collector("path/to/project", state_loader, github_loader)
data = collector.collect()

calculator = Calculator(datetime.now() - timedelta(days=30))
metrics = calculator.calculate(data, state, github_data)

storage = Storage("path/to/project")
metrics.trends = TrendCalculator().calculate_trends(metrics, storage.load_all())
storage.save(metrics, data)

reporter = Reporter()
reporter.report_cli(metrics)
reporter.report_markdown(metrics, "stats.md")
reporter.report_html(metrics, "stats.html")
reporter.report_json(metrics, "stats.json")
```

### Collecting

`Collector(project_root, state_loader=None, github_loader=None)` takes two
callables that return the project state and the GitHub data:

- the state has `phases` (with `id`, `status`), `features` (with `id`,
  `status`, `progress`, `task_phases` holding `tasks` with `completed`) and
  `progress` (with `overall` and a `phases` mapping);
- the GitHub data has `branches` (with `commit_count`), `commits` and `prs`
  (with `status`: `"merged"`, `"open"` or `"closed"`).

`collect()` runs all sources in parallel; a source that fails (for example
because its loader was not given) is left as `None`. The individual sources
are `collect_state()`, `collect_github()`, `collect_checkpoints()`,
`collect_progress()`, `collect_tasks()` and `collect_testing()`.

Checkpoints are counted from the directories under `.doplan/checkpoints`;
each one's `metadata.json` supplies its `type` (`manual`, `feature` or
`phase`) and `createdAt` time.

Coverage is read from the first of `coverage.out`, `coverage/coverage.out`
or `.coverage/coverage.out` under the project root. The file may start with a
`mode:` line; every other line reads `path/to/file:range statements count`.
Statements are totalled per package (the directory of the file) and count as
covered when `count` is above zero. `collect_testing()` returns `None` when
no profile exists or it holds no statements.

### Calculating

`Calculator(project_start_date)` computes metrics relative to the start date
(`None` means unknown). Feature and phase dates are `YYYY-MM-DD` strings in
`start_date` and `target_date`. `calculate_testing_metrics()` returns `None`
without coverage data; packages are sorted by name.

### Trends

`TrendCalculator.calculate_trends(current, history)` compares the current
metrics with the newest snapshot older than seven days, or failing that the
oldest one. With fewer than two snapshots every trend is `"stable"`.
Velocity changes beyond ±10 % and completion or merge-rate changes beyond
±5 points count as `"improving"` or `"declining"`.
`calculate_projection()` returns a projected completion date, or `None` when
no estimate can be made.

### Storage

History is kept in `.doplan/stats/statistics.json`, limited to the 100 most
recent snapshots. `load_since()` and `load_range()` filter by timestamp
(inclusive), `get_latest()` raises `NoHistoryError` when nothing is stored,
and `clear()` removes the file.

### Reporting

`report_json`, `report_markdown` and `report_html` write to the given path,
or to standard output when no path is given, and return the content they
produced. `report_cli` prints a summary with progress bars. The bars are
animated when standard output is a terminal; set `DOPLAN_NO_ANIMATION=1` to
turn animation off, or `DOPLAN_FORCE_ANIMATION=1` to force it on.

## Templates

```python
from doplan.templates import TemplateManager

templates = TemplateManager("path/to/project")
templates.add_template("plan.md", "# Plan\n")
print(templates.list_templates())              # ['plan.md']
print(templates.get_default_template("plan"))  # 'plan-template.md'
```

Templates are stored in `doplan/templates/`; their configuration in
`.doplan/templates.json`. `get_template()` raises `TemplateNotFoundError`
for a missing template, and `get_default_template()` raises `ValueError` for
a type other than `"plan"`, `"design"` or `"tasks"`.

## Git and GitHub

```python
from doplan.git_branches import BranchManager, generate_branch_name
from doplan.git_commits import CommitManager, format_commit_message
from doplan.pull_requests import PRManager, generate_pr_body

name = generate_branch_name("01-phase", "01-feature", "User Authentication")
# "feature/01-phase-01-feature-user-authentication"

BranchManager(".").create_feature_branch(name)
CommitManager(".").auto_commit_and_push(
    format_commit_message("feat", "auth", "add login"), ["src/login.py"]
)
PRManager(".").create_pull_request(
    name, "Feature: User Authentication",
    generate_pr_body("User Authentication", "plan.md", "design.md", "tasks.md"),
    "main",
)
```

`format_commit_message("feat", "api", "add endpoint")` gives
`"feat (api) : add endpoint"`. The Git helpers run `git` and raise
`GitError` on failure; commits are made as the `DoPlan` author. Pull
requests are created with the GitHub CLI (`gh`), which must be installed and
authenticated; failures raise `PullRequestError`.

## What this package does not do

- It has no command-line program or interactive dashboard; it is used as a
  library.
- It does not store or load the project state or configuration, and it does
  not fetch branch, commit or pull request data from Git or GitHub for the
  statistics: the `Collector` is given loader functions for both.
- It does not render templates; `TemplateManager` only stores, lists and
  reads them.
- It does not watch features or open pull requests on its own when they are
  complete.