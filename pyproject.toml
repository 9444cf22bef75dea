[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "doplan"
version = "0.1.0"
description = "Project planning statistics, trends, reports, Markdown templates and Git/GitHub helpers"
requires-python = ">=3.10"
dependencies = [
    "termcolor",
]
keywords = ["planning", "workflow", "statistics", "git", "github", "project-management"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["doplan"]

[tool.pytest.ini_options]
addopts = "-ra"
