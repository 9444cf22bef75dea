"""Project planning statistics, trends, reports, Markdown templates and Git/GitHub helpers."""

__version__ = "0.1.0"