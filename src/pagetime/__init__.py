"""Per-page reading timer and reading-time estimates."""

__version__ = "0.1.0"
