"""Selection of the reviewable subset of a pull request's changed files."""

from src.services.diff_filtering.diff_filter import (
    DEFAULT_EXCLUDED_PATTERNS,
    filter_reviewable_files,
    is_excluded_path,
)

__all__ = [
    "DEFAULT_EXCLUDED_PATTERNS",
    "filter_reviewable_files",
    "is_excluded_path",
]
