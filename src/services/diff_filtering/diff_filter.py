"""
Diff Filter

Pure selection of the files worth sending to the analysis engine. Nothing
here touches the network; the input order is preserved.
"""

from fnmatch import fnmatch
from typing import Iterable, List, Optional, Sequence

from src.core.config import settings
from src.models.schemas.pr_review.pr_patch import PRFilePatch

# Lockfiles, build output, minified assets and source maps
DEFAULT_EXCLUDED_PATTERNS: tuple = (
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "poetry.lock",
    "Pipfile.lock",
    "Cargo.lock",
    "composer.lock",
    "Gemfile.lock",
    "go.sum",
    "dist/",
    "build/",
    "out/",
    ".next/",
    "node_modules/",
    "*.min.js",
    "*.min.css",
    "*.map",
)


def is_excluded_path(path: str, patterns: Sequence[str] = DEFAULT_EXCLUDED_PATTERNS) -> bool:
    """
    Check a repository path against the denylist.

    Patterns ending in ``/`` match any directory segment of the path; the
    others are matched against the file name.
    """
    segments = path.split("/")
    directories, filename = segments[:-1], segments[-1]

    for pattern in patterns:
        if pattern.endswith("/"):
            if pattern.rstrip("/") in directories:
                return True
        elif fnmatch(filename, pattern):
            return True
    return False


def filter_reviewable_files(
    files: Iterable[PRFilePatch],
    max_patch_chars: Optional[int] = None,
    excluded_patterns: Sequence[str] = DEFAULT_EXCLUDED_PATTERNS
) -> List[PRFilePatch]:
    """
    Drop files that should not be reviewed.

    A file is dropped when GitHub sent no patch for it (binary or too large),
    when its patch exceeds ``max_patch_chars``, or when its path matches the
    denylist.
    """
    limit = max_patch_chars if max_patch_chars is not None else settings.MAX_PATCH_CHARACTERS

    return [
        f for f in files
        if f.has_patch
        and len(f.patch) <= limit
        and not is_excluded_path(f.file_path, excluded_patterns)
    ]
