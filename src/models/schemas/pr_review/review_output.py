"""
Review Output Models

Typed review comments produced by the analysis engine and the aggregate
result handed to persistence and publication.
"""

from pydantic import BaseModel, Field
from typing import List
from enum import Enum


class CommentCategory(str, Enum):
    """Categories for review comments."""
    SECURITY = "security"
    PERFORMANCE = "performance"
    STYLE = "style"
    BUG = "bug"
    BEST_PRACTICE = "best-practice"


class CommentSeverity(str, Enum):
    """Severity levels for review comments."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ReviewCommentDraft(BaseModel):
    """A validated comment anchored to a file and line of the diff."""

    file_path: str = Field(..., description="Path of a file included in the prompt")
    line: int = Field(..., description="Line number in the PR head")
    body: str
    category: CommentCategory = CommentCategory.BEST_PRACTICE
    severity: CommentSeverity = CommentSeverity.INFO


class AnalysisResult(BaseModel):
    """Output of one analysis engine invocation."""

    summary: str
    comments: List[ReviewCommentDraft] = Field(default_factory=list)
    tokens_used: int = Field(default=0, ge=0)
    included_files: List[str] = Field(
        default_factory=list,
        description="Paths whose diff made it into the prompt"
    )

    @property
    def has_errors(self) -> bool:
        return any(c.severity == CommentSeverity.ERROR for c in self.comments)

