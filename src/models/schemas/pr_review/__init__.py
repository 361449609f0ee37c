from src.models.schemas.pr_review.pr_patch import ChangeType, PRFilePatch
from src.models.schemas.pr_review.review_output import (
    AnalysisResult,
    CommentCategory,
    CommentSeverity,
    ReviewCommentDraft,
)

__all__ = [
    "ChangeType",
    "PRFilePatch",
    "AnalysisResult",
    "CommentCategory",
    "CommentSeverity",
    "ReviewCommentDraft",
]
