"""
PR Patch Models

Pydantic schemas for the file entries returned by GitHub's
``GET /repos/{owner}/{repo}/pulls/{number}/files`` endpoint.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, Optional
from enum import Enum


class ChangeType(str, Enum):
    """File change types in a PR."""
    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"
    RENAMED = "renamed"
    COPIED = "copied"
    CHANGED = "changed"
    UNCHANGED = "unchanged"


class PRFilePatch(BaseModel):
    """Represents changes to a single file in a PR."""

    model_config = ConfigDict(extra="ignore")

    file_path: str = Field(..., description="Relative path from repository root")
    change_type: ChangeType = Field(default=ChangeType.MODIFIED)
    patch: Optional[str] = Field(
        None,
        description="Unified diff text; GitHub omits it for binary and oversized files"
    )
    additions: int = Field(default=0, ge=0)
    deletions: int = Field(default=0, ge=0)
    previous_filename: Optional[str] = None

    @field_validator("file_path")
    @classmethod
    def validate_file_path(cls, v: str) -> str:
        v = v.strip().replace("\\", "/").strip("/")
        if not v:
            raise ValueError("File path cannot be empty")
        return v

    @field_validator("change_type", mode="before")
    @classmethod
    def normalize_change_type(cls, v: Any) -> Any:
        # Unknown statuses from newer API versions should not break the fetch
        if isinstance(v, str) and v not in ChangeType._value2member_map_:
            return ChangeType.CHANGED
        return v

    @property
    def has_patch(self) -> bool:
        return bool(self.patch)

    @classmethod
    def from_github(cls, file_data: Dict[str, Any]) -> "PRFilePatch":
        """Build a patch from one entry of the GitHub files API response."""
        return cls(
            file_path=file_data["filename"],
            change_type=file_data.get("status", ChangeType.MODIFIED),
            patch=file_data.get("patch"),
            additions=file_data.get("additions", 0),
            deletions=file_data.get("deletions", 0),
            previous_filename=file_data.get("previous_filename"),
        )
