"""
Normalized records built from GitHub payloads.
Records are immutable and live for a single pipeline run.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class PRType(str, Enum):
    """Pull request category shown in the Type column."""

    FEATURE = "Feature"
    BUGFIX = "Bugfix"
    HOTFIX = "Hotfix"
    CHORE = "Chore"
    DOCUMENTATION = "Documentation"
    REFACTOR = "Refactor"
    STYLE = "Style"
    TEST = "Test"
    OTHER = "Other"

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class PRMetadata:
    """
    Signals extracted from the pull request template.
    """
    tickets: Tuple[str, ...] = ()
    breaking_changes: bool = False
    security: str = "None"  # None / Improvement / Review Required
    testing: str = "Not specified"  # e.g. "Local, Manual"
    documentation: str = "Not needed"  # Updated / Planned / Not needed


@dataclass(frozen=True)
class CommitRecord:
    """
    Normalized single commit.
    """
    sha: str
    repository: str
    branch: str
    author: str
    message: str
    files_changed: int
    additions: int
    deletions: int
    diff: str
    url: str
    author_email: str = ""
    timestamp: Optional[str] = None

    @property
    def short_sha(self) -> str:
        return self.sha[:8]


@dataclass(frozen=True)
class PullRequestRecord:
    """
    Normalized merged pull request.
    """
    number: int
    title: str
    body: str
    type: PRType
    source_branch: str
    target_branch: str
    author: str
    merged_by: str
    merged_at: Optional[str]
    repository: str
    files_changed: int
    additions: int
    deletions: int
    commits: int
    diff: str
    url: str
    metadata: PRMetadata = field(default_factory=PRMetadata)


@dataclass(frozen=True)
class DocumentationRequest:
    """
    Options of one documentation generator run.
    """
    prompt: str
    repository: str
    type: str = "General"
    format: str = "Markdown"
    triggered_by: str = "manual"
    include_code_analysis: bool = False
