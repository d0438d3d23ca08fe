"""
Declarative sheet schemas.
Each destination tab is a TableSpec: a name, a fixed header row and a function that maps
one log entry to a row in header order. The three log tabs are configuration only; the
append logic in storage.sheets is shared.
"""

from dataclasses import dataclass, replace
from typing import Any, Callable, List, Tuple

from errors import SchemaMismatchError
from normalize.models import CommitRecord, PullRequestRecord

PROMPT_CELL_LIMIT = 500


@dataclass(frozen=True)
class TableSpec:
    name: str
    headers: Tuple[str, ...]
    columns: Callable[[Any], List[Any]]

    def row(self, entry: Any) -> List[Any]:
        """Row for `entry`; raises SchemaMismatchError if it does not match the headers."""
        values = list(self.columns(entry))
        if len(values) != len(self.headers):
            raise SchemaMismatchError(f"{self.name}: row has {len(values)} cells but the header has {len(self.headers)}")
        return values

    def renamed(self, name: str) -> "TableSpec":
        return replace(self, name=name)


@dataclass(frozen=True)
class CommitEntry:
    record: CommitRecord
    explanation: str
    logged_at: str


@dataclass(frozen=True)
class MergeRequestEntry:
    record: PullRequestRecord
    analysis: str
    logged_at: str


@dataclass(frozen=True)
class DocumentationEntry:
    logged_at: str
    repository: str
    type: str
    format: str
    triggered_by: str
    prompt: str
    include_code_analysis: bool
    content: str
    word_count: int
    generation_time_ms: int
    status: str = "Completed"


def _yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"


def _commit_columns(entry: CommitEntry) -> List[Any]:
    r = entry.record
    return [
        entry.logged_at,
        r.repository,
        r.branch,
        r.short_sha,
        r.author,
        r.message,
        r.files_changed,
        r.additions,
        r.deletions,
        entry.explanation,
        r.url,
    ]


def _merge_request_columns(entry: MergeRequestEntry) -> List[Any]:
    r = entry.record
    meta = r.metadata
    return [
        entry.logged_at,
        r.repository,
        f"#{r.number}",
        r.title,
        str(r.type),
        r.source_branch,
        r.target_branch,
        r.author,
        r.merged_by,
        r.merged_at or "",
        r.files_changed,
        r.additions,
        r.deletions,
        r.commits,
        ", ".join(meta.tickets),
        _yes_no(meta.breaking_changes),
        meta.security,
        meta.testing,
        meta.documentation,
        entry.analysis,
        r.url,
    ]


def _documentation_columns(entry: DocumentationEntry) -> List[Any]:
    return [
        entry.logged_at,
        entry.repository,
        entry.type,
        entry.format,
        entry.triggered_by,
        (entry.prompt or "")[:PROMPT_CELL_LIMIT],
        _yes_no(entry.include_code_analysis),
        entry.content,
        entry.word_count,
        entry.generation_time_ms,
        entry.status,
    ]


COMMIT_LOG = TableSpec(
    name="CommitLog",
    headers=(
        "Timestamp",
        "Repository",
        "Branch",
        "Commit SHA",
        "Author",
        "Commit Message",
        "Files Changed",
        "Lines Added",
        "Lines Deleted",
        "AI Explanation",
        "Commit URL",
    ),
    columns=_commit_columns,
)

MERGE_REQUEST_LOG = TableSpec(
    name="Merge Request",
    headers=(
        "Timestamp",
        "Repository",
        "PR Number",
        "Title",
        "Type",
        "Source Branch",
        "Target Branch",
        "Author",
        "Merged By",
        "Merged At",
        "Files Changed",
        "Lines Added",
        "Lines Deleted",
        "Commits",
        "Linear Tickets",
        "Breaking Changes",
        "Security Status",
        "Testing Completed",
        "Documentation",
        "AI Analysis",
        "PR URL",
    ),
    columns=_merge_request_columns,
)

DOCUMENTATION_LOG = TableSpec(
    name="Documentation",
    headers=(
        "Timestamp",
        "Repository",
        "Documentation Type",
        "Output Format",
        "Triggered By",
        "Custom Prompt",
        "Include Code Analysis",
        "Generated Content",
        "Word Count",
        "Generation Time (ms)",
        "Status",
    ),
    columns=_documentation_columns,
)
