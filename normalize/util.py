"""
Normalization helpers.
Turn raw GitHub REST payloads into normalize.models records.
"""
from typing import Any, Dict, List, Optional

from correlate.template import determine_pr_type, extract_pr_metadata
from normalize.models import CommitRecord, PullRequestRecord

COMMIT_PATCH_LINES = 20
PR_PATCH_LINES = 15
NO_CHANGES = "No file changes detected."


def format_diff_summary(files: Optional[List[Dict[str, Any]]], patch_lines: int) -> str:
    """Summarize changed files for the LLM prompt.

    Each patch is cut to its first `patch_lines` lines to bound the prompt size.
    """
    if not files:
        return NO_CHANGES

    parts = [f"Files changed: {len(files)}\n\n"]
    for f in files:
        parts.append(f"File: {f.get('filename', '')}\n")
        parts.append(f"Status: {f.get('status', '')}\n")
        parts.append(f"Changes: +{f.get('additions') or 0} -{f.get('deletions') or 0}\n")
        patch = f.get("patch")
        if patch:
            preview = "\n".join(patch.split("\n")[:patch_lines])
            parts.append(f"Patch preview:\n{preview}\n")
        parts.append("\n---\n\n")
    return "".join(parts)


def branch_from_ref(ref: str) -> str:
    """refs/heads/main -> main; anything else is returned unchanged."""
    ref = ref or ""
    return ref[len("refs/heads/"):] if ref.startswith("refs/heads/") else ref


def normalize_commit(commit: Dict[str, Any], comparison: Dict[str, Any], repository: str, ref: str) -> CommitRecord:
    """Build a CommitRecord from GET /commits/{sha} and GET /compare/{sha}~1...{sha}."""
    details = commit.get("commit") or {}
    author = details.get("author") or {}
    stats = commit.get("stats") or {}
    return CommitRecord(
        sha=commit.get("sha", ""),
        repository=repository,
        branch=branch_from_ref(ref),
        author=author.get("name") or "",
        author_email=author.get("email") or "",
        message=details.get("message") or "",
        timestamp=author.get("date"),
        files_changed=len(commit.get("files") or []),
        additions=int(stats.get("additions") or 0),
        deletions=int(stats.get("deletions") or 0),
        diff=format_diff_summary((comparison or {}).get("files"), COMMIT_PATCH_LINES),
        url=commit.get("html_url") or "",
    )


def normalize_pull_request(pr: Dict[str, Any], files: List[Dict[str, Any]], commits: List[Dict[str, Any]], repository: str) -> PullRequestRecord:
    """Build a PullRequestRecord from the PR, its files and its commits."""
    body = pr.get("body") or ""
    head = pr.get("head") or {}
    base = pr.get("base") or {}
    source_branch = head.get("ref") or ""
    return PullRequestRecord(
        number=int(pr.get("number") or 0),
        title=pr.get("title") or "",
        body=body,
        type=determine_pr_type(source_branch, body),
        source_branch=source_branch,
        target_branch=base.get("ref") or "",
        author=(pr.get("user") or {}).get("login") or "",
        merged_by=(pr.get("merged_by") or {}).get("login") or "Unknown",
        merged_at=pr.get("merged_at"),
        repository=repository,
        files_changed=len(files or []),
        additions=int(pr.get("additions") or 0),
        deletions=int(pr.get("deletions") or 0),
        commits=len(commits or []),
        diff=format_diff_summary(files, PR_PATCH_LINES),
        url=pr.get("html_url") or "",
        metadata=extract_pr_metadata(body),
    )
