"""
Pipeline orchestrators: record -> narrative -> sheet row.
Each function returns the appended entry, or None when there was no event to log.
Failures from GitHub or Sheets propagate to the caller.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Optional

from normalize.models import DocumentationRequest
from storage.tables import (
    COMMIT_LOG,
    DOCUMENTATION_LOG,
    MERGE_REQUEST_LOG,
    CommitEntry,
    DocumentationEntry,
    MergeRequestEntry,
    TableSpec,
)

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def log_commit(github, narrator, appender, sha: str, ref: str, table: TableSpec = COMMIT_LOG) -> Optional[CommitEntry]:
    logger.info("Fetching commit information...")
    record = github.commit_record(sha, ref)
    if record is None:
        logger.info("No commit data found, skipping")
        return None

    logger.info("Processing commit %s by %s", record.short_sha, record.author)
    logger.info("Generating AI explanation...")
    explanation = narrator.explain_commit(record)

    entry = CommitEntry(record=record, explanation=explanation, logged_at=_now())
    logger.info('Logging to sheet "%s"...', table.name)
    appender.append_row(table, entry)
    logger.info("Successfully logged commit %s", record.short_sha)
    return entry


def log_merge_request(github, narrator, appender, pr_number: Optional[int], table: TableSpec = MERGE_REQUEST_LOG) -> Optional[MergeRequestEntry]:
    logger.info("Fetching pull request information...")
    record = github.pull_request_record(pr_number)
    if record is None:
        logger.info("No pull request data found, skipping")
        return None

    logger.info("Processing PR #%d: %s", record.number, record.title)
    logger.info("Type: %s | Branch: %s -> %s", record.type, record.source_branch, record.target_branch)
    logger.info("Generating AI analysis...")
    analysis = narrator.analyze_merge_request(record)

    entry = MergeRequestEntry(record=record, analysis=analysis, logged_at=_now())
    logger.info('Logging to sheet "%s"...', table.name)
    appender.append_row(table, entry)
    logger.info("Successfully logged PR #%d", record.number)
    return entry


def log_documentation(narrator, appender, request: DocumentationRequest, info, table: TableSpec = DOCUMENTATION_LOG) -> DocumentationEntry:
    """Generate documentation from gathered repository context and log it."""
    logger.info("Generating %s documentation for %s", request.type, request.repository)
    start = time.monotonic()
    content = narrator.generate_documentation(request, info)
    generation_time_ms = int((time.monotonic() - start) * 1000)
    logger.info("Documentation generated in %dms", generation_time_ms)

    entry = DocumentationEntry(
        logged_at=_now(),
        repository=request.repository,
        type=request.type,
        format=request.format,
        triggered_by=request.triggered_by,
        prompt=request.prompt,
        include_code_analysis=request.include_code_analysis,
        content=content,
        # whitespace-delimited words; leading and trailing whitespace adds nothing
        word_count=len(content.split()),
        generation_time_ms=generation_time_ms,
    )
    logger.info('Logging to sheet "%s"...', table.name)
    appender.append_row(table, entry)
    return entry
