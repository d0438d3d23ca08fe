"""
CLI entry point. Wires the pipelines: GitHub -> normalize -> LLM narrative -> Google Sheets.

Exit status: 0 on success (including "nothing to log"), 1 on a runtime failure, 2 on a
usage error. Under GitHub Actions failures are also printed as ::error:: annotations.
"""

import argparse
import logging
import os
import sys
from dataclasses import replace
from typing import List, Optional

import docgen
from errors import UsageError
from ingest.github import GitHubClient
from pipeline import log_commit, log_merge_request
from report.narrator import NARRATIVE_BASE_DELAY, Narrator
from settings import Settings, load_settings
from storage.retry import DEFAULT_BASE_DELAY, DEFAULT_MAX_ATTEMPTS, RetryPolicy
from storage.sheets import SheetAppender, SheetsClient
from storage.tables import COMMIT_LOG

logger = logging.getLogger("commit_logger")

LOG_LEVELS = {"error": logging.ERROR, "warn": logging.WARNING, "warning": logging.WARNING, "info": logging.INFO, "debug": logging.DEBUG}
QUIET_LOGGERS = ("urllib3", "googleapiclient.discovery_cache", "openai", "httpx")


def configure_logging(level_name: str) -> None:
    level = LOG_LEVELS.get((level_name or "info").lower(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s [%(name)s] %(message)s", force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def _annotation(kind: str, message: str) -> str:
    escaped = str(message).replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
    return f"::{kind}::{escaped}"


def _under_actions(settings: Optional[Settings]) -> bool:
    # settings are None when loading them failed; fall back to the process environment
    if settings is None:
        return bool(os.environ.get("GITHUB_ACTIONS"))
    return settings.github_actions


def annotate(settings: Optional[Settings], kind: str, message: str) -> None:
    """Print a GitHub Actions workflow command when running under Actions."""
    if _under_actions(settings):
        print(_annotation(kind, message))


def _retry_policy(settings: Settings, base_delay: float) -> RetryPolicy:
    return RetryPolicy(settings.retry.attempts(DEFAULT_MAX_ATTEMPTS), settings.retry.delay(base_delay))


def _appender(settings: Settings) -> SheetAppender:
    return SheetAppender(SheetsClient.from_settings(settings.sheets), _retry_policy(settings, DEFAULT_BASE_DELAY))


def _narrator(settings: Settings) -> Narrator:
    return Narrator.from_settings(settings.openai, _retry_policy(settings, NARRATIVE_BASE_DELAY))


def _github(settings: Settings) -> GitHubClient:
    gh = settings.github
    return GitHubClient(gh.token, gh.repository, base_url=gh.api_url, retry=_retry_policy(settings, DEFAULT_BASE_DELAY))


def run_commit(settings: Settings, args) -> int:
    settings.validate()
    table = COMMIT_LOG.renamed(settings.sheets.sheet_name)
    log_commit(_github(settings), _narrator(settings), _appender(settings), settings.github.sha, settings.github.ref, table=table)
    return 0


def run_merge_request(settings: Settings, args) -> int:
    settings.validate()
    pr_number = settings.github.pr_number
    log_merge_request(_github(settings), _narrator(settings), _appender(settings), pr_number)
    return 0


def run_docs(settings: Settings, args) -> int:
    request = docgen.build_request(args, actor=settings.github.actor)
    settings.validate()
    entry = docgen.run_docs(request, args.root, _narrator(settings), _appender(settings))
    print(f"Documentation generated: {entry.word_count} words in {entry.generation_time_ms}ms")
    print(f'Check the "Documentation" sheet: https://docs.google.com/spreadsheets/d/{settings.sheets.spreadsheet_id}')
    annotate(settings, "notice", f"Documentation generated successfully ({entry.word_count} words in {entry.generation_time_ms}ms)")
    return 0


def run_check_sheets(settings: Settings, args) -> int:
    settings.validate()
    client = SheetsClient.from_settings(settings.sheets)
    policy = _retry_policy(settings, DEFAULT_BASE_DELAY)
    title = policy.run(client.spreadsheet_title, label="spreadsheet title")
    tabs = policy.run(client.sheet_titles, label="list sheets")
    print(f"Connected to spreadsheet: {title}")
    print("Sheets: " + (", ".join(tabs) if tabs else "(none)"))
    return 0


COMMANDS = {
    "commit": run_commit,
    "merge-request": run_merge_request,
    "docs": run_docs,
    "check-sheets": run_check_sheets,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="commit-logger", description="Log commits, merged pull requests and generated docs to Google Sheets with AI summaries.")
    parser.add_argument("--env-file", type=str, default=None, help="Path to a .env file (default: search for .env)")
    # retry knobs: CLI flags take precedence over LOGGER_MAX_RETRIES / LOGGER_BACKOFF_BASE
    parser.add_argument("--max-retries", type=int, default=None, help="Maximum attempts per external call (overrides LOGGER_MAX_RETRIES env)")
    parser.add_argument("--backoff-base", type=float, default=None, help="Base backoff seconds (overrides LOGGER_BACKOFF_BASE env)")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("commit", help="Log the commit in GITHUB_SHA to the commit sheet")
    sub.add_parser("merge-request", help="Log the merged pull request in PR_NUMBER to the Merge Request sheet")
    docs = sub.add_parser("docs", help="Generate documentation for the repository and log it")
    docgen.add_docs_arguments(docs)
    sub.add_parser("check-sheets", help="Verify the Google Sheets credentials and list the sheets")
    return parser


def _apply_retry_overrides(settings: Settings, args) -> Settings:
    retry = settings.retry
    if args.max_retries is not None:
        retry = replace(retry, max_attempts=args.max_retries)
    if args.backoff_base is not None:
        retry = replace(retry, base_delay=args.backoff_base)
    return replace(settings, retry=retry)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = None
    try:
        settings = _apply_retry_overrides(load_settings(dotenv_path=args.env_file), args)
        configure_logging(settings.log_level)
        logger.info("Starting %s", args.command)
        status = COMMANDS[args.command](settings, args)
        logger.info("%s completed successfully", args.command)
        return status
    except UsageError as exc:
        logger.error("%s", exc)
        annotate(settings, "error", f"{args.command} failed: {exc}")
        parser.print_usage(sys.stderr)
        return 2
    except Exception as exc:
        logger.error("Error in %s: %s", args.command, exc, exc_info=logger.isEnabledFor(logging.DEBUG))
        annotate(settings, "error", f"{args.command} failed: {exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
