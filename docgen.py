"""
Documentation generator mode.
Gathers local repository context, asks the LLM for a document and logs it to the
Documentation sheet.
"""

import argparse
import logging
import os

from errors import UsageError
from ingest.repository import gather_repository_info
from normalize.models import DocumentationRequest
from pipeline import log_documentation

logger = logging.getLogger(__name__)

REQUIRED_OPTIONS = ("prompt", "repository")


def str_to_bool(value) -> bool:
    """'true'/'false' (any case) -> bool; anything else is rejected."""
    if isinstance(value, bool):
        return value
    lowered = str(value).strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise argparse.ArgumentTypeError(f"expected 'true' or 'false', got {value!r}")


def add_docs_arguments(parser: argparse.ArgumentParser) -> None:
    # --prompt/--repository are checked in build_request so the error reaches the CI annotation
    parser.add_argument("--prompt", type=str, default="", help="Instructions describing the documentation to generate")
    parser.add_argument("--repository", type=str, default="", help="Repository name (owner/repo) recorded with the document")
    parser.add_argument("--type", type=str, default="General", help="Documentation type, e.g. 'Developer Guide' (default: General)")
    parser.add_argument("--format", type=str, default="Markdown", help="Output format label (default: Markdown)")
    parser.add_argument("--triggered-by", type=str, default="", help="Who triggered the run (default: GITHUB_ACTOR or 'manual')")
    parser.add_argument(
        "--include-code",
        type=str_to_bool,
        nargs="?",
        const=True,
        default=False,
        help="Include a static code analysis summary: true/false (bare flag means true)",
    )
    parser.add_argument("--root", type=str, default=".", help="Repository checkout to inspect (default: current directory)")


def build_request(args, actor: str = "") -> DocumentationRequest:
    missing = [name for name in REQUIRED_OPTIONS if not (getattr(args, name, "") or "").strip()]
    if missing:
        raise UsageError(f"Missing required options: {', '.join('--' + m for m in missing)}")
    return DocumentationRequest(
        prompt=args.prompt,
        repository=args.repository,
        type=args.type,
        format=args.format,
        triggered_by=args.triggered_by or actor or "manual",
        include_code_analysis=bool(args.include_code),
    )


def run_docs(request: DocumentationRequest, root: str, narrator, appender):
    """Gather context, generate and log; returns the DocumentationEntry that was appended."""
    info = gather_repository_info(os.path.abspath(root), request.include_code_analysis)
    return log_documentation(narrator, appender, request, info)
