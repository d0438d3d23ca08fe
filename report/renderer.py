"""
Prompt renderer: build the user prompts sent to the LLM from normalized records.
Prompts are Jinja2 templates under report/templates so wording can change without code changes.
"""

import os
from functools import lru_cache

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), "templates")

COMMIT_TEMPLATE = "commit_prompt.j2"
PULL_REQUEST_TEMPLATE = "pr_prompt.j2"
DOCUMENTATION_TEMPLATE = "documentation_prompt.j2"


@lru_cache(maxsize=1)
def _environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(TEMPLATE_DIR),
        autoescape=select_autoescape(["html", "xml"]),
        undefined=StrictUndefined,
    )


def render_template(name: str, **context) -> str:
    return _environment().get_template(name).render(**context)


def render_commit_prompt(record) -> str:
    """Prompt for a single commit (CommitRecord)."""
    return render_template(COMMIT_TEMPLATE, record=record)


def render_pull_request_prompt(record) -> str:
    """Prompt for a merged pull request (PullRequestRecord)."""
    return render_template(PULL_REQUEST_TEMPLATE, record=record)


def render_documentation_prompt(request, info) -> str:
    """Prompt for the documentation generator (DocumentationRequest + RepositoryInfo)."""
    return render_template(DOCUMENTATION_TEMPLATE, request=request, info=info)
