"""
LLM narratives for commits, merged pull requests and generated documentation.

explain_commit and analyze_merge_request never raise: once retries are exhausted they
return a placeholder that embeds the error so the pipeline still writes its row.
generate_documentation raises, since a documentation row without a document is useless.
"""

import logging
from typing import Optional

from openai import OpenAI

from normalize.models import CommitRecord, DocumentationRequest, PullRequestRecord
from report.renderer import render_commit_prompt, render_documentation_prompt, render_pull_request_prompt
from settings import OpenAISettings
from storage.retry import RetryPolicy

logger = logging.getLogger(__name__)

TEMPERATURE = 0.3
COMMIT_MAX_TOKENS = 500
PULL_REQUEST_MAX_TOKENS = 600
DOCUMENTATION_MAX_TOKENS = 2000
NARRATIVE_MAX_ATTEMPTS = 3
NARRATIVE_BASE_DELAY = 2.0

COMMIT_SYSTEM_PROMPT = (
    "You are an expert software engineer who analyzes code commits. Provide clear, concise "
    "explanations of what changes were made and why they might be important. Focus on the "
    "business impact and technical significance."
)

PULL_REQUEST_SYSTEM_PROMPT = (
    "You are an expert software engineer who analyzes pull requests and merge requests. Provide "
    "clear, concise explanations of what changes were made, their business impact, and technical "
    "significance. Focus on the overall feature or improvement being delivered."
)

DOCUMENTATION_SYSTEM_PROMPT = (
    "You are an experienced technical writer who documents software projects. Write accurate, "
    "well-structured documentation using only the repository context you are given."
)


class Narrator:
    """Chat-completion calls with fixed system prompts per narrative kind."""

    def __init__(self, client, model: str, retry: Optional[RetryPolicy] = None):
        self.client = client
        self.model = model
        self.retry = retry or RetryPolicy(NARRATIVE_MAX_ATTEMPTS, NARRATIVE_BASE_DELAY)

    @classmethod
    def from_settings(cls, settings: OpenAISettings, retry: Optional[RetryPolicy] = None) -> "Narrator":
        return cls(OpenAI(api_key=settings.api_key), settings.model, retry=retry)

    def complete(self, system_prompt: str, user_prompt: str, max_tokens: int) -> str:
        """One chat completion; the stripped text of the first choice."""
        completion = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            max_tokens=max_tokens,
            temperature=TEMPERATURE,
        )
        content = completion.choices[0].message.content
        return (content or "").strip()

    def _narrate(self, system_prompt: str, user_prompt: str, max_tokens: int, label: str) -> str:
        return self.retry.run(lambda: self.complete(system_prompt, user_prompt, max_tokens), label=label)

    def explain_commit(self, record: CommitRecord) -> str:
        logger.debug("Generating AI explanation for commit %s", record.short_sha)
        try:
            explanation = self._narrate(COMMIT_SYSTEM_PROMPT, render_commit_prompt(record), COMMIT_MAX_TOKENS, f"explain commit {record.short_sha}")
        except Exception as exc:
            logger.error("Error generating AI explanation for commit %s: %s", record.short_sha, exc)
            return f"Error generating AI explanation: {exc}"
        logger.debug("AI explanation generated for commit %s", record.short_sha)
        return explanation

    def analyze_merge_request(self, record: PullRequestRecord) -> str:
        logger.debug("Generating AI analysis for PR #%d", record.number)
        try:
            analysis = self._narrate(PULL_REQUEST_SYSTEM_PROMPT, render_pull_request_prompt(record), PULL_REQUEST_MAX_TOKENS, f"analyze PR #{record.number}")
        except Exception as exc:
            logger.error("Error generating AI analysis for PR #%d: %s", record.number, exc)
            return f"Error generating AI analysis: {exc}"
        logger.debug("AI analysis generated for PR #%d", record.number)
        return analysis

    def generate_documentation(self, request: DocumentationRequest, info) -> str:
        logger.debug("Generating %s documentation for %s", request.type, request.repository)
        prompt = render_documentation_prompt(request, info)
        return self._narrate(DOCUMENTATION_SYSTEM_PROMPT, prompt, DOCUMENTATION_MAX_TOKENS, f"document {request.repository}")
