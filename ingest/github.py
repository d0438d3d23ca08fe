"""
GitHub REST client for the commit and merge-request loggers.
Read-only; every request goes through the retry policy and non-200 answers raise GitHubError.
"""
import logging
from typing import Any, Dict, List, Optional

import requests

from errors import GitHubError
from normalize.models import CommitRecord, PullRequestRecord
from normalize.util import normalize_commit, normalize_pull_request
from storage.retry import RetryPolicy

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


class GitHubClient:
    """Fetch commit and pull request payloads for one repository ("owner/repo")."""

    def __init__(self, token: str, repository: str, base_url: str = None, retry: Optional[RetryPolicy] = None, session: Optional[requests.Session] = None):
        if not repository or "/" not in repository:
            raise ValueError(f"repository must look like 'owner/repo', got {repository!r}")
        self.token = token
        self.repository = repository
        self.owner, self.repo = repository.split("/", 1)
        self.base_url = (base_url or "https://api.github.com").rstrip("/")
        self.headers = {"Accept": "application/vnd.github+json"}
        if self.token:
            self.headers["Authorization"] = f"Bearer {self.token}"
        self.retry = retry or RetryPolicy()
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        return f"{self.base_url}/repos/{self.owner}/{self.repo}/{path}"

    def _get_once(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        resp = self.session.get(url, headers=self.headers, params=params or {}, timeout=DEFAULT_TIMEOUT)
        if resp.status_code != 200:
            try:
                message = (resp.json() or {}).get("message", "")
            except ValueError:
                message = resp.text
            raise GitHubError(resp.status_code, url, message)
        return resp.json()

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = self._url(path)
        return self.retry.run(lambda: self._get_once(url, params), label=f"GET {path}")

    def _get_paginated(self, path: str, per_page: int = 100) -> List[Dict[str, Any]]:
        page = 1
        items: List[Dict[str, Any]] = []
        while True:
            data = self._get(path, {"page": page, "per_page": per_page})
            items.extend(data)
            if len(data) < per_page:
                break
            page += 1
        return items

    def get_commit(self, sha: str) -> Dict[str, Any]:
        return self._get(f"commits/{sha}")

    def compare_commits(self, base: str, head: str) -> Dict[str, Any]:
        return self._get(f"compare/{base}...{head}")

    def get_pull_request(self, number: int) -> Dict[str, Any]:
        return self._get(f"pulls/{number}")

    def list_pull_request_files(self, number: int) -> List[Dict[str, Any]]:
        return self._get_paginated(f"pulls/{number}/files")

    def list_pull_request_commits(self, number: int) -> List[Dict[str, Any]]:
        return self._get_paginated(f"pulls/{number}/commits")

    def commit_record(self, sha: str, ref: str) -> Optional[CommitRecord]:
        """Normalized record for `sha`, or None when there is no commit to log."""
        if not sha:
            logger.warning("No commit SHA available, nothing to log")
            return None
        logger.debug("Fetching commit %s from %s", sha, self.repository)
        commit = self.get_commit(sha)
        comparison = self.compare_commits(f"{commit.get('sha', sha)}~1", commit.get("sha", sha))
        record = normalize_commit(commit, comparison, self.repository, ref)
        logger.debug("Fetched commit %s: %d files, +%d -%d", record.short_sha, record.files_changed, record.additions, record.deletions)
        return record

    def pull_request_record(self, number: Optional[int]) -> Optional[PullRequestRecord]:
        """Normalized record for PR `number`, or None when no PR number was supplied."""
        if not number:
            logger.warning("No PR_NUMBER found in environment")
            return None
        logger.debug("Fetching PR #%s from %s", number, self.repository)
        pr = self.get_pull_request(number)
        files = self.list_pull_request_files(number)
        commits = self.list_pull_request_commits(number)
        record = normalize_pull_request(pr, files, commits, self.repository)
        logger.debug("Fetched PR #%d: %d files, %d commits, type %s", record.number, record.files_changed, record.commits, record.type)
        return record
