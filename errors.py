"""
Exception types shared across the logger pipelines.
"""

from typing import Iterable


class ConfigurationError(RuntimeError):
    """Required environment variables are missing."""

    def __init__(self, missing: Iterable[str]):
        self.missing = list(missing)
        super().__init__(f"Missing required environment variables: {', '.join(self.missing)}")


class UsageError(ValueError):
    """Command-line input is incomplete or malformed."""


class GitHubError(RuntimeError):
    """GitHub answered with a non-success status."""

    def __init__(self, status: int, url: str, message: str = ""):
        self.status = status
        self.url = url
        super().__init__(f"GitHub API {status} for {url}: {message}".rstrip(": "))


class SchemaMismatchError(ValueError):
    """A row does not line up with the header schema of its sheet."""


class InvalidSettingError(RuntimeError):
    """An environment variable is set but its value cannot be parsed."""

    def __init__(self, name: str, value: str, expected: str):
        self.name = name
        self.value = value
        super().__init__(f"Invalid value for {name}: {value!r} (expected {expected})")
