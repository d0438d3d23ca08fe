"""
Process configuration.
Settings are read from the environment (optionally seeded from a .env file) once at
startup and handed to every component constructor.
"""

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from dotenv import dotenv_values

from errors import ConfigurationError, InvalidSettingError
from storage.retry import DEFAULT_BASE_DELAY, DEFAULT_MAX_ATTEMPTS

REQUIRED_VARIABLES = (
    "OPENAI_API_KEY",
    "GOOGLE_SHEETS_SPREADSHEET_ID",
    "GOOGLE_SERVICE_ACCOUNT_EMAIL",
    "GOOGLE_PRIVATE_KEY",
)

DEFAULT_OPENAI_MODEL = "gpt-4"
DEFAULT_SHEET_NAME = "CommitLog"
DEFAULT_LOG_LEVEL = "info"
DEFAULT_GITHUB_API_URL = "https://api.github.com"


@dataclass(frozen=True)
class OpenAISettings:
    api_key: str = ""
    model: str = DEFAULT_OPENAI_MODEL


@dataclass(frozen=True)
class SheetsSettings:
    spreadsheet_id: str = ""
    service_account_email: str = ""
    private_key: str = ""
    sheet_name: str = DEFAULT_SHEET_NAME


@dataclass(frozen=True)
class GitHubSettings:
    token: str = ""
    repository: str = ""
    sha: str = ""
    ref: str = ""
    actor: str = ""
    pr_number_raw: str = ""
    api_url: str = DEFAULT_GITHUB_API_URL

    @property
    def pr_number(self) -> Optional[int]:
        """PR_NUMBER as an int; parsed on use so only merge-request runs reject a bad value."""
        return _parse_pr_number(self.pr_number_raw)


@dataclass(frozen=True)
class RetrySettings:
    """Optional overrides for the per-call-site retry defaults; None keeps the default."""

    max_attempts: Optional[int] = None
    base_delay: Optional[float] = None

    def attempts(self, default: int = DEFAULT_MAX_ATTEMPTS) -> int:
        return self.max_attempts if self.max_attempts is not None else default

    def delay(self, default: float = DEFAULT_BASE_DELAY) -> float:
        return self.base_delay if self.base_delay is not None else default


@dataclass(frozen=True)
class Settings:
    openai: OpenAISettings = field(default_factory=OpenAISettings)
    sheets: SheetsSettings = field(default_factory=SheetsSettings)
    github: GitHubSettings = field(default_factory=GitHubSettings)
    retry: RetrySettings = field(default_factory=RetrySettings)
    log_level: str = DEFAULT_LOG_LEVEL
    github_actions: bool = False

    def missing_variables(self) -> list:
        values = {
            "OPENAI_API_KEY": self.openai.api_key,
            "GOOGLE_SHEETS_SPREADSHEET_ID": self.sheets.spreadsheet_id,
            "GOOGLE_SERVICE_ACCOUNT_EMAIL": self.sheets.service_account_email,
            "GOOGLE_PRIVATE_KEY": self.sheets.private_key,
        }
        return [name for name in REQUIRED_VARIABLES if not values[name]]

    def validate(self) -> "Settings":
        """Raise ConfigurationError listing every missing required variable."""
        missing = self.missing_variables()
        if missing:
            raise ConfigurationError(missing)
        return self


def _optional_number(name: str, raw: Optional[str], kind, expected: str):
    if raw is None or not raw.strip():
        return None
    try:
        return kind(raw)
    except ValueError:
        raise InvalidSettingError(name, raw, expected)


def _parse_pr_number(raw: Optional[str]) -> Optional[int]:
    return _optional_number("PR_NUMBER", raw, int, "an integer")


def _read_environment(environ: Optional[Mapping[str, str]], dotenv_path: Optional[str]) -> dict:
    """Merge .env values under the real environment; the environment always wins."""
    env = {}
    if dotenv_path is not None or environ is None:
        env.update({k: v for k, v in dotenv_values(dotenv_path).items() if v is not None})
    env.update(os.environ if environ is None else environ)
    return env


def load_settings(environ: Optional[Mapping[str, str]] = None, dotenv_path: Optional[str] = None) -> Settings:
    """Build Settings from `environ` (default os.environ plus a .env file when present).

    No validation happens here so that sub-commands which need only part of the
    configuration can still start; call Settings.validate() before touching the network.
    """
    env = _read_environment(environ, dotenv_path)
    get = env.get
    return Settings(
        openai=OpenAISettings(
            api_key=get("OPENAI_API_KEY", ""),
            model=get("OPENAI_MODEL") or DEFAULT_OPENAI_MODEL,
        ),
        sheets=SheetsSettings(
            spreadsheet_id=get("GOOGLE_SHEETS_SPREADSHEET_ID", ""),
            service_account_email=get("GOOGLE_SERVICE_ACCOUNT_EMAIL", ""),
            private_key=(get("GOOGLE_PRIVATE_KEY") or "").replace("\\n", "\n"),
            sheet_name=get("SHEET_NAME") or DEFAULT_SHEET_NAME,
        ),
        github=GitHubSettings(
            token=get("GITHUB_TOKEN", ""),
            repository=get("GITHUB_REPOSITORY", ""),
            sha=get("GITHUB_SHA", ""),
            ref=get("GITHUB_REF", ""),
            actor=get("GITHUB_ACTOR", ""),
            pr_number_raw=get("PR_NUMBER", ""),
            api_url=(get("GITHUB_API_URL") or DEFAULT_GITHUB_API_URL).rstrip("/"),
        ),
        retry=RetrySettings(
            max_attempts=_optional_number("LOGGER_MAX_RETRIES", get("LOGGER_MAX_RETRIES"), int, "an integer"),
            base_delay=_optional_number("LOGGER_BACKOFF_BASE", get("LOGGER_BACKOFF_BASE"), float, "a number of seconds"),
        ),
        log_level=(get("LOG_LEVEL") or DEFAULT_LOG_LEVEL).lower(),
        github_actions=bool(get("GITHUB_ACTIONS")),
    )


def require_settings(environ: Optional[Mapping[str, str]] = None, dotenv_path: Optional[str] = None) -> Settings:
    """load_settings + validate in one step."""
    return load_settings(environ, dotenv_path).validate()


__all__ = [
    "REQUIRED_VARIABLES",
    "OpenAISettings",
    "SheetsSettings",
    "GitHubSettings",
    "RetrySettings",
    "Settings",
    "load_settings",
    "require_settings",
]
