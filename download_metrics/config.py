"""Runtime settings resolved from the environment.

Values come from environment variables; a ``.env`` file in the working
directory is loaded first by :func:`load_settings` without overriding
variables that are already set.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigError
from .fetcher import DEFAULT_IMPERSONATE
from .paginator import DEFAULT_MAX_PAGES


def _split_repos(raw: str) -> List[str]:
    return [r.strip() for r in raw.split(",") if r.strip()]


def _number(env: Mapping[str, str], key: str, cast: Callable[[str], Any], default: Any) -> Any:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError:
        raise ConfigError([key], "invalid settings") from None


@dataclass
class Settings:
    github_token: Optional[str] = None
    github_org: Optional[str] = None
    github_repos: List[str] = field(default_factory=list)

    pushgateway_url: Optional[str] = None
    pushgateway_username: Optional[str] = None
    pushgateway_password: Optional[str] = None

    max_pages: int = DEFAULT_MAX_PAGES
    qps: float = 2.0
    request_timeout: float = 20.0
    impersonate: str = DEFAULT_IMPERSONATE
    max_workers: int = 1

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            github_token=env.get("GITHUB_TOKEN") or None,
            github_org=env.get("GITHUB_ORG") or None,
            github_repos=_split_repos(env.get("GITHUB_REPOS", "")),
            pushgateway_url=env.get("PUSHGATEWAY_URL") or None,
            pushgateway_username=env.get("PUSHGATEWAY_USERNAME") or None,
            pushgateway_password=env.get("PUSHGATEWAY_PASSWORD") or None,
            max_pages=_number(env, "MAX_PAGES", int, DEFAULT_MAX_PAGES),
            qps=_number(env, "PAGE_QPS", float, 2.0),
            request_timeout=_number(env, "REQUEST_TIMEOUT", float, 20.0),
            impersonate=env.get("IMPERSONATE") or DEFAULT_IMPERSONATE,
            max_workers=_number(env, "MAX_WORKERS", int, 1),
        )

    def check_limits(self) -> None:
        """Raise ConfigError naming every numeric setting out of range."""
        invalid = []
        if self.max_pages < 0:
            invalid.append("MAX_PAGES")
        if self.request_timeout <= 0:
            invalid.append("REQUEST_TIMEOUT")
        if self.max_workers < 1:
            invalid.append("MAX_WORKERS")
        if invalid:
            raise ConfigError(invalid, "invalid settings")

    def validate(self, require_push: bool = True) -> None:
        """Raise ConfigError naming every missing required setting."""
        missing = []
        if not self.github_token:
            missing.append("GITHUB_TOKEN")
        if not self.github_org:
            missing.append("GITHUB_ORG")
        if not self.github_repos:
            missing.append("GITHUB_REPOS")
        if require_push and not self.pushgateway_url:
            missing.append("PUSHGATEWAY_URL")
        if missing:
            raise ConfigError(missing)
        self.check_limits()


def load_settings(dotenv_path: Optional[str] = None) -> Settings:
    load_dotenv(dotenv_path, override=False)
    return Settings.from_env()
