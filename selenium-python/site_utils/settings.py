"""Environment-driven settings for the e2e suite.

Values come from the process environment, optionally seeded from a ``.env``
file at the repository root (see ``.env.example``).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from site_utils.errors import SiteConfigError

DEFAULT_BASE_URL = "https://www.spacex.com"
TARGETS = ("local", "browserstack")
ENV_FILE = Path(__file__).resolve().parents[2] / ".env"


def env_flag(key: str, default: bool = False) -> bool:
    v = os.getenv(key)
    if v is None or not v.strip():
        return default
    return v.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(key: str, default: int) -> int:
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        raise SiteConfigError(f"{key} must be an integer, got {raw!r}") from None


def _parse_window_size(raw: str) -> tuple[int, int]:
    parts = raw.lower().replace(" ", "").split("x")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise SiteConfigError(f"WINDOW_SIZE must look like 1280x900, got {raw!r}")
    return int(parts[0]), int(parts[1])


def has_browserstack_credentials() -> bool:
    return bool(os.getenv("BROWSERSTACK_USERNAME")) and bool(os.getenv("BROWSERSTACK_ACCESS_KEY"))


@dataclass
class Settings:
    """Resolved configuration for one test session."""

    base_url: str = DEFAULT_BASE_URL
    target: str = ""
    browser_name: str = "Chrome"
    headless: bool = True
    timeout: int = 15
    window_size: tuple[int, int] = (1280, 900)
    link_check_limit: int = 40
    allow_submissions: bool = False

    @property
    def browser_enabled(self) -> bool:
        return self.target in TARGETS

    def url(self, path: str = "") -> str:
        if path.startswith(("http://", "https://")):
            return path
        if path and not path.startswith("/"):
            path = "/" + path
        return self.base_url + path

    @classmethod
    def from_env(cls, load_file: bool = True) -> Settings:
        """Build settings from the environment, reading ``.env`` first when present."""
        if load_file:
            load_dotenv(dotenv_path=ENV_FILE, override=False)

        base_url = os.getenv("UI_BASE_URL") or os.getenv("TEST_URL") or DEFAULT_BASE_URL
        target = (os.getenv("E2E_TARGET") or "").strip().lower()
        if target and target not in TARGETS:
            raise SiteConfigError(f"E2E_TARGET must be one of {', '.join(TARGETS)}, got {target!r}")
        if not target and has_browserstack_credentials():
            target = "browserstack"

        headless = env_flag("HEADLESS", True)
        if env_flag("SHOW_BROWSER"):
            headless = False

        window = os.getenv("WINDOW_SIZE")
        return cls(
            base_url=base_url.rstrip("/"),
            target=target,
            browser_name=os.getenv("BROWSER_NAME", "Chrome"),
            headless=headless,
            timeout=_env_int("UI_TIMEOUT", 15),
            window_size=_parse_window_size(window) if window and window.strip() else (1280, 900),
            link_check_limit=_env_int("LINK_CHECK_LIMIT", 40),
            allow_submissions=env_flag("ALLOW_FORM_SUBMISSIONS"),
        )
