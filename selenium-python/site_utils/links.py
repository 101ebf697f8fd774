"""Link checking over plain HTTP with requests.

Each URL gets a HEAD first; servers that refuse HEAD (405/403/501) are retried
with a streamed GET so the body is never downloaded.
"""

from __future__ import annotations

import logging
import re
import urllib.parse
from dataclasses import dataclass
from html.parser import HTMLParser
from typing import Iterable

import requests

logger = logging.getLogger(__name__)

HEAD_REJECTED = {403, 405, 501}
SKIPPED_SCHEMES = ("mailto:", "tel:", "javascript:", "data:")
USER_AGENT = "Mozilla/5.0 (X11; Linux x86_64) site-e2e-link-check"


@dataclass
class LinkResult:
    url: str
    status: int | None
    ok: bool
    reason: str = ""


def normalize_url(url: str) -> str:
    # Drop fragments, lower-case scheme/host, collapse slashes, no trailing slash except root
    parsed = urllib.parse.urlsplit(url)
    path = re.sub(r"/+", "/", parsed.path or "/")
    if path.endswith("/") and path != "/":
        path = path.rstrip("/")
    return urllib.parse.urlunsplit((parsed.scheme.lower(), parsed.netloc.lower(), path, parsed.query, ""))


def same_host(u1: str, u2: str) -> bool:
    return urllib.parse.urlsplit(u1).netloc.lower() == urllib.parse.urlsplit(u2).netloc.lower()


def is_checkable(url: str | None) -> bool:
    if not url:
        return False
    u = url.strip().lower()
    if not u or u.startswith("#") or u.startswith(SKIPPED_SCHEMES):
        return False
    return u.startswith(("http://", "https://"))


class LinkParser(HTMLParser):
    """Collects absolute <a href> targets and <link rel=icon> hrefs from raw HTML."""

    def __init__(self, base_url: str):
        super().__init__()
        self.base_url = base_url
        self.links: list[str] = []
        self.icons: list[str] = []

    def handle_starttag(self, tag, attrs):
        attrs = dict(attrs)
        href = attrs.get("href")
        if not href:
            return
        if tag == "a":
            self.links.append(urllib.parse.urljoin(self.base_url, href))
        elif tag == "link" and "icon" in (attrs.get("rel") or "").lower().split():
            self.icons.append(urllib.parse.urljoin(self.base_url, href))


def _parse(html: str, base_url: str) -> LinkParser:
    parser = LinkParser(base_url)
    parser.feed(html or "")
    parser.close()
    return parser


def extract_links(html: str, base_url: str) -> list[str]:
    return [u for u in _parse(html, base_url).links if is_checkable(u)]


def icon_url(html: str, base_url: str) -> str:
    """The page's declared favicon, or /favicon.ico on its host."""
    icons = _parse(html, base_url).icons
    return icons[0] if icons else urllib.parse.urljoin(base_url, "/favicon.ico")


def _check_one(session: requests.Session, url: str, timeout: float) -> LinkResult:
    try:
        r = session.head(url, timeout=timeout, allow_redirects=True)
        if r.status_code in HEAD_REJECTED:
            r = session.get(url, timeout=timeout, allow_redirects=True, stream=True)
            r.close()
    except requests.RequestException as e:
        return LinkResult(url=url, status=None, ok=False, reason=type(e).__name__)
    return LinkResult(url=url, status=r.status_code, ok=r.status_code < 400, reason=r.reason or "")


def check_links(urls: Iterable[str], session: requests.Session | None = None, limit: int | None = 40, timeout: float = 10) -> list[LinkResult]:
    """Check unique checkable URLs, at most ``limit`` of them (``None`` for all)."""
    seen: set[str] = set()
    todo: list[str] = []
    for u in urls:
        if not is_checkable(u):
            continue
        key = normalize_url(u.strip())
        if key in seen:
            continue
        seen.add(key)
        todo.append(u.strip())
    if limit is not None:
        todo = todo[:limit]

    own_session = session is None
    if own_session:
        session = requests.Session()
        session.headers["User-Agent"] = USER_AGENT
    try:
        results = [_check_one(session, u, timeout) for u in todo]
    finally:
        if own_session:
            session.close()
    bad = broken_links(results)
    logger.info("Checked %d links, %d broken", len(results), len(bad))
    return results


def broken_links(results: Iterable[LinkResult]) -> list[LinkResult]:
    return [r for r in results if not r.ok]
