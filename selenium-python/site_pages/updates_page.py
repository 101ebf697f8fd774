from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from datetime import datetime, timezone

from selenium.webdriver.common.by import By
from selenium.webdriver.common.keys import Keys

from site_pages.base_page import BasePage, ci_contains
from site_pages.fragments import FooterFragment, HeaderFragment

logger = logging.getLogger(__name__)

DATE_FORMATS = ("%B %d, %Y", "%b %d, %Y", "%d %B %Y", "%d %b %Y", "%m/%d/%Y", "%Y-%m-%d", "%B %Y")
ORDER_SAMPLE = 5


@dataclass
class UpdateCard:
    date: str
    title: str
    summary: str


def parse_update_date(text: str | None) -> datetime | None:
    """Parse an ISO ``datetime`` attribute or a human date; naive UTC, or None."""
    s = " ".join((text or "").split())
    if not s:
        return None
    try:
        dt = datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        dt = None
        cleaned = re.sub(r"(\d)(st|nd|rd|th)\b", r"\1", s)
        for fmt in DATE_FORMATS:
            try:
                dt = datetime.strptime(cleaned, fmt)
                break
            except ValueError:
                continue
        if dt is None:
            return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def is_reverse_chronological(dates: list[datetime]) -> bool:
    if not dates:
        return False
    return all(nxt <= prev for prev, nxt in zip(dates, dates[1:]))


def parse_metric_value(text: str | None) -> int:
    m = re.match(r"\s*(-?\d+)", (text or "").replace(",", ""))
    return int(m.group(1)) if m else 0


def missing_crew(crew: list[dict], expected: list[tuple[str, str]]) -> list[str]:
    """Expected (role, name) pairs with no matching crew entry; matching is case-insensitive substring."""
    missing = []
    for role, name in expected:
        if not any(role.lower() in m["role"].lower() and name.lower() in m["name"].lower() for m in crew):
            missing.append(f"{role} - {name}")
    return missing


class UpdatesPage(BasePage):
    path = "/updates"

    FEED = [
        (By.CSS_SELECTOR, "[data-testid='updates-feed'], .updates-feed, .news-feed"),
        (By.CSS_SELECTOR, "main #updates, main .updates, main"),
    ]
    CARDS = [
        (By.CSS_SELECTOR, "[data-testid='update-card'], .update-card, .news-item"),
        (By.CSS_SELECTOR, "main article, .item"),
    ]
    CARD_DATE = [(By.CSS_SELECTOR, "[data-testid='update-date'], .date, time, .label")]
    CARD_TITLE = [(By.CSS_SELECTOR, "[data-testid='update-title'], .title, h2, h3")]
    CARD_SUMMARY = [(By.CSS_SELECTOR, "[data-testid='update-summary'], .summary, .excerpt, p")]
    CARD_LINK = [(By.CSS_SELECTOR, "a[href]"), (By.CSS_SELECTOR, "[data-testid='update-title']")]
    SEARCH = [(By.CSS_SELECTOR, "[data-testid='search-updates'], input[type='search'], input[placeholder*='earch'], input[name*='search']")]
    SEARCH_RESULTS = [(By.CSS_SELECTOR, "[data-testid='search-results'], .search-results, .results-container")]
    NO_RESULTS = [(By.CSS_SELECTOR, ".no-results, .no-matches, .empty-state")]
    CATEGORY_FILTER = [(By.CSS_SELECTOR, "[data-testid='category-filter'], .category-filter, .filter-options")]
    ACTIVE_FILTER = [(By.CSS_SELECTOR, "[aria-selected='true'], [aria-pressed='true'], .active, .selected")]
    STATS_PANEL = [(By.CSS_SELECTOR, "[data-testid='statistics-panel'], .statistics-panel, .stats-container")]
    STAT_ITEMS = [(By.CSS_SELECTOR, "[data-testid='metric'], .metric, .stat-item")]
    STAT_LABEL = [(By.CSS_SELECTOR, "[data-testid='metric-label'], .label, .name")]
    STAT_VALUE = [(By.CSS_SELECTOR, "[data-testid='metric-value'], .value, .number")]
    LOAD_MORE = [
        (By.CSS_SELECTOR, "[data-testid='load-more'], .load-more"),
        (By.XPATH, f"//*[self::button or self::a][{ci_contains('load more')} or {ci_contains('show more')}]"),
    ]
    SHARE = [(By.CSS_SELECTOR, "[data-testid='social-share'], .social-share, .share-buttons")]
    FULL_UPDATE = [
        (By.CSS_SELECTOR, "[data-testid='full-update'], .full-update, .update-detail"),
        (By.CSS_SELECTOR, "main article, main"),
    ]
    MEDIA = [(By.CSS_SELECTOR, "img, video, iframe, [data-testid='media']")]
    CREW = [(By.CSS_SELECTOR, "[data-testid='crew'], .crew-section, .team-members")]
    CREW_ITEMS = [(By.CSS_SELECTOR, "[data-testid='crew-member'], .crew-member, .team-member")]
    CREW_ROLE = [(By.CSS_SELECTOR, "[data-testid='role'], .role, .position")]
    CREW_NAME = [(By.CSS_SELECTOR, "[data-testid='name'], .name, .member-name")]
    DETAILS = [(By.CSS_SELECTOR, "[data-testid='mission-details'], .mission-details, .details-grid")]
    DETAIL_ITEMS = [(By.CSS_SELECTOR, "[data-testid='detail'], .detail-item, .info-row")]
    DETAIL_LABEL = [(By.CSS_SELECTOR, "[data-testid='label'], .label, .field")]
    DETAIL_VALUE = [(By.CSS_SELECTOR, "[data-testid='value'], .value, .info")]

    def __init__(self, driver, base_url: str, timeout: int = 15):
        super().__init__(driver, base_url, timeout)
        self.header = HeaderFragment(self)
        self.footer = FooterFragment(self)

    def navigate(self):
        self.open()
        self.wait_for_app_content()
        self.is_visible(self.CARDS, timeout=self.timeout)
        return self

    # feed

    def is_feed_visible(self) -> bool:
        return self.is_visible(self.FEED, timeout=5)

    def cards(self):
        return self.find_visible(self.CARDS)

    def card_count(self) -> int:
        return len(self.cards())

    def card_info(self, index: int = 0) -> UpdateCard:
        cards = self.cards()
        if index >= len(cards):
            raise AssertionError(f"Only {len(cards)} update cards, wanted #{index}")
        card = cards[index]
        return UpdateCard(
            date=self.text_of(self.CARD_DATE, card),
            title=self.text_of(self.CARD_TITLE, card),
            summary=self.text_of(self.CARD_SUMMARY, card),
        )

    def card_dates(self, limit: int = ORDER_SAMPLE) -> list[datetime]:
        dates = []
        for card in self.cards()[:limit]:
            el = self.find_first(self.CARD_DATE, card)
            if el is None:
                continue
            raw = el.get_attribute("datetime") or el.text or el.get_attribute("textContent")
            dt = parse_update_date(raw)
            if dt is not None:
                dates.append(dt)
        return dates

    def are_updates_reverse_chronological(self) -> bool:
        if self.card_count() < 2:
            return True
        dates = self.card_dates()
        logger.info("First update dates: %s", [d.date().isoformat() for d in dates])
        return is_reverse_chronological(dates)

    def find_update_by_keyword(self, keyword: str) -> bool:
        k = keyword.lower()
        return any(k in (c.text or "").lower() for c in self.cards())

    # search and filters

    def has_search(self) -> bool:
        return self.is_visible(self.SEARCH)

    def search(self, term: str) -> None:
        field = self.find_first(self.SEARCH)
        if field is None:
            raise AssertionError("No search field on updates page")
        field.clear()
        field.send_keys(term)
        field.send_keys(Keys.ENTER)
        time.sleep(0.5)

    def search_results_count(self) -> int:
        root = self.find_first(self.SEARCH_RESULTS)
        if root is None:
            return self.card_count()
        return self.count(self.CARDS, root)

    def no_results_message(self) -> str:
        return self.text_of(self.NO_RESULTS)

    def has_category_filter(self) -> bool:
        return self.is_visible(self.CATEGORY_FILTER)

    def filter_by_category(self, name: str) -> None:
        root = self.find_first(self.CATEGORY_FILTER)
        btn = self.find_first([(By.XPATH, f".//*[self::button or self::a or self::li][{ci_contains(name)}]")], root) if root is not None else None
        if btn is None:
            raise AssertionError(f"Category {name!r} not found")
        self.click(btn)
        time.sleep(0.5)

    def active_filter(self) -> str:
        root = self.find_first(self.CATEGORY_FILTER)
        return self.text_of(self.ACTIVE_FILTER, root) if root is not None else ""

    # detail

    def open_update(self, index: int = 0) -> None:
        cards = self.cards()
        if index >= len(cards):
            raise AssertionError(f"Only {len(cards)} update cards, wanted #{index}")
        link = self.find_first(self.CARD_LINK, cards[index])
        self.click(link if link is not None else cards[index])
        self.wait_ready()
        self.wait_for_app_content()

    def is_full_update_visible(self) -> bool:
        return self.is_visible(self.FULL_UPDATE, timeout=5)

    def full_update_text(self) -> str:
        return self.text_of(self.FULL_UPDATE)

    def has_multimedia(self) -> bool:
        root = self.find_first(self.FULL_UPDATE)
        return root is not None and self.count(self.MEDIA, root) > 0

    def statistics(self) -> dict[str, int]:
        root = self.find_first(self.STATS_PANEL)
        if root is None:
            return {}
        metrics = {}
        for item in self.find_all(self.STAT_ITEMS, root):
            label = self.text_of(self.STAT_LABEL, item)
            if label:
                metrics[label.strip().lower()] = parse_metric_value(self.text_of(self.STAT_VALUE, item))
        return metrics

    def has_load_more(self) -> bool:
        return self.is_visible(self.LOAD_MORE)

    def load_more(self) -> None:
        btn = self.find_first(self.LOAD_MORE)
        if btn is None:
            raise AssertionError("No load more control on updates page")
        self.click(btn)
        time.sleep(1)

    def social_share_options(self) -> list[str]:
        root = self.find_first(self.SHARE)
        if root is None:
            return []
        options = []
        for b in root.find_elements(By.CSS_SELECTOR, "a, button"):
            platform = b.get_attribute("aria-label") or b.text or b.get_attribute("title") or ""
            if platform.strip():
                options.append(platform.strip().lower())
        return options

    def has_crew_section(self) -> bool:
        return self.count(self.CREW) > 0

    def crew_members(self) -> list[dict]:
        """Every crew entry in the update, including ones missing a role or a name."""
        root = self.find_first(self.CREW)
        if root is None:
            return []
        crew = []
        for item in self.find_all(self.CREW_ITEMS, root):
            role, name = self.text_of(self.CREW_ROLE, item), self.text_of(self.CREW_NAME, item)
            if role or name:
                crew.append({"role": role, "name": name})
        return crew

    def has_mission_details(self) -> bool:
        return self.count(self.DETAILS) > 0

    def mission_details(self) -> dict[str, str]:
        root = self.find_first(self.DETAILS)
        if root is None:
            return {}
        details = {}
        for item in self.find_all(self.DETAIL_ITEMS, root):
            label = self.text_of(self.DETAIL_LABEL, item)
            if label:
                details[label.lower()] = self.text_of(self.DETAIL_VALUE, item)
        return details
