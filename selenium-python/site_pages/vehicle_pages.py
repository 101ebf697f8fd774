from __future__ import annotations

import logging
import re
import time

from selenium.webdriver.common.by import By

from site_pages.base_page import BasePage, ci_contains
from site_pages.fragments import FooterFragment, HeaderFragment, HeroFragment

logger = logging.getLogger(__name__)


def find_row(rows: list[str], field: str) -> str | None:
    f = field.strip().lower()
    for r in rows:
        if f in r.lower():
            return r
    return None


def row_has(rows: list[str], field: str, *details: str) -> bool:
    """True when some row mentions ``field`` and every one of ``details``."""
    f = field.strip().lower()
    wanted = [d.strip().lower() for d in details]
    for r in rows:
        low = " ".join(r.lower().split())
        if f in low and all(w in low for w in wanted):
            return True
    return False


def text_mentions(text: str, pattern: str) -> bool:
    return re.search(pattern, " ".join((text or "").split()), re.IGNORECASE) is not None


class VehiclePage(BasePage):
    """Common structure of the vehicle pages: headline, spec table, featured video."""

    HEADLINE = [(By.CSS_SELECTOR, "h1"), (By.CSS_SELECTOR, ".headline, .hero-title")]
    SPECS_SECTION = [
        (By.CSS_SELECTOR, "[data-section='specifications'], #specifications, #technical-specs"),
        (By.XPATH, f"//section[.//*[self::h2 or self::h3][{ci_contains('specifications')} or {ci_contains('overview')}]]"),
    ]
    SPEC_ROWS = [
        (By.CSS_SELECTOR, "tr"),
        (By.CSS_SELECTOR, ".spec-row, .specs-row, .table-row, .row"),
        (By.CSS_SELECTOR, "dl > div, li"),
    ]
    UNITS_TOGGLE = [
        (By.CSS_SELECTOR, "[aria-label*='Imperial/Metric'], .unit-toggle, .units-toggle"),
        (By.XPATH, f"//*[self::button or self::a or self::span][{ci_contains('metric')} or {ci_contains('imperial')}]"),
    ]
    VIDEO_TRIGGER = [
        (By.CSS_SELECTOR, ".featured-video-section, #video-section, .media-player, [aria-label*='Video']"),
        (By.XPATH, f"//*[self::button or self::a][{ci_contains('watch')} or {ci_contains('video', '@aria-label')}]"),
    ]
    VIDEO_PLAYER = [
        (By.CSS_SELECTOR, "iframe[title*='video player'], iframe[src*='youtube'], .video-modal, video"),
    ]

    def __init__(self, driver, base_url: str, timeout: int = 15):
        super().__init__(driver, base_url, timeout)
        self.header = HeaderFragment(self)
        self.footer = FooterFragment(self)
        self.hero = HeroFragment(self)

    def headline(self) -> str:
        return self.text_of(self.HEADLINE)

    def _specs_root(self):
        return self.find_first(self.SPECS_SECTION)

    def scroll_to_specifications(self) -> None:
        root = self._specs_root()
        if root is not None:
            self.scroll_into_view(root)
        else:
            self.scroll_down(1200)

    def spec_rows(self, root=None) -> list[str]:
        scope = root if root is not None else self._specs_root()
        rows = self.texts_of(self.SPEC_ROWS, scope)
        if not rows and scope is not None:
            rows = self.texts_of(self.SPEC_ROWS)
        return [" ".join(r.split()) for r in rows]

    def spec_row_text(self, field: str) -> str | None:
        return find_row(self.spec_rows(), field)

    def is_spec_detail_displayed(self, field: str, *details: str) -> bool:
        return row_has(self.spec_rows(), field, *details)

    def mentions(self, pattern: str) -> bool:
        return text_mentions(self.body_text(), pattern)

    def has_units_toggle(self) -> bool:
        return self.is_visible(self.UNITS_TOGGLE)

    def toggle_units(self) -> None:
        el = self.find_first(self.UNITS_TOGGLE)
        if el is None:
            raise AssertionError("No metric/imperial toggle on page")
        self.click(el)
        time.sleep(0.3)

    def click_featured_video(self) -> None:
        el = self.find_first(self.VIDEO_TRIGGER)
        if el is None:
            raise AssertionError("No featured video on page")
        self.click(el)

    def is_video_player_loaded(self, timeout: float = 10) -> bool:
        return self.is_visible(self.VIDEO_PLAYER, timeout=timeout)


class DragonPage(VehiclePage):
    path = "/vehicles/dragon"

    LANDING_SECTION = [
        (By.CSS_SELECTOR, "[data-section='landing-system'], #recovery, #landing"),
        (By.XPATH, f"//section[.//*[{ci_contains('parachute')}]]"),
    ]
    PROPULSION_SECTION = [
        (By.CSS_SELECTOR, "#propulsion-system, #propulsion"),
        (By.XPATH, f"//section[.//*[{ci_contains('draco')}]]"),
    ]

    def passenger_capacity_mentioned(self, count: int = 7) -> bool:
        return self.mentions(rf"up to {count} (passengers|people|astronauts)")

    def cargo_return_mentioned(self) -> bool:
        return self.mentions(r"cargo (return|back to earth)|return(ing)? (significant amounts of )?cargo")

    def parachute_rows(self) -> list[str]:
        root = self.find_first(self.LANDING_SECTION)
        return self.spec_rows(root) if root is not None else self.spec_rows()

    def is_parachute_detail_listed(self, kind: str, quantity: str) -> bool:
        return row_has(self.parachute_rows(), kind, quantity)

    def scroll_to_propulsion(self) -> None:
        el = self.find_first(self.PROPULSION_SECTION)
        if el is not None:
            self.scroll_into_view(el)

    def is_draco_detail_displayed(self, field: str, detail: str) -> bool:
        root = self.find_first(self.PROPULSION_SECTION)
        return row_has(self.spec_rows(root), field, detail) or self.mentions(rf"{re.escape(field)}.*{re.escape(detail)}")

    def is_superdraco_detail_displayed(self, detail: str) -> bool:
        return self.mentions(r"superdraco") and self.mentions(re.escape(detail))

    def iss_capability_mentioned(self) -> bool:
        return self.mentions(r"international space station|\bISS\b")

    def beyond_leo_mentioned(self) -> bool:
        return self.mentions(r"beyond low earth orbit|LEO and beyond|beyond LEO")


class FalconHeavyPage(VehiclePage):
    path = "/vehicles/falcon-heavy"

    ENGINES_SECTION = [
        (By.CSS_SELECTOR, "[data-section='engine-specs'], #engines"),
        (By.XPATH, f"//section[.//*[self::h2 or self::h3][{ci_contains('engines')}]]"),
    ]
    MARKET_SECTION = [(By.CSS_SELECTOR, "#market-positioning, [data-section='market-positioning']")]

    def three_cores_described(self, falcon_version: int = 9) -> bool:
        return self.mentions(rf"three falcon {falcon_version}\b.*cores?")

    def total_thrust_highlighted(self) -> bool:
        return self.mentions(r"5 million (pounds|lbs)|22,?8\d\d ?kN")

    def is_technical_spec_value_displayed(self, attribute: str, metric: str, imperial: str) -> bool:
        return self.is_spec_detail_displayed(attribute, metric, imperial)

    def engine_rows(self) -> list[str]:
        root = self.find_first(self.ENGINES_SECTION)
        return self.spec_rows(root)

    def is_engine_spec_displayed(self, engine: str, attribute: str, detail: str) -> bool:
        """Engine spec check; the engine name must appear on the page alongside the row."""
        if not self.mentions(re.escape(engine)):
            return False
        return row_has(self.engine_rows(), attribute, detail)

    def market_text(self) -> str:
        return self.text_of(self.MARKET_SECTION) or self.body_text()

    def market_positioning_mentions(self, pattern: str) -> bool:
        return text_mentions(self.market_text(), pattern)

    def engine_count_explained(self, total: int = 27, per_core: int = 9) -> bool:
        return self.mentions(rf"{total} merlin engines") and (
            self.mentions(rf"{per_core} per core") or self.mentions(r"three falcon 9") or self.mentions(r"three cores")
        )

    def reusability_highlighted(self) -> bool:
        return self.mentions(r"reusab|reflown|reused|land(ing)? (the )?booster")
