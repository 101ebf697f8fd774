"""Human spaceflight sections: the milestone timeline, the mission tabs and the media carousel."""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass

from selenium.webdriver.common.action_chains import ActionChains
from selenium.webdriver.common.by import By
from selenium.webdriver.common.keys import Keys

from site_pages.base_page import ci_contains
from site_pages.fragments import Fragment

logger = logging.getLogger(__name__)

MIN_ARROW_PX = 44
MIN_DOT_PX = 24
YEAR_RE = re.compile(r"\b(19|20)\d{2}\b")


@dataclass
class Milestone:
    year: str
    achievement: str


@dataclass
class MissionTab:
    name: str
    order: str


@dataclass
class MediaTile:
    title: str
    kind: str


def is_active(class_attr: str | None, aria: str | None = None) -> bool:
    return "active" in (class_attr or "").split() or (aria or "").lower() == "true"


def active_index(states: list[bool]) -> int:
    """Index of the first active entry, or -1 when none is."""
    for i, active in enumerate(states):
        if active:
            return i
    return -1


def undersized(rects: list[dict], minimum: float) -> list[dict]:
    return [r for r in rects if r.get("width", 0) < minimum or r.get("height", 0) < minimum]


def milestone_years(milestones: list[Milestone]) -> list[int]:
    years = []
    for m in milestones:
        match = YEAR_RE.search(m.year) or YEAR_RE.search(m.achievement)
        if match:
            years.append(int(match.group(0)))
    return years


def is_non_decreasing(values: list[int]) -> bool:
    return all(a <= b for a, b in zip(values, values[1:]))


def metrics_changed(before: dict[str, str], after: dict[str, str]) -> bool:
    if not before or not after:
        return False
    return any(before.get(k) != v for k, v in after.items())


def split_lines(text: str | None) -> list[str]:
    return [line.strip() for line in (text or "").splitlines() if line.strip()]


def image_matches_mission(src: str | None, mission: str) -> bool:
    words = mission.lower().split()
    s = (src or "").lower()
    return bool(words) and any(v in s for v in ("".join(words), "-".join(words), "_".join(words)))


class _Section(Fragment):
    """A fragment rooted at one section element of the page."""

    SECTION: list = []
    label = "section"

    def _section(self):
        return self.find_first(self.SECTION)

    def is_present(self) -> bool:
        return self.count(self.SECTION) > 0

    def scroll_to_section(self) -> None:
        sec = self._section()
        if sec is None:
            raise AssertionError(f"{self.label} not found")
        self.scroll_into_view(sec)

    def _in_section(self, region) -> list:
        sec = self._section()
        return self.find_all(region, sec) if sec is not None else []

    def _click_in_section(self, region, what: str) -> None:
        els = [e for e in self._in_section(region) if e.is_displayed()]
        if not els:
            raise AssertionError(f"{self.label} has no {what}")
        self.click(els[0])
        time.sleep(0.5)


class TimelineFragment(_Section):
    label = "Timeline section"
    SECTION = [
        (By.CSS_SELECTOR, "[data-test='timeline-section'], #timeline, section.timeline"),
        (By.XPATH, f"//section[.//*[self::h2 or self::h3][{ci_contains('timeline')}]]"),
    ]
    HEADING = [(By.CSS_SELECTOR, "h2"), (By.CSS_SELECTOR, "h3")]
    CAROUSEL = [(By.CSS_SELECTOR, ".timeline-carousel"), (By.CSS_SELECTOR, ".carousel, [aria-roledescription='carousel']")]
    CARDS = [(By.CSS_SELECTOR, ".milestone-card"), (By.CSS_SELECTOR, ".timeline-item, .slide")]
    YEAR = [(By.CSS_SELECTOR, ".year"), (By.CSS_SELECTOR, "h3, h4")]
    ACHIEVEMENT = [(By.CSS_SELECTOR, ".achievement-text"), (By.CSS_SELECTOR, "p, .description")]
    NEXT = [
        (By.CSS_SELECTOR, "button.next-arrow"),
        (By.XPATH, f".//button[{ci_contains('next', '@aria-label')}]"),
    ]
    PREVIOUS = [
        (By.CSS_SELECTOR, "button.previous-arrow"),
        (By.XPATH, f".//button[{ci_contains('prev', '@aria-label')}]"),
    ]
    ARROWS = [
        (By.CSS_SELECTOR, "button.next-arrow, button.previous-arrow, button.arrow"),
        (By.XPATH, f".//button[{ci_contains('next', '@aria-label')} or {ci_contains('prev', '@aria-label')}]"),
    ]
    DOTS = [(By.CSS_SELECTOR, ".pagination-dots button"), (By.CSS_SELECTOR, ".pagination-dot, [role='tab']")]
    HORIZON = [(By.CSS_SELECTOR, ".horizon-image")]

    def heading_text(self) -> str:
        sec = self._section()
        return self.text_of(self.HEADING, sec) if sec is not None else ""

    def is_carousel_visible(self) -> bool:
        return self.is_visible(self.CAROUSEL, self._section(), timeout=3)

    def milestones(self) -> list[Milestone]:
        out = []
        for card in self._in_section(self.CARDS):
            year = card.get_attribute("data-year") or self.text_of(self.YEAR, card)
            out.append(Milestone(year=year.strip(), achievement=self.text_of(self.ACHIEVEMENT, card)))
        return out

    def active_milestone(self) -> str:
        """Year (or failing that, text) of the active card; the first displayed card if none is marked."""
        cards = self._in_section(self.CARDS)
        for card in cards:
            if is_active(card.get_attribute("class"), card.get_attribute("aria-current")):
                return card.get_attribute("data-year") or self.text_of(self.YEAR, card)
        shown = [c for c in cards if c.is_displayed()]
        return (shown[0].get_attribute("data-year") or self.text_of(self.YEAR, shown[0])) if shown else ""

    def advance(self) -> None:
        self._click_in_section(self.NEXT, "next arrow")

    def go_back(self) -> None:
        self._click_in_section(self.PREVIOUS, "previous arrow")

    def dot_count(self) -> int:
        return len(self._in_section(self.DOTS))

    def click_dot(self, index: int) -> None:
        dots = self._in_section(self.DOTS)
        if index >= len(dots):
            raise AssertionError(f"Timeline has {len(dots)} pagination dots, wanted dot {index + 1}")
        self.click(dots[index])
        time.sleep(0.5)

    def active_dot_index(self) -> int:
        return active_index(
            [is_active(d.get_attribute("class"), d.get_attribute("aria-selected")) for d in self._in_section(self.DOTS)]
        )

    def cards_missing_background(self) -> list[str]:
        missing = []
        for card, milestone in zip(self._in_section(self.CARDS), self.milestones()):
            loaded = self.driver.execute_script(
                "const el = arguments[0];"
                "const bg = getComputedStyle(el).backgroundImage;"
                "if (bg && bg !== 'none' && !bg.includes('undefined')) return true;"
                "const img = el.querySelector('img');"
                "return !!img && img.complete && img.naturalWidth > 0;",
                card,
            )
            if not loaded:
                missing.append(milestone.year or milestone.achievement[:30])
        return missing

    def is_horizon_image_visible(self) -> bool:
        return self.is_visible(self.HORIZON, self._section())

    def undersized_controls(self) -> list[str]:
        problems = []
        arrows = [self.bounding_box(e) for e in self._in_section(self.ARROWS) if e.is_displayed()]
        dots = [self.bounding_box(e) for e in self._in_section(self.DOTS) if e.is_displayed()]
        for rect in undersized(arrows, MIN_ARROW_PX):
            problems.append(f"arrow {rect.get('width', 0):.0f}x{rect.get('height', 0):.0f}")
        for rect in undersized(dots, MIN_DOT_PX):
            problems.append(f"dot {rect.get('width', 0):.0f}x{rect.get('height', 0):.0f}")
        return problems

    def accessibility(self) -> dict:
        root = self.find_first(self.CAROUSEL, self._section()) or self._section()
        if root is None:
            return {"labelled": False, "focusable": False, "live_region": False}
        return self.driver.execute_script(
            "const c = arguments[0];"
            "return {labelled: c.querySelectorAll('[aria-label]').length > 0,"
            " focusable: c.querySelectorAll('button, [tabindex=\"0\"]').length > 0,"
            " live_region: c.hasAttribute('aria-live') || !!c.querySelector('[aria-live]')};",
            root,
        )


class OurMissionsFragment(_Section):
    label = "Our Missions section"
    SECTION = [
        (By.CSS_SELECTOR, "[data-test='our-missions-section'], #our-missions, section.our-missions"),
        (By.XPATH, f"//section[.//*[self::h2 or self::h3][{ci_contains('our missions')}]]"),
    ]
    TITLE = [(By.CSS_SELECTOR, "h2"), (By.CSS_SELECTOR, "h3")]
    DESCRIPTION = [(By.CSS_SELECTOR, ".section-description"), (By.CSS_SELECTOR, "p")]
    TABS = [(By.CSS_SELECTOR, ".mission-tab"), (By.CSS_SELECTOR, "[role='tab']")]
    METRICS = [(By.CSS_SELECTOR, ".metrics-table"), (By.CSS_SELECTOR, "table, dl")]
    JOIN = [(By.XPATH, f".//*[self::button or self::a][{ci_contains('join')}]")]
    BACKGROUND = [(By.CSS_SELECTOR, ".background-image"), (By.CSS_SELECTOR, "img")]

    def title(self) -> str:
        sec = self._section()
        return self.text_of(self.TITLE, sec) if sec is not None else ""

    def description(self) -> str:
        sec = self._section()
        return self.text_of(self.DESCRIPTION, sec) if sec is not None else ""

    def tabs(self) -> list[MissionTab]:
        out = []
        for i, tab in enumerate(self._in_section(self.TABS)):
            name = (tab.text or tab.get_attribute("textContent") or "").strip()
            if name:
                out.append(MissionTab(name=name, order=tab.get_attribute("data-order") or str(i + 1)))
        return out

    def _tab(self, name: str):
        for tab in self._in_section(self.TABS):
            if name.lower() in (tab.text or tab.get_attribute("textContent") or "").lower():
                return tab
        return None

    def select_tab(self, name: str) -> None:
        tab = self._tab(name)
        if tab is None:
            raise AssertionError(f"No {name!r} mission tab; tabs are {[t.name for t in self.tabs()]}")
        self.click(tab)
        time.sleep(0.3)

    def switch_tabs(self, names: list[str], pause: float = 0.05) -> None:
        for name in names:
            tab = self._tab(name)
            if tab is None:
                raise AssertionError(f"No {name!r} mission tab")
            tab.click()
            time.sleep(pause)

    def is_tab_active(self, name: str) -> bool:
        tab = self._tab(name)
        return tab is not None and is_active(tab.get_attribute("class"), tab.get_attribute("aria-selected"))

    def active_tabs(self) -> list[str]:
        return [
            (t.text or t.get_attribute("textContent") or "").strip()
            for t in self._in_section(self.TABS)
            if is_active(t.get_attribute("class"), t.get_attribute("aria-selected"))
        ]

    def metrics(self) -> dict[str, str]:
        sec = self._section()
        table = self.find_first(self.METRICS, sec) if sec is not None else None
        if table is None:
            return {}
        labels = table.find_elements(By.CSS_SELECTOR, "th, dt")
        values = table.find_elements(By.CSS_SELECTOR, "td, dd")
        out = {}
        for label, value in zip(labels, values):
            key = (label.text or label.get_attribute("textContent") or "").strip()
            if key:
                out[key] = (value.text or value.get_attribute("textContent") or "").strip()
        return out

    def metric_value(self, name: str) -> str:
        for key, value in self.metrics().items():
            if key.lower() == name.lower():
                return value
        return ""

    def cargo_science_lines(self) -> list[str]:
        return split_lines(self.metric_value("Cargo / Science"))

    def is_join_visible(self) -> bool:
        return self.is_visible(self.JOIN, self._section(), timeout=3)

    def join_text(self) -> str:
        sec = self._section()
        return self.text_of(self.JOIN, sec) if sec is not None else ""

    def background_src(self) -> str:
        sec = self._section()
        el = self.find_first(self.BACKGROUND, sec) if sec is not None else None
        if el is None or not el.is_displayed():
            return ""
        src = el.get_attribute("currentSrc") or el.get_attribute("src") or ""
        return src or self.computed_style(el, "background-image")


class MediaCarouselFragment(_Section):
    label = "Media carousel"
    SECTION = [
        (By.CSS_SELECTOR, "[data-test='media-carousel'], .media-carousel, #media"),
        (By.XPATH, f"//section[.//*[self::h2 or self::h3][{ci_contains('media')}]]"),
    ]
    TILES = [(By.CSS_SELECTOR, ".media-tile"), (By.CSS_SELECTOR, ".slide, [data-media-type]")]
    TILE_TITLE = [(By.CSS_SELECTOR, ".title"), (By.CSS_SELECTOR, "h3, h4")]
    TILE_MEDIA = [(By.CSS_SELECTOR, "img, video, iframe, .player, audio")]
    ARROWS = [(By.CSS_SELECTOR, ".carousel-arrow"), (By.XPATH, f".//button[{ci_contains('next', '@aria-label')} or {ci_contains('prev', '@aria-label')}]")]
    DOTS = [(By.CSS_SELECTOR, ".pagination-dot"), (By.CSS_SELECTOR, ".pagination-dots button")]
    PLAY = [(By.CSS_SELECTOR, ".play-button, .video-play-button"), (By.XPATH, f".//button[{ci_contains('play', '@aria-label')}]")]
    OVERLAY = [(By.CSS_SELECTOR, ".video-overlay"), (By.CSS_SELECTOR, "[role='dialog'][aria-modal='true']")]
    OVERLAY_PLAYER = [(By.CSS_SELECTOR, "iframe[src*='youtube'], iframe[src*='youtu.be'], video")]
    OVERLAY_CLOSE = [(By.CSS_SELECTOR, ".close-button"), (By.XPATH, f".//button[{ci_contains('close', '@aria-label')}]")]
    AUDIO = [(By.CSS_SELECTOR, ".audio-player"), (By.CSS_SELECTOR, "audio")]
    AUDIO_PARTS = {
        "play/pause": [(By.CSS_SELECTOR, ".play-pause-button, button[aria-label*='lay']")],
        "duration": [(By.CSS_SELECTOR, ".duration, time")],
        "progress": [(By.CSS_SELECTOR, ".progress-bar, [role='progressbar'], input[type='range']")],
    }

    def tiles(self) -> list[MediaTile]:
        return [
            MediaTile(title=self.text_of(self.TILE_TITLE, t), kind=(t.get_attribute("data-media-type") or "").lower())
            for t in self._in_section(self.TILES)
        ]

    def tiles_without_media(self) -> list[str]:
        missing = []
        for i, tile in enumerate(self._in_section(self.TILES)):
            if self.count(self.TILE_MEDIA, tile) == 0:
                missing.append(self.text_of(self.TILE_TITLE, tile) or f"tile {i + 1}")
        return missing

    def has_arrows(self) -> bool:
        arrows = self._in_section(self.ARROWS)
        return len(arrows) >= 2 and arrows[0].is_displayed()

    def has_dots(self) -> bool:
        dots = self._in_section(self.DOTS)
        return bool(dots) and dots[0].is_displayed()

    def active_tile_index(self) -> int:
        return active_index([is_active(t.get_attribute("class"), t.get_attribute("aria-current")) for t in self._in_section(self.TILES)])

    def click_dot(self, index: int) -> None:
        dots = self._in_section(self.DOTS)
        if index >= len(dots):
            raise AssertionError(f"Carousel has {len(dots)} pagination dots, wanted dot {index + 1}")
        self.click(dots[index])
        time.sleep(0.5)

    def next_tile(self) -> None:
        arrows = self._in_section(self.ARROWS)
        if not arrows:
            raise AssertionError("Media carousel has no arrows")
        self.click(arrows[-1])
        time.sleep(0.5)

    def _first_tile(self, kind: str):
        for tile in self._in_section(self.TILES):
            if (tile.get_attribute("data-media-type") or "").lower() == kind:
                return tile
        return None

    def has_tile(self, kind: str) -> bool:
        return self._first_tile(kind) is not None

    def play_first_video(self) -> None:
        tile = self._first_tile("video")
        if tile is None:
            raise AssertionError("Media carousel has no video tile")
        button = self.find_first(self.PLAY, tile)
        self.click(button if button is not None else tile)

    def is_overlay_open(self, timeout: float = 5) -> bool:
        return self.is_visible(self.OVERLAY, timeout=timeout)

    def is_overlay_player_loaded(self, timeout: float = 10) -> bool:
        overlay = self.find_first(self.OVERLAY)
        return overlay is not None and self.is_visible(self.OVERLAY_PLAYER, overlay, timeout=timeout)

    def close_overlay(self) -> None:
        overlay = self.find_first(self.OVERLAY)
        button = self.find_first(self.OVERLAY_CLOSE, overlay) if overlay is not None else None
        if button is None:
            raise AssertionError("Video overlay has no close button")
        self.click(button)

    def press_escape(self) -> None:
        ActionChains(self.driver).send_keys(Keys.ESCAPE).perform()

    def is_overlay_closed(self, timeout: float = 5) -> bool:
        deadline = time.monotonic() + timeout
        while self.find_visible(self.OVERLAY):
            if time.monotonic() > deadline:
                return False
            time.sleep(0.2)
        return True

    def open_first_audio(self) -> None:
        tile = self._first_tile("audio")
        if tile is None:
            raise AssertionError("Media carousel has no audio tile")
        self.click(tile)

    def missing_audio_controls(self) -> list[str]:
        player = self.find_first(self.AUDIO)
        if player is None:
            return list(self.AUDIO_PARTS)
        if player.tag_name.lower() == "audio":
            # A bare <audio controls> element draws all three itself
            return [] if player.get_attribute("controls") is not None else list(self.AUDIO_PARTS)
        return [name for name, region in self.AUDIO_PARTS.items() if not self.is_visible(region, player)]

    def is_audio_player_visible(self, timeout: float = 5) -> bool:
        return self.is_visible(self.AUDIO, timeout=timeout)

    def autoplaying_media(self) -> int:
        return int(self.driver.execute_script("return document.querySelectorAll('video[autoplay], audio[autoplay]').length;"))
