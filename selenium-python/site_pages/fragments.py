"""Page regions shared by several pages: header, footer, hero and destinations."""

from __future__ import annotations

import logging
import time

from selenium.webdriver.common.by import By

from site_pages.base_page import BasePage, ci_contains

logger = logging.getLogger(__name__)


class Fragment(BasePage):
    """A region of a page; shares the driver and lookups of its owning page."""

    def __init__(self, page: BasePage):
        super().__init__(page.driver, page.base_url, page.timeout)
        self.page = page


class HeaderFragment(Fragment):
    NAV = [
        (By.CSS_SELECTOR, "header nav"),
        (By.CSS_SELECTOR, "nav[role='navigation'], [role='navigation']"),
        (By.TAG_NAME, "nav"),
    ]
    LOGO = [
        (By.CSS_SELECTOR, "header a[href='/'], header a#logo, a.logo"),
        (By.XPATH, f"//header//a[{ci_contains('spacex', '@aria-label')} or {ci_contains('spacex', '@title')}]"),
        (By.CSS_SELECTOR, "a[href='/'] svg, a[href='https://www.spacex.com/']"),
    ]
    MENU_BUTTON = [
        (By.XPATH, f"//button[{ci_contains('menu', '@aria-label')} or {ci_contains('toggle', '@aria-label')}]"),
        (By.CSS_SELECTOR, "button#menu-button, .menu-button, button.hamburger, button[aria-controls]"),
        (By.XPATH, f"//button[{ci_contains('menu')}]"),
    ]
    MOBILE_MENU = [
        (By.CSS_SELECTOR, "[role='dialog'][aria-label='Menu'], nav.black-overlay"),
        (By.CSS_SELECTOR, ".mobile-menu, #mobile-menu, nav.open, nav.is-open"),
    ]

    def is_navigation_visible(self, timeout: float = 10) -> bool:
        return self.is_visible(self.NAV, timeout=timeout)

    def is_logo_visible(self, timeout: float = 5) -> bool:
        return self.is_visible(self.LOGO, timeout=timeout)

    def is_logo_clickable(self) -> bool:
        el = self.find_first(self.LOGO)
        return el is not None and el.is_displayed() and el.is_enabled()

    def is_menu_button_visible(self, timeout: float = 5) -> bool:
        return self.is_visible(self.MENU_BUTTON, timeout=timeout)

    def open_menu(self) -> None:
        btn = self.find_first(self.MENU_BUTTON)
        if btn is not None and btn.is_displayed():
            self.click(btn)
            time.sleep(0.5)

    def is_mobile_menu_expanded(self, timeout: float = 4) -> bool:
        if self.is_visible(self.MOBILE_MENU, timeout=timeout):
            return True
        btn = self.find_first(self.MENU_BUTTON)
        return btn is not None and (btn.get_attribute("aria-expanded") or "").lower() == "true"

    def is_menu_collapsed(self) -> bool:
        return self.is_menu_button_visible() and not self.is_visible(self.MOBILE_MENU)

    def is_primary_navigation_usable(self) -> bool:
        """Nav links are on screen, or a menu button that reveals them is."""
        if self.nav_links_visible():
            return True
        return self.is_menu_button_visible(timeout=2)

    def _nav_link(self, text: str):
        xp = f"//nav//a[{ci_contains(text)}] | //header//a[{ci_contains(text)}]"
        return [(By.XPATH, xp)]

    def nav_links_visible(self) -> list[str]:
        out = []
        for nav in self.find_visible(self.NAV):
            for a in nav.find_elements(By.CSS_SELECTOR, "a[href]"):
                if a.is_displayed() and a.text.strip():
                    out.append(a.text.strip())
        return out

    def is_nav_link_visible(self, text: str) -> bool:
        return self.is_visible(self._nav_link(text))

    def click_nav_link(self, text: str) -> None:
        el = self.find_first(self._nav_link(text))
        if el is None:
            raise AssertionError(f"Navigation link {text!r} not found")
        self.click(el)


class FooterFragment(Fragment):
    FOOTER = [
        (By.CSS_SELECTOR, "footer"),
        (By.CSS_SELECTOR, "[role='contentinfo']"),
    ]
    LINKS = [(By.CSS_SELECTOR, "footer a[href], [role='contentinfo'] a[href]")]
    COPYRIGHT = [
        (By.CSS_SELECTOR, "footer .copyright-text, footer .copyright"),
        (By.XPATH, "//footer//*[contains(., '©') and not(*)]"),
        (By.XPATH, f"//footer//*[{ci_contains('spacex')} and not(*)]"),
    ]
    SOCIAL = [
        (By.CSS_SELECTOR, "footer .social-media-links a, footer .social-links a"),
        (By.XPATH, "//footer//a[contains(@href,'twitter.com') or contains(@href,'x.com') or contains(@href,'instagram.com') "
                   "or contains(@href,'youtube.com') or contains(@href,'linkedin.com') or contains(@href,'facebook.com')]"),
    ]

    def scroll_to_footer(self) -> None:
        el = self.find_first(self.FOOTER)
        if el is not None:
            self.scroll_into_view(el)

    def is_footer_visible(self, timeout: float = 5) -> bool:
        self.scroll_to_footer()
        return self.is_visible(self.FOOTER, timeout=timeout)

    def link_texts(self) -> list[str]:
        return [t.strip() for t in self.texts_of(self.LINKS)]

    def has_links(self, names: list[str]) -> list[str]:
        """Return the names that are missing from the footer."""
        have = [t.lower() for t in self.link_texts()]
        return [n for n in names if not any(n.lower() in h for h in have)]

    def copyright_text(self) -> str:
        return self.text_of(self.COPYRIGHT)

    def social_links(self) -> list[str]:
        return [el.get_attribute("href") or "" for el in self.find_all(self.SOCIAL)]


class HeroFragment(Fragment):
    SECTION = [
        (By.CSS_SELECTOR, ".section-1, .hero-section, #hero, section.hero"),
        (By.CSS_SELECTOR, "main > section:first-of-type, main > div:first-of-type"),
    ]
    TITLE = [(By.TAG_NAME, "h1"), (By.CSS_SELECTOR, "h2, .title")]
    SUBTITLE = [(By.CSS_SELECTOR, "h2, .subtitle, .hero-subtitle, p")]
    MEDIA = [(By.CSS_SELECTOR, "img, video, picture, [style*='background-image']")]

    def _section(self):
        return self.find_first(self.SECTION)

    def is_hero_visible(self, timeout: float = 5) -> bool:
        return self.is_visible(self.SECTION, timeout=timeout)

    def title_text(self) -> str:
        sec = self._section()
        txt = self.text_of(self.TITLE, sec) if sec is not None else ""
        return txt or self.text_of(self.TITLE)

    def subtitle_text(self) -> str:
        sec = self._section()
        return self.text_of(self.SUBTITLE, sec) if sec is not None else ""

    def has_media(self) -> bool:
        sec = self._section()
        return sec is not None and self.count(self.MEDIA, sec) > 0

    def image_alt(self) -> str | None:
        sec = self._section()
        if sec is None:
            return None
        imgs = sec.find_elements(By.TAG_NAME, "img")
        return imgs[0].get_attribute("alt") if imgs else None


DESTINATION_CLASSES = {
    "EARTH ORBIT": "earth-orbit",
    "SPACE STATION": "space-station",
    "MOON": "moon",
    "MARS": "mars",
}


def destination_class(name: str) -> str:
    try:
        return DESTINATION_CLASSES[name.strip().upper()]
    except KeyError:
        raise ValueError(f"Unknown destination: {name}") from None


def destination_name_for_class(class_attr: str | None) -> str | None:
    classes = (class_attr or "").split()
    for name, cls in DESTINATION_CLASSES.items():
        if cls in classes:
            return name
    return None


class DestinationsFragment(Fragment):
    SECTION = [(By.CSS_SELECTOR, "div.destinations"), (By.CSS_SELECTOR, "#destinations, section.destinations")]
    HEADING = [(By.XPATH, f"//*[self::h1 or self::h2 or self::h3][{ci_contains('destinations')}]")]
    ITEMS = [(By.CSS_SELECTOR, ".destination")]
    MEDIA = [(By.CSS_SELECTOR, "img, svg")]

    def __init__(self, page: BasePage):
        super().__init__(page)
        self._hovered = None
        self._resting_opacity = None

    def _section(self):
        return self.find_first(self.SECTION)

    def scroll_to_section(self) -> None:
        sec = self._section()
        if sec is None:
            raise AssertionError("Destinations section not found")
        self.scroll_into_view(sec)

    def heading_text(self) -> str:
        return self.text_of(self.HEADING)

    def _items(self):
        sec = self._section()
        return self.find_all(self.ITEMS, sec) if sec is not None else []

    def _item(self, name: str):
        sec = self._section()
        if sec is None:
            return None
        return self.find_first([(By.CSS_SELECTOR, f".destination.{destination_class(name)}")], sec)

    def _media(self, name: str):
        item = self._item(name)
        return self.find_first(self.MEDIA, item) if item is not None else None

    def count_destinations(self) -> int:
        return len(self._items())

    def names(self) -> list[str]:
        out = []
        for el in self._items():
            n = destination_name_for_class(el.get_attribute("class"))
            if n:
                out.append(n)
        return out

    def are_all_visible(self, expected: list[str]) -> bool:
        for name in expected:
            el = self._item(name)
            if el is None or not el.is_displayed():
                logger.info("Destination %s not visible", name)
                return False
        return self.count_destinations() == len(expected)

    def are_all_media_visible(self) -> bool:
        items = self._items()
        if not items:
            return False
        for item in items:
            media = self.find_first(self.MEDIA, item)
            if media is None or not media.is_displayed():
                return False
        return True

    def is_media_loaded(self, name: str) -> bool:
        media = self._media(name)
        if media is None or not media.is_displayed():
            return False
        if media.tag_name.lower() != "img":
            return True
        return bool(self.driver.execute_script("return arguments[0].complete && arguments[0].naturalHeight > 0;", media))

    def click_destination(self, name: str) -> None:
        media = self._media(name)
        if media is None:
            raise AssertionError(f"Destination {name} has no media to click")
        self.click(media)

    def hover_destination(self, name: str | None = None) -> None:
        if name is None:
            names = self.names()
            if not names:
                raise AssertionError("No destinations to hover")
            name = names[0]
        media = self._media(name)
        if media is None:
            raise AssertionError(f"Destination {name} has no media to hover")
        self.move_pointer_away()
        self._resting_opacity = self.computed_style(media, "opacity")
        self._hovered = media
        self.hover(media)

    def unhover(self) -> None:
        self.move_pointer_away()

    def is_hovered(self, element=None) -> bool:
        el = element if element is not None else self._hovered
        return el is not None and super().is_hovered(el)

    def _wait_opacity(self, predicate, timeout: float = 1.0) -> bool:
        # Opacity transitions finish a little after the pointer moves
        deadline = time.monotonic() + timeout
        while True:
            if predicate(self.computed_style(self._hovered, "opacity")):
                return True
            if time.monotonic() > deadline:
                return False
            time.sleep(0.1)

    def is_hover_effect_visible(self) -> bool:
        """The hovered tile's opacity differs from its opacity at rest."""
        if self._hovered is None:
            return False
        return self._wait_opacity(lambda v: v != self._resting_opacity)

    def is_hover_effect_gone(self) -> bool:
        if self._hovered is None:
            return True
        return self._wait_opacity(lambda v: v == self._resting_opacity)

    def is_cursor_pointer(self) -> bool:
        if self._hovered is None:
            self.hover_destination()
        return self.computed_style(self._hovered, "cursor") == "pointer"
