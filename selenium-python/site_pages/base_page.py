"""Shared page-object plumbing.

A locator is a ``(By, selector)`` tuple and a region is a list of locators
tried in order until one matches. Regions are plain data, so every call goes
back to the live DOM; nothing is cached between calls.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field

from selenium.common.exceptions import TimeoutException, WebDriverException
from selenium.webdriver.common.action_chains import ActionChains
from selenium.webdriver.common.actions.action_builder import ActionBuilder
from selenium.webdriver.common.by import By
from selenium.webdriver.remote.webelement import WebElement
from selenium.webdriver.support.ui import WebDriverWait

from site_utils.errors import BrowserFeatureUnavailable

logger = logging.getLogger(__name__)

Locator = tuple[str, str]

UPPER = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
LOWER = "abcdefghijklmnopqrstuvwxyz"
CONSOLE_NOISE = ("ERR_NETWORK_CHANGED",)


def xpath_literal(s: str) -> str:
    if "'" not in s:
        return f"'{s}'"
    if '"' not in s:
        return f'"{s}"'
    parts = s.split("'")
    return "concat(" + ", \"'\", ".join(f"'{p}'" for p in parts) + ")"


def ci_contains(text: str, expr: str = "normalize-space(.)") -> str:
    """XPath predicate body: ``expr`` contains ``text`` ignoring ASCII case."""
    return f"contains(translate({expr}, '{UPPER}', '{LOWER}'), {xpath_literal(text.lower())})"


def heading_order_problems(levels: list[int]) -> list[str]:
    problems = []
    h1_count = levels.count(1)
    if h1_count != 1:
        problems.append(f"expected exactly one h1, found {h1_count}")
    prev = None
    for lvl in levels:
        if prev is not None and lvl - prev > 1:
            problems.append(f"h{prev} followed by h{lvl}")
        prev = lvl
    return problems


@dataclass
class PerformanceMetrics:
    lcp: float | None = None
    fid: float | None = None
    cls: float | None = None


@dataclass
class AccessibilityReport:
    has_title: bool
    has_lang: bool
    has_main_landmark: bool
    heading_levels: list[int] = field(default_factory=list)
    images_missing_alt: int = 0

    @property
    def passes_basics(self) -> bool:
        return self.has_title and self.has_lang and self.has_main_landmark


_PERF_SCRIPT = """
const done = arguments[arguments.length - 1];
const waitMs = arguments[0];
const metrics = {lcp: null, fid: null, cls: null};
const observers = [];
function watch(type, onEntries) {
  try {
    const po = new PerformanceObserver((list) => onEntries(list.getEntries()));
    po.observe({type: type, buffered: true});
    observers.push(po);
  } catch (e) {}
}
watch('largest-contentful-paint', (entries) => {
  if (entries.length) metrics.lcp = entries[entries.length - 1].startTime;
});
watch('first-input', (entries) => {
  if (entries.length) metrics.fid = entries[0].processingStart - entries[0].startTime;
});
let cls = 0;
watch('layout-shift', (entries) => {
  for (const e of entries) { if (!e.hadRecentInput) cls += e.value; }
  metrics.cls = cls;
});
setTimeout(() => { observers.forEach((o) => o.disconnect()); done(metrics); }, waitMs);
"""

_A11Y_SCRIPT = """
const headings = Array.from(document.querySelectorAll('h1,h2,h3,h4,h5,h6'))
  .filter((h) => h.offsetParent !== null || getComputedStyle(h).position === 'fixed');
return {
  has_title: document.title.trim().length > 0,
  has_lang: !!(document.documentElement.getAttribute('lang') || '').trim(),
  has_main_landmark: !!document.querySelector('main, [role="main"]'),
  heading_levels: headings.map((h) => parseInt(h.tagName.substring(1), 10)),
  images_missing_alt: Array.from(document.querySelectorAll('img')).filter((i) => !i.hasAttribute('alt')).length,
};
"""

_BROKEN_IMAGES_SCRIPT = """
return Array.from(document.querySelectorAll('img'))
  .filter((img) => img.loading !== 'lazy' || img.complete)
  .filter((img) => !img.complete || img.naturalWidth === 0)
  .map((img) => img.currentSrc || img.src || '(no src)');
"""

_LOAD_TIMING_SCRIPT = """
const nav = performance.getEntriesByType('navigation')[0];
if (nav && nav.loadEventEnd > 0) return nav.loadEventEnd - nav.startTime;
const t = performance.timing;
return t.loadEventEnd > 0 ? t.loadEventEnd - t.navigationStart : null;
"""


class BasePage:
    path = "/"

    def __init__(self, driver, base_url: str, timeout: int = 15):
        self.driver = driver
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    # ---- navigation ---------------------------------------------------------

    def url(self, path: str | None = None) -> str:
        p = self.path if path is None else path
        if p.startswith(("http://", "https://")):
            return p
        return self.base_url + (p if p.startswith("/") else "/" + p)

    def open(self, path: str | None = None):
        target = self.url(path)
        logger.info("Opening %s", target)
        self.driver.get(target)
        self.wait_ready()
        return self

    def navigate(self):
        self.open()
        self.wait_for_app_content()
        return self

    def wait_ready(self, timeout: int | None = None) -> None:
        WebDriverWait(self.driver, timeout or self.timeout).until(
            lambda d: d.execute_script("return document.readyState") == "complete"
        )

    def wait_for_app_content(self, timeout: int | None = None) -> bool:
        """Wait for client-side rendering to put a heading or main region on screen."""
        try:
            WebDriverWait(self.driver, timeout or self.timeout).until(
                lambda d: d.execute_script(
                    "return !!document.querySelector('main h1, main h2, h1, h2, main') "
                    "&& document.body.innerText.trim().length > 0"
                )
            )
            return True
        except TimeoutException:
            logger.warning("Page content did not render within %ss: %s", timeout or self.timeout, self.driver.current_url)
            return False

    # ---- element lookup -----------------------------------------------------

    @staticmethod
    def _chain(region) -> list[Locator]:
        if isinstance(region, tuple):
            return [region]
        return list(region)

    def find_all(self, region, root=None) -> list[WebElement]:
        scope = root if root is not None else self.driver
        for by, sel in self._chain(region):
            try:
                els = scope.find_elements(by, sel)
            except WebDriverException:
                continue
            if els:
                return els
        return []

    def find_visible(self, region, root=None) -> list[WebElement]:
        out = []
        for el in self.find_all(region, root):
            try:
                if el.is_displayed():
                    out.append(el)
            except WebDriverException:
                continue
        return out

    def find_first(self, region, root=None) -> WebElement | None:
        els = self.find_all(region, root)
        if not els:
            return None
        for el in els:
            try:
                if el.is_displayed():
                    return el
            except WebDriverException:
                continue
        return els[0]

    def is_visible(self, region, root=None, timeout: float = 0) -> bool:
        if timeout <= 0:
            return bool(self.find_visible(region, root))
        try:
            WebDriverWait(self.driver, timeout).until(lambda d: self.find_visible(region, root))
            return True
        except TimeoutException:
            return False

    def text_of(self, region, root=None) -> str:
        el = self.find_first(region, root)
        if el is None:
            return ""
        txt = (el.text or "").strip()
        if not txt:
            # Off-screen nodes report empty .text in Selenium
            txt = (el.get_attribute("textContent") or "").strip()
        return txt

    def texts_of(self, region, root=None) -> list[str]:
        out = []
        for el in self.find_all(region, root):
            t = (el.text or el.get_attribute("textContent") or "").strip()
            if t:
                out.append(t)
        return out

    def count(self, region, root=None) -> int:
        return len(self.find_all(region, root))

    def attribute_of(self, region, name: str, root=None) -> str:
        el = self.find_first(region, root)
        return (el.get_attribute(name) or "") if el is not None else ""

    # ---- interaction --------------------------------------------------------

    def click(self, element: WebElement) -> None:
        self.scroll_into_view(element)
        try:
            element.click()
        except WebDriverException:
            self.driver.execute_script("arguments[0].click();", element)

    def scroll_into_view(self, element: WebElement) -> None:
        self.driver.execute_script("arguments[0].scrollIntoView({block: 'center'});", element)

    def scroll_down(self, pixels: int = 500) -> None:
        self.driver.execute_script("window.scrollBy(0, arguments[0]);", pixels)
        time.sleep(0.5)

    def scroll_to_bottom(self) -> None:
        self.driver.execute_script("window.scrollTo(0, document.body.scrollHeight);")
        time.sleep(0.5)

    def hover(self, element: WebElement, settle: float = 0.1) -> None:
        self.scroll_into_view(element)
        ActionChains(self.driver).move_to_element(element).perform()
        time.sleep(settle)

    def move_pointer_away(self, settle: float = 0.1) -> None:
        action = ActionBuilder(self.driver)
        action.pointer_action.move_to_location(1, 1)
        action.perform()
        time.sleep(settle)

    def computed_style(self, element: WebElement, prop: str) -> str:
        return self.driver.execute_script(
            "return window.getComputedStyle(arguments[0]).getPropertyValue(arguments[1]);", element, prop
        ) or ""

    def is_hovered(self, element: WebElement) -> bool:
        return bool(self.driver.execute_script("return arguments[0].matches(':hover');", element))

    def bounding_box(self, element: WebElement) -> dict:
        return dict(element.rect)

    # ---- document metadata --------------------------------------------------

    def title(self) -> str:
        return self.driver.title or ""

    def body_text(self) -> str:
        try:
            return self.driver.find_element(By.TAG_NAME, "body").text or ""
        except WebDriverException:
            return self.driver.page_source or ""

    def meta_content(self, name: str) -> str:
        attr = "property" if name.startswith("og:") else "name"
        return self.attribute_of([(By.CSS_SELECTOR, f"meta[{attr}='{name}']")], "content")

    def viewport_meta(self) -> str:
        return self.meta_content("viewport")

    def is_viewport_meta_configured(self) -> bool:
        return "width=device-width" in self.viewport_meta()

    # ---- health -------------------------------------------------------------

    def broken_images(self) -> list[str]:
        return list(self.driver.execute_script(_BROKEN_IMAGES_SCRIPT) or [])

    def are_all_images_loaded(self) -> bool:
        return not self.broken_images()

    def console_errors(self) -> list[str]:
        try:
            entries = self.driver.get_log("browser")
        except (WebDriverException, AttributeError, ValueError):
            # Only Chromium drivers expose the browser log
            return []
        errors = []
        for e in entries:
            msg = e.get("message", "")
            if e.get("level") == "SEVERE" and not any(n in msg for n in CONSOLE_NOISE):
                errors.append(msg)
        for msg in errors:
            logger.warning("Console error: %s", msg)
        return errors

    def performance_metrics(self, wait_ms: int = 3000) -> PerformanceMetrics:
        self.driver.set_script_timeout(wait_ms / 1000 + 10)
        raw = self.driver.execute_async_script(_PERF_SCRIPT, wait_ms) or {}
        return PerformanceMetrics(lcp=raw.get("lcp"), fid=raw.get("fid"), cls=raw.get("cls"))

    def basic_accessibility(self) -> AccessibilityReport:
        raw = self.driver.execute_script(_A11Y_SCRIPT) or {}
        return AccessibilityReport(
            has_title=bool(raw.get("has_title")),
            has_lang=bool(raw.get("has_lang")),
            has_main_landmark=bool(raw.get("has_main_landmark")),
            heading_levels=[int(x) for x in raw.get("heading_levels") or []],
            images_missing_alt=int(raw.get("images_missing_alt") or 0),
        )

    def heading_outline(self) -> list[tuple[int, str]]:
        rows = self.driver.execute_script(
            "return Array.from(document.querySelectorAll('h1,h2,h3,h4,h5,h6'))"
            ".map((h) => [parseInt(h.tagName.substring(1), 10), h.textContent.trim()]);"
        ) or []
        return [(int(lvl), txt) for lvl, txt in rows]

    def has_logical_heading_order(self) -> bool:
        problems = heading_order_problems([lvl for lvl, _ in self.heading_outline()])
        for p in problems:
            logger.info("Heading outline: %s", p)
        return not problems

    def page_links(self) -> list[str]:
        hrefs = self.driver.execute_script("return Array.from(document.querySelectorAll('a[href]')).map((a) => a.href);") or []
        return [h for h in hrefs if h.startswith(("http://", "https://"))]

    def load_timing_ms(self) -> float | None:
        return self.driver.execute_script(_LOAD_TIMING_SCRIPT)

    # ---- request control (Chromium only) ------------------------------------

    def _cdp(self, cmd: str, params: dict) -> dict:
        if not hasattr(self.driver, "execute_cdp_cmd"):
            raise BrowserFeatureUnavailable(f"{cmd} needs a local Chromium driver")
        try:
            return self.driver.execute_cdp_cmd(cmd, params)
        except WebDriverException as e:
            raise BrowserFeatureUnavailable(f"{cmd} failed: {e.msg}") from e

    def block_requests(self, patterns: list[str]) -> None:
        self._cdp("Network.enable", {})
        self._cdp("Network.setBlockedURLs", {"urls": list(patterns)})
        logger.info("Blocking requests matching %s", patterns)

    def unblock_requests(self) -> None:
        self._cdp("Network.setBlockedURLs", {"urls": []})

    def set_javascript_enabled(self, enabled: bool) -> None:
        self._cdp("Emulation.setScriptExecutionDisabled", {"value": not enabled})
