from __future__ import annotations

import logging
import time

from selenium.common.exceptions import WebDriverException
from selenium.webdriver.common.action_chains import ActionChains
from selenium.webdriver.common.by import By

from site_pages.base_page import BasePage, ci_contains
from site_pages.fragments import FooterFragment, HeaderFragment, HeroFragment

logger = logging.getLogger(__name__)

SCRIPT_PAYLOAD = "<script>window.__injected = true;</script>"


def max_length_respected(value: str, maxlength: str | None, limit: int = 5000) -> bool:
    allowed = int(maxlength) if maxlength and maxlength.strip().isdigit() else limit
    return len(value) <= allowed


class StarshieldPage(BasePage):
    path = "/starshield"

    BRANDING = [
        (By.CSS_SELECTOR, ".starshield-logo"),
        (By.XPATH, f"//*[self::h1 or self::h2 or self::img or self::svg][{ci_contains('starshield')} or {ci_contains('starshield', '@alt')} or {ci_contains('starshield', '@aria-label')}]"),
    ]
    MAIN_NAV = [(By.CSS_SELECTOR, "nav.main-nav"), (By.CSS_SELECTOR, "header nav, nav")]
    SERVICES = [(By.CSS_SELECTOR, "#services-section"), (By.CSS_SELECTOR, "main section")]
    SECTIONS = {
        "earth observation": [(By.CSS_SELECTOR, "#earth-observation-details"), (By.XPATH, f"//*[{ci_contains('earth observation')} and not(self::script)]")],
        "communications": [(By.CSS_SELECTOR, "#communications-details"), (By.XPATH, f"//*[{ci_contains('communications')} and not(self::script)]")],
        "hosted payloads": [(By.CSS_SELECTOR, "#hosted-payloads-details"), (By.XPATH, f"//*[{ci_contains('hosted payload')} and not(self::script)]")],
        "security": [(By.CSS_SELECTOR, "#security-specs"), (By.XPATH, f"//*[{ci_contains('security')} and not(self::script)]")],
    }
    CTAS = [
        (By.CSS_SELECTOR, "a.cta-button, button.cta-button"),
        (By.CSS_SELECTOR, "main a.button, main button, main a[class*='btn']"),
    ]
    BREADCRUMB = [(By.CSS_SELECTOR, ".breadcrumb-nav, nav[aria-label='breadcrumb'], .breadcrumb")]
    INQUIRY_FORM = [(By.CSS_SELECTOR, "form#contact-inquiry-form"), (By.CSS_SELECTOR, "main form")]
    TEXT_INPUT = [(By.CSS_SELECTOR, "input[type='text'], input:not([type])")]
    EMAIL_INPUT = [(By.CSS_SELECTOR, "input[type='email'], input[name*='email']")]
    TEXTAREA = [(By.CSS_SELECTOR, "textarea")]
    SUBMIT = [(By.CSS_SELECTOR, "button[type='submit'], input[type='submit']")]
    SUCCESS = [(By.CSS_SELECTOR, ".form-success-message, .acknowledgment-banner")]
    FIELD_ERROR = [(By.CSS_SELECTOR, ".error-message, [aria-invalid='true']")]
    EMAIL_ERROR = [(By.CSS_SELECTOR, ".email-error-message")]
    LIMIT_WARNING = [(By.CSS_SELECTOR, ".char-count, .limit-warning, .error-message")]
    VIDEO = [(By.CSS_SELECTOR, "video-player, video, iframe[src*='youtube'], iframe[title*='video']")]
    TESTIMONIALS = [(By.CSS_SELECTOR, "#customer-testimonials, .testimonials")]
    ERROR_BANNER = [(By.CSS_SELECTOR, ".global-error-message, .error-toast")]

    def __init__(self, driver, base_url: str, timeout: int = 15):
        super().__init__(driver, base_url, timeout)
        self.header = HeaderFragment(self)
        self.footer = FooterFragment(self)
        self.hero = HeroFragment(self)

    # content

    def is_branding_visible(self) -> bool:
        return self.is_visible(self.BRANDING, timeout=5) or "starshield" in self.title().lower()

    def is_main_navigation_visible(self) -> bool:
        return self.is_visible(self.MAIN_NAV, timeout=5)

    def is_services_visible(self) -> bool:
        return self.is_visible(self.SERVICES)

    def section_text(self, key: str) -> str:
        region = self.SECTIONS.get(key.lower())
        if region is None:
            raise KeyError(key)
        return self.text_of(region)

    def has_section(self, key: str) -> bool:
        region = self.SECTIONS.get(key.lower())
        return region is not None and self.count(region) > 0

    def cta_texts(self) -> list[str]:
        return [t for t in (el.text.strip() for el in self.find_visible(self.CTAS)) if t]

    def _cta(self, text: str | None):
        els = self.find_visible(self.CTAS)
        if text:
            els = [e for e in els if text.lower() in (e.text or "").lower()]
        return els[0] if els else None

    def hover_cta(self, text: str | None = None):
        el = self._cta(text)
        if el is None:
            raise AssertionError(f"CTA {text!r} not found")
        self.hover(el)
        return el

    def click_cta(self, text: str | None = None) -> None:
        el = self._cta(text)
        if el is None:
            raise AssertionError(f"CTA {text!r} not found")
        self.click(el)

    def breadcrumb_text(self) -> str:
        return self.text_of(self.BREADCRUMB)

    def is_video_present(self) -> bool:
        return self.count(self.VIDEO) > 0

    def is_video_visible(self, timeout: float = 5) -> bool:
        el = self.find_first(self.VIDEO)
        if el is None:
            return False
        self.scroll_into_view(el)
        return self.is_visible(self.VIDEO, timeout=timeout)

    def are_testimonials_visible(self) -> bool:
        return self.is_visible(self.TESTIMONIALS)

    def is_error_banner_visible(self, timeout: float = 0) -> bool:
        return self.is_visible(self.ERROR_BANNER, timeout=timeout)

    # inquiry form

    def _form(self):
        return self.find_first(self.INQUIRY_FORM)

    def has_inquiry_form(self) -> bool:
        return self._form() is not None

    def _field(self, region):
        form = self._form()
        if form is None:
            raise AssertionError("Inquiry form not found")
        el = self.find_first(region, form)
        if el is None:
            raise AssertionError(f"Inquiry form has no field matching {region[0][1]!r}")
        return el

    def _type(self, el, value: str) -> None:
        el.clear()
        if len(value) > 500:
            # send_keys is slow for long values; the input event keeps frameworks in sync
            self.driver.execute_script(
                "arguments[0].value = arguments[1];"
                "arguments[0].dispatchEvent(new Event('input', {bubbles: true}));",
                el, value,
            )
        else:
            el.send_keys(value)

    def fill_inquiry_form(self, email: str, required_text: str, long_text: str = "") -> None:
        self._type(self._field(self.TEXT_INPUT), required_text)
        self._type(self._field(self.EMAIL_INPUT), email)
        if long_text:
            self._type(self._field(self.TEXTAREA), long_text)

    def fill_email(self, email: str) -> None:
        self._type(self._field(self.EMAIL_INPUT), email)

    def fill_text(self, value: str) -> None:
        # Typed key by key so the browser applies the field's own maxlength
        el = self._field(self.TEXT_INPUT)
        el.clear()
        el.send_keys(value)

    def text_value(self) -> tuple[str, str | None]:
        el = self._field(self.TEXT_INPUT)
        return el.get_attribute("value") or "", el.get_attribute("maxlength")

    def submit_inquiry(self) -> None:
        self.click(self._field(self.SUBMIT))
        time.sleep(0.5)

    def submit_rapidly(self, times: int = 3) -> None:
        btn = self._field(self.SUBMIT)
        chain = ActionChains(self.driver).move_to_element(btn)
        for _ in range(times):
            chain = chain.click().pause(0.05)
        try:
            chain.perform()
        except WebDriverException:
            # The button may detach once the first click is handled
            logger.info("Submit button went away during rapid clicks")

    def success_message_count(self) -> int:
        return len(self.find_visible(self.SUCCESS))

    def is_success_visible(self, timeout: float = 0) -> bool:
        return self.is_visible(self.SUCCESS, timeout=timeout)

    def is_field_error_visible(self, timeout: float = 3) -> bool:
        if self.is_visible(self.FIELD_ERROR, self._form(), timeout=timeout):
            return True
        return self.has_native_validation_error()

    def is_email_error_visible(self, timeout: float = 3) -> bool:
        if self.is_visible(self.EMAIL_ERROR, self._form(), timeout=timeout):
            return True
        el = self._field(self.EMAIL_INPUT)
        return not self.driver.execute_script("return arguments[0].checkValidity();", el)

    def has_native_validation_error(self) -> bool:
        form = self._form()
        if form is None:
            return False
        return not self.driver.execute_script("return arguments[0].checkValidity();", form)

    def is_limit_warning_visible(self) -> bool:
        return self.is_visible(self.LIMIT_WARNING, self._form())

    def script_was_injected(self) -> bool:
        return bool(self.driver.execute_script("return window.__injected === true;"))
