from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from selenium.webdriver.common.by import By

from site_pages.base_page import BasePage, ci_contains
from site_pages.fragments import FooterFragment, HeaderFragment

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"\S+@\S+\.\S+")
PHONE_RE = re.compile(r"(\+?\d{1,3}[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}")
REFERENCE_RE = re.compile(r"\b[A-Z]{2,}-?\d{4,}\b|\b\d{6,}\b")

# Field group -> substrings looked for in a control's name or id
REQUIRED_FIELD_GROUPS = (
    ("company", ("company",)),
    ("legal name", ("legal name", "legal_name", "legalname", "legal-name")),
    ("address", ("address",)),
    ("products/services", ("product", "service")),
    ("certifications", ("certification", "qualification", "cert", "qual")),
    ("contact details", ("email", "phone", "contact")),
    ("references", ("reference",)),
)
NON_TEXT_INPUTS = {"checkbox", "radio", "submit", "button", "hidden", "file", "image", "reset"}


@dataclass
class ContactInfo:
    email: str = ""
    phone: str = ""


@dataclass
class LoginFields:
    has_username: bool
    has_password: bool


def extract_contact(text: str) -> ContactInfo:
    text = text or ""
    email = EMAIL_RE.search(text)
    phone = PHONE_RE.search(text)
    return ContactInfo(
        email=email.group(0).rstrip(".,;") if email else "",
        phone=phone.group(0).strip() if phone else "",
    )


def required_field_groups(control_keys: list[str]) -> list[str]:
    """Map form control names/ids to the registration field groups they cover."""
    keys = [k.lower() for k in control_keys if k]
    found = []
    for group, needles in REQUIRED_FIELD_GROUPS:
        if any(n in k for k in keys for n in needles):
            found.append(group)
    return found


def is_prominent(rect: dict | None) -> bool:
    return bool(rect) and (rect.get("width", 0) > 100 or rect.get("height", 0) > 30)


class SuppliersPage(BasePage):
    path = "/suppliers"

    PROGRAM = [
        (By.CSS_SELECTOR, "[data-testid='supplier-program'], .supplier-program"),
        (By.CSS_SELECTOR, "main section, section"),
    ]
    CONTACT = [
        (By.CSS_SELECTOR, "[data-testid='contact-info'], .contact-information, .supplier-contact"),
        (By.XPATH, f"//*[self::section or self::div][.//a[starts-with(@href,'mailto:')]][{ci_contains('contact')}]"),
        (By.XPATH, "//a[starts-with(@href,'mailto:')]/.."),
    ]
    QUALIFICATION = [
        (By.CSS_SELECTOR, "[data-testid='qualification-criteria'], .qualification-criteria, .requirements"),
        (By.XPATH, f"//*[self::section or self::div][.//*[self::h2 or self::h3][{ci_contains('requirement')} or {ci_contains('qualification')}]]"),
    ]
    REGISTRATION_FORM = [
        (By.CSS_SELECTOR, "[data-testid='supplier-registration'], .supplier-registration"),
        (By.CSS_SELECTOR, "form"),
    ]
    FORM_CONTROLS = [(By.CSS_SELECTOR, "input, select, textarea")]
    SUBMIT = [(By.CSS_SELECTOR, "button[type='submit'], input[type='submit']")]
    CONFIRMATION = [(By.CSS_SELECTOR, "[data-testid='confirmation-message'], .confirmation-message, .success-message")]
    REFERENCE = [(By.CSS_SELECTOR, "[data-testid='application-reference'], .reference-number, .application-id")]
    TIMELINE = [(By.CSS_SELECTOR, "[data-testid='review-timeline'], .timeline, .review-time")]
    RESOURCES = [
        (By.CSS_SELECTOR, "[data-testid='supplier-resources'], .supplier-resources, .resources"),
        (By.XPATH, f"//*[self::section or self::div][.//*[self::h2 or self::h3][{ci_contains('resources')} or {ci_contains('documents')}]]"),
    ]
    RESOURCE_LINKS = [
        (By.CSS_SELECTOR, "a[href*='.pdf'], a[href*='download'], a[download]"),
    ]
    FAQ = [
        (By.CSS_SELECTOR, "[data-testid='supplier-faq'], .faq-section, .faq"),
        (By.XPATH, f"//*[self::section or self::div][.//*[self::h2 or self::h3][{ci_contains('faq')} or {ci_contains('questions')}]]"),
    ]
    FAQ_ITEMS = [(By.CSS_SELECTOR, "details, .faq-item, [data-faq]")]
    FAQ_QUESTION = [(By.CSS_SELECTOR, "summary, .question, h3")]
    RFQS = [(By.CSS_SELECTOR, "[data-testid='active-rfqs'], .rfq-opportunities, .rfq-list")]
    RFQ_ITEMS = [(By.CSS_SELECTOR, ".rfq-item, [data-rfq], li")]
    PORTAL = [
        (By.CSS_SELECTOR, "[data-testid='supplier-portal'], .supplier-portal, .portal-login"),
        (By.XPATH, f"//a[{ci_contains('portal')} or {ci_contains('supplier login')} or {ci_contains('log in')}]"),
    ]
    LOGIN_FORM = [(By.CSS_SELECTOR, "[data-testid='login-form'], .login-form"), (By.CSS_SELECTOR, "form")]
    USERNAME_FIELD = [(By.CSS_SELECTOR, "input[type='text'], input[type='email'], input[name*='user'], input[name*='email']")]
    PASSWORD_FIELD = [(By.CSS_SELECTOR, "input[type='password'], input[name*='password']")]
    PASSWORD_RESET = [
        (By.CSS_SELECTOR, "[data-testid='password-reset'], .password-reset, .forgot-password"),
        (By.XPATH, f"//a[{ci_contains('forgot')} or {ci_contains('reset')}]"),
    ]

    def __init__(self, driver, base_url: str, timeout: int = 15):
        super().__init__(driver, base_url, timeout)
        self.header = HeaderFragment(self)
        self.footer = FooterFragment(self)

    # program and contact

    def is_program_info_visible(self) -> bool:
        return self.is_visible(self.PROGRAM, timeout=5)

    def program_text(self) -> str:
        return " ".join(self.texts_of(self.PROGRAM)) or self.body_text()

    def contact_text(self) -> str:
        return self.text_of(self.CONTACT)

    def is_contact_info_displayed(self) -> bool:
        return self.is_visible(self.CONTACT)

    def contact_info(self) -> ContactInfo:
        info = extract_contact(self.contact_text())
        if not info.email:
            mailto = self.attribute_of([(By.CSS_SELECTOR, "a[href^='mailto:']")], "href")
            if mailto:
                info.email = mailto.split(":", 1)[1].split("?", 1)[0]
        return info

    # qualification

    def is_qualification_criteria_visible(self) -> bool:
        return self.is_visible(self.QUALIFICATION)

    def qualification_text(self) -> str:
        return self.text_of(self.QUALIFICATION) or self.body_text()

    def has_certification(self, name: str) -> bool:
        return name.lower() in self.qualification_text().lower()

    # registration

    def _registration_form(self):
        return self.find_first(self.REGISTRATION_FORM)

    def is_registration_form_accessible(self) -> bool:
        return self.is_visible(self.REGISTRATION_FORM)

    def required_form_fields(self) -> list[str]:
        form = self._registration_form()
        if form is None:
            return []
        keys = []
        for el in self.find_all(self.FORM_CONTROLS, form):
            keys.extend([el.get_attribute("name") or "", el.get_attribute("id") or ""])
        return required_field_groups(keys)

    def fill_registration(self, values: dict[str, str]) -> list[str]:
        """Type ``values`` (keyed by field group) into the matching text controls.

        Returns the groups that found a control to fill.
        """
        form = self._registration_form()
        if form is None:
            raise AssertionError("Supplier registration form not found")
        filled = []
        for el in self.find_all(self.FORM_CONTROLS, form):
            if el.tag_name.lower() == "select" or (el.get_attribute("type") or "text").lower() in NON_TEXT_INPUTS:
                continue
            key = f"{el.get_attribute('name') or ''} {el.get_attribute('id') or ''}".lower()
            for group, needles in REQUIRED_FIELD_GROUPS:
                if group in values and group not in filled and any(n in key for n in needles):
                    el.clear()
                    el.send_keys(values[group])
                    filled.append(group)
                    break
        return filled

    def submit_registration(self) -> None:
        form = self._registration_form()
        btn = self.find_first(self.SUBMIT, form) if form is not None else None
        if btn is None:
            raise AssertionError("Registration form has no submit button")
        self.click(btn)

    def is_confirmation_visible(self, timeout: float = 10) -> bool:
        return self.is_visible(self.CONFIRMATION, timeout=timeout)

    def application_reference(self) -> str:
        txt = self.text_of(self.REFERENCE)
        m = REFERENCE_RE.search(txt)
        return m.group(0) if m else txt

    def review_timeline(self) -> str:
        return self.text_of(self.TIMELINE)

    # resources

    def are_resources_available(self) -> bool:
        return self.is_visible(self.RESOURCES)

    def resources_text(self) -> str:
        return self.text_of(self.RESOURCES)

    def available_resources(self) -> list[str]:
        root = self.find_first(self.RESOURCES)
        links = self.find_all(self.RESOURCE_LINKS, root) if root is not None else self.find_all(self.RESOURCE_LINKS)
        out = []
        for a in links:
            label = (a.text or a.get_attribute("textContent") or a.get_attribute("href") or "").strip()
            if label:
                out.append(label)
        return out

    def documents_show_version_info(self) -> bool:
        txt = self.resources_text()
        return bool(re.search(r"\b(v|version|rev(ision)?)\s?\d+(\.\d+)*\b|\b(19|20)\d{2}\b|updated", txt, re.IGNORECASE))

    # FAQ and RFQs

    def is_faq_visible(self) -> bool:
        return self.is_visible(self.FAQ)

    def faq_topics(self) -> list[str]:
        root = self.find_first(self.FAQ)
        if root is None:
            return []
        topics = []
        for item in self.find_all(self.FAQ_ITEMS, root):
            q = self.text_of(self.FAQ_QUESTION, item)
            if q:
                topics.append(q)
        return topics

    def are_rfqs_displayed(self) -> bool:
        return self.is_visible(self.RFQS)

    def rfq_count(self) -> int:
        root = self.find_first(self.RFQS)
        return self.count(self.RFQ_ITEMS, root) if root is not None else 0

    def rfqs_text(self) -> str:
        return self.text_of(self.RFQS)

    # supplier portal

    def is_portal_accessible(self) -> bool:
        return self.is_visible(self.PORTAL)

    def is_portal_prominent(self) -> bool:
        el = self.find_first(self.PORTAL)
        return el is not None and is_prominent(self.bounding_box(el))

    def open_portal(self) -> None:
        el = self.find_first(self.PORTAL)
        if el is None:
            raise AssertionError("Supplier portal entry point not found")
        self.click(el)
        self.wait_ready()

    def is_login_form_visible(self) -> bool:
        return self.is_visible(self.LOGIN_FORM, timeout=5)

    def login_fields(self) -> LoginFields:
        form = self.find_first(self.LOGIN_FORM)
        if form is None:
            return LoginFields(False, False)
        return LoginFields(
            has_username=self.count(self.USERNAME_FIELD, form) > 0,
            has_password=self.count(self.PASSWORD_FIELD, form) > 0,
        )

    def is_password_reset_available(self) -> bool:
        return self.is_visible(self.PASSWORD_RESET)
