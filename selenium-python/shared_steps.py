"""Steps shared by every feature: opening pages and page-level health checks.

Imported into conftest.py so pytest-bdd registers them for all test modules.
"""

import logging

import pytest
from pytest_bdd import given, parsers, then, when

from site_pages import PAGES, BasePage
from site_pages.fragments import FooterFragment, HeaderFragment
from site_utils.errors import BrowserFeatureUnavailable
from site_utils.links import broken_links, check_links, same_host
from site_utils.viewport import ViewportUtility

logger = logging.getLogger(__name__)


# ---- navigation -------------------------------------------------------------


@given(parsers.parse("the user is on the {name} page"), target_fixture="page")
def open_named_page(name, driver, settings, context):
    cls = PAGES.get(name.strip().lower())
    if cls is None:
        raise KeyError(f"No page object named {name!r}; known: {', '.join(sorted(PAGES))}")
    page = cls(driver, settings.base_url, settings.timeout).navigate()
    context.page = page
    return page


@given(parsers.parse('the user opens "{path}"'), target_fixture="page")
@when(parsers.parse('the user opens "{path}"'), target_fixture="page")
def open_path(path, driver, settings, context):
    page = BasePage(driver, settings.base_url, settings.timeout)
    page.open(path)
    page.wait_for_app_content()
    context.page = page
    return page


@given(parsers.parse("requests matching {patterns} are blocked"))
def block_requests(page, patterns):
    try:
        page.block_requests([p.strip().strip('"') for p in patterns.split(",")])
    except BrowserFeatureUnavailable as e:
        pytest.skip(str(e))


@given("live form submissions are allowed")
def live_submissions_allowed(settings):
    if not settings.allow_submissions:
        pytest.skip("Set ALLOW_FORM_SUBMISSIONS=true to send real form submissions")


@when("the blocked requests are allowed again")
def allow_requests(page):
    page.unblock_requests()


@when("the user reloads the page")
def reload_page(page):
    page.driver.refresh()
    page.wait_ready()
    page.wait_for_app_content()


@when("the user scrolls to the bottom of the page")
def scroll_to_bottom(page):
    page.scroll_to_bottom()


# ---- content ----------------------------------------------------------------


@then(parsers.parse('the page title should contain "{text}"'))
def title_contains(page, text, assertion_helper):
    assertion_helper.assert_contains(page.title(), text, f"Title {page.title()!r} should contain {text!r}")


@then("the page should show a main heading")
def has_main_heading(page):
    outline = page.heading_outline()
    assert outline and any(txt for _, txt in outline), "Page should have at least one non-empty heading"


@then(parsers.parse('the page should mention "{text}"'))
def page_mentions(page, text, assertion_helper):
    assertion_helper.assert_contains(page.body_text(), text, f"Page should mention {text!r}")


@then("the page should report that it was not found")
def page_not_found(page):
    text = page.body_text().lower()
    title = page.title().lower()
    assert "404" in text or "not found" in text or "404" in title or "not found" in title, (
        f"Unexpected content for missing page: {page.driver.current_url}"
    )


@then("the meta description should not be empty")
def meta_description(page, assertion_helper):
    assertion_helper.assert_value_present(page.meta_content("description").strip(), "Meta description should be set")


@then("the viewport meta tag should allow device-width scaling")
def viewport_meta(page, assertion_helper):
    assertion_helper.validate_boolean_check(
        page.is_viewport_meta_configured, f"viewport meta should include width=device-width, got {page.viewport_meta()!r}"
    )


# ---- health -----------------------------------------------------------------


@then("no images on the page should be broken")
def no_broken_images(page):
    page.scroll_to_bottom()
    assert page.are_all_images_loaded(), f"Broken images: {page.broken_images()[:10]}"


@then("there should be no console errors")
def no_console_errors(page):
    errors = page.console_errors()
    assert not errors, f"Console errors: {errors[:5]}"


@then("the links on the page should not be broken")
def no_broken_links(page, settings, http):
    links = [u for u in page.page_links() if same_host(u, settings.base_url)]
    results = check_links(links, session=http, limit=settings.link_check_limit)
    bad = broken_links(results)
    assert not bad, "Broken links: " + ", ".join(f"{r.url} ({r.status or r.reason})" for r in bad[:10])


@then(parsers.parse("the page should finish loading within {limit_ms:d} milliseconds"))
def load_within(page, limit_ms, assertion_helper):
    assertion_helper.assert_metric(page.load_timing_ms(), limit_ms, "Page load time in ms")


@then(parsers.parse("the Largest Contentful Paint should be under {limit_ms:d} milliseconds"))
def lcp_under(page, limit_ms, assertion_helper, context):
    context.metrics = page.performance_metrics()
    if context.metrics.lcp is None:
        pytest.skip("Browser does not report largest-contentful-paint")
    assertion_helper.assert_metric(context.metrics.lcp, limit_ms, "Largest Contentful Paint in ms")


@then(parsers.parse("the cumulative layout shift should be under {limit:f}"))
def cls_under(page, limit, assertion_helper, context):
    metrics = getattr(context, "metrics", None) or page.performance_metrics()
    assertion_helper.assert_metric(metrics.cls if metrics.cls is not None else 0.0, limit, "Cumulative layout shift")


# ---- accessibility ----------------------------------------------------------


@then("the page should have a title, a language and a main landmark")
def basic_accessibility(page):
    report = page.basic_accessibility()
    assert report.has_title, "Document title should not be empty"
    assert report.has_lang, "<html> should carry a lang attribute"
    assert report.has_main_landmark, "Page should have a <main> or role=main landmark"


@then("the headings should follow a logical order")
def heading_order(page, assertion_helper):
    assertion_helper.validate_boolean_check(
        page.has_logical_heading_order, f"Heading outline is not logical: {page.heading_outline()[:10]}"
    )


@then(parsers.parse("at most {count:d} images should be missing alt text"))
def images_missing_alt(page, count):
    missing = page.basic_accessibility().images_missing_alt
    assert missing <= count, f"{missing} images have no alt attribute"


# ---- layout -----------------------------------------------------------------


@then("the site header should be visible")
def header_visible(page):
    assert HeaderFragment(page).is_navigation_visible(), "Header navigation should be visible"


@then("the footer should be visible")
def footer_visible(page):
    assert FooterFragment(page).is_footer_visible(), "Footer should be visible"


@then("the primary navigation should be usable on mobile, tablet and desktop")
def navigation_across_viewports(page, viewport_utility):
    header = HeaderFragment(page)
    failures = []

    def check(size):
        if not header.is_primary_navigation_usable():
            failures.append(ViewportUtility.viewport_name(size))

    viewport_utility.check_all_viewports(check)
    assert not failures, f"Navigation not usable at: {', '.join(failures)}"


@then("the page should not scroll horizontally at any viewport")
def no_horizontal_scroll(page, viewport_utility):
    overflow = []

    def check(size):
        wide = page.driver.execute_script(
            "return document.documentElement.scrollWidth > document.documentElement.clientWidth + 1;"
        )
        if wide:
            overflow.append(ViewportUtility.viewport_name(size))

    viewport_utility.check_all_viewports(check)
    assert not overflow, f"Horizontal overflow at: {', '.join(overflow)}"
