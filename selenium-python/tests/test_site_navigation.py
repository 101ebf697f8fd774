import pytest
from pytest_bdd import given, parsers, scenarios, then, when

from site_pages.fragments import FooterFragment, HeaderFragment
from site_utils.viewport import MOBILE

pytestmark = [pytest.mark.ui]

scenarios("navigation.feature")


@pytest.fixture
def header(page):
    return HeaderFragment(page)


@pytest.fixture
def footer(page):
    return FooterFragment(page)


@given(parsers.parse('the navigation link "{link}" is shown'))
def nav_link_shown(header, link):
    if not header.is_nav_link_visible(link):
        pytest.skip(f"{link!r} is not in the header at this window size")


@given("the browser window is phone sized")
def phone_window(page):
    page.driver.set_window_size(MOBILE.width, MOBILE.height)
    page.wait_ready()


@when(parsers.parse('the user follows the navigation link "{link}"'))
def follow_nav_link(page, header, link):
    header.click_nav_link(link)
    page.wait_ready()
    page.wait_for_app_content()


@when("the user opens the navigation menu")
def open_menu(header):
    header.open_menu()


@then("the site logo should be visible and clickable")
def logo(header):
    assert header.is_logo_visible(), "Logo should be visible"
    assert header.is_logo_clickable(), "Logo should be clickable"


@then(parsers.parse('the address should contain "{path}"'))
def address_contains(page, path):
    assert path in page.driver.current_url, f"Expected {path!r} in {page.driver.current_url}"


@then("the navigation menu should start collapsed")
def menu_collapsed(header):
    if not header.is_menu_button_visible():
        pytest.skip("No menu button at phone size")
    assert header.is_menu_collapsed(), "Menu should be closed before it is opened"


@then("the navigation menu should be expanded")
def menu_expanded(header):
    assert header.is_mobile_menu_expanded(), "Menu should open after pressing the menu button"


@then("the footer should link to:")
def footer_links(footer, datatable):
    missing = footer.has_links([row[0] for row in datatable[1:]])
    assert not missing, f"Footer is missing links: {missing}; has {footer.link_texts()}"


@then(parsers.parse('the footer copyright should mention "{text}"'))
def footer_copyright(footer, text, assertion_helper):
    assertion_helper.assert_contains(footer.copyright_text(), text, f"Copyright should mention {text!r}")


@then(parsers.parse("the footer should link to at least {count:d} social networks"))
def footer_social(footer, count):
    links = footer.social_links()
    assert len(links) >= count, f"Expected at least {count} social links, found {links}"
