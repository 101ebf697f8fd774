import pytest

from site_pages import PAGES
from site_pages.fragments import FooterFragment, HeaderFragment
from site_utils.settings import env_flag

pytestmark = [pytest.mark.ui]

if env_flag("USE_BSTACK_SDK"):
    MATRIX = [{}]
    MATRIX_IDS = ["sdk-platform"]
else:
    MATRIX = [
        {"browserName": "Chrome", "os": "Windows", "osVersion": "11"},
        {"browserName": "Firefox", "os": "Windows", "osVersion": "11"},
        {"browserName": "Edge", "os": "Windows", "osVersion": "11"},
    ]
    MATRIX_IDS = [
        "win11-chrome",
        "win11-firefox",
        "win11-edge",
    ]


@pytest.mark.parametrize("driver", MATRIX, indirect=True, ids=MATRIX_IDS)
@pytest.mark.parametrize("name", ["home", "dragon", "starshield"])
def test_page_renders_key_elements(driver, settings, name):
    page = PAGES[name](driver, settings.base_url, settings.timeout).navigate()

    assert page.title(), "Title should not be empty"
    assert HeaderFragment(page).is_navigation_visible(), "Header navigation should be visible"
    assert page.heading_outline(), "Page should render at least one heading"
    assert FooterFragment(page).is_footer_visible(), "Footer should be present"
