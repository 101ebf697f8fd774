import pytest

SUITE_ENV = (
    "UI_BASE_URL",
    "TEST_URL",
    "E2E_TARGET",
    "BROWSER_NAME",
    "BROWSER_VERSION",
    "HEADLESS",
    "SHOW_BROWSER",
    "WINDOW_SIZE",
    "UI_TIMEOUT",
    "LINK_CHECK_LIMIT",
    "ALLOW_FORM_SUBMISSIONS",
    "BROWSERSTACK_USERNAME",
    "BROWSERSTACK_ACCESS_KEY",
    "BROWSERSTACK_PROJECT_NAME",
    "BROWSERSTACK_BUILD_NAME",
    "BROWSERSTACK_LOCAL",
    "BROWSERSTACK_LOCAL_IDENTIFIER",
    "OS",
    "OS_VERSION",
    "APPIUM_VERSION",
    "USE_BSTACK_SDK",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Environment with none of the suite's variables set."""
    for key in SUITE_ENV:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch
