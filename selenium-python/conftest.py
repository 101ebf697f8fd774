import logging

import pytest
import requests

from site_utils.assertions import AssertionHelper
from site_utils.browser import build_driver, mark_session_status
from site_utils.links import USER_AGENT
from site_utils.settings import Settings
from site_utils.viewport import ViewportUtility

# Shared Given/When/Then steps have to be importable from here for pytest-bdd to find them
from shared_steps import *  # noqa: F401,F403

logger = logging.getLogger(__name__)


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    rep = outcome.get_result()
    setattr(item, "rep_" + rep.when, rep)


@pytest.fixture(scope="session")
def settings():
    return Settings.from_env()


@pytest.fixture
def driver(request, settings):
    if not settings.browser_enabled:
        pytest.skip("No browser target: set E2E_TARGET=local or add BrowserStack credentials to .env")

    # Support per-test overrides via indirect parametrization
    overrides = getattr(request, "param", None)
    driver = build_driver(settings, request.node.name, overrides if isinstance(overrides, dict) else None)
    driver.set_page_load_timeout(max(settings.timeout * 4, 60))

    yield driver

    rep = getattr(request.node, "rep_call", None)
    if rep is not None and not rep.skipped:
        status = "passed" if rep.passed else "failed"
        lines = str(rep.longrepr or "").strip().splitlines()
        reason = "All steps passed" if rep.passed else (lines[-1] if lines else "failed")
        mark_session_status(driver, status, reason)
    driver.quit()


@pytest.fixture
def context():
    """Shared context for passing data between steps."""

    class Context:
        """Simple namespace for step data."""

        pass

    return Context()


@pytest.fixture
def http():
    s = requests.Session()
    s.headers["User-Agent"] = USER_AGENT
    yield s
    s.close()


@pytest.fixture
def assertion_helper():
    return AssertionHelper()


@pytest.fixture
def viewport_utility(driver):
    return ViewportUtility(driver)


@pytest.fixture(scope="session")
def live_base_url(settings):
    """Base URL of the site, skipping the test when it cannot be reached."""
    try:
        requests.head(settings.base_url, timeout=10, allow_redirects=True, headers={"User-Agent": USER_AGENT})
    except requests.RequestException as e:
        pytest.skip(f"{settings.base_url} is unreachable: {type(e).__name__}")
    return settings.base_url
