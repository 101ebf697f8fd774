import json
import logging
import os
from dataclasses import replace

from selenium import webdriver
from selenium.common.exceptions import WebDriverException
from selenium.webdriver import ChromeOptions, EdgeOptions, FirefoxOptions, SafariOptions

from site_utils.errors import SiteConfigError
from site_utils.settings import Settings, env_flag

logger = logging.getLogger(__name__)

BROWSERSTACK_HUB = "https://hub-cloud.browserstack.com/wd/hub"
SELENIUM_VERSION = "4.22.0"
# Override keys that belong inside bstack:options rather than at the top level
BSTACK_OPTION_KEYS = frozenset({"os", "osVersion", "projectName", "buildName", "sessionName", "seleniumVersion", "local", "localIdentifier"})


def _credentials() -> tuple[str, str]:
    username, access_key = os.getenv("BROWSERSTACK_USERNAME"), os.getenv("BROWSERSTACK_ACCESS_KEY")
    if not (username and access_key):
        raise SiteConfigError("BROWSERSTACK_USERNAME or BROWSERSTACK_ACCESS_KEY is not set. Add them to .env")
    return username, access_key


def browserstack_options(test_name: str) -> dict:
    """The ``bstack:options`` block for a desktop session named after the test."""
    username, access_key = _credentials()
    opts = dict(
        os=os.getenv("OS", "Windows"),
        osVersion=os.getenv("OS_VERSION", "11"),
        projectName=os.getenv("BROWSERSTACK_PROJECT_NAME", "SpaceX Site E2E"),
        buildName=os.getenv("BROWSERSTACK_BUILD_NAME", "local-dev-build-1"),
        sessionName=test_name,
        seleniumVersion=SELENIUM_VERSION,
        userName=username,
        accessKey=access_key,
    )
    if env_flag("BROWSERSTACK_LOCAL"):
        opts["local"] = "true"
        tunnel = os.getenv("BROWSERSTACK_LOCAL_IDENTIFIER")
        if tunnel:
            opts["localIdentifier"] = tunnel
    return opts


def is_real_device(bstack_opts: dict) -> bool:
    return bool(bstack_opts.get("deviceName")) or str(bstack_opts.get("realMobile", "")).lower() in ("1", "true", "yes")


def build_capabilities(test_name: str, overrides: dict | None = None) -> dict:
    bstack_opts = browserstack_options(test_name)
    caps: dict = {
        "browserName": os.getenv("BROWSER_NAME", "Chrome"),
        "browserVersion": os.getenv("BROWSER_VERSION", "latest"),
        "bstack:options": bstack_opts,
    }
    for key, value in (overrides or {}).items():
        if key == "bstack:options" and isinstance(value, dict):
            bstack_opts.update(value)
        elif key in BSTACK_OPTION_KEYS:
            bstack_opts[key] = value
        else:
            caps[key] = value

    if is_real_device(bstack_opts):
        # Devices run on Appium and take neither a desktop OS nor a browser version
        for key in ("os", "seleniumVersion"):
            bstack_opts.pop(key, None)
        caps.pop("browserVersion", None)
        bstack_opts.setdefault("appiumVersion", os.getenv("APPIUM_VERSION", "2.0"))
    return caps


def options_for_browser(browser_name: str):
    name = (browser_name or "").lower()
    if name == "firefox":
        return FirefoxOptions()
    if name in ("edge", "microsoftedge"):
        return EdgeOptions()
    if name == "safari":
        return SafariOptions()
    opts = ChromeOptions()
    # Browser console entries are only exposed by Chromium through this pref
    opts.set_capability("goog:loggingPrefs", {"browser": "ALL"})
    return opts


def build_local_driver(settings: Settings):
    opts = options_for_browser(settings.browser_name)
    width, height = settings.window_size
    if isinstance(opts, ChromeOptions):
        if settings.headless:
            opts.add_argument("--headless=new")
        opts.add_argument("--no-sandbox")
        opts.add_argument("--disable-gpu")
        opts.add_argument(f"--window-size={width},{height}")
        # Selenium Manager (bundled) fetches chromedriver automatically
        return webdriver.Chrome(options=opts)
    if isinstance(opts, FirefoxOptions):
        if settings.headless:
            opts.add_argument("-headless")
        driver = webdriver.Firefox(options=opts)
    elif isinstance(opts, EdgeOptions):
        if settings.headless:
            opts.add_argument("--headless=new")
        driver = webdriver.Edge(options=opts)
    else:
        driver = webdriver.Safari(options=opts)
    driver.set_window_size(width, height)
    return driver


def build_remote_driver(test_name: str, overrides: dict | None = None):
    if env_flag("USE_BSTACK_SDK"):
        # The BrowserStack SDK owns capabilities, credentials and the hub URL
        return webdriver.Remote(options=options_for_browser(os.getenv("BROWSER_NAME", "Chrome")))

    caps = build_capabilities(test_name=test_name, overrides=overrides)
    opts = options_for_browser(caps.get("browserName"))
    for k, v in caps.items():
        opts.set_capability(k, v)
    return webdriver.Remote(command_executor=BROWSERSTACK_HUB, options=opts)


def build_driver(settings: Settings, test_name: str, overrides: dict | None = None):
    if settings.target == "browserstack":
        logger.info("Starting BrowserStack session for %s", test_name)
        return build_remote_driver(test_name, overrides)
    if settings.target == "local":
        if overrides and overrides.get("browserName"):
            settings = replace(settings, browser_name=overrides["browserName"])
        logger.info("Starting local %s for %s", settings.browser_name, test_name)
        return build_local_driver(settings)
    raise SiteConfigError("No browser target configured. Set E2E_TARGET=local or add BrowserStack credentials to .env")


def mark_session_status(driver, status: str, reason: str) -> None:
    """Report the outcome to the BrowserStack dashboard; local drivers ignore it."""
    if not isinstance(driver, webdriver.Remote) or isinstance(driver, (webdriver.Chrome, webdriver.Firefox, webdriver.Edge, webdriver.Safari)):
        return
    payload = {"action": "setSessionStatus", "arguments": {"status": status, "reason": reason[:250]}}
    try:
        driver.execute_script("browserstack_executor: " + json.dumps(payload))
    except WebDriverException as e:
        logger.warning("Could not report session status: %s", e.msg)
