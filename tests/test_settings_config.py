import pytest

from site_utils.errors import SiteConfigError
from site_utils.settings import DEFAULT_BASE_URL, Settings, env_flag


def test_defaults_without_environment(clean_env):
    s = Settings.from_env(load_file=False)
    assert s.base_url == DEFAULT_BASE_URL
    assert s.target == ""
    assert not s.browser_enabled
    assert s.headless is True
    assert s.window_size == (1280, 900)
    assert s.timeout == 15
    assert s.link_check_limit == 40
    assert s.allow_submissions is False


def test_test_url_is_used_and_trailing_slash_stripped(clean_env):
    clean_env.setenv("TEST_URL", "https://staging.example.com/")
    assert Settings.from_env(load_file=False).base_url == "https://staging.example.com"


def test_ui_base_url_wins_over_test_url(clean_env):
    clean_env.setenv("TEST_URL", "https://a.example.com")
    clean_env.setenv("UI_BASE_URL", "https://b.example.com")
    assert Settings.from_env(load_file=False).base_url == "https://b.example.com"


def test_credentials_select_browserstack(clean_env):
    clean_env.setenv("BROWSERSTACK_USERNAME", "user")
    clean_env.setenv("BROWSERSTACK_ACCESS_KEY", "key")
    s = Settings.from_env(load_file=False)
    assert s.target == "browserstack"
    assert s.browser_enabled


def test_explicit_local_target(clean_env):
    clean_env.setenv("E2E_TARGET", " LOCAL ")
    clean_env.setenv("BROWSERSTACK_USERNAME", "user")
    clean_env.setenv("BROWSERSTACK_ACCESS_KEY", "key")
    assert Settings.from_env(load_file=False).target == "local"


def test_unknown_target_rejected(clean_env):
    clean_env.setenv("E2E_TARGET", "grid")
    with pytest.raises(SiteConfigError, match="E2E_TARGET"):
        Settings.from_env(load_file=False)


def test_window_size_parsed(clean_env):
    clean_env.setenv("WINDOW_SIZE", "1024 x 768")
    assert Settings.from_env(load_file=False).window_size == (1024, 768)


def test_bad_window_size_rejected(clean_env):
    clean_env.setenv("WINDOW_SIZE", "large")
    with pytest.raises(SiteConfigError, match="WINDOW_SIZE"):
        Settings.from_env(load_file=False)


def test_bad_timeout_rejected(clean_env):
    clean_env.setenv("UI_TIMEOUT", "soon")
    with pytest.raises(SiteConfigError, match="UI_TIMEOUT"):
        Settings.from_env(load_file=False)


def test_show_browser_disables_headless(clean_env):
    clean_env.setenv("HEADLESS", "true")
    clean_env.setenv("SHOW_BROWSER", "1")
    assert Settings.from_env(load_file=False).headless is False


@pytest.mark.parametrize(
    "raw,expected",
    [("1", True), ("yes", True), ("On", True), ("false", False), ("0", False), ("", False)],
)
def test_env_flag(clean_env, raw, expected):
    clean_env.setenv("FLAG_UNDER_TEST", raw)
    assert env_flag("FLAG_UNDER_TEST") is expected


def test_env_flag_default_when_unset(clean_env):
    clean_env.delenv("FLAG_UNDER_TEST", raising=False)
    assert env_flag("FLAG_UNDER_TEST", default=True) is True


@pytest.mark.parametrize(
    "path,expected",
    [
        ("", "https://www.spacex.com"),
        ("/updates", "https://www.spacex.com/updates"),
        ("vehicles/dragon", "https://www.spacex.com/vehicles/dragon"),
        ("https://other.example.com/x", "https://other.example.com/x"),
    ],
)
def test_url_joins_paths(path, expected):
    assert Settings(base_url="https://www.spacex.com").url(path) == expected


def test_form_submissions_opt_in(clean_env):
    clean_env.setenv("ALLOW_FORM_SUBMISSIONS", "true")
    assert Settings.from_env(load_file=False).allow_submissions is True
