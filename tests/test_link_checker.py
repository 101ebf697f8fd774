from unittest import mock

import pytest
import requests

from site_utils import links
from site_utils.links import (
    LinkResult,
    broken_links,
    check_links,
    extract_links,
    icon_url,
    is_checkable,
    normalize_url,
    same_host,
)


def _response(status, reason="OK"):
    r = mock.MagicMock()
    r.status_code = status
    r.reason = reason
    return r


@pytest.fixture
def session():
    s = mock.MagicMock()
    s.head.return_value = _response(200)
    return s


@pytest.mark.parametrize(
    "url,expected",
    [
        ("HTTPS://WWW.SpaceX.com/vehicles/dragon/", "https://www.spacex.com/vehicles/dragon"),
        ("https://www.spacex.com//updates#top", "https://www.spacex.com/updates"),
        ("https://www.spacex.com", "https://www.spacex.com/"),
        ("https://www.spacex.com/?page=2", "https://www.spacex.com/?page=2"),
    ],
)
def test_normalize_url(url, expected):
    assert normalize_url(url) == expected


def test_same_host():
    assert same_host("https://www.spacex.com/a", "https://WWW.SPACEX.COM/b")
    assert not same_host("https://www.spacex.com/a", "https://spacex.com/a")


@pytest.mark.parametrize(
    "url,ok",
    [
        ("https://www.spacex.com/", True),
        ("http://example.com/x", True),
        ("mailto:suppliers@spacex.com", False),
        ("tel:+13103636000", False),
        ("javascript:void(0)", False),
        ("#main", False),
        ("/relative", False),
        ("", False),
        (None, False),
    ],
)
def test_is_checkable(url, ok):
    assert is_checkable(url) is ok


def test_extract_links_resolves_relative_hrefs():
    html = """
      <a href="/vehicles/dragon">Dragon</a>
      <a href="mailto:x@spacex.com">mail</a>
      <a>no href</a>
      <link rel="icon" href="/favicon.ico">
      <a href="https://shop.spacex.com/">Shop</a>
    """
    assert extract_links(html, "https://www.spacex.com/") == [
        "https://www.spacex.com/vehicles/dragon",
        "https://shop.spacex.com/",
    ]


@pytest.mark.parametrize(
    "html,expected",
    [
        ('<link rel="shortcut icon" href="/static/favicon.png">', "https://www.spacex.com/static/favicon.png"),
        ('<link rel="icon" href="//cdn.spacex.com/favicon.ico">', "https://cdn.spacex.com/favicon.ico"),
        ('<LINK REL="Icon" HREF="favicon.svg">', "https://www.spacex.com/vehicles/favicon.svg"),
        ('<link rel="stylesheet" href="/site.css">', "https://www.spacex.com/favicon.ico"),
        ("", "https://www.spacex.com/favicon.ico"),
    ],
)
def test_icon_url(html, expected):
    assert icon_url(html, "https://www.spacex.com/vehicles/") == expected


def test_ok_link(session):
    [result] = check_links(["https://www.spacex.com/updates"], session=session)
    assert result == LinkResult("https://www.spacex.com/updates", 200, True, "OK")
    session.get.assert_not_called()


def test_head_rejected_falls_back_to_streamed_get(session):
    session.head.return_value = _response(405, "Method Not Allowed")
    get_response = _response(200)
    session.get.return_value = get_response

    [result] = check_links(["https://www.spacex.com/media"], session=session)

    assert result.ok and result.status == 200
    assert session.get.call_args.kwargs["stream"] is True
    get_response.close.assert_called_once_with()


def test_not_found_is_broken(session):
    session.head.return_value = _response(404, "Not Found")
    results = check_links(["https://www.spacex.com/gone"], session=session)
    assert broken_links(results) == results
    assert results[0].reason == "Not Found"


def test_network_error_is_broken(session):
    session.head.side_effect = requests.ConnectionError("refused")
    [result] = check_links(["https://www.spacex.com/"], session=session)
    assert result.status is None
    assert not result.ok
    assert result.reason == "ConnectionError"


def test_duplicates_and_uncheckable_links_skipped(session):
    urls = [
        "https://www.spacex.com/updates",
        "https://www.spacex.com/updates/",
        "https://www.spacex.com/updates#latest",
        "mailto:media@spacex.com",
        "https://www.spacex.com/careers",
    ]
    results = check_links(urls, session=session)
    assert [r.url for r in results] == ["https://www.spacex.com/updates", "https://www.spacex.com/careers"]


def test_limit(session):
    urls = [f"https://www.spacex.com/p{i}" for i in range(10)]
    assert len(check_links(urls, session=session, limit=3)) == 3
    assert len(check_links(urls, session=session, limit=None)) == 10


def test_own_session_is_closed():
    with mock.patch.object(links.requests, "Session") as session_cls:
        own = session_cls.return_value
        own.headers = {}
        own.head.return_value = _response(200)
        check_links(["https://www.spacex.com/"])
    assert own.headers["User-Agent"] == links.USER_AGENT
    own.close.assert_called_once_with()


def test_given_session_is_left_open(session):
    check_links(["https://www.spacex.com/"], session=session)
    session.close.assert_not_called()
