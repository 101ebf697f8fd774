from unittest import mock

import pytest

from site_pages.human_spaceflight_page import HumanSpaceflightPage
from site_pages.starshield_page import StarshieldPage
from site_pages.updates_page import UpdatesPage


@pytest.fixture
def starshield():
    return StarshieldPage(mock.MagicMock(), "https://www.spacex.com")


@pytest.fixture
def updates():
    return UpdatesPage(mock.MagicMock(), "https://www.spacex.com")


# ---- starshield inquiry form ------------------------------------------------


def test_fill_text_types_the_whole_value(starshield, monkeypatch):
    field = mock.MagicMock()
    field.get_attribute.return_value = "100"
    monkeypatch.setattr(starshield, "_field", lambda region: field)

    starshield.fill_text("A" * 6000)

    field.clear.assert_called_once()
    field.send_keys.assert_called_once_with("A" * 6000)
    starshield.driver.execute_script.assert_not_called()


# ---- starshield video -------------------------------------------------------


def test_video_without_player(starshield, monkeypatch):
    monkeypatch.setattr(starshield, "find_first", lambda region, root=None: None)
    assert not starshield.is_video_visible()


def test_hidden_video_player_is_not_visible(starshield, monkeypatch):
    player = mock.MagicMock()
    monkeypatch.setattr(starshield, "find_first", lambda region, root=None: player)
    monkeypatch.setattr(starshield, "scroll_into_view", mock.MagicMock())
    monkeypatch.setattr(starshield, "is_visible", lambda region, root=None, timeout=0: False)

    assert not starshield.is_video_visible()
    starshield.scroll_into_view.assert_called_once_with(player)


def test_displayed_video_player(starshield, monkeypatch):
    monkeypatch.setattr(starshield, "find_first", lambda region, root=None: mock.MagicMock())
    monkeypatch.setattr(starshield, "scroll_into_view", mock.MagicMock())
    monkeypatch.setattr(starshield, "is_visible", lambda region, root=None, timeout=0: True)
    assert starshield.is_video_visible()


# ---- updates crew and mission details ---------------------------------------


def _entry(first, second):
    item = mock.MagicMock()
    item.first, item.second = first, second
    return item


def _section(page, monkeypatch, items, first_region, second_region):
    monkeypatch.setattr(page, "find_first", lambda region, root=None: mock.MagicMock())
    monkeypatch.setattr(page, "find_all", lambda region, root=None: items)

    def text_of(region, root=None):
        if region is first_region:
            return root.first
        if region is second_region:
            return root.second
        return ""

    monkeypatch.setattr(page, "text_of", text_of)


def test_crew_keeps_incomplete_entries(updates, monkeypatch):
    items = [_entry("Commander", "Jared Isaacman"), _entry("", "Scott Poteet"), _entry("", "")]
    _section(updates, monkeypatch, items, updates.CREW_ROLE, updates.CREW_NAME)
    assert updates.crew_members() == [
        {"role": "Commander", "name": "Jared Isaacman"},
        {"role": "", "name": "Scott Poteet"},
    ]


def test_crew_missing_section(updates, monkeypatch):
    monkeypatch.setattr(updates, "find_first", lambda region, root=None: None)
    assert updates.crew_members() == []


def test_mission_details_keep_empty_values(updates, monkeypatch):
    items = [_entry("Duration", "5 days"), _entry("Orbit", ""), _entry("", "orphan value")]
    _section(updates, monkeypatch, items, updates.DETAIL_LABEL, updates.DETAIL_VALUE)
    assert updates.mission_details() == {"duration": "5 days", "orbit": ""}


# ---- human spaceflight sections ---------------------------------------------


def _cell(text):
    el = mock.MagicMock()
    el.text = text
    el.get_attribute.return_value = text
    return el


@pytest.fixture
def missions():
    return HumanSpaceflightPage(mock.MagicMock(), "https://www.spacex.com").missions


def test_mission_metrics_pair_headers_with_values(missions, monkeypatch):
    table = mock.MagicMock()
    table.find_elements.side_effect = lambda by, sel: (
        [_cell("Duration"), _cell("Cargo / Science"), _cell("")]
        if "th" in sel
        else [_cell("6 months"), _cell("Research\nSupplies"), _cell("orphan")]
    )
    monkeypatch.setattr(missions, "find_first", lambda region, root=None: table)

    assert missions.metrics() == {"Duration": "6 months", "Cargo / Science": "Research\nSupplies"}
    assert missions.cargo_science_lines() == ["Research", "Supplies"]
    assert missions.metric_value("duration") == "6 months"


def test_mission_metrics_without_table(missions, monkeypatch):
    monkeypatch.setattr(missions, "find_first", lambda region, root=None: None)
    assert missions.metrics() == {}


def test_bare_audio_element_with_controls(monkeypatch):
    media = HumanSpaceflightPage(mock.MagicMock(), "https://www.spacex.com").media
    player = mock.MagicMock()
    player.tag_name = "audio"
    player.get_attribute.return_value = ""
    monkeypatch.setattr(media, "find_first", lambda region, root=None: player)
    assert media.missing_audio_controls() == []

    player.get_attribute.return_value = None
    assert media.missing_audio_controls() == ["play/pause", "duration", "progress"]
