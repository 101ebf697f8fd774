import pytest
from pytest_bdd import given, parsers, scenarios, then, when

from site_pages.spaceflight_sections import is_non_decreasing, milestone_years

pytestmark = [pytest.mark.ui]

scenarios("timeline.feature")


@given("the page shows a milestone timeline")
def timeline_present(page):
    if not page.timeline.is_present():
        pytest.skip("Human spaceflight page has no timeline section")
    page.timeline.scroll_to_section()


@given(parsers.parse("the timeline has at least {count:d} pagination dots"))
def timeline_dots(page, count):
    dots = page.timeline.dot_count()
    if dots < count:
        pytest.skip(f"Timeline has {dots} pagination dots")


@when("the user advances the timeline")
def advance(page, context):
    context.start_milestone = page.timeline.active_milestone()
    page.timeline.advance()


@when("the user moves the timeline back")
def go_back(page):
    page.timeline.go_back()


@when(parsers.parse("the user clicks timeline dot {number:d}"))
def click_dot(page, number):
    page.timeline.click_dot(number - 1)


@when(parsers.parse("the browser window is resized to {width:d} by {height:d}"))
def resize(page, width, height):
    page.driver.set_window_size(width, height)
    page.timeline.scroll_to_section()


@then("the timeline heading should be shown")
def heading_shown(page, assertion_helper):
    assertion_helper.assert_value_present(page.timeline.heading_text(), "Timeline section has no heading")


@then("the timeline carousel should be visible")
def carousel_visible(page, assertion_helper):
    assertion_helper.validate_boolean_check(page.timeline.is_carousel_visible, "Timeline carousel should be visible")


@then(parsers.parse("at least {count:d} milestones should be listed"))
def milestones_listed(page, count):
    found = len(page.timeline.milestones())
    assert found >= count, f"Expected at least {count} milestones, found {found}"


@then("every milestone should have a year and an achievement")
def milestones_complete(page):
    incomplete = [m for m in page.timeline.milestones() if not (m.year and m.achievement)]
    assert not incomplete, f"Incomplete milestones: {incomplete[:5]}"


@then("the milestone years should never go backwards")
def milestones_ordered(page):
    years = milestone_years(page.timeline.milestones())
    if len(years) < 2:
        pytest.skip("Fewer than two milestones carry a year")
    assert is_non_decreasing(years), f"Milestone years out of order: {years}"


@then("a different milestone should be active")
def different_milestone(page, context):
    now = page.timeline.active_milestone()
    assert now != context.start_milestone, f"Timeline stayed on {now!r} after advancing"


@then("the starting milestone should be active again")
def starting_milestone(page, context):
    now = page.timeline.active_milestone()
    assert now == context.start_milestone, f"Expected {context.start_milestone!r} to be active, found {now!r}"


@then(parsers.parse("timeline dot {number:d} should be active"))
def dot_active(page, number):
    active = page.timeline.active_dot_index()
    assert active == number - 1, f"Expected dot {number} to be active, active dot is {active + 1}"


@then("every milestone card should show a background image")
def backgrounds_loaded(page):
    missing = page.timeline.cards_missing_background()
    assert not missing, f"Milestones without a background image: {missing}"


@then("the horizon image should be visible")
def horizon_visible(page):
    assert page.timeline.is_horizon_image_visible(), "Horizon image should be visible below the timeline"


@then("the timeline controls should be labelled and keyboard focusable")
def controls_accessible(page):
    status = page.timeline.accessibility()
    assert status["labelled"], "Timeline controls carry no aria-label"
    assert status["focusable"], "Timeline has no keyboard-focusable controls"


@then("the timeline arrows and dots should be large enough to tap")
def controls_tappable(page):
    problems = page.timeline.undersized_controls()
    assert not problems, f"Timeline controls too small to tap: {problems}"
