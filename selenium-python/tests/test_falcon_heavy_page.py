import pytest
from pytest_bdd import parsers, scenarios, then, when

pytestmark = [pytest.mark.ui]

scenarios("falcon_heavy.feature")


@when("the user scrolls to the specifications")
def scroll_to_specs(page):
    page.scroll_to_specifications()


@when("the user switches the measurement units")
def switch_units(page):
    if not page.has_units_toggle():
        pytest.skip("No metric/imperial toggle on this page")
    page.toggle_units()


@then(parsers.parse('the page headline should mention "{text}"'))
def headline_mentions(page, text, assertion_helper):
    assertion_helper.assert_contains(page.headline(), text, f"Headline should mention {text!r}")


@then(parsers.parse("the page should describe three Falcon {version:d} cores"))
def three_cores(page, version, assertion_helper):
    assertion_helper.validate_boolean_check(
        lambda: page.three_cores_described(version), f"Page should describe three Falcon {version} cores"
    )


@then("the total thrust should be highlighted")
def total_thrust(page, assertion_helper):
    assertion_helper.validate_boolean_check(page.total_thrust_highlighted, "Total liftoff thrust should be highlighted")


@then(parsers.parse("the page should explain {total:d} Merlin engines with {per_core:d} per core"))
def engine_count(page, total, per_core, assertion_helper):
    assertion_helper.validate_boolean_check(
        lambda: page.engine_count_explained(total, per_core), f"Page should explain {total} Merlin engines"
    )


@then(parsers.parse('the "{attribute}" specification should show "{first}" and "{second}"'))
def spec_in_both_units(page, attribute, first, second):
    assert page.is_technical_spec_value_displayed(attribute, first, second), (
        f"{attribute} row {page.spec_row_text(attribute)!r} should show {first!r} and {second!r}"
    )


@then("the engine specifications should include:")
def engine_specs(page, datatable):
    header, *rows = datatable
    missing = []
    for row in rows:
        spec = dict(zip(header, row))
        if not page.is_engine_spec_displayed(spec["engine"], spec["attribute"], spec["detail"]):
            missing.append(f"{spec['engine']} {spec['attribute']} ({spec['detail']})")
    assert not missing, f"Missing engine specifications: {', '.join(missing)}"


@then("booster reusability should be highlighted")
def reusability(page, assertion_helper):
    assertion_helper.validate_boolean_check(page.reusability_highlighted, "Booster reusability should be mentioned")


@then(parsers.parse('the market positioning should mention "{text}"'))
def market_mentions(page, text, assertion_helper):
    assertion_helper.validate_boolean_check(
        lambda: page.market_positioning_mentions(text), f"Market positioning should mention {text!r}"
    )
