from typing import Any, Callable


class AssertionHelper:
    """Thin wrappers that fail with a readable message instead of a bare assert."""

    def validate_boolean_check(self, check: Callable[[], Any], message: str) -> None:
        result = check()
        assert result, message

    def assert_metric(self, actual: float | None, max_allowed: float, message: str) -> None:
        assert actual is not None and actual < max_allowed, f"{message}. Actual value: {actual}"

    def assert_value_present(self, value: Any, message: str) -> None:
        assert value, message

    def assert_contains(self, haystack: str | None, needle: str, message: str = "") -> None:
        text = (haystack or "").lower()
        assert needle.lower() in text, message or f"Expected {needle!r} in {haystack!r}"
