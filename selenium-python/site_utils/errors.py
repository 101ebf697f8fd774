"""Exceptions raised by the suite's helpers and page objects."""


class SiteTestError(Exception):
    """Base exception for the e2e suite."""

    pass


class SiteConfigError(SiteTestError):
    """Configuration is missing or invalid."""

    pass


class BrowserFeatureUnavailable(SiteTestError):
    """The active driver cannot perform the requested operation."""

    pass


class UnknownInteractiveState(SiteTestError, KeyError):
    """No strategy is registered for an interactive state name."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""
