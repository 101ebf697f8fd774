"""Hover and resting-state checks for interactive destination tiles."""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from site_utils.errors import UnknownInteractiveState

logger = logging.getLogger(__name__)


@runtime_checkable
class InteractiveStateStrategy(Protocol):
    def validate(self) -> None: ...


class HoverStateStrategy:
    """While hovered, a destination shows its hover effect and a pointer cursor."""

    def __init__(self, destinations):
        self.destinations = destinations

    def validate(self) -> None:
        assert self.destinations.is_hover_effect_visible(), "Element should show hover effect"
        assert self.destinations.is_cursor_pointer(), "Cursor should be pointer on hover"


class RegularStateStrategy:
    """After the pointer leaves, the tile drops ``:hover`` and returns to its resting opacity.

    The cursor style is not checked here: ``cursor: pointer`` is a static
    property of a link and stays set whether or not it is hovered.
    """

    def __init__(self, destinations):
        self.destinations = destinations

    def validate(self) -> None:
        self.destinations.unhover()
        assert not self.destinations.is_hovered(), "Element should no longer be hovered"
        assert self.destinations.is_hover_effect_gone(), "Hover effect should disappear"


class InteractiveStateContext:
    def __init__(self):
        self._strategies: dict[str, InteractiveStateStrategy] = {}

    def register_strategy(self, state: str, strategy: InteractiveStateStrategy) -> None:
        self._strategies[state] = strategy

    def execute_strategy(self, state: str) -> None:
        strategy = self._strategies.get(state)
        if strategy is None:
            raise UnknownInteractiveState(f"No strategy registered for state: {state}")
        logger.info("Validating %s state", state)
        strategy.validate()

    @property
    def states(self) -> list[str]:
        return list(self._strategies)
