import logging
import time
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewportSize:
    width: int
    height: int

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


MOBILE = ViewportSize(375, 667)
TABLET = ViewportSize(768, 1024)
DESKTOP = ViewportSize(1920, 1080)

VIEWPORT_SIZES = (MOBILE, TABLET, DESKTOP)
_NAMES = {MOBILE: "mobile", TABLET: "tablet", DESKTOP: "desktop"}


class ViewportUtility:
    """Runs the same check at each of the standard window sizes.

    The window is resized, given a short moment for layout to settle, and the
    callback is invoked with the active size. The original window size is put
    back afterwards, whether or not the callback raised.
    """

    settle_seconds = 0.1

    def __init__(self, driver, sizes=VIEWPORT_SIZES):
        self.driver = driver
        self.sizes = tuple(sizes)

    def check_all_viewports(self, callback: Callable[[ViewportSize], None]) -> None:
        original = self.driver.get_window_size()
        try:
            for size in self.sizes:
                self.driver.set_window_size(size.width, size.height)
                time.sleep(self.settle_seconds)
                logger.debug("Checking viewport %s", size)
                callback(size)
        finally:
            if original:
                self.driver.set_window_size(original["width"], original["height"])

    @staticmethod
    def viewport_name(size) -> str:
        if isinstance(size, dict):
            size = ViewportSize(size["width"], size["height"])
        return _NAMES.get(size, f"{size.width}x{size.height}")
