"""Page objects for the public site under test."""

from site_pages.base_page import AccessibilityReport, BasePage, PerformanceMetrics
from site_pages.human_spaceflight_page import HumanSpaceflightPage
from site_pages.starshield_page import StarshieldPage
from site_pages.suppliers_page import SuppliersPage
from site_pages.updates_page import UpdatesPage
from site_pages.vehicle_pages import DragonPage, FalconHeavyPage, VehiclePage

PAGES = {
    "home": BasePage,
    "dragon": DragonPage,
    "falcon heavy": FalconHeavyPage,
    "suppliers": SuppliersPage,
    "starshield": StarshieldPage,
    "human spaceflight": HumanSpaceflightPage,
    "updates": UpdatesPage,
}

__all__ = [
    "AccessibilityReport",
    "BasePage",
    "DragonPage",
    "FalconHeavyPage",
    "HumanSpaceflightPage",
    "PAGES",
    "PerformanceMetrics",
    "StarshieldPage",
    "SuppliersPage",
    "UpdatesPage",
    "VehiclePage",
]
