from site_pages.base_page import BasePage
from site_pages.fragments import DestinationsFragment, FooterFragment, HeaderFragment, HeroFragment
from site_pages.spaceflight_sections import MediaCarouselFragment, OurMissionsFragment, TimelineFragment


class HumanSpaceflightPage(BasePage):
    path = "/humanspaceflight"

    def __init__(self, driver, base_url: str, timeout: int = 15):
        super().__init__(driver, base_url, timeout)
        self.header = HeaderFragment(self)
        self.hero = HeroFragment(self)
        self.destinations = DestinationsFragment(self)
        self.missions = OurMissionsFragment(self)
        self.timeline = TimelineFragment(self)
        self.media = MediaCarouselFragment(self)
        self.footer = FooterFragment(self)
