"""
WellHome Scraper.

WellHome (wellhome.asia) lands directly on the single matching product, so
there is no listing to walk. The shop only sells Bosch appliances, hence the
fixed brand and category.
"""

import logging
from bs4 import BeautifulSoup

from config import settings
from models.models import RawExtractionResult
from models.base_scraper import BaseScraper
from utils import parse_price, is_plausible_price


logger = logging.getLogger(__name__)

NO_PRICE_TEXT = "Không hiển thị"


class WellHomeScraper(BaseScraper):
    supplier_key: str = "wh"
    website: str = "WellHome"
    supplier_match: str = "WellHome"
    search_url_template: str = "https://wellhome.asia/search?type=product&q={sku}"
    ready_selector: str = ".product-inner"
    settle_timeout_ms: int = settings.WELLHOME_WAIT_MS
    brand: str = "Bosch"
    category: str = "Gia dụng"

    def parse(self, soup: BeautifulSoup, sku: str) -> RawExtractionResult:
        product = soup.select_one(".product-inner")
        if not product:
            return self.not_found(sku)

        name_el = product.select_one("h3")
        name = name_el.get_text(strip=True) if name_el else None

        price_el = product.select_one("span.price")
        price_text = price_el.get_text(strip=True) if price_el else NO_PRICE_TEXT

        raw_price = parse_price(price_text)
        if not is_plausible_price(raw_price):
            raw_price = None

        return self.found(
            sku,
            name=name,
            price=price_text,
            raw_price=raw_price,
            brand=self.brand,
            category=self.category,
        )
