"""
Điện Máy Quang Hạnh Scraper.

Search results on dienmayquanghanh.com are located through the price
element (.prPrice); the title is looked up next to it and is sometimes
missing, in which case a placeholder name is used.
"""

import logging
from bs4 import BeautifulSoup

from config import settings
from models.models import RawExtractionResult
from models.base_scraper import BaseScraper
from utils import parse_price, is_plausible_price


logger = logging.getLogger(__name__)


class QuangHanhScraper(BaseScraper):
    supplier_key: str = "qh"
    website: str = "Điện Máy Quang Hạnh"
    supplier_match: str = "Quang Hạnh"
    search_url_template: str = "https://dienmayquanghanh.com/tu-khoa?q={sku}"
    ready_selector: str = ".prPrice"
    settle_timeout_ms: int = settings.QUANGHANH_WAIT_MS
    brand: str = "Bosch"
    category: str = "Gia dụng"

    def parse(self, soup: BeautifulSoup, sku: str) -> RawExtractionResult:
        price_el = soup.select_one(".prPrice")
        if not price_el:
            return self.not_found(sku)

        price_text = price_el.get_text(strip=True)
        if not price_text:
            return self.not_found(sku)

        raw_price = parse_price(price_text)
        if not is_plausible_price(raw_price):
            raw_price = None

        return self.found(
            sku,
            name=self._find_title(price_el) or f"Sản phẩm {sku}",
            price=price_text,
            raw_price=raw_price,
            brand=self.brand,
            category=self.category,
        )

    def _find_title(self, price_el):
        parent = price_el.parent
        if parent is None:
            return None
        title_el = parent.select_one("h3, .title")
        if not title_el:
            return None
        return title_el.get_text(strip=True) or None
