"""
Điện Máy Xanh Scraper.

This module implements the scraper for Điện Máy Xanh (www.dienmayxanh.com).
The search page renders its listing asynchronously; each result carries its
name, price, brand and category as data-* attributes.

Classes:
    DienMayXanhScraper: Scraper implementation for www.dienmayxanh.com
"""

import logging
import math
from typing import Optional
from bs4 import BeautifulSoup

from config import settings
from models.models import RawExtractionResult
from models.base_scraper import BaseScraper
from utils import parse_price, format_vnd, is_plausible_price, PLAUSIBLE_PRICE_THRESHOLD


logger = logging.getLogger(__name__)

CONTAINER_SELECTOR = "a[data-name], .item[data-name]"
PRICE_TEXT_SELECTOR = "strong.price, .price strong"


class DienMayXanhScraper(BaseScraper):
    """
    Web scraper for Điện Máy Xanh.

    Scans result containers in page order and accepts the first one whose
    data-name contains the SKU or the brand token. Catalog names sometimes
    leave the full SKU out, so a brand-only match is accepted as well.
    Candidates without a plausible price are skipped.

    Example:
        >>> scraper = DienMayXanhScraper()
        >>> result = await scraper.extract(page, "SMS6ZCI49E")
        >>> print(result.price)
        10.710.000₫
    """

    supplier_key: str = "dmx"
    website: str = "Điện Máy Xanh"
    supplier_match: str = "Điện Máy Xanh"
    search_url_template: str = "https://www.dienmayxanh.com/search?key={sku}"
    ready_selector: str = CONTAINER_SELECTOR
    settle_timeout_ms: int = settings.DMX_WAIT_MS
    brand_token: str = "BOSCH"

    def parse(self, soup: BeautifulSoup, sku: str) -> RawExtractionResult:
        containers = soup.select(CONTAINER_SELECTOR)
        logger.debug("Found %d DMX containers", len(containers))

        for container in containers:
            name = container.get("data-name")
            if not name or not self._name_matches(name, sku):
                continue

            price = self._resolve_price(container)
            if not is_plausible_price(price):
                logger.debug("DMX: skipping %r, no plausible price", name)
                continue

            return self.found(
                sku,
                name=name,
                price=format_vnd(price),
                raw_price=price,
                brand=container.get("data-brand"),
                category=container.get("data-cate"),
            )

        return self.not_found(sku)

    def _name_matches(self, name: str, sku: str) -> bool:
        # TODO: brand-only matches can pick an unrelated product of the same
        # brand; check against catalogs with several SKUs per brand.
        upper = name.upper()
        return sku.upper() in upper or self.brand_token in upper

    def _resolve_price(self, container) -> Optional[float]:
        """Prefer the numeric data-price attribute, fall back to the displayed price text."""
        price = None
        data_price = container.get("data-price")
        if data_price:
            try:
                price = float(data_price)
            except ValueError:
                logger.debug("DMX: unparseable data-price %r", data_price)

        if price is not None and not math.isfinite(price):
            logger.debug("DMX: unparseable data-price %r", data_price)
            price = None

        if price is not None and price.is_integer():
            price = int(price)

        if not price or price < PLAUSIBLE_PRICE_THRESHOLD:
            price_el = container.select_one(PRICE_TEXT_SELECTOR)
            if price_el:
                price = parse_price(price_el.get_text(strip=True))

        return price
