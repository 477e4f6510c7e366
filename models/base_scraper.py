"""
Base Scraper Abstract Class.

This module defines the abstract base class for all supplier-specific scrapers.
All scrapers must inherit from BaseScraper and implement the parse() method.
Navigation, waiting and error mapping are shared here so every supplier
behaves the same way when a page fails to load.

Classes:
    BaseScraper: Abstract base class with the common extract() flow.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional
from urllib.parse import quote_plus

from bs4 import BeautifulSoup
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from pydantic import BaseModel

from config import settings
from models.models import ExtractionStatus, RawExtractionResult, Supplier


logger = logging.getLogger(__name__)


class BaseScraper(BaseModel, ABC):
    """
    Abstract base class for supplier price scrapers.

    Every scraper works on a page handle owned by the caller. It navigates
    to the supplier's search page, waits for the listing selector to appear,
    then parses a snapshot of the rendered HTML. extract() never raises.

    Attributes:
        supplier_key: Fallback supplier identifier (e.g. "dmx").
        website: Display name stored on every record.
        supplier_match: Substring used to find this supplier in the catalog.
        search_url_template: Search URL with a {sku} placeholder.
        ready_selector: CSS selector whose presence means results rendered.
        settle_timeout_ms: Upper bound for waiting on ready_selector.
        navigation_timeout_ms: Upper bound for page navigation.
        currency: Currency code for prices.

    Configuration:
        arbitrary_types_allowed: Allows usage of non-Pydantic types in model fields.
    """

    supplier_key: str
    website: str
    supplier_match: str
    search_url_template: str
    ready_selector: str
    settle_timeout_ms: int
    navigation_timeout_ms: int = settings.NAVIGATION_TIMEOUT_MS
    currency: str = "VND"

    class Config:
        """Pydantic model configuration."""
        arbitrary_types_allowed = True

    def search_url(self, sku: str) -> str:
        return self.search_url_template.format(sku=quote_plus(sku))

    def resolve_supplier_id(self, suppliers: List[Supplier]) -> str:
        """Return the catalog id of this supplier, or the built-in key if it is not registered."""
        for supplier in suppliers:
            if self.supplier_match in supplier.name:
                return supplier.id
        return self.supplier_key

    async def extract(self, page, sku: str) -> RawExtractionResult:
        """
        Search the supplier for a SKU and extract name and price.

        Args:
            page: Playwright page object, reused across suppliers.
            sku: Product code to search for.

        Returns:
            RawExtractionResult with status AVAILABLE, NOT_FOUND (no matching
            element on the page) or CONNECTION_ERROR (navigation, timeout or
            DOM read failure).
        """
        url = self.search_url(sku)
        logger.info("Scraping %s for SKU=%s", self.website, sku)

        try:
            await page.goto(
                url,
                wait_until="networkidle",
                timeout=self.navigation_timeout_ms,
            )

            if not await self._wait_for_results(page):
                logger.info("%s: no results rendered for SKU=%s", self.website, sku)
                return self.not_found(sku)

            html = await page.content()
            soup = BeautifulSoup(html, "lxml")
            result = self.parse(soup, sku)
        except Exception as e:
            logger.warning("Error scraping %s for SKU=%s at %s: %s", self.website, sku, url, e)
            return self.connection_error(sku)

        if result.status == ExtractionStatus.AVAILABLE:
            logger.info("%s: found %s - %s", self.website, result.name, result.price)
        else:
            logger.info("%s: no valid product found for SKU=%s", self.website, sku)
        return result

    async def _wait_for_results(self, page) -> bool:
        """Poll for the listing selector; a timeout here means the site has nothing to show."""
        try:
            await page.wait_for_selector(
                self.ready_selector,
                state="attached",
                timeout=self.settle_timeout_ms,
            )
        except PlaywrightTimeoutError:
            return False
        return True

    @abstractmethod
    def parse(self, soup: BeautifulSoup, sku: str) -> RawExtractionResult:
        """
        Pick the product from a rendered search page.

        Implementations return self.found(...) or self.not_found(sku).
        """

    def found(
        self,
        sku: str,
        name: Optional[str],
        price: Optional[str],
        raw_price=None,
        brand: Optional[str] = None,
        category: Optional[str] = None,
    ) -> RawExtractionResult:
        return RawExtractionResult(
            website=self.website,
            sku=sku,
            name=name,
            price=price,
            raw_price=raw_price,
            brand=brand,
            category=category,
            status=ExtractionStatus.AVAILABLE,
            url=self.search_url(sku),
        )

    def not_found(self, sku: str) -> RawExtractionResult:
        return RawExtractionResult(
            website=self.website,
            sku=sku,
            status=ExtractionStatus.NOT_FOUND,
            url=self.search_url(sku),
        )

    def connection_error(self, sku: str) -> RawExtractionResult:
        return RawExtractionResult(
            website=self.website,
            sku=sku,
            status=ExtractionStatus.CONNECTION_ERROR,
            url=self.search_url(sku),
        )
