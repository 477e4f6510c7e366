import time
import asyncio
import datetime
import logging
from typing import Callable, List, Optional

from browser import open_browser_page
from classifier import classify
from config import settings
from models.base_scraper import BaseScraper
from models.models import (
    Product,
    RecordStatus,
    ScrapeRun,
    ScrapeSession,
    SessionStatus,
    Supplier,
)
from scrapers.dienmayxanh_scraper import DienMayXanhScraper
from scrapers.wellhome_scraper import WellHomeScraper
from scrapers.quanghanh_scraper import QuangHanhScraper

logger = logging.getLogger(__name__)


def default_scrapers() -> List[BaseScraper]:
    """Suppliers in the order they are scraped for every product."""
    return [
        DienMayXanhScraper(),
        WellHomeScraper(),
        QuangHanhScraper(),
    ]


class ScrapeOrchestrator:
    """
    Runs every supplier scraper for every product, one after the other.

    A single browser page is shared by all scrapers, so nothing runs
    concurrently. Records come out grouped by product in catalog order, and
    within a product in scraper order.
    """

    def __init__(
        self,
        scrapers: Optional[List[BaseScraper]] = None,
        inter_product_delay_ms: Optional[int] = None,
        sleep: Callable = asyncio.sleep,
    ):
        self.scrapers = scrapers if scrapers is not None else default_scrapers()
        if inter_product_delay_ms is None:
            inter_product_delay_ms = settings.INTER_PRODUCT_DELAY_MS
        self.inter_product_delay_ms = inter_product_delay_ms
        self._sleep = sleep

    async def run(
        self,
        products: List[Product],
        suppliers: List[Supplier],
        browser_factory: Optional[Callable] = None,
    ) -> ScrapeRun:
        """Open a browser page, scrape the whole catalog and release the browser."""
        browser_factory = browser_factory or open_browser_page
        async with browser_factory() as page:
            return await self.scrape_catalog(page, products, suppliers)

    async def scrape_catalog(
        self,
        page,
        products: List[Product],
        suppliers: List[Supplier],
    ) -> ScrapeRun:
        start = time.perf_counter()
        start_time = datetime.datetime.now(datetime.timezone.utc)
        session = ScrapeSession(
            session_id=str(int(start_time.timestamp() * 1000)),
            start_time=start_time,
            total_products=len(products),
            total_suppliers=len(suppliers),
        )
        logger.info(
            "Starting scrape session %s: %d products x %d suppliers",
            session.session_id, len(products), len(self.scrapers),
        )

        records = []
        for index, product in enumerate(products, 1):
            sku = product.code
            logger.info("Processing %d/%d: SKU=%s", index, len(products), sku)

            for scraper in self.scrapers:
                raw = await scraper.extract(page, sku)
                records.append(classify(raw, scraper.resolve_supplier_id(suppliers)))

            await self._sleep(self.inter_product_delay_ms / 1000)

        supplier_success = {
            scraper.website: sum(
                1 for r in records
                if r.supplier == scraper.website and r.status == RecordStatus.FOUND_WITH_PRICE
            )
            for scraper in self.scrapers
        }

        session.total_results = len(records)
        session.success_count = sum(supplier_success.values())
        session.status = SessionStatus.COMPLETED

        self._log_summary(supplier_success, session, len(products))
        logger.info("Scrape session %s completed in %.2f seconds",
                    session.session_id, time.perf_counter() - start)

        return ScrapeRun(session=session, records=records, supplier_success=supplier_success)

    def _log_summary(self, supplier_success, session: ScrapeSession, product_count: int):
        logger.info("==== SCRAPE SUMMARY ====")
        for website, count in supplier_success.items():
            logger.info("%s: %d/%d SKUs found with price", website, count, product_count)
        logger.info("Total: %d/%d results", session.success_count,
                    product_count * len(self.scrapers))


async def auto_scrape(db, orchestrator: Optional[ScrapeOrchestrator] = None,
                      browser_factory: Optional[Callable] = None) -> Optional[ScrapeRun]:
    """
    Scrape the stored catalog and save the session with all its records.

    Returns None without opening a browser when the catalog has no products.
    Any failure propagates and nothing is saved.
    """
    orchestrator = orchestrator or ScrapeOrchestrator()

    products = db.get_all_products()
    suppliers = db.get_all_suppliers()
    logger.info("Loaded: %d products, %d suppliers", len(products), len(suppliers))

    if not products:
        logger.warning("Catalog has no products, skipping auto-scrape")
        return None

    run = await orchestrator.run(products, suppliers, browser_factory)
    db.save_scrape_run(run)
    logger.info("Saved session %s with %d records", run.session.session_id, len(run.records))
    return run
