"""
Turns supplier-specific extraction results into uniform PriceRecords.

NOT_FOUND and CONNECTION_ERROR both end up as NO_INFO records; the difference
only shows in the log.
"""
import datetime
import logging
from typing import Optional

from models.models import ExtractionStatus, PriceRecord, RawExtractionResult, RecordStatus

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    ExtractionStatus.AVAILABLE: logging.DEBUG,
    ExtractionStatus.NOT_FOUND: logging.INFO,
    ExtractionStatus.CONNECTION_ERROR: logging.WARNING,
}


def record_status(raw: RawExtractionResult) -> RecordStatus:
    if not raw.name:
        return RecordStatus.NO_INFO
    if raw.raw_price is None:
        return RecordStatus.FOUND_NO_PRICE
    return RecordStatus.FOUND_WITH_PRICE


def classify(
    raw: RawExtractionResult,
    supplier_id: str,
    scrape_time: Optional[datetime.datetime] = None,
) -> PriceRecord:
    """
    Map a raw extraction result to a PriceRecord.

    Args:
        raw: Result returned by a supplier scraper.
        supplier_id: Catalog id of the supplier.
        scrape_time: Timestamp to stamp on the record. Defaults to now (UTC).

    Returns:
        PriceRecord with status FOUND_WITH_PRICE, FOUND_NO_PRICE or NO_INFO.
    """
    status = record_status(raw)

    logger.log(
        _LOG_LEVELS[raw.status],
        "%s | SKU=%s | extraction=%s | record=%s",
        raw.website, raw.sku, raw.status.value, status.value,
    )

    return PriceRecord(
        sku=raw.sku,
        scrape_time=scrape_time or datetime.datetime.now(datetime.timezone.utc),
        supplier=raw.website,
        supplier_id=supplier_id,
        product_name=raw.name,
        price=raw.raw_price,
        price_formatted=raw.price,
        status=status,
        url_scraped=raw.url,
    )
