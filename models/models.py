"""
Data Models for VN Price Scout.

This module defines the Pydantic models and status enums shared by the
extractors, the classifier, the orchestrator and the storage layer.

Classes:
    Product: A catalog entry (SKU) to search for.
    Supplier: A target website as registered in the catalog.
    ExtractionStatus: Outcome of a single supplier extraction.
    RecordStatus: Classification stored on every PriceRecord.
    SessionStatus: Lifecycle state of a scrape session.
    RawExtractionResult: Supplier-specific result before classification.
    PriceRecord: Uniform, comparable output record.
    ScrapeSession: Summary of one orchestrator run.
    ScrapeRun: Records plus summary returned by the orchestrator.
"""

import datetime
from enum import Enum
from typing import Dict, List, Optional, Union
from pydantic import BaseModel, Field


class ExtractionStatus(str, Enum):
    AVAILABLE = "available"
    NOT_FOUND = "not_found"
    CONNECTION_ERROR = "connection_error"


class RecordStatus(str, Enum):
    FOUND_WITH_PRICE = "found_with_price"
    FOUND_NO_PRICE = "found_no_price"
    NO_INFO = "no_info"


class SessionStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"


class Product(BaseModel):
    code: str


class Supplier(BaseModel):
    id: str
    name: str


class RawExtractionResult(BaseModel):
    """
    Result of running one supplier extractor for one SKU.

    Attributes:
        website: Display name of the supplier (e.g. "WellHome").
        sku: The SKU that was searched for.
        name: Product name as shown on the site, if a product was found.
        price: Price in display form (e.g. "18,825,000₫").
        raw_price: Parsed numeric price. Only set when the price exceeds the
            plausibility threshold.
        brand: Brand reported by the site or fixed for single-brand suppliers.
        category: Category reported by the site or fixed per supplier.
        status: Whether the product was found, missing, or the fetch failed.
        url: Search URL that was scraped.
    """

    website: str
    sku: str
    name: Optional[str] = None
    price: Optional[str] = None
    raw_price: Optional[Union[int, float]] = None
    brand: Optional[str] = None
    category: Optional[str] = None
    status: ExtractionStatus
    url: str


class PriceRecord(BaseModel):
    """
    Uniform price record, one per (product, supplier) pair.

    Example:
        >>> record = PriceRecord(
        ...     sku="BOSCH123",
        ...     supplier="Điện Máy Xanh",
        ...     supplier_id="dmx",
        ...     product_name="Máy rửa chén Bosch BOSCH123",
        ...     price=1710000,
        ...     price_formatted="1.710.000₫",
        ...     status=RecordStatus.FOUND_WITH_PRICE,
        ...     url_scraped="https://www.dienmayxanh.com/search?key=BOSCH123",
        ... )
        >>> record.currency
        'VND'
    """

    sku: str
    scrape_time: datetime.datetime = Field(
        default_factory=lambda: datetime.datetime.now(datetime.timezone.utc)
    )
    supplier: str
    supplier_id: str
    product_name: Optional[str] = None
    price: Optional[Union[int, float]] = None
    price_formatted: Optional[str] = None
    status: RecordStatus
    url_scraped: str
    currency: str = "VND"


class ScrapeSession(BaseModel):
    session_id: str
    start_time: datetime.datetime
    total_products: int = 0
    total_suppliers: int = 0
    total_results: int = 0
    success_count: int = 0
    status: SessionStatus = SessionStatus.RUNNING


class ScrapeRun(BaseModel):
    """Everything one orchestrator run produces, handed to storage as a unit."""

    session: ScrapeSession
    records: List[PriceRecord] = Field(default_factory=list)
    supplier_success: Dict[str, int] = Field(default_factory=dict)
