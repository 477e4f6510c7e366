"""
HTTP trigger for scrape runs.

POST /api/scrape       scrape the products/suppliers in the request body, return records
POST /api/auto-scrape  scrape the stored catalog and save the session
GET  /api/health       liveness check
"""
import datetime
import logging
from typing import List

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from config import settings
from db.db_manager import DatabaseManager
from models.models import PriceRecord, Product, Supplier
from scraper import ScrapeOrchestrator, auto_scrape

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)

logger = logging.getLogger("vn-price-scout")


class ScrapeRequest(BaseModel):
    products: List[Product]
    suppliers: List[Supplier] = Field(default_factory=list)


def create_app(db: DatabaseManager = None, orchestrator: ScrapeOrchestrator = None,
               browser_factory=None) -> FastAPI:
    app = FastAPI(
        title="VN Price Scout API",
        description="Bosch appliance prices from Điện Máy Xanh, WellHome and Điện Máy Quang Hạnh",
        version="1.0.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.db = db
    app.state.orchestrator = orchestrator or ScrapeOrchestrator()
    app.state.browser_factory = browser_factory

    @app.post("/api/scrape", response_model=List[PriceRecord])
    async def scrape(payload: ScrapeRequest):
        logger.info("Scrape requested for %d products", len(payload.products))
        try:
            run = await app.state.orchestrator.run(
                payload.products, payload.suppliers, app.state.browser_factory
            )
        except Exception as e:
            logger.exception("Scrape request failed")
            raise HTTPException(status_code=500, detail=str(e))
        return run.records

    @app.post("/api/auto-scrape")
    async def trigger_auto_scrape():
        if app.state.db is None:
            app.state.db = DatabaseManager()
        try:
            run = await auto_scrape(app.state.db, app.state.orchestrator, app.state.browser_factory)
        except Exception as e:
            logger.exception("Auto scrape failed")
            raise HTTPException(status_code=500, detail=str(e))

        if run is None:
            return {"message": "Catalog is empty, nothing scraped", "session": None}
        return {
            "message": "Auto scrape completed",
            "session": run.session.model_dump(mode="json"),
            "supplier_success": run.supplier_success,
        }

    @app.get("/api/health")
    async def health():
        return {
            "status": "OK",
            "message": "Price scraper API is running",
            "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        }

    return app


app = create_app()


if __name__ == "__main__":
    logger.info("Starting API on port %d", settings.PORT)
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
