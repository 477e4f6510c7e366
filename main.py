import sys
import time
import logging
import asyncio
import argparse
import csv
from typing import Dict, List

from config import settings
from db.db_manager import DatabaseManager
from models.models import Product, PriceRecord, ScrapeRun
from scraper import ScrapeOrchestrator, auto_scrape

# -----------------------------------------------------------------------------
# Logging configuration
# -----------------------------------------------------------------------------
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)

logger = logging.getLogger("vn-price-scout")

SKU_COLUMNS = ("sku", "code", "name")


# -----------------------------------------------------------------------------
# Helper functions for CSV catalogs and reports
# -----------------------------------------------------------------------------
def read_skus_from_csv(csv_path: str) -> List[str]:
    """Read SKUs from CSV file. Supports 'sku', 'code' or 'name' column."""
    skus = []
    with open(csv_path, 'r', encoding='utf-8-sig') as f:
        reader = csv.DictReader(f)

        sku_column = next((c for c in SKU_COLUMNS if c in (reader.fieldnames or [])), None)
        if sku_column is None:
            raise ValueError("CSV file must contain 'sku', 'code' or 'name' column")

        for row in reader:
            value = (row.get(sku_column) or '').strip()
            if value and value not in skus:
                skus.append(value)
    return skus


def build_comparison_rows(records: List[PriceRecord], suppliers: List[str]) -> List[Dict]:
    """One row per SKU with each supplier's price and the cheapest offer."""
    rows = {}
    for record in records:
        row = rows.setdefault(record.sku, {'sku': record.sku})
        row[f'{record.supplier} price'] = record.price
        row[f'{record.supplier} status'] = record.status.value

    for row in rows.values():
        offers = [(row.get(f'{s} price'), s) for s in suppliers if row.get(f'{s} price') is not None]
        if offers:
            row['lowest_price'], row['lowest_price_supplier'] = min(offers)
        else:
            row['lowest_price'], row['lowest_price_supplier'] = None, None

    return list(rows.values())


def write_results_to_csv(run: ScrapeRun, output_path: str):
    """Write the price comparison for a run to a CSV file."""
    if not run.records:
        logger.warning("No results to write")
        return

    suppliers = list(run.supplier_success)
    fieldnames = ['sku', 'lowest_price', 'lowest_price_supplier']
    for supplier in suppliers:
        fieldnames += [f'{supplier} price', f'{supplier} status']

    with open(output_path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(build_comparison_rows(run.records, suppliers))

    logger.info("Results written to %s", output_path)


def print_summary(run: ScrapeRun):
    product_count = run.session.total_products
    print("\n" + "=" * 70)
    print(f"SCRAPE SESSION {run.session.session_id}")
    print("=" * 70)
    for supplier, count in run.supplier_success.items():
        print(f"{supplier:<25} {count}/{product_count} SKUs found with price")
    print(f"{'Total':<25} {run.session.success_count}/{run.session.total_results} results")
    print("=" * 70 + "\n")


# -----------------------------------------------------------------------------
# Main entry point
# -----------------------------------------------------------------------------
async def main(argv=None) -> int:
    """Main entry point with argument parsing and routing."""

    parser = argparse.ArgumentParser(
        description="Bosch appliance price scraper for Vietnamese retailers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
        Examples:
        python main.py                                 # scrape the stored catalog
        python main.py --sku SMS6ZCI49E --no-save
        python main.py --csv skus.csv --output results.csv
        python main.py --import-csv skus.csv
        """
    )

    group = parser.add_mutually_exclusive_group()
    group.add_argument("--sku", help="Scrape a single SKU")
    group.add_argument("--csv", help="Path to CSV file containing SKUs ('sku', 'code' or 'name' column)")
    group.add_argument("--import-csv", help="Add SKUs from a CSV file to the stored catalog and exit")

    parser.add_argument("--output", help="Write a price comparison CSV to this path")
    parser.add_argument("--no-save", action="store_true", help="Do not store the session in the database")
    parser.add_argument("--db", help=f"SQLite database path (default: {settings.DB_PATH})")

    args = parser.parse_args(argv)

    if args.no_save and not (args.sku or args.csv):
        parser.error("--no-save needs --sku or --csv")

    start = time.perf_counter()

    try:
        db = DatabaseManager(args.db)

        if args.import_csv:
            skus = read_skus_from_csv(args.import_csv)
            added = sum(1 for sku in skus if db.add_product(sku) is not None)
            logger.info("Imported %d new SKUs (%d in file)", added, len(skus))
            return 0

        orchestrator = ScrapeOrchestrator()

        if args.sku or args.csv:
            if args.sku:
                products = [Product(code=args.sku.strip())]
            else:
                logger.info("Reading SKUs from %s", args.csv)
                products = [Product(code=sku) for sku in read_skus_from_csv(args.csv)]
                logger.info("Found %d SKUs to process", len(products))

            run = await orchestrator.run(products, db.get_all_suppliers())
            if not args.no_save:
                db.save_scrape_run(run)
        else:
            run = await auto_scrape(db, orchestrator)
            if run is None:
                return 0
    except Exception:
        logger.exception("Price scraper failed")
        return 1

    if args.output:
        write_results_to_csv(run, args.output)

    print_summary(run)
    logger.info("Price scraper completed in %.2f seconds", time.perf_counter() - start)
    return 0


# -----------------------------------------------------------------------------
# Entrypoint
# -----------------------------------------------------------------------------
if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
