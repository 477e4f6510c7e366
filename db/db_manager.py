"""
Database Manager for VN Price Scout.

This module provides SQLite storage for the product catalog, the supplier
list, scrape sessions and the price records each session produced. A scrape
run is written in a single transaction: either the session and all of its
records are stored, or nothing is.

Classes:
    DatabaseManager: Catalog reads, session persistence and history queries.

Tables:
    products: SKUs to scrape.
    suppliers: Registered supplier ids and names.
    scrape_sessions: One row per completed run.
    price_data: One row per (product, supplier) record, keyed "{session_id}_{index}".

Example:
    >>> from db.db_manager import DatabaseManager
    >>> db = DatabaseManager("prices.db")
    >>> db.add_product("SMS6ZCI49E")
    >>> db.add_supplier("dmx", "Điện Máy Xanh")
    >>> db.get_all_products()
    [Product(code='SMS6ZCI49E')]
"""
import sqlite3
import logging
from typing import List, Dict, Optional

from config import settings
from models.models import Product, ScrapeRun, Supplier

logger = logging.getLogger(__name__)


class DatabaseManager:
    """
    SQLite database manager for the catalog and scrape history.

    Attributes:
        db_path: Path to the SQLite database file.
    """

    def __init__(self, db_path: str = None):
        """
        Initialize database manager with optional custom path.

        Args:
            db_path: Optional path to SQLite database file.
                     Defaults to the DB_PATH setting.
        """
        self.db_path = db_path or settings.DB_PATH
        self._create_tables()

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection"""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row  # Enable column access by name
        return conn

    def _create_tables(self):
        """Create the catalog and history tables if they don't exist"""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS products (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    code TEXT NOT NULL UNIQUE
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS suppliers (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS scrape_sessions (
                    session_id TEXT PRIMARY KEY,
                    start_time TIMESTAMP NOT NULL,
                    total_products INTEGER NOT NULL,
                    total_suppliers INTEGER NOT NULL,
                    total_results INTEGER NOT NULL,
                    success_count INTEGER NOT NULL,
                    status TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS price_data (
                    id TEXT PRIMARY KEY,
                    session_id TEXT NOT NULL,
                    sku TEXT NOT NULL,
                    scrape_time TIMESTAMP NOT NULL,
                    supplier TEXT NOT NULL,
                    supplier_id TEXT NOT NULL,
                    product_name TEXT,
                    price REAL,
                    price_formatted TEXT,
                    status TEXT NOT NULL,
                    url_scraped TEXT NOT NULL,
                    currency TEXT NOT NULL,
                    FOREIGN KEY (session_id) REFERENCES scrape_sessions (session_id) ON DELETE CASCADE
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_price_data_session_id
                ON price_data (session_id)
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_price_data_sku
                ON price_data (sku)
            """)

            conn.commit()
        conn.close()
        logger.debug("Database tables ready at %s", self.db_path)

    # Catalog operations
    def add_product(self, code: str) -> Optional[int]:
        """
        Add a SKU to the catalog.
        Returns the row ID if successful, None if the SKU already exists.
        """
        conn = self._get_connection()
        try:
            with conn:
                cursor = conn.execute("INSERT INTO products (code) VALUES (?)", (code,))
                logger.info("Added product: %s (ID: %s)", code, cursor.lastrowid)
                return cursor.lastrowid
        except sqlite3.IntegrityError:
            logger.warning("Product with code '%s' already exists", code)
            return None
        finally:
            conn.close()

    def get_all_products(self) -> List[Product]:
        """Get the catalog in insertion order"""
        conn = self._get_connection()
        try:
            rows = conn.execute("SELECT code FROM products ORDER BY id").fetchall()
            return [Product(code=row["code"]) for row in rows]
        finally:
            conn.close()

    def add_supplier(self, supplier_id: str, name: str) -> None:
        """Register a supplier, replacing the name if the id already exists"""
        conn = self._get_connection()
        try:
            with conn:
                conn.execute("""
                    INSERT INTO suppliers (id, name) VALUES (?, ?)
                    ON CONFLICT(id) DO UPDATE SET name = excluded.name
                """, (supplier_id, name))
            logger.info("Registered supplier: %s (%s)", name, supplier_id)
        finally:
            conn.close()

    def get_all_suppliers(self) -> List[Supplier]:
        conn = self._get_connection()
        try:
            rows = conn.execute("SELECT id, name FROM suppliers ORDER BY id").fetchall()
            return [Supplier(id=row["id"], name=row["name"]) for row in rows]
        finally:
            conn.close()

    # Session operations
    def save_scrape_run(self, run: ScrapeRun) -> str:
        """
        Store a session and all of its records in one transaction.
        Returns the session id.
        """
        session = run.session.model_dump(mode="json")
        conn = self._get_connection()
        try:
            with conn:
                conn.execute("""
                    INSERT INTO scrape_sessions (session_id, start_time, total_products,
                        total_suppliers, total_results, success_count, status)
                    VALUES (:session_id, :start_time, :total_products,
                        :total_suppliers, :total_results, :success_count, :status)
                """, session)

                rows = []
                for index, record in enumerate(run.records):
                    row = record.model_dump(mode="json")
                    row["id"] = f"{session['session_id']}_{index}"
                    row["session_id"] = session["session_id"]
                    rows.append(row)

                conn.executemany("""
                    INSERT INTO price_data (id, session_id, sku, scrape_time, supplier,
                        supplier_id, product_name, price, price_formatted, status,
                        url_scraped, currency)
                    VALUES (:id, :session_id, :sku, :scrape_time, :supplier,
                        :supplier_id, :product_name, :price, :price_formatted, :status,
                        :url_scraped, :currency)
                """, rows)
        finally:
            conn.close()

        logger.info("Saved session %s (%d records)", session["session_id"], len(run.records))
        return session["session_id"]

    def get_sessions(self, limit: int = 20) -> List[Dict]:
        """Most recent sessions first"""
        conn = self._get_connection()
        try:
            rows = conn.execute("""
                SELECT * FROM scrape_sessions
                ORDER BY start_time DESC
                LIMIT ?
            """, (limit,)).fetchall()
            return [dict(row) for row in rows]
        finally:
            conn.close()

    def get_session(self, session_id: str) -> Optional[Dict]:
        conn = self._get_connection()
        try:
            row = conn.execute(
                "SELECT * FROM scrape_sessions WHERE session_id = ?", (session_id,)
            ).fetchone()
            return dict(row) if row else None
        finally:
            conn.close()

    def get_records_by_session(self, session_id: str) -> List[Dict]:
        """Records of a session in the order they were scraped"""
        conn = self._get_connection()
        try:
            rows = conn.execute("""
                SELECT * FROM price_data
                WHERE session_id = ?
                ORDER BY rowid
            """, (session_id,)).fetchall()
            return [dict(row) for row in rows]
        finally:
            conn.close()

    def get_latest_prices_by_sku(self, sku: str) -> List[Dict]:
        """Get the most recent priced record from each supplier for a SKU, cheapest first"""
        conn = self._get_connection()
        try:
            rows = conn.execute("""
                SELECT p.*
                FROM price_data p
                WHERE p.sku = ?
                AND p.status = 'found_with_price'
                AND p.scrape_time = (
                    SELECT MAX(scrape_time)
                    FROM price_data
                    WHERE sku = p.sku AND supplier_id = p.supplier_id
                    AND status = 'found_with_price'
                )
                ORDER BY p.price ASC
            """, (sku,)).fetchall()
            return [dict(row) for row in rows]
        finally:
            conn.close()

    def delete_old_sessions(self, days: int = 30) -> int:
        """Delete sessions (and their records) older than specified days. Returns count of deleted sessions."""
        conn = self._get_connection()
        try:
            with conn:
                old = "SELECT session_id FROM scrape_sessions WHERE datetime(start_time) < datetime('now', '-' || ? || ' days')"
                conn.execute(f"DELETE FROM price_data WHERE session_id IN ({old})", (days,))
                cursor = conn.execute(f"DELETE FROM scrape_sessions WHERE session_id IN ({old})", (days,))
                deleted_count = cursor.rowcount
            logger.info("Deleted %d old sessions", deleted_count)
            return deleted_count
        finally:
            conn.close()
