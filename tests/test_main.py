import asyncio
import csv
import datetime

import pytest

import main
from db.db_manager import DatabaseManager
from models.models import PriceRecord, RecordStatus, ScrapeRun, ScrapeSession, SessionStatus


def write_csv(path, header, rows):
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        writer.writerows(rows)
    return str(path)


def record(sku, supplier, price):
    return PriceRecord(
        sku=sku,
        supplier=supplier,
        supplier_id=supplier.lower(),
        product_name=f"Bosch {sku}" if price else None,
        price=price,
        status=RecordStatus.FOUND_WITH_PRICE if price else RecordStatus.NO_INFO,
        url_scraped="https://example.vn",
    )


def sample_run():
    records = [
        record("A", "DMX", 12000000), record("A", "WH", 11500000), record("A", "QH", None),
        record("B", "DMX", None), record("B", "WH", None), record("B", "QH", None),
    ]
    session = ScrapeSession(
        session_id="1760778000000",
        start_time=datetime.datetime(2026, 10, 18, tzinfo=datetime.timezone.utc),
        total_products=2, total_suppliers=3, total_results=6, success_count=2,
        status=SessionStatus.COMPLETED,
    )
    return ScrapeRun(session=session, records=records,
                     supplier_success={"DMX": 1, "WH": 1, "QH": 0})


class StubOrchestrator:
    def __init__(self, run=None, error=None):
        self.calls = []
        self._run = run
        self._error = error

    async def run(self, products, suppliers, browser_factory=None):
        self.calls.append([p.code for p in products])
        if self._error:
            raise self._error
        return self._run


def test_read_skus_from_csv(tmp_path):
    path = write_csv(tmp_path / "skus.csv", ["code", "note"], [["SMS6", "x"], ["", "blank"], ["PUE6", ""], ["SMS6", "dup"]])
    assert main.read_skus_from_csv(path) == ["SMS6", "PUE6"]


def test_read_skus_requires_column(tmp_path):
    path = write_csv(tmp_path / "skus.csv", ["model"], [["SMS6"]])
    with pytest.raises(ValueError):
        main.read_skus_from_csv(path)


def test_write_results_to_csv(tmp_path):
    output = tmp_path / "results.csv"
    main.write_results_to_csv(sample_run(), str(output))

    with open(output, encoding="utf-8") as f:
        rows = list(csv.DictReader(f))

    assert rows[0]["sku"] == "A"
    assert rows[0]["lowest_price"] == "11500000"
    assert rows[0]["lowest_price_supplier"] == "WH"
    assert rows[0]["QH status"] == "no_info"
    assert rows[1]["lowest_price"] == ""


def test_import_csv(tmp_path):
    db_path = str(tmp_path / "prices.db")
    path = write_csv(tmp_path / "skus.csv", ["sku"], [["SMS6"], ["PUE6"]])

    assert asyncio.run(main.main(["--import-csv", path, "--db", db_path])) == 0
    assert [p.code for p in DatabaseManager(db_path).get_all_products()] == ["SMS6", "PUE6"]


def test_single_sku_run_saves_session(tmp_path, monkeypatch):
    db_path = str(tmp_path / "prices.db")
    stub = StubOrchestrator(run=sample_run())
    monkeypatch.setattr(main, "ScrapeOrchestrator", lambda: stub)

    assert asyncio.run(main.main(["--sku", " A ", "--db", db_path])) == 0
    assert stub.calls == [["A"]]
    assert DatabaseManager(db_path).get_session("1760778000000") is not None


def test_no_save(tmp_path, monkeypatch):
    db_path = str(tmp_path / "prices.db")
    monkeypatch.setattr(main, "ScrapeOrchestrator", lambda: StubOrchestrator(run=sample_run()))

    assert asyncio.run(main.main(["--sku", "A", "--no-save", "--db", db_path])) == 0
    assert DatabaseManager(db_path).get_sessions() == []


def test_failed_run_exits_1(tmp_path, monkeypatch):
    db_path = str(tmp_path / "prices.db")
    monkeypatch.setattr(main, "ScrapeOrchestrator",
                        lambda: StubOrchestrator(error=RuntimeError("browser launch failed")))

    assert asyncio.run(main.main(["--sku", "A", "--db", db_path])) == 1


def test_empty_catalog_auto_scrape(tmp_path):
    db_path = str(tmp_path / "prices.db")
    assert asyncio.run(main.main(["--db", db_path])) == 0


def test_import_csv_missing_file_exits_1(tmp_path):
    db_path = str(tmp_path / "prices.db")
    assert asyncio.run(main.main(["--import-csv", str(tmp_path / "missing.csv"), "--db", db_path])) == 1


def test_import_csv_bad_header_exits_1(tmp_path):
    db_path = str(tmp_path / "prices.db")
    path = write_csv(tmp_path / "skus.csv", ["model"], [["SMS6"]])

    assert asyncio.run(main.main(["--import-csv", path, "--db", db_path])) == 1
    assert DatabaseManager(db_path).get_all_products() == []


def test_unopenable_database_exits_1(tmp_path):
    db_path = str(tmp_path / "no-such-dir" / "prices.db")
    assert asyncio.run(main.main(["--sku", "A", "--db", db_path])) == 1
