import asyncio

import pytest

from db.db_manager import DatabaseManager
from models.models import Product, RecordStatus, SessionStatus, Supplier
from scraper import ScrapeOrchestrator, auto_scrape

SUPPLIERS = [
    Supplier(id="sup-dmx", name="Điện Máy Xanh"),
    Supplier(id="sup-wh", name="WellHome"),
    Supplier(id="sup-qh", name="Điện Máy Quang Hạnh"),
]


def run_catalog(orchestrator, browser, products, suppliers=SUPPLIERS):
    return asyncio.run(orchestrator.run(products, suppliers, browser.session))


def test_bosch123_scenario(make_page, make_browser, scenario_routes, sleeper):
    browser = make_browser(make_page(scenario_routes))
    run = run_catalog(ScrapeOrchestrator(sleep=sleeper), browser, [Product(code="BOSCH123")])

    dmx, wellhome, quanghanh = run.records

    assert dmx.status == RecordStatus.FOUND_WITH_PRICE
    assert dmx.price == 1710000
    assert dmx.price_formatted == "1.710.000₫"
    assert dmx.supplier_id == "sup-dmx"

    assert wellhome.status == RecordStatus.NO_INFO
    assert wellhome.product_name is None
    assert wellhome.price is None

    assert quanghanh.status == RecordStatus.FOUND_WITH_PRICE
    assert quanghanh.product_name == "Sản phẩm BOSCH123"
    assert quanghanh.price == 2500000


def test_records_grouped_by_product_in_scraper_order(make_page, make_browser, all_routes, sleeper):
    products = [Product(code=code) for code in ("SKU1", "SKU2", "SKU3", "SKU4")]
    page = make_page(all_routes)
    browser = make_browser(page)

    run = run_catalog(ScrapeOrchestrator(sleep=sleeper), browser, products)

    assert len(run.records) == 3 * len(products)
    expected = [
        (product.code, supplier)
        for product in products
        for supplier in ("Điện Máy Xanh", "WellHome", "Điện Máy Quang Hạnh")
    ]
    assert [(r.sku, r.supplier) for r in run.records] == expected
    assert len(page.visited) == 12


def test_delay_after_each_product(make_page, make_browser, sleeper):
    browser = make_browser(make_page())
    orchestrator = ScrapeOrchestrator(inter_product_delay_ms=2000, sleep=sleeper)

    run_catalog(orchestrator, browser, [Product(code="A"), Product(code="B")])

    assert sleeper.calls == [2.0, 2.0]


def test_session_summary(make_page, make_browser, all_routes, sleeper):
    browser = make_browser(make_page(all_routes))
    products = [Product(code="BOSCH123"), Product(code="BOSCH456")]

    run = run_catalog(ScrapeOrchestrator(sleep=sleeper), browser, products, SUPPLIERS[:2])

    session = run.session
    assert session.status == SessionStatus.COMPLETED
    assert session.total_products == 2
    assert session.total_suppliers == 2
    assert session.total_results == 6
    assert session.success_count == 6
    assert session.session_id.isdigit()
    assert run.supplier_success == {
        "Điện Máy Xanh": 2,
        "WellHome": 2,
        "Điện Máy Quang Hạnh": 2,
    }


def test_unregistered_suppliers_use_builtin_ids(make_page, make_browser, sleeper):
    browser = make_browser(make_page())
    run = run_catalog(ScrapeOrchestrator(sleep=sleeper), browser, [Product(code="X")], [])
    assert [r.supplier_id for r in run.records] == ["dmx", "wh", "qh"]


def test_connection_error_does_not_abort_batch(make_page, make_browser, all_routes, sleeper):
    page = make_page(all_routes, fail=("dienmayxanh.com",))
    browser = make_browser(page)

    run = run_catalog(ScrapeOrchestrator(sleep=sleeper), browser, [Product(code="A"), Product(code="B")])

    statuses = [r.status for r in run.records]
    assert statuses == [
        RecordStatus.NO_INFO, RecordStatus.FOUND_WITH_PRICE, RecordStatus.FOUND_WITH_PRICE,
    ] * 2


def test_browser_released_once_on_success(make_page, make_browser, sleeper):
    browser = make_browser(make_page())
    run_catalog(ScrapeOrchestrator(sleep=sleeper), browser, [Product(code="A")])

    assert browser.opened == 1
    assert browser.closed == 1


def test_browser_released_once_on_fatal_error(make_page, make_browser):
    async def failing_sleep(seconds):
        raise RuntimeError("interrupted")

    browser = make_browser(make_page())
    orchestrator = ScrapeOrchestrator(sleep=failing_sleep)

    with pytest.raises(RuntimeError):
        run_catalog(orchestrator, browser, [Product(code="A"), Product(code="B")])

    assert browser.closed == 1


def test_browser_released_when_scraper_raises(make_page, make_browser, sleeper):
    class ExplodingScraper:
        website = "Broken"

        def resolve_supplier_id(self, suppliers):
            return "broken"

        async def extract(self, page, sku):
            raise RuntimeError("browser crashed")

    browser = make_browser(make_page())
    orchestrator = ScrapeOrchestrator(scrapers=[ExplodingScraper()], sleep=sleeper)

    with pytest.raises(RuntimeError, match="browser crashed"):
        run_catalog(orchestrator, browser, [Product(code="A")])

    assert browser.closed == 1


def test_auto_scrape_empty_catalog_skips_browser(tmp_path, make_page, make_browser, sleeper):
    db = DatabaseManager(str(tmp_path / "prices.db"))
    browser = make_browser(make_page())

    result = asyncio.run(auto_scrape(db, ScrapeOrchestrator(sleep=sleeper), browser.session))

    assert result is None
    assert browser.opened == 0


def test_auto_scrape_persists_session(tmp_path, make_page, make_browser, scenario_routes, sleeper):
    db = DatabaseManager(str(tmp_path / "prices.db"))
    db.add_product("BOSCH123")
    db.add_supplier("sup-dmx", "Điện Máy Xanh")
    browser = make_browser(make_page(scenario_routes))

    run = asyncio.run(auto_scrape(db, ScrapeOrchestrator(sleep=sleeper), browser.session))

    stored = db.get_session(run.session.session_id)
    assert stored["total_results"] == 3
    assert stored["success_count"] == 2
    assert stored["total_suppliers"] == 1
    records = db.get_records_by_session(run.session.session_id)
    assert [r["supplier_id"] for r in records] == ["sup-dmx", "wh", "qh"]
    assert browser.closed == 1


def test_auto_scrape_failure_saves_nothing(tmp_path, make_page, make_browser):
    async def failing_sleep(seconds):
        raise RuntimeError("interrupted")

    db = DatabaseManager(str(tmp_path / "prices.db"))
    db.add_product("BOSCH123")
    browser = make_browser(make_page())

    with pytest.raises(RuntimeError):
        asyncio.run(auto_scrape(db, ScrapeOrchestrator(sleep=failing_sleep), browser.session))

    assert db.get_sessions() == []
    assert browser.closed == 1
