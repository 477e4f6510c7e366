from contextlib import asynccontextmanager

import pytest
from bs4 import BeautifulSoup
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

EMPTY_HTML = "<html><body><p>Không tìm thấy sản phẩm</p></body></html>"

DMX_HTML = """
<html><body>
<ul class="listproduct">
  <li class="item" data-name="Máy rửa chén Bosch BOSCH123" data-price="1710000"
      data-brand="Bosch" data-cate="Máy rửa chén">
    <a href="/may-rua-chen/bosch123"><strong class="price">1.710.000₫</strong></a>
  </li>
</ul>
</body></html>
"""

WELLHOME_HTML = """
<html><body>
<div class="product-inner">
  <h3>Máy rửa bát Bosch BOSCH123</h3>
  <span class="price">18,825,000₫</span>
</div>
</body></html>
"""

QUANGHANH_HTML = """
<html><body>
<div class="product-list">
  <div class="price-box"><span class="prPrice">2,500,000đ</span></div>
</div>
</body></html>
"""


class FakePage:
    """Stands in for a Playwright page, serving canned HTML per site."""

    def __init__(self, routes=None, fail=()):
        self.routes = routes or {}
        self.fail = fail
        self.visited = []
        self._html = EMPTY_HTML

    async def goto(self, url, wait_until=None, timeout=None):
        self.visited.append(url)
        if any(key in url for key in self.fail):
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")
        self._html = next(
            (html for key, html in self.routes.items() if key in url), EMPTY_HTML
        )

    async def wait_for_selector(self, selector, state=None, timeout=None):
        if BeautifulSoup(self._html, "lxml").select_one(selector) is None:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {selector}")
        return object()

    async def content(self):
        return self._html


class FakeBrowser:
    def __init__(self, page):
        self.page = page
        self.opened = 0
        self.closed = 0

    @asynccontextmanager
    async def session(self):
        self.opened += 1
        try:
            yield self.page
        finally:
            self.closed += 1


class Sleeper:
    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


@pytest.fixture
def scenario_routes():
    return {
        "dienmayxanh.com": DMX_HTML,
        "dienmayquanghanh.com": QUANGHANH_HTML,
    }


@pytest.fixture
def all_routes(scenario_routes):
    return {**scenario_routes, "wellhome.asia": WELLHOME_HTML}


@pytest.fixture
def make_page():
    return FakePage


@pytest.fixture
def make_browser():
    return FakeBrowser


@pytest.fixture
def sleeper():
    return Sleeper()
