"""
Browser session used by a scrape run.

One Chromium page is opened per run and shared by every supplier scraper.
The browser is closed when the context exits, whatever the outcome.
"""
import logging
from contextlib import asynccontextmanager

from playwright.async_api import async_playwright

from config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--window-size=1920,1080",
]


@asynccontextmanager
async def open_browser_page(settings: Settings = None):
    settings = settings or default_settings

    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=settings.HEADLESS, args=LAUNCH_ARGS)
        logger.info("Browser launched (headless=%s)", settings.HEADLESS)
        try:
            context = await browser.new_context(
                user_agent=settings.USER_AGENT,
                viewport={"width": 1920, "height": 1080},
                locale="vi-VN",
            )
            page = await context.new_page()
            yield page
        finally:
            await browser.close()
            logger.info("Browser closed")
