"""Headless browser integration using Playwright."""
import asyncio
import os
import sys
from contextlib import asynccontextmanager
from playwright.async_api import async_playwright, Browser, Page, Playwright
from typing import Optional, Dict, Any, List, AsyncIterator
import logging

from config import (
    SERVERLESS, BROWSER_REUSE, HEADLESS, CHROME_EXECUTABLE_PATH, CHROMIUM_EXECUTABLE_PATH,
    IGNORE_HTTPS_ERRORS, VIEWPORT_WIDTH, VIEWPORT_HEIGHT
)
from errors import BrowserLaunchError

logger = logging.getLogger(__name__)

LOCAL_ARGS = ['--no-sandbox', '--disable-setuid-sandbox']

# Flags needed to run Chromium inside Lambda-style sandboxes
SERVERLESS_ARGS = LOCAL_ARGS + [
    '--disable-dev-shm-usage',
    '--single-process',
    '--no-zygote',
    '--disable-gpu',
]

CHROME_PATHS = {
    'win32': [
        r"C:\Program Files\Google\Chrome\Application\chrome.exe",
        r"C:\Program Files (x86)\Google\Chrome\Application\chrome.exe",
        os.path.expanduser(r"~\AppData\Local\Google\Chrome\Application\chrome.exe"),
    ],
    'darwin': [
        "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
        "/Applications/Chromium.app/Contents/MacOS/Chromium",
    ],
    'linux': [
        "/usr/bin/google-chrome",
        "/usr/bin/google-chrome-stable",
        "/usr/bin/chromium",
        "/usr/bin/chromium-browser",
    ],
}


def find_local_chrome(platform: Optional[str] = None) -> Optional[str]:
    """Return the first installed Chrome/Chromium binary for the platform, if any."""
    platform = platform or sys.platform
    key = 'linux' if platform.startswith('linux') else platform
    for path in CHROME_PATHS.get(key, []):
        if os.path.exists(path):
            return path
    return None


def resolve_launch_options(
    serverless: bool = SERVERLESS,
    headless: bool = HEADLESS,
    chrome_path: str = CHROME_EXECUTABLE_PATH,
    chromium_path: str = CHROMIUM_EXECUTABLE_PATH,
    platform: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build keyword arguments for ``chromium.launch``.

    Serverless deployments use the packaged Chromium binary with sandbox-free
    flags. Local runs prefer an explicit path, then an installed Chrome, and
    finally fall back to Playwright's bundled Chromium.

    Args:
        serverless: Whether we run inside a serverless function
        headless: Run without a visible window
        chrome_path: Explicit local Chrome executable
        chromium_path: Packaged Chromium executable for serverless runs
        platform: Override for ``sys.platform`` (tests)

    Returns:
        Launch options dictionary
    """
    options: Dict[str, Any] = {"headless": headless}
    if serverless:
        options["args"] = list(SERVERLESS_ARGS)
        executable = chromium_path or None
    else:
        options["args"] = list(LOCAL_ARGS)
        executable = chrome_path or find_local_chrome(platform)
    if executable:
        options["executable_path"] = executable
    return options


class BrowserManager:
    """Owns the Playwright driver and the headless browser handle."""

    def __init__(
        self,
        reuse: bool = BROWSER_REUSE,
        launch_options: Optional[Dict[str, Any]] = None,
        page_options: Optional[Dict[str, Any]] = None,
    ):
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.reuse = reuse
        self.launch_options = launch_options if launch_options is not None else resolve_launch_options()
        self.page_options = page_options if page_options is not None else {
            "viewport": {"width": VIEWPORT_WIDTH, "height": VIEWPORT_HEIGHT},
            "ignore_https_errors": IGNORE_HTTPS_ERRORS,
        }
        self._lock = asyncio.Lock()

    async def __aenter__(self):
        """Async context manager entry."""
        await self.ensure_browser()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    @property
    def is_ready(self) -> bool:
        return self.browser is not None and self.browser.is_connected()

    async def _start_playwright(self) -> Playwright:
        if self.playwright is None:
            self.playwright = await async_playwright().start()
        return self.playwright

    async def _launch(self) -> Browser:
        try:
            playwright = await self._start_playwright()
            browser = await playwright.chromium.launch(**self.launch_options)
        except Exception as e:
            logger.error(f"Error launching browser: {e}", exc_info=True)
            raise BrowserLaunchError(f"Failed to launch browser: {e}") from e
        logger.info(f"Browser started (executable: {self.launch_options.get('executable_path', 'bundled')})")
        return browser

    async def ensure_browser(self) -> Browser:
        """
        Return the shared browser, launching it if there is none.

        Launches happen under a lock so concurrent first requests share a
        single browser. A failed launch leaves the handle unset; the next call
        tries again.

        Raises:
            BrowserLaunchError: if Chromium could not be started
        """
        async with self._lock:
            if self.is_ready:
                return self.browser
            self.browser = None
            self.browser = await self._launch()
            return self.browser

    @asynccontextmanager
    async def new_page(self) -> AsyncIterator[Page]:
        """
        Open a fresh tab and close it when the block exits.

        Without browser reuse a dedicated browser is launched for the tab and
        closed together with it.
        """
        if self.reuse:
            browser = await self.ensure_browser()
        else:
            async with self._lock:
                browser = await self._launch()
        page = None
        try:
            page = await browser.new_page(**self.page_options)
            logger.info("New page created")
            yield page
        finally:
            if page is not None:
                try:
                    await page.close()
                    logger.info("Page closed")
                except Exception as e:
                    logger.warning(f"Error closing page: {e}")
            if not self.reuse:
                await browser.close()

    async def close(self):
        """Close the browser and stop the Playwright driver."""
        async with self._lock:
            if self.browser:
                await self.browser.close()
                self.browser = None
                logger.info("Browser closed")
            if self.playwright:
                await self.playwright.stop()
                self.playwright = None
