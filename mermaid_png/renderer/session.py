"""Shared headless Chromium instance with per-render page scopes."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from playwright.async_api import Browser, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from mermaid_png.config.models import RenderConfig
from mermaid_png.errors import RenderError

logger = logging.getLogger(__name__)


class RenderSession:
    """Owns at most one launched browser, reused across renders.

    The browser is launched lazily by :meth:`acquire` and torn down by
    :meth:`shutdown`, after which a later ``acquire`` launches a new one.
    Each render gets its own page through :meth:`page`, which always
    closes it on exit.
    """

    def __init__(self, config: RenderConfig | None = None) -> None:
        self._config = config or RenderConfig()
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._lock = asyncio.Lock()

    @property
    def is_launched(self) -> bool:
        return self._browser is not None

    async def acquire(self) -> Browser:
        """Return the shared browser, launching it on first use.

        Raises RenderError if playwright cannot start Chromium.
        """
        async with self._lock:
            if self._browser is None:
                logger.debug("launching chromium (headless=%s)", self._config.headless)
                try:
                    self._playwright = await async_playwright().start()
                except PlaywrightError as e:
                    raise RenderError(f"Failed to start playwright: {e}") from e
                try:
                    self._browser = await self._playwright.chromium.launch(
                        headless=self._config.headless,
                        args=list(self._config.browser_args),
                    )
                except BaseException as e:
                    await self._playwright.stop()
                    self._playwright = None
                    if isinstance(e, PlaywrightError):
                        raise RenderError(f"Failed to launch Chromium: {e}") from e
                    raise
            return self._browser

    @asynccontextmanager
    async def page(self, scale: float) -> AsyncIterator[Page]:
        """Open a page with the configured viewport at *scale*; close it on exit."""
        browser = await self.acquire()
        page = await browser.new_page(
            viewport={
                "width": self._config.viewport_width,
                "height": self._config.viewport_height,
            },
            device_scale_factor=scale,
        )
        try:
            page.set_default_timeout(self._config.page_timeout_ms)
            yield page
        finally:
            await page.close()

    async def shutdown(self) -> None:
        """Close the browser if one is running. Safe to call repeatedly."""
        browser, playwright = self._browser, self._playwright
        self._browser = None
        self._playwright = None
        try:
            if browser is not None:
                logger.debug("closing chromium")
                await browser.close()
        finally:
            if playwright is not None:
                await playwright.stop()

    async def __aenter__(self) -> RenderSession:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.shutdown()
