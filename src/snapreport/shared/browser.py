"""Playwright browser manager: one isolated Chromium per fetch or render."""

from __future__ import annotations

import logging
from pathlib import Path
from types import TracebackType
from typing import Any

from playwright.async_api import async_playwright, Browser, BrowserContext, Page, Playwright

from snapreport.schemas.config import ProbeRule
from snapreport.schemas.snapshot import BODY_TEXT_LIMIT

logger = logging.getLogger(__name__)

# Chromium refuses to start as root in CI containers without these
LAUNCH_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]

_EXTRACT_JS = r"""({limit, probes}) => {
    document.querySelectorAll('script, style').forEach(el => el.remove());

    const structuredData = {};
    for (const probe of probes) {
        try {
            if (probe.multiple) {
                const els = document.querySelectorAll(probe.selector);
                if (els.length > 0) {
                    structuredData[probe.label] = [...els].map(el => el.textContent.trim());
                }
            } else {
                const el = document.querySelector(probe.selector);
                if (el) structuredData[probe.label] = el.textContent.trim();
            }
        } catch (e) {
            // Invalid selector, skip this probe only
        }
    }

    const bodyText = document.body ? document.body.innerText : '';
    return {
        title: document.title,
        bodyText: bodyText.substring(0, limit),
        structuredData,
        url: window.location.href,
    };
}"""


class BrowserManager:
    """Owns a single headless Chromium instance and one browser context.

    Not shared: every fetch and every render enters its own manager so
    nothing leaks between targets.  The browser and the Playwright driver are
    released in ``__aexit__`` whether or not the body raised.

    Usage::

        async with BrowserManager(user_agent=UA) as bm:
            data = await bm.extract_page("https://example.com", probes=rules)
    """

    def __init__(
        self,
        *,
        viewport: dict[str, int] | None = None,
        user_agent: str | None = None,
    ) -> None:
        self._viewport = viewport
        self._user_agent = user_agent
        self._pw: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None

    async def __aenter__(self) -> "BrowserManager":
        self._pw = await async_playwright().start()
        try:
            self._browser = await self._pw.chromium.launch(headless=True, args=LAUNCH_ARGS)
            context_opts: dict[str, Any] = {}
            if self._viewport:
                context_opts["viewport"] = self._viewport
            if self._user_agent:
                context_opts["user_agent"] = self._user_agent
            self._context = await self._browser.new_context(**context_opts)
        except BaseException:
            await self._close()
            raise
        logger.debug("Browser launched")
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self._close()

    async def _close(self) -> None:
        if self._browser:
            await self._browser.close()
            self._browser = None
        if self._pw:
            await self._pw.stop()
            self._pw = None
        self._context = None
        logger.debug("Browser closed")

    async def _new_page(self) -> Page:
        assert self._context is not None, "BrowserManager not entered"
        return await self._context.new_page()

    async def extract_page(
        self,
        url: str,
        *,
        probes: list[ProbeRule],
        timeout_ms: int = 30_000,
        settle_ms: int = 2_000,
    ) -> dict[str, Any]:
        """Navigate to URL and return title, truncated body text, and probe hits.

        Waits for network idle, then ``settle_ms`` more for client-side
        frameworks that keep rendering after the network goes quiet.
        """
        page = await self._new_page()
        await page.goto(url, wait_until="networkidle", timeout=timeout_ms)
        await page.wait_for_timeout(settle_ms)
        return await page.evaluate(
            _EXTRACT_JS,
            {
                "limit": BODY_TEXT_LIMIT,
                "probes": [p.model_dump() for p in probes],
            },
        )

    async def screenshot_html(
        self,
        html: str,
        output_path: str | Path,
        *,
        settle_ms: int = 3_000,
    ) -> None:
        """Load markup directly into a page and save a full-page PNG."""
        page = await self._new_page()
        await page.set_content(html, wait_until="networkidle")
        # Chart.js animations keep running after the CDN script loads
        await page.wait_for_timeout(settle_ms)
        await page.screenshot(path=str(output_path), full_page=True)
