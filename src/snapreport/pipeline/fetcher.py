"""Page fetcher: one browser per target, one snapshot per target."""

from __future__ import annotations

import logging
from typing import Callable

from snapreport.schemas.config import ReportConfig
from snapreport.schemas.snapshot import BODY_TEXT_LIMIT, Snapshot
from snapreport.shared.browser import BrowserManager

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]


class PageFetcher:
    """Turns targets into snapshots.

    ``fetch`` never raises: navigation, extraction and browser-launch errors
    all end up in the returned snapshot's ``error`` field.
    """

    def __init__(self, config: ReportConfig) -> None:
        self.config = config

    async def fetch(self, url: str) -> Snapshot:
        logger.info("Scraping: %s", url)
        try:
            async with BrowserManager(user_agent=self.config.user_agent) as browser:
                data = await browser.extract_page(
                    url,
                    probes=self.config.probes,
                    timeout_ms=self.config.fetch_timeout_ms,
                    settle_ms=self.config.fetch_settle_ms,
                )
            return Snapshot(
                url=data.get("url") or url,
                title=data.get("title") or "",
                body_text=(data.get("bodyText") or "")[:BODY_TEXT_LIMIT],
                structured_data=data.get("structuredData") or {},
            )
        except Exception as exc:
            logger.error("Error scraping %s: %s", url, exc)
            return Snapshot.failed(url, str(exc) or type(exc).__name__)

    async def fetch_all(
        self,
        targets: list[str],
        *,
        on_progress: ProgressCallback | None = None,
    ) -> list[Snapshot]:
        """Fetch targets one after another, in order."""
        snapshots: list[Snapshot] = []
        for i, url in enumerate(targets, 1):
            if on_progress:
                on_progress(f"{i}/{len(targets)} {url}")
            snapshots.append(await self.fetch(url))
        return snapshots
