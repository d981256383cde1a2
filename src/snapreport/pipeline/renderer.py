"""Renderer: HTML report → full-page PNG."""

from __future__ import annotations

import logging
from pathlib import Path

from snapreport.schemas.config import ReportConfig
from snapreport.shared.browser import BrowserManager

logger = logging.getLogger(__name__)


class RenderError(RuntimeError):
    """Raised when the report could not be captured to an image."""


class ReportRenderer:
    def __init__(self, config: ReportConfig) -> None:
        self.config = config

    async def render(self, html: str, output_path: str | Path) -> Path:
        """Screenshot ``html`` into ``output_path``; raises ``RenderError`` on failure."""
        output_path = Path(output_path)
        viewport = {
            "width": self.config.viewport_width,
            "height": self.config.viewport_height,
        }
        try:
            async with BrowserManager(viewport=viewport) as browser:
                await browser.screenshot_html(
                    html, output_path, settle_ms=self.config.render_settle_ms,
                )
        except Exception as exc:
            logger.error("Error generating PNG at %s: %s", output_path, exc)
            raise RenderError(f"Could not render report to {output_path}: {exc}") from exc

        logger.info("Report saved to: %s", output_path)
        return output_path
