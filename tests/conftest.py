"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from snapreport.schemas.config import ReportConfig
from snapreport.shared.llm_client import LLMClient

# Smallest valid PNG header, enough for "non-empty image" checks
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16

SAMPLE_PAGE = {
    "title": "VIX Index",
    "bodyText": "CBOE Volatility Index 18.5",
    "structuredData": {"price": "18.5"},
    "url": "https://example.com/vix",
}


def _write_png(path: str, full_page: bool = False, **_: object) -> bytes:
    Path(path).write_bytes(PNG_BYTES)
    return PNG_BYTES


@pytest.fixture
def fake_browser(monkeypatch: pytest.MonkeyPatch) -> SimpleNamespace:
    """Replace Playwright in ``snapreport.shared.browser`` with mocks.

    Returns the mock objects so tests can script the page and assert that the
    browser was closed.  ``page.screenshot`` writes a tiny PNG to its path.
    """
    page = MagicMock()
    page.goto = AsyncMock()
    page.wait_for_timeout = AsyncMock()
    page.evaluate = AsyncMock(return_value=dict(SAMPLE_PAGE))
    page.set_content = AsyncMock()
    page.screenshot = AsyncMock(side_effect=_write_png)

    context = MagicMock()
    context.new_page = AsyncMock(return_value=page)

    browser = MagicMock()
    browser.new_context = AsyncMock(return_value=context)
    browser.close = AsyncMock()

    pw = MagicMock()
    pw.chromium.launch = AsyncMock(return_value=browser)
    pw.stop = AsyncMock()

    starter = MagicMock()
    starter.start = AsyncMock(return_value=pw)
    factory = MagicMock(return_value=starter)

    monkeypatch.setattr("snapreport.shared.browser.async_playwright", factory)
    return SimpleNamespace(page=page, context=context, browser=browser, pw=pw, factory=factory)


@pytest.fixture
def fast_config(tmp_path: Path) -> ReportConfig:
    """Defaults with zero settle delays and outputs under tmp_path."""
    prompt = tmp_path / "systemprompt.md"
    prompt.write_text("You are a report writer.\n", encoding="utf-8")
    return ReportConfig(
        prompt_path=str(prompt),
        output_directory=str(tmp_path / "out"),
        fetch_settle_ms=0,
        render_settle_ms=0,
    )


@pytest.fixture
def mock_llm_client() -> LLMClient:
    """Return an LLMClient with a mocked OpenAI SDK underneath."""
    client = LLMClient.__new__(LLMClient)
    client._client = AsyncMock()
    client.model = "gpt-4o-mini"
    client.max_tokens = 4000
    client.temperature = 0.7
    return client
