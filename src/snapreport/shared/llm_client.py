"""Async OpenAI API wrapper used by the report synthesizer."""

from __future__ import annotations

import html
import logging
from typing import Any, Callable

from openai import AsyncOpenAI

logger = logging.getLogger(__name__)

MODEL = "gpt-4o-mini"
MAX_TOKENS = 4_000
TEMPERATURE = 0.7

TokensCallback = Callable[[int, int], None]
"""Called with (input_tokens, output_tokens) when a completion finishes."""


class LLMClient:
    """Thin async wrapper around the OpenAI SDK.

    Built once by the CLI and handed to the synthesizer, so tests can pass
    a ``DryRunClient`` or a mock in its place.  No retries: a failed call
    raises and the caller decides what to do.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        model: str = MODEL,
        max_tokens: int = MAX_TOKENS,
        temperature: float = TEMPERATURE,
    ) -> None:
        self._client = AsyncOpenAI(api_key=api_key)
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def simple_completion(
        self,
        *,
        system: str,
        user_message: str,
        on_tokens: TokensCallback | None = None,
    ) -> str:
        """Single request/response with no tools.

        Raises ``ValueError`` if the response carries no text, so an empty
        completion is handled like any other failed call.
        """
        kwargs: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user_message},
            ],
        }

        response = await self._client.chat.completions.create(**kwargs)
        usage = getattr(response, "usage", None)
        if on_tokens and usage:
            on_tokens(getattr(usage, "prompt_tokens", 0), getattr(usage, "completion_tokens", 0))

        if not getattr(response, "choices", None):
            raise ValueError("Completion response contained no choices")
        content = response.choices[0].message.content
        if not content:
            raise ValueError("Completion response contained no text")
        return content


# ======================================================================
# Dry-run client (zero API calls)
# ======================================================================

_DRY_RUN_HTML = """\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<title>Scraping Report (dry run)</title>
<style>body {{ font-family: sans-serif; padding: 20px; }} pre {{ background: #f0f0f0; padding: 10px; }}</style>
</head>
<body>
<h1>Scraping Report (dry run)</h1>
<pre>{payload}</pre>
</body>
</html>
"""


class DryRunClient:
    """Drop-in replacement for LLMClient that makes zero API calls.

    Echoes the user message back inside a minimal HTML page, so every value
    that went into the request is visible in the rendered report.
    """

    model = "dry-run"

    async def simple_completion(
        self,
        *,
        system: str,
        user_message: str,
        on_tokens: TokensCallback | None = None,
    ) -> str:
        logger.info("[dry-run] Completion skipped (%d chars of input)", len(user_message))
        return _DRY_RUN_HTML.format(payload=html.escape(user_message, quote=False))
