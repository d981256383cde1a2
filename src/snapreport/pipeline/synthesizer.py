"""Report synthesizer: snapshots + system prompt → HTML report."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from snapreport.output.fallback import render_fallback_report
from snapreport.pipeline.prompts import REPORT_USER_PROMPT
from snapreport.schemas.snapshot import Snapshot, dump_snapshots
from snapreport.shared.llm_client import TokensCallback

logger = logging.getLogger(__name__)


class CompletionClient(Protocol):
    """Anything with ``LLMClient.simple_completion``'s signature."""

    async def simple_completion(
        self,
        *,
        system: str,
        user_message: str,
        on_tokens: TokensCallback | None = None,
    ) -> str: ...


@dataclass(frozen=True)
class SynthesisResult:
    html: str
    used_fallback: bool = False
    error: str | None = None


def build_user_message(snapshots: list[Snapshot]) -> str:
    return REPORT_USER_PROMPT.format(snapshots_json=dump_snapshots(snapshots))


class ReportSynthesizer:
    """Asks the model for a finished HTML report.

    Any failure of the remote call falls back to a locally rendered
    document, so ``synthesize`` always returns markup.
    """

    def __init__(self, client: CompletionClient) -> None:
        self.client = client

    async def synthesize(
        self,
        snapshots: list[Snapshot],
        system_prompt: str,
        *,
        generated_at: datetime | None = None,
        on_tokens: TokensCallback | None = None,
    ) -> SynthesisResult:
        """Return the model's HTML unmodified, or the fallback document."""
        try:
            html = await self.client.simple_completion(
                system=system_prompt,
                user_message=build_user_message(snapshots),
                on_tokens=on_tokens,
            )
        except Exception as exc:
            logger.error("Report synthesis failed, using fallback report: %s", exc)
            return SynthesisResult(
                html=render_fallback_report(snapshots, exc, generated_at=generated_at),
                used_fallback=True,
                error=str(exc) or type(exc).__name__,
            )

        logger.debug("Synthesized report (%d chars):\n%s", len(html), html[:500])
        return SynthesisResult(html=html)
