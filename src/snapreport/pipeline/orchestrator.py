"""Orchestrator: config → fetch → synthesize → render, in that order."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Mapping

from rich.markup import escape

from snapreport.config import load_prompt_template, resolve_targets
from snapreport.pipeline.fetcher import PageFetcher
from snapreport.pipeline.renderer import ReportRenderer
from snapreport.pipeline.synthesizer import CompletionClient, ReportSynthesizer
from snapreport.schemas.config import ReportConfig
from snapreport.schemas.snapshot import RunResult
from snapreport.shared.progress import PipelineProgress

logger = logging.getLogger(__name__)

HTML_FILENAME = "report.html"
IMAGE_FILENAME = "report.png"


class ReportPipeline:
    """Runs one full, independent pass of the pipeline.

    Per-target fetch failures and synthesis failures are absorbed by the
    fetcher and the synthesizer.  Anything else (missing prompt template,
    render failure, unwritable output directory) propagates to the caller.

    The fetcher and renderer may be swapped out for tests; by default they
    are built from ``config``.
    """

    def __init__(
        self,
        client: CompletionClient,
        config: ReportConfig,
        *,
        fetcher: PageFetcher | None = None,
        renderer: ReportRenderer | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.config = config
        self.fetcher = fetcher or PageFetcher(config)
        self.synthesizer = ReportSynthesizer(client)
        self.renderer = renderer or ReportRenderer(config)
        self.environ = environ

    @property
    def output_dir(self) -> Path:
        return Path(self.config.output_directory)

    async def run(self, *, generated_at: datetime | None = None) -> RunResult:
        """Execute every stage and return paths to the written outputs."""
        system_prompt = load_prompt_template(self.config.prompt_path)
        targets, source = resolve_targets(system_prompt, self.environ)
        logger.info("Target URLs (%s): %s", source, ", ".join(targets))

        html_path = self.output_dir / HTML_FILENAME
        image_path = self.output_dir / IMAGE_FILENAME

        with PipelineProgress() as progress:
            # ── Fetch ─────────────────────────────────────────────
            progress.print_phase(f"Scraping {len(targets)} page(s)")
            progress.start_stage("Fetch")
            snapshots = await self.fetcher.fetch_all(
                targets, on_progress=lambda m: progress.update_stage("Fetch", m),
            )
            failed = [s for s in snapshots if s.error]
            for snap in failed:
                progress.log_event("Fetch", f"[yellow]{escape(snap.url)}: {escape(snap.error)}[/]")
            progress.finish_stage(
                "Fetch", f"{len(snapshots) - len(failed)}/{len(snapshots)} ok",
            )

            # ── Synthesize ───────────────────────────────────────
            progress.print_phase("Generating report")
            progress.start_stage("Synthesize")
            token_note: list[str] = []

            def _on_tokens(input_tokens: int, output_tokens: int) -> None:
                token_note.append(f"{input_tokens:,} in / {output_tokens:,} out tokens")
                progress.update_stage("Synthesize", token_note[-1])

            result = await self.synthesizer.synthesize(
                snapshots, system_prompt, generated_at=generated_at,
                on_tokens=_on_tokens,
            )
            if result.used_fallback:
                progress.fail_stage("Synthesize", f"fallback report used ({result.error})")
            else:
                progress.finish_stage("Synthesize", "".join(token_note[-1:]))

            # Saved before rendering so the HTML survives a render failure
            self.output_dir.mkdir(parents=True, exist_ok=True)
            html_path.write_text(result.html, encoding="utf-8")
            progress.log_event("Synthesize", f"HTML saved to: [dim]{html_path}[/]")
            logger.info("HTML saved to: %s", html_path)

            # ── Render ───────────────────────────────────────────
            progress.print_phase("Converting to PNG")
            progress.start_stage("Render")
            try:
                await self.renderer.render(result.html, image_path)
            except Exception as exc:
                progress.fail_stage("Render", str(exc))
                raise
            progress.finish_stage("Render")

        return RunResult(
            targets=targets,
            snapshots=snapshots,
            used_fallback=result.used_fallback,
            html_path=html_path,
            image_path=image_path,
        )
