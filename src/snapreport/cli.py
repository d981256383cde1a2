"""Typer CLI: ``snapreport run`` and ``snapreport targets`` commands."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape

from snapreport.config import load_config, load_prompt_template, resolve_targets
from snapreport.schemas.config import ReportConfig

if TYPE_CHECKING:
    from snapreport.schemas.snapshot import RunResult

# Load .env file from the working directory (if it exists)
load_dotenv()

app = typer.Typer(
    name="snapreport",
    help="Scrape web pages, have a model write an HTML report, and save it as a PNG.",
    no_args_is_help=True,
)
console = Console()
logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%H:%M:%S",
    )
    # httpx logs every HTTP request at INFO, too noisy for users
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _load(config: Path | None, prompt: Path | None, output: Path | None = None) -> ReportConfig:
    """Load settings and apply command-line overrides, exiting 1 on bad config."""
    try:
        cfg = load_config(config)
    except Exception as exc:
        console.print(f"[red]Config validation failed:[/] {escape(str(exc))}")
        raise typer.Exit(code=1)

    overrides: dict[str, str] = {}
    if prompt is not None:
        overrides["prompt_path"] = str(prompt)
    if output is not None:
        overrides["output_directory"] = str(output)
    return cfg.model_copy(update=overrides) if overrides else cfg


@app.command()
def targets(
    config: Path = typer.Option(None, "--config", "-c", help="Path to snapreport.yml"),
    prompt: Path = typer.Option(None, "--prompt", "-p", help="Path to the system prompt file."),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Show which pages would be scraped, without launching a browser."""
    _setup_logging(verbose)
    cfg = _load(config, prompt)

    try:
        template = load_prompt_template(cfg.prompt_path)
    except OSError as exc:
        console.print(f"[red]Could not load prompt template:[/] {escape(str(exc))}")
        raise typer.Exit(code=1)

    urls, source = resolve_targets(template)
    console.print(f"[green]Targets from {source}:[/]")
    for url in urls:
        console.print(f"  - {escape(url)}")
    console.print(f"\n  Prompt:      {cfg.prompt_path}")
    console.print(f"  Output dir:  {cfg.output_directory}")
    console.print(f"  Model:       {cfg.model}")
    console.print(f"  Probes:      {', '.join(p.label for p in cfg.probes) or '(none)'}")


@app.command()
def run(
    config: Path = typer.Option(None, "--config", "-c", help="Path to snapreport.yml"),
    prompt: Path = typer.Option(None, "--prompt", "-p", help="Path to the system prompt file."),
    output: Path = typer.Option(None, "--output", "-o", help="Directory for report.html and report.png."),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Skip the model call and echo the scraped data instead."),
) -> None:
    """Run the full scrape → report → screenshot pipeline."""
    _setup_logging(verbose)
    cfg = _load(config, prompt, output)

    if dry_run:
        console.print("[yellow]DRY-RUN mode: no API calls will be made.[/]\n")
    elif not os.environ.get("OPENAI_API_KEY"):
        console.print("[yellow]OPENAI_API_KEY is not set, the fallback report will be used.[/]\n")

    console.print("[bold]Starting web scraping report generator...[/]\n")

    try:
        result = asyncio.run(_run_pipeline(cfg, dry_run=dry_run))
    except Exception as exc:
        logger.exception("Fatal error")
        console.print(f"\n[red]Fatal error:[/] {escape(str(exc))}")
        raise typer.Exit(code=1)

    if result.used_fallback:
        console.print("[yellow]Report generated from the fallback template.[/]")
    console.print(f"[green]HTML report written to:[/] {result.html_path}")
    console.print(f"[green]PNG report written to:[/] {result.image_path}")
    console.print("\n[bold green]Report generation complete![/]")


async def _run_pipeline(cfg: ReportConfig, *, dry_run: bool = False) -> RunResult:
    """Build the client once and hand it to the pipeline."""
    from snapreport.pipeline.orchestrator import ReportPipeline

    if dry_run:
        from snapreport.shared.llm_client import DryRunClient
        client = DryRunClient()
    else:
        from snapreport.shared.llm_client import LLMClient
        # AsyncOpenAI raises at construction without a key; a placeholder
        # moves the auth failure to the request, where it gets the fallback report
        client = LLMClient(
            api_key=os.environ.get("OPENAI_API_KEY") or "missing",
            model=cfg.model,
            max_tokens=cfg.max_tokens,
            temperature=cfg.temperature,
        )

    pipeline = ReportPipeline(client=client, config=cfg)
    return await pipeline.run()
