"""Rich progress display for the pipeline stages."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

console = Console()


class PipelineProgress:
    """Tracks progress across the fetch → synthesize → render stages using Rich."""

    def __init__(self, *, console: Console = console) -> None:
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            TimeElapsedColumn(),
            console=console,
        )
        self._task_ids: dict[str, int] = {}

    def __enter__(self) -> "PipelineProgress":
        self._progress.__enter__()
        return self

    def __exit__(self, *args: object) -> None:
        self._progress.__exit__(*args)

    def start_stage(self, stage: str) -> None:
        """Register and start tracking a stage."""
        tid = self._progress.add_task(f"[cyan]{stage}[/]", total=None)
        self._task_ids[stage] = tid

    def update_stage(self, stage: str, status: str) -> None:
        """Update the status text for a stage."""
        if stage in self._task_ids:
            self._progress.update(
                self._task_ids[stage],
                description=f"[cyan]{stage}[/]: {escape(status)}",
            )

    def finish_stage(self, stage: str, note: str = "") -> None:
        """Mark a stage as complete."""
        if stage in self._task_ids:
            suffix = f" ({note})" if note else ""
            self._progress.update(
                self._task_ids[stage],
                description=f"[green]✓ {stage}{suffix}[/]",
                completed=True,
            )

    def fail_stage(self, stage: str, error: str) -> None:
        """Mark a stage as failed."""
        if stage in self._task_ids:
            self._progress.update(
                self._task_ids[stage],
                description=f"[red]✗ {stage}: {escape(error)}[/]",
                completed=True,
            )

    def log_event(self, stage: str, message: str) -> None:
        """Print a persistent log line above the spinner (not overwritten)."""
        self._progress.console.print(f"  [dim]{stage}:[/] {message}")

    def print_phase(self, label: str) -> None:
        """Print a phase header outside the progress display."""
        self._progress.console.print(Panel(f"[bold]{label}[/bold]", style="blue"))
