"""Tests for the Typer CLI."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from snapreport import cli
from snapreport.config import DEFAULT_TARGET
from snapreport.pipeline.renderer import RenderError
from snapreport.schemas.config import ReportConfig
from snapreport.schemas.snapshot import RunResult

runner = CliRunner()


@pytest.fixture
def prompt_file(tmp_path: Path) -> Path:
    p = tmp_path / "systemprompt.md"
    p.write_text("TARGET_URLS:\n- https://x.example\n- https://y.example\n", encoding="utf-8")
    return p


class TestTargetsCommand:
    def test_lists_prompt_targets(self, prompt_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("TARGET_URLS", raising=False)
        result = runner.invoke(cli.app, ["targets", "--prompt", str(prompt_file)])
        assert result.exit_code == 0
        assert "prompt template" in result.output
        assert "https://x.example" in result.output
        assert "https://y.example" in result.output

    def test_env_override(self, prompt_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TARGET_URLS", "https://a.example,https://b.example")
        result = runner.invoke(cli.app, ["targets", "--prompt", str(prompt_file)])
        assert result.exit_code == 0
        assert "environment" in result.output
        assert "https://a.example" in result.output
        assert "https://x.example" not in result.output

    def test_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("TARGET_URLS", raising=False)
        p = tmp_path / "plain.md"
        p.write_text("No targets here.\n")
        result = runner.invoke(cli.app, ["targets", "--prompt", str(p)])
        assert result.exit_code == 0
        assert DEFAULT_TARGET in result.output

    def test_missing_prompt_exits_1(self, tmp_path: Path) -> None:
        result = runner.invoke(cli.app, ["targets", "--prompt", str(tmp_path / "missing.md")])
        assert result.exit_code == 1
        assert "Could not load prompt template" in result.output

    def test_bad_config_exits_1(self, tmp_path: Path) -> None:
        bad = tmp_path / "bad.yml"
        bad.write_text("- not\n- a mapping\n")
        result = runner.invoke(cli.app, ["targets", "--config", str(bad)])
        assert result.exit_code == 1
        assert "Config validation failed" in result.output


class TestRunCommand:
    def test_success(self, tmp_path: Path, prompt_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        seen: dict = {}

        async def _fake_pipeline(cfg: ReportConfig, *, dry_run: bool = False) -> RunResult:
            seen["cfg"] = cfg
            seen["dry_run"] = dry_run
            out = Path(cfg.output_directory)
            return RunResult(
                targets=["https://x.example"], snapshots=[],
                html_path=out / "report.html", image_path=out / "report.png",
            )

        monkeypatch.setattr(cli, "_run_pipeline", _fake_pipeline)
        out_dir = tmp_path / "reports"

        result = runner.invoke(
            cli.app,
            ["run", "--prompt", str(prompt_file), "--output", str(out_dir), "--dry-run"],
        )

        assert result.exit_code == 0, result.output
        assert seen["dry_run"] is True
        assert seen["cfg"].prompt_path == str(prompt_file)
        assert seen["cfg"].output_directory == str(out_dir)
        assert "Report generation complete" in result.output

    def test_fatal_error_exits_1(self, prompt_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        async def _fail(cfg: ReportConfig, *, dry_run: bool = False) -> RunResult:
            raise RenderError("Could not render report to report.png: Target closed")

        monkeypatch.setattr(cli, "_run_pipeline", _fail)

        result = runner.invoke(cli.app, ["run", "--prompt", str(prompt_file)])

        assert result.exit_code == 1
        assert "Fatal error" in result.output

    def test_missing_prompt_exits_1(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        result = runner.invoke(
            cli.app,
            ["run", "--prompt", str(tmp_path / "missing.md"), "--output", str(tmp_path / "out")],
        )
        assert result.exit_code == 1
        assert "Fatal error" in result.output
        assert not (tmp_path / "out" / "report.html").exists()

    def test_warns_without_api_key(self, prompt_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)

        async def _fake_pipeline(cfg: ReportConfig, *, dry_run: bool = False) -> RunResult:
            return RunResult(
                targets=[], snapshots=[], used_fallback=True,
                html_path=Path("report.html"), image_path=Path("report.png"),
            )

        monkeypatch.setattr(cli, "_run_pipeline", _fake_pipeline)
        result = runner.invoke(cli.app, ["run", "--prompt", str(prompt_file)])
        assert result.exit_code == 0
        assert "OPENAI_API_KEY is not set" in result.output
        assert "fallback template" in result.output


class TestRunPipeline:
    @pytest.mark.asyncio
    async def test_dry_run_builds_pipeline_and_returns_result(
        self, fast_config: ReportConfig, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        from snapreport.pipeline.orchestrator import ReportPipeline
        from snapreport.shared.llm_client import DryRunClient

        expected = RunResult(
            targets=["https://a.example"], snapshots=[],
            html_path=Path("report.html"), image_path=Path("report.png"),
        )
        built: list[ReportPipeline] = []

        async def _run(self, **_):
            built.append(self)
            return expected

        monkeypatch.setattr(ReportPipeline, "run", _run)

        result = await cli._run_pipeline(fast_config, dry_run=True)

        assert result is expected
        assert isinstance(built[0].synthesizer.client, DryRunClient)
