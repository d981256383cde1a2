"""Config loading: settings YAML, prompt template, and target resolution."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Callable, Mapping

import yaml

from snapreport.schemas.config import ReportConfig

logger = logging.getLogger(__name__)

DEFAULT_TARGET = "https://www.google.com/finance/quote/VIX:INDEXCBOE"

# "TARGET_URLS:" header followed by one or more "- <url>" lines
_TARGET_SECTION = re.compile(r"TARGET_URLS:\s*\n((?:- .*\n)+)")

TargetResolver = Callable[[str, Mapping[str, str]], list[str]]
"""Signature: (prompt_template, environ) -> targets, empty when not applicable."""


def load_config(path: str | Path | None = None) -> ReportConfig:
    """Load and validate a settings file, or return defaults when ``path`` is None.

    Raises ``FileNotFoundError`` if the path doesn't exist and
    ``pydantic.ValidationError`` if the YAML content is invalid.
    """
    if path is None:
        return ReportConfig()

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError(f"Config file must be a YAML mapping, got {type(raw).__name__}")

    # A "probes:" key with every entry commented out loads as None
    if "probes" in raw and raw["probes"] is None:
        raw["probes"] = []

    return ReportConfig(**raw)


def load_prompt_template(path: str | Path) -> str:
    """Read the system prompt verbatim.

    There is no fallback: the synthesizer cannot run without it, so a missing
    or unreadable file propagates to the caller.
    """
    path = Path(path)
    try:
        return path.read_text(encoding="utf-8")
    except OSError:
        logger.error("Could not load prompt template from %s", path)
        raise


# ----------------------------------------------------------------------
# Target resolution
# ----------------------------------------------------------------------


def targets_from_env(template: str, environ: Mapping[str, str]) -> list[str]:
    """Comma-separated ``TARGET_URLS`` environment override."""
    raw = environ.get("TARGET_URLS", "")
    return [url.strip() for url in raw.split(",") if url.strip()]


def targets_from_prompt(template: str, environ: Mapping[str, str]) -> list[str]:
    """Bullet list under a ``TARGET_URLS:`` header in the prompt template."""
    # Normalize line endings and make sure the final bullet is newline-terminated
    text = template.replace("\r\n", "\n")
    if not text.endswith("\n"):
        text += "\n"

    match = _TARGET_SECTION.search(text)
    if not match:
        return []
    return [
        re.sub(r"^-\s*", "", line.strip()).strip()
        for line in match.group(1).split("\n")
        if line.strip().startswith("-")
    ]


def default_targets(template: str, environ: Mapping[str, str]) -> list[str]:
    return [DEFAULT_TARGET]


TARGET_RESOLVERS: list[tuple[str, TargetResolver]] = [
    ("environment", targets_from_env),
    ("prompt template", targets_from_prompt),
    ("built-in default", default_targets),
]


def resolve_targets(
    template: str,
    environ: Mapping[str, str] | None = None,
) -> tuple[list[str], str]:
    """Try each resolver in order; the first non-empty result wins.

    Returns ``(targets, source_name)``.
    """
    env = os.environ if environ is None else environ
    for source, resolver in TARGET_RESOLVERS:
        targets = [t for t in resolver(template, env) if t]
        if targets:
            logger.debug("Resolved %d target(s) from %s", len(targets), source)
            return targets, source

    # Unreachable while default_targets is last in the chain
    raise RuntimeError("No target resolver produced a target")
