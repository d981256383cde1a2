"""Snapshot and run result models."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Union

from pydantic import BaseModel, ConfigDict, Field

# Max characters of page body text kept per snapshot
BODY_TEXT_LIMIT = 5000

StructuredValue = Union[str, list[str]]


class Snapshot(BaseModel):
    """What one Target looked like when fetched.

    Serialized with camelCase aliases (``bodyText``, ``structuredData``) since
    the JSON dump is what the model and the fallback report both see.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    url: str
    title: str = ""
    body_text: str = Field(default="", alias="bodyText")
    structured_data: dict[str, StructuredValue] = Field(
        default_factory=dict, alias="structuredData",
    )
    error: str | None = None

    @classmethod
    def failed(cls, url: str, error: str) -> "Snapshot":
        """Build the snapshot recorded when fetching ``url`` raised."""
        return cls(
            url=url,
            title="Error",
            body_text=f"Failed to scrape: {error}",
            error=error,
        )

    def to_payload(self) -> dict:
        """Plain dict in wire form; the error key is omitted on success."""
        return self.model_dump(by_alias=True, exclude_none=True)


def dump_snapshots(snapshots: list[Snapshot]) -> str:
    """Indented JSON serialization of a snapshot sequence, order preserved."""
    return json.dumps(
        [s.to_payload() for s in snapshots], indent=2, ensure_ascii=False,
    )


class RunResult(BaseModel):
    """The outcome of one full pipeline run."""

    targets: list[str]
    snapshots: list[Snapshot]
    used_fallback: bool = False
    html_path: Path
    image_path: Path
