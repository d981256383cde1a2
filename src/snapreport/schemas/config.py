"""Configuration schema: validates snapreport.yml."""

from pydantic import BaseModel, model_validator


class ProbeRule(BaseModel):
    """One best-effort structured-field probe run inside the fetched page.

    ``selector`` is a CSS selector list.  With ``multiple`` unset the first
    match's text is recorded; with it set, the texts of every match are
    recorded as a list.
    """

    label: str
    selector: str
    multiple: bool = False


DEFAULT_PROBES: list[ProbeRule] = [
    ProbeRule(
        label="price",
        selector='[data-last-price], .YMlKec.fxKbKc, [class*="price"]',
    ),
    ProbeRule(
        label="weather",
        selector='.weather-telop, .temp, [class*="temperature"]',
        multiple=True,
    ),
]


class ReportConfig(BaseModel):
    """Run settings, loaded from an optional snapreport.yml.

    Every field has a default so the pipeline runs without a settings file.
    """

    # Inputs
    prompt_path: str = "systemprompt.md"

    # Output
    output_directory: str = "."

    # Model
    model: str = "gpt-4o-mini"
    max_tokens: int = 4000
    temperature: float = 0.7

    # Fetching
    probes: list[ProbeRule] = DEFAULT_PROBES
    fetch_timeout_ms: int = 30_000
    fetch_settle_ms: int = 2_000
    user_agent: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

    # Rendering
    render_settle_ms: int = 3_000
    viewport_width: int = 1200
    viewport_height: int = 800

    @model_validator(mode="after")
    def check_unique_probe_labels(self) -> "ReportConfig":
        labels = [p.label for p in self.probes]
        if len(labels) != len(set(labels)):
            raise ValueError("Probe labels must be unique")
        return self

    @model_validator(mode="after")
    def check_positive_limits(self) -> "ReportConfig":
        if self.max_tokens <= 0:
            raise ValueError("max_tokens must be positive")
        if self.viewport_width <= 0 or self.viewport_height <= 0:
            raise ValueError("viewport dimensions must be positive")
        return self
