"""Fallback report: the HTML written when remote synthesis fails.

Rendered from an in-module Jinja2 template so nothing here touches the
filesystem or the network.  The only run-dependent value is the timestamp,
and it appears in exactly one place: the ``<time class="generated-at">``
element.
"""

from __future__ import annotations

import html
from datetime import datetime

from jinja2 import Environment
from markupsafe import Markup

from snapreport.schemas.snapshot import Snapshot, dump_snapshots

_FALLBACK_TEMPLATE = """\
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Scraping Report</title>
    <style>
        body { font-family: sans-serif; padding: 20px; line-height: 1.6; }
        .error { color: red; padding: 20px; border: 1px solid red; }
        .data-section { margin: 20px 0; padding: 15px; background: #f5f5f5; }
        h1 { color: #333; }
        pre { background: #f0f0f0; padding: 10px; overflow-x: auto; white-space: pre-wrap; }
    </style>
</head>
<body>
    <h1>Scraping Report - <time class="generated-at" datetime="{{ generated_at_iso }}">{{ generated_at_label }}</time></h1>
    <div class="error">
        <h2>Error generating report</h2>
        <p>{{ error }}</p>
    </div>
    <div class="data-section">
        <h2>Raw Data</h2>
        <pre>{{ raw_data }}</pre>
    </div>
</body>
</html>
"""

_env = Environment(autoescape=True, keep_trailing_newline=True)
_template = _env.from_string(_FALLBACK_TEMPLATE)


def render_fallback_report(
    snapshots: list[Snapshot],
    error: BaseException | str,
    *,
    generated_at: datetime | None = None,
) -> str:
    """Render the fallback document for ``snapshots`` and the failure ``error``.

    Deterministic for identical snapshots, error text, and ``generated_at``.
    The error message is fully HTML-escaped; the snapshot dump has only
    ``&``, ``<`` and ``>`` escaped.
    """
    when = generated_at or datetime.now()
    message = str(error) or type(error).__name__
    return _template.render(
        generated_at_iso=when.isoformat(timespec="seconds"),
        generated_at_label=when.strftime("%Y-%m-%d %H:%M:%S"),
        error=message,
        # Quotes stay literal so markup-free snapshots appear byte-for-byte
        raw_data=Markup(html.escape(dump_snapshots(snapshots), quote=False)),
    )
