"""User-message template for the report synthesis request."""

REPORT_USER_PROMPT = """\
Analyze the following data scraped from web pages and build an HTML report.
Where a graph or chart helps, use Chart.js.

Scraped data:
{snapshots_json}

Requirements:
1. Present the data so it is easy to read at a glance
2. Highlight important figures and facts
3. Include graphs or charts where useful
4. Use a responsive layout
5. Use a clear, legible colour scheme and design

Respond with a complete, self-contained HTML document (include the Chart.js \
CDN script tag if you use charts).
"""
