"""Prompt construction and display formatting.

Everything here is a pure function of its arguments so the GUI, the
headless entry point and the exporters render identical output.
"""

import html
import re
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Iterable, Sequence

if TYPE_CHECKING:
    from ..core.documents import UploadedDocument
    from ..integrations.linear_client import Issue


NO_ISSUES_MESSAGE = "No completed issues found for this period."
NONE_MARKER = "None"

REVIEW_PROMPT_TEMPLATE = """
You are a performance review expert. Please create a clean performance summary based on the following information.

## Completed Linear Issues:
{issues_summary}

## Performance Documents:
{documents_summary}

## Requirements:
1. Group by category (Feature Development, Bug Fixes, Documentation, Others)
2. Highlight high-impact items
3. Output in clean markdown format
4. Write in English
5. Write in a professional performance review style
"""

# Applied in order; bold must run before italic. No nesting, no escaping,
# no ordered lists, no code blocks.
_MARKDOWN_RULES = [
    (re.compile(r"^### (.*)$", re.MULTILINE | re.IGNORECASE), r"<h3>\1</h3>"),
    (re.compile(r"^## (.*)$", re.MULTILINE | re.IGNORECASE), r"<h2>\1</h2>"),
    (re.compile(r"^# (.*)$", re.MULTILINE | re.IGNORECASE), r"<h1>\1</h1>"),
    (re.compile(r"\*\*(.*?)\*\*"), r"<strong>\1</strong>"),
    (re.compile(r"\*(.*?)\*"), r"<em>\1</em>"),
    (re.compile(r"^- (.*)$", re.MULTILINE | re.IGNORECASE), r"<li>\1</li>"),
]


def markdown_to_html(markdown: str) -> str:
    """Convert the minimal markdown subset the model emits into markup.

    Supported: ``#``/``##``/``###`` headings, ``**bold**``, ``*italic*``,
    ``- `` list items, and line breaks. Any other text passes through
    untouched apart from newlines becoming ``<br>``.
    """
    result = markdown.replace("\r\n", "\n")
    for pattern, replacement in _MARKDOWN_RULES:
        result = pattern.sub(replacement, result)
    return result.replace("\n", "<br>")


def format_issue_line(issue: "Issue") -> str:
    line = f"- [{issue.identifier}] {issue.title}"
    if issue.project_name:
        line += f" ({issue.project_name})"
    return line


def format_document_section(document: "UploadedDocument") -> str:
    return f"### {document.name}\n{document.content}"


def build_review_prompt(
    issues: Sequence["Issue"], documents: Sequence["UploadedDocument"]
) -> str:
    """Build the single instruction sent to the model."""
    issues_summary = "\n".join(format_issue_line(issue) for issue in issues)
    documents_summary = "\n\n".join(
        format_document_section(document) for document in documents
    )

    return REVIEW_PROMPT_TEMPLATE.format(
        issues_summary=issues_summary or NONE_MARKER,
        documents_summary=documents_summary or NONE_MARKER,
    )


def format_completed_date(completed_at: str) -> str:
    """Render an ISO-8601 timestamp as M/D/YYYY in UTC."""
    if not completed_at:
        return ""

    try:
        parsed = datetime.fromisoformat(completed_at.replace("Z", "+00:00"))
    except ValueError:
        return completed_at

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)

    return f"{parsed.month}/{parsed.day}/{parsed.year}"


def render_issue_html(issue: "Issue") -> str:
    meta = [
        html.escape(issue.project_name or "No project"),
        format_completed_date(issue.completed_at),
    ]
    if issue.labels:
        meta.append(html.escape(", ".join(issue.labels)))

    return (
        '<div class="issue">'
        f'<a href="{html.escape(issue.url, quote=True)}">'
        f"<code>{html.escape(issue.identifier)}</code> "
        f"<b>{html.escape(issue.title)}</b></a><br>"
        f'<span style="color:#6b7280;">{" &middot; ".join(meta)}</span>'
        "</div>"
    )


def render_issues_html(issues: Iterable["Issue"]) -> str:
    """Render the fetched issue list for the issues panel."""
    rendered = [render_issue_html(issue) for issue in issues]
    if not rendered:
        return f'<div style="color:#6b7280;">{NO_ISSUES_MESSAGE}</div>'
    return "".join(rendered)


def render_error_html(message: str) -> str:
    """Render a failure in place of the issues panel."""
    return f'<div style="color:#ef4444;">Error: {html.escape(message)}</div>'
