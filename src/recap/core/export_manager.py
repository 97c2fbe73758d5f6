"""Export of generated summaries to files and the clipboard."""

import re
from datetime import datetime
from pathlib import Path
from typing import Optional, Union
from xml.sax.saxutils import escape

from PySide6.QtGui import QGuiApplication
from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer

from ..utils.exceptions import ExportError
from ..utils.formatting import markdown_to_html
from ..utils.logging_config import get_logger
from ..utils.validators import InputValidator
from .state import SummaryResult

EXPORT_FORMATS = {
    "markdown": ".md",
    "html": ".html",
    "text": ".txt",
    "pdf": ".pdf",
}

DOCUMENT_TITLE = "Performance Summary"


def _generated_on(summary: SummaryResult) -> str:
    generated_at = datetime.fromtimestamp(summary.generated_at)
    return generated_at.strftime("%B %d, %Y at %I:%M %p")


class ExportManager:
    """Write a summary as Markdown, HTML, plain text or PDF."""

    def __init__(self):
        self.logger = get_logger(__name__)

    @staticmethod
    def default_filename(format: str, when: Optional[datetime] = None) -> str:
        """Suggested file name such as ``performance-summary-2024-01-31.md``."""
        when = when or datetime.now()
        extension = EXPORT_FORMATS.get(format, ".md")
        return InputValidator.sanitize_filename(
            f"performance-summary-{when.strftime('%Y-%m-%d')}{extension}"
        )

    @staticmethod
    def format_for_path(filepath: Union[str, Path]) -> str:
        """Pick an export format from a file extension, defaulting to markdown."""
        suffix = Path(filepath).suffix.lower()
        for format, extension in EXPORT_FORMATS.items():
            if suffix == extension:
                return format
        return "markdown"

    def export_summary(
        self, summary: SummaryResult, format: str, filepath: Union[str, Path]
    ) -> Path:
        """Export ``summary`` to ``filepath`` in ``format``.

        Raises:
            ExportError: If the format is unknown or writing fails.
        """
        format = format.lower()
        filepath = Path(filepath)

        if format not in EXPORT_FORMATS:
            raise ExportError(f"Unsupported export format: {format}")

        try:
            if format == "pdf":
                self._write_pdf(summary, filepath)
            else:
                renderer = {
                    "markdown": self._format_markdown,
                    "html": self._format_html,
                    "text": self._format_text,
                }[format]
                filepath.write_text(renderer(summary), encoding="utf-8")
        except OSError as e:
            self.logger.error(f"Export to {filepath} failed: {e}")
            raise ExportError(f"Failed to export {format}: {e}") from e

        self.logger.info(f"Exported summary as {format}: {filepath}")
        return filepath

    def copy_to_clipboard(self, text: str) -> None:
        """Place ``text`` on the system clipboard."""
        app = QGuiApplication.instance()
        if app is None:
            raise ExportError("No Qt application instance available")

        app.clipboard().setText(text)
        self.logger.info("Copied summary to clipboard")

    def _format_markdown(self, summary: SummaryResult) -> str:
        formatted = f"# {DOCUMENT_TITLE}\n\n"
        formatted += f"*Generated on {_generated_on(summary)}*\n\n"
        formatted += summary.content
        formatted += "\n\n---\n"
        formatted += f"*Generated by Recap using {summary.model or 'Gemini'}*\n"
        return formatted

    def _format_html(self, summary: SummaryResult) -> str:
        body = markdown_to_html(summary.content)

        return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <title>{DOCUMENT_TITLE}</title>
    <style>
        body {{
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Arial, sans-serif;
            line-height: 1.6;
            color: #333;
            max-width: 800px;
            margin: 0 auto;
            padding: 20px;
        }}
        h1, h2, h3 {{ color: #1a1a1a; }}
        .metadata, .footer {{ color: #666; font-size: 0.9em; }}
    </style>
</head>
<body>
    <div class="metadata">Generated on {_generated_on(summary)}</div>
    {body}
    <div class="footer">Generated by Recap using {escape(summary.model or 'Gemini')}</div>
</body>
</html>"""

    def _format_text(self, summary: SummaryResult) -> str:
        text = re.sub(r"^#{1,3} ", "", summary.content, flags=re.MULTILINE)
        text = text.replace("**", "").replace("*", "").replace("`", "")

        formatted = DOCUMENT_TITLE.upper() + "\n"
        formatted += "=" * 50 + "\n\n"
        formatted += f"Generated on {_generated_on(summary)}\n\n"
        formatted += text
        formatted += "\n\n" + "-" * 50 + "\n"
        formatted += f"Generated by Recap using {summary.model or 'Gemini'}\n"
        return formatted

    def _write_pdf(self, summary: SummaryResult, filepath: Path) -> None:
        doc = SimpleDocTemplate(
            str(filepath),
            pagesize=letter,
            rightMargin=72,
            leftMargin=72,
            topMargin=72,
            bottomMargin=18,
        )

        styles = getSampleStyleSheet()
        title_style = ParagraphStyle(
            "RecapTitle",
            parent=styles["Heading1"],
            fontSize=24,
            textColor=colors.HexColor("#1a1a1a"),
            spaceAfter=30,
        )
        heading_style = ParagraphStyle(
            "RecapHeading",
            parent=styles["Heading2"],
            fontSize=16,
            textColor=colors.HexColor("#333333"),
            spaceAfter=12,
        )
        body_style = ParagraphStyle(
            "RecapBody",
            parent=styles["BodyText"],
            fontSize=11,
            leading=16,
            spaceAfter=6,
        )

        elements = [
            Paragraph(DOCUMENT_TITLE, title_style),
            Paragraph(f"Generated on {_generated_on(summary)}", body_style),
            Spacer(1, 0.3 * inch),
        ]

        for line in summary.content.split("\n"):
            line = line.strip()
            if not line:
                elements.append(Spacer(1, 0.15 * inch))
                continue

            heading = re.match(r"^#{1,3} (.*)$", line)
            if heading:
                elements.append(Paragraph(escape(heading.group(1)), heading_style))
                continue

            if line.startswith("- ") or line.startswith("* "):
                line = "• " + line[2:]

            # reportlab paragraphs accept the same inline tags
            markup = re.sub(r"\*\*(.*?)\*\*", r"<b>\1</b>", escape(line))
            markup = re.sub(r"\*(.*?)\*", r"<i>\1</i>", markup)
            elements.append(Paragraph(markup, body_style))

        elements.append(Spacer(1, 0.3 * inch))
        elements.append(
            Paragraph(
                f"Generated by Recap using {escape(summary.model or 'Gemini')}",
                body_style,
            )
        )

        try:
            doc.build(elements)
        except Exception as e:
            raise ExportError(f"Failed to build PDF: {e}") from e
