"""ReportLab rendering of founder reports."""

from __future__ import annotations

import io
from decimal import Decimal
from typing import Any
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle


def _fmt(value: Any) -> str:
    if value is None or value == "":
        return "N/A"
    if isinstance(value, Decimal):
        return f"{value:,.2f}"
    return str(value)


def _section(story: list, styles, heading: str, body: str | None) -> None:
    if not body:
        return
    story.append(Paragraph(escape(heading), styles["Heading2"]))
    for line in body.splitlines():
        if line.strip():
            story.append(Paragraph(escape(line), styles["BodyText"]))
    story.append(Spacer(1, 0.3 * cm))


def render_report_pdf(startup_name: str, report: Any) -> bytes:
    """Render a TimelyReport (or any object with the same attributes) to PDF bytes."""
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        title=f"{startup_name} - {report.title}",
        leftMargin=2 * cm,
        rightMargin=2 * cm,
    )
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "ReportTitle",
        parent=styles["Title"],
        fontSize=20,
        spaceAfter=12,
    )

    story: list = [
        Paragraph(escape(f"{startup_name}: {report.title}"), title_style),
    ]
    if report.reporting_period:
        story.append(Paragraph(escape(f"Reporting period: {report.reporting_period}"), styles["Italic"]))
    story.append(Spacer(1, 0.5 * cm))

    metrics = [
        ["Monthly revenue", _fmt(report.monthly_revenue)],
        ["Monthly burn", _fmt(report.monthly_burn)],
        ["Cash runway (months)", _fmt(report.cash_runway)],
        ["Team size", _fmt(report.team_size)],
    ]
    table = Table(metrics, colWidths=[6 * cm, 8 * cm])
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (0, -1), colors.HexColor("#f1f5f9")),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#cbd5e1")),
                ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ]
        )
    )
    story.extend([table, Spacer(1, 0.5 * cm)])

    _section(story, styles, "Key metrics", report.key_metrics)
    _section(story, styles, "Key achievements", report.key_achievements)
    _section(story, styles, "Challenges and learnings", report.challenges_and_learnings)
    _section(story, styles, "Other key metrics", report.other_key_metrics)
    _section(story, styles, "Asks from investors", report.asks_from_investors)

    doc.build(story)
    return buffer.getvalue()
