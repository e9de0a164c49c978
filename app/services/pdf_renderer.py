# app/services/pdf_renderer.py
from __future__ import annotations

import logging
from datetime import datetime, timezone
from io import BytesIO
from typing import Iterable
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, StyleSheet1, getSampleStyleSheet
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from app.core.errors import ReportRenderError
from app.schemas.report import LogReportSnapshot
from app.services import report_builder as blocks

logger = logging.getLogger(__name__)

PAGE_MARGIN = 50
MATERIAL_COL_WIDTHS = [195, 100, 100, 100]


def _build_styles() -> StyleSheet1:
    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle(
        name="ReportTitle",
        parent=styles["Title"],
        fontSize=20,
        leading=24,
        alignment=TA_CENTER,
        spaceAfter=16,
    ))
    styles.add(ParagraphStyle(
        name="SectionHeading",
        parent=styles["Normal"],
        fontName="Helvetica-Bold",
        fontSize=14,
        leading=18,
        spaceAfter=4,
    ))
    styles.add(ParagraphStyle(
        name="Body",
        parent=styles["Normal"],
        fontSize=12,
        leading=15,
    ))
    styles.add(ParagraphStyle(
        name="ReportFooter",
        parent=styles["Normal"],
        fontSize=10,
        alignment=TA_CENTER,
        textColor=colors.grey,
    ))
    return styles


def _text(value: str) -> str:
    # Paragraph parses mini-markup; user text must not be able to inject tags.
    return escape(value).replace("\n", "<br/>")


def _materials_table(table: blocks.Table, styles: StyleSheet1) -> Table:
    body = styles["Body"]
    data = [[Paragraph(f"<b>{_text(c)}</b>", body) for c in table.columns]]
    data.extend([Paragraph(_text(cell), body) for cell in row] for row in table.rows)
    return Table(
        data,
        colWidths=MATERIAL_COL_WIDTHS,
        repeatRows=1,
        hAlign="LEFT",
        style=TableStyle([
            ("LINEBELOW", (0, 0), (-1, 0), 1, colors.black),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("LEFTPADDING", (0, 0), (-1, -1), 0),
        ]),
    )


def render_pdf(sections: Iterable[blocks.Block], title: str = blocks.REPORT_TITLE) -> bytes:
    """
    Lay out report blocks on A4 pages and return the PDF bytes.

    Pagination is handled by the platypus frame; the document is built
    with `invariant=1` so identical blocks always produce identical bytes.
    """
    styles = _build_styles()
    elements = []

    for section in sections:
        if isinstance(section, blocks.Title):
            elements.append(Paragraph(_text(section.text), styles["ReportTitle"]))
        elif isinstance(section, blocks.LabeledLine):
            elements.append(
                Paragraph(f"<b>{_text(section.label)}:</b> {_text(section.value)}", styles["Body"])
            )
        elif isinstance(section, blocks.SectionHeading):
            elements.append(Paragraph(_text(section.text), styles["SectionHeading"]))
        elif isinstance(section, blocks.Paragraph):
            elements.append(Paragraph(_text(section.text), styles["Body"]))
        elif isinstance(section, blocks.BulletList):
            for item in section.items:
                elements.append(Paragraph(_text(item), styles["Body"], bulletText="-"))
        elif isinstance(section, blocks.Table):
            elements.append(_materials_table(section, styles))
        elif isinstance(section, blocks.Gap):
            elements.append(Spacer(1, 12))
        elif isinstance(section, blocks.Footer):
            elements.append(Spacer(1, 12))
            elements.append(Paragraph(_text(section.text), styles["ReportFooter"]))
        else:
            raise ReportRenderError(f"Unsupported report block: {type(section).__name__}")

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=PAGE_MARGIN,
        leftMargin=PAGE_MARGIN,
        topMargin=PAGE_MARGIN,
        bottomMargin=PAGE_MARGIN,
        title=title,
        invariant=1,
    )
    doc.build(elements)
    return buffer.getvalue()


def render_log_report(
    snapshot: LogReportSnapshot,
    generated_at: datetime | None = None,
) -> bytes:
    """
    Build and lay out the report for one log.

    Either the complete document is returned or an error is raised; no
    partial output ever escapes.
    """
    generated_at = generated_at or datetime.now(timezone.utc)
    sections = blocks.build_sections(snapshot, generated_at)
    try:
        return render_pdf(sections, title=f"{blocks.REPORT_TITLE} #{snapshot.log_id}")
    except ReportRenderError:
        raise
    except Exception as exc:
        logger.exception("Failed to render report for log %s", snapshot.log_id)
        raise ReportRenderError("Failed to render the log report.") from exc
