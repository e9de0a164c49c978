# app/services/report_builder.py
"""
Content assembly for the daily log report.

`build_sections` turns a resolved log snapshot into an ordered list of
typed blocks. It knows nothing about fonts, coordinates or pages; the PDF
layout lives in `app.services.pdf_renderer`.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date as date_type
from datetime import datetime
from typing import Union

from app.core.errors import ReportRenderError
from app.schemas.report import LogReportSnapshot

REPORT_TITLE = "Daily Work Log"
NO_EMPLOYEES_TEXT = "No employees recorded for this log"
MATERIAL_COLUMNS = ("Material", "Quantity", "Unit", "Notes")


# --------------------------------------------------------------------------
# Block types
# --------------------------------------------------------------------------

@dataclass(frozen=True)
class Title:
    text: str


@dataclass(frozen=True)
class LabeledLine:
    label: str
    value: str


@dataclass(frozen=True)
class SectionHeading:
    text: str


@dataclass(frozen=True)
class Paragraph:
    text: str


@dataclass(frozen=True)
class BulletList:
    items: tuple[str, ...]


@dataclass(frozen=True)
class Table:
    columns: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]


@dataclass(frozen=True)
class Gap:
    pass


@dataclass(frozen=True)
class Footer:
    text: str


Block = Union[Title, LabeledLine, SectionHeading, Paragraph, BulletList, Table, Gap, Footer]


# --------------------------------------------------------------------------
# Formatting helpers
# --------------------------------------------------------------------------

def format_long_date(value: date_type) -> str:
    """March 1, 2024"""
    return f"{value:%B} {value.day}, {value.year}"


def format_clock(value: datetime) -> str:
    """8:05 AM"""
    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value:%M} {meridiem}"


def format_long_datetime(value: datetime) -> str:
    """March 1, 2024 4:30 PM"""
    return f"{format_long_date(value)} {format_clock(value)}"


def format_quantity(value: float) -> str:
    """
    Plain numeric text: 5.0 -> "5", 2.5 -> "2.5".
    """
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return str(number)


def _present(value: str | None) -> bool:
    return bool(value and value.strip())


# --------------------------------------------------------------------------
# Assembly
# --------------------------------------------------------------------------

def build_sections(snapshot: LogReportSnapshot, generated_at: datetime) -> list[Block]:
    """
    Project a log snapshot into the fixed report layout.

    Order: title, header block, employees, work description, weather,
    issues, next steps, materials table, footer. Optional sections are
    left out entirely when their source data is absent.
    """
    if not _present(snapshot.project_name):
        raise ReportRenderError(f"Log {snapshot.log_id} has no resolvable project.")
    if not _present(snapshot.team_leader_name):
        raise ReportRenderError(f"Log {snapshot.log_id} has no resolvable team leader.")

    blocks: list[Block] = [Title(REPORT_TITLE)]

    # Header block
    blocks.append(LabeledLine("Date", format_long_date(snapshot.log_date)))
    blocks.append(LabeledLine("Project", snapshot.project_name))
    if _present(snapshot.project_address):
        blocks.append(LabeledLine("Location", snapshot.project_address))
    blocks.append(LabeledLine("Team Leader", snapshot.team_leader_name))
    blocks.append(
        LabeledLine(
            "Work Hours",
            f"{format_clock(snapshot.start_time)} - {format_clock(snapshot.end_time)}",
        )
    )
    blocks.append(LabeledLine("Status", snapshot.status[:1].upper() + snapshot.status[1:]))
    if snapshot.status == "approved" and _present(snapshot.approved_by_name):
        blocks.append(LabeledLine("Approved By", snapshot.approved_by_name))
        if snapshot.approved_at is not None:
            blocks.append(LabeledLine("Approved On", format_long_datetime(snapshot.approved_at)))
    blocks.append(Gap())

    # Employees
    blocks.append(SectionHeading("Employees Present"))
    if snapshot.employee_names:
        blocks.append(BulletList(tuple(snapshot.employee_names)))
    else:
        blocks.append(Paragraph(NO_EMPLOYEES_TEXT))
    blocks.append(Gap())

    blocks.append(SectionHeading("Work Description"))
    blocks.append(Paragraph(snapshot.work_description))
    blocks.append(Gap())

    for heading, text in (
        ("Weather", snapshot.weather),
        ("Issues Encountered", snapshot.issues_encountered),
        ("Next Steps", snapshot.next_steps),
    ):
        if _present(text):
            blocks.append(SectionHeading(heading))
            blocks.append(Paragraph(text))
            blocks.append(Gap())

    if snapshot.materials:
        rows = tuple(
            (
                material.name,
                format_quantity(material.quantity),
                material.unit,
                material.notes if _present(material.notes) else "-",
            )
            for material in snapshot.materials
        )
        blocks.append(SectionHeading("Materials Used"))
        blocks.append(Table(MATERIAL_COLUMNS, rows))
        blocks.append(Gap())

    blocks.append(Footer(f"Generated on: {format_long_datetime(generated_at)}"))
    return blocks
