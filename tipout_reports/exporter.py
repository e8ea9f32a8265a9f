from __future__ import annotations

import csv
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Iterable, Dict, Any, List

from reportlab.lib import colors
from reportlab.lib.pagesizes import landscape, letter
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

ReportRow = Dict[str, Any]


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return f"{value:.2f}" if value == value.quantize(Decimal("0.01")) else str(value)
    return str(value)


def _label(key: str) -> str:
    return key.replace("_", " ").title()


def export_csv(rows: Iterable[ReportRow], output_path: Path) -> Path:
    rows = list(rows)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", newline="", encoding="utf-8") as handle:
        if not rows:
            return output_path
        writer = csv.DictWriter(handle, fieldnames=list(rows[0].keys()))
        writer.writeheader()
        for row in rows:
            writer.writerow({key: _stringify(value) for key, value in row.items()})
    return output_path


def export_pdf(rows: Iterable[ReportRow], output_path: Path, title: str) -> Path:
    rows_list = list(rows)
    styles = getSampleStyleSheet()
    story: List[Any] = [Paragraph(_label(title.replace("-", "_")), styles["Title"]), Spacer(1, 8)]

    if rows_list:
        headers = list(rows_list[0].keys())
        table_rows = [[_label(h) for h in headers]]
        table_rows.extend([_stringify(row.get(h)) for h in headers] for row in rows_list)
        table = Table(table_rows, repeatRows=1)
        table.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, 0), colors.whitesmoke),
                    ("GRID", (0, 0), (-1, -1), 0.25, colors.lightgrey),
                    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                    ("FONTSIZE", (0, 0), (-1, -1), 7),
                    ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
                    ("LEFTPADDING", (0, 0), (-1, -1), 3),
                    ("RIGHTPADDING", (0, 0), (-1, -1), 3),
                ]
            )
        )
        story.append(table)
    else:
        story.append(Paragraph("No rows returned", styles["Normal"]))

    doc = SimpleDocTemplate(
        str(output_path),
        pagesize=landscape(letter),
        leftMargin=0.4 * inch,
        rightMargin=0.4 * inch,
        topMargin=0.5 * inch,
        bottomMargin=0.5 * inch,
    )
    output_path.parent.mkdir(parents=True, exist_ok=True)
    doc.build(story)
    return output_path


def export_report(rows: Iterable[ReportRow], output_path: Path, title: str) -> Path:
    if output_path.suffix.lower() == ".csv":
        return export_csv(rows, output_path)
    if output_path.suffix.lower() == ".pdf":
        return export_pdf(rows, output_path, title=title)
    raise ValueError("Unsupported export format. Use .csv or .pdf")
