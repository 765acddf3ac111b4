# app/reports/portfolio_report.py

"""
REPORTING — PORTFOLIO REPORT

Renders a snapshot of a user's funds as PDF (reportlab) or XLSX (openpyxl).
Read-only: callers pass in the funds, nothing is fetched here.
"""

import logging
from io import BytesIO
from typing import Iterable, List, Optional, Sequence
from xml.sax.saxutils import escape

from app.domain.errors import ValidationError
from app.domain.models import Fund
from app.utils.time import now_ist_naive, today_ist

logger = logging.getLogger(__name__)

PDF_FILENAME = "portfolio-report.pdf"
XLSX_FILENAME = "portfolio-report.xlsx"

PDF_MEDIA_TYPE = "application/pdf"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

_HEADER_FILL_RGB = (41, 128, 185)


def _require_funds(funds: Optional[Sequence[Fund]]) -> List[Fund]:
    if not funds:
        raise ValidationError("No fund data provided.")
    return list(funds)


def _total_value(funds: Iterable[Fund]) -> float:
    return sum(fund.current_value or 0.0 for fund in funds)


def _display_name(fund: Fund) -> str:
    return fund.name or fund.scheme_code


def _money(value: float) -> str:
    return f"{value:,.2f}"


def render_pdf(funds: Sequence[Fund], user_name: str = "") -> bytes:
    """
    Render the portfolio as a single-table PDF

    Raises:
        ValidationError: no funds
    """
    from reportlab.lib import colors
    from reportlab.lib.pagesizes import A4
    from reportlab.lib.styles import getSampleStyleSheet
    from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

    funds = _require_funds(funds)

    buf = BytesIO()
    doc = SimpleDocTemplate(buf, pagesize=A4, title="Portfolio Report")
    styles = getSampleStyleSheet()

    story = [Paragraph("Portfolio Report", styles["Title"])]
    if user_name:
        story.append(Paragraph(f"For: {escape(user_name)}", styles["Heading3"]))
    story.append(Paragraph(f"Generated on: {today_ist():%d %b %Y}", styles["Normal"]))
    story.append(Spacer(1, 10))
    story.append(
        Paragraph(f"Total Portfolio Value: INR {_money(_total_value(funds))}", styles["Heading4"])
    )
    story.append(Spacer(1, 10))

    rows = [["Fund Name", "Units", "NAV (INR)", "Current Value (INR)"]]
    for fund in funds:
        rows.append([
            Paragraph(escape(_display_name(fund)), styles["BodyText"]),
            f"{fund.units:g}",
            f"{fund.nav:.2f}",
            _money(fund.current_value or 0.0),
        ])

    table = Table(rows, colWidths=[230, 70, 80, 120], repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.Color(*(c / 255 for c in _HEADER_FILL_RGB))),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ]))
    story.append(table)

    doc.build(story)
    logger.info(f"Rendered PDF report with {len(funds)} funds")
    return buf.getvalue()


def render_xlsx(funds: Sequence[Fund], user_name: str = "") -> bytes:
    """
    Render the portfolio as a workbook with "Summary" and "Fund Details" sheets

    Raises:
        ValidationError: no funds
    """
    from openpyxl import Workbook
    from openpyxl.utils import get_column_letter

    funds = _require_funds(funds)

    wb = Workbook()
    summary = wb.active
    summary.title = "Summary"
    summary.append(["Metric", "Value"])
    summary.append(["Portfolio For", user_name or "N/A"])
    summary.append(["Total Portfolio Value (INR)", _total_value(funds)])
    summary.append(["Number of Funds", len(funds)])
    summary.append([
        "Report Generated On",
        now_ist_naive().strftime("%d %b %Y %H:%M:%S IST"),
    ])

    details = wb.create_sheet("Fund Details")
    details.append(["Fund Name", "Scheme Code", "Category", "Units", "NAV (INR)", "Current Value (INR)"])
    for fund in funds:
        details.append([
            _display_name(fund),
            fund.scheme_code,
            fund.category,
            fund.units,
            fund.nav,
            fund.current_value,
        ])

    # Auto-fit columns to the longest cell
    for ws in (summary, details):
        for idx, column in enumerate(ws.iter_cols(values_only=True), start=1):
            width = max(len(str(cell)) if cell is not None else 0 for cell in column)
            ws.column_dimensions[get_column_letter(idx)].width = width + 2

    buf = BytesIO()
    wb.save(buf)
    logger.info(f"Rendered XLSX report with {len(funds)} funds")
    return buf.getvalue()
