from io import BytesIO

import pytest
from openpyxl import load_workbook

from app.domain.errors import ValidationError
from app.domain.models import Fund
from app.reports.portfolio_report import render_pdf, render_xlsx


@pytest.fixture
def funds():
    return [
        Fund("119551", "119551", "Aditya Birla Sun Life Banking & PSU Debt Fund", 4, 350.25, 1401.0, "Debt"),
        Fund("120503", "120503", "Axis ELSS Tax Saver Fund", 10, 95.5, 955.0),
    ]


def test_pdf_report_is_a_pdf(funds):
    content = render_pdf(funds, user_name="Asha <Rao>")
    assert content.startswith(b"%PDF")
    assert len(content) > 1000


def test_xlsx_report_sheets(funds):
    content = render_xlsx(funds, user_name="Asha Rao")
    wb = load_workbook(BytesIO(content))

    assert wb.sheetnames == ["Summary", "Fund Details"]

    summary = {row[0]: row[1] for row in wb["Summary"].iter_rows(min_row=2, values_only=True)}
    assert summary["Portfolio For"] == "Asha Rao"
    assert summary["Total Portfolio Value (INR)"] == pytest.approx(2356.0)
    assert summary["Number of Funds"] == 2

    rows = list(wb["Fund Details"].iter_rows(values_only=True))
    assert rows[0] == ("Fund Name", "Scheme Code", "Category", "Units", "NAV (INR)", "Current Value (INR)")
    assert rows[1][0] == "Aditya Birla Sun Life Banking & PSU Debt Fund"
    assert rows[1][2] == "Debt"
    assert rows[2][5] == 955


def test_xlsx_without_user_name(funds):
    wb = load_workbook(BytesIO(render_xlsx(funds)))
    assert wb["Summary"]["B2"].value == "N/A"


@pytest.mark.parametrize("renderer", [render_pdf, render_xlsx])
def test_empty_portfolio_rejected(renderer):
    with pytest.raises(ValidationError):
        renderer([])


def test_xlsx_generated_on_uses_ist_clock(funds):
    from app.utils.time import today_ist

    wb = load_workbook(BytesIO(render_xlsx(funds)))
    stamp = wb["Summary"]["B5"].value

    assert stamp.endswith(" IST")
    assert stamp.startswith(f"{today_ist():%d %b %Y}")
