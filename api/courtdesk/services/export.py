"""Spreadsheet exports of the statistics, built with openpyxl."""

from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Font

from courtdesk.models.booking import Booking
from courtdesk.models.court import Court
from courtdesk.services.booking_rules import local_date
from courtdesk.services.pricing import booking_price
from courtdesk.services.stats import ClientPeriodStats, FinancialSummary

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _write_sheet(ws, headers: list[str], rows: list[list]) -> None:
    ws.append(headers)
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for row in rows:
        ws.append(row)


def _to_bytes(wb: Workbook) -> bytes:
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def clients_workbook(stats: list[ClientPeriodStats]) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Client statistics"
    _write_sheet(
        ws,
        ["ID", "Name", "Email", "Phone", "Total bookings", "Attended", "Attendance rate", "Calculated income"],
        [
            [
                s.client_id,
                s.name,
                s.email or "",
                s.phone or "",
                s.bookings_count,
                s.attendance_count,
                f"{s.attendance_rate * 100:.1f}%",
                s.total_calculated_income,
            ]
            for s in stats
        ],
    )
    return _to_bytes(wb)


def financial_workbook(rows: list[tuple[Booking, Court]], summary: FinancialSummary) -> bytes:
    """One sheet of priced bookings plus one per grouping of the summary."""
    wb = Workbook()

    ws = wb.active
    ws.title = "Bookings"
    _write_sheet(
        ws,
        ["ID", "Date", "Time", "Client", "Court", "Price", "Deposit", "Status"],
        [
            [
                b.id,
                local_date(b.starts_at).isoformat(),
                b.time_slot,
                b.client_name,
                c.name,
                booking_price(b, c),
                b.deposit or 0,
                b.status.value if b.status else "N/A",
            ]
            for b, c in rows
        ],
    )

    _write_sheet(
        wb.create_sheet("By date"),
        ["Date", "Income", "Bookings"],
        [[e.date.isoformat(), e.income, e.bookings] for e in summary.by_period],
    )
    _write_sheet(
        wb.create_sheet("By court"),
        ["Court", "Income", "Bookings"],
        [[e.court_name, e.income, e.bookings] for e in summary.by_court],
    )
    _write_sheet(
        wb.create_sheet("By schedule"),
        ["Hour", "Income", "Bookings"],
        [[f"{e.hour:02d}:00", e.income, e.bookings] for e in summary.by_schedule],
    )
    return _to_bytes(wb)
