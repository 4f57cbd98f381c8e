"""PDF export of invoices and returns using fpdf2.

Every figure printed comes from the stored document; nothing is recomputed.
"""
from __future__ import annotations

import io
from typing import Any, Mapping

from fpdf import FPDF

from vansales.app.core.config import settings
from vansales.app.services.money import format_currency, round3
from vansales.app.services.totals import display_balance


# ── Shared helpers ──────────────────────────────────────────────────────────

_COL_BG = (31, 78, 121)   # dark blue header
_SEC_BG = (214, 228, 240)  # light blue section
_LINE_H = 7

_ITEM_WIDTHS = [10, 62, 22, 28, 18, 18, 32]


def _new_pdf(title: str, subtitle: str) -> FPDF:
    pdf = FPDF()
    pdf.add_page()
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.set_font("Helvetica", "B", 16)
    pdf.cell(0, 10, _safe_text(settings.COMPANY_NAME), new_x="LMARGIN", new_y="NEXT")
    pdf.set_font("Helvetica", "B", 12)
    pdf.cell(0, 8, title, new_x="LMARGIN", new_y="NEXT")
    pdf.set_font("Helvetica", "", 9)
    pdf.cell(0, 6, _safe_text(subtitle), new_x="LMARGIN", new_y="NEXT")
    pdf.ln(4)
    return pdf


def _header_row(pdf: FPDF, headers: list[str], widths: list[int]) -> None:
    """Draw a colored header row."""
    pdf.set_fill_color(*_COL_BG)
    pdf.set_text_color(255, 255, 255)
    pdf.set_font("Helvetica", "B", 9)
    for i, (h, w) in enumerate(zip(headers, widths)):
        align = "L" if i < 2 else "R"
        pdf.cell(w, _LINE_H, h, border=1, fill=True, align=align)
    pdf.ln()
    pdf.set_text_color(0, 0, 0)


def _data_row(pdf: FPDF, values: list[str], widths: list[int]) -> None:
    pdf.set_font("Helvetica", "", 8)
    for i, (v, w) in enumerate(zip(values, widths)):
        align = "L" if i < 2 else "R"
        pdf.cell(w, _LINE_H, _safe_text(v), border="B", align=align)
    pdf.ln()


def _section_header(pdf: FPDF, text: str, total_width: int) -> None:
    pdf.set_fill_color(*_SEC_BG)
    pdf.set_font("Helvetica", "B", 9)
    pdf.cell(total_width, _LINE_H, text, fill=True, new_x="LMARGIN", new_y="NEXT")


def _summary_row(pdf: FPDF, label: str, value: str, bold: bool = False) -> None:
    label_w = sum(_ITEM_WIDTHS) - 80
    pdf.set_font("Helvetica", "B" if bold else "", 10 if bold else 9)
    pdf.cell(label_w, _LINE_H, "")
    pdf.cell(40, _LINE_H, label, align="L")
    pdf.cell(40, _LINE_H, value, align="R", new_x="LMARGIN", new_y="NEXT")


def _fmt_qty(value: Any) -> str:
    return f"{round3(value):,.3f}"


def _fmt_pct(value: Any) -> str:
    return f"{round3(value).normalize():f}%"


def _safe_text(text: str) -> str:
    """Replace non-latin-1 characters for PDF built-in fonts."""
    return text.encode("latin-1", errors="replace").decode("latin-1")


def _to_bytes(pdf: FPDF) -> io.BytesIO:
    """Output PDF to BytesIO."""
    buf = io.BytesIO()
    pdf.output(buf)
    buf.seek(0)
    return buf


def _items_table(pdf: FPDF, items: list[Mapping[str, Any]], item_names: Mapping[Any, str]) -> None:
    _header_row(
        pdf,
        ["#", "Item", "Qty", "Price", "Disc", "Tax", "Total"],
        _ITEM_WIDTHS,
    )
    for item in items:
        _data_row(
            pdf,
            [
                str(item["line_no"]),
                item_names.get(item["item_id"], str(item["item_id"])),
                _fmt_qty(item["quantity"]),
                f"{round3(item['unit_price']):,.3f}",
                _fmt_pct(item["discount_percent"]),
                _fmt_pct(item["tax_percent"]),
                format_currency(item["line_total"]),
            ],
            _ITEM_WIDTHS,
        )
    pdf.ln(3)


# ── Invoice ───────────────────────────────────────────────────────────────


def export_invoice_pdf(
    invoice: Mapping[str, Any],
    customer_name: str,
    item_names: Mapping[Any, str],
    van_label: str = "",
) -> io.BytesIO:
    pdf = _new_pdf(
        f"Sales Invoice {invoice['invoice_number']}",
        f"Date: {invoice['invoice_date']}   Van: {van_label}",
    )
    _section_header(pdf, f"Customer: {_safe_text(customer_name)}", sum(_ITEM_WIDTHS))
    pdf.ln(2)

    _items_table(pdf, invoice["items"], item_names)

    _summary_row(pdf, "Subtotal", format_currency(invoice["subtotal"]))
    _summary_row(pdf, "Discount", f"-{format_currency(invoice['discount_amount'])}")
    _summary_row(pdf, "Tax", format_currency(invoice["tax_amount"]))
    _summary_row(pdf, "TOTAL", format_currency(invoice["total_amount"]), bold=True)
    pdf.ln(2)
    _summary_row(pdf, "Payment", str(getattr(invoice["payment_mode"], "value", invoice["payment_mode"])).upper())
    _summary_row(pdf, "Paid", format_currency(invoice["paid_amount"]))
    _summary_row(pdf, "Balance", format_currency(display_balance(invoice["balance_amount"])), bold=True)

    if invoice.get("notes"):
        pdf.ln(4)
        pdf.set_font("Helvetica", "", 8)
        pdf.multi_cell(0, 5, _safe_text(f"Notes: {invoice['notes']}"))

    return _to_bytes(pdf)


# ── Return ────────────────────────────────────────────────────────────────


def export_return_pdf(
    sales_return: Mapping[str, Any],
    customer_name: str,
    item_names: Mapping[Any, str],
    van_label: str = "",
) -> io.BytesIO:
    return_type = getattr(sales_return["return_type"], "value", sales_return["return_type"])
    pdf = _new_pdf(
        f"Sales Return {sales_return['return_number']}",
        f"Date: {sales_return['return_date']}   Van: {van_label}   Type: {str(return_type).upper()}",
    )
    _section_header(pdf, f"Customer: {_safe_text(customer_name)}", sum(_ITEM_WIDTHS))
    pdf.set_font("Helvetica", "", 9)
    pdf.multi_cell(0, 6, _safe_text(f"Reason: {sales_return['reason']}"))
    pdf.ln(2)

    _items_table(pdf, sales_return["items"], item_names)

    _summary_row(pdf, "Subtotal", format_currency(sales_return["subtotal"]))
    _summary_row(pdf, "Discount", f"-{format_currency(sales_return['discount_amount'])}")
    _summary_row(pdf, "Tax", format_currency(sales_return["tax_amount"]))
    _summary_row(pdf, "TOTAL", format_currency(sales_return["total_amount"]), bold=True)

    return _to_bytes(pdf)
