"""Plain-text document summaries the salesman sends over a messaging app."""

from __future__ import annotations

from typing import Any, Mapping

from vansales.app.services.money import format_currency, round3
from vansales.app.services.totals import display_balance

RULE = "-" * 40
DOUBLE_RULE = "=" * 40


def _enum_value(value: Any) -> str:
    return str(getattr(value, "value", value))


def _plain(value: Any) -> str:
    return f"{round3(value).normalize():f}"


def _item_lines(items: list[Mapping[str, Any]], item_names: Mapping[Any, str]) -> list[str]:
    blocks = []
    for index, item in enumerate(items, start=1):
        blocks.append(
            "\n".join([
                f"{index}. {item_names.get(item['item_id'], str(item['item_id']))}",
                f"   Qty: {_plain(item['quantity'])} x {format_currency(item['unit_price'])}",
                f"   Discount: {_plain(item['discount_percent'])}%",
                f"   Tax: {_plain(item['tax_percent'])}%",
                f"   Total: {format_currency(item['line_total'])}",
            ])
        )
    return blocks


def _header(title: str, number_label: str, document: Mapping[str, Any], number_field: str,
            date_field: str, customer_name: str, van_label: str) -> list[str]:
    lines = [
        title,
        RULE,
        "",
        f"{number_label}: {document[number_field]}",
        f"Date: {document[date_field]}",
    ]
    if van_label:
        lines.append(f"Van: {van_label}")
    lines.append(f"Customer: {customer_name}")
    return lines


def _summary(document: Mapping[str, Any]) -> list[str]:
    return [
        RULE,
        "SUMMARY",
        RULE,
        "",
        f"Subtotal: {format_currency(document['subtotal'])}",
        f"Discount: -{format_currency(document['discount_amount'])}",
        f"Tax: {format_currency(document['tax_amount'])}",
        DOUBLE_RULE,
        f"TOTAL: {format_currency(document['total_amount'])}",
        DOUBLE_RULE,
    ]


def invoice_share_text(
    invoice: Mapping[str, Any],
    customer_name: str,
    item_names: Mapping[Any, str],
    van_label: str = "",
) -> str:
    lines = _header(
        "SALES INVOICE", "Invoice", invoice, "invoice_number", "invoice_date",
        customer_name, van_label,
    )
    lines += ["", RULE, "ITEMS", RULE, ""]
    lines.append("\n\n".join(_item_lines(invoice["items"], item_names)))
    lines.append("")
    lines += _summary(invoice)
    lines += [
        "",
        f"Payment: {_enum_value(invoice['payment_mode']).upper()}",
        f"Paid: {format_currency(invoice['paid_amount'])}",
        f"Balance: {format_currency(display_balance(invoice['balance_amount']))}",
    ]
    return "\n".join(lines)


def return_share_text(
    sales_return: Mapping[str, Any],
    customer_name: str,
    item_names: Mapping[Any, str],
    van_label: str = "",
) -> str:
    lines = _header(
        "SALES RETURN", "Return", sales_return, "return_number", "return_date",
        customer_name, van_label,
    )
    lines += [
        f"Type: {_enum_value(sales_return['return_type']).upper()}",
        f"Reason: {sales_return['reason']}",
        "", RULE, "ITEMS", RULE, "",
    ]
    lines.append("\n\n".join(_item_lines(sales_return["items"], item_names)))
    lines.append("")
    lines += _summary(sales_return)
    return "\n".join(lines)
