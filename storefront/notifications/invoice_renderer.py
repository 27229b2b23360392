"""
Invoice rendering for order emails (HTML and plain text)
"""
from datetime import datetime
from html import escape

from storefront.schemas.order import OrderResponse
from storefront.utils.money import format_money

CELL = "padding:8px;border:1px solid #eee"
HEAD_CELL = "text-align:left;" + CELL


def invoice_subject(order: OrderResponse, store_name: str) -> str:
    return f"Invoice {order.invoice_no} – {store_name}"


def format_address(order: OrderResponse) -> str:
    """One-line shipping address, e.g. 'Salmiya, Block 5, Street 10, House 8'"""
    a = order.shipping_address
    parts = [a.area, f"Block {a.block}", f"Street {a.street}"]
    if a.avenue:
        parts.append(f"Ave {a.avenue}")
    parts.append(f"House {a.house_no}")
    return ", ".join(parts)


def _currency(order: OrderResponse) -> str:
    return order.items[0].currency if order.items else "KWD"


def render_invoice_text(order: OrderResponse, store_name: str) -> str:
    currency = _currency(order)
    lines = [
        f"Invoice {order.invoice_no} – {store_name}",
        f"Status: {order.status}",
        "",
        "Items:",
    ]
    for item in order.items:
        unit = format_money(item.price_in_fils, item.currency)
        total = format_money(item.price_in_fils * item.qty, item.currency)
        lines.append(f"- {item.title} x{item.qty} — {unit} (total {total})")
    lines += [
        "",
        f"Subtotal: {format_money(order.subtotal_in_fils, currency)}",
        f"Shipping: {format_money(order.shipping_in_fils, currency)}",
        f"Total:    {format_money(order.total_in_fils, currency)}",
        "",
        f"Ship to: {order.customer.name} — {order.customer.phone}",
        format_address(order),
    ]
    if order.shipping_address.notes:
        lines.append(f"Notes: {order.shipping_address.notes}")
    return "\n".join(lines)


def _render_rows(order: OrderResponse) -> str:
    rows = []
    for item in order.items:
        rows.append(
            "<tr>"
            f'<td style="{CELL}">{escape(item.title)}</td>'
            f'<td style="{CELL}">{item.qty}</td>'
            f'<td style="{CELL}">{format_money(item.price_in_fils, item.currency)}</td>'
            f'<td style="{CELL}">{format_money(item.price_in_fils * item.qty, item.currency)}</td>'
            "</tr>"
        )
    return "".join(rows)


def _render_address(order: OrderResponse) -> str:
    c = order.customer
    html = (
        f'<p style="margin:0 0 6px 0"><strong>{escape(c.name)}</strong> — {escape(c.phone)}</p>'
        f'<p style="margin:0 0 6px 0">{escape(format_address(order))}</p>'
    )
    if order.shipping_address.notes:
        html += f'<p style="margin:0;color:#666">Notes: {escape(order.shipping_address.notes)}</p>'
    return html


def render_invoice_html(order: OrderResponse, store_name: str) -> str:
    currency = _currency(order)
    created_at = order.created_at or datetime.now()
    return f"""
<div style="font-family:Arial,sans-serif;max-width:720px;margin:auto">
  <h2 style="margin-bottom:4px">{escape(store_name)} – Invoice {escape(order.invoice_no)}</h2>
  <div style="color:#666;margin-bottom:16px">
    <span>{created_at:%Y-%m-%d %H:%M}</span> • <span>Status: {escape(order.status)}</span>
  </div>

  <h3 style="margin:12px 0">Order Items</h3>
  <table style="border-collapse:collapse;width:100%;border:1px solid #eee">
    <thead>
      <tr style="background:#fafafa">
        <th style="{HEAD_CELL}">Item</th>
        <th style="{HEAD_CELL}">Qty</th>
        <th style="{HEAD_CELL}">Unit</th>
        <th style="{HEAD_CELL}">Total</th>
      </tr>
    </thead>
    <tbody>{_render_rows(order)}</tbody>
  </table>

  <div style="margin-top:12px">
    <p style="margin:4px 0"><strong>Subtotal:</strong> {format_money(order.subtotal_in_fils, currency)}</p>
    <p style="margin:4px 0"><strong>Shipping:</strong> {format_money(order.shipping_in_fils, currency)}</p>
    <p style="margin:4px 0;font-size:1.1em"><strong>Total:</strong> {format_money(order.total_in_fils, currency)}</p>
  </div>

  <h3 style="margin:16px 0 8px">Shipping Address</h3>
  {_render_address(order)}
</div>
"""
