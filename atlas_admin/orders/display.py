"""
Formatting helpers for order tables (pt-BR).
"""

from typing import Iterable, Optional

import pandas as pd

from .models import Order
from .workflow import payment_status_label, status_label

INVALID_DATE = 'Data inválida'

ORDER_COLUMNS = [
    'ID', 'Cliente', 'Email', 'Data', 'Total', 'Status', 'Pagamento', 'Itens', 'Rastreio'
]


def format_currency(value: Optional[float]) -> str:
    """Format as Brazilian real, e.g. R$ 1.234,56."""
    if value is None or pd.isna(value):
        return '-'
    text = f"{float(value):,.2f}"
    # Swap separators: 1,234.56 -> 1.234,56
    text = text.replace(',', '_').replace('.', ',').replace('_', '.')
    return f"R$ {text}"


def format_datetime(value: Optional[str]) -> str:
    """dd/mm/YYYY HH:MM, or 'Data inválida' when unparsable."""
    if not value:
        return INVALID_DATE
    parsed = pd.to_datetime(value, errors='coerce')
    if pd.isna(parsed):
        return INVALID_DATE
    return parsed.strftime('%d/%m/%Y %H:%M')


def orders_to_dataframe(orders: Iterable[Order]) -> pd.DataFrame:
    """One row per order, used by the list table and the CSV export."""
    rows = []
    for order in orders:
        rows.append({
            'ID': order.id,
            'Cliente': order.customer_name or '-',
            'Email': (order.user.email if order.user else None) or '-',
            'Data': format_datetime(order.created_at),
            'Total': order.total_amount,
            'Status': status_label(order.status),
            'Pagamento': payment_status_label(order.payment_status),
            'Itens': len(order.items),
            'Rastreio': order.tracking_code or '-',
        })
    return pd.DataFrame(rows, columns=ORDER_COLUMNS)


def items_to_dataframe(order: Order) -> pd.DataFrame:
    rows = [{
        'Item': item.id,
        'Certificado': item.certificate_name or f"#{item.certificate_id}",
        'Preço': format_currency(item.price),
        'Qtd': item.quantity,
        'Subtotal': format_currency(item.price * item.quantity),
        'Status': status_label(item.status),
    } for item in order.items]
    return pd.DataFrame(rows, columns=['Item', 'Certificado', 'Preço', 'Qtd', 'Subtotal', 'Status'])


def orders_to_csv(orders: Iterable[Order]) -> str:
    return orders_to_dataframe(orders).to_csv(index=False)
