"""Outstanding balances derived from approved, not fully paid sales invoices"""
from ..models import SalesInvoice, InvoiceStatus
from ..models.base import isoformat
from ..utils.money import ZERO, format_money, to_money
from ..utils.timezone_helper import get_local_date


def _receivable(invoice, today):
    outstanding = invoice.outstanding_amount
    is_overdue = invoice.due_date < today and outstanding > ZERO
    return {
        'invoice_id': invoice.id,
        'invoice_number': invoice.invoice_number,
        'customer_id': invoice.customer_id,
        'customer_name': invoice.customer.name if invoice.customer else None,
        'status': invoice.effective_status(today).value,
        'total_amount': to_money(invoice.total_amount),
        'paid_amount': to_money(invoice.paid_amount or ZERO),
        'outstanding_amount': outstanding,
        'invoice_date': invoice.invoice_date,
        'due_date': invoice.due_date,
        'is_overdue': is_overdue,
        'days_overdue': (today - invoice.due_date).days if is_overdue else 0,
    }


def list_receivables(today=None, customer_id=None, overdue_only=False):
    """One row per invoice whose status is neither paid nor draft; overdue first, then by due date"""
    today = today or get_local_date()
    query = SalesInvoice.query.filter(
        SalesInvoice.status.notin_([InvoiceStatus.PAID, InvoiceStatus.DRAFT])
    )
    if customer_id:
        query = query.filter(SalesInvoice.customer_id == customer_id)

    rows = [_receivable(invoice, today) for invoice in query.all()]
    if overdue_only:
        rows = [row for row in rows if row['is_overdue']]
    rows.sort(key=lambda row: (not row['is_overdue'], row['due_date'], row['invoice_id']))
    return rows


def receivables_summary(today=None):
    rows = list_receivables(today)
    overdue = [row for row in rows if row['is_overdue']]
    return {
        'total_outstanding': sum((row['outstanding_amount'] for row in rows), ZERO),
        'overdue_outstanding': sum((row['outstanding_amount'] for row in overdue), ZERO),
        'open_invoices': len(rows),
        'overdue_invoices': len(overdue),
    }


def receivable_to_dict(row):
    """JSON-ready copy of a receivable (or payable) row"""
    data = {}
    for key, value in row.items():
        if key.endswith('_amount') or key.endswith('_outstanding'):
            data[key] = format_money(value)
        elif key.endswith('_date'):
            data[key] = isoformat(value)
        else:
            data[key] = value
    return data
