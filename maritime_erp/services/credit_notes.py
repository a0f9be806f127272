"""
Credit notes against approved sales invoices. Applying an issued note records
a credit_note payment through the normal reconciliation, so it lowers the
receivable and can never exceed the outstanding balance.
"""
from flask import current_app

from .. import db
from ..errors import ValidationError
from ..forms.common import validate_payload
from ..forms.sales import CreditNoteForm
from ..models import CreditNote, SalesInvoice, Customer, CreditNoteStatus, InvoiceStatus
from ..models.status import ensure_transition
from ..utils.permissions import ensure_permission
from ..utils.timezone_helper import get_local_date
from . import get_or_404, commit_or_rollback
from .documents import apply_line_items, transition, parse_status
from .invoices import apply_payment
from .numbering import generate_document_number


def create_credit_note(data, actor):
    ensure_permission(actor, 'manage_sales')
    cleaned = validate_payload(CreditNoteForm, data)
    invoice = get_or_404(SalesInvoice, cleaned['sales_invoice_id'], 'Invoice')
    if invoice.status == InvoiceStatus.DRAFT:
        raise ValidationError(
            'Credit notes can only be raised against approved invoices',
            {'sales_invoice_id': ['Invoice has not been approved']}
        )

    if cleaned.get('customer_id') is None:
        cleaned['customer_id'] = invoice.customer_id
    else:
        get_or_404(Customer, cleaned['customer_id'], 'Customer')
    cleaned['credit_note_date'] = cleaned.get('credit_note_date') or get_local_date()

    credit_note = CreditNote(
        credit_note_number=generate_document_number(CreditNote, 'credit_note_number', 'CN'),
        status=CreditNoteStatus.DRAFT,
        created_by=actor.id,
        **cleaned
    )
    apply_line_items(credit_note, data.get('items'), cleaned.get('discount') or 0)

    db.session.add(credit_note)
    commit_or_rollback()
    current_app.logger.info(
        f'Credit note {credit_note.credit_note_number} for invoice {invoice.invoice_number} '
        f'created by {actor.username}'
    )
    return credit_note


def issue_credit_note(credit_note, actor):
    ensure_permission(actor, 'approve_sales')
    transition(credit_note, CreditNoteStatus.ISSUED, f'Credit note {credit_note.credit_note_number}')
    commit_or_rollback()
    return credit_note


def apply_credit_note(credit_note, actor):
    """issued -> applied, recording the note's total as a payment on its invoice"""
    ensure_permission(actor, 'record_payments')
    ensure_transition(credit_note.status, CreditNoteStatus.APPLIED)

    credit_note.status = CreditNoteStatus.APPLIED
    try:
        payment = apply_payment(
            credit_note.sales_invoice,
            credit_note.total_amount,
            actor,
            payment_method='credit_note',
            reference_number=credit_note.credit_note_number,
            notes=credit_note.reason,
            payment_type='credit_note',
            credit_note_id=credit_note.id,
        )
    except Exception:
        db.session.rollback()
        raise
    current_app.logger.info(
        f'Credit note {credit_note.credit_note_number} applied to invoice {payment.invoice_id}'
    )
    return payment


def cancel_credit_note(credit_note, actor):
    ensure_permission(actor, 'approve_sales')
    transition(credit_note, CreditNoteStatus.CANCELLED, f'Credit note {credit_note.credit_note_number}')
    commit_or_rollback()
    return credit_note


def get_credit_note(credit_note_id):
    return get_or_404(CreditNote, credit_note_id, 'Credit note')


def list_credit_notes(sales_invoice_id=None, customer_id=None, status=None, page=1, per_page=10):
    query = CreditNote.query
    if sales_invoice_id:
        query = query.filter(CreditNote.sales_invoice_id == sales_invoice_id)
    if customer_id:
        query = query.filter(CreditNote.customer_id == customer_id)
    if status:
        query = query.filter(CreditNote.status == parse_status(CreditNoteStatus, status))
    return query.order_by(CreditNote.created_at.desc(), CreditNote.id.desc()) \
        .paginate(page=page, per_page=per_page, error_out=False)
