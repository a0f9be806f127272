"""
Sales invoices and payment reconciliation.

An invoice's paid_amount is always the sum of its payment rows. Recording a
payment locks the invoice row, re-reads that sum inside the transaction and
writes the payment, its attachments and the new paid_amount/status in one
commit.
"""
from datetime import datetime, timedelta

from flask import current_app
from sqlalchemy import func, or_

from .. import db
from ..errors import ConflictError, InvalidTransitionError, ValidationError
from ..forms.common import validate_payload
from ..forms.sales import SalesInvoiceForm, PaymentForm
from ..models import SalesInvoice, InvoicePayment, Customer, Project, SalesQuotation, InvoiceStatus
from ..models.sales import OPEN_INVOICE_STATUSES
from ..models.status import ensure_transition
from ..signals import invoice_approved, payment_recorded
from ..utils.money import ZERO, to_decimal, to_money
from ..utils.permissions import ensure_permission
from ..utils.timezone_helper import get_local_date
from . import attachments, get_or_404, commit_or_rollback
from .documents import apply_line_items, transition, ensure_editable, parse_status
from .numbering import generate_document_number


def _check_references(cleaned):
    get_or_404(Customer, cleaned['customer_id'], 'Customer')
    if cleaned.get('project_id') is not None:
        get_or_404(Project, cleaned['project_id'], 'Project')
    if cleaned.get('quotation_id') is not None:
        get_or_404(SalesQuotation, cleaned['quotation_id'], 'Quotation')


def _resolve_dates(cleaned):
    invoice_date = cleaned.get('invoice_date') or get_local_date()
    due_date = cleaned.get('due_date') or \
        invoice_date + timedelta(days=current_app.config['DEFAULT_PAYMENT_TERMS_DAYS'])
    if due_date < invoice_date:
        raise ValidationError('Validation failed', {'due_date': ['Due date cannot be before the invoice date']})
    cleaned['invoice_date'] = invoice_date
    cleaned['due_date'] = due_date


def create_sales_invoice(data, actor):
    """Create a draft invoice; the number is assigned on approval"""
    ensure_permission(actor, 'manage_sales')
    cleaned = validate_payload(SalesInvoiceForm, data)
    _check_references(cleaned)
    _resolve_dates(cleaned)

    invoice = SalesInvoice(
        status=InvoiceStatus.DRAFT,
        paid_amount=0,
        created_by=actor.id,
        **cleaned
    )
    apply_line_items(invoice, data.get('items'), cleaned.get('discount') or 0)

    db.session.add(invoice)
    commit_or_rollback()
    current_app.logger.info(f'Draft invoice {invoice.id} created by {actor.username}')
    return invoice


def update_sales_invoice(invoice, data, actor):
    ensure_permission(actor, 'manage_sales')
    ensure_editable(invoice, (InvoiceStatus.DRAFT,), 'Invoice')
    cleaned = validate_payload(SalesInvoiceForm, data, defaults=invoice.form_data())
    _check_references(cleaned)
    _resolve_dates(cleaned)

    apply_line_items(invoice, data.get('items', invoice.items), cleaned.pop('discount', None) or 0)
    for field, value in cleaned.items():
        setattr(invoice, field, value)

    commit_or_rollback()
    current_app.logger.info(f'Draft invoice {invoice.id} updated by {actor.username}')
    return invoice


def approve_sales_invoice(invoice, actor):
    """draft -> approved; assigns the INV number and posts to the ledger"""
    ensure_permission(actor, 'approve_sales')
    transition(invoice, InvoiceStatus.APPROVED, f'Invoice {invoice.id}')
    try:
        if not invoice.invoice_number:
            invoice.invoice_number = generate_document_number(SalesInvoice, 'invoice_number', 'INV')
        invoice.approved_by = actor.id
        invoice.approved_at = datetime.utcnow()
        invoice_approved.send(invoice, actor=actor)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(f'Invoice {invoice.invoice_number} approved by {actor.username}')
    return invoice


def send_sales_invoice(invoice, actor):
    """approved -> unpaid: issued to the customer, awaiting payment"""
    ensure_permission(actor, 'manage_sales')
    transition(invoice, InvoiceStatus.UNPAID, f'Invoice {invoice.invoice_number}')
    commit_or_rollback()
    return invoice


def payment_status_for(paid_amount, total_amount, current):
    """paid iff paid >= total, partially_paid iff 0 < paid < total, otherwise unchanged"""
    paid = to_money(paid_amount or ZERO)
    total = to_money(total_amount or ZERO)
    if paid >= total:
        return InvoiceStatus.PAID
    if paid > ZERO:
        return InvoiceStatus.PARTIALLY_PAID
    return current


def refresh_invoice_status(invoice, today=None, persist_overdue=False):
    """
    Bring the stored status in line with paid_amount (and optionally the due
    date). Drafts and paid invoices are left alone. Returns True when the
    status changed; the caller commits.
    """
    if invoice.status not in OPEN_INVOICE_STATUSES:
        return False

    target = payment_status_for(invoice.paid_amount, invoice.total_amount, invoice.status)
    if persist_overdue and target != InvoiceStatus.PAID and invoice.is_overdue(today or get_local_date()):
        target = InvoiceStatus.OVERDUE

    if target == invoice.status:
        return False
    ensure_transition(invoice.status, target)
    invoice.status = target
    return True


def refresh_open_invoices(today=None, persist_overdue=False):
    today = today or get_local_date()
    changed = 0
    for invoice in SalesInvoice.query.filter(SalesInvoice.status.in_(OPEN_INVOICE_STATUSES)).all():
        if refresh_invoice_status(invoice, today, persist_overdue):
            changed += 1
    commit_or_rollback()
    current_app.logger.info(f'Refreshed invoice statuses: {changed} changed')
    return changed


def _lock_invoice(invoice_id):
    return db.session.execute(
        db.select(SalesInvoice)
        .filter(SalesInvoice.id == invoice_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).scalar_one()


def _paid_total(invoice_id):
    paid = db.session.query(func.coalesce(func.sum(InvoicePayment.amount), 0)) \
        .filter(InvoicePayment.invoice_id == invoice_id).scalar()
    return to_money(to_decimal(paid))


def apply_payment(invoice, amount, actor, payment_date=None, payment_method=None,
                  reference_number=None, notes=None, payment_type='payment',
                  credit_note_id=None, files=None):
    """
    Append a payment row and reconcile the invoice inside one transaction.
    Shared by record_payment and credit-note application.
    """
    amount = to_money(amount)
    if amount <= ZERO:
        raise ValidationError('Validation failed', {'amount': ['Payment amount must be greater than zero']})
    attachments.check_files(files)

    written = []
    try:
        invoice = _lock_invoice(invoice.id)

        if invoice.status == InvoiceStatus.DRAFT:
            raise InvalidTransitionError(
                invoice.status, InvoiceStatus.PAID,
                'Invoice must be approved before payments can be recorded'
            )
        if invoice.status == InvoiceStatus.PAID:
            raise ConflictError('Invoice is already fully paid')

        paid = _paid_total(invoice.id)
        outstanding = to_money(invoice.total_amount) - paid
        if amount > outstanding and not current_app.config.get('ALLOW_OVERPAYMENT', False):
            raise ConflictError(
                f'Payment of {amount} exceeds the outstanding balance of {outstanding}',
                {'amount': [f'Amount cannot exceed the outstanding balance of {outstanding}']}
            )

        payment = InvoicePayment(
            invoice_id=invoice.id,
            amount=amount,
            payment_date=payment_date or get_local_date(),
            payment_method=payment_method,
            reference_number=reference_number,
            notes=notes,
            payment_type=payment_type,
            credit_note_id=credit_note_id,
            recorded_by=actor.id,
        )
        db.session.add(payment)
        written = attachments.save_payment_files(payment, files)

        invoice.paid_amount = paid + amount
        refresh_invoice_status(invoice)
        db.session.flush()

        payment_recorded.send(payment, invoice=invoice, actor=actor)
        db.session.commit()
    except Exception:
        db.session.rollback()
        attachments.remove_files(written)
        raise

    current_app.logger.info(
        f'Payment {payment.id} of {amount} recorded on invoice {invoice.invoice_number} '
        f'by {actor.username}; paid {invoice.paid_amount}, status {invoice.status.value}'
    )
    return payment


def record_payment(invoice, data, actor, files=None):
    ensure_permission(actor, 'record_payments')
    cleaned = validate_payload(PaymentForm, data)
    return apply_payment(
        invoice,
        cleaned['amount'],
        actor,
        payment_date=cleaned.get('payment_date'),
        payment_method=cleaned.get('payment_method') or 'bank_transfer',
        reference_number=cleaned.get('reference_number'),
        notes=cleaned.get('notes'),
        files=files,
    )


def get_sales_invoice(invoice_id):
    return get_or_404(SalesInvoice, invoice_id, 'Invoice')


def list_sales_invoices(search=None, status=None, customer_id=None, project_id=None,
                        date_from=None, date_to=None, today=None, page=1, per_page=10):
    """status=overdue matches the computed overlay, not only stored overdue rows"""
    query = SalesInvoice.query.join(Customer)
    if search:
        term = f'%{search}%'
        query = query.filter(or_(
            SalesInvoice.invoice_number.ilike(term),
            Customer.name.ilike(term),
        ))
    if status == InvoiceStatus.OVERDUE.value:
        query = query.filter(
            SalesInvoice.status.in_(OPEN_INVOICE_STATUSES),
            SalesInvoice.due_date < (today or get_local_date()),
            SalesInvoice.paid_amount < SalesInvoice.total_amount,
        )
    elif status:
        query = query.filter(SalesInvoice.status == parse_status(InvoiceStatus, status))
    if customer_id:
        query = query.filter(SalesInvoice.customer_id == customer_id)
    if project_id:
        query = query.filter(SalesInvoice.project_id == project_id)
    if date_from:
        query = query.filter(SalesInvoice.invoice_date >= date_from)
    if date_to:
        query = query.filter(SalesInvoice.invoice_date <= date_to)
    return query.order_by(SalesInvoice.invoice_date.desc(), SalesInvoice.id.desc()) \
        .paginate(page=page, per_page=per_page, error_out=False)
