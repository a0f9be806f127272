"""
Sales quotations: draft -> sent -> approved -> converted, with rejection from
draft or sent. Archiving is a flag, independent of status.
"""
import copy
from datetime import datetime, timedelta

from flask import current_app
from sqlalchemy import or_

from .. import db
from ..forms.common import validate_payload
from ..forms.sales import QuotationForm
from ..models import SalesQuotation, SalesInvoice, Customer, Project, QuotationStatus, InvoiceStatus
from ..utils.permissions import ensure_permission
from ..utils.timezone_helper import get_local_date
from . import get_or_404, commit_or_rollback
from .documents import apply_line_items, transition, ensure_editable, parse_status
from .numbering import generate_document_number

EDITABLE_STATUSES = (QuotationStatus.DRAFT, QuotationStatus.SENT)


def create_quotation(data, actor):
    ensure_permission(actor, 'manage_sales')
    cleaned = validate_payload(QuotationForm, data)
    get_or_404(Customer, cleaned['customer_id'], 'Customer')

    quotation = SalesQuotation(
        quotation_number=generate_document_number(SalesQuotation, 'quotation_number', 'QT'),
        status=QuotationStatus.DRAFT,
        created_by=actor.id,
        **cleaned
    )
    apply_line_items(quotation, data.get('items'), cleaned.get('discount') or 0)

    db.session.add(quotation)
    commit_or_rollback()
    current_app.logger.info(f'Quotation {quotation.quotation_number} created by {actor.username}')
    return quotation


def update_quotation(quotation, data, actor):
    ensure_permission(actor, 'manage_sales')
    ensure_editable(quotation, EDITABLE_STATUSES, 'Quotation')
    cleaned = validate_payload(QuotationForm, data, defaults=quotation.form_data())
    get_or_404(Customer, cleaned['customer_id'], 'Customer')

    apply_line_items(quotation, data.get('items', quotation.items), cleaned.pop('discount', None) or 0)
    for field, value in cleaned.items():
        setattr(quotation, field, value)

    commit_or_rollback()
    current_app.logger.info(f'Quotation {quotation.quotation_number} updated by {actor.username}')
    return quotation


def mark_quotation_sent(quotation, actor):
    ensure_permission(actor, 'manage_sales')
    transition(quotation, QuotationStatus.SENT, f'Quotation {quotation.quotation_number}')
    commit_or_rollback()
    return quotation


def approve_quotation(quotation, actor):
    ensure_permission(actor, 'approve_sales')
    transition(quotation, QuotationStatus.APPROVED, f'Quotation {quotation.quotation_number}')
    quotation.approved_by = actor.id
    quotation.approved_at = datetime.utcnow()
    commit_or_rollback()
    return quotation


def reject_quotation(quotation, actor):
    ensure_permission(actor, 'approve_sales')
    transition(quotation, QuotationStatus.REJECTED, f'Quotation {quotation.quotation_number}')
    commit_or_rollback()
    return quotation


def convert_quotation_to_invoice(quotation, actor, project_id=None):
    """Create a draft invoice from an approved quotation; the quotation's items are copied, never changed"""
    ensure_permission(actor, 'manage_sales')
    if project_id is not None:
        get_or_404(Project, project_id, 'Project')
    transition(quotation, QuotationStatus.CONVERTED, f'Quotation {quotation.quotation_number}')

    today = get_local_date()
    invoice = SalesInvoice(
        customer_id=quotation.customer_id,
        project_id=project_id,
        quotation_id=quotation.id,
        status=InvoiceStatus.DRAFT,
        invoice_date=today,
        due_date=today + timedelta(days=current_app.config['DEFAULT_PAYMENT_TERMS_DAYS']),
        payment_terms=quotation.payment_terms,
        bank_account=quotation.bank_account,
        billing_address=quotation.billing_address,
        terms_and_conditions=quotation.terms_and_conditions,
        remarks=quotation.remarks,
        items=copy.deepcopy(quotation.items),
        subtotal=quotation.subtotal,
        tax_amount=quotation.tax_amount,
        discount=quotation.discount,
        total_amount=quotation.total_amount,
        paid_amount=0,
        created_by=actor.id,
    )
    db.session.add(invoice)

    commit_or_rollback()
    current_app.logger.info(
        f'Quotation {quotation.quotation_number} converted to draft invoice {invoice.id} by {actor.username}'
    )
    return invoice


def _set_archived(quotation, archived, actor):
    ensure_permission(actor, 'manage_sales')
    if quotation.is_archived == archived:
        return quotation
    quotation.is_archived = archived
    commit_or_rollback()
    current_app.logger.info(
        f"Quotation {quotation.quotation_number} {'archived' if archived else 'unarchived'} by {actor.username}"
    )
    return quotation


def archive_quotation(quotation, actor):
    return _set_archived(quotation, True, actor)


def unarchive_quotation(quotation, actor):
    return _set_archived(quotation, False, actor)


def get_quotation(quotation_id):
    return get_or_404(SalesQuotation, quotation_id, 'Quotation')


def list_quotations(search=None, status=None, customer_id=None, show_archived=False,
                    date_from=None, date_to=None, page=1, per_page=10):
    query = SalesQuotation.query.join(Customer)
    if not show_archived:
        query = query.filter(SalesQuotation.is_archived.is_(False))
    if search:
        term = f'%{search}%'
        query = query.filter(or_(
            SalesQuotation.quotation_number.ilike(term),
            Customer.name.ilike(term),
        ))
    if status:
        query = query.filter(SalesQuotation.status == parse_status(QuotationStatus, status))
    if customer_id:
        query = query.filter(SalesQuotation.customer_id == customer_id)
    if date_from:
        query = query.filter(SalesQuotation.created_date >= datetime.combine(date_from, datetime.min.time()))
    if date_to:
        query = query.filter(SalesQuotation.created_date < datetime.combine(date_to + timedelta(days=1),
                                                                             datetime.min.time()))
    return query.order_by(SalesQuotation.created_date.desc(), SalesQuotation.id.desc()) \
        .paginate(page=page, per_page=per_page, error_out=False)
