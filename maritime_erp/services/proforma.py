"""
Proforma invoices: draft -> sent -> approved -> converted, with rejection or
expiry before conversion. Conversion creates a draft sales invoice.
"""
import copy
from datetime import timedelta

from flask import current_app
from sqlalchemy import or_

from .. import db
from ..forms.common import validate_payload
from ..forms.sales import ProformaInvoiceForm
from ..models import (
    ProformaInvoice, SalesInvoice, Customer, Project, SalesQuotation, ProformaStatus, InvoiceStatus,
)
from ..utils.permissions import ensure_permission
from ..utils.timezone_helper import get_local_date
from . import get_or_404, commit_or_rollback
from .documents import apply_line_items, transition, ensure_editable, parse_status
from .numbering import generate_document_number

EDITABLE_STATUSES = (ProformaStatus.DRAFT, ProformaStatus.SENT)


def _check_references(cleaned):
    get_or_404(Customer, cleaned['customer_id'], 'Customer')
    if cleaned.get('project_id') is not None:
        get_or_404(Project, cleaned['project_id'], 'Project')
    if cleaned.get('quotation_id') is not None:
        get_or_404(SalesQuotation, cleaned['quotation_id'], 'Quotation')


def create_proforma_invoice(data, actor):
    ensure_permission(actor, 'manage_sales')
    cleaned = validate_payload(ProformaInvoiceForm, data)
    _check_references(cleaned)
    cleaned['invoice_date'] = cleaned.get('invoice_date') or get_local_date()

    proforma = ProformaInvoice(
        proforma_number=generate_document_number(ProformaInvoice, 'proforma_number', 'PI'),
        status=ProformaStatus.DRAFT,
        created_by=actor.id,
        **cleaned
    )
    apply_line_items(proforma, data.get('items'), cleaned.get('discount') or 0)

    db.session.add(proforma)
    commit_or_rollback()
    current_app.logger.info(f'Proforma invoice {proforma.proforma_number} created by {actor.username}')
    return proforma


def update_proforma_invoice(proforma, data, actor):
    ensure_permission(actor, 'manage_sales')
    ensure_editable(proforma, EDITABLE_STATUSES, 'Proforma invoice')
    cleaned = validate_payload(ProformaInvoiceForm, data, defaults=proforma.form_data())
    _check_references(cleaned)

    apply_line_items(proforma, data.get('items', proforma.items), cleaned.pop('discount', None) or 0)
    for field, value in cleaned.items():
        setattr(proforma, field, value)

    commit_or_rollback()
    current_app.logger.info(f'Proforma invoice {proforma.proforma_number} updated by {actor.username}')
    return proforma


def _move(proforma, target, actor, permission='manage_sales'):
    ensure_permission(actor, permission)
    transition(proforma, target, f'Proforma invoice {proforma.proforma_number}')
    commit_or_rollback()
    return proforma


def mark_proforma_sent(proforma, actor):
    return _move(proforma, ProformaStatus.SENT, actor)


def approve_proforma_invoice(proforma, actor):
    return _move(proforma, ProformaStatus.APPROVED, actor, 'approve_sales')


def reject_proforma_invoice(proforma, actor):
    return _move(proforma, ProformaStatus.REJECTED, actor, 'approve_sales')


def expire_proforma_invoice(proforma, actor):
    return _move(proforma, ProformaStatus.EXPIRED, actor)


def convert_proforma_to_invoice(proforma, actor):
    """Create a draft sales invoice carrying the proforma's items and totals"""
    ensure_permission(actor, 'manage_sales')
    transition(proforma, ProformaStatus.CONVERTED, f'Proforma invoice {proforma.proforma_number}')

    try:
        today = get_local_date()
        invoice = SalesInvoice(
            customer_id=proforma.customer_id,
            project_id=proforma.project_id,
            quotation_id=proforma.quotation_id,
            status=InvoiceStatus.DRAFT,
            invoice_date=today,
            due_date=today + timedelta(days=current_app.config['DEFAULT_PAYMENT_TERMS_DAYS']),
            payment_terms=proforma.payment_terms,
            bank_account=proforma.bank_account,
            billing_address=proforma.billing_address,
            terms_and_conditions=proforma.terms_and_conditions,
            remarks=proforma.remarks,
            items=copy.deepcopy(proforma.items),
            subtotal=proforma.subtotal,
            tax_amount=proforma.tax_amount,
            discount=proforma.discount,
            total_amount=proforma.total_amount,
            paid_amount=0,
            created_by=actor.id,
        )
        db.session.add(invoice)
        db.session.flush()
        proforma.sales_invoice_id = invoice.id
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(
        f'Proforma invoice {proforma.proforma_number} converted to draft invoice {invoice.id} by {actor.username}'
    )
    return invoice


def _set_archived(proforma, archived, actor):
    ensure_permission(actor, 'manage_sales')
    if proforma.is_archived == archived:
        return proforma
    proforma.is_archived = archived
    commit_or_rollback()
    return proforma


def archive_proforma_invoice(proforma, actor):
    return _set_archived(proforma, True, actor)


def unarchive_proforma_invoice(proforma, actor):
    return _set_archived(proforma, False, actor)


def get_proforma_invoice(proforma_id):
    return get_or_404(ProformaInvoice, proforma_id, 'Proforma invoice')


def list_proforma_invoices(search=None, status=None, customer_id=None, show_archived=False,
                           page=1, per_page=10):
    query = ProformaInvoice.query.join(Customer)
    if not show_archived:
        query = query.filter(ProformaInvoice.is_archived.is_(False))
    if search:
        term = f'%{search}%'
        query = query.filter(or_(
            ProformaInvoice.proforma_number.ilike(term),
            Customer.name.ilike(term),
        ))
    if status:
        query = query.filter(ProformaInvoice.status == parse_status(ProformaStatus, status))
    if customer_id:
        query = query.filter(ProformaInvoice.customer_id == customer_id)
    return query.order_by(ProformaInvoice.created_date.desc(), ProformaInvoice.id.desc()) \
        .paginate(page=page, per_page=per_page, error_out=False)
