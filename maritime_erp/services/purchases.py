"""
Purchasing: requests -> orders -> supplier invoices -> supplier payments.
"""
from datetime import datetime

from flask import current_app
from sqlalchemy import func, or_

from .. import db
from ..errors import ConflictError, InvalidTransitionError, ValidationError
from ..forms.common import validate_payload, validate_line_items
from ..forms.purchases import (
    PurchaseRequestForm, PurchaseRequestItemForm, PurchaseOrderForm, PurchaseInvoiceForm,
    SupplierInvoiceDatesForm,
)
from ..forms.sales import PaymentForm
from ..models import (
    PurchaseRequest, PurchaseOrder, PurchaseInvoice, PurchaseInvoicePayment, Supplier, Project,
    PurchaseRequestStatus, PurchaseOrderStatus, PurchaseInvoiceStatus, ApprovalStatus,
)
from ..models.status import ensure_transition
from ..signals import purchase_invoice_approved, purchase_payment_recorded
from ..utils.money import ZERO, to_decimal, to_money
from ..utils.permissions import ensure_permission
from ..utils.timezone_helper import get_local_date
from . import get_or_404, commit_or_rollback
from .documents import apply_line_items, transition, ensure_editable, parse_status
from .numbering import generate_document_number

INVOICEABLE_ORDER_STATUSES = (PurchaseOrderStatus.CONFIRMED, PurchaseOrderStatus.RECEIVED)


# Purchase requests

def create_purchase_request(data, actor):
    ensure_permission(actor, 'manage_purchases')
    cleaned = validate_payload(PurchaseRequestForm, data)
    if cleaned.get('project_id') is not None:
        get_or_404(Project, cleaned['project_id'], 'Project')

    items = []
    for item in validate_line_items(data.get('items'), PurchaseRequestItemForm):
        items.append({
            'description': item['description'],
            'quantity': str(item['quantity']),
            'unit_price': str(item['unit_price']) if item.get('unit_price') is not None else None,
            'tax_rate': str(item['tax_rate']) if item.get('tax_rate') is not None else None,
        })

    purchase_request = PurchaseRequest(
        request_number=generate_document_number(PurchaseRequest, 'request_number', 'PR'),
        status=PurchaseRequestStatus.PENDING,
        requested_by=actor.id,
        items=items,
        **cleaned
    )
    db.session.add(purchase_request)
    commit_or_rollback()
    current_app.logger.info(f'Purchase request {purchase_request.request_number} created by {actor.username}')
    return purchase_request


def approve_purchase_request(purchase_request, actor):
    ensure_permission(actor, 'approve_purchases')
    transition(purchase_request, PurchaseRequestStatus.APPROVED,
               f'Purchase request {purchase_request.request_number}')
    purchase_request.approved_by = actor.id
    purchase_request.approval_date = datetime.utcnow()
    commit_or_rollback()
    return purchase_request


def reject_purchase_request(purchase_request, actor, reason=None):
    ensure_permission(actor, 'approve_purchases')
    transition(purchase_request, PurchaseRequestStatus.REJECTED,
               f'Purchase request {purchase_request.request_number}')
    purchase_request.approved_by = actor.id
    purchase_request.approval_date = datetime.utcnow()
    purchase_request.rejection_reason = reason
    commit_or_rollback()
    return purchase_request


def convert_request_to_order(purchase_request, supplier_id, actor):
    """Approved request -> draft purchase order; every item needs a unit price"""
    ensure_permission(actor, 'manage_purchases')
    ensure_transition(purchase_request.status, PurchaseRequestStatus.COMPLETED)
    supplier = get_or_404(Supplier, supplier_id, 'Supplier')

    missing = {
        f'items[{index}].unit_price': ['Unit price is required to order this item']
        for index, item in enumerate(purchase_request.items or [])
        if item.get('unit_price') in (None, '')
    }
    if missing:
        raise ValidationError('Every item needs a unit price before ordering', missing)

    order = PurchaseOrder(
        po_number=generate_document_number(PurchaseOrder, 'po_number', 'PO'),
        supplier_id=supplier.id,
        purchase_request_id=purchase_request.id,
        project_id=purchase_request.project_id,
        status=PurchaseOrderStatus.DRAFT,
        order_date=get_local_date(),
        created_by=actor.id,
    )
    apply_line_items(order, purchase_request.items, 0)

    transition(purchase_request, PurchaseRequestStatus.COMPLETED,
               f'Purchase request {purchase_request.request_number}')
    db.session.add(order)
    commit_or_rollback()
    current_app.logger.info(
        f'Purchase request {purchase_request.request_number} converted to {order.po_number} by {actor.username}'
    )
    return order


def get_purchase_request(request_id):
    return get_or_404(PurchaseRequest, request_id, 'Purchase request')


def list_purchase_requests(status=None, urgency=None, page=1, per_page=10):
    query = PurchaseRequest.query
    if status:
        query = query.filter(PurchaseRequest.status == parse_status(PurchaseRequestStatus, status))
    if urgency:
        query = query.filter(PurchaseRequest.urgency == urgency)
    return query.order_by(PurchaseRequest.created_at.desc(), PurchaseRequest.id.desc()) \
        .paginate(page=page, per_page=per_page, error_out=False)


# Purchase orders

def _check_order_references(cleaned):
    get_or_404(Supplier, cleaned['supplier_id'], 'Supplier')
    if cleaned.get('purchase_request_id') is not None:
        get_or_404(PurchaseRequest, cleaned['purchase_request_id'], 'Purchase request')
    if cleaned.get('project_id') is not None:
        get_or_404(Project, cleaned['project_id'], 'Project')


def create_purchase_order(data, actor):
    ensure_permission(actor, 'manage_purchases')
    cleaned = validate_payload(PurchaseOrderForm, data)
    _check_order_references(cleaned)
    cleaned['order_date'] = cleaned.get('order_date') or get_local_date()

    order = PurchaseOrder(
        po_number=generate_document_number(PurchaseOrder, 'po_number', 'PO'),
        status=PurchaseOrderStatus.DRAFT,
        created_by=actor.id,
        **cleaned
    )
    apply_line_items(order, data.get('items'), cleaned.get('discount') or 0)

    db.session.add(order)
    commit_or_rollback()
    current_app.logger.info(f'Purchase order {order.po_number} created by {actor.username}')
    return order


def update_purchase_order(order, data, actor):
    ensure_permission(actor, 'manage_purchases')
    ensure_editable(order, (PurchaseOrderStatus.DRAFT,), 'Purchase order')
    cleaned = validate_payload(PurchaseOrderForm, data, defaults=order.form_data())
    _check_order_references(cleaned)

    apply_line_items(order, data.get('items', order.items), cleaned.pop('discount', None) or 0)
    for field, value in cleaned.items():
        setattr(order, field, value)

    commit_or_rollback()
    current_app.logger.info(f'Purchase order {order.po_number} updated by {actor.username}')
    return order


def _move_order(order, target, actor):
    ensure_permission(actor, 'manage_purchases')
    transition(order, target, f'Purchase order {order.po_number}')
    if target == PurchaseOrderStatus.RECEIVED:
        order.received_date = get_local_date()
    commit_or_rollback()
    return order


def send_purchase_order(order, actor):
    return _move_order(order, PurchaseOrderStatus.SENT, actor)


def confirm_purchase_order(order, actor):
    return _move_order(order, PurchaseOrderStatus.CONFIRMED, actor)


def receive_purchase_order(order, actor):
    return _move_order(order, PurchaseOrderStatus.RECEIVED, actor)


def cancel_purchase_order(order, actor):
    return _move_order(order, PurchaseOrderStatus.CANCELLED, actor)


def _check_unique_invoice_number(invoice_number):
    if PurchaseInvoice.query.filter_by(invoice_number=invoice_number).first():
        raise ConflictError(
            f'Purchase invoice {invoice_number} already exists',
            {'invoice_number': ['Invoice number is already recorded']}
        )


def convert_order_to_invoice(order, invoice_number, invoice_date, due_date, actor):
    """Record the supplier's invoice for a confirmed or received order"""
    ensure_permission(actor, 'manage_purchases')
    if order.status not in INVOICEABLE_ORDER_STATUSES:
        raise InvalidTransitionError(
            order.status, order.status,
            f'Only confirmed or received orders can be invoiced (currently {order.status.value})'
        )
    cleaned = validate_payload(SupplierInvoiceDatesForm, {
        'invoice_number': invoice_number,
        'invoice_date': invoice_date,
        'due_date': due_date,
    })
    _check_unique_invoice_number(cleaned['invoice_number'])

    invoice = PurchaseInvoice(
        supplier_id=order.supplier_id,
        purchase_order_id=order.id,
        project_id=order.project_id,
        status=PurchaseInvoiceStatus.PENDING,
        approval_status=ApprovalStatus.PENDING,
        paid_amount=0,
        notes=order.notes,
        created_by=actor.id,
        **cleaned
    )
    apply_line_items(invoice, order.items, order.discount or 0)

    db.session.add(invoice)
    commit_or_rollback()
    current_app.logger.info(
        f'Purchase order {order.po_number} invoiced as {invoice.invoice_number} by {actor.username}'
    )
    return invoice


def get_purchase_order(order_id):
    return get_or_404(PurchaseOrder, order_id, 'Purchase order')


def list_purchase_orders(search=None, status=None, supplier_id=None, page=1, per_page=10):
    query = PurchaseOrder.query.join(Supplier)
    if search:
        term = f'%{search}%'
        query = query.filter(or_(PurchaseOrder.po_number.ilike(term), Supplier.name.ilike(term)))
    if status:
        query = query.filter(PurchaseOrder.status == parse_status(PurchaseOrderStatus, status))
    if supplier_id:
        query = query.filter(PurchaseOrder.supplier_id == supplier_id)
    return query.order_by(PurchaseOrder.order_date.desc(), PurchaseOrder.id.desc()) \
        .paginate(page=page, per_page=per_page, error_out=False)


# Purchase invoices

def create_purchase_invoice(data, actor):
    ensure_permission(actor, 'manage_purchases')
    cleaned = validate_payload(PurchaseInvoiceForm, data)
    get_or_404(Supplier, cleaned['supplier_id'], 'Supplier')
    if cleaned.get('purchase_order_id') is not None:
        get_or_404(PurchaseOrder, cleaned['purchase_order_id'], 'Purchase order')
    if cleaned.get('project_id') is not None:
        get_or_404(Project, cleaned['project_id'], 'Project')
    _check_unique_invoice_number(cleaned['invoice_number'])

    invoice = PurchaseInvoice(
        status=PurchaseInvoiceStatus.PENDING,
        approval_status=ApprovalStatus.PENDING,
        paid_amount=0,
        created_by=actor.id,
        **cleaned
    )
    apply_line_items(invoice, data.get('items'), cleaned.get('discount') or 0)

    db.session.add(invoice)
    commit_or_rollback()
    current_app.logger.info(f'Purchase invoice {invoice.invoice_number} recorded by {actor.username}')
    return invoice


def approve_purchase_invoice(invoice, actor):
    """Approval posts purchases, input VAT and the payable to the ledger"""
    ensure_permission(actor, 'approve_purchases')
    transition(invoice, ApprovalStatus.APPROVED, f'Purchase invoice {invoice.invoice_number}',
               field='approval_status')
    try:
        invoice.approved_by = actor.id
        invoice.approval_date = datetime.utcnow()
        purchase_invoice_approved.send(invoice, actor=actor)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return invoice


def reject_purchase_invoice(invoice, actor, reason=None):
    ensure_permission(actor, 'approve_purchases')
    transition(invoice, ApprovalStatus.REJECTED, f'Purchase invoice {invoice.invoice_number}',
               field='approval_status')
    invoice.approved_by = actor.id
    invoice.approval_date = datetime.utcnow()
    invoice.rejection_reason = reason
    commit_or_rollback()
    return invoice


def _purchase_payment_status(paid, total, current):
    if paid >= total:
        return PurchaseInvoiceStatus.PAID
    if paid > ZERO:
        return PurchaseInvoiceStatus.PARTIALLY_PAID
    return current


def record_purchase_payment(invoice, data, actor):
    """Same locking, recompute and overpayment rules as sales payments"""
    ensure_permission(actor, 'record_payments')
    cleaned = validate_payload(PaymentForm, data)
    amount = to_money(cleaned['amount'])

    try:
        invoice = db.session.execute(
            db.select(PurchaseInvoice)
            .filter(PurchaseInvoice.id == invoice.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one()

        if invoice.approval_status != ApprovalStatus.APPROVED:
            raise InvalidTransitionError(
                invoice.approval_status, ApprovalStatus.APPROVED,
                'Purchase invoice must be approved before payments can be recorded'
            )
        if invoice.status == PurchaseInvoiceStatus.PAID:
            raise ConflictError('Purchase invoice is already fully paid')

        paid = to_money(to_decimal(
            db.session.query(func.coalesce(func.sum(PurchaseInvoicePayment.amount), 0))
            .filter(PurchaseInvoicePayment.purchase_invoice_id == invoice.id).scalar()
        ))
        outstanding = to_money(invoice.total_amount) - paid
        if amount > outstanding and not current_app.config.get('ALLOW_OVERPAYMENT', False):
            raise ConflictError(
                f'Payment of {amount} exceeds the outstanding balance of {outstanding}',
                {'amount': [f'Amount cannot exceed the outstanding balance of {outstanding}']}
            )

        payment = PurchaseInvoicePayment(
            purchase_invoice_id=invoice.id,
            amount=amount,
            payment_date=cleaned.get('payment_date') or get_local_date(),
            payment_method=cleaned.get('payment_method') or 'bank_transfer',
            reference_number=cleaned.get('reference_number'),
            notes=cleaned.get('notes'),
            recorded_by=actor.id,
        )
        db.session.add(payment)

        invoice.paid_amount = paid + amount
        target = _purchase_payment_status(invoice.paid_amount, to_money(invoice.total_amount), invoice.status)
        if target != invoice.status:
            ensure_transition(invoice.status, target)
            invoice.status = target
        db.session.flush()

        purchase_payment_recorded.send(payment, invoice=invoice, actor=actor)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(
        f'Supplier payment {payment.id} of {amount} recorded on {invoice.invoice_number} by {actor.username}'
    )
    return payment


def get_purchase_invoice(invoice_id):
    return get_or_404(PurchaseInvoice, invoice_id, 'Purchase invoice')


def list_purchase_invoices(search=None, status=None, approval_status=None, supplier_id=None,
                           page=1, per_page=10):
    query = PurchaseInvoice.query.join(Supplier)
    if search:
        term = f'%{search}%'
        query = query.filter(or_(PurchaseInvoice.invoice_number.ilike(term), Supplier.name.ilike(term)))
    if status:
        query = query.filter(PurchaseInvoice.status == parse_status(PurchaseInvoiceStatus, status))
    if approval_status:
        query = query.filter(PurchaseInvoice.approval_status == parse_status(
            ApprovalStatus, approval_status, 'approval_status'))
    if supplier_id:
        query = query.filter(PurchaseInvoice.supplier_id == supplier_id)
    return query.order_by(PurchaseInvoice.invoice_date.desc(), PurchaseInvoice.id.desc()) \
        .paginate(page=page, per_page=per_page, error_out=False)


def list_payables(today=None, supplier_id=None, overdue_only=False):
    """Approved supplier invoices not yet fully paid; overdue first, then by due date"""
    today = today or get_local_date()
    query = PurchaseInvoice.query.filter(
        PurchaseInvoice.approval_status == ApprovalStatus.APPROVED,
        PurchaseInvoice.status != PurchaseInvoiceStatus.PAID,
    )
    if supplier_id:
        query = query.filter(PurchaseInvoice.supplier_id == supplier_id)

    rows = []
    for invoice in query.all():
        is_overdue = invoice.is_overdue(today)
        rows.append({
            'purchase_invoice_id': invoice.id,
            'invoice_number': invoice.invoice_number,
            'supplier_id': invoice.supplier_id,
            'supplier_name': invoice.supplier.name if invoice.supplier else None,
            'total_amount': to_money(invoice.total_amount),
            'paid_amount': to_money(invoice.paid_amount or ZERO),
            'outstanding_amount': invoice.outstanding_amount,
            'due_date': invoice.due_date,
            'is_overdue': is_overdue,
            'days_overdue': (today - invoice.due_date).days if is_overdue else 0,
        })
    if overdue_only:
        rows = [row for row in rows if row['is_overdue']]
    rows.sort(key=lambda row: (not row['is_overdue'], row['due_date'], row['purchase_invoice_id']))
    return rows
