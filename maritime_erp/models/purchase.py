from .. import db
from datetime import datetime

from .base import LineItemDocumentMixin, status_column, isoformat
from .status import (
    PurchaseRequestStatus, PurchaseOrderStatus, PurchaseInvoiceStatus, ApprovalStatus,
)
from ..utils.money import format_money, to_money, ZERO

URGENCY_LEVELS = ('low', 'normal', 'high', 'urgent')


class PurchaseRequest(db.Model):
    __tablename__ = 'purchase_requests'

    id = db.Column(db.Integer, primary_key=True)
    request_number = db.Column(db.String(50), unique=True, nullable=False)
    status = status_column(PurchaseRequestStatus, PurchaseRequestStatus.PENDING)
    urgency = db.Column(db.String(10), nullable=False, default='normal')
    reason = db.Column(db.Text)
    project_id = db.Column(db.Integer, db.ForeignKey('projects.id'))
    # description, quantity, optional unit_price (budget estimate)
    items = db.Column(db.JSON, nullable=False, default=list)
    requested_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    approved_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    approval_date = db.Column(db.DateTime)
    rejection_reason = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    orders = db.relationship('PurchaseOrder', backref='purchase_request', lazy=True)

    def to_dict(self):
        return {
            'id': self.id,
            'request_number': self.request_number,
            'status': self.status.value,
            'urgency': self.urgency,
            'reason': self.reason,
            'project_id': self.project_id,
            'items': list(self.items or []),
            'requested_by': self.requested_by,
            'approved_by': self.approved_by,
            'approval_date': isoformat(self.approval_date),
            'rejection_reason': self.rejection_reason,
            'created_at': isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<PurchaseRequest {self.request_number}>'


class PurchaseOrder(LineItemDocumentMixin, db.Model):
    __tablename__ = 'purchase_orders'

    id = db.Column(db.Integer, primary_key=True)
    po_number = db.Column(db.String(50), unique=True, nullable=False)
    supplier_id = db.Column(db.Integer, db.ForeignKey('suppliers.id'), nullable=False)
    purchase_request_id = db.Column(db.Integer, db.ForeignKey('purchase_requests.id'))
    project_id = db.Column(db.Integer, db.ForeignKey('projects.id'))
    status = status_column(PurchaseOrderStatus, PurchaseOrderStatus.DRAFT)
    order_date = db.Column(db.Date, nullable=False)
    expected_delivery = db.Column(db.Date)
    received_date = db.Column(db.Date)
    terms = db.Column(db.Text)
    notes = db.Column(db.Text)
    created_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    EDITABLE_FIELDS = (
        'supplier_id', 'purchase_request_id', 'project_id', 'order_date', 'expected_delivery',
        'terms', 'notes', 'discount',
    )

    supplier = db.relationship('Supplier', back_populates='purchase_orders')
    invoices = db.relationship('PurchaseInvoice', backref='purchase_order', lazy=True)

    def to_dict(self):
        data = {
            'id': self.id,
            'po_number': self.po_number,
            'supplier_id': self.supplier_id,
            'supplier_name': self.supplier.name if self.supplier else None,
            'purchase_request_id': self.purchase_request_id,
            'project_id': self.project_id,
            'status': self.status.value,
            'order_date': isoformat(self.order_date),
            'expected_delivery': isoformat(self.expected_delivery),
            'received_date': isoformat(self.received_date),
            'terms': self.terms,
            'notes': self.notes,
            'created_at': isoformat(self.created_at),
        }
        data.update(self.totals_dict())
        return data

    def __repr__(self):
        return f'<PurchaseOrder {self.po_number}>'


class PurchaseInvoice(LineItemDocumentMixin, db.Model):
    __tablename__ = 'purchase_invoices'

    id = db.Column(db.Integer, primary_key=True)
    # The supplier's own invoice number
    invoice_number = db.Column(db.String(100), unique=True, nullable=False)
    supplier_id = db.Column(db.Integer, db.ForeignKey('suppliers.id'), nullable=False)
    purchase_order_id = db.Column(db.Integer, db.ForeignKey('purchase_orders.id'))
    project_id = db.Column(db.Integer, db.ForeignKey('projects.id'))
    status = status_column(PurchaseInvoiceStatus, PurchaseInvoiceStatus.PENDING)
    approval_status = status_column(ApprovalStatus, ApprovalStatus.PENDING)
    invoice_date = db.Column(db.Date, nullable=False)
    due_date = db.Column(db.Date, nullable=False)
    paid_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    notes = db.Column(db.Text)
    approved_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    approval_date = db.Column(db.DateTime)
    rejection_reason = db.Column(db.Text)
    created_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    supplier = db.relationship('Supplier', back_populates='purchase_invoices')
    payments = db.relationship(
        'PurchaseInvoicePayment', backref='invoice', lazy=True,
        cascade='all, delete-orphan', order_by='PurchaseInvoicePayment.id'
    )

    @property
    def outstanding_amount(self):
        return to_money(self.total_amount) - to_money(self.paid_amount or ZERO)

    def is_overdue(self, today):
        return self.approval_status == ApprovalStatus.APPROVED \
            and self.status != PurchaseInvoiceStatus.PAID \
            and self.due_date < today and self.outstanding_amount > ZERO

    def to_dict(self):
        data = {
            'id': self.id,
            'invoice_number': self.invoice_number,
            'supplier_id': self.supplier_id,
            'supplier_name': self.supplier.name if self.supplier else None,
            'purchase_order_id': self.purchase_order_id,
            'project_id': self.project_id,
            'status': self.status.value,
            'approval_status': self.approval_status.value,
            'invoice_date': isoformat(self.invoice_date),
            'due_date': isoformat(self.due_date),
            'paid_amount': format_money(self.paid_amount or ZERO),
            'outstanding_amount': format_money(self.outstanding_amount),
            'notes': self.notes,
            'approved_by': self.approved_by,
            'approval_date': isoformat(self.approval_date),
            'rejection_reason': self.rejection_reason,
            'created_at': isoformat(self.created_at),
        }
        data.update(self.totals_dict())
        return data

    def __repr__(self):
        return f'<PurchaseInvoice {self.invoice_number}>'


class PurchaseInvoicePayment(db.Model):
    __tablename__ = 'purchase_invoice_payments'

    id = db.Column(db.Integer, primary_key=True)
    purchase_invoice_id = db.Column(
        db.Integer, db.ForeignKey('purchase_invoices.id', ondelete='CASCADE'), nullable=False
    )
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    payment_date = db.Column(db.Date, nullable=False)
    payment_method = db.Column(db.String(30))
    reference_number = db.Column(db.String(100))
    notes = db.Column(db.Text)
    recorded_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    recorded_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'purchase_invoice_id': self.purchase_invoice_id,
            'amount': format_money(self.amount),
            'payment_date': isoformat(self.payment_date),
            'payment_method': self.payment_method,
            'reference_number': self.reference_number,
            'notes': self.notes,
            'recorded_by': self.recorded_by,
            'recorded_at': isoformat(self.recorded_at),
        }
