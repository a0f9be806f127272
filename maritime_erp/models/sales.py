from .. import db
from datetime import datetime

from .base import LineItemDocumentMixin, status_column, isoformat
from .status import (
    QuotationStatus, InvoiceStatus, ProformaStatus, CreditNoteStatus,
)
from ..utils.money import format_money, to_money, ZERO

OPEN_INVOICE_STATUSES = (
    InvoiceStatus.APPROVED,
    InvoiceStatus.UNPAID,
    InvoiceStatus.PARTIALLY_PAID,
    InvoiceStatus.OVERDUE,
)


class SalesQuotation(LineItemDocumentMixin, db.Model):
    __tablename__ = 'sales_quotations'

    id = db.Column(db.Integer, primary_key=True)
    quotation_number = db.Column(db.String(50), unique=True, nullable=False)
    customer_id = db.Column(db.Integer, db.ForeignKey('customers.id'), nullable=False)
    status = status_column(QuotationStatus, QuotationStatus.DRAFT)
    valid_until = db.Column(db.Date)
    payment_terms = db.Column(db.String(100))
    bank_account = db.Column(db.String(200))
    billing_address = db.Column(db.Text)
    terms_and_conditions = db.Column(db.Text)
    remarks = db.Column(db.Text)
    is_archived = db.Column(db.Boolean, nullable=False, default=False)
    created_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    approved_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    approved_at = db.Column(db.DateTime)
    created_date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    EDITABLE_FIELDS = (
        'customer_id', 'discount', 'valid_until', 'payment_terms', 'bank_account',
        'billing_address', 'terms_and_conditions', 'remarks',
    )

    invoices = db.relationship('SalesInvoice', backref='quotation', lazy=True)

    def to_dict(self):
        data = {
            'id': self.id,
            'quotation_number': self.quotation_number,
            'customer_id': self.customer_id,
            'customer_name': self.customer.name if self.customer else None,
            'status': self.status.value,
            'valid_until': isoformat(self.valid_until),
            'payment_terms': self.payment_terms,
            'bank_account': self.bank_account,
            'billing_address': self.billing_address,
            'terms_and_conditions': self.terms_and_conditions,
            'remarks': self.remarks,
            'is_archived': self.is_archived,
            'approved_by': self.approved_by,
            'approved_at': isoformat(self.approved_at),
            'created_date': isoformat(self.created_date),
        }
        data.update(self.totals_dict())
        return data

    def __repr__(self):
        return f'<SalesQuotation {self.quotation_number} ({self.status.value})>'


class SalesInvoice(LineItemDocumentMixin, db.Model):
    __tablename__ = 'sales_invoices'

    id = db.Column(db.Integer, primary_key=True)
    # Drafts have no number until they are approved
    invoice_number = db.Column(db.String(50), unique=True, nullable=True)
    customer_id = db.Column(db.Integer, db.ForeignKey('customers.id'), nullable=False)
    project_id = db.Column(db.Integer, db.ForeignKey('projects.id'))
    quotation_id = db.Column(db.Integer, db.ForeignKey('sales_quotations.id'))
    status = status_column(InvoiceStatus, InvoiceStatus.DRAFT)
    invoice_date = db.Column(db.Date, nullable=False)
    due_date = db.Column(db.Date, nullable=False)
    payment_terms = db.Column(db.String(100))
    bank_account = db.Column(db.String(200))
    billing_address = db.Column(db.Text)
    terms_and_conditions = db.Column(db.Text)
    remarks = db.Column(db.Text)
    paid_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    created_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    approved_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    approved_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    EDITABLE_FIELDS = (
        'customer_id', 'project_id', 'quotation_id', 'discount', 'invoice_date', 'due_date',
        'payment_terms', 'bank_account', 'billing_address', 'terms_and_conditions', 'remarks',
    )

    payments = db.relationship(
        'InvoicePayment', backref='invoice', lazy=True,
        cascade='all, delete-orphan', order_by='InvoicePayment.id'
    )
    credit_notes = db.relationship('CreditNote', backref='sales_invoice', lazy=True)

    @property
    def outstanding_amount(self):
        return to_money(self.total_amount) - to_money(self.paid_amount or ZERO)

    @property
    def is_open(self):
        return self.status in OPEN_INVOICE_STATUSES

    def is_overdue(self, today):
        return self.is_open and self.due_date is not None and self.due_date < today \
            and self.outstanding_amount > ZERO

    def effective_status(self, today):
        """Stored status with the overdue overlay applied"""
        if self.is_overdue(today):
            return InvoiceStatus.OVERDUE
        return self.status

    def to_dict(self, today=None):
        data = {
            'id': self.id,
            'invoice_number': self.invoice_number,
            'customer_id': self.customer_id,
            'customer_name': self.customer.name if self.customer else None,
            'project_id': self.project_id,
            'quotation_id': self.quotation_id,
            'status': self.status.value,
            'invoice_date': isoformat(self.invoice_date),
            'due_date': isoformat(self.due_date),
            'payment_terms': self.payment_terms,
            'bank_account': self.bank_account,
            'billing_address': self.billing_address,
            'terms_and_conditions': self.terms_and_conditions,
            'remarks': self.remarks,
            'paid_amount': format_money(self.paid_amount or ZERO),
            'outstanding_amount': format_money(self.outstanding_amount),
            'approved_by': self.approved_by,
            'approved_at': isoformat(self.approved_at),
            'created_at': isoformat(self.created_at),
        }
        if today is not None:
            data['effective_status'] = self.effective_status(today).value
        data.update(self.totals_dict())
        return data

    def __repr__(self):
        return f'<SalesInvoice {self.invoice_number or self.id} ({self.status.value})>'


class InvoicePayment(db.Model):
    """Append-only; the invoice's paid_amount is the sum of these rows"""
    __tablename__ = 'invoice_payments'

    id = db.Column(db.Integer, primary_key=True)
    invoice_id = db.Column(db.Integer, db.ForeignKey('sales_invoices.id', ondelete='CASCADE'), nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    payment_date = db.Column(db.Date, nullable=False)
    payment_method = db.Column(db.String(30))  # cash, bank_transfer, cheque, card, credit_note
    reference_number = db.Column(db.String(100))
    notes = db.Column(db.Text)
    payment_type = db.Column(db.String(20), nullable=False, default='payment')  # payment, credit_note
    credit_note_id = db.Column(db.Integer, db.ForeignKey('credit_notes.id'))
    recorded_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    recorded_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    files = db.relationship('PaymentFile', backref='payment', lazy=True, cascade='all, delete-orphan')
    recorder = db.relationship('User', foreign_keys=[recorded_by])

    def to_dict(self):
        return {
            'id': self.id,
            'invoice_id': self.invoice_id,
            'amount': format_money(self.amount),
            'payment_date': isoformat(self.payment_date),
            'payment_method': self.payment_method,
            'reference_number': self.reference_number,
            'notes': self.notes,
            'payment_type': self.payment_type,
            'credit_note_id': self.credit_note_id,
            'recorded_by': self.recorded_by,
            'recorded_at': isoformat(self.recorded_at),
            'files': [f.to_dict() for f in self.files],
        }


class PaymentFile(db.Model):
    __tablename__ = 'payment_files'

    id = db.Column(db.Integer, primary_key=True)
    payment_id = db.Column(db.Integer, db.ForeignKey('invoice_payments.id', ondelete='CASCADE'), nullable=False)
    file_name = db.Column(db.String(255), nullable=False)
    original_name = db.Column(db.String(255), nullable=False)
    file_path = db.Column(db.String(500), nullable=False)
    file_size = db.Column(db.Integer)
    mime_type = db.Column(db.String(100))
    uploaded_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'payment_id': self.payment_id,
            'file_name': self.file_name,
            'original_name': self.original_name,
            'file_size': self.file_size,
            'mime_type': self.mime_type,
            'uploaded_at': isoformat(self.uploaded_at),
        }


class ProformaInvoice(LineItemDocumentMixin, db.Model):
    __tablename__ = 'proforma_invoices'

    id = db.Column(db.Integer, primary_key=True)
    proforma_number = db.Column(db.String(50), unique=True, nullable=False)
    customer_id = db.Column(db.Integer, db.ForeignKey('customers.id'), nullable=False)
    project_id = db.Column(db.Integer, db.ForeignKey('projects.id'))
    quotation_id = db.Column(db.Integer, db.ForeignKey('sales_quotations.id'))
    status = status_column(ProformaStatus, ProformaStatus.DRAFT)
    invoice_date = db.Column(db.Date, nullable=False)
    valid_until = db.Column(db.Date)
    payment_terms = db.Column(db.String(100))
    delivery_terms = db.Column(db.String(200))
    bank_account = db.Column(db.String(200))
    billing_address = db.Column(db.Text)
    terms_and_conditions = db.Column(db.Text)
    remarks = db.Column(db.Text)
    is_archived = db.Column(db.Boolean, nullable=False, default=False)
    sales_invoice_id = db.Column(db.Integer, db.ForeignKey('sales_invoices.id'))
    created_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    created_date = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    EDITABLE_FIELDS = (
        'customer_id', 'project_id', 'quotation_id', 'discount', 'invoice_date', 'valid_until',
        'payment_terms', 'delivery_terms', 'bank_account', 'billing_address',
        'terms_and_conditions', 'remarks',
    )

    customer = db.relationship('Customer')
    sales_invoice = db.relationship('SalesInvoice', foreign_keys=[sales_invoice_id])

    def to_dict(self):
        data = {
            'id': self.id,
            'proforma_number': self.proforma_number,
            'customer_id': self.customer_id,
            'customer_name': self.customer.name if self.customer else None,
            'project_id': self.project_id,
            'quotation_id': self.quotation_id,
            'status': self.status.value,
            'invoice_date': isoformat(self.invoice_date),
            'valid_until': isoformat(self.valid_until),
            'payment_terms': self.payment_terms,
            'delivery_terms': self.delivery_terms,
            'bank_account': self.bank_account,
            'billing_address': self.billing_address,
            'terms_and_conditions': self.terms_and_conditions,
            'remarks': self.remarks,
            'is_archived': self.is_archived,
            'sales_invoice_id': self.sales_invoice_id,
            'created_date': isoformat(self.created_date),
        }
        data.update(self.totals_dict())
        return data


class CreditNote(LineItemDocumentMixin, db.Model):
    __tablename__ = 'credit_notes'

    id = db.Column(db.Integer, primary_key=True)
    credit_note_number = db.Column(db.String(50), unique=True, nullable=False)
    sales_invoice_id = db.Column(db.Integer, db.ForeignKey('sales_invoices.id'), nullable=False)
    customer_id = db.Column(db.Integer, db.ForeignKey('customers.id'))
    status = status_column(CreditNoteStatus, CreditNoteStatus.DRAFT)
    credit_note_date = db.Column(db.Date, nullable=False)
    billing_address = db.Column(db.Text)
    reason = db.Column(db.Text)
    created_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    customer = db.relationship('Customer')

    def to_dict(self):
        data = {
            'id': self.id,
            'credit_note_number': self.credit_note_number,
            'sales_invoice_id': self.sales_invoice_id,
            'invoice_number': self.sales_invoice.invoice_number if self.sales_invoice else None,
            'customer_id': self.customer_id,
            'customer_name': self.customer.name if self.customer else None,
            'status': self.status.value,
            'credit_note_date': isoformat(self.credit_note_date),
            'billing_address': self.billing_address,
            'reason': self.reason,
            'created_at': isoformat(self.created_at),
        }
        data.update(self.totals_dict())
        return data
