from wtforms import StringField, TextAreaField, IntegerField, DateField
from wtforms.validators import DataRequired, InputRequired, Length, Optional, NumberRange

from .common import APIForm, FiniteDecimalField, OptionalSelectField, positive, not_before

PAYMENT_METHODS = ('cash', 'bank_transfer', 'cheque', 'card', 'online')


class DocumentTermsForm(APIForm):
    """Fields shared by quotations, invoices and proforma invoices"""
    customer_id = IntegerField('Customer', validators=[InputRequired(message='Customer is required')])
    discount = FiniteDecimalField('Discount', validators=[
        Optional(),
        NumberRange(min=0, message='Discount cannot be negative')
    ])
    payment_terms = StringField('Payment Terms', validators=[Optional(), Length(max=100)])
    bank_account = StringField('Bank Account', validators=[Optional(), Length(max=200)])
    billing_address = TextAreaField('Billing Address', validators=[Optional()])
    terms_and_conditions = TextAreaField('Terms and Conditions', validators=[Optional()])
    remarks = TextAreaField('Remarks', validators=[Optional()])


class QuotationForm(DocumentTermsForm):
    valid_until = DateField('Valid Until', format='%Y-%m-%d', validators=[Optional()])


class SalesInvoiceForm(DocumentTermsForm):
    project_id = IntegerField('Project', validators=[Optional()])
    quotation_id = IntegerField('Quotation', validators=[Optional()])
    invoice_date = DateField('Invoice Date', format='%Y-%m-%d', validators=[Optional()])
    due_date = DateField('Due Date', format='%Y-%m-%d', validators=[
        Optional(),
        not_before('invoice_date', 'Due date cannot be before the invoice date')
    ])


class ProformaInvoiceForm(DocumentTermsForm):
    project_id = IntegerField('Project', validators=[Optional()])
    quotation_id = IntegerField('Quotation', validators=[Optional()])
    invoice_date = DateField('Invoice Date', format='%Y-%m-%d', validators=[Optional()])
    valid_until = DateField('Valid Until', format='%Y-%m-%d', validators=[
        Optional(),
        not_before('invoice_date', 'Validity date cannot be before the invoice date')
    ])
    delivery_terms = StringField('Delivery Terms', validators=[Optional(), Length(max=200)])


class CreditNoteForm(APIForm):
    sales_invoice_id = IntegerField('Sales Invoice', validators=[
        InputRequired(message='Sales invoice is required')
    ])
    customer_id = IntegerField('Customer', validators=[Optional()])
    credit_note_date = DateField('Credit Note Date', format='%Y-%m-%d', validators=[Optional()])
    billing_address = TextAreaField('Billing Address', validators=[Optional()])
    reason = TextAreaField('Reason', validators=[Optional()])
    discount = FiniteDecimalField('Discount', validators=[
        Optional(),
        NumberRange(min=0, message='Discount cannot be negative')
    ])


class PaymentForm(APIForm):
    amount = FiniteDecimalField('Amount', validators=[
        InputRequired(message='Amount is required'),
        positive('Payment amount must be greater than zero')
    ])
    payment_date = DateField('Payment Date', format='%Y-%m-%d', validators=[Optional()])
    payment_method = OptionalSelectField('Payment Method', choices=list(PAYMENT_METHODS), validators=[Optional()])
    reference_number = StringField('Reference Number', validators=[Optional(), Length(max=100)])
    notes = TextAreaField('Notes', validators=[Optional()])


class ConvertQuotationForm(APIForm):
    project_id = IntegerField('Project', validators=[Optional()])


class ReasonForm(APIForm):
    reason = TextAreaField('Reason', validators=[Optional(), Length(max=1000)])
