from wtforms import StringField, TextAreaField, IntegerField, DateField
from wtforms.validators import DataRequired, InputRequired, Length, Optional, NumberRange

from .common import APIForm, FiniteDecimalField, OptionalSelectField, positive, not_before
from ..models.purchase import URGENCY_LEVELS


class PurchaseRequestForm(APIForm):
    urgency = OptionalSelectField('Urgency', choices=list(URGENCY_LEVELS), validators=[Optional()])
    reason = TextAreaField('Reason', validators=[Optional()])
    project_id = IntegerField('Project', validators=[Optional()])


class PurchaseRequestItemForm(APIForm):
    description = StringField('Description', validators=[
        DataRequired(message='Description is required'),
        Length(max=500)
    ])
    quantity = FiniteDecimalField('Quantity', validators=[
        InputRequired(message='Quantity is required'),
        positive('Quantity must be greater than zero')
    ])
    unit_price = FiniteDecimalField('Estimated Unit Price', validators=[
        Optional(),
        NumberRange(min=0, message='Unit price cannot be negative')
    ])
    tax_rate = FiniteDecimalField('Tax Rate (%)', validators=[
        Optional(),
        NumberRange(min=0, max=100, message='Tax rate must be between 0 and 100')
    ])


class PurchaseOrderForm(APIForm):
    supplier_id = IntegerField('Supplier', validators=[InputRequired(message='Supplier is required')])
    purchase_request_id = IntegerField('Purchase Request', validators=[Optional()])
    project_id = IntegerField('Project', validators=[Optional()])
    order_date = DateField('Order Date', format='%Y-%m-%d', validators=[Optional()])
    expected_delivery = DateField('Expected Delivery', format='%Y-%m-%d', validators=[
        Optional(),
        not_before('order_date', 'Expected delivery cannot be before the order date')
    ])
    terms = TextAreaField('Terms', validators=[Optional()])
    notes = TextAreaField('Notes', validators=[Optional()])
    discount = FiniteDecimalField('Discount', validators=[
        Optional(),
        NumberRange(min=0, message='Discount cannot be negative')
    ])


class ConvertRequestForm(APIForm):
    supplier_id = IntegerField('Supplier', validators=[InputRequired(message='Supplier is required')])


class SupplierInvoiceDatesForm(APIForm):
    invoice_number = StringField('Supplier Invoice Number', validators=[
        DataRequired(message='Invoice number is required'),
        Length(max=100)
    ])
    invoice_date = DateField('Invoice Date', format='%Y-%m-%d', validators=[
        InputRequired(message='Invoice date is required')
    ])
    due_date = DateField('Due Date', format='%Y-%m-%d', validators=[
        InputRequired(message='Due date is required'),
        not_before('invoice_date', 'Due date cannot be before the invoice date')
    ])


class PurchaseInvoiceForm(SupplierInvoiceDatesForm):
    supplier_id = IntegerField('Supplier', validators=[InputRequired(message='Supplier is required')])
    purchase_order_id = IntegerField('Purchase Order', validators=[Optional()])
    project_id = IntegerField('Project', validators=[Optional()])
    notes = TextAreaField('Notes', validators=[Optional()])
    discount = FiniteDecimalField('Discount', validators=[
        Optional(),
        NumberRange(min=0, message='Discount cannot be negative')
    ])
