from wtforms import StringField, TextAreaField, BooleanField, EmailField
from wtforms.validators import DataRequired, Email, Length, Optional, NumberRange

from .common import APIForm, FiniteDecimalField, OptionalSelectField
from ..models.customer import (
    VAT_REGISTRATION_STATUSES, VAT_TREATMENTS, PARTY_TYPES, CUSTOMER_TAX_CATEGORIES,
    PAYMENT_TERMS, CURRENCIES,
)
from ..models.supplier import SUPPLIER_TAX_CATEGORIES


class PartyForm(APIForm):
    name = StringField('Name', validators=[
        DataRequired(message='Name is required'),
        Length(max=200)
    ])
    contact_person = StringField('Contact Person', validators=[Optional(), Length(max=100)])
    email = EmailField('Email', validators=[
        Optional(),
        Email(message='Enter a valid email address'),
        Length(max=120)
    ])
    phone = StringField('Phone', validators=[Optional(), Length(max=20)])
    address = TextAreaField('Address', validators=[Optional()])
    tax_id = StringField('Tax ID', validators=[Optional(), Length(max=50)])
    vat_number = StringField('VAT Number (TRN)', validators=[
        Optional(),
        Length(max=15, message='VAT number must be at most 15 characters')
    ])
    vat_registration_status = OptionalSelectField('VAT Registration Status',
                                                  choices=list(VAT_REGISTRATION_STATUSES),
                                                  validators=[Optional()])
    vat_treatment = OptionalSelectField('VAT Treatment', choices=list(VAT_TREATMENTS), validators=[Optional()])
    payment_terms = OptionalSelectField('Payment Terms', choices=list(PAYMENT_TERMS), validators=[Optional()])
    currency = OptionalSelectField('Currency', choices=list(CURRENCIES), validators=[Optional()])
    credit_limit = FiniteDecimalField('Credit Limit', validators=[
        Optional(),
        NumberRange(min=0, message='Credit limit cannot be negative')
    ])
    is_vat_applicable = BooleanField('VAT Applicable', default=True)
    notes = TextAreaField('Notes', validators=[Optional()])


class CustomerForm(PartyForm):
    phone = StringField('Phone', validators=[
        DataRequired(message='Phone is required'),
        Length(max=20)
    ])
    customer_type = OptionalSelectField('Customer Type', choices=list(PARTY_TYPES), validators=[Optional()])
    tax_category = OptionalSelectField('Tax Category', choices=list(CUSTOMER_TAX_CATEGORIES), validators=[Optional()])


class SupplierForm(PartyForm):
    supplier_type = OptionalSelectField('Supplier Type', choices=list(PARTY_TYPES), validators=[Optional()])
    tax_category = OptionalSelectField('Tax Category', choices=list(SUPPLIER_TAX_CATEGORIES), validators=[Optional()])
    bank_info = TextAreaField('Bank Details', validators=[Optional()])
