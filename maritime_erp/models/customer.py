from .. import db
from datetime import datetime

from ..utils.money import format_money

VAT_REGISTRATION_STATUSES = ('not_registered', 'registered', 'exempt', 'suspended')
VAT_TREATMENTS = ('standard', 'zero_rated', 'exempt', 'out_of_scope')
PARTY_TYPES = ('business', 'individual', 'government', 'non_profit')
CUSTOMER_TAX_CATEGORIES = ('standard', 'export', 'gcc_customer', 'free_zone')
PAYMENT_TERMS = ('30_days', '15_days', '7_days', 'immediate', 'net_30', 'net_60', 'net_90')
CURRENCIES = ('AED', 'USD', 'EUR', 'GBP', 'SAR')

PAYMENT_TERM_DAYS = {
    'immediate': 0,
    '7_days': 7,
    '15_days': 15,
    '30_days': 30,
    'net_30': 30,
    'net_60': 60,
    'net_90': 90,
}


class PartyMixin:
    """Columns shared by customers and suppliers (UAE VAT compliance fields)"""
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    contact_person = db.Column(db.String(100))
    email = db.Column(db.String(120))
    address = db.Column(db.Text)
    tax_id = db.Column(db.String(50))
    is_archived = db.Column(db.Boolean, nullable=False, default=False)

    vat_number = db.Column(db.String(15))
    vat_registration_status = db.Column(db.String(20), nullable=False, default='not_registered')
    vat_treatment = db.Column(db.String(20), nullable=False, default='standard')
    tax_category = db.Column(db.String(20), nullable=False, default='standard')
    payment_terms = db.Column(db.String(20), default='30_days')
    currency = db.Column(db.String(3), nullable=False, default='AED')
    credit_limit = db.Column(db.Numeric(12, 2))
    is_vat_applicable = db.Column(db.Boolean, nullable=False, default=True)
    notes = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    EDITABLE_FIELDS = (
        'name', 'contact_person', 'email', 'phone', 'address', 'tax_id',
        'vat_number', 'vat_registration_status', 'vat_treatment', 'tax_category',
        'payment_terms', 'currency', 'credit_limit', 'is_vat_applicable', 'notes',
    )

    def form_data(self):
        """Current values in the shape the validation forms expect"""
        return {field: getattr(self, field) for field in self.EDITABLE_FIELDS}

    def _party_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'contact_person': self.contact_person,
            'email': self.email,
            'phone': self.phone,
            'address': self.address,
            'tax_id': self.tax_id,
            'is_archived': self.is_archived,
            'vat_number': self.vat_number,
            'vat_registration_status': self.vat_registration_status,
            'vat_treatment': self.vat_treatment,
            'tax_category': self.tax_category,
            'payment_terms': self.payment_terms,
            'currency': self.currency,
            'credit_limit': format_money(self.credit_limit),
            'is_vat_applicable': self.is_vat_applicable,
            'notes': self.notes,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }


class Customer(PartyMixin, db.Model):
    __tablename__ = 'customers'

    phone = db.Column(db.String(20), unique=True, nullable=False)
    customer_type = db.Column(db.String(20), nullable=False, default='business')
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'))

    EDITABLE_FIELDS = PartyMixin.EDITABLE_FIELDS + ('customer_type',)

    # Relationships
    quotations = db.relationship('SalesQuotation', backref='customer', lazy=True)
    invoices = db.relationship('SalesInvoice', backref='customer', lazy=True)
    projects = db.relationship('Project', backref='customer', lazy=True)

    def to_dict(self):
        data = self._party_dict()
        data['customer_type'] = self.customer_type
        return data

    def __repr__(self):
        return f'<Customer {self.name}>'
