from .. import db
from datetime import datetime

from .base import isoformat
from ..utils.money import format_money

ENTRY_TYPES = ('receivable', 'payable', 'payment_received', 'payment_made', 'journal')

# Chart of accounts used by automatic postings
ACCOUNTS_RECEIVABLE = 'Accounts Receivable'
ACCOUNTS_PAYABLE = 'Accounts Payable'
SALES_REVENUE = 'Sales Revenue'
SALES_RETURNS = 'Sales Returns'
VAT_OUTPUT = 'VAT Output'
VAT_INPUT = 'VAT Input'
PURCHASES = 'Purchases'
CASH_AT_BANK = 'Cash at Bank'


class GeneralLedgerEntry(db.Model):
    __tablename__ = 'general_ledger_entries'

    id = db.Column(db.Integer, primary_key=True)
    entry_type = db.Column(db.String(30), nullable=False)
    reference_type = db.Column(db.String(30), nullable=False)  # sales_invoice, invoice_payment, purchase_invoice, ...
    reference_id = db.Column(db.Integer)
    account_name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=False)
    debit_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    credit_amount = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    entity_id = db.Column(db.Integer)
    entity_name = db.Column(db.String(200))
    project_id = db.Column(db.Integer, db.ForeignKey('projects.id'))
    invoice_number = db.Column(db.String(100))
    transaction_date = db.Column(db.Date, nullable=False)
    due_date = db.Column(db.Date)
    status = db.Column(db.String(20), nullable=False, default='posted')
    notes = db.Column(db.Text)
    created_by = db.Column(db.Integer, db.ForeignKey('users.id'))
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'entry_type': self.entry_type,
            'reference_type': self.reference_type,
            'reference_id': self.reference_id,
            'account_name': self.account_name,
            'description': self.description,
            'debit_amount': format_money(self.debit_amount),
            'credit_amount': format_money(self.credit_amount),
            'entity_id': self.entity_id,
            'entity_name': self.entity_name,
            'project_id': self.project_id,
            'invoice_number': self.invoice_number,
            'transaction_date': isoformat(self.transaction_date),
            'due_date': isoformat(self.due_date),
            'status': self.status,
            'notes': self.notes,
            'created_by': self.created_by,
            'created_at': isoformat(self.created_at),
        }

    def __repr__(self):
        return f'<GeneralLedgerEntry {self.account_name} Dr {self.debit_amount} Cr {self.credit_amount}>'
