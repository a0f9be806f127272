"""
General ledger postings.

Receivers below are connected to the document signals when this module is
imported (create_app does so). They only add rows to the session; the sender
commits them together with the document change.
"""
from flask import current_app
from sqlalchemy import func

from .. import db
from ..errors import ValidationError
from ..forms.common import validate_payload
from ..forms.ledger import JournalEntryForm, JournalLineForm
from ..models import GeneralLedgerEntry
from ..models import ledger as accounts
from ..signals import (
    invoice_approved, payment_recorded, purchase_invoice_approved, purchase_payment_recorded,
)
from ..utils.money import ZERO, to_decimal, to_money, format_money
from ..utils.permissions import ensure_permission
from ..utils.timezone_helper import get_local_date
from . import commit_or_rollback


def post_entries(lines, **common):
    """
    Add one GeneralLedgerEntry per non-zero line. Debits must equal credits.

    lines: [{'account_name', 'debit_amount', 'credit_amount', 'description'?}]
    common: column values shared by every row (entry_type, reference_type, ...)
    """
    rows = []
    debit_total = ZERO
    credit_total = ZERO
    for line in lines:
        debit = to_money(line.get('debit_amount') or ZERO)
        credit = to_money(line.get('credit_amount') or ZERO)
        if debit == ZERO and credit == ZERO:
            continue
        debit_total += debit
        credit_total += credit
        values = dict(common)
        values.update(
            account_name=line['account_name'],
            debit_amount=debit,
            credit_amount=credit,
            description=line.get('description') or common.get('description'),
        )
        rows.append(GeneralLedgerEntry(**values))

    if debit_total != credit_total:
        raise ValidationError(
            f'Unbalanced posting: debits {debit_total} != credits {credit_total}',
            {'lines': ['Total debits must equal total credits']}
        )

    db.session.add_all(rows)
    return rows


@invoice_approved.connect
def post_sales_invoice(invoice, actor=None, **extra):
    total = to_money(invoice.total_amount)
    tax = to_money(invoice.tax_amount)
    customer_name = invoice.customer.name if invoice.customer else None
    post_entries(
        [
            {'account_name': accounts.ACCOUNTS_RECEIVABLE, 'debit_amount': total},
            {'account_name': accounts.SALES_REVENUE, 'credit_amount': total - tax},
            {'account_name': accounts.VAT_OUTPUT, 'credit_amount': tax},
        ],
        entry_type='receivable',
        reference_type='sales_invoice',
        reference_id=invoice.id,
        description=f'Sales invoice {invoice.invoice_number} - {customer_name}',
        entity_id=invoice.customer_id,
        entity_name=customer_name,
        project_id=invoice.project_id,
        invoice_number=invoice.invoice_number,
        transaction_date=invoice.invoice_date,
        due_date=invoice.due_date,
        created_by=actor.id if actor else None,
    )


@payment_recorded.connect
def post_invoice_payment(payment, invoice=None, actor=None, **extra):
    invoice = invoice or payment.invoice
    amount = to_money(payment.amount)
    # Credit notes reduce the receivable against returns, not the bank
    debit_account = accounts.SALES_RETURNS if payment.payment_type == 'credit_note' else accounts.CASH_AT_BANK
    customer_name = invoice.customer.name if invoice.customer else None
    post_entries(
        [
            {'account_name': debit_account, 'debit_amount': amount},
            {'account_name': accounts.ACCOUNTS_RECEIVABLE, 'credit_amount': amount},
        ],
        entry_type='payment_received',
        reference_type='invoice_payment',
        reference_id=payment.id,
        description=f'Payment for {invoice.invoice_number} - {customer_name}',
        entity_id=invoice.customer_id,
        entity_name=customer_name,
        project_id=invoice.project_id,
        invoice_number=invoice.invoice_number,
        transaction_date=payment.payment_date,
        created_by=actor.id if actor else None,
        notes=payment.reference_number,
    )


@purchase_invoice_approved.connect
def post_purchase_invoice(invoice, actor=None, **extra):
    total = to_money(invoice.total_amount)
    tax = to_money(invoice.tax_amount)
    supplier_name = invoice.supplier.name if invoice.supplier else None
    post_entries(
        [
            {'account_name': accounts.PURCHASES, 'debit_amount': total - tax},
            {'account_name': accounts.VAT_INPUT, 'debit_amount': tax},
            {'account_name': accounts.ACCOUNTS_PAYABLE, 'credit_amount': total},
        ],
        entry_type='payable',
        reference_type='purchase_invoice',
        reference_id=invoice.id,
        description=f'Purchase invoice {invoice.invoice_number} - {supplier_name}',
        entity_id=invoice.supplier_id,
        entity_name=supplier_name,
        project_id=invoice.project_id,
        invoice_number=invoice.invoice_number,
        transaction_date=invoice.invoice_date,
        due_date=invoice.due_date,
        created_by=actor.id if actor else None,
    )


@purchase_payment_recorded.connect
def post_purchase_payment(payment, invoice=None, actor=None, **extra):
    invoice = invoice or payment.invoice
    amount = to_money(payment.amount)
    supplier_name = invoice.supplier.name if invoice.supplier else None
    post_entries(
        [
            {'account_name': accounts.ACCOUNTS_PAYABLE, 'debit_amount': amount},
            {'account_name': accounts.CASH_AT_BANK, 'credit_amount': amount},
        ],
        entry_type='payment_made',
        reference_type='purchase_payment',
        reference_id=payment.id,
        description=f'Payment for {invoice.invoice_number} - {supplier_name}',
        entity_id=invoice.supplier_id,
        entity_name=supplier_name,
        project_id=invoice.project_id,
        invoice_number=invoice.invoice_number,
        transaction_date=payment.payment_date,
        created_by=actor.id if actor else None,
        notes=payment.reference_number,
    )


def create_journal_entry(data, actor):
    """Manual balanced journal; each line is either a debit or a credit"""
    ensure_permission(actor, 'manage_ledger')
    cleaned = validate_payload(JournalEntryForm, data)

    lines = data.get('lines')
    if not isinstance(lines, list) or len(lines) < 2:
        raise ValidationError('A journal entry needs at least two lines',
                              {'lines': ['At least two lines are required']})

    cleaned_lines = []
    errors = {}
    for index, line in enumerate(lines):
        try:
            line_data = validate_payload(JournalLineForm, line)
        except ValidationError as e:
            for field, messages in e.errors.items():
                errors[f'lines[{index}].{field}'] = messages
            continue
        debit = to_decimal(line_data.get('debit_amount'))
        credit = to_decimal(line_data.get('credit_amount'))
        if (debit > ZERO) == (credit > ZERO):
            errors[f'lines[{index}]'] = ['Enter either a debit or a credit amount']
            continue
        cleaned_lines.append(line_data)
    if errors:
        raise ValidationError('Invalid journal lines', errors)

    try:
        entries = post_entries(
            cleaned_lines,
            entry_type='journal',
            reference_type='journal_entry',
            description=cleaned['description'],
            project_id=cleaned.get('project_id'),
            transaction_date=cleaned.get('transaction_date') or get_local_date(),
            notes=cleaned.get('notes'),
            created_by=actor.id,
        )
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(f'Journal entry "{cleaned["description"]}" posted by {actor.username}')
    return entries


def list_ledger_entries(account_name=None, entry_type=None, reference_type=None, project_id=None,
                        date_from=None, date_to=None, page=1, per_page=10):
    query = GeneralLedgerEntry.query
    if account_name:
        query = query.filter(GeneralLedgerEntry.account_name == account_name)
    if entry_type:
        query = query.filter(GeneralLedgerEntry.entry_type == entry_type)
    if reference_type:
        query = query.filter(GeneralLedgerEntry.reference_type == reference_type)
    if project_id:
        query = query.filter(GeneralLedgerEntry.project_id == project_id)
    if date_from:
        query = query.filter(GeneralLedgerEntry.transaction_date >= date_from)
    if date_to:
        query = query.filter(GeneralLedgerEntry.transaction_date <= date_to)
    return query.order_by(GeneralLedgerEntry.transaction_date.desc(), GeneralLedgerEntry.id.desc()) \
        .paginate(page=page, per_page=per_page, error_out=False)


def account_balances():
    """Debit, credit and balance (debit - credit) per account"""
    rows = db.session.query(
        GeneralLedgerEntry.account_name,
        func.coalesce(func.sum(GeneralLedgerEntry.debit_amount), 0),
        func.coalesce(func.sum(GeneralLedgerEntry.credit_amount), 0),
    ).group_by(GeneralLedgerEntry.account_name).order_by(GeneralLedgerEntry.account_name).all()

    balances = []
    for account_name, debit, credit in rows:
        debit = to_money(to_decimal(debit))
        credit = to_money(to_decimal(credit))
        balances.append({
            'account_name': account_name,
            'debit': format_money(debit),
            'credit': format_money(credit),
            'balance': format_money(debit - credit),
        })
    return balances
