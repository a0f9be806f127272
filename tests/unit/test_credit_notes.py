"""Unit tests for credit notes"""

from decimal import Decimal

import pytest

from maritime_erp.errors import ConflictError, InvalidTransitionError, ValidationError
from maritime_erp.models import CreditNoteStatus, InvoiceStatus
from maritime_erp.models import ledger as accounts
from maritime_erp.services import credit_notes, invoices
from maritime_erp.services.ledger import account_balances


def _credit_note(invoice, actor, unit_price="50"):
    return credit_notes.create_credit_note({
        "sales_invoice_id": invoice.id,
        "reason": "Damaged equipment returned",
        "items": [{"description": "Refund", "quantity": 1, "unit_price": unit_price, "tax_rate": 0}],
    }, actor)


@pytest.mark.unit
class TestCreditNotes:
    """Test credit note issue and application"""

    def test_create_defaults_customer_from_invoice(self, admin, customer, approved_invoice):
        credit_note = _credit_note(approved_invoice, admin)

        assert credit_note.status == CreditNoteStatus.DRAFT
        assert credit_note.credit_note_number.startswith("CN-")
        assert credit_note.customer_id == customer.id
        assert credit_note.total_amount == Decimal("50.00")

    def test_draft_invoice_rejected(self, admin, customer, sample_items):
        invoice = invoices.create_sales_invoice({"customer_id": customer.id, "items": sample_items}, admin)

        with pytest.raises(ValidationError):
            _credit_note(invoice, admin)

    def test_apply_reduces_outstanding(self, admin, approved_invoice):
        credit_note = _credit_note(approved_invoice, admin)
        credit_notes.issue_credit_note(credit_note, admin)
        payment = credit_notes.apply_credit_note(credit_note, admin)

        assert credit_note.status == CreditNoteStatus.APPLIED
        assert payment.payment_type == "credit_note"
        assert payment.credit_note_id == credit_note.id
        assert approved_invoice.paid_amount == Decimal("50.00")
        assert approved_invoice.status == InvoiceStatus.PARTIALLY_PAID

        balances = {row["account_name"]: row for row in account_balances()}
        assert balances[accounts.SALES_RETURNS]["debit"] == "50.00"
        assert accounts.CASH_AT_BANK not in balances

    def test_apply_requires_issue(self, admin, approved_invoice):
        credit_note = _credit_note(approved_invoice, admin)

        with pytest.raises(InvalidTransitionError):
            credit_notes.apply_credit_note(credit_note, admin)

        assert approved_invoice.paid_amount == Decimal("0")

    def test_apply_above_outstanding_rolls_back(self, admin, finance, approved_invoice):
        invoices.record_payment(approved_invoice, {"amount": "200"}, finance)
        credit_note = _credit_note(approved_invoice, admin, unit_price="20")
        credit_notes.issue_credit_note(credit_note, admin)

        with pytest.raises(ConflictError):
            credit_notes.apply_credit_note(credit_note, admin)

        assert credit_note.status == CreditNoteStatus.ISSUED
        assert approved_invoice.paid_amount == Decimal("200.00")

    def test_cancelled_note_cannot_be_applied(self, admin, approved_invoice):
        credit_note = _credit_note(approved_invoice, admin)
        credit_notes.cancel_credit_note(credit_note, admin)

        with pytest.raises(InvalidTransitionError):
            credit_notes.apply_credit_note(credit_note, admin)

    def test_list_by_invoice(self, admin, approved_invoice):
        _credit_note(approved_invoice, admin)

        assert credit_notes.list_credit_notes(sales_invoice_id=approved_invoice.id).total == 1
        assert credit_notes.list_credit_notes(status="issued").total == 0
