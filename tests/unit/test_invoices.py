"""Unit tests for sales invoices, payment reconciliation and receivables"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from maritime_erp import db
from maritime_erp.errors import ConflictError, InvalidTransitionError, PermissionDenied, ValidationError
from maritime_erp.models import InvoiceStatus, InvoicePayment, GeneralLedgerEntry
from maritime_erp.models import ledger as accounts
from maritime_erp.services import invoices, receivables
from maritime_erp.services.ledger import account_balances


def _balances():
    return {row["account_name"]: row for row in account_balances()}


@pytest.mark.unit
class TestSalesInvoiceLifecycle:
    """Test draft creation and approval"""

    def test_create_draft_without_number(self, admin, customer, sample_items):
        invoice = invoices.create_sales_invoice({"customer_id": customer.id, "items": sample_items}, admin)

        assert invoice.status == InvoiceStatus.DRAFT
        assert invoice.invoice_number is None
        assert invoice.paid_amount == Decimal("0")
        assert invoice.total_amount == Decimal("210.00")
        assert (invoice.due_date - invoice.invoice_date).days == 30

    def test_due_date_before_invoice_date_rejected(self, admin, customer, sample_items):
        with pytest.raises(ValidationError) as exc:
            invoices.create_sales_invoice({
                "customer_id": customer.id,
                "items": sample_items,
                "invoice_date": date(2024, 5, 10),
                "due_date": date(2024, 5, 1),
            }, admin)

        assert "due_date" in exc.value.errors

    def test_approval_assigns_number_and_posts_ledger(self, approved_invoice):
        assert approved_invoice.invoice_number.startswith("INV-")
        assert approved_invoice.status == InvoiceStatus.UNPAID

        balances = _balances()
        assert balances[accounts.ACCOUNTS_RECEIVABLE]["debit"] == "210.00"
        assert balances[accounts.SALES_REVENUE]["credit"] == "200.00"
        assert balances[accounts.VAT_OUTPUT]["credit"] == "10.00"

    def test_only_drafts_are_editable(self, admin, approved_invoice):
        with pytest.raises(InvalidTransitionError):
            invoices.update_sales_invoice(approved_invoice, {"remarks": "changed"}, admin)

    def test_approve_twice_rejected(self, admin, approved_invoice):
        with pytest.raises(InvalidTransitionError):
            invoices.approve_sales_invoice(approved_invoice, admin)

        assert GeneralLedgerEntry.query.filter_by(reference_type="sales_invoice").count() == 3


@pytest.mark.unit
class TestRecordPayment:
    """Test payment reconciliation"""

    def test_partial_then_full_payment(self, finance, approved_invoice):
        """210.00 invoice: 100.00 leaves 110.00 outstanding, 110.00 more settles it"""
        invoices.record_payment(approved_invoice, {"amount": "100.00"}, finance)

        assert approved_invoice.paid_amount == Decimal("100.00")
        assert approved_invoice.status == InvoiceStatus.PARTIALLY_PAID
        assert approved_invoice.outstanding_amount == Decimal("110.00")

        invoices.record_payment(approved_invoice, {"amount": "110.00"}, finance)

        assert approved_invoice.paid_amount == Decimal("210.00")
        assert approved_invoice.status == InvoiceStatus.PAID
        assert approved_invoice.outstanding_amount == Decimal("0.00")
        assert len(approved_invoice.payments) == 2

    def test_paid_amount_equals_sum_of_payments(self, finance, approved_invoice):
        for amount in ("10.10", "20.20", "30.30"):
            invoices.record_payment(approved_invoice, {"amount": amount}, finance)

        total = sum((p.amount for p in InvoicePayment.query.filter_by(invoice_id=approved_invoice.id)),
                    Decimal("0"))
        assert approved_invoice.paid_amount == total == Decimal("60.60")

    def test_overpayment_rejected(self, finance, approved_invoice):
        invoices.record_payment(approved_invoice, {"amount": "200"}, finance)

        with pytest.raises(ConflictError):
            invoices.record_payment(approved_invoice, {"amount": "10.01"}, finance)

        assert approved_invoice.paid_amount == Decimal("200.00")
        assert InvoicePayment.query.count() == 1

    def test_overpayment_allowed_by_config(self, app, finance, approved_invoice):
        app.config["ALLOW_OVERPAYMENT"] = True
        invoices.record_payment(approved_invoice, {"amount": "250"}, finance)

        assert approved_invoice.status == InvoiceStatus.PAID
        assert approved_invoice.paid_amount == Decimal("250.00")

    def test_payment_on_paid_invoice_rejected(self, finance, approved_invoice):
        invoices.record_payment(approved_invoice, {"amount": "210"}, finance)

        with pytest.raises(ConflictError):
            invoices.record_payment(approved_invoice, {"amount": "1"}, finance)

    def test_payment_on_draft_rejected(self, admin, customer, sample_items):
        invoice = invoices.create_sales_invoice({"customer_id": customer.id, "items": sample_items}, admin)

        with pytest.raises(InvalidTransitionError):
            invoices.record_payment(invoice, {"amount": "50"}, admin)

        assert invoice.paid_amount == Decimal("0")
        assert invoice.status == InvoiceStatus.DRAFT

    @pytest.mark.parametrize("amount", ["0", "-5", "abc", "NaN", "Infinity", "sNaN"])
    def test_invalid_amount_rejected(self, finance, approved_invoice, amount):
        with pytest.raises(ValidationError):
            invoices.record_payment(approved_invoice, {"amount": amount}, finance)

    def test_missing_amount_rejected(self, finance, approved_invoice):
        with pytest.raises(ValidationError) as exc:
            invoices.record_payment(approved_invoice, {"payment_method": "cash"}, finance)

        assert "amount" in exc.value.errors

    def test_project_manager_cannot_record(self, project_manager, approved_invoice):
        with pytest.raises(PermissionDenied):
            invoices.record_payment(approved_invoice, {"amount": "10"}, project_manager)

    def test_payment_posts_balanced_entries(self, finance, approved_invoice):
        invoices.record_payment(approved_invoice, {"amount": "100"}, finance)

        balances = _balances()
        assert balances[accounts.CASH_AT_BANK]["debit"] == "100.00"
        assert balances[accounts.ACCOUNTS_RECEIVABLE]["balance"] == "110.00"

        debit = sum((e.debit_amount for e in GeneralLedgerEntry.query), Decimal("0"))
        credit = sum((e.credit_amount for e in GeneralLedgerEntry.query), Decimal("0"))
        assert debit == credit

    def test_payment_method_and_reference_stored(self, finance, approved_invoice):
        payment = invoices.record_payment(approved_invoice, {
            "amount": "50",
            "payment_method": "cheque",
            "reference_number": "CHQ-778",
            "payment_date": date(2024, 6, 1),
        }, finance)

        assert payment.payment_method == "cheque"
        assert payment.reference_number == "CHQ-778"
        assert payment.payment_date == date(2024, 6, 1)
        assert payment.recorded_by == finance.id


@pytest.mark.unit
class TestOverdue:
    """Test the overdue overlay and its persistence"""

    @pytest.fixture
    def past_due_invoice(self, admin, customer, sample_items):
        invoice = invoices.create_sales_invoice({
            "customer_id": customer.id,
            "items": sample_items,
            "invoice_date": date(2024, 1, 1),
            "due_date": date(2024, 1, 31),
        }, admin)
        invoices.approve_sales_invoice(invoice, admin)
        return invoice

    def test_effective_status_is_overdue(self, past_due_invoice):
        assert past_due_invoice.effective_status(date(2024, 2, 1)) == InvoiceStatus.OVERDUE
        assert past_due_invoice.effective_status(date(2024, 1, 31)) == InvoiceStatus.APPROVED
        assert past_due_invoice.status == InvoiceStatus.APPROVED

    def test_overdue_filter_uses_overlay(self, past_due_invoice):
        assert invoices.list_sales_invoices(status="overdue", today=date(2024, 2, 1)).total == 1
        assert invoices.list_sales_invoices(status="overdue", today=date(2024, 1, 15)).total == 0

    def test_refresh_persists_overdue(self, past_due_invoice):
        changed = invoices.refresh_open_invoices(today=date(2024, 3, 1), persist_overdue=True)

        assert changed == 1
        db.session.refresh(past_due_invoice)
        assert past_due_invoice.status == InvoiceStatus.OVERDUE

    def test_payment_on_overdue_invoice(self, finance, past_due_invoice):
        invoices.refresh_open_invoices(today=date(2024, 3, 1), persist_overdue=True)
        invoices.record_payment(past_due_invoice, {"amount": "210"}, finance)

        assert past_due_invoice.status == InvoiceStatus.PAID

    def test_receivables_overdue_first(self, admin, customer, sample_items, past_due_invoice, approved_invoice):
        rows = receivables.list_receivables(today=date.today())

        assert [row["invoice_id"] for row in rows] == [past_due_invoice.id, approved_invoice.id]
        assert rows[0]["is_overdue"] is True
        assert rows[0]["outstanding_amount"] == Decimal("210.00")
        assert rows[1]["is_overdue"] is False

    def test_receivables_exclude_paid_and_draft(self, admin, finance, customer, sample_items, approved_invoice):
        invoices.create_sales_invoice({"customer_id": customer.id, "items": sample_items}, admin)
        invoices.record_payment(approved_invoice, {"amount": "210"}, finance)

        assert receivables.list_receivables() == []

    def test_receivables_summary(self, past_due_invoice, approved_invoice):
        summary = receivables.receivables_summary(today=date.today())

        assert summary["total_outstanding"] == Decimal("420.00")
        assert summary["overdue_outstanding"] == Decimal("210.00")
        assert summary["open_invoices"] == 2
        assert summary["overdue_invoices"] == 1
