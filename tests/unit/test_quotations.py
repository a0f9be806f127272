"""Unit tests for the quotation lifecycle"""

from decimal import Decimal

import pytest

from maritime_erp.errors import InvalidTransitionError, PermissionDenied, ValidationError, NotFoundError
from maritime_erp.models import QuotationStatus, InvoiceStatus, SalesInvoice, SalesQuotation
from maritime_erp.services import quotations


@pytest.mark.unit
class TestQuotationService:
    """Test quotation creation, approval and conversion"""

    def test_create_computes_totals(self, draft_quotation):
        assert draft_quotation.status == QuotationStatus.DRAFT
        assert draft_quotation.quotation_number.startswith("QT-")
        assert draft_quotation.subtotal == Decimal("200.00")
        assert draft_quotation.tax_amount == Decimal("10.00")
        assert draft_quotation.total_amount == Decimal("210.00")

    def test_create_requires_items(self, admin, customer):
        with pytest.raises(ValidationError) as exc:
            quotations.create_quotation({"customer_id": customer.id, "items": []}, admin)

        assert "items" in exc.value.errors

    def test_create_requires_known_customer(self, admin, sample_items):
        with pytest.raises(NotFoundError):
            quotations.create_quotation({"customer_id": 999, "items": sample_items}, admin)

    def test_employee_cannot_create(self, employee, customer, sample_items):
        with pytest.raises(PermissionDenied):
            quotations.create_quotation({"customer_id": customer.id, "items": sample_items}, employee)

    def test_update_recomputes_totals(self, admin, draft_quotation):
        quotations.update_quotation(draft_quotation, {
            "items": [{"description": "Hull cleaning", "quantity": 1, "unit_price": "1000", "tax_rate": 5}],
            "discount": "50",
            "remarks": "Revised",
        }, admin)

        assert draft_quotation.total_amount == Decimal("1000.00")
        assert draft_quotation.discount == Decimal("50.00")
        assert draft_quotation.remarks == "Revised"

    def test_failed_update_leaves_quotation_unchanged(self, admin, draft_quotation):
        with pytest.raises(ValidationError):
            quotations.update_quotation(draft_quotation, {
                "items": [{"description": "Bad", "quantity": -1, "unit_price": 10}],
            }, admin)

        assert draft_quotation.total_amount == Decimal("210.00")

    @pytest.mark.parametrize("value", ["NaN", "Infinity", "sNaN"])
    def test_non_finite_quantity_rejected(self, admin, customer, value):
        with pytest.raises(ValidationError) as exc:
            quotations.create_quotation({
                "customer_id": customer.id,
                "items": [{"description": "Towage", "quantity": value, "unit_price": "100"}],
            }, admin)

        assert "items[0].quantity" in exc.value.errors
        assert SalesQuotation.query.count() == 0

    def test_stored_total_adds_up_after_rounding(self, admin, customer):
        """0.125 rounds to 0.13 and 0.005 VAT to 0.01; the total is built from those"""
        quotation = quotations.create_quotation({
            "customer_id": customer.id,
            "items": [{"description": "Mooring line", "quantity": 1, "unit_price": "0.125", "tax_rate": 4}],
        }, admin)

        assert quotation.subtotal == Decimal("0.13")
        assert quotation.tax_amount == Decimal("0.01")
        assert quotation.total_amount == Decimal("0.14")
        assert quotation.total_amount == quotation.subtotal - quotation.discount + quotation.tax_amount

    def test_approve_then_convert_copies_items(self, admin, customer, draft_quotation):
        """Approved quotation becomes a draft invoice for the same customer with identical items"""
        quotations.approve_quotation(draft_quotation, admin)
        invoice = quotations.convert_quotation_to_invoice(draft_quotation, admin)

        assert draft_quotation.status == QuotationStatus.CONVERTED
        assert invoice.status == InvoiceStatus.DRAFT
        assert invoice.customer_id == customer.id
        assert invoice.items == draft_quotation.items
        assert invoice.total_amount == draft_quotation.total_amount
        assert invoice.quotation_id == draft_quotation.id
        assert invoice.invoice_number is None
        assert invoice.due_date > invoice.invoice_date

    def test_approve_converted_quotation_rejected(self, admin, draft_quotation):
        """Approving a converted quotation fails and keeps the status"""
        quotations.approve_quotation(draft_quotation, admin)
        quotations.convert_quotation_to_invoice(draft_quotation, admin)

        with pytest.raises(InvalidTransitionError):
            quotations.approve_quotation(draft_quotation, admin)

        assert draft_quotation.status == QuotationStatus.CONVERTED

    def test_convert_requires_approval(self, admin, draft_quotation):
        with pytest.raises(InvalidTransitionError):
            quotations.convert_quotation_to_invoice(draft_quotation, admin)

        assert draft_quotation.status == QuotationStatus.DRAFT
        assert SalesInvoice.query.count() == 0

    def test_finance_cannot_approve(self, finance, draft_quotation):
        with pytest.raises(PermissionDenied):
            quotations.approve_quotation(draft_quotation, finance)

        assert draft_quotation.status == QuotationStatus.DRAFT

    def test_sent_quotation_can_be_rejected(self, admin, draft_quotation):
        quotations.mark_quotation_sent(draft_quotation, admin)
        quotations.reject_quotation(draft_quotation, admin)

        assert draft_quotation.status == QuotationStatus.REJECTED

    def test_converted_quotation_cannot_be_edited(self, admin, draft_quotation):
        quotations.approve_quotation(draft_quotation, admin)
        quotations.convert_quotation_to_invoice(draft_quotation, admin)

        with pytest.raises(InvalidTransitionError):
            quotations.update_quotation(draft_quotation, {"remarks": "late change"}, admin)

    def test_archive_hides_from_default_listing(self, admin, draft_quotation):
        quotations.archive_quotation(draft_quotation, admin)
        quotations.archive_quotation(draft_quotation, admin)

        assert quotations.list_quotations().total == 0
        assert quotations.list_quotations(show_archived=True).total == 1

        quotations.unarchive_quotation(draft_quotation, admin)
        assert quotations.list_quotations().total == 1

    def test_list_filters_by_status(self, admin, draft_quotation):
        assert quotations.list_quotations(status="draft").total == 1
        assert quotations.list_quotations(status="approved").total == 0

        with pytest.raises(ValidationError):
            quotations.list_quotations(status="bogus")
