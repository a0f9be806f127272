"""Unit tests for purchase requests, orders, supplier invoices and payables"""

from datetime import date
from decimal import Decimal

import pytest

from maritime_erp.errors import ConflictError, InvalidTransitionError, PermissionDenied, ValidationError
from maritime_erp.models import (
    PurchaseRequestStatus, PurchaseOrderStatus, PurchaseInvoiceStatus, ApprovalStatus,
)
from maritime_erp.models import ledger as accounts
from maritime_erp.services import purchases
from maritime_erp.services.ledger import account_balances

ORDER_ITEMS = [{"description": "Anti-fouling paint (20L)", "quantity": 10, "unit_price": "650", "tax_rate": 5}]


@pytest.fixture
def purchase_request(project_manager):
    return purchases.create_purchase_request({
        "urgency": "high",
        "reason": "Stock for dry dock job",
        "items": [{"description": "Shackles 2T", "quantity": 20, "unit_price": "35"}],
    }, project_manager)


@pytest.fixture
def confirmed_order(admin, supplier):
    order = purchases.create_purchase_order({"supplier_id": supplier.id, "items": ORDER_ITEMS}, admin)
    purchases.send_purchase_order(order, admin)
    purchases.confirm_purchase_order(order, admin)
    return order


@pytest.fixture
def approved_purchase_invoice(admin, confirmed_order):
    invoice = purchases.convert_order_to_invoice(
        confirmed_order, "SUP-INV-001", date(2024, 4, 1), date(2024, 5, 1), admin
    )
    purchases.approve_purchase_invoice(invoice, admin)
    return invoice


@pytest.mark.unit
class TestPurchaseRequests:
    """Test the request approval flow"""

    def test_create_pending(self, purchase_request, project_manager):
        assert purchase_request.status == PurchaseRequestStatus.PENDING
        assert purchase_request.request_number.startswith("PR-")
        assert purchase_request.requested_by == project_manager.id
        assert purchase_request.items[0]["quantity"] == "20"

    def test_project_manager_cannot_approve(self, project_manager, purchase_request):
        with pytest.raises(PermissionDenied):
            purchases.approve_purchase_request(purchase_request, project_manager)

    def test_convert_to_order(self, admin, supplier, purchase_request):
        purchases.approve_purchase_request(purchase_request, admin)
        order = purchases.convert_request_to_order(purchase_request, supplier.id, admin)

        assert purchase_request.status == PurchaseRequestStatus.COMPLETED
        assert order.status == PurchaseOrderStatus.DRAFT
        assert order.purchase_request_id == purchase_request.id
        assert order.total_amount == Decimal("700.00")

    def test_convert_needs_prices(self, admin, supplier, project_manager):
        request = purchases.create_purchase_request({
            "items": [{"description": "Spare pump", "quantity": 1}],
        }, project_manager)
        purchases.approve_purchase_request(request, admin)

        with pytest.raises(ValidationError) as exc:
            purchases.convert_request_to_order(request, supplier.id, admin)

        assert "items[0].unit_price" in exc.value.errors
        assert request.status == PurchaseRequestStatus.APPROVED

    def test_rejected_request_cannot_convert(self, admin, supplier, purchase_request):
        purchases.reject_purchase_request(purchase_request, admin, reason="Over budget")

        assert purchase_request.rejection_reason == "Over budget"
        with pytest.raises(InvalidTransitionError):
            purchases.convert_request_to_order(purchase_request, supplier.id, admin)


@pytest.mark.unit
class TestPurchaseOrders:
    """Test purchase order states"""

    def test_create_computes_totals(self, confirmed_order):
        assert confirmed_order.po_number.startswith("PO-")
        assert confirmed_order.subtotal == Decimal("6500.00")
        assert confirmed_order.tax_amount == Decimal("325.00")
        assert confirmed_order.total_amount == Decimal("6825.00")

    def test_receive_sets_date(self, admin, confirmed_order):
        purchases.receive_purchase_order(confirmed_order, admin)

        assert confirmed_order.status == PurchaseOrderStatus.RECEIVED
        assert confirmed_order.received_date is not None

    def test_cancelled_order_cannot_be_sent(self, admin, supplier):
        order = purchases.create_purchase_order({"supplier_id": supplier.id, "items": ORDER_ITEMS}, admin)
        purchases.cancel_purchase_order(order, admin)

        with pytest.raises(InvalidTransitionError):
            purchases.send_purchase_order(order, admin)

    def test_draft_order_cannot_be_invoiced(self, admin, supplier):
        order = purchases.create_purchase_order({"supplier_id": supplier.id, "items": ORDER_ITEMS}, admin)

        with pytest.raises(InvalidTransitionError):
            purchases.convert_order_to_invoice(order, "SUP-1", date(2024, 4, 1), date(2024, 5, 1), admin)

    def test_only_draft_orders_editable(self, admin, confirmed_order):
        with pytest.raises(InvalidTransitionError):
            purchases.update_purchase_order(confirmed_order, {"notes": "late"}, admin)


@pytest.mark.unit
class TestPurchaseInvoices:
    """Test supplier invoices and payments"""

    def test_convert_copies_totals(self, approved_purchase_invoice, confirmed_order):
        assert approved_purchase_invoice.purchase_order_id == confirmed_order.id
        assert approved_purchase_invoice.total_amount == Decimal("6825.00")
        assert approved_purchase_invoice.approval_status == ApprovalStatus.APPROVED
        assert approved_purchase_invoice.status == PurchaseInvoiceStatus.PENDING

    def test_duplicate_supplier_number_conflicts(self, admin, confirmed_order, approved_purchase_invoice):
        with pytest.raises(ConflictError):
            purchases.convert_order_to_invoice(
                confirmed_order, "SUP-INV-001", date(2024, 4, 1), date(2024, 5, 1), admin
            )

    def test_approval_posts_payable(self, approved_purchase_invoice):
        balances = {row["account_name"]: row for row in account_balances()}

        assert balances[accounts.ACCOUNTS_PAYABLE]["credit"] == "6825.00"
        assert balances[accounts.PURCHASES]["debit"] == "6500.00"
        assert balances[accounts.VAT_INPUT]["debit"] == "325.00"

    def test_payments_settle_invoice(self, finance, approved_purchase_invoice):
        purchases.record_purchase_payment(approved_purchase_invoice, {"amount": "825"}, finance)
        assert approved_purchase_invoice.status == PurchaseInvoiceStatus.PARTIALLY_PAID
        assert approved_purchase_invoice.outstanding_amount == Decimal("6000.00")

        purchases.record_purchase_payment(approved_purchase_invoice, {"amount": "6000"}, finance)
        assert approved_purchase_invoice.status == PurchaseInvoiceStatus.PAID

    def test_overpayment_rejected(self, finance, approved_purchase_invoice):
        with pytest.raises(ConflictError):
            purchases.record_purchase_payment(approved_purchase_invoice, {"amount": "7000"}, finance)

        assert approved_purchase_invoice.paid_amount == Decimal("0")

    def test_unapproved_invoice_cannot_be_paid(self, admin, finance, supplier):
        invoice = purchases.create_purchase_invoice({
            "supplier_id": supplier.id,
            "invoice_number": "SUP-INV-777",
            "invoice_date": "2024-04-01",
            "due_date": "2024-04-30",
            "items": ORDER_ITEMS,
        }, admin)

        with pytest.raises(InvalidTransitionError):
            purchases.record_purchase_payment(invoice, {"amount": "100"}, finance)

    def test_payables_list(self, finance, approved_purchase_invoice):
        rows = purchases.list_payables(today=date(2024, 5, 15))

        assert len(rows) == 1
        assert rows[0]["is_overdue"] is True
        assert rows[0]["days_overdue"] == 14
        assert rows[0]["outstanding_amount"] == Decimal("6825.00")

        purchases.record_purchase_payment(approved_purchase_invoice, {"amount": "6825"}, finance)
        assert purchases.list_payables(today=date(2024, 5, 15)) == []
