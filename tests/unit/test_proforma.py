"""Unit tests for proforma invoices"""

from decimal import Decimal

import pytest

from maritime_erp.errors import InvalidTransitionError
from maritime_erp.models import ProformaStatus, InvoiceStatus
from maritime_erp.services import proforma


@pytest.fixture
def draft_proforma(admin, customer, sample_items):
    return proforma.create_proforma_invoice({
        "customer_id": customer.id,
        "items": sample_items,
        "delivery_terms": "Ex works Jebel Ali",
    }, admin)


@pytest.mark.unit
class TestProformaInvoices:
    """Test the proforma lifecycle"""

    def test_create(self, draft_proforma):
        assert draft_proforma.proforma_number.startswith("PI-")
        assert draft_proforma.status == ProformaStatus.DRAFT
        assert draft_proforma.total_amount == Decimal("210.00")
        assert draft_proforma.invoice_date is not None

    def test_convert_creates_draft_invoice(self, admin, draft_proforma):
        proforma.mark_proforma_sent(draft_proforma, admin)
        proforma.approve_proforma_invoice(draft_proforma, admin)
        invoice = proforma.convert_proforma_to_invoice(draft_proforma, admin)

        assert draft_proforma.status == ProformaStatus.CONVERTED
        assert draft_proforma.sales_invoice_id == invoice.id
        assert invoice.status == InvoiceStatus.DRAFT
        assert invoice.items == draft_proforma.items
        assert invoice.total_amount == Decimal("210.00")

    def test_convert_requires_approval(self, admin, draft_proforma):
        with pytest.raises(InvalidTransitionError):
            proforma.convert_proforma_to_invoice(draft_proforma, admin)

        assert draft_proforma.status == ProformaStatus.DRAFT
        assert draft_proforma.sales_invoice_id is None

    def test_expired_is_terminal(self, admin, draft_proforma):
        proforma.expire_proforma_invoice(draft_proforma, admin)

        with pytest.raises(InvalidTransitionError):
            proforma.approve_proforma_invoice(draft_proforma, admin)

    def test_update_only_before_approval(self, admin, draft_proforma):
        proforma.update_proforma_invoice(draft_proforma, {"discount": "10"}, admin)
        assert draft_proforma.total_amount == Decimal("200.00")

        proforma.approve_proforma_invoice(draft_proforma, admin)
        with pytest.raises(InvalidTransitionError):
            proforma.update_proforma_invoice(draft_proforma, {"discount": "0"}, admin)

    def test_archive_is_idempotent(self, admin, draft_proforma):
        proforma.archive_proforma_invoice(draft_proforma, admin)
        proforma.archive_proforma_invoice(draft_proforma, admin)

        assert draft_proforma.is_archived is True
        assert proforma.list_proforma_invoices().total == 0
