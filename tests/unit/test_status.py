"""Unit tests for lifecycle transition tables"""

import pytest

from maritime_erp.errors import InvalidTransitionError
from maritime_erp.models.status import (
    TRANSITIONS, QuotationStatus, InvoiceStatus, ProformaStatus, CreditNoteStatus,
    PurchaseOrderStatus, can_transition, ensure_transition,
)


@pytest.mark.unit
class TestTransitionTables:
    """Test the allowed-move tables"""

    def test_every_state_has_an_entry(self):
        for enum_cls, table in TRANSITIONS.items():
            assert set(table) == set(enum_cls)

    def test_targets_belong_to_the_same_enum(self):
        for enum_cls, table in TRANSITIONS.items():
            for targets in table.values():
                assert all(isinstance(target, enum_cls) for target in targets)

    @pytest.mark.parametrize("state", [
        QuotationStatus.REJECTED,
        QuotationStatus.CONVERTED,
        InvoiceStatus.PAID,
        ProformaStatus.CONVERTED,
        ProformaStatus.EXPIRED,
        CreditNoteStatus.APPLIED,
        CreditNoteStatus.CANCELLED,
        PurchaseOrderStatus.RECEIVED,
        PurchaseOrderStatus.CANCELLED,
    ])
    def test_terminal_states(self, state):
        assert TRANSITIONS[type(state)][state] == set()

    def test_quotation_path(self):
        assert can_transition(QuotationStatus.DRAFT, QuotationStatus.APPROVED)
        assert can_transition(QuotationStatus.APPROVED, QuotationStatus.CONVERTED)
        assert not can_transition(QuotationStatus.DRAFT, QuotationStatus.CONVERTED)
        assert not can_transition(QuotationStatus.CONVERTED, QuotationStatus.APPROVED)

    def test_sent_quotation_can_only_be_rejected(self):
        assert TRANSITIONS[QuotationStatus][QuotationStatus.SENT] == {QuotationStatus.REJECTED}
        assert not can_transition(QuotationStatus.SENT, QuotationStatus.APPROVED)
        assert not can_transition(QuotationStatus.SENT, QuotationStatus.CONVERTED)

    def test_invoice_cannot_skip_approval(self):
        assert not can_transition(InvoiceStatus.DRAFT, InvoiceStatus.PAID)
        assert not can_transition(InvoiceStatus.DRAFT, InvoiceStatus.PARTIALLY_PAID)

    def test_stored_string_is_accepted_as_current(self):
        assert can_transition("draft", QuotationStatus.SENT)

    def test_ensure_transition_raises(self):
        with pytest.raises(InvalidTransitionError) as exc:
            ensure_transition(QuotationStatus.CONVERTED, QuotationStatus.APPROVED)

        assert exc.value.status_code == 409
        assert exc.value.current == QuotationStatus.CONVERTED
        assert "converted" in exc.value.message
