"""Unit tests for general ledger postings"""

from datetime import date
from decimal import Decimal

import pytest

from maritime_erp.errors import PermissionDenied, ValidationError
from maritime_erp.models import GeneralLedgerEntry
from maritime_erp.services import ledger


@pytest.mark.unit
class TestJournalEntries:
    """Test manual journal entries"""

    def test_balanced_entry_posted(self, finance):
        entries = ledger.create_journal_entry({
            "description": "Bank charges",
            "transaction_date": date(2024, 3, 31),
            "lines": [
                {"account_name": "Bank Charges", "debit_amount": "25.00"},
                {"account_name": "Cash at Bank", "credit_amount": "25.00"},
            ],
        }, finance)

        assert len(entries) == 2
        assert all(entry.entry_type == "journal" for entry in entries)
        assert GeneralLedgerEntry.query.count() == 2

    def test_unbalanced_entry_rejected(self, finance):
        with pytest.raises(ValidationError):
            ledger.create_journal_entry({
                "description": "Typo",
                "lines": [
                    {"account_name": "Bank Charges", "debit_amount": "25.00"},
                    {"account_name": "Cash at Bank", "credit_amount": "52.00"},
                ],
            }, finance)

        assert GeneralLedgerEntry.query.count() == 0

    def test_single_line_rejected(self, finance):
        with pytest.raises(ValidationError) as exc:
            ledger.create_journal_entry({
                "description": "Half",
                "lines": [{"account_name": "Bank Charges", "debit_amount": "25.00"}],
            }, finance)

        assert "lines" in exc.value.errors

    def test_line_with_debit_and_credit_rejected(self, finance):
        with pytest.raises(ValidationError) as exc:
            ledger.create_journal_entry({
                "description": "Both",
                "lines": [
                    {"account_name": "A", "debit_amount": "10", "credit_amount": "10"},
                    {"account_name": "B", "credit_amount": "0"},
                ],
            }, finance)

        assert "lines[0]" in exc.value.errors
        assert "lines[1]" in exc.value.errors

    def test_employee_cannot_post(self, employee):
        with pytest.raises(PermissionDenied):
            ledger.create_journal_entry({"description": "x", "lines": []}, employee)


@pytest.mark.unit
class TestPostEntries:
    """Test the balanced posting helper"""

    def test_zero_lines_skipped(self, app):
        rows = ledger.post_entries([
            {"account_name": "A", "debit_amount": Decimal("5")},
            {"account_name": "B", "credit_amount": Decimal("5")},
            {"account_name": "VAT", "credit_amount": Decimal("0")},
        ], entry_type="journal", reference_type="journal_entry", transaction_date=date(2024, 1, 1),
            description="test")

        assert [row.account_name for row in rows] == ["A", "B"]

    def test_balances_and_filters(self, finance):
        ledger.create_journal_entry({
            "description": "Opening balance",
            "transaction_date": date(2024, 1, 1),
            "lines": [
                {"account_name": "Cash at Bank", "debit_amount": "1000"},
                {"account_name": "Owner Equity", "credit_amount": "1000"},
            ],
        }, finance)

        balances = {row["account_name"]: row for row in ledger.account_balances()}
        assert balances["Cash at Bank"]["balance"] == "1000.00"
        assert balances["Owner Equity"]["balance"] == "-1000.00"

        assert ledger.list_ledger_entries(account_name="Cash at Bank").total == 1
        assert ledger.list_ledger_entries(date_from=date(2024, 2, 1)).total == 0
