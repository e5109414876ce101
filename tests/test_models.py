"""Tests for receipt data models."""

import pytest

from receipt_log.models import LineItem, LogRecord, Receipt, RecordOutcome


class TestLineItem:
    """Tests for LineItem model."""

    def test_create_line_item(self):
        """Test creating a basic line item."""
        item = LineItem(
            name="Widget",
            quantity="1",
            price_per_unit="0.00",
            total_price="9.90"
        )

        assert item.name == "Widget"
        assert item.quantity == "1"
        assert item.price_per_unit == "0.00"
        assert item.total_price == "9.90"

    def test_line_item_defaults(self):
        """Test line item fields default to empty strings."""
        item = LineItem()

        assert item.name == ''
        assert item.total_price == ''


class TestReceipt:
    """Tests for Receipt model."""

    @pytest.fixture
    def sample_receipt(self):
        """Receipt whose line items add up to its total."""
        return Receipt(
            line_number=1,
            date="2024-03-28",
            total="29.90",
            merchant="Coles",
            is_receipt=True,
            line_items=[
                LineItem("LINSEED", "0.0", "0.00", "9.90"),
                LineItem("TULIPS", "0.0", "0.00", "20.00"),
            ]
        )

    def test_receipt_defaults(self):
        """Test an empty receipt is not a receipt and has no items."""
        receipt = Receipt()

        assert receipt.is_receipt is False
        assert receipt.is_reconciled is False
        assert receipt.line_items == []

    def test_line_items_not_shared(self):
        """Test each receipt owns its own line item list."""
        first = Receipt()
        second = Receipt()
        first.line_items.append(LineItem(name="Widget"))

        assert second.line_items == []

    def test_calculate_line_items_total(self, sample_receipt):
        """Test line item totals are summed as floats."""
        assert sample_receipt.calculate_line_items_total() == 9.9 + 20.0

    def test_calculate_total_missing_price(self, sample_receipt):
        """Test a line item without a total price gives no sum."""
        sample_receipt.line_items.append(LineItem(name="Mystery"))

        assert sample_receipt.calculate_line_items_total() is None

    def test_check_reconciled(self, sample_receipt):
        """Test matching totals reconcile."""
        assert sample_receipt.check_reconciled() is True

    def test_check_reconciled_mismatch(self, sample_receipt):
        """Test a stated total that differs from the items does not reconcile."""
        sample_receipt.total = "29.91"

        assert sample_receipt.check_reconciled() is False

    def test_check_reconciled_missing_price(self, sample_receipt):
        """Test one line item without a total price blocks reconciliation."""
        sample_receipt.line_items.append(LineItem(name="Mystery"))

        assert sample_receipt.check_reconciled() is False

    def test_check_reconciled_uses_float_equality(self):
        """Test the sum is compared with float ==, without tolerance."""
        receipt = Receipt(
            total="0.30",
            line_items=[
                LineItem(total_price="0.10"),
                LineItem(total_price="0.20"),
            ]
        )

        assert receipt.check_reconciled() is (0.1 + 0.2 == 0.3)
        assert receipt.check_reconciled() is False

    def test_no_line_items_zero_total(self):
        """Test a receipt without items reconciles only at zero."""
        assert Receipt(total="0.00").check_reconciled() is True
        assert Receipt(total="").check_reconciled() is True
        assert Receipt(total="5.00").check_reconciled() is False

    def test_unparseable_total_counts_as_zero(self):
        """Test a garbage total is read as zero."""
        receipt = Receipt(total="abc", line_items=[LineItem(total_price="1.00")])

        assert receipt.check_reconciled() is False
        assert Receipt(total="abc").check_reconciled() is True

    def test_empty_total_from_cleanup(self):
        """Test the ".00" produced for a missing total reads as zero."""
        assert Receipt(total=".00").check_reconciled() is True

    def test_dedupe_key(self, sample_receipt):
        """Test the dedupe key is date, total and merchant."""
        assert sample_receipt.dedupe_key() == ("2024-03-28", "29.90", "Coles")


class TestLogRecord:
    """Tests for LogRecord model."""

    def test_log_record_is_immutable(self):
        """Test log records cannot be modified after creation."""
        record = LogRecord(text="01-02-2023 foo", line_number=1)

        with pytest.raises(AttributeError):
            record.text = "changed"


class TestRecordOutcome:
    """Tests for RecordOutcome model."""

    def test_parsed_outcome(self):
        """Test a parsed outcome carries its receipt."""
        receipt = Receipt(is_receipt=True)
        outcome = RecordOutcome(RecordOutcome.PARSED, 3, receipt=receipt)

        assert outcome.is_parsed
        assert outcome.receipt is receipt
        assert outcome.reason is None

    def test_failed_outcome(self):
        """Test a failed outcome is not parsed and has a reason."""
        outcome = RecordOutcome(RecordOutcome.FAILED, 7, reason="unknown key: foo")

        assert not outcome.is_parsed
        assert outcome.reason == "unknown key: foo"
