"""Tests for log record reassembly."""

import logging
import os

import pytest

from receipt_log.errors import LogFileError
from receipt_log.models import RecordOutcome
from receipt_log.reassembler import (
    iter_log_records,
    parse_log_lines,
    process_log_file,
    starts_record,
)

DATA_DIR = os.path.join(os.path.dirname(__file__), 'data')


class TestStartsRecord:
    """Tests for record boundary detection."""

    def test_dated_line(self):
        """Test a leading DD-MM-YYYY stamp starts a record."""
        assert starts_record("01-02-2023 foo")

    def test_plain_line(self):
        """Test lines without a stamp never start a record."""
        assert not starts_record("foo bar")

    def test_stamp_not_at_start(self):
        """Test a stamp later in the line does not count."""
        assert not starts_record("  01-02-2023 foo")
        assert not starts_record("at 01-02-2023")

    def test_other_date_formats(self):
        """Test ISO dates do not start a record."""
        assert not starts_record("2023-02-01 foo")


class TestIterLogRecords:
    """Tests for iter_log_records."""

    def test_continuation_lines_join(self):
        """Test continuation lines attach in order with single spaces."""
        records = list(iter_log_records([
            "01-02-2023 first",
            "  a",
            "b",
            "02-02-2023 second",
        ]))

        assert [r.text for r in records] == ["01-02-2023 first   a b", "02-02-2023 second"]
        assert [r.line_number for r in records] == [1, 4]

    def test_line_endings_removed(self):
        """Test newline characters do not end up in the record."""
        records = list(iter_log_records(["01-02-2023 a\r\n", "b\n"]))

        assert records[0].text == "01-02-2023 a b"

    def test_final_record_flushed(self):
        """Test the last record is emitted after the input ends."""
        records = list(iter_log_records(["01-02-2023 a", "02-02-2023 b", "c"]))

        assert records[-1].text == "02-02-2023 b c"
        assert records[-1].line_number == 2

    def test_lines_before_first_stamp(self):
        """Test leading undated lines form their own record."""
        records = list(iter_log_records(["preamble", "more", "01-02-2023 a"]))

        assert [(r.line_number, r.text) for r in records] == [
            (1, "preamble more"),
            (3, "01-02-2023 a"),
        ]

    def test_empty_input(self):
        """Test an empty log has no records."""
        assert list(iter_log_records([])) == []


class TestParseLogLines:
    """Tests for parse_log_lines."""

    def test_end_to_end_record(self):
        """Test a two-line receipt record parses into one receipt."""
        lines = [
            "01-02-2023 10:00:00 I/Analytics: event=receipt_saved",
            "props: { date=1711627200000, total=$9.90, currency=AUD, merchant=Foo, "
            "category=, description=, receipt=true, items= 1_Item name: Widget, "
            "quantity: 1, pricePerUnit: , totalPrice: 990 first_event=true }",
        ]

        outcomes = list(parse_log_lines(lines))

        assert len(outcomes) == 1
        receipt = outcomes[0].receipt
        assert receipt.line_number == 1
        assert receipt.date == "2024-03-28"
        assert receipt.total == "9.90"
        assert receipt.is_reconciled is True
        assert receipt.line_items[0].name == "Widget"

    def test_failed_record_does_not_stop_scan(self, caplog):
        """Test an unknown key drops only its own record."""
        lines = [
            "01-02-2023 props: { total=1, receipt=true }",
            "02-02-2023 props: { total=2, receipt=true,",
            "  foo=bar }",
            "03-02-2023 props: { total=3, receipt=true }",
        ]

        with caplog.at_level(logging.ERROR, logger='receipt_log.reassembler'):
            outcomes = list(parse_log_lines(lines))

        assert [o.status for o in outcomes] == [
            RecordOutcome.PARSED,
            RecordOutcome.FAILED,
            RecordOutcome.PARSED,
        ]
        assert [o.receipt.total for o in outcomes if o.is_parsed] == ["1.00", "3.00"]
        assert "Error parsing line 2: unknown key: foo" in caplog.text


class TestProcessLogFile:
    """Tests for process_log_file."""

    def test_sample_log(self):
        """Test the sample log yields its two good receipts."""
        receipts = process_log_file(os.path.join(DATA_DIR, 'sample.log'))

        assert [r.line_number for r in receipts] == [1, 25]
        assert receipts[0].merchant == "Coles Supermarkets Australia Pty Ltd coles"
        assert receipts[1].merchant == "Bunnings, Warehouse"
        assert receipts[1].total == "1250.00"

    def test_missing_file(self, tmp_path):
        """Test an unreadable log raises LogFileError."""
        with pytest.raises(LogFileError, match="Error reading log file"):
            process_log_file(str(tmp_path / 'missing.log'))
