"""Receipt reporting module.

This module provides functionality to deduplicate, sort and
serialize parsed receipts to CSV.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .errors import LogFileError
from .models import Receipt, RecordOutcome
from .reassembler import collect_receipts, parse_log_lines, process_log_file

logger = logging.getLogger(__name__)

CSV_HEADER = (
    "LogLine,Date,Title,Name,Total,Currency,Merchant,Category,"
    "Description,IsReconciled,ItemName,Quantity,PricePerUnit,TotalPrice"
)


class SortOrder(str, Enum):
    NONE = 'none'
    DATE = 'date'
    LINE = 'line'


@dataclass
class ConvertOptions:
    """Options for converting a log to CSV.

    Attributes:
        remove_duplicates: Keep only the latest receipt per
            (date, total, merchant)
        sort_by: Order of the receipts in the report
        csv_file: Where to write the CSV; nothing is written when None
    """
    remove_duplicates: bool = False
    sort_by: SortOrder = SortOrder.NONE
    csv_file: Optional[str] = None


@dataclass
class ReportSummary:
    receipt_count: int = 0
    row_count: int = 0
    reconciled_count: int = 0

    def to_dict(self) -> dict:
        return {
            'receipt_count': self.receipt_count,
            'row_count': self.row_count,
            'reconciled_count': self.reconciled_count,
        }


@dataclass
class ConversionResult:
    """Outcome of converting log text held in memory.

    Attributes:
        csv: The CSV report
        summary: Counts for the receipts in the report
        failures: Outcomes of the records that could not be parsed
    """
    csv: str
    summary: ReportSummary
    failures: list[RecordOutcome] = field(default_factory=list)


class ReceiptReporter:
    """Turns parsed receipts into a CSV report."""

    def remove_duplicates(self, receipts: list[Receipt]) -> list[Receipt]:
        """Drop receipts logged more than once.

        Receipts with the same date, total and merchant are the same
        purchase; the one logged last (highest line number) wins.

        Args:
            receipts: Parsed receipts.

        Returns:
            One receipt per key, in order of first appearance.
        """
        latest: dict[tuple[str, str, str], Receipt] = {}
        for receipt in receipts:
            key = receipt.dedupe_key()
            existing = latest.get(key)
            if existing is None or receipt.line_number > existing.line_number:
                latest[key] = receipt
        return list(latest.values())

    def sort_receipts(
        self,
        receipts: list[Receipt],
        sort_by: SortOrder = SortOrder.NONE,
    ) -> list[Receipt]:
        """Order receipts for the report.

        Dates are YYYY-MM-DD, so they sort as text; receipts without
        a date come first.
        """
        if sort_by == SortOrder.DATE:
            return sorted(receipts, key=lambda r: r.date)
        if sort_by == SortOrder.LINE:
            return sorted(receipts, key=lambda r: r.line_number)
        return list(receipts)

    def to_csv(self, receipts: list[Receipt]) -> str:
        """Serialize receipts to CSV, one row per line item.

        Receipts without line items produce no rows.

        Args:
            receipts: Receipts to report.

        Returns:
            CSV text including the header row.
        """
        rows = [CSV_HEADER]
        for receipt in receipts:
            for item in receipt.line_items:
                fields = [
                    str(receipt.line_number),
                    receipt.date,
                    receipt.title,
                    receipt.name,
                    receipt.total,
                    receipt.currency,
                    receipt.merchant,
                    receipt.category,
                    receipt.description,
                    format_bool(receipt.is_reconciled),
                    item.name,
                    item.quantity,
                    item.price_per_unit,
                    item.total_price,
                ]
                rows.append(','.join(quote_if_contains_commas(f) for f in fields))
        return '\n'.join(rows) + '\n'

    def summarize(self, receipts: list[Receipt]) -> ReportSummary:
        return ReportSummary(
            receipt_count=len(receipts),
            row_count=sum(len(r.line_items) for r in receipts),
            reconciled_count=sum(1 for r in receipts if r.is_reconciled),
        )

    def build_report(self, receipts: list[Receipt], options: ConvertOptions) -> list[Receipt]:
        if options.remove_duplicates:
            receipts = self.remove_duplicates(receipts)
        return self.sort_receipts(receipts, options.sort_by)

    def write_to_file(self, csv: str, file_path: str) -> bool:
        """Write the CSV report to a file.

        Write errors are logged rather than raised, so the report
        text is still returned to the caller.

        Returns:
            True if the file was written.
        """
        try:
            with open(file_path, 'w', encoding='utf-8', newline='') as f:
                f.write(csv)
        except OSError as e:
            logger.error(f"Error creating file {file_path}: {e}")
            return False
        logger.info(f"Wrote CSV report to {file_path}")
        return True

    def convert_log_lines(
        self,
        lines: Iterable[str],
        options: Optional[ConvertOptions] = None,
    ) -> ConversionResult:
        """Convert log lines already in memory to a CSV report.

        Args:
            lines: Lines of the log.
            options: Deduplication and sorting options. csv_file is
                honoured as in convert_logs_to_csv.

        Returns:
            The CSV text with its summary and the failed records.
        """
        options = options or ConvertOptions()
        outcomes = list(parse_log_lines(lines))
        receipts = self.build_report(collect_receipts(outcomes), options)

        csv = self.to_csv(receipts)
        if options.csv_file:
            self.write_to_file(csv, options.csv_file)
        return ConversionResult(
            csv=csv,
            summary=self.summarize(receipts),
            failures=[o for o in outcomes if o.status == RecordOutcome.FAILED],
        )

    def convert_logs_to_csv(self, logfile: str, options: Optional[ConvertOptions] = None) -> str:
        """Convert a log file to a CSV report.

        Args:
            logfile: Path to the log file.
            options: Deduplication, sorting and output options.

        Returns:
            The CSV text, or an empty string if the log file could
            not be read.
        """
        options = options or ConvertOptions()
        try:
            receipts = process_log_file(logfile)
        except LogFileError as e:
            logger.error(str(e))
            return ''

        csv = self.to_csv(self.build_report(receipts, options))
        if options.csv_file:
            self.write_to_file(csv, options.csv_file)
        return csv


def quote_if_contains_commas(value: str) -> str:
    # embedded quotes are left as they are
    if ',' in value:
        return f'"{value}"'
    return value


def format_bool(value: bool) -> str:
    return 'true' if value else 'false'
