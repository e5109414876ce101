"""Data models for receipt log conversion.

This module defines the structures produced while parsing a log:
raw log records, receipts with their line items, and the
per-record outcome handed back to the file-level driver.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class LogRecord:
    """One logical log record.

    Attributes:
        text: All physical lines of the record joined with single spaces
        line_number: 1-based log line that started the record
    """
    text: str
    line_number: int


@dataclass
class LineItem:
    """Represents a single purchased product line.

    Attributes:
        name: Product name as written in the log
        quantity: Raw quantity text (not normalized)
        price_per_unit: Canonical 2-decimal price per unit
        total_price: Canonical 2-decimal total for the line
    """
    name: str = ''
    quantity: str = ''
    price_per_unit: str = ''
    total_price: str = ''


@dataclass
class Receipt:
    """Represents one purchase event parsed from the log.

    Attributes:
        line_number: Log line where the record began
        date: Purchase date as YYYY-MM-DD, empty if unparseable
        total: Canonical 2-decimal stated total
        currency: Currency code (e.g. AUD)
        merchant: Merchant name
        category: Free-text category
        description: Free-text description
        title: Free-text title
        name: Free-text name
        is_receipt: Only receipts with this flag set are reported
        is_first_event: Informational flag from the app
        is_reconciled: Whether the line items add up to the total
        line_items: Line items in order of appearance
    """
    line_number: int = 0
    date: str = ''
    total: str = ''
    currency: str = ''
    merchant: str = ''
    category: str = ''
    description: str = ''
    title: str = ''
    name: str = ''
    is_receipt: bool = False
    is_first_event: bool = False
    is_reconciled: bool = False
    line_items: list[LineItem] = field(default_factory=list)

    def calculate_line_items_total(self) -> Optional[float]:
        """Sum the total price of every line item.

        Returns:
            The float sum, or None if any line item has no total price.
        """
        running_total = 0.0
        for item in self.line_items:
            if not item.total_price:
                return None
            running_total += _to_float(item.total_price)
        return running_total

    def check_reconciled(self) -> bool:
        """Check the stated total against the line items.

        Both sides are floats compared with ==, no tolerance, so a
        receipt without line items only reconciles when its total is 0.

        Returns:
            True if the line items add up to the stated total.
        """
        line_items_total = self.calculate_line_items_total()
        if line_items_total is None:
            return False
        return line_items_total == _to_float(self.total)

    def dedupe_key(self) -> tuple[str, str, str]:
        return (self.date, self.total, self.merchant)


def _to_float(value: str) -> float:
    # unparseable amounts count as zero
    try:
        return float(value)
    except ValueError:
        return 0.0


@dataclass
class RecordOutcome:
    """Result of parsing one log record.

    Attributes:
        status: One of PARSED, SKIPPED or FAILED
        line_number: Log line where the record began
        receipt: The parsed receipt (PARSED only)
        reason: Why the record failed (FAILED only)
    """
    PARSED = 'parsed'
    SKIPPED = 'skipped'
    FAILED = 'failed'

    status: str
    line_number: int
    receipt: Optional[Receipt] = None
    reason: Optional[str] = None

    @property
    def is_parsed(self) -> bool:
        return self.status == self.PARSED
