"""Receipt extraction module.

This module provides functionality to extract receipts and their
line items from the property block of a single log record.
"""

import re
from typing import Callable, Optional

from .errors import ReceiptParseError
from .models import LineItem, LogRecord, Receipt, RecordOutcome
from .normalizers import clean_total, parse_price, parse_unixtime
from .splitter import is_in_progress, split_key_value_pairs

PROPS_PATTERN = re.compile(r'props:\s*{')
ITEM_MARKER = '_Item'

# keys that show up in the log but carry nothing we report
IGNORED_KEYS = frozenset({
    'parent_screen',
    'place',
    'price',  # sent when a receipt line is edited
    'quantity',  # same as above
    'rs_subscription',
    'export_format',
    'success',
    'app_install_time',
    'plan',
    'method',
    'sort_by',
    'product',
    'provider',
    'tags',
    'user_purpose',
    'purchase_id',
    'onboarding_version',
    'referrer_click_time',
    'type',
    'offer',
    'receipt_attached',
    'utm_source',
    'utm_medium',
    'receipts_count',
})


def extract_props(log_line: str) -> Optional[str]:
    """Cut the property block out of a log record.

    Args:
        log_line: Full text of one log record.

    Returns:
        The text between "props: {" and the closing brace, or None if
        the record has no property block.
    """
    log_line = log_line.replace('\r', '').replace('\n', '')
    match = PROPS_PATTERN.search(log_line)
    if match is None:
        return None
    return log_line[match.end():].rstrip().rstrip('}')


class ReceiptExtractor:
    """Extracts receipts from log records.

    Each property key is dispatched through a table of handlers.
    Keys in IGNORED_KEYS are skipped; any other key is an error, so
    new fields in the log are noticed instead of silently lost.
    """

    def __init__(self):
        self._receipt_handlers: dict[str, Callable[[Receipt, str], None]] = {
            'date': self._set_date,
            'total': self._set_total,
            'currency': self._set_text('currency'),
            'merchant': self._set_text('merchant'),
            'category': self._set_text('category'),
            'description': self._set_text('description'),
            'title': self._set_text('title'),
            'name': self._set_text('name'),
            'receipt': self._set_flag('is_receipt'),
            'first_event': self._set_flag('is_first_event'),
            'items': self._set_line_items,
        }

    def parse_record(self, record: LogRecord) -> RecordOutcome:
        """Parse one log record into an outcome.

        Args:
            record: The reassembled log record.

        Returns:
            A PARSED outcome carrying the receipt when the record is a
            receipt, SKIPPED when it is not, FAILED when it is malformed.
        """
        try:
            receipt = self.parse_receipt(record.text)
        except ReceiptParseError as e:
            return RecordOutcome(
                status=RecordOutcome.FAILED,
                line_number=record.line_number,
                reason=str(e),
            )

        receipt.line_number = record.line_number
        if not receipt.is_receipt:
            return RecordOutcome(
                status=RecordOutcome.SKIPPED,
                line_number=record.line_number,
            )
        return RecordOutcome(
            status=RecordOutcome.PARSED,
            line_number=record.line_number,
            receipt=receipt,
        )

    def parse_receipt(self, log_line: str) -> Receipt:
        """Extract a receipt from the text of one log record.

        Records without a property block, and records the app marked
        as "in progress", give back an empty Receipt.

        Args:
            log_line: Full text of one log record.

        Returns:
            The populated Receipt with is_reconciled computed.

        Raises:
            ReceiptParseError: On an unknown key or an unparseable price.
        """
        props = extract_props(log_line)
        if props is None:
            return Receipt()

        key_value_pairs = split_key_value_pairs(props, '=', ',')
        if is_in_progress(key_value_pairs):
            return Receipt()

        receipt = Receipt()
        for key, value in key_value_pairs.items():
            if key in IGNORED_KEYS:
                continue
            handler = self._receipt_handlers.get(key)
            if handler is None:
                raise ReceiptParseError(f"unknown key: {key}")
            handler(receipt, value)

        receipt.is_reconciled = receipt.check_reconciled()
        return receipt

    def parse_line_items(self, items: str) -> list[LineItem]:
        """Extract line items from the raw "items" value.

        The value is a run of blocks like
        "1_Item name: X, quantity: 0.0, pricePerUnit: , totalPrice: 990".
        Splitting on "_Item" leaves the next block's ordinal stuck to
        the end of each segment, which is trimmed off.

        Args:
            items: Raw value of the "items" key.

        Returns:
            List of LineItem objects in source order.

        Raises:
            ReceiptParseError: On an unknown item key or bad price.
        """
        line_items = []

        segments = items.split(ITEM_MARKER)
        last_index = len(segments) - 1
        for i, segment in enumerate(segments):
            if i == 0 and segment.strip().isdigit():
                continue
            if not segment.strip():
                continue
            if 0 < i < last_index:
                # character trim, not a suffix match
                segment = segment.rstrip(str(i + 1))

            line_items.append(self._parse_line_item(segment))

        return line_items

    def _parse_line_item(self, segment: str) -> LineItem:
        line_item = LineItem()
        for key, value in split_key_value_pairs(segment, ':', ',').items():
            if key == 'name':
                line_item.name = value
            elif key == 'quantity':
                line_item.quantity = value
            elif key == 'pricePerUnit':
                line_item.price_per_unit = parse_price(value)
            elif key == 'totalPrice':
                line_item.total_price = parse_price(value)
            else:
                raise ReceiptParseError(f"unknown key: {key}")
        return line_item

    @staticmethod
    def _set_date(receipt: Receipt, value: str) -> None:
        receipt.date = parse_unixtime(value)

    @staticmethod
    def _set_total(receipt: Receipt, value: str) -> None:
        receipt.total = clean_total(value)

    def _set_line_items(self, receipt: Receipt, value: str) -> None:
        receipt.line_items.extend(self.parse_line_items(value))

    @staticmethod
    def _set_text(attribute: str) -> Callable[[Receipt, str], None]:
        def handler(receipt: Receipt, value: str) -> None:
            setattr(receipt, attribute, value)
        return handler

    @staticmethod
    def _set_flag(attribute: str) -> Callable[[Receipt, str], None]:
        def handler(receipt: Receipt, value: str) -> None:
            setattr(receipt, attribute, value == 'true')
        return handler
