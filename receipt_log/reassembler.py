"""Log record reassembly module.

A log record starts on a line beginning with a DD-MM-YYYY stamp and
runs until the next such line. This module groups physical lines
into records and hands each one to the ReceiptExtractor.
"""

import logging
import re
from collections.abc import Iterable, Iterator
from typing import Optional

from .errors import LogFileError
from .extractor import ReceiptExtractor
from .models import LogRecord, Receipt, RecordOutcome

logger = logging.getLogger(__name__)

# match a date at the start of a line
DATE_PATTERN = re.compile(r'^[0-9]{2}-[0-9]{2}-[0-9]{4}')


def starts_record(line: str) -> bool:
    return DATE_PATTERN.match(line) is not None


def iter_log_records(lines: Iterable[str]) -> Iterator[LogRecord]:
    """Group physical log lines into logical records.

    Args:
        lines: Lines of the log, with or without line endings.

    Yields:
        One LogRecord per dated line, with the continuation lines
        that follow it joined by single spaces.
    """
    parts: list[str] = []
    start_line = 1
    for line_number, line in enumerate(lines, start=1):
        line = line.rstrip('\r\n')
        if starts_record(line):
            if parts:
                yield LogRecord(text=' '.join(parts), line_number=start_line)
            parts = [line]
            start_line = line_number
        else:
            if not parts:
                start_line = line_number
            parts.append(line)

    if parts:
        yield LogRecord(text=' '.join(parts), line_number=start_line)


def parse_log_lines(
    lines: Iterable[str],
    extractor: Optional[ReceiptExtractor] = None,
) -> Iterator[RecordOutcome]:
    """Parse every record in the log.

    Records that fail to parse are logged and reported as FAILED
    outcomes; the scan carries on with the next record.

    Args:
        lines: Lines of the log.
        extractor: Extractor to use; a new one by default.

    Yields:
        One RecordOutcome per record, in log order.
    """
    extractor = extractor or ReceiptExtractor()
    for record in iter_log_records(lines):
        outcome = extractor.parse_record(record)
        if outcome.status == RecordOutcome.FAILED:
            logger.error(f"Error parsing line {outcome.line_number}: {outcome.reason}")
        elif outcome.status == RecordOutcome.SKIPPED:
            logger.debug(f"Skipping line {outcome.line_number}: not a receipt")
        yield outcome


def collect_receipts(outcomes: Iterable[RecordOutcome]) -> list[Receipt]:
    return [outcome.receipt for outcome in outcomes if outcome.is_parsed]


def process_log_file(file_path: str) -> list[Receipt]:
    """Parse all receipts from a log file.

    Args:
        file_path: Path to the log file.

    Returns:
        The receipts in log order.

    Raises:
        LogFileError: If the file cannot be opened or read.
    """
    try:
        with open(file_path, 'r', encoding='utf-8', errors='replace') as f:
            receipts = collect_receipts(parse_log_lines(f))
    except OSError as e:
        raise LogFileError(f"Error reading log file {file_path}: {e}") from e

    logger.info(f"Parsed {len(receipts)} receipts from {file_path}")
    return receipts
