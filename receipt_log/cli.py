"""Command-line entry point: convert a receipt log file to CSV."""

import argparse
import logging
import os
import sys
from typing import Optional

from .config import load_settings, parse_sort_order
from .reporter import ConvertOptions, ReceiptReporter, SortOrder

logger = logging.getLogger(__name__)


def default_csv_path(logfile: str) -> str:
    """Derive the CSV path by swapping the log file's extension."""
    base, _ = os.path.splitext(logfile)
    return base + '.csv'


def build_parser(settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Convert an app event log into a CSV report of receipts."
    )
    parser.add_argument(
        'logfile',
        nargs='?',
        default=settings.logfile,
        help=f"Log file to convert (default: {settings.logfile})",
    )
    parser.add_argument(
        '-o', '--output',
        help="CSV file to write (default: the log file name with a .csv extension)",
    )
    parser.add_argument(
        '--stdout',
        action='store_true',
        help="Print the CSV instead of writing a file",
    )
    parser.add_argument(
        '--remove-duplicates',
        action='store_true',
        default=settings.remove_duplicates,
        help="Keep only the latest receipt per date, total and merchant",
    )
    parser.add_argument(
        '--sort-by',
        type=parse_sort_order,
        default=settings.sort_by,
        metavar='{' + ','.join(order.value for order in SortOrder) + '}',
        help="Order receipts by date or by log line (default: log order)",
    )
    parser.add_argument(
        '--log-level',
        default=settings.log_level,
        help=f"Logging level (default: {settings.log_level})",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    settings = load_settings()
    args = build_parser(settings).parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    if args.logfile != settings.logfile:
        logger.info(f"Using log file: {args.logfile}")

    reporter = ReceiptReporter()
    options = ConvertOptions(
        remove_duplicates=args.remove_duplicates,
        sort_by=args.sort_by,
    )
    csv = reporter.convert_logs_to_csv(args.logfile, options)
    if not csv:
        return 1

    if args.stdout:
        sys.stdout.write(csv)
        return 0

    csv_file = args.output or default_csv_path(args.logfile)
    if not reporter.write_to_file(csv, csv_file):
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
