"""Exception types raised while converting receipt logs."""


class ReceiptParseError(ValueError):
    """Raised when a single log record cannot be parsed.

    The record is dropped; the rest of the log file is still converted.
    """


class LogFileError(Exception):
    """Raised when the log file cannot be opened or read."""
