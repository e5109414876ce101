"""Environment configuration for the receipt log converter.

Settings come from the process environment, optionally seeded
from a .env file in the working directory.
"""

import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

from .reporter import SortOrder

DEFAULT_LOGFILE = 'logfile.log'


@dataclass
class Settings:
    logfile: str = DEFAULT_LOGFILE
    log_level: str = 'INFO'
    remove_duplicates: bool = False
    sort_by: SortOrder = SortOrder.NONE
    port: int = 5001
    debug: bool = False


def parse_flag(value) -> bool:
    """Read a yes/no setting given as a bool or as text such as "true" or "0"."""
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ('1', 'true', 'yes')


def _env_flag(name: str, default: str = 'false') -> bool:
    return parse_flag(os.getenv(name, default))


def parse_sort_order(value: str) -> SortOrder:
    """Parse a sort order name ("none", "date" or "line").

    Raises:
        ValueError: If the name is not a known sort order.
    """
    try:
        return SortOrder(value.strip().lower())
    except ValueError:
        choices = ', '.join(order.value for order in SortOrder)
        raise ValueError(f"Invalid sort order: {value!r} (expected one of {choices})")


def load_settings() -> Settings:
    """Load settings from the environment and any .env file.

    The .env file is looked up from the working directory upwards.

    Raises:
        ValueError: If SORT_BY or PORT hold invalid values.
    """
    load_dotenv(find_dotenv(usecwd=True))
    return Settings(
        logfile=os.getenv('RECEIPT_LOG_FILE', DEFAULT_LOGFILE),
        log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
        remove_duplicates=_env_flag('REMOVE_DUPLICATES'),
        sort_by=parse_sort_order(os.getenv('SORT_BY', 'none')),
        port=int(os.getenv('PORT', '5001')),
        debug=_env_flag('DEBUG'),
    )
