"""Key-value splitting for the log's property blocks.

The property block looks like this, without the newlines:

    date=1711627200000,
    total=29.9,
    merchant=Coles Supermarkets Australia Pty Ltd coles,
    category=,
    items=
        1_Item
            name: WELLNESS ROAD LINSEE 500GRAM 3 @ $3.30 EACH,
            quantity: 0.0,
            pricePerUnit: ,
            totalPrice: 990
        2_Item
            name: % TULIPS 1EACH,
            ...
    first_event=true

Keys may come in any order, and the "items" value contains the same
divider as the outer block, so splitting on "," first would break the
nested list apart. Instead the text is scanned once for key tokens and
every value runs up to the next key.
"""

import re

# value marking a record the app has not finished writing
IN_PROGRESS = 'in progress'

_KEY_PATTERN = r'(?<![^\s{divider}])([A-Za-z_]\w*)[ \t]*{assigner}'
_key_patterns: dict[tuple[str, str], re.Pattern] = {}


def _key_pattern(assigner: str, divider: str) -> re.Pattern:
    """Compile (once) the pattern matching `key<assigner>` tokens.

    A key is an identifier at the start of the text or right after
    whitespace or the divider.
    """
    cache_key = (assigner, divider)
    if cache_key not in _key_patterns:
        _key_patterns[cache_key] = re.compile(_KEY_PATTERN.format(
            divider=re.escape(divider),
            assigner=re.escape(assigner),
        ))
    return _key_patterns[cache_key]


def split_key_value_pairs(
    text: str,
    assigner: str,
    divider: str,
) -> dict[str, str]:
    """Split a delimited string into key/value pairs.

    Args:
        text: Text such as "date=1711627200000, total=29.9, ...".
        assigner: Character between a key and its value ("=" or ":").
        divider: Character between pairs (","). It may also appear
            inside a value, where it is kept.

    Returns:
        Mapping of key to raw value, in order of appearance. Trailing
        dividers and surrounding whitespace are trimmed from values.
        Text before the first key is ignored, and a repeated key
        keeps its last value.
    """
    matches = list(_key_pattern(assigner, divider).finditer(text))

    key_value_pairs = {}
    for i, match in enumerate(matches):
        value_end = matches[i + 1].start() if i + 1 < len(matches) else len(text)
        value = text[match.end():value_end]
        value = value.strip().rstrip(divider + ' \t\r\n').strip()
        key_value_pairs[match.group(1)] = value
    return key_value_pairs


def is_in_progress(key_value_pairs: dict[str, str]) -> bool:
    """Check whether any value marks the record as still being written."""
    return any(value == IN_PROGRESS for value in key_value_pairs.values())
