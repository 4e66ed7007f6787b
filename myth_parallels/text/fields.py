"""
Parsing for list-like record fields (tags and themes).

The store hands these fields over in several shapes depending on how a row
was written and which driver decoded it:

- native list/tuple/set:   ["flood", "ark"]
- JSON array string:       '["flood", "ark"]'
- brace pseudo-list:       '{flood,"great ark"}'   (Postgres text[] literal)
- plain string:            'flood, ark'

Each value is classified once into a FieldShape and reduced to a flat list
of strings at the store boundary, so nothing downstream sees the raw shape.
Parsing never raises: malformed JSON falls through to a comma split.
"""

import json
import logging
from enum import Enum
from typing import Any, FrozenSet, List

logger = logging.getLogger(__name__)


class FieldShape(str, Enum):
    """Shape of a raw list-like field"""
    EMPTY = "empty"
    ARRAY = "array"
    JSON_ARRAY_STRING = "json_array_string"
    BRACE_LIST_STRING = "brace_list_string"
    PLAIN_STRING = "plain_string"


def classify_field(value: Any) -> FieldShape:
    """
    Classify a raw tags/themes value.
    
    Examples:
        >>> classify_field(["flood"])
        <FieldShape.ARRAY: 'array'>
        >>> classify_field('["flood"]')
        <FieldShape.JSON_ARRAY_STRING: 'json_array_string'>
        >>> classify_field('{flood,ark}')
        <FieldShape.BRACE_LIST_STRING: 'brace_list_string'>
        >>> classify_field("   ")
        <FieldShape.EMPTY: 'empty'>
    """
    if value is None:
        return FieldShape.EMPTY
    if isinstance(value, (list, tuple, set, frozenset)):
        return FieldShape.ARRAY if value else FieldShape.EMPTY
    
    s = str(value).strip()
    if not s:
        return FieldShape.EMPTY
    if s.startswith('[') and s.endswith(']'):
        return FieldShape.JSON_ARRAY_STRING
    if s.startswith('{') and s.endswith('}'):
        return FieldShape.BRACE_LIST_STRING
    return FieldShape.PLAIN_STRING


def _clean_items(items) -> List[str]:
    out = []
    for item in items:
        if item is None:
            continue
        text = str(item).strip().strip('"').strip()
        if text:
            out.append(text)
    return out


def _split_commas(s: str) -> List[str]:
    return _clean_items(s.split(','))


def parse_string_list(value: Any) -> List[str]:
    """
    Reduce a raw tags/themes value to a flat list of strings.
    
    Args:
        value: Raw field value in any supported shape
        
    Returns:
        List of non-empty, stripped strings (order kept, sets sorted)
        
    Examples:
        >>> parse_string_list('{flood,"great ark"}')
        ['flood', 'great ark']
        >>> parse_string_list("[flood, ark]")    # malformed JSON
        ['flood', 'ark']
    """
    shape = classify_field(value)
    
    if shape == FieldShape.EMPTY:
        return []
    
    if shape == FieldShape.ARRAY:
        if isinstance(value, (set, frozenset)):
            return _clean_items(sorted(str(v) for v in value))
        return _clean_items(value)
    
    s = str(value).strip()
    
    if shape == FieldShape.JSON_ARRAY_STRING:
        try:
            parsed = json.loads(s)
        except ValueError:
            logger.debug(f"Malformed JSON list field, falling back to comma split: {s[:80]!r}")
            return _split_commas(s[1:-1])
        if isinstance(parsed, list):
            return _clean_items(parsed)
        return _split_commas(s[1:-1])
    
    if shape == FieldShape.BRACE_LIST_STRING:
        return _split_commas(s[1:-1])
    
    return _split_commas(s)


def parse_string_set(value: Any, lowercase: bool = False) -> FrozenSet[str]:
    """Parse a raw field into a canonical set of strings"""
    items = parse_string_list(value)
    if lowercase:
        items = [item.lower() for item in items]
    return frozenset(items)


def normalize_tags(value: Any) -> str:
    """
    Flatten a tags value of any shape into one space-joined string.
    
    Examples:
        >>> normalize_tags(["flood", "ark"])
        'flood ark'
        >>> normalize_tags('{flood,"great ark"}')
        'flood great ark'
        >>> normalize_tags(None)
        ''
    """
    return ' '.join(parse_string_list(value))
