"""Budget and category document normalization.

Budgets travel as plain dictionaries. These helpers coerce caller input
into the stored shape: dates become ISO strings, amounts become floats and
every category gets an id and a (possibly empty) ``subcategories`` list.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd

# Fields callers may write on a budget. Anything else, such as the computed
# ``total_allocated`` or the aggregator-controlled ``id``/``owner``, is dropped.
WRITABLE_FIELDS = ('name', 'amount', 'start_date', 'end_date', 'categories')


def to_iso_date(value: Any) -> Optional[str]:
    """Convert a date-like value into ``YYYY-MM-DD``; ``None`` when blank or unparseable."""
    if value is None or value == "":
        return None
    if isinstance(value, str) and not value.strip():
        return None
    try:
        # pandas Timestamp or datetime
        if hasattr(value, 'to_pydatetime'):
            value = value.to_pydatetime()
        if isinstance(value, datetime):
            return value.date().isoformat()
        if isinstance(value, date):
            return value.isoformat()
        ts = pd.to_datetime(value, errors='coerce')
        if pd.isna(ts):
            return None
        return ts.date().isoformat()
    except (TypeError, ValueError, OverflowError):
        return None


def parse_amount(value: Any) -> Optional[float]:
    """Convert different textual amount representations into floats."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if pd.isna(value):
            return None
        return float(value)
    if isinstance(value, str):
        cleaned = value.strip()
        if not cleaned:
            return None
        # Handle accounting negatives e.g. (123.45)
        if cleaned.startswith("(") and cleaned.endswith(")"):
            cleaned = f"-{cleaned[1:-1]}"
        cleaned = cleaned.replace("$", "").replace(",", "")
        value = cleaned
    try:
        parsed = pd.to_numeric([value], errors='coerce')
    except (TypeError, ValueError):
        return None
    number = parsed[0]
    if pd.isna(number):
        return None
    return float(number)


def get_field(node: Any, name: str, default: Any = None) -> Any:
    """Read ``name`` from a mapping or an attribute-style object."""
    if isinstance(node, dict):
        return node.get(name, default)
    return getattr(node, name, default)


def new_category(name: str = '', amount: float = 0.0, color: Optional[str] = None) -> Dict[str, Any]:
    """Blank category row as the budget form creates it."""
    category: Dict[str, Any] = {
        'id': str(uuid.uuid4()),
        'name': name,
        'amount': float(amount),
        'subcategories': [],
    }
    if color:
        category['color'] = color
    return category


def normalize_category(raw: Any) -> Dict[str, Any]:
    """Normalize one category node and its subtree."""
    category_id = get_field(raw, 'id')
    name = get_field(raw, 'name')
    amount = parse_amount(get_field(raw, 'amount'))
    color = get_field(raw, 'color')

    category: Dict[str, Any] = {
        'id': str(category_id) if category_id else str(uuid.uuid4()),
        'name': '' if name is None else str(name).strip(),
        'amount': amount if amount is not None else 0.0,
        'subcategories': normalize_categories(get_field(raw, 'subcategories')),
    }
    if color:
        category['color'] = str(color)
    return category


def normalize_categories(raw: Optional[Iterable[Any]]) -> List[Dict[str, Any]]:
    """Normalize a category list, keeping sibling order."""
    if raw is None or isinstance(raw, (str, bytes, dict)):
        return []
    return [normalize_category(item) for item in raw if item is not None]


def writable_payload(data: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only caller-writable fields, normalizing the ones present."""
    payload: Dict[str, Any] = {}
    for key in WRITABLE_FIELDS:
        if key not in data:
            continue
        value = data[key]
        if key == 'name':
            payload[key] = '' if value is None else str(value).strip()
        elif key == 'amount':
            amount = parse_amount(value)
            payload[key] = amount if amount is not None else 0.0
        elif key == 'categories':
            payload[key] = normalize_categories(value)
        else:
            payload[key] = value
    return payload
