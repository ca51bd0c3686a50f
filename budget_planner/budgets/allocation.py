"""Allocation arithmetic over budget category trees.

A category's effective allocation is its own ``amount`` when it is a leaf
and the sum of its children's effective allocations otherwise; a parent's
own ``amount`` is ignored once it has subcategories. Both the stored-budget
listing and the form-side "remaining" display go through
:func:`compute_total_allocated` so the two never disagree.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Tuple

import pandas as pd

from ..errors import ValidationError
from .models import get_field, parse_amount


def _children(category: Any) -> List[Any]:
    subcategories = get_field(category, 'subcategories')
    if not subcategories or isinstance(subcategories, (str, bytes, dict)):
        return []
    return list(subcategories)


def effective_allocation(category: Any) -> float:
    """Effective allocation of a single node."""
    children = _children(category)
    if children:
        return compute_total_allocated(children)
    amount = parse_amount(get_field(category, 'amount'))
    return amount if amount is not None else 0.0


def compute_total_allocated(categories: Optional[Iterable[Any]]) -> float:
    """Sum the effective allocation of every root category.

    Missing or non-numeric amounts count as zero.

    Example:
        >>> compute_total_allocated([
        ...     {'amount': 9999, 'subcategories': [{'amount': 10}, {'amount': 20}]},
        ... ])
        30.0
    """
    total = 0.0
    for category in categories or []:
        if category is None:
            continue
        total += effective_allocation(category)
    return total


def allocation_summary(budget: Dict[str, Any]) -> Dict[str, Any]:
    """Allocated, remaining and percent figures shown next to a budget."""
    amount = parse_amount(budget.get('amount')) or 0.0
    allocated = compute_total_allocated(budget.get('categories'))
    remaining = amount - allocated
    return {
        'amount': amount,
        'total_allocated': allocated,
        'remaining': remaining,
        'percent_allocated': (allocated / amount * 100) if amount else 0.0,
        'over_allocated': remaining < 0,
    }


def check_allocation(budget: Dict[str, Any]) -> None:
    """Raise when the categories allocate more than the budget amount.

    The aggregator stores over-allocated budgets as-is; this is what a form
    calls before submitting.

    Raises:
        ValidationError: If allocation exceeds the total budget
    """
    summary = allocation_summary(budget)
    if summary['over_allocated']:
        raise ValidationError(
            "Allocated amount exceeds total budget by "
            f"{-summary['remaining']:,.2f}. Please adjust your categories.",
            field='categories',
        )


def flatten_categories(categories: Optional[Iterable[Any]], depth: int = 0) -> List[Tuple[int, Any]]:
    """Depth-first ``(depth, category)`` pairs, parents before children."""
    rows: List[Tuple[int, Any]] = []
    for category in categories or []:
        if category is None:
            continue
        rows.append((depth, category))
        rows.extend(flatten_categories(_children(category), depth + 1))
    return rows


def category_breakdown(categories: Optional[Iterable[Any]]) -> pd.DataFrame:
    """One row per root category with its effective allocation and share.

    Returns:
        DataFrame with columns ``Category``, ``Allocated``, ``Share`` (percent
        of the total allocated) and ``Subcategories`` (direct child count).
    """
    roots = [c for c in (categories or []) if c is not None]
    columns = ['Category', 'Allocated', 'Share', 'Subcategories']
    if not roots:
        return pd.DataFrame(columns=columns)

    df = pd.DataFrame({
        'Category': [get_field(c, 'name') or '' for c in roots],
        'Allocated': [effective_allocation(c) for c in roots],
        'Subcategories': [len(_children(c)) for c in roots],
    })
    total = df['Allocated'].sum()
    df['Share'] = (df['Allocated'] / total * 100) if total else 0.0
    return df[columns]
