"""Budget documents, allocation arithmetic and owner-scoped storage.

This package provides:
- Budget and category normalization
- Recursive allocation totals and summaries
- The owner-scoped budget aggregator (CRUD)
- Budget templates
"""

from .models import (
    new_category,
    normalize_category,
    normalize_categories,
    parse_amount,
    to_iso_date,
)
from .allocation import (
    allocation_summary,
    category_breakdown,
    check_allocation,
    compute_total_allocated,
    effective_allocation,
    flatten_categories,
)
from .templates import (
    budget_from_template,
    get_template,
    list_templates,
)
from .aggregator import (
    BudgetAggregator,
    create_budget,
    delete_budget,
    get_budget,
    get_default_aggregator,
    list_budgets,
    update_budget,
)

__all__ = [
    # Models
    'new_category',
    'normalize_category',
    'normalize_categories',
    'parse_amount',
    'to_iso_date',
    # Allocation
    'allocation_summary',
    'category_breakdown',
    'check_allocation',
    'compute_total_allocated',
    'effective_allocation',
    'flatten_categories',
    # Templates
    'budget_from_template',
    'get_template',
    'list_templates',
    # Aggregator
    'BudgetAggregator',
    'create_budget',
    'delete_budget',
    'get_budget',
    'get_default_aggregator',
    'list_budgets',
    'update_budget',
]
