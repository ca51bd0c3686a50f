"""Top-level package for the budget planner.

The primary modules are:

* ``budgets`` – budget documents, allocation totals and the owner-scoped aggregator
* ``db`` – the SQLite ``budgets`` table the aggregator persists to
* ``auth`` – owner resolvers handed to the aggregator
* ``errors`` – the exceptions every layer raises

A minimal session looks like:

```python
from budget_planner import db
from budget_planner.auth import static_owner
from budget_planner.budgets import BudgetAggregator

db.init_db()
aggregator = BudgetAggregator(db.BudgetStore(), static_owner("user-1"))
aggregator.create({"name": "Trip", "amount": 1000, "start_date": "2024-01-01"})
```
"""

from .errors import (  # noqa: F401  # re-exported for convenience
    AuthError,
    BudgetError,
    SchemaMismatchError,
    StorageError,
    ValidationError,
)

__version__ = '1.0.0'

__all__ = [
    "AuthError",
    "BudgetError",
    "SchemaMismatchError",
    "StorageError",
    "ValidationError",
]
