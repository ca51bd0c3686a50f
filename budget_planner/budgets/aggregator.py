"""Owner-scoped budget CRUD with computed allocation totals.

Every operation resolves the current owner first and fails with
:class:`AuthError` before touching the datastore when there is none.
Budgets are written as whole documents; ``update`` replaces only the
fields it is given, and replaces the category tree wholesale when
``categories`` is one of them.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, TypeVar, Union

from ..auth import OwnerResolver, env_owner
from ..db import READ_COLUMNS, TABLE, BudgetStore
from ..errors import AuthError, SchemaMismatchError, ValidationError
from .allocation import compute_total_allocated
from .models import to_iso_date, writable_payload
from .templates import budget_from_template

logger = logging.getLogger(__name__)

# Columns the aggregator can live without on databases that predate them.
FALLBACK_COLUMNS = frozenset({'categories'})

T = TypeVar('T')
Fields = Union[List[str], Dict[str, Any]]


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _annotate(row: Dict[str, Any]) -> Dict[str, Any]:
    budget = dict(row)
    budget['categories'] = budget.get('categories') or []
    budget['total_allocated'] = compute_total_allocated(budget['categories'])
    return budget


class BudgetAggregator:
    """CRUD over budgets belonging to the resolved owner."""

    def __init__(self, store: BudgetStore, resolve_owner: OwnerResolver) -> None:
        self.store = store
        self.resolve_owner = resolve_owner

    # Public API -------------------------------------------------------------

    def list(self) -> List[Dict[str, Any]]:
        """All of the owner's budgets, most recent ``start_date`` first."""
        owner = self._require_owner()
        return [_annotate(row) for row in self._select(owner)]

    def get(self, budget_id: str) -> Optional[Dict[str, Any]]:
        """The owner's budget with ``budget_id``, or ``None``."""
        owner = self._require_owner()
        rows = self._select(owner, budget_id=budget_id)
        return _annotate(rows[0]) if rows else None

    def create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Validate and persist a new budget owned by the current owner.

        Raises:
            AuthError: If no owner can be resolved
            ValidationError: If ``start_date`` is missing or invalid
            StorageError: If the datastore rejects the insert
        """
        owner = self._require_owner()
        if not isinstance(data, dict):
            raise ValidationError("Budget data must be a mapping")

        payload = writable_payload(data)
        if _is_blank(payload.get('start_date')):
            raise ValidationError("Start date is required and cannot be empty.", field='start_date')
        payload['start_date'] = self._valid_date(payload['start_date'], 'start_date')
        if _is_blank(payload.get('end_date')):
            payload['end_date'] = payload['start_date']
        else:
            payload['end_date'] = self._valid_date(payload['end_date'], 'end_date')
        self._check_amount(payload)

        payload.setdefault('name', '')
        payload.setdefault('amount', 0.0)
        payload.setdefault('categories', [])
        payload['owner'] = owner

        row = self._with_schema_fallback('create', payload, self.store.insert)
        logger.info("Created budget %s for owner %s", row.get('id'), owner)
        return _annotate(row)

    def update(self, budget_id: str, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Replace the supplied fields on the owner's budget.

        Returns the updated budget, or ``None`` when the owner has no budget
        with that id.
        """
        owner = self._require_owner()
        if not isinstance(data, dict):
            raise ValidationError("Budget data must be a mapping")

        payload = writable_payload(data)
        if 'start_date' in payload:
            if _is_blank(payload['start_date']):
                raise ValidationError("Start date cannot be updated to be empty.", field='start_date')
            payload['start_date'] = self._valid_date(payload['start_date'], 'start_date')
        if 'end_date' in payload and not _is_blank(payload['end_date']):
            payload['end_date'] = self._valid_date(payload['end_date'], 'end_date')
        elif 'start_date' in payload:
            # end_date is never stored empty; a new start_date carries it along
            payload['end_date'] = payload['start_date']
        elif 'end_date' in payload:
            current = self._select(owner, budget_id=budget_id)
            if not current:
                return None
            payload['end_date'] = current[0]['start_date']
        self._check_amount(payload)

        if not payload:
            return self.get(budget_id)

        row = self._with_schema_fallback(
            'update', payload, lambda values: self.store.update(owner, budget_id, values)
        )
        if row is None:
            logger.info("Budget %s not found for owner %s; nothing updated", budget_id, owner)
            return None
        logger.info("Updated budget %s (%s)", budget_id, ', '.join(sorted(payload)))
        return _annotate(row)

    def delete(self, budget_id: str) -> None:
        """Delete the owner's budget. Missing ids are not an error."""
        owner = self._require_owner()
        removed = self.store.delete(owner, budget_id)
        if removed:
            logger.info("Deleted budget %s for owner %s", budget_id, owner)

    def create_from_template(self, template_id: str, start_date: Optional[str] = None) -> Dict[str, Any]:
        """Create a budget pre-filled from one of the packaged templates."""
        self._require_owner()
        return self.create(budget_from_template(template_id, start_date=start_date))

    # Internal ----------------------------------------------------------------

    def _require_owner(self) -> str:
        owner = self.resolve_owner()
        if not owner:
            raise AuthError()
        return owner

    def _select(self, owner: str, budget_id: Optional[str] = None) -> List[Dict[str, Any]]:
        return self._with_schema_fallback(
            'select',
            list(READ_COLUMNS),
            lambda columns: self.store.select(owner, columns, budget_id=budget_id),
        )

    def _with_schema_fallback(self, operation: str, fields: Fields, call: Callable[[Fields], T]) -> T:
        """Run ``call(fields)``, retrying once without a column the table lacks."""
        try:
            return call(fields)
        except SchemaMismatchError as e:
            if e.column not in FALLBACK_COLUMNS or e.column not in fields:
                raise
            logger.warning(
                "Missing '%s' column in '%s' table. Retrying %s without it.",
                e.column, TABLE, operation,
            )
            if isinstance(fields, dict):
                reduced: Fields = {k: v for k, v in fields.items() if k != e.column}
            else:
                reduced = [c for c in fields if c != e.column]
            return call(reduced)

    @staticmethod
    def _valid_date(value: Any, field: str) -> str:
        iso = to_iso_date(value)
        if iso is None:
            raise ValidationError(f"Invalid {field.replace('_', ' ')}: {value!r}", field=field)
        return iso

    @staticmethod
    def _check_amount(payload: Dict[str, Any]) -> None:
        if 'amount' in payload and payload['amount'] < 0:
            raise ValidationError("Budget amount cannot be negative.", field='amount')


# Convenience functions using the default store and environment owner
_default_aggregator: Optional[BudgetAggregator] = None


def get_default_aggregator() -> BudgetAggregator:
    """Aggregator over the configured database, owned by ``BUDGET_PLANNER_OWNER``."""
    global _default_aggregator
    if _default_aggregator is None:
        _default_aggregator = BudgetAggregator(BudgetStore(), env_owner())
    return _default_aggregator


def list_budgets() -> List[Dict[str, Any]]:
    return get_default_aggregator().list()


def get_budget(budget_id: str) -> Optional[Dict[str, Any]]:
    return get_default_aggregator().get(budget_id)


def create_budget(data: Dict[str, Any]) -> Dict[str, Any]:
    return get_default_aggregator().create(data)


def update_budget(budget_id: str, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    return get_default_aggregator().update(budget_id, data)


def delete_budget(budget_id: str) -> None:
    get_default_aggregator().delete(budget_id)
