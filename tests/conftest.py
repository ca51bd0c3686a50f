import pytest

from budget_planner import db
from budget_planner.auth import static_owner
from budget_planner.budgets import BudgetAggregator


def trip_budget():
    return {
        'name': 'Trip',
        'amount': 1000,
        'start_date': '2024-01-01',
        'categories': [
            {'name': 'Flights', 'amount': 400, 'subcategories': []},
            {
                'name': 'Hotel',
                'amount': 300,
                'subcategories': [
                    {'name': 'Deposit', 'amount': 150, 'subcategories': []},
                    {'name': 'Balance', 'amount': 150, 'subcategories': []},
                ],
            },
        ],
    }


class SpyStore:
    """Records every datastore call and returns canned results."""

    def __init__(self, results=None):
        self.calls = []
        self.results = list(results or [])

    def _record(self, name, *args):
        self.calls.append((name, args))
        if self.results:
            result = self.results.pop(0)
            if isinstance(result, Exception):
                raise result
            return result
        return None

    def select(self, owner, columns, budget_id=None):
        return self._record('select', owner, list(columns), budget_id) or []

    def insert(self, values):
        return self._record('insert', dict(values))

    def update(self, owner, budget_id, values):
        return self._record('update', owner, budget_id, dict(values))

    def delete(self, owner, budget_id):
        return self._record('delete', owner, budget_id) or 0


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / 'budgets.db'
    db.init_db(path)
    return path


@pytest.fixture
def store(db_path):
    return db.BudgetStore(db_path)


@pytest.fixture
def aggregator(store):
    return BudgetAggregator(store, static_owner('user-1'))
