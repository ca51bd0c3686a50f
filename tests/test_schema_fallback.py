import logging

import pytest

from budget_planner import db
from budget_planner.auth import static_owner
from budget_planner.budgets import BudgetAggregator
from budget_planner.errors import SchemaMismatchError, StorageError

from conftest import SpyStore, trip_budget


@pytest.fixture
def legacy_aggregator(tmp_path):
    path = tmp_path / 'legacy.db'
    db.init_db(path, include_categories=False)
    assert 'categories' not in db.table_columns(path)
    return BudgetAggregator(db.BudgetStore(path), static_owner('user-1'))


def test_create_without_categories_column(legacy_aggregator, caplog):
    with caplog.at_level(logging.WARNING, logger='budget_planner.budgets.aggregator'):
        created = legacy_aggregator.create(trip_budget())

    assert created['name'] == 'Trip'
    assert created['categories'] == []
    assert created['total_allocated'] == 0
    assert "Missing 'categories' column" in caplog.text


def test_list_and_get_without_categories_column(legacy_aggregator):
    created = legacy_aggregator.create(trip_budget())

    budgets = legacy_aggregator.list()
    assert [b['id'] for b in budgets] == [created['id']]
    assert budgets[0]['categories'] == []

    fetched = legacy_aggregator.get(created['id'])
    assert fetched['end_date'] == '2024-01-01'
    assert fetched['total_allocated'] == 0


def test_update_without_categories_column(legacy_aggregator):
    created = legacy_aggregator.create(trip_budget())

    updated = legacy_aggregator.update(created['id'], {'amount': 250, 'categories': [{'name': 'A', 'amount': 5}]})
    assert updated['amount'] == 250
    assert updated['categories'] == []

    only_tree = legacy_aggregator.update(created['id'], {'categories': [{'name': 'B', 'amount': 1}]})
    assert only_tree['id'] == created['id']
    assert only_tree['amount'] == 250


def test_migration_restores_categories(tmp_path):
    path = tmp_path / 'legacy.db'
    db.init_db(path, include_categories=False)
    aggregator = BudgetAggregator(db.BudgetStore(path), static_owner('user-1'))
    old = aggregator.create(trip_budget())

    db.init_db(path)
    new = aggregator.create(trip_budget())

    assert aggregator.get(old['id'])['categories'] == []
    assert aggregator.get(new['id'])['total_allocated'] == 700


def test_fallback_retries_exactly_once_and_surfaces_retry_error():
    retry_failure = StorageError("Failed to select budget: database is locked", operation='select')
    store = SpyStore(results=[SchemaMismatchError('categories', operation='select'), retry_failure])
    aggregator = BudgetAggregator(store, static_owner('user-1'))

    with pytest.raises(StorageError) as excinfo:
        aggregator.list()

    assert excinfo.value is retry_failure
    assert len(store.calls) == 2
    first_columns = store.calls[0][1][1]
    retry_columns = store.calls[1][1][1]
    assert 'categories' in first_columns
    assert retry_columns == [c for c in first_columns if c != 'categories']


def test_required_column_mismatch_is_not_retried():
    store = SpyStore(results=[SchemaMismatchError('start_date', operation='select')])
    aggregator = BudgetAggregator(store, static_owner('user-1'))

    with pytest.raises(SchemaMismatchError):
        aggregator.list()

    assert len(store.calls) == 1


def test_insert_fallback_drops_only_categories():
    stored = {'id': 'b1', 'owner': 'user-1', 'name': 'Trip', 'amount': 1000.0,
              'start_date': '2024-01-01', 'end_date': '2024-01-01'}
    store = SpyStore(results=[SchemaMismatchError('categories', operation='insert'), stored])
    aggregator = BudgetAggregator(store, static_owner('user-1'))

    created = aggregator.create(trip_budget())

    retry_payload = store.calls[1][1][0]
    assert 'categories' not in retry_payload
    assert retry_payload['name'] == 'Trip'
    assert retry_payload['owner'] == 'user-1'
    assert created['categories'] == []


def test_every_operation_on_first_release_table(tmp_path):
    path = tmp_path / 'first.db'
    with db.connect(path) as conn:
        conn.executescript(db.SCHEMA_SQL)
    aggregator = BudgetAggregator(db.BudgetStore(path), static_owner('user-1'))

    created = aggregator.create(trip_budget())
    assert created['categories'] == []
    assert 'created_at' not in created

    assert [b['id'] for b in aggregator.list()] == [created['id']]
    assert aggregator.get(created['id'])['end_date'] == '2024-01-01'

    aggregator.update(created['id'], {'end_date': '2024-01-10'})
    collapsed = aggregator.update(created['id'], {'end_date': ''})
    assert collapsed['end_date'] == '2024-01-01'

    aggregator.delete(created['id'])
    assert aggregator.list() == []
    assert db.table_columns(path) == list(db.BASE_COLUMNS)
