import pytest

from budget_planner.budgets import templates
from budget_planner.errors import ValidationError


def _config():
    return {
        'default_amount': 5000,
        'groups': {
            'life-events': [
                {'id': 'a', 'name': 'Alpha', 'categories': [{'name': 'One', 'amount': 10}]},
                {'id': 'empty', 'name': 'Empty', 'categories': [{'name': 'Nothing'}]},
            ],
            'lifestyle': [
                {'id': 'a', 'name': 'Alpha duplicate', 'categories': []},
                {'id': 'b', 'name': 'Beta', 'categories': []},
            ],
        },
    }


@pytest.fixture
def fake_config(monkeypatch):
    monkeypatch.setattr(templates, '_get_config', _config)


def test_list_templates_deduplicates(fake_config):
    listed = templates.list_templates()
    assert [t['id'] for t in listed] == ['a', 'empty', 'b']
    assert listed[0]['name'] == 'Alpha'
    assert listed[0]['group'] == 'life-events'


def test_list_templates_by_group(fake_config):
    assert [t['id'] for t in templates.list_templates('lifestyle')] == ['a', 'b']


def test_budget_from_template_uses_category_sum(fake_config):
    payload = templates.budget_from_template('a', start_date='2024-05-01')
    assert payload['name'] == 'Alpha Budget'
    assert payload['amount'] == 10
    assert payload['start_date'] == '2024-05-01'
    assert [c['name'] for c in payload['categories']] == ['One']
    assert payload['categories'][0]['subcategories'] == []


def test_budget_from_template_falls_back_to_default_amount(fake_config):
    payload = templates.budget_from_template('empty')
    assert payload['amount'] == 5000
    assert payload['start_date']


def test_unknown_template(fake_config):
    with pytest.raises(ValidationError):
        templates.budget_from_template('missing')


def test_packaged_templates_load():
    listed = templates.list_templates()
    ids = [t['id'] for t in listed]
    assert len(ids) == len(set(ids))
    assert 'student' in ids


def test_get_config_value():
    from budget_planner.defaults import get_config_value

    assert get_config_value('templates', 'default_amount') == 5000
    assert get_config_value('templates', 'missing', default='x') == 'x'
    assert get_config_value('no-such-file', default=1) == 1
