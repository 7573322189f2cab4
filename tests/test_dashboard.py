import types

from finance_tracker import dashboard
from finance_tracker.db import BudgetStore, ProfileStore, TransactionStore
from finance_tracker.models import Budget, Transaction
from finance_tracker.reports import transactions_frame


def _st_mock(state):
    toasts = []
    mock = types.SimpleNamespace(
        session_state=state,
        toast=lambda message, icon=None: toasts.append((message, icon)),
    )
    return mock, toasts


def test_get_service_loads_and_caches_per_session(monkeypatch, tmp_path):
    db_path = tmp_path / 'finance.db'
    TransactionStore(db_path).create(
        Transaction(date='2024-03-01', amount=12.0, category='Dining', type='expense'), 'alice'
    )
    BudgetStore(db_path).upsert(Budget('Dining', 100.0), 'alice')

    state = {}
    st_mock, _ = _st_mock(state)
    monkeypatch.setattr(dashboard, 'st', st_mock)

    service = dashboard.get_service('alice', db_path=str(db_path))
    assert state[dashboard.SERVICE_KEY] is service
    assert len(service.transactions) == 1
    assert service.budgets == [Budget('Dining', 100.0)]

    assert dashboard.get_service('alice', db_path=str(db_path)) is service


def test_get_service_rebuilds_when_user_changes(monkeypatch, tmp_path):
    db_path = tmp_path / 'finance.db'
    state = {}
    st_mock, _ = _st_mock(state)
    monkeypatch.setattr(dashboard, 'st', st_mock)

    first = dashboard.get_service('alice', db_path=str(db_path))
    second = dashboard.get_service('bob', db_path=str(db_path))
    assert first is not second
    assert second.user_id == 'bob'
    assert state[dashboard.SERVICE_KEY] is second


def test_service_notifications_become_toasts(monkeypatch, tmp_path):
    st_mock, toasts = _st_mock({})
    monkeypatch.setattr(dashboard, 'st', st_mock)

    service = dashboard.get_service('alice', db_path=str(tmp_path / 'finance.db'))
    service.add_budget(Budget('Rent', 1200.0))
    assert toasts == [('Budget added successfully', '✅')]


def test_load_currency_reads_profile_once_per_user(monkeypatch, tmp_path):
    db_path = str(tmp_path / 'finance.db')
    ProfileStore(db_path).set_currency('alice', 'EUR')
    state = {}
    st_mock, _ = _st_mock(state)
    monkeypatch.setattr(dashboard, 'st', st_mock)

    assert dashboard.load_currency('alice', db_path=db_path) == 'EUR'
    # later profile writes do not leak into an already loaded session
    ProfileStore(db_path).set_currency('alice', 'GBP')
    assert dashboard.load_currency('alice', db_path=db_path) == 'EUR'
    assert dashboard.load_currency('bob', db_path=db_path) == dashboard.config.DEFAULT_CURRENCY


def test_save_currency_persists_and_toasts(monkeypatch, tmp_path):
    db_path = str(tmp_path / 'finance.db')
    state = {}
    st_mock, toasts = _st_mock(state)
    monkeypatch.setattr(dashboard, 'st', st_mock)

    dashboard.save_currency('alice', 'jpy', db_path=db_path)
    assert state[dashboard.CURRENCY_KEY] == 'JPY'
    assert toasts == [('Settings updated successfully', '✅')]
    assert ProfileStore(db_path).get_currency('alice', 'USD') == 'JPY'


def _frame():
    return transactions_frame([
        Transaction(id='a', date='2024-03-01', amount=10.0, category='Dining', type='expense', description='Lunch'),
        Transaction(id='b', date='2024-03-01', amount=10.0, category='Dining', type='expense', description='Lunch'),
        Transaction(id='c', date='2024-03-02', amount=900.0, category='Salary', type='income'),
        Transaction(id='d', date='not-a-date', amount=3.0, category='Other', type='expense'),
    ])


def test_filter_transactions_by_view():
    df = _frame()
    assert sorted(dashboard.filter_transactions(df, 'All')['id']) == ['a', 'b', 'c', 'd']
    assert list(dashboard.filter_transactions(df, 'Income')['id']) == ['c']
    assert sorted(dashboard.filter_transactions(df, 'Expenses')['id']) == ['a', 'b', 'd']


def test_delete_options_keep_duplicates_and_undated_rows():
    options = dashboard.delete_options(_frame(), 'USD')
    assert sorted(options) == ['a', 'b', 'c', 'd']
    assert options['a'] == options['b'] == '2024-03-01 Lunch ($10.00)'
    assert options['d'] == 'no date Other ($3.00)'
