import pytest

from finance_tracker.db import BudgetStore, ProfileStore, TransactionStore, connect
from finance_tracker.exceptions import RecordNotFoundError
from finance_tracker.models import Budget, Transaction


def _stores(tmp_path):
    db_path = tmp_path / 'finance.db'
    return TransactionStore(db_path), BudgetStore(db_path)


def test_create_assigns_id_and_load_orders_newest_first(tmp_path):
    transactions, _ = _stores(tmp_path)
    first = transactions.create(
        Transaction(date='2024-01-05', amount=40.0, category='Groceries', type='expense'), 'alice'
    )
    second = transactions.create(
        Transaction(date='2024-03-01', amount=2500.0, category='Salary', type='income', description='Pay'),
        'alice',
    )

    assert first.id and second.id and first.id != second.id

    loaded = transactions.load('alice')
    assert [t.id for t in loaded] == [second.id, first.id]
    assert loaded[0] == second
    assert loaded[1].description == ''


def test_transactions_are_scoped_to_user(tmp_path):
    transactions, _ = _stores(tmp_path)
    created = transactions.create(
        Transaction(date='2024-01-05', amount=40.0, category='Groceries', type='expense'), 'alice'
    )
    assert transactions.load('bob') == []

    with pytest.raises(RecordNotFoundError):
        transactions.delete(created.id, 'bob')
    assert len(transactions.load('alice')) == 1


def test_update_and_delete_transaction(tmp_path):
    transactions, _ = _stores(tmp_path)
    created = transactions.create(
        Transaction(date='2024-01-05', amount=40.0, category='Groceries', type='expense'), 'alice'
    )
    changed = Transaction(
        id=created.id, date='2024-01-06', amount=45.5, category='Dining', type='expense', description='Lunch'
    )
    transactions.update(changed, 'alice')
    assert transactions.load('alice') == [changed]

    transactions.delete(created.id, 'alice')
    assert transactions.load('alice') == []


def test_update_missing_transaction_raises(tmp_path):
    transactions, _ = _stores(tmp_path)
    missing = Transaction(id='nope', date='2024-01-06', amount=1.0, category='Other', type='expense')
    with pytest.raises(RecordNotFoundError):
        transactions.update(missing, 'alice')


def test_budget_upsert_keeps_one_row_per_category(tmp_path):
    _, budgets = _stores(tmp_path)
    budgets.upsert(Budget('Groceries', 400.0, purpose='Food'), 'alice')
    budgets.upsert(Budget('Groceries', 450.0, purpose='Food and drink'), 'alice')
    budgets.upsert(Budget('Dining', 150.0), 'alice')
    budgets.upsert(Budget('Groceries', 999.0), 'bob')

    loaded = budgets.load('alice')
    assert loaded == [
        Budget('Dining', 150.0),
        Budget('Groceries', 450.0, purpose='Food and drink'),
    ]


def test_budget_update_and_delete(tmp_path):
    _, budgets = _stores(tmp_path)
    budgets.upsert(Budget('Rent', 1200.0), 'alice')
    budgets.update(Budget('Rent', 1250.0, description='New lease'), 'alice')
    assert budgets.load('alice') == [Budget('Rent', 1250.0, description='New lease')]

    budgets.delete('Rent', 'alice')
    assert budgets.load('alice') == []

    with pytest.raises(RecordNotFoundError):
        budgets.delete('Rent', 'alice')
    with pytest.raises(RecordNotFoundError):
        budgets.update(Budget('Travel', 10.0), 'alice')


def test_non_numeric_stored_amount_loads_as_zero(tmp_path):
    transactions, _ = _stores(tmp_path)
    with connect(transactions.db_path) as conn:
        conn.execute(
            "INSERT INTO transactions (id, user_id, date, amount, category, description, type, created_at) "
            "VALUES ('bad', 'alice', '2024-03-01', 'abc', 'Dining', '', 'expense', '2024-03-01T00:00:00')"
        )
        conn.commit()
    transactions.create(Transaction(date='2024-02-01', amount=5.0, category='Dining', type='expense'), 'alice')

    loaded = transactions.load('alice')
    assert [t.amount for t in loaded] == [0.0, 5.0]


def test_profile_currency_defaults_and_persists(tmp_path):
    profiles = ProfileStore(tmp_path / 'finance.db')
    assert profiles.get_currency('alice', 'USD') == 'USD'

    profiles.set_currency('alice', 'eur')
    profiles.set_currency('alice', 'GBP')
    assert ProfileStore(tmp_path / 'finance.db').get_currency('alice', 'USD') == 'GBP'
    assert profiles.get_currency('bob', 'USD') == 'USD'
