import logging
from dataclasses import replace

import pytest

from finance_tracker import config
from finance_tracker.models import Budget, Transaction, get_field


def test_get_field_reads_mappings_and_attributes():
    txn = Transaction(date='2024-01-01', amount=5.0, category='Dining', type='expense')
    assert get_field({'amount': 3}, 'amount') == 3
    assert get_field(txn, 'amount') == 5.0
    assert get_field({}, 'missing', 'fallback') == 'fallback'


def test_transaction_from_record_normalizes_fields():
    txn = Transaction.from_record({
        'id': 42,
        'date': '2024-02-03',
        'amount': '19.5',
        'category': 'Groceries',
        'type': ' Expense ',
        'description': None,
    })
    assert txn == Transaction(
        date='2024-02-03', amount=19.5, category='Groceries', type='expense', description='', id='42'
    )


def test_transaction_is_frozen_and_replace_copies():
    txn = Transaction(date='2024-01-01', amount=5.0, category='Dining', type='expense')
    with pytest.raises(AttributeError):
        txn.amount = 10.0
    edited = replace(txn, amount=10.0)
    assert edited.amount == 10.0
    assert txn.amount == 5.0


def test_budget_round_trips_through_dict():
    budget = Budget('Rent', 1200.0, purpose='Housing')
    assert Budget.from_record(budget.to_dict()) == budget
    assert Budget.from_record({'category': 'Rent', 'amount': None}).amount == 0.0


def test_configure_logging_sets_level(monkeypatch):
    root = logging.getLogger()
    monkeypatch.setattr(root, 'level', root.level)
    config.configure_logging('debug')
    assert root.level == logging.DEBUG
    config.configure_logging('not-a-level')
    assert root.level == logging.INFO


def test_get_db_path_is_string():
    assert config.get_db_path() == str(config.DB_PATH)
