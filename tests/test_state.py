from finance_tracker.models import Budget, Transaction
from finance_tracker.state import (
    ActionType,
    FinanceAction,
    FinanceState,
    finance_reducer,
    initial_state,
)


def _txn(txn_id, amount=10.0, category='Groceries', type_='expense'):
    return Transaction(id=txn_id, date='2024-03-01', amount=amount, category=category, type=type_)


def _state():
    return FinanceState(
        transactions=[_txn('a'), _txn('b', 20.0)],
        budgets=[Budget('Groceries', 400.0), Budget('Dining', 150.0)],
    )


def test_initial_state_is_empty():
    state = initial_state()
    assert state.transactions == []
    assert state.budgets == []


def test_set_actions_replace_collections():
    state = finance_reducer(initial_state(), FinanceAction(ActionType.SET_TRANSACTIONS, [_txn('x')]))
    state = finance_reducer(state, FinanceAction(ActionType.SET_BUDGETS, [Budget('Rent', 1200.0)]))
    assert [t.id for t in state.transactions] == ['x']
    assert [b.category for b in state.budgets] == ['Rent']


def test_add_and_delete_transaction():
    state = finance_reducer(_state(), FinanceAction(ActionType.ADD_TRANSACTION, _txn('c')))
    assert [t.id for t in state.transactions] == ['a', 'b', 'c']
    state = finance_reducer(state, FinanceAction(ActionType.DELETE_TRANSACTION, 'b'))
    assert [t.id for t in state.transactions] == ['a', 'c']


def test_update_transaction_replaces_matching_id():
    updated = _txn('b', 99.0, category='Dining')
    state = finance_reducer(_state(), FinanceAction(ActionType.UPDATE_TRANSACTION, updated))
    assert state.transactions[1] == updated
    assert state.transactions[0].amount == 10.0


def test_add_budget_upserts_on_category():
    state = finance_reducer(_state(), FinanceAction(ActionType.ADD_BUDGET, Budget('Groceries', 500.0)))
    assert [b.category for b in state.budgets] == ['Groceries', 'Dining']
    assert state.budgets[0].amount == 500.0

    state = finance_reducer(state, FinanceAction(ActionType.ADD_BUDGET, Budget('Travel', 800.0)))
    assert [b.category for b in state.budgets] == ['Groceries', 'Dining', 'Travel']


def test_update_and_delete_budget():
    state = finance_reducer(
        _state(), FinanceAction(ActionType.UPDATE_BUDGET, Budget('Dining', 175.0, purpose='Eating out'))
    )
    assert state.budgets[1] == Budget('Dining', 175.0, purpose='Eating out')
    state = finance_reducer(state, FinanceAction(ActionType.DELETE_BUDGET, 'Groceries'))
    assert [b.category for b in state.budgets] == ['Dining']


def test_reducer_does_not_mutate_input():
    original = _state()
    snapshot_txns = list(original.transactions)
    snapshot_budgets = list(original.budgets)
    finance_reducer(original, FinanceAction(ActionType.ADD_TRANSACTION, _txn('c')))
    finance_reducer(original, FinanceAction(ActionType.DELETE_BUDGET, 'Dining'))
    assert original.transactions == snapshot_txns
    assert original.budgets == snapshot_budgets


def test_unknown_action_returns_same_state():
    state = _state()
    assert finance_reducer(state, FinanceAction('RESET')) is state
