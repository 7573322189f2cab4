"""In-memory mirror of a user's stored transactions and budgets.

:func:`finance_reducer` is a pure function: it returns a new
:class:`FinanceState` and never mutates the one it is given.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, List

from .models import Budget, Transaction

logger = logging.getLogger(__name__)


class ActionType(str, Enum):
    SET_TRANSACTIONS = 'SET_TRANSACTIONS'
    SET_BUDGETS = 'SET_BUDGETS'
    ADD_TRANSACTION = 'ADD_TRANSACTION'
    DELETE_TRANSACTION = 'DELETE_TRANSACTION'
    UPDATE_TRANSACTION = 'UPDATE_TRANSACTION'
    ADD_BUDGET = 'ADD_BUDGET'
    DELETE_BUDGET = 'DELETE_BUDGET'
    UPDATE_BUDGET = 'UPDATE_BUDGET'


@dataclass(frozen=True)
class FinanceAction:
    type: ActionType
    payload: Any = None


@dataclass(frozen=True)
class FinanceState:
    transactions: List[Transaction] = field(default_factory=list)
    budgets: List[Budget] = field(default_factory=list)


def initial_state() -> FinanceState:
    return FinanceState()


def _upsert_budget(budgets: List[Budget], budget: Budget) -> List[Budget]:
    if any(b.category == budget.category for b in budgets):
        return [budget if b.category == budget.category else b for b in budgets]
    return [*budgets, budget]


def finance_reducer(state: FinanceState, action: FinanceAction) -> FinanceState:
    """Apply ``action`` to ``state`` and return the resulting state."""
    kind = action.type
    payload = action.payload

    if kind == ActionType.SET_TRANSACTIONS:
        return replace(state, transactions=list(payload or []))
    if kind == ActionType.SET_BUDGETS:
        return replace(state, budgets=list(payload or []))
    if kind == ActionType.ADD_TRANSACTION:
        return replace(state, transactions=[*state.transactions, payload])
    if kind == ActionType.DELETE_TRANSACTION:
        return replace(state, transactions=[t for t in state.transactions if t.id != payload])
    if kind == ActionType.UPDATE_TRANSACTION:
        return replace(state, transactions=[
            payload if t.id == payload.id else t for t in state.transactions
        ])
    if kind == ActionType.ADD_BUDGET:
        # One budget per category
        return replace(state, budgets=_upsert_budget(state.budgets, payload))
    if kind == ActionType.DELETE_BUDGET:
        return replace(state, budgets=[b for b in state.budgets if b.category != payload])
    if kind == ActionType.UPDATE_BUDGET:
        return replace(state, budgets=[
            payload if b.category == payload.category else b for b in state.budgets
        ])

    logger.warning("Ignoring unknown finance action %r", kind)
    return state
