"""Finance service: the per-session owner of a user's finance state.

A :class:`FinanceService` loads the user's data from the stores, performs
create/update/delete calls against them and, only once a call succeeds,
dispatches the matching action through :func:`finance_reducer`.  The
dashboard keeps one instance per browser session; nothing here is global.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

from .db import BudgetStore, TransactionStore
from .exceptions import NotAuthenticatedError, ValidationError
from .finance_utils import parse_transaction_date
from .models import TRANSACTION_TYPES, Budget, Transaction
from .state import ActionType, FinanceAction, FinanceState, finance_reducer, initial_state

logger = logging.getLogger(__name__)

Notifier = Callable[[str, str], None]


def _log_notifier(level: str, message: str) -> None:
    logger.log(logging.ERROR if level == 'error' else logging.INFO, message)


def validate_transaction(transaction: Transaction) -> None:
    if transaction.type not in TRANSACTION_TYPES:
        raise ValidationError(f"Transaction type must be one of {TRANSACTION_TYPES}, got {transaction.type!r}")
    if transaction.amount < 0:
        raise ValidationError("Transaction amount cannot be negative")
    if not transaction.category.strip():
        raise ValidationError("Transaction category is required")
    if parse_transaction_date(transaction.date) is None:
        raise ValidationError(f"Transaction date {transaction.date!r} is not a valid ISO-8601 date")


def validate_budget(budget: Budget) -> None:
    if not budget.category.strip():
        raise ValidationError("Budget category is required")
    if budget.amount < 0:
        raise ValidationError("Budget amount cannot be negative")


class FinanceService:
    """Keeps a :class:`FinanceState` in step with the stores for one user."""

    def __init__(
        self,
        user_id: Optional[str],
        transaction_store: TransactionStore,
        budget_store: BudgetStore,
        notify: Optional[Notifier] = None,
    ):
        self.user_id = user_id
        self.transaction_store = transaction_store
        self.budget_store = budget_store
        self.notify = notify or _log_notifier
        self.state: FinanceState = initial_state()
        self.is_loading = False

    @property
    def transactions(self) -> List[Transaction]:
        return self.state.transactions

    @property
    def budgets(self) -> List[Budget]:
        return self.state.budgets

    def dispatch(self, action: FinanceAction) -> FinanceState:
        self.state = finance_reducer(self.state, action)
        return self.state

    def _require_user(self) -> str:
        if not self.user_id:
            raise NotAuthenticatedError("User not authenticated")
        return self.user_id

    def _fail(self, message: str, exc: Exception) -> None:
        logger.error("%s: %s", message, exc)
        self.notify('error', message)

    def load(self) -> FinanceState:
        """Replace the held state with the user's stored transactions and budgets."""
        if not self.user_id:
            self.state = initial_state()
            return self.state

        self.is_loading = True
        try:
            transactions = self.transaction_store.load(self.user_id)
            self.dispatch(FinanceAction(ActionType.SET_TRANSACTIONS, transactions))
            budgets = self.budget_store.load(self.user_id)
            self.dispatch(FinanceAction(ActionType.SET_BUDGETS, budgets))
        except Exception as exc:
            self._fail("There was a problem loading your financial data.", exc)
            raise
        finally:
            self.is_loading = False

        logger.info(
            "Loaded %d transactions and %d budgets for user %s",
            len(self.state.transactions), len(self.state.budgets), self.user_id,
        )
        return self.state

    def add_transaction(self, data: Any) -> Transaction:
        """Store a new transaction (``id`` is assigned by the store)."""
        try:
            user_id = self._require_user()
            transaction = data if isinstance(data, Transaction) else Transaction.from_record(data)
            validate_transaction(transaction)
            created = self.transaction_store.create(transaction, user_id)
        except Exception as exc:
            self._fail("Failed to add transaction", exc)
            raise
        self.dispatch(FinanceAction(ActionType.ADD_TRANSACTION, created))
        self.notify('success', "Transaction added successfully")
        return created

    def update_transaction(self, transaction: Transaction) -> Transaction:
        try:
            user_id = self._require_user()
            validate_transaction(transaction)
            self.transaction_store.update(transaction, user_id)
        except Exception as exc:
            self._fail("Failed to update transaction", exc)
            raise
        self.dispatch(FinanceAction(ActionType.UPDATE_TRANSACTION, transaction))
        self.notify('success', "Transaction updated successfully")
        return transaction

    def delete_transaction(self, transaction_id: str) -> None:
        try:
            user_id = self._require_user()
            self.transaction_store.delete(transaction_id, user_id)
        except Exception as exc:
            self._fail("Failed to delete transaction", exc)
            raise
        self.dispatch(FinanceAction(ActionType.DELETE_TRANSACTION, transaction_id))
        self.notify('success', "Transaction deleted successfully")

    def add_budget(self, data: Any) -> Budget:
        """Create a budget, replacing any existing budget for the same category."""
        try:
            user_id = self._require_user()
            budget = data if isinstance(data, Budget) else Budget.from_record(data)
            validate_budget(budget)
            self.budget_store.upsert(budget, user_id)
        except Exception as exc:
            self._fail("Failed to add budget", exc)
            raise
        self.dispatch(FinanceAction(ActionType.ADD_BUDGET, budget))
        self.notify('success', "Budget added successfully")
        return budget

    def update_budget(self, budget: Budget) -> Budget:
        try:
            user_id = self._require_user()
            validate_budget(budget)
            self.budget_store.update(budget, user_id)
        except Exception as exc:
            self._fail("Failed to update budget", exc)
            raise
        self.dispatch(FinanceAction(ActionType.UPDATE_BUDGET, budget))
        self.notify('success', "Budget updated successfully")
        return budget

    def delete_budget(self, category: str) -> None:
        try:
            user_id = self._require_user()
            self.budget_store.delete(category, user_id)
        except Exception as exc:
            self._fail("Failed to delete budget", exc)
            raise
        self.dispatch(FinanceAction(ActionType.DELETE_BUDGET, category))
        self.notify('success', "Budget deleted successfully")
