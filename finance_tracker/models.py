"""Transaction and budget records.

Both records are frozen dataclasses; edits go through
:func:`dataclasses.replace`.  Metric functions in
:mod:`finance_tracker.finance_utils` also accept plain mappings with the
same field names (rows from a store, JSON payloads), so every field is
read through :func:`get_field`.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional

import pandas as pd

INCOME = 'income'
EXPENSE = 'expense'
TRANSACTION_TYPES = (INCOME, EXPENSE)

EXPENSE_CATEGORIES = [
    'Groceries',
    'Dining',
    'Transport',
    'Utilities',
    'Rent',
    'Entertainment',
    'Shopping',
    'Health',
    'Education',
    'Travel',
    'Other',
]

INCOME_CATEGORIES = [
    'Salary',
    'Freelance',
    'Investments',
    'Gifts',
    'Refunds',
    'Other',
]


def get_field(record: Any, name: str, default: Any = None) -> Any:
    """Read ``name`` from a mapping or an object, returning ``default`` if absent."""
    if isinstance(record, Mapping):
        return record.get(name, default)
    return getattr(record, name, default)


def _coerce_amount(value: Any) -> float:
    if value is None:
        return 0.0
    number = pd.to_numeric(value, errors='coerce')
    if pd.isna(number):
        return 0.0
    return float(number)


@dataclass(frozen=True)
class Transaction:
    """A single dated income or expense record."""

    date: str
    amount: float
    category: str
    type: str
    description: str = ''
    id: Optional[str] = None

    @classmethod
    def from_record(cls, record: Any) -> 'Transaction':
        """Build a transaction from a mapping or another object with the same fields."""
        raw_id = get_field(record, 'id')
        return cls(
            date=str(get_field(record, 'date', '') or ''),
            amount=_coerce_amount(get_field(record, 'amount')),
            category=str(get_field(record, 'category', '') or ''),
            type=str(get_field(record, 'type', '') or '').strip().lower(),
            description=str(get_field(record, 'description', '') or ''),
            id=str(raw_id) if raw_id is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Budget:
    """A per-category spending cap.  ``category`` is the key."""

    category: str
    amount: float
    purpose: str = ''
    description: str = ''

    @classmethod
    def from_record(cls, record: Any) -> 'Budget':
        return cls(
            category=str(get_field(record, 'category', '') or ''),
            amount=_coerce_amount(get_field(record, 'amount')),
            purpose=str(get_field(record, 'purpose', '') or ''),
            description=str(get_field(record, 'description', '') or ''),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
