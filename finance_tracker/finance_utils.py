"""Derived finance metrics.

Pure functions over in-memory transaction and budget collections:

* totals - :func:`total_income`, :func:`total_expenses`, :func:`net_balance`
* category aggregation - :func:`expenses_by_category`
* month filtering - :func:`transactions_for_month`
* trends - :func:`monthly_trends`
* budget comparison - :func:`budget_vs_actual`

Records may be :class:`~finance_tracker.models.Transaction` /
:class:`~finance_tracker.models.Budget` instances or mappings with the same
field names.  None of these functions raise on a malformed record: a date
that cannot be parsed simply never matches a month, and a non-numeric
amount counts as zero.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Union

import pandas as pd

from .models import EXPENSE, INCOME, get_field

logger = logging.getLogger(__name__)

DateLike = Union[str, date, datetime, pd.Timestamp]

# Relative keywords pandas would resolve against the clock
_RELATIVE_DATE_WORDS = frozenset({'now', 'today'})


@dataclass(frozen=True)
class MonthlyTrendPoint:
    """Income and expense totals for one calendar month."""

    month: str
    income: float
    expenses: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class BudgetVsActual:
    """A budget cap next to what was actually spent in its category."""

    category: str
    budgeted: float
    spent: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _amount(record: Any) -> float:
    value = get_field(record, 'amount')
    if value is None:
        return 0.0
    number = pd.to_numeric(value, errors='coerce')
    if pd.isna(number):
        return 0.0
    return float(number)


def _type(record: Any) -> str:
    value = get_field(record, 'type')
    if not isinstance(value, str):
        return ''
    return value.strip().lower()


def parse_transaction_date(value: Any) -> Optional[pd.Timestamp]:
    """Parse an ISO-8601 date string, returning ``None`` when it is unusable.

    Only non-empty ISO-8601 strings are considered; ``None``, numbers,
    other objects, locale formats such as ``03/15/2024`` and relative
    words like ``now`` are rejected rather than coerced.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.lower() in _RELATIVE_DATE_WORDS:
        return None
    try:
        parsed = pd.to_datetime(text, format='ISO8601', errors='coerce')
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(parsed):
        return None
    return parsed


def total_income(transactions: Iterable[Any]) -> float:
    """Sum of ``amount`` over income transactions (0 for no input)."""
    return sum((_amount(t) for t in transactions if _type(t) == INCOME), 0.0)


def total_expenses(transactions: Iterable[Any]) -> float:
    """Sum of ``amount`` over expense transactions."""
    return sum((_amount(t) for t in transactions if _type(t) == EXPENSE), 0.0)


def net_balance(transactions: Iterable[Any]) -> float:
    """Income minus expenses.  All amounts are assumed to share one currency."""
    records = list(transactions)
    return total_income(records) - total_expenses(records)


def expenses_by_category(transactions: Iterable[Any]) -> Dict[str, float]:
    """Map each category to its summed expense amount.

    Categories without any expense are absent from the result rather than
    present with a zero value.
    """
    totals: Dict[str, float] = defaultdict(float)
    for t in transactions:
        if _type(t) != EXPENSE:
            continue
        category = get_field(t, 'category')
        try:
            totals[category] += _amount(t)
        except TypeError:
            logger.debug("Skipping transaction %s with unusable category %r", get_field(t, 'id'), category)
    return dict(totals)


def transactions_for_month(transactions: Iterable[Any], reference_date: DateLike) -> List[Any]:
    """Return the transactions dated in the same year and month as ``reference_date``.

    Input order is preserved.  Records whose ``date`` is missing, not a
    string, or unparsable are skipped.
    """
    reference = pd.Timestamp(reference_date)
    matching: List[Any] = []
    for t in transactions:
        raw = get_field(t, 'date')
        parsed = parse_transaction_date(raw)
        if parsed is None:
            logger.debug("Skipping transaction %s with unparsable date %r", get_field(t, 'id'), raw)
            continue
        if parsed.year == reference.year and parsed.month == reference.month:
            matching.append(t)
    return matching


def count_unparsable_dates(transactions: Iterable[Any]) -> int:
    """Number of records that no month filter will ever include."""
    return sum(1 for t in transactions if parse_transaction_date(get_field(t, 'date')) is None)


def monthly_trends(
    transactions: Iterable[Any],
    months_to_show: int = 6,
    now: Optional[DateLike] = None,
) -> List[MonthlyTrendPoint]:
    """Income/expense totals for the trailing ``months_to_show`` calendar months.

    The window ends with the month containing ``now`` (wall-clock time when
    omitted) and is returned oldest first.  Month arithmetic clamps the day,
    so the 31st of March minus one month lands in February.
    """
    reference = pd.Timestamp.now() if now is None else pd.Timestamp(now)
    records = list(transactions)

    points: List[MonthlyTrendPoint] = []
    for offset in range(months_to_show - 1, -1, -1):
        month = reference - pd.DateOffset(months=offset)
        subset = transactions_for_month(records, month)
        points.append(MonthlyTrendPoint(
            month=month.strftime('%b'),
            income=total_income(subset),
            expenses=total_expenses(subset),
        ))
    return points


def budget_vs_actual(budgets: Iterable[Any], transactions: Iterable[Any]) -> List[BudgetVsActual]:
    """Pair each budget with the expenses recorded in its category.

    Budgets drive the output: order follows ``budgets``, a budget without
    expenses reports ``spent == 0`` and spending without a budget is left out.
    """
    spent_by_category = expenses_by_category(transactions)
    rows: List[BudgetVsActual] = []
    for budget in budgets:
        category = get_field(budget, 'category')
        try:
            spent = spent_by_category.get(category, 0.0)
        except TypeError:
            spent = 0.0
        rows.append(BudgetVsActual(category=category, budgeted=_amount(budget), spent=spent))
    return rows


def get_categories(transactions: Iterable[Any]) -> List[str]:
    """Sorted distinct categories used by ``transactions``."""
    categories = {c for c in (get_field(t, 'category') for t in transactions) if isinstance(c, str) and c}
    return sorted(categories)
