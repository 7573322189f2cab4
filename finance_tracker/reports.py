"""Report tables for the dashboard and CLI.

Each builder turns the pure metrics from :mod:`finance_utils` into a
DataFrame ready for ``st.dataframe`` or ``DataFrame.to_string``.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

import numpy as np
import pandas as pd

from .finance_utils import (
    DateLike,
    budget_vs_actual,
    expenses_by_category,
    monthly_trends,
    net_balance,
    parse_transaction_date,
    total_expenses,
    total_income,
)
from .models import get_field

TRANSACTION_FRAME_COLUMNS = ['id', 'Date', 'Description', 'Category', 'Type', 'Amount']


def _naive_date(value: Any) -> Optional[pd.Timestamp]:
    parsed = parse_transaction_date(value)
    if parsed is None or parsed.tzinfo is None:
        return parsed
    return parsed.tz_localize(None)


def transactions_frame(transactions: Iterable[Any]) -> pd.DataFrame:
    """Tabulate transactions newest first.  Unparsable dates become ``NaT`` and sort last."""
    rows = [
        {
            'id': get_field(t, 'id'),
            'Date': get_field(t, 'date'),
            'Description': get_field(t, 'description', '') or '',
            'Category': get_field(t, 'category', '') or '',
            'Type': get_field(t, 'type', '') or '',
            'Amount': get_field(t, 'amount', 0.0),
        }
        for t in transactions
    ]
    if not rows:
        return pd.DataFrame(columns=TRANSACTION_FRAME_COLUMNS)

    df = pd.DataFrame(rows, columns=TRANSACTION_FRAME_COLUMNS)
    df['Date'] = pd.to_datetime(df['Date'].map(_naive_date))
    df['Amount'] = pd.to_numeric(df['Amount'], errors='coerce').fillna(0.0)
    return df.sort_values('Date', ascending=False, na_position='last').reset_index(drop=True)


def recent_transactions(transactions: Iterable[Any], limit: int = 5) -> pd.DataFrame:
    return transactions_frame(transactions).head(limit)


def monthly_trend_frame(
    transactions: Iterable[Any],
    months_to_show: int = 6,
    now: Optional[DateLike] = None,
) -> pd.DataFrame:
    """Monthly income, expenses and net over the trailing window, oldest first."""
    points = monthly_trends(transactions, months_to_show, now=now)
    df = pd.DataFrame(
        [point.to_dict() for point in points],
        columns=['month', 'income', 'expenses'],
    ).rename(columns={'month': 'Month', 'income': 'Income', 'expenses': 'Expenses'})
    df['Net'] = df['Income'] - df['Expenses']
    return df


def category_breakdown_frame(transactions: Iterable[Any]) -> pd.DataFrame:
    """Expense totals per category with each category's share of all expenses."""
    totals = expenses_by_category(transactions)
    if not totals:
        return pd.DataFrame(columns=['Category', 'Amount', 'Share'])

    df = pd.DataFrame(list(totals.items()), columns=['Category', 'Amount'])
    grand_total = df['Amount'].sum()
    df['Share'] = (df['Amount'] / grand_total * 100).round(1) if grand_total > 0 else 0.0
    return df.sort_values('Amount', ascending=False).reset_index(drop=True)


def budget_progress_frame(budgets: Iterable[Any], transactions: Iterable[Any]) -> pd.DataFrame:
    """Budget vs actual with remaining headroom and a 0-100 progress value.

    ``Percentage`` is capped at 100 for progress bars and is 0 for a zero
    budget; ``Over_Budget`` carries the uncapped comparison.
    """
    comparison = budget_vs_actual(budgets, transactions)
    columns = ['Category', 'Budgeted', 'Spent', 'Remaining', 'Percentage', 'Over_Budget']
    if not comparison:
        return pd.DataFrame(columns=columns)

    df = pd.DataFrame([item.to_dict() for item in comparison]).rename(
        columns={'category': 'Category', 'budgeted': 'Budgeted', 'spent': 'Spent'}
    )
    df['Remaining'] = df['Budgeted'] - df['Spent']
    budgeted = df['Budgeted'].to_numpy(dtype=float)
    spent = df['Spent'].to_numpy(dtype=float)
    with np.errstate(divide='ignore', invalid='ignore'):
        ratio = np.where(budgeted > 0, spent / budgeted * 100, 0.0)
    df['Percentage'] = np.minimum(np.floor(ratio + 0.5), 100).astype(int)
    df['Over_Budget'] = spent > budgeted
    return df[columns]


def dashboard_summary(transactions: Iterable[Any]) -> Dict[str, Any]:
    """Headline numbers for the stat cards."""
    records: List[Any] = list(transactions)
    return {
        'income': total_income(records),
        'expenses': total_expenses(records),
        'balance': net_balance(records),
        'transaction_count': len(records),
    }
