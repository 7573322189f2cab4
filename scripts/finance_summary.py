#!/usr/bin/env python3
"""Print totals, monthly trends and budget-vs-actual for one user."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from finance_tracker import config
from finance_tracker.db import BudgetStore, TransactionStore
from finance_tracker.finance_utils import count_unparsable_dates
from finance_tracker.formatting import format_currency
from finance_tracker.reports import budget_progress_frame, dashboard_summary, monthly_trend_frame


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Show a finance summary for a user.')
    parser.add_argument('--user', default=config.DEFAULT_USER_ID, help='User id to report on')
    parser.add_argument('--months', type=int, default=config.TREND_MONTHS, help='Months in the trend table')
    parser.add_argument('--currency', default=config.DEFAULT_CURRENCY, help='ISO currency code for display')
    parser.add_argument('--db', default=config.get_db_path(), help='Path to the SQLite database')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    db_path = Path(args.db)
    if not db_path.exists():
        print(f"Database not found at {db_path}")
        return 1

    transactions = TransactionStore(db_path).load(args.user)
    budgets = BudgetStore(db_path).load(args.user)

    def money(amount: float) -> str:
        return format_currency(amount, args.currency)

    summary = dashboard_summary(transactions)
    print(f"Finance summary for {args.user} ({summary['transaction_count']} transactions)")
    print(f"  Income:   {money(summary['income'])}")
    print(f"  Expenses: {money(summary['expenses'])}")
    print(f"  Balance:  {money(summary['balance'])}")

    skipped = count_unparsable_dates(transactions)
    if skipped:
        print(f"  ({skipped} transactions have unreadable dates and are left out of monthly figures)")

    trend = monthly_trend_frame(transactions, args.months)
    print(f"\nLast {args.months} months:")
    print(trend.to_string(index=False, formatters={col: money for col in ['Income', 'Expenses', 'Net']}))

    progress = budget_progress_frame(budgets, transactions)
    print("\nBudget vs actual:")
    if progress.empty:
        print("  No budgets defined.")
    else:
        print(progress.to_string(
            index=False,
            formatters={col: money for col in ['Budgeted', 'Spent', 'Remaining']},
        ))
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
