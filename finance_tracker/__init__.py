"""Top‑level package for the Finance Tracker.

This file makes the directory a Python package and exposes
convenient names.  The primary modules are:

* ``finance_utils`` – derived metrics over transactions and budgets
* ``reports`` – DataFrame tables built from those metrics
* ``service`` – the per-session state holder backed by the SQLite stores
* ``dashboard`` – a Streamlit app that ties everything together

To run the dashboard from the command line you can execute:

```bash
streamlit run finance_tracker/Home.py
```
"""

from . import finance_utils  # noqa: F401  # re-exported for convenience
from . import reports  # noqa: F401  # re-exported for convenience
from .finance_utils import (  # noqa: F401
    budget_vs_actual,
    expenses_by_category,
    monthly_trends,
    net_balance,
    total_expenses,
    total_income,
    transactions_for_month,
)
from .models import Budget, Transaction  # noqa: F401

# Streamlit may not be installed in all environments (e.g. during unit
# testing).  If the import fails, ``dashboard`` is ``None``.
try:
    from . import dashboard  # type: ignore  # noqa: F401
except ModuleNotFoundError:
    dashboard = None  # type: ignore


__all__ = [
    "finance_utils",
    "reports",
    "dashboard",
    "Budget",
    "Transaction",
    "budget_vs_actual",
    "expenses_by_category",
    "monthly_trends",
    "net_balance",
    "total_expenses",
    "total_income",
    "transactions_for_month",
]
