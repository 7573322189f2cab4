"""Streamlit app for the Finance Tracker.

The app keeps one :class:`~finance_tracker.service.FinanceService` per
browser session in ``st.session_state`` and renders every number from the
pure metric functions and report tables.  Sections are chosen from the
sidebar: Dashboard, Transactions, Budgets, Reports and Settings.

To run the dashboard from the command line::

    streamlit run finance_tracker/Home.py

or use ``python run_dashboard.py`` from the project root.
"""

from __future__ import annotations

from datetime import date
from typing import Callable, Dict, Optional

import pandas as pd
import streamlit as st

from . import config
from .db import BudgetStore, ProfileStore, TransactionStore
from .exceptions import FinanceTrackerError
from .formatting import CURRENCY_SYMBOLS, escape_dollar_for_markdown, format_currency, get_month_name
from .models import EXPENSE, EXPENSE_CATEGORIES, INCOME, INCOME_CATEGORIES, Budget
from .reports import (
    budget_progress_frame,
    category_breakdown_frame,
    dashboard_summary,
    monthly_trend_frame,
    recent_transactions,
    transactions_frame,
)
from .service import FinanceService

SERVICE_KEY = 'finance_service'
SECTIONS = ['Dashboard', 'Transactions', 'Budgets', 'Reports', 'Settings']
CURRENCY_KEY = 'currency'
CURRENCY_USER_KEY = 'currency_user'

# Tab label -> transaction type shown; None shows everything
TRANSACTION_VIEWS = {'All': None, 'Income': INCOME, 'Expenses': EXPENSE}

_TOAST_ICONS = {'success': '✅', 'error': '⚠️'}


def _toast(level: str, message: str) -> None:
    st.toast(message, icon=_TOAST_ICONS.get(level))


def get_service(user_id: str, db_path: Optional[str] = None) -> FinanceService:
    """Return the session's service, building and loading a new one when the user changes."""
    service = st.session_state.get(SERVICE_KEY)
    if service is None or service.user_id != user_id:
        target = db_path or config.get_db_path()
        service = FinanceService(
            user_id,
            TransactionStore(target),
            BudgetStore(target),
            notify=_toast,
        )
        service.load()
        st.session_state[SERVICE_KEY] = service
    return service


def load_currency(user_id: str, db_path: Optional[str] = None) -> str:
    """Return the user's saved currency, reading the profile once per user and session."""
    if st.session_state.get(CURRENCY_USER_KEY) != user_id:
        target = db_path or config.get_db_path()
        st.session_state[CURRENCY_KEY] = ProfileStore(target).get_currency(user_id, config.DEFAULT_CURRENCY)
        st.session_state[CURRENCY_USER_KEY] = user_id
    return st.session_state[CURRENCY_KEY]


def save_currency(user_id: str, currency: str, db_path: Optional[str] = None) -> None:
    """Persist ``currency`` to the user's profile and make it the session's currency."""
    target = db_path or config.get_db_path()
    try:
        ProfileStore(target).set_currency(user_id, currency)
    except FinanceTrackerError:
        _toast('error', "Failed to update settings")
        raise
    st.session_state[CURRENCY_KEY] = currency.upper()
    st.session_state[CURRENCY_USER_KEY] = user_id
    _toast('success', "Settings updated successfully")


def filter_transactions(df: pd.DataFrame, view: str) -> pd.DataFrame:
    """Rows of a :func:`transactions_frame` matching one of :data:`TRANSACTION_VIEWS`."""
    txn_type = TRANSACTION_VIEWS.get(view)
    if txn_type is None or df.empty:
        return df
    return df[df['Type'].astype(str).str.strip().str.lower() == txn_type]


def delete_options(df: pd.DataFrame, currency: str) -> Dict[str, str]:
    """Map transaction id to a display label for the delete picker."""
    options = {}
    for row in df.itertuples(index=False):
        if pd.isna(row.id):
            continue
        when = 'no date' if pd.isna(row.Date) else f"{row.Date:%Y-%m-%d}"
        options[row.id] = f"{when} {row.Description or row.Category} ({format_currency(row.Amount, currency)})"
    return options


def _currency_formatter(currency: str) -> Callable[[float], str]:
    return lambda amount: format_currency(amount, currency)


def _money_columns(df, columns, currency: str) -> Dict[str, Callable[[float], str]]:
    fmt = _currency_formatter(currency)
    return {col: fmt for col in columns if col in df.columns}


def render_dashboard(service: FinanceService, currency: str) -> None:
    st.header(f"Overview - {get_month_name(date.today())}")
    summary = dashboard_summary(service.transactions)

    col1, col2, col3 = st.columns(3)
    col1.metric("Balance", format_currency(summary['balance'], currency))
    col2.metric("Income", format_currency(summary['income'], currency))
    col3.metric("Expenses", format_currency(summary['expenses'], currency))

    st.subheader("Budget Progress")
    progress = budget_progress_frame(service.budgets, service.transactions)
    if progress.empty:
        st.info("No budget data available")
    for row in progress.itertuples(index=False):
        label = (
            f"{row.Category}: {format_currency(row.Spent, currency)} / "
            f"{format_currency(row.Budgeted, currency)}"
        )
        if row.Over_Budget:
            label += " (over budget)"
        st.progress(int(row.Percentage), text=escape_dollar_for_markdown(label))

    st.subheader("Recent Transactions")
    recent = recent_transactions(service.transactions, config.RECENT_TRANSACTIONS_LIMIT)
    if recent.empty:
        st.info("No transactions yet")
    else:
        st.dataframe(
            recent.drop(columns=['id']).style.format(_money_columns(recent, ['Amount'], currency)),
            use_container_width=True,
        )


def render_transactions(service: FinanceService, currency: str) -> None:
    st.header("Transactions")

    # Outside the form so the category list follows the chosen type
    txn_type = st.radio("Type", [EXPENSE, INCOME], horizontal=True)
    with st.form('add_transaction', clear_on_submit=True):
        categories = EXPENSE_CATEGORIES if txn_type == EXPENSE else INCOME_CATEGORIES
        category = st.selectbox("Category", categories)
        amount = st.number_input("Amount", min_value=0.0, step=0.01, format="%.2f")
        txn_date = st.date_input("Date", value=date.today())
        description = st.text_input("Description")
        submitted = st.form_submit_button("Add transaction")

    if submitted:
        try:
            service.add_transaction({
                'date': txn_date.isoformat(),
                'amount': amount,
                'category': category,
                'description': description,
                'type': txn_type,
            })
        except FinanceTrackerError as exc:
            st.error(str(exc))

    df = transactions_frame(service.transactions)
    if df.empty:
        st.info("No transactions recorded yet.")
        return

    for tab, view in zip(st.tabs(list(TRANSACTION_VIEWS)), TRANSACTION_VIEWS):
        shown = filter_transactions(df, view)
        with tab:
            if shown.empty:
                st.info("No transactions of this type.")
            else:
                st.dataframe(
                    shown.drop(columns=['id']).style.format(_money_columns(shown, ['Amount'], currency)),
                    use_container_width=True,
                )

    options = delete_options(df, currency)
    if options:
        choice = st.selectbox("Delete a transaction", list(options), format_func=options.get)
        if st.button("Delete transaction"):
            try:
                service.delete_transaction(choice)
            except FinanceTrackerError as exc:
                st.error(str(exc))


def render_budgets(service: FinanceService, currency: str) -> None:
    st.header("Budgets")

    with st.form('add_budget', clear_on_submit=True):
        category = st.selectbox("Category", EXPENSE_CATEGORIES)
        amount = st.number_input("Amount", min_value=0.0, step=1.0, format="%.2f")
        purpose = st.text_input("Purpose", placeholder="e.g. Monthly groceries")
        description = st.text_area("Description (optional)")
        submitted = st.form_submit_button("Save budget")

    if submitted:
        try:
            service.add_budget(Budget(
                category=category,
                amount=amount,
                purpose=purpose,
                description=description,
            ))
        except FinanceTrackerError as exc:
            st.error(str(exc))

    if not service.budgets:
        st.info("Create a budget to see your spending progress.")
        return

    for budget in service.budgets:
        col1, col2 = st.columns([4, 1])
        col1.markdown(
            f"**{budget.category}** - {escape_dollar_for_markdown(format_currency(budget.amount, currency))}"
            + (f"  \n{budget.purpose}" if budget.purpose else '')
        )
        if col2.button("Delete", key=f"delete_budget_{budget.category}"):
            try:
                service.delete_budget(budget.category)
            except FinanceTrackerError as exc:
                st.error(str(exc))


def render_reports(service: FinanceService, currency: str, months: int) -> None:
    st.header("Reports")

    st.subheader(f"Spending trend (last {months} months)")
    trend = monthly_trend_frame(service.transactions, months)
    st.dataframe(
        trend.style.format(_money_columns(trend, ['Income', 'Expenses', 'Net'], currency)),
        use_container_width=True,
    )

    st.subheader("Expense breakdown")
    breakdown = category_breakdown_frame(service.transactions)
    if breakdown.empty:
        st.info("No expense data available.")
    else:
        st.dataframe(
            breakdown.style.format({
                **_money_columns(breakdown, ['Amount'], currency),
                'Share': '{:.1f}%',
            }),
            use_container_width=True,
        )

    st.subheader("Budget vs. actual spending")
    progress = budget_progress_frame(service.budgets, service.transactions)
    if progress.empty:
        st.info("No budget data available.")
    else:
        st.dataframe(
            progress.style.format({
                **_money_columns(progress, ['Budgeted', 'Spent', 'Remaining'], currency),
                'Percentage': '{}%',
            }),
            use_container_width=True,
        )


def render_settings(user_id: str, currency: str) -> None:
    st.header("Settings")
    codes = sorted(CURRENCY_SYMBOLS)
    choice = st.selectbox(
        "Currency", codes, index=codes.index(currency) if currency in codes else 0
    )
    if choice != currency:
        try:
            save_currency(user_id, choice)
        except FinanceTrackerError as exc:
            st.error(str(exc))
    st.session_state['trend_months'] = int(st.number_input(
        "Months shown in trends",
        min_value=1,
        max_value=24,
        value=int(st.session_state.get('trend_months', config.TREND_MONTHS)),
    ))


def main() -> None:
    """Entry point for the Streamlit app."""
    config.configure_logging()
    st.set_page_config(
        page_title="Finance Tracker",
        layout="wide",
        initial_sidebar_state="expanded",
    )
    st.sidebar.title("Finance Tracker")
    user_id = st.sidebar.text_input("User", value=config.DEFAULT_USER_ID).strip()
    section = st.sidebar.radio("Section", SECTIONS)

    if not user_id:
        st.info("Enter a user name in the sidebar to begin.")
        st.stop()

    try:
        service = get_service(user_id)
        currency = load_currency(user_id)
    except FinanceTrackerError as exc:
        st.error(f"Error loading data: {exc}")
        st.stop()

    months = int(st.session_state.get('trend_months', config.TREND_MONTHS))

    if section == 'Dashboard':
        render_dashboard(service, currency)
    elif section == 'Transactions':
        render_transactions(service, currency)
    elif section == 'Budgets':
        render_budgets(service, currency)
    elif section == 'Reports':
        render_reports(service, currency, months)
    else:
        render_settings(user_id, currency)
