"""Tabular views of the current budget for presentation code."""

import pandas as pd

from budget_manager.budgeting import Budgeting

TRANSACTION_COLUMNS = ["id", "date_created", "payee", "note", "category", "amount"]
CATEGORY_COLUMNS = [
    "id", "name", "allocated", "income", "expense",
    "transfer_in", "transfer_out", "balance",
]


def transactions_frame(budgeting: Budgeting) -> pd.DataFrame:
    rows = []
    for t in budgeting.transactions():
        model = budgeting.transaction_model(t)
        rows.append({
            "id": model.id,
            "date_created": model.date_created,
            "payee": model.payee,
            "note": model.note,
            "category": model.category_name,
            "amount": model.amount,
        })
    df = pd.DataFrame(rows, columns=TRANSACTION_COLUMNS)
    if not df.empty:
        df["date_created"] = pd.to_datetime(df["date_created"])
    return df


def categories_frame(budgeting: Budgeting) -> pd.DataFrame:
    rows = [
        {
            "id": m.id,
            "name": m.name,
            "allocated": m.allocated,
            "income": m.income,
            "expense": m.total_expense,
            "transfer_in": m.transfer_in,
            "transfer_out": m.total_transfer_out,
            "balance": m.balance,
        }
        for m in budgeting.category_models()
    ]
    return pd.DataFrame(rows, columns=CATEGORY_COLUMNS)


def summary_frame(budgeting: Budgeting) -> pd.DataFrame:
    """One-row frame with the budget-wide figures shown in the header."""
    s = budgeting.summary()
    return pd.DataFrame([{
        "available": budgeting.actual_total_balance(),
        "unallocated": budgeting.unallocated_balance(),
        "uncategorized": budgeting.uncategorized_balance(),
        "allocated": budgeting.total_allocated(),
        "total_income": s.total_income,
        "total_expense": s.total_expense,
        "transfers": s.transfer_in,
    }])


def monthly_totals(budgeting: Budgeting) -> pd.DataFrame:
    """Income and expense per calendar month (``YYYY-MM``), oldest first."""
    df = transactions_frame(budgeting)
    if df.empty:
        return pd.DataFrame(columns=["month", "income", "expense"])
    df["month"] = df["date_created"].dt.strftime("%Y-%m")
    df["income"] = df["amount"].where(df["amount"] > 0, 0.0)
    df["expense"] = df["amount"].where(df["amount"] < 0, 0.0).abs()
    out = df.groupby("month", as_index=False)[["income", "expense"]].sum()
    out[["income", "expense"]] = out[["income", "expense"]].round(2)
    return out.sort_values("month").reset_index(drop=True)
