"""Transaction normalization helpers feeding the money-flow engine."""

import datetime
from typing import Any, Iterable

import pandas as pd

TIME_RANGES = ("month", "quarter", "year", "all")


def transactions_frame(transactions: Iterable[dict[str, Any]] | pd.DataFrame) -> pd.DataFrame:
    """Load signed transactions into a frame with parsed dates and numeric amounts."""
    if isinstance(transactions, pd.DataFrame):
        df = transactions.copy()
    else:
        df = pd.DataFrame(list(transactions))

    for col in ["id", "description", "category"]:
        if col not in df.columns:
            df[col] = ""
    if "amount" not in df.columns:
        df["amount"] = 0.0
    if "date" not in df.columns:
        df["date"] = pd.NaT

    df["amount"] = pd.to_numeric(df["amount"], errors="coerce").fillna(0.0)
    df["date"] = pd.to_datetime(df["date"], errors="coerce")
    df["category"] = df["category"].fillna("").astype(str)
    df["description"] = df["description"].fillna("").astype(str)
    return df


def _range_bounds(time_range: str, today: datetime.date) -> tuple[datetime.date, datetime.date]:
    if time_range == "month":
        start = datetime.date(today.year, today.month, 1)
        next_start = datetime.date(today.year + (today.month == 12), today.month % 12 + 1, 1)
    elif time_range == "quarter":
        first_month = (today.month - 1) // 3 * 3 + 1
        start = datetime.date(today.year, first_month, 1)
        if first_month == 10:
            next_start = datetime.date(today.year + 1, 1, 1)
        else:
            next_start = datetime.date(today.year, first_month + 3, 1)
    else:
        start = datetime.date(today.year, 1, 1)
        next_start = datetime.date(today.year + 1, 1, 1)
    return start, next_start - datetime.timedelta(days=1)


def filter_by_time_range(
    transactions: Iterable[dict[str, Any]] | pd.DataFrame,
    time_range: str = "month",
    today: datetime.date | None = None,
) -> pd.DataFrame:
    """Keep transactions in the calendar month/quarter/year containing ``today``."""
    if time_range not in TIME_RANGES:
        raise ValueError(f"Unsupported time range: {time_range}. Supported: {', '.join(TIME_RANGES)}.")

    df = transactions_frame(transactions)
    if time_range == "all":
        return df

    start, end = _range_bounds(time_range, today or datetime.date.today())
    mask = df["date"].dt.normalize().between(pd.Timestamp(start), pd.Timestamp(end))
    return df.loc[mask].reset_index(drop=True)


def split_cashflows(
    transactions: Iterable[dict[str, Any]] | pd.DataFrame,
) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    """Split signed transactions into income and expense records.

    Positive amounts are income, negative amounts expenses (as magnitudes);
    zero amounts are ignored.
    """
    df = transactions_frame(transactions)
    incomes: list[dict[str, Any]] = []
    expenses: list[dict[str, Any]] = []
    for row in df.itertuples(index=False):
        amount = float(row.amount)
        if amount == 0:
            continue
        record = {
            "id": str(row.id),
            "name": row.description,
            "amount": abs(amount),
            "category": row.category,
        }
        (incomes if amount > 0 else expenses).append(record)
    return incomes, expenses
