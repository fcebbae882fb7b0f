import datetime

import pandas as pd
import pytest

from parsing import filter_by_time_range, split_cashflows, transactions_frame


def _transactions() -> list[dict]:
    return [
        {"id": "1", "date": "2026-06-01", "amount": 3000, "category": "Salary", "description": "June Salary"},
        {"id": "2", "date": "2026-05-31", "amount": -1200, "category": "Housing", "description": "Rent"},
        {"id": "3", "date": "2025-06-10", "amount": -40, "category": "Food", "description": "Lunch"},
        {"id": "4", "date": "not a date", "amount": 0, "category": "Food", "description": "Void"},
    ]


def test_split_cashflows_by_sign() -> None:
    incomes, expenses = split_cashflows(_transactions())

    assert incomes == [{"id": "1", "name": "June Salary", "amount": 3000.0, "category": "Salary"}]
    assert [row["amount"] for row in expenses] == [1200.0, 40.0]
    assert [row["category"] for row in expenses] == ["Housing", "Food"]


def test_transactions_frame_fills_missing_columns() -> None:
    df = transactions_frame([{"amount": "12.5"}])

    assert float(df.loc[0, "amount"]) == 12.5
    assert df.loc[0, "category"] == ""
    assert pd.isna(df.loc[0, "date"])


@pytest.mark.parametrize(
    ("time_range", "expected_ids"),
    [
        ("month", ["1"]),
        ("quarter", ["1", "2"]),
        ("year", ["1", "2"]),
        ("all", ["1", "2", "3", "4"]),
    ],
)
def test_filter_by_time_range(time_range: str, expected_ids: list[str]) -> None:
    out = filter_by_time_range(_transactions(), time_range, today=datetime.date(2026, 6, 15))

    assert list(out["id"]) == expected_ids


def test_filter_by_time_range_fourth_quarter_includes_year_end() -> None:
    rows = [{"id": "1", "date": "2026-12-31", "amount": 5}, {"id": "2", "date": "2027-01-01", "amount": 5}]

    out = filter_by_time_range(rows, "quarter", today=datetime.date(2026, 11, 2))

    assert list(out["id"]) == ["1"]


def test_filter_by_time_range_rejects_unknown_range() -> None:
    with pytest.raises(ValueError):
        filter_by_time_range(_transactions(), "week")
