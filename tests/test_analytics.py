import pytest

from analytics import (
    CashflowRecord,
    aggregate_cashflows,
    bucket_categories,
    check_consistency,
    format_amount,
)


def test_aggregate_cashflows_sums_per_category() -> None:
    incomes = [
        {"id": "1", "name": "Pay", "amount": 1000, "category": "Salary"},
        {"id": "2", "name": "Year end", "amount": 500, "category": "Bonus"},
        {"id": "3", "name": "Gig", "amount": 200, "category": "Freelance"},
    ]

    totals, grand_total = aggregate_cashflows(incomes, is_income=True)

    assert totals == {"Income": 1500.0, "Freelance": 200.0}
    assert grand_total == 1700.0


def test_aggregate_cashflows_uses_absolute_amounts() -> None:
    expenses = [
        {"id": "1", "name": "Market", "amount": -50, "category": "Groceries"},
        {"id": "2", "name": "Lunch", "amount": 25, "category": "Food"},
    ]

    totals, grand_total = aggregate_cashflows(expenses, is_income=False)

    assert totals == {"Food": 75.0}
    assert grand_total == 75.0


def test_aggregate_cashflows_accepts_records_and_bad_amounts() -> None:
    records = [
        CashflowRecord(id="1", name="Rent", amount=900.0, category="Rent"),
        {"id": "2", "name": "Broken", "amount": "abc", "category": "Rent"},
    ]

    totals, grand_total = aggregate_cashflows(records, is_income=False)

    assert totals == {"Housing": 900.0}
    assert grand_total == 900.0


def test_aggregate_cashflows_empty_input() -> None:
    assert aggregate_cashflows([], is_income=True) == ({}, 0.0)
    assert aggregate_cashflows(None, is_income=False) == ({}, 0.0)


def test_bucket_categories_keeps_top_and_sums_rest() -> None:
    totals = {"A": 100.0, "B": 300.0, "C": 200.0, "D": 50.0}

    top, overflow = bucket_categories(totals, max_categories=2)

    assert top == [("B", 300.0), ("C", 200.0)]
    assert overflow == 150.0
    assert overflow == sum(totals.values()) - sum(value for _, value in top)


def test_bucket_categories_breaks_ties_by_name() -> None:
    top, overflow = bucket_categories({"Zeta": 100.0, "Alpha": 100.0, "Mid": 100.0}, max_categories=2)

    assert top == [("Alpha", 100.0), ("Mid", 100.0)]
    assert overflow == 100.0


def test_bucket_categories_folds_existing_overflow_name() -> None:
    top, overflow = bucket_categories(
        {"Other Expenses": 40.0, "Food": 100.0},
        max_categories=5,
        overflow_name="Other Expenses",
    )

    assert top == [("Food", 100.0)]
    assert overflow == 40.0


def test_bucket_categories_rejects_negative_cap() -> None:
    with pytest.raises(ValueError):
        bucket_categories({"Food": 1.0}, max_categories=-1)


def test_check_consistency_balanced() -> None:
    result = check_consistency(1000.0, 1000.0)

    assert result.balanced is True
    assert result.warning is None
    assert check_consistency(100.0, 100.005).balanced is True


def test_check_consistency_unbalanced_warning() -> None:
    result = check_consistency(1000.0, 800.0)

    assert result.balanced is False
    assert result.warning == "Total inflow ($1,000) does not match total outflow ($800)"


def test_format_amount() -> None:
    assert format_amount(3000) == "3,000"
    assert format_amount(1234.5) == "1,234.5"
    assert format_amount(0.1234) == "0.123"
    assert format_amount(0) == "0"
