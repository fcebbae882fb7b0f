"""Aggregation helpers turning cashflow records into per-category totals."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, is_dataclass
from typing import Any, Iterable

import pandas as pd

from categorization import CategoryConfig, assign_flow_categories

logger = logging.getLogger(__name__)

DEFAULT_MAX_CATEGORIES = 5
DEFAULT_TOLERANCE = 0.01


@dataclass(frozen=True)
class CashflowRecord:
    id: str
    name: str
    amount: float
    category: str = ""


@dataclass(frozen=True)
class ConsistencyResult:
    balanced: bool
    warning: str | None = None


def records_frame(records: Iterable[Any] | pd.DataFrame | None) -> pd.DataFrame:
    """Normalize records (dicts, CashflowRecord or a DataFrame) into a frame.

    Amounts are coerced to non-negative floats; unparseable amounts count as 0.
    """
    if records is None:
        frame = pd.DataFrame()
    elif isinstance(records, pd.DataFrame):
        frame = records.copy()
    else:
        rows = [asdict(row) if is_dataclass(row) else dict(row) for row in records]
        frame = pd.DataFrame(rows)

    for col in ["id", "name", "category"]:
        if col not in frame.columns:
            frame[col] = ""
    if "amount" not in frame.columns:
        frame["amount"] = 0.0
    frame["category"] = frame["category"].fillna("")
    frame["amount"] = pd.to_numeric(frame["amount"], errors="coerce").fillna(0.0).abs()
    return frame.reset_index(drop=True)


def aggregate_cashflows(
    records: Iterable[Any] | pd.DataFrame | None,
    is_income: bool,
    config: CategoryConfig | None = None,
) -> tuple[dict[str, float], float]:
    """Sum absolute amounts per canonical category.

    Returns the category totals in first-seen order and the grand total.
    """
    frame = records_frame(records)
    if frame.empty:
        return {}, 0.0

    frame = assign_flow_categories(frame, is_income, config)
    totals = frame.groupby("FlowCategory", sort=False)["amount"].sum()
    return {str(name): float(value) for name, value in totals.items()}, float(totals.sum())


def bucket_categories(
    category_totals: dict[str, float],
    max_categories: int = DEFAULT_MAX_CATEGORIES,
    overflow_name: str | None = None,
) -> tuple[list[tuple[str, float]], float]:
    """Keep the largest categories and fold the rest into an overflow total.

    Ranking is by value descending, ties by name ascending. A category
    already named ``overflow_name`` never competes for a slot; its value
    joins the overflow so the synthetic bucket stays unique.
    """
    if max_categories < 0:
        raise ValueError(f"max_categories must be non-negative, got {max_categories}")

    overflow = 0.0
    ranked_input = dict(category_totals)
    if overflow_name is not None and overflow_name in ranked_input:
        overflow += float(ranked_input.pop(overflow_name))
    if not ranked_input:
        return [], overflow

    ranked = pd.DataFrame(
        {"Category": list(ranked_input.keys()), "Value": [float(v) for v in ranked_input.values()]}
    ).sort_values(["Value", "Category"], ascending=[False, True], kind="mergesort")

    top = ranked.head(max_categories)
    overflow += float(ranked["Value"].iloc[max_categories:].sum())
    return list(zip(top["Category"].tolist(), top["Value"].astype(float).tolist())), overflow


def format_amount(value: float) -> str:
    """Group thousands and keep up to three decimals, dropping trailing zeros."""
    text = f"{float(value):,.3f}".rstrip("0").rstrip(".")
    return "0" if text in {"-0", ""} else text


def check_consistency(
    total_inflow: float,
    total_outflow: float,
    tolerance: float = DEFAULT_TOLERANCE,
) -> ConsistencyResult:
    """Flag inflow/outflow mismatches beyond ``tolerance``."""
    if abs(total_inflow - total_outflow) < tolerance:
        return ConsistencyResult(balanced=True)

    warning = (
        f"Total inflow (${format_amount(total_inflow)}) "
        f"does not match total outflow (${format_amount(total_outflow)})"
    )
    logger.warning(warning)
    return ConsistencyResult(balanced=False, warning=warning)
