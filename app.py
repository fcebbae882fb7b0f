"""Money Flow Streamlit entrypoint."""

from __future__ import annotations

import datetime
import json

import pandas as pd
import streamlit as st

from categorization import DEFAULT_KEYWORD_MAP
from dashboard_views import render_money_flow
from flow_graph import FlowOptions, flow_links_table, process_money_flow
from flow_layout import LayoutOptions, layout_money_flow
from flow_settings import (
    DEFAULT_FLOW_SETTINGS_PATH,
    category_config_from_settings,
    load_flow_settings,
    save_flow_settings,
)
from parsing import TIME_RANGES, filter_by_time_range, split_cashflows

st.set_page_config(page_title="Money Flow", page_icon="\U0001f4b8", layout="wide")

TIME_RANGE_LABELS = {
    "month": "Current Month",
    "quarter": "Current Quarter",
    "year": "Current Year",
    "all": "All Time",
}


def _sample_transactions() -> pd.DataFrame:
    today = datetime.date.today().isoformat()
    return pd.DataFrame(
        [
            {"id": "1", "date": today, "amount": 3000.0, "category": "Salary", "description": "Salary"},
            {"id": "2", "date": today, "amount": -1200.0, "category": "Housing", "description": "Rent"},
            {"id": "3", "date": today, "amount": -400.0, "category": "Food", "description": "Groceries"},
            {"id": "4", "date": today, "amount": -200.0, "category": "Transportation", "description": "Gas"},
            {"id": "5", "date": today, "amount": -100.0, "category": "Entertainment", "description": "Movies"},
            {"id": "6", "date": today, "amount": -300.0, "category": "Savings", "description": "Transfer"},
        ]
    )


def _parse_json_dict(json_text: str, fallback: dict) -> dict:
    try:
        parsed = json.loads(json_text)
    except json.JSONDecodeError:
        return fallback
    if not isinstance(parsed, dict):
        return fallback
    return parsed


def _sidebar_settings() -> dict:
    st.sidebar.header("Settings")
    settings_path = st.sidebar.text_input("Settings file", value=DEFAULT_FLOW_SETTINGS_PATH)
    settings = load_flow_settings(settings_path)

    settings["device"] = st.sidebar.radio(
        "Layout",
        ["desktop", "mobile"],
        index=0 if settings["device"] == "desktop" else 1,
        horizontal=True,
    )
    settings["max_income_categories"] = st.sidebar.slider(
        "Max income categories", 0, 12, min(settings["max_income_categories"], 12)
    )
    settings["max_expense_categories"] = st.sidebar.slider(
        "Max expense categories", 0, 12, min(settings["max_expense_categories"], 12)
    )

    with st.sidebar.expander("Category keywords (JSON)", expanded=False):
        keyword_json = st.text_area(
            "Keyword map",
            value=json.dumps(settings["keyword_map"] or DEFAULT_KEYWORD_MAP, indent=2),
            height=240,
        )
        settings["keyword_map"] = _parse_json_dict(keyword_json, settings["keyword_map"])

    if st.sidebar.button("Save settings"):
        saved = save_flow_settings(settings_path, settings)
        st.sidebar.success(f"Saved to {saved}")

    return settings


def main() -> None:
    settings = _sidebar_settings()

    st.sidebar.header("Transactions")
    time_range = st.sidebar.selectbox(
        "Time range",
        list(TIME_RANGES),
        format_func=lambda key: TIME_RANGE_LABELS[key],
    )
    edited = st.data_editor(
        _sample_transactions(),
        num_rows="dynamic",
        use_container_width=True,
        key="transactions_editor",
    )

    filtered = filter_by_time_range(edited, time_range)
    incomes, expenses = split_cashflows(filtered)

    options = FlowOptions(
        max_income_categories=settings["max_income_categories"],
        max_expense_categories=settings["max_expense_categories"],
        include_categories=tuple(settings["include_categories"]) if settings["include_categories"] else None,
    )
    config = category_config_from_settings(settings)
    graph = process_money_flow(incomes, expenses, options=options, config=config)
    layout = layout_money_flow(graph, LayoutOptions.for_device(settings["device"]))

    render_money_flow(graph, layout, flow_links_table(graph))


if __name__ == "__main__":
    main()
