"""Streamlit renderers for the money-flow page."""

from __future__ import annotations

from html import escape

import pandas as pd
import streamlit as st

from analytics import format_amount
from flow_graph import FlowGraph
from flow_layout import FlowLayout
from flow_render import render_svg


def _fmt_usd(value: float) -> str:
    return f"${format_amount(value)}"


def render_no_flow_data() -> None:
    st.warning(
        "**No Flow Data Available**\n\n"
        "Not enough transaction data to generate the money flow diagram. "
        "Import more transactions with both income and expenses to see how your money flows."
    )


def render_legend(graph: FlowGraph) -> None:
    items = "".join(
        f'<span style="display:inline-flex;align-items:center;margin-right:14px;">'
        f'<span style="width:12px;height:12px;border-radius:3px;background:{escape(item.color, quote=True)};'
        f'display:inline-block;margin-right:6px;"></span>{escape(item.name)}</span>'
        for item in graph.legend
    )
    st.markdown(f'<div class="flow-legend">{items}</div>', unsafe_allow_html=True)


def render_money_flow(graph: FlowGraph, layout: FlowLayout, links_table: pd.DataFrame) -> None:
    st.header("Money Flow")
    st.caption(
        "How money flows from income sources through your budget to expense categories. "
        "Hover over links to see detailed amounts."
    )

    c1, c2, c3 = st.columns(3)
    c1.metric("Total inflow", _fmt_usd(graph.total_inflow))
    c2.metric("Total outflow", _fmt_usd(graph.total_outflow))
    c3.metric("Net", _fmt_usd(graph.total_inflow - graph.total_outflow))

    if graph.warning:
        st.warning(graph.warning)

    if graph.is_empty:
        render_no_flow_data()
        return

    st.markdown(render_svg(graph, layout), unsafe_allow_html=True)
    render_legend(graph)

    st.markdown("### Flows")
    st.dataframe(links_table, use_container_width=True)
