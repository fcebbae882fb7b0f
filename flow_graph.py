"""Money-flow graph: income categories -> Budget hub -> expense categories."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Iterable

import pandas as pd

from analytics import (
    DEFAULT_MAX_CATEGORIES,
    DEFAULT_TOLERANCE,
    aggregate_cashflows,
    bucket_categories,
    check_consistency,
)
from categorization import (
    HUB_NAME,
    OTHER_EXPENSES,
    OTHER_INCOME,
    CategoryConfig,
    category_color,
)

logger = logging.getLogger(__name__)


class FlowInvariantError(RuntimeError):
    """Raised when the builder produces a graph that violates its own indexing."""


@dataclass(frozen=True)
class FlowNode:
    name: str
    color: str
    role: str  # "income" | "hub" | "expense"
    percentage: float | None = None
    value: float = 0.0


@dataclass(frozen=True)
class FlowLink:
    source: int
    target: int
    value: float
    percentage: float
    dollar_amount: float


@dataclass(frozen=True)
class LegendItem:
    name: str
    color: str


@dataclass
class FlowGraph:
    """Nodes, links and legend ready for a layout pass.

    An empty ``nodes`` list is the "insufficient data" signal.
    """

    nodes: list[FlowNode] = field(default_factory=list)
    links: list[FlowLink] = field(default_factory=list)
    legend: list[LegendItem] = field(default_factory=list)
    total_inflow: float = 0.0
    total_outflow: float = 0.0
    balanced: bool = True
    warning: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    @property
    def hub_index(self) -> int | None:
        for index, node in enumerate(self.nodes):
            if node.role == "hub":
                return index
        return None


@dataclass(frozen=True)
class FlowOptions:
    max_income_categories: int = DEFAULT_MAX_CATEGORIES
    max_expense_categories: int = DEFAULT_MAX_CATEGORIES
    include_categories: tuple[str, ...] | None = None
    tolerance: float = DEFAULT_TOLERANCE

    def validate(self) -> None:
        if self.max_income_categories < 0 or self.max_expense_categories < 0:
            raise ValueError(
                "Category caps must be non-negative, got "
                f"income={self.max_income_categories}, expense={self.max_expense_categories}"
            )


def _side_nodes(
    buckets: list[tuple[str, float]],
    side_total: float,
    role: str,
    config: CategoryConfig | None,
) -> list[FlowNode]:
    nodes = []
    for name, value in buckets:
        if value <= 0:
            continue
        percentage = (value / side_total * 100.0) if side_total else 0.0
        nodes.append(
            FlowNode(
                name=name,
                color=category_color(name, config),
                role=role,
                percentage=percentage,
                value=float(value),
            )
        )
    return nodes


def _check_link_indices(nodes: list[FlowNode], links: list[FlowLink]) -> None:
    for link in links:
        if not (0 <= link.source < len(nodes)) or not (0 <= link.target < len(nodes)):
            logger.error(
                "Link %s -> %s references a node outside 0..%s", link.source, link.target, len(nodes) - 1
            )
            raise FlowInvariantError(f"Link {link.source}->{link.target} is out of range")


def build_flow_graph(
    income_buckets: list[tuple[str, float]],
    expense_buckets: list[tuple[str, float]],
    income_total: float | None = None,
    expense_total: float | None = None,
    config: CategoryConfig | None = None,
) -> FlowGraph:
    """Assemble nodes, links and legend from ranked category buckets.

    Node order is income buckets, the hub, then expense buckets. Either
    side ending up without a positive bucket yields an empty graph.
    """
    if income_total is None:
        income_total = sum(value for _, value in income_buckets)
    if expense_total is None:
        expense_total = sum(value for _, value in expense_buckets)

    income_nodes = _side_nodes(income_buckets, income_total, "income", config)
    expense_nodes = _side_nodes(expense_buckets, expense_total, "expense", config)
    if not income_nodes or not expense_nodes:
        return FlowGraph()

    hub = FlowNode(
        name=HUB_NAME,
        color=category_color(HUB_NAME, config),
        role="hub",
        value=max(sum(node.value for node in income_nodes), sum(node.value for node in expense_nodes)),
    )
    nodes = income_nodes + [hub] + expense_nodes
    hub_index = len(income_nodes)

    links = [
        FlowLink(
            source=index,
            target=hub_index,
            value=node.value,
            percentage=node.percentage or 0.0,
            dollar_amount=node.value,
        )
        for index, node in enumerate(income_nodes)
    ]
    links.extend(
        FlowLink(
            source=hub_index,
            target=hub_index + 1 + offset,
            value=node.value,
            percentage=node.percentage or 0.0,
            dollar_amount=node.value,
        )
        for offset, node in enumerate(expense_nodes)
    )
    _check_link_indices(nodes, links)

    legend = [LegendItem(name=node.name, color=node.color) for node in nodes]
    return FlowGraph(nodes=nodes, links=links, legend=legend)


def _allowed(
    buckets: list[tuple[str, float]],
    include_categories: tuple[str, ...] | None,
) -> list[tuple[str, float]]:
    if include_categories is None:
        return buckets
    allowed = set(include_categories)
    kept = [(name, value) for name, value in buckets if name in allowed]
    if len(kept) != len(buckets):
        logger.debug(
            "Allow-list removed categories: %s",
            [name for name, _ in buckets if name not in allowed],
        )
    return kept


def process_money_flow(
    incomes: Iterable[Any] | pd.DataFrame | None,
    expenses: Iterable[Any] | pd.DataFrame | None,
    options: FlowOptions | None = None,
    config: CategoryConfig | None = None,
) -> FlowGraph:
    """Run classification, aggregation, bucketing, consistency and graph build.

    Pure and deterministic: identical inputs give an identical graph.
    """
    opts = options or FlowOptions()
    opts.validate()

    income_totals, _ = aggregate_cashflows(incomes, True, config)
    expense_totals, _ = aggregate_cashflows(expenses, False, config)

    top_income, other_income = bucket_categories(
        income_totals, opts.max_income_categories, overflow_name=OTHER_INCOME
    )
    top_expense, other_expense = bucket_categories(
        expense_totals, opts.max_expense_categories, overflow_name=OTHER_EXPENSES
    )
    # Summed in node order so side totals equal the sum of node values exactly.
    total_inflow = sum(value for _, value in top_income) + other_income
    total_outflow = sum(value for _, value in top_expense) + other_expense

    income_buckets = _allowed(top_income, opts.include_categories)
    if other_income > 0:
        income_buckets.append((OTHER_INCOME, other_income))
    expense_buckets = _allowed(top_expense, opts.include_categories)
    if other_expense > 0:
        expense_buckets.append((OTHER_EXPENSES, other_expense))

    graph = build_flow_graph(
        income_buckets,
        expense_buckets,
        income_total=total_inflow,
        expense_total=total_outflow,
        config=config,
    )
    consistency = check_consistency(total_inflow, total_outflow, opts.tolerance)
    return replace(
        graph,
        total_inflow=total_inflow,
        total_outflow=total_outflow,
        balanced=consistency.balanced,
        warning=consistency.warning,
    )


def flow_links_table(graph: FlowGraph) -> pd.DataFrame:
    """Tabulate links with node names for display."""
    columns = ["Source", "Target", "Value", "SharePct"]
    if graph.is_empty:
        return pd.DataFrame(columns=columns)
    rows = [
        {
            "Source": graph.nodes[link.source].name,
            "Target": graph.nodes[link.target].name,
            "Value": link.dollar_amount,
            "SharePct": round(link.percentage, 2),
        }
        for link in graph.links
    ]
    return pd.DataFrame(rows, columns=columns)
