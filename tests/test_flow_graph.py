import logging

import pytest

from flow_graph import (
    FlowGraph,
    FlowInvariantError,
    FlowLink,
    FlowNode,
    FlowOptions,
    _check_link_indices,
    build_flow_graph,
    flow_links_table,
    process_money_flow,
)


def _incomes() -> list[dict]:
    return [{"id": "1", "name": "June Salary", "amount": 3000, "category": "Salary"}]


def _expenses() -> list[dict]:
    return [
        {"id": "2", "name": "Rent", "amount": 1200, "category": "Housing"},
        {"id": "3", "name": "Groceries", "amount": 400, "category": "Food"},
        {"id": "4", "name": "Gas", "amount": 200, "category": "Transportation"},
        {"id": "5", "name": "Movies", "amount": 100, "category": "Entertainment"},
        {"id": "6", "name": "Transfer", "amount": 300, "category": "Savings"},
    ]


def test_process_money_flow_end_to_end() -> None:
    graph = process_money_flow(_incomes(), _expenses())

    assert [node.name for node in graph.nodes] == [
        "Income",
        "Budget",
        "Housing",
        "Food",
        "Savings",
        "Transportation",
        "Entertainment",
    ]
    assert graph.nodes[0].percentage == pytest.approx(100.0)
    assert graph.hub_index == 1

    expected = {"Housing": 1200, "Food": 400, "Savings": 300, "Transportation": 200, "Entertainment": 100}
    expense_links = [link for link in graph.links if link.source == 1]
    assert len(expense_links) == 5
    for link in expense_links:
        name = graph.nodes[link.target].name
        assert link.dollar_amount == expected[name]
        assert link.percentage == pytest.approx(expected[name] / 2200 * 100)

    assert graph.total_inflow == 3000
    assert graph.total_outflow == 2200
    assert graph.balanced is False
    assert graph.warning == "Total inflow ($3,000) does not match total outflow ($2,200)"


def test_every_income_links_to_hub_and_hub_links_to_every_expense() -> None:
    graph = process_money_flow(_incomes(), _expenses())
    hub = graph.hub_index

    income_indices = [i for i, node in enumerate(graph.nodes) if node.role == "income"]
    expense_indices = [i for i, node in enumerate(graph.nodes) if node.role == "expense"]

    assert sorted(link.source for link in graph.links if link.target == hub) == income_indices
    assert sorted(link.target for link in graph.links if link.source == hub) == expense_indices
    assert len(graph.links) == len(income_indices) + len(expense_indices)


def test_balanced_flow_has_no_warning() -> None:
    incomes = [{"id": "1", "name": "Pay", "amount": 1000, "category": "Salary"}]
    expenses = [
        {"id": "2", "name": "Rent", "amount": 600, "category": "Rent"},
        {"id": "3", "name": "Food", "amount": 400, "category": "Groceries"},
    ]

    graph = process_money_flow(incomes, expenses)

    assert graph.balanced is True
    assert graph.warning is None


def test_empty_inputs_give_empty_graph() -> None:
    graph = process_money_flow([], [])

    assert graph.is_empty
    assert graph.links == []
    assert graph.balanced is True


def test_one_sided_input_gives_empty_graph_with_totals() -> None:
    graph = process_money_flow(_incomes(), [])

    assert graph.is_empty
    assert graph.links == []
    assert graph.total_inflow == 3000
    assert graph.balanced is False


def test_overflow_bucket_is_last_and_preserves_totals() -> None:
    expenses = [
        {"id": str(i), "name": name, "amount": amount, "category": name}
        for i, (name, amount) in enumerate(
            [
                ("Housing", 700),
                ("Food", 600),
                ("Travel", 500),
                ("Taxes", 400),
                ("Gifts", 300),
                ("Education", 200),
                ("Healthcare", 100),
            ]
        )
    ]

    graph = process_money_flow(_incomes(), expenses, FlowOptions(max_expense_categories=5))
    expense_nodes = [node for node in graph.nodes if node.role == "expense"]

    assert len(expense_nodes) == 6
    assert expense_nodes[-1].name == "Other Expenses"
    assert expense_nodes[-1].value == 300
    assert sum(node.value for node in expense_nodes) == sum(e["amount"] for e in expenses)


def test_income_node_values_sum_to_income_total() -> None:
    incomes = [
        {"id": str(i), "name": name, "amount": amount, "category": name}
        for i, (name, amount) in enumerate(
            [("Salary", 4000), ("Rental", 900), ("Etsy", 300), ("Tutoring", 250), ("Lottery", 50), ("Ads", 20), ("Tips", 10)]
        )
    ]

    graph = process_money_flow(incomes, _expenses(), FlowOptions(max_income_categories=3))
    income_nodes = [node for node in graph.nodes if node.role == "income"]

    assert len(income_nodes) == 4
    assert income_nodes[-1].name == "Other Income"
    assert sum(node.value for node in income_nodes) == sum(i["amount"] for i in incomes)


def test_process_money_flow_is_idempotent() -> None:
    first = process_money_flow(_incomes(), _expenses())
    second = process_money_flow(_incomes(), _expenses())

    assert first == second


def test_include_categories_filters_top_entries() -> None:
    graph = process_money_flow(
        _incomes(),
        _expenses(),
        FlowOptions(include_categories=("Income", "Housing", "Food")),
    )

    assert [node.name for node in graph.nodes] == ["Income", "Budget", "Housing", "Food"]
    assert graph.total_outflow == 2200


def test_negative_cap_is_rejected() -> None:
    with pytest.raises(ValueError):
        process_money_flow(_incomes(), _expenses(), FlowOptions(max_income_categories=-1))


def test_build_flow_graph_skips_zero_buckets() -> None:
    graph = build_flow_graph([("Income", 100.0), ("Gift", 0.0)], [("Food", 100.0)])

    assert [node.name for node in graph.nodes] == ["Income", "Budget", "Food"]
    assert [item.name for item in graph.legend] == ["Income", "Budget", "Food"]
    assert graph.nodes[1].value == 100.0


def test_build_flow_graph_empty_side() -> None:
    assert build_flow_graph([("Income", 100.0)], [("Food", 0.0)]) == FlowGraph()


def test_flow_links_table_names_endpoints() -> None:
    table = flow_links_table(process_money_flow(_incomes(), _expenses()))

    assert list(table.columns) == ["Source", "Target", "Value", "SharePct"]
    assert table.iloc[0]["Source"] == "Income"
    assert table.iloc[0]["Target"] == "Budget"
    assert flow_links_table(FlowGraph()).empty


def test_side_totals_equal_node_value_sums() -> None:
    incomes = [
        {"id": "1", "name": "Tips", "amount": 0.1, "category": "Tips"},
        {"id": "2", "name": "Ads", "amount": 0.2, "category": "Ads"},
        {"id": "3", "name": "Etsy", "amount": 0.7, "category": "Etsy"},
    ]

    graph = process_money_flow(incomes, _expenses())

    income_nodes = [node for node in graph.nodes if node.role == "income"]
    expense_nodes = [node for node in graph.nodes if node.role == "expense"]
    assert sum(node.value for node in income_nodes) == graph.total_inflow
    assert sum(node.value for node in expense_nodes) == graph.total_outflow


def test_trailing_whitespace_does_not_split_categories() -> None:
    expenses = [
        {"id": "1", "name": "Food", "amount": 30, "category": "Pets"},
        {"id": "2", "name": "Vet", "amount": 70, "category": "Pets "},
    ]

    graph = process_money_flow(_incomes(), expenses)

    assert [node.name for node in graph.nodes if node.role == "expense"] == ["Pets"]


def test_out_of_range_link_raises_invariant_error(caplog: pytest.LogCaptureFixture) -> None:
    nodes = [
        FlowNode(name="Income", color="#4CAF50", role="income"),
        FlowNode(name="Budget", color="#5CB8B2", role="hub"),
    ]
    links = [FlowLink(source=0, target=5, value=10.0, percentage=100.0, dollar_amount=10.0)]

    with caplog.at_level(logging.ERROR, logger="flow_graph"):
        with pytest.raises(FlowInvariantError):
            _check_link_indices(nodes, links)

    assert any(record.levelno == logging.ERROR for record in caplog.records)
