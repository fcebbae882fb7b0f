"""Layout for the money-flow diagram.

Nodes get rectangular extents from a positioner (``position_nodes`` by
default, any callable with the same signature can be swapped in). Links
are then stacked along each node so that ribbons sharing a node never
overlap and each ribbon's thickness is its share of that node's flow.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Callable

from flow_graph import FlowGraph, FlowLink

logger = logging.getLogger(__name__)

ROLE_COLUMNS = {"income": 0, "hub": 1, "expense": 2}


@dataclass(frozen=True)
class NodeExtent:
    index: int
    x0: float
    x1: float
    y0: float
    y1: float
    value: float = 0.0

    @property
    def height(self) -> float:
        return self.y1 - self.y0


@dataclass(frozen=True)
class ConnectorGeometry:
    """Closed ribbon between a source and a target sub-interval."""

    source: int
    target: int
    value: float
    source_x: float
    target_x: float
    source_y0: float
    source_y1: float
    target_y0: float
    target_y1: float
    control_x1: float
    control_x2: float
    sort_key: int

    @property
    def source_height(self) -> float:
        return self.source_y1 - self.source_y0

    @property
    def target_height(self) -> float:
        return self.target_y1 - self.target_y0


@dataclass(frozen=True)
class LayoutOptions:
    width: float = 960.0
    height: float = 450.0
    margin_top: float = 30.0
    margin_right: float = 180.0
    margin_bottom: float = 30.0
    margin_left: float = 180.0
    node_width: float = 20.0
    node_padding: float = 15.0
    curvature: float = 0.5
    hub_min_fraction: float | None = 0.5
    mobile: bool = False

    @classmethod
    def for_device(cls, device: str = "desktop", width: float = 960.0) -> LayoutOptions:
        if device == "desktop":
            return cls(width=width)
        if device == "mobile":
            return cls(
                width=width,
                margin_right=50.0,
                margin_left=50.0,
                node_width=10.0,
                node_padding=12.0,
                curvature=0.2,
                hub_min_fraction=None,
                mobile=True,
            )
        raise ValueError(f"Unsupported device class: {device}")

    @property
    def inner_width(self) -> float:
        return max(self.width - self.margin_left - self.margin_right, 0.0)

    @property
    def inner_height(self) -> float:
        return max(self.height - self.margin_top - self.margin_bottom, 0.0)

    def validate(self) -> None:
        if not 0.0 < self.curvature < 1.0:
            raise ValueError(f"curvature must be in (0, 1), got {self.curvature}")


@dataclass
class FlowLayout:
    nodes: list[NodeExtent] = field(default_factory=list)
    connectors: list[ConnectorGeometry] = field(default_factory=list)
    options: LayoutOptions = field(default_factory=LayoutOptions)

    def extent(self, index: int) -> NodeExtent | None:
        for node in self.nodes:
            if node.index == index:
                return node
        return None


NodePositioner = Callable[[FlowGraph, float, float, float, float], list[NodeExtent]]


def _valid_links(links: list[FlowLink], known: set[int] | range) -> list[FlowLink]:
    kept = []
    for link in links:
        if link.source in known and link.target in known:
            kept.append(link)
        else:
            logger.debug("Dropping link %s -> %s with a dangling node index", link.source, link.target)
    return kept


def position_nodes(
    graph: FlowGraph,
    inner_width: float,
    inner_height: float,
    node_width: float = 20.0,
    node_padding: float = 15.0,
) -> list[NodeExtent]:
    """Assign proportional extents per node, one column per role.

    A node's value is the larger of its inflow and outflow. Every column
    shares one value-to-pixel scale and is centered vertically.
    """
    if graph.is_empty:
        return []

    known = range(len(graph.nodes))
    inflow = [0.0] * len(graph.nodes)
    outflow = [0.0] * len(graph.nodes)
    for link in _valid_links(graph.links, known):
        outflow[link.source] += link.value
        inflow[link.target] += link.value
    values = [max(i, o) for i, o in zip(inflow, outflow)]

    columns: dict[int, list[int]] = {}
    for index, node in enumerate(graph.nodes):
        columns.setdefault(ROLE_COLUMNS.get(node.role, 1), []).append(index)

    longest = max(len(members) for members in columns.values())
    padding = min(node_padding, inner_height / (2 * max(longest - 1, 1)))

    scales = []
    for members in columns.values():
        total = sum(values[i] for i in members)
        if total > 0:
            scales.append((inner_height - (len(members) - 1) * padding) / total)
    ky = max(min(scales), 0.0) if scales else 0.0

    column_count = max(columns) + 1
    kx = (inner_width - node_width) / (column_count - 1) if column_count > 1 else 0.0

    extents = []
    for column, members in sorted(columns.items()):
        used = sum(values[i] * ky for i in members) + (len(members) - 1) * padding
        y = (inner_height - used) / 2.0
        x0 = column * kx
        for index in members:
            height = values[index] * ky
            extents.append(
                NodeExtent(index=index, x0=x0, x1=x0 + node_width, y0=y, y1=y + height, value=values[index])
            )
            y += height + padding
    return sorted(extents, key=lambda extent: extent.index)


def ensure_min_node_span(
    extents: list[NodeExtent],
    index: int,
    inner_height: float,
    min_fraction: float | None = None,
) -> list[NodeExtent]:
    """Recenter one node vertically and widen it to a minimum share of the height.

    Runs before link stacking; node values are untouched.
    """
    adjusted = []
    for extent in extents:
        if extent.index != index:
            adjusted.append(extent)
            continue
        center = inner_height / 2.0
        span = extent.height
        if min_fraction is not None and span < inner_height * min_fraction:
            span = inner_height * min_fraction
            logger.debug("Enlarging node %s to span %.2f", index, span)
        adjusted.append(replace(extent, y0=center - span / 2.0, y1=center + span / 2.0))
    return adjusted


def control_points(source_x: float, target_x: float, curvature: float) -> tuple[float, float]:
    return (
        source_x * (1 - curvature) + target_x * curvature,
        source_x * curvature + target_x * (1 - curvature),
    )


def stack_links(
    extents: list[NodeExtent],
    links: list[FlowLink],
    curvature: float = 0.5,
) -> list[ConnectorGeometry]:
    """Stack links along their nodes and build ribbon geometry.

    Links are ordered by (target index, value descending, source index).
    Source and target cursors advance independently, each starting at the
    node's y0; a ribbon's height on a side is its share of the flow leaving
    (or entering) that node times the node's span.
    """
    by_index = {extent.index: extent for extent in extents}
    valid = _valid_links(links, set(by_index))

    outgoing: dict[int, float] = {}
    incoming: dict[int, float] = {}
    for link in valid:
        outgoing[link.source] = outgoing.get(link.source, 0.0) + link.value
        incoming[link.target] = incoming.get(link.target, 0.0) + link.value

    source_offsets = {index: extent.y0 for index, extent in by_index.items()}
    target_offsets = dict(source_offsets)

    connectors = []
    ordered = sorted(valid, key=lambda link: (link.target, -link.value, link.source))
    for position, link in enumerate(ordered):
        source = by_index[link.source]
        target = by_index[link.target]
        source_total = outgoing[link.source]
        target_total = incoming[link.target]
        source_height = (link.value / source_total) * source.height if source_total else 0.0
        target_height = (link.value / target_total) * target.height if target_total else 0.0

        source_y0 = source_offsets[link.source]
        target_y0 = target_offsets[link.target]
        source_offsets[link.source] = source_y0 + source_height
        target_offsets[link.target] = target_y0 + target_height

        cp1, cp2 = control_points(source.x1, target.x0, curvature)
        connectors.append(
            ConnectorGeometry(
                source=link.source,
                target=link.target,
                value=link.value,
                source_x=source.x1,
                target_x=target.x0,
                source_y0=source_y0,
                source_y1=source_y0 + source_height,
                target_y0=target_y0,
                target_y1=target_y0 + target_height,
                control_x1=cp1,
                control_x2=cp2,
                sort_key=position,
            )
        )
    return connectors


def layout_money_flow(
    graph: FlowGraph,
    options: LayoutOptions | None = None,
    positioner: NodePositioner = position_nodes,
) -> FlowLayout:
    """Position nodes, adjust the hub, then stack links into ribbons."""
    opts = options or LayoutOptions()
    opts.validate()
    if graph.is_empty:
        return FlowLayout(options=opts)

    extents = positioner(graph, opts.inner_width, opts.inner_height, opts.node_width, opts.node_padding)
    known = range(len(graph.nodes))
    extents = [extent for extent in extents if extent.index in known]

    hub = graph.hub_index
    if hub is not None:
        extents = ensure_min_node_span(extents, hub, opts.inner_height, opts.hub_min_fraction)

    return FlowLayout(nodes=extents, connectors=stack_links(extents, graph.links, opts.curvature), options=opts)
