"""SVG rendering for a laid-out money-flow graph."""

from __future__ import annotations

import math
from html import escape

from analytics import format_amount
from flow_graph import FlowGraph, FlowLink, FlowNode
from flow_layout import ConnectorGeometry, FlowLayout, NodeExtent


def _num(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".")


def connector_path(geometry: ConnectorGeometry) -> str:
    """Closed ribbon: top curve forward, bottom curve back."""
    g = geometry
    return (
        f"M{_num(g.source_x)},{_num(g.source_y0)} "
        f"C{_num(g.control_x1)},{_num(g.source_y0)} {_num(g.control_x2)},{_num(g.target_y0)} "
        f"{_num(g.target_x)},{_num(g.target_y0)} "
        f"L{_num(g.target_x)},{_num(g.target_y1)} "
        f"C{_num(g.control_x2)},{_num(g.target_y1)} {_num(g.control_x1)},{_num(g.source_y1)} "
        f"{_num(g.source_x)},{_num(g.source_y1)} Z"
    )


def percentage_text(percentage: float | None) -> str:
    pct = percentage or 0.0
    return "<1" if pct < 1 else str(math.floor(pct + 0.5))


def node_label(node: FlowNode, mobile: bool = False) -> str:
    if node.role == "hub":
        return node.name
    name = node.name
    if mobile and len(name) > 12:
        name = name[:10] + ".."
    return f"{percentage_text(node.percentage)}% {name}"


def link_label(link: FlowLink) -> str:
    return f"${format_amount(link.dollar_amount)} ({percentage_text(link.percentage)}%)"


def node_tooltip(node: FlowNode) -> str:
    return f"{node.name}: ${format_amount(node.value)}"


def link_tooltip(graph: FlowGraph, link: FlowLink) -> str:
    source = graph.nodes[link.source].name
    target = graph.nodes[link.target].name
    return f"{source} → {target}: ${format_amount(link.value)}"


def label_anchor(node: FlowNode, extent: NodeExtent, mobile: bool = False) -> tuple[float, str]:
    """Return (x, text-anchor) so income labels sit left and expense labels right."""
    offset = 5.0 if mobile else 10.0
    if node.role == "hub":
        return extent.x0 + (extent.x1 - extent.x0) / 2.0, "middle"
    if node.role == "income":
        return extent.x0 - offset, "end"
    return extent.x1 + offset, "start"


def _find_link(graph: FlowGraph, geometry: ConnectorGeometry) -> FlowLink | None:
    for link in graph.links:
        if link.source == geometry.source and link.target == geometry.target:
            return link
    return None


def render_svg(graph: FlowGraph, layout: FlowLayout) -> str:
    """Render the full diagram as an ``<svg class="sankey">`` document."""
    opts = layout.options
    width = _num(opts.width)
    height = _num(opts.height)
    if graph.is_empty or not layout.nodes:
        return (
            f'<svg class="sankey" width="{width}" height="{height}" xmlns="http://www.w3.org/2000/svg">'
            f'<text x="{_num(opts.width / 2)}" y="{_num(opts.height / 2)}" text-anchor="middle">'
            "No flow data available</text></svg>"
        )

    extents = {extent.index: extent for extent in layout.nodes}
    gradients = []
    ribbons = []
    for geometry in layout.connectors:
        source = graph.nodes[geometry.source]
        target = graph.nodes[geometry.target]
        gradient_id = f"gradient-{geometry.sort_key}"
        gradients.append(
            f'<linearGradient id="{gradient_id}" gradientUnits="userSpaceOnUse" '
            f'x1="{_num(geometry.source_x)}" x2="{_num(geometry.target_x)}">'
            f'<stop offset="0%" stop-color="{escape(source.color, quote=True)}"/>'
            f'<stop offset="100%" stop-color="{escape(target.color, quote=True)}"/></linearGradient>'
        )
        link = _find_link(graph, geometry)
        title = escape(link_tooltip(graph, link)) if link is not None else ""
        ribbons.append(
            f'<path class="link" d="{connector_path(geometry)}" fill="url(#{gradient_id})" '
            f'fill-opacity="{0.8 if opts.mobile else 0.7}" stroke="none"><title>{title}</title></path>'
        )

    node_parts = []
    font_size = "9px" if opts.mobile else "12px"
    for index, node in enumerate(graph.nodes):
        extent = extents.get(index)
        if extent is None:
            continue
        x, anchor = label_anchor(node, extent, opts.mobile)
        y = extent.y0 + extent.height / 2.0
        node_parts.append(
            '<g class="node">'
            f'<rect x="{_num(extent.x0)}" y="{_num(extent.y0)}" width="{_num(extent.x1 - extent.x0)}" '
            f'height="{_num(extent.height)}" fill="{escape(node.color, quote=True)}" fill-opacity="0.9" rx="4" ry="4">'
            f"<title>{escape(node_tooltip(node))}</title></rect>"
            f'<text class="label" x="{_num(x)}" y="{_num(y)}" dy="0.35em" text-anchor="{anchor}" '
            f'style="font-size: {font_size}; fill: #4b5563">{escape(node_label(node, opts.mobile))}</text>'
            "</g>"
        )

    return (
        f'<svg class="sankey" width="{width}" height="{height}" xmlns="http://www.w3.org/2000/svg">'
        f"<defs>{''.join(gradients)}</defs>"
        f'<g transform="translate({_num(opts.margin_left)},{_num(opts.margin_top)})">'
        f'<g class="links">{"".join(ribbons)}</g>'
        f'<g class="nodes">{"".join(node_parts)}</g>'
        "</g></svg>"
    )
