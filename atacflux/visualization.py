import plotly.graph_objects as go
from plotly.subplots import make_subplots
import numpy as np
import pandas as pd
from enum import Enum
from typing import Mapping, Optional

from .layout import compute_layout, edge_path, LayoutConfig
from .metrics import bottleneck_gene, waste_ratio
from .pathway import Pathway, MetaboliteType
from .solver import FluxResult


class AccessibilityBand(Enum):
    OPEN = "open"
    MODERATE = "moderate"
    RESTRICTED = "restricted"
    CLOSED = "closed"


class FlowSpeed(Enum):
    FAST = "fast"
    MEDIUM = "medium"
    SLOW = "slow"


BAND_COLORS = {
    AccessibilityBand.OPEN: "#22c55e",        # green
    AccessibilityBand.MODERATE: "#3b82f6",    # blue
    AccessibilityBand.RESTRICTED: "#f97316",  # orange
    AccessibilityBand.CLOSED: "#ef4444",      # red
}

NODE_COLORS = {
    MetaboliteType.INPUT: "#64748b",
    MetaboliteType.INTERMEDIATE: "#334155",
    MetaboliteType.BRANCH: "#334155",
    MetaboliteType.PRODUCT: "#16a34a",
    MetaboliteType.WASTE: "#b91c1c",
}

BOTTLENECK_COLOR = "#ef4444"


def classify_accessibility(value: float) -> AccessibilityBand:
    if value >= 0.6:
        return AccessibilityBand.OPEN
    if value >= 0.4:
        return AccessibilityBand.MODERATE
    if value >= 0.2:
        return AccessibilityBand.RESTRICTED
    return AccessibilityBand.CLOSED


def accessibility_color(value: float) -> str:
    return BAND_COLORS[classify_accessibility(value)]


def classify_flow_speed(rate: float) -> FlowSpeed:
    """Animation speed band for an accessibility-like rate."""
    if rate > 0.7:
        return FlowSpeed.FAST
    if rate > 0.3:
        return FlowSpeed.MEDIUM
    return FlowSpeed.SLOW


def classify_flux_speed(flux: float) -> FlowSpeed:
    """Animation speed band for an absolute edge flux."""
    if flux >= 0.15:
        return FlowSpeed.FAST
    if flux >= 0.08:
        return FlowSpeed.MEDIUM
    return FlowSpeed.SLOW


def flux_color(value: float) -> str:
    """Five-step heat scale used for flux arrows."""
    if value < 0.2:
        return "#ef4444"  # severely restricted
    if value < 0.4:
        return "#f97316"
    if value < 0.6:
        return "#eab308"
    if value < 0.8:
        return "#22c55e"
    return "#10b981"  # excellent


def flux_width(flux: float) -> float:
    """Arrow stroke width, clamped to [2, 8]."""
    return float(np.clip(flux * 12, 2, 8))


def edge_display_rate(
    pathway: Pathway,
    gene: str,
    result: FluxResult,
    accessibility: Mapping[str, float],
) -> float:
    """
    Rate used to colour an edge. Passive genes have a fixed accessibility, so
    their edge is coloured by the share of branch flux that is wasted instead.
    """
    if pathway.genes[gene].passive and pathway.product_node and pathway.waste_node:
        ratio = waste_ratio(result, pathway.product_node, pathway.waste_node)
        return 0.5 if ratio is None else ratio
    return accessibility[gene]


def create_pathway_figure(
    pathway: Pathway,
    result: FluxResult,
    accessibility: Mapping[str, float],
    layout_config: Optional[LayoutConfig] = None,
    title: Optional[str] = None,
) -> go.Figure:
    """
    Renders the pathway diagram as a plotly figure.

    Args:
        pathway: Pathway to draw
        result: Solver output; node labels show flux and arrow widths scale with edge flux
        accessibility: gene -> accessibility used for the solve; colours the enzymes
        layout_config: Optional layout constants
        title: Optional figure title

    Returns:
        plotly.graph_objects.Figure
    """
    layout = compute_layout(pathway, layout_config)
    config = layout.config
    metabolites = pathway.metabolites
    node_height = config.metabolite.height
    bottleneck = bottleneck_gene(accessibility, pathway.controllable_genes)

    fig = go.Figure()

    for edge in pathway.edges:
        src, dst = layout.positions[edge.source], layout.positions[edge.target]
        geometry = edge_path(src, dst, node_height, config)
        flux = result.edge_flux.get(edge.key, 0.0)
        color = accessibility_color(edge_display_rate(pathway, edge.gene, result, accessibility))

        if geometry["type"] == "vertical":
            xs = [geometry["x1"], geometry["x2"]]
            ys = [geometry["y1"], geometry["y2"]]
        else:
            xs = [p[0] for p in geometry["points"]]
            ys = [p[1] for p in geometry["points"]]

        speed = classify_flux_speed(flux).value
        fig.add_trace(go.Scatter(
            x=xs,
            y=ys,
            mode="lines",
            line=dict(color=color, width=flux_width(flux), dash="dash" if pathway.genes[edge.gene].passive else "solid"),
            name=edge.key,
            hovertemplate=f"{edge.gene}: flux {flux:.3f} ({speed})<extra></extra>",
            showlegend=False,
        ))

    for key, pos in layout.enzyme_positions.items():
        gene = pos.gene
        if pathway.genes[gene].passive:
            continue
        value = accessibility[gene]
        is_bottleneck = gene == bottleneck
        fig.add_trace(go.Scatter(
            x=[pos.x],
            y=[pos.y],
            mode="markers+text",
            marker=dict(
                symbol="square",
                size=config.enzyme.height,
                color="#0f172a",
                line=dict(color=BOTTLENECK_COLOR if is_bottleneck else accessibility_color(value),
                          width=4 if is_bottleneck else 2),
            ),
            text=[f"{gene}<br>{value:.0%}"],
            textposition="middle right",
            textfont=dict(color=accessibility_color(value)),
            name=gene,
            hovertemplate=(
                f"{gene} ({pathway.genes[gene].name})<br>"
                f"accessibility {value:.2f} [{classify_accessibility(value).value}]<extra></extra>"
            ),
            showlegend=False,
        ))

    for node, pos in layout.positions.items():
        met = metabolites[node]
        flux = result.flux_at(node)
        fig.add_trace(go.Scatter(
            x=[pos.x],
            y=[pos.y],
            mode="markers+text",
            marker=dict(symbol="square", size=node_height, color=NODE_COLORS[met.type]),
            text=[f"{met.label}<br>{flux:.3f}"],
            textposition="middle center",
            textfont=dict(color="white"),
            name=met.name,
            hovertemplate=f"{met.name} ({met.type.value})<br>flux {flux:.4f}<extra></extra>",
            showlegend=False,
        ))

    if result.is_degenerate:
        fig.add_annotation(
            x=0.5, y=1.0, xref="paper", yref="paper", showarrow=False,
            text=f"Degenerate branch at {', '.join(result.degenerate_nodes)}: even split applied",
            font=dict(color=BOTTLENECK_COLOR),
        )

    fig.update_layout(
        title=title or f"<b>{pathway.name}</b>",
        template="plotly_white",
        width=config.width,
        height=layout.view_box_height,
        xaxis=dict(visible=False, range=[0, layout.view_box_width]),
        yaxis=dict(visible=False, range=[layout.view_box_height, 0]),
        margin=dict(l=10, r=10, t=60, b=10),
    )
    return fig


def create_sweep_figure(frame: pd.DataFrame, gene: Optional[str] = None) -> go.Figure:
    """
    Two-panel plot of an accessibility sweep: terminal flux and capture rate.

    Args:
        frame (pd.DataFrame): Output of Workbench.sweep_accessibility
        gene (str, optional): Swept gene, used in the title
    """
    if frame.empty:
        raise ValueError("sweep frame cannot be empty")

    fig = make_subplots(
        rows=1,
        cols=2,
        subplot_titles=("Terminal Flux", "Product Capture Rate (%)"),
        horizontal_spacing=0.12,
    )
    x = frame["accessibility"]

    fig.add_trace(go.Scatter(x=x, y=frame["product_flux"], mode="lines+markers",
                             name="product", line=dict(color="#22c55e")), row=1, col=1)
    fig.add_trace(go.Scatter(x=x, y=frame["waste_flux"], mode="lines+markers",
                             name="waste", line=dict(color="#ef4444")), row=1, col=1)

    capture_pct = frame["capture_rate"].astype(float) * 100
    fig.add_trace(go.Scatter(x=x, y=capture_pct, mode="lines+markers",
                             name="capture", line=dict(color="#3b82f6")), row=1, col=2)

    for threshold in (0.2, 0.4, 0.6):
        fig.add_vline(x=threshold, line=dict(color="Gray", dash="dot"), row=1, col=1)

    fig.update_xaxes(title_text=f"{gene or 'gene'} accessibility", range=[0, 1])
    fig.update_layout(
        title=f"<b>Accessibility Sweep{': ' + gene if gene else ''}</b>",
        template="plotly_white",
        height=420,
    )
    return fig
