"""Plotly 2D view of the resolved padring footprints."""

from __future__ import annotations

from pathlib import Path

import plotly.graph_objects as go

from padring_report.geometry import ItemKind, RingAssembly, Side, resolve_footprint

SIDE_COLORS: dict[Side, str] = {
    Side.SOUTH: "rgba(40, 120, 220, 0.55)",
    Side.EAST: "rgba(40, 170, 90, 0.55)",
    Side.NORTH: "rgba(220, 150, 50, 0.55)",
    Side.WEST: "rgba(210, 70, 70, 0.55)",
}
BOND_COLOR = "rgba(30, 30, 30, 0.80)"


def build_figure(ring: RingAssembly) -> go.Figure:
    """Build a figure with one filled outline per reported ring item."""
    fig = go.Figure()

    by_side: dict[Side, tuple[list[float | None], list[float | None], list[str | None]]] = {}
    centers: dict[Side, tuple[list[float], list[float], list[str]]] = {}
    for side, item in ring.walk():
        if item.kind not in (ItemKind.CELL, ItemKind.BOND):
            continue
        fp = resolve_footprint(item)
        xs, ys, texts = by_side.setdefault(side, ([], [], []))
        label = f"{item.instance} ({item.cell_name}) {item.location}"
        for corner in (*fp.corners, fp.corners[0]):
            xs.append(corner.x)
            ys.append(corner.y)
            texts.append(label)
        xs.append(None)
        ys.append(None)
        texts.append(None)

        cx, cy, ctexts = centers.setdefault(side, ([], [], []))
        cx.append(fp.centroid.x)
        cy.append(fp.centroid.y)
        ctexts.append(label)

    for side, (xs, ys, texts) in by_side.items():
        color = SIDE_COLORS[side]
        fig.add_trace(
            go.Scatter(
                x=xs,
                y=ys,
                mode="lines",
                fill="toself",
                fillcolor=color,
                line=dict(color=color, width=0.8),
                name=side.value,
                legendgroup=side.value,
                hoveron="fills",
                hoverinfo="text",
                hovertext=texts,
            )
        )

    for side, (cx, cy, ctexts) in centers.items():
        fig.add_trace(
            go.Scatter(
                x=cx,
                y=cy,
                mode="markers",
                marker=dict(color=BOND_COLOR, size=4),
                name=f"{side.value} centers",
                legendgroup=side.value,
                showlegend=False,
                hovertext=ctexts,
                hovertemplate="%{hovertext}<extra></extra>",
            )
        )

    fig.update_layout(
        title=f"Padring View - {ring.design_name}",
        width=1050,
        height=1050,
        legend=dict(orientation="v"),
    )
    fig.update_xaxes(title_text="X (um)")
    fig.update_yaxes(title_text="Y (um)", scaleanchor="x", scaleratio=1)
    return fig


def render_ring(ring: RingAssembly, output_path: str | Path, open_browser: bool = False) -> None:
    """Render the padring footprints to an HTML file."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    fig = build_figure(ring)
    fig.write_html(str(output_path))
    if open_browser:
        import webbrowser

        webbrowser.open(f"file://{output_path.resolve()}")
