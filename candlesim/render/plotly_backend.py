"""Draws scene snapshots onto a plotly figure used as a pixel canvas."""

from pathlib import Path

import plotly.graph_objects as go

from candlesim.render.scene import SceneSnapshot

__all__ = ["PlotlyBackend"]

_AXIS_LABEL_GAP = 6


class PlotlyBackend:
    """
    Renders a ``SceneSnapshot`` as plotly layout shapes and annotations.

    Both figure axes are hidden and span the container in pixels, with y
    growing downward, so scene coordinates translate directly.
    """

    def __init__(self, template: str = "plotly_dark"):
        self.template = template

    def draw(self, snapshot: SceneSnapshot) -> go.Figure:
        fig = go.Figure()
        style = snapshot.style
        left, top = snapshot.margin.left, snapshot.margin.top
        right_edge = left + snapshot.inner_width
        bottom_edge = top + snapshot.inner_height

        for tick in snapshot.value_ticks:
            y = top + tick.position
            fig.add_shape(
                type="line", x0=left, x1=right_edge, y0=y, y1=y,
                line=dict(color=style.grid_color, width=0.5),
                opacity=tick.opacity, layer="below",
            )
            fig.add_annotation(
                x=right_edge + _AXIS_LABEL_GAP, y=y, text=tick.label, showarrow=False,
                xanchor="left", yanchor="middle", opacity=tick.opacity,
                font=dict(color=style.axis_text_color, size=style.font_size),
            )

        for tick in snapshot.time_ticks:
            fig.add_annotation(
                x=left + tick.position, y=bottom_edge + _AXIS_LABEL_GAP, text=tick.label, showarrow=False,
                xanchor="center", yanchor="top", opacity=tick.opacity,
                font=dict(color=style.axis_text_color, size=style.font_size),
            )

        for candle in snapshot.candles:
            fig.add_shape(
                type="line",
                x0=left + candle.wick_x, x1=left + candle.wick_x,
                y0=top + candle.wick_y1, y1=top + candle.wick_y2,
                line=dict(color=candle.color, width=1),
                opacity=candle.opacity,
            )
            fig.add_shape(
                type="rect",
                x0=left + candle.x, x1=left + candle.x + candle.width,
                y0=top + candle.body_y, y1=top + candle.body_y + candle.body_height,
                fillcolor=candle.color, line=dict(width=0),
                opacity=candle.opacity,
            )

        crosshair = snapshot.crosshair
        if crosshair is not None:
            guide = dict(color=style.crosshair_color, width=1, dash="dash")
            fig.add_shape(type="line", x0=left, x1=right_edge, y0=top + crosshair.y, y1=top + crosshair.y, line=guide)
            fig.add_shape(type="line", x0=left + crosshair.x, x1=left + crosshair.x, y0=top, y1=bottom_edge, line=guide)
            fig.add_annotation(
                x=left + crosshair.label_x, y=top + crosshair.y - 5, text=crosshair.label, showarrow=False,
                xanchor="center", yanchor="bottom", bgcolor=style.label_background,
                font=dict(color=style.label_text_color, size=style.font_size),
            )

        fig.update_layout(
            template=self.template,
            width=int(snapshot.width),
            height=int(snapshot.height),
            margin=dict(l=0, r=0, t=0, b=0),
            paper_bgcolor=style.background,
            plot_bgcolor=style.background,
            showlegend=False,
        )
        fig.update_xaxes(range=[0, snapshot.width], visible=False, fixedrange=True)
        fig.update_yaxes(range=[snapshot.height, 0], visible=False, fixedrange=True)
        return fig

    def to_html(self, snapshot: SceneSnapshot) -> str:
        return self.draw(snapshot).to_html(full_html=True, include_plotlyjs="cdn")

    def write_html(self, snapshot: SceneSnapshot, path: Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_html(snapshot), encoding="utf-8")
        return path
