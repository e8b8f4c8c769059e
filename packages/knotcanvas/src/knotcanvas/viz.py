"""
knotcanvas.viz
==============
Preview collaborators using Plotly.

Functionality:
1. PlotlyGeometryBuilder: turns a sampled strand into a Scatter3d trace.
2. FigureSceneHost: a go.Figure that traces are added to and removed from.

Note:
    This is a preview, not mesh tessellation. Tube mode is drawn as a wide
    line whose width follows the tube radius.
"""

import uuid

import numpy as np
import plotly.graph_objects as go

from .project import RenderMode

# Screen pixels per unit of tube radius
TUBE_WIDTH_SCALE = 40.0
LINE_WIDTH = 3


class PlotlyGeometryBuilder:
    """
    Builds one Scatter3d trace per strand.

    Attributes:
        live (set): uids of traces built and not yet disposed.
    """
    def __init__(self):
        self.live = set()

    def build(self, points, mode, tube_radius, radial_segments, closed, color=None):
        """
        Args:
            points: Sequence of (x, y, z).
            mode: RenderMode.LINE or RenderMode.TUBE.
            tube_radius: Used for the tube line width.
            radial_segments: Cross-section resolution; unused by a line preview.
            closed: Repeat the first point at the end.
            color: '#rrggbb'.
        """
        coords = np.array(points, dtype=float).reshape(-1, 3)
        if closed and len(coords) > 1:
            coords = np.vstack([coords, coords[:1]])
        xs, ys, zs = coords[:, 0], coords[:, 1], coords[:, 2]

        mode = RenderMode(mode)
        width = LINE_WIDTH if mode == RenderMode.LINE else max(LINE_WIDTH, tube_radius * TUBE_WIDTH_SCALE)

        uid = uuid.uuid4().hex
        trace = go.Scatter3d(
            x=xs, y=ys, z=zs,
            mode='lines',
            uid=uid,
            name=mode.value,
            showlegend=False,
            line=dict(width=width, color=color or '#ff6b6b'),
        )
        self.live.add(uid)
        return trace

    def dispose(self, renderable):
        self.live.discard(renderable.uid)


class FigureSceneHost:
    """
    Manager for the 3D preview figure.
    """
    def __init__(self, title="KnotCanvas"):
        self.fig = go.Figure()
        self.title = title

        # Equal aspect ratio so knots are not distorted
        self.fig.update_layout(
            title=title,
            scene=dict(
                aspectmode='data',
                xaxis_title='X',
                yaxis_title='Y',
                zaxis_title='Z'
            )
        )

    def add(self, renderable):
        self.fig.add_trace(renderable)

    def remove(self, renderable):
        self.fig.data = tuple(trace for trace in self.fig.data if trace.uid != renderable.uid)

    @property
    def uids(self):
        return [trace.uid for trace in self.fig.data]

    def show(self):
        """Render the interactive plot."""
        self.fig.show()
