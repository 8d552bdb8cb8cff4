#!/usr/bin/env python3
"""
Visitor charts for repository traffic snapshots.

A snapshot becomes a ChartSpec (two series sharing the same days: unique
visitors on the primary axis and views on the secondary axis), and the spec
is drawn to a PNG with matplotlib's Agg canvas. Figures are created per call
rather than through pyplot, so rendering is safe from request threads.
"""

import io
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Tuple

import matplotlib.dates as mdates
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure

from .models import StatsSnapshot

PRIMARY_AXIS = "primary"
SECONDARY_AXIS = "secondary"

UNIQUES_COLOR = "#3474db"
VIEWS_COLOR = "#15c694"
TITLE_COLOR = "#341777"

CHART_WIDTH = 800
CHART_HEIGHT = 300
CHART_DPI = 100


@dataclass
class ChartSeries:
    name: str
    y_axis: str
    color: str
    line_width: float
    fill: bool = False
    x_values: List[datetime] = field(default_factory=list)
    y_values: List[float] = field(default_factory=list)


@dataclass
class ChartSpec:
    """Everything needed to draw one chart. Built per request and never stored."""
    title: str
    series: Tuple[ChartSeries, ...]
    primary_axis_label: str = "Unique visitors"
    secondary_axis_label: str = "Views"
    x_label_format: str = "%b %d"
    width: int = CHART_WIDTH
    height: int = CHART_HEIGHT


def build_chart_spec(repo_id: str, snapshot: StatsSnapshot) -> ChartSpec:
    """Build the unique visitors / views chart for a repository, keeping the snapshot's day order."""
    uniques = ChartSeries("Unique visitors", PRIMARY_AXIS, UNIQUES_COLOR, line_width=2.6, fill=True)
    views = ChartSeries("Views", SECONDARY_AXIS, VIEWS_COLOR, line_width=2.2)

    for point in snapshot.daily_points:
        day = point.day
        uniques.x_values.append(day)
        uniques.y_values.append(float(point.uniques))
        views.x_values.append(day)
        views.y_values.append(float(point.count))

    return ChartSpec(title=f"{repo_id} visitors", series=(uniques, views))


def render_png(spec: ChartSpec) -> bytes:
    """Draw a chart spec as a fixed-size PNG. An empty spec still yields axes and a legend."""
    fig = Figure(figsize=(spec.width / CHART_DPI, spec.height / CHART_DPI), dpi=CHART_DPI)
    FigureCanvasAgg(fig)
    fig.subplots_adjust(left=0.08, right=0.92, top=0.82, bottom=0.12)

    primary = fig.add_subplot(1, 1, 1)
    secondary = primary.twinx()
    axes = {PRIMARY_AXIS: primary, SECONDARY_AXIS: secondary}

    handles = []
    for series in spec.series:
        ax = axes[series.y_axis]
        line, = ax.plot(series.x_values, series.y_values, label=series.name, color=series.color,
                        linewidth=series.line_width, marker="o", markersize=5)
        if series.fill and series.x_values:
            ax.fill_between(series.x_values, series.y_values, color=series.color, alpha=0.15)
        handles.append(line)

    primary.set_ylabel(spec.primary_axis_label)
    secondary.set_ylabel(spec.secondary_axis_label)
    primary.xaxis.set_major_formatter(mdates.DateFormatter(spec.x_label_format))
    primary.tick_params(axis="x", labelsize=8)
    for ax in axes.values():
        ax.set_ylim(bottom=0)

    primary.legend(handles=handles, loc="upper left", fontsize=8, frameon=False)
    fig.suptitle(spec.title, color=TITLE_COLOR)

    buf = io.BytesIO()
    fig.savefig(buf, format="png", dpi=CHART_DPI)
    return buf.getvalue()
