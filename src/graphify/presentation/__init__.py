"""Presentation of chart results."""

from graphify.presentation.presenter import (
    ChartRenderer,
    DownloadAction,
    PlotlyRenderer,
    Presentation,
    ResultPresenter,
)

__all__ = [
    "ChartRenderer",
    "DownloadAction",
    "PlotlyRenderer",
    "Presentation",
    "ResultPresenter",
]
