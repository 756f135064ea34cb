"""Presentation of chart results: rendered figures or downloadable artifacts."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

import plotly.graph_objects as go

from graphify.core.models import ArtifactHandle, ChartResult, RenderablePayload
from graphify.infra.artifacts import ArtifactStore
from graphify.infra.logging import get_logger

logger = get_logger(__name__)


class ChartRenderer(Protocol):
    """Widget that draws a Plotly ``{data, layout}`` description."""

    def render(self, data: list[dict[str, Any]], layout: dict[str, Any]) -> Any:  # noqa: ANN401
        """Draw the chart and return the widget's handle for it."""
        ...


class PlotlyRenderer:
    """Renderer building ``plotly.graph_objects.Figure`` instances."""

    def __init__(self) -> None:
        self.figure: go.Figure | None = None

    def render(self, data: list[dict[str, Any]], layout: dict[str, Any]) -> go.Figure:
        """Build a figure from the payload as-is."""
        self.figure = go.Figure(data=data, layout=layout)
        return self.figure

    def to_html(self, *, full_html: bool = False) -> str:
        """HTML snippet embedding the last rendered figure."""
        if self.figure is None:
            raise RuntimeError("No chart has been rendered")
        return self.figure.to_html(full_html=full_html, include_plotlyjs="cdn")


class DownloadAction:
    """User-triggerable download borrowing an artifact handle from the store."""

    def __init__(self, store: ArtifactStore, handle: ArtifactHandle) -> None:
        self._store = store
        self.handle = handle

    @property
    def filename(self) -> str:
        return self.handle.filename

    @property
    def media_type(self) -> str:
        return self.handle.media_type

    @property
    def available(self) -> bool:
        """Whether the handle has not been revoked."""
        return self._store.is_live(self.handle)

    def read(self) -> bytes:
        """Resolve the artifact bytes.

        Raises:
            ArtifactRevokedError: If the chart was superseded or the session reset
        """
        return self._store.read(self.handle)

    def save(self, directory: str | Path) -> Path:
        """Write the artifact into ``directory`` under its download name."""
        target = Path(directory) / self.filename
        target.write_bytes(self.read())
        logger.info("Chart downloaded", target=str(target), size=self.handle.size)
        return target


@dataclass
class Presentation:
    """What the user sees for one chart result."""

    figure: Any = None
    download: DownloadAction | None = None


class ResultPresenter:
    """Hands payloads to the renderer and exposes artifacts as downloads."""

    def __init__(self, store: ArtifactStore, renderer: ChartRenderer | None = None) -> None:
        """Initialize presenter.

        Args:
            store: Store the controller issues artifact handles from
            renderer: Chart widget, defaults to a Plotly figure builder
        """
        self.store = store
        self.renderer = renderer or PlotlyRenderer()
        self.current: Presentation | None = None

    @property
    def download(self) -> DownloadAction | None:
        """Download action for the presented artifact, if any."""
        return self.current.download if self.current else None

    def present(self, result: ChartResult | None) -> Presentation | None:
        """Show a chart result, replacing whatever was presented before.

        Passing None (after a reset or upstream change) clears the presentation.
        A previously presented handle that is superseded is revoked.
        """
        self._drop_download(keep=result if isinstance(result, ArtifactHandle) else None)

        if result is None:
            self.current = None
        elif isinstance(result, RenderablePayload):
            figure = self.renderer.render(result.data, result.layout)
            self.current = Presentation(figure=figure)
            logger.debug("Chart rendered", traces=len(result.data))
        else:
            self.current = Presentation(download=DownloadAction(self.store, result))
            logger.debug("Chart download ready", handle_id=result.handle_id, download_name=result.filename)

        return self.current

    def _drop_download(self, keep: ArtifactHandle | None) -> None:
        previous = self.download
        if previous is not None and previous.handle != keep:
            self.store.revoke(previous.handle)
