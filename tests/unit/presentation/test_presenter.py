"""Unit tests for the result presenter."""

from pathlib import Path

import plotly.graph_objects as go
import pytest

from graphify.core.errors import ArtifactRevokedError
from graphify.core.models import RenderablePayload
from graphify.infra.artifacts import ArtifactStore
from graphify.presentation import PlotlyRenderer, ResultPresenter

PAYLOAD = RenderablePayload(
    data=[{"type": "bar", "x": ["A", "B"], "y": [100, 120], "marker": {"color": "#1f77b4"}}],
    layout={"title": {"text": "Sales Chart"}},
)


class StubRenderer:
    """Renderer remembering what it was asked to draw."""

    def __init__(self) -> None:
        self.calls: list[tuple[list, dict]] = []

    def render(self, data: list, layout: dict) -> str:
        self.calls.append((data, layout))
        return "widget"


class TestPlotlyRenderer:
    """Tests for PlotlyRenderer."""

    def test_render_builds_figure(self) -> None:
        """Test the payload becomes a Plotly figure unchanged."""
        renderer = PlotlyRenderer()
        figure = renderer.render(PAYLOAD.data, PAYLOAD.layout)

        assert isinstance(figure, go.Figure)
        assert figure.data[0].type == "bar"
        assert list(figure.data[0].y) == [100, 120]
        assert figure.layout.title.text == "Sales Chart"

    def test_to_html(self) -> None:
        """Test the rendered figure can be embedded as HTML."""
        renderer = PlotlyRenderer()
        renderer.render(PAYLOAD.data, PAYLOAD.layout)

        html = renderer.to_html()
        assert "<div" in html
        assert "Sales Chart" in html

    def test_to_html_before_render(self) -> None:
        """Test HTML export needs a rendered figure."""
        with pytest.raises(RuntimeError):
            PlotlyRenderer().to_html()


class TestResultPresenter:
    """Tests for ResultPresenter."""

    def test_payload_goes_to_renderer(self) -> None:
        """Test payloads are drawn and offer no download."""
        renderer = StubRenderer()
        presenter = ResultPresenter(ArtifactStore(), renderer)

        presentation = presenter.present(PAYLOAD)

        assert renderer.calls == [(PAYLOAD.data, PAYLOAD.layout)]
        assert presentation.figure == "widget"
        assert presentation.download is None

    def test_handle_becomes_download(self, tmp_path: Path) -> None:
        """Test artifacts are offered for download under chart.<ext>."""
        store = ArtifactStore()
        handle = store.create(b"%PDF-1.7 chart", extension="pdf", media_type="application/pdf")
        presenter = ResultPresenter(store, StubRenderer())

        presenter.present(handle)
        download = presenter.download

        assert download.filename == "chart.pdf"
        assert download.media_type == "application/pdf"
        assert download.available
        assert download.read() == b"%PDF-1.7 chart"

        target = download.save(tmp_path)
        assert target == tmp_path / "chart.pdf"
        assert target.read_bytes() == b"%PDF-1.7 chart"

    def test_superseded_handle_revoked(self) -> None:
        """Test a new result releases the previously presented artifact."""
        store = ArtifactStore()
        first = store.create(b"one", extension="png")
        presenter = ResultPresenter(store, StubRenderer())
        presenter.present(first)
        old_download = presenter.download

        presenter.present(PAYLOAD)

        assert not store.is_live(first)
        assert not old_download.available
        with pytest.raises(ArtifactRevokedError):
            old_download.read()

    def test_same_handle_kept(self) -> None:
        """Test presenting the same handle again does not revoke it."""
        store = ArtifactStore()
        handle = store.create(b"one", extension="png")
        presenter = ResultPresenter(store, StubRenderer())

        presenter.present(handle)
        presenter.present(handle)

        assert store.is_live(handle)

    def test_present_none_clears(self) -> None:
        """Test clearing the presentation after a reset."""
        store = ArtifactStore()
        handle = store.create(b"one", extension="svg")
        presenter = ResultPresenter(store, StubRenderer())
        presenter.present(handle)

        assert presenter.present(None) is None
        assert presenter.current is None
        assert presenter.download is None
        assert not store.is_live(handle)
