"""Enumerations for Graphify core types."""

from enum import Enum


class ChartKind(str, Enum):
    """Chart types understood by the charting service."""

    BAR = "bar"
    LINE = "line"
    SCATTER = "scatter"
    PIE = "pie"
    HISTOGRAM = "histogram"
    BOX = "box"
    AREA = "area"
    POLAR = "polar"
    TREEMAP = "treemap"

    @property
    def requires_y_axis(self) -> bool:
        """Whether the chart plots both an X and a Y column."""
        return self in TWO_AXIS_KINDS


TWO_AXIS_KINDS = frozenset(
    {
        ChartKind.BAR,
        ChartKind.LINE,
        ChartKind.SCATTER,
        ChartKind.BOX,
        ChartKind.AREA,
        ChartKind.POLAR,
    }
)


class OutputFormat(str, Enum):
    """Generation output formats.

    ``PREVIEW`` asks the service for a renderable Plotly description; every
    other member is a binary format delivered as a downloadable artifact.
    """

    PREVIEW = "json"
    PNG = "png"
    JPEG = "jpeg"
    SVG = "svg"
    PDF = "pdf"

    @property
    def is_binary(self) -> bool:
        """Whether the response body is an opaque byte stream."""
        return self is not OutputFormat.PREVIEW

    @property
    def extension(self) -> str:
        """File extension used when exposing the artifact for download."""
        return self.value


class PipelineState(str, Enum):
    """States of the chart workflow state machine."""

    IDLE = "idle"
    AWAITING_SHEETS = "awaiting_sheets"
    SHEETS_READY = "sheets_ready"
    AWAITING_COLUMNS = "awaiting_columns"
    COLUMNS_READY = "columns_ready"
    GENERATING = "generating"
    RESULT_READY = "result_ready"
    ERROR = "error"

    @property
    def rank(self) -> int:
        """Position along the forward pipeline (``ERROR`` has no position)."""
        return _STATE_ORDER.get(self, -1)

    def at_least(self, other: "PipelineState") -> bool:
        """Whether this state is ``other`` or further along the pipeline."""
        return self.rank >= other.rank >= 0


_STATE_ORDER = {
    PipelineState.IDLE: 0,
    PipelineState.AWAITING_SHEETS: 1,
    PipelineState.SHEETS_READY: 2,
    PipelineState.AWAITING_COLUMNS: 3,
    PipelineState.COLUMNS_READY: 4,
    PipelineState.GENERATING: 5,
    PipelineState.RESULT_READY: 6,
}


class PipelinePhase(str, Enum):
    """Processing phases for tracking and error attribution."""

    SHEET_DISCOVERY = "sheet_discovery"
    COLUMN_DISCOVERY = "column_discovery"
    CHART_GENERATION = "chart_generation"
    PRESENTATION = "presentation"


class ServiceOperation(str, Enum):
    """Remote operations issued by the transport adapter."""

    DISCOVER_SHEETS = "discover_sheets"
    DISCOVER_COLUMNS = "discover_columns"
    GENERATE_CHART = "generate_chart"

    @property
    def path(self) -> str:
        """Endpoint path on the charting service."""
        return _OPERATION_PATHS[self]


_OPERATION_PATHS = {
    ServiceOperation.DISCOVER_SHEETS: "/upload/",
    ServiceOperation.DISCOVER_COLUMNS: "/columns/",
    ServiceOperation.GENERATE_CHART: "/generate/",
}


class DiscoveryTarget(str, Enum):
    """Metadata enumerated by a discovery call."""

    SHEETS = "sheets"
    COLUMNS = "columns"


class ErrorCode(str, Enum):
    """Application error codes for structured error reporting."""

    E400_VALIDATION = "E400_VALIDATION"
    E409_CONFLICT = "E409_CONFLICT"
    E410_GONE = "E410_GONE"
    E424_UPSTREAM_SERVICE = "E424_UPSTREAM_SERVICE"
    E500_INTERNAL = "E500_INTERNAL"


class ErrorKind(str, Enum):
    """Workflow-level failure kinds surfaced to the user."""

    DISCOVERY_FAILED = "discovery_failed"
    VALIDATION_FAILED = "validation_failed"
    GENERATION_FAILED = "generation_failed"


class NoticeLevel(str, Enum):
    """Severity of a user-facing notice."""

    WARNING = "warning"
    ERROR = "error"
