"""Pydantic models for Graphify data structures."""

import re
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import ChartKind, NoticeLevel, OutputFormat

HEX_COLOR_PATTERN = re.compile(r"^#[0-9a-fA-F]{6}$")

DEFAULT_CHART_TITLE = "Sales Chart"
DEFAULT_CHART_COLOR = "#1f77b4"

# Extensions accepted by the file picker, with their declared media types
SUPPORTED_MEDIA_TYPES: dict[str, str] = {
    ".csv": "text/csv",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".xls": "application/vnd.ms-excel",
}


class SourceFile(BaseModel):
    """A user-supplied data file. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    filename: str = Field(..., min_length=1, description="Original file name")
    media_type: str = Field(default="application/octet-stream", description="Declared media type")
    content: bytes = Field(..., repr=False, description="Raw file bytes")

    @property
    def size_bytes(self) -> int:
        """Size of the file content in bytes."""
        return len(self.content)

    @classmethod
    def from_path(cls, path: str | Path) -> "SourceFile":
        """Read a spreadsheet file from disk.

        Args:
            path: Path to a ``.csv``, ``.xlsx`` or ``.xls`` file

        Returns:
            SourceFile holding the file's bytes

        Raises:
            ValueError: If the extension is not a supported spreadsheet type
        """
        file_path = Path(path)
        suffix = file_path.suffix.lower()
        if suffix not in SUPPORTED_MEDIA_TYPES:
            supported = ", ".join(sorted(SUPPORTED_MEDIA_TYPES))
            msg = f"Unsupported file type '{suffix or file_path.name}'. Supported: {supported}"
            raise ValueError(msg)

        return cls(
            filename=file_path.name,
            media_type=SUPPORTED_MEDIA_TYPES[suffix],
            content=file_path.read_bytes(),
        )

    def describe(self) -> dict[str, Any]:
        """Loggable summary that never includes the file content."""
        return {"file_name": self.filename, "media_type": self.media_type, "size_bytes": self.size_bytes}


class ChartConfig(BaseModel):
    """User-selected chart parameters sent with a generation request."""

    model_config = ConfigDict(validate_assignment=True)

    chart_kind: ChartKind = Field(default=ChartKind.BAR, description="Chart type")
    x_column: str | None = Field(default=None, description="X-axis (or label) column")
    y_column: str | None = Field(default=None, description="Y-axis column for two-axis kinds")
    title: str = Field(default=DEFAULT_CHART_TITLE, description="Chart title")
    color: str = Field(default=DEFAULT_CHART_COLOR, description="Trace color as #RRGGBB")
    output_format: OutputFormat = Field(default=OutputFormat.PREVIEW, description="Response format")

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        """Ensure the color is a single hex RGB value."""
        if not HEX_COLOR_PATTERN.match(v):
            raise ValueError(f"Color must be a hex RGB value like '#1f77b4', got '{v}'")
        return v.lower()

    @field_validator("x_column", "y_column")
    @classmethod
    def normalize_empty_column(cls, v: str | None) -> str | None:
        """Treat an empty selection as no selection."""
        if v is None or not v.strip():
            return None
        return v

    @property
    def effective_y_column(self) -> str | None:
        """Y column as sent to the service; ignored for single-axis kinds."""
        if not self.chart_kind.requires_y_axis:
            return None
        return self.y_column

    def missing_fields(self) -> list[str]:
        """Required column selections that are still empty."""
        missing = []
        if not self.x_column:
            missing.append("x_column")
        if self.chart_kind.requires_y_axis and not self.y_column:
            missing.append("y_column")
        return missing

    def clear_selections(self) -> None:
        """Drop column selections while keeping kind, title, color and format."""
        self.x_column = None
        self.y_column = None


class RenderablePayload(BaseModel):
    """Plotly chart description returned by a preview generation."""

    kind: Literal["payload"] = "payload"
    data: list[dict[str, Any]] = Field(default_factory=list, description="Plotly trace list")
    layout: dict[str, Any] = Field(default_factory=dict, description="Plotly layout object")


class ArtifactHandle(BaseModel):
    """Revocable reference to downloadable chart bytes held in an artifact store."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["artifact"] = "artifact"
    handle_id: str = Field(..., description="Store-scoped handle identifier")
    extension: str = Field(..., description="File extension of the artifact format")
    media_type: str = Field(default="application/octet-stream", description="Content-Type reported by the service")
    size: int = Field(..., ge=0, description="Artifact size in bytes")

    @property
    def filename(self) -> str:
        """Download name for the artifact."""
        return f"chart.{self.extension}"


ChartResult = Annotated[RenderablePayload | ArtifactHandle, Field(discriminator="kind")]


class ChartBytes(BaseModel):
    """Raw bytes of a binary generation response."""

    content: bytes = Field(..., repr=False, description="Opaque response body")
    media_type: str = Field(default="application/octet-stream", description="Response Content-Type")


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(default=None, description="Field that caused the error")
    reason: str | None = Field(default=None, description="Detailed reason for the error")
    suggestion: str | None = Field(default=None, description="Suggested correction")


class Notice(BaseModel):
    """User-facing message raised by a workflow transition."""

    level: NoticeLevel = Field(default=NoticeLevel.ERROR, description="Severity")
    message: str = Field(..., description="Message shown to the user")
    hint: str | None = Field(default=None, description="Suggested next step")
    code: str | None = Field(default=None, description="Error code, when raised by a failure")
