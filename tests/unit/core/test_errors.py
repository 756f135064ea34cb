"""Unit tests for error handling."""

from graphify.core.enums import (
    DiscoveryTarget,
    ErrorCode,
    ErrorKind,
    NoticeLevel,
    PipelinePhase,
    PipelineState,
    ServiceOperation,
)
from graphify.core.errors import (
    ArtifactRevokedError,
    DiscoveryFailedError,
    GenerationFailedError,
    GraphifyError,
    InvalidTransitionError,
    PipelineBusyError,
    TransportError,
    ValidationError,
)
from graphify.core.models import ErrorDetail


class TestGraphifyError:
    """Test base GraphifyError class."""

    def test_basic_error(self) -> None:
        """Test basic error creation."""
        error = GraphifyError(message="Test error", code=ErrorCode.E500_INTERNAL)
        assert str(error) == "Test error"
        assert error.code == ErrorCode.E500_INTERNAL
        assert error.details == []
        assert error.hint is None
        assert error.phase is None
        assert error.kind is None

    def test_to_notice(self) -> None:
        """Test conversion to a user-facing notice."""
        error = GraphifyError(
            message="Something broke",
            code=ErrorCode.E424_UPSTREAM_SERVICE,
            hint="Try again",
            details=[ErrorDetail(field="operation", reason="discover_sheets")],
        )
        notice = error.to_notice()
        assert notice.level == NoticeLevel.ERROR
        assert notice.message == "Something broke"
        assert notice.hint == "Try again"
        assert notice.code == "E424_UPSTREAM_SERVICE"


class TestValidationError:
    """Test ValidationError class."""

    def test_missing_fields(self) -> None:
        """Test missing fields become details and a hint."""
        error = ValidationError(missing_fields=["x_column", "y_column"])
        assert error.code == ErrorCode.E400_VALIDATION
        assert error.kind == ErrorKind.VALIDATION_FAILED
        assert error.message == "Please fill all required fields."
        assert error.missing_fields == ["x_column", "y_column"]
        assert [d.field for d in error.details] == ["x_column", "y_column"]
        assert error.hint == "Missing: x_column, y_column"

    def test_notice_is_warning(self) -> None:
        """Test input problems surface as warnings rather than failures."""
        notice = ValidationError(missing_fields=["x_column"]).to_notice()
        assert notice.level == NoticeLevel.WARNING
        assert notice.message == "Please fill all required fields."

    def test_custom_hint(self) -> None:
        """Test an explicit hint is kept."""
        error = ValidationError(message="Bad column", hint="Available columns: A, B")
        assert error.hint == "Available columns: A, B"
        assert error.missing_fields == []


class TestTransportError:
    """Test TransportError class."""

    def test_carries_operation(self) -> None:
        """Test the attempted operation is tagged on the error."""
        error = TransportError(ServiceOperation.DISCOVER_COLUMNS, "connection refused")
        assert error.operation == ServiceOperation.DISCOVER_COLUMNS
        assert error.code == ErrorCode.E424_UPSTREAM_SERVICE
        assert error.message == "discover_columns failed: connection refused"
        assert len(error.details) == 1

    def test_with_status_code(self) -> None:
        """Test an HTTP status is recorded when present."""
        error = TransportError(ServiceOperation.GENERATE_CHART, "HTTP 502", status_code=502)
        assert error.status_code == 502
        assert error.details[1].reason == "502"


class TestDiscoveryFailedError:
    """Test DiscoveryFailedError class."""

    def test_sheets(self) -> None:
        """Test sheet discovery failure."""
        cause = TransportError(ServiceOperation.DISCOVER_SHEETS, "timeout")
        error = DiscoveryFailedError(DiscoveryTarget.SHEETS, cause=cause)
        assert error.kind == ErrorKind.DISCOVERY_FAILED
        assert error.target == DiscoveryTarget.SHEETS
        assert error.phase == PipelinePhase.SHEET_DISCOVERY
        assert error.message == "Failed to get sheet names"
        assert error.details == cause.details

    def test_columns(self) -> None:
        """Test column discovery failure."""
        error = DiscoveryFailedError(DiscoveryTarget.COLUMNS)
        assert error.phase == PipelinePhase.COLUMN_DISCOVERY
        assert error.message == "Failed to load columns"


class TestOtherErrors:
    """Test remaining error classes."""

    def test_generation_failed(self) -> None:
        """Test generation failure."""
        error = GenerationFailedError()
        assert error.kind == ErrorKind.GENERATION_FAILED
        assert error.message == "Error generating chart"
        assert error.phase == PipelinePhase.CHART_GENERATION

    def test_busy(self) -> None:
        """Test busy rejection."""
        error = PipelineBusyError()
        assert error.code == ErrorCode.E409_CONFLICT
        assert error.kind is None

    def test_invalid_transition(self) -> None:
        """Test invalid transition names the operation and state."""
        error = InvalidTransitionError("generate a chart", PipelineState.AWAITING_SHEETS)
        assert error.code == ErrorCode.E409_CONFLICT
        assert "awaiting_sheets" in error.message

    def test_artifact_revoked(self) -> None:
        """Test revoked artifact error."""
        error = ArtifactRevokedError("artifact:abc")
        assert error.code == ErrorCode.E410_GONE
        assert error.handle_id == "artifact:abc"
        assert error.phase == PipelinePhase.PRESENTATION
