"""Error handling and exception definitions for Graphify."""

from .enums import DiscoveryTarget, ErrorCode, ErrorKind, NoticeLevel, PipelinePhase, PipelineState, ServiceOperation
from .models import ErrorDetail, Notice


class GraphifyError(Exception):
    """Base exception for all Graphify errors."""

    kind: ErrorKind | None = None
    notice_level: NoticeLevel = NoticeLevel.ERROR

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        details: list[ErrorDetail] | None = None,
        hint: str | None = None,
        phase: PipelinePhase | None = None,
    ):
        """Initialize Graphify error.

        Args:
            message: Human-readable error message
            code: Error code from ErrorCode enum
            details: Optional detailed error information
            hint: Optional correction hint for the user
            phase: Optional pipeline phase where error occurred
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or []
        self.hint = hint
        self.phase = phase

    def to_notice(self) -> Notice:
        """Convert exception to a user-facing notice.

        Returns:
            Notice model instance
        """
        return Notice(
            level=self.notice_level,
            message=self.message,
            hint=self.hint,
            code=self.code.value,
        )


class ValidationError(GraphifyError):
    """Raised when a required chart-configuration field is missing or invalid."""

    kind = ErrorKind.VALIDATION_FAILED
    notice_level = NoticeLevel.WARNING

    def __init__(
        self,
        message: str = "Please fill all required fields.",
        missing_fields: list[str] | None = None,
        details: list[ErrorDetail] | None = None,
        hint: str | None = None,
    ):
        """Initialize validation error."""
        details = list(details or [])
        for field in missing_fields or []:
            details.append(ErrorDetail(field=field, reason=f"'{field}' is required"))

        if not hint and missing_fields:
            hint = f"Missing: {', '.join(missing_fields)}"

        super().__init__(
            message=message,
            code=ErrorCode.E400_VALIDATION,
            details=details,
            hint=hint,
            phase=PipelinePhase.CHART_GENERATION,
        )
        self.missing_fields = list(missing_fields or [])


class InvalidTransitionError(GraphifyError):
    """Raised when an operation is requested in a state that does not allow it."""

    def __init__(self, operation: str, state: PipelineState):
        """Initialize invalid transition error."""
        super().__init__(
            message=f"Cannot {operation} while pipeline is '{state.value}'",
            code=ErrorCode.E409_CONFLICT,
            hint="Upload a file and select a sheet before generating a chart.",
        )
        self.operation = operation
        self.state = state


class PipelineBusyError(GraphifyError):
    """Raised when a chart is requested while a previous request is still outstanding."""

    def __init__(self) -> None:
        """Initialize pipeline busy error."""
        super().__init__(
            message="A chart is already being generated",
            code=ErrorCode.E409_CONFLICT,
            hint="Wait for the current chart to finish before generating again.",
            phase=PipelinePhase.CHART_GENERATION,
        )


class ArtifactRevokedError(GraphifyError):
    """Raised when a revoked or unknown artifact handle is resolved."""

    def __init__(self, handle_id: str):
        """Initialize artifact revoked error."""
        super().__init__(
            message=f"Artifact '{handle_id}' is no longer available",
            code=ErrorCode.E410_GONE,
            hint="Generate the chart again to get a fresh download.",
            phase=PipelinePhase.PRESENTATION,
        )
        self.handle_id = handle_id


class TransportError(GraphifyError):
    """Raised when a request to the charting service fails for any reason."""

    def __init__(
        self,
        operation: ServiceOperation,
        message: str,
        status_code: int | None = None,
    ):
        """Initialize transport error.

        Args:
            operation: Service operation that was attempted
            message: Description of the failure
            status_code: HTTP status code, when the service answered
        """
        details = [ErrorDetail(field="operation", reason=operation.value)]
        if status_code:
            details.append(ErrorDetail(field="status_code", reason=str(status_code)))

        super().__init__(
            message=f"{operation.value} failed: {message}",
            code=ErrorCode.E424_UPSTREAM_SERVICE,
            details=details,
            hint="The charting service is unavailable or returned an unexpected response.",
        )
        self.operation = operation
        self.status_code = status_code


class DiscoveryFailedError(GraphifyError):
    """Raised when sheet or column discovery fails."""

    kind = ErrorKind.DISCOVERY_FAILED

    _MESSAGES = {
        DiscoveryTarget.SHEETS: "Failed to get sheet names",
        DiscoveryTarget.COLUMNS: "Failed to load columns",
    }

    def __init__(self, target: DiscoveryTarget, cause: GraphifyError | None = None):
        """Initialize discovery error."""
        phase = PipelinePhase.SHEET_DISCOVERY if target is DiscoveryTarget.SHEETS else PipelinePhase.COLUMN_DISCOVERY
        hint = (
            "Check that the file is a valid Excel or CSV document and try again."
            if target is DiscoveryTarget.SHEETS
            else "Try selecting the sheet again."
        )
        super().__init__(
            message=self._MESSAGES[target],
            code=ErrorCode.E424_UPSTREAM_SERVICE,
            details=cause.details if cause else None,
            hint=hint,
            phase=phase,
        )
        self.target = target


class GenerationFailedError(GraphifyError):
    """Raised when chart generation fails."""

    kind = ErrorKind.GENERATION_FAILED

    def __init__(self, cause: GraphifyError | None = None):
        """Initialize generation error."""
        super().__init__(
            message="Error generating chart",
            code=ErrorCode.E424_UPSTREAM_SERVICE,
            details=cause.details if cause else None,
            hint="Check the selected columns suit the chart type, then try again.",
            phase=PipelinePhase.CHART_GENERATION,
        )
