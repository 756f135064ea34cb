"""Pipeline controller sequencing the chart workflow against the charting service."""

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from graphify.core.enums import DiscoveryTarget, PipelineState, ServiceOperation
from graphify.core.errors import (
    DiscoveryFailedError,
    GenerationFailedError,
    GraphifyError,
    InvalidTransitionError,
    PipelineBusyError,
    TransportError,
    ValidationError,
)
from graphify.core.models import ArtifactHandle, ChartBytes, ChartConfig, ChartResult, ErrorDetail, Notice, SourceFile
from graphify.core.sample_data import sample_source_file
from graphify.infra.artifacts import ArtifactStore
from graphify.infra.logging import get_logger
from graphify.infra.service_client import ChartServiceClient
from graphify.orchestration.notifier import LoggingNotifier, Notifier
from graphify.session.state import SessionState

GENERATE_READY_STATES = frozenset({PipelineState.COLUMNS_READY, PipelineState.RESULT_READY})

_COLUMN_FIELDS = ("x_column", "y_column")


class PipelineController:
    """State machine driving Upload -> Sheets -> Columns -> Generate -> Result.

    The controller is the only writer of its ``SessionState``. Every upstream
    change clears derived state before the next request is issued, and each
    request is tagged with the session generation so that a response arriving
    after the user has moved on is dropped.

    A failed transition moves to ``ERROR`` and remembers the state to recover
    to; operations are validated against that recovery state, so the
    pipeline stays usable after any failure.

    While a chart is being generated, further ``generate`` calls are rejected
    with ``PipelineBusyError`` rather than superseding the outstanding one.
    """

    def __init__(
        self,
        client: ChartServiceClient,
        *,
        store: ArtifactStore | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            client: Charting service transport
            store: Artifact store owning downloadable chart bytes
            notifier: Receiver of user-facing notices, defaults to logging
        """
        self.client = client
        self.store = store or ArtifactStore()
        self.notifier = notifier or LoggingNotifier()
        self.session = SessionState()
        self.last_error: GraphifyError | None = None
        self.notices: list[Notice] = []
        self._state = PipelineState.IDLE
        self._recovery_state: PipelineState | None = None
        self.logger = get_logger(self.__class__.__name__)

    @property
    def state(self) -> PipelineState:
        """Current state machine state."""
        return self._state

    @property
    def effective_state(self) -> PipelineState:
        """State that operations are validated against (the recovery state while in ``ERROR``)."""
        if self._state is PipelineState.ERROR and self._recovery_state is not None:
            return self._recovery_state
        return self._state

    @property
    def result(self) -> ChartResult | None:
        """Latest chart result, if any."""
        return self.session.result

    async def submit_file(self, file: SourceFile) -> PipelineState:
        """Start the workflow over with a new file and discover its sheets.

        Valid from any state.

        Args:
            file: The user's data file

        Returns:
            State after the transition settles
        """
        self._release(self.session.replace_source(file))
        tag = self.session.generation
        self._enter(PipelineState.AWAITING_SHEETS, **file.describe())

        try:
            sheets = await self.client.discover_sheets(file)
        except TransportError as e:
            if self._is_stale(tag, ServiceOperation.DISCOVER_SHEETS):
                return self._state
            self.session.discard_source()
            self._fail(DiscoveryFailedError(DiscoveryTarget.SHEETS, cause=e), recover_to=PipelineState.IDLE)
            return self._state

        if self._is_stale(tag, ServiceOperation.DISCOVER_SHEETS):
            return self._state

        self.session.sheets = list(sheets)
        self._enter(PipelineState.SHEETS_READY, sheet_count=len(sheets))
        return self._state

    async def load_sample(self) -> PipelineState:
        """Submit the built-in sample dataset."""
        return await self.submit_file(sample_source_file())

    async def select_sheet(self, name: str) -> bool:
        """Select a sheet and discover its columns.

        Reselecting the current sheet clears and fetches its columns again.

        Args:
            name: Sheet name from the discovered sheet list

        Returns:
            False if the selection was ignored (no sheets yet or unknown name)
        """
        if not self.effective_state.at_least(PipelineState.SHEETS_READY) or name not in self.session.sheets:
            self.logger.warning(
                "Ignoring sheet selection",
                sheet=name,
                state=self._state.value,
                known_sheets=len(self.session.sheets),
            )
            return False

        self._release(self.session.replace_sheet(name))
        tag = self.session.generation
        file = self.session.source_file
        self._enter(PipelineState.AWAITING_COLUMNS, sheet=name)

        try:
            columns = await self.client.discover_columns(file, name)
        except TransportError as e:
            if not self._is_stale(tag, ServiceOperation.DISCOVER_COLUMNS):
                self._fail(
                    DiscoveryFailedError(DiscoveryTarget.COLUMNS, cause=e),
                    recover_to=PipelineState.SHEETS_READY,
                )
            return True

        if self._is_stale(tag, ServiceOperation.DISCOVER_COLUMNS):
            return True

        self.session.columns = list(columns)
        self._enter(PipelineState.COLUMNS_READY, sheet=name, column_count=len(columns))
        return True

    def configure_chart(self, **fields: Any) -> bool:  # noqa: ANN401
        """Merge chart settings into the configuration without issuing a request.

        Args:
            **fields: Any of ``chart_kind``, ``x_column``, ``y_column``, ``title``,
                ``color`` and ``output_format``

        Returns:
            False if columns are not available yet and nothing was changed

        Raises:
            ValidationError: If a field is unknown, a column is not in the sheet,
                or a value is invalid. The configuration is left untouched.
        """
        if not self.effective_state.at_least(PipelineState.COLUMNS_READY):
            self.logger.warning("Ignoring chart configuration before columns are known", state=self._state.value)
            return False

        unknown = sorted(set(fields) - set(ChartConfig.model_fields))
        if unknown:
            raise ValidationError(
                message="Unknown chart settings",
                details=[ErrorDetail(field=name, reason="not a chart setting") for name in unknown],
            )

        for name in _COLUMN_FIELDS:
            value = fields.get(name)
            if isinstance(value, str) and value.strip() and value not in self.session.columns:
                raise ValidationError(
                    message=f"Column '{value}' is not in sheet '{self.session.selected_sheet}'",
                    details=[ErrorDetail(field=name, reason=f"unknown column '{value}'")],
                    hint=f"Available columns: {', '.join(self.session.columns)}",
                )

        try:
            config = ChartConfig.model_validate({**self.session.config.model_dump(), **fields})
        except PydanticValidationError as e:
            raise ValidationError(
                message="Invalid chart settings",
                details=[
                    ErrorDetail(field=".".join(str(p) for p in err["loc"]), reason=err["msg"]) for err in e.errors()
                ],
            ) from e

        self.session.config = config
        self.logger.debug("Chart configured", fields=sorted(fields))
        return True

    async def generate(self) -> ChartResult | None:
        """Request a chart for the current file, sheet and configuration.

        Returns:
            The new chart result, or None if the request failed or was superseded

        Raises:
            PipelineBusyError: If a chart request is already outstanding
            ValidationError: If required selections are missing; no request is sent
            InvalidTransitionError: If columns have not been discovered yet
        """
        if self._state is PipelineState.GENERATING:
            raise PipelineBusyError

        missing = self._missing_preconditions()
        if missing:
            error = ValidationError(missing_fields=missing)
            self._notify(error.to_notice())
            raise error

        previous = self.effective_state
        if previous not in GENERATE_READY_STATES:
            raise InvalidTransitionError("generate a chart", self._state)

        file = self.session.source_file
        sheet = self.session.selected_sheet
        config = self.session.config.model_copy()
        tag = self.session.generation
        self._enter(
            PipelineState.GENERATING,
            chart_kind=config.chart_kind.value,
            output_format=config.output_format.value,
        )

        try:
            response = await self.client.generate_chart(file, sheet, config)
            if config.output_format.is_binary != isinstance(response, ChartBytes):
                raise TransportError(  # noqa: TRY301
                    ServiceOperation.GENERATE_CHART,
                    f"expected {'bytes' if config.output_format.is_binary else 'a chart payload'} "
                    f"for format '{config.output_format.value}'",
                )
        except TransportError as e:
            if not self._is_stale(tag, ServiceOperation.GENERATE_CHART):
                self._fail(GenerationFailedError(cause=e), recover_to=previous)
            return None
        except BaseException:
            # Cancelled or unexpected failure; never leave the pipeline in GENERATING
            if self.session.is_current(tag) and self._state is PipelineState.GENERATING:
                self.logger.exception("Chart generation interrupted", recover_to=previous.value)
                self._enter(previous)
            raise

        if self._is_stale(tag, ServiceOperation.GENERATE_CHART):
            return None

        if isinstance(response, ChartBytes):
            # Previous payload or handle goes before the new handle is issued
            self._release(self.session.take_result())
            result: ChartResult = self.store.create(
                response.content,
                extension=config.output_format.extension,
                media_type=response.media_type,
            )
        else:
            result = response

        self._release(self.session.set_result(result))
        self._enter(PipelineState.RESULT_READY, result_kind=result.kind)
        return result

    def reset(self) -> None:
        """Discard the whole session, revoke every artifact and return to ``IDLE``."""
        self.session.clear()
        self.store.revoke_all()
        self._enter(PipelineState.IDLE)

    def _missing_preconditions(self) -> list[str]:
        missing = []
        if self.session.source_file is None:
            missing.append("file")
        if not self.session.selected_sheet:
            missing.append("sheet")
        missing.extend(self.session.config.missing_fields())
        return missing

    def _is_stale(self, tag: int, operation: ServiceOperation) -> bool:
        if self.session.is_current(tag):
            return False
        self.logger.debug(
            "Discarding stale response",
            operation=operation.value,
            request_generation=tag,
            current_generation=self.session.generation,
        )
        return True

    def _release(self, result: ChartResult | None) -> None:
        if isinstance(result, ArtifactHandle):
            self.store.revoke(result)

    def _enter(self, state: PipelineState, **fields: Any) -> None:  # noqa: ANN401
        previous = self._state
        self._state = state
        self._recovery_state = None
        self.last_error = None
        self.logger.info(
            "Pipeline transition",
            from_state=previous.value,
            to_state=state.value,
            generation=self.session.generation,
            **fields,
        )

    def _fail(self, error: GraphifyError, *, recover_to: PipelineState) -> None:
        self.last_error = error
        previous = self._state
        self._state = PipelineState.ERROR
        self._recovery_state = recover_to
        self.logger.warning(
            "Pipeline transition failed",
            from_state=previous.value,
            error_kind=error.kind.value if error.kind else None,
            error_code=error.code.value,
            error_message=error.message,
            recover_to=recover_to.value,
            generation=self.session.generation,
        )
        self._notify(error.to_notice())

    def _notify(self, notice: Notice) -> None:
        self.notices.append(notice)
        self.notifier.notify(notice)
