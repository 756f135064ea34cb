"""Transport adapter for the remote charting service."""

from __future__ import annotations

import asyncio
import json
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any, Protocol, TypeVar

import httpx
from pydantic import ValidationError as PydanticValidationError

from graphify.core.enums import ChartKind, OutputFormat, ServiceOperation
from graphify.core.errors import TransportError
from graphify.core.models import ChartBytes, ChartConfig, RenderablePayload, SourceFile
from graphify.infra.logging import get_logger
from graphify.infra.settings import ServiceSettings

logger = get_logger(__name__)

T = TypeVar("T")

GenerateResponse = RenderablePayload | ChartBytes


class ChartServiceClient(Protocol):
    """Protocol for charting service clients.

    Each call is a single request/response cycle. Every failure, whether
    transport-level or a malformed body, raises ``TransportError`` tagged with
    the attempted operation.
    """

    async def discover_sheets(self, file: SourceFile) -> list[str]:
        """List the sheet names of an uploaded file."""
        ...

    async def discover_columns(self, file: SourceFile, sheet: str) -> list[str]:
        """List the column names of one sheet."""
        ...

    async def generate_chart(self, file: SourceFile, sheet: str, config: ChartConfig) -> GenerateResponse:
        """Render a chart, as a Plotly payload for previews or raw bytes otherwise."""
        ...


def build_generate_form(sheet: str, config: ChartConfig) -> dict[str, str]:
    """Multipart form fields for a generation request (file excluded).

    Args:
        sheet: Selected sheet name
        config: Chart configuration

    Returns:
        Field name to value mapping as expected by ``POST /generate/``
    """
    return {
        "sheet_name": sheet,
        "chart_type": config.chart_kind.value,
        "x_col": config.x_column or "",
        "y_col": config.effective_y_column or "",
        "chart_title": config.title,
        "color": config.color,
        "format": config.output_format.value,
    }


class BaseChartServiceClient(ABC):
    """Base class for charting service clients."""

    def __init__(self, settings: ServiceSettings | None = None) -> None:
        """Initialize the client.

        Args:
            settings: Service settings, defaults to environment variables
        """
        self.settings = settings or ServiceSettings()
        self.logger = get_logger(self.__class__.__name__)

    @abstractmethod
    async def discover_sheets(self, file: SourceFile) -> list[str]:
        """List the sheet names of an uploaded file."""

    @abstractmethod
    async def discover_columns(self, file: SourceFile, sheet: str) -> list[str]:
        """List the column names of one sheet."""

    @abstractmethod
    async def generate_chart(self, file: SourceFile, sheet: str, config: ChartConfig) -> GenerateResponse:
        """Render a chart."""

    async def _retry_with_backoff(
        self,
        operation: ServiceOperation,
        func: Callable[[], Awaitable[T]],
    ) -> T:
        """Execute a request, retrying with exponential backoff when configured.

        With the default ``max_retries`` of 0 the request is attempted once.

        Args:
            operation: Operation being attempted, for logging
            func: Coroutine factory performing one attempt

        Returns:
            Result of the first successful attempt

        Raises:
            TransportError: If every attempt fails
        """
        attempts = self.settings.max_retries + 1
        delay = self.settings.retry_delay

        for attempt in range(attempts):
            try:
                return await func()
            except TransportError as e:
                if attempt == attempts - 1:
                    raise
                self.logger.warning(
                    "Service request failed, retrying",
                    operation=operation.value,
                    attempt=attempt + 1,
                    max_retries=self.settings.max_retries,
                    delay=delay,
                    error=e.message,
                )
                await asyncio.sleep(delay)
                delay *= 2  # Exponential backoff

        raise RuntimeError("Unexpected retry failure")  # Should not reach here


class HttpChartServiceClient(BaseChartServiceClient):
    """httpx-based client for the charting service's multipart API."""

    def __init__(
        self,
        settings: ServiceSettings | None = None,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize HTTP client.

        Args:
            settings: Service settings
            client: Pre-configured client; when omitted one is created from settings
                and closed by ``aclose``
        """
        super().__init__(settings)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self.settings.base_url,
            timeout=self.settings.timeout,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpChartServiceClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def discover_sheets(self, file: SourceFile) -> list[str]:
        """POST the file to ``/upload/`` and return its sheet names."""
        operation = ServiceOperation.DISCOVER_SHEETS
        response = await self._retry_with_backoff(operation, lambda: self._post(operation, file, {}))
        return self._string_list(operation, response, "sheets")

    async def discover_columns(self, file: SourceFile, sheet: str) -> list[str]:
        """POST the file and sheet to ``/columns/`` and return the column names."""
        operation = ServiceOperation.DISCOVER_COLUMNS
        response = await self._retry_with_backoff(
            operation,
            lambda: self._post(operation, file, {"sheet_name": sheet}),
        )
        return self._string_list(operation, response, "columns")

    async def generate_chart(self, file: SourceFile, sheet: str, config: ChartConfig) -> GenerateResponse:
        """POST the full configuration to ``/generate/``.

        Preview responses carry a JSON-encoded string under ``chart`` that is
        parsed a second time into a payload. Binary responses are returned as
        raw bytes with their Content-Type.
        """
        operation = ServiceOperation.GENERATE_CHART
        fields = build_generate_form(sheet, config)
        response = await self._retry_with_backoff(operation, lambda: self._post(operation, file, fields))

        if config.output_format.is_binary:
            return ChartBytes(
                content=response.content,
                media_type=response.headers.get("content-type", "application/octet-stream"),
            )
        return self._parse_payload(operation, response)

    async def _post(self, operation: ServiceOperation, file: SourceFile, fields: dict[str, str]) -> httpx.Response:
        """Send one multipart request and check its status."""
        files = {"file": (file.filename, file.content, file.media_type)}

        self.logger.debug(
            "Sending service request",
            operation=operation.value,
            path=operation.path,
            fields=sorted(fields),
            **file.describe(),
        )

        try:
            response = await self._client.post(operation.path, data=fields, files=files)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise TransportError(operation, f"service responded with HTTP {status}", status_code=status) from e
        except httpx.HTTPError as e:
            raise TransportError(operation, str(e) or e.__class__.__name__) from e

        return response

    @staticmethod
    def _json_body(operation: ServiceOperation, response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError as e:
            raise TransportError(operation, "response body is not valid JSON", response.status_code) from e
        if not isinstance(body, dict):
            raise TransportError(operation, f"expected a JSON object, got {type(body).__name__}", response.status_code)
        return body

    @classmethod
    def _string_list(cls, operation: ServiceOperation, response: httpx.Response, key: str) -> list[str]:
        body = cls._json_body(operation, response)
        values = body.get(key)
        if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
            raise TransportError(operation, f"response field '{key}' is not a list of strings", response.status_code)
        return values

    @classmethod
    def _parse_payload(cls, operation: ServiceOperation, response: httpx.Response) -> RenderablePayload:
        body = cls._json_body(operation, response)
        chart = body.get("chart")
        if isinstance(chart, str):
            try:
                chart = json.loads(chart)
            except ValueError as e:
                raise TransportError(operation, "chart field is not valid JSON", response.status_code) from e
        if not isinstance(chart, dict):
            raise TransportError(operation, "response has no chart description", response.status_code)

        try:
            return RenderablePayload(data=chart.get("data") or [], layout=chart.get("layout") or {})
        except PydanticValidationError as e:
            raise TransportError(operation, f"malformed chart description: {e}", response.status_code) from e


_PLOTLY_TRACE_TYPES = {
    ChartKind.BAR: "bar",
    ChartKind.LINE: "scatter",
    ChartKind.SCATTER: "scatter",
    ChartKind.PIE: "pie",
    ChartKind.HISTOGRAM: "histogram",
    ChartKind.BOX: "box",
    ChartKind.AREA: "scatter",
    ChartKind.POLAR: "scatterpolar",
    ChartKind.TREEMAP: "treemap",
}

_MEDIA_TYPES = {
    OutputFormat.PNG: "image/png",
    OutputFormat.JPEG: "image/jpeg",
    OutputFormat.SVG: "image/svg+xml",
    OutputFormat.PDF: "application/pdf",
}


class MockChartServiceClient(BaseChartServiceClient):
    """In-memory charting service for tests and offline use."""

    DEFAULT_SHEETS = ("Sheet1",)
    DEFAULT_COLUMNS = ("Category", "Sales", "Profit", "Region")
    DEFAULT_IMAGE = b"\x89PNG\r\n\x1a\nmock-chart"

    def __init__(
        self,
        settings: ServiceSettings | None = None,
        *,
        sheets: list[str] | None = None,
        columns: dict[str, list[str]] | None = None,
        payload: RenderablePayload | None = None,
        image_bytes: bytes | None = None,
        fail_operations: set[ServiceOperation] | None = None,
    ) -> None:
        """Initialize mock client.

        Args:
            settings: Service settings
            sheets: Sheet names returned by discovery
            columns: Column names per sheet; unknown sheets get the sample columns
            payload: Fixed preview payload; by default one is derived from the config
            image_bytes: Body returned for binary formats
            fail_operations: Operations that raise ``TransportError``
        """
        super().__init__(settings)
        self.sheets = list(sheets) if sheets is not None else list(self.DEFAULT_SHEETS)
        self.columns = dict(columns or {})
        self.payload = payload
        self.image_bytes = image_bytes if image_bytes is not None else self.DEFAULT_IMAGE
        self.fail_operations = set(fail_operations or ())
        self.calls: list[tuple[ServiceOperation, dict[str, str]]] = []

    @property
    def call_count(self) -> int:
        """Number of requests received."""
        return len(self.calls)

    def calls_for(self, operation: ServiceOperation) -> list[dict[str, str]]:
        """Recorded form fields for one operation."""
        return [fields for op, fields in self.calls if op is operation]

    def _record(self, operation: ServiceOperation, file: SourceFile, fields: dict[str, str]) -> None:
        self.calls.append((operation, {"file": file.filename, **fields}))
        if operation in self.fail_operations:
            raise TransportError(operation, "simulated service failure", status_code=500)

    async def discover_sheets(self, file: SourceFile) -> list[str]:
        """Return the configured sheet names."""
        self._record(ServiceOperation.DISCOVER_SHEETS, file, {})
        return list(self.sheets)

    async def discover_columns(self, file: SourceFile, sheet: str) -> list[str]:
        """Return the configured columns for ``sheet``."""
        self._record(ServiceOperation.DISCOVER_COLUMNS, file, {"sheet_name": sheet})
        return list(self.columns.get(sheet, self.DEFAULT_COLUMNS))

    async def generate_chart(self, file: SourceFile, sheet: str, config: ChartConfig) -> GenerateResponse:
        """Return a payload or image bytes depending on the output format."""
        self._record(ServiceOperation.GENERATE_CHART, file, build_generate_form(sheet, config))

        if config.output_format.is_binary:
            return ChartBytes(content=self.image_bytes, media_type=_MEDIA_TYPES[config.output_format])
        if self.payload is not None:
            return self.payload.model_copy(deep=True)
        return self._derive_payload(config)

    @staticmethod
    def _derive_payload(config: ChartConfig) -> RenderablePayload:
        trace: dict[str, Any] = {
            "type": _PLOTLY_TRACE_TYPES[config.chart_kind],
            "name": config.effective_y_column or config.x_column,
        }
        if config.chart_kind in (ChartKind.PIE, ChartKind.TREEMAP):
            trace["marker"] = {"colors": [config.color]}
        else:
            trace["marker"] = {"color": config.color}
        if config.chart_kind is ChartKind.LINE:
            trace["mode"] = "lines"
        elif config.chart_kind is ChartKind.AREA:
            trace["fill"] = "tozeroy"
        return RenderablePayload(data=[trace], layout={"title": {"text": config.title}})


def get_service_client(settings: ServiceSettings | None = None) -> ChartServiceClient:
    """Factory function to get the appropriate service client.

    Args:
        settings: Service settings

    Returns:
        Service client instance
    """
    settings = settings or ServiceSettings()

    if settings.offline:
        logger.info("Offline mode, using mock charting service")
        return MockChartServiceClient(settings)

    return HttpChartServiceClient(settings)
