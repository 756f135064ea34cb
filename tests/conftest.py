"""Shared fixtures for Graphify tests."""

import asyncio

import pytest

from graphify.core.enums import ServiceOperation
from graphify.core.models import ChartConfig, Notice, SourceFile
from graphify.infra.service_client import GenerateResponse, MockChartServiceClient


class ScriptedServiceClient(MockChartServiceClient):
    """Mock service whose responses can be held back until a gate opens.

    Gates are keyed by operation and by filename (sheets), sheet name
    (columns, generate).
    """

    def __init__(self, *, sheets_by_file: dict[str, list[str]] | None = None, **kwargs: object) -> None:
        super().__init__(**kwargs)
        self.sheets_by_file = dict(sheets_by_file or {})
        self._gates: dict[tuple[ServiceOperation, str], asyncio.Event] = {}

    def hold(self, operation: ServiceOperation, key: str) -> asyncio.Event:
        """Block matching requests until the returned event is set."""
        gate = asyncio.Event()
        self._gates[(operation, key)] = gate
        return gate

    async def _wait(self, operation: ServiceOperation, key: str) -> None:
        gate = self._gates.get((operation, key))
        if gate is not None:
            await gate.wait()

    async def discover_sheets(self, file: SourceFile) -> list[str]:
        await self._wait(ServiceOperation.DISCOVER_SHEETS, file.filename)
        sheets = await super().discover_sheets(file)
        return list(self.sheets_by_file.get(file.filename, sheets))

    async def discover_columns(self, file: SourceFile, sheet: str) -> list[str]:
        await self._wait(ServiceOperation.DISCOVER_COLUMNS, sheet)
        return await super().discover_columns(file, sheet)

    async def generate_chart(self, file: SourceFile, sheet: str, config: ChartConfig) -> GenerateResponse:
        await self._wait(ServiceOperation.GENERATE_CHART, sheet)
        return await super().generate_chart(file, sheet, config)


class RecordingNotifier:
    """Notifier keeping every notice it receives."""

    def __init__(self) -> None:
        self.notices: list[Notice] = []

    def notify(self, notice: Notice) -> None:
        self.notices.append(notice)


def make_file(name: str = "sales.xlsx", content: bytes = b"PK\x03\x04fake-xlsx") -> SourceFile:
    """Build a source file for tests."""
    return SourceFile(filename=name, media_type="application/octet-stream", content=content)


@pytest.fixture
def service() -> ScriptedServiceClient:
    """Mock service with two sheets and sales columns."""
    return ScriptedServiceClient(
        sheets=["Sheet1", "Sheet2"],
        columns={"Sheet1": ["Category", "Sales"], "Sheet2": ["Month", "Revenue", "Cost"]},
    )


@pytest.fixture
def notifier() -> RecordingNotifier:
    """Notifier recording notices."""
    return RecordingNotifier()
