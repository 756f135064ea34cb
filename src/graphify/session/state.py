"""Session state for one in-progress chart workflow."""

from pydantic import BaseModel, Field

from graphify.core.models import ChartConfig, ChartResult, SourceFile


class SessionState(BaseModel):
    """Data gathered along the workflow, with forward-only invalidation.

    Each ``replace_*`` method clears every entity derived from the one it
    replaces and bumps ``generation``, so responses to requests issued under
    an older generation can be recognised and dropped. Methods that discard a
    chart result return it, leaving the caller to release any artifact it
    references.
    """

    source_file: SourceFile | None = Field(default=None, description="Uploaded data file")
    sheets: list[str] = Field(default_factory=list, description="Discovered sheet names")
    selected_sheet: str | None = Field(default=None, description="Sheet chosen by the user")
    columns: list[str] = Field(default_factory=list, description="Discovered column names")
    config: ChartConfig = Field(default_factory=ChartConfig, description="Chart configuration")
    result: ChartResult | None = Field(default=None, description="Latest generated chart")
    generation: int = Field(default=0, ge=0, description="Tag of the current submit/select cycle")

    def advance(self) -> int:
        """Start a new generation; outstanding requests become stale."""
        self.generation += 1
        return self.generation

    def is_current(self, tag: int) -> bool:
        """Whether a request issued under ``tag`` may still update the session."""
        return tag == self.generation

    def replace_source(self, file: SourceFile) -> ChartResult | None:
        """Store a new file and clear everything derived from the previous one."""
        released = self.take_result()
        self.source_file = file
        self.sheets = []
        self.selected_sheet = None
        self.columns = []
        self.config.clear_selections()
        self.advance()
        return released

    def discard_source(self) -> None:
        """Drop a file whose sheets could not be discovered."""
        self.source_file = None
        self.sheets = []
        self.selected_sheet = None
        self.columns = []

    def replace_sheet(self, name: str) -> ChartResult | None:
        """Select a sheet and clear its columns, column selections and result."""
        released = self.take_result()
        self.selected_sheet = name
        self.columns = []
        self.config.clear_selections()
        self.advance()
        return released

    def set_result(self, result: ChartResult) -> ChartResult | None:
        """Store a new chart result, returning the one it replaces."""
        previous = self.result
        self.result = result
        return previous

    def take_result(self) -> ChartResult | None:
        """Remove and return the current chart result."""
        previous = self.result
        self.result = None
        return previous

    def clear(self) -> ChartResult | None:
        """Discard every entity, including chart settings."""
        released = self.take_result()
        self.discard_source()
        self.config = ChartConfig()
        self.advance()
        return released
