"""Pydantic schemas for tool argument validation.

Shared by the dispatcher, which validates argument bags before they
reach the tracker, and by the MCP server, whose tool input schemas are
generated from the same models.
"""

from typing import Annotated, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

Percentage = Annotated[int, Field(ge=0, le=100)]
Counter = Annotated[int, Field(ge=0)]

confidence_adapter: TypeAdapter[int] = TypeAdapter(Percentage)


class MetricsPatch(BaseModel):
    """Partial update of a session's metrics counters. Unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid")

    total_files: Optional[Counter] = Field(None, description="Total files touched")
    files_created: Optional[Counter] = Field(None, description="Files created")
    files_modified: Optional[Counter] = Field(None, description="Files modified")
    files_deleted: Optional[Counter] = Field(None, description="Files deleted")
    lines_of_code: Optional[Counter] = Field(None, description="Lines of code written")
    commands_executed: Optional[Counter] = Field(None, description="Commands executed")
    errors_encountered: Optional[Counter] = Field(None, description="Errors encountered")
    time_spent: Optional[Counter] = Field(None, description="Time spent in milliseconds")
    complexity: Optional[Literal["low", "medium", "high"]] = Field(
        None, description="Project complexity estimate"
    )
    efficiency: Optional[Percentage] = Field(None, description="Efficiency score (0-100)")

    def to_updates(self) -> dict[str, object]:
        """Fields that were actually supplied."""
        return self.model_dump(exclude_none=True)
