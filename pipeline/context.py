"""Mutable run context — the single record every middleware reads and writes."""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class PipelineContext(BaseModel):
    """Shared state for one :class:`~pipeline.Pipeline` instance.

    The same object is handed to every middleware of a run and survives
    across runs, so whatever one step writes is visible to every later
    step (and to the next run, unless overwritten).

    Attributes:
        input: Caller-seeded data, extended via ``Pipeline.initial()``.
        output: The authoritative result populated by middlewares.
        temp: Scratch space for passing data between steps.
        error: Set when the run settles ``rejected``, ``None`` otherwise.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    input: Dict[str, Any] = Field(
        default_factory=dict, description="Caller-seeded input data"
    )
    output: Dict[str, Any] = Field(
        default_factory=dict, description="Result data populated by middlewares"
    )
    temp: Dict[str, Any] = Field(
        default_factory=dict, description="Scratch data shared between steps"
    )
    error: Optional[BaseException] = Field(
        default=None, description="Error recorded on rejection"
    )

    def merge_input(self, data: Dict[str, Any]) -> None:
        """Shallow-merge *data* into :attr:`input` in place."""
        self.input.update(data)
