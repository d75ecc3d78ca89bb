"""Pipeline configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class PipelineConfig:
    """Configuration for a :class:`~pipeline.Pipeline`.

    Attributes:
        name: Label used in log messages and ``repr`` (default: "pipeline")
        trace_steps: Log every middleware entry and exit at DEBUG (default: False)
    """

    name: str = "pipeline"
    trace_steps: bool = False

    @classmethod
    def from_env(
        cls, prefix: str = "PIPELINE_", env_file: Optional[Path] = None
    ) -> "PipelineConfig":
        """Build a config from ``{prefix}NAME`` and ``{prefix}TRACE_STEPS``.

        Loads *env_file* (or ``./.env`` when it exists) first; variables
        already present in the environment win.
        """
        env_path = env_file if env_file is not None else Path.cwd() / ".env"
        if env_path.exists():
            load_dotenv(env_path)

        defaults = cls()
        trace = os.getenv(f"{prefix}TRACE_STEPS")
        return cls(
            name=os.getenv(f"{prefix}NAME", defaults.name),
            trace_steps=(
                trace.strip().lower() in _TRUTHY
                if trace is not None
                else defaults.trace_steps
            ),
        )
