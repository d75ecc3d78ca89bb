"""Async middleware pipeline — ordered steps over one shared, mutable context.

Public surface::

    from pipeline import (
        Pipeline,
        PipelineConfig,
        PipelineContext,
        PipelineStatus,
        EventEmitter,
        Middleware,
        create_error,
        PipelineError,
        PipelineStateError,
        MiddlewareError,
    )
"""

from .config import PipelineConfig
from .context import PipelineContext
from .errors import MiddlewareError, PipelineError, PipelineStateError, create_error
from .events import EventEmitter
from .pipeline import Pipeline
from .protocol import ErrorObserver, Middleware, Next, Predicate
from .status import PipelineStatus, StatusMachine

__all__ = [
    "Pipeline",
    "PipelineConfig",
    "PipelineContext",
    "PipelineStatus",
    "StatusMachine",
    "EventEmitter",
    "Middleware",
    "Next",
    "Predicate",
    "ErrorObserver",
    "create_error",
    "PipelineError",
    "PipelineStateError",
    "MiddlewareError",
]
