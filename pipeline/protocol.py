"""Callable shapes accepted by the pipeline engine."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Awaitable, Protocol, Union, runtime_checkable

from .context import PipelineContext

if TYPE_CHECKING:
    from .pipeline import Pipeline


class Next(Protocol):
    """Continuation handed to a middleware; awaiting it runs the rest of the chain."""

    def __call__(self) -> Awaitable[None]: ...


@runtime_checkable
class Middleware(Protocol):
    """Structural protocol for a single middleware.

    A middleware receives the shared context, the continuation and the
    owning pipeline.  It may be a coroutine function or a plain function;
    an awaitable return value is awaited before the step counts as done.
    A continuation that was called but never awaited is run once the
    middleware returns.

    Example::

        async def add_total(ctx, next, pl):
            ctx.temp["total"] = sum(ctx.input["items"])
            await next()
            ctx.output["total"] = ctx.temp["total"]

    """

    def __call__(
        self, ctx: PipelineContext, next: Next, pl: "Pipeline"
    ) -> Union[None, Awaitable[None]]: ...


class Predicate(Protocol):
    """Gate for ``Pipeline.conditional_use()``."""

    def __call__(
        self, ctx: PipelineContext, pl: "Pipeline"
    ) -> Union[bool, Awaitable[bool]]: ...


class ErrorObserver(Protocol):
    """Callback registered through ``Pipeline.error()``."""

    def __call__(self, err: BaseException) -> Union[Any, Awaitable[Any]]: ...
