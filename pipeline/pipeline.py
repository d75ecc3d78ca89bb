"""Pipeline — ordered async middleware chain over one shared context."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Coroutine, Dict, Iterable, List, NoReturn, Optional

from .config import PipelineConfig
from .context import PipelineContext
from .errors import PipelineStateError, create_error
from .events import EventEmitter
from .protocol import ErrorObserver, Middleware, Predicate
from .status import PipelineStatus, StatusMachine

logger = logging.getLogger(__name__)

RESOLVED_EVENT = "resolved"
REJECTED_EVENT = "rejected"


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class Pipeline(EventEmitter):
    """Runs registered middlewares in order, sharing one :class:`PipelineContext`.

    Each middleware is called as ``middleware(ctx, next, pipeline)``.
    Awaiting ``next()`` runs the rest of the chain; returning without
    calling it ends the run there; raising aborts it.  An error that
    reaches the first middleware turns the run ``rejected`` and is stored
    on ``ctx.error``.  When the last middleware returns normally the run
    is ``resolved``.

    Settlement is announced through the ``"resolved"`` (payload: the
    output mapping) and ``"rejected"`` (payload: the error) events, which
    :meth:`output` builds on.

    Example::

        pl = Pipeline()
        pl.initial({"items": [1, 2, 3]}).use(add_total).error(log_error)
        await pl.execute()
        result = await pl.output()

    The middleware list is read by index while a run is in flight, so a
    middleware that registers new steps affects later indices of the same
    run.  Runs on one instance must not overlap.
    """

    def __init__(self, config: Optional[PipelineConfig] = None) -> None:
        super().__init__()
        self.config = config or PipelineConfig()
        self._ctx = PipelineContext()
        self._status = StatusMachine()
        self._middlewares: List[Middleware] = []

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def context(self) -> PipelineContext:
        return self._ctx

    @property
    def status(self) -> PipelineStatus:
        return self._status.current

    def __len__(self) -> int:
        return len(self._middlewares)

    def __bool__(self) -> bool:
        return True

    def __repr__(self) -> str:
        return (
            f"Pipeline(name={self.config.name!r}, status={self.status.value!r}, "
            f"middlewares={len(self._middlewares)})"
        )

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def initial(self, data: Dict[str, Any]) -> "Pipeline":
        """Shallow-merge *data* into ``ctx.input``."""
        self._ctx.merge_input(data)
        return self

    def use(self, middleware: Middleware) -> "Pipeline":
        """Append *middleware* to the end of the chain."""
        self._middlewares.append(middleware)
        logger.debug(
            "%s: registered middleware %d (%s)",
            self.config.name,
            len(self._middlewares) - 1,
            getattr(middleware, "__name__", type(middleware).__name__),
        )
        return self

    def uses(self, middlewares: Iterable[Middleware]) -> "Pipeline":
        """Append several middlewares, keeping their order."""
        for middleware in middlewares:
            self.use(middleware)
        return self

    def conditional_use(
        self, predicate: Predicate, middleware: Middleware
    ) -> "Pipeline":
        """Register *middleware* so it only runs when *predicate* holds.

        The predicate is evaluated at call time with ``(ctx, pipeline)``.
        When it is false the step is skipped and the chain continues as if
        it had never been registered.
        """

        async def conditional(ctx: PipelineContext, next, pl: "Pipeline") -> None:
            if await _maybe_await(predicate(ctx, pl)):
                await _maybe_await(middleware(ctx, next, pl))
            else:
                await next()

        conditional.__name__ = (
            f"conditional({getattr(middleware, '__name__', 'middleware')})"
        )
        return self.use(conditional)

    def error(self, observer: ErrorObserver) -> "Pipeline":
        """Prepend a middleware that reports chain failures to *observer*.

        The observer sees every error raised further down the chain and
        the error is re-raised afterwards, so the run still ends
        ``rejected``.  Observers always sit in front of regular
        middlewares; the most recently registered one runs first.
        """

        async def observe(_ctx: PipelineContext, next, _pl: "Pipeline") -> None:
            try:
                await next()
            except Exception as exc:
                await _maybe_await(observer(exc))
                raise

        observe.__name__ = f"error({getattr(observer, '__name__', 'observer')})"
        self._middlewares.insert(0, observe)
        logger.debug("%s: registered error observer at index 0", self.config.name)
        return self

    def throw(self, code: Any, message: Optional[str] = None, **props: Any) -> NoReturn:
        """Raise a :class:`~pipeline.errors.MiddlewareError` built from *code*."""
        raise create_error(code, message, **props)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def execute(self, index: int = 0) -> "Pipeline":
        """Run the chain starting at *index* (0 starts a fresh run).

        Errors raised below index 0 propagate to the caller of that step's
        continuation; at index 0 they settle the run ``rejected`` instead
        of escaping.
        """
        if index >= len(self._middlewares):
            return self
        if index == 0:
            self._reset()

        middleware = self._middlewares[index]

        continuations: List[Coroutine[Any, Any, "Pipeline"]] = []

        def next_() -> Awaitable["Pipeline"]:
            continuation = self.execute(index + 1)
            continuations.append(continuation)
            return continuation

        try:
            self._status.move(PipelineStatus.PENDING)
            if self.config.trace_steps:
                logger.debug("%s: enter step %d", self.config.name, index)
            await _maybe_await(middleware(self._ctx, next_, self))
            # next() called but its result neither awaited nor returned
            for continuation in continuations:
                if inspect.getcoroutinestate(continuation) == inspect.CORO_CREATED:
                    await continuation
            if self.config.trace_steps:
                logger.debug("%s: leave step %d", self.config.name, index)
            if index == len(self._middlewares) - 1:
                self._resolve()
        except PipelineStateError:
            raise
        except Exception as exc:
            for continuation in continuations:
                if inspect.getcoroutinestate(continuation) == inspect.CORO_CREATED:
                    continuation.close()
            if index > 0:
                raise
            self._reject(exc)
        return self

    async def run(self, data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Seed *data*, execute a full run and return its output.

        Raises:
            Exception: The error the run was rejected with.
        """
        if data:
            self.initial(data)
        await self.execute()
        return await self.output()

    def output(self) -> "asyncio.Future[Dict[str, Any]]":
        """Return a future for ``ctx.output`` of the current or next run.

        Already settled runs complete the future immediately (the output
        when resolved, the stored error when rejected).  Otherwise the
        future settles on whichever of ``"resolved"``/``"rejected"`` fires
        first.  Must be called from a running event loop.  A rejected future
        that is never awaited does not trigger asyncio's "exception was never
        retrieved" log; the rejection is logged when the run settles.
        """
        settled: asyncio.Future[Dict[str, Any]] = (
            asyncio.get_running_loop().create_future()
        )
        status = self._status.current
        if status.settled:
            if status is PipelineStatus.RESOLVED:
                settled.set_result(self._ctx.output)
            else:
                settled.set_exception(self._ctx.error)
                settled.exception()
            return settled

        def on_resolved(output: Dict[str, Any]) -> None:
            self.off(REJECTED_EVENT, on_rejected)
            if not settled.done():
                settled.set_result(output)

        def on_rejected(err: BaseException) -> None:
            self.off(RESOLVED_EVENT, on_resolved)
            if not settled.done():
                settled.set_exception(err)

        def detach(fut: asyncio.Future) -> None:
            self.off(RESOLVED_EVENT, on_resolved)
            self.off(REJECTED_EVENT, on_rejected)
            # mark retrieved
            if not fut.cancelled():
                fut.exception()

        self.once(RESOLVED_EVENT, on_resolved)
        self.once(REJECTED_EVENT, on_rejected)
        settled.add_done_callback(detach)
        return settled

    # ------------------------------------------------------------------
    # Status transitions
    # ------------------------------------------------------------------

    def _reset(self) -> None:
        if self._status.move(PipelineStatus.INITIAL):
            self._ctx.error = None

    def _resolve(self) -> None:
        if self._status.move(PipelineStatus.RESOLVED):
            logger.debug("%s: run resolved", self.config.name)
            self.emit(RESOLVED_EVENT, self._ctx.output)

    def _reject(self, exc: Exception) -> None:
        if not self._status.move(PipelineStatus.REJECTED):
            logger.warning(
                "%s: error after run already %s was discarded: %r",
                self.config.name,
                self._status.current.value,
                exc,
            )
            return
        self._ctx.error = exc
        logger.warning("%s: run rejected: %r", self.config.name, exc)
        self.emit(REJECTED_EVENT, exc)
