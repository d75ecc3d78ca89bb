"""Pipeline errors and the factory behind ``Pipeline.throw()``."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any, Optional

DEFAULT_ERROR_MESSAGE = "Pipeline error"


class PipelineError(Exception):
    """Base class for every error raised by the pipeline package."""


class PipelineStateError(PipelineError):
    """The status machine was asked to move from a status it does not know.

    This is an internal-consistency violation and is never converted into
    a ``rejected`` run.
    """


class MiddlewareError(PipelineError):
    """Application error raised from inside a middleware.

    Attributes:
        code: The code passed to the factory, kept verbatim
        message: Human readable description
        status: ``code`` when it is an int in the 4xx/5xx range, else 500
        expose: Whether the message is safe to show to a client (status < 500)
    """

    def __init__(self, code: Any, message: str, **props: Any) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.status = _status_for(code)
        self.expose = self.status < 500
        for key, value in props.items():
            setattr(self, key, value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


def _status_for(code: Any) -> int:
    if isinstance(code, int) and not isinstance(code, bool) and 400 <= code < 600:
        return code
    return 500


def _default_message(code: Any) -> str:
    if isinstance(code, int) and not isinstance(code, bool):
        try:
            return HTTPStatus(code).phrase
        except ValueError:
            pass
    return DEFAULT_ERROR_MESSAGE


def create_error(code: Any, message: Optional[str] = None, **props: Any) -> MiddlewareError:
    """Build a :class:`MiddlewareError` for *code*.

    When *message* is omitted and *code* is a known HTTP status, the
    status's reason phrase is used.  Extra keyword arguments become
    attributes on the error.

    Example::

        >>> err = create_error(404)
        >>> err.message, err.status, err.expose
        ('Not Found', 404, True)
    """
    if message is None:
        message = _default_message(code)
    return MiddlewareError(code, message, **props)
