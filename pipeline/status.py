"""Run status and the transition rules that gate it."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, FrozenSet

from .errors import PipelineStateError

logger = logging.getLogger(__name__)


class PipelineStatus(Enum):
    """Lifecycle of a single run.

    Attributes:
        INITIAL: No run started yet, or reset ahead of a fresh run
        PENDING: A run is in progress
        RESOLVED: The run finished with every step continuing
        REJECTED: An error escaped the chain
    """

    INITIAL = "initial"
    PENDING = "pending"
    RESOLVED = "resolved"
    REJECTED = "rejected"

    @property
    def settled(self) -> bool:
        return self in (PipelineStatus.RESOLVED, PipelineStatus.REJECTED)


# Legal targets per source status; anything else is ignored.
_TRANSITIONS: Dict[PipelineStatus, FrozenSet[PipelineStatus]] = {
    PipelineStatus.INITIAL: frozenset({PipelineStatus.PENDING}),
    PipelineStatus.PENDING: frozenset(
        {PipelineStatus.RESOLVED, PipelineStatus.REJECTED}
    ),
    PipelineStatus.RESOLVED: frozenset({PipelineStatus.INITIAL}),
    PipelineStatus.REJECTED: frozenset({PipelineStatus.INITIAL}),
}


class StatusMachine:
    """Holds the current :class:`PipelineStatus` and applies transitions.

    ``move()`` returns whether the status actually changed.  Requests that
    are not in the transition table are no-ops (e.g. ``pending -> pending``
    on every step after the first).  A current status that is not in the
    table at all means the owner corrupted its state, and raises
    :class:`~pipeline.errors.PipelineStateError`.
    """

    def __init__(self, status: PipelineStatus = PipelineStatus.INITIAL) -> None:
        self._status = status

    @property
    def current(self) -> PipelineStatus:
        return self._status

    def can_move(self, target: PipelineStatus) -> bool:
        allowed = _TRANSITIONS.get(self._status)
        if allowed is None:
            raise PipelineStateError(
                f"Unsupported pipeline status: {self._status!r}"
            )
        return target in allowed

    def move(self, target: PipelineStatus) -> bool:
        if not self.can_move(target):
            return False
        logger.debug("Status %s -> %s", self._status.value, target.value)
        self._status = target
        return True
