"""Build session state machine.

Enforces the session lifecycle::

    IDLE -> CLEANING -> PREPARING -> PROCESSING(entry)* -> FINALIZING -> DONE
                                                     any -> FAILED

and records every transition on the session's ``BuildReport``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from bento.models.build import VALID_TRANSITIONS, BuildReport, BuildState, StateTransition

logger = logging.getLogger(__name__)


class InvalidTransitionError(RuntimeError):
    """Raised when a requested state transition is not valid."""


class BuildStateMachine:
    """Drives one session's ``BuildReport`` through valid states only.

    Parameters
    ----------
    report:
        The report to transition. Its current ``state`` is the starting point.
    """

    def __init__(self, report: BuildReport) -> None:
        self._report = report

    @property
    def state(self) -> BuildState:
        return self._report.state

    @property
    def is_terminal(self) -> bool:
        return not VALID_TRANSITIONS.get(self.state)

    def can_transition(self, target: BuildState) -> bool:
        return target in VALID_TRANSITIONS.get(self.state, set())

    def transition(self, target: BuildState, detail: str = "") -> StateTransition:
        """Move to *target*, recording the transition on the report."""
        current = self._report.state
        allowed = VALID_TRANSITIONS.get(current, set())
        if target not in allowed:
            raise InvalidTransitionError(
                f"Cannot transition build {self._report.session_id} from "
                f"{current.value} to {target.value}. "
                f"Allowed: {sorted(s.value for s in allowed)}"
            )

        record = StateTransition(from_state=current, to_state=target, detail=detail)
        self._report.transitions.append(record)
        self._report.state = target
        logger.debug(
            "Build %s: %s -> %s %s",
            self._report.session_id, current.value, target.value, detail,
        )

        if target in (BuildState.DONE, BuildState.FAILED):
            self._report.finished_at = datetime.now(timezone.utc)
        return record

    def fail(self, reason: str) -> None:
        """Transition to FAILED unless the session already ended."""
        self._report.error = reason
        if self.can_transition(BuildState.FAILED):
            self.transition(BuildState.FAILED, reason)
