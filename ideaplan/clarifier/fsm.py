"""Clarification session state machine using transitions library.

A session starts in "clarifying" and moves to "complete" exactly once,
either when its confidence reaches the completion threshold or when the
caller explicitly completes it. "complete" is terminal.

Usage:
    from ideaplan.clarifier.fsm import ClarificationFSM

    fsm = ClarificationFSM(session)
    if fsm.can_finish():
        fsm.finish()  # session.status is now COMPLETE
"""

import logging
from datetime import datetime
from typing import Callable

from transitions import Machine

from .models import ClarificationSession, SessionStatus

logger = logging.getLogger(__name__)


STATES = [s.value for s in SessionStatus]

TRANSITIONS = [
    {"trigger": "finish", "source": "clarifying", "dest": "complete"},
]


class ClarificationFSM:
    """State machine bound to one ClarificationSession.

    Loads the initial state from the session and writes every state change
    back to it. Persisting the session is the caller's job.
    """

    def __init__(
        self,
        session: ClarificationSession,
        on_transition: Callable[[str, str, str], None] | None = None,
    ):
        """
        Args:
            session: Session whose status this machine drives
            on_transition: Optional callback(from_state, to_state, trigger)
        """
        self.session = session
        self.on_transition = on_transition

        self.machine = Machine(
            model=self,
            states=STATES,
            transitions=TRANSITIONS,
            initial=session.status.value,
            auto_transitions=False,
            send_event=True,
            after_state_change="on_state_change",
        )

    def can_finish(self) -> bool:
        return self.state == SessionStatus.CLARIFYING.value

    def on_state_change(self, event) -> None:
        """Called after any state transition."""
        from_state = event.transition.source
        to_state = event.transition.dest
        trigger = event.event.name

        self.session.status = SessionStatus(to_state)
        self.session.updated_at = datetime.now()
        logger.info(f"[FSM] {self.session.idea_id}: {from_state} -> {to_state} (trigger: {trigger})")

        if self.on_transition:
            self.on_transition(from_state, to_state, trigger)
