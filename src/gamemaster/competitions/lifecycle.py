"""Competition state machine.

State progression: DRAFT -> OPEN. RUNNING and FINISHED exist in the status
enum for round progression but nothing transitions into them yet.
Transitions are validated; there is no way back to DRAFT.
"""

from __future__ import annotations

from datetime import datetime

from gamemaster.db.models import CompetitionStatus, GameTemplate
from gamemaster.errors import InvalidState, JoinWindowClosed, TooEarlyToOpen
from gamemaster.windows import is_after_close, is_before_open, open_entries_window

VALID_TRANSITIONS: dict[CompetitionStatus, list[CompetitionStatus]] = {
    CompetitionStatus.DRAFT: [CompetitionStatus.OPEN],
    CompetitionStatus.OPEN: [],
    CompetitionStatus.RUNNING: [],
    CompetitionStatus.FINISHED: [],
}


def validate_transition(current: str | CompetitionStatus, target: str | CompetitionStatus) -> None:
    """Raise InvalidState unless ``current -> target`` is an allowed transition."""
    current_status = CompetitionStatus(current)
    target_status = CompetitionStatus(target)
    if target_status not in VALID_TRANSITIONS[current_status]:
        if target_status is CompetitionStatus.OPEN:
            raise InvalidState("Only DRAFT competitions can be opened")
        raise InvalidState(f"Invalid transition: {current_status.value} -> {target_status.value}")


def ensure_can_open_entries(template: GameTemplate | None, now: datetime) -> None:
    """
    Check the join window of an attached template before opening entries.

    The close bound is ``join_close_at``, falling back to ``start_at``.
    Competitions without a template may be opened at any time.

    Raises:
        TooEarlyToOpen: before ``join_open_at``.
        JoinWindowClosed: after the effective close bound.
    """
    if template is None:
        return
    window = open_entries_window(template)
    if is_before_open(now, window.open_at):
        raise TooEarlyToOpen()
    if is_after_close(now, window.close_at):
        raise JoinWindowClosed()
