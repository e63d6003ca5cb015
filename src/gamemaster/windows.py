"""Time-window evaluation for activation, opening and joining.

A window is an optional ``[open_at, close_at]`` interval; a missing bound
means no restriction on that side. Both boundary instants are inside the
window. Expiry is only ever evaluated lazily against the current time, no
state is transitioned in the background.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, NamedTuple

if TYPE_CHECKING:
    from gamemaster.db.models import Competition, GameTemplate


class Window(NamedTuple):
    open_at: datetime | None
    close_at: datetime | None


def utcnow() -> datetime:
    """Current wall-clock time in UTC."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes as UTC; convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_before_open(now: datetime, open_at: datetime | None) -> bool:
    open_at = as_utc(open_at)
    return open_at is not None and as_utc(now) < open_at  # type: ignore[operator]


def is_after_close(now: datetime, close_at: datetime | None) -> bool:
    close_at = as_utc(close_at)
    return close_at is not None and as_utc(now) > close_at  # type: ignore[operator]


def is_within_window(now: datetime, open_at: datetime | None = None, close_at: datetime | None = None) -> bool:
    """Return True when ``now`` lies inside the (inclusive) window."""
    return not is_before_open(now, open_at) and not is_after_close(now, close_at)


# ---------------------------------------------------------------------------
# Resolution policies
# ---------------------------------------------------------------------------


def activation_window(template: GameTemplate) -> Window:
    """Window in which a club may activate a template. No fallbacks."""
    return Window(template.activation_open_at, template.activation_close_at)


def open_entries_window(template: GameTemplate) -> Window:
    """Window in which a club admin may open a competition for entries.

    The close bound falls back to the template start time.
    """
    return Window(template.join_open_at, template.join_close_at or template.start_at)


def join_window(template: GameTemplate | None, competition: Competition) -> Window:
    """Window in which a player may join a competition.

    The close bound falls back to the competition's first-round start, then
    to the template start time. Competitions without a template are
    unrestricted.
    """
    if template is None:
        return Window(None, None)
    close_at = template.join_close_at or competition.start_round_at or template.start_at
    return Window(template.join_open_at, close_at)
