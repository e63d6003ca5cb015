"""Domain exceptions.

Each exception carries the HTTP status it maps to; the global handler in
``gamemaster.middleware.error_handler`` renders them as ``{"error": ...}``.
"""

from __future__ import annotations

from typing import Any


class GameMasterError(Exception):
    """Base class for all expected, user-facing failures."""

    status_code: int = 400
    default_message: str = "Request failed"

    def __init__(self, message: str | None = None, *, issues: list[dict[str, Any]] | None = None) -> None:
        self.message = message or self.default_message
        self.issues = issues
        super().__init__(self.message)


class ValidationFailed(GameMasterError):
    status_code = 400
    default_message = "Validation failed"


class Unauthenticated(GameMasterError):
    status_code = 401
    default_message = "Not authenticated"


class Forbidden(GameMasterError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(GameMasterError):
    status_code = 404
    default_message = "Not found"


class Conflict(GameMasterError):
    status_code = 409
    default_message = "Conflict"


# --- Lifecycle ---


class InvalidState(GameMasterError):
    default_message = "Only DRAFT competitions can be opened"


class TemplateNotPublished(GameMasterError):
    default_message = "Template is not published"


class CompetitionNotOpen(GameMasterError):
    default_message = "Competition is not open for entries"


# --- Timing gates ---


class WindowClosed(GameMasterError):
    default_message = "Window is closed"


class TooEarly(GameMasterError):
    default_message = "Window is not open yet"


class ActivationWindowClosed(WindowClosed):
    default_message = "Activation window is closed"


class JoinWindowClosed(WindowClosed):
    default_message = "Join window has closed"


class TooEarlyToOpen(TooEarly):
    default_message = "You can't open entries yet"


class DeadlinePassed(WindowClosed):
    default_message = "Pick deadline has passed"


# --- Entries & picks ---


class AlreadyJoined(Conflict):
    default_message = "You have already joined this competition"


class InvalidTeamSelection(GameMasterError):
    default_message = "Invalid team selection"


class RoundClosed(GameMasterError):
    default_message = "Round is closed for picks"
