"""Domain exceptions raised by the store and its rules.

The API layer maps each class to an HTTP status in ``peniel.api.middleware``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from peniel.core.models import Event

LOGIN_FAILED_MESSAGE = "Usuário não encontrado. Verifique o e-mail ou faça seu cadastro."
CONFLICT_MESSAGE = (
    "Já existe um evento cadastrado nesta data e horário! Por favor, escolha outro horário."
)
ACCESS_DENIED_MESSAGE = "Acesso negado. Apenas líderes podem realizar esta ação."


class PenielError(Exception):
    """Base class for every domain error."""


class AuthenticationError(PenielError):
    """Raised when a login attempt does not match any user.

    The message is the same whatever the cause, so it never reveals whether
    an e-mail is registered.
    """

    def __init__(self) -> None:
        super().__init__(LOGIN_FAILED_MESSAGE)


class NotAuthenticatedError(PenielError):
    """Raised when an operation needs an actor and the session has none."""

    def __init__(self, action: str) -> None:
        self.action = action
        super().__init__(f"Login required to {action}")


class AuthorizationError(PenielError):
    """Raised when the actor lacks the role or scope for an operation."""

    def __init__(self, action: str, reason: str = ACCESS_DENIED_MESSAGE) -> None:
        self.action = action
        super().__init__(reason)


class SchedulingConflictError(PenielError):
    """Raised when an event would start in the same minute as another.

    Attributes:
        conflicting: The existing event that occupies the slot, or ``None``
            when it lies in a sector the actor cannot see.
    """

    def __init__(self, conflicting: Event | None = None) -> None:
        self.conflicting = conflicting
        super().__init__(CONFLICT_MESSAGE)


class NotFoundError(PenielError, KeyError):
    """Raised when a user or event id is unknown."""

    def __init__(self, kind: str, item_id: str) -> None:
        self.kind = kind
        self.item_id = item_id
        super().__init__(f"{kind} not found: {item_id}")

    def __str__(self) -> str:
        return self.args[0]


class ValidationError(PenielError, ValueError):
    """Raised for missing required fields and rejected values."""
