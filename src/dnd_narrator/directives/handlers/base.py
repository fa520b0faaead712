"""Base class for directive handlers.

A handler owns a fixed set of directive types. The orchestrator hands it one
unhandled directive at a time; the handler mutates state and reports what
happened through a ``HandlerResult``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import StrEnum
from typing import ClassVar

from dnd_narrator.core.exceptions import DirectiveError
from dnd_narrator.core.logging import get_logger
from dnd_narrator.directives.context import SessionContext
from dnd_narrator.directives.types import Directive, DirectiveType
from dnd_narrator.models.session import Notification


logger = get_logger(__name__)


class HandlerOutcome(StrEnum):
    """What a handler did with a directive.

    Every outcome except DEFERRED marks the directive as handled.
    """

    APPLIED = "applied"
    REFUSED = "refused"
    IGNORED = "ignored"
    DEFERRED = "deferred"


@dataclass
class HandlerResult:
    """Outcome, user-facing notifications and follow-up directives."""

    outcome: HandlerOutcome
    notifications: list[Notification] = field(default_factory=list)
    derived: list[Directive] = field(default_factory=list)

    @property
    def marks_handled(self) -> bool:
        return self.outcome != HandlerOutcome.DEFERRED

    @classmethod
    def applied(
        cls,
        *notifications: Notification,
        derived: Iterable[Directive] = (),
    ) -> HandlerResult:
        return cls(HandlerOutcome.APPLIED, list(notifications), list(derived))

    @classmethod
    def refused(cls, message: str, **metadata: object) -> HandlerResult:
        return cls(HandlerOutcome.REFUSED, [Notification.refusal(message, **metadata)])

    @classmethod
    def ignored(cls) -> HandlerResult:
        return cls(HandlerOutcome.IGNORED)

    @classmethod
    def deferred(cls) -> HandlerResult:
        return cls(HandlerOutcome.DEFERRED)


HandlerMethod = Callable[[Directive, SessionContext], HandlerResult]


class DirectiveHandler:
    """Routes owned directive types to handler methods.

    Subclasses implement ``routes`` returning a mapping of directive type to
    bound method.
    """

    name: ClassVar[str] = "handler"

    def __init__(self) -> None:
        self._routes: dict[DirectiveType, HandlerMethod] = self.routes()

    def routes(self) -> dict[DirectiveType, HandlerMethod]:
        raise NotImplementedError

    @property
    def handles(self) -> frozenset[DirectiveType]:
        return frozenset(self._routes)

    def handle(self, directive: Directive, context: SessionContext) -> HandlerResult:
        """Apply one directive.

        Args:
            directive: An unhandled directive of an owned type.
            context: Session state and collaborators.

        Returns:
            HandlerResult describing the outcome.

        Raises:
            DirectiveError: The directive type is not routed by this handler.
        """
        method = self._routes.get(directive.type)
        if method is None:
            raise DirectiveError(
                f"{self.name} does not handle {directive.type}",
                directive_type=directive.type,
                offset=directive.start,
            )
        return method(directive, context)


__all__ = [
    "HandlerOutcome",
    "HandlerResult",
    "HandlerMethod",
    "DirectiveHandler",
]
