"""Dispatch orchestration: run handlers over a growing message exactly once.

The streaming pass runs after every received chunk against the whole
buffer parsed in prefix mode. The terminal pass runs once the message is
complete: the encounter handler first (it needs world lookups), then every
streaming handler again to pick up anything deferred or still unhandled.
Both passes consult the same dedup registry, so no directive occurrence is
applied twice however often the buffer is re-scanned.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field, replace

from dnd_narrator.core.exceptions import DndNarratorError
from dnd_narrator.core.logging import get_logger
from dnd_narrator.directives.context import SessionContext
from dnd_narrator.directives.handlers import EncounterHandler, streaming_handlers
from dnd_narrator.directives.handlers.base import DirectiveHandler, HandlerOutcome, HandlerResult
from dnd_narrator.directives.parser import DirectiveParser, ParseResult
from dnd_narrator.directives.types import Directive
from dnd_narrator.models.session import Notification


logger = get_logger(__name__)


@dataclass
class PassResult:
    """What one dispatch pass did.

    Attributes:
        parsed: Parse of the buffer the pass ran against.
        notifications: New user-facing notifications, in order.
        applied: Directives applied (or refused) during this pass.
        deferred: Directives left for a later pass.
    """

    parsed: ParseResult
    notifications: list[Notification] = field(default_factory=list)
    applied: list[Directive] = field(default_factory=list)
    deferred: list[Directive] = field(default_factory=list)

    @property
    def clean_text(self) -> str:
        return self.parsed.clean_text


class DispatchOrchestrator:
    """Runs the fixed handler sequence for one session context.

    Example:
        >>> orchestrator = DispatchOrchestrator(context)
        >>> orchestrator.process_stream("You take DAMAGE[player|4|fi")
        >>> orchestrator.process_final("You take DAMAGE[player|4|fire] damage.")
    """

    def __init__(
        self,
        context: SessionContext,
        *,
        handlers: Sequence[DirectiveHandler] | None = None,
        terminal_handlers: Sequence[DirectiveHandler] | None = None,
        parser: DirectiveParser | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            context: Session state and collaborators.
            handlers: Streaming handlers in run order.
            terminal_handlers: Handlers that only run in the terminal pass.
            parser: Directive parser.
        """
        self.context = context
        self.handlers = list(handlers) if handlers is not None else streaming_handlers()
        self.terminal_handlers = (
            list(terminal_handlers) if terminal_handlers is not None else [EncounterHandler()]
        )
        self.parser = parser or DirectiveParser()

    @property
    def max_derived_depth(self) -> int:
        return self.context.settings.narration.max_derived_depth

    def process_stream(self, buffer: str) -> PassResult:
        """Dispatch everything complete in a buffer that may still grow."""
        parsed = self.parser.parse(buffer, partial=True)
        return self._dispatch(parsed, self.handlers, final=False)

    def process_final(self, text: str) -> PassResult:
        """Dispatch the complete message, terminal handlers first."""
        parsed = self.parser.parse(text)
        return self._dispatch(parsed, [*self.terminal_handlers, *self.handlers], final=True)

    def apply_directives(self, directives: Sequence[Directive], *, source: str = "external") -> PassResult:
        """Dispatch directives produced outside a message, such as a generation merge.

        The directives are re-homed under ``source`` so their identities never
        collide with offsets in the message text.
        """
        rehomed = [
            replace(directive, start=ordinal, end=ordinal, lineage=(*directive.lineage, source))
            for ordinal, directive in enumerate(directives)
        ]
        parsed = ParseResult(directives=rehomed)
        return self._dispatch(parsed, [*self.terminal_handlers, *self.handlers], final=True)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _dispatch(
        self,
        parsed: ParseResult,
        handlers: Sequence[DirectiveHandler],
        *,
        final: bool,
    ) -> PassResult:
        result = PassResult(parsed=parsed)
        derived = self._run_handlers(parsed.directives, handlers, result, final=final)

        depth = 0
        while derived and depth < self.max_derived_depth:
            depth += 1
            logger.debug("Dispatching derived directives", count=len(derived), depth=depth)
            derived = self._run_handlers(derived, handlers, result, final=True)
        if derived:
            logger.warning(
                "Derived directive depth exceeded, dropping",
                dropped=[directive.raw for directive in derived],
            )

        if result.notifications:
            self.context.session.messages.extend(result.notifications)
        return result

    def _run_handlers(
        self,
        directives: Sequence[Directive],
        handlers: Sequence[DirectiveHandler],
        result: PassResult,
        *,
        final: bool,
    ) -> list[Directive]:
        """Run each handler over the unhandled directives it owns.

        Returns:
            Derived directives produced during the round, re-homed under
            their parents.
        """
        registry = self.context.registry
        derived: list[Directive] = []

        for handler in handlers:
            for directive in registry.pending(directives):
                if directive.type not in handler.handles:
                    continue
                outcome = self._apply(handler, directive)

                if not outcome.marks_handled and not final:
                    if directive not in result.deferred:
                        result.deferred.append(directive)
                    continue

                registry.mark(directive)
                if directive in result.deferred:
                    result.deferred.remove(directive)
                if outcome.outcome in (HandlerOutcome.APPLIED, HandlerOutcome.REFUSED):
                    result.applied.append(directive)
                result.notifications.extend(outcome.notifications)
                derived.extend(directive.derive(child, ordinal) for ordinal, child in enumerate(outcome.derived))

        return derived

    def _apply(self, handler: DirectiveHandler, directive: Directive) -> HandlerResult:
        """Run one handler; failures are logged and the directive is dropped."""
        try:
            outcome = handler.handle(directive, self.context)
        except DndNarratorError as exc:
            logger.warning(
                "Directive failed",
                handler=handler.name,
                directive_type=directive.type,
                offset=directive.start,
                error=str(exc),
            )
            return HandlerResult.ignored()
        except Exception:
            logger.exception(
                "Handler crashed",
                handler=handler.name,
                directive_type=directive.type,
                offset=directive.start,
            )
            return HandlerResult.ignored()

        logger.debug(
            "Directive handled",
            handler=handler.name,
            directive_type=directive.type,
            offset=directive.start,
            outcome=outcome.outcome,
        )
        return outcome


__all__ = ["PassResult", "DispatchOrchestrator"]
