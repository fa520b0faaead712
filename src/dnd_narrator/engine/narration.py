"""Streaming narration turn driver.

A turn consumes the provider's text chunks, runs the streaming dispatch
pass after each one, then the terminal pass once the stream ends. Pending
item generation is resolved after the terminal pass and the session is
saved with an immediate flush.

Example:
    >>> turn = NarrationTurn(context)
    >>> result = asyncio.run(turn.run(provider.stream(prompt)))
    >>> result.clean_text
"""

from __future__ import annotations

from collections.abc import AsyncIterable
from dataclasses import dataclass, field

from dnd_narrator.core.exceptions import StorageError
from dnd_narrator.core.logging import get_logger, session_log_context
from dnd_narrator.directives.context import SessionContext
from dnd_narrator.directives.dispatcher import DispatchOrchestrator
from dnd_narrator.models.session import Notification


logger = get_logger(__name__)


@dataclass
class TurnResult:
    """Result of one narration turn.

    Attributes:
        text: Everything the provider sent.
        clean_text: Display text with directive spans removed.
        notifications: Every notification raised during the turn.
        degraded: The provider failed before the stream finished.
    """

    text: str
    clean_text: str
    notifications: list[Notification] = field(default_factory=list)
    degraded: bool = False


class NarrationTurn:
    """Drives one assistant message through the dispatch passes."""

    def __init__(
        self,
        context: SessionContext,
        orchestrator: DispatchOrchestrator | None = None,
    ) -> None:
        self.context = context
        self.orchestrator = orchestrator or DispatchOrchestrator(context)

    async def run(self, chunks: AsyncIterable[str]) -> TurnResult:
        """Consume a chunk stream and apply its directives exactly once.

        Args:
            chunks: Async iterable of text chunks from the provider.

        Returns:
            TurnResult for the completed (or degraded) message.
        """
        context = self.context
        context.begin_message()
        buffer = ""
        degraded = False
        notifications: list[Notification] = []

        with session_log_context(context.session_id, character_id=context.character.id):
            try:
                async for chunk in chunks:
                    if not chunk:
                        continue
                    buffer += chunk
                    notifications.extend(self.orchestrator.process_stream(buffer).notifications)
            except Exception:
                logger.exception("Narration stream failed, finishing with partial text", received=len(buffer))
                degraded = True

            final = self.orchestrator.process_final(buffer)
            notifications.extend(final.notifications)
            notifications.extend(await self._resolve_generation())

            try:
                context.save(immediate=True)
            except StorageError:
                logger.exception("Saving after narration turn failed")

            logger.info(
                "Narration turn complete",
                length=len(buffer),
                notifications=len(notifications),
                degraded=degraded,
            )

        return TurnResult(
            text=buffer,
            clean_text=final.clean_text,
            notifications=notifications,
            degraded=degraded,
        )

    async def _resolve_generation(self) -> list[Notification]:
        """Merge finished item generations and dispatch what the merges produced."""
        context = self.context
        if context.generation is None or not len(context.generation):
            return []

        merges = await context.generation.process_pending(
            context.character,
            context.session,
            context.world,
            rules=context.settings.rules,
        )
        notifications: list[Notification] = []
        for merge in merges:
            if not merge.directives:
                continue
            applied = self.orchestrator.apply_directives(merge.directives, source=f"merge:{merge.definition.id}")
            notifications.extend(applied.notifications)
        return notifications


__all__ = ["TurnResult", "NarrationTurn"]
