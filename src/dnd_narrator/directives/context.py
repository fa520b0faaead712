"""Per-session state and collaborators shared by every handler."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from dnd_narrator.core.config import Settings, get_settings
from dnd_narrator.core.logging import configure_from_settings, get_logger
from dnd_narrator.directives.registry import DedupRegistry
from dnd_narrator.engine.dice import DiceRoller
from dnd_narrator.models.catalog import World
from dnd_narrator.models.character import CharacterState
from dnd_narrator.models.session import RollRecord, SessionState
from dnd_narrator.services.generation import GenerationQueue


logger = get_logger(__name__)


class StateStore(Protocol):
    """Durable store collaborator."""

    def save(self, context: SessionContext, *, immediate: bool = False) -> None: ...


@dataclass
class SessionContext:
    """Everything one session's dispatch passes read and mutate.

    The dedup registry and the generation queue are scoped to this context,
    so nothing leaks into a later session.

    Attributes:
        character: The player's persistent sheet.
        session: The active session state.
        world: World catalog for generated items and campaign monsters.
        settings: Application settings.
        roller: Source of every random number.
        registry: Directive identities handled in the current message.
        generation: Pending item generation requests.
        on_roll: Optional callback receiving every roll record.
        store: Optional durable store.
        level_up_notified: Whether the current message already announced a level up.
    """

    character: CharacterState
    session: SessionState
    world: World = field(default_factory=World)
    settings: Settings = field(default_factory=get_settings)
    roller: DiceRoller = field(default_factory=DiceRoller)
    registry: DedupRegistry = field(default_factory=DedupRegistry)
    generation: GenerationQueue | None = None
    on_roll: Callable[[RollRecord], None] | None = None
    store: StateStore | None = None
    level_up_notified: bool = False

    def __post_init__(self) -> None:
        if self.generation is None:
            self.generation = GenerationQueue(settings=self.settings.generation)
        if self.session.world_id is None:
            self.session.world_id = self.world.id

    @property
    def session_id(self) -> str:
        return self.session.id

    def begin_message(self) -> None:
        """Start a new message; offsets restart so the registry is cleared."""
        self.registry.reset()
        self.level_up_notified = False

    def abandon(self) -> None:
        """Drop the in-flight message and any pending generation."""
        self.registry.reset()
        self.level_up_notified = False
        cancelled = self.generation.cancel() if self.generation else 0
        logger.info("Session context abandoned", session_id=self.session.id, cancelled_requests=cancelled)

    def record_roll(self, record: RollRecord) -> None:
        """Append a roll to the history and hand it to the callback."""
        self.session.roll_history.append(record)
        if self.on_roll is not None:
            self.on_roll(record)

    def save(self, *, immediate: bool = False) -> None:
        if self.store is not None:
            self.store.save(self, immediate=immediate)


def open_session(
    character: CharacterState,
    session: SessionState | None = None,
    world: World | None = None,
    *,
    settings: Settings | None = None,
    store: StateStore | None = None,
) -> SessionContext:
    """Start a host session: configure logging and build its context.

    Args:
        character: The player's sheet.
        session: Session to resume; a fresh one is created if omitted.
        world: Campaign world; an empty one is created if omitted.
        settings: Application settings; loaded from the environment if omitted.
        store: Optional durable store the context saves through.

    Returns:
        The new session context.
    """
    settings = settings or get_settings()
    configure_from_settings(settings)
    context = SessionContext(
        character=character,
        session=session or SessionState(character_id=character.id),
        world=world or World(),
        settings=settings,
        store=store,
    )
    logger.info("Session opened", session_id=context.session_id, character_id=character.id)
    return context


__all__ = ["StateStore", "SessionContext", "open_session"]
