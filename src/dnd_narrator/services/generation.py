"""Pending item generation requests and their idempotent merge.

An unresolved ``INVENTORY_ADD`` registers a placeholder definition in the
world catalog and enqueues a request keyed by the placeholder id. The
dispatch pass carries on with the placeholder. Between turns the queue is
drained: each request is sent to the optional generator collaborator (with
retries) or resolved by rule-based inference, and the result is merged back
into the world, the inventory and, for equipped items, the derived stats.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from dnd_narrator.core.config import GenerationSettings, RulesSettings
from dnd_narrator.core.exceptions import GenerationError
from dnd_narrator.core.logging import get_logger
from dnd_narrator.directives.types import Directive
from dnd_narrator.models.catalog import ItemDefinition, World, slugify
from dnd_narrator.models.character import CharacterState
from dnd_narrator.models.session import SessionState
from dnd_narrator.services.effects import remove_modifiers, undo_grants
from dnd_narrator.services.equipment import apply_item_effects, refresh_armor_class
from dnd_narrator.services.inference import infer_item_definition


logger = get_logger(__name__)

PLACEHOLDER_DESCRIPTION = "Identifying..."


class ItemGenerator(Protocol):
    """External collaborator that designs an item from its name."""

    async def generate_item(self, name: str, context: str) -> ItemDefinition: ...


@dataclass
class PendingRequest:
    """One outstanding generation request."""

    placeholder_id: str
    name: str
    context: str = ""
    requested_at: datetime = field(default_factory=datetime.now)


@dataclass
class MergeResult:
    """Outcome of merging a definition over its placeholder."""

    definition: ItemDefinition
    replaced: bool
    slots_updated: int = 0
    reapplied: bool = False
    directives: list[Directive] = field(default_factory=list)


def make_placeholder(name: str, item_id: str | None = None) -> ItemDefinition:
    """A gear placeholder standing in for an item still being generated."""
    return ItemDefinition(
        id=item_id or slugify(name),
        name=name.strip(),
        description=PLACEHOLDER_DESCRIPTION,
        needs_generation=True,
    )


class GenerationQueue:
    """Placeholder-keyed queue of item generation requests.

    Attributes:
        pending: Outstanding requests keyed by placeholder id.
    """

    def __init__(
        self,
        generator: ItemGenerator | None = None,
        settings: GenerationSettings | None = None,
    ) -> None:
        """Initialize the queue.

        Args:
            generator: Optional async generator collaborator.
            settings: Retry and enable settings.
        """
        self.generator = generator
        self.settings = settings or GenerationSettings()
        self.pending: dict[str, PendingRequest] = {}

    def __len__(self) -> int:
        return len(self.pending)

    def __contains__(self, placeholder_id: object) -> bool:
        return placeholder_id in self.pending

    def request_item(self, name: str, world: World, *, context: str = "") -> ItemDefinition:
        """Register a placeholder for ``name`` and enqueue its generation.

        Requesting a name whose placeholder already exists reuses it.

        Returns:
            The placeholder definition now in the world catalog.
        """
        placeholder_id = slugify(name)
        existing = world.find_item(placeholder_id)
        if existing is not None and not existing.needs_generation:
            return existing

        placeholder = existing or make_placeholder(name, placeholder_id)
        if existing is None:
            world.upsert_item(placeholder)
        if placeholder_id not in self.pending:
            self.pending[placeholder_id] = PendingRequest(
                placeholder_id=placeholder_id,
                name=placeholder.name,
                context=context,
            )
            logger.info("Item generation requested", placeholder_id=placeholder_id, name=placeholder.name)
        return placeholder

    def cancel(self) -> int:
        """Drop every pending request; placeholders stay in the world.

        Returns:
            Number of requests cancelled.
        """
        count = len(self.pending)
        self.pending.clear()
        if count:
            logger.info("Generation requests cancelled", count=count)
        return count

    async def _call_generator(self, request: PendingRequest) -> ItemDefinition:
        if self.generator is None:
            raise GenerationError(
                f"No generator configured for {request.name}",
                item_name=request.name,
                placeholder_id=request.placeholder_id,
            )
        try:
            return await self.generator.generate_item(request.name, request.context)
        except (GenerationError, ConnectionError, TimeoutError):
            raise
        except Exception as exc:
            raise GenerationError(
                f"Generator failed for {request.name}: {exc}",
                item_name=request.name,
                placeholder_id=request.placeholder_id,
            ) from exc

    async def _generate(self, request: PendingRequest) -> ItemDefinition:
        """Generate one definition, retrying with exponential backoff.

        Raises:
            GenerationError: Every attempt failed.
        """
        if self.generator is None or not self.settings.enabled:
            return infer_item_definition(request.name, item_id=request.placeholder_id)

        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type((GenerationError, ConnectionError, TimeoutError)),
                stop=stop_after_attempt(self.settings.max_attempts),
                wait=wait_exponential(
                    multiplier=1,
                    min=self.settings.backoff_min_seconds,
                    max=self.settings.backoff_max_seconds,
                ),
                reraise=True,
            ):
                with attempt:
                    return await self._call_generator(request)
        except (ConnectionError, TimeoutError) as exc:
            raise GenerationError(
                f"Generator unreachable for {request.name}: {exc}",
                item_name=request.name,
                placeholder_id=request.placeholder_id,
            ) from exc
        raise GenerationError(
            f"Generator returned nothing for {request.name}",
            item_name=request.name,
            placeholder_id=request.placeholder_id,
        )

    async def process_pending(
        self,
        character: CharacterState,
        session: SessionState,
        world: World,
        *,
        rules: RulesSettings | None = None,
    ) -> list[MergeResult]:
        """Resolve every pending request and merge the results.

        A request whose generator fails is dropped and its placeholder kept.

        Returns:
            One MergeResult per request that produced a definition.
        """
        results: list[MergeResult] = []
        for placeholder_id, request in list(self.pending.items()):
            try:
                definition = await self._generate(request)
            except GenerationError as exc:
                logger.warning(
                    "Item generation failed, keeping placeholder",
                    placeholder_id=placeholder_id,
                    error=str(exc),
                )
                self.pending.pop(placeholder_id, None)
                continue

            # Cancelled while awaiting
            if self.pending.pop(placeholder_id, None) is None:
                continue
            results.append(self.merge(character, session, world, placeholder_id, definition, rules=rules))
        return results

    def merge(
        self,
        character: CharacterState,
        session: SessionState,
        world: World,
        placeholder_id: str,
        definition: ItemDefinition,
        *,
        rules: RulesSettings | None = None,
    ) -> MergeResult:
        """Replace a placeholder with a finished definition.

        Merging the same definition twice leaves state as after the first
        merge. Equipped items have their effects removed and re-applied and
        Armor Class re-derived, whatever the placeholder path already did.
        Grants the placeholder made that the definition no longer carries
        are undone.

        Returns:
            MergeResult with any directives the re-applied effects produced.
        """
        merged = definition.model_copy(update={"id": placeholder_id, "needs_generation": False})
        replaced = world.upsert_item(merged) is not None
        self.pending.pop(placeholder_id, None)

        slots_updated = 0
        equipped = False
        for slot in session.inventory:
            if slot.item_id != placeholder_id:
                continue
            if slot.name != merged.name:
                slot.name = merged.name
                slots_updated += 1
            equipped = equipped or slot.equipped

        directives: list[Directive] = []
        if equipped:
            previous = list(character.granted_effects.get(merged.id, []))
            remove_modifiers(character, merged.id)
            directives = apply_item_effects(character, merged, session)
            current = character.granted_effects.get(merged.id, [])
            directives = undo_grants(character, [key for key in previous if key not in current]) + directives
            refresh_armor_class(character, session, world, rules)

        logger.info(
            "Generated item merged",
            placeholder_id=placeholder_id,
            name=merged.name,
            reapplied=equipped,
        )
        return MergeResult(
            definition=merged,
            replaced=replaced,
            slots_updated=slots_updated,
            reapplied=equipped,
            directives=directives,
        )


__all__ = [
    "PLACEHOLDER_DESCRIPTION",
    "ItemGenerator",
    "PendingRequest",
    "MergeResult",
    "make_placeholder",
    "GenerationQueue",
]
