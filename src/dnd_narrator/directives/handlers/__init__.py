"""Directive handlers, in the order the orchestrator runs them."""

from __future__ import annotations

from dnd_narrator.directives.handlers.base import (
    DirectiveHandler,
    HandlerOutcome,
    HandlerResult,
)
from dnd_narrator.directives.handlers.combat import CombatHandler
from dnd_narrator.directives.handlers.encounter import EncounterHandler
from dnd_narrator.directives.handlers.inventory import InventoryHandler
from dnd_narrator.directives.handlers.narrative import NarrativeHandler
from dnd_narrator.directives.handlers.rest import RestHandler
from dnd_narrator.directives.handlers.rolls import RollHandler
from dnd_narrator.directives.handlers.spells import SpellHandler


def streaming_handlers() -> list[DirectiveHandler]:
    """Handlers for the streaming pass; rolls run last."""
    return [
        InventoryHandler(),
        CombatHandler(),
        SpellHandler(),
        NarrativeHandler(),
        RestHandler(),
        RollHandler(),
    ]


__all__ = [
    "DirectiveHandler",
    "HandlerOutcome",
    "HandlerResult",
    "InventoryHandler",
    "CombatHandler",
    "SpellHandler",
    "NarrativeHandler",
    "RestHandler",
    "RollHandler",
    "EncounterHandler",
    "streaming_handlers",
]
