"""D&D Narrator - directive interpreter for AI-narrated tabletop sessions.

The narration provider writes prose with embedded directives such as
``DAMAGE[player|2d6|fire]``. This package extracts them from a streaming
message, applies each occurrence exactly once to the character and session
state, and returns the cleaned display text plus user-facing notifications.

ARCHITECTURE:
- Python owns TRUTH (character sheet, session state, dice via d20)
- The narrator only proposes changes through directives
- Malformed or unknown directives are left in the text and never applied

Example:
    >>> from dnd_narrator import CharacterState, NarrationTurn, open_session
    >>>
    >>> hero = CharacterState(name="Mira", class_name="Wizard", max_hp=18, current_hp=18)
    >>> context = open_session(hero)
    >>> result = asyncio.run(NarrationTurn(context).run(provider.stream(prompt)))
    >>> print(result.clean_text)

Modules:
    core: Configuration, logging, and base exceptions.
    models: Pydantic V2 character, session and catalog models.
    engine: Dice, amounts, damage mechanics and the turn driver.
    directives: Parser, dedup registry, handlers and dispatch orchestrator.
    services: Rules services (effects, equipment, spells, rests, encounters).
    catalog: Global item, spell and monster catalogs.
    storage: SQLite persistence with debounced saves.
"""

from __future__ import annotations

# Core
from dnd_narrator.core.config import Settings, get_settings
from dnd_narrator.core.exceptions import DndNarratorError
from dnd_narrator.core.logging import configure_from_settings, configure_logging, get_logger

# Models
from dnd_narrator.models import (
    CharacterState,
    ItemDefinition,
    MonsterTemplate,
    Notification,
    SessionState,
    SpellDefinition,
    World,
)

# Engine
from dnd_narrator.engine import DiceRoller, RollType

# Directives
from dnd_narrator.directives import Directive, DirectiveParser, DirectiveType, parse_directives

# Services
from dnd_narrator.services import GenerationQueue

# Orchestration
from dnd_narrator.directives.context import SessionContext, open_session
from dnd_narrator.directives.dispatcher import DispatchOrchestrator
from dnd_narrator.engine.narration import NarrationTurn, TurnResult

# Storage
from dnd_narrator.storage import StateStore


__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Core
    "Settings",
    "get_settings",
    "DndNarratorError",
    "configure_from_settings",
    "configure_logging",
    "get_logger",
    # Models
    "CharacterState",
    "ItemDefinition",
    "MonsterTemplate",
    "Notification",
    "SessionState",
    "SpellDefinition",
    "World",
    # Engine
    "DiceRoller",
    "RollType",
    # Directives
    "Directive",
    "DirectiveParser",
    "DirectiveType",
    "parse_directives",
    # Services
    "GenerationQueue",
    # Orchestration
    "SessionContext",
    "open_session",
    "DispatchOrchestrator",
    "NarrationTurn",
    "TurnResult",
    # Storage
    "StateStore",
]
