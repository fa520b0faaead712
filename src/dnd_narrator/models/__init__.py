"""Pydantic V2 models for character, session and catalog state.

Submodules:
    enums: Shared enumerations
    character: Persistent character sheet
    session: Per-session state, encounters, notifications
    catalog: Item, spell and monster definitions plus worlds
"""

from __future__ import annotations

from dnd_narrator.models.catalog import (
    ItemDefinition,
    MonsterTemplate,
    SpellDefinition,
    World,
    slugify,
)
from dnd_narrator.models.character import (
    AbilityScores,
    CharacterState,
    ClassResource,
    ExperienceEntry,
    ExperienceTrack,
    HitDice,
    KnownSpell,
    ModifierSet,
    SpellSlotPool,
)
from dnd_narrator.models.enums import (
    Ability,
    ArmorType,
    DamageType,
    DefenseCategory,
    DurationUnit,
    ItemCategory,
    NotificationKind,
    RecoveryTrigger,
    RollKind,
)
from dnd_narrator.models.session import (
    DEAD_CONDITION,
    Combatant,
    CombatEncounter,
    ConcentrationState,
    InitiativeEntry,
    InventorySlot,
    Notification,
    RollRecord,
    SessionState,
    SpellEffectInstance,
    StatusCondition,
)


__all__ = [
    # Catalog
    "ItemDefinition",
    "MonsterTemplate",
    "SpellDefinition",
    "World",
    "slugify",
    # Character
    "AbilityScores",
    "CharacterState",
    "ClassResource",
    "ExperienceEntry",
    "ExperienceTrack",
    "HitDice",
    "KnownSpell",
    "ModifierSet",
    "SpellSlotPool",
    # Enums
    "Ability",
    "ArmorType",
    "DamageType",
    "DefenseCategory",
    "DurationUnit",
    "ItemCategory",
    "NotificationKind",
    "RecoveryTrigger",
    "RollKind",
    # Session
    "DEAD_CONDITION",
    "Combatant",
    "CombatEncounter",
    "ConcentrationState",
    "InitiativeEntry",
    "InventorySlot",
    "Notification",
    "RollRecord",
    "SessionState",
    "SpellEffectInstance",
    "StatusCondition",
]
