"""Shared enumerations for the narration interpreter models."""

from __future__ import annotations

from enum import StrEnum


class Ability(StrEnum):
    """The six D&D ability scores."""

    STR = "strength"
    DEX = "dexterity"
    CON = "constitution"
    INT = "intelligence"
    WIS = "wisdom"
    CHA = "charisma"

    @classmethod
    def parse(cls, value: str) -> Ability | None:
        """Resolve a full name or three-letter abbreviation.

        Args:
            value: Text such as 'dex', 'DEX' or 'dexterity'.

        Returns:
            The matching Ability, or None if nothing matches.
        """
        key = value.strip().lower()
        for ability in cls:
            if key in (ability.value, ability.value[:3]):
                return ability
        return None


class DamageType(StrEnum):
    """D&D 5E damage types."""

    SLASHING = "slashing"
    PIERCING = "piercing"
    BLUDGEONING = "bludgeoning"
    FIRE = "fire"
    COLD = "cold"
    LIGHTNING = "lightning"
    THUNDER = "thunder"
    ACID = "acid"
    POISON = "poison"
    NECROTIC = "necrotic"
    RADIANT = "radiant"
    FORCE = "force"
    PSYCHIC = "psychic"


class DefenseCategory(StrEnum):
    """Per-damage-type defensive traits."""

    RESISTANCE = "resistances"
    IMMUNITY = "immunities"
    VULNERABILITY = "vulnerabilities"


class ItemCategory(StrEnum):
    """Catalog item categories."""

    WEAPON = "weapon"
    ARMOR = "armor"
    CONSUMABLE = "consumable"
    MAGIC_ITEM = "magic_item"
    GEAR = "gear"


class ArmorType(StrEnum):
    """Armor weight classes; the weight class caps the dexterity bonus."""

    LIGHT = "light"
    MEDIUM = "medium"
    HEAVY = "heavy"
    SHIELD = "shield"


class DurationUnit(StrEnum):
    """Units a tracked effect counts down in."""

    ROUNDS = "rounds"
    MINUTES = "minutes"
    HOURS = "hours"


class RecoveryTrigger(StrEnum):
    """Which rest refills a renewable class resource."""

    SHORT = "short"
    LONG = "long"
    EITHER = "either"


class NotificationKind(StrEnum):
    """Categories of user-facing notifications."""

    INFO = "info"
    WARNING = "warning"
    REFUSAL = "refusal"
    LEVEL_UP = "level_up"
    CONCENTRATION = "concentration"
    COMBAT = "combat"


class RollKind(StrEnum):
    """Kinds of rolls requested through ROLL directives."""

    SKILL = "skill"
    SAVE = "save"
    ATTACK = "attack"
    DAMAGE = "damage"
    DEATH = "death"
    GENERIC = "generic"


__all__ = [
    "Ability",
    "DamageType",
    "DefenseCategory",
    "ItemCategory",
    "ArmorType",
    "DurationUnit",
    "RecoveryTrigger",
    "NotificationKind",
    "RollKind",
]
