"""The closed set of directive types and the parsed directive value."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import NamedTuple


class DirectiveType(StrEnum):
    """Every identifier the interpreter understands.

    Identifiers outside this enumeration are left in the text untouched.
    """

    # Inventory
    INVENTORY_ADD = "INVENTORY_ADD"
    INVENTORY_REMOVE = "INVENTORY_REMOVE"
    INVENTORY_EQUIP = "INVENTORY_EQUIP"
    INVENTORY_UNEQUIP = "INVENTORY_UNEQUIP"
    GOLD_CHANGE = "GOLD_CHANGE"
    USE_ITEM = "USE_ITEM"
    STATUS_ADD = "STATUS_ADD"
    STATUS_REMOVE = "STATUS_REMOVE"

    # Combat & mechanics
    DAMAGE = "DAMAGE"
    HEAL = "HEAL"
    TEMP_HP = "TEMP_HP"
    APPLY_RESISTANCE = "APPLY_RESISTANCE"
    REMOVE_RESISTANCE = "REMOVE_RESISTANCE"
    APPLY_IMMUNITY = "APPLY_IMMUNITY"
    REMOVE_IMMUNITY = "REMOVE_IMMUNITY"
    APPLY_VULNERABILITY = "APPLY_VULNERABILITY"
    REMOVE_VULNERABILITY = "REMOVE_VULNERABILITY"

    # Spellcasting
    CAST_SPELL = "CAST_SPELL"
    LEARN_SPELL = "LEARN_SPELL"
    CONCENTRATION_START = "CONCENTRATION_START"
    CONCENTRATION_END = "CONCENTRATION_END"

    # Narrative progression
    LOCATION = "LOCATION"
    RELATIONSHIP = "RELATIONSHIP"
    ACTION = "ACTION"
    QUEST_ADD = "QUEST_ADD"
    XP_GAIN = "XP_GAIN"
    LEVEL_UP = "LEVEL_UP"

    # Renewable resources
    SHORT_REST = "SHORT_REST"
    LONG_REST = "LONG_REST"
    HIT_DIE_ROLL = "HIT_DIE_ROLL"
    USE_RESOURCE = "USE_RESOURCE"

    # Dice
    ROLL = "ROLL"

    # Encounter lifecycle (terminal pass only)
    COMBAT_START = "COMBAT_START"
    COMBAT_CONTINUE = "COMBAT_CONTINUE"
    COMBAT_END = "COMBAT_END"
    ENEMY_SPAWN = "ENEMY_SPAWN"

    @classmethod
    def lookup(cls, identifier: str) -> DirectiveType | None:
        try:
            return cls(identifier)
        except ValueError:
            return None


DEFENSE_TOGGLES: frozenset[DirectiveType] = frozenset(
    {
        DirectiveType.APPLY_RESISTANCE,
        DirectiveType.REMOVE_RESISTANCE,
        DirectiveType.APPLY_IMMUNITY,
        DirectiveType.REMOVE_IMMUNITY,
        DirectiveType.APPLY_VULNERABILITY,
        DirectiveType.REMOVE_VULNERABILITY,
    }
)

# Directives whose effect can be undone when their source goes away
INVERSE_DIRECTIVES: dict[DirectiveType, DirectiveType] = {
    DirectiveType.APPLY_RESISTANCE: DirectiveType.REMOVE_RESISTANCE,
    DirectiveType.APPLY_IMMUNITY: DirectiveType.REMOVE_IMMUNITY,
    DirectiveType.APPLY_VULNERABILITY: DirectiveType.REMOVE_VULNERABILITY,
    DirectiveType.STATUS_ADD: DirectiveType.STATUS_REMOVE,
}


class DedupIdentity(NamedTuple):
    """Identity of one directive occurrence.

    Text directives have an empty lineage, so the identity is exactly
    (type, start offset). Derived directives append their parent's key and
    their ordinal so they never collide with offsets in the text.
    """

    type: DirectiveType
    offset: int
    lineage: tuple[str, ...] = ()

    @property
    def key(self) -> str:
        base = f"{self.type}_{self.offset}"
        return "/".join((*self.lineage, base)) if self.lineage else base


@dataclass(frozen=True)
class Directive:
    """One parsed directive occurrence.

    Attributes:
        type: Resolved directive type.
        payload: Sanitized argument payload.
        raw: The exact source span, identifier and brackets included.
        start: Offset of the identifier in the source text.
        end: Offset one past the closing bracket.
        lineage: Parent identity keys for derived directives.
    """

    type: DirectiveType
    payload: str
    raw: str
    start: int
    end: int
    lineage: tuple[str, ...] = ()

    @property
    def identity(self) -> DedupIdentity:
        return DedupIdentity(self.type, self.start, self.lineage)

    @property
    def is_derived(self) -> bool:
        return bool(self.lineage)

    def fields(self) -> list[str]:
        """Pipe-delimited positional fields, stripped."""
        if not self.payload:
            return []
        return [part.strip() for part in self.payload.split("|")]

    def field(self, index: int, default: str | None = None) -> str | None:
        """One positional field, or ``default`` when absent or blank."""
        parts = self.fields()
        if index < len(parts) and parts[index]:
            return parts[index]
        return default

    def derive(self, child: Directive, ordinal: int) -> Directive:
        """Re-home a directive produced while applying this one."""
        return Directive(
            type=child.type,
            payload=child.payload,
            raw=child.raw,
            start=ordinal,
            end=ordinal,
            lineage=(*self.lineage, self.identity.key),
        )


__all__ = [
    "DirectiveType",
    "DEFENSE_TOGGLES",
    "INVERSE_DIRECTIVES",
    "DedupIdentity",
    "Directive",
]
