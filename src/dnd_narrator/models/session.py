"""Session state: everything owned by one active play session.

Session state is mutated only by directive handlers during a dispatch pass
and persisted by the durable store between turns.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import uuid4

from pydantic import Field, computed_field

from dnd_narrator.models.character import StateModel
from dnd_narrator.models.enums import DurationUnit, NotificationKind, RollKind


DEAD_CONDITION = "Dead"


class Notification(StateModel):
    """A user-facing system message produced by a handler."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    kind: NotificationKind = NotificationKind.INFO
    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=datetime.now)

    @classmethod
    def info(cls, content: str, **metadata: Any) -> Notification:
        return cls(kind=NotificationKind.INFO, content=content, metadata=metadata)

    @classmethod
    def refusal(cls, content: str, **metadata: Any) -> Notification:
        return cls(kind=NotificationKind.REFUSAL, content=content, metadata=metadata)


# =============================================================================
# Inventory & Conditions
# =============================================================================


class InventorySlot(StateModel):
    """A quantity-bearing inventory entry pointing at a catalog id."""

    item_id: str
    name: str
    quantity: int = Field(default=1, ge=0)
    equipped: bool = False


class StatusCondition(StateModel):
    """A named status condition (Blinded, Poisoned, ...)."""

    name: str
    note: str = ""
    added_at: datetime = Field(default_factory=datetime.now)


# =============================================================================
# Combat Encounter
# =============================================================================


class Combatant(StateModel):
    """A spawned enemy in the active encounter."""

    id: str = Field(default_factory=lambda: uuid4().hex[:8])
    template_id: str
    name: str
    current_hp: int = Field(ge=0)
    max_hp: int = Field(ge=1)
    armor_class: int = Field(default=10, ge=0)
    temp_hp: int = Field(default=0, ge=0)
    dexterity: int = Field(default=10, ge=1, le=30)
    resistances: list[str] = Field(default_factory=list)
    immunities: list[str] = Field(default_factory=list)
    vulnerabilities: list[str] = Field(default_factory=list)
    conditions: list[str] = Field(default_factory=list)

    @computed_field(description="Whether the combatant has dropped to zero")
    @property
    def is_defeated(self) -> bool:
        return self.current_hp <= 0


class InitiativeEntry(StateModel):
    """One slot in the initiative order."""

    combatant_id: str
    name: str
    initiative: int
    is_player: bool = False


class CombatEncounter(StateModel):
    """The active encounter; absent from the session between fights."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    description: str = ""
    round: int = Field(default=1, ge=1)
    turn_index: int = Field(default=0, ge=0)
    initiative: list[InitiativeEntry] = Field(default_factory=list)
    enemies: list[Combatant] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=datetime.now)

    def find_enemy(self, identifier: str) -> Combatant | None:
        """Match by exact id, exact name, then case-insensitive substring."""
        key = identifier.strip()
        for enemy in self.enemies:
            if enemy.id == key or enemy.name == key:
                return enemy
        lowered = key.lower()
        for enemy in self.enemies:
            if lowered and lowered in enemy.name.lower():
                return enemy
        return None


# =============================================================================
# Spell Effects
# =============================================================================


class SpellEffectInstance(StateModel):
    """A duration-tracked effect whose modifiers are keyed by ``id``."""

    id: str
    source_id: str
    source_name: str
    remaining: int = Field(ge=0)
    unit: DurationUnit = DurationUnit.ROUNDS
    concentration: bool = False
    modifiers: dict[str, int] = Field(default_factory=dict)
    conditional: list[str] = Field(default_factory=list)
    granted_directives: list[str] = Field(
        default_factory=list,
        description="Raw reversible directives the effect granted; inverted on expiry",
    )


class ConcentrationState(StateModel):
    """The single spell the character is concentrating on."""

    spell_name: str
    effect_id: str | None = None
    started_at: datetime = Field(default_factory=datetime.now)


# =============================================================================
# Rolls
# =============================================================================


class RollRecord(StateModel):
    """The outcome of a ROLL directive."""

    kind: RollKind
    label: str
    expression: str
    total: int
    dice: list[int] = Field(default_factory=list)
    target: int | None = Field(default=None, description="DC or AC to beat")
    success: bool | None = None
    critical: bool = False
    fumble: bool = False
    mode: str = "normal"
    damage: int | None = None
    rolled_at: datetime = Field(default_factory=datetime.now)


# =============================================================================
# Session State
# =============================================================================


class SessionState(StateModel):
    """One active play session."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    character_id: str
    world_id: str | None = None

    inventory: list[InventorySlot] = Field(default_factory=list)
    currency_gp: float = Field(default=0.0, ge=0)
    conditions: list[StatusCondition] = Field(default_factory=list)
    temp_hp: int = Field(default=0, ge=0)

    combat: CombatEncounter | None = None
    spell_effects: list[SpellEffectInstance] = Field(default_factory=list)
    concentration: ConcentrationState | None = None

    current_location: str | None = None
    visited_locations: list[str] = Field(default_factory=list)
    relationships: dict[str, int] = Field(default_factory=dict)
    suggested_actions: list[str] = Field(default_factory=list)
    quest_log: list[str] = Field(default_factory=list)

    roll_history: list[RollRecord] = Field(default_factory=list)
    messages: list[Notification] = Field(default_factory=list)

    @property
    def in_combat(self) -> bool:
        return self.combat is not None

    def find_slot(self, item_id: str) -> InventorySlot | None:
        return next((slot for slot in self.inventory if slot.item_id == item_id), None)

    def find_slot_by_name(self, name: str) -> InventorySlot | None:
        key = name.strip().lower()
        return next((slot for slot in self.inventory if slot.name.lower() == key), None)

    def has_condition(self, name: str) -> bool:
        key = name.strip().lower()
        return any(condition.name.lower() == key for condition in self.conditions)

    def recent_locations(self, limit: int = 10) -> list[str]:
        return self.visited_locations[-limit:]

    def notable_relationships(self, limit: int = 50) -> dict[str, int]:
        """Non-zero relationship scores, newest ``limit`` entries."""
        notable = [(name, score) for name, score in self.relationships.items() if score != 0]
        return dict(notable[-limit:])


__all__ = [
    "DEAD_CONDITION",
    "Notification",
    "InventorySlot",
    "StatusCondition",
    "Combatant",
    "InitiativeEntry",
    "CombatEncounter",
    "SpellEffectInstance",
    "ConcentrationState",
    "RollRecord",
    "SessionState",
]
