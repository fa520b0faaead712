"""Catalog definitions: items, spells, monster templates and worlds.

Definitions are immutable once defined. The only sanctioned replacement is
the generation merge, which swaps a placeholder for the generated entry in
a world catalog.
"""

from __future__ import annotations

import re
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from dnd_narrator.models.enums import ArmorType, DurationUnit, ItemCategory


def slugify(name: str, separator: str = "_") -> str:
    """Build a catalog id from a display name ('Potion of Healing' -> 'potion_of_healing')."""
    slug = re.sub(r"[^a-z0-9]+", separator, name.strip().lower())
    return slug.strip(separator)


class CatalogModel(BaseModel):
    """Base class for catalog entries."""

    model_config = ConfigDict(frozen=True, extra="ignore", use_enum_values=True)


class ItemDefinition(CatalogModel):
    """A weapon, armor, consumable, magic item or piece of gear.

    Attributes:
        effects: Free-text effect strings resolved by the effects service.
        duration: For consumables, how long passive modifiers last once used.
        needs_generation: True for placeholders awaiting the generator.
    """

    id: str
    name: str
    category: ItemCategory = ItemCategory.GEAR
    armor_type: ArmorType | None = None
    base_ac: int | None = Field(default=None, ge=0)
    ac_bonus: int | None = None
    damage: str | None = Field(default=None, description="Damage dice, e.g. '1d8'")
    damage_type: str | None = None
    properties: list[str] = Field(default_factory=list)
    consumable: bool = False
    effects: list[str] = Field(default_factory=list)
    duration: int = Field(default=0, ge=0)
    duration_unit: DurationUnit = DurationUnit.ROUNDS
    weight: float = 0.0
    value: float = 0.0
    rarity: str = "common"
    description: str = ""
    needs_generation: bool = False

    @property
    def is_armor(self) -> bool:
        return self.armor_type is not None and self.armor_type != ArmorType.SHIELD

    @property
    def is_shield(self) -> bool:
        return self.armor_type == ArmorType.SHIELD

    @property
    def is_weapon(self) -> bool:
        return self.category == ItemCategory.WEAPON or self.damage is not None

    def matches(self, identifier: str) -> bool:
        """Match by id, slug of the identifier, or case-insensitive name."""
        key = identifier.strip().lower()
        return key in (self.id.lower(), self.name.lower()) or slugify(identifier) == self.id


class SpellDefinition(CatalogModel):
    """A castable spell with optional timed effects."""

    id: str
    name: str
    level: int = Field(default=0, ge=0, le=9)
    school: str = "evocation"
    concentration: bool = False
    effects: list[str] = Field(default_factory=list)
    duration: int = Field(default=0, ge=0)
    duration_unit: DurationUnit = DurationUnit.ROUNDS
    generated: bool = False

    def matches(self, identifier: str) -> bool:
        key = identifier.strip().lower()
        return key in (self.id.lower(), self.name.lower()) or slugify(identifier, "-") == self.id


class MonsterTemplate(CatalogModel):
    """Stat block used to spawn encounter combatants."""

    id: str
    name: str
    armor_class: int = Field(default=10, ge=0)
    hp: int = Field(default=10, ge=1)
    hit_dice: str | None = None
    challenge_rating: str = "0"
    dexterity: int = Field(default=10, ge=1, le=30)
    resistances: list[str] = Field(default_factory=list)
    immunities: list[str] = Field(default_factory=list)
    vulnerabilities: list[str] = Field(default_factory=list)
    needs_generation: bool = False

    def matches(self, identifier: str) -> bool:
        key = identifier.strip().lower()
        return key in (self.id.lower(), self.name.lower()) or slugify(identifier) == self.id


class World(BaseModel):
    """A campaign world with its own item, spell and monster catalogs.

    Unlike catalog entries the world is mutable: placeholders are
    registered here and later replaced by generated definitions.
    """

    model_config = ConfigDict(validate_assignment=True, extra="ignore", use_enum_values=True)

    id: str = Field(default_factory=lambda: uuid4().hex)
    name: str = "Untitled World"
    description: str = ""
    items: list[ItemDefinition] = Field(default_factory=list)
    spells: list[SpellDefinition] = Field(default_factory=list)
    monsters: list[MonsterTemplate] = Field(default_factory=list)

    def find_item(self, identifier: str) -> ItemDefinition | None:
        return next((item for item in self.items if item.matches(identifier)), None)

    def find_spell(self, identifier: str) -> SpellDefinition | None:
        return next((spell for spell in self.spells if spell.matches(identifier)), None)

    def find_monster(self, identifier: str) -> MonsterTemplate | None:
        return next((monster for monster in self.monsters if monster.matches(identifier)), None)

    def upsert_item(self, definition: ItemDefinition) -> ItemDefinition | None:
        """Insert or replace an item by id.

        Returns:
            The definition that was replaced, if any.
        """
        for index, existing in enumerate(self.items):
            if existing.id == definition.id:
                self.items[index] = definition
                return existing
        self.items.append(definition)
        return None

    def upsert_monster(self, template: MonsterTemplate) -> MonsterTemplate | None:
        for index, existing in enumerate(self.monsters):
            if existing.id == template.id:
                self.monsters[index] = template
                return existing
        self.monsters.append(template)
        return None


__all__ = [
    "slugify",
    "CatalogModel",
    "ItemDefinition",
    "SpellDefinition",
    "MonsterTemplate",
    "World",
]
