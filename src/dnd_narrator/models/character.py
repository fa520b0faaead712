"""Persistent character sheet models.

The character record outlives any single session. Handlers mutate it in
place during a dispatch pass; the leveling flow reads and writes the same
record between turns.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from dnd_narrator.models.enums import Ability, DefenseCategory, RecoveryTrigger


AbilityScore = Annotated[int, Field(ge=1, le=30, description="D&D ability score (1-30)")]
Level = Annotated[int, Field(ge=1, le=20, description="Character level (1-20)")]


SKILL_ABILITIES: dict[str, Ability] = {
    "acrobatics": Ability.DEX,
    "animal_handling": Ability.WIS,
    "arcana": Ability.INT,
    "athletics": Ability.STR,
    "deception": Ability.CHA,
    "history": Ability.INT,
    "insight": Ability.WIS,
    "intimidation": Ability.CHA,
    "investigation": Ability.INT,
    "medicine": Ability.WIS,
    "nature": Ability.INT,
    "perception": Ability.WIS,
    "performance": Ability.CHA,
    "persuasion": Ability.CHA,
    "religion": Ability.INT,
    "sleight_of_hand": Ability.DEX,
    "stealth": Ability.DEX,
    "survival": Ability.WIS,
}


def proficiency_for_level(level: int) -> int:
    """Proficiency bonus for a character level (+2 at 1, +6 at 17)."""
    return 2 + (max(1, level) - 1) // 4


class StateModel(BaseModel):
    """Base class for mutable interpreter state.

    State is mutated in place by handlers, so assignments are validated
    and unknown keys from older saves are ignored.
    """

    model_config = ConfigDict(
        frozen=False,
        validate_assignment=True,
        extra="ignore",  # Ignore computed fields when deserializing
        use_enum_values=True,
    )


# =============================================================================
# Sheet Components
# =============================================================================


class AbilityScores(StateModel):
    """The six ability scores with derived modifiers."""

    strength: AbilityScore = Field(default=10, description="Physical power")
    dexterity: AbilityScore = Field(default=10, description="Agility and reflexes")
    constitution: AbilityScore = Field(default=10, description="Health and stamina")
    intelligence: AbilityScore = Field(default=10, description="Reasoning and memory")
    wisdom: AbilityScore = Field(default=10, description="Perception and insight")
    charisma: AbilityScore = Field(default=10, description="Force of personality")

    @staticmethod
    def calc_modifier(score: int) -> int:
        """Calculate ability modifier from score."""
        return (score - 10) // 2

    def score(self, ability: Ability | str) -> int:
        return getattr(self, Ability(ability).value)

    def modifier(self, ability: Ability | str) -> int:
        return self.calc_modifier(self.score(ability))

    @computed_field(description="Dexterity modifier")
    @property
    def dex_mod(self) -> int:
        return self.calc_modifier(self.dexterity)

    @computed_field(description="Constitution modifier")
    @property
    def con_mod(self) -> int:
        return self.calc_modifier(self.constitution)


class SpellSlotPool(StateModel):
    """Spell slots available at one spell level."""

    current: int = Field(default=0, ge=0)
    max: int = Field(default=0, ge=0)


class HitDice(StateModel):
    """Renewable hit dice spent during short rests."""

    die: int = Field(default=8, ge=4, le=12, description="Die size, e.g. 10 for d10")
    current: int = Field(default=1, ge=0)
    max: int = Field(default=1, ge=0)


class ClassResource(StateModel):
    """A renewable class ability with charges (Rage, Channel Divinity)."""

    name: str
    current: int = Field(default=0, ge=0)
    max: int = Field(default=0, ge=0)
    recovers_on: RecoveryTrigger = Field(default=RecoveryTrigger.LONG)

    def recovers_after(self, rest: RecoveryTrigger | str) -> bool:
        """Whether a rest of the given kind refills this resource."""
        if rest == RecoveryTrigger.LONG:
            return True
        return self.recovers_on in (RecoveryTrigger.SHORT, RecoveryTrigger.EITHER)


class KnownSpell(StateModel):
    """A spell the character knows."""

    name: str
    level: int = Field(default=0, ge=0, le=9)
    spell_id: str | None = None


class ModifierSet(StateModel):
    """Passive modifiers contributed by exactly one source.

    Attributes:
        values: Signed bonuses keyed by target ('AC', 'saves', 'to_hit', 'damage').
        conditional: Advantage/disadvantage notes that are not numeric.
        label: Display name of the source.
    """

    values: dict[str, int] = Field(default_factory=dict)
    conditional: list[str] = Field(default_factory=list)
    label: str = ""


class ExperienceEntry(StateModel):
    """Audit entry for one experience award."""

    amount: int
    reason: str = "Unknown"
    awarded_at: datetime = Field(default_factory=datetime.now)


class ExperienceTrack(StateModel):
    """Running experience total against the next level threshold."""

    current: int = Field(default=0, ge=0)
    threshold: int = Field(default=300, ge=0, description="XP needed for the next level")
    history: list[ExperienceEntry] = Field(default_factory=list)


class DeathSaves(StateModel):
    """Death saving throw tallies."""

    successes: int = Field(default=0, ge=0, le=3)
    failures: int = Field(default=0, ge=0, le=3)


# =============================================================================
# Character State
# =============================================================================


class CharacterState(StateModel):
    """The player's persistent sheet.

    Armor class is stored as a derived value: the equipment service
    recomputes it whenever equipment or passive modifiers change.
    """

    id: str = Field(default_factory=lambda: uuid4().hex)
    name: str = Field(min_length=1)
    class_name: str = Field(default="Fighter")
    level: Level = 1

    stats: AbilityScores = Field(default_factory=AbilityScores)
    save_proficiencies: list[Ability] = Field(default_factory=list)
    # Skill name -> multiplier: 1=proficient, 2=expertise
    skill_proficiencies: dict[str, int] = Field(default_factory=dict)

    max_hp: int = Field(default=10, ge=1)
    current_hp: int = Field(default=10, ge=0)
    temp_hp: int = Field(default=0, ge=0)
    armor_class: int = Field(default=10, ge=0)
    death_saves: DeathSaves = Field(default_factory=DeathSaves)

    spell_slots: dict[int, SpellSlotPool] = Field(default_factory=dict)
    hit_dice: HitDice = Field(default_factory=HitDice)
    class_resources: list[ClassResource] = Field(default_factory=list)
    known_spells: list[KnownSpell] = Field(default_factory=list)
    prepared_spells: list[str] = Field(default_factory=list)

    active_modifiers: dict[str, ModifierSet] = Field(default_factory=dict)
    # Source id -> keys of the reversible directives it granted
    granted_effects: dict[str, list[str]] = Field(default_factory=dict)
    resistances: list[str] = Field(default_factory=list)
    immunities: list[str] = Field(default_factory=list)
    vulnerabilities: list[str] = Field(default_factory=list)

    experience: ExperienceTrack = Field(default_factory=ExperienceTrack)
    pending_level_up: bool = False

    @field_validator("resistances", "immunities", "vulnerabilities", mode="before")
    @classmethod
    def normalize_defenses(cls, value: list[str] | None) -> list[str]:
        """Lowercase and de-duplicate damage type lists."""
        result: list[str] = []
        for entry in value or []:
            key = str(entry).strip().lower()
            if key and key not in result:
                result.append(key)
        return result

    @computed_field(description="Proficiency bonus for the current level")
    @property
    def proficiency_bonus(self) -> int:
        return proficiency_for_level(self.level)

    def defenses(self, category: DefenseCategory | str) -> list[str]:
        """The live damage type list for a defensive category."""
        return getattr(self, DefenseCategory(category).value)

    def total_modifier(self, key: str) -> int:
        """Sum one modifier target across every active source."""
        return sum(mods.values.get(key, 0) for mods in self.active_modifiers.values())

    def saving_throw_bonus(self, ability: Ability | str) -> int:
        """Ability modifier, proficiency when proficient, plus save modifiers."""
        ability = Ability(ability)
        bonus = self.stats.modifier(ability)
        if ability in self.save_proficiencies:
            bonus += self.proficiency_bonus
        return bonus + self.total_modifier("saves")

    def skill_bonus(self, skill: str) -> int:
        """Check bonus for a skill; unknown skills fall back to a raw ability."""
        key = skill.strip().lower().replace(" ", "_")
        ability = SKILL_ABILITIES.get(key) or Ability.parse(key) or Ability.WIS
        multiplier = self.skill_proficiencies.get(key, 0)
        return self.stats.modifier(ability) + multiplier * self.proficiency_bonus

    def find_resource(self, name: str) -> ClassResource | None:
        key = name.strip().lower()
        for resource in self.class_resources:
            if resource.name.lower() == key:
                return resource
        return None

    def knows_spell(self, name: str) -> bool:
        key = name.strip().lower()
        return any(spell.name.lower() == key for spell in self.known_spells)


__all__ = [
    "SKILL_ABILITIES",
    "proficiency_for_level",
    "StateModel",
    "AbilityScores",
    "SpellSlotPool",
    "HitDice",
    "ClassResource",
    "KnownSpell",
    "ModifierSet",
    "ExperienceEntry",
    "ExperienceTrack",
    "DeathSaves",
    "CharacterState",
]
