"""Level progression data and the caller-driven level-up interaction.

Leveling is not performed by directives. ``XP_GAIN`` only flags that a
level is available; the caller then walks the player through an explicit
``LevelUpInteraction`` record, passing it into each step and keeping the
returned copy:

    >>> interaction = begin_level_up(character)
    >>> interaction = choose_hit_points(interaction, character, "average")
    >>> interaction = choose_ability_increase(interaction, character, {"strength": 2})
    >>> finalize_level_up(interaction, character)
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from dnd_narrator.core.exceptions import ValidationError
from dnd_narrator.core.logging import get_logger
from dnd_narrator.engine.dice import DiceRoller
from dnd_narrator.models.character import CharacterState, SpellSlotPool
from dnd_narrator.models.enums import Ability


logger = get_logger(__name__)

# =============================================================================
# Progression Tables
# =============================================================================

XP_THRESHOLDS: dict[int, int] = {
    1: 0,
    2: 300,
    3: 900,
    4: 2700,
    5: 6500,
    6: 14000,
    7: 23000,
    8: 34000,
    9: 48000,
    10: 64000,
    11: 85000,
    12: 100000,
    13: 120000,
    14: 140000,
    15: 165000,
    16: 195000,
    17: 225000,
    18: 265000,
    19: 305000,
    20: 355000,
}

MAX_LEVEL = 20
MAX_ABILITY_SCORE = 20
ASI_POINTS = 2

CLASS_HIT_DIE: dict[str, int] = {
    "barbarian": 12,
    "fighter": 10,
    "paladin": 10,
    "ranger": 10,
    "bard": 8,
    "cleric": 8,
    "druid": 8,
    "monk": 8,
    "rogue": 8,
    "warlock": 8,
    "sorcerer": 6,
    "wizard": 6,
}

STANDARD_ASI_LEVELS = frozenset({4, 8, 12, 16, 19})
FIGHTER_ASI_LEVELS = frozenset({4, 6, 8, 12, 14, 16, 19})
ROGUE_ASI_LEVELS = frozenset({4, 8, 10, 12, 16, 19})

FULL_CASTERS = frozenset({"bard", "cleric", "druid", "sorcerer", "wizard"})

FULL_CASTER_SLOTS: dict[int, dict[int, int]] = {
    1:  {1: 2},
    2:  {1: 3},
    3:  {1: 4, 2: 2},
    4:  {1: 4, 2: 3},
    5:  {1: 4, 2: 3, 3: 2},
    6:  {1: 4, 2: 3, 3: 3},
    7:  {1: 4, 2: 3, 3: 3, 4: 1},
    8:  {1: 4, 2: 3, 3: 3, 4: 2},
    9:  {1: 4, 2: 3, 3: 3, 4: 3, 5: 1},
    10: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2},
    11: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1},
    12: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1},
    13: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1, 7: 1},
    14: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1, 7: 1},
    15: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1, 7: 1, 8: 1},
    16: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1, 7: 1, 8: 1},
    17: {1: 4, 2: 3, 3: 3, 4: 3, 5: 2, 6: 1, 7: 1, 8: 1, 9: 1},
    18: {1: 4, 2: 3, 3: 3, 4: 3, 5: 3, 6: 1, 7: 1, 8: 1, 9: 1},
    19: {1: 4, 2: 3, 3: 3, 4: 3, 5: 3, 6: 2, 7: 1, 8: 1, 9: 1},
    20: {1: 4, 2: 3, 3: 3, 4: 3, 5: 3, 6: 2, 7: 2, 8: 1, 9: 1},
}


def xp_threshold_for(level: int) -> int:
    """XP needed to reach the level after ``level``; the cap at level 20."""
    return XP_THRESHOLDS[min(MAX_LEVEL, level + 1)]


def get_hit_die(class_name: str) -> int:
    """Get hit die size for a class."""
    return CLASS_HIT_DIE.get(class_name.strip().lower(), 8)


def grants_ability_increase(class_name: str, level: int) -> bool:
    """Check if this level grants an ability score improvement."""
    key = class_name.strip().lower()
    if key == "fighter":
        return level in FIGHTER_ASI_LEVELS
    if key == "rogue":
        return level in ROGUE_ASI_LEVELS
    return level in STANDARD_ASI_LEVELS


def spell_slots_for(class_name: str, level: int) -> dict[int, int]:
    """Maximum spell slots per spell level for full casters; empty otherwise."""
    if class_name.strip().lower() not in FULL_CASTERS:
        return {}
    return FULL_CASTER_SLOTS.get(level, {})


# =============================================================================
# Level-Up Interaction
# =============================================================================


class LevelUpStep(StrEnum):
    """Where a level-up interaction currently stands."""

    HIT_POINTS = "hit_points"
    ABILITY_SCORES = "ability_scores"
    CONFIRM = "confirm"
    COMPLETE = "complete"


class HitPointMethod(StrEnum):
    AVERAGE = "average"
    ROLL = "roll"


class LevelUpInteraction(BaseModel):
    """Serializable in-progress level-up, owned by the caller.

    Attributes:
        character_id: Character being leveled.
        from_level: Level before the interaction.
        to_level: Level after finalizing.
        hit_die: Class hit die size.
        step: Next expected step.
        hp_method: How hit points were chosen.
        hp_gain: Hit points gained, once chosen.
        ability_increases: Points per ability, once chosen.
        needs_ability_increase: Whether ``to_level`` grants an ASI.
    """

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    character_id: str
    from_level: int = Field(ge=1, le=MAX_LEVEL)
    to_level: int = Field(ge=2, le=MAX_LEVEL)
    hit_die: int = Field(ge=4, le=12)
    step: LevelUpStep = LevelUpStep.HIT_POINTS
    hp_method: HitPointMethod | None = None
    hp_gain: int | None = None
    ability_increases: dict[str, int] = Field(default_factory=dict)
    needs_ability_increase: bool = False


def _require(interaction: LevelUpInteraction, character: CharacterState, step: LevelUpStep) -> None:
    if interaction.character_id != character.id:
        raise ValidationError(
            "Level-up interaction belongs to another character",
            field_name="character_id",
            invalid_value=interaction.character_id,
        )
    if interaction.step != step:
        raise ValidationError(
            f"Expected step {step}, interaction is at {interaction.step}",
            field_name="step",
            invalid_value=str(step),
        )


def begin_level_up(character: CharacterState) -> LevelUpInteraction:
    """Start leveling a character that has a level available.

    Raises:
        ValidationError: No level is available or the character is at the cap.
    """
    if character.level >= MAX_LEVEL:
        raise ValidationError("Character is already at maximum level", field_name="level", invalid_value=character.level)
    if not character.pending_level_up and character.experience.current < character.experience.threshold:
        raise ValidationError(
            "Not enough experience to level up",
            field_name="experience",
            invalid_value=character.experience.current,
        )

    to_level = character.level + 1
    interaction = LevelUpInteraction(
        character_id=character.id,
        from_level=character.level,
        to_level=to_level,
        hit_die=get_hit_die(character.class_name),
        needs_ability_increase=grants_ability_increase(character.class_name, to_level),
    )
    logger.info("Level up started", character_id=character.id, to_level=to_level)
    return interaction


def choose_hit_points(
    interaction: LevelUpInteraction,
    character: CharacterState,
    method: HitPointMethod | str,
    roller: DiceRoller | None = None,
) -> LevelUpInteraction:
    """Pick the hit point gain: the die average (rounded up) or a roll, plus CON.

    A level always grants at least one hit point.

    Raises:
        ValidationError: Unknown method or out-of-order step.
    """
    _require(interaction, character, LevelUpStep.HIT_POINTS)
    try:
        method = HitPointMethod(str(method).strip().lower())
    except ValueError as exc:
        raise ValidationError(
            f"Unknown hit point method: {method}",
            field_name="method",
            invalid_value=method,
        ) from exc

    if method == HitPointMethod.ROLL:
        die_result = (roller or DiceRoller()).roll(f"1d{interaction.hit_die}").total
    else:
        die_result = interaction.hit_die // 2 + 1
    gain = max(1, die_result + character.stats.con_mod)

    next_step = LevelUpStep.ABILITY_SCORES if interaction.needs_ability_increase else LevelUpStep.CONFIRM
    return interaction.model_copy(update={"hp_method": method, "hp_gain": gain, "step": next_step})


def choose_ability_increase(
    interaction: LevelUpInteraction,
    character: CharacterState,
    increases: dict[str, int],
) -> LevelUpInteraction:
    """Spend exactly two ability points: one ability twice or two abilities once.

    Args:
        interaction: The in-progress interaction.
        character: The character being leveled.
        increases: Points per ability name or abbreviation, e.g. ``{"str": 2}``.

    Raises:
        ValidationError: The choice breaks the two-point economy or pushes a
            score above 20.
    """
    _require(interaction, character, LevelUpStep.ABILITY_SCORES)

    chosen: dict[str, int] = {}
    for name, points in increases.items():
        ability = Ability.parse(name)
        if ability is None:
            raise ValidationError(f"Unknown ability: {name}", field_name="ability", invalid_value=name)
        if points not in (1, 2):
            raise ValidationError(
                "Each ability increase must be 1 or 2 points",
                field_name=ability.value,
                invalid_value=points,
            )
        chosen[ability.value] = chosen.get(ability.value, 0) + points

    if sum(chosen.values()) != ASI_POINTS or len(chosen) > 2:
        raise ValidationError(
            f"Ability increases must total exactly {ASI_POINTS} points",
            field_name="ability_increases",
            invalid_value=chosen,
        )
    for ability_name, points in chosen.items():
        if character.stats.score(ability_name) + points > MAX_ABILITY_SCORE:
            raise ValidationError(
                f"{ability_name.title()} cannot exceed {MAX_ABILITY_SCORE}",
                field_name=ability_name,
                invalid_value=character.stats.score(ability_name) + points,
            )

    return interaction.model_copy(update={"ability_increases": chosen, "step": LevelUpStep.CONFIRM})


def finalize_level_up(interaction: LevelUpInteraction, character: CharacterState) -> LevelUpInteraction:
    """Apply the chosen level-up to the character record.

    Raises level, hit points, hit dice, ability scores and spell slots,
    moves the XP threshold to the next level and clears the pending flag.

    Returns:
        The completed interaction.
    """
    _require(interaction, character, LevelUpStep.CONFIRM)
    gain = interaction.hp_gain or 1

    character.level = interaction.to_level
    character.max_hp += gain
    character.current_hp = min(character.max_hp, character.current_hp + gain)

    character.hit_dice.die = interaction.hit_die
    character.hit_dice.max = interaction.to_level
    character.hit_dice.current = min(character.hit_dice.max, character.hit_dice.current + 1)

    for ability_name, points in interaction.ability_increases.items():
        setattr(character.stats, ability_name, character.stats.score(ability_name) + points)

    for slot_level, maximum in spell_slots_for(character.class_name, interaction.to_level).items():
        pool = character.spell_slots.get(slot_level)
        if pool is None:
            character.spell_slots[slot_level] = SpellSlotPool(current=maximum, max=maximum)
        else:
            added = max(0, maximum - pool.max)
            pool.max = maximum
            pool.current = min(maximum, pool.current + added)

    character.experience.threshold = xp_threshold_for(interaction.to_level)
    character.pending_level_up = (
        interaction.to_level < MAX_LEVEL and character.experience.current >= character.experience.threshold
    )

    logger.info(
        "Level up complete",
        character_id=character.id,
        level=character.level,
        hp_gain=gain,
        ability_increases=interaction.ability_increases,
    )
    return interaction.model_copy(update={"step": LevelUpStep.COMPLETE})


__all__ = [
    "XP_THRESHOLDS",
    "MAX_LEVEL",
    "CLASS_HIT_DIE",
    "FULL_CASTER_SLOTS",
    "xp_threshold_for",
    "get_hit_die",
    "grants_ability_increase",
    "spell_slots_for",
    "LevelUpStep",
    "HitPointMethod",
    "LevelUpInteraction",
    "begin_level_up",
    "choose_hit_points",
    "choose_ability_increase",
    "finalize_level_up",
]
