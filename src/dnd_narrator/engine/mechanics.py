"""Damage, temporary hit point and concentration arithmetic.

These functions compute outcomes without touching state; the combat
handler decides where the results are written. Resistance halves and
rounds down, vulnerability doubles, immunity zeroes, and temporary hit
points absorb damage before real hit points.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from dnd_narrator.engine.dice import DiceRoller, RollType
from dnd_narrator.models.character import CharacterState
from dnd_narrator.models.enums import Ability


class DamageTarget(Protocol):
    """Anything that can take typed damage."""

    temp_hp: int
    resistances: list[str]
    immunities: list[str]
    vulnerabilities: list[str]


@dataclass(frozen=True)
class DamageResult:
    """The outcome of applying typed damage to a target.

    Attributes:
        raw_damage: Amount before defensive traits.
        actual_damage: Damage that reaches real hit points.
        temp_hp_consumed: Temporary hit points absorbed.
        remaining_temp_hp: Temporary hit points left afterwards.
        modifier: 'immune', 'vulnerable', 'resisted' or None.
    """

    raw_damage: int
    actual_damage: int
    temp_hp_consumed: int
    remaining_temp_hp: int
    modifier: str | None = None

    @property
    def message(self) -> str:
        """Parenthetical summary such as '(Resisted, 3 absorbed by temp HP)'."""
        parts: list[str] = []
        if self.modifier == "immune":
            parts.append("Immune!")
        elif self.modifier == "vulnerable":
            parts.append("Vulnerable! x2")
        elif self.modifier == "resisted":
            parts.append("Resisted")
        if self.temp_hp_consumed:
            parts.append(f"{self.temp_hp_consumed} absorbed by temp HP")
        return f"({', '.join(parts)})" if parts else ""


@dataclass(frozen=True)
class TempHPResult:
    """Temporary hit points after a grant; grants do not stack."""

    new_total: int
    changed: bool


@dataclass(frozen=True)
class ConcentrationCheck:
    """A constitution save made to keep concentrating after damage."""

    dc: int
    roll_total: int
    broken: bool


def apply_damage(target: DamageTarget, amount: int, damage_type: str | None = None) -> DamageResult:
    """Compute typed damage against a target.

    Args:
        target: The creature taking damage.
        amount: Raw damage before defenses.
        damage_type: Damage type such as 'fire'; None skips defenses.

    Returns:
        DamageResult describing what reaches hit points.
    """
    damage = max(0, amount)
    modifier: str | None = None
    key = (damage_type or "").strip().lower()

    if key and key in target.immunities:
        damage = 0
        modifier = "immune"
    elif key and key in target.vulnerabilities:
        damage *= 2
        modifier = "vulnerable"
    elif key and key in target.resistances:
        damage //= 2
        modifier = "resisted"

    absorbed = min(target.temp_hp, damage)
    return DamageResult(
        raw_damage=max(0, amount),
        actual_damage=damage - absorbed,
        temp_hp_consumed=absorbed,
        remaining_temp_hp=target.temp_hp - absorbed,
        modifier=modifier,
    )


def apply_temp_hp(current: int, amount: int) -> TempHPResult:
    """Grant temporary hit points, keeping the higher of old and new."""
    new_total = max(current, max(0, amount))
    return TempHPResult(new_total=new_total, changed=new_total != current)


def concentration_dc(damage_taken: int, *, minimum: int = 10) -> int:
    """DC of the save: half the damage taken, never below ``minimum``."""
    return max(minimum, damage_taken // 2)


def check_concentration(
    character: CharacterState,
    damage_taken: int,
    roller: DiceRoller,
    *,
    minimum_dc: int = 10,
) -> ConcentrationCheck:
    """Roll a constitution save to maintain concentration.

    Args:
        character: The concentrating character.
        damage_taken: Damage that reached the character.
        roller: Dice roller to use.
        minimum_dc: Floor for the DC.

    Returns:
        ConcentrationCheck with the DC, the total rolled and whether it broke.
    """
    dc = concentration_dc(damage_taken, minimum=minimum_dc)
    result = roller.roll_d20(character.saving_throw_bonus(Ability.CON), roll_type=RollType.NORMAL)
    return ConcentrationCheck(dc=dc, roll_total=result.total, broken=result.total < dc)


__all__ = [
    "DamageTarget",
    "DamageResult",
    "TempHPResult",
    "ConcentrationCheck",
    "apply_damage",
    "apply_temp_hp",
    "concentration_dc",
    "check_concentration",
]
