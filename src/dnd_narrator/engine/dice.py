"""Dice rolling for directive resolution.

Every random number in the interpreter comes from a DiceRoller backed by
the d20 library. Handlers receive the roller from the session context so
tests can substitute a scripted one.
"""

from __future__ import annotations

import random
import re
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

import d20

from dnd_narrator.core.exceptions import DiceRollError
from dnd_narrator.core.logging import get_logger


logger = get_logger(__name__)

DICE_TERM = re.compile(r"(\d*)d(\d+)")


class RollType(StrEnum):
    """Types of dice rolls."""

    NORMAL = "normal"
    ADVANTAGE = "advantage"
    DISADVANTAGE = "disadvantage"

    @classmethod
    def parse(cls, value: str | None) -> RollType:
        """Read an advantage/disadvantage flag from a directive field."""
        key = (value or "").strip().lower()
        if key.startswith("adv"):
            return cls.ADVANTAGE
        if key.startswith("dis"):
            return cls.DISADVANTAGE
        return cls.NORMAL


@dataclass(frozen=True)
class DiceResult:
    """The outcome of one roll.

    Attributes:
        expression: The expression as requested.
        total: The total result of the roll.
        dice: Kept die faces.
        modifier: Static part of the total.
        natural: The kept d20 face for d20 rolls, else None.
        roll_type: Normal, advantage or disadvantage.
    """

    expression: str
    total: int
    dice: list[int] = field(default_factory=list)
    modifier: int = 0
    natural: int | None = None
    roll_type: RollType = RollType.NORMAL

    @property
    def is_critical(self) -> bool:
        return self.natural == 20

    @property
    def is_fumble(self) -> bool:
        return self.natural == 1


class DiceRoller:
    """d20-library dice roller with advantage handling.

    Example:
        >>> roller = DiceRoller(seed=7)
        >>> roller.roll("2d6+3").total
    """

    def __init__(self, *, seed: int | None = None) -> None:
        """Initialize the dice roller.

        Args:
            seed: Optional random seed for reproducible rolls.
        """
        self._seed = seed
        if seed is not None:
            random.seed(seed)

    def roll(self, expression: str, *, roll_type: RollType = RollType.NORMAL) -> DiceResult:
        """Roll dice according to the given expression.

        Args:
            expression: Dice expression (e.g., '1d20+5', '2d6+3').
            roll_type: Advantage or disadvantage applies to d20 terms only.

        Returns:
            DiceResult containing roll results.

        Raises:
            DiceRollError: If the expression is empty or invalid.
        """
        if not expression or not expression.strip():
            raise DiceRollError("Empty dice expression", expression=expression)

        modified = expression
        if roll_type == RollType.ADVANTAGE:
            modified = re.sub(r"\b1?d20\b", "2d20kh1", expression)
        elif roll_type == RollType.DISADVANTAGE:
            modified = re.sub(r"\b1?d20\b", "2d20kl1", expression)

        try:
            result = d20.roll(modified)
        except d20.RollError as exc:
            raise DiceRollError(f"Invalid dice expression: {exc}", expression=expression) from exc

        dice_values, natural = self._extract_dice_values(result.expr)
        total = int(result.total)
        logger.debug("Dice rolled", expression=modified, total=total)
        return DiceResult(
            expression=expression,
            total=total,
            dice=dice_values,
            modifier=total - sum(dice_values),
            natural=natural,
            roll_type=roll_type,
        )

    def _extract_dice_values(self, expr: Any) -> tuple[list[int], int | None]:
        """Collect kept dice faces and the first kept d20 face."""
        values: list[int] = []
        naturals: list[int] = []

        def traverse(node: Any) -> None:
            if isinstance(node, d20.Dice):
                for die in node.values:
                    if die.kept:
                        values.append(int(die.number))
                        if node.size == 20:
                            naturals.append(int(die.number))
            elif hasattr(node, "children"):
                for child in node.children:
                    traverse(child)

        traverse(expr)
        return values, (naturals[0] if naturals else None)

    def roll_d20(self, modifier: int, *, roll_type: RollType = RollType.NORMAL) -> DiceResult:
        """Roll a d20 check, save or attack with a flat modifier."""
        return self.roll(f"1d20{modifier:+d}", roll_type=roll_type)

    def roll_damage(self, expression: str, *, critical: bool = False) -> DiceResult:
        """Roll damage, doubling the dice on a critical hit."""
        if critical:
            expression = DICE_TERM.sub(
                lambda match: f"{int(match.group(1) or 1) * 2}d{match.group(2)}",
                expression,
            )
        return self.roll(expression)


_default_roller: DiceRoller | None = None


def roll(expression: str, *, roll_type: RollType = RollType.NORMAL) -> DiceResult:
    """Roll with a module-level roller.

    Args:
        expression: Dice expression (e.g., '1d20+5').
        roll_type: Type of roll (normal, advantage, disadvantage).

    Returns:
        DiceResult containing roll results.
    """
    global _default_roller
    if _default_roller is None:
        _default_roller = DiceRoller()
    return _default_roller.roll(expression, roll_type=roll_type)


__all__ = [
    "RollType",
    "DiceResult",
    "DiceRoller",
    "roll",
]
