"""Directive argument values.

Amount fields accept either a flat integer or a dice expression. One parser
produces the value type here and every handler resolves it the same way.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeAlias


if TYPE_CHECKING:
    from dnd_narrator.engine.dice import DiceRoller


_FLAT = re.compile(r"^[+-]?\d+$")
_TERM = r"(?:\d*d\d+|\d+)"
_DICE = re.compile(rf"^{_TERM}(?:\s*[+-]\s*{_TERM})*$", re.IGNORECASE)


@dataclass(frozen=True)
class FlatAmount:
    """A literal integer amount."""

    value: int

    def resolve(self, roller: DiceRoller) -> int:
        return self.value

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class DiceAmount:
    """An amount rolled from a dice expression such as '2d4+2'."""

    expression: str

    def resolve(self, roller: DiceRoller) -> int:
        return roller.roll(self.expression).total

    def __str__(self) -> str:
        return self.expression


Amount: TypeAlias = FlatAmount | DiceAmount


def parse_amount(text: str | None) -> Amount | None:
    """Parse an amount field.

    Args:
        text: Raw field text, e.g. '10', '-15', '2d4+2'.

    Returns:
        FlatAmount, DiceAmount, or None when the text is neither.
    """
    if text is None:
        return None
    value = text.strip()
    if not value:
        return None
    if _FLAT.match(value):
        return FlatAmount(int(value))
    if "d" in value.lower() and _DICE.match(value):
        return DiceAmount(value.lower().replace(" ", ""))
    return None


def parse_int(text: str | None, default: int | None = None) -> int | None:
    """Parse a flat integer field, falling back to ``default``."""
    amount = parse_amount(text)
    if isinstance(amount, FlatAmount):
        return amount.value
    return default


def parse_float(text: str | None) -> float | None:
    """Parse a signed decimal field such as a currency delta."""
    if text is None:
        return None
    try:
        return float(text.strip())
    except ValueError:
        return None


__all__ = [
    "FlatAmount",
    "DiceAmount",
    "Amount",
    "parse_amount",
    "parse_int",
    "parse_float",
]
