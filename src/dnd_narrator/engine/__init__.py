"""Rules engine: dice, argument parsing and damage mechanics.

The streaming turn driver lives in :mod:`dnd_narrator.engine.narration`
and is imported from there directly.
"""

from __future__ import annotations

from dnd_narrator.engine.arguments import (
    Amount,
    DiceAmount,
    FlatAmount,
    parse_amount,
    parse_float,
    parse_int,
)
from dnd_narrator.engine.dice import DiceResult, DiceRoller, RollType, roll
from dnd_narrator.engine.mechanics import (
    ConcentrationCheck,
    DamageResult,
    TempHPResult,
    apply_damage,
    apply_temp_hp,
    check_concentration,
    concentration_dc,
)


__all__ = [
    # Dice
    "DiceResult",
    "DiceRoller",
    "RollType",
    "roll",
    # Arguments
    "Amount",
    "DiceAmount",
    "FlatAmount",
    "parse_amount",
    "parse_float",
    "parse_int",
    # Mechanics
    "ConcentrationCheck",
    "DamageResult",
    "TempHPResult",
    "apply_damage",
    "apply_temp_hp",
    "check_concentration",
    "concentration_dc",
]
