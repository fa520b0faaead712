"""Tests for the dice rolling engine."""

from __future__ import annotations

import pytest

from dnd_narrator.core.exceptions import DiceRollError
from dnd_narrator.engine.dice import DiceResult, DiceRoller, RollType, roll


class TestRollType:
    """Tests for reading roll types from directive fields."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("advantage", RollType.ADVANTAGE),
            ("ADV", RollType.ADVANTAGE),
            ("disadvantage", RollType.DISADVANTAGE),
            (" dis ", RollType.DISADVANTAGE),
            ("", RollType.NORMAL),
            (None, RollType.NORMAL),
            ("sideways", RollType.NORMAL),
        ],
    )
    def test_parse(self, value: str | None, expected: RollType) -> None:
        """Test flag parsing is prefix based and case-insensitive."""
        assert RollType.parse(value) == expected


class TestDiceRoller:
    """Tests for the DiceRoller class."""

    def test_simple_roll(self, dice_roller: DiceRoller) -> None:
        """Test a simple d20 roll."""
        result = dice_roller.roll("1d20")

        assert 1 <= result.total <= 20
        assert len(result.dice) == 1
        assert result.natural == result.dice[0]
        assert result.modifier == 0

    def test_roll_with_modifier(self, dice_roller: DiceRoller) -> None:
        """Test roll with a positive modifier."""
        result = dice_roller.roll("1d20+5")

        assert 6 <= result.total <= 25
        assert result.modifier == 5

    def test_multiple_dice(self, dice_roller: DiceRoller) -> None:
        """Test rolling multiple dice."""
        result = dice_roller.roll("3d6")

        assert 3 <= result.total <= 18
        assert len(result.dice) == 3
        assert result.natural is None

    def test_advantage_keeps_one_die(self, dice_roller: DiceRoller) -> None:
        """Test rolling with advantage keeps the higher d20 only."""
        result = dice_roller.roll("1d20+2", roll_type=RollType.ADVANTAGE)

        assert result.roll_type == RollType.ADVANTAGE
        assert result.expression == "1d20+2"
        assert len(result.dice) == 1
        assert result.total == result.dice[0] + 2

    def test_disadvantage(self, dice_roller: DiceRoller) -> None:
        """Test rolling with disadvantage."""
        result = dice_roller.roll("1d20", roll_type=RollType.DISADVANTAGE)

        assert result.roll_type == RollType.DISADVANTAGE
        assert 1 <= result.total <= 20

    def test_critical_and_fumble_flags(self) -> None:
        """Test the natural face drives critical and fumble flags."""
        crit = DiceResult(expression="1d20", total=20, dice=[20], natural=20)
        fumble = DiceResult(expression="1d20", total=1, dice=[1], natural=1)
        plain = DiceResult(expression="2d6", total=12, dice=[6, 6])

        assert crit.is_critical and not crit.is_fumble
        assert fumble.is_fumble and not fumble.is_critical
        assert not plain.is_critical

    @pytest.mark.parametrize("expression", ["invalid", "", "   "])
    def test_bad_expression_raises_error(self, dice_roller: DiceRoller, expression: str) -> None:
        """Test that empty or invalid expressions raise DiceRollError."""
        with pytest.raises(DiceRollError):
            dice_roller.roll(expression)


class TestDiceRollerSpecializedMethods:
    """Tests for specialized dice rolling methods."""

    def test_roll_d20_formats_modifier(self, dice_roller: DiceRoller) -> None:
        """Test d20 checks carry a signed modifier."""
        result = dice_roller.roll_d20(-2)

        assert result.expression == "1d20-2"
        assert -1 <= result.total <= 18

    def test_roll_damage(self, dice_roller: DiceRoller) -> None:
        """Test damage roll."""
        result = dice_roller.roll_damage("2d6+3")

        assert 5 <= result.total <= 15

    def test_roll_damage_critical_doubles_dice(self, dice_roller: DiceRoller) -> None:
        """Test critical damage doubles dice but not the modifier."""
        result = dice_roller.roll_damage("2d6+3", critical=True)

        assert result.expression == "4d6+3"
        assert len(result.dice) == 4
        assert 7 <= result.total <= 27

    def test_roll_damage_critical_implicit_count(self, dice_roller: DiceRoller) -> None:
        """Test a bare die term is treated as a single die."""
        result = dice_roller.roll_damage("d8", critical=True)

        assert result.expression == "2d8"


class TestConvenienceRollFunction:
    """Tests for the module-level roll() function."""

    def test_basic_roll(self) -> None:
        """Test basic roll using convenience function."""
        result = roll("1d20")

        assert isinstance(result, DiceResult)
        assert 1 <= result.total <= 20

    def test_result_is_frozen(self) -> None:
        """Test that DiceResult is immutable."""
        result = roll("1d4")

        with pytest.raises(AttributeError):
            result.total = 20  # type: ignore[misc]
