"""Tests for character sheet models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from dnd_narrator.models.character import (
    AbilityScores,
    CharacterState,
    ClassResource,
    ModifierSet,
    proficiency_for_level,
)
from dnd_narrator.models.enums import Ability, DefenseCategory, RecoveryTrigger


class TestAbilityScores:
    """Tests for ability scores and modifiers."""

    @pytest.mark.parametrize(
        "score,expected",
        [(1, -5), (8, -1), (9, -1), (10, 0), (11, 0), (15, 2), (20, 5), (30, 10)],
    )
    def test_calc_modifier(self, score: int, expected: int) -> None:
        """Test modifier calculation rounds down."""
        assert AbilityScores.calc_modifier(score) == expected

    def test_score_bounds(self) -> None:
        """Test scores outside 1-30 are rejected."""
        with pytest.raises(ValidationError):
            AbilityScores(strength=31)
        with pytest.raises(ValidationError):
            AbilityScores(dexterity=0)

    def test_assignment_validated(self) -> None:
        """Test assignments are validated too."""
        scores = AbilityScores()

        with pytest.raises(ValidationError):
            scores.wisdom = 40

    def test_lookup_by_ability(self) -> None:
        """Test scores and modifiers by ability."""
        scores = AbilityScores(charisma=17)

        assert scores.score(Ability.CHA) == 17
        assert scores.modifier("charisma") == 3

    def test_computed_modifiers_serialized(self) -> None:
        """Test derived modifiers appear in dumps and are ignored on load."""
        dumped = AbilityScores(dexterity=14, constitution=8).model_dump()

        assert dumped["dex_mod"] == 2
        assert dumped["con_mod"] == -1
        assert AbilityScores.model_validate(dumped).dexterity == 14

    @pytest.mark.parametrize(("level", "bonus"), [(1, 2), (4, 2), (5, 3), (9, 4), (13, 5), (17, 6), (20, 6)])
    def test_proficiency(self, level: int, bonus: int) -> None:
        """Test the proficiency bonus by level."""
        assert proficiency_for_level(level) == bonus


class TestCharacterState:
    """Tests for the character record."""

    def test_defaults(self) -> None:
        """Test a minimal character."""
        character = CharacterState(name="Nobody")

        assert character.level == 1
        assert character.proficiency_bonus == 2
        assert character.experience.threshold == 300
        assert character.pending_level_up is False

    def test_name_required(self) -> None:
        """Test an empty name is rejected."""
        with pytest.raises(ValidationError):
            CharacterState(name="")

    def test_level_bounds(self) -> None:
        """Test levels outside 1-20 are rejected."""
        with pytest.raises(ValidationError):
            CharacterState(name="Ancient", level=21)

    def test_defenses_normalized(self) -> None:
        """Test damage type lists are lowercased and de-duplicated."""
        character = CharacterState(name="Tiefling", resistances=["Fire", "fire ", "Cold"])

        assert character.resistances == ["fire", "cold"]
        assert character.defenses(DefenseCategory.RESISTANCE) is character.resistances

    def test_saving_throw_bonus(self, fighter: CharacterState) -> None:
        """Test proficient saves add proficiency and save modifiers."""
        fighter.active_modifiers["cloak"] = ModifierSet(values={"saves": 1})

        assert fighter.saving_throw_bonus(Ability.STR) == 6
        assert fighter.saving_throw_bonus(Ability.DEX) == 3

    @pytest.mark.parametrize(
        ("skill", "bonus"),
        [("athletics", 5), ("Perception", 3), ("stealth", 2), ("sleight of hand", 2), ("intelligence", 0)],
    )
    def test_skill_bonus(self, fighter: CharacterState, skill: str, bonus: int) -> None:
        """Test skill bonuses, including raw ability names."""
        assert fighter.skill_bonus(skill) == bonus

    def test_expertise_doubles(self, fighter: CharacterState) -> None:
        """Test expertise doubles the proficiency bonus."""
        fighter.skill_proficiencies["stealth"] = 2

        assert fighter.skill_bonus("stealth") == 6

    def test_lookups_case_insensitive(self, fighter: CharacterState) -> None:
        """Test resources and known spells are found regardless of case."""
        assert fighter.find_resource("SECOND WIND") is fighter.class_resources[0]
        assert fighter.find_resource("Rage") is None
        assert fighter.knows_spell("shield") is False

    def test_round_trip(self, fighter: CharacterState) -> None:
        """Test the record survives JSON serialization."""
        fighter.active_modifiers["ring"] = ModifierSet(values={"AC": 1}, label="Ring")

        restored = CharacterState.model_validate_json(fighter.model_dump_json())

        assert restored.model_dump() == fighter.model_dump()


class TestClassResource:
    """Tests for rest recovery rules."""

    @pytest.mark.parametrize(
        ("recovers_on", "rest", "expected"),
        [
            (RecoveryTrigger.SHORT, RecoveryTrigger.SHORT, True),
            (RecoveryTrigger.EITHER, RecoveryTrigger.SHORT, True),
            (RecoveryTrigger.LONG, RecoveryTrigger.SHORT, False),
            (RecoveryTrigger.LONG, RecoveryTrigger.LONG, True),
            (RecoveryTrigger.SHORT, RecoveryTrigger.LONG, True),
        ],
    )
    def test_recovers_after(self, recovers_on: RecoveryTrigger, rest: RecoveryTrigger, expected: bool) -> None:
        """Test a long rest restores everything and a short rest only short ones."""
        resource = ClassResource(name="Ki", current=0, max=3, recovers_on=recovers_on)

        assert resource.recovers_after(rest) is expected
