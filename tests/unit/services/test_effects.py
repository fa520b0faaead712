"""Tests for effect resolution and the modifier ledger."""

from __future__ import annotations

import pytest

from dnd_narrator.directives.types import DirectiveType
from dnd_narrator.models.character import CharacterState
from dnd_narrator.models.session import SessionState, StatusCondition
from dnd_narrator.services.effects import (
    AC,
    SAVES,
    TO_HIT,
    apply_modifiers,
    grant_key,
    normalize_modifier_target,
    record_grants,
    release_grants,
    remove_modifiers,
    resolve_effect,
    resolve_effects,
)


class TestResolveEffect:
    """Tests for classifying effect strings."""

    def test_directive(self) -> None:
        """Test a directive-shaped effect resolves to a directive."""
        resolved = resolve_effect("HEAL[player|2d4+2]")

        assert [d.type for d in resolved.directives] == [DirectiveType.HEAL]
        assert resolved.modifiers == {}

    @pytest.mark.parametrize(
        ("effect", "expected"),
        [
            ("+1 AC", {AC: 1}),
            ("+2 armor class", {AC: 2}),
            ("-1 saves", {SAVES: -1}),
            ("+1 to hit", {TO_HIT: 1}),
            ("+3 damage", {"damage": 3}),
            ("+1 speed", {"speed": 1}),
        ],
    )
    def test_modifier(self, effect: str, expected: dict[str, int]) -> None:
        """Test signed modifiers are keyed by a normalized target."""
        assert resolve_effect(effect).modifiers == expected

    def test_conditional(self) -> None:
        """Test advantage notes are kept as conditional text."""
        resolved = resolve_effect("Advantage on poison saves")

        assert resolved.conditional == ["Advantage on poison saves"]
        assert resolved.has_passive

    def test_descriptive(self) -> None:
        """Test anything else is descriptive only."""
        resolved = resolve_effect("Glows faintly in the dark")

        assert resolved.descriptive == ["Glows faintly in the dark"]
        assert not resolved.has_passive

    def test_blank(self) -> None:
        """Test a blank effect resolves to nothing."""
        resolved = resolve_effect("   ")

        assert not resolved.has_passive
        assert resolved.directives == []
        assert resolved.descriptive == []

    def test_combined_modifiers_add_up(self) -> None:
        """Test modifiers with the same target are summed."""
        resolved = resolve_effects(["+1 AC", "+1 saves", "+2 AC", "APPLY_RESISTANCE[player|fire]"])

        assert resolved.modifiers == {AC: 3, SAVES: 1}
        assert len(resolved.directives) == 1

    def test_normalize_target(self) -> None:
        """Test free-text targets map onto the fixed keys."""
        assert normalize_modifier_target("AC while wearing armor") == AC
        assert normalize_modifier_target("attack rolls") == TO_HIT
        assert normalize_modifier_target("Wisdom saves") == SAVES


class TestModifierLedger:
    """Tests for per-source modifier bookkeeping."""

    def test_apply_and_remove_by_source(self, fighter: CharacterState) -> None:
        """Test removing one source leaves the others untouched."""
        apply_modifiers(fighter, "ring", resolve_effects(["+1 AC", "+1 saves"]), label="Ring")
        apply_modifiers(fighter, "cloak", resolve_effects(["+1 AC"]), label="Cloak")
        assert fighter.total_modifier(AC) == 2

        assert remove_modifiers(fighter, "ring") is True

        assert fighter.total_modifier(AC) == 1
        assert fighter.total_modifier(SAVES) == 0
        assert remove_modifiers(fighter, "ring") is False

    def test_reapply_replaces(self, fighter: CharacterState) -> None:
        """Test applying the same source twice does not stack."""
        resolved = resolve_effects(["+1 AC"])
        apply_modifiers(fighter, "ring", resolved)
        apply_modifiers(fighter, "ring", resolved)

        assert fighter.total_modifier(AC) == 1

    def test_nothing_passive_is_not_recorded(self, fighter: CharacterState) -> None:
        """Test a source with only directives records no entry."""
        recorded = apply_modifiers(fighter, "periapt", resolve_effects(["APPLY_IMMUNITY[player|poison]"]))

        assert recorded is False
        assert fighter.active_modifiers == {}


class TestGrantLedger:
    """Tests for source ownership of reversible directives."""

    def test_grant_key(self) -> None:
        """Test only player defenses and conditions are tracked."""
        effects = resolve_effects(
            ["APPLY_RESISTANCE[You|FIRE]", "APPLY_RESISTANCE[Goblin|fire]", "STATUS_ADD[Blessed]", "HEAL[player|4]"]
        )

        keys = [grant_key(directive) for directive in effects.directives]

        assert keys == ["APPLY_RESISTANCE[player|fire]", None, "STATUS_ADD[blessed]", None]

    def test_innate_defense_not_owned(self, fighter: CharacterState) -> None:
        """Test a source does not take ownership of a defense already present."""
        fighter.immunities = ["poison"]
        effects = resolve_effects(["APPLY_IMMUNITY[player|poison]"])

        assert record_grants(fighter, "periapt", effects.directives) == []
        assert release_grants(fighter, "periapt") == []

    def test_release_waits_for_last_source(self, fighter: CharacterState) -> None:
        """Test a grant is undone only when its last source lets go."""
        effects = resolve_effects(["APPLY_RESISTANCE[player|cold]"])
        record_grants(fighter, "cloak", effects.directives)
        fighter.resistances = ["cold"]
        record_grants(fighter, "spell:1", effects.directives)

        assert release_grants(fighter, "cloak") == []
        assert [d.raw for d in release_grants(fighter, "spell:1")] == ["REMOVE_RESISTANCE[player|cold]"]
        assert fighter.granted_effects == {}

    def test_condition_presence_checked_on_session(self, fighter: CharacterState, session: SessionState) -> None:
        """Test a condition the session already has is treated as innate."""
        session.conditions.append(StatusCondition(name="Blessed"))
        effects = resolve_effects(["STATUS_ADD[blessed]"])

        assert record_grants(fighter, "amulet", effects.directives, session) == []
        assert record_grants(fighter, "charm", effects.directives) == ["STATUS_ADD[blessed]"]
        assert [d.raw for d in release_grants(fighter, "charm")] == ["STATUS_REMOVE[blessed]"]
