"""Tests for damage, healing, temporary hit points and defense toggles."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from dnd_narrator.core.exceptions import CombatError, DirectiveError
from dnd_narrator.directives.context import SessionContext
from dnd_narrator.directives.dispatcher import DispatchOrchestrator
from dnd_narrator.directives.handlers import CombatHandler, HandlerOutcome, HandlerResult
from dnd_narrator.directives.parser import DirectiveParser
from dnd_narrator.models.enums import NotificationKind
from dnd_narrator.models.session import CombatEncounter, Combatant, ConcentrationState


if TYPE_CHECKING:
    from conftest import ScriptedRoller


@pytest.fixture
def handler() -> CombatHandler:
    """Provide a combat handler."""
    return CombatHandler()


@pytest.fixture
def goblin(context: SessionContext) -> Combatant:
    """Put a goblin into an active encounter."""
    combatant = Combatant(template_id="goblin", name="Goblin", current_hp=7, max_hp=7, armor_class=15)
    context.session.combat = CombatEncounter(enemies=[combatant])
    return context.session.combat.enemies[0]


def run(handler: CombatHandler, context: SessionContext, text: str) -> HandlerResult:
    """Parse a single directive and hand it to the handler."""
    directive = DirectiveParser().parse(text).directives[0]
    return handler.handle(directive, context)


class TestPlayerDamage:
    """Tests for DAMAGE against the player."""

    def test_flat_damage(self, handler: CombatHandler, context: SessionContext) -> None:
        """Test flat typed damage reduces hit points."""
        result = run(handler, context, "DAMAGE[player|5|slashing]")

        assert context.character.current_hp == 23
        assert result.notifications[0].kind == NotificationKind.COMBAT
        assert result.notifications[0].content == "You take 5 slashing damage [HP: 23/28]"

    def test_dice_damage(
        self,
        handler: CombatHandler,
        context: SessionContext,
        scripted_roller: ScriptedRoller,
    ) -> None:
        """Test dice amounts are rolled through the context roller."""
        scripted_roller.push(7)

        run(handler, context, "DAMAGE[you|2d6|fire]")

        assert context.character.current_hp == 21
        assert scripted_roller.expressions == ["2d6"]

    def test_resistance_in_message(self, handler: CombatHandler, context: SessionContext) -> None:
        """Test resisted damage is halved and labelled."""
        context.character.resistances = ["fire"]

        result = run(handler, context, "DAMAGE[player|9|Fire]")

        assert context.character.current_hp == 24
        assert result.notifications[0].content == "You take 4 fire damage (Resisted) [HP: 24/28]"

    def test_temp_hp_absorbs(self, handler: CombatHandler, context: SessionContext) -> None:
        """Test temporary hit points absorb damage and are mirrored on the session."""
        context.character.temp_hp = 4
        context.session.temp_hp = 4

        run(handler, context, "DAMAGE[player|6]")

        assert context.character.temp_hp == 0
        assert context.session.temp_hp == 0
        assert context.character.current_hp == 26

    def test_hit_points_floor_at_zero(self, handler: CombatHandler, context: SessionContext) -> None:
        """Test hit points never go negative."""
        run(handler, context, "DAMAGE[player|100]")

        assert context.character.current_hp == 0

    @pytest.mark.parametrize("text", ["DAMAGE[player|lots]", "DAMAGE[|5]"])
    def test_unusable_payload_ignored(self, handler: CombatHandler, context: SessionContext, text: str) -> None:
        """Test a missing target or non-numeric amount is a no-op."""
        assert run(handler, context, text).outcome == HandlerOutcome.IGNORED
        assert context.character.current_hp == 28


class TestConcentrationOnDamage:
    """Tests for concentration saves triggered by damage."""

    def test_failed_save_breaks_concentration(
        self,
        handler: CombatHandler,
        wizard_context: SessionContext,
        scripted_roller: ScriptedRoller,
    ) -> None:
        """Test a failed constitution save ends concentration with a notification."""
        wizard_context.session.concentration = ConcentrationState(spell_name="Bless")
        scripted_roller.push(3)

        result = run(handler, wizard_context, "DAMAGE[player|6]")

        assert wizard_context.session.concentration is None
        broken = result.notifications[-1]
        assert broken.kind == NotificationKind.CONCENTRATION
        assert broken.content == "Concentration Broken! Bless ends (rolled 4 vs DC 10)"

    def test_successful_save_keeps_concentration(
        self,
        handler: CombatHandler,
        wizard_context: SessionContext,
        scripted_roller: ScriptedRoller,
    ) -> None:
        """Test a passed save leaves concentration in place."""
        wizard_context.session.concentration = ConcentrationState(spell_name="Bless")
        scripted_roller.push(15)

        result = run(handler, wizard_context, "DAMAGE[player|6]")

        assert wizard_context.session.concentration is not None
        assert len(result.notifications) == 1

    def test_no_save_when_fully_absorbed(
        self,
        handler: CombatHandler,
        wizard_context: SessionContext,
        scripted_roller: ScriptedRoller,
    ) -> None:
        """Test damage absorbed by temporary hit points triggers no save."""
        wizard_context.session.concentration = ConcentrationState(spell_name="Bless")
        wizard_context.character.temp_hp = 10

        run(handler, wizard_context, "DAMAGE[player|6]")

        assert scripted_roller.expressions == []
        assert wizard_context.session.concentration is not None


class TestEnemyDamage:
    """Tests for DAMAGE against encounter combatants."""

    def test_enemy_not_found_is_deferred(self, handler: CombatHandler, context: SessionContext) -> None:
        """Test damage to an unknown combatant waits for a later pass."""
        assert run(handler, context, "DAMAGE[Goblin|5]").outcome == HandlerOutcome.DEFERRED

    def test_damage_enemy(self, handler: CombatHandler, context: SessionContext, goblin: Combatant) -> None:
        """Test damage is applied to a matching combatant."""
        result = run(handler, context, "DAMAGE[goblin|5|slashing]")

        assert goblin.current_hp == 2
        assert result.notifications[0].content == "Goblin takes 5 damage [HP: 2/7]"

    def test_enemy_dies_at_zero(self, handler: CombatHandler, context: SessionContext, goblin: Combatant) -> None:
        """Test a combatant reduced to zero gains the Dead condition once."""
        run(handler, context, "DAMAGE[Goblin|10]")

        assert goblin.current_hp == 0
        assert goblin.is_defeated
        assert goblin.conditions == ["Dead"]

    def test_defeated_enemy_raises(self, handler: CombatHandler, context: SessionContext, goblin: Combatant) -> None:
        """Test damaging a defeated combatant is a combat error."""
        goblin.current_hp = 0
        context.session.combat.round = 4  # type: ignore[union-attr]

        with pytest.raises(CombatError) as exc_info:
            run(handler, context, "DAMAGE[Goblin|3]")

        assert exc_info.value.details == {"combatant_id": goblin.id, "round_number": 4}

    def test_defeated_enemy_ignored_by_dispatch(self, context: SessionContext, goblin: Combatant) -> None:
        """Test the orchestrator drops the failed directive and keeps going."""
        goblin.current_hp = 0

        result = DispatchOrchestrator(context).process_final("DAMAGE[Goblin|3] DAMAGE[player|2]")

        assert goblin.current_hp == 0
        assert context.character.current_hp == 26
        assert len(result.applied) == 1

    def test_enemy_vulnerability(self, handler: CombatHandler, context: SessionContext, goblin: Combatant) -> None:
        """Test combatant defenses apply."""
        goblin.vulnerabilities = ["bludgeoning"]

        result = run(handler, context, "DAMAGE[Goblin|3|bludgeoning]")

        assert goblin.current_hp == 1
        assert "(Vulnerable! x2)" in result.notifications[0].content


class TestHealing:
    """Tests for HEAL and TEMP_HP."""

    def test_heal_capped(self, handler: CombatHandler, context: SessionContext) -> None:
        """Test healing never exceeds maximum hit points."""
        context.character.current_hp = 25

        result = run(handler, context, "HEAL[player|10]")

        assert context.character.current_hp == 28
        assert result.notifications[0].content == "Healed 3 HP [HP: 28/28]"

    def test_heal_from_zero_resets_death_saves(self, handler: CombatHandler, context: SessionContext) -> None:
        """Test waking up clears death save tallies."""
        context.character.current_hp = 0
        context.character.death_saves.failures = 2
        context.character.death_saves.successes = 1

        run(handler, context, "HEAL[player|4]")

        assert context.character.current_hp == 4
        assert context.character.death_saves.failures == 0
        assert context.character.death_saves.successes == 0

    def test_heal_other_target_ignored(self, handler: CombatHandler, context: SessionContext, goblin: Combatant) -> None:
        """Test only the player can be healed."""
        goblin.current_hp = 1

        assert run(handler, context, "HEAL[Goblin|5]").outcome == HandlerOutcome.IGNORED
        assert goblin.current_hp == 1

    def test_temp_hp_does_not_stack(self, handler: CombatHandler, context: SessionContext) -> None:
        """Test a lower grant keeps the existing temporary hit points."""
        granted = run(handler, context, "TEMP_HP[player|8]")
        kept = run(handler, context, "TEMP_HP[player|5]")

        assert context.character.temp_hp == 8
        assert context.session.temp_hp == 8
        assert granted.notifications[0].content == "Temporary HP: You now have 8"
        assert kept.notifications[0].content == "Temporary HP: You kept 8 (does not stack)"

    def test_temp_hp_enemy(self, handler: CombatHandler, context: SessionContext, goblin: Combatant) -> None:
        """Test combatants can receive temporary hit points."""
        run(handler, context, "TEMP_HP[Goblin|3]")

        assert goblin.temp_hp == 3


class TestDefenseToggles:
    """Tests for the resistance, immunity and vulnerability toggles."""

    def test_apply_and_remove(self, handler: CombatHandler, context: SessionContext) -> None:
        """Test toggles add and remove lowercased damage types."""
        applied = run(handler, context, "APPLY_RESISTANCE[player|Fire]")
        assert context.character.resistances == ["fire"]
        assert applied.notifications[0].content == "You gained fire resistance"

        removed = run(handler, context, "REMOVE_RESISTANCE[player|fire]")
        assert context.character.resistances == []
        assert removed.notifications[0].content == "You lost fire resistance"

    def test_no_change_is_silent(self, handler: CombatHandler, context: SessionContext) -> None:
        """Test toggles that change nothing produce no notification."""
        run(handler, context, "APPLY_IMMUNITY[player|poison]")

        repeat = run(handler, context, "APPLY_IMMUNITY[player|poison]")
        absent = run(handler, context, "REMOVE_VULNERABILITY[player|cold]")

        assert repeat.outcome == HandlerOutcome.IGNORED
        assert repeat.notifications == []
        assert absent.outcome == HandlerOutcome.IGNORED

    def test_enemy_toggle(self, handler: CombatHandler, context: SessionContext, goblin: Combatant) -> None:
        """Test toggles reach combatants by name."""
        result = run(handler, context, "APPLY_VULNERABILITY[Goblin|radiant]")

        assert goblin.vulnerabilities == ["radiant"]
        assert result.notifications[0].content == "Goblin gained radiant vulnerability"

    def test_enemy_toggle_deferred(self, handler: CombatHandler, context: SessionContext) -> None:
        """Test toggles on an unknown combatant are deferred."""
        assert run(handler, context, "APPLY_RESISTANCE[Ogre|fire]").outcome == HandlerOutcome.DEFERRED


class TestRouting:
    """Tests for directive routing."""

    def test_unrouted_type_raises(self, handler: CombatHandler, context: SessionContext) -> None:
        """Test a directive the handler does not own is a directive error."""
        directive = DirectiveParser().parse("GOLD_CHANGE[5]").directives[0]

        with pytest.raises(DirectiveError) as exc_info:
            handler.handle(directive, context)

        assert exc_info.value.details["directive_type"] == "GOLD_CHANGE"
        assert context.session.currency_gp == pytest.approx(25.0)
