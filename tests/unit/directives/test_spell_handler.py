"""Tests for spellcasting and concentration directives."""

from __future__ import annotations

import pytest

from dnd_narrator.directives.context import SessionContext
from dnd_narrator.directives.handlers import HandlerOutcome, HandlerResult, SpellHandler
from dnd_narrator.directives.handlers.spells import split_cast_payload
from dnd_narrator.directives.parser import DirectiveParser
from dnd_narrator.directives.types import DirectiveType
from dnd_narrator.models.character import SpellSlotPool
from dnd_narrator.models.enums import NotificationKind


@pytest.fixture
def handler() -> SpellHandler:
    """Provide a spell handler."""
    return SpellHandler()


def run(handler: SpellHandler, context: SessionContext, text: str) -> HandlerResult:
    """Parse a single directive and hand it to the handler."""
    directive = DirectiveParser().parse(text).directives[0]
    return handler.handle(directive, context)


class TestSplitCastPayload:
    """Tests for reading the CAST_SPELL payload shapes."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("CAST_SPELL[Magic Missile]", ("Magic Missile", None)),
            ("CAST_SPELL[Magic Missile|2]", ("Magic Missile", 2)),
            ("CAST_SPELL[mage-armor|Mage Armor|1]", ("mage-armor", 1)),
            ("CAST_SPELL[custom_id|Shield|1]", ("Shield", 1)),
            ("CAST_SPELL[unknown_id|Bless]", ("Bless", None)),
            ("CAST_SPELL[]", (None, None)),
        ],
    )
    def test_shapes(self, wizard_context: SessionContext, text: str, expected: tuple[str | None, int | None]) -> None:
        """Test each accepted payload shape."""
        directive = DirectiveParser().parse(text).directives[0]

        assert split_cast_payload(directive, wizard_context) == expected


class TestCastSpell:
    """Tests for CAST_SPELL."""

    def test_spends_slot(self, handler: SpellHandler, wizard_context: SessionContext) -> None:
        """Test a levelled spell spends one slot of its level."""
        result = run(handler, wizard_context, "CAST_SPELL[Magic Missile|1]")

        assert result.outcome == HandlerOutcome.APPLIED
        assert wizard_context.character.spell_slots[1].current == 3
        assert result.notifications[0].content == "Cast Magic Missile (level 1 slot)"

    def test_upcast_spends_higher_slot(self, handler: SpellHandler, wizard_context: SessionContext) -> None:
        """Test casting at a higher level spends that level's slot."""
        run(handler, wizard_context, "CAST_SPELL[Magic Missile|2]")

        assert wizard_context.character.spell_slots[1].current == 4
        assert wizard_context.character.spell_slots[2].current == 1

    def test_cantrip_is_free(self, handler: SpellHandler, wizard_context: SessionContext) -> None:
        """Test cantrips spend nothing."""
        result = run(handler, wizard_context, "CAST_SPELL[fire-bolt]")

        assert result.notifications[0].content == "Cast Fire Bolt (Cantrip)"
        assert wizard_context.character.spell_slots[1].current == 4

    def test_exhausted_slot_refused(self, handler: SpellHandler, wizard_context: SessionContext) -> None:
        """Test a cast with no slot left is refused and changes nothing."""
        wizard_context.character.spell_slots[2].current = 0

        result = run(handler, wizard_context, "CAST_SPELL[Invisibility|2]")

        assert result.outcome == HandlerOutcome.REFUSED
        assert result.notifications[0].content == "No level 2 spell slots remaining!"
        assert wizard_context.session.concentration is None
        assert wizard_context.session.spell_effects == []

    def test_missing_slot_level_refused(self, handler: SpellHandler, wizard_context: SessionContext) -> None:
        """Test a level the caster has no pool for is refused."""
        result = run(handler, wizard_context, "CAST_SPELL[Fireball|3]")

        assert result.outcome == HandlerOutcome.REFUSED
        assert result.notifications[0].content == "No level 3 spell slots remaining!"

    def test_timed_ac_bonus(self, handler: SpellHandler, wizard_context: SessionContext) -> None:
        """Test an AC spell applies its bonus and tracks a duration."""
        run(handler, wizard_context, "CAST_SPELL[Shield|1]")

        assert wizard_context.character.armor_class == 17
        effect = wizard_context.session.spell_effects[0]
        assert effect.source_name == "Shield"
        assert effect.remaining == 1

    def test_concentration_spell(self, handler: SpellHandler, wizard_context: SessionContext) -> None:
        """Test a concentration spell starts concentration and notifies it."""
        result = run(handler, wizard_context, "CAST_SPELL[Bless|1]")

        assert wizard_context.session.concentration is not None
        assert wizard_context.session.concentration.spell_name == "Bless"
        assert result.notifications[-1].kind == NotificationKind.CONCENTRATION
        assert wizard_context.character.total_modifier("saves") == 1

    def test_new_concentration_replaces_old(self, handler: SpellHandler, wizard_context: SessionContext) -> None:
        """Test a second concentration spell ends the first and its modifiers."""
        run(handler, wizard_context, "CAST_SPELL[Bless|1]")
        run(handler, wizard_context, "CAST_SPELL[Shield of Faith|1]")

        character = wizard_context.character
        assert wizard_context.session.concentration.spell_name == "Shield of Faith"  # type: ignore[union-attr]
        assert character.total_modifier("saves") == 0
        assert character.armor_class == 14
        assert [fx.source_name for fx in wizard_context.session.spell_effects] == ["Shield of Faith"]

    def test_directive_effects_are_derived(self, handler: SpellHandler, wizard_context: SessionContext) -> None:
        """Test directive effects come back for re-injection."""
        result = run(handler, wizard_context, "CAST_SPELL[Invisibility|2]")

        assert [d.type for d in result.derived] == [DirectiveType.STATUS_ADD]
        assert result.derived[0].field(0) == "Invisible"

    def test_unknown_spell_is_inferred(self, handler: SpellHandler, wizard_context: SessionContext) -> None:
        """Test an uncatalogued spell still casts from rule-based inference."""
        result = run(handler, wizard_context, "CAST_SPELL[Arcane Lance|1]")

        assert result.outcome == HandlerOutcome.APPLIED
        assert wizard_context.character.spell_slots[1].current == 3


class TestLearnAndConcentration:
    """Tests for LEARN_SPELL and the concentration directives."""

    def test_learn_once(self, handler: SpellHandler, wizard_context: SessionContext) -> None:
        """Test learning is de-duplicated by name."""
        first = run(handler, wizard_context, "LEARN_SPELL[Fireball]")
        second = run(handler, wizard_context, "LEARN_SPELL[fireball]")

        assert first.outcome == HandlerOutcome.APPLIED
        assert second.outcome == HandlerOutcome.IGNORED
        known = wizard_context.character.known_spells
        assert [(spell.name, spell.level) for spell in known] == [("Fireball", 3)]

    def test_start_and_end(self, handler: SpellHandler, wizard_context: SessionContext) -> None:
        """Test explicit concentration start, repeat and end."""
        started = run(handler, wizard_context, "CONCENTRATION_START[Hex]")
        repeated = run(handler, wizard_context, "CONCENTRATION_START[hex]")
        ended = run(handler, wizard_context, "CONCENTRATION_END[]")
        again = run(handler, wizard_context, "CONCENTRATION_END[]")

        assert started.outcome == HandlerOutcome.APPLIED
        assert repeated.outcome == HandlerOutcome.IGNORED
        assert ended.notifications[0].content == "Concentration on Hex ended"
        assert again.outcome == HandlerOutcome.IGNORED
        assert wizard_context.session.concentration is None

    def test_end_removes_effect(self, handler: SpellHandler, wizard_context: SessionContext) -> None:
        """Test ending concentration removes the sustained effect and its grants."""
        wizard_context.character.spell_slots[3] = SpellSlotPool(current=1, max=1)
        run(handler, wizard_context, "CAST_SPELL[Protection from Energy|3]")

        result = run(handler, wizard_context, "CONCENTRATION_END[]")

        assert [d.type for d in result.derived] == [DirectiveType.REMOVE_RESISTANCE]
        assert wizard_context.session.spell_effects == []
