"""Tests for Armor Class derivation, equipment changes and consumables."""

from __future__ import annotations

import pytest

from dnd_narrator.catalog import ITEMS
from dnd_narrator.core.config import RulesSettings
from dnd_narrator.directives.types import DirectiveType
from dnd_narrator.models.catalog import ItemDefinition, World
from dnd_narrator.models.character import CharacterState
from dnd_narrator.models.enums import DurationUnit, ItemCategory
from dnd_narrator.models.session import InventorySlot, SessionState
from dnd_narrator.services.effects import SAVES, TO_HIT
from dnd_narrator.services.equipment import (
    calculate_armor_class,
    consume_item,
    set_equipped,
)


class TestCalculateArmorClass:
    """Tests for the Armor Class formula."""

    def test_unarmored(self, fighter: CharacterState) -> None:
        """Test unarmored AC is 10 plus dexterity."""
        assert calculate_armor_class(fighter, []) == 12

    def test_heavy_ignores_dexterity(self, fighter: CharacterState) -> None:
        """Test heavy armor uses its base only, plus a shield."""
        assert calculate_armor_class(fighter, [ITEMS["chain_mail"]]) == 16
        assert calculate_armor_class(fighter, [ITEMS["chain_mail"], ITEMS["shield"]]) == 18

    def test_light_adds_full_dexterity(self, fighter: CharacterState) -> None:
        """Test light armor adds the whole dexterity modifier."""
        fighter.stats.dexterity = 18

        assert calculate_armor_class(fighter, [ITEMS["leather_armor"]]) == 15

    def test_medium_caps_dexterity(self, fighter: CharacterState) -> None:
        """Test medium armor caps dexterity at the configured limit."""
        fighter.stats.dexterity = 18

        assert calculate_armor_class(fighter, [ITEMS["scale_mail"]]) == 16
        assert calculate_armor_class(fighter, [ITEMS["scale_mail"]], RulesSettings(medium_armor_dex_cap=3)) == 17

    @pytest.mark.parametrize(
        ("class_name", "with_shield", "expected"),
        [
            ("Barbarian", False, 14),
            ("Barbarian", True, 16),
            ("Monk", False, 13),
            ("Monk", True, 14),
        ],
    )
    def test_unarmored_defense(
        self,
        fighter: CharacterState,
        class_name: str,
        with_shield: bool,
        expected: int,
    ) -> None:
        """Test class unarmored defense, which monks lose behind a shield."""
        fighter.class_name = class_name
        equipped = [ITEMS["shield"]] if with_shield else []

        assert calculate_armor_class(fighter, equipped) == expected

    def test_armor_ignores_unarmored_defense(self, fighter: CharacterState) -> None:
        """Test worn armor replaces the class feature."""
        fighter.class_name = "Barbarian"

        assert calculate_armor_class(fighter, [ITEMS["chain_mail"]]) == 16


class TestSetEquipped:
    """Tests for equipping and unequipping owned items."""

    def test_equip_armor_and_shield(self, fighter: CharacterState, session: SessionState) -> None:
        """Test AC follows the equipped set."""
        armor = set_equipped(fighter, session, "Chain Mail", True)
        shield = set_equipped(fighter, session, "shield", True)

        assert armor.changed and armor.armor_class == 16
        assert shield.armor_class == 18
        assert fighter.armor_class == 18

    def test_repeat_is_noop(self, fighter: CharacterState, session: SessionState) -> None:
        """Test equipping twice or unequipping an unequipped item changes nothing."""
        set_equipped(fighter, session, "shield", True)

        assert set_equipped(fighter, session, "shield", True).changed is False
        assert set_equipped(fighter, session, "Chain Mail", False).changed is False

    def test_not_owned(self, fighter: CharacterState, session: SessionState) -> None:
        """Test an item not in the inventory cannot be equipped."""
        assert set_equipped(fighter, session, "Plate", True).changed is False

    def test_magic_item_modifiers(self, fighter: CharacterState, session: SessionState) -> None:
        """Test passive modifiers apply while worn and leave with the item."""
        session.inventory.append(InventorySlot(item_id="ring_of_protection", name="Ring of Protection"))

        set_equipped(fighter, session, "Ring of Protection", True)
        assert fighter.armor_class == 13
        assert fighter.total_modifier(SAVES) == 1

        set_equipped(fighter, session, "Ring of Protection", False)
        assert fighter.armor_class == 12
        assert fighter.active_modifiers == {}

    def test_directive_effects_and_inverses(self, fighter: CharacterState, session: SessionState) -> None:
        """Test directive effects are returned on equip and inverted on unequip."""
        session.inventory.append(InventorySlot(item_id="ring_of_fire_resistance", name="Ring of Fire Resistance"))

        equipped = set_equipped(fighter, session, "Ring of Fire Resistance", True)
        removed = set_equipped(fighter, session, "Ring of Fire Resistance", False)

        assert [d.raw for d in equipped.directives] == ["APPLY_RESISTANCE[player|fire]"]
        assert [d.raw for d in removed.directives] == ["REMOVE_RESISTANCE[player|fire]"]

    def test_inverse_kept_when_granted_elsewhere(
        self, fighter: CharacterState, session: SessionState, world: World
    ) -> None:
        """Test a resistance another worn item grants survives removing one of them."""
        world.upsert_item(
            ItemDefinition(
                id="flame_amulet",
                name="Flame Amulet",
                category=ItemCategory.MAGIC_ITEM,
                effects=["APPLY_RESISTANCE[player|fire]"],
            )
        )
        session.inventory.append(InventorySlot(item_id="ring_of_fire_resistance", name="Ring of Fire Resistance"))
        session.inventory.append(InventorySlot(item_id="flame_amulet", name="Flame Amulet"))

        set_equipped(fighter, session, "Ring of Fire Resistance", True, world=world)
        fighter.resistances.append("fire")
        set_equipped(fighter, session, "Flame Amulet", True, world=world)
        ring_off = set_equipped(fighter, session, "Ring of Fire Resistance", False, world=world)
        amulet_off = set_equipped(fighter, session, "Flame Amulet", False, world=world)

        assert ring_off.directives == []
        assert [d.raw for d in amulet_off.directives] == ["REMOVE_RESISTANCE[player|fire]"]
        assert fighter.granted_effects == {}

    def test_innate_resistance_never_undone(self, fighter: CharacterState, session: SessionState) -> None:
        """Test an item granting a resistance the character already has never removes it."""
        fighter.resistances = ["fire"]
        session.inventory.append(InventorySlot(item_id="ring_of_fire_resistance", name="Ring of Fire Resistance"))

        set_equipped(fighter, session, "Ring of Fire Resistance", True)
        removed = set_equipped(fighter, session, "Ring of Fire Resistance", False)

        assert removed.directives == []
        assert fighter.granted_effects == {}


class TestConsumeItem:
    """Tests for using consumables."""

    def test_healing_potion(self, fighter: CharacterState, session: SessionState) -> None:
        """Test a potion spends one unit and returns its heal."""
        result = consume_item(fighter, session, "Potion of Healing")

        assert result.consumed
        assert [d.type for d in result.directives] == [DirectiveType.HEAL]
        assert session.find_slot("healing_potion").quantity == 1  # type: ignore[union-attr]

    def test_timed_modifiers(self, fighter: CharacterState, session: SessionState) -> None:
        """Test a consumable with a duration starts a timed effect."""
        session.inventory.append(InventorySlot(item_id="potion_of_heroism", name="Potion of Heroism"))

        result = consume_item(fighter, session, "potion_of_heroism")

        assert [d.type for d in result.directives] == [DirectiveType.TEMP_HP]
        assert session.find_slot("potion_of_heroism") is None
        effect = session.spell_effects[0]
        assert (effect.remaining, effect.unit) == (100, DurationUnit.ROUNDS)
        assert fighter.total_modifier(TO_HIT) == 1

    @pytest.mark.parametrize(
        ("identifier", "message"),
        [
            ("Unobtainium", "Item not found: Unobtainium"),
            ("Greater Healing Potion", "You don't have any Potion of Greater Healing"),
            ("Longsword", "Longsword is not consumable"),
        ],
    )
    def test_refusals(
        self,
        fighter: CharacterState,
        session: SessionState,
        identifier: str,
        message: str,
    ) -> None:
        """Test each reason a consumable cannot be used."""
        result = consume_item(fighter, session, identifier)

        assert result.consumed is False
        assert result.message == message
