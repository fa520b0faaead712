"""Equipment transitions, consumables and derived Armor Class.

Armor Class is always recomputed from the full equipped set plus the
character's active modifiers; it is never adjusted incrementally.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from dnd_narrator.catalog import resolve_item
from dnd_narrator.core.config import RulesSettings
from dnd_narrator.core.logging import get_logger
from dnd_narrator.directives.types import Directive
from dnd_narrator.models.catalog import ItemDefinition, World
from dnd_narrator.models.character import CharacterState
from dnd_narrator.models.enums import Ability, ArmorType
from dnd_narrator.models.session import InventorySlot, SessionState
from dnd_narrator.services.effects import (
    AC,
    apply_modifiers,
    grant_key,
    record_grants,
    release_grants,
    remove_modifiers,
    resolve_effects,
)
from dnd_narrator.services.spellcasting import start_timed_effect


logger = get_logger(__name__)

UNARMORED_DEFENSE: dict[str, Ability] = {
    "barbarian": Ability.CON,
    "monk": Ability.WIS,
}


@dataclass
class EquipChange:
    """Outcome of an equip or unequip request."""

    changed: bool
    item: ItemDefinition | None = None
    armor_class: int | None = None
    directives: list[Directive] = field(default_factory=list)


@dataclass
class ConsumeResult:
    """Outcome of using a consumable."""

    consumed: bool
    message: str
    item: ItemDefinition | None = None
    directives: list[Directive] = field(default_factory=list)


# =============================================================================
# Armor Class
# =============================================================================


def equipped_items(session: SessionState, world: World | None = None) -> list[ItemDefinition]:
    """Catalog definitions for every equipped inventory slot."""
    items: list[ItemDefinition] = []
    for slot in session.inventory:
        if not slot.equipped:
            continue
        item = resolve_item(slot.item_id, world)
        if item is not None:
            items.append(item)
    return items


def calculate_armor_class(
    character: CharacterState,
    equipped: list[ItemDefinition],
    rules: RulesSettings | None = None,
) -> int:
    """Derive Armor Class from armor, shield, class features and modifiers.

    Args:
        character: Character whose dexterity and modifiers apply.
        equipped: Definitions of every equipped item.
        rules: Rules constants (dex cap, default shield bonus).

    Returns:
        The derived Armor Class.
    """
    rules = rules or RulesSettings()
    dex = character.stats.modifier(Ability.DEX)
    armor = next((item for item in equipped if item.is_armor), None)
    shield = next((item for item in equipped if item.is_shield), None)

    if armor is not None:
        base = armor.base_ac or 10
        if armor.armor_type == ArmorType.HEAVY:
            armor_class = base
        elif armor.armor_type == ArmorType.MEDIUM:
            armor_class = base + min(dex, rules.medium_armor_dex_cap)
        else:
            armor_class = base + dex
    else:
        armor_class = 10 + dex
        feature_ability = UNARMORED_DEFENSE.get(character.class_name.strip().lower())
        # Monks lose unarmored defense behind a shield
        if feature_ability is Ability.CON or (feature_ability is Ability.WIS and shield is None):
            armor_class += character.stats.modifier(feature_ability)

    if shield is not None:
        armor_class += shield.ac_bonus if shield.ac_bonus is not None else rules.default_shield_bonus

    return armor_class + character.total_modifier(AC)


def refresh_armor_class(
    character: CharacterState,
    session: SessionState,
    world: World | None = None,
    rules: RulesSettings | None = None,
) -> int:
    """Recompute and store the character's Armor Class."""
    armor_class = calculate_armor_class(character, equipped_items(session, world), rules)
    if armor_class != character.armor_class:
        logger.info("Armor class changed", old=character.armor_class, new=armor_class)
        character.armor_class = armor_class
    return armor_class


# =============================================================================
# Equip / Unequip
# =============================================================================


def find_owned_slot(session: SessionState, identifier: str, world: World | None = None) -> InventorySlot | None:
    """Locate the inventory slot a directive refers to."""
    item = resolve_item(identifier, world)
    if item is not None:
        slot = session.find_slot(item.id)
        if slot is not None:
            return slot
    return session.find_slot(identifier) or session.find_slot_by_name(identifier)


def apply_item_effects(
    character: CharacterState,
    item: ItemDefinition,
    session: SessionState | None = None,
) -> list[Directive]:
    """Record an item's modifiers and grants under its id; return its directives."""
    resolved = resolve_effects(item.effects)
    apply_modifiers(character, item.id, resolved, label=item.name)
    record_grants(character, item.id, resolved.directives, session)
    return list(resolved.directives)


def set_equipped(
    character: CharacterState,
    session: SessionState,
    identifier: str,
    equipped: bool,
    *,
    world: World | None = None,
    rules: RulesSettings | None = None,
) -> EquipChange:
    """Equip or unequip an owned item.

    Equipping an equipped item or unequipping one that is not equipped (or
    not owned) changes nothing.

    Args:
        character: Character whose modifiers and AC are updated.
        session: Session owning the inventory.
        identifier: Item id or name from the directive.
        equipped: Target state.
        world: World catalog for generated items.
        rules: Rules constants for AC derivation.

    Returns:
        EquipChange with the new AC and any directives to fold back in.
    """
    slot = find_owned_slot(session, identifier, world)
    if slot is None or slot.equipped == equipped:
        return EquipChange(changed=False)

    item = resolve_item(slot.item_id, world)
    slot.equipped = equipped
    directives: list[Directive] = []

    if item is not None:
        if equipped:
            directives = apply_item_effects(character, item, session)
        else:
            remove_modifiers(character, item.id)
            directives = release_grants(character, item.id)

    armor_class = refresh_armor_class(character, session, world, rules)
    logger.info("Equipment changed", item_id=slot.item_id, equipped=equipped, armor_class=armor_class)
    return EquipChange(changed=True, item=item, armor_class=armor_class, directives=directives)


# =============================================================================
# Consumables
# =============================================================================


def consume_item(
    character: CharacterState,
    session: SessionState,
    identifier: str,
    *,
    world: World | None = None,
    rules: RulesSettings | None = None,
) -> ConsumeResult:
    """Use one unit of a consumable and resolve its effects.

    Directive effects are returned for re-injection. Passive modifiers and
    reversible directives only persist when the item states a duration;
    the timed effect then undoes them when it runs out. Without a duration
    modifiers end with the consumed item and directives are permanent.

    Returns:
        ConsumeResult whose message is suitable for the user.
    """
    item = resolve_item(identifier, world)
    if item is None:
        return ConsumeResult(consumed=False, message=f"Item not found: {identifier}")

    slot = session.find_slot(item.id) or session.find_slot_by_name(item.name)
    if slot is None or slot.quantity <= 0:
        return ConsumeResult(consumed=False, message=f"You don't have any {item.name}", item=item)

    if not item.consumable:
        return ConsumeResult(consumed=False, message=f"{item.name} is not consumable", item=item)

    slot.quantity -= 1
    if slot.quantity <= 0:
        session.inventory.remove(slot)

    resolved = resolve_effects(item.effects)
    reversible = any(grant_key(directive) for directive in resolved.directives)
    if (resolved.has_passive or reversible) and item.duration > 0:
        start_timed_effect(
            character,
            session,
            source_id=item.id,
            source_name=item.name,
            resolved=resolved,
            duration=item.duration,
            unit=item.duration_unit,
        )
        refresh_armor_class(character, session, world, rules)

    logger.info("Consumable used", item_id=item.id, remaining=slot.quantity)
    return ConsumeResult(
        consumed=True,
        message=f"Used {item.name}",
        item=item,
        directives=list(resolved.directives),
    )


__all__ = [
    "UNARMORED_DEFENSE",
    "EquipChange",
    "ConsumeResult",
    "equipped_items",
    "calculate_armor_class",
    "refresh_armor_class",
    "find_owned_slot",
    "apply_item_effects",
    "set_equipped",
    "consume_item",
]
