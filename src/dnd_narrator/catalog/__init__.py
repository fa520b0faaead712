"""Global catalogs and lookups spanning global and world catalogs.

Items and spells resolve against the global catalog first and the world
catalog second. Monster templates resolve world first, so a campaign can
restat a familiar creature.
"""

from __future__ import annotations

from dnd_narrator.catalog.items import ITEMS
from dnd_narrator.catalog.monsters import MONSTERS
from dnd_narrator.catalog.spells import SPELLS
from dnd_narrator.models.catalog import ItemDefinition, MonsterTemplate, SpellDefinition, World


def resolve_item(identifier: str, world: World | None = None) -> ItemDefinition | None:
    """Resolve an item by id, slug or case-insensitive name.

    Args:
        identifier: Id or display name from a directive.
        world: Optional world whose catalog is consulted second.

    Returns:
        The definition, or None if neither catalog knows it.
    """
    if not identifier or not identifier.strip():
        return None
    found = next((item for item in ITEMS.values() if item.matches(identifier)), None)
    if found is None and world is not None:
        found = world.find_item(identifier)
    return found


def resolve_spell(identifier: str, world: World | None = None) -> SpellDefinition | None:
    if not identifier or not identifier.strip():
        return None
    found = next((spell for spell in SPELLS.values() if spell.matches(identifier)), None)
    if found is None and world is not None:
        found = world.find_spell(identifier)
    return found


def resolve_monster(identifier: str, world: World | None = None) -> MonsterTemplate | None:
    if not identifier or not identifier.strip():
        return None
    if world is not None:
        found = world.find_monster(identifier)
        if found is not None:
            return found
    return next((monster for monster in MONSTERS.values() if monster.matches(identifier)), None)


__all__ = [
    "ITEMS",
    "MONSTERS",
    "SPELLS",
    "resolve_item",
    "resolve_spell",
    "resolve_monster",
]
