"""Global seed item catalog.

Only mechanically important items live here. Everything else is generated
on demand into the world catalog.
"""

from __future__ import annotations

from dnd_narrator.models.catalog import ItemDefinition


_ITEM_DATA: list[dict[str, object]] = [
    # --- Simple weapons ---
    {"id": "dagger", "name": "Dagger", "category": "weapon", "damage": "1d4", "damage_type": "piercing",
     "properties": ["finesse", "light", "thrown"], "weight": 1, "value": 2,
     "description": "A simple stabbing weapon."},
    {"id": "quarterstaff", "name": "Quarterstaff", "category": "weapon", "damage": "1d6",
     "damage_type": "bludgeoning", "properties": ["versatile"], "weight": 4, "value": 0.2,
     "description": "A sturdy wooden staff."},
    {"id": "shortbow", "name": "Shortbow", "category": "weapon", "damage": "1d6", "damage_type": "piercing",
     "properties": ["ammunition", "ranged", "two-handed"], "weight": 2, "value": 25,
     "description": "A basic bow for hunting."},
    # --- Martial weapons ---
    {"id": "longsword", "name": "Longsword", "category": "weapon", "damage": "1d8", "damage_type": "slashing",
     "properties": ["versatile"], "weight": 3, "value": 15,
     "description": "A standard sword for knights and warriors."},
    {"id": "greatsword", "name": "Greatsword", "category": "weapon", "damage": "2d6", "damage_type": "slashing",
     "properties": ["heavy", "two-handed"], "weight": 6, "value": 50,
     "description": "A massive two-handed blade."},
    {"id": "battleaxe", "name": "Battleaxe", "category": "weapon", "damage": "1d8", "damage_type": "slashing",
     "properties": ["versatile"], "weight": 4, "value": 10, "description": "A heavy axe built for war."},
    {"id": "rapier", "name": "Rapier", "category": "weapon", "damage": "1d8", "damage_type": "piercing",
     "properties": ["finesse"], "weight": 2, "value": 25, "description": "A slender thrusting blade."},
    {"id": "longbow", "name": "Longbow", "category": "weapon", "damage": "1d8", "damage_type": "piercing",
     "properties": ["ammunition", "heavy", "ranged", "two-handed"], "weight": 2, "value": 50,
     "description": "A tall bow with long reach."},
    # --- Armor ---
    {"id": "leather_armor", "name": "Leather Armor", "category": "armor", "armor_type": "light", "base_ac": 11,
     "weight": 10, "value": 10, "description": "Boiled leather vest and greaves."},
    {"id": "studded_leather", "name": "Studded Leather", "category": "armor", "armor_type": "light",
     "base_ac": 12, "weight": 13, "value": 45, "description": "Leather armor reinforced with metal studs."},
    {"id": "chain_shirt", "name": "Chain Shirt", "category": "armor", "armor_type": "medium", "base_ac": 13,
     "weight": 20, "value": 50, "description": "A shirt made of interlocking metal rings."},
    {"id": "scale_mail", "name": "Scale Mail", "category": "armor", "armor_type": "medium", "base_ac": 14,
     "properties": ["stealth_disadvantage"], "weight": 45, "value": 50,
     "description": "Armor made of overlapping metal scales."},
    {"id": "chain_mail", "name": "Chain Mail", "category": "armor", "armor_type": "heavy", "base_ac": 16,
     "properties": ["stealth_disadvantage"], "weight": 55, "value": 75,
     "description": "Full suit of interlocking metal rings."},
    {"id": "plate", "name": "Plate", "category": "armor", "armor_type": "heavy", "base_ac": 18,
     "properties": ["stealth_disadvantage"], "weight": 65, "value": 1500,
     "description": "Full plate armor."},
    {"id": "shield", "name": "Shield", "category": "armor", "armor_type": "shield", "ac_bonus": 2,
     "weight": 6, "value": 10, "description": "A wooden or metal shield."},
    # --- Consumables ---
    {"id": "healing_potion", "name": "Potion of Healing", "category": "consumable", "consumable": True,
     "effects": ["HEAL[player|2d4+2]"], "weight": 0.5, "value": 50,
     "description": "A red liquid that heals 2d4+2 hit points."},
    {"id": "greater_healing_potion", "name": "Potion of Greater Healing", "category": "consumable",
     "consumable": True, "effects": ["HEAL[player|4d4+4]"], "weight": 0.5, "value": 150,
     "rarity": "uncommon", "description": "Heals 4d4+4 hit points."},
    {"id": "potion_of_heroism", "name": "Potion of Heroism", "category": "consumable", "consumable": True,
     "effects": ["TEMP_HP[player|10]", "+1 to hit", "+1 saves"], "duration": 10, "duration_unit": "minutes",
     "weight": 0.5, "value": 180, "rarity": "rare",
     "description": "Grants 10 temporary hit points and a blessing for one minute."},
    # --- Magic items ---
    {"id": "ring_of_protection", "name": "Ring of Protection", "category": "magic_item",
     "effects": ["+1 AC", "+1 saves"], "value": 3500, "rarity": "rare",
     "description": "+1 bonus to AC and saving throws."},
    {"id": "cloak_of_protection", "name": "Cloak of Protection", "category": "magic_item",
     "effects": ["+1 AC", "+1 saves"], "weight": 1, "value": 3500, "rarity": "uncommon",
     "description": "+1 bonus to AC and saving throws."},
    {"id": "ring_of_fire_resistance", "name": "Ring of Fire Resistance", "category": "magic_item",
     "effects": ["APPLY_RESISTANCE[player|fire]"], "value": 6000, "rarity": "rare",
     "description": "You have resistance to fire damage while wearing this ring."},
    {"id": "periapt_of_proof_against_poison", "name": "Periapt of Proof against Poison",
     "category": "magic_item", "effects": ["APPLY_IMMUNITY[player|poison]", "advantage on poison saves"],
     "value": 5000, "rarity": "rare", "description": "Poison cannot harm you."},
    # --- Gear ---
    {"id": "rope", "name": "Rope (50 ft)", "category": "gear", "weight": 10, "value": 1,
     "description": "Hemp rope, 50 feet long."},
    {"id": "torch", "name": "Torch", "category": "gear", "weight": 1, "value": 0.01,
     "description": "Burns for one hour."},
    {"id": "rations", "name": "Rations (1 day)", "category": "gear", "weight": 2, "value": 0.5,
     "description": "Dry food for one day."},
    {"id": "bedroll", "name": "Bedroll", "category": "gear", "weight": 7, "value": 1,
     "description": "A simple bedroll."},
    {"id": "thieves_tools", "name": "Thieves Tools", "category": "gear", "weight": 1, "value": 25,
     "description": "Picks and files for opening locks."},
]


ITEMS: dict[str, ItemDefinition] = {
    entry["id"]: ItemDefinition.model_validate(entry) for entry in _ITEM_DATA  # type: ignore[misc]
}


__all__ = ["ITEMS"]
