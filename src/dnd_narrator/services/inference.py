"""Rule-based item and spell inference from names alone.

Used whenever the external generator is absent or fails, so an unknown
name still yields a usable definition.
"""

from __future__ import annotations

import re

from dnd_narrator.models.catalog import ItemDefinition, SpellDefinition, slugify
from dnd_narrator.models.enums import ArmorType, DurationUnit, ItemCategory


_PLUS_BONUS = re.compile(r"\+(\d)")

# Longer names first so "breastplate" is not read as "plate"
_ARMOR_KEYWORDS: list[tuple[str, ArmorType, int]] = [
    ("half plate", ArmorType.MEDIUM, 15),
    ("breastplate", ArmorType.MEDIUM, 14),
    ("plate", ArmorType.HEAVY, 18),
    ("chain mail", ArmorType.HEAVY, 16),
    ("splint", ArmorType.HEAVY, 17),
    ("scale", ArmorType.MEDIUM, 14),
    ("chain shirt", ArmorType.MEDIUM, 13),
    ("hide", ArmorType.MEDIUM, 12),
    ("studded", ArmorType.LIGHT, 12),
    ("leather", ArmorType.LIGHT, 11),
    ("padded", ArmorType.LIGHT, 11),
]

_STANDALONE_ARMOR = frozenset({"plate", "half plate", "breastplate", "splint", "studded", "chain shirt"})

_WEAPON_KEYWORDS: list[tuple[str, str, str]] = [
    ("greatsword", "2d6", "slashing"),
    ("greataxe", "1d12", "slashing"),
    ("longsword", "1d8", "slashing"),
    ("shortsword", "1d6", "piercing"),
    ("rapier", "1d8", "piercing"),
    ("scimitar", "1d6", "slashing"),
    ("dagger", "1d4", "piercing"),
    ("axe", "1d8", "slashing"),
    ("mace", "1d6", "bludgeoning"),
    ("hammer", "1d8", "bludgeoning"),
    ("spear", "1d6", "piercing"),
    ("staff", "1d6", "bludgeoning"),
    ("longbow", "1d8", "piercing"),
    ("crossbow", "1d8", "piercing"),
    ("bow", "1d6", "piercing"),
    ("sword", "1d8", "slashing"),
    ("blade", "1d6", "slashing"),
]

_DAMAGE_TYPES = ("acid", "cold", "fire", "force", "lightning", "necrotic", "poison", "psychic", "radiant", "thunder")


def infer_damage_type(name: str) -> str:
    """Guess a damage type from descriptive words in a name."""
    lower = name.lower()
    for pattern, damage_type in (
        (r"fire|flam|burn|heat|inferno", "fire"),
        (r"ice|cold|frost|freez|chill", "cold"),
        (r"lightning|shock|storm", "lightning"),
        (r"thunder", "thunder"),
        (r"acid|corros", "acid"),
        (r"poison|venom|toxic", "poison"),
        (r"necrotic|death|drain|wither", "necrotic"),
        (r"radiant|holy|divine|light", "radiant"),
        (r"psychic|mind|mental", "psychic"),
    ):
        if re.search(pattern, lower):
            return damage_type
    return "force"


def infer_item_definition(name: str, *, item_id: str | None = None) -> ItemDefinition:
    """Infer a plausible item definition from its name.

    Args:
        name: Display name, e.g. 'Flaming Longsword +1'.
        item_id: Catalog id to keep (the placeholder id when merging).

    Returns:
        A non-placeholder ItemDefinition.
    """
    lower = name.lower()
    item_id = item_id or slugify(name)
    bonus_match = _PLUS_BONUS.search(name)
    bonus = int(bonus_match.group(1)) if bonus_match else 0
    base: dict[str, object] = {"id": item_id, "name": name, "description": f"Inferred from the name '{name}'."}

    if "potion" in lower or "elixir" in lower:
        effects: list[str] = []
        if "heal" in lower:
            effects.append("HEAL[player|4d4+4]" if "greater" in lower else "HEAL[player|2d4+2]")
        elif "resist" in lower:
            damage_type = next((kind for kind in _DAMAGE_TYPES if kind in lower), "fire")
            effects.append(f"APPLY_RESISTANCE[player|{damage_type}]")
        return ItemDefinition.model_validate(
            {**base, "category": ItemCategory.CONSUMABLE, "consumable": True, "effects": effects,
             "rarity": "uncommon" if effects else "common"}
        )

    if "protection" in lower and ("ring" in lower or "cloak" in lower):
        return ItemDefinition.model_validate(
            {**base, "category": ItemCategory.MAGIC_ITEM, "effects": ["+1 AC", "+1 saves"], "rarity": "rare"}
        )

    if "shield" in lower:
        return ItemDefinition.model_validate(
            {**base, "category": ItemCategory.ARMOR, "armor_type": ArmorType.SHIELD, "ac_bonus": 2 + bonus}
        )

    for keyword, armor_type, base_ac in _ARMOR_KEYWORDS:
        if keyword in lower and ("armor" in lower or "mail" in lower or keyword in _STANDALONE_ARMOR):
            return ItemDefinition.model_validate(
                {**base, "category": ItemCategory.ARMOR, "armor_type": armor_type, "base_ac": base_ac + bonus,
                 "rarity": "uncommon" if bonus else "common"}
            )

    for keyword, damage, damage_type in _WEAPON_KEYWORDS:
        if keyword in lower:
            effects = [f"+{bonus} to hit", f"+{bonus} damage"] if bonus else []
            properties = ["finesse"] if keyword in ("rapier", "dagger", "scimitar", "shortsword") else []
            if "bow" in keyword:
                properties.append("ranged")
            return ItemDefinition.model_validate(
                {**base, "category": ItemCategory.WEAPON, "damage": damage,
                 "damage_type": infer_damage_type(name) if any(
                     word in lower for word in ("flam", "frost", "shock", "venom", "holy")) else damage_type,
                 "properties": properties, "effects": effects, "rarity": "uncommon" if bonus else "common"}
            )

    if "ring" in lower or "amulet" in lower or "cloak" in lower or "wand" in lower:
        return ItemDefinition.model_validate({**base, "category": ItemCategory.MAGIC_ITEM, "rarity": "uncommon"})

    return ItemDefinition.model_validate({**base, "category": ItemCategory.GEAR})


def infer_spell_definition(name: str, level: int = 0) -> SpellDefinition:
    """Infer a spell definition from its name and level.

    Damage and healing stay with explicit directives; inferred spells only
    carry the lasting buffs or conditions a cast leaves behind.
    """
    lower = name.lower()
    spell: dict[str, object] = {
        "id": slugify(name, "-"),
        "name": name,
        "level": max(0, min(level, 9)),
        "generated": True,
    }

    if re.search(r"shield|armor|bless|enhance|haste|heroism|protection|aid", lower) and not re.search(
        r"bolt|missile|ray|blast|strike", lower
    ):
        if re.search(r"shield", lower) and not re.search(r"fire|ice", lower):
            effects = ["+5 AC"]
        elif re.search(r"armor|protection", lower):
            effects = ["+3 AC"]
        elif re.search(r"bless|aid|heroism", lower):
            effects = ["+1 to hit", "+1 saves"]
        elif re.search(r"haste", lower):
            effects = ["+2 AC"]
        else:
            effects = ["+2 saves"]
        return SpellDefinition.model_validate(
            {**spell, "school": "abjuration", "concentration": level > 0 and "shield" not in lower,
             "effects": effects, "duration": max(1, level // 2), "duration_unit": DurationUnit.MINUTES}
        )

    if re.search(r"bane|slow|hold|charm|sleep|fear|curse|weakness|blindness", lower):
        return SpellDefinition.model_validate(
            {**spell, "school": "enchantment", "concentration": True,
             "duration": max(1, level // 2), "duration_unit": DurationUnit.MINUTES}
        )

    if re.search(r"bolt|missile|ray|blast|arrow|strike|flam|shock|beam|fire|ice|lightning|storm", lower):
        return SpellDefinition.model_validate({**spell, "school": "evocation"})

    if re.search(r"cure|heal|restoration|prayer", lower):
        return SpellDefinition.model_validate({**spell, "school": "evocation"})

    unit = DurationUnit.HOURS if "hour" in lower else DurationUnit.MINUTES
    return SpellDefinition.model_validate(
        {**spell, "school": "transmutation", "concentration": level >= 3, "duration_unit": unit}
    )


__all__ = [
    "infer_damage_type",
    "infer_item_definition",
    "infer_spell_definition",
]
