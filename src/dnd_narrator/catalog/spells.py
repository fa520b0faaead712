"""Global spell catalog.

Damage and healing are narrated through explicit DAMAGE/HEAL directives,
so catalog spells only carry the lasting effects a cast leaves behind.
"""

from __future__ import annotations

from dnd_narrator.models.catalog import SpellDefinition


_SPELL_DATA: list[dict[str, object]] = [
    # Cantrips
    {"id": "fire-bolt", "name": "Fire Bolt", "level": 0, "school": "evocation"},
    {"id": "mage-hand", "name": "Mage Hand", "level": 0, "school": "conjuration"},
    {"id": "light", "name": "Light", "level": 0, "school": "evocation"},
    {"id": "prestidigitation", "name": "Prestidigitation", "level": 0, "school": "transmutation"},
    {"id": "ray-of-frost", "name": "Ray of Frost", "level": 0, "school": "evocation"},
    {"id": "sacred-flame", "name": "Sacred Flame", "level": 0, "school": "evocation"},
    {"id": "vicious-mockery", "name": "Vicious Mockery", "level": 0, "school": "enchantment"},
    # 1st level
    {"id": "magic-missile", "name": "Magic Missile", "level": 1, "school": "evocation"},
    {"id": "cure-wounds", "name": "Cure Wounds", "level": 1, "school": "evocation"},
    {"id": "healing-word", "name": "Healing Word", "level": 1, "school": "evocation"},
    {"id": "shield", "name": "Shield", "level": 1, "school": "abjuration",
     "effects": ["+5 AC"], "duration": 1, "duration_unit": "rounds"},
    {"id": "bless", "name": "Bless", "level": 1, "school": "enchantment", "concentration": True,
     "effects": ["+1 to hit", "+1 saves"], "duration": 1, "duration_unit": "minutes"},
    {"id": "mage-armor", "name": "Mage Armor", "level": 1, "school": "abjuration",
     "effects": ["+3 AC"], "duration": 8, "duration_unit": "hours"},
    {"id": "shield-of-faith", "name": "Shield of Faith", "level": 1, "school": "abjuration",
     "concentration": True, "effects": ["+2 AC"], "duration": 10, "duration_unit": "minutes"},
    {"id": "detect-magic", "name": "Detect Magic", "level": 1, "school": "divination",
     "concentration": True, "duration": 10, "duration_unit": "minutes"},
    {"id": "thunderwave", "name": "Thunderwave", "level": 1, "school": "evocation"},
    {"id": "sleep", "name": "Sleep", "level": 1, "school": "enchantment"},
    # 2nd level
    {"id": "misty-step", "name": "Misty Step", "level": 2, "school": "conjuration"},
    {"id": "hold-person", "name": "Hold Person", "level": 2, "school": "enchantment", "concentration": True,
     "duration": 1, "duration_unit": "minutes"},
    {"id": "invisibility", "name": "Invisibility", "level": 2, "school": "illusion", "concentration": True,
     "effects": ["STATUS_ADD[Invisible]"], "duration": 1, "duration_unit": "hours"},
    # 3rd level
    {"id": "fireball", "name": "Fireball", "level": 3, "school": "evocation"},
    {"id": "haste", "name": "Haste", "level": 3, "school": "transmutation", "concentration": True,
     "effects": ["+2 AC", "advantage on dexterity saves"], "duration": 1, "duration_unit": "minutes"},
    {"id": "protection-from-energy", "name": "Protection from Energy", "level": 3, "school": "abjuration",
     "concentration": True, "effects": ["APPLY_RESISTANCE[player|fire]"], "duration": 1,
     "duration_unit": "hours"},
]


SPELLS: dict[str, SpellDefinition] = {
    entry["id"]: SpellDefinition.model_validate(entry) for entry in _SPELL_DATA  # type: ignore[misc]
}


__all__ = ["SPELLS"]
