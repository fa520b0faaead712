"""Global monster catalog used by ENEMY_SPAWN."""

from __future__ import annotations

from dnd_narrator.models.catalog import MonsterTemplate


_MONSTER_DATA: list[dict[str, object]] = [
    {"id": "goblin", "name": "Goblin", "armor_class": 15, "hp": 7, "hit_dice": "2d6",
     "challenge_rating": "1/4", "dexterity": 14},
    {"id": "skeleton", "name": "Skeleton", "armor_class": 13, "hp": 13, "hit_dice": "2d8+4",
     "challenge_rating": "1/4", "dexterity": 14, "vulnerabilities": ["bludgeoning"],
     "immunities": ["poison"]},
    {"id": "zombie", "name": "Zombie", "armor_class": 8, "hp": 22, "hit_dice": "3d8+9",
     "challenge_rating": "1/4", "dexterity": 6, "immunities": ["poison"]},
    {"id": "kobold", "name": "Kobold", "armor_class": 12, "hp": 5, "hit_dice": "2d6-2",
     "challenge_rating": "1/8", "dexterity": 15},
    {"id": "wolf", "name": "Wolf", "armor_class": 13, "hp": 11, "hit_dice": "2d8+2",
     "challenge_rating": "1/4", "dexterity": 15},
    {"id": "bandit", "name": "Bandit", "armor_class": 12, "hp": 11, "hit_dice": "2d8+2",
     "challenge_rating": "1/8", "dexterity": 12},
    {"id": "orc", "name": "Orc", "armor_class": 13, "hp": 15, "hit_dice": "2d8+6",
     "challenge_rating": "1/2", "dexterity": 12},
    {"id": "ghoul", "name": "Ghoul", "armor_class": 12, "hp": 22, "hit_dice": "5d8",
     "challenge_rating": "1", "dexterity": 15, "immunities": ["poison"]},
    {"id": "fire_elemental", "name": "Fire Elemental", "armor_class": 13, "hp": 102, "hit_dice": "12d10+36",
     "challenge_rating": "5", "dexterity": 17, "resistances": ["bludgeoning", "piercing", "slashing"],
     "immunities": ["fire", "poison"]},
    {"id": "young_red_dragon", "name": "Young Red Dragon", "armor_class": 18, "hp": 178,
     "hit_dice": "17d10+85", "challenge_rating": "10", "dexterity": 10, "immunities": ["fire"]},
]


MONSTERS: dict[str, MonsterTemplate] = {
    entry["id"]: MonsterTemplate.model_validate(entry) for entry in _MONSTER_DATA  # type: ignore[misc]
}


__all__ = ["MONSTERS"]
