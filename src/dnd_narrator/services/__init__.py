"""Rules services used by the directive handlers.

Exports:
    Effects: resolve_effect, resolve_effects, apply_modifiers, remove_modifiers
    Equipment: calculate_armor_class, refresh_armor_class, set_equipped, consume_item
    Spellcasting: cast_spell, learn_spell, advance_durations, start/end_concentration
    Rest: short_rest, long_rest, spend_hit_dice, use_resource
    Encounter: start_encounter, spawn_enemy, advance_round, end_encounter
    Generation: GenerationQueue
    Progression: LevelUpInteraction and its steps
"""

from __future__ import annotations

from dnd_narrator.services.effects import (
    ResolvedEffect,
    apply_modifiers,
    record_grants,
    release_grants,
    remove_modifiers,
    resolve_effect,
    resolve_effects,
)
from dnd_narrator.services.encounter import (
    advance_round,
    end_encounter,
    spawn_enemy,
    start_encounter,
)
from dnd_narrator.services.equipment import (
    calculate_armor_class,
    consume_item,
    refresh_armor_class,
    set_equipped,
)
from dnd_narrator.services.generation import GenerationQueue, ItemGenerator, MergeResult
from dnd_narrator.services.inference import infer_item_definition, infer_spell_definition
from dnd_narrator.services.progression import (
    LevelUpInteraction,
    begin_level_up,
    choose_ability_increase,
    choose_hit_points,
    finalize_level_up,
)
from dnd_narrator.services.rest import long_rest, short_rest, spend_hit_dice, use_resource
from dnd_narrator.services.spellcasting import (
    advance_durations,
    cast_spell,
    end_concentration,
    learn_spell,
    start_concentration,
)


__all__ = [
    # Effects
    "ResolvedEffect",
    "resolve_effect",
    "resolve_effects",
    "apply_modifiers",
    "remove_modifiers",
    "record_grants",
    "release_grants",
    # Equipment
    "calculate_armor_class",
    "refresh_armor_class",
    "set_equipped",
    "consume_item",
    # Spellcasting
    "cast_spell",
    "learn_spell",
    "advance_durations",
    "start_concentration",
    "end_concentration",
    # Rest
    "short_rest",
    "long_rest",
    "spend_hit_dice",
    "use_resource",
    # Encounter
    "start_encounter",
    "spawn_enemy",
    "advance_round",
    "end_encounter",
    # Generation
    "GenerationQueue",
    "ItemGenerator",
    "MergeResult",
    "infer_item_definition",
    "infer_spell_definition",
    # Progression
    "LevelUpInteraction",
    "begin_level_up",
    "choose_hit_points",
    "choose_ability_increase",
    "finalize_level_up",
]
