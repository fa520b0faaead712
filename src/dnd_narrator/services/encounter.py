"""Encounter lifecycle: start, spawn, advance and end.

These operations need world lookups, so they run in the terminal pass
after a message has fully arrived.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from dnd_narrator.catalog import resolve_monster
from dnd_narrator.core.logging import get_logger
from dnd_narrator.directives.types import Directive
from dnd_narrator.engine.dice import DiceRoller
from dnd_narrator.models.catalog import MonsterTemplate, World, slugify
from dnd_narrator.models.character import AbilityScores, CharacterState
from dnd_narrator.models.enums import DurationUnit
from dnd_narrator.models.session import (
    CombatEncounter,
    Combatant,
    InitiativeEntry,
    SessionState,
)
from dnd_narrator.services.spellcasting import advance_durations


logger = get_logger(__name__)

PLAYER_COMBATANT_ID = "player"

GENERIC_TEMPLATE = MonsterTemplate(id="creature", name="Creature", armor_class=10, hp=10)


@dataclass
class RoundAdvance:
    """A new round and any round-based effects that ran out."""

    round: int
    expired: list[str] = field(default_factory=list)
    directives: list[Directive] = field(default_factory=list)


def _sort_initiative(encounter: CombatEncounter) -> None:
    # Stable sort keeps insertion order on ties
    encounter.initiative = sorted(encounter.initiative, key=lambda entry: -entry.initiative)


def start_encounter(
    character: CharacterState,
    session: SessionState,
    roller: DiceRoller,
    description: str = "",
) -> CombatEncounter | None:
    """Begin an encounter and roll the player's initiative.

    Returns:
        The new encounter, or None when one is already active.
    """
    if session.combat is not None:
        return None

    initiative = roller.roll_d20(character.stats.dex_mod).total
    encounter = CombatEncounter(
        description=description,
        initiative=[
            InitiativeEntry(
                combatant_id=PLAYER_COMBATANT_ID,
                name=character.name,
                initiative=initiative,
                is_player=True,
            )
        ],
    )
    session.combat = encounter
    logger.info("Combat started", encounter_id=encounter.id, player_initiative=initiative)
    return encounter


def _unique_name(encounter: CombatEncounter, base: str) -> str:
    taken = {enemy.name for enemy in encounter.enemies}
    if base not in taken:
        return base
    suffix = 2
    while f"{base} {suffix}" in taken:
        suffix += 1
    return f"{base} {suffix}"


def spawn_enemy(
    session: SessionState,
    identifier: str,
    roller: DiceRoller,
    *,
    name: str | None = None,
    world: World | None = None,
) -> Combatant | None:
    """Add an enemy to the active encounter.

    The stat block comes from the world catalog, then the global catalog,
    and otherwise from a generic placeholder named after ``identifier``.

    Returns:
        The spawned combatant, or None without an active encounter.
    """
    encounter = session.combat
    if encounter is None:
        return None

    template = resolve_monster(identifier, world)
    if template is None:
        display = identifier.strip().title() or GENERIC_TEMPLATE.name
        template = GENERIC_TEMPLATE.model_copy(update={"id": slugify(display) or GENERIC_TEMPLATE.id, "name": display})
        logger.info("Unknown monster, using generic stat block", identifier=identifier)

    combatant = Combatant(
        template_id=template.id,
        name=_unique_name(encounter, (name or "").strip() or template.name),
        current_hp=template.hp,
        max_hp=template.hp,
        armor_class=template.armor_class,
        dexterity=template.dexterity,
        resistances=list(template.resistances),
        immunities=list(template.immunities),
        vulnerabilities=list(template.vulnerabilities),
    )
    encounter.enemies.append(combatant)

    initiative = roller.roll_d20(AbilityScores.calc_modifier(template.dexterity)).total
    encounter.initiative.append(
        InitiativeEntry(combatant_id=combatant.id, name=combatant.name, initiative=initiative)
    )
    _sort_initiative(encounter)
    logger.info("Enemy spawned", combatant=combatant.name, hp=combatant.max_hp, initiative=initiative)
    return combatant


def advance_round(character: CharacterState, session: SessionState) -> RoundAdvance | None:
    """Move the encounter to its next round and tick round-based effects."""
    encounter = session.combat
    if encounter is None:
        return None
    encounter.round += 1
    encounter.turn_index = 0
    advanced = advance_durations(character, session, DurationUnit.ROUNDS)
    logger.info("Combat round advanced", round=encounter.round)
    return RoundAdvance(
        round=encounter.round,
        expired=[effect.source_name for effect in advanced.expired],
        directives=advanced.directives,
    )


def end_encounter(session: SessionState, outcome: str = "") -> CombatEncounter | None:
    """Clear the active encounter, recording the outcome in the quest log.

    Returns:
        The encounter that ended, or None when none was active.
    """
    encounter = session.combat
    if encounter is None:
        return None
    session.combat = None
    if outcome:
        entry = f"Combat ended: {outcome}"
        if entry not in session.quest_log:
            session.quest_log.append(entry)
    logger.info("Combat ended", encounter_id=encounter.id, rounds=encounter.round, outcome=outcome)
    return encounter


__all__ = [
    "PLAYER_COMBATANT_ID",
    "GENERIC_TEMPLATE",
    "RoundAdvance",
    "start_encounter",
    "spawn_enemy",
    "advance_round",
    "end_encounter",
]
