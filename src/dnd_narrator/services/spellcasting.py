"""Spell slots, timed spell effects and concentration.

A timed effect owns the modifiers it applied: they are recorded on the
character under the effect instance id and removed together with the
instance when its duration runs out, when concentration on it ends, or when
a rest clears it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import uuid4

from dnd_narrator.catalog import resolve_spell
from dnd_narrator.core.exceptions import ResourceExhaustedError
from dnd_narrator.core.logging import get_logger
from dnd_narrator.directives.types import INVERSE_DIRECTIVES, Directive
from dnd_narrator.models.catalog import SpellDefinition, World
from dnd_narrator.models.character import CharacterState, KnownSpell
from dnd_narrator.models.enums import DurationUnit
from dnd_narrator.models.session import ConcentrationState, SessionState, SpellEffectInstance
from dnd_narrator.services.effects import (
    ResolvedEffect,
    apply_modifiers,
    record_grants,
    release_grants,
    remove_modifiers,
    resolve_effects,
)
from dnd_narrator.services.inference import infer_spell_definition


logger = get_logger(__name__)

ROUNDS_PER_MINUTE = 10


@dataclass
class CastResult:
    """Outcome of a successful cast."""

    spell: SpellDefinition
    slot_level: int
    message: str
    directives: list[Directive] = field(default_factory=list)
    effect: SpellEffectInstance | None = None


@dataclass
class AdvanceResult:
    """Effects that ran out during a duration advance."""

    expired: list[SpellEffectInstance] = field(default_factory=list)
    directives: list[Directive] = field(default_factory=list)

    @property
    def messages(self) -> list[str]:
        return [f"{effect.source_name} has ended." for effect in self.expired]


# =============================================================================
# Timed Effects
# =============================================================================


def start_timed_effect(
    character: CharacterState,
    session: SessionState,
    *,
    source_id: str,
    source_name: str,
    resolved: ResolvedEffect,
    duration: int,
    unit: DurationUnit | str,
    concentration: bool = False,
) -> SpellEffectInstance:
    """Create a duration-tracked effect and apply its modifiers.

    Minute durations are tracked in rounds.

    Returns:
        The new effect instance.
    """
    unit = DurationUnit(unit)
    remaining = duration
    if unit == DurationUnit.MINUTES:
        remaining, unit = duration * ROUNDS_PER_MINUTE, DurationUnit.ROUNDS

    instance = SpellEffectInstance(
        id=f"{source_id}:{uuid4().hex[:8]}",
        source_id=source_id,
        source_name=source_name,
        remaining=remaining,
        unit=unit,
        concentration=concentration,
        modifiers=dict(resolved.modifiers),
        conditional=list(resolved.conditional),
        granted_directives=[
            directive.raw for directive in resolved.directives if directive.type in INVERSE_DIRECTIVES
        ],
    )
    apply_modifiers(character, instance.id, resolved, label=source_name)
    record_grants(character, instance.id, resolved.directives, session)
    session.spell_effects.append(instance)
    logger.info("Timed effect started", effect_id=instance.id, remaining=remaining, unit=unit)
    return instance


def end_effect(
    character: CharacterState,
    session: SessionState,
    effect: SpellEffectInstance,
) -> list[Directive]:
    """Remove an effect instance and exactly the modifiers it applied.

    Returns:
        Directives undoing the effect's grants that no other source still
        holds.
    """
    if effect in session.spell_effects:
        session.spell_effects.remove(effect)
    remove_modifiers(character, effect.id)
    if session.concentration is not None and session.concentration.effect_id == effect.id:
        session.concentration = None

    inverses = release_grants(character, effect.id)
    logger.info("Timed effect ended", effect_id=effect.id)
    return inverses


def advance_durations(
    character: CharacterState,
    session: SessionState,
    unit: DurationUnit | str,
    steps: int = 1,
) -> AdvanceResult:
    """Count down every effect measured in ``unit``.

    Effects in other units are untouched. An effect reaching zero is
    removed together with its modifiers.
    """
    unit = DurationUnit(unit)
    result = AdvanceResult()
    if steps <= 0:
        return result

    for effect in list(session.spell_effects):
        if effect.unit != unit:
            continue
        effect.remaining = max(0, effect.remaining - steps)
        if effect.remaining == 0:
            result.directives.extend(end_effect(character, session, effect))
            result.expired.append(effect)
    return result


# =============================================================================
# Concentration
# =============================================================================


def end_concentration(character: CharacterState, session: SessionState) -> list[Directive]:
    """End the current concentration, if any, and the effect it sustains."""
    current = session.concentration
    if current is None:
        return []
    session.concentration = None
    directives: list[Directive] = []
    if current.effect_id:
        effect = next((fx for fx in session.spell_effects if fx.id == current.effect_id), None)
        if effect is not None:
            directives = end_effect(character, session, effect)
    logger.info("Concentration ended", spell=current.spell_name)
    return directives


def start_concentration(
    character: CharacterState,
    session: SessionState,
    spell_name: str,
    effect_id: str | None = None,
) -> list[Directive]:
    """Concentrate on a spell, silently ending any previous concentration.

    Returns:
        Directives undoing the previous concentration effect, if any.
    """
    directives = end_concentration(character, session)
    session.concentration = ConcentrationState(spell_name=spell_name, effect_id=effect_id)
    logger.info("Concentration started", spell=spell_name)
    return directives


# =============================================================================
# Casting & Learning
# =============================================================================


def find_spell(
    identifier: str,
    character: CharacterState,
    world: World | None = None,
    level: int | None = None,
) -> SpellDefinition:
    """Resolve a spell by catalog, known spells, then rule-based inference."""
    spell = resolve_spell(identifier, world)
    if spell is not None:
        return spell
    known = next((s for s in character.known_spells if s.name.lower() == identifier.strip().lower()), None)
    inferred_level = level if level is not None else (known.level if known else 0)
    return infer_spell_definition(known.name if known else identifier.strip(), inferred_level)


def cast_spell(
    character: CharacterState,
    session: SessionState,
    identifier: str,
    *,
    level: int | None = None,
    world: World | None = None,
) -> CastResult:
    """Cast a spell, spending a slot unless it is a cantrip.

    Args:
        character: The caster.
        session: Session receiving timed effects and concentration.
        identifier: Spell id or name.
        level: Slot level to spend; defaults to the spell's level. Lower
            levels are raised to the spell's level and cantrips never spend
            a slot.
        world: World catalog for campaign spells.

    Returns:
        CastResult with any directives to fold back into the pass.

    Raises:
        ResourceExhaustedError: No slot remains at the requested level.
            Nothing has been changed when this is raised.
    """
    spell = find_spell(identifier, character, world, level)
    if spell.level == 0 or level is None:
        slot_level = spell.level
    else:
        # A slot below the spell's own level cannot hold it
        slot_level = max(spell.level, min(level, 9))

    if slot_level > 0:
        pool = character.spell_slots.get(slot_level)
        if pool is None or pool.current <= 0:
            raise ResourceExhaustedError(
                f"No level {slot_level} spell slots remaining!",
                resource=f"spell_slot_{slot_level}",
                required=1,
                available=pool.current if pool else 0,
            )
        pool.current -= 1

    resolved = resolve_effects(spell.effects)
    directives: list[Directive] = []
    effect: SpellEffectInstance | None = None

    if spell.duration > 0 and (resolved.has_passive or resolved.directives or spell.concentration):
        effect = start_timed_effect(
            character,
            session,
            source_id=f"spell:{spell.id}",
            source_name=spell.name,
            resolved=resolved,
            duration=spell.duration,
            unit=spell.duration_unit,
            concentration=spell.concentration,
        )
    if spell.concentration:
        # The new effect already holds its grants, so ending the old one
        # only undoes what the new spell does not grant again
        directives.extend(end_concentration(character, session))
        session.concentration = ConcentrationState(
            spell_name=spell.name,
            effect_id=effect.id if effect else None,
        )
    directives.extend(resolved.directives)

    suffix = "(Cantrip)" if slot_level == 0 else f"(level {slot_level} slot)"
    logger.info("Spell cast", spell=spell.name, slot_level=slot_level)
    return CastResult(
        spell=spell,
        slot_level=slot_level,
        message=f"Cast {spell.name} {suffix}",
        directives=directives,
        effect=effect,
    )


def learn_spell(
    character: CharacterState,
    name: str,
    *,
    level: int | None = None,
    world: World | None = None,
) -> bool:
    """Add a spell to the known list; names are de-duplicated case-insensitively.

    Returns:
        True if the spell was new.
    """
    if not name.strip() or character.knows_spell(name):
        return False
    spell = resolve_spell(name, world)
    character.known_spells.append(
        KnownSpell(
            name=spell.name if spell else name.strip(),
            level=spell.level if spell else max(0, min(level or 0, 9)),
            spell_id=spell.id if spell else None,
        )
    )
    logger.info("Spell learned", spell=name)
    return True


__all__ = [
    "ROUNDS_PER_MINUTE",
    "CastResult",
    "AdvanceResult",
    "start_timed_effect",
    "end_effect",
    "advance_durations",
    "start_concentration",
    "end_concentration",
    "find_spell",
    "cast_spell",
    "learn_spell",
]
