"""Short and long rests, hit dice and renewable class resources."""

from __future__ import annotations

from dataclasses import dataclass, field

from dnd_narrator.core.exceptions import ResourceExhaustedError
from dnd_narrator.core.logging import get_logger
from dnd_narrator.directives.types import Directive
from dnd_narrator.engine.dice import DiceRoller
from dnd_narrator.models.character import CharacterState
from dnd_narrator.models.enums import DurationUnit, RecoveryTrigger
from dnd_narrator.models.session import SessionState
from dnd_narrator.services.spellcasting import advance_durations, end_concentration


logger = get_logger(__name__)


@dataclass
class RestResult:
    """What a rest restored."""

    kind: RecoveryTrigger
    hours: int
    hp_restored: int = 0
    hit_dice_restored: int = 0
    resources_restored: list[str] = field(default_factory=list)
    concentration_ended: bool = False
    expired_effects: list[str] = field(default_factory=list)
    directives: list[Directive] = field(default_factory=list)

    @property
    def message(self) -> str:
        label = "Short rest" if self.kind == RecoveryTrigger.SHORT else "Long rest"
        parts = [f"{label} complete ({self.hours}h)"]
        if self.hp_restored:
            parts.append(f"{self.hp_restored} HP restored")
        if self.hit_dice_restored:
            parts.append(f"{self.hit_dice_restored} hit dice recovered")
        if self.resources_restored:
            parts.append(f"restored {', '.join(self.resources_restored)}")
        return ". ".join(parts)


@dataclass
class HitDiceResult:
    """Healing from spending hit dice."""

    spent: int
    rolls: list[int]
    healed: int

    @property
    def message(self) -> str:
        return f"Spent {self.spent} hit {'die' if self.spent == 1 else 'dice'}: healed {self.healed} HP"


def _restore_resources(character: CharacterState, rest: RecoveryTrigger) -> list[str]:
    restored: list[str] = []
    for resource in character.class_resources:
        if resource.recovers_after(rest) and resource.current < resource.max:
            resource.current = resource.max
            restored.append(resource.name)
    return restored


def short_rest(
    character: CharacterState,
    session: SessionState,
    minutes: int = 60,
) -> RestResult:
    """Take a short rest.

    Restores class resources that recover on a short rest (or either rest)
    and advances hour-based effects by at least one hour.
    """
    hours = max(1, max(0, minutes) // 60)
    restored = _restore_resources(character, RecoveryTrigger.SHORT)
    advanced = advance_durations(character, session, DurationUnit.HOURS, hours)
    logger.info("Short rest taken", character_id=character.id, restored=restored)
    return RestResult(
        kind=RecoveryTrigger.SHORT,
        hours=hours,
        resources_restored=restored,
        expired_effects=[effect.source_name for effect in advanced.expired],
        directives=advanced.directives,
    )


def long_rest(
    character: CharacterState,
    session: SessionState,
    hours: int = 8,
) -> RestResult:
    """Take a long rest.

    Restores all hit points and spell slots, half of the maximum hit dice
    (minimum one), every class resource, and ends concentration.
    """
    hours = max(1, hours)
    hp_restored = character.max_hp - character.current_hp
    character.current_hp = character.max_hp
    character.death_saves.successes = 0
    character.death_saves.failures = 0

    for pool in character.spell_slots.values():
        pool.current = pool.max

    dice = character.hit_dice
    recovered = min(dice.max - dice.current, max(1, dice.max // 2))
    recovered = max(0, recovered)
    dice.current += recovered

    restored = _restore_resources(character, RecoveryTrigger.LONG)

    concentrating = session.concentration is not None
    directives = end_concentration(character, session)
    advanced = advance_durations(character, session, DurationUnit.HOURS, hours)
    directives.extend(advanced.directives)

    logger.info(
        "Long rest taken",
        character_id=character.id,
        hp_restored=hp_restored,
        hit_dice_restored=recovered,
    )
    return RestResult(
        kind=RecoveryTrigger.LONG,
        hours=hours,
        hp_restored=hp_restored,
        hit_dice_restored=recovered,
        resources_restored=restored,
        concentration_ended=concentrating,
        expired_effects=[effect.source_name for effect in advanced.expired],
        directives=directives,
    )


def spend_hit_dice(character: CharacterState, count: int, roller: DiceRoller) -> HitDiceResult:
    """Spend hit dice to heal: ``1d<die> + CON`` each, never below zero per die.

    Raises:
        ResourceExhaustedError: Fewer than ``count`` hit dice remain.
    """
    count = max(1, count)
    dice = character.hit_dice
    if dice.current < count:
        raise ResourceExhaustedError(
            f"Not enough hit dice ({dice.current} remaining)",
            resource="hit_dice",
            required=count,
            available=dice.current,
        )

    con_mod = character.stats.con_mod
    rolls = [max(0, roller.roll(f"1d{dice.die}").total + con_mod) for _ in range(count)]
    dice.current -= count
    before = character.current_hp
    character.current_hp = min(character.max_hp, character.current_hp + sum(rolls))
    return HitDiceResult(spent=count, rolls=rolls, healed=character.current_hp - before)


def use_resource(character: CharacterState, name: str, amount: int = 1) -> int:
    """Spend charges of a class resource.

    Returns:
        Charges remaining.

    Raises:
        ResourceExhaustedError: The resource is unknown or has too few charges.
    """
    amount = max(1, amount)
    resource = character.find_resource(name)
    if resource is None:
        raise ResourceExhaustedError(f"No resource named {name}", resource=name, required=amount, available=0)
    if resource.current < amount:
        raise ResourceExhaustedError(
            f"Not enough {resource.name} ({resource.current}/{resource.max})",
            resource=resource.name,
            required=amount,
            available=resource.current,
        )
    resource.current -= amount
    return resource.current


__all__ = [
    "RestResult",
    "HitDiceResult",
    "short_rest",
    "long_rest",
    "spend_hit_dice",
    "use_resource",
]
