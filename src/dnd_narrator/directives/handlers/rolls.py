"""ROLL directives: skill checks, saves, attacks, death saves and plain dice.

Rolls run last so they see every state change made earlier in the pass.
Each roll is recorded in the session history and handed to the context's
roll callback; only death saves produce notifications.
"""

from __future__ import annotations

from dnd_narrator.catalog import resolve_item
from dnd_narrator.core.exceptions import DiceRollError
from dnd_narrator.core.logging import get_logger
from dnd_narrator.directives.context import SessionContext
from dnd_narrator.directives.handlers.base import DirectiveHandler, HandlerMethod, HandlerResult
from dnd_narrator.directives.types import Directive, DirectiveType
from dnd_narrator.engine.arguments import parse_int
from dnd_narrator.engine.dice import DiceResult, RollType
from dnd_narrator.models.catalog import ItemDefinition
from dnd_narrator.models.character import CharacterState
from dnd_narrator.models.enums import Ability, NotificationKind, RollKind
from dnd_narrator.models.session import DEAD_CONDITION, Notification, RollRecord, StatusCondition
from dnd_narrator.services.effects import DAMAGE, TO_HIT
from dnd_narrator.services.equipment import equipped_items


logger = get_logger(__name__)

UNARMED_STRIKE = ItemDefinition(id="unarmed_strike", name="Unarmed Strike", damage="1", damage_type="bludgeoning")


def attack_ability(character: CharacterState, weapon: ItemDefinition) -> Ability:
    """Strength for melee, dexterity for ranged, the better of both for finesse."""
    properties = {prop.lower() for prop in weapon.properties}
    if "finesse" in properties:
        strength = character.stats.modifier(Ability.STR)
        dexterity = character.stats.modifier(Ability.DEX)
        return Ability.DEX if dexterity > strength else Ability.STR
    if "ranged" in properties:
        return Ability.DEX
    return Ability.STR


def _record(result: DiceResult, kind: RollKind, label: str, **extra: object) -> RollRecord:
    return RollRecord(
        kind=kind,
        label=label,
        expression=result.expression,
        total=result.total,
        dice=result.dice,
        critical=result.is_critical,
        fumble=result.is_fumble,
        mode=RollType(result.roll_type).value,
        **extra,
    )


class RollHandler(DirectiveHandler):
    """The ROLL directive in all its forms."""

    name = "roll"

    def routes(self) -> dict[DirectiveType, HandlerMethod]:
        return {DirectiveType.ROLL: self.roll}

    def roll(self, directive: Directive, context: SessionContext) -> HandlerResult:
        kind = (directive.field(0) or "").lower()
        try:
            if kind == RollKind.SKILL:
                return self.skill_check(directive, context)
            if kind == RollKind.SAVE:
                return self.saving_throw(directive, context)
            if kind == RollKind.ATTACK:
                return self.attack(directive, context)
            if kind == RollKind.DEATH:
                return self.death_save(directive, context)
            return self.generic(directive, context)
        except DiceRollError as exc:
            logger.info("Unrollable expression ignored", payload=directive.payload, error=exc.message)
            return HandlerResult.ignored()

    def skill_check(self, directive: Directive, context: SessionContext) -> HandlerResult:
        skill = directive.field(1)
        if not skill:
            return HandlerResult.ignored()
        dc = parse_int(directive.field(2))
        result = context.roller.roll_d20(
            context.character.skill_bonus(skill),
            roll_type=RollType.parse(directive.field(3)),
        )
        context.record_roll(
            _record(result, RollKind.SKILL, skill, target=dc, success=None if dc is None else result.total >= dc)
        )
        return HandlerResult.applied()

    def saving_throw(self, directive: Directive, context: SessionContext) -> HandlerResult:
        ability = Ability.parse(directive.field(1) or "")
        if ability is None:
            return HandlerResult.ignored()
        dc = parse_int(directive.field(2))
        result = context.roller.roll_d20(
            context.character.saving_throw_bonus(ability),
            roll_type=RollType.parse(directive.field(3)),
        )
        context.record_roll(
            _record(
                result,
                RollKind.SAVE,
                ability.value,
                target=dc,
                success=None if dc is None else result.total >= dc,
            )
        )
        return HandlerResult.applied()

    def attack(self, directive: Directive, context: SessionContext) -> HandlerResult:
        """Roll to hit against an AC; a hit rolls damage, doubled dice on a 20."""
        character = context.character
        weapon_name = directive.field(1)
        weapon = resolve_item(weapon_name, context.world) if weapon_name else None
        if weapon is None or not weapon.is_weapon:
            weapon = next(
                (item for item in equipped_items(context.session, context.world) if item.is_weapon),
                UNARMED_STRIKE,
            )

        ability_mod = character.stats.modifier(attack_ability(character, weapon))
        to_hit = ability_mod + character.proficiency_bonus + character.total_modifier(TO_HIT)
        armor_class = parse_int(directive.field(2))
        result = context.roller.roll_d20(to_hit, roll_type=RollType.parse(directive.field(3)))

        if result.is_fumble:
            hit = False
        elif result.is_critical:
            hit = True
        else:
            hit = None if armor_class is None else result.total >= armor_class

        damage: int | None = None
        if hit is not False:
            bonus = ability_mod + character.total_modifier(DAMAGE)
            expression = f"{weapon.damage or '1'}{bonus:+d}" if bonus else (weapon.damage or "1")
            damage = max(0, context.roller.roll_damage(expression, critical=result.is_critical).total)

        context.record_roll(
            _record(
                result,
                RollKind.ATTACK,
                weapon.name,
                target=armor_class,
                success=hit,
                damage=damage,
            )
        )
        return HandlerResult.applied()

    def death_save(self, directive: Directive, context: SessionContext) -> HandlerResult:
        """10 or more succeeds, a natural 1 is two failures, a natural 20 regains 1 HP."""
        character = context.character
        saves = character.death_saves
        result = context.roller.roll_d20(0)
        notifications: list[Notification] = []

        if result.is_critical:
            character.current_hp = max(character.current_hp, 1)
            saves.successes = 0
            saves.failures = 0
            notifications.append(
                Notification(kind=NotificationKind.COMBAT, content="Natural 20! You regain 1 HP and wake up.")
            )
        elif result.total >= 10:
            saves.successes = min(3, saves.successes + 1)
            if saves.successes == 3:
                notifications.append(Notification(kind=NotificationKind.COMBAT, content="You are stable."))
        else:
            saves.failures = min(3, saves.failures + (2 if result.is_fumble else 1))
            if saves.failures == 3 and not context.session.has_condition(DEAD_CONDITION):
                context.session.conditions.append(StatusCondition(name=DEAD_CONDITION))
                notifications.append(Notification(kind=NotificationKind.COMBAT, content="You have died."))

        context.record_roll(_record(result, RollKind.DEATH, "Death Save", target=10, success=result.total >= 10))
        return HandlerResult.applied(*notifications)

    def generic(self, directive: Directive, context: SessionContext) -> HandlerResult:
        expression = directive.field(0)
        if not expression:
            return HandlerResult.ignored()
        result = context.roller.roll(expression, roll_type=RollType.parse(directive.field(1)))
        context.record_roll(_record(result, RollKind.GENERIC, expression))
        return HandlerResult.applied()


__all__ = ["UNARMED_STRIKE", "RollHandler", "attack_ability"]
