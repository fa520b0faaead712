"""Damage, healing, temporary hit points and damage-type defenses."""

from __future__ import annotations

from dnd_narrator.core.exceptions import CombatError
from dnd_narrator.core.logging import get_logger
from dnd_narrator.directives.context import SessionContext
from dnd_narrator.directives.handlers.base import DirectiveHandler, HandlerMethod, HandlerResult
from dnd_narrator.directives.types import Directive, DirectiveType
from dnd_narrator.engine.arguments import parse_amount
from dnd_narrator.engine.mechanics import apply_damage, apply_temp_hp, check_concentration
from dnd_narrator.models.enums import DefenseCategory, NotificationKind
from dnd_narrator.models.session import DEAD_CONDITION, Combatant, Notification
from dnd_narrator.services.effects import PLAYER_TARGETS
from dnd_narrator.services.equipment import refresh_armor_class
from dnd_narrator.services.spellcasting import end_concentration


logger = get_logger(__name__)

_DEFENSE_TOGGLES: dict[DirectiveType, tuple[DefenseCategory, bool]] = {
    DirectiveType.APPLY_RESISTANCE: (DefenseCategory.RESISTANCE, True),
    DirectiveType.REMOVE_RESISTANCE: (DefenseCategory.RESISTANCE, False),
    DirectiveType.APPLY_IMMUNITY: (DefenseCategory.IMMUNITY, True),
    DirectiveType.REMOVE_IMMUNITY: (DefenseCategory.IMMUNITY, False),
    DirectiveType.APPLY_VULNERABILITY: (DefenseCategory.VULNERABILITY, True),
    DirectiveType.REMOVE_VULNERABILITY: (DefenseCategory.VULNERABILITY, False),
}

_DEFENSE_LABELS: dict[str, str] = {
    DefenseCategory.RESISTANCE: "resistance",
    DefenseCategory.IMMUNITY: "immunity",
    DefenseCategory.VULNERABILITY: "vulnerability",
}


def is_player_target(name: str) -> bool:
    return name.strip().lower() in PLAYER_TARGETS


def find_enemy(context: SessionContext, name: str) -> Combatant | None:
    if context.session.combat is None:
        return None
    return context.session.combat.find_enemy(name)


class CombatHandler(DirectiveHandler):
    """DAMAGE, HEAL, TEMP_HP and the resistance/immunity/vulnerability toggles."""

    name = "combat"

    def routes(self) -> dict[DirectiveType, HandlerMethod]:
        routes: dict[DirectiveType, HandlerMethod] = {
            DirectiveType.DAMAGE: self.damage,
            DirectiveType.HEAL: self.heal,
            DirectiveType.TEMP_HP: self.temp_hp,
        }
        for directive_type in _DEFENSE_TOGGLES:
            routes[directive_type] = self.toggle_defense
        return routes

    def damage(self, directive: Directive, context: SessionContext) -> HandlerResult:
        """Apply typed damage to the player or an encounter combatant.

        A combatant that cannot be found yet may still spawn later in the
        message, so the directive is deferred rather than dropped.
        """
        target = directive.field(0)
        amount = parse_amount(directive.field(1))
        damage_type = directive.field(2)
        if not target or amount is None:
            return HandlerResult.ignored()

        if not is_player_target(target):
            enemy = find_enemy(context, target)
            if enemy is None:
                return HandlerResult.deferred()
            if enemy.is_defeated:
                raise CombatError(
                    f"{enemy.name} is already defeated",
                    combatant_id=enemy.id,
                    round_number=context.session.combat.round if context.session.combat else None,
                )
            result = apply_damage(enemy, amount.resolve(context.roller), damage_type)
            enemy.temp_hp = result.remaining_temp_hp
            enemy.current_hp = max(0, enemy.current_hp - result.actual_damage)
            if enemy.current_hp == 0 and DEAD_CONDITION not in enemy.conditions:
                enemy.conditions.append(DEAD_CONDITION)
            logger.info("Enemy damaged", combatant=enemy.name, damage=result.actual_damage, hp=enemy.current_hp)
            return HandlerResult.applied(
                Notification(
                    kind=NotificationKind.COMBAT,
                    content=" ".join(
                        part
                        for part in (
                            f"{enemy.name} takes {result.actual_damage} damage",
                            result.message,
                            f"[HP: {enemy.current_hp}/{enemy.max_hp}]",
                        )
                        if part
                    ),
                    metadata={"combatant_id": enemy.id, "damage": result.actual_damage},
                )
            )

        character = context.character
        result = apply_damage(character, amount.resolve(context.roller), damage_type)
        character.temp_hp = result.remaining_temp_hp
        context.session.temp_hp = result.remaining_temp_hp
        character.current_hp = max(0, character.current_hp - result.actual_damage)
        logger.info("Player damaged", damage=result.actual_damage, hp=character.current_hp)

        type_label = f" {damage_type.lower()}" if damage_type else ""
        notifications = [
            Notification(
                kind=NotificationKind.COMBAT,
                content=" ".join(
                    part
                    for part in (
                        f"You take {result.actual_damage}{type_label} damage",
                        result.message,
                        f"[HP: {character.current_hp}/{character.max_hp}]",
                    )
                    if part
                ),
                metadata={"damage": result.actual_damage, "temp_hp_consumed": result.temp_hp_consumed},
            )
        ]

        derived: list[Directive] = []
        concentration = context.session.concentration
        if concentration is not None and result.actual_damage > 0:
            check = check_concentration(
                character,
                result.actual_damage,
                context.roller,
                minimum_dc=context.settings.rules.concentration_min_dc,
            )
            if check.broken:
                derived = end_concentration(character, context.session)
                refresh_armor_class(character, context.session, context.world, context.settings.rules)
                notifications.append(
                    Notification(
                        kind=NotificationKind.CONCENTRATION,
                        content=(
                            f"Concentration Broken! {concentration.spell_name} ends "
                            f"(rolled {check.roll_total} vs DC {check.dc})"
                        ),
                        metadata={"spell": concentration.spell_name, "dc": check.dc, "roll": check.roll_total},
                    )
                )
        return HandlerResult.applied(*notifications, derived=derived)

    def heal(self, directive: Directive, context: SessionContext) -> HandlerResult:
        """Heal the player, capped at maximum hit points."""
        target = directive.field(0)
        amount = parse_amount(directive.field(1))
        if not target or amount is None or not is_player_target(target):
            return HandlerResult.ignored()

        character = context.character
        before = character.current_hp
        character.current_hp = min(character.max_hp, before + max(0, amount.resolve(context.roller)))
        if before == 0 and character.current_hp > 0:
            character.death_saves.successes = 0
            character.death_saves.failures = 0
        healed = character.current_hp - before
        return HandlerResult.applied(
            Notification.info(f"Healed {healed} HP [HP: {character.current_hp}/{character.max_hp}]", healed=healed)
        )

    def temp_hp(self, directive: Directive, context: SessionContext) -> HandlerResult:
        """Grant temporary hit points; the higher of old and new is kept."""
        target = directive.field(0)
        amount = parse_amount(directive.field(1))
        if not target or amount is None:
            return HandlerResult.ignored()

        if is_player_target(target):
            character = context.character
            result = apply_temp_hp(character.temp_hp, amount.resolve(context.roller))
            character.temp_hp = result.new_total
            context.session.temp_hp = result.new_total
            name = "You"
        else:
            enemy = find_enemy(context, target)
            if enemy is None:
                return HandlerResult.deferred()
            result = apply_temp_hp(enemy.temp_hp, amount.resolve(context.roller))
            enemy.temp_hp = result.new_total
            name = enemy.name

        content = (
            f"Temporary HP: {name} now {'have' if name == 'You' else 'has'} {result.new_total}"
            if result.changed
            else f"Temporary HP: {name} kept {result.new_total} (does not stack)"
        )
        return HandlerResult.applied(Notification.info(content, temp_hp=result.new_total))

    def toggle_defense(self, directive: Directive, context: SessionContext) -> HandlerResult:
        """Add or remove a damage type in a defense list; no-ops stay silent."""
        category, add = _DEFENSE_TOGGLES[directive.type]
        target = directive.field(0)
        damage_type = (directive.field(1) or "").lower()
        if not target or not damage_type:
            return HandlerResult.ignored()

        if is_player_target(target):
            values = context.character.defenses(category)
            name = "You"
        else:
            enemy = find_enemy(context, target)
            if enemy is None:
                return HandlerResult.deferred()
            values = getattr(enemy, DefenseCategory(category).value)
            name = enemy.name

        if add == (damage_type in values):
            return HandlerResult.ignored()
        if add:
            values.append(damage_type)
        else:
            values.remove(damage_type)

        label = _DEFENSE_LABELS[category]
        content = f"{name} gained {damage_type} {label}" if add else f"{name} lost {damage_type} {label}"
        return HandlerResult.applied(Notification.info(content, category=label, damage_type=damage_type))


__all__ = ["PLAYER_TARGETS", "CombatHandler", "is_player_target", "find_enemy"]
