"""Encounter lifecycle directives, applied in the terminal pass only."""

from __future__ import annotations

from dnd_narrator.directives.context import SessionContext
from dnd_narrator.directives.handlers.base import DirectiveHandler, HandlerMethod, HandlerResult
from dnd_narrator.directives.types import Directive, DirectiveType
from dnd_narrator.models.enums import NotificationKind
from dnd_narrator.models.session import Notification
from dnd_narrator.services.encounter import advance_round, end_encounter, spawn_enemy, start_encounter
from dnd_narrator.services.equipment import refresh_armor_class


def _combat(content: str, **metadata: object) -> Notification:
    return Notification(kind=NotificationKind.COMBAT, content=content, metadata=metadata)


class EncounterHandler(DirectiveHandler):
    """COMBAT_START, ENEMY_SPAWN, COMBAT_CONTINUE and COMBAT_END."""

    name = "encounter"

    def routes(self) -> dict[DirectiveType, HandlerMethod]:
        return {
            DirectiveType.COMBAT_START: self.start,
            DirectiveType.ENEMY_SPAWN: self.spawn,
            DirectiveType.COMBAT_CONTINUE: self.advance,
            DirectiveType.COMBAT_END: self.end,
        }

    def start(self, directive: Directive, context: SessionContext) -> HandlerResult:
        encounter = start_encounter(
            context.character,
            context.session,
            context.roller,
            description=directive.payload.strip(),
        )
        if encounter is None:
            return HandlerResult.ignored()
        player = encounter.initiative[0]
        return HandlerResult.applied(
            _combat(f"Combat started! Your initiative: {player.initiative}", encounter_id=encounter.id)
        )

    def spawn(self, directive: Directive, context: SessionContext) -> HandlerResult:
        identifier = directive.field(0)
        if not identifier:
            return HandlerResult.ignored()
        combatant = spawn_enemy(
            context.session,
            identifier,
            context.roller,
            name=directive.field(1),
            world=context.world,
        )
        if combatant is None:
            return HandlerResult.ignored()
        return HandlerResult.applied(
            _combat(
                f"{combatant.name} joins the fight (AC {combatant.armor_class}, HP {combatant.max_hp})",
                combatant_id=combatant.id,
            )
        )

    def advance(self, directive: Directive, context: SessionContext) -> HandlerResult:
        advanced = advance_round(context.character, context.session)
        if advanced is None:
            return HandlerResult.ignored()
        if advanced.expired:
            refresh_armor_class(context.character, context.session, context.world, context.settings.rules)
        notifications = [_combat(f"Round {advanced.round}", round=advanced.round)]
        notifications.extend(Notification.info(f"{name} has ended.") for name in advanced.expired)
        return HandlerResult.applied(*notifications, derived=advanced.directives)

    def end(self, directive: Directive, context: SessionContext) -> HandlerResult:
        outcome = directive.payload.strip()
        encounter = end_encounter(context.session, outcome)
        if encounter is None:
            return HandlerResult.ignored()
        suffix = f": {outcome}" if outcome else ""
        return HandlerResult.applied(_combat(f"Combat ended{suffix}", rounds=encounter.round))


__all__ = ["EncounterHandler"]
