"""Rests, hit dice and renewable class resources."""

from __future__ import annotations

from dnd_narrator.core.exceptions import ResourceExhaustedError
from dnd_narrator.directives.context import SessionContext
from dnd_narrator.directives.handlers.base import DirectiveHandler, HandlerMethod, HandlerResult
from dnd_narrator.directives.types import Directive, DirectiveType
from dnd_narrator.engine.arguments import parse_int
from dnd_narrator.models.session import Notification
from dnd_narrator.services.equipment import refresh_armor_class
from dnd_narrator.services.rest import RestResult, long_rest, short_rest, spend_hit_dice, use_resource


class RestHandler(DirectiveHandler):
    """SHORT_REST, LONG_REST, HIT_DIE_ROLL and USE_RESOURCE."""

    name = "rest"

    def routes(self) -> dict[DirectiveType, HandlerMethod]:
        return {
            DirectiveType.SHORT_REST: self.short_rest,
            DirectiveType.LONG_REST: self.long_rest,
            DirectiveType.HIT_DIE_ROLL: self.hit_dice,
            DirectiveType.USE_RESOURCE: self.use_resource,
        }

    def _rested(self, result: RestResult, context: SessionContext) -> HandlerResult:
        refresh_armor_class(context.character, context.session, context.world, context.settings.rules)
        notifications = [Notification.info(result.message, hours=result.hours)]
        notifications.extend(Notification.info(f"{name} has ended.") for name in result.expired_effects)
        return HandlerResult.applied(*notifications, derived=result.directives)

    def short_rest(self, directive: Directive, context: SessionContext) -> HandlerResult:
        minutes = parse_int(directive.field(0), context.settings.rules.short_rest_minutes) or 0
        if minutes <= 0:
            return HandlerResult.ignored()
        return self._rested(short_rest(context.character, context.session, minutes), context)

    def long_rest(self, directive: Directive, context: SessionContext) -> HandlerResult:
        hours = parse_int(directive.field(0), context.settings.rules.long_rest_hours) or 0
        if hours <= 0:
            return HandlerResult.ignored()
        return self._rested(long_rest(context.character, context.session, hours), context)

    def hit_dice(self, directive: Directive, context: SessionContext) -> HandlerResult:
        count = parse_int(directive.field(0), 1) or 0
        if count <= 0:
            return HandlerResult.ignored()
        try:
            result = spend_hit_dice(context.character, count, context.roller)
        except ResourceExhaustedError as exc:
            return HandlerResult.refused(exc.message, **exc.details)
        character = context.character
        return HandlerResult.applied(
            Notification.info(
                f"{result.message} [HP: {character.current_hp}/{character.max_hp}]",
                rolls=result.rolls,
                healed=result.healed,
            )
        )

    def use_resource(self, directive: Directive, context: SessionContext) -> HandlerResult:
        name = directive.field(0)
        amount = parse_int(directive.field(1), 1) or 0
        if not name or amount <= 0:
            return HandlerResult.ignored()
        try:
            remaining = use_resource(context.character, name, amount)
        except ResourceExhaustedError as exc:
            return HandlerResult.refused(exc.message, **exc.details)
        return HandlerResult.applied(Notification.info(f"Used {name} ({remaining} remaining)", remaining=remaining))


__all__ = ["RestHandler"]
