"""Spellcasting and concentration directives."""

from __future__ import annotations

from dnd_narrator.catalog import resolve_spell
from dnd_narrator.core.exceptions import ResourceExhaustedError
from dnd_narrator.core.logging import get_logger
from dnd_narrator.directives.context import SessionContext
from dnd_narrator.directives.handlers.base import DirectiveHandler, HandlerMethod, HandlerResult
from dnd_narrator.directives.types import Directive, DirectiveType
from dnd_narrator.engine.arguments import parse_int
from dnd_narrator.models.enums import NotificationKind
from dnd_narrator.models.session import Notification
from dnd_narrator.services.equipment import refresh_armor_class
from dnd_narrator.services.spellcasting import (
    cast_spell,
    end_concentration,
    learn_spell,
    start_concentration,
)


logger = get_logger(__name__)


def split_cast_payload(directive: Directive, context: SessionContext) -> tuple[str | None, int | None]:
    """Read ``[id|name|level]``, ``[name|level]`` or ``[name]``.

    Returns:
        The spell identifier and the requested slot level, if any.
    """
    fields = directive.fields()
    if not fields or not fields[0]:
        return None, None
    if len(fields) >= 3:
        identifier = fields[0]
        if resolve_spell(identifier, context.world) is None and fields[1]:
            identifier = fields[1]
        return identifier, parse_int(fields[2])
    if len(fields) == 2:
        level = parse_int(fields[1])
        if level is not None:
            return fields[0], level
        # [id|name]
        if resolve_spell(fields[0], context.world) is None and fields[1]:
            return fields[1], None
    return fields[0], None


class SpellHandler(DirectiveHandler):
    """CAST_SPELL, LEARN_SPELL, CONCENTRATION_START and CONCENTRATION_END."""

    name = "spellcasting"

    def routes(self) -> dict[DirectiveType, HandlerMethod]:
        return {
            DirectiveType.CAST_SPELL: self.cast,
            DirectiveType.LEARN_SPELL: self.learn,
            DirectiveType.CONCENTRATION_START: self.start_concentration,
            DirectiveType.CONCENTRATION_END: self.end_concentration,
        }

    def cast(self, directive: Directive, context: SessionContext) -> HandlerResult:
        """Cast a spell; a missing slot is refused with state untouched."""
        identifier, level = split_cast_payload(directive, context)
        if not identifier:
            return HandlerResult.ignored()

        try:
            result = cast_spell(
                context.character,
                context.session,
                identifier,
                level=level,
                world=context.world,
            )
        except ResourceExhaustedError as exc:
            logger.info("Cast refused", spell=identifier, reason=exc.message)
            return HandlerResult.refused(exc.message, spell=identifier, **exc.details)

        refresh_armor_class(context.character, context.session, context.world, context.settings.rules)
        notifications = [Notification.info(result.message, spell=result.spell.name, slot_level=result.slot_level)]
        if result.spell.concentration:
            notifications.append(
                Notification(
                    kind=NotificationKind.CONCENTRATION,
                    content=f"Concentrating on {result.spell.name}",
                    metadata={"spell": result.spell.name},
                )
            )
        return HandlerResult.applied(*notifications, derived=result.directives)

    def learn(self, directive: Directive, context: SessionContext) -> HandlerResult:
        name = directive.field(0)
        if not name:
            return HandlerResult.ignored()
        if not learn_spell(context.character, name, level=parse_int(directive.field(1)), world=context.world):
            return HandlerResult.ignored()
        return HandlerResult.applied(Notification.info(f"Learned {name}", spell=name))

    def start_concentration(self, directive: Directive, context: SessionContext) -> HandlerResult:
        spell = directive.field(0)
        if not spell:
            return HandlerResult.ignored()
        current = context.session.concentration
        if current is not None and current.spell_name.lower() == spell.lower():
            return HandlerResult.ignored()

        derived = start_concentration(context.character, context.session, spell)
        refresh_armor_class(context.character, context.session, context.world, context.settings.rules)
        return HandlerResult.applied(
            Notification(
                kind=NotificationKind.CONCENTRATION,
                content=f"Concentrating on {spell}",
                metadata={"spell": spell},
            ),
            derived=derived,
        )

    def end_concentration(self, directive: Directive, context: SessionContext) -> HandlerResult:
        current = context.session.concentration
        if current is None:
            return HandlerResult.ignored()
        derived = end_concentration(context.character, context.session)
        refresh_armor_class(context.character, context.session, context.world, context.settings.rules)
        return HandlerResult.applied(
            Notification(
                kind=NotificationKind.CONCENTRATION,
                content=f"Concentration on {current.spell_name} ended",
                metadata={"spell": current.spell_name},
            ),
            derived=derived,
        )


__all__ = ["SpellHandler", "split_cast_payload"]
