"""Narrative progression: locations, relationships, quests and experience."""

from __future__ import annotations

from dnd_narrator.core.logging import get_logger
from dnd_narrator.directives.context import SessionContext
from dnd_narrator.directives.handlers.base import DirectiveHandler, HandlerMethod, HandlerResult
from dnd_narrator.directives.types import Directive, DirectiveType
from dnd_narrator.engine.arguments import parse_int
from dnd_narrator.models.character import ExperienceEntry
from dnd_narrator.models.enums import NotificationKind
from dnd_narrator.models.session import Notification


logger = get_logger(__name__)


class NarrativeHandler(DirectiveHandler):
    """LOCATION, RELATIONSHIP, ACTION, QUEST_ADD, XP_GAIN and LEVEL_UP."""

    name = "narrative"

    def routes(self) -> dict[DirectiveType, HandlerMethod]:
        return {
            DirectiveType.LOCATION: self.location,
            DirectiveType.RELATIONSHIP: self.relationship,
            DirectiveType.ACTION: self.action,
            DirectiveType.QUEST_ADD: self.quest,
            DirectiveType.XP_GAIN: self.experience,
            DirectiveType.LEVEL_UP: self.level_up,
        }

    def location(self, directive: Directive, context: SessionContext) -> HandlerResult:
        name = directive.payload.strip()
        if not name:
            return HandlerResult.ignored()
        session = context.session
        session.current_location = name
        if name not in session.visited_locations:
            session.visited_locations.append(name)
        return HandlerResult.applied()

    def relationship(self, directive: Directive, context: SessionContext) -> HandlerResult:
        entity = directive.field(0)
        delta = parse_int(directive.field(1))
        if not entity or delta is None:
            return HandlerResult.ignored()
        relationships = context.session.relationships
        relationships[entity] = relationships.get(entity, 0) + delta
        return HandlerResult.applied()

    def action(self, directive: Directive, context: SessionContext) -> HandlerResult:
        text = directive.payload.strip()
        actions = context.session.suggested_actions
        if not text or text in actions:
            return HandlerResult.ignored()
        actions.append(text)
        return HandlerResult.applied()

    def quest(self, directive: Directive, context: SessionContext) -> HandlerResult:
        text = directive.payload.strip()
        quest_log = context.session.quest_log
        if not text or text in quest_log:
            return HandlerResult.ignored()
        quest_log.append(text)
        return HandlerResult.applied(Notification.info(f"Quest added: {text}"))

    def experience(self, directive: Directive, context: SessionContext) -> HandlerResult:
        """Award experience; at or past the threshold a level up is pending.

        The announcement is made at most once per message. Leveling itself is
        a separate caller-driven interaction.
        """
        amount = parse_int(directive.field(0))
        if amount is None:
            return HandlerResult.ignored()

        character = context.character
        track = character.experience
        track.current = max(0, track.current + amount)
        track.history.append(ExperienceEntry(amount=amount, reason=directive.field(1, "Unknown") or "Unknown"))
        logger.info("Experience gained", amount=amount, total=track.current, threshold=track.threshold)

        notifications = [Notification.info(f"+{amount} XP ({track.current}/{track.threshold})", amount=amount)]
        if track.current >= track.threshold:
            character.pending_level_up = True
            if not context.level_up_notified:
                context.level_up_notified = True
                notifications.append(
                    Notification(
                        kind=NotificationKind.LEVEL_UP,
                        content=f"LEVEL UP AVAILABLE! You have reached {track.current} XP.",
                        metadata={"level": character.level + 1, "experience": track.current},
                    )
                )
        return HandlerResult.applied(*notifications)

    def level_up(self, directive: Directive, context: SessionContext) -> HandlerResult:
        # Leveling is caller-driven; the directive is only acknowledged
        return HandlerResult.applied()


__all__ = ["NarrativeHandler"]
