"""Inventory, currency, consumables and status conditions."""

from __future__ import annotations

import math

from dnd_narrator.catalog import resolve_item
from dnd_narrator.core.logging import get_logger
from dnd_narrator.directives.context import SessionContext
from dnd_narrator.directives.handlers.base import DirectiveHandler, HandlerMethod, HandlerResult
from dnd_narrator.directives.types import Directive, DirectiveType
from dnd_narrator.engine.arguments import parse_float, parse_int
from dnd_narrator.models.enums import NotificationKind
from dnd_narrator.models.session import InventorySlot, Notification, StatusCondition
from dnd_narrator.services.equipment import consume_item, find_owned_slot, set_equipped


logger = get_logger(__name__)


class InventoryHandler(DirectiveHandler):
    """INVENTORY_*, GOLD_CHANGE, USE_ITEM and STATUS_* directives."""

    name = "inventory"

    def routes(self) -> dict[DirectiveType, HandlerMethod]:
        return {
            DirectiveType.INVENTORY_ADD: self.add_item,
            DirectiveType.INVENTORY_REMOVE: self.remove_item,
            DirectiveType.INVENTORY_EQUIP: self.equip,
            DirectiveType.INVENTORY_UNEQUIP: self.unequip,
            DirectiveType.GOLD_CHANGE: self.change_gold,
            DirectiveType.USE_ITEM: self.use_item,
            DirectiveType.STATUS_ADD: self.add_status,
            DirectiveType.STATUS_REMOVE: self.remove_status,
        }

    # -------------------------------------------------------------------------
    # Items
    # -------------------------------------------------------------------------

    def add_item(self, directive: Directive, context: SessionContext) -> HandlerResult:
        """Add quantity of an item, registering a placeholder if it is unknown."""
        name = directive.field(0)
        quantity = parse_int(directive.field(1), 1) or 0
        if not name or quantity <= 0:
            return HandlerResult.ignored()

        item = resolve_item(name, context.world)
        if item is None:
            item = context.generation.request_item(name, context.world, context=context.world.description)

        session = context.session
        slot = session.find_slot(item.id) or session.find_slot_by_name(item.name)
        if slot is None:
            session.inventory.append(InventorySlot(item_id=item.id, name=item.name, quantity=quantity))
            total = quantity
        else:
            slot.quantity += quantity
            total = slot.quantity

        logger.info("Item added", item_id=item.id, quantity=quantity, total=total)
        return HandlerResult.applied(
            Notification.info(f"Added {item.name} x{quantity}", item_id=item.id, quantity=total)
        )

    def remove_item(self, directive: Directive, context: SessionContext) -> HandlerResult:
        """Remove quantity of an owned item; an empty slot is dropped (unequipped first)."""
        name = directive.field(0)
        quantity = parse_int(directive.field(1), 1) or 0
        if not name or quantity <= 0:
            return HandlerResult.ignored()

        session = context.session
        slot = find_owned_slot(session, name, context.world)
        if slot is None:
            return HandlerResult.ignored()

        derived: list[Directive] = []
        remaining = max(0, slot.quantity - quantity)
        if remaining == 0:
            if slot.equipped:
                change = set_equipped(
                    context.character,
                    session,
                    slot.item_id,
                    False,
                    world=context.world,
                    rules=context.settings.rules,
                )
                derived = change.directives
            session.inventory.remove(slot)
        else:
            slot.quantity = remaining

        logger.info("Item removed", item_id=slot.item_id, quantity=quantity, remaining=remaining)
        return HandlerResult.applied(
            Notification.info(f"Removed {slot.name} x{quantity}", item_id=slot.item_id, quantity=remaining),
            derived=derived,
        )

    def _set_equipped(self, directive: Directive, context: SessionContext, equipped: bool) -> HandlerResult:
        name = directive.field(0)
        if not name:
            return HandlerResult.ignored()
        change = set_equipped(
            context.character,
            context.session,
            name,
            equipped,
            world=context.world,
            rules=context.settings.rules,
        )
        if not change.changed:
            return HandlerResult.ignored()

        label = change.item.name if change.item else name
        verb = "Equipped" if equipped else "Unequipped"
        return HandlerResult.applied(
            Notification.info(f"{verb} {label} (AC {change.armor_class})", armor_class=change.armor_class),
            derived=change.directives,
        )

    def equip(self, directive: Directive, context: SessionContext) -> HandlerResult:
        return self._set_equipped(directive, context, True)

    def unequip(self, directive: Directive, context: SessionContext) -> HandlerResult:
        return self._set_equipped(directive, context, False)

    def use_item(self, directive: Directive, context: SessionContext) -> HandlerResult:
        """Consume one unit and replay the item's effects."""
        name = directive.field(0)
        if not name:
            return HandlerResult.ignored()
        result = consume_item(
            context.character,
            context.session,
            name,
            world=context.world,
            rules=context.settings.rules,
        )
        if not result.consumed:
            return HandlerResult.refused(result.message, item=name)
        return HandlerResult.applied(
            Notification.info(result.message, item_id=result.item.id if result.item else None),
            derived=result.directives,
        )

    # -------------------------------------------------------------------------
    # Currency
    # -------------------------------------------------------------------------

    def change_gold(self, directive: Directive, context: SessionContext) -> HandlerResult:
        """Apply a signed gold delta, clamped at zero and rounded to cents."""
        delta = parse_float(directive.field(0))
        if delta is None or delta == 0 or not math.isfinite(delta):
            return HandlerResult.ignored()

        session = context.session
        before = session.currency_gp
        after = round(max(0.0, before + delta), 2)
        session.currency_gp = after

        notifications = [Notification.info(f"Gold: {before:g} -> {after:g} gp", before=before, after=after)]
        if before + delta < 0:
            notifications.append(
                Notification(
                    kind=NotificationKind.WARNING,
                    content=f"Not enough gold: needed {-delta:g} gp, had {before:g} gp",
                    metadata={"shortfall": round(-(before + delta), 2)},
                )
            )
        return HandlerResult.applied(*notifications)

    # -------------------------------------------------------------------------
    # Status conditions
    # -------------------------------------------------------------------------

    def add_status(self, directive: Directive, context: SessionContext) -> HandlerResult:
        name = directive.field(0)
        if not name or context.session.has_condition(name):
            return HandlerResult.ignored()
        context.session.conditions.append(StatusCondition(name=name, note=directive.field(1, "") or ""))
        return HandlerResult.applied(Notification.info(f"Condition added: {name}", condition=name))

    def remove_status(self, directive: Directive, context: SessionContext) -> HandlerResult:
        name = directive.field(0)
        if not name or not context.session.has_condition(name):
            return HandlerResult.ignored()
        key = name.lower()
        context.session.conditions = [c for c in context.session.conditions if c.name.lower() != key]
        return HandlerResult.applied(Notification.info(f"Condition removed: {name}", condition=name))


__all__ = ["InventoryHandler"]
