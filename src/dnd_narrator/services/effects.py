"""Effect resolution and the per-source modifier ledger.

Items and spells carry free-text effect strings. Each string resolves to
one of four shapes:

* a directive (``APPLY_RESISTANCE[player|fire]``) to fold back into the pass,
* a signed numeric modifier (``+1 AC``, ``-2 saves``),
* an advantage/disadvantage note,
* plain description with no mechanical weight.

Modifiers are stored on the character keyed by the id of the source that
granted them, so removing a source removes exactly its contribution. The
same holds for reversible directives (defenses and conditions): the grant
ledger remembers which source is responsible for each one, so ending a
source only undoes what no other source still grants and never touches
what the character had on its own.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from dnd_narrator.core.logging import get_logger
from dnd_narrator.directives.parser import DirectiveParser
from dnd_narrator.directives.types import INVERSE_DIRECTIVES, Directive, DirectiveType
from dnd_narrator.models.character import CharacterState, ModifierSet
from dnd_narrator.models.enums import DefenseCategory
from dnd_narrator.models.session import SessionState


logger = get_logger(__name__)

MODIFIER_PATTERN = re.compile(r"^([+-]\d+)\s+(.+)$")
CONDITIONAL_PATTERN = re.compile(r"\b(advantage|disadvantage)\b", re.IGNORECASE)

AC = "AC"
SAVES = "saves"
TO_HIT = "to_hit"
DAMAGE = "damage"

PLAYER_TARGETS = frozenset({"player", "you"})

GRANTED_DEFENSES: dict[DirectiveType, DefenseCategory] = {
    DirectiveType.APPLY_RESISTANCE: DefenseCategory.RESISTANCE,
    DirectiveType.APPLY_IMMUNITY: DefenseCategory.IMMUNITY,
    DirectiveType.APPLY_VULNERABILITY: DefenseCategory.VULNERABILITY,
}

_parser = DirectiveParser()


@dataclass
class ResolvedEffect:
    """The combined resolved shape of one or more effect strings."""

    directives: list[Directive] = field(default_factory=list)
    modifiers: dict[str, int] = field(default_factory=dict)
    conditional: list[str] = field(default_factory=list)
    descriptive: list[str] = field(default_factory=list)

    @property
    def has_passive(self) -> bool:
        return bool(self.modifiers or self.conditional)

    def merge(self, other: ResolvedEffect) -> None:
        self.directives.extend(other.directives)
        for key, value in other.modifiers.items():
            self.modifiers[key] = self.modifiers.get(key, 0) + value
        self.conditional.extend(other.conditional)
        self.descriptive.extend(other.descriptive)


def normalize_modifier_target(target: str) -> str:
    """Map free text such as 'armor class' or 'to hit' onto a modifier key."""
    lower = target.strip().lower()
    if lower in ("ac", "armor class") or lower.startswith(("ac ", "armor class ")):
        return AC
    if "save" in lower or "saving throw" in lower:
        return SAVES
    if "hit" in lower or "attack" in lower:
        return TO_HIT
    if "damage" in lower:
        return DAMAGE
    return re.sub(r"\s+", "_", lower)


def resolve_effect(effect: str) -> ResolvedEffect:
    """Resolve a single effect string.

    Args:
        effect: e.g. '+1 AC', 'HEAL[player|2d4+2]', 'advantage on poison saves'.

    Returns:
        ResolvedEffect with exactly one populated facet.
    """
    text = effect.strip()
    resolved = ResolvedEffect()
    if not text:
        return resolved

    directive = _parser.parse_effect(text)
    if directive is not None:
        resolved.directives.append(directive)
        return resolved

    match = MODIFIER_PATTERN.match(text)
    if match:
        key = normalize_modifier_target(match.group(2))
        resolved.modifiers[key] = int(match.group(1))
        return resolved

    if CONDITIONAL_PATTERN.search(text):
        resolved.conditional.append(text)
        return resolved

    resolved.descriptive.append(text)
    return resolved


def resolve_effects(effects: Iterable[str]) -> ResolvedEffect:
    """Resolve and combine several effect strings; same-key modifiers add up."""
    combined = ResolvedEffect()
    for effect in effects:
        combined.merge(resolve_effect(effect))
    return combined


# =============================================================================
# Modifier Ledger
# =============================================================================


def apply_modifiers(
    character: CharacterState,
    source_id: str,
    resolved: ResolvedEffect,
    *,
    label: str = "",
) -> bool:
    """Record a source's passive modifiers, replacing any earlier entry.

    Returns:
        True if anything was recorded.
    """
    if not resolved.has_passive:
        return False
    character.active_modifiers[source_id] = ModifierSet(
        values=dict(resolved.modifiers),
        conditional=list(resolved.conditional),
        label=label,
    )
    logger.debug("Modifiers applied", source_id=source_id, modifiers=resolved.modifiers)
    return True


def remove_modifiers(character: CharacterState, source_id: str) -> bool:
    """Remove exactly the modifiers recorded for ``source_id``.

    Returns:
        True if the source had an entry.
    """
    removed = character.active_modifiers.pop(source_id, None)
    if removed is not None:
        logger.debug("Modifiers removed", source_id=source_id)
    return removed is not None


# =============================================================================
# Grant Ledger
# =============================================================================


def grant_key(directive: Directive) -> str | None:
    """Canonical key of a reversible directive a source can own.

    Defenses only count when they target the player. Returns None for
    directives the ledger does not track.
    """
    if directive.type in GRANTED_DEFENSES:
        target = directive.field(0)
        damage_type = (directive.field(1) or "").lower()
        if not target or target.strip().lower() not in PLAYER_TARGETS or not damage_type:
            return None
        return f"{directive.type}[player|{damage_type}]"
    if directive.type == DirectiveType.STATUS_ADD:
        name = (directive.field(0) or "").lower()
        return f"{directive.type}[{name}]" if name else None
    return None


def _is_present(character: CharacterState, session: SessionState | None, directive: Directive) -> bool:
    if directive.type in GRANTED_DEFENSES:
        damage_type = (directive.field(1) or "").lower()
        return damage_type in character.defenses(GRANTED_DEFENSES[directive.type])
    return session is not None and session.has_condition(directive.field(0) or "")


def record_grants(
    character: CharacterState,
    source_id: str,
    directives: Iterable[Directive],
    session: SessionState | None = None,
) -> list[str]:
    """Record which reversible directives ``source_id`` is responsible for.

    Call before the directives are applied. A defense or condition the
    character already has that no other source holds is innate, so the
    source does not take ownership of it and will never undo it.

    Returns:
        The keys now owned by the source.
    """
    previous = set(character.granted_effects.get(source_id, []))
    held = {key for other, keys in character.granted_effects.items() if other != source_id for key in keys}
    owned: list[str] = []
    for directive in directives:
        key = grant_key(directive)
        if key is None or key in owned:
            continue
        if key in previous or key in held or not _is_present(character, session, directive):
            owned.append(key)

    if owned:
        character.granted_effects[source_id] = owned
    else:
        character.granted_effects.pop(source_id, None)
    return owned


def release_grants(character: CharacterState, source_id: str) -> list[Directive]:
    """Forget a source's grants.

    Returns:
        Directives undoing the grants no remaining source still holds.
    """
    owned = character.granted_effects.pop(source_id, [])
    inverses = undo_grants(character, owned)
    if owned:
        logger.debug("Grants released", source_id=source_id, undone=[d.raw for d in inverses])
    return inverses


def undo_grants(character: CharacterState, keys: Iterable[str]) -> list[Directive]:
    """Inverse directives for grant keys that no source holds any more."""
    held = {key for owned in character.granted_effects.values() for key in owned}
    inverses: list[Directive] = []
    for key in keys:
        if key in held:
            continue
        granted = _parser.parse_effect(key)
        if granted is None:
            continue
        inverse = _parser.parse_effect(f"{INVERSE_DIRECTIVES[granted.type]}[{granted.payload}]")
        if inverse is not None:
            inverses.append(inverse)
    return inverses


__all__ = [
    "AC",
    "SAVES",
    "TO_HIT",
    "DAMAGE",
    "PLAYER_TARGETS",
    "GRANTED_DEFENSES",
    "ResolvedEffect",
    "normalize_modifier_target",
    "resolve_effect",
    "resolve_effects",
    "apply_modifiers",
    "remove_modifiers",
    "grant_key",
    "record_grants",
    "release_grants",
    "undo_grants",
]
