"""Directive types, parsing and the dedup registry.

The session context, handlers and dispatch orchestrator depend on the rules
services and are imported from their own modules.
"""

from __future__ import annotations

from dnd_narrator.directives.parser import (
    DirectiveParser,
    ParseResult,
    clean_text,
    parse_directives,
    sanitize_payload,
)
from dnd_narrator.directives.registry import DedupRegistry
from dnd_narrator.directives.types import (
    DEFENSE_TOGGLES,
    INVERSE_DIRECTIVES,
    DedupIdentity,
    Directive,
    DirectiveType,
)


__all__ = [
    "DEFENSE_TOGGLES",
    "INVERSE_DIRECTIVES",
    "DedupIdentity",
    "DedupRegistry",
    "Directive",
    "DirectiveParser",
    "DirectiveType",
    "ParseResult",
    "clean_text",
    "parse_directives",
    "sanitize_payload",
]
