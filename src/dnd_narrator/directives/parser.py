"""Directive extraction from generated text.

A directive is an uppercase identifier immediately followed by a bracketed
payload, e.g. ``DAMAGE[player|10|fire]``. Payloads may nest further
directives, so the closing bracket is found by depth counting rather than
by a regular expression.

Example:
    >>> result = DirectiveParser().parse("You take DAMAGE[player|10|fire] damage.")
    >>> result.clean_text
    'You take damage.'
    >>> result.directives[0].fields()
    ['player', '10', 'fire']
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from dnd_narrator.core.logging import get_logger
from dnd_narrator.directives.types import Directive, DirectiveType


logger = get_logger(__name__)

IDENTIFIER_PATTERN = re.compile(r"\b([A-Z_]+)\[")
DISALLOWED_PAYLOAD_CHARS = re.compile(r"[^a-zA-Z0-9_|\-,. \[\]]")
WHITESPACE_RUN = re.compile(r"\s+")


@dataclass(frozen=True)
class ParseResult:
    """Directives found in a text plus the text with their spans removed."""

    directives: list[Directive] = field(default_factory=list)
    clean_text: str = ""


def sanitize_payload(payload: str) -> str:
    """Drop every character outside the payload allow-list.

    Letters, digits, underscore, pipe, hyphen, comma, period, space and
    square brackets survive; brackets stay so nested directives remain
    parseable.
    """
    return DISALLOWED_PAYLOAD_CHARS.sub("", payload).strip()


def find_closing_bracket(text: str, open_index: int) -> int | None:
    """Index of the bracket closing the one at ``open_index``, or None."""
    depth = 0
    for index in range(open_index, len(text)):
        char = text[index]
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth == 0:
                return index
    return None


class DirectiveParser:
    """Extracts directives from a text buffer.

    The parser is stateless; the same instance can parse every prefix of a
    streaming buffer.
    """

    def parse(self, text: str, *, partial: bool = False, sanitize: bool = True) -> ParseResult:
        """Parse directives out of ``text``.

        Args:
            text: Raw text, possibly a prefix of a longer stream.
            partial: The buffer may still grow. Scanning stops at the first
                unclosed candidate, because later text may belong to its
                payload. In full mode the candidate is discarded and
                scanning resumes after its opening bracket.
            sanitize: Apply the payload allow-list. Catalog effect strings
                are trusted and keep their dice arithmetic.

        Returns:
            ParseResult with directives in source order and the clean text.
        """
        directives: list[Directive] = []
        spans: list[tuple[int, int]] = []
        position = 0

        while True:
            match = IDENTIFIER_PATTERN.search(text, position)
            if match is None:
                break

            open_index = match.end() - 1
            close_index = find_closing_bracket(text, open_index)
            if close_index is None:
                if partial:
                    break
                logger.debug("Unclosed directive discarded", identifier=match.group(1), offset=match.start())
                position = open_index + 1
                continue

            directive_type = DirectiveType.lookup(match.group(1))
            if directive_type is None:
                # Unknown identifiers stay in the text, nested content included
                position = close_index + 1
                continue

            payload = text[open_index + 1 : close_index]
            directives.append(
                Directive(
                    type=directive_type,
                    payload=sanitize_payload(payload) if sanitize else payload.strip(),
                    raw=text[match.start() : close_index + 1],
                    start=match.start(),
                    end=close_index + 1,
                )
            )
            spans.append((match.start(), close_index + 1))
            position = close_index + 1

        return ParseResult(directives=directives, clean_text=strip_spans(text, spans))

    def parse_effect(self, text: str) -> Directive | None:
        """Parse a trusted effect string that is exactly one directive.

        Returns:
            The directive when the whole string is a single known directive.
        """
        stripped = text.strip()
        result = self.parse(stripped, sanitize=False)
        if len(result.directives) == 1:
            directive = result.directives[0]
            if directive.start == 0 and directive.end == len(stripped):
                return directive
        return None


def strip_spans(text: str, spans: list[tuple[int, int]]) -> str:
    """Remove the given spans by position and normalize whitespace."""
    pieces: list[str] = []
    cursor = 0
    for start, end in spans:
        pieces.append(text[cursor:start])
        cursor = end
    pieces.append(text[cursor:])
    return WHITESPACE_RUN.sub(" ", "".join(pieces)).strip()


_default_parser = DirectiveParser()


def parse_directives(text: str, *, partial: bool = False) -> ParseResult:
    """Parse with the module-level parser."""
    return _default_parser.parse(text, partial=partial)


def clean_text(text: str) -> str:
    """Text with every known directive span removed."""
    return _default_parser.parse(text).clean_text


__all__ = [
    "IDENTIFIER_PATTERN",
    "ParseResult",
    "DirectiveParser",
    "sanitize_payload",
    "find_closing_bracket",
    "strip_spans",
    "parse_directives",
    "clean_text",
]
