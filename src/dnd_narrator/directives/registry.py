"""Exactly-once bookkeeping for directive occurrences."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from dnd_narrator.core.logging import get_logger
from dnd_narrator.directives.types import DedupIdentity, Directive


logger = get_logger(__name__)


class DedupRegistry:
    """Identities of directives already handled in the current message.

    The registry belongs to one session and is reset when a new message
    begins. Offsets restart at zero with every message, so stale identities
    would otherwise suppress unrelated directives.
    """

    def __init__(self) -> None:
        self._seen: set[DedupIdentity] = set()

    def __contains__(self, item: Directive | DedupIdentity) -> bool:
        identity = item.identity if isinstance(item, Directive) else item
        return identity in self._seen

    def __len__(self) -> int:
        return len(self._seen)

    def __iter__(self) -> Iterator[DedupIdentity]:
        return iter(self._seen)

    def mark(self, item: Directive | DedupIdentity) -> None:
        identity = item.identity if isinstance(item, Directive) else item
        self._seen.add(identity)

    def pending(self, directives: Iterable[Directive]) -> list[Directive]:
        """Directives from ``directives`` not yet handled, in order."""
        return [directive for directive in directives if directive.identity not in self._seen]

    def reset(self) -> None:
        if self._seen:
            logger.debug("Dedup registry reset", cleared=len(self._seen))
        self._seen.clear()


__all__ = ["DedupRegistry"]
