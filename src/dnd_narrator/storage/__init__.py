"""Durable storage for characters, sessions and worlds."""

from dnd_narrator.storage.store import StateStore

__all__ = ["StateStore"]
