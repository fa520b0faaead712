"""SQLite persistence for characters, sessions and worlds.

State is stored as pydantic JSON, one row per record. Saves requested while
a message is streaming are debounced: repeated requests for the same
session within the quiet period coalesce into a single write of the most
recently requested state. State is serialized when the save is requested,
on the caller's thread; the timer thread only writes the captured JSON. An
immediate save cancels the pending timer and writes at once.

Storage location: ~/.dnd_narrator/narrator.db (see StorageSettings)
"""

from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Generator, NamedTuple

from pydantic import ValidationError as PydanticValidationError

from dnd_narrator.core.config import StorageSettings, get_settings
from dnd_narrator.core.exceptions import StorageError
from dnd_narrator.core.logging import get_logger
from dnd_narrator.models.catalog import World
from dnd_narrator.models.character import CharacterState
from dnd_narrator.models.session import SessionState

if TYPE_CHECKING:
    from dnd_narrator.directives.context import SessionContext

logger = get_logger(__name__)


class SaveSnapshot(NamedTuple):
    """Serialized rows of one context, captured when the save was requested."""

    session_id: str
    rows: tuple[tuple[str, str, str], ...]

    @classmethod
    def capture(cls, context: SessionContext) -> SaveSnapshot:
        return cls(
            session_id=context.session_id,
            rows=(
                ("characters", context.character.id, context.character.model_dump_json()),
                ("sessions", context.session.id, context.session.model_dump_json()),
                ("worlds", context.world.id, context.world.model_dump_json()),
            ),
        )


# =============================================================================
# Store
# =============================================================================


class StateStore:
    """SQLite store with debounced, coalescing saves.

    Example:
        >>> store = StateStore(tmp_path / "narrator.db", debounce_seconds=0)
        >>> store.save(context, immediate=True)
        >>> store.load_session(context.session_id)
    """

    SCHEMA_VERSION = 1

    def __init__(
        self,
        db_path: str | Path | None = None,
        *,
        debounce_seconds: float | None = None,
        settings: StorageSettings | None = None,
    ) -> None:
        """Initialize the store and its schema.

        Args:
            db_path: Path to the database file. Defaults to the configured path.
            debounce_seconds: Quiet period before a coalesced save is written.
            settings: Storage settings; loaded from the environment if omitted.
        """
        settings = settings or get_settings().storage
        self.db_path = Path(db_path) if db_path is not None else settings.database_path
        self.debounce_seconds = (
            debounce_seconds if debounce_seconds is not None else settings.save_debounce_seconds
        )
        self._lock = threading.Lock()
        self._pending: dict[str, SaveSnapshot] = {}
        self._timers: dict[str, threading.Timer] = {}

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()
        logger.info("State store initialized", db_path=str(self.db_path))

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a database connection with commit/rollback handling."""
        try:
            conn = sqlite3.connect(str(self.db_path))
        except sqlite3.Error as exc:
            raise StorageError(f"Cannot open database {self.db_path}: {exc}") from exc
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self._get_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY
                )
            """)
            for table in ("characters", "sessions", "worlds"):
                cursor.execute(f"""
                    CREATE TABLE IF NOT EXISTS {table} (
                        id TEXT PRIMARY KEY,
                        data TEXT NOT NULL,
                        updated_at TEXT NOT NULL
                    )
                """)
            cursor.execute(
                "INSERT OR REPLACE INTO schema_version (version) VALUES (?)",
                (self.SCHEMA_VERSION,),
            )

    # =========================================================================
    # Saving
    # =========================================================================

    def save(self, context: SessionContext, *, immediate: bool = False) -> None:
        """Persist a session context's character, session and world.

        Args:
            context: The context to persist.
            immediate: Write now instead of waiting out the debounce window.

        Raises:
            StorageError: If an immediate write fails.
        """
        snapshot = SaveSnapshot.capture(context)
        session_id = snapshot.session_id
        with self._lock:
            timer = self._timers.pop(session_id, None)
            if timer is not None:
                timer.cancel()
            if immediate or self.debounce_seconds <= 0:
                self._pending.pop(session_id, None)
            else:
                self._pending[session_id] = snapshot
                timer = threading.Timer(self.debounce_seconds, self._flush_one, args=(session_id,))
                timer.daemon = True
                self._timers[session_id] = timer
                timer.start()
                return
        self._write(snapshot)

    def flush(self) -> int:
        """Write every pending save now.

        Returns:
            Number of sessions written.
        """
        with self._lock:
            pending = list(self._pending.values())
            self._pending.clear()
            for timer in self._timers.values():
                timer.cancel()
            self._timers.clear()
        for snapshot in pending:
            self._write(snapshot)
        return len(pending)

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    def _flush_one(self, session_id: str) -> None:
        with self._lock:
            self._timers.pop(session_id, None)
            snapshot = self._pending.pop(session_id, None)
        if snapshot is None:
            return
        try:
            self._write(snapshot)
        except StorageError:
            logger.exception("Debounced save failed", session_id=session_id)

    def _write(self, snapshot: SaveSnapshot) -> None:
        now = datetime.now().isoformat()
        try:
            with self._get_connection() as conn:
                cursor = conn.cursor()
                for table, record_id, data in snapshot.rows:
                    cursor.execute(
                        f"INSERT OR REPLACE INTO {table} (id, data, updated_at) VALUES (?, ?, ?)",
                        (record_id, data, now),
                    )
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to save session: {exc}", record_id=snapshot.session_id) from exc
        logger.debug("Session saved", session_id=snapshot.session_id)

    # =========================================================================
    # Loading
    # =========================================================================

    def _load(self, table: str, record_id: str) -> str | None:
        try:
            with self._get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(f"SELECT data FROM {table} WHERE id = ?", (record_id,))
                row = cursor.fetchone()
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to read {table}: {exc}", record_id=record_id) from exc
        return row[0] if row else None

    def load_character(self, character_id: str) -> CharacterState | None:
        """Load a character by id.

        Raises:
            StorageError: If the row exists but cannot be decoded.
        """
        data = self._load("characters", character_id)
        if data is None:
            return None
        try:
            return CharacterState.model_validate_json(data)
        except PydanticValidationError as exc:
            raise StorageError(f"Corrupt character record: {exc}", record_id=character_id) from exc

    def load_session(self, session_id: str) -> SessionState | None:
        """Load a session by id."""
        data = self._load("sessions", session_id)
        if data is None:
            return None
        try:
            return SessionState.model_validate_json(data)
        except PydanticValidationError as exc:
            raise StorageError(f"Corrupt session record: {exc}", record_id=session_id) from exc

    def load_world(self, world_id: str) -> World | None:
        """Load a world by id."""
        data = self._load("worlds", world_id)
        if data is None:
            return None
        try:
            return World.model_validate_json(data)
        except PydanticValidationError as exc:
            raise StorageError(f"Corrupt world record: {exc}", record_id=world_id) from exc

    def delete_session(self, session_id: str) -> bool:
        """Delete a session and drop any pending save for it.

        Returns:
            True if deleted, False if not found.
        """
        with self._lock:
            self._pending.pop(session_id, None)
            timer = self._timers.pop(session_id, None)
            if timer is not None:
                timer.cancel()
        try:
            with self._get_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("DELETE FROM sessions WHERE id = ?", (session_id,))
                deleted = cursor.rowcount > 0
        except sqlite3.Error as exc:
            raise StorageError(f"Failed to delete session: {exc}", record_id=session_id) from exc

        if deleted:
            logger.info("Deleted session", session_id=session_id)
        return deleted


__all__ = ["SaveSnapshot", "StateStore"]
