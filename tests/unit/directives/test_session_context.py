"""Tests for opening a host session."""

from __future__ import annotations

from collections.abc import Generator

import pytest
import structlog

from dnd_narrator.core.config import Settings
from dnd_narrator.core.logging import clear_context, get_logger
from dnd_narrator.directives.context import open_session
from dnd_narrator.models.catalog import World
from dnd_narrator.models.character import CharacterState
from dnd_narrator.models.session import SessionState


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    """Restore the default structlog configuration after each test."""
    yield
    clear_context()
    structlog.reset_defaults()


class TestOpenSession:
    """Tests for open_session."""

    def test_fresh_session(self, fighter: CharacterState) -> None:
        """Test a new session and world are created for the character."""
        settings = Settings(debug=True, log_level="INFO")

        context = open_session(fighter, settings=settings)

        assert context.session.character_id == fighter.id
        assert context.session.world_id == context.world.id
        assert context.settings is settings
        assert context.store is None

    def test_resumes_given_state(self, fighter: CharacterState, session: SessionState, world: World) -> None:
        """Test a passed session and world are used as they are."""
        context = open_session(fighter, session, world, settings=Settings(debug=True))

        assert context.session is session
        assert context.world is world

    def test_logging_follows_settings(self, fighter: CharacterState, capsys: pytest.CaptureFixture[str]) -> None:
        """Test production settings emit JSON lines at the configured level."""
        open_session(fighter, settings=Settings(debug=False, log_level="WARNING"))

        get_logger("tests").info("quiet event")
        get_logger("tests").warning("loud event")

        output = capsys.readouterr().out
        assert "quiet event" not in output
        assert '"event": "loud event"' in output
