"""Tests for the exception hierarchy."""

from __future__ import annotations

from dnd_narrator.core.exceptions import (
    CombatError,
    ConfigurationError,
    DiceRollError,
    DirectiveError,
    DndNarratorError,
    GameEngineError,
    GenerationError,
    ResourceExhaustedError,
    StorageError,
    ValidationError,
)


class TestDndNarratorError:
    """Tests for the base DndNarratorError exception."""

    def test_basic_message(self) -> None:
        """Test exception with basic message."""
        exc = DndNarratorError("Test error message")
        assert exc.message == "Test error message"
        assert exc.details == {}
        assert str(exc) == "Test error message"

    def test_with_details(self) -> None:
        """Test exception with additional details."""
        exc = DndNarratorError("Test error", details={"key": "value", "count": 42})
        assert exc.details == {"key": "value", "count": 42}
        assert "key='value'" in str(exc)
        assert "count=42" in str(exc)

    def test_repr(self) -> None:
        """Test exception repr output."""
        repr_str = repr(DndNarratorError("Test", details={"x": 1}))
        assert "DndNarratorError" in repr_str
        assert "Test" in repr_str


class TestDirectiveError:
    """Tests for directive exceptions."""

    def test_directive_context(self) -> None:
        """Test DirectiveError records the directive type and offset."""
        exc = DirectiveError("Bad amount", directive_type="DAMAGE", offset=0)
        assert exc.details == {"directive_type": "DAMAGE", "offset": 0}


class TestGameEngineExceptions:
    """Tests for game engine exceptions."""

    def test_combat_error_context(self) -> None:
        """Test CombatError with combat context."""
        exc = CombatError("Invalid target", combatant_id="abc123", round_number=3)
        assert exc.details["combatant_id"] == "abc123"
        assert exc.details["round_number"] == 3
        assert isinstance(exc, GameEngineError)

    def test_dice_roll_error(self) -> None:
        """Test DiceRollError with expression."""
        exc = DiceRollError("Invalid expression", expression="2d")
        assert exc.details["expression"] == "2d"

    def test_resource_exhausted_error(self) -> None:
        """Test ResourceExhaustedError records what ran out."""
        exc = ResourceExhaustedError(
            "No level 1 spell slots remaining!",
            resource="spell_slot_1",
            required=1,
            available=0,
        )
        assert exc.message == "No level 1 spell slots remaining!"
        assert exc.details == {"resource": "spell_slot_1", "required": 1, "available": 0}
        assert isinstance(exc, GameEngineError)
        assert isinstance(exc, DndNarratorError)


class TestCollaboratorExceptions:
    """Tests for generator and storage exceptions."""

    def test_generation_error(self) -> None:
        """Test GenerationError with request context."""
        exc = GenerationError("Timed out", item_name="Glowing Orb", placeholder_id="glowing_orb")
        assert exc.details["item_name"] == "Glowing Orb"
        assert exc.details["placeholder_id"] == "glowing_orb"

    def test_storage_error(self) -> None:
        """Test StorageError with record id."""
        exc = StorageError("Disk full", record_id="session-1")
        assert exc.details["record_id"] == "session-1"


class TestValidationExceptions:
    """Tests for configuration and validation exceptions."""

    def test_configuration_error(self) -> None:
        """Test ConfigurationError with config key."""
        exc = ConfigurationError("Bad value", config_key="log_level")
        assert exc.details["config_key"] == "log_level"

    def test_validation_error(self) -> None:
        """Test ValidationError with field context."""
        exc = ValidationError("Too many points", field_name="ability_increases", invalid_value=3)
        assert exc.details["field_name"] == "ability_increases"
        assert exc.details["invalid_value"] == 3

    def test_validation_error_keeps_falsy_zero(self) -> None:
        """Test a zero invalid value is still recorded."""
        exc = ValidationError("Bad", field_name="level", invalid_value=0)
        assert exc.details["invalid_value"] == 0
