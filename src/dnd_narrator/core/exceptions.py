"""Custom exception hierarchy for the D&D narration interpreter.

Every exception raised by this package inherits from DndNarratorError so
callers can catch the whole family at a single boundary. The directive
interpreter itself never lets these escape a dispatch pass: handlers raise
them internally and the orchestrator logs and converts them.

Example:
    >>> from dnd_narrator.core.exceptions import ResourceExhaustedError
    >>> raise ResourceExhaustedError("No slots", resource="spell_slot_1", available=0)
"""

from __future__ import annotations

from typing import Any


class DndNarratorError(Exception):
    """Base exception for all narration interpreter errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Directive Domain Exceptions
# =============================================================================


class DirectiveError(DndNarratorError):
    """Raised when a directive cannot be applied by the handler given it.

    The orchestrator catches it, logs it and treats the directive as a
    no-op.
    """

    def __init__(
        self,
        message: str,
        *,
        directive_type: str | None = None,
        offset: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize directive error with directive context.

        Args:
            message: Human-readable error description.
            directive_type: Identifier of the offending directive.
            offset: Start offset of the directive in the source text.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if directive_type:
            combined_details["directive_type"] = directive_type
        if offset is not None:
            combined_details["offset"] = offset
        super().__init__(message, details=combined_details)


# =============================================================================
# Game Engine Domain Exceptions
# =============================================================================


class GameEngineError(DndNarratorError):
    """Base exception for rules and state errors."""


class CombatError(GameEngineError):
    """Raised when encounter management encounters an error."""

    def __init__(
        self,
        message: str,
        *,
        combatant_id: str | None = None,
        round_number: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize combat error with combat context.

        Args:
            message: Human-readable error description.
            combatant_id: Identifier of the combatant involved.
            round_number: Current combat round when error occurred.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if combatant_id:
            combined_details["combatant_id"] = combatant_id
        if round_number is not None:
            combined_details["round_number"] = round_number
        super().__init__(message, details=combined_details)


class DiceRollError(GameEngineError):
    """Raised when a dice expression cannot be parsed or rolled."""

    def __init__(
        self,
        message: str,
        *,
        expression: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize dice roll error with expression context.

        Args:
            message: Human-readable error description.
            expression: The dice expression that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if expression:
            combined_details["expression"] = expression
        super().__init__(message, details=combined_details)


class ResourceExhaustedError(GameEngineError):
    """Raised when a spell slot, hit die or class resource is unavailable.

    Handlers turn this into a refusal notification; state is left as it
    was before the attempt.
    """

    def __init__(
        self,
        message: str,
        *,
        resource: str | None = None,
        required: int | None = None,
        available: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize resource error with resource context.

        Args:
            message: Human-readable error description.
            resource: Name of the exhausted resource.
            required: Amount the operation needed.
            available: Amount that was available.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if resource:
            combined_details["resource"] = resource
        if required is not None:
            combined_details["required"] = required
        if available is not None:
            combined_details["available"] = available
        super().__init__(message, details=combined_details)


# =============================================================================
# Collaborator Exceptions
# =============================================================================


class GenerationError(DndNarratorError):
    """Raised when the item or spell generator fails or returns junk."""

    def __init__(
        self,
        message: str,
        *,
        item_name: str | None = None,
        placeholder_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize generation error with request context.

        Args:
            message: Human-readable error description.
            item_name: Name that was requested.
            placeholder_id: Catalog id of the placeholder awaiting the result.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if item_name:
            combined_details["item_name"] = item_name
        if placeholder_id:
            combined_details["placeholder_id"] = placeholder_id
        super().__init__(message, details=combined_details)


class StorageError(DndNarratorError):
    """Raised when the durable store cannot read or write a record."""

    def __init__(
        self,
        message: str,
        *,
        record_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize storage error with record context.

        Args:
            message: Human-readable error description.
            record_id: Identifier of the record being read or written.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if record_id:
            combined_details["record_id"] = record_id
        super().__init__(message, details=combined_details)


# =============================================================================
# Configuration & Validation Exceptions
# =============================================================================


class ConfigurationError(DndNarratorError):
    """Raised when application configuration is invalid."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error with config key context.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


class ValidationError(DndNarratorError):
    """Raised when caller-supplied choices break a rules constraint.

    The level-up flow raises this for invalid hit point methods and for
    ability increases that do not spend exactly two points.
    """

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        invalid_value: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize validation error with field context.

        Args:
            message: Human-readable error description.
            field_name: Name of the field that failed validation.
            invalid_value: The value that failed validation.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if field_name:
            combined_details["field_name"] = field_name
        if invalid_value is not None:
            combined_details["invalid_value"] = invalid_value
        super().__init__(message, details=combined_details)


__all__ = [
    # Base exception
    "DndNarratorError",
    # Directive exceptions
    "DirectiveError",
    # Game engine exceptions
    "GameEngineError",
    "CombatError",
    "DiceRollError",
    "ResourceExhaustedError",
    # Collaborator exceptions
    "GenerationError",
    "StorageError",
    # Configuration exceptions
    "ConfigurationError",
    "ValidationError",
]
