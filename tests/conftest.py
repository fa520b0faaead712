"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the narration interpreter test suite.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import TYPE_CHECKING

import pytest

from dnd_narrator.directives.context import SessionContext
from dnd_narrator.engine.dice import DiceResult, DiceRoller, RollType
from dnd_narrator.models.catalog import World
from dnd_narrator.models.character import (
    AbilityScores,
    CharacterState,
    ClassResource,
    HitDice,
    SpellSlotPool,
)
from dnd_narrator.models.enums import Ability, RecoveryTrigger
from dnd_narrator.models.session import InventorySlot, SessionState


if TYPE_CHECKING:
    from collections.abc import Generator


_D20_MODIFIER = re.compile(r"d20(?:k[hl]1)?([+-]\d+)")


class ScriptedRoller(DiceRoller):
    """Dice roller that returns queued values instead of random ones.

    For d20 expressions the queued value is the natural die face and the
    expression's flat modifier is added to it. For every other expression
    the queued value is the total. An empty queue falls back to real dice.
    """

    def __init__(self, values: Iterable[int] = ()) -> None:
        super().__init__()
        self.queue: list[int] = list(values)
        self.expressions: list[str] = []

    def push(self, *values: int) -> None:
        self.queue.extend(values)

    def roll(self, expression: str, *, roll_type: RollType = RollType.NORMAL) -> DiceResult:
        self.expressions.append(expression)
        if not self.queue:
            return super().roll(expression, roll_type=roll_type)

        value = self.queue.pop(0)
        if "d20" in expression:
            match = _D20_MODIFIER.search(expression.replace(" ", ""))
            modifier = int(match.group(1)) if match else 0
            return DiceResult(
                expression=expression,
                total=value + modifier,
                dice=[value],
                modifier=modifier,
                natural=value,
                roll_type=roll_type,
            )
        return DiceResult(expression=expression, total=value, dice=[value], roll_type=roll_type)


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from dnd_narrator.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set up mock environment variables for testing.

    Returns:
        Dictionary of environment variables that were set.
    """
    env_vars = {
        "DND_NARRATOR_DEBUG": "true",
        "DND_NARRATOR_LOG_LEVEL": "DEBUG",
        "DND_NARRATOR_RULES_CONCENTRATION_MIN_DC": "12",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


# =============================================================================
# Dice Fixtures
# =============================================================================


@pytest.fixture
def dice_roller() -> DiceRoller:
    """Provide a seeded dice roller for reproducible tests."""
    return DiceRoller(seed=42)


@pytest.fixture
def scripted_roller() -> ScriptedRoller:
    """Provide a roller whose results the test queues up front."""
    return ScriptedRoller()


# =============================================================================
# State Fixtures
# =============================================================================


@pytest.fixture
def fighter() -> CharacterState:
    """A level 3 fighter with a second wind resource."""
    return CharacterState(
        name="Thorin",
        class_name="Fighter",
        level=3,
        stats=AbilityScores(strength=16, dexterity=14, constitution=14, intelligence=10, wisdom=12, charisma=8),
        save_proficiencies=[Ability.STR, Ability.CON],
        skill_proficiencies={"athletics": 1, "perception": 1},
        max_hp=28,
        current_hp=28,
        armor_class=12,
        hit_dice=HitDice(die=10, current=3, max=3),
        class_resources=[ClassResource(name="Second Wind", current=1, max=1, recovers_on=RecoveryTrigger.SHORT)],
    )


@pytest.fixture
def wizard() -> CharacterState:
    """A level 3 wizard with two spell levels of slots."""
    return CharacterState(
        name="Mira",
        class_name="Wizard",
        level=3,
        stats=AbilityScores(strength=8, dexterity=14, constitution=12, intelligence=16, wisdom=12, charisma=10),
        save_proficiencies=[Ability.INT, Ability.WIS],
        max_hp=16,
        current_hp=16,
        armor_class=12,
        hit_dice=HitDice(die=6, current=3, max=3),
        spell_slots={1: SpellSlotPool(current=4, max=4), 2: SpellSlotPool(current=2, max=2)},
        class_resources=[ClassResource(name="Arcane Recovery", current=1, max=1, recovers_on=RecoveryTrigger.LONG)],
    )


@pytest.fixture
def world() -> World:
    """An empty campaign world."""
    return World(name="Sword Coast")


@pytest.fixture
def session(fighter: CharacterState) -> SessionState:
    """A session for the fighter carrying a longsword, chain mail and a shield."""
    return SessionState(
        character_id=fighter.id,
        currency_gp=25.0,
        inventory=[
            InventorySlot(item_id="longsword", name="Longsword"),
            InventorySlot(item_id="chain_mail", name="Chain Mail"),
            InventorySlot(item_id="shield", name="Shield"),
            InventorySlot(item_id="healing_potion", name="Potion of Healing", quantity=2),
        ],
    )


@pytest.fixture
def context(
    fighter: CharacterState,
    session: SessionState,
    world: World,
    scripted_roller: ScriptedRoller,
) -> SessionContext:
    """A session context for the fighter using the scripted roller."""
    return SessionContext(character=fighter, session=session, world=world, roller=scripted_roller)


@pytest.fixture
def wizard_context(wizard: CharacterState, world: World, scripted_roller: ScriptedRoller) -> SessionContext:
    """A session context for the wizard using the scripted roller."""
    return SessionContext(
        character=wizard,
        session=SessionState(character_id=wizard.id),
        world=world,
        roller=scripted_roller,
    )
