"""Combat engine module - handles damage math, effect resolution, relics and the combat state machine."""

from .actions import ActionExecutor
from .ai import EnemyAI, select_weighted
from .calculator import BlockResult, DamageResult, apply_damage, calculate_block, incoming_damage, outgoing_damage
from .combat import Combat
from .combatant import Combatant, Enemy, Player
from .effects import EffectProcessor
from .logging import CombatLog, CombatLogger, LogEntry, LogEventType, StateSnapshot
from .piles import CardPiles, DrawResult
from .relics import RelicActivation, RelicProcessor
from .rng import Rng
from .types import (
    ActionResult,
    CardInstance,
    CombatEvent,
    CombatState,
    EffectContext,
    EffectResult,
    InvariantViolation,
    RelicState,
)

__all__ = [
    "ActionExecutor",
    "EffectProcessor",
    "RelicProcessor",
    "RelicActivation",
    "EnemyAI",
    "select_weighted",
    "Combat",
    "Combatant",
    "Player",
    "Enemy",
    "CardPiles",
    "DrawResult",
    "Rng",
    "DamageResult",
    "BlockResult",
    "outgoing_damage",
    "incoming_damage",
    "apply_damage",
    "calculate_block",
    "ActionResult",
    "CardInstance",
    "CombatEvent",
    "CombatState",
    "EffectContext",
    "EffectResult",
    "InvariantViolation",
    "RelicState",
    "CombatLogger",
    "CombatLog",
    "LogEntry",
    "LogEventType",
    "StateSnapshot",
]
