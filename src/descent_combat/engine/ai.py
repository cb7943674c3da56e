"""Enemy AI - weighted move selection with anti-repetition."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from ..models.content import EnemyMove
from ..models.enums import IntentType
from .calculator import incoming_damage, outgoing_damage
from .combatant import Combatant, Enemy
from .rng import Rng

logger = logging.getLogger(__name__)


def select_weighted(moves: Sequence[EnemyMove], roll: float) -> EnemyMove:
    """Pick a move from a weighted table using one uniform draw in [0, 1).

    Walks the table subtracting weights until the remainder drops to 0 or
    below. Zero-weight moves are never chosen unless every weight is zero,
    in which case the first move is used.
    """
    total_weight = sum(move.weight for move in moves)
    if total_weight <= 0:
        return moves[0]
    remaining = roll * total_weight
    for move in moves:
        if move.weight <= 0:
            continue
        remaining -= move.weight
        if remaining <= 0:
            return move
    # Float drift can leave a tiny remainder; fall back to the last weighted move
    return [move for move in moves if move.weight > 0][-1]


class EnemyAI:
    """Rolls, commits and executes enemy moves.

    Each enemy keeps a short history of move names. A move that repeats the
    most recent one is redrawn over the remaining moves, so two moves with
    positive weight never come up twice in a row.
    """

    def __init__(self, rng: Rng, history_size: int = 3) -> None:
        self.rng = rng
        self.history_size = history_size

    def roll_move(self, enemy: Enemy) -> EnemyMove | None:
        """Choose and commit the enemy's next move."""
        if not enemy.moves:
            logger.warning("Enemy %s has no moves", enemy.name)
            return None

        selected = select_weighted(enemy.moves, self.rng.roll())

        if len(enemy.moves) > 1 and enemy.move_history and selected.name == enemy.move_history[-1]:
            others = [move for move in enemy.moves if move.name != selected.name]
            if others and any(move.weight > 0 for move in others):
                selected = select_weighted(others, self.rng.roll())

        enemy.current_move = selected
        enemy.intent = selected.intent
        enemy.move_history.append(selected.name)
        del enemy.move_history[: -self.history_size]
        logger.debug("%s intends %s (%s)", enemy.name, selected.name, selected.intent.type.value)
        return selected

    def execute_move(self, enemy: Enemy) -> EnemyMove | None:
        """Return the committed move and immediately roll the next one."""
        move = enemy.current_move
        if move is None:
            return None
        self.roll_move(enemy)
        return move

    @staticmethod
    def get_intent_value(enemy: Enemy, target: Combatant | None = None) -> int:
        """Displayed number for the enemy's intent, recomputed live.

        Attack intents include the enemy's strength and weak. When a target
        is given, its vulnerable and intangible are applied as well.
        """
        value = enemy.intent.value
        if not value:
            return 0
        if enemy.intent.type != IntentType.ATTACK:
            return max(0, value)
        value = outgoing_damage(value, enemy.strength, enemy.weak)
        if target is not None:
            value = incoming_damage(value, target.vulnerable, target.intangible)
        return value
