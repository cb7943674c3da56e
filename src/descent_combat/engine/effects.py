"""Effect processor - resolves targets and executes effect lists in order."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from ..models.content import Effect
from ..models.enums import SELF_EFFECTS, EffectType, TargetType
from .actions import ActionExecutor
from .combatant import Combatant
from .types import EffectContext, EffectResult

if TYPE_CHECKING:
    from .logging import CombatLogger

logger = logging.getLogger(__name__)

# Damage kinds that ignore the card's target type
_FORCED_TARGETS = {
    EffectType.DAMAGE_ALL: TargetType.ALL_ENEMIES,
    EffectType.DAMAGE_RANDOM: TargetType.RANDOM_ENEMY,
}


class EffectProcessor:
    """Processes the effect list of a card, potion or enemy move."""

    def __init__(
        self,
        logger: CombatLogger | None = None,
        executor: ActionExecutor | None = None,
    ) -> None:
        """Initialize the effect processor.

        Args:
            logger: Optional combat logger for event tracking
            executor: Executor to apply single effects (a fresh one by default)
        """
        self.logger = logger
        self.executor = executor or ActionExecutor()

    def resolve_targets(
        self,
        effect: Effect,
        default_target: TargetType,
        context: EffectContext,
    ) -> list[Combatant]:
        """Resolve who an effect lands on, from the acting combatant's view.

        Explicit effect targets win. Otherwise block, buff, card and energy
        effects land on the actor and everything else follows the owner's
        target type. An empty list means there is no valid target.
        """
        if effect.type in _FORCED_TARGETS:
            target_type = _FORCED_TARGETS[effect.type]
        elif effect.target is not None:
            target_type = effect.target
        elif effect.type in SELF_EFFECTS:
            target_type = TargetType.SELF
        else:
            target_type = default_target

        source = context.source
        if context.source_is_player:
            opponents: list[Combatant] = list(context.state.living_enemies())
        else:
            opponents = [context.player] if context.player.is_alive() else []

        match target_type:
            case TargetType.SELF:
                return [source] if source.is_alive() else []
            case TargetType.SINGLE_ENEMY:
                if not context.source_is_player:
                    return opponents
                target = context.target
                if target is None or not target.is_alive() or target is source:
                    return []
                return [target]
            case TargetType.ALL_ENEMIES:
                return opponents
            case TargetType.RANDOM_ENEMY:
                if not opponents:
                    return []
                return [context.rng.choice(opponents)]
            case _:
                logger.warning("Unknown target type: %s", target_type)
                return []

    def process(
        self,
        effects: Sequence[Effect],
        context: EffectContext,
        default_target: TargetType = TargetType.SELF,
        repeat: int = 1,
        turn_number: int = 0,
    ) -> list[EffectResult]:
        """Execute an effect list in order.

        Args:
            effects: Ordered effects to apply
            context: Combat context for this resolution
            default_target: Target type of the card, potion or move
            repeat: Extra multiplier on each effect's hit count (X-cost energy)
            turn_number: Current turn number (for logging)

        Returns:
            Results of every effect application, in order. A result with
            `continue_=False` stops the rest of the list.
        """
        results: list[EffectResult] = []

        for effect in effects:
            if context.combat_over:
                break
            halted = False

            for _ in range(effect.times * repeat):
                targets = self.resolve_targets(effect, default_target, context)
                if not targets:
                    result = EffectResult(
                        effect_type=effect.type,
                        success=False,
                        description="No valid target",
                        continue_=False,
                    )
                    self._log_skipped(context, effect, result.description, turn_number)
                    results.append(result)
                    halted = True
                    break

                for target in targets:
                    result = self._execute_one(effect, context, target, turn_number)
                    results.append(result)
                    if not result.continue_:
                        halted = True
                        break

                if halted or context.combat_over:
                    break

            if halted:
                break

        return results

    def _execute_one(
        self,
        effect: Effect,
        context: EffectContext,
        target: Combatant,
        turn_number: int,
    ) -> EffectResult:
        before = self.logger.snapshot_state(target) if self.logger else None
        result = self.executor.execute(effect, context, target)
        if not self.logger:
            return result
        if result.success:
            self.logger.log_effect_executed(
                turn_number=turn_number,
                source_id=context.source.id,
                target_id=target.id,
                name=context.source_name,
                effect_type=effect.type.value,
                value=result.value,
                description=result.description,
                state_before=before,
                state_after=self.logger.snapshot_state(target),
            )
        else:
            self._log_skipped(context, effect, result.description, turn_number)
        return result

    def _log_skipped(self, context: EffectContext, effect: Effect, reason: str, turn_number: int) -> None:
        if self.logger:
            self.logger.log_effect_skipped(
                turn_number=turn_number,
                source_id=context.source.id,
                name=context.source_name,
                effect_type=effect.type.value,
                reason=reason,
            )
