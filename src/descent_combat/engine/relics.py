"""Relic trigger system - fires relic effects in response to lifecycle events."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..models.content import Relic, RelicEffect
from ..models.enums import (
    EVERY_N_TRIGGERS,
    CounterReset,
    RelicAction,
    RelicTrigger,
    StatusEffect,
    base_trigger,
    is_counter_action,
)
from .actions import ActionExecutor
from .combatant import Player
from .rng import Rng
from .types import CardInstance, CombatEvent, EffectContext, RelicState

if TYPE_CHECKING:
    from .logging import CombatLogger

logger = logging.getLogger(__name__)

# Counter actions apply a fixed amount; the effect value is N
COUNTER_AMOUNTS: dict[RelicAction, int] = {
    RelicAction.DRAW_EVERY_N: 1,
    RelicAction.ENERGY_EVERY_N: 2,
    RelicAction.ENERGY_SHUFFLE_N: 2,
    RelicAction.DEXTERITY_EVERY_N: 1,
    RelicAction.STRENGTH_EVERY_N: 1,
    RelicAction.BLOCK_EVERY_N: 4,
    RelicAction.DAMAGE_ALL_EVERY_N: 5,
    RelicAction.INTANGIBLE_EVERY_N: 1,
}

DEFAULT_EVERY_N = 3
DEFAULT_DRAW_EVERY_N = 10

# Read by the combat state machine rather than fired
COMBAT_PASSIVES = frozenset({RelicAction.RETAIN_BLOCK, RelicAction.RETAIN_ENERGY, RelicAction.CURSES_PLAYABLE})

# Actions that make sense outside of a combat
OUT_OF_COMBAT_ACTIONS = frozenset(
    {
        RelicAction.HEAL,
        RelicAction.GAIN_MAX_HP,
        RelicAction.GAIN_GOLD,
        RelicAction.ENERGY_NEXT_COMBAT,
        RelicAction.UPGRADE_RANDOM,
    }
)


@dataclass
class RelicActivation:
    """One relic effect that fired."""

    relic_id: str
    action: RelicAction
    value: int
    description: str


def counter_target(effect: RelicEffect) -> int:
    """N for an "every N" effect."""
    if effect.every is not None:
        return effect.every
    if is_counter_action(effect.action) and effect.value > 0:
        return effect.value
    if effect.action == RelicAction.DRAW_EVERY_N:
        return DEFAULT_DRAW_EVERY_N
    return DEFAULT_EVERY_N


def _uses_counter(effect: RelicEffect) -> bool:
    return is_counter_action(effect.action) or effect.trigger in EVERY_N_TRIGGERS


def _amount(effect: RelicEffect) -> int:
    if is_counter_action(effect.action):
        return COUNTER_AMOUNTS[effect.action]
    return effect.value


class RelicProcessor:
    """Scans held relics for effects matching an event and applies them.

    Direct actions apply every time their trigger fires. Counter actions
    bump the relic's counter and only apply (then reset it to 0) once it
    reaches N.
    """

    def __init__(
        self,
        executor: ActionExecutor | None = None,
        logger: CombatLogger | None = None,
    ) -> None:
        self.executor = executor or ActionExecutor()
        self.logger = logger

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @staticmethod
    def has_passive(player: Player, action: RelicAction) -> bool:
        """Check if any held relic carries an action (regardless of trigger)."""
        return any(effect.action == action for state in player.relics for effect in state.relic.effects)

    @staticmethod
    def reset_counters(player: Player, policy: CounterReset) -> None:
        """Zero the counters of relics whose reset policy matches."""
        for state in player.relics:
            if state.relic.counter_reset == policy:
                state.counter = 0

    # ------------------------------------------------------------------
    # In-combat dispatch
    # ------------------------------------------------------------------

    def process_event(self, event: CombatEvent, context: EffectContext, turn_number: int = 0) -> list[RelicActivation]:
        """Fire every held relic effect listening to this event."""
        activations: list[RelicActivation] = []
        for state in list(context.player.relics):
            for effect in state.relic.effects:
                if base_trigger(effect.trigger) != event.trigger:
                    continue
                if _uses_counter(effect):
                    state.counter += 1
                    if state.counter < counter_target(effect):
                        continue
                    state.counter = 0
                activation = self._apply(state, effect, context, event)
                if activation is None:
                    continue
                activations.append(activation)
                if self.logger:
                    self.logger.log_relic_activated(
                        turn_number=turn_number,
                        relic_name=state.relic.name,
                        action=activation.action.value,
                        value=activation.value,
                        description=activation.description,
                    )
        return activations

    def _apply(
        self,
        state: RelicState,
        effect: RelicEffect,
        context: EffectContext,
        event: CombatEvent,
    ) -> RelicActivation | None:
        """Apply one relic action in combat."""
        player = context.player
        executor = self.executor
        amount = _amount(effect)

        def done(value: int, description: str) -> RelicActivation:
            return RelicActivation(relic_id=state.id, action=effect.action, value=value, description=description)

        match effect.action:
            case RelicAction.HEAL:
                return done(player.heal(amount), "Healed")
            case RelicAction.BLOCK | RelicAction.BLOCK_EVERY_N:
                # Relic block is flat: no dexterity or frail
                return done(executor.gain_block(context, player, amount, raw=True), "Gained block")
            case RelicAction.PLATED_ARMOR:
                if player.block > 0:
                    return None
                return done(executor.gain_block(context, player, amount, raw=True), "Gained block with none left")
            case RelicAction.DRAW | RelicAction.DRAW_EVERY_N:
                return done(len(executor.draw_cards(context, amount)), "Drew cards")
            case RelicAction.GAIN_ENERGY | RelicAction.ENERGY_EVERY_N | RelicAction.ENERGY_SHUFFLE_N:
                return done(executor.gain_energy(context, amount), "Gained energy")
            case RelicAction.GAIN_STRENGTH | RelicAction.STRENGTH_EVERY_N:
                return done(executor.apply_status(context, player, StatusEffect.STRENGTH, amount), "Gained strength")
            case RelicAction.GAIN_DEXTERITY | RelicAction.DEXTERITY_EVERY_N:
                return done(executor.apply_status(context, player, StatusEffect.DEXTERITY, amount), "Gained dexterity")
            case RelicAction.INTANGIBLE_EVERY_N:
                return done(executor.apply_status(context, player, StatusEffect.INTANGIBLE, amount), "Became intangible")
            case RelicAction.THORNS:
                return done(executor.apply_status(context, player, StatusEffect.THORNS, amount), "Gained thorns")
            case RelicAction.GAIN_MAX_HP:
                return done(player.gain_max_hp(amount), "Gained max HP")
            case RelicAction.GAIN_GOLD:
                player.add_gold(amount)
                return done(amount, "Gained gold")
            case RelicAction.DAMAGE_RANDOM:
                enemies = context.state.living_enemies()
                if not enemies:
                    return None
                enemy = context.rng.choice(enemies)
                return done(executor.deal_damage(context, enemy, amount), f"Hit {enemy.name}")
            case RelicAction.DAMAGE_ALL | RelicAction.DAMAGE_ALL_EVERY_N:
                total = sum(executor.deal_damage(context, enemy, amount) for enemy in context.state.living_enemies())
                return done(total, "Hit all enemies")
            case RelicAction.BONUS_DAMAGE:
                player.bonus_damage += amount
                return done(amount, "Next attack deals bonus damage")
            case RelicAction.REDUCE_DAMAGE:
                # Gives back HP lost to the triggering hit, up to the value
                return done(player.heal(min(amount, event.amount)), "Reduced damage taken")
            case RelicAction.ADD_RANDOM_CARD:
                if context.catalog is None:
                    logger.warning("Relic %s needs a catalog to add cards", state.id)
                    return None
                template = context.catalog.random_card(context.rng)
                if template is None:
                    return None
                context.state.piles.add_to_hand(context.state.new_card(template), context.max_hand_size)
                return done(1, f"Added {template.name} to hand")
            case RelicAction.UPGRADE_RANDOM:
                upgraded = _upgrade_random(context.state.piles.hand, context)
                return done(upgraded, "Upgraded a card in hand")
            case RelicAction.DOUBLE_FIRST_CARD:
                context.state.next_card_twice += 1
                return done(1, "Next card is played twice")
            case RelicAction.ENERGY_NEXT_COMBAT:
                player.energy_next_combat += amount
                return done(amount, "Energy stored for next combat")
            case RelicAction.APPLY_VULNERABLE | RelicAction.APPLY_WEAK | RelicAction.APPLY_DEBUFF_ENEMIES:
                statuses = {
                    RelicAction.APPLY_VULNERABLE: (StatusEffect.VULNERABLE,),
                    RelicAction.APPLY_WEAK: (StatusEffect.WEAK,),
                    RelicAction.APPLY_DEBUFF_ENEMIES: (StatusEffect.WEAK, StatusEffect.VULNERABLE),
                }[effect.action]
                for enemy in context.state.living_enemies():
                    for status in statuses:
                        executor.apply_status(context, enemy, status, amount)
                return done(amount, "Debuffed all enemies")
            case action if action in COMBAT_PASSIVES:
                return None
            case _:
                logger.debug("Relic action %s has no combat effect", effect.action.value)
                return None

    # ------------------------------------------------------------------
    # Out of combat
    # ------------------------------------------------------------------

    def obtain(self, player: Player, relic: Relic, rng: Rng | None = None) -> RelicState | None:
        """Give a relic to the player and run its ON_OBTAIN effects."""
        state = player.add_relic(relic)
        if state is None:
            return None
        for effect in relic.effects:
            if effect.trigger == RelicTrigger.ON_OBTAIN:
                self._apply_out_of_combat(player, state, effect, rng)
        return state

    def fire_out_of_combat(
        self,
        trigger: RelicTrigger,
        player: Player,
        rng: Rng | None = None,
    ) -> list[RelicActivation]:
        """Fire room, economy and acquisition triggers outside of combat.

        Only actions that make sense without a combat (heal, max HP, gold,
        stored energy, deck upgrades) apply; the rest are ignored.
        """
        activations: list[RelicActivation] = []
        for state in player.relics:
            for effect in state.relic.effects:
                if effect.trigger != trigger:
                    continue
                activation = self._apply_out_of_combat(player, state, effect, rng)
                if activation is not None:
                    activations.append(activation)
        return activations

    def _apply_out_of_combat(
        self,
        player: Player,
        state: RelicState,
        effect: RelicEffect,
        rng: Rng | None,
    ) -> RelicActivation | None:
        if effect.action not in OUT_OF_COMBAT_ACTIONS:
            logger.debug("Relic %s: %s ignored outside combat", state.id, effect.action.value)
            return None
        value = effect.value
        match effect.action:
            case RelicAction.HEAL:
                value = player.heal(value)
            case RelicAction.GAIN_MAX_HP:
                value = player.gain_max_hp(value)
            case RelicAction.GAIN_GOLD:
                player.add_gold(value)
            case RelicAction.ENERGY_NEXT_COMBAT:
                player.energy_next_combat += value
            case RelicAction.UPGRADE_RANDOM:
                candidates = [card for card in player.deck if card.card.can_upgrade]
                if not candidates:
                    return None
                card = rng.choice(candidates) if rng is not None else candidates[0]
                card.upgrade()
                value = 1
        return RelicActivation(relic_id=state.id, action=effect.action, value=value, description=effect.trigger.value)


def _upgrade_random(cards: list[CardInstance], context: EffectContext) -> int:
    candidates = [card for card in cards if card.card.can_upgrade]
    if not candidates:
        return 0
    context.rng.choice(candidates).upgrade()
    return 1
