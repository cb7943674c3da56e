"""Combat engine - orchestrates a fight from start to finish.

States: NOT_STARTED -> PLAYER_TURN <-> ENEMY_TURN -> VICTORY | DEFEAT.

Every public method is one atomic player action. It either is rejected
before any mutation (ActionResult.success is False, state untouched) or
runs to completion, including the enemy turn and the relic passes, before
returning.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..config import Settings, get_settings
from ..models.enums import CardType, CombatPhase, CounterReset, RelicAction, RelicTrigger, TargetType
from .actions import ActionExecutor
from .ai import EnemyAI
from .combatant import Enemy, Player
from .effects import EffectProcessor
from .piles import CardPiles
from .relics import RelicProcessor
from .rng import Rng
from .types import ActionResult, CardInstance, CombatState, EffectContext, EffectResult, InvariantViolation

if TYPE_CHECKING:
    from ..content.catalog import Catalog
    from .logging import CombatLogger

logger = logging.getLogger(__name__)

_PLAYED_TRIGGERS = {
    CardType.ATTACK: RelicTrigger.ATTACK_PLAYED,
    CardType.SKILL: RelicTrigger.SKILL_PLAYED,
    CardType.POWER: RelicTrigger.POWER_PLAYED,
}


class Combat:
    """One combat between the player and a roster of enemies.

    Randomness comes only from the injected `rng`, so a combat replays
    exactly for the same draw sequence.
    """

    def __init__(
        self,
        player: Player,
        catalog: Catalog | None = None,
        rng: Rng | None = None,
        settings: Settings | None = None,
        logger: CombatLogger | None = None,
    ) -> None:
        """Initialize the combat.

        Args:
            player: The player, with deck and relics
            catalog: Content catalog for effects that create cards
            rng: Random source (a fresh unseeded one by default)
            settings: Engine settings (cached defaults when omitted)
            logger: Optional structured combat logger
        """
        self.player = player
        self.catalog = catalog
        self.rng = rng or Rng()
        self.settings = settings or get_settings()
        self.logger = logger

        self.executor = ActionExecutor()
        self.effects = EffectProcessor(logger=logger, executor=self.executor)
        self.relics = RelicProcessor(executor=self.executor, logger=logger)
        self.ai = EnemyAI(self.rng, history_size=self.settings.move_history_size)

        self.state = CombatState(player=player, enemies=[], piles=CardPiles())
        self._events_this_action = 0

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def phase(self) -> CombatPhase:
        return self.state.phase

    @property
    def is_over(self) -> bool:
        return self.state.is_over

    @property
    def enemies(self) -> list[Enemy]:
        return self.state.enemies

    @property
    def piles(self) -> CardPiles:
        return self.state.piles

    def get_intent_value(self, enemy: Enemy, preview_on_player: bool = False) -> int:
        """Displayed intent number, optionally including the player's vulnerable/intangible."""
        return self.ai.get_intent_value(enemy, self.player if preview_on_player else None)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def start_combat(self, enemies: list[Enemy]) -> ActionResult:
        """Set up piles, draw the opening hand and roll opening intents."""
        if self.state.phase != CombatPhase.NOT_STARTED:
            return self._reject("start_combat", "Combat already started")
        if not enemies:
            return self._reject("start_combat", "No enemies to fight")
        ids = [enemy.id for enemy in enemies]
        duplicates = sorted({enemy_id for enemy_id in ids if ids.count(enemy_id) > 1})
        if duplicates:
            return self._reject("start_combat", f"Duplicate enemy id: {', '.join(duplicates)}")

        self._begin_action()
        player = self.player
        player.start_combat()
        player.retain_block = self.relics.has_passive(player, RelicAction.RETAIN_BLOCK)
        self.relics.reset_counters(player, CounterReset.COMBAT)
        self.relics.reset_counters(player, CounterReset.TURN)

        # The combat works on copies so in-combat upgrades don't touch the deck
        deck = [CardInstance(card=card.card, instance_id=card.instance_id) for card in player.deck]
        self.state = CombatState(player=player, enemies=list(enemies), piles=CardPiles.from_deck(deck))
        state = self.state
        start = len(state.event_log)

        if self.logger:
            self.logger.log_combat_start(
                turn_number=state.turn,
                combatants=[player, *state.enemies],
                description=", ".join(enemy.name for enemy in state.enemies),
            )

        for card in state.piles.move_innate_to_hand(self.settings.max_hand_size):
            state.emit(RelicTrigger.CARD_DRAWN, card=card)
        self.rng.shuffle(state.piles.draw_pile)
        context = self._player_context()
        self.executor.draw_cards(context, self.settings.hand_size - len(state.piles.hand))

        state.phase = CombatPhase.PLAYER_TURN
        state.emit(RelicTrigger.COMBAT_START)
        state.emit(RelicTrigger.FIRST_TURN)
        state.emit(RelicTrigger.TURN_START, amount=state.turn)
        self._drain_events()

        for enemy in state.enemies:
            self.ai.roll_move(enemy)

        if self.logger:
            self.logger.log_turn_start(turn_number=state.turn)
        logger.info("Combat started against %d enemies", len(state.enemies))
        return self._finish_action(start)

    def play_card(self, hand_index: int, target: Enemy | str | None = None) -> ActionResult:
        """Play the card at `hand_index`, optionally at a target enemy (object or id)."""
        reason = self._turn_error()
        if reason:
            return self._reject("play_card", reason)

        state = self.state
        player = self.player
        if hand_index < 0 or hand_index >= len(state.piles.hand):
            return self._reject("play_card", f"No card in hand slot {hand_index}")
        card = state.piles.hand[hand_index]
        template = card.card

        forced_curse = False
        if template.is_unplayable:
            if template.type == CardType.CURSE and self.relics.has_passive(player, RelicAction.CURSES_PLAYABLE):
                forced_curse = True
            else:
                return self._reject("play_card", f"{card.name} can't be played")

        if template.is_x_cost:
            cost = player.energy
        elif forced_curse:
            cost = 0
        else:
            cost = template.cost
        if cost > player.energy:
            return self._reject("play_card", f"Not enough energy ({player.energy}/{cost})")

        enemy = self._resolve_enemy(target)
        if template.needs_target and (enemy is None or not enemy.is_alive()):
            return self._reject("play_card", f"{card.name} needs a living target")

        # Legal: mutate from here on
        self._begin_action()
        start = len(state.event_log)
        state.piles.hand.pop(hand_index)
        player.spend_energy(cost)
        self._count_play(card)

        if self.logger:
            self.logger.log_card_played(state.turn, card.name, enemy.id if enemy else None, cost)

        context = self._player_context(target=enemy, source_card=card, energy_spent=cost)
        repeat = cost if template.is_x_cost else 1
        plays = 1
        if state.next_card_twice > 0:
            state.next_card_twice -= 1
            plays = 2

        results: list[EffectResult] = []
        for _ in range(plays):
            results.extend(
                self.effects.process(template.effects, context, template.target_type, repeat, state.turn)
            )

        state.emit(RelicTrigger.CARD_PLAYED, card=card, amount=cost)
        if template.type in _PLAYED_TRIGGERS:
            state.emit(_PLAYED_TRIGGERS[template.type], card=card, amount=cost)
        if template.type == CardType.ATTACK:
            if state.combat_counters.attacks_played == 1:
                state.emit(RelicTrigger.FIRST_ATTACK_COMBAT, card=card)
            if state.turn_counters.attacks_played == 1:
                state.emit(RelicTrigger.FIRST_ATTACK_TURN, card=card)

        if template.exhaust or forced_curse:
            self.executor.exhaust_card(context, card)
        else:
            state.piles.discard_pile.append(card)

        self._drain_events()
        return self._finish_action(start, results)

    def use_potion(self, slot: int, target: Enemy | str | None = None) -> ActionResult:
        """Drink the potion in `slot`."""
        reason = self._turn_error()
        if reason:
            return self._reject("use_potion", reason)

        player = self.player
        potion = player.potions[slot] if 0 <= slot < len(player.potions) else None
        if potion is None:
            return self._reject("use_potion", f"No potion in slot {slot}")
        enemy = self._resolve_enemy(target)
        if potion.needs_target and (enemy is None or not enemy.is_alive()):
            return self._reject("use_potion", f"{potion.name} needs a living target")

        self._begin_action()
        state = self.state
        start = len(state.event_log)
        player.take_potion(slot)
        if self.logger:
            self.logger.log_potion_used(state.turn, potion.name, enemy.id if enemy else None)

        context = self._player_context(target=enemy, potion=potion)
        results = self.effects.process(potion.effects, context, potion.target_type, turn_number=state.turn)
        state.emit(RelicTrigger.POTION_USED, amount=1)
        self._drain_events()
        return self._finish_action(start, results)

    def end_turn(self) -> ActionResult:
        """End the player's turn, run every enemy's turn and start the next player turn."""
        reason = self._turn_error()
        if reason:
            return self._reject("end_turn", reason)

        self._begin_action()
        state = self.state
        start = len(state.event_log)
        self._end_player_turn()
        if not state.is_over:
            self._run_enemy_turn()
        if not state.is_over:
            self._start_player_turn()
        return self._finish_action(start)

    # ------------------------------------------------------------------
    # Turn flow
    # ------------------------------------------------------------------

    def _end_player_turn(self) -> None:
        state = self.state
        player = self.player
        context = self._player_context()

        if not state.piles.hand:
            state.emit(RelicTrigger.EMPTY_HAND_END_TURN)
        state.emit(RelicTrigger.TURN_END, amount=state.turn)

        player.tick_end_of_turn()
        player.tick_powers()
        self._drain_events()
        if state.is_over:
            return

        kept = []
        for card in state.piles.hand:
            if state.retain_hand or card.card.retain:
                kept.append(card)
            elif card.card.ethereal:
                self.executor.exhaust_card(context, card)
            else:
                self.executor.discard_card(context, card)
        state.piles.hand[:] = kept
        state.retain_hand = False

        state.phase = CombatPhase.ENEMY_TURN
        if self.logger:
            self.logger.log_turn_end(state.turn, [player, *state.enemies])
        self._drain_events()

    def _run_enemy_turn(self) -> None:
        state = self.state
        for enemy in state.enemies:
            if not enemy.is_alive():
                continue
            if self.logger:
                self.logger.log_turn_start(turn_number=state.turn, name=enemy.name)

            enemy.tick_start_of_turn()
            if enemy.is_dead():
                state.emit(RelicTrigger.ENEMY_KILLED, target_id=enemy.id)
                self._drain_events()
                if state.is_over:
                    return
                continue

            move = self.ai.execute_move(enemy)
            if move is not None:
                if self.logger:
                    self.logger.log_enemy_move(state.turn, enemy.id, move.name, move.intent.type.value)
                context = self._context(source=enemy, target=self.player)
                self.effects.process(move.actions, context, TargetType.SINGLE_ENEMY, turn_number=state.turn)
                if not self.player.is_alive():
                    # A killing blow ends the turn before this enemy's end-of-turn ticks
                    self._drain_events()
                    if state.is_over:
                        return

            enemy.tick_end_of_turn()
            enemy.tick_powers()
            self._drain_events()
            if state.is_over:
                return

    def _start_player_turn(self) -> None:
        state = self.state
        player = self.player
        state.turn += 1
        state.phase = CombatPhase.PLAYER_TURN
        state.turn_counters.reset()
        self.relics.reset_counters(player, CounterReset.TURN)
        if self.logger:
            self.logger.log_turn_start(turn_number=state.turn)

        context = self._player_context()
        hp_before = player.current_hp
        player.tick_start_of_turn()
        self.executor.player_lost_hp(context, hp_before)
        self._check_combat_end()
        if state.is_over:
            return

        if self.relics.has_passive(player, RelicAction.RETAIN_ENERGY):
            player.gain_energy(player.max_energy)
        else:
            player.reset_energy()

        self.executor.draw_cards(context, self.settings.hand_size)
        state.emit(RelicTrigger.TURN_START, amount=state.turn)
        self._drain_events()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _context(self, source: Player | Enemy, **kwargs: object) -> EffectContext:
        return EffectContext(
            state=self.state,
            rng=self.rng,
            source=source,
            catalog=self.catalog,
            max_hand_size=self.settings.max_hand_size,
            **kwargs,  # type: ignore[arg-type]
        )

    def _player_context(self, **kwargs: object) -> EffectContext:
        return self._context(source=self.player, **kwargs)

    def _resolve_enemy(self, target: Enemy | str | None) -> Enemy | None:
        """Look up a target on this combat's roster. Enemies from elsewhere resolve to None."""
        if target is None:
            return None
        if isinstance(target, Enemy):
            return target if any(enemy is target for enemy in self.state.enemies) else None
        return self.state.get_enemy(target)

    def _turn_error(self) -> str | None:
        match self.state.phase:
            case CombatPhase.NOT_STARTED:
                return "Combat has not started"
            case CombatPhase.VICTORY | CombatPhase.DEFEAT:
                return "Combat is over"
            case CombatPhase.ENEMY_TURN:
                return "Not the player's turn"
        return None

    def _count_play(self, card: CardInstance) -> None:
        turn = self.state.turn_counters
        combat = self.state.combat_counters
        turn.cards_played += 1
        combat.cards_played += 1
        if card.type == CardType.ATTACK:
            turn.attacks_played += 1
            combat.attacks_played += 1
        elif card.type == CardType.SKILL:
            turn.skills_played += 1
        elif card.type == CardType.POWER:
            combat.powers_played += 1

    def _begin_action(self) -> None:
        self._events_this_action = 0

    def _drain_events(self) -> None:
        """Hand queued events to the relic pass until the queue is empty.

        Relic actions may queue further events; the cascade is capped by
        `max_events_per_action`.
        """
        state = self.state
        context = self._player_context()
        while state.pending_events:
            event = state.pending_events.pop(0)
            state.event_log.append(event)
            self._events_this_action += 1
            if self._events_this_action > self.settings.max_events_per_action:
                raise InvariantViolation(
                    f"More than {self.settings.max_events_per_action} events in one action (relic loop?)"
                )
            if self.logger:
                self.logger.log_event(state.turn, event)
            self.relics.process_event(event, context, state.turn)
        self._check_combat_end()

    def _check_combat_end(self) -> None:
        state = self.state
        if state.is_over or state.phase == CombatPhase.NOT_STARTED:
            return
        if not self.player.is_alive():
            self._end_combat(CombatPhase.DEFEAT)
        elif state.all_enemies_dead():
            self._end_combat(CombatPhase.VICTORY)

    def _end_combat(self, outcome: CombatPhase) -> None:
        state = self.state
        state.phase = outcome
        if outcome == CombatPhase.VICTORY:
            state.emit(RelicTrigger.COMBAT_VICTORY)
        state.emit(RelicTrigger.COMBAT_END)
        self._drain_events()
        self.player.block = 0
        self.player.retain_block = False
        if self.logger:
            self.logger.log_state_snapshot(state.turn, [self.player, *state.enemies])
            self.logger.log_combat_end(state.turn, outcome)
        logger.info("Combat ended on turn %d: %s", state.turn, outcome.value)

    def _finish_action(self, start: int, results: list[EffectResult] | None = None) -> ActionResult:
        if self.settings.check_invariants:
            self.check_invariants()
        return ActionResult(
            success=True,
            effects=results or [],
            events=self.state.event_log[start:],
            phase=self.state.phase,
        )

    def _reject(self, action: str, reason: str) -> ActionResult:
        logger.debug("Rejected %s: %s", action, reason)
        if self.logger:
            self.logger.log_action_rejected(self.state.turn, action, reason)
        return ActionResult.rejected(reason, phase=self.state.phase)

    def check_invariants(self) -> None:
        """Raise InvariantViolation if piles or combatants are in an impossible state."""
        self.state.piles.check_invariants()
        for combatant in [self.player, *self.state.enemies]:
            if not 0 <= combatant.current_hp <= combatant.max_hp:
                raise InvariantViolation(f"{combatant.id} HP out of range: {combatant.current_hp}")
            if combatant.block < 0:
                raise InvariantViolation(f"{combatant.id} has negative block")
