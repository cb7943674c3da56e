"""Action executor - applies single effects to combat state.

Every mutation that relics may react to goes through one of the primitives
here (`deal_damage`, `gain_block`, `apply_status`, `draw_cards`, ...), which
queue the matching lifecycle events on the combat state.
"""

from __future__ import annotations

import logging

from ..models.content import Effect
from ..models.enums import (
    DEBUFF_STATUSES,
    CardType,
    EffectType,
    RelicTrigger,
    StatusEffect,
    status_for_effect,
)
from .calculator import thorns_damage
from .combatant import Combatant, Enemy, Player
from .types import CardInstance, EffectContext, EffectResult

logger = logging.getLogger(__name__)


class ActionExecutor:
    """Executes effects and modifies combat state."""

    def execute(self, effect: Effect, context: EffectContext, target: Combatant) -> EffectResult:
        """Execute one application of an effect against one target.

        Args:
            effect: Declarative effect to apply
            context: Combat context (state, actor, card being played, rng)
            target: Resolved target for this application

        Returns:
            EffectResult describing what happened
        """
        match effect.type:
            case (
                EffectType.DAMAGE
                | EffectType.DAMAGE_ALL
                | EffectType.DAMAGE_RANDOM
                | EffectType.DAMAGE_EQUAL_BLOCK
                | EffectType.DAMAGE_PER_DISCARD
                | EffectType.DAMAGE_EQUAL_POISON
                | EffectType.DAMAGE_TRIPLE_STRENGTH
                | EffectType.DAMAGE_IGNORE_BLOCK
            ):
                return self._execute_damage(effect, context, target)
            case EffectType.BLOCK | EffectType.DOUBLE_BLOCK | EffectType.BLOCK_PER_CARD_IN_HAND:
                return self._execute_block(effect, context, target)
            case EffectType.DRAW:
                return self._execute_draw(effect, context, target)
            case EffectType.DISCARD | EffectType.EXHAUST:
                return self._execute_discard_or_exhaust(effect, context, target)
            case EffectType.ADD_TO_HAND | EffectType.ADD_TO_DISCARD | EffectType.ADD_TO_DRAW:
                return self._execute_add_card(effect, context, target)
            case EffectType.DUPLICATE_CARD:
                return self._execute_duplicate(effect, context, target)
            case EffectType.GAIN_ENERGY | EffectType.LOSE_ENERGY:
                return self._execute_energy(effect, context, target)
            case EffectType.HEAL:
                return self._execute_heal(effect, context, target)
            case EffectType.LOSE_HP:
                return self._execute_lose_hp(effect, context, target)
            case EffectType.GAIN_MAX_HP:
                return self._execute_gain_max_hp(effect, context, target)
            case EffectType.REDUCE_STRENGTH:
                return self._execute_reduce_strength(effect, context, target)
            case EffectType.UPGRADE_CARD:
                return self._execute_upgrade(effect, context, target)
            case EffectType.TRANSFORM_CARD:
                return self._execute_transform(effect, context, target)
            case EffectType.NEXT_CARD_TWICE:
                context.state.next_card_twice += max(1, effect.value)
                return self._result(effect, target, context.state.next_card_twice, "Next card is played twice")
            case EffectType.SCRY:
                return self._execute_scry(effect, context, target)
            case EffectType.RETAIN_HAND:
                context.state.retain_hand = True
                return self._result(effect, target, 0, "Hand is retained this turn")
            case _:
                status = status_for_effect(effect.type)
                if status is not None:
                    return self._execute_apply_status(effect, context, target, status)
                return self._skip(effect, target, f"Unknown effect type: {effect.type}")

    # ------------------------------------------------------------------
    # Result helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _result(effect: Effect, target: Combatant, value: int, description: str) -> EffectResult:
        return EffectResult(
            effect_type=effect.type,
            success=True,
            value=value,
            target_id=target.id,
            description=description,
        )

    @staticmethod
    def _skip(effect: Effect, target: Combatant | None, reason: str) -> EffectResult:
        """A data error: log it and let the remaining effects run."""
        logger.warning("Skipping %s: %s", effect.type.value, reason)
        return EffectResult(
            effect_type=effect.type,
            success=False,
            target_id=target.id if target is not None else None,
            description=reason,
        )

    # ------------------------------------------------------------------
    # Primitives (shared with the relic processor)
    # ------------------------------------------------------------------

    def deal_damage(
        self,
        context: EffectContext,
        target: Combatant,
        amount: int,
        attacker: Combatant | None = None,
        ignore_block: bool = False,
        reflect: bool = True,
    ) -> int:
        """Hit a target and queue the resulting events. Returns HP lost.

        Thorns on the target reflect back to the attacker; reflected damage
        never triggers thorns again.
        """
        if not target.is_alive():
            return 0
        state = context.state
        hp_before = target.current_hp
        block_before = target.block
        result = target.take_hit(amount, attacker, ignore_block=ignore_block)
        hp_lost = hp_before - target.current_hp

        if target is state.player:
            if block_before > 0 and target.block == 0 and result.blocked > 0:
                state.emit(RelicTrigger.BLOCK_BROKEN, target_id=target.id, amount=result.blocked)
            if hp_lost > 0:
                state.emit(RelicTrigger.PLAYER_DAMAGED, source_id=_id(attacker), amount=hp_lost)
                if not state.combat_counters.player_damaged:
                    state.combat_counters.player_damaged = True
                    state.emit(RelicTrigger.FIRST_DAMAGE_COMBAT, source_id=_id(attacker), amount=hp_lost)
                self.player_lost_hp(context, hp_before)
        elif isinstance(target, Enemy):
            if attacker is state.player:
                state.emit(
                    RelicTrigger.DAMAGE_DEALT,
                    source_id=attacker.id,
                    target_id=target.id,
                    amount=result.blocked + hp_lost,
                )
            if hp_before > 0 and target.is_dead():
                state.emit(RelicTrigger.ENEMY_KILLED, target_id=target.id)

        if reflect and attacker is not None and attacker.is_alive() and target.thorns > 0:
            self.deal_damage(context, attacker, thorns_damage(target.thorns), reflect=False)
        return hp_lost

    def player_lost_hp(self, context: EffectContext, hp_before: int) -> None:
        """Queue HP-loss events for the player, including threshold crossings."""
        player = context.state.player
        lost = hp_before - player.current_hp
        if lost <= 0:
            return
        context.state.emit(RelicTrigger.PLAYER_HP_LOST, target_id=player.id, amount=lost)
        for trigger, fraction in ((RelicTrigger.HP_BELOW_50, 0.5), (RelicTrigger.HP_BELOW_25, 0.25)):
            threshold = player.max_hp * fraction
            if hp_before >= threshold > player.current_hp:
                context.state.emit(trigger, target_id=player.id, amount=player.current_hp)

    def gain_block(self, context: EffectContext, target: Combatant, amount: int, raw: bool = False) -> int:
        """Grant block, with dexterity and frail unless `raw`."""
        gained = target.gain_block(amount) if raw else target.gain_block_from(amount)
        if gained > 0 and target is context.state.player:
            context.state.emit(RelicTrigger.BLOCK_GAINED, target_id=target.id, amount=gained)
        return gained

    def apply_status(self, context: EffectContext, target: Combatant, status: StatusEffect, amount: int) -> int:
        """Apply a status. Debuffs are voided by artifact. Returns the change in stacks."""
        is_player = target is context.state.player
        if status in DEBUFF_STATUSES and target.try_consume_artifact():
            if is_player:
                context.state.emit(RelicTrigger.DEBUFF_PREVENTED, target_id=target.id, amount=amount)
            return 0
        change = target.apply_status(status, amount)
        if is_player and status not in DEBUFF_STATUSES and change > 0:
            context.state.emit(RelicTrigger.BUFF_GAINED, target_id=target.id, amount=change)
        return change

    def draw_cards(self, context: EffectContext, count: int) -> list[CardInstance]:
        """Draw cards into the hand, queueing SHUFFLE and CARD_DRAWN events."""
        state = context.state
        result = state.piles.draw(count, context.rng, context.max_hand_size)
        for _ in range(result.shuffles):
            state.combat_counters.shuffles += 1
            state.emit(RelicTrigger.SHUFFLE, amount=state.combat_counters.shuffles)
        for card in result.drawn:
            state.emit(RelicTrigger.CARD_DRAWN, card=card)
        for card in result.burned:
            state.emit(RelicTrigger.CARD_DISCARDED, card=card)
        return result.drawn

    def gain_energy(self, context: EffectContext, amount: int) -> int:
        return context.state.player.gain_energy(amount)

    def discard_card(self, context: EffectContext, card: CardInstance) -> None:
        context.state.piles.discard_pile.append(card)
        context.state.emit(RelicTrigger.CARD_DISCARDED, card=card)

    def exhaust_card(self, context: EffectContext, card: CardInstance) -> None:
        context.state.piles.exhaust_pile.append(card)
        context.state.emit(RelicTrigger.CARD_EXHAUSTED, card=card)

    # ------------------------------------------------------------------
    # Effect handlers
    # ------------------------------------------------------------------

    def _execute_damage(self, effect: Effect, context: EffectContext, target: Combatant) -> EffectResult:
        """Damage family. Conditional kinds compute their base from combat state."""
        source = context.source
        match effect.type:
            case EffectType.DAMAGE_EQUAL_BLOCK:
                base = source.block
            case EffectType.DAMAGE_PER_DISCARD:
                base = effect.value * len(context.state.piles.discard_pile)
            case EffectType.DAMAGE_EQUAL_POISON:
                base = max(1, effect.value) * target.poison
            case EffectType.DAMAGE_TRIPLE_STRENGTH:
                # Strength is added once more by the outgoing step
                base = effect.value + 2 * source.strength
            case _:
                base = effect.value

        if isinstance(source, Player) and source.bonus_damage and _is_attack(context.source_card):
            base += source.bonus_damage
            source.bonus_damage = 0

        hp_lost = self.deal_damage(
            context,
            target,
            base,
            attacker=source,
            ignore_block=effect.type == EffectType.DAMAGE_IGNORE_BLOCK,
        )
        return self._result(effect, target, hp_lost, f"Dealt {hp_lost} damage")

    def _execute_block(self, effect: Effect, context: EffectContext, target: Combatant) -> EffectResult:
        match effect.type:
            case EffectType.DOUBLE_BLOCK:
                gained = self.gain_block(context, target, target.block, raw=True)
            case EffectType.BLOCK_PER_CARD_IN_HAND:
                gained = self.gain_block(context, target, effect.value * len(context.state.piles.hand))
            case _:
                # Potions grant flat block
                gained = self.gain_block(context, target, effect.value, raw=context.potion is not None)
        return self._result(effect, target, gained, f"Gained {gained} block")

    def _execute_draw(self, effect: Effect, context: EffectContext, target: Combatant) -> EffectResult:
        if target is not context.state.player:
            return self._skip(effect, target, "Only the player can draw")
        drawn = self.draw_cards(context, effect.value)
        return self._result(effect, target, len(drawn), f"Drew {len(drawn)} card(s)")

    def _execute_discard_or_exhaust(self, effect: Effect, context: EffectContext, target: Combatant) -> EffectResult:
        """Discard or exhaust random cards from the hand."""
        hand = context.state.piles.hand
        moved = 0
        for _ in range(max(0, effect.value)):
            if not hand:
                break
            card = hand.pop(context.rng.choice_index(len(hand)))
            if effect.type == EffectType.EXHAUST:
                self.exhaust_card(context, card)
            else:
                self.discard_card(context, card)
            moved += 1
        verb = "Exhausted" if effect.type == EffectType.EXHAUST else "Discarded"
        return self._result(effect, target, moved, f"{verb} {moved} card(s)")

    def _execute_add_card(self, effect: Effect, context: EffectContext, target: Combatant) -> EffectResult:
        if effect.card_id is None:
            return self._skip(effect, target, "No card_id given")
        if context.catalog is None:
            return self._skip(effect, target, "No catalog available")
        piles = context.state.piles
        added = 0
        for _ in range(max(1, effect.value)):
            template = context.catalog.get_card(effect.card_id)
            if template is None:
                return self._skip(effect, target, f"Unknown card id: {effect.card_id}")
            card = context.state.new_card(template)
            match effect.type:
                case EffectType.ADD_TO_HAND:
                    piles.add_to_hand(card, context.max_hand_size)
                case EffectType.ADD_TO_DISCARD:
                    piles.discard_pile.append(card)
                case _:
                    piles.draw_pile.insert(context.rng.choice_index(len(piles.draw_pile) + 1), card)
            added += 1
        return self._result(effect, target, added, f"Added {added} {effect.card_id}")

    def _execute_duplicate(self, effect: Effect, context: EffectContext, target: Combatant) -> EffectResult:
        if context.source_card is None:
            return self._skip(effect, target, "No card to duplicate")
        copies = max(1, effect.value)
        for _ in range(copies):
            context.state.piles.discard_pile.append(context.state.new_card(context.source_card.card))
        return self._result(effect, target, copies, f"Duplicated {context.source_card.name}")

    def _execute_energy(self, effect: Effect, context: EffectContext, target: Combatant) -> EffectResult:
        if not isinstance(target, Player):
            return self._skip(effect, target, "Only the player has energy")
        if effect.type == EffectType.GAIN_ENERGY:
            actual = self.gain_energy(context, effect.value)
            return self._result(effect, target, actual, f"Gained {actual} energy")
        actual = target.lose_energy(effect.value)
        return self._result(effect, target, actual, f"Lost {actual} energy")

    def _execute_heal(self, effect: Effect, context: EffectContext, target: Combatant) -> EffectResult:
        amount = effect.value * target.max_hp // 100 if effect.percentage else effect.value
        actual = target.heal(amount)
        return self._result(effect, target, actual, f"Healed {actual} HP")

    def _execute_lose_hp(self, effect: Effect, context: EffectContext, target: Combatant) -> EffectResult:
        hp_before = target.current_hp
        actual = target.lose_hp(effect.value)
        if target is context.state.player:
            self.player_lost_hp(context, hp_before)
        elif actual and target.is_dead():
            context.state.emit(RelicTrigger.ENEMY_KILLED, target_id=target.id)
        return self._result(effect, target, actual, f"Lost {actual} HP")

    def _execute_gain_max_hp(self, effect: Effect, context: EffectContext, target: Combatant) -> EffectResult:
        if isinstance(target, Player):
            actual = target.gain_max_hp(effect.value)
        else:
            actual = max(0, effect.value)
            target.max_hp += actual
            target.current_hp += actual
        return self._result(effect, target, actual, f"Gained {actual} max HP")

    def _execute_apply_status(
        self,
        effect: Effect,
        context: EffectContext,
        target: Combatant,
        status: StatusEffect,
    ) -> EffectResult:
        change = self.apply_status(context, target, status, effect.value)
        return self._result(effect, target, change, f"Applied {effect.value} {status.value}")

    def _execute_reduce_strength(self, effect: Effect, context: EffectContext, target: Combatant) -> EffectResult:
        """Strength down is a debuff: artifact voids it."""
        if target.try_consume_artifact():
            if target is context.state.player:
                context.state.emit(RelicTrigger.DEBUFF_PREVENTED, target_id=target.id, amount=effect.value)
            return self._result(effect, target, 0, "Blocked by artifact")
        change = target.apply_status(StatusEffect.STRENGTH, -effect.value)
        return self._result(effect, target, change, f"Reduced strength by {effect.value}")

    def _execute_upgrade(self, effect: Effect, context: EffectContext, target: Combatant) -> EffectResult:
        """Upgrade random cards in hand (every upgradable card when value <= 0)."""
        candidates = [card for card in context.state.piles.hand if card.card.can_upgrade]
        if effect.value > 0:
            picked: list[CardInstance] = []
            for _ in range(min(effect.value, len(candidates))):
                picked.append(candidates.pop(context.rng.choice_index(len(candidates))))
            candidates = picked
        for card in candidates:
            card.upgrade()
        return self._result(effect, target, len(candidates), f"Upgraded {len(candidates)} card(s)")

    def _execute_transform(self, effect: Effect, context: EffectContext, target: Combatant) -> EffectResult:
        """Replace random hand cards with random (or given) catalog cards."""
        if context.catalog is None:
            return self._skip(effect, target, "No catalog available")
        hand = context.state.piles.hand
        transformed = 0
        for _ in range(max(1, effect.value)):
            if not hand:
                break
            index = context.rng.choice_index(len(hand))
            if effect.card_id is not None:
                template = context.catalog.get_card(effect.card_id)
            else:
                template = context.catalog.random_card(context.rng, exclude={hand[index].template_id})
            if template is None:
                return self._skip(effect, target, "No card to transform into")
            hand[index] = context.state.new_card(template)
            transformed += 1
        return self._result(effect, target, transformed, f"Transformed {transformed} card(s)")

    def _execute_scry(self, effect: Effect, context: EffectContext, target: Combatant) -> EffectResult:
        """Look at the top cards of the draw pile and discard statuses and curses among them."""
        draw_pile = context.state.piles.draw_pile
        top = draw_pile[-effect.value :] if effect.value > 0 else []
        discarded = [card for card in top if card.type in (CardType.STATUS, CardType.CURSE)]
        for card in discarded:
            draw_pile.remove(card)
            self.discard_card(context, card)
        return self._result(effect, target, len(discarded), f"Scried {len(top)}, discarded {len(discarded)}")


def _id(combatant: Combatant | None) -> str | None:
    return combatant.id if combatant is not None else None


def _is_attack(card: CardInstance | None) -> bool:
    return card is not None and card.type == CardType.ATTACK
