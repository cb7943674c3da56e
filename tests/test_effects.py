"""Tests for effect resolution and the action executor."""

import pytest

from descent_combat.engine.combatant import Enemy, Player
from descent_combat.engine.effects import EffectProcessor
from descent_combat.engine.logging import CombatLogger, LogEventType
from descent_combat.engine.piles import CardPiles
from descent_combat.engine.rng import Rng
from descent_combat.engine.types import CombatState, EffectContext
from descent_combat.models.content import Effect
from descent_combat.models.enums import CardType, EffectType, RelicTrigger, StatusEffect, TargetType


@pytest.fixture
def state(card_instance) -> CombatState:
    player = Player(id="player", name="Hero", max_hp=50)
    player.reset_energy()
    enemies = [Enemy(id="a_0", name="A", max_hp=30), Enemy(id="b_0", name="B", max_hp=30)]
    piles = CardPiles.from_deck([card_instance("strike") for _ in range(5)])
    return CombatState(player=player, enemies=enemies, piles=piles)


def player_context(state: CombatState, target=None, catalog=None, **kwargs) -> EffectContext:
    return EffectContext(state=state, rng=Rng.seeded(3), source=state.player, target=target, catalog=catalog, **kwargs)


def effect(effect_type: EffectType, value: int = 0, **kwargs) -> Effect:
    return Effect(type=effect_type, value=value, **kwargs)


class TestTargetResolution:
    """Tests for resolving effect targets from the actor's view."""

    def test_block_lands_on_self_even_on_targeted_card(self, state):
        context = player_context(state, target=state.enemies[0])
        targets = EffectProcessor().resolve_targets(effect(EffectType.BLOCK, 5), TargetType.SINGLE_ENEMY, context)
        assert targets == [state.player]

    def test_damage_all_hits_living_enemies(self, state):
        state.enemies[1].current_hp = 0
        context = player_context(state)
        targets = EffectProcessor().resolve_targets(effect(EffectType.DAMAGE_ALL, 5), TargetType.SELF, context)
        assert targets == [state.enemies[0]]

    def test_enemy_single_target_means_player(self, state):
        context = EffectContext(state=state, rng=Rng.seeded(1), source=state.enemies[0])
        targets = EffectProcessor().resolve_targets(effect(EffectType.DAMAGE, 5), TargetType.SINGLE_ENEMY, context)
        assert targets == [state.player]

    def test_dead_target_has_no_target(self, state):
        state.enemies[0].current_hp = 0
        context = player_context(state, target=state.enemies[0])
        targets = EffectProcessor().resolve_targets(effect(EffectType.DAMAGE, 5), TargetType.SINGLE_ENEMY, context)
        assert targets == []

    def test_explicit_target_overrides(self, state):
        context = player_context(state, target=state.enemies[0])
        debuff = effect(EffectType.APPLY_WEAK, 1, target=TargetType.ALL_ENEMIES)
        targets = EffectProcessor().resolve_targets(debuff, TargetType.SINGLE_ENEMY, context)
        assert targets == state.enemies


class TestProcess:
    """Tests for running effect lists."""

    def test_effects_apply_in_order(self, state):
        context = player_context(state, target=state.enemies[0])
        effects = [effect(EffectType.APPLY_VULNERABLE, 1), effect(EffectType.DAMAGE, 6)]
        EffectProcessor().process(effects, context, TargetType.SINGLE_ENEMY)
        assert state.enemies[0].current_hp == 21

    def test_multi_hit_and_repeat(self, state):
        context = player_context(state, target=state.enemies[0])
        results = EffectProcessor().process(
            [effect(EffectType.DAMAGE, 2, times=2)], context, TargetType.SINGLE_ENEMY, repeat=3
        )
        assert len(results) == 6
        assert state.enemies[0].current_hp == 18

    def test_missing_target_halts(self, state):
        context = player_context(state)
        results = EffectProcessor().process(
            [effect(EffectType.DAMAGE, 6), effect(EffectType.BLOCK, 5)], context, TargetType.SINGLE_ENEMY
        )
        assert len(results) == 1
        assert not results[0].continue_
        assert state.player.block == 0

    def test_stops_when_combat_ends(self, state):
        state.enemies[1].current_hp = 0
        context = player_context(state, target=state.enemies[0])
        results = EffectProcessor().process(
            [effect(EffectType.DAMAGE, 50), effect(EffectType.BLOCK, 5)], context, TargetType.SINGLE_ENEMY
        )
        assert len(results) == 1
        assert state.player.block == 0

    def test_data_error_is_skipped(self, state, catalog):
        context = player_context(state, catalog=catalog)
        results = EffectProcessor().process(
            [effect(EffectType.ADD_TO_HAND, 1, card_id="no_such_card"), effect(EffectType.BLOCK, 5)],
            context,
        )
        assert not results[0].success
        assert results[1].success
        assert state.player.block == 5

    def test_logger_records_executed_and_skipped(self, state):
        logger = CombatLogger()
        context = player_context(state)
        EffectProcessor(logger=logger).process(
            [effect(EffectType.BLOCK, 5), effect(EffectType.ADD_TO_HAND, 1)], context
        )
        log = logger.get_log()
        executed = log.get_entries_by_type(LogEventType.EFFECT_EXECUTED)
        assert executed[0].state_before.block == 0
        assert executed[0].state_after.block == 5
        assert len(log.get_entries_by_type(LogEventType.EFFECT_SKIPPED)) == 1


class TestDamageEffects:
    """Tests for conditional damage kinds."""

    def test_damage_equal_block(self, state):
        state.player.block = 9
        context = player_context(state, target=state.enemies[0])
        EffectProcessor().process([effect(EffectType.DAMAGE_EQUAL_BLOCK)], context, TargetType.SINGLE_ENEMY)
        assert state.enemies[0].current_hp == 21

    def test_damage_per_discard(self, state, card_instance):
        state.piles.discard_pile.extend(card_instance("strike") for _ in range(3))
        context = player_context(state, target=state.enemies[0])
        EffectProcessor().process([effect(EffectType.DAMAGE_PER_DISCARD, 2)], context, TargetType.SINGLE_ENEMY)
        assert state.enemies[0].current_hp == 24

    def test_damage_equal_poison(self, state):
        state.enemies[0].set_stacks(StatusEffect.POISON, 4)
        context = player_context(state, target=state.enemies[0])
        EffectProcessor().process([effect(EffectType.DAMAGE_EQUAL_POISON, 1)], context, TargetType.SINGLE_ENEMY)
        assert state.enemies[0].current_hp == 26

    def test_triple_strength(self, state):
        state.player.set_stacks(StatusEffect.STRENGTH, 2)
        context = player_context(state, target=state.enemies[0])
        EffectProcessor().process([effect(EffectType.DAMAGE_TRIPLE_STRENGTH, 10)], context, TargetType.SINGLE_ENEMY)
        assert state.enemies[0].current_hp == 14

    def test_ignore_block(self, state):
        state.enemies[0].block = 10
        context = player_context(state, target=state.enemies[0])
        EffectProcessor().process([effect(EffectType.DAMAGE_IGNORE_BLOCK, 5)], context, TargetType.SINGLE_ENEMY)
        assert state.enemies[0].current_hp == 25
        assert state.enemies[0].block == 10

    def test_thorns_reflect(self, state):
        state.enemies[0].set_stacks(StatusEffect.THORNS, 3)
        context = player_context(state, target=state.enemies[0])
        EffectProcessor().process([effect(EffectType.DAMAGE, 6)], context, TargetType.SINGLE_ENEMY)
        assert state.player.current_hp == 47

    def test_player_damage_events(self, state):
        state.player.block = 2
        context = EffectContext(state=state, rng=Rng.seeded(1), source=state.enemies[0])
        EffectProcessor().process([effect(EffectType.DAMAGE, 30)], context, TargetType.SINGLE_ENEMY)
        triggers = [event.trigger for event in state.pending_events]
        assert RelicTrigger.BLOCK_BROKEN in triggers
        assert RelicTrigger.PLAYER_DAMAGED in triggers
        assert RelicTrigger.FIRST_DAMAGE_COMBAT in triggers
        assert RelicTrigger.HP_BELOW_50 in triggers
        assert RelicTrigger.HP_BELOW_25 not in triggers

    def test_kill_emits_enemy_killed(self, state):
        context = player_context(state, target=state.enemies[0])
        EffectProcessor().process([effect(EffectType.DAMAGE, 40)], context, TargetType.SINGLE_ENEMY)
        killed = [event for event in state.pending_events if event.trigger == RelicTrigger.ENEMY_KILLED]
        assert [event.target_id for event in killed] == ["a_0"]


class TestStatusEffects:
    """Tests for buffs and debuffs."""

    def test_artifact_voids_debuff(self, state):
        state.enemies[0].set_stacks(StatusEffect.ARTIFACT, 1)
        context = player_context(state, target=state.enemies[0])
        EffectProcessor().process(
            [effect(EffectType.APPLY_WEAK, 2), effect(EffectType.APPLY_WEAK, 2)], context, TargetType.SINGLE_ENEMY
        )
        assert state.enemies[0].get_stacks(StatusEffect.ARTIFACT) == 0
        assert state.enemies[0].weak == 2

    def test_reduce_strength_respects_artifact(self, state):
        state.enemies[0].set_stacks(StatusEffect.ARTIFACT, 1)
        context = player_context(state, target=state.enemies[0])
        processor = EffectProcessor()
        processor.process([effect(EffectType.REDUCE_STRENGTH, 2)], context, TargetType.SINGLE_ENEMY)
        assert state.enemies[0].strength == 0
        processor.process([effect(EffectType.REDUCE_STRENGTH, 2)], context, TargetType.SINGLE_ENEMY)
        assert state.enemies[0].strength == -2

    def test_buff_gained_event(self, state):
        context = player_context(state)
        EffectProcessor().process([effect(EffectType.APPLY_STRENGTH, 2)], context)
        assert state.player.strength == 2
        assert state.pending_events[-1].trigger == RelicTrigger.BUFF_GAINED


class TestCardEffects:
    """Tests for card manipulation, energy and HP effects."""

    def test_draw(self, state):
        context = player_context(state)
        EffectProcessor().process([effect(EffectType.DRAW, 2)], context)
        assert len(state.piles.hand) == 2
        assert len(state.piles.draw_pile) == 3

    def test_add_to_discard(self, state, catalog):
        context = player_context(state, catalog=catalog)
        EffectProcessor().process([effect(EffectType.ADD_TO_DISCARD, 2, card_id="wound")], context)
        assert [card.template_id for card in state.piles.discard_pile] == ["wound", "wound"]

    def test_add_to_draw_inserts(self, state, catalog):
        context = player_context(state, catalog=catalog)
        EffectProcessor().process([effect(EffectType.ADD_TO_DRAW, 1, card_id="wound")], context)
        assert len(state.piles.draw_pile) == 6
        assert any(card.type == CardType.STATUS for card in state.piles.draw_pile)

    def test_exhaust_random(self, state):
        context = player_context(state)
        processor = EffectProcessor()
        processor.process([effect(EffectType.DRAW, 3)], context)
        processor.process([effect(EffectType.EXHAUST, 2)], context)
        assert len(state.piles.hand) == 1
        assert len(state.piles.exhaust_pile) == 2

    def test_energy(self, state):
        context = player_context(state)
        EffectProcessor().process([effect(EffectType.GAIN_ENERGY, 2), effect(EffectType.LOSE_ENERGY, 1)], context)
        assert state.player.energy == 4

    def test_percentage_heal(self, state):
        state.player.current_hp = 10
        context = player_context(state)
        EffectProcessor().process([effect(EffectType.HEAL, 25, percentage=True)], context)
        assert state.player.current_hp == 22

    def test_upgrade_all_in_hand(self, state):
        context = player_context(state)
        processor = EffectProcessor()
        processor.process([effect(EffectType.DRAW, 2)], context)
        processor.process([effect(EffectType.UPGRADE_CARD, 0)], context)
        assert all(card.upgraded for card in state.piles.hand)

    def test_scry_discards_statuses(self, state, catalog):
        context = player_context(state, catalog=catalog)
        state.piles.draw_pile.append(catalog.create_card("wound"))
        EffectProcessor().process([effect(EffectType.SCRY, 2)], context)
        assert [card.template_id for card in state.piles.discard_pile] == ["wound"]
        assert len(state.piles.draw_pile) == 5

    def test_flags(self, state):
        context = player_context(state)
        EffectProcessor().process([effect(EffectType.NEXT_CARD_TWICE, 1), effect(EffectType.RETAIN_HAND)], context)
        assert state.next_card_twice == 1
        assert state.retain_hand

    def test_duplicate_source_card(self, state, card_instance):
        played = card_instance("strike")
        context = player_context(state, source_card=played)
        EffectProcessor().process([effect(EffectType.DUPLICATE_CARD, 1)], context)
        copies = state.piles.discard_pile
        assert [card.template_id for card in copies] == ["strike"]
        assert copies[0].instance_id != played.instance_id

    def test_created_cards_numbered_per_combat(self, state, catalog, card_instance):
        """Cards made mid-combat get ids from the combat's own counter."""
        context = player_context(state, catalog=catalog, source_card=card_instance("strike"))
        processor = EffectProcessor()
        processor.process([effect(EffectType.ADD_TO_HAND, 2, card_id="wound")], context)
        processor.process([effect(EffectType.DUPLICATE_CARD, 1)], context)

        assert [card.instance_id for card in state.piles.hand] == ["wound@1", "wound@2"]
        assert [card.instance_id for card in state.piles.discard_pile] == ["strike@3"]
        assert state.cards_created == 3

    def test_transform_replaces_hand_card(self, state, catalog):
        context = player_context(state, catalog=catalog)
        processor = EffectProcessor()
        processor.process([effect(EffectType.DRAW, 2)], context)
        processor.process([effect(EffectType.TRANSFORM_CARD, 1)], context)
        names = [card.template_id for card in state.piles.hand]
        assert len(names) == 2
        assert names.count("strike") == 1

    def test_transform_needs_catalog(self, state):
        context = player_context(state)
        EffectProcessor().process([effect(EffectType.DRAW, 1)], context)
        results = EffectProcessor().process([effect(EffectType.TRANSFORM_CARD, 1)], context)
        assert not results[0].success
        assert state.piles.hand[0].template_id == "strike"
