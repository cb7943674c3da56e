"""Combat vocabulary and content templates."""

from .content import (
    Card,
    CardUpgrade,
    CharacterClass,
    Effect,
    EnemyMove,
    EnemyTemplate,
    Intent,
    Potion,
    Relic,
    RelicEffect,
)
from .enums import (
    CardType,
    CombatPhase,
    CounterReset,
    EffectType,
    EnemyType,
    IntentType,
    Rarity,
    RelicAction,
    RelicTrigger,
    StatusEffect,
    TargetType,
    is_block_effect,
    is_buff_effect,
    is_combat_trigger,
    is_counter_action,
    is_damage_effect,
    is_debuff_effect,
    is_room_trigger,
    normalize_trigger,
    status_for_effect,
)

__all__ = [
    # Enums
    "CardType",
    "CombatPhase",
    "CounterReset",
    "EffectType",
    "EnemyType",
    "IntentType",
    "Rarity",
    "RelicAction",
    "RelicTrigger",
    "StatusEffect",
    "TargetType",
    # Helpers
    "is_block_effect",
    "is_buff_effect",
    "is_combat_trigger",
    "is_counter_action",
    "is_damage_effect",
    "is_debuff_effect",
    "is_room_trigger",
    "normalize_trigger",
    "status_for_effect",
    # Templates
    "Card",
    "CardUpgrade",
    "CharacterClass",
    "Effect",
    "EnemyMove",
    "EnemyTemplate",
    "Intent",
    "Potion",
    "Relic",
    "RelicEffect",
]
