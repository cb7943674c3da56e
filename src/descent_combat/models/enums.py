"""Enums for the combat vocabulary."""

import logging
import re
from enum import Enum

logger = logging.getLogger(__name__)


class EffectType(str, Enum):
    """Effects a card, potion or enemy move can perform."""

    # Damage
    DAMAGE = "DAMAGE"
    DAMAGE_ALL = "DAMAGE_ALL"
    DAMAGE_RANDOM = "DAMAGE_RANDOM"
    DAMAGE_EQUAL_BLOCK = "DAMAGE_EQUAL_BLOCK"  # Damage equal to own block
    DAMAGE_PER_DISCARD = "DAMAGE_PER_DISCARD"  # value per card in discard pile
    DAMAGE_EQUAL_POISON = "DAMAGE_EQUAL_POISON"  # value per poison on the target
    DAMAGE_TRIPLE_STRENGTH = "DAMAGE_TRIPLE_STRENGTH"  # Strength counts three times
    DAMAGE_IGNORE_BLOCK = "DAMAGE_IGNORE_BLOCK"

    # Block
    BLOCK = "BLOCK"
    DOUBLE_BLOCK = "DOUBLE_BLOCK"
    BLOCK_PER_CARD_IN_HAND = "BLOCK_PER_CARD_IN_HAND"

    # Card manipulation
    DRAW = "DRAW"
    DISCARD = "DISCARD"
    EXHAUST = "EXHAUST"
    ADD_TO_HAND = "ADD_TO_HAND"
    ADD_TO_DISCARD = "ADD_TO_DISCARD"
    ADD_TO_DRAW = "ADD_TO_DRAW"
    DUPLICATE_CARD = "DUPLICATE_CARD"

    # Energy
    GAIN_ENERGY = "GAIN_ENERGY"
    LOSE_ENERGY = "LOSE_ENERGY"

    # HP
    HEAL = "HEAL"
    LOSE_HP = "LOSE_HP"
    GAIN_MAX_HP = "GAIN_MAX_HP"

    # Buffs
    APPLY_STRENGTH = "APPLY_STRENGTH"
    APPLY_DEXTERITY = "APPLY_DEXTERITY"
    APPLY_ARTIFACT = "APPLY_ARTIFACT"
    APPLY_PLATED_ARMOR = "APPLY_PLATED_ARMOR"
    APPLY_THORNS = "APPLY_THORNS"
    APPLY_RITUAL = "APPLY_RITUAL"
    APPLY_INTANGIBLE = "APPLY_INTANGIBLE"
    APPLY_REGEN = "APPLY_REGEN"

    # Debuffs
    APPLY_VULNERABLE = "APPLY_VULNERABLE"
    APPLY_WEAK = "APPLY_WEAK"
    APPLY_FRAIL = "APPLY_FRAIL"
    APPLY_POISON = "APPLY_POISON"
    REDUCE_STRENGTH = "REDUCE_STRENGTH"

    # Special
    UPGRADE_CARD = "UPGRADE_CARD"
    TRANSFORM_CARD = "TRANSFORM_CARD"
    NEXT_CARD_TWICE = "NEXT_CARD_TWICE"
    SCRY = "SCRY"
    RETAIN_HAND = "RETAIN_HAND"


class TargetType(str, Enum):
    """Who an effect lands on, seen from the acting combatant."""

    SELF = "SELF"
    SINGLE_ENEMY = "SINGLE_ENEMY"
    ALL_ENEMIES = "ALL_ENEMIES"
    RANDOM_ENEMY = "RANDOM_ENEMY"


class CardType(str, Enum):
    """Card type classifications."""

    ATTACK = "ATTACK"
    SKILL = "SKILL"
    POWER = "POWER"
    STATUS = "STATUS"
    CURSE = "CURSE"


class Rarity(str, Enum):
    """Rarity levels for cards, relics, and potions."""

    STARTER = "STARTER"
    COMMON = "COMMON"
    UNCOMMON = "UNCOMMON"
    RARE = "RARE"
    SPECIAL = "SPECIAL"


class StatusEffect(str, Enum):
    """Keys of a combatant's status bag."""

    STRENGTH = "strength"
    DEXTERITY = "dexterity"
    ARTIFACT = "artifact"
    PLATED_ARMOR = "platedArmor"
    THORNS = "thorns"
    RITUAL = "ritual"
    INTANGIBLE = "intangible"
    REGEN = "regen"
    WEAK = "weak"
    VULNERABLE = "vulnerable"
    FRAIL = "frail"
    POISON = "poison"


class EnemyType(str, Enum):
    """Encounter tier of an enemy."""

    NORMAL = "normal"
    ELITE = "elite"
    BOSS = "boss"


class IntentType(str, Enum):
    """Publicly visible category of an enemy's next move."""

    ATTACK = "ATTACK"
    DEFEND = "DEFEND"
    BUFF = "BUFF"
    DEBUFF = "DEBUFF"
    UNKNOWN = "UNKNOWN"


class CombatPhase(str, Enum):
    """States of the combat state machine."""

    NOT_STARTED = "not_started"
    PLAYER_TURN = "player_turn"
    ENEMY_TURN = "enemy_turn"
    VICTORY = "victory"  # Every enemy reached 0 HP
    DEFEAT = "defeat"  # Player reached 0 HP


class RelicTrigger(str, Enum):
    """Lifecycle events a relic can react to."""

    # Combat lifecycle
    COMBAT_START = "COMBAT_START"
    COMBAT_END = "COMBAT_END"
    COMBAT_VICTORY = "COMBAT_VICTORY"

    # Turn lifecycle
    TURN_START = "TURN_START"
    TURN_END = "TURN_END"
    FIRST_TURN = "FIRST_TURN"
    TURN_EVERY_N = "TURN_EVERY_N"

    # Card play
    CARD_PLAYED = "CARD_PLAYED"
    ATTACK_PLAYED = "ATTACK_PLAYED"
    SKILL_PLAYED = "SKILL_PLAYED"
    POWER_PLAYED = "POWER_PLAYED"
    FIRST_ATTACK_COMBAT = "FIRST_ATTACK_COMBAT"
    FIRST_ATTACK_TURN = "FIRST_ATTACK_TURN"
    CARD_EVERY_N = "CARD_EVERY_N"
    ATTACK_EVERY_N = "ATTACK_EVERY_N"
    SKILL_EVERY_N = "SKILL_EVERY_N"

    # Card manipulation
    CARD_DRAWN = "CARD_DRAWN"
    CARD_DISCARDED = "CARD_DISCARDED"
    CARD_EXHAUSTED = "CARD_EXHAUSTED"
    SHUFFLE = "SHUFFLE"
    SHUFFLE_EVERY_N = "SHUFFLE_EVERY_N"
    EMPTY_HAND_END_TURN = "EMPTY_HAND_END_TURN"

    # Damage
    PLAYER_DAMAGED = "PLAYER_DAMAGED"
    FIRST_DAMAGE_COMBAT = "FIRST_DAMAGE_COMBAT"
    PLAYER_HP_LOST = "PLAYER_HP_LOST"
    DAMAGE_DEALT = "DAMAGE_DEALT"
    ENEMY_KILLED = "ENEMY_KILLED"

    # Block
    BLOCK_GAINED = "BLOCK_GAINED"
    BLOCK_BROKEN = "BLOCK_BROKEN"

    # Status
    DEBUFF_PREVENTED = "DEBUFF_PREVENTED"
    BUFF_GAINED = "BUFF_GAINED"

    # Room entry
    REST_SITE_ENTER = "REST_SITE_ENTER"
    REST_HEAL = "REST_HEAL"
    REST_UPGRADE = "REST_UPGRADE"
    MERCHANT_ENTER = "MERCHANT_ENTER"
    EVENT_ENTER = "EVENT_ENTER"
    TREASURE_ENTER = "TREASURE_ENTER"
    ROOM_ENTER = "ROOM_ENTER"

    # Economy
    GOLD_GAINED = "GOLD_GAINED"
    GOLD_SPENT = "GOLD_SPENT"

    # Items
    POTION_GAINED = "POTION_GAINED"
    POTION_USED = "POTION_USED"

    # Acquisition
    ON_OBTAIN = "ON_OBTAIN"
    RELIC_OBTAINED = "RELIC_OBTAINED"
    CARD_OBTAINED = "CARD_OBTAINED"

    # Always active
    PASSIVE = "PASSIVE"

    # HP thresholds
    HP_BELOW_50 = "HP_BELOW_50"
    HP_BELOW_25 = "HP_BELOW_25"


class RelicAction(str, Enum):
    """What a relic does when its trigger fires."""

    # Direct
    HEAL = "HEAL"
    BLOCK = "BLOCK"
    DRAW = "DRAW"
    GAIN_ENERGY = "GAIN_ENERGY"
    GAIN_STRENGTH = "GAIN_STRENGTH"
    GAIN_DEXTERITY = "GAIN_DEXTERITY"
    GAIN_MAX_HP = "GAIN_MAX_HP"
    GAIN_GOLD = "GAIN_GOLD"
    THORNS = "THORNS"
    DAMAGE_RANDOM = "DAMAGE_RANDOM"
    DAMAGE_ALL = "DAMAGE_ALL"
    BONUS_DAMAGE = "BONUS_DAMAGE"
    REDUCE_DAMAGE = "REDUCE_DAMAGE"
    ADD_RANDOM_CARD = "ADD_RANDOM_CARD"
    UPGRADE_RANDOM = "UPGRADE_RANDOM"
    DOUBLE_FIRST_CARD = "DOUBLE_FIRST_CARD"
    ENERGY_NEXT_COMBAT = "ENERGY_NEXT_COMBAT"
    PLATED_ARMOR = "PLATED_ARMOR"
    APPLY_DEBUFF_ENEMIES = "APPLY_DEBUFF_ENEMIES"
    APPLY_VULNERABLE = "APPLY_VULNERABLE"
    APPLY_WEAK = "APPLY_WEAK"

    # Counter-based ("every N")
    DRAW_EVERY_N = "DRAW_EVERY_N"
    ENERGY_EVERY_N = "ENERGY_EVERY_N"
    DEXTERITY_EVERY_N = "DEXTERITY_EVERY_N"
    STRENGTH_EVERY_N = "STRENGTH_EVERY_N"
    BLOCK_EVERY_N = "BLOCK_EVERY_N"
    DAMAGE_ALL_EVERY_N = "DAMAGE_ALL_EVERY_N"
    ENERGY_SHUFFLE_N = "ENERGY_SHUFFLE_N"
    INTANGIBLE_EVERY_N = "INTANGIBLE_EVERY_N"

    # Combat passives
    RETAIN_BLOCK = "RETAIN_BLOCK"
    RETAIN_ENERGY = "RETAIN_ENERGY"
    CURSES_PLAYABLE = "CURSES_PLAYABLE"

    # Run-level passives (handled outside the combat engine)
    POTION_SLOT = "POTION_SLOT"
    GOLD_MULTIPLY = "GOLD_MULTIPLY"
    EXTRA_CARD_CHOICE = "EXTRA_CARD_CHOICE"
    ELITE_BONUS_RELIC = "ELITE_BONUS_RELIC"
    VULNERABLE_BONUS = "VULNERABLE_BONUS"
    MORE_EVENT_OPTIONS = "MORE_EVENT_OPTIONS"
    MERCHANT_DISCOUNT = "MERCHANT_DISCOUNT"
    REST_REMOVE_CARD = "REST_REMOVE_CARD"
    REST_DIG = "REST_DIG"
    EVENT_TO_TREASURE = "EVENT_TO_TREASURE"
    REVIVE = "REVIVE"
    AUTO_UPGRADE_SKILLS = "AUTO_UPGRADE_SKILLS"
    AUTO_UPGRADE_POWERS = "AUTO_UPGRADE_POWERS"
    REDUCE_RANDOM_COST = "REDUCE_RANDOM_COST"
    DISCARD_DRAW = "DISCARD_DRAW"


class CounterReset(str, Enum):
    """When a relic's counter returns to zero on its own."""

    NEVER = "NEVER"
    COMBAT = "COMBAT"
    TURN = "TURN"


# =============================================================================
# Effect classification
# =============================================================================

DAMAGE_EFFECTS = frozenset(
    {
        EffectType.DAMAGE,
        EffectType.DAMAGE_ALL,
        EffectType.DAMAGE_RANDOM,
        EffectType.DAMAGE_EQUAL_BLOCK,
        EffectType.DAMAGE_PER_DISCARD,
        EffectType.DAMAGE_EQUAL_POISON,
        EffectType.DAMAGE_TRIPLE_STRENGTH,
        EffectType.DAMAGE_IGNORE_BLOCK,
    }
)

BLOCK_EFFECTS = frozenset(
    {
        EffectType.BLOCK,
        EffectType.DOUBLE_BLOCK,
        EffectType.BLOCK_PER_CARD_IN_HAND,
    }
)

BUFF_EFFECTS = frozenset(
    {
        EffectType.APPLY_STRENGTH,
        EffectType.APPLY_DEXTERITY,
        EffectType.APPLY_ARTIFACT,
        EffectType.APPLY_PLATED_ARMOR,
        EffectType.APPLY_THORNS,
        EffectType.APPLY_RITUAL,
        EffectType.APPLY_INTANGIBLE,
        EffectType.APPLY_REGEN,
    }
)

DEBUFF_EFFECTS = frozenset(
    {
        EffectType.APPLY_VULNERABLE,
        EffectType.APPLY_WEAK,
        EffectType.APPLY_FRAIL,
        EffectType.APPLY_POISON,
        EffectType.REDUCE_STRENGTH,
    }
)

# Effects that land on the actor regardless of the card's target type
SELF_EFFECTS = BLOCK_EFFECTS | BUFF_EFFECTS | {
    EffectType.DRAW,
    EffectType.DISCARD,
    EffectType.EXHAUST,
    EffectType.ADD_TO_HAND,
    EffectType.ADD_TO_DISCARD,
    EffectType.ADD_TO_DRAW,
    EffectType.DUPLICATE_CARD,
    EffectType.GAIN_ENERGY,
    EffectType.LOSE_ENERGY,
    EffectType.HEAL,
    EffectType.LOSE_HP,
    EffectType.GAIN_MAX_HP,
    EffectType.UPGRADE_CARD,
    EffectType.TRANSFORM_CARD,
    EffectType.NEXT_CARD_TWICE,
    EffectType.SCRY,
    EffectType.RETAIN_HAND,
}

_APPLY_STATUS = {
    EffectType.APPLY_STRENGTH: StatusEffect.STRENGTH,
    EffectType.APPLY_DEXTERITY: StatusEffect.DEXTERITY,
    EffectType.APPLY_ARTIFACT: StatusEffect.ARTIFACT,
    EffectType.APPLY_PLATED_ARMOR: StatusEffect.PLATED_ARMOR,
    EffectType.APPLY_THORNS: StatusEffect.THORNS,
    EffectType.APPLY_RITUAL: StatusEffect.RITUAL,
    EffectType.APPLY_INTANGIBLE: StatusEffect.INTANGIBLE,
    EffectType.APPLY_REGEN: StatusEffect.REGEN,
    EffectType.APPLY_VULNERABLE: StatusEffect.VULNERABLE,
    EffectType.APPLY_WEAK: StatusEffect.WEAK,
    EffectType.APPLY_FRAIL: StatusEffect.FRAIL,
    EffectType.APPLY_POISON: StatusEffect.POISON,
}

# Turn counters merge with max(); everything else adds
DURATION_STATUSES = frozenset(
    {StatusEffect.WEAK, StatusEffect.VULNERABLE, StatusEffect.FRAIL, StatusEffect.INTANGIBLE}
)
DEBUFF_STATUSES = frozenset({StatusEffect.WEAK, StatusEffect.VULNERABLE, StatusEffect.FRAIL, StatusEffect.POISON})
SIGNED_STATUSES = frozenset({StatusEffect.STRENGTH, StatusEffect.DEXTERITY})


def is_damage_effect(effect_type: EffectType) -> bool:
    """Check if an effect type deals damage."""
    return effect_type in DAMAGE_EFFECTS


def is_block_effect(effect_type: EffectType) -> bool:
    """Check if an effect type grants block."""
    return effect_type in BLOCK_EFFECTS


def is_buff_effect(effect_type: EffectType) -> bool:
    """Check if an effect type is a buff."""
    return effect_type in BUFF_EFFECTS


def is_debuff_effect(effect_type: EffectType) -> bool:
    """Check if an effect type is a debuff."""
    return effect_type in DEBUFF_EFFECTS


def status_for_effect(effect_type: EffectType) -> StatusEffect | None:
    """Get the status key an APPLY_* effect writes to."""
    return _APPLY_STATUS.get(effect_type)


# =============================================================================
# Relic classification
# =============================================================================

COUNTER_ACTIONS = frozenset(
    {
        RelicAction.DRAW_EVERY_N,
        RelicAction.ENERGY_EVERY_N,
        RelicAction.DEXTERITY_EVERY_N,
        RelicAction.STRENGTH_EVERY_N,
        RelicAction.BLOCK_EVERY_N,
        RelicAction.DAMAGE_ALL_EVERY_N,
        RelicAction.ENERGY_SHUFFLE_N,
        RelicAction.INTANGIBLE_EVERY_N,
    }
)

COMBAT_TRIGGERS = frozenset(
    {
        RelicTrigger.COMBAT_START,
        RelicTrigger.COMBAT_END,
        RelicTrigger.COMBAT_VICTORY,
        RelicTrigger.TURN_START,
        RelicTrigger.TURN_END,
        RelicTrigger.FIRST_TURN,
        RelicTrigger.CARD_PLAYED,
        RelicTrigger.ATTACK_PLAYED,
        RelicTrigger.SKILL_PLAYED,
        RelicTrigger.POWER_PLAYED,
        RelicTrigger.FIRST_ATTACK_COMBAT,
        RelicTrigger.FIRST_ATTACK_TURN,
        RelicTrigger.CARD_DRAWN,
        RelicTrigger.CARD_DISCARDED,
        RelicTrigger.CARD_EXHAUSTED,
        RelicTrigger.SHUFFLE,
        RelicTrigger.EMPTY_HAND_END_TURN,
        RelicTrigger.PLAYER_DAMAGED,
        RelicTrigger.FIRST_DAMAGE_COMBAT,
        RelicTrigger.PLAYER_HP_LOST,
        RelicTrigger.DAMAGE_DEALT,
        RelicTrigger.ENEMY_KILLED,
        RelicTrigger.BLOCK_GAINED,
        RelicTrigger.BLOCK_BROKEN,
        RelicTrigger.DEBUFF_PREVENTED,
        RelicTrigger.BUFF_GAINED,
        RelicTrigger.POTION_USED,
        RelicTrigger.HP_BELOW_50,
        RelicTrigger.HP_BELOW_25,
    }
)

ROOM_TRIGGERS = frozenset(
    {
        RelicTrigger.REST_SITE_ENTER,
        RelicTrigger.MERCHANT_ENTER,
        RelicTrigger.EVENT_ENTER,
        RelicTrigger.TREASURE_ENTER,
        RelicTrigger.ROOM_ENTER,
    }
)


def is_counter_action(action: RelicAction) -> bool:
    """Check if an action uses the relic counter."""
    return action in COUNTER_ACTIONS


def is_combat_trigger(trigger: RelicTrigger) -> bool:
    """Check if a trigger fires during combat."""
    return trigger in COMBAT_TRIGGERS


def is_room_trigger(trigger: RelicTrigger) -> bool:
    """Check if a trigger fires when entering a room."""
    return trigger in ROOM_TRIGGERS


# "Every N" triggers count occurrences of a base event
EVERY_N_TRIGGERS: dict[RelicTrigger, RelicTrigger] = {
    RelicTrigger.TURN_EVERY_N: RelicTrigger.TURN_START,
    RelicTrigger.CARD_EVERY_N: RelicTrigger.CARD_PLAYED,
    RelicTrigger.ATTACK_EVERY_N: RelicTrigger.ATTACK_PLAYED,
    RelicTrigger.SKILL_EVERY_N: RelicTrigger.SKILL_PLAYED,
    RelicTrigger.SHUFFLE_EVERY_N: RelicTrigger.SHUFFLE,
}


def base_trigger(trigger: RelicTrigger | str) -> RelicTrigger | str:
    """Get the event a trigger listens to, unwrapping "every N" triggers."""
    if isinstance(trigger, RelicTrigger):
        return EVERY_N_TRIGGERS.get(trigger, trigger)
    return trigger


# =============================================================================
# Trigger migration
# =============================================================================

TRIGGER_MIGRATION_MAP: dict[str, RelicTrigger] = {
    # lowerCamelCase spellings
    "onCombatStart": RelicTrigger.COMBAT_START,
    "onCombatEnd": RelicTrigger.COMBAT_END,
    "onCombatVictory": RelicTrigger.COMBAT_VICTORY,
    "onTurnStart": RelicTrigger.TURN_START,
    "onTurnEnd": RelicTrigger.TURN_END,
    "onFirstTurn": RelicTrigger.FIRST_TURN,
    "onCardPlayed": RelicTrigger.CARD_PLAYED,
    "onAttackPlayed": RelicTrigger.ATTACK_PLAYED,
    "onSkillPlayed": RelicTrigger.SKILL_PLAYED,
    "onPowerPlayed": RelicTrigger.POWER_PLAYED,
    "onFirstAttack": RelicTrigger.FIRST_ATTACK_COMBAT,
    "onCardDrawn": RelicTrigger.CARD_DRAWN,
    "onCardDiscarded": RelicTrigger.CARD_DISCARDED,
    "onCardExhausted": RelicTrigger.CARD_EXHAUSTED,
    "onShuffle": RelicTrigger.SHUFFLE,
    "onPlayerDamaged": RelicTrigger.PLAYER_DAMAGED,
    "onDamageDealt": RelicTrigger.DAMAGE_DEALT,
    "onEnemyKilled": RelicTrigger.ENEMY_KILLED,
    "onBlockGained": RelicTrigger.BLOCK_GAINED,
    "onDebuffPrevented": RelicTrigger.DEBUFF_PREVENTED,
    "onRestSite": RelicTrigger.REST_SITE_ENTER,
    "onMerchant": RelicTrigger.MERCHANT_ENTER,
    "onEvent": RelicTrigger.EVENT_ENTER,
    "onTreasure": RelicTrigger.TREASURE_ENTER,
    "onRoomEnter": RelicTrigger.ROOM_ENTER,
    "onGoldGained": RelicTrigger.GOLD_GAINED,
    "onGoldSpent": RelicTrigger.GOLD_SPENT,
    "onPotionGained": RelicTrigger.POTION_GAINED,
    "onPotionUsed": RelicTrigger.POTION_USED,
    "onObtain": RelicTrigger.ON_OBTAIN,
    "onRelicObtained": RelicTrigger.RELIC_OBTAINED,
    "onCardObtained": RelicTrigger.CARD_OBTAINED,
    "passive": RelicTrigger.PASSIVE,
    # Verb-first spellings
    "START_COMBAT": RelicTrigger.COMBAT_START,
    "END_COMBAT": RelicTrigger.COMBAT_END,
    "START_TURN": RelicTrigger.TURN_START,
    "END_TURN": RelicTrigger.TURN_END,
    "CARD_PLAY": RelicTrigger.CARD_PLAYED,
    "ATTACK_PLAY": RelicTrigger.ATTACK_PLAYED,
    "SKILL_PLAY": RelicTrigger.SKILL_PLAYED,
    "POWER_PLAY": RelicTrigger.POWER_PLAYED,
    "FIRST_DAMAGE": RelicTrigger.FIRST_DAMAGE_COMBAT,
    "END_TURN_EMPTY_HAND": RelicTrigger.EMPTY_HAND_END_TURN,
}

_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")


def normalize_trigger(trigger: str) -> RelicTrigger | str:
    """Normalize a trigger spelling to the canonical vocabulary.

    Unknown spellings are logged and returned unchanged so that third-party
    data does not fail to load; they simply never match an emitted event.
    """
    if isinstance(trigger, RelicTrigger):
        return trigger
    if trigger in TRIGGER_MIGRATION_MAP:
        return TRIGGER_MIGRATION_MAP[trigger]
    try:
        return RelicTrigger(trigger)
    except ValueError:
        pass
    upper = _CAMEL_BOUNDARY.sub(r"\1_\2", trigger).upper()
    try:
        return RelicTrigger(upper)
    except ValueError:
        logger.warning("Unknown relic trigger %r passed through unchanged", trigger)
        return trigger
