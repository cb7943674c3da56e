"""Declarative content records: cards, enemies, relics, potions and characters.

Templates are immutable pydantic models loaded once into a catalog. Runtime
objects (card instances in piles, enemies in combat) copy what they need and
never write back into a template.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import (
    CardType,
    CounterReset,
    EffectType,
    EnemyType,
    IntentType,
    Rarity,
    RelicAction,
    RelicTrigger,
    TargetType,
    normalize_trigger,
)

# Older enemy data spells a few effects differently
EFFECT_ALIASES = {
    "APPLY_BLOCK_SELF": EffectType.BLOCK.value,
    "APPLY_STRENGTH_SELF": EffectType.APPLY_STRENGTH.value,
    "GAIN_BLOCK": EffectType.BLOCK.value,
}


class ContentModel(BaseModel):
    """Base for all template records (frozen, accepts camelCase keys)."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class Effect(ContentModel):
    """A single declarative effect on a card, potion or enemy move."""

    type: EffectType = Field(description="Effect kind")
    value: int = Field(default=0, description="Magnitude of the effect")
    target: TargetType | None = Field(default=None, description="Overrides the owner's target type")
    times: int = Field(default=1, ge=0, description="How many times the effect repeats (multi-hit)")
    percentage: bool = Field(default=False, description="HEAL only: value is a percent of max HP")
    card_id: str | None = Field(default=None, alias="cardId", description="Card template for ADD_TO_* effects")

    @field_validator("type", mode="before")
    @classmethod
    def _migrate_type(cls, value: object) -> object:
        if isinstance(value, str):
            return EFFECT_ALIASES.get(value, value)
        return value


class CardUpgrade(ContentModel):
    """Fields that replace the base card's values when it is upgraded."""

    cost: int | None = None
    description: str | None = None
    effects: tuple[Effect, ...] | None = None
    target_type: TargetType | None = Field(default=None, alias="targetType")
    exhaust: bool | None = None
    retain: bool | None = None
    innate: bool | None = None
    ethereal: bool | None = None


class Card(ContentModel):
    """Card template."""

    id: str
    name: str
    description: str = ""
    type: CardType
    rarity: Rarity = Rarity.COMMON
    cost: int = Field(default=1, ge=-1, description="-1 means unplayable, or X when is_x_cost is set")
    target_type: TargetType = Field(default=TargetType.SELF, alias="targetType")
    effects: tuple[Effect, ...] = ()

    exhaust: bool = False  # Removed from combat when played
    retain: bool = False  # Kept in hand at end of turn
    innate: bool = False  # Starts in the opening hand
    ethereal: bool = False  # Exhausted if still in hand at end of turn
    is_x_cost: bool = Field(default=False, alias="isXCost")  # Spends all remaining energy

    upgraded: bool = False
    upgrade: CardUpgrade | None = Field(default=None, alias="upgradedStats")

    @property
    def is_unplayable(self) -> bool:
        """Cards with cost -1 can't be played, except X-cost cards."""
        return self.cost < 0 and not self.is_x_cost

    @property
    def can_upgrade(self) -> bool:
        return not self.upgraded and self.upgrade is not None

    @property
    def needs_target(self) -> bool:
        return self.target_type == TargetType.SINGLE_ENEMY

    def upgraded_copy(self) -> "Card":
        """Return the upgraded version of this card.

        Already upgraded cards (and cards without upgrade data) are returned
        unchanged.
        """
        if not self.can_upgrade:
            return self
        assert self.upgrade is not None
        changes = {
            name: value
            for name, value in self.upgrade.model_dump(exclude_none=True, by_alias=False).items()
            if name != "effects"
        }
        if self.upgrade.effects is not None:
            changes["effects"] = self.upgrade.effects
        changes["upgraded"] = True
        changes["name"] = f"{self.name}+"
        return self.model_copy(update=changes)

    def render_description(self) -> str:
        """Fill `{n}` placeholders with the n-th effect's value."""
        text = self.description
        for index, effect in enumerate(self.effects):
            text = text.replace(f"{{{index}}}", str(effect.value))
        return text


class Intent(ContentModel):
    """What an enemy shows the player before acting."""

    type: IntentType = IntentType.UNKNOWN
    value: int = 0


class EnemyMove(ContentModel):
    """One entry of an enemy's move table."""

    name: str
    intent: Intent = Field(default_factory=Intent)
    weight: float = Field(default=1.0, ge=0)
    actions: tuple[Effect, ...] = ()


class EnemyTemplate(ContentModel):
    """Enemy template."""

    id: str
    name: str
    type: EnemyType = EnemyType.NORMAL
    max_hp: int = Field(alias="maxHp", gt=0)
    moves: tuple[EnemyMove, ...] = ()


class RelicEffect(ContentModel):
    """A (trigger, action, value) triple attached to a relic."""

    trigger: RelicTrigger | str
    action: RelicAction
    value: int = 0
    every: int | None = Field(default=None, ge=1, description="N for counter-based effects (defaults to value)")

    @field_validator("trigger", mode="before")
    @classmethod
    def _normalize_trigger(cls, value: object) -> object:
        if isinstance(value, str):
            return normalize_trigger(value)
        return value


class Relic(ContentModel):
    """Relic template."""

    id: str
    name: str
    description: str = ""
    rarity: Rarity = Rarity.COMMON
    effects: tuple[RelicEffect, ...] = ()
    counter_reset: CounterReset = Field(default=CounterReset.NEVER, alias="counterReset")


class Potion(ContentModel):
    """Potion template. Potions are single use and never upgrade."""

    id: str
    name: str
    description: str = ""
    rarity: Rarity = Rarity.COMMON
    target_type: TargetType = Field(default=TargetType.SELF, alias="targetType")
    effects: tuple[Effect, ...] = ()

    @property
    def needs_target(self) -> bool:
        return self.target_type == TargetType.SINGLE_ENEMY


class CharacterClass(ContentModel):
    """Starting loadout for a playable character."""

    id: str
    name: str
    description: str = ""
    max_hp: int | None = Field(default=None, alias="maxHp", gt=0)  # Falls back to settings
    starting_gold: int | None = Field(default=None, alias="startingGold", ge=0)
    starting_deck: tuple[str, ...] = Field(default=(), alias="startingDeck")
    starting_relic: str | None = Field(default=None, alias="startingRelic")
