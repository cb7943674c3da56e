"""Type definitions for the combat engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import count
from typing import TYPE_CHECKING

from ..models.content import Card, Potion, Relic
from ..models.enums import CardType, CombatPhase, EffectType, RelicTrigger

if TYPE_CHECKING:
    from ..content.catalog import Catalog
    from .combatant import Combatant, Enemy, Player
    from .piles import CardPiles
    from .rng import Rng


class InvariantViolation(AssertionError):
    """A state the engine should never reach (card in two piles, HP out of range, ...)."""


# Fallback for instances built by hand. The catalog and the combat state number their own cards.
_loose_ids = count(1)


@dataclass
class CardInstance:
    """A runtime copy of a card template.

    Each copy gets its own instance id so two Strikes in the same deck are
    distinct. Ids come from counters, never from randomness, so a replay
    with the same seed produces the same ids. `card` is the effective record
    (upgrade already applied); the catalog template is never referenced
    after creation.
    """

    card: Card
    instance_id: str = field(default_factory=lambda: f"card-{next(_loose_ids)}")

    @property
    def template_id(self) -> str:
        return self.card.id

    @property
    def name(self) -> str:
        return self.card.name

    @property
    def type(self) -> CardType:
        return self.card.type

    @property
    def upgraded(self) -> bool:
        return self.card.upgraded

    def upgrade(self) -> bool:
        """Upgrade in place. Returns False if the card can't be upgraded."""
        if not self.card.can_upgrade:
            return False
        self.card = self.card.upgraded_copy()
        return True


@dataclass
class RelicState:
    """A relic held by the player, with its mutable counter."""

    relic: Relic
    counter: int = 0

    @property
    def id(self) -> str:
        return self.relic.id


@dataclass(frozen=True)
class CombatEvent:
    """A lifecycle event emitted by the engine and consumed by relics."""

    trigger: RelicTrigger
    source_id: str | None = None
    target_id: str | None = None
    amount: int = 0
    card: CardInstance | None = None

    def describe(self) -> str:
        parts = [self.trigger.value]
        if self.card is not None:
            parts.append(self.card.name)
        if self.target_id is not None:
            parts.append(f"-> {self.target_id}")
        if self.amount:
            parts.append(str(self.amount))
        return " ".join(parts)


@dataclass
class EffectResult:
    """Result of applying a single effect to a single target."""

    effect_type: EffectType
    success: bool
    value: int = 0
    target_id: str | None = None
    description: str = ""
    continue_: bool = True  # False halts the rest of the effect list


@dataclass
class TurnCounters:
    """Per-turn play counters, reset at each player turn start."""

    cards_played: int = 0
    attacks_played: int = 0
    skills_played: int = 0

    def reset(self) -> None:
        self.cards_played = 0
        self.attacks_played = 0
        self.skills_played = 0


@dataclass
class CombatCounters:
    """Per-combat counters."""

    cards_played: int = 0
    attacks_played: int = 0
    powers_played: int = 0
    shuffles: int = 0
    player_damaged: bool = False


@dataclass
class CombatState:
    """Everything a combat owns. Mutated in place by the engine."""

    player: Player
    enemies: list[Enemy]
    piles: CardPiles
    turn: int = 1
    phase: CombatPhase = CombatPhase.NOT_STARTED
    turn_counters: TurnCounters = field(default_factory=TurnCounters)
    combat_counters: CombatCounters = field(default_factory=CombatCounters)

    # Turn-scoped flags set by card effects
    next_card_twice: int = 0
    retain_hand: bool = False

    # Events waiting for the relic pass, and everything processed so far
    pending_events: list[CombatEvent] = field(default_factory=list)
    event_log: list[CombatEvent] = field(default_factory=list)

    # Numbers cards created during this combat
    cards_created: int = 0

    @property
    def is_player_turn(self) -> bool:
        return self.phase == CombatPhase.PLAYER_TURN

    @property
    def is_over(self) -> bool:
        return self.phase in (CombatPhase.VICTORY, CombatPhase.DEFEAT)

    def living_enemies(self) -> list[Enemy]:
        return [enemy for enemy in self.enemies if enemy.is_alive()]

    def all_enemies_dead(self) -> bool:
        return not self.living_enemies()

    def get_enemy(self, enemy_id: str) -> Enemy | None:
        for enemy in self.enemies:
            if enemy.id == enemy_id:
                return enemy
        return None

    def new_card(self, card: Card) -> CardInstance:
        """Instance a card created mid-combat, with an id unique to this combat."""
        self.cards_created += 1
        return CardInstance(card=card, instance_id=f"{card.id}@{self.cards_created}")

    def emit(self, trigger: RelicTrigger, **kwargs: object) -> CombatEvent:
        """Queue a lifecycle event for the relic pass."""
        event = CombatEvent(trigger=trigger, **kwargs)  # type: ignore[arg-type]
        self.pending_events.append(event)
        return event


@dataclass
class EffectContext:
    """Context for resolving an effect list.

    `source` is the acting combatant. Target types are read from its point
    of view: for an enemy actor the "enemy" targets mean the player.
    """

    state: CombatState
    rng: Rng
    source: Combatant
    target: Combatant | None = None
    source_card: CardInstance | None = None
    potion: Potion | None = None
    energy_spent: int | None = None
    catalog: Catalog | None = None
    max_hand_size: int = 10

    @property
    def player(self) -> Player:
        return self.state.player

    @property
    def source_is_player(self) -> bool:
        return self.source is self.state.player

    @property
    def combat_over(self) -> bool:
        return not self.state.player.is_alive() or self.state.all_enemies_dead()

    @property
    def source_name(self) -> str:
        if self.source_card is not None:
            return self.source_card.name
        if self.potion is not None:
            return self.potion.name
        return self.source.name


@dataclass
class ActionResult:
    """Outcome of one player action (play card, use potion, end turn, start combat)."""

    success: bool
    reason: str | None = None
    effects: list[EffectResult] = field(default_factory=list)
    events: list[CombatEvent] = field(default_factory=list)
    phase: CombatPhase | None = None

    @classmethod
    def rejected(cls, reason: str, phase: CombatPhase | None = None) -> ActionResult:
        return cls(success=False, reason=reason, phase=phase)
