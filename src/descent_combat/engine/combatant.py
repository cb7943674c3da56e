"""Combatant model shared by the player and every enemy."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..models.content import Card, EnemyMove, Intent, Potion, Relic
from ..models.enums import (
    DURATION_STATUSES,
    SIGNED_STATUSES,
    EnemyType,
    StatusEffect,
)
from .calculator import (
    DamageResult,
    apply_damage,
    calculate_block,
    incoming_damage,
    outgoing_damage,
    plated_armor_tick,
    poison_tick,
)
from .types import CardInstance, RelicState

logger = logging.getLogger(__name__)


@dataclass
class StartOfTurnTick:
    """What happened when a combatant's turn began."""

    poison_damage: int = 0
    block_cleared: int = 0


@dataclass
class PowerTick:
    """End-of-turn effects of stack statuses."""

    plated_block: int = 0
    ritual_strength: int = 0
    regen_healed: int = 0


@dataclass(eq=False)
class Combatant:
    """Mutable combat state with the primitive mutators.

    HP stays within [0, max_hp] and block never goes negative. A combatant
    with 0 HP is dead and excluded from targeting.
    """

    id: str
    name: str
    max_hp: int
    current_hp: int = -1  # Defaults to max_hp
    block: int = 0
    statuses: dict[StatusEffect, int] = field(default_factory=dict)

    # Block survives the owner's turn start (relic or card granted)
    retain_block: bool = False
    # Unblocked damage taken since the last plated armor tick
    unblocked_damage_taken: bool = False

    def __post_init__(self) -> None:
        if self.current_hp < 0:
            self.current_hp = self.max_hp
        self.current_hp = min(self.current_hp, self.max_hp)

    def is_alive(self) -> bool:
        return self.current_hp > 0

    def is_dead(self) -> bool:
        return self.current_hp <= 0

    # ------------------------------------------------------------------
    # Status bag
    # ------------------------------------------------------------------

    def get_stacks(self, status: StatusEffect) -> int:
        """Get the stacks for a status (0 when absent)."""
        return self.statuses.get(status, 0)

    def set_stacks(self, status: StatusEffect, value: int) -> None:
        if status not in SIGNED_STATUSES:
            value = max(0, value)
        if value == 0:
            self.statuses.pop(status, None)
        else:
            self.statuses[status] = value

    def apply_status(self, status: StatusEffect, amount: int) -> int:
        """Apply a status and return the change in stacks.

        Durations (weak, vulnerable, frail, intangible) merge with max();
        magnitudes (strength, poison, thorns, ...) are additive.
        """
        current = self.get_stacks(status)
        if status in DURATION_STATUSES:
            new_value = max(current, amount)
        else:
            new_value = current + amount
        self.set_stacks(status, new_value)
        return self.get_stacks(status) - current

    def remove_stacks(self, status: StatusEffect, count: int) -> int:
        """Remove stacks from a status. Returns actual removed."""
        current = self.get_stacks(status)
        to_remove = min(current, count)
        self.set_stacks(status, current - to_remove)
        return to_remove

    def clear_statuses(self) -> None:
        self.statuses.clear()

    def try_consume_artifact(self) -> bool:
        """Spend one artifact stack to void a debuff. Returns True if spent."""
        if self.get_stacks(StatusEffect.ARTIFACT) > 0:
            self.remove_stacks(StatusEffect.ARTIFACT, 1)
            return True
        return False

    @property
    def strength(self) -> int:
        return self.get_stacks(StatusEffect.STRENGTH)

    @property
    def dexterity(self) -> int:
        return self.get_stacks(StatusEffect.DEXTERITY)

    @property
    def weak(self) -> int:
        return self.get_stacks(StatusEffect.WEAK)

    @property
    def vulnerable(self) -> int:
        return self.get_stacks(StatusEffect.VULNERABLE)

    @property
    def frail(self) -> int:
        return self.get_stacks(StatusEffect.FRAIL)

    @property
    def poison(self) -> int:
        return self.get_stacks(StatusEffect.POISON)

    @property
    def intangible(self) -> int:
        return self.get_stacks(StatusEffect.INTANGIBLE)

    @property
    def thorns(self) -> int:
        return self.get_stacks(StatusEffect.THORNS)

    # ------------------------------------------------------------------
    # HP and block
    # ------------------------------------------------------------------

    def take_hit(
        self,
        raw_damage: int,
        attacker: Combatant | None = None,
        ignore_block: bool = False,
    ) -> DamageResult:
        """Run the full damage pipeline against this combatant and commit it.

        Outgoing modifiers come from `attacker` (none for relic, thorns or
        other sourceless damage); incoming modifiers come from self.
        """
        damage = raw_damage
        if attacker is not None:
            damage = outgoing_damage(raw_damage, attacker.strength, attacker.weak)
        damage = incoming_damage(damage, self.vulnerable, self.intangible)
        result = apply_damage(damage, self.current_hp, 0 if ignore_block else self.block)
        if not ignore_block:
            self.block = result.remaining_block
        self.lose_hp(result.hp_lost)
        return result

    def take_damage(self, raw_damage: int, attacker: Combatant | None = None) -> int:
        """Take a hit and return the HP actually lost."""
        hp_before = self.current_hp
        self.take_hit(raw_damage, attacker)
        return hp_before - self.current_hp

    def lose_hp(self, amount: int) -> int:
        """Lose HP directly, ignoring block. Returns actual HP lost."""
        actual = min(self.current_hp, max(0, amount))
        self.current_hp -= actual
        if actual > 0:
            self.unblocked_damage_taken = True
        return actual

    def heal(self, amount: int) -> int:
        """Heal up to max HP. Returns actual HP restored."""
        if self.is_dead():
            return 0
        actual = min(self.max_hp - self.current_hp, max(0, amount))
        self.current_hp += actual
        return actual

    def gain_block(self, amount: int) -> int:
        """Add raw block (no dexterity or frail). Returns block added."""
        actual = max(0, amount)
        self.block += actual
        return actual

    def gain_block_from(self, base: int) -> int:
        """Add block after this combatant's dexterity and frail."""
        result = calculate_block(base, self.dexterity, self.frail)
        return self.gain_block(result.block_gained)

    # ------------------------------------------------------------------
    # Turn ticks
    # ------------------------------------------------------------------

    def tick_start_of_turn(self) -> StartOfTurnTick:
        """Poison tick, then block reset, then intangible wears off by one."""
        tick = StartOfTurnTick()
        if self.poison > 0:
            poison = poison_tick(self.poison)
            tick.poison_damage = self.lose_hp(poison.damage)
            self.set_stacks(StatusEffect.POISON, poison.remaining_stacks)
        if not self.retain_block:
            tick.block_cleared = self.block
            self.block = 0
        if self.intangible > 0:
            self.remove_stacks(StatusEffect.INTANGIBLE, 1)
        return tick

    def tick_end_of_turn(self) -> None:
        """Decrement weak, vulnerable and frail by one (never below 0)."""
        for status in (StatusEffect.WEAK, StatusEffect.VULNERABLE, StatusEffect.FRAIL):
            if self.get_stacks(status) > 0:
                self.remove_stacks(status, 1)

    def tick_powers(self) -> PowerTick:
        """End-of-turn effects of plated armor, ritual and regen."""
        tick = PowerTick()
        plated = self.get_stacks(StatusEffect.PLATED_ARMOR)
        if plated > 0:
            armor = plated_armor_tick(plated, self.unblocked_damage_taken)
            tick.plated_block = self.gain_block(armor.block_granted)
            self.set_stacks(StatusEffect.PLATED_ARMOR, armor.remaining_stacks)
        self.unblocked_damage_taken = False

        ritual = self.get_stacks(StatusEffect.RITUAL)
        if ritual > 0:
            tick.ritual_strength = self.apply_status(StatusEffect.STRENGTH, ritual)

        regen = self.get_stacks(StatusEffect.REGEN)
        if regen > 0:
            tick.regen_healed = self.heal(regen)
            self.remove_stacks(StatusEffect.REGEN, 1)
        return tick


@dataclass(eq=False)
class Player(Combatant):
    """The player: a combatant plus run state (deck, relics, potions, gold)."""

    energy: int = 0
    max_energy: int = 3
    max_energy_cap: int = 10
    gold: int = 0
    deck: list[CardInstance] = field(default_factory=list)
    relics: list[RelicState] = field(default_factory=list)
    potions: list[Potion | None] = field(default_factory=list)
    max_potion_slots: int = 3

    # Relic driven modifiers
    energy_next_combat: int = 0  # Granted once at the next combat start
    bonus_damage: int = 0  # Added to the next attack damage effect

    def start_combat(self) -> None:
        """Reset combat-only state at the beginning of a fight."""
        self.clear_statuses()
        self.block = 0
        self.retain_block = False
        self.unblocked_damage_taken = False
        self.bonus_damage = 0
        self.reset_energy()
        if self.energy_next_combat:
            self.gain_energy(self.energy_next_combat)
            self.energy_next_combat = 0

    # Energy

    def reset_energy(self) -> None:
        self.energy = min(self.max_energy, self.max_energy_cap)

    def gain_energy(self, amount: int) -> int:
        """Gain energy up to the cap. Returns actual gained."""
        actual = max(0, min(amount, self.max_energy_cap - self.energy))
        self.energy += actual
        return actual

    def lose_energy(self, amount: int) -> int:
        actual = min(self.energy, max(0, amount))
        self.energy -= actual
        return actual

    def spend_energy(self, amount: int) -> bool:
        """Spend energy if enough is available."""
        if amount > self.energy:
            return False
        self.energy -= max(0, amount)
        return True

    # Run-level mutation primitives

    def gain_max_hp(self, amount: int) -> int:
        """Raise max HP and heal by the same amount."""
        amount = max(0, amount)
        self.max_hp += amount
        self.current_hp += amount
        return amount

    def add_gold(self, amount: int) -> int:
        self.gold += max(0, amount)
        return self.gold

    def spend_gold(self, amount: int) -> bool:
        if amount > self.gold:
            return False
        self.gold -= amount
        return True

    def add_card(self, card: Card | CardInstance) -> CardInstance:
        """Add a card (template or instance) to the deck."""
        instance = card if isinstance(card, CardInstance) else CardInstance(card=card)
        self.deck.append(instance)
        return instance

    def remove_card(self, instance_id: str) -> CardInstance | None:
        """Remove a card permanently. Returns the removed card, or None."""
        for index, instance in enumerate(self.deck):
            if instance.instance_id == instance_id:
                return self.deck.pop(index)
        logger.warning("Card instance %s not in deck", instance_id)
        return None

    def upgrade_card(self, instance_id: str) -> bool:
        for instance in self.deck:
            if instance.instance_id == instance_id:
                return instance.upgrade()
        return False

    def add_relic(self, relic: Relic) -> RelicState | None:
        """Add a relic. Relics are unique: a second copy is ignored."""
        if self.has_relic(relic.id):
            logger.info("Player already has relic %s", relic.id)
            return None
        state = RelicState(relic=relic)
        self.relics.append(state)
        return state

    def has_relic(self, relic_id: str) -> bool:
        return any(state.id == relic_id for state in self.relics)

    def add_potion(self, potion: Potion) -> bool:
        """Put a potion in the first free slot. Returns False when all slots are full."""
        while len(self.potions) < self.max_potion_slots:
            self.potions.append(None)
        for index, slot in enumerate(self.potions):
            if slot is None:
                self.potions[index] = potion
                return True
        return False

    def take_potion(self, slot: int) -> Potion | None:
        """Remove and return the potion in a slot."""
        if slot < 0 or slot >= len(self.potions):
            return None
        potion = self.potions[slot]
        self.potions[slot] = None
        return potion


@dataclass(eq=False)
class Enemy(Combatant):
    """An enemy: a combatant plus its move table and committed intent."""

    template_id: str = ""
    type: EnemyType = EnemyType.NORMAL
    moves: list[EnemyMove] = field(default_factory=list)
    move_history: list[str] = field(default_factory=list)
    current_move: EnemyMove | None = None
    intent: Intent = field(default_factory=Intent)
