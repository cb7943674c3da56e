"""Damage and block arithmetic.

Every function here is pure: identical inputs give identical outputs and
nothing is mutated. Fractional multipliers always truncate toward zero
(never round, never ceil) and results are clamped to be non-negative.

Pipeline order for an attack:
    outgoing_damage (attacker strength/weak)
    -> incoming_damage (target vulnerable/intangible)
    -> apply_damage (target block/HP)
"""

from dataclasses import dataclass

WEAK_MULTIPLIER = 0.75
VULNERABLE_MULTIPLIER = 1.5
FRAIL_MULTIPLIER = 0.75
INTANGIBLE_DAMAGE = 1


@dataclass(frozen=True)
class DamageResult:
    """Outcome of hitting a block/HP pool with a final damage number."""

    blocked: int
    hp_lost: int
    remaining_block: int
    lethal: bool


@dataclass(frozen=True)
class BlockResult:
    """Outcome of a block gain after dexterity and frail."""

    block_gained: int
    frail_applied: bool


@dataclass(frozen=True)
class PoisonTick:
    damage: int
    remaining_stacks: int


@dataclass(frozen=True)
class PlatedArmorTick:
    block_granted: int
    remaining_stacks: int


def _truncate(value: float) -> int:
    return int(value)


def outgoing_damage(base: int, strength: int = 0, weak: int = 0) -> int:
    """Apply attacker-side modifiers.

    Args:
        base: Printed damage of the effect
        strength: Attacker strength (may be negative)
        weak: Attacker weak stacks; any positive value applies the multiplier

    Returns:
        Damage after strength and weak, never below 0
    """
    damage = base + strength
    if weak > 0:
        damage = _truncate(damage * WEAK_MULTIPLIER)
    return max(0, damage)


def incoming_damage(damage: int, vulnerable: int = 0, intangible: int = 0) -> int:
    """Apply target-side modifiers.

    Intangible overrides everything else: any hit becomes exactly 1.
    """
    if intangible > 0:
        return INTANGIBLE_DAMAGE
    if vulnerable > 0:
        damage = _truncate(damage * VULNERABLE_MULTIPLIER)
    return max(0, damage)


def apply_damage(damage: int, hp: int, block: int) -> DamageResult:
    """Split final damage between block and HP.

    `hp_lost` is not capped by `hp`; clamping HP at 0 is the caller's job,
    so `blocked + hp_lost == damage` always holds.
    """
    damage = max(0, damage)
    blocked = min(damage, block)
    hp_lost = max(0, damage - block)
    return DamageResult(
        blocked=blocked,
        hp_lost=hp_lost,
        remaining_block=max(0, block - damage),
        lethal=(hp - hp_lost) <= 0,
    )


def calculate_block(base: int, dexterity: int = 0, frail: int = 0) -> BlockResult:
    """Apply dexterity then frail to a block gain."""
    block = base + dexterity
    frail_applied = False
    if frail > 0:
        block = _truncate(block * FRAIL_MULTIPLIER)
        frail_applied = True
    return BlockResult(block_gained=max(0, block), frail_applied=frail_applied)


def poison_tick(stacks: int) -> PoisonTick:
    """Poison deals its stacks as damage, then loses one stack."""
    return PoisonTick(damage=max(0, stacks), remaining_stacks=max(0, stacks - 1))


def plated_armor_tick(stacks: int, took_unblocked_damage: bool) -> PlatedArmorTick:
    """Plated armor grants its stacks as block and erodes after unblocked damage."""
    remaining = max(0, stacks - 1) if took_unblocked_damage else stacks
    return PlatedArmorTick(block_granted=max(0, stacks), remaining_stacks=remaining)


def thorns_damage(stacks: int) -> int:
    """Damage reflected to an attacker."""
    return max(0, stacks)


def calculate_damage(
    base: int,
    strength: int = 0,
    weak: int = 0,
    vulnerable: int = 0,
    intangible: int = 0,
) -> int:
    """Run the outgoing and incoming steps together."""
    return incoming_damage(outgoing_damage(base, strength, weak), vulnerable, intangible)


def effective_hp(hp: int, block: int) -> int:
    """Total damage a combatant can absorb before dying."""
    return max(0, hp) + max(0, block)


def would_be_lethal(damage: int, hp: int, block: int) -> bool:
    return apply_damage(damage, hp, block).lethal


def overkill(damage: int, hp: int, block: int) -> int:
    """Damage in excess of what was needed to kill."""
    return max(0, damage - effective_hp(hp, block))
