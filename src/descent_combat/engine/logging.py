"""Combat logging system for tracking and verifying engine output.

Provides structured logging of all combat events including:
- Combat and turn lifecycle
- Lifecycle events emitted for relics
- Effect executions with before/after state
- Relic activations and enemy moves
- Rejected player actions
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..models.enums import CombatPhase


class LogEventType(str, Enum):
    """Types of log events."""

    # Combat lifecycle
    COMBAT_START = "combat_start"
    COMBAT_END = "combat_end"

    # Turn lifecycle
    TURN_START = "turn_start"
    TURN_END = "turn_end"

    # Effect processing
    EFFECT_EXECUTED = "effect_executed"
    EFFECT_SKIPPED = "effect_skipped"

    # Lifecycle events consumed by relics
    EVENT_EMITTED = "event_emitted"
    RELIC_ACTIVATED = "relic_activated"

    # Actors
    CARD_PLAYED = "card_played"
    POTION_USED = "potion_used"
    ENEMY_MOVE = "enemy_move"
    ACTION_REJECTED = "action_rejected"

    # State changes
    STATE_SNAPSHOT = "state_snapshot"


@dataclass
class StateSnapshot:
    """Snapshot of a combatant's state at a point in time."""

    combatant_id: str
    current_hp: int
    max_hp: int
    block: int
    statuses: dict[str, int]
    energy: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        result: dict[str, Any] = {
            "combatant_id": self.combatant_id,
            "current_hp": self.current_hp,
            "max_hp": self.max_hp,
            "block": self.block,
            "statuses": dict(self.statuses),
        }
        if self.energy is not None:
            result["energy"] = self.energy
        return result


@dataclass
class LogEntry:
    """A single log entry representing a combat event."""

    event_type: LogEventType
    turn_number: int
    timestamp_order: int = 0  # Order within the combat for deterministic sorting

    # Event-specific data
    source_id: str | None = None
    target_id: str | None = None
    name: str | None = None  # Card, potion, relic, move or trigger name
    effect_type: str | None = None
    reason: str | None = None

    # State before/after for effect events
    state_before: StateSnapshot | None = None
    state_after: StateSnapshot | None = None

    value: int | None = None
    description: str | None = None

    # For snapshots - all combatants
    all_states: dict[str, StateSnapshot] | None = None

    outcome: CombatPhase | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        result: dict[str, Any] = {
            "event_type": self.event_type.value,
            "turn_number": self.turn_number,
            "timestamp_order": self.timestamp_order,
        }

        if self.source_id is not None:
            result["source_id"] = self.source_id
        if self.target_id is not None:
            result["target_id"] = self.target_id
        if self.name is not None:
            result["name"] = self.name
        if self.effect_type is not None:
            result["effect_type"] = self.effect_type
        if self.reason is not None:
            result["reason"] = self.reason
        if self.state_before is not None:
            result["state_before"] = self.state_before.to_dict()
        if self.state_after is not None:
            result["state_after"] = self.state_after.to_dict()
        if self.value is not None:
            result["value"] = self.value
        if self.description is not None:
            result["description"] = self.description
        if self.all_states is not None:
            result["all_states"] = {cid: state.to_dict() for cid, state in self.all_states.items()}
        if self.outcome is not None:
            result["outcome"] = self.outcome.value

        return result


@dataclass
class CombatLog:
    """Complete log of one combat."""

    combat_id: str
    entries: list[LogEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "combat_id": self.combat_id,
            "entries": [entry.to_dict() for entry in self.entries],
        }

    def get_entries_by_type(self, event_type: LogEventType) -> list[LogEntry]:
        """Get all entries of a specific type."""
        return [e for e in self.entries if e.event_type == event_type]

    def get_entries_for_turn(self, turn_number: int) -> list[LogEntry]:
        """Get all entries for a specific turn."""
        return [e for e in self.entries if e.turn_number == turn_number]

    def format_readable(self) -> str:
        """Format the log in a human-readable format."""
        lines: list[str] = []
        lines.append(f"=== Combat Log ({self.combat_id}) ===\n")

        current_turn = -1
        for entry in self.entries:
            if entry.turn_number != current_turn:
                current_turn = entry.turn_number
                lines.append(f"\n--- Turn {current_turn} ---\n")
            lines.append(self._format_entry(entry))

        return "\n".join(lines)

    def _format_entry(self, entry: LogEntry) -> str:
        """Format a single log entry."""
        match entry.event_type:
            case LogEventType.COMBAT_START:
                return f"  Combat begins: {entry.description}"

            case LogEventType.COMBAT_END:
                outcome = entry.outcome.value.upper() if entry.outcome else "?"
                return f"  *** {outcome} ***"

            case LogEventType.TURN_START:
                return f"  {entry.name or 'Player'} turn {entry.turn_number} begins"

            case LogEventType.TURN_END:
                return f"  {entry.name or 'Player'} turn {entry.turn_number} ends"

            case LogEventType.EFFECT_EXECUTED:
                hp_change = ""
                if entry.state_before and entry.state_after:
                    if entry.state_before.current_hp != entry.state_after.current_hp:
                        hp_change = f" [HP: {entry.state_before.current_hp} → {entry.state_after.current_hp}]"
                return (
                    f"    → {entry.name}: {entry.effect_type} on {entry.target_id} = {entry.value}"
                    f"{hp_change} ({entry.description})"
                )

            case LogEventType.EFFECT_SKIPPED:
                return f"    ✗ {entry.name}: {entry.effect_type} skipped ({entry.reason})"

            case LogEventType.EVENT_EMITTED:
                return f"    • {entry.description}"

            case LogEventType.RELIC_ACTIVATED:
                return f"    ◆ Relic '{entry.name}': {entry.effect_type} {entry.value} ({entry.description})"

            case LogEventType.CARD_PLAYED:
                target = f" at {entry.target_id}" if entry.target_id else ""
                return f"  Plays {entry.name}{target}"

            case LogEventType.POTION_USED:
                target = f" at {entry.target_id}" if entry.target_id else ""
                return f"  Drinks {entry.name}{target}"

            case LogEventType.ENEMY_MOVE:
                return f"  {entry.source_id} uses {entry.name}"

            case LogEventType.ACTION_REJECTED:
                return f"  ✗ {entry.name} rejected: {entry.reason}"

            case LogEventType.STATE_SNAPSHOT:
                if entry.all_states:
                    state_lines = []
                    for cid, state in entry.all_states.items():
                        stacks_str = ", ".join(f"{k}:{v}" for k, v in state.statuses.items()) or "none"
                        state_lines.append(
                            f"      {cid}: HP={state.current_hp}/{state.max_hp}, "
                            f"block={state.block}, statuses=[{stacks_str}]"
                        )
                    return "    State snapshot:\n" + "\n".join(state_lines)
                return "    State snapshot (empty)"

            case _:
                return f"    {entry.event_type.value}: {entry.description or ''}"


class CombatLogger:
    """Logger for tracking combat events.

    Usage:
        logger = CombatLogger(combat_id="floor-3")
        logger.log_combat_start(turn_number=1, states=..., description="Jaw Worm")
        # ... log events ...
        logger.log_combat_end(turn_number=4, outcome=CombatPhase.VICTORY)

        log = logger.get_log()
        print(log.format_readable())
    """

    def __init__(self, combat_id: str = "combat") -> None:
        """Initialize the logger for a combat."""
        self.combat_id = combat_id
        self._log = CombatLog(combat_id=combat_id)
        self._order_counter = 0

    def _next_order(self) -> int:
        """Get the next timestamp order value."""
        self._order_counter += 1
        return self._order_counter

    def _append(self, entry: LogEntry) -> None:
        entry.timestamp_order = self._next_order()
        self._log.entries.append(entry)

    def get_log(self) -> CombatLog:
        """Get the complete combat log."""
        return self._log

    def clear(self) -> None:
        """Clear all log entries."""
        self._log.entries.clear()
        self._order_counter = 0

    @staticmethod
    def snapshot_state(combatant: Any) -> StateSnapshot:
        """Create a snapshot from a Combatant."""
        return StateSnapshot(
            combatant_id=combatant.id,
            current_hp=combatant.current_hp,
            max_hp=combatant.max_hp,
            block=combatant.block,
            statuses={status.value: stacks for status, stacks in combatant.statuses.items()},
            energy=getattr(combatant, "energy", None),
        )

    def _snapshot_all(self, combatants: list[Any]) -> dict[str, StateSnapshot]:
        return {c.id: self.snapshot_state(c) for c in combatants}

    def log_combat_start(self, turn_number: int, combatants: list[Any], description: str) -> None:
        """Log the start of combat with an initial snapshot."""
        self._append(
            LogEntry(
                event_type=LogEventType.COMBAT_START,
                turn_number=turn_number,
                description=description,
                all_states=self._snapshot_all(combatants),
            )
        )

    def log_combat_end(self, turn_number: int, outcome: CombatPhase) -> None:
        """Log the combat outcome."""
        self._append(LogEntry(event_type=LogEventType.COMBAT_END, turn_number=turn_number, outcome=outcome))

    def log_turn_start(self, turn_number: int, name: str | None = None) -> None:
        """Log the start of a turn (player turn unless `name` is given)."""
        self._append(LogEntry(event_type=LogEventType.TURN_START, turn_number=turn_number, name=name))

    def log_turn_end(self, turn_number: int, combatants: list[Any], name: str | None = None) -> None:
        """Log the end of a turn with a state snapshot."""
        self._append(
            LogEntry(
                event_type=LogEventType.TURN_END,
                turn_number=turn_number,
                name=name,
                all_states=self._snapshot_all(combatants),
            )
        )

    def log_effect_executed(
        self,
        turn_number: int,
        source_id: str,
        target_id: str | None,
        name: str,
        effect_type: str,
        value: int,
        description: str,
        state_before: StateSnapshot | None,
        state_after: StateSnapshot | None,
    ) -> None:
        """Log an effect execution with before/after state."""
        self._append(
            LogEntry(
                event_type=LogEventType.EFFECT_EXECUTED,
                turn_number=turn_number,
                source_id=source_id,
                target_id=target_id,
                name=name,
                effect_type=effect_type,
                value=value,
                description=description,
                state_before=state_before,
                state_after=state_after,
            )
        )

    def log_effect_skipped(
        self,
        turn_number: int,
        source_id: str,
        name: str,
        effect_type: str,
        reason: str,
    ) -> None:
        """Log an effect that was skipped."""
        self._append(
            LogEntry(
                event_type=LogEventType.EFFECT_SKIPPED,
                turn_number=turn_number,
                source_id=source_id,
                name=name,
                effect_type=effect_type,
                reason=reason,
            )
        )

    def log_event(self, turn_number: int, event: Any) -> None:
        """Log a lifecycle event handed to the relic pass."""
        self._append(
            LogEntry(
                event_type=LogEventType.EVENT_EMITTED,
                turn_number=turn_number,
                source_id=event.source_id,
                target_id=event.target_id,
                name=event.trigger.value,
                value=event.amount,
                description=event.describe(),
            )
        )

    def log_relic_activated(self, turn_number: int, relic_name: str, action: str, value: int, description: str) -> None:
        """Log a relic effect that fired."""
        self._append(
            LogEntry(
                event_type=LogEventType.RELIC_ACTIVATED,
                turn_number=turn_number,
                name=relic_name,
                effect_type=action,
                value=value,
                description=description,
            )
        )

    def log_card_played(self, turn_number: int, card_name: str, target_id: str | None, energy_spent: int) -> None:
        self._append(
            LogEntry(
                event_type=LogEventType.CARD_PLAYED,
                turn_number=turn_number,
                source_id="player",
                target_id=target_id,
                name=card_name,
                value=energy_spent,
            )
        )

    def log_potion_used(self, turn_number: int, potion_name: str, target_id: str | None) -> None:
        self._append(
            LogEntry(
                event_type=LogEventType.POTION_USED,
                turn_number=turn_number,
                source_id="player",
                target_id=target_id,
                name=potion_name,
            )
        )

    def log_enemy_move(self, turn_number: int, enemy_id: str, move_name: str, intent: str) -> None:
        """Log an enemy executing its committed move."""
        self._append(
            LogEntry(
                event_type=LogEventType.ENEMY_MOVE,
                turn_number=turn_number,
                source_id=enemy_id,
                name=move_name,
                description=intent,
            )
        )

    def log_action_rejected(self, turn_number: int, action: str, reason: str) -> None:
        """Log an illegal player action."""
        self._append(
            LogEntry(
                event_type=LogEventType.ACTION_REJECTED,
                turn_number=turn_number,
                name=action,
                reason=reason,
            )
        )

    def log_state_snapshot(self, turn_number: int, combatants: list[Any]) -> None:
        """Log a state snapshot for all combatants."""
        self._append(
            LogEntry(
                event_type=LogEventType.STATE_SNAPSHOT,
                turn_number=turn_number,
                all_states=self._snapshot_all(combatants),
            )
        )
