"""Validators for catalog content.

Loading a catalog already rejects malformed records. These checks cover what
a single record can't know about: references between records and trigger
spellings that loaded but will never fire.
"""

from dataclasses import dataclass, field

from ..models.content import Effect
from ..models.enums import EffectType, RelicTrigger, is_counter_action
from .catalog import Catalog

# Effects that need a card id to do anything
CARD_REFERENCE_EFFECTS = {
    EffectType.ADD_TO_HAND,
    EffectType.ADD_TO_DISCARD,
    EffectType.ADD_TO_DRAW,
}


@dataclass
class ValidationError:
    """A single validation error."""

    field: str
    message: str
    value: str | None = None


@dataclass
class ValidationResult:
    """Result of validation."""

    valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    def add_error(self, field: str, message: str, value: str | None = None) -> None:
        """Add a validation error."""
        self.errors.append(ValidationError(field=field, message=message, value=value))
        self.valid = False

    def merge(self, other: "ValidationResult") -> None:
        """Merge another validation result into this one."""
        if not other.valid:
            self.valid = False
            self.errors.extend(other.errors)


class CatalogValidator:
    """Validate cross-references inside a catalog."""

    def __init__(self, catalog: Catalog) -> None:
        self.catalog = catalog

    def validate(self) -> ValidationResult:
        """Validate every section of the catalog.

        Returns:
            ValidationResult with any errors found
        """
        result = ValidationResult(valid=True)
        result.merge(self.validate_cards())
        result.merge(self.validate_enemies())
        result.merge(self.validate_relics())
        result.merge(self.validate_potions())
        result.merge(self.validate_characters())
        return result

    def _check_effects(self, result: ValidationResult, prefix: str, effects: tuple[Effect, ...]) -> None:
        for i, effect in enumerate(effects):
            if effect.card_id is not None and effect.card_id not in self.catalog.cards:
                result.add_error(f"{prefix}.effects[{i}].card_id", "Unknown card id", effect.card_id)
            elif effect.type in CARD_REFERENCE_EFFECTS and effect.card_id is None:
                result.add_error(f"{prefix}.effects[{i}].card_id", f"{effect.type.value} needs a card id")

    def validate_cards(self) -> ValidationResult:
        result = ValidationResult(valid=True)
        for card_id, card in self.catalog.cards.items():
            self._check_effects(result, f"cards.{card_id}", card.effects)
            if card.upgrade is not None and card.upgrade.effects is not None:
                self._check_effects(result, f"cards.{card_id}.upgrade", card.upgrade.effects)
            if card.is_x_cost and card.cost != -1:
                result.add_error(f"cards.{card_id}.cost", "X-cost cards must have cost -1", str(card.cost))
        return result

    def validate_enemies(self) -> ValidationResult:
        result = ValidationResult(valid=True)
        for enemy_id, template in self.catalog.enemies.items():
            if not template.moves:
                result.add_error(f"enemies.{enemy_id}.moves", "Enemy has no moves")
                continue
            if all(move.weight <= 0 for move in template.moves):
                result.add_error(f"enemies.{enemy_id}.moves", "Every move has zero weight")

            seen_names: set[str] = set()
            for i, move in enumerate(template.moves):
                if move.name in seen_names:
                    result.add_error(f"enemies.{enemy_id}.moves[{i}].name", "Duplicate move name", move.name)
                seen_names.add(move.name)
                self._check_effects(result, f"enemies.{enemy_id}.moves[{i}]", move.actions)
        return result

    def validate_relics(self) -> ValidationResult:
        result = ValidationResult(valid=True)
        for relic_id, relic in self.catalog.relics.items():
            for i, effect in enumerate(relic.effects):
                if not isinstance(effect.trigger, RelicTrigger):
                    result.add_error(
                        f"relics.{relic_id}.effects[{i}].trigger",
                        "Unknown trigger (never fires)",
                        str(effect.trigger),
                    )
                if is_counter_action(effect.action) and effect.every is None and effect.value < 1:
                    result.add_error(
                        f"relics.{relic_id}.effects[{i}].value",
                        "Counter action without N uses the default",
                        str(effect.value),
                    )
        return result

    def validate_potions(self) -> ValidationResult:
        result = ValidationResult(valid=True)
        for potion_id, potion in self.catalog.potions.items():
            if not potion.effects:
                result.add_error(f"potions.{potion_id}.effects", "Potion has no effects")
            self._check_effects(result, f"potions.{potion_id}", potion.effects)
        return result

    def validate_characters(self) -> ValidationResult:
        result = ValidationResult(valid=True)
        for character_id, character in self.catalog.characters.items():
            if not character.starting_deck:
                result.add_error(f"characters.{character_id}.starting_deck", "Starting deck is empty")
            for i, card_id in enumerate(character.starting_deck):
                if card_id not in self.catalog.cards:
                    result.add_error(f"characters.{character_id}.starting_deck[{i}]", "Unknown card id", card_id)
            relic_id = character.starting_relic
            if relic_id is not None and relic_id not in self.catalog.relics:
                result.add_error(f"characters.{character_id}.starting_relic", "Unknown relic id", relic_id)
        return result
