"""Tests for catalog validators."""

import copy

from conftest import CATALOG_DATA
from descent_combat.content import Catalog, CatalogValidator, ValidationResult


def build(**sections) -> Catalog:
    """Catalog from the shared test data with some sections replaced."""
    data = copy.deepcopy(CATALOG_DATA)
    data.update(sections)
    return Catalog.from_dict(data)


def messages(result: ValidationResult) -> list[str]:
    return [error.message for error in result.errors]


class TestValidationResult:
    """Tests for ValidationResult."""

    def test_add_error_invalidates(self):
        result = ValidationResult(valid=True)
        result.add_error("cards.x", "Broken", "1")
        assert not result.valid
        assert result.errors[0].field == "cards.x"
        assert result.errors[0].value == "1"

    def test_merge_keeps_errors(self):
        result = ValidationResult(valid=True)
        other = ValidationResult(valid=True)
        other.add_error("relics.y", "Broken")
        result.merge(other)
        assert not result.valid
        assert len(result.errors) == 1

    def test_merge_valid_is_noop(self):
        result = ValidationResult(valid=True)
        result.merge(ValidationResult(valid=True))
        assert result.valid
        assert result.errors == []


class TestCardValidation:
    """Tests for card checks."""

    def test_valid_catalog(self, catalog):
        """Shared test catalog should pass validation."""
        result = CatalogValidator(catalog).validate()
        assert result.valid, result.errors

    def test_unknown_card_reference(self):
        cards = copy.deepcopy(CATALOG_DATA["cards"]) + [
            {
                "id": "infect",
                "name": "Infect",
                "type": "SKILL",
                "cost": 1,
                "effects": [{"type": "ADD_TO_HAND", "value": 1, "cardId": "plague"}],
            }
        ]
        result = CatalogValidator(build(cards=cards)).validate_cards()
        assert not result.valid
        assert result.errors[0].field == "cards.infect.effects[0].card_id"
        assert result.errors[0].message == "Unknown card id"
        assert result.errors[0].value == "plague"

    def test_missing_card_reference(self):
        cards = [{"id": "void", "name": "Void", "type": "SKILL", "cost": 1, "effects": [{"type": "ADD_TO_DRAW"}]}]
        result = CatalogValidator(build(cards=cards, characters=[])).validate_cards()
        assert messages(result) == ["ADD_TO_DRAW needs a card id"]

    def test_upgrade_effects_are_checked(self):
        cards = [
            {
                "id": "grow",
                "name": "Grow",
                "type": "SKILL",
                "cost": 1,
                "effects": [{"type": "BLOCK", "value": 3}],
                "upgradedStats": {"effects": [{"type": "ADD_TO_HAND", "cardId": "missing"}]},
            }
        ]
        result = CatalogValidator(build(cards=cards, characters=[])).validate_cards()
        assert result.errors[0].field == "cards.grow.upgrade.effects[0].card_id"

    def test_x_cost_needs_minus_one(self):
        cards = [{"id": "burst", "name": "Burst", "type": "ATTACK", "cost": 2, "isXCost": True}]
        result = CatalogValidator(build(cards=cards, characters=[])).validate_cards()
        assert messages(result) == ["X-cost cards must have cost -1"]


class TestEnemyValidation:
    """Tests for enemy checks."""

    def test_no_moves(self):
        enemies = [{"id": "statue", "name": "Statue", "maxHp": 10}]
        result = CatalogValidator(build(enemies=enemies)).validate_enemies()
        assert messages(result) == ["Enemy has no moves"]

    def test_zero_weights(self):
        enemies = [
            {
                "id": "lazy",
                "name": "Lazy",
                "maxHp": 10,
                "moves": [{"name": "Nap", "weight": 0}, {"name": "Snore", "weight": 0}],
            }
        ]
        result = CatalogValidator(build(enemies=enemies)).validate_enemies()
        assert messages(result) == ["Every move has zero weight"]

    def test_duplicate_move_names(self):
        enemies = [
            {"id": "echo", "name": "Echo", "maxHp": 10, "moves": [{"name": "Hit"}, {"name": "Hit"}]},
        ]
        result = CatalogValidator(build(enemies=enemies)).validate_enemies()
        assert result.errors[0].field == "enemies.echo.moves[1].name"
        assert result.errors[0].message == "Duplicate move name"

    def test_move_actions_are_checked(self):
        enemies = [
            {
                "id": "slime",
                "name": "Slime",
                "maxHp": 10,
                "moves": [{"name": "Spit", "actions": [{"type": "ADD_TO_DISCARD", "cardId": "goo"}]}],
            }
        ]
        result = CatalogValidator(build(enemies=enemies)).validate_enemies()
        assert result.errors[0].field == "enemies.slime.moves[0].effects[0].card_id"


class TestRelicValidation:
    """Tests for relic checks."""

    def test_unknown_trigger(self):
        relics = [{"id": "moon", "name": "Moon", "effects": [{"trigger": "whenTheMoonIsFull", "action": "HEAL"}]}]
        result = CatalogValidator(build(relics=relics)).validate_relics()
        assert messages(result) == ["Unknown trigger (never fires)"]
        assert result.errors[0].value == "whenTheMoonIsFull"

    def test_legacy_trigger_is_fine(self):
        relics = [{"id": "ok", "name": "Ok", "effects": [{"trigger": "onTurnStart", "action": "BLOCK", "value": 1}]}]
        assert CatalogValidator(build(relics=relics)).validate_relics().valid

    def test_counter_without_n(self):
        relics = [{"id": "ink", "name": "Ink", "effects": [{"trigger": "CARD_PLAYED", "action": "DRAW_EVERY_N"}]}]
        result = CatalogValidator(build(relics=relics)).validate_relics()
        assert messages(result) == ["Counter action without N uses the default"]

    def test_counter_with_every_is_fine(self):
        relics = [
            {"id": "ink", "name": "Ink", "effects": [{"trigger": "CARD_PLAYED", "action": "DRAW_EVERY_N", "every": 4}]}
        ]
        assert CatalogValidator(build(relics=relics)).validate_relics().valid


class TestPotionAndCharacterValidation:
    """Tests for potion and character checks."""

    def test_empty_potion(self):
        potions = [{"id": "water", "name": "Water"}]
        result = CatalogValidator(build(potions=potions)).validate_potions()
        assert messages(result) == ["Potion has no effects"]

    def test_character_references(self):
        characters = [
            {
                "id": "rogue",
                "name": "Rogue",
                "maxHp": 70,
                "startingDeck": ["strike", "shiv"],
                "startingRelic": "ring",
            }
        ]
        result = CatalogValidator(build(characters=characters)).validate_characters()
        fields = [error.field for error in result.errors]
        assert fields == ["characters.rogue.starting_deck[1]", "characters.rogue.starting_relic"]

    def test_empty_starting_deck(self):
        characters = [{"id": "monk", "name": "Monk", "maxHp": 60}]
        result = CatalogValidator(build(characters=characters)).validate_characters()
        assert messages(result) == ["Starting deck is empty"]

    def test_validate_merges_sections(self):
        catalog = build(
            potions=[{"id": "water", "name": "Water"}],
            enemies=[{"id": "statue", "name": "Statue", "maxHp": 10}],
        )
        result = CatalogValidator(catalog).validate()
        assert sorted(messages(result)) == ["Enemy has no moves", "Potion has no effects"]
