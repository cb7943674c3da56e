"""Shared fixtures for engine tests."""

import pytest

from descent_combat.config import Settings
from descent_combat.content.catalog import Catalog
from descent_combat.engine.combatant import Enemy, Player
from descent_combat.engine.rng import Rng
from descent_combat.engine.types import CardInstance
from descent_combat.models.content import Card, EnemyMove, Intent, Relic

CATALOG_DATA = {
    "cards": [
        {
            "id": "strike",
            "name": "Strike",
            "description": "Deal {0} damage.",
            "type": "ATTACK",
            "rarity": "STARTER",
            "cost": 1,
            "targetType": "SINGLE_ENEMY",
            "effects": [{"type": "DAMAGE", "value": 6}],
            "upgradedStats": {"effects": [{"type": "DAMAGE", "value": 9}]},
        },
        {
            "id": "defend",
            "name": "Defend",
            "description": "Gain {0} block.",
            "type": "SKILL",
            "rarity": "STARTER",
            "cost": 1,
            "effects": [{"type": "BLOCK", "value": 5}],
            "upgradedStats": {"effects": [{"type": "BLOCK", "value": 8}]},
        },
        {
            "id": "bash",
            "name": "Bash",
            "type": "ATTACK",
            "rarity": "STARTER",
            "cost": 2,
            "targetType": "SINGLE_ENEMY",
            "effects": [{"type": "DAMAGE", "value": 8}, {"type": "APPLY_VULNERABLE", "value": 2}],
        },
        {
            "id": "cleave",
            "name": "Cleave",
            "type": "ATTACK",
            "rarity": "COMMON",
            "cost": 1,
            "targetType": "ALL_ENEMIES",
            "effects": [{"type": "DAMAGE_ALL", "value": 8}],
        },
        {
            "id": "whirlwind",
            "name": "Whirlwind",
            "type": "ATTACK",
            "rarity": "UNCOMMON",
            "cost": -1,
            "isXCost": True,
            "targetType": "ALL_ENEMIES",
            "effects": [{"type": "DAMAGE_ALL", "value": 5}],
        },
        {
            "id": "inflame",
            "name": "Inflame",
            "type": "POWER",
            "rarity": "UNCOMMON",
            "cost": 1,
            "effects": [{"type": "APPLY_STRENGTH", "value": 2}],
        },
        {
            "id": "flash",
            "name": "Flash",
            "type": "SKILL",
            "rarity": "RARE",
            "cost": 0,
            "exhaust": True,
            "effects": [{"type": "GAIN_ENERGY", "value": 1}],
        },
        {
            "id": "opening",
            "name": "Opening",
            "type": "SKILL",
            "rarity": "COMMON",
            "cost": 0,
            "innate": True,
            "effects": [{"type": "DRAW", "value": 1}],
        },
        {
            "id": "ghost",
            "name": "Ghost",
            "type": "SKILL",
            "rarity": "SPECIAL",
            "cost": 1,
            "ethereal": True,
            "effects": [{"type": "APPLY_INTANGIBLE", "value": 1}],
        },
        {
            "id": "steady",
            "name": "Steady",
            "type": "SKILL",
            "rarity": "COMMON",
            "cost": 1,
            "retain": True,
            "effects": [{"type": "BLOCK", "value": 3}],
        },
        {"id": "wound", "name": "Wound", "type": "STATUS", "rarity": "SPECIAL", "cost": -1},
        {"id": "regret", "name": "Regret", "type": "CURSE", "rarity": "SPECIAL", "cost": -1},
    ],
    "enemies": [
        {
            "id": "dummy",
            "name": "Dummy",
            "maxHp": 40,
            "moves": [
                {
                    "name": "Hit",
                    "intent": {"type": "ATTACK", "value": 6},
                    "weight": 3,
                    "actions": [{"type": "DAMAGE", "value": 6}],
                },
                {
                    "name": "Guard",
                    "intent": {"type": "DEFEND", "value": 5},
                    "weight": 1,
                    "actions": [{"type": "BLOCK", "value": 5}],
                },
            ],
        }
    ],
    "relics": [
        {
            "id": "burning_blood",
            "name": "Burning Blood",
            "rarity": "STARTER",
            "effects": [{"trigger": "onCombatEnd", "action": "HEAL", "value": 6}],
        },
        {
            "id": "anchor",
            "name": "Anchor",
            "effects": [{"trigger": "COMBAT_START", "action": "BLOCK", "value": 10}],
        },
        {
            "id": "strawberry",
            "name": "Strawberry",
            "effects": [{"trigger": "ON_OBTAIN", "action": "GAIN_MAX_HP", "value": 7}],
        },
    ],
    "potions": [
        {
            "id": "fire_potion",
            "name": "Fire Potion",
            "targetType": "SINGLE_ENEMY",
            "effects": [{"type": "DAMAGE", "value": 20}],
        },
        {"id": "block_potion", "name": "Block Potion", "effects": [{"type": "BLOCK", "value": 12}]},
    ],
    "characters": [
        {
            "id": "warrior",
            "name": "The Warrior",
            "maxHp": 80,
            "startingGold": 99,
            "startingDeck": ["strike"] * 5 + ["defend"] * 4 + ["bash"],
            "startingRelic": "burning_blood",
        }
    ],
}


@pytest.fixture
def settings() -> Settings:
    """Engine settings independent of the environment."""
    return Settings(_env_file=None, check_invariants=True)


@pytest.fixture
def rng() -> Rng:
    """Reproducible random source."""
    return Rng.seeded(1234)


@pytest.fixture
def catalog() -> Catalog:
    """Small synthetic catalog."""
    return Catalog.from_dict(CATALOG_DATA)


@pytest.fixture
def make_player(catalog: Catalog):
    """Factory for a player with a deck of catalog cards."""

    def _make(deck: list[str] | None = None, hp: int = 80, relics: list[Relic] | None = None) -> Player:
        player = Player(id="player", name="Hero", max_hp=hp)
        for card_id in deck if deck is not None else ["strike"] * 10:
            instance = catalog.create_card(card_id)
            assert instance is not None
            player.add_card(instance)
        for relic in relics or []:
            player.add_relic(relic)
        return player

    return _make


@pytest.fixture
def make_enemy():
    """Factory for an enemy with a simple move table."""

    def _make(
        enemy_id: str = "dummy_0",
        hp: int = 40,
        moves: list[EnemyMove] | None = None,
    ) -> Enemy:
        if moves is None:
            moves = [
                EnemyMove(
                    name="Hit",
                    intent=Intent(type="ATTACK", value=6),
                    actions=({"type": "DAMAGE", "value": 6},),
                )
            ]
        return Enemy(id=enemy_id, name="Dummy", max_hp=hp, template_id="dummy", moves=list(moves))

    return _make


@pytest.fixture
def card_instance(catalog: Catalog):
    """Factory for a single runtime card."""

    def _make(card_id: str) -> CardInstance:
        instance = catalog.create_card(card_id)
        assert instance is not None
        return instance

    return _make


@pytest.fixture
def make_card():
    """Factory for ad-hoc card templates."""

    def _make(**overrides) -> Card:
        data = {"id": "test", "name": "Test", "type": "SKILL", "cost": 1}
        data.update(overrides)
        return Card.model_validate(data)

    return _make
