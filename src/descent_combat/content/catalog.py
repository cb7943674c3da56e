"""Content catalog - the registry of card, enemy, relic and potion templates."""

from __future__ import annotations

import json
import logging
import math
from importlib import resources
from itertools import count
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError

from ..config import Settings, get_settings
from ..engine.combatant import Enemy, Player
from ..engine.rng import Rng
from ..engine.types import CardInstance
from ..models.content import Card, CharacterClass, EnemyTemplate, Potion, Relic
from ..models.enums import CardType, Rarity

logger = logging.getLogger(__name__)

DEFAULT_CONTENT = "starter.json"

# Never offered as random rewards or transform results
_NON_REWARD_TYPES = {CardType.STATUS, CardType.CURSE}
_NON_REWARD_RARITIES = {Rarity.STARTER, Rarity.SPECIAL}


class CatalogError(Exception):
    """Raised when content data can't be loaded."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class Catalog:
    """Registry of immutable templates indexed by id.

    Built once and passed to the combat engine. Lookups of unknown ids log a
    warning and return None so callers can skip the offending effect.
    """

    def __init__(
        self,
        cards: list[Card] | None = None,
        enemies: list[EnemyTemplate] | None = None,
        relics: list[Relic] | None = None,
        potions: list[Potion] | None = None,
        characters: list[CharacterClass] | None = None,
    ) -> None:
        self.cards: dict[str, Card] = self._index(cards or [], "card")
        self.enemies: dict[str, EnemyTemplate] = self._index(enemies or [], "enemy")
        self.relics: dict[str, Relic] = self._index(relics or [], "relic")
        self.potions: dict[str, Potion] = self._index(potions or [], "potion")
        self.characters: dict[str, CharacterClass] = self._index(characters or [], "character")
        # Numbers run-deck cards in creation order
        self._card_ids = count(1)

    @staticmethod
    def _index(items: list[Any], kind: str) -> dict[str, Any]:
        index: dict[str, Any] = {}
        for item in items:
            if item.id in index:
                raise CatalogError(f"Duplicate {kind} id: {item.id}")
            index[item.id] = item
        return index

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Catalog:
        """Build a catalog from plain records.

        Expected keys: cards, enemies, relics, potions, characters (each a
        list of records, all optional).

        Raises:
            CatalogError: If any record fails validation
        """
        try:
            return cls(
                cards=cls._parse(Card, data.get("cards", [])),
                enemies=cls._parse(EnemyTemplate, data.get("enemies", [])),
                relics=cls._parse(Relic, data.get("relics", [])),
                potions=cls._parse(Potion, data.get("potions", [])),
                characters=cls._parse(CharacterClass, data.get("characters", [])),
            )
        except ValidationError as e:
            raise CatalogError(f"Invalid content: {e.error_count()} error(s)", errors=e.errors()) from e

    @staticmethod
    def _parse(model: type[BaseModel], records: list[dict[str, Any]]) -> list[Any]:
        return [model.model_validate(record) for record in records]

    @classmethod
    def from_json(cls, source: str | Path) -> Catalog:
        """Load from a JSON file path or a JSON string."""
        if isinstance(source, Path) or not source.lstrip().startswith("{"):
            text = Path(source).read_text(encoding="utf-8")
        else:
            text = source
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise CatalogError(f"Invalid JSON: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def load_default(cls) -> Catalog:
        """Load the content bundled with the package."""
        text = resources.files("descent_combat.content").joinpath("data", DEFAULT_CONTENT).read_text(encoding="utf-8")
        return cls.from_json(text)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_card(self, card_id: str) -> Card | None:
        card = self.cards.get(card_id)
        if card is None:
            logger.warning("Unknown card id: %s", card_id)
        return card

    def get_enemy(self, enemy_id: str) -> EnemyTemplate | None:
        template = self.enemies.get(enemy_id)
        if template is None:
            logger.warning("Unknown enemy id: %s", enemy_id)
        return template

    def create_relic(self, relic_id: str) -> Relic | None:
        relic = self.relics.get(relic_id)
        if relic is None:
            logger.warning("Unknown relic id: %s", relic_id)
        return relic

    def create_potion(self, potion_id: str) -> Potion | None:
        potion = self.potions.get(potion_id)
        if potion is None:
            logger.warning("Unknown potion id: %s", potion_id)
        return potion

    def cards_by_rarity(self, rarity: Rarity) -> list[Card]:
        return [card for card in self.cards.values() if card.rarity == rarity]

    # ------------------------------------------------------------------
    # Instances
    # ------------------------------------------------------------------

    def create_card(self, card_id: str, upgraded: bool = False) -> CardInstance | None:
        """Create a runtime card, optionally already upgraded."""
        card = self.get_card(card_id)
        if card is None:
            return None
        if upgraded:
            card = card.upgraded_copy()
        return CardInstance(card=card, instance_id=f"{card.id}-{next(self._card_ids)}")

    def random_card(
        self,
        rng: Rng,
        rarity: Rarity | None = None,
        card_type: CardType | None = None,
        exclude: set[str] | None = None,
    ) -> Card | None:
        """Pick a reward-eligible card uniformly, in catalog order."""
        pool = [
            card
            for card in self.cards.values()
            if card.type not in _NON_REWARD_TYPES
            and card.rarity not in _NON_REWARD_RARITIES
            and (rarity is None or card.rarity == rarity)
            and (card_type is None or card.type == card_type)
            and (not exclude or card.id not in exclude)
        ]
        if not pool:
            return None
        return rng.choice(pool)

    def random_potion(self, rng: Rng) -> Potion | None:
        pool = list(self.potions.values())
        if not pool:
            return None
        return rng.choice(pool)

    def starter_deck(self, card_ids: list[str] | tuple[str, ...]) -> list[CardInstance]:
        """Create a deck from ids, skipping unknown ones."""
        deck: list[CardInstance] = []
        for card_id in card_ids:
            instance = self.create_card(card_id)
            if instance is not None:
                deck.append(instance)
        return deck

    def create_enemy(
        self,
        enemy_id: str,
        rng: Rng,
        index: int = 0,
        hp_variance: float | None = None,
        settings: Settings | None = None,
    ) -> Enemy | None:
        """Create an enemy with its max HP rolled within +/- hp_variance.

        `hp_variance` defaults to `settings.enemy_hp_variance`.
        """
        template = self.get_enemy(enemy_id)
        if template is None:
            return None
        if hp_variance is None:
            hp_variance = (settings or get_settings()).enemy_hp_variance
        low = max(1, math.floor(template.max_hp * (1 - hp_variance)))
        high = max(low, math.floor(template.max_hp * (1 + hp_variance)))
        max_hp = rng.randint(low, high)
        return Enemy(
            id=f"{template.id}_{index}",
            name=template.name,
            max_hp=max_hp,
            template_id=template.id,
            type=template.type,
            moves=list(template.moves),
        )

    def create_player(self, character_id: str, settings: Settings | None = None) -> Player | None:
        """Create a player with a character's starting deck and relic."""
        character = self.characters.get(character_id)
        if character is None:
            logger.warning("Unknown character id: %s", character_id)
            return None
        settings = settings or get_settings()
        player = Player(
            id="player",
            name=character.name,
            max_hp=character.max_hp if character.max_hp is not None else settings.starting_max_hp,
            max_energy=settings.energy_per_turn,
            max_energy_cap=settings.max_energy_cap,
            gold=character.starting_gold if character.starting_gold is not None else settings.starting_gold,
            max_potion_slots=settings.max_potion_slots,
            deck=self.starter_deck(character.starting_deck),
        )
        if character.starting_relic:
            relic = self.create_relic(character.starting_relic)
            if relic is not None:
                player.add_relic(relic)
        return player
