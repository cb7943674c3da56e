"""Card piles - draw, hand, discard and exhaust."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

from .rng import Rng
from .types import CardInstance, InvariantViolation


@dataclass
class DrawResult:
    """Cards that reached the hand and how many reshuffles it took."""

    drawn: list[CardInstance] = field(default_factory=list)
    burned: list[CardInstance] = field(default_factory=list)  # Drawn with a full hand
    shuffles: int = 0


@dataclass
class CardPiles:
    """The four piles of a combat.

    Together they hold exactly the deck for this combat: every card is in
    one pile at a time. The only exception is a card being played, which
    is held outside all piles until it resolves.
    """

    hand: list[CardInstance] = field(default_factory=list)
    draw_pile: list[CardInstance] = field(default_factory=list)
    discard_pile: list[CardInstance] = field(default_factory=list)
    exhaust_pile: list[CardInstance] = field(default_factory=list)

    @classmethod
    def from_deck(cls, deck: list[CardInstance]) -> CardPiles:
        return cls(draw_pile=list(deck))

    def all_cards(self) -> list[CardInstance]:
        return [*self.hand, *self.draw_pile, *self.discard_pile, *self.exhaust_pile]

    def shuffle_discard_into_draw(self, rng: Rng) -> bool:
        """Move the discard pile into the draw pile and shuffle it."""
        if not self.discard_pile:
            return False
        self.draw_pile.extend(self.discard_pile)
        self.discard_pile.clear()
        rng.shuffle(self.draw_pile)
        return True

    def draw(self, count: int, rng: Rng, max_hand_size: int) -> DrawResult:
        """Draw from the top (end) of the draw pile.

        An empty draw pile is refilled from the discard pile. When both are
        empty, drawing stops without error. Cards drawn into a full hand go
        to the discard pile.
        """
        result = DrawResult()
        for _ in range(max(0, count)):
            if not self.draw_pile:
                if not self.shuffle_discard_into_draw(rng):
                    break
                result.shuffles += 1
            card = self.draw_pile.pop()
            if len(self.hand) >= max_hand_size:
                self.discard_pile.append(card)
                result.burned.append(card)
            else:
                self.hand.append(card)
                result.drawn.append(card)
        return result

    def take_from_hand(self, index: int) -> CardInstance | None:
        if index < 0 or index >= len(self.hand):
            return None
        return self.hand.pop(index)

    def remove_from_hand(self, card: CardInstance) -> bool:
        for index, held in enumerate(self.hand):
            if held is card:
                del self.hand[index]
                return True
        return False

    def add_to_hand(self, card: CardInstance, max_hand_size: int) -> bool:
        """Add to hand, overflowing to the discard pile. Returns True if it reached the hand."""
        if len(self.hand) >= max_hand_size:
            self.discard_pile.append(card)
            return False
        self.hand.append(card)
        return True

    def move_innate_to_hand(self, max_hand_size: int) -> list[CardInstance]:
        """Pull innate cards out of the draw pile into the hand."""
        moved: list[CardInstance] = []
        for card in list(self.draw_pile):
            if card.card.innate and len(self.hand) < max_hand_size:
                self.draw_pile.remove(card)
                self.hand.append(card)
                moved.append(card)
        return moved

    def check_invariants(self, expected: list[CardInstance] | None = None) -> None:
        """Raise InvariantViolation if a card appears twice, or the piles don't match `expected`."""
        ids = Counter(card.instance_id for card in self.all_cards())
        duplicates = [instance_id for instance_id, count in ids.items() if count > 1]
        if duplicates:
            raise InvariantViolation(f"Cards in more than one pile: {duplicates}")
        if expected is not None and set(ids) != {card.instance_id for card in expected}:
            raise InvariantViolation("Piles do not match the combat deck")

    def counts(self) -> dict[str, int]:
        return {
            "hand": len(self.hand),
            "draw": len(self.draw_pile),
            "discard": len(self.discard_pile),
            "exhaust": len(self.exhaust_pile),
        }
