from __future__ import annotations

import random
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from .cards import DECK_SIZE, Card, make_deck, uncolored


class DeckError(RuntimeError):
    pass


def validate_composition(cards: Sequence[Card]) -> None:
    """Raise DeckError unless *cards* is exactly the standard 108-card set."""
    if len(cards) != DECK_SIZE:
        raise DeckError(f"Expected {DECK_SIZE} cards, got {len(cards)}")
    expected = Counter(make_deck())
    actual = Counter(uncolored(c) for c in cards)
    if actual != expected:
        missing = expected - actual
        extra = actual - expected
        raise DeckError(f"Deck composition mismatch (missing={dict(missing)}, extra={dict(extra)})")


@dataclass
class Deck:
    """Face-down stack; the end of ``cards`` is the top."""

    cards: list[Card]
    rng: random.Random = field(default_factory=random.Random)

    @staticmethod
    def standard(rng: random.Random | None = None) -> "Deck":
        cards = make_deck()
        validate_composition(cards)
        return Deck(cards=cards, rng=rng or random.Random())

    def __len__(self) -> int:
        return len(self.cards)

    def shuffle(self) -> None:
        self.rng.shuffle(self.cards)

    def draw(self) -> Card | None:
        if not self.cards:
            return None
        return self.cards.pop()

    def draw_multiple(self, n: int) -> list[Card]:
        drawn: list[Card] = []
        for _ in range(max(0, n)):
            card = self.draw()
            if card is None:
                break
            drawn.append(card)
        return drawn

    def reinsert(self, cards: Iterable[Card]) -> None:
        """Shuffle *cards* and slide them beneath the remaining deck."""
        batch = list(cards)
        self.rng.shuffle(batch)
        self.cards[:0] = batch

    def reinsert_random(self, card: Card) -> None:
        self.cards.insert(self.rng.randint(0, len(self.cards)), card)
