from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable


class Color(str, Enum):
    RED = "Red"
    GREEN = "Green"
    BLUE = "Blue"
    YELLOW = "Yellow"


# Enumeration order doubles as the tie-break order for color choices.
ALL_COLORS: tuple[Color, ...] = (Color.RED, Color.GREEN, Color.BLUE, Color.YELLOW)


class CardKind(str, Enum):
    NUMBER = "number"
    SKIP = "skip"
    REVERSE = "reverse"
    DRAW_TWO = "draw_two"
    WILD = "wild"
    DRAW_FOUR = "draw_four"


ACTION_KINDS: frozenset[CardKind] = frozenset(
    {CardKind.SKIP, CardKind.REVERSE, CardKind.DRAW_TWO, CardKind.WILD, CardKind.DRAW_FOUR}
)
STACKABLE_KINDS: frozenset[CardKind] = frozenset({CardKind.DRAW_TWO, CardKind.DRAW_FOUR})
WILD_KINDS: frozenset[CardKind] = frozenset({CardKind.WILD, CardKind.DRAW_FOUR})

DECK_SIZE: int = 108


class CardError(ValueError):
    pass


@dataclass(frozen=True)
class NumberCard:
    color: Color
    value: int

    kind = CardKind.NUMBER

    def __post_init__(self) -> None:
        if not 0 <= self.value <= 9:
            raise CardError(f"Number card value out of range: {self.value}")


@dataclass(frozen=True)
class SkipCard:
    color: Color

    kind = CardKind.SKIP


@dataclass(frozen=True)
class ReverseCard:
    color: Color

    kind = CardKind.REVERSE


@dataclass(frozen=True)
class DrawTwoCard:
    color: Color

    kind = CardKind.DRAW_TWO


@dataclass(frozen=True)
class WildCard:
    """Colorless in the deck and in hand; colored once, when played."""

    color: Color | None = None

    kind = CardKind.WILD


@dataclass(frozen=True)
class DrawFourCard:
    color: Color | None = None

    kind = CardKind.DRAW_FOUR


Card = NumberCard | SkipCard | ReverseCard | DrawTwoCard | WildCard | DrawFourCard


def card_color(card: Card) -> Color | None:
    return card.color


def is_action(card: Card) -> bool:
    return card.kind in ACTION_KINDS


def is_wild(card: Card) -> bool:
    return card.kind in WILD_KINDS


def is_stackable(card: Card) -> bool:
    return card.kind in STACKABLE_KINDS


def same_kind(a: Card, b: Card) -> bool:
    return a.kind == b.kind


def with_color(card: Card, color: Color) -> Card:
    """Return the wild/draw-four with its color assigned.

    Only colorless Wild and DrawFour cards accept a color.
    """
    if not isinstance(card, (WildCard, DrawFourCard)):
        raise CardError(f"Cannot assign a color to {card_name(card)}")
    if card.color is not None:
        raise CardError(f"{card_name(card)} already has a color")
    return replace(card, color=color)


def uncolored(card: Card) -> Card:
    if isinstance(card, (WildCard, DrawFourCard)) and card.color is not None:
        return replace(card, color=None)
    return card


def same_card(a: Card, b: Card) -> bool:
    """Hand-lookup equality: a wild matches any wild of its kind, colored or not."""
    if is_wild(a) or is_wild(b):
        return a.kind == b.kind
    return a == b


def can_play_on(card: Card, top: Card) -> bool:
    """Whether *card* (from the acting player's hand) may be played on *top*."""
    if is_wild(card):
        return True
    if card.kind == top.kind and card.kind in (CardKind.SKIP, CardKind.REVERSE, CardKind.DRAW_TWO):
        return True
    if isinstance(card, NumberCard) and isinstance(top, NumberCard):
        return card.color == top.color or card.value == top.value
    # The discard top always carries a color once it has been played.
    return card.color is not None and card.color == top.color


def color_counts(cards: Iterable[Card]) -> Counter[Color]:
    return Counter(c.color for c in cards if c.color is not None)


def most_frequent_color(cards: Iterable[Card], *, exclude: Color | None = None) -> Color:
    counts = color_counts(cards)
    candidates = [c for c in ALL_COLORS if c != exclude]
    # max() keeps the first maximum, so ties fall back to enumeration order.
    return max(candidates, key=lambda c: counts[c])


def card_name(card: Card) -> str:
    if isinstance(card, NumberCard):
        return f"{card.color.value} {card.value}"
    if isinstance(card, SkipCard):
        return f"{card.color.value} Skip"
    if isinstance(card, ReverseCard):
        return f"{card.color.value} Reverse"
    if isinstance(card, DrawTwoCard):
        return f"{card.color.value} Draw Two"
    base = "Wild" if isinstance(card, WildCard) else "Draw Four"
    if card.color is None:
        return base
    return f"{base} ({card.color.value})"


def make_deck() -> list[Card]:
    """The standard 108-card set, unshuffled."""
    cards: list[Card] = []
    for color in ALL_COLORS:
        cards.append(NumberCard(color, 0))
        for value in range(1, 10):
            cards.append(NumberCard(color, value))
            cards.append(NumberCard(color, value))
        for _ in range(2):
            cards.append(SkipCard(color))
            cards.append(ReverseCard(color))
            cards.append(DrawTwoCard(color))
    for _ in range(4):
        cards.append(WildCard())
        cards.append(DrawFourCard())
    return cards
