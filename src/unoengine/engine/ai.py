from __future__ import annotations

import random
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Literal, Mapping, Sequence

from .cards import (
    ALL_COLORS,
    Card,
    CardKind,
    Color,
    NumberCard,
    color_counts,
    is_action,
    is_stackable,
    is_wild,
    most_frequent_color,
    same_kind,
    with_color,
)
from .players import Drew, Played, TurnResult, TurnView

Difficulty = Literal["easy", "medium", "hard"]

AI_NAMES: tuple[str, ...] = (
    "Yukii",
    "Kurisu",
    "Mayuri",
    "Makise",
    "Misa",
    "Rin",
    "Miku",
    "Shinobu",
    "Shiro",
    "Rem",
    "Asuna",
    "Yui",
)

DEFAULT_ACTION_WEIGHTS: Mapping[CardKind, float] = {
    CardKind.DRAW_TWO: 0.30,
    CardKind.SKIP: 0.20,
    CardKind.DRAW_FOUR: 0.05,
    CardKind.REVERSE: 0.20,
    CardKind.WILD: 0.25,
}


@dataclass(frozen=True)
class AISpec:
    """AI tuning parameters.

    voluntary_draw:
      chance of drawing even though a legal play exists; lower for harder tiers
    action_weights:
      sampling weights per action kind (medium and hard)
    sample_attempts:
      how many kinds to sample before falling back to a uniform pick
    """

    difficulty: Difficulty = "medium"
    voluntary_draw: float = 0.10
    action_weights: Mapping[CardKind, float] = field(default_factory=lambda: dict(DEFAULT_ACTION_WEIGHTS))
    sample_attempts: int = 10


DEFAULT_AI_SPECS: dict[str, AISpec] = {
    "easy": AISpec(difficulty="easy", voluntary_draw=0.25),
    "medium": AISpec(difficulty="medium", voluntary_draw=0.10),
    "hard": AISpec(difficulty="hard", voluntary_draw=0.03),
}


def random_ai_name(rng: random.Random, taken: Iterable[str] = ()) -> str:
    used = set(taken)
    free = [n for n in AI_NAMES if n not in used]
    if free:
        return rng.choice(free)
    base = rng.choice(AI_NAMES)
    suffix = 2
    while f"{base} {suffix}" in used:
        suffix += 1
    return f"{base} {suffix}"


class AIPlayer:
    """Shared turn flow; tiers differ only in ``_decide``."""

    def __init__(self, name: str, spec: AISpec, rng: random.Random | None = None) -> None:
        self._name = name
        self.spec = spec
        self.rng = rng or random.Random()

    @property
    def name(self) -> str:
        return self._name

    def execute_turn(self, view: TurnView) -> TurnResult:
        if not view.playable:
            return Drew()
        if self.rng.random() < self.spec.voluntary_draw:
            return Drew()
        return Played(self._decide(view))

    def observe_turn(self, actor: str, card: Card) -> None:
        pass

    def observe_turn_skip(self, drawn: Sequence[Card] | None) -> None:
        pass

    def _decide(self, view: TurnView) -> Card:
        raise NotImplementedError

    def _sample_action(self, candidates: Sequence[Card]) -> Card | None:
        kinds = [k for k, w in self.spec.action_weights.items() if w > 0]
        if not kinds or not candidates:
            return None
        weights = [self.spec.action_weights[k] for k in kinds]
        for _ in range(self.spec.sample_attempts):
            kind = self.rng.choices(kinds, weights=weights)[0]
            matches = [c for c in candidates if c.kind is kind]
            if matches:
                return self.rng.choice(matches)
        return None


class EasyAI(AIPlayer):
    def _decide(self, view: TurnView) -> Card:
        card = self.rng.choice(view.playable)
        if is_wild(card) and card.color is None:
            card = with_color(card, most_frequent_color(view.playable))
        return card


class MediumAI(AIPlayer):
    def _decide(self, view: TurnView) -> Card:
        card = self._sample_action(view.playable) or self.rng.choice(view.playable)
        if is_wild(card) and card.color is None:
            card = with_color(card, most_frequent_color(view.hand))
        return card


class HardAI(AIPlayer):
    """Stacks penalties, converts color while its hand is large, and picks
    wild colors its opponents have shown the least of."""

    def __init__(self, name: str, spec: AISpec, rng: random.Random | None = None) -> None:
        super().__init__(name, spec, rng)
        self.opponent_colors: Counter[Color] = Counter()

    def observe_turn(self, actor: str, card: Card) -> None:
        if actor != self.name and card.color is not None:
            self.opponent_colors[card.color] += 1

    def _decide(self, view: TurnView) -> Card:
        if view.pending_draw > 0 and is_stackable(view.top):
            stack = [c for c in view.playable if same_kind(c, view.top)]
            if stack:
                card = self.rng.choice(stack)
                if is_wild(card) and card.color is None:
                    card = with_color(card, most_frequent_color(view.hand, exclude=view.active_color))
                return card

        card = self._convert(view) or self._follow(view)
        if is_wild(card) and card.color is None:
            card = with_color(card, self._least_convenient_color(view.hand))
        return card

    def _convert(self, view: TurnView) -> Card | None:
        # Fewer cards left means a lower chance to spend an action card.
        threshold = 1.0 / max(len(view.hand), 1)
        if self.rng.random() <= threshold:
            return None
        return self._sample_action([c for c in view.playable if is_action(c)])

    def _follow(self, view: TurnView) -> Card:
        same_color = [
            c for c in view.playable if isinstance(c, NumberCard) and c.color == view.active_color
        ]
        if same_color:
            return self.rng.choice(same_color)
        return self.rng.choice(view.playable)

    def _least_convenient_color(self, hand: Sequence[Card]) -> Color:
        own = color_counts(hand)
        return min(ALL_COLORS, key=lambda c: (self.opponent_colors[c], -own[c]))


AI_TIERS: dict[str, type[AIPlayer]] = {
    "easy": EasyAI,
    "medium": MediumAI,
    "hard": HardAI,
}


def make_ai(
    difficulty: str,
    name: str | None = None,
    rng: random.Random | None = None,
    spec: AISpec | None = None,
    taken_names: Iterable[str] = (),
) -> AIPlayer:
    if difficulty not in AI_TIERS:
        raise ValueError(f"Unknown AI difficulty: {difficulty}")
    rng = rng or random.Random()
    spec = spec or DEFAULT_AI_SPECS[difficulty]
    return AI_TIERS[difficulty](name or random_ai_name(rng, taken_names), spec, rng)
