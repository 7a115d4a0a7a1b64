from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from .cards import Card, Color, card_name, is_wild, same_card, with_color


@dataclass(frozen=True)
class TurnView:
    """What a participant may see when it is asked to act."""

    playable: tuple[Card, ...]
    hand: tuple[Card, ...]
    top: Card
    pending_draw: int

    @property
    def active_color(self) -> Color | None:
        return self.top.color

    @property
    def must_stack_or_draw(self) -> bool:
        return self.pending_draw > 0


@dataclass(frozen=True)
class Played:
    card: Card


@dataclass(frozen=True)
class Drew:
    pass


TurnResult = Played | Drew


class Player(Protocol):
    @property
    def name(self) -> str: ...

    def execute_turn(self, view: TurnView) -> TurnResult: ...

    def observe_turn(self, actor: str, card: Card) -> None: ...

    def observe_turn_skip(self, drawn: Sequence[Card] | None) -> None: ...


class InputSource(Protocol):
    """Input-acquisition collaborator behind the human adapter.

    Implementations own all prompting and parsing; returning ``None`` from
    ``choose_card`` means "draw instead".
    """

    def choose_card(self, view: TurnView) -> Card | None: ...

    def choose_color(self, card: Card) -> Color: ...

    def reject(self, card: Card, reason: str) -> None: ...

    def show_play(self, actor: str, card: Card) -> None: ...

    def show_skip(self, drawn: Sequence[Card] | None) -> None: ...


class HumanPlayer:
    def __init__(self, name: str, source: InputSource) -> None:
        self._name = name
        self._source = source

    @property
    def name(self) -> str:
        return self._name

    def execute_turn(self, view: TurnView) -> TurnResult:
        if not view.playable:
            return Drew()
        while True:
            choice = self._source.choose_card(view)
            if choice is None:
                return Drew()
            if not any(same_card(choice, c) for c in view.playable):
                self._source.reject(choice, f"{card_name(choice)} cannot be played right now.")
                continue
            if is_wild(choice) and choice.color is None:
                choice = with_color(choice, self._source.choose_color(choice))
            return Played(choice)

    def observe_turn(self, actor: str, card: Card) -> None:
        self._source.show_play(actor, card)

    def observe_turn_skip(self, drawn: Sequence[Card] | None) -> None:
        self._source.show_skip(drawn)
