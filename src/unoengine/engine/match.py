from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Sequence

from .cards import (
    DECK_SIZE,
    Card,
    CardKind,
    can_play_on,
    card_name,
    is_stackable,
    is_wild,
    same_card,
    same_kind,
    uncolored,
)
from .deck import Deck
from .players import Drew, Played, Player, TurnView

Event = dict[str, object]
EventListener = Callable[[Event], None]


class MatchError(RuntimeError):
    pass


class TurnContractError(MatchError):
    """A participant returned a decision the engine cannot apply."""


class MatchPhase(str, Enum):
    DEAL_IN_PROGRESS = "deal_in_progress"
    STARTER_SELECTION = "starter_selection"
    TURN_IN_PROGRESS = "turn_in_progress"
    MATCH_COMPLETE = "match_complete"


class Direction(str, Enum):
    CLOCKWISE = "clockwise"
    COUNTER_CLOCKWISE = "counter_clockwise"

    def flipped(self) -> "Direction":
        if self is Direction.CLOCKWISE:
            return Direction.COUNTER_CLOCKWISE
        return Direction.CLOCKWISE


DEFAULT_REJECTED_STARTERS: frozenset[CardKind] = frozenset(
    {CardKind.WILD, CardKind.DRAW_FOUR, CardKind.SKIP}
)


@dataclass(frozen=True)
class MatchConfig:
    hand_size: int = 7
    min_players: int = 2
    max_players: int = 10
    # Starter cards of these kinds go back into the deck and another is flipped.
    rejected_starters: frozenset[CardKind] = DEFAULT_REJECTED_STARTERS


@dataclass
class Seat:
    player: Player
    hand: list[Card] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.player.name


@dataclass
class StepResult:
    ok: bool
    events: list[Event]
    error: str | None = None


@dataclass
class MatchState:
    config: MatchConfig
    rng: random.Random
    deck: Deck
    seats: list[Seat]
    discard: list[Card] = field(default_factory=list)
    current_player: int = 0
    direction: Direction = Direction.CLOCKWISE
    pending_draw: int = 0
    phase: MatchPhase = MatchPhase.DEAL_IN_PROGRESS
    winner: int | None = None
    turns_taken: int = 0
    event_log: list[Event] = field(default_factory=list)
    listeners: list[EventListener] = field(default_factory=list)

    @property
    def top(self) -> Card:
        if not self.discard:
            raise MatchError("Discard pile is empty.")
        return self.discard[-1]

    @property
    def winner_name(self) -> str | None:
        if self.winner is None:
            return None
        return self.seats[self.winner].name

    def card_count(self) -> int:
        return len(self.deck) + len(self.discard) + sum(len(s.hand) for s in self.seats)


def next_player_index(index: int, player_count: int, direction: Direction) -> int:
    if direction is Direction.CLOCKWISE:
        return (index + 1) % player_count
    return player_count - 1 if index == 0 else index - 1


def _next_player(state: MatchState) -> int:
    return next_player_index(state.current_player, len(state.seats), state.direction)


def playable_cards(hand: Sequence[Card], top: Card, pending_draw: int) -> list[Card]:
    """The subset of *hand* that may legally be played on *top*.

    While a draw penalty is pending on a DrawTwo/DrawFour, only a card of the
    same kind may be stacked on it.
    """
    if pending_draw > 0 and is_stackable(top):
        return [c for c in hand if same_kind(c, top)]
    return [c for c in hand if can_play_on(c, top)]


def _emit(state: MatchState, event: Event) -> None:
    state.event_log.append(event)
    for listener in state.listeners:
        listener(event)


def _ensure_drawable(state: MatchState, needed: int) -> None:
    if len(state.deck) >= max(needed, 1):
        return
    if len(state.discard) < 2:
        return
    top = state.discard[-1]
    recycled = [uncolored(c) for c in state.discard[:-1]]
    state.discard = [top]
    state.deck.reinsert(recycled)
    _emit(state, {"type": "DECK_RECYCLED", "count": len(recycled), "deck_size": len(state.deck)})


def _draw_cards(state: MatchState, player: int, count: int, reason: str) -> list[Card]:
    _ensure_drawable(state, count)
    drawn = state.deck.draw_multiple(count)
    seat = state.seats[player]
    seat.hand.extend(drawn)
    # A short draw means deck and discard are both spent; the rest is forfeited.
    _emit(
        state,
        {
            "type": "CARDS_DRAWN",
            "player": player,
            "name": seat.name,
            "requested": count,
            "count": len(drawn),
            "reason": reason,
        },
    )
    return drawn


def _find_in_hand(hand: Sequence[Card], card: Card) -> int | None:
    for i, c in enumerate(hand):
        if c == card:
            return i
    for i, c in enumerate(hand):
        if same_card(c, card):
            return i
    return None


def _end_match(state: MatchState, player: int) -> None:
    state.phase = MatchPhase.MATCH_COMPLETE
    state.winner = player
    _emit(state, {"type": "MATCH_ENDED", "winner": player, "name": state.seats[player].name})


def _play_card(state: MatchState, player: int, card: Card) -> None:
    seat = state.seats[player]
    pos = _find_in_hand(seat.hand, card)
    if pos is None:
        raise TurnContractError(f"{seat.name} played {card_name(card)}, which is not in their hand.")
    if is_wild(card) and card.color is None:
        raise TurnContractError(f"{seat.name} played {card_name(card)} without choosing a color.")

    seat.hand.pop(pos)
    state.discard.append(card)
    _emit(state, {"type": "CARD_PLAYED", "player": player, "name": seat.name, "card": card_name(card)})
    for other in state.seats:
        other.player.observe_turn(seat.name, card)

    if card.kind is CardKind.SKIP:
        skipped = _next_player(state)
        state.current_player = skipped
        state.seats[skipped].player.observe_turn_skip(None)
        _emit(state, {"type": "TURN_SKIPPED", "player": skipped, "name": state.seats[skipped].name})
    elif card.kind is CardKind.REVERSE:
        state.direction = state.direction.flipped()
        _emit(state, {"type": "DIRECTION_REVERSED", "direction": state.direction.value})
    elif card.kind is CardKind.DRAW_TWO:
        state.pending_draw += 2
        _emit(state, {"type": "PENALTY_STACKED", "pending_draw": state.pending_draw})
    elif card.kind is CardKind.DRAW_FOUR:
        state.pending_draw += 4
        _emit(state, {"type": "PENALTY_STACKED", "pending_draw": state.pending_draw})

    if not seat.hand:
        _end_match(state, player)


def _draw_turn(state: MatchState, player: int) -> None:
    drawn = _draw_cards(state, player, max(state.pending_draw, 1), reason="drew")
    state.pending_draw = 0
    state.seats[player].player.observe_turn_skip(drawn)


def _force_draw_if_stuck(state: MatchState) -> None:
    if state.pending_draw <= 0 or not is_stackable(state.top):
        return
    upcoming = _next_player(state)
    seat = state.seats[upcoming]
    if any(same_kind(c, state.top) for c in seat.hand):
        return
    drawn = _draw_cards(state, upcoming, state.pending_draw, reason="penalty")
    state.pending_draw = 0
    state.current_player = upcoming
    _emit(state, {"type": "FORCED_DRAW", "player": upcoming, "name": seat.name, "count": len(drawn)})
    seat.player.observe_turn_skip(drawn)


def step(state: MatchState) -> StepResult:
    """Play one turn: advance the pointer, ask the participant, apply its decision.

    Raises TurnContractError when the participant's decision is not applicable
    to its hand; the match cannot continue after that.
    """
    if state.phase is MatchPhase.MATCH_COMPLETE:
        return StepResult(ok=False, events=[], error="Match already ended.")
    if state.phase is not MatchPhase.TURN_IN_PROGRESS:
        return StepResult(ok=False, events=[], error="Match has not started.")

    start = len(state.event_log)
    state.current_player = _next_player(state)
    player = state.current_player
    seat = state.seats[player]
    top = state.top
    state.turns_taken += 1
    _emit(
        state,
        {"type": "TURN_STARTED", "player": player, "name": seat.name, "pending_draw": state.pending_draw},
    )

    view = TurnView(
        playable=tuple(playable_cards(seat.hand, top, state.pending_draw)),
        hand=tuple(seat.hand),
        top=top,
        pending_draw=state.pending_draw,
    )
    result = seat.player.execute_turn(view)
    if isinstance(result, Played):
        _play_card(state, player, result.card)
    elif isinstance(result, Drew):
        _draw_turn(state, player)
    else:
        raise TurnContractError(f"{seat.name} returned an unknown turn result: {result!r}")

    if state.phase is not MatchPhase.MATCH_COMPLETE:
        _ensure_drawable(state, max(state.pending_draw, 1))
        _force_draw_if_stuck(state)
    return StepResult(ok=True, events=state.event_log[start:])


def _select_starter(state: MatchState) -> None:
    rejected = state.config.rejected_starters
    if all(c.kind in rejected for c in state.deck.cards):
        raise MatchError("No acceptable starter card left in the deck.")
    while True:
        card = state.deck.draw()
        assert card is not None
        if card.kind in rejected:
            state.deck.reinsert_random(card)
            continue
        state.discard.append(card)
        _emit(state, {"type": "STARTER_FLIPPED", "card": card_name(card)})
        return


def new_match(
    players: Sequence[Player],
    config: MatchConfig | None = None,
    seed: int | None = None,
    rng: random.Random | None = None,
    listeners: Iterable[EventListener] = (),
) -> MatchState:
    """Shuffle, deal and flip the starter; the first participant acts first."""
    cfg = config or MatchConfig()
    if not cfg.min_players <= len(players) <= cfg.max_players:
        raise ValueError(f"A match needs {cfg.min_players} to {cfg.max_players} players, got {len(players)}.")
    names = [p.name for p in players]
    if len(set(names)) != len(names):
        raise ValueError(f"Player names must be unique: {names}")
    if cfg.hand_size * len(players) >= DECK_SIZE:
        raise ValueError("Not enough cards to deal every hand and flip a starter.")

    rng = rng or random.Random(seed)
    state = MatchState(
        config=cfg,
        rng=rng,
        deck=Deck.standard(rng),
        seats=[Seat(player=p) for p in players],
        listeners=list(listeners),
    )
    _emit(state, {"type": "MATCH_STARTED", "players": names})

    state.deck.shuffle()
    for seat in state.seats:
        seat.hand.extend(state.deck.draw_multiple(cfg.hand_size))

    state.phase = MatchPhase.STARTER_SELECTION
    _select_starter(state)

    state.phase = MatchPhase.TURN_IN_PROGRESS
    # Start on the seat before index 0 so the first step lands on players[0].
    state.current_player = len(state.seats) - 1
    return state


def run_match(state: MatchState, max_turns: int | None = None) -> str:
    """Step until a hand empties and return the winner's name."""
    while state.phase is MatchPhase.TURN_IN_PROGRESS:
        if max_turns is not None and state.turns_taken >= max_turns:
            raise MatchError(f"Match did not finish within {max_turns} turns.")
        step(state)
    name = state.winner_name
    if name is None:
        raise MatchError("Match ended without a winner.")
    return name
