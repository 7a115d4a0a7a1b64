from __future__ import annotations

from typing import Callable, Sequence

import pytest

from unoengine.engine.cards import (
    Card,
    CardKind,
    Color,
    DrawFourCard,
    DrawTwoCard,
    NumberCard,
    ReverseCard,
    SkipCard,
    WildCard,
    is_wild,
    with_color,
)
from unoengine.engine.match import (
    Direction,
    MatchConfig,
    MatchError,
    MatchPhase,
    MatchState,
    TurnContractError,
    new_match,
    next_player_index,
    playable_cards,
    run_match,
    step,
)
from unoengine.engine.players import Drew, Played, TurnResult, TurnView


class ScriptedPlayer:
    """Plays the first playable card (coloring wilds red) unless told otherwise."""

    def __init__(self, name: str, decide: Callable[[TurnView], TurnResult] | None = None) -> None:
        self._name = name
        self.decide = decide
        self.views: list[TurnView] = []
        self.seen: list[tuple[str, Card]] = []
        self.skips: list[list[Card] | None] = []

    @property
    def name(self) -> str:
        return self._name

    def execute_turn(self, view: TurnView) -> TurnResult:
        self.views.append(view)
        if self.decide is not None:
            return self.decide(view)
        if not view.playable:
            return Drew()
        card = view.playable[0]
        if is_wild(card):
            card = with_color(card, Color.RED)
        return Played(card)

    def observe_turn(self, actor: str, card: Card) -> None:
        self.seen.append((actor, card))

    def observe_turn_skip(self, drawn: Sequence[Card] | None) -> None:
        self.skips.append(None if drawn is None else list(drawn))


def _play(card: Card) -> Callable[[TurnView], TurnResult]:
    return lambda view: Played(card)


def _draw(view: TurnView) -> TurnResult:
    return Drew()


def _setup(players: list[ScriptedPlayer], hands: list[list[Card]], top: Card, seed: int = 1) -> MatchState:
    state = new_match(players, seed=seed)
    for seat, hand in zip(state.seats, hands):
        seat.hand = list(hand)
    state.discard = [top]
    return state


def test_new_match_deals_and_flips_starter() -> None:
    players = [ScriptedPlayer(n) for n in ("A", "B", "C", "D")]
    state = new_match(players, seed=5)
    assert state.phase is MatchPhase.TURN_IN_PROGRESS
    assert all(len(s.hand) == 7 for s in state.seats)
    assert len(state.discard) == 1
    assert state.top.kind not in (CardKind.WILD, CardKind.DRAW_FOUR, CardKind.SKIP)
    assert state.card_count() == 108
    assert state.event_log[0] == {"type": "MATCH_STARTED", "players": ["A", "B", "C", "D"]}


def test_first_participant_takes_first_turn() -> None:
    players = [ScriptedPlayer("A", _draw), ScriptedPlayer("B", _draw)]
    state = new_match(players, seed=2)
    res = step(state)
    assert res.ok
    assert res.events[0]["type"] == "TURN_STARTED"
    assert res.events[0]["player"] == 0
    assert len(players[0].views) == 1
    assert players[1].views == []


def test_match_construction_is_validated() -> None:
    with pytest.raises(ValueError):
        new_match([ScriptedPlayer("A")])
    with pytest.raises(ValueError):
        new_match([ScriptedPlayer("A"), ScriptedPlayer("A")])
    with pytest.raises(ValueError):
        new_match([ScriptedPlayer(str(i)) for i in range(11)])


def test_next_player_order() -> None:
    seq = []
    idx = 0
    for _ in range(4):
        idx = next_player_index(idx, 4, Direction.CLOCKWISE)
        seq.append(idx)
    assert seq == [1, 2, 3, 0]

    seq = []
    idx = 0
    for _ in range(4):
        idx = next_player_index(idx, 4, Direction.COUNTER_CLOCKWISE)
        seq.append(idx)
    assert seq == [3, 2, 1, 0]


def test_two_reverses_restore_direction() -> None:
    players = [ScriptedPlayer(n) for n in ("A", "B", "C")]
    state = _setup(
        players,
        [
            [ReverseCard(Color.RED), NumberCard(Color.BLUE, 1)],
            [NumberCard(Color.YELLOW, 8), NumberCard(Color.YELLOW, 9)],
            [ReverseCard(Color.GREEN), NumberCard(Color.YELLOW, 2)],
        ],
        NumberCard(Color.RED, 5),
    )
    step(state)
    assert state.direction is Direction.COUNTER_CLOCKWISE
    step(state)
    # Counter-clockwise from A lands on C, who reverses back.
    assert players[2].views and players[1].views == []
    assert state.direction is Direction.CLOCKWISE


def test_skip_bypasses_exactly_one_player() -> None:
    players = [ScriptedPlayer(n) for n in ("A", "B", "C")]
    state = _setup(
        players,
        [
            [SkipCard(Color.RED), NumberCard(Color.BLUE, 1)],
            [NumberCard(Color.RED, 8)],
            [NumberCard(Color.RED, 2), NumberCard(Color.RED, 3)],
        ],
        NumberCard(Color.RED, 5),
    )
    res = step(state)
    assert players[1].skips == [None]
    assert [e["type"] for e in res.events].count("TURN_SKIPPED") == 1
    step(state)
    assert players[1].views == []
    assert len(players[2].views) == 1
    assert players[0].skips == [] and players[2].skips == []


def test_skip_in_two_player_match_returns_turn_to_actor() -> None:
    players = [ScriptedPlayer("A"), ScriptedPlayer("B")]
    state = _setup(
        players,
        [[SkipCard(Color.RED), NumberCard(Color.RED, 1)], [NumberCard(Color.RED, 8)]],
        NumberCard(Color.RED, 5),
    )
    step(state)
    step(state)
    assert len(players[0].views) == 2
    assert players[1].views == []
    assert state.winner == 0


def test_stacking_restricts_playable_to_same_kind() -> None:
    hand: list[Card] = [
        DrawTwoCard(Color.BLUE),
        NumberCard(Color.RED, 5),
        WildCard(),
        DrawFourCard(),
        SkipCard(Color.RED),
    ]
    assert playable_cards(hand, DrawTwoCard(Color.RED), 2) == [DrawTwoCard(Color.BLUE)]
    assert playable_cards(hand, DrawFourCard(Color.RED), 4) == [DrawFourCard()]
    assert playable_cards([NumberCard(Color.RED, 1)], DrawTwoCard(Color.RED), 2) == []
    # Without a pending penalty the general rules apply.
    assert len(playable_cards(hand, DrawTwoCard(Color.RED), 0)) == 5


def test_forced_draw_when_next_player_cannot_stack() -> None:
    players = [ScriptedPlayer(n) for n in ("A", "B", "C")]
    state = _setup(
        players,
        [
            [DrawTwoCard(Color.RED), NumberCard(Color.BLUE, 1)],
            [NumberCard(Color.GREEN, 4), NumberCard(Color.YELLOW, 7)],
            [NumberCard(Color.RED, 2), NumberCard(Color.RED, 3)],
        ],
        NumberCard(Color.RED, 3),
    )
    res = step(state)
    assert len(state.seats[1].hand) == 4
    assert len(players[1].skips) == 1 and len(players[1].skips[0] or []) == 2
    assert state.pending_draw == 0
    assert "FORCED_DRAW" in [e["type"] for e in res.events]
    step(state)
    assert players[1].views == []
    assert len(players[2].views) == 1


def test_stacked_penalty_lands_on_player_who_cannot_stack() -> None:
    players = [ScriptedPlayer(n) for n in ("A", "B", "C")]
    state = _setup(
        players,
        [
            [DrawTwoCard(Color.RED), NumberCard(Color.BLUE, 1)],
            [DrawTwoCard(Color.BLUE), NumberCard(Color.RED, 9), WildCard()],
            [NumberCard(Color.GREEN, 4), NumberCard(Color.YELLOW, 7)],
        ],
        NumberCard(Color.RED, 3),
    )
    step(state)
    assert state.pending_draw == 2
    assert players[1].skips == []
    step(state)
    view = players[1].views[0]
    assert view.playable == (DrawTwoCard(Color.BLUE),)
    assert view.pending_draw == 2
    assert len(state.seats[2].hand) == 6
    assert state.pending_draw == 0
    assert state.current_player == 2


def test_drawing_instead_of_stacking_takes_whole_penalty() -> None:
    players = [ScriptedPlayer("A"), ScriptedPlayer("B", _draw), ScriptedPlayer("C")]
    state = _setup(
        players,
        [
            [DrawFourCard(), NumberCard(Color.BLUE, 1)],
            [DrawFourCard(), NumberCard(Color.RED, 9)],
            [NumberCard(Color.GREEN, 4)],
        ],
        NumberCard(Color.RED, 3),
    )
    step(state)
    assert state.top == DrawFourCard(Color.RED)
    assert state.pending_draw == 4
    step(state)
    assert len(state.seats[1].hand) == 6
    assert players[1].skips and len(players[1].skips[0] or []) == 4
    assert state.pending_draw == 0


def test_value_match_then_no_legal_card_draws_one() -> None:
    a = ScriptedPlayer("A", _play(NumberCard(Color.BLUE, 5)))
    b = ScriptedPlayer("B")
    state = _setup(
        [a, b],
        [[NumberCard(Color.BLUE, 5), DrawTwoCard(Color.GREEN)], [NumberCard(Color.YELLOW, 3)]],
        NumberCard(Color.RED, 5),
    )
    step(state)
    assert state.top == NumberCard(Color.BLUE, 5)
    step(state)
    assert b.views[0].playable == ()
    assert len(state.seats[1].hand) == 2
    assert len(b.skips) == 1 and len(b.skips[0] or []) == 1


def test_emptying_hand_ends_match_immediately() -> None:
    a = ScriptedPlayer("A")
    b = ScriptedPlayer("B")
    state = _setup([a, b], [[NumberCard(Color.RED, 7)], [NumberCard(Color.RED, 1)]], NumberCard(Color.RED, 5))
    res = step(state)
    assert state.phase is MatchPhase.MATCH_COMPLETE
    assert state.winner == 0
    assert res.events[-1] == {"type": "MATCH_ENDED", "winner": 0, "name": "A"}
    again = step(state)
    assert not again.ok
    assert again.error is not None
    assert b.views == []
    assert run_match(state) == "A"


def test_played_card_missing_from_hand_is_fatal() -> None:
    a = ScriptedPlayer("A", _play(NumberCard(Color.YELLOW, 9)))
    state = _setup(
        [a, ScriptedPlayer("B")],
        [[NumberCard(Color.RED, 7), NumberCard(Color.RED, 8)], [NumberCard(Color.RED, 1)]],
        NumberCard(Color.RED, 5),
    )
    with pytest.raises(TurnContractError):
        step(state)


def test_uncolored_wild_is_a_contract_violation() -> None:
    a = ScriptedPlayer("A", _play(WildCard()))
    state = _setup(
        [a, ScriptedPlayer("B")],
        [[WildCard(), NumberCard(Color.RED, 8)], [NumberCard(Color.RED, 1)]],
        NumberCard(Color.RED, 5),
    )
    with pytest.raises(TurnContractError):
        step(state)


def test_colored_wild_is_located_in_hand() -> None:
    a = ScriptedPlayer("A", _play(WildCard(Color.GREEN)))
    state = _setup(
        [a, ScriptedPlayer("B")],
        [[WildCard(), NumberCard(Color.RED, 8)], [NumberCard(Color.GREEN, 1), NumberCard(Color.BLUE, 1)]],
        NumberCard(Color.RED, 5),
    )
    step(state)
    assert state.seats[0].hand == [NumberCard(Color.RED, 8)]
    assert state.top == WildCard(Color.GREEN)


def test_every_play_is_broadcast() -> None:
    players = [ScriptedPlayer(n) for n in ("A", "B", "C")]
    state = _setup(
        players,
        [[NumberCard(Color.RED, 1), NumberCard(Color.RED, 2)], [NumberCard(Color.RED, 3)], [NumberCard(Color.RED, 4)]],
        NumberCard(Color.RED, 5),
    )
    step(state)
    for p in players:
        assert p.seen == [("A", NumberCard(Color.RED, 1))]


def test_discard_is_recycled_when_deck_runs_out() -> None:
    a = ScriptedPlayer("A", _draw)
    state = new_match([a, ScriptedPlayer("B")], seed=9)
    top = state.top
    moved = [with_color(c, Color.RED) if is_wild(c) else c for c in state.deck.cards]
    state.discard = moved + [top]
    state.deck.cards = []
    hand_before = len(state.seats[0].hand)

    res = step(state)

    assert "DECK_RECYCLED" in [e["type"] for e in res.events]
    assert len(state.seats[0].hand) == hand_before + 1
    assert state.discard == [top]
    assert len(state.deck) == len(moved) - 1
    assert state.card_count() == 108
    assert all(c.color is None for c in state.deck.cards if is_wild(c))


def test_penalty_larger_than_available_cards_draws_what_is_left() -> None:
    a = ScriptedPlayer("A")
    b = ScriptedPlayer("B")
    state = _setup(
        [a, b],
        [[DrawFourCard(), NumberCard(Color.BLUE, 1)], [NumberCard(Color.GREEN, 4)]],
        NumberCard(Color.RED, 3),
    )
    state.deck.cards = state.deck.cards[:1]
    res = step(state)
    drawn = [e for e in res.events if e["type"] == "CARDS_DRAWN"]
    assert drawn == [
        {"type": "CARDS_DRAWN", "player": 1, "name": "B", "requested": 4, "count": 2, "reason": "penalty"}
    ]
    assert len(state.seats[1].hand) == 3
    assert state.pending_draw == 0
    assert state.phase is MatchPhase.TURN_IN_PROGRESS


def test_starter_policy_is_configurable() -> None:
    numbers_only = MatchConfig(rejected_starters=frozenset(k for k in CardKind if k is not CardKind.NUMBER))
    for seed in range(20):
        state = new_match([ScriptedPlayer("A"), ScriptedPlayer("B")], config=numbers_only, seed=seed)
        assert isinstance(state.top, NumberCard)

    with pytest.raises(MatchError):
        new_match([ScriptedPlayer("A"), ScriptedPlayer("B")], config=MatchConfig(rejected_starters=frozenset(CardKind)))
