from __future__ import annotations


from .cards import Card, CardKind, Color, DrawFourCard, DrawTwoCard, NumberCard, ReverseCard, SkipCard, WildCard
from .match import MatchState, Seat


def card_to_dict(c: Card) -> dict[str, object]:
    out: dict[str, object] = {
        "kind": c.kind.value,
        "color": c.color.value if c.color is not None else None,
    }
    if isinstance(c, NumberCard):
        out["value"] = c.value
    return out


def card_from_dict(d: dict[str, object]) -> Card:
    kind = CardKind(d["kind"])
    raw_color = d.get("color")
    color = Color(raw_color) if isinstance(raw_color, str) else None
    if kind is CardKind.WILD:
        return WildCard(color)
    if kind is CardKind.DRAW_FOUR:
        return DrawFourCard(color)
    if color is None:
        raise ValueError(f"{kind.value} card needs a color")
    if kind is CardKind.NUMBER:
        value = d.get("value")
        if not isinstance(value, int):
            raise ValueError("number card needs an int value")
        return NumberCard(color, value)
    if kind is CardKind.SKIP:
        return SkipCard(color)
    if kind is CardKind.REVERSE:
        return ReverseCard(color)
    return DrawTwoCard(color)


def _seat_to_dict(s: Seat) -> dict[str, object]:
    return {
        "name": s.name,
        "hand": [card_to_dict(c) for c in s.hand],
    }


def snapshot(state: MatchState) -> dict[str, object]:
    """Return a JSON-serializable canonical snapshot of the current match state."""
    return {
        "phase": state.phase.value,
        "current_player": state.current_player,
        "direction": state.direction.value,
        "pending_draw": state.pending_draw,
        "winner": state.winner,
        "turns_taken": state.turns_taken,
        "deck": [card_to_dict(c) for c in state.deck.cards],
        "discard": [card_to_dict(c) for c in state.discard],
        "players": [_seat_to_dict(s) for s in state.seats],
    }
