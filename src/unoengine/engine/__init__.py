"""Headless rules engine for unoengine.

IMPORTANT: This package must never do console or UI I/O; presentation layers
observe a match through the player hooks and event listeners only.
"""

from .ai import AISpec, EasyAI, HardAI, MediumAI, make_ai
from .cards import (
    Card,
    CardError,
    CardKind,
    Color,
    DrawFourCard,
    DrawTwoCard,
    NumberCard,
    ReverseCard,
    SkipCard,
    WildCard,
    can_play_on,
    with_color,
)
from .deck import Deck, DeckError
from .match import (
    Direction,
    MatchConfig,
    MatchError,
    MatchPhase,
    MatchState,
    TurnContractError,
    new_match,
    run_match,
    step,
)
from .players import Drew, HumanPlayer, InputSource, Played, Player, TurnView

__all__ = [
    "AISpec",
    "Card",
    "CardError",
    "CardKind",
    "Color",
    "Deck",
    "DeckError",
    "Direction",
    "DrawFourCard",
    "DrawTwoCard",
    "Drew",
    "EasyAI",
    "HardAI",
    "HumanPlayer",
    "InputSource",
    "MatchConfig",
    "MatchError",
    "MatchPhase",
    "MatchState",
    "MediumAI",
    "NumberCard",
    "Played",
    "Player",
    "ReverseCard",
    "SkipCard",
    "TurnContractError",
    "TurnView",
    "WildCard",
    "can_play_on",
    "make_ai",
    "new_match",
    "run_match",
    "step",
    "with_color",
]
