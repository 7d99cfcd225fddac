"""Game and move records produced by the reader."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

RESULT_TOKENS: tuple[str, ...] = ("1-0", "0-1", "1/2-1/2", "*")


class GameResult(IntEnum):
    """Outcome of a game."""

    IN_PROGRESS = 0
    WHITE_WINS = 1
    BLACK_WINS = 2
    DRAW = 3


_OUTCOMES = {
    "1-0": GameResult.WHITE_WINS,
    "0-1": GameResult.BLACK_WINS,
    "1/2-1/2": GameResult.DRAW,
}


def game_result_from_pgn(token: str) -> GameResult:
    """Map a result token to :class:`GameResult`; ``*`` means still in progress."""
    return _OUTCOMES.get(token, GameResult.IN_PROGRESS)


@dataclass(slots=True)
class PgnMove:
    """A single ply with its annotation, comments and alternatives.

    Each entry of ``variations`` is a move sequence played instead of
    this move.
    """

    san: str
    annotation: str = ""
    comments: list[str] = field(default_factory=list)
    variations: list[list[PgnMove]] = field(default_factory=list)


@dataclass(slots=True)
class PgnGame:
    """One parsed PGN record."""

    tags: dict[str, str] = field(default_factory=dict)
    moves: list[PgnMove] = field(default_factory=list)
    result: str = ""
    comments: list[str] = field(default_factory=list)

    @property
    def outcome(self) -> GameResult:
        return game_result_from_pgn(self.result)

    def mainline_sans(self) -> list[str]:
        return [move.san for move in self.moves]
