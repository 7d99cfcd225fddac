"""Parser state machine: active state, history stack and game builder."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import NamedTuple

from pgnstream.buffer import InputBuffer
from pgnstream.errors import PgnStructureError
from pgnstream.models import PgnGame, PgnMove
from pgnstream.states import ON_ENTER, ON_EXIT, STATE_HANDLERS, ParseResult, ParserState

_LOGGER = logging.getLogger(__name__)


class VariationScope(NamedTuple):
    """Enclosing move sequence saved while a variation is being read."""

    sequence: list[PgnMove]
    current_move: PgnMove | None


@dataclass(slots=True)
class ParseContext:
    """Game under construction plus the cursor the states write through."""

    game: PgnGame = field(default_factory=PgnGame)
    sequence: list[PgnMove] = field(init=False)
    current_move: PgnMove | None = None
    scopes: list[VariationScope] = field(default_factory=list)
    tag_in_quotes: bool = False
    tag_escaped: bool = False

    def __post_init__(self) -> None:
        self.sequence = self.game.moves

    @property
    def variation_depth(self) -> int:
        return len(self.scopes)

    def add_tag(self, key: str, value: str) -> None:
        tags = self.game.tags
        if key in tags and tags[key] != value:
            _LOGGER.warning(
                "Duplicate PGN tag %s: %r replaces %r", key, value, tags[key]
            )
        tags[key] = value

    def add_move(self, san: str) -> PgnMove:
        move = PgnMove(san=san)
        self.sequence.append(move)
        self.current_move = move
        return move

    def attach_comment(self, text: str) -> None:
        if self.current_move is not None:
            self.current_move.comments.append(text)
        elif self.scopes:
            # Leading comment of a variation describes the branch point.
            branch_point = self.scopes[-1].current_move
            assert branch_point is not None
            branch_point.comments.append(text)
        else:
            self.game.comments.append(text)

    def annotate(self, symbol: str) -> None:
        if self.current_move is None:
            raise PgnStructureError("annotation glyph without a preceding move")
        self.current_move.annotation = symbol

    def open_variation(self) -> None:
        parent = self.current_move
        if parent is None:
            raise PgnStructureError("variation without a preceding move")
        variation: list[PgnMove] = []
        parent.variations.append(variation)
        self.scopes.append(VariationScope(self.sequence, parent))
        self.sequence = variation
        self.current_move = None

    def close_variation(self) -> None:
        if not self.scopes:
            raise PgnStructureError("unbalanced ')' in movetext")
        self.sequence, self.current_move = self.scopes.pop()


class StateMachine:
    """Drive the parsing states over character pairs from an :class:`InputBuffer`.

    One :meth:`run` call reads exactly one game. States request transitions
    through :meth:`enter` (optionally suspending themselves on the history
    stack) and :meth:`resume` (reactivating the suspended state).
    """

    def __init__(self, source: InputBuffer) -> None:
        self._source = source
        self.state = ParserState.INITIAL
        self.history: list[ParserState] = []
        self.buffers: dict[ParserState, list[str]] = {s: [] for s in ParserState}
        self.context = ParseContext()
        self.pushes = 0
        self.pops = 0
        self.at_end = False
        self.lookahead_at_end = False

    @property
    def column(self) -> int:
        """Column of the character being dispatched, 1-based."""
        return self._source.column

    @property
    def buffer(self) -> list[str]:
        """Scoped buffer of the active state."""
        return self.buffers[self.state]

    def reset(self) -> None:
        self.state = ParserState.INITIAL
        self.history.clear()
        for chars in self.buffers.values():
            chars.clear()
        self.context = ParseContext()
        self.pushes = 0
        self.pops = 0
        self.at_end = False
        self.lookahead_at_end = False

    def run(self) -> PgnGame | None:
        """Parse the next game; ``None`` when only whitespace was left."""
        self.reset()
        try:
            while True:
                current, lookahead, more = self._source.next_pair()
                self.at_end = not more
                self.lookahead_at_end = self._source.exhausted
                if self.dispatch(current, lookahead) is ParseResult.END_OF_GAME:
                    game = self.context.game
                    _LOGGER.debug(
                        "Parsed game with %d tags and %d moves (%s)",
                        len(game.tags),
                        len(game.moves),
                        game.result,
                    )
                    return game
                if not more:
                    if self.state is ParserState.INITIAL:
                        return None
                    raise PgnStructureError("stream ended before a game result")
        except PgnStructureError as exc:
            if exc.line is None:
                exc.line = self._source.line
                exc.column = self._source.column
            raise

    def dispatch(self, current: str, lookahead: str) -> ParseResult:
        return STATE_HANDLERS[self.state](self, current, lookahead)

    def enter(self, state: ParserState, *, push: bool = False) -> None:
        """Exit the active state and activate *state*.

        With *push* the exited state is suspended on the history stack.
        """
        self._exit_active()
        if push:
            self.history.append(self.state)
            self.pushes += 1
            _LOGGER.debug("Suspend %s, enter %s", self.state.name, state.name)
        self.state = state
        self.buffers[state].clear()
        on_enter = ON_ENTER.get(state)
        if on_enter is not None:
            on_enter(self)

    def resume(self) -> None:
        """Exit the active state and reactivate the last suspended one."""
        if not self.history:
            raise PgnStructureError(
                f"unbalanced nesting: nothing to resume from {self.state.name}"
            )
        self._exit_active()
        self.state = self.history.pop()
        self.pops += 1
        _LOGGER.debug("Resume %s", self.state.name)

    def finish(self) -> ParseResult:
        if self.history or self.context.variation_depth:
            raise PgnStructureError("game result inside an unclosed variation")
        return ParseResult.END_OF_GAME

    def _exit_active(self) -> None:
        on_exit = ON_EXIT.get(self.state)
        if on_exit is not None:
            on_exit(self)
