"""Streaming PGN reader: tags, moves, comments, NAGs and variations.

Quick start::

    from pgnstream import PgnReader

    with PgnReader.open("games.pgn") as reader:
        for game in reader:
            print(game.tags.get("Event"), game.result)
"""

from pgnstream.annotations import NAG_SYMBOLS, decode_nag
from pgnstream.buffer import END_OF_STREAM, InputBuffer
from pgnstream.config import DEFAULT_BUFFER_SIZE, ReaderConfig
from pgnstream.errors import (
    PgnError,
    PgnReaderError,
    PgnStructureError,
    ReaderClosedError,
)
from pgnstream.machine import ParseContext, StateMachine
from pgnstream.models import (
    RESULT_TOKENS,
    GameResult,
    PgnGame,
    PgnMove,
    game_result_from_pgn,
)
from pgnstream.reader import PgnReader, parse_game, read_games
from pgnstream.states import ParseResult, ParserState

__all__ = [
    # Reader
    "PgnReader",
    "parse_game",
    "read_games",
    "ReaderConfig",
    "DEFAULT_BUFFER_SIZE",
    # Models
    "GameResult",
    "PgnGame",
    "PgnMove",
    "RESULT_TOKENS",
    "game_result_from_pgn",
    # Annotations
    "NAG_SYMBOLS",
    "decode_nag",
    # Parser internals
    "END_OF_STREAM",
    "InputBuffer",
    "ParseContext",
    "ParseResult",
    "ParserState",
    "StateMachine",
    # Errors
    "PgnError",
    "PgnReaderError",
    "PgnStructureError",
    "ReaderClosedError",
]
