"""Public reader API: one game per :meth:`PgnReader.read_game` call."""

from __future__ import annotations

import io
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import IO

from pgnstream.buffer import CharacterSource, InputBuffer
from pgnstream.config import DEFAULT_BUFFER_SIZE, ReaderConfig
from pgnstream.errors import PgnReaderError, PgnStructureError, ReaderClosedError
from pgnstream.machine import StateMachine
from pgnstream.models import RESULT_TOKENS, PgnGame

_LOGGER = logging.getLogger(__name__)


class PgnReader:
    """Streaming PGN reader that owns its character source.

    Example::

        with PgnReader.open("games.pgn") as reader:
            while reader.read_game():
                print(reader.current_game.tags.get("White"))
    """

    RESULTS = RESULT_TOKENS

    def __init__(
        self, stream: CharacterSource, buffer_size: int = DEFAULT_BUFFER_SIZE
    ) -> None:
        self._stream = stream
        self._machine = StateMachine(InputBuffer(stream, buffer_size))
        self._closed = False
        self.current_game: PgnGame | None = None
        self.games_read = 0

    @classmethod
    def open(
        cls, path: str | Path, config: ReaderConfig | None = None
    ) -> PgnReader:
        """Open *path* as text and return a reader owning the file."""
        config = config or ReaderConfig()
        handle: IO[str] = open(path, encoding=config.encoding, errors=config.errors)
        return cls(handle, config.buffer_size)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def machine(self) -> StateMachine:
        return self._machine

    def read_game(self) -> bool:
        """Read one game from the stream.

        Returns:
            ``True`` when :attr:`current_game` holds a freshly parsed game,
            ``False`` at the end of the stream.

        Raises:
            ReaderClosedError: The reader has been closed.
            PgnReaderError: Reading or parsing failed; the partial game is
                discarded.
        """
        self._check_open()
        self.current_game = None
        try:
            game = self._machine.run()
        except Exception as exc:
            if isinstance(exc, PgnStructureError):
                _LOGGER.warning("Malformed PGN after %d games: %s", self.games_read, exc)
            raise PgnReaderError(exc) from exc

        if game is None:
            return False
        self.current_game = game
        self.games_read += 1
        return True

    def close(self) -> None:
        """Release the underlying stream. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        close = getattr(self._stream, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> PgnReader:
        self._check_open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __iter__(self) -> Iterator[PgnGame]:
        while self.read_game():
            assert self.current_game is not None
            yield self.current_game

    def _check_open(self) -> None:
        if self._closed:
            raise ReaderClosedError(f"{type(self).__name__} has been closed")


def read_games(
    stream: CharacterSource, buffer_size: int = DEFAULT_BUFFER_SIZE
) -> Iterator[PgnGame]:
    """Yield every game from *stream*, closing it when exhausted."""
    with PgnReader(stream, buffer_size) as reader:
        yield from reader


def parse_game(pgn_text: str) -> PgnGame:
    """Parse the first game of *pgn_text*."""
    with PgnReader(io.StringIO(pgn_text)) as reader:
        if not reader.read_game():
            raise ValueError("PGN text does not contain a game")
        assert reader.current_game is not None
        return reader.current_game
