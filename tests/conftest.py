"""Shared pytest fixtures used across the test suite."""

from __future__ import annotations

import io
from collections.abc import Callable, Iterator

import pytest

from pgnstream.buffer import InputBuffer
from pgnstream.machine import StateMachine
from pgnstream.reader import PgnReader

TWO_GAMES = """[Event "First"]
[White "Alice"]
[Black "Bob"]
[Result "1-0"]

1. e4 e5 2. Nf3 {developing} Nc6 (2... d6 3. d4 $1) 3. Bb5 $3 a6 1-0

[Event "Second"]
[White "Carol"]
[Black "Dave"]

1. d4 ; queen pawn
d5 2. c4 1/2-1/2
"""


@pytest.fixture
def two_games() -> str:
    return TWO_GAMES


@pytest.fixture
def make_machine() -> Callable[..., StateMachine]:
    """Build a state machine over a string source."""

    def factory(text: str, buffer_size: int = 4096) -> StateMachine:
        return StateMachine(InputBuffer(io.StringIO(text), buffer_size))

    return factory


@pytest.fixture
def make_reader() -> Iterator[Callable[..., PgnReader]]:
    """Build readers over string sources and close them after the test."""
    readers: list[PgnReader] = []

    def factory(text: str, buffer_size: int = 4096) -> PgnReader:
        reader = PgnReader(io.StringIO(text), buffer_size)
        readers.append(reader)
        return reader

    yield factory

    for reader in readers:
        reader.close()
