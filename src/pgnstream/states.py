"""Parsing states and their transition rules.

Every state is a :class:`ParserState` member with a handler taking the
machine, the current character and the lookahead character. Transitions
fire on the lookahead, so the state being entered receives the opening
delimiter as its first character.
"""

from __future__ import annotations

import re
import string
from collections.abc import Callable
from enum import IntEnum, auto
from typing import TYPE_CHECKING

from pgnstream.annotations import NAG_PREFIX, decode_nag
from pgnstream.errors import PgnStructureError
from pgnstream.models import RESULT_TOKENS

if TYPE_CHECKING:
    from pgnstream.machine import StateMachine


class ParserState(IntEnum):
    """Finite-state-machine states of the PGN parser."""

    INITIAL = auto()
    TAG_SECTION = auto()
    MOVES_SECTION = auto()
    LINE_COMMENT = auto()
    BRACE_COMMENT = auto()
    ANNOTATION = auto()
    ESCAPE_LINE = auto()


class ParseResult(IntEnum):
    CONTINUE = auto()
    END_OF_GAME = auto()


Handler = Callable[["StateMachine", str, str], ParseResult]
Hook = Callable[["StateMachine"], None]

TAG_START = "["
TAG_END = "]"
COMMENT_START = "{"
COMMENT_END = "}"
LINE_COMMENT_START = ";"
VARIATION_START = "("
VARIATION_END = ")"
ESCAPE = "%"

_DELIMITERS = frozenset("[]{};()" + NAG_PREFIX)
_LINE_BREAKS = ("\r", "\n")
_TAG_PAIR_RE = re.compile(r'^\[\s*(\w+)\s+"((?:[^"\\]|\\.)*)"\s*\]$', re.DOTALL)
_TAG_ESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)
_MOVE_NUMBER_RE = re.compile(r"^\d+(?:\.+|$)")


def _ends_token(char: str, at_end: bool) -> bool:
    return at_end or char.isspace() or char in _DELIMITERS


def _escape_line_ahead(current: str, lookahead: str) -> bool:
    # Only a '%' in the first column starts an escape line.
    return lookahead == ESCAPE and current in _LINE_BREAKS


# ── Initial ──────────────────────────────────────────────────────────────


def _initial(machine: StateMachine, current: str, lookahead: str) -> ParseResult:
    if machine.at_end:
        return ParseResult.CONTINUE

    if current.isspace():
        if _escape_line_ahead(current, lookahead):
            machine.enter(ParserState.ESCAPE_LINE, push=True)
        elif not (machine.lookahead_at_end or lookahead.isspace()):
            return _open_section(machine, lookahead)
        return ParseResult.CONTINUE

    # The first character of a game was never anybody's lookahead.
    if current == ESCAPE and machine.column == 1:
        machine.enter(ParserState.ESCAPE_LINE, push=True)
    else:
        _open_section(machine, current)
    return machine.dispatch(current, lookahead)


def _open_section(machine: StateMachine, lookahead: str) -> ParseResult:
    if lookahead == TAG_START:
        machine.enter(ParserState.TAG_SECTION)
        return ParseResult.CONTINUE
    machine.enter(ParserState.MOVES_SECTION)
    return _moves_lookahead(machine, lookahead, at_end=False)


# ── Tag section ──────────────────────────────────────────────────────────


def _tag_section(machine: StateMachine, current: str, lookahead: str) -> ParseResult:
    if machine.buffer or (current == TAG_START and not machine.at_end):
        _read_tag_char(machine, current)
        if machine.buffer:
            return ParseResult.CONTINUE

    # Between tag pairs.
    if _escape_line_ahead(current, lookahead):
        machine.enter(ParserState.ESCAPE_LINE, push=True)
        return ParseResult.CONTINUE
    if machine.lookahead_at_end or lookahead.isspace() or lookahead == TAG_START:
        return ParseResult.CONTINUE
    return _open_section(machine, lookahead)


def _read_tag_char(machine: StateMachine, current: str) -> None:
    if machine.at_end:
        raise PgnStructureError("unterminated tag pair")
    machine.buffer.append(current)

    ctx = machine.context
    if ctx.tag_escaped:
        ctx.tag_escaped = False
    elif current == "\\" and ctx.tag_in_quotes:
        ctx.tag_escaped = True
    elif current == '"':
        ctx.tag_in_quotes = not ctx.tag_in_quotes
    elif current == TAG_END and not ctx.tag_in_quotes:
        # Commit this pair and start over for the next one.
        machine.enter(ParserState.TAG_SECTION)


def _reset_tag(machine: StateMachine) -> None:
    machine.context.tag_in_quotes = False
    machine.context.tag_escaped = False


def _commit_tag(machine: StateMachine) -> None:
    text = "".join(machine.buffer).strip()
    if not text:
        return
    match = _TAG_PAIR_RE.match(text)
    if match is None:
        raise PgnStructureError(f"malformed tag pair: {text!r}")
    key, raw_value = match.groups()
    machine.context.add_tag(key, _TAG_ESCAPE_RE.sub(r"\1", raw_value))


# ── Moves section ────────────────────────────────────────────────────────


def _moves_section(machine: StateMachine, current: str, lookahead: str) -> ParseResult:
    if machine.at_end:
        return ParseResult.CONTINUE
    # Delimiters arriving here were already acted upon as lookahead.
    if not current.isspace() and current not in _DELIMITERS:
        machine.buffer.append(current)
    elif _escape_line_ahead(current, lookahead):
        machine.enter(ParserState.ESCAPE_LINE, push=True)
        return ParseResult.CONTINUE
    return _moves_lookahead(machine, lookahead, at_end=machine.lookahead_at_end)


def _moves_lookahead(
    machine: StateMachine, lookahead: str, *, at_end: bool
) -> ParseResult:
    if not _ends_token(lookahead, at_end):
        return ParseResult.CONTINUE

    if _flush_token(machine):
        return machine.finish()
    if at_end:
        return ParseResult.CONTINUE

    if lookahead == COMMENT_START:
        machine.enter(ParserState.BRACE_COMMENT, push=True)
    elif lookahead == LINE_COMMENT_START:
        machine.enter(ParserState.LINE_COMMENT, push=True)
    elif lookahead == NAG_PREFIX:
        machine.enter(ParserState.ANNOTATION, push=True)
    elif lookahead == VARIATION_START:
        machine.context.open_variation()
        machine.enter(ParserState.MOVES_SECTION, push=True)
    elif lookahead == VARIATION_END:
        machine.resume()
        machine.context.close_variation()
    elif lookahead in (COMMENT_END, TAG_START, TAG_END):
        raise PgnStructureError(f"unexpected {lookahead!r} in movetext")
    return ParseResult.CONTINUE


def _flush_token(machine: StateMachine) -> bool:
    """Commit the buffered token; True when it was a game result."""
    token = "".join(machine.buffer)
    machine.buffer.clear()
    if not token:
        return False
    if token in RESULT_TOKENS:
        machine.context.game.result = token
        return True
    san = _MOVE_NUMBER_RE.sub("", token, count=1)
    if san:
        machine.context.add_move(san)
    return False


# ── Comments and escape lines ────────────────────────────────────────────


def _line_comment(machine: StateMachine, current: str, lookahead: str) -> ParseResult:
    machine.buffer.append(current)
    if machine.lookahead_at_end or lookahead in _LINE_BREAKS:
        machine.resume()
    return ParseResult.CONTINUE


def _brace_comment(machine: StateMachine, current: str, lookahead: str) -> ParseResult:
    if machine.at_end:
        raise PgnStructureError("unterminated comment")
    machine.buffer.append(current)
    if lookahead == COMMENT_END and not machine.lookahead_at_end:
        machine.resume()
    return ParseResult.CONTINUE


def _commit_comment(machine: StateMachine) -> None:
    # Drop the opening delimiter and normalize whitespace.
    text = " ".join("".join(machine.buffer[1:]).split())
    if text:
        machine.context.attach_comment(text)


def _escape_line(machine: StateMachine, current: str, lookahead: str) -> ParseResult:
    # Escaped lines are skipped outright; nothing is buffered or committed.
    if machine.lookahead_at_end or lookahead in _LINE_BREAKS:
        machine.resume()
    return ParseResult.CONTINUE


# ── Numeric annotation glyphs ────────────────────────────────────────────


def _annotation(machine: StateMachine, current: str, lookahead: str) -> ParseResult:
    machine.buffer.append(current)
    if not machine.lookahead_at_end and lookahead in string.digits:
        return ParseResult.CONTINUE
    machine.resume()
    # The lookahead belongs to the movetext again.
    return _moves_lookahead(machine, lookahead, at_end=machine.lookahead_at_end)


def _commit_annotation(machine: StateMachine) -> None:
    code = "".join(machine.buffer[1:])
    machine.context.annotate(decode_nag(code))


STATE_HANDLERS: dict[ParserState, Handler] = {
    ParserState.INITIAL: _initial,
    ParserState.TAG_SECTION: _tag_section,
    ParserState.MOVES_SECTION: _moves_section,
    ParserState.LINE_COMMENT: _line_comment,
    ParserState.BRACE_COMMENT: _brace_comment,
    ParserState.ANNOTATION: _annotation,
    ParserState.ESCAPE_LINE: _escape_line,
}

ON_ENTER: dict[ParserState, Hook] = {
    ParserState.TAG_SECTION: _reset_tag,
}

ON_EXIT: dict[ParserState, Hook] = {
    ParserState.TAG_SECTION: _commit_tag,
    ParserState.LINE_COMMENT: _commit_comment,
    ParserState.BRACE_COMMENT: _commit_comment,
    ParserState.ANNOTATION: _commit_annotation,
}
