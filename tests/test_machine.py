"""Tests for the parser state machine and its states."""

from collections.abc import Callable

import pytest

from pgnstream.errors import PgnStructureError
from pgnstream.machine import StateMachine
from pgnstream.states import ParserState

MachineFactory = Callable[..., StateMachine]


class TestMovetext:
    def test_move_numbers_are_dropped(self, make_machine: MachineFactory) -> None:
        game = make_machine("1. e4 e5 2. Nf3 *").run()
        assert game is not None
        assert game.mainline_sans() == ["e4", "e5", "Nf3"]

    def test_compact_move_numbers(self, make_machine: MachineFactory) -> None:
        game = make_machine("1.e4 e5 2.Nf3 2...Nc6 *").run()
        assert game is not None
        assert game.mainline_sans() == ["e4", "e5", "Nf3", "Nc6"]

    def test_san_text_is_kept_verbatim(self, make_machine: MachineFactory) -> None:
        game = make_machine("1. O-O 0-0 2. exd8=Q+ Nf3!? *").run()
        assert game is not None
        assert game.mainline_sans() == ["O-O", "0-0", "exd8=Q+", "Nf3!?"]

    def test_result_without_moves(self, make_machine: MachineFactory) -> None:
        game = make_machine("*").run()
        assert game is not None
        assert game.moves == []
        assert game.result == "*"

    def test_only_whitespace_means_no_game(self, make_machine: MachineFactory) -> None:
        assert make_machine(" \n\t\n").run() is None


class TestComments:
    def test_brace_comment_attaches_to_move(self, make_machine: MachineFactory) -> None:
        game = make_machine("1. e4 {best by test} e5 *").run()
        assert game is not None
        assert game.moves[0].comments == ["best by test"]
        assert game.moves[1].comments == []

    def test_comment_without_surrounding_spaces(self, make_machine: MachineFactory) -> None:
        game = make_machine("1. e4{a}e5{b}*").run()
        assert game is not None
        assert game.mainline_sans() == ["e4", "e5"]
        assert game.moves[0].comments == ["a"]
        assert game.moves[1].comments == ["b"]

    def test_whitespace_is_normalized(self, make_machine: MachineFactory) -> None:
        game = make_machine("1. e4 {  spans\n   two lines } *").run()
        assert game is not None
        assert game.moves[0].comments == ["spans two lines"]

    def test_empty_comment_is_dropped(self, make_machine: MachineFactory) -> None:
        game = make_machine("1. e4 {} { } *").run()
        assert game is not None
        assert game.moves[0].comments == []

    def test_line_comment(self, make_machine: MachineFactory) -> None:
        game = make_machine("1. e4 ; king pawn\n1... e5 *").run()
        assert game is not None
        assert game.mainline_sans() == ["e4", "e5"]
        assert game.moves[0].comments == ["king pawn"]

    def test_multiple_comments_on_one_move(self, make_machine: MachineFactory) -> None:
        game = make_machine("1. e4 {one} ; two\n{three} *").run()
        assert game is not None
        assert game.moves[0].comments == ["one", "two", "three"]

    def test_comment_before_first_move(self, make_machine: MachineFactory) -> None:
        game = make_machine("{intro} 1. e4 *").run()
        assert game is not None
        assert game.comments == ["intro"]
        assert game.moves[0].comments == []

    def test_comment_opening_a_variation(self, make_machine: MachineFactory) -> None:
        game = make_machine("1. e4 ({alt} 1. d4) *").run()
        assert game is not None
        assert game.moves[0].comments == ["alt"]
        assert [m.san for m in game.moves[0].variations[0]] == ["d4"]


class TestAnnotations:
    def test_known_glyph(self, make_machine: MachineFactory) -> None:
        game = make_machine("1. e4 $1 e5 $4 *").run()
        assert game is not None
        assert [m.annotation for m in game.moves] == ["!", "??"]

    def test_unknown_glyph_fallback(self, make_machine: MachineFactory) -> None:
        game = make_machine("1. e4 $123 *").run()
        assert game is not None
        assert game.moves[0].annotation == "$123"

    def test_glyph_before_variation_end(self, make_machine: MachineFactory) -> None:
        machine = make_machine("1. e4 (1. d4 $5) e5 *")
        game = machine.run()
        assert game is not None
        assert game.moves[0].variations[0][0].annotation == "!?"
        assert game.mainline_sans() == ["e4", "e5"]
        assert machine.pushes == machine.pops == 2

    def test_glyph_followed_by_comment(self, make_machine: MachineFactory) -> None:
        game = make_machine("1. e4 $3{brilliant} *").run()
        assert game is not None
        assert game.moves[0].annotation == "!!"
        assert game.moves[0].comments == ["brilliant"]


class TestVariations:
    def test_nested_variations(self, make_machine: MachineFactory) -> None:
        machine = make_machine("1. e4 e5 (1... c5 2. Nf3 (2. Nc3) d6) 2. Nf3 *")
        game = machine.run()
        assert game is not None

        assert game.mainline_sans() == ["e4", "e5", "Nf3"]
        sicilian = game.moves[1].variations[0]
        assert [m.san for m in sicilian] == ["c5", "Nf3", "d6"]
        assert [m.san for m in sicilian[1].variations[0]] == ["Nc3"]

    def test_history_is_balanced_at_end(self, make_machine: MachineFactory) -> None:
        machine = make_machine("1. e4 {a} (1. d4 {b} (1. c4 $2) ; c\n) e5 *")
        assert machine.run() is not None
        assert machine.pushes == 6
        assert machine.pushes == machine.pops
        assert machine.history == []
        assert machine.state is ParserState.MOVES_SECTION

    def test_sibling_variations(self, make_machine: MachineFactory) -> None:
        game = make_machine("1. e4 (1. d4) (1. c4) e5 *").run()
        assert game is not None
        variations = game.moves[0].variations
        assert [[m.san for m in line] for line in variations] == [["d4"], ["c4"]]


class TestStructuralErrors:
    def test_unbalanced_variation_end(self, make_machine: MachineFactory) -> None:
        with pytest.raises(PgnStructureError, match="unbalanced"):
            make_machine("1. e4 ) *").run()

    def test_stray_comment_end(self, make_machine: MachineFactory) -> None:
        with pytest.raises(PgnStructureError, match="unexpected"):
            make_machine("1. e4 } *").run()

    def test_result_inside_variation(self, make_machine: MachineFactory) -> None:
        with pytest.raises(PgnStructureError, match="unclosed variation"):
            make_machine("1. e4 (1. d4 *").run()

    def test_variation_without_move(self, make_machine: MachineFactory) -> None:
        with pytest.raises(PgnStructureError, match="variation without"):
            make_machine("(1. e4) *").run()

    def test_glyph_without_move(self, make_machine: MachineFactory) -> None:
        with pytest.raises(PgnStructureError, match="annotation glyph"):
            make_machine("$1 1. e4 *").run()

    def test_unterminated_comment(self, make_machine: MachineFactory) -> None:
        with pytest.raises(PgnStructureError, match="unterminated comment"):
            make_machine("1. e4 {never closed").run()

    def test_unterminated_tag(self, make_machine: MachineFactory) -> None:
        with pytest.raises(PgnStructureError, match="unterminated tag"):
            make_machine('[Event "cut').run()

    def test_malformed_tag(self, make_machine: MachineFactory) -> None:
        with pytest.raises(PgnStructureError, match="malformed tag"):
            make_machine("[Event Test]\n1. e4 *").run()

    def test_error_reports_position(self, make_machine: MachineFactory) -> None:
        with pytest.raises(PgnStructureError) as exc_info:
            make_machine("\n\n1. e4 ) *").run()
        assert exc_info.value.line == 3
        assert "line 3" in str(exc_info.value)


class TestEndOfStreamPolicy:
    def test_movetext_without_result(self, make_machine: MachineFactory) -> None:
        with pytest.raises(PgnStructureError, match="before a game result"):
            make_machine("1. e4 e5").run()

    def test_tags_without_movetext(self, make_machine: MachineFactory) -> None:
        with pytest.raises(PgnStructureError, match="before a game result"):
            make_machine('[Event "x"]\n').run()

    def test_trailing_line_comment(self, make_machine: MachineFactory) -> None:
        with pytest.raises(PgnStructureError, match="before a game result"):
            make_machine("1. e4 ; no result").run()


class TestEscapeLines:
    def test_escape_line_before_tags(self, make_machine: MachineFactory) -> None:
        machine = make_machine('%escaped line\n[Event "a"]\n1. e4 *')
        game = machine.run()
        assert game is not None
        assert game.tags == {"Event": "a"}
        assert game.mainline_sans() == ["e4"]
        assert machine.pushes == machine.pops == 1

    def test_escape_line_between_tags(self, make_machine: MachineFactory) -> None:
        game = make_machine('[Event "a"]\n%skip [this]\n[Site "b"]\n1. e4 *').run()
        assert game is not None
        assert game.tags == {"Event": "a", "Site": "b"}

    def test_escape_line_in_movetext(self, make_machine: MachineFactory) -> None:
        game = make_machine("1. e4\n%note (x {y\n1... e5 *").run()
        assert game is not None
        assert game.mainline_sans() == ["e4", "e5"]
        assert game.moves[0].comments == []

    def test_escape_line_between_games(self, make_machine: MachineFactory) -> None:
        machine = make_machine("1. e4 *\n%between\n1. d4 *\n%trailing")
        first, second = machine.run(), machine.run()
        assert first is not None and second is not None
        assert second.mainline_sans() == ["d4"]
        assert machine.run() is None

    def test_percent_inside_a_line_is_text(self, make_machine: MachineFactory) -> None:
        game = make_machine("1. e4 %x *").run()
        assert game is not None
        assert game.mainline_sans() == ["e4", "%x"]


class TestEndOfStreamDetection:
    @pytest.mark.parametrize("buffer_size", [1, 4096])
    def test_nul_character_is_ordinary_text(
        self, make_machine: MachineFactory, buffer_size: int
    ) -> None:
        game = make_machine("1. e4 {a\0b} *", buffer_size).run()
        assert game is not None
        assert game.moves[0].comments == ["a\0b"]

    def test_nul_before_result(self, make_machine: MachineFactory) -> None:
        with pytest.raises(PgnStructureError, match="before a game result"):
            make_machine("1. e4 \0").run()


class TestTextAfterResult:
    def test_comment_after_result_opens_next_game(
        self, make_machine: MachineFactory
    ) -> None:
        machine = make_machine("1. e4 1-0{after}\n1. d4 *")
        first, second = machine.run(), machine.run()
        assert first is not None and second is not None
        assert first.moves[0].comments == []
        assert second.comments == ["after"]
        assert second.mainline_sans() == ["d4"]
