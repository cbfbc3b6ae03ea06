from textual.color import Color

from termtext.ansi import Bold, Regular, Reset, TrueColorBg
from termtext.colors import ColorTable
from termtext.line import NULL_TEXT_STYLE, Line, StyledRun, TextStyle

RED = Color(0xB2, 0x22, 0x22)


def test_empty() -> None:
    line = Line()
    assert len(line) == 0
    assert line.plain == ""
    assert line.to_ansi() == ""


def test_from_ansi() -> None:
    line = Line.from_ansi("Hello \x1b[1;31mWorld\x1b[0m!")
    assert line.plain == "Hello World!"
    assert len(line) == 12
    assert line.tokens == [Bold(), Regular(31), Reset()]
    assert line.to_ansi() == "Hello \x1b[1m\x1b[31mWorld\x1b[0m!"


def test_from_ansi_drops_structural_commands() -> None:
    line = Line.from_ansi("a\x1b[2Kb\x1bxc")
    assert line.plain == "abxc"
    assert line.tokens == []


def test_equality() -> None:
    assert Line.from_ansi("\x1b[31mfoo") == Line.from_ansi("\x1b[31mfoo")
    assert Line.from_ansi("\x1b[31mfoo") != Line.from_ansi("foo")
    assert Line("foo") != "foo"


def test_item_index_skips_marks() -> None:
    line = Line.from_ansi("ab\x1b[31mcd")
    # Column 2 is "c", which follows the mark
    assert line.item_index(2) == 3
    assert line.item_index(4) == 5
    assert line.item_index(10) == 5


def test_character_at() -> None:
    line = Line.from_ansi("\x1b[1mab")
    assert line.character_at(0) == "a"
    assert line.character_at(1) == "b"
    assert line.character_at(2) is None
    assert line.character_at(-1) is None


def test_put_character_overwrite() -> None:
    line = Line("abc")
    line.put_character(1, "X", insert=False)
    assert line.plain == "aXc"
    line.put_character(3, "d", insert=False)
    assert line.plain == "aXcd"


def test_put_character_insert() -> None:
    line = Line("abc")
    line.put_character(1, "X", insert=True)
    assert line.plain == "aXbc"


def test_put_character_pads() -> None:
    line = Line("ab")
    line.put_character(5, "X", insert=False)
    assert line.plain == "ab   X"
    line = Line("ab")
    line.put_character(4, "Y", insert=True)
    assert line.plain == "ab  Y"


def test_overwrite_keeps_marks() -> None:
    line = Line.from_ansi("a\x1b[31mbc")
    line.put_character(1, "X", insert=False)
    assert line.to_ansi() == "a\x1b[31mXc"


def test_put_token_precedes_character() -> None:
    line = Line("abc")
    line.put_token(1, Bold())
    line.put_token(1, Regular(31))
    assert line.to_ansi() == "a\x1b[1m\x1b[31mbc"
    line.put_character(1, "X", insert=True)
    assert line.to_ansi() == "a\x1b[1m\x1b[31mXbc"
    assert len(line) == 4


def test_split() -> None:
    line = Line.from_ansi("ab\x1b[31mcd")
    left, right = line.split(2)
    assert left.to_ansi() == "ab\x1b[31m"
    assert right.to_ansi() == "cd"
    left, right = Line("ab").split(4)
    assert left.plain == "ab  "
    assert right.plain == ""


def test_delete() -> None:
    line = Line.from_ansi("ab\x1b[31mcd\x1b[0mef")
    line.delete(1, 5)
    assert line.to_ansi() == "a\x1b[31m\x1b[0mf"
    line = Line.from_ansi("ab\x1b[31mcd")
    line.delete(2)
    assert line.to_ansi() == "ab\x1b[31m"
    line.delete(0)
    assert line.to_ansi() == "\x1b[31m"


def test_copy_is_independent() -> None:
    line = Line("abc")
    copy = line.copy()
    copy.put_character(0, "X", insert=False)
    assert line.plain == "abc"
    assert copy.plain == "Xbc"


def test_runs() -> None:
    table = ColorTable()
    line = Line.from_ansi("Hello \x1b[1;31mWorld\x1b[0m!")
    runs, style = line.runs(table)
    assert runs == [
        StyledRun("Hello ", NULL_TEXT_STYLE),
        StyledRun("World", TextStyle(foreground=RED, bold=True)),
        StyledRun("!", TextStyle(bold=False)),
    ]
    assert style == TextStyle(bold=False)


def test_runs_carry_style() -> None:
    table = ColorTable()
    _, style = Line.from_ansi("a\x1b[48;2;1;2;3m").runs(table)
    runs, _ = Line("b").runs(table, style)
    assert runs == [StyledRun("b", TextStyle(background=Color(1, 2, 3)))]


def test_text_style_apply() -> None:
    table = ColorTable()
    style = NULL_TEXT_STYLE.apply(Regular(91), table)
    assert style.foreground == Color(0xFF, 0x45, 0x00)
    style = style.apply(TrueColorBg(1, 2, 3), table)
    assert style.background == Color(1, 2, 3)
    style = style.apply(Reset(), table)
    assert style.foreground is None
    assert style.background is None
    assert style.bold is False
