from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, NamedTuple, TypeAlias

import rich.repr
from textual import log
from textual.color import Color

from termtext.ansi import (
    DEFAULT_DECODER,
    ESCAPE,
    SGR,
    Background,
    BackgroundHighIntensity,
    Bold,
    Char,
    ColorToken,
    HighIntensity,
    Italic,
    Regular,
    Reset,
    ResetBg,
    ResetFg,
    SequenceDecoder,
    TrueColorBg,
    TrueColorFg,
)
from termtext.colors import ColorTable

LineItem: TypeAlias = str | ColorToken
"""A single character, or a zero-width style mark."""


@rich.repr.auto
@dataclass(frozen=True, slots=True)
class TextStyle:
    """Style state accumulated while scanning lines.

    `None` values mean "use the buffer default".
    """

    foreground: Color | None = None
    background: Color | None = None
    bold: bool | None = None
    italic: bool = False

    def apply(self, token: ColorToken, color_table: ColorTable) -> TextStyle:
        """Get a new style with a color token applied.

        Args:
            token: Token from a style mark.
            color_table: Table used to resolve numeric color codes.

        Returns:
            Updated style.
        """
        match token:
            case Regular(code) | HighIntensity(code):
                if (color := color_table.resolve(code)) is not None:
                    return replace(self, foreground=color)
            case Background(code) | BackgroundHighIntensity(code):
                if (color := color_table.resolve(code)) is not None:
                    return replace(self, background=color)
            case TrueColorFg(red, green, blue):
                return replace(self, foreground=Color(red, green, blue))
            case TrueColorBg(red, green, blue):
                return replace(self, background=Color(red, green, blue))
            case ResetFg():
                return replace(self, foreground=None)
            case ResetBg():
                return replace(self, background=None)
            case Reset():
                return RESET_TEXT_STYLE
            case Bold():
                return replace(self, bold=True)
            case Italic():
                return replace(self, italic=True)
        return self


NULL_TEXT_STYLE = TextStyle()
RESET_TEXT_STYLE = TextStyle(bold=False)


class StyledRun(NamedTuple):
    """A run of text sharing a single style."""

    text: str
    style: TextStyle


class Line:
    """A line of text with embedded style marks.

    Columns count characters only; style marks occupy no columns. A mark at
    column `n` applies from the character at column `n` onwards.
    """

    __slots__ = ["items"]

    def __init__(self, items: Iterable[LineItem] = ()) -> None:
        self.items: list[LineItem] = list(items)

    @classmethod
    def from_ansi(cls, text: str, decoder: SequenceDecoder = DEFAULT_DECODER) -> Line:
        """Build a line from text that may contain SGR escape sequences.

        Args:
            text: Text, typically produced by `to_ansi`.
            decoder: Decoder for escape sequences.

        Returns:
            A new line.
        """
        items: list[LineItem] = []
        index = 0
        length = len(text)
        while index < length:
            if text[index] != ESCAPE:
                items.append(text[index])
                index += 1
                continue
            consumed, commands = decoder.decode_partial(text, index)
            if commands is None:
                log.warning("Dropping incomplete escape sequence", text[index:])
                break
            index += consumed
            for command in commands:
                match command:
                    case SGR(token):
                        items.append(token)
                    case Char(character):
                        items.append(character)
                    case _:
                        log.warning("Ignoring command in line text", command)
        return cls(items)

    def __rich_repr__(self) -> rich.repr.Result:
        yield self.to_ansi()

    def __repr__(self) -> str:
        return f"Line({self.to_ansi()!r})"

    def __str__(self) -> str:
        return self.plain

    def __len__(self) -> int:
        return sum(1 for item in self.items if isinstance(item, str))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Line):
            return self.items == other.items
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    @property
    def plain(self) -> str:
        """The text without style marks."""
        return "".join(item for item in self.items if isinstance(item, str))

    @property
    def tokens(self) -> list[ColorToken]:
        """The style marks, in order."""
        return [item for item in self.items if not isinstance(item, str)]

    def copy(self) -> Line:
        return Line(self.items)

    def to_ansi(self) -> str:
        """Render the line with style marks as canonical escape sequences."""
        return "".join(
            item if isinstance(item, str) else item.escape for item in self.items
        )

    def item_index(self, column: int) -> int:
        """Get the index in to `items` for a column.

        The index is that of the character at `column`, which follows any
        marks preceding it. Past the last character, this is the end of items.

        Args:
            column: Column (character offset).

        Returns:
            Item index.
        """
        position = 0
        for index, item in enumerate(self.items):
            if isinstance(item, str):
                if position == column:
                    return index
                position += 1
        return len(self.items)

    def character_at(self, column: int) -> str | None:
        """The character at a column, or `None` if beyond the end of the line."""
        if column < 0:
            return None
        index = self.item_index(column)
        if index < len(self.items):
            item = self.items[index]
            assert isinstance(item, str)
            return item
        return None

    def pad(self, column: int) -> None:
        """Pad with spaces until the line has at least `column` characters."""
        if (missing := column - len(self)) > 0:
            self.items.extend(" " * missing)

    def put_character(self, column: int, character: str, insert: bool) -> None:
        """Write a character.

        Args:
            column: Column to write to.
            character: Character to write.
            insert: Shift remaining characters right if `True`, otherwise
                replace the character at `column`.
        """
        self.pad(column)
        index = self.item_index(column)
        if insert or index == len(self.items):
            self.items.insert(index, character)
        else:
            self.items[index] = character

    def put_token(self, column: int, token: ColorToken) -> None:
        """Insert a style mark at a column."""
        self.pad(column)
        self.items.insert(self.item_index(column), token)

    def split(self, column: int) -> tuple[Line, Line]:
        """Split in to two lines, the second starting at `column`."""
        self.pad(column)
        index = self.item_index(column)
        return Line(self.items[:index]), Line(self.items[index:])

    def delete(self, start: int, end: int | None = None) -> None:
        """Delete characters in a range of columns, keeping style marks.

        Args:
            start: First column to delete.
            end: Column after the last to delete, or `None` for end of line.
        """
        items: list[LineItem] = []
        position = 0
        for item in self.items:
            if isinstance(item, str):
                deleted = position >= start and (end is None or position < end)
                position += 1
                if deleted:
                    continue
            items.append(item)
        self.items[:] = items

    def runs(
        self, color_table: ColorTable, style: TextStyle = NULL_TEXT_STYLE
    ) -> tuple[list[StyledRun], TextStyle]:
        """Resolve style marks in to runs of styled text.

        Args:
            color_table: Table to resolve color codes.
            style: Style in effect at the start of the line.

        Returns:
            A tuple of runs, and the style in effect at the end of the line.
        """
        runs: list[StyledRun] = []
        text: list[str] = []
        for item in self.items:
            if isinstance(item, str):
                text.append(item)
                continue
            if text:
                runs.append(StyledRun("".join(text), style))
                text.clear()
            style = style.apply(item, color_table)
        if text:
            runs.append(StyledRun("".join(text), style))
        return runs, style
