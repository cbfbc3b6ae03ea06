from __future__ import annotations

from typing import Iterable, Literal, NamedTuple, TYPE_CHECKING, TypeAlias

import rich.repr
from textual.color import Color
from textual.geometry import Offset

from termtext.ansi import (
    ESCAPE,
    SGR,
    Char,
    ClearLine,
    ClearScrollback,
    ClearToEndOfLine,
    ClearToStartOfLine,
    Command,
    CursorColumn,
    CursorDown,
    CursorLeft,
    CursorRight,
    CursorRow,
    CursorUp,
    ScrollDown,
    ScrollUp,
    SequenceDecoder,
)
from termtext.colors import DEFAULT_COLOR_TABLE, ColorTable
from termtext.line import Line

if TYPE_CHECKING:
    from termtext.settings import Settings


EditMode: TypeAlias = Literal["overwrite", "insert"]
ViewportPolicy: TypeAlias = Literal["always_top", "always_bottom", "bottom_on_overflow"]
CursorState: TypeAlias = Literal[
    "hidden", "normal_active", "normal_inactive", "insert_active", "insert_inactive"
]

EDIT_MODES: frozenset[str] = frozenset({"overwrite", "insert"})
VIEWPORT_POLICIES: frozenset[str] = frozenset(
    {"always_top", "always_bottom", "bottom_on_overflow"}
)
CURSOR_STATES: frozenset[str] = frozenset(
    {"hidden", "normal_active", "normal_inactive", "insert_active", "insert_inactive"}
)

BLACK = Color(0, 0, 0)
WHITE = Color(255, 255, 255)

MAX_PADDING = 4096
"""How far the cursor may move past the end of its line."""


class TextBufferError(Exception):
    """Base class for text buffer errors."""


class InvalidCursorDelta(TextBufferError):
    """The horizontal cursor movement wasn't one of -2, -1, +1, or +2."""


class Viewport(NamedTuple):
    """The lines of a buffer projected on to a viewport."""

    first_line: int
    """Index of the first line to draw."""
    start_y: int
    """Vertical pixel offset of the first line (negative if clipped)."""
    end_line: int
    """Index after the last line to draw."""


@rich.repr.auto
class TextBuffer:
    """An editable grid of lines, written to with a stream of text and escape sequences.

    Cursor movement and clearing sequences are applied as they are read. Style
    sequences are stored in the line as zero-width marks, and resolved when
    the lines are rendered.
    """

    def __init__(
        self,
        *,
        edit_mode: EditMode = "overwrite",
        viewport_policy: ViewportPolicy = "always_top",
        color_table: ColorTable = DEFAULT_COLOR_TABLE,
        decoder: SequenceDecoder | None = None,
        cursor_state: CursorState = "hidden",
        foreground: Color = BLACK,
        background: Color = WHITE,
        cursor_insert_color: Color | None = None,
        cursor_normal_color: Color = BLACK,
        bold: bool = False,
    ) -> None:
        if edit_mode not in EDIT_MODES:
            raise ValueError(f"Invalid edit mode {edit_mode!r}")
        if viewport_policy not in VIEWPORT_POLICIES:
            raise ValueError(f"Invalid viewport policy {viewport_policy!r}")
        if cursor_state not in CURSOR_STATES:
            raise ValueError(f"Invalid cursor state {cursor_state!r}")

        self.edit_mode: EditMode = edit_mode
        """Should characters replace (`"overwrite"`) or shift (`"insert"`) existing text?"""
        self.viewport_policy: ViewportPolicy = viewport_policy
        """How lines are aligned within the viewport."""
        self.color_table = color_table
        """Table used to resolve color codes."""
        self.decoder = decoder or SequenceDecoder(color_table)
        """Escape sequence decoder."""
        self.cursor_state: CursorState = cursor_state
        """How the cursor should be drawn."""

        self.foreground = foreground
        """Default text color."""
        self.background = background
        """Default background color."""
        self.cursor_insert_color = (
            foreground if cursor_insert_color is None else cursor_insert_color
        )
        """Cursor color in insert states."""
        self.cursor_normal_color = cursor_normal_color
        """Cursor color in normal states."""
        self.bold = bold
        """Is text bold by default?"""

        self.scroll_offset = 0
        """Zero to show the latest lines, negative to scroll back."""
        self.updates = 0
        """Incrementing integer used in caching."""

        self._lines: list[Line] = [Line()]
        self._cursor_x = 0
        self._cursor_y = 0
        self._pending = ""

    @classmethod
    def from_settings(
        cls, settings: Settings, color_table: ColorTable = DEFAULT_COLOR_TABLE
    ) -> TextBuffer:
        """Create a buffer configured from settings.

        Args:
            settings: Settings instance.
            color_table: Table used to resolve color codes.

        Returns:
            A new, empty, text buffer.
        """
        return cls(
            edit_mode=settings.get_choice("buffer.edit_mode", EDIT_MODES),
            viewport_policy=settings.get_choice(
                "buffer.viewport_policy", VIEWPORT_POLICIES
            ),
            color_table=color_table,
            foreground=settings.get_color("colors.foreground"),
            background=settings.get_color("colors.background"),
            cursor_insert_color=settings.get_color("colors.cursor_insert"),
            cursor_normal_color=settings.get_color("colors.cursor_normal"),
            bold=settings.get("colors.bold", bool),
        )

    def __rich_repr__(self) -> rich.repr.Result:
        yield "edit_mode", self.edit_mode, "overwrite"
        yield "viewport_policy", self.viewport_policy, "always_top"
        yield "cursor_state", self.cursor_state, "hidden"
        yield "cursor", self.cursor
        yield "line_count", self.line_count
        yield "scroll_offset", self.scroll_offset, 0

    @property
    def line_count(self) -> int:
        return len(self._lines)

    @property
    def lines(self) -> list[Line]:
        """The lines in the buffer."""
        return list(self._lines)

    @property
    def cursor(self) -> Offset:
        """The cursor position as (column, row)."""
        return Offset(self._cursor_x, self._cursor_y)

    @cursor.setter
    def cursor(self, position: tuple[int, int]) -> None:
        x, y = position
        self._cursor_y = max(0, min(y, len(self._lines) - 1))
        self._cursor_x = self._clamp_column(x)
        self.updates += 1

    @property
    def cursor_line(self) -> Line:
        """The line under the cursor."""
        return self._lines[self._cursor_y]

    def get_text(self) -> list[str]:
        """Get the lines as plain text."""
        return [line.plain for line in self._lines]

    def get_ansi_text(self) -> list[str]:
        """Get the lines, with style marks as escape sequences."""
        return [line.to_ansi() for line in self._lines]

    def write(self, text: str) -> None:
        """Write text which may contain escape sequences.

        Args:
            text: Text to write.
        """
        text = self._pending + text
        self._pending = ""
        if not text:
            return
        decoder = self.decoder
        length = len(text)
        index = 0
        while index < length:
            character = text[index]
            if character == ESCAPE:
                consumed, commands = decoder.decode_partial(text, index)
                if commands is None:
                    # Finish the sequence on the next write
                    self._pending = text[index:]
                    break
                index += consumed
                for command in commands:
                    self._apply_command(command)
            else:
                self._write_character(character)
                index += 1
        self.updates += 1

    def _write_character(self, character: str) -> None:
        if character == "\r":
            self._cursor_x = 0
        elif character == "\n":
            self._new_line()
        else:
            self.cursor_line.put_character(
                self._cursor_x, character, insert=self.edit_mode == "insert"
            )
            self._cursor_x += 1

    def _new_line(self) -> None:
        lines = self._lines
        y = self._cursor_y
        if self.edit_mode == "insert":
            left, right = lines[y].split(self._cursor_x)
            lines[y] = left
            lines.insert(y + 1, right)
        elif y + 1 == len(lines):
            lines.append(Line())
        self._cursor_y = y + 1
        self._cursor_x = 0

    def _move_row(self, row: int) -> None:
        self._cursor_y = max(0, min(row, len(self._lines) - 1))

    def _clamp_column(self, column: int) -> int:
        return max(0, min(column, len(self.cursor_line) + MAX_PADDING))

    def _apply_command(self, command: Command) -> None:
        line = self.cursor_line
        match command:
            case CursorUp(count):
                self._move_row(self._cursor_y - count)
            case CursorDown(count):
                self._move_row(self._cursor_y + count)
            case CursorLeft(count):
                self._cursor_x = max(0, self._cursor_x - count)
            case CursorRight(count):
                self._cursor_x = self._clamp_column(self._cursor_x + count)
            case CursorColumn(column):
                self._cursor_x = self._clamp_column(column - 1)
            case CursorRow(row):
                self._move_row(row - 1)
            case ClearToEndOfLine():
                line.delete(self._cursor_x)
            case ClearToStartOfLine():
                line.delete(0, self._cursor_x)
                self._cursor_x = 0
            case ClearLine():
                line.delete(0)
                self._cursor_x = 0
            case ClearScrollback():
                self._reset()
            case ScrollUp(lines):
                self.scroll(+lines)
            case ScrollDown(lines):
                self.scroll(-lines)
            case SGR(token):
                line.put_token(self._cursor_x, token)
            case Char(character):
                self._write_character(character)

    def _reset(self) -> None:
        self._lines[:] = [Line()]
        self._cursor_x = 0
        self._cursor_y = 0
        self.scroll_offset = 0

    def scroll(self, delta: int) -> None:
        """Scroll by a number of lines.

        Args:
            delta: Positive to scroll towards the latest lines, negative to scroll back.
        """
        self.scroll_offset = max(
            -(len(self._lines) - 1), min(0, self.scroll_offset + delta)
        )
        self.updates += 1

    def replace(self, lines: Iterable[str | Line]) -> list[Line]:
        """Replace the contents of the buffer.

        The cursor is moved to the end of the last line.

        Args:
            lines: New lines. Strings may contain style escape sequences.

        Returns:
            The previous lines.
        """
        new_lines = [
            line.copy() if isinstance(line, Line) else Line.from_ansi(line, self.decoder)
            for line in lines
        ] or [Line()]
        old_lines, self._lines = self._lines, new_lines
        self._cursor_y = len(new_lines) - 1
        self._cursor_x = len(new_lines[-1])
        self.scroll(0)
        return old_lines

    def clear(self) -> None:
        """Reset to a single empty line."""
        self._reset()
        self._pending = ""
        self.updates += 1

    def move_cursor_horz(self, delta: int) -> None:
        """Move the cursor horizontally.

        Args:
            delta: -1 or +1 to move one column, -2 for start of line, +2 for end of line.

        Raises:
            InvalidCursorDelta: If `delta` isn't one of the above.
        """
        match delta:
            case -1:
                self._cursor_x = max(0, self._cursor_x - 1)
            case 1:
                self._cursor_x = self._clamp_column(self._cursor_x + 1)
            case -2:
                self._cursor_x = 0
            case 2:
                self._cursor_x = len(self.cursor_line)
            case _:
                raise InvalidCursorDelta(f"Expected -2, -1, 1, or 2; found {delta!r}")
        self.updates += 1

    def clear_to_cursor(self) -> None:
        """Delete text before the cursor, and move to the start of the line."""
        self.cursor_line.delete(0, self._cursor_x)
        self._cursor_x = 0
        self.updates += 1

    def clear_from_cursor(self) -> None:
        """Delete text from the cursor to the end of the line."""
        self.cursor_line.delete(self._cursor_x)
        self.updates += 1

    def backspace(self) -> bool:
        """Delete the character before the cursor.

        Returns:
            `True` if a character was deleted.
        """
        x = min(self._cursor_x, len(self.cursor_line))
        if x == 0:
            return False
        self.cursor_line.delete(x - 1, x)
        self._cursor_x = x - 1
        self.updates += 1
        return True

    def delete_word(self) -> bool:
        """Delete the word (and any trailing spaces) before the cursor.

        Returns:
            `True` if any characters were deleted.
        """
        line = self.cursor_line
        plain = line.plain
        end = min(self._cursor_x, len(plain))
        start = end
        while start and plain[start - 1] == " ":
            start -= 1
        while start and plain[start - 1] != " ":
            start -= 1
        if start == end:
            return False
        line.delete(start, end)
        self._cursor_x = start
        self.updates += 1
        return True

    def visible_window(
        self,
        line_height: int,
        viewport_height: int,
        policy: ViewportPolicy | None = None,
        scroll_offset: int | None = None,
    ) -> Viewport:
        """Work out which lines are visible within a viewport.

        Args:
            line_height: Height of a line in pixels.
            viewport_height: Height of the viewport in pixels.
            policy: Alignment policy, or `None` for the buffer's policy.
            scroll_offset: Scroll offset, or `None` for the buffer's offset.

        Raises:
            ValueError: If either height isn't positive.

        Returns:
            The visible range of lines, and the vertical offset of the first.
        """
        if line_height <= 0 or viewport_height <= 0:
            raise ValueError(
                f"Heights must be positive; found {line_height=}, {viewport_height=}"
            )
        if policy is None:
            policy = self.viewport_policy
        if scroll_offset is None:
            scroll_offset = self.scroll_offset

        scroll_up_lines = max(0, -scroll_offset)
        end_line = max(0, len(self._lines) - scroll_up_lines)

        fully_visible = viewport_height // line_height
        partially_visible = -(-viewport_height // line_height)
        shown = min(partially_visible, end_line)
        skipped = end_line - shown
        if end_line - min(fully_visible, end_line) > 0:
            start_y = viewport_height - shown * line_height
        else:
            start_y = 0

        match policy:
            case "always_top":
                return Viewport(0, 0, end_line)
            case "always_bottom":
                if end_line * line_height > viewport_height:
                    return Viewport(skipped, start_y, end_line)
                return Viewport(0, viewport_height - end_line * line_height, end_line)
            case "bottom_on_overflow":
                if skipped > 0:
                    return Viewport(skipped, start_y, end_line)
                return Viewport(0, 0, end_line)
        raise ValueError(f"Invalid viewport policy {policy!r}")

    def visible_lines(
        self,
        line_height: int,
        viewport_height: int,
        policy: ViewportPolicy | None = None,
        scroll_offset: int | None = None,
    ) -> tuple[Viewport, list[Line]]:
        """Get the viewport and the lines it selects."""
        viewport = self.visible_window(
            line_height, viewport_height, policy, scroll_offset
        )
        return viewport, self._lines[viewport.first_line : viewport.end_line]


if __name__ == "__main__":
    from rich import print

    buffer = TextBuffer()
    buffer.write("Lines 1-4 must be in order without gaps.\n")
    buffer.write("Line 1\n\nLine 3\n")
    buffer.write("\x1b[2A\x1b[1;31mLine 2\x1b[0m\n")
    buffer.write("\x1b[2BLine 4\n")
    print(buffer)
    print(buffer.get_ansi_text())
    print(buffer.visible_window(20, 50, "always_bottom"))
