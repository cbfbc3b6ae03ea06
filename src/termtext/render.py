from __future__ import annotations

from typing import NamedTuple

from textual.content import Content
from textual.geometry import Offset
from textual.style import Style

from termtext.buffer import TextBuffer, Viewport, ViewportPolicy
from termtext.line import NULL_TEXT_STYLE, StyledRun, TextStyle


class RenderedLines(NamedTuple):
    """Visible lines, ready to be drawn."""

    viewport: Viewport
    lines: list[Content]


def to_style(text_style: TextStyle, buffer: TextBuffer) -> Style:
    """Convert a text style in to a Textual style, filling in the buffer defaults."""
    return Style(
        foreground=text_style.foreground or buffer.foreground,
        background=text_style.background or buffer.background,
        bold=buffer.bold if text_style.bold is None else text_style.bold,
        italic=text_style.italic,
    )


def runs_to_content(runs: list[StyledRun], buffer: TextBuffer) -> Content:
    if not runs:
        return Content("")
    return Content("").join(
        [Content.styled(run.text, to_style(run.style, buffer)) for run in runs]
    )


def render_lines(
    buffer: TextBuffer,
    line_height: int,
    viewport_height: int,
    policy: ViewportPolicy | None = None,
    scroll_offset: int | None = None,
) -> RenderedLines:
    """Render the lines visible in a viewport.

    Style marks carry over line ends, so lines above the viewport are scanned
    for their style changes.

    Args:
        buffer: Buffer to render.
        line_height: Height of a line in pixels.
        viewport_height: Height of the viewport in pixels.
        policy: Alignment policy, or `None` for the buffer's policy.
        scroll_offset: Scroll offset, or `None` for the buffer's offset.

    Returns:
        The viewport and a `Content` per visible line.
    """
    viewport, visible = buffer.visible_lines(
        line_height, viewport_height, policy, scroll_offset
    )
    color_table = buffer.color_table
    style = NULL_TEXT_STYLE
    for line in buffer.lines[: viewport.first_line]:
        _, style = line.runs(color_table, style)

    rendered: list[Content] = []
    for line in visible:
        runs, style = line.runs(color_table, style)
        rendered.append(runs_to_content(runs, buffer))
    return RenderedLines(viewport, rendered)


def cursor_style(buffer: TextBuffer) -> Style | None:
    """Get the style to draw the cursor cell with.

    Returns:
        A style, or `None` if the cursor is hidden.
    """
    match buffer.cursor_state:
        case "normal_active":
            color = buffer.cursor_normal_color
        case "normal_inactive":
            color = buffer.cursor_normal_color.blend(buffer.background, 0.5)
        case "insert_active":
            color = buffer.cursor_insert_color
        case "insert_inactive":
            color = buffer.foreground.blend(buffer.background, 0.5)
        case _:
            return None
    return Style(foreground=buffer.background, background=color, bold=buffer.bold)


def cursor_cell(buffer: TextBuffer) -> str:
    """The character under the cursor (a space if past the end of the line)."""
    return buffer.cursor_line.character_at(buffer.cursor.x) or " "


def cursor_pixel_offset(
    buffer: TextBuffer, viewport: Viewport, cell_width: int, line_height: int
) -> Offset | None:
    """Get the pixel position of the cursor cell within the viewport.

    Args:
        buffer: Buffer containing the cursor.
        viewport: Viewport from `TextBuffer.visible_window`.
        cell_width: Width of a cell in pixels.
        line_height: Height of a line in pixels.

    Returns:
        Top left of the cursor cell, or `None` if the cursor row isn't visible.
    """
    x, y = buffer.cursor
    if not viewport.first_line <= y < viewport.end_line:
        return None
    return Offset(
        x * cell_width,
        viewport.start_y + (y - viewport.first_line) * line_height,
    )
