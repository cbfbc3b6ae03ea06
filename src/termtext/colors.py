from __future__ import annotations

from typing import Sequence

from textual.color import Color


REGULAR_START = 30
BACKGROUND_START = 40
HIGH_INTENSITY_START = 90
BACKGROUND_HIGH_INTENSITY_START = 100

BACKGROUND_SHIFT = BACKGROUND_START - REGULAR_START
"""Background codes are the foreground code plus this value."""

COLOR_NAMES: Sequence[str] = (
    "Black",
    "Red",
    "Green",
    "Yellow",
    "Blue",
    "Purple",
    "Cyan",
    "White",
)

HIGH_INTENSITY_NAMES: Sequence[str] = tuple(f"Light {name}" for name in COLOR_NAMES)

REGULAR_COLORS: Sequence[Color] = (
    Color(0x00, 0x00, 0x00),
    Color(0xB2, 0x22, 0x22),
    Color(0x22, 0x8B, 0x22),
    Color(0xF0, 0xC7, 0x00),
    Color(0x00, 0x00, 0xCD),
    Color(0x80, 0x00, 0x80),
    Color(0x00, 0xFF, 0xFF),
    Color(0xFF, 0xFF, 0xFF),
)

HIGH_INTENSITY_COLORS: Sequence[Color] = (
    Color(0x69, 0x69, 0x69),
    Color(0xFF, 0x45, 0x00),
    Color(0x32, 0xCD, 0x32),
    Color(0xFF, 0xFF, 0x00),
    Color(0x1E, 0x90, 0xFF),
    Color(0x99, 0x32, 0xCC),
    Color(0x00, 0xCE, 0xD1),
    Color(0xF8, 0xF8, 0xFF),
)

CUBE_LEVELS: Sequence[int] = (0, 95, 135, 175, 215, 255)
"""Channel values for the 6x6x6 color cube (one per level)."""


class ColorTable:
    """Maps numeric ANSI color codes on to RGB colors.

    The table is immutable, so a single instance may be shared between the
    decoder, the buffer, and the renderer.
    """

    def __init__(
        self,
        regular: Sequence[Color] = REGULAR_COLORS,
        high_intensity: Sequence[Color] = HIGH_INTENSITY_COLORS,
    ) -> None:
        if len(regular) != 8 or len(high_intensity) != 8:
            raise ValueError("color tables require exactly 8 colors each")
        self.regular = tuple(regular)
        self.high_intensity = tuple(high_intensity)
        self._codes: dict[int, Color] = {}
        for offset in range(8):
            self._codes[REGULAR_START + offset] = self.regular[offset]
            self._codes[BACKGROUND_START + offset] = self.regular[offset]
            self._codes[HIGH_INTENSITY_START + offset] = self.high_intensity[offset]
            self._codes[BACKGROUND_HIGH_INTENSITY_START + offset] = (
                self.high_intensity[offset]
            )

    def __contains__(self, code: object) -> bool:
        return code in self._codes

    def resolve(self, code: int) -> Color | None:
        """Resolve a 30-37, 40-47, 90-97, or 100-107 code.

        Args:
            code: An SGR color code.

        Returns:
            The color, or `None` if the code isn't a color code.
        """
        return self._codes.get(code)

    def resolve_256(self, code: int) -> Color:
        """Resolve an entry in the 256 color palette.

        Args:
            code: Palette index (0-255).

        Raises:
            ValueError: If the index is out of range.

        Returns:
            The palette color.
        """
        if not 0 <= code <= 255:
            raise ValueError(f"256 color index out of range; found {code!r}")
        if code < 8:
            return self.regular[code]
        if code < 16:
            return self.high_intensity[code - 8]
        if code < 232:
            cube = code - 16
            return Color(
                CUBE_LEVELS[cube // 36 % 6],
                CUBE_LEVELS[cube // 6 % 6],
                CUBE_LEVELS[cube % 6],
            )
        level = code - 232
        gray = level * 10 + level
        return Color(gray, gray, gray)

    @classmethod
    def resolve_truecolor(cls, red: int, green: int, blue: int) -> Color | None:
        """Build a color from 24 bit components, or `None` if any are out of range."""
        if all(0 <= component <= 255 for component in (red, green, blue)):
            return Color(red, green, blue)
        return None

    @classmethod
    def name_to_code(cls, name: str) -> int | None:
        """Get the foreground code for a color name (e.g. "Red" or "Light Red")."""
        if name in COLOR_NAMES:
            return REGULAR_START + COLOR_NAMES.index(name)
        if name in HIGH_INTENSITY_NAMES:
            return HIGH_INTENSITY_START + HIGH_INTENSITY_NAMES.index(name)
        return None

    @classmethod
    def name_to_background_code(cls, name: str) -> int | None:
        """Get the background code for a color name."""
        if (code := cls.name_to_code(name)) is None:
            return None
        return code + BACKGROUND_SHIFT

    def color_for_name(self, name: str) -> Color | None:
        if (code := self.name_to_code(name)) is None:
            return None
        return self._codes[code]

    def background_color_for_name(self, name: str) -> Color | None:
        if (code := self.name_to_background_code(name)) is None:
            return None
        return self._codes[code]


DEFAULT_COLOR_TABLE = ColorTable()
"""Shared table, used wherever a table isn't supplied explicitly."""
