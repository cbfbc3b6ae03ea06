from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Sequence, TypeAlias

from textual import log

from termtext.colors import DEFAULT_COLOR_TABLE, ColorTable

ESCAPE = "\x1b"
CSI_INTRODUCER = "["
DIGITS = frozenset("0123456789")
SEPARATORS = frozenset(";:")


# Color tokens: a single resolved SGR operation.


@dataclass(frozen=True, slots=True)
class Regular:
    """Foreground color, 30-37."""

    code: int

    @property
    def escape(self) -> str:
        return f"\x1b[{self.code}m"


@dataclass(frozen=True, slots=True)
class Background:
    """Background color, 40-47."""

    code: int

    @property
    def escape(self) -> str:
        return f"\x1b[{self.code}m"


@dataclass(frozen=True, slots=True)
class HighIntensity:
    """High intensity foreground color, 90-97."""

    code: int

    @property
    def escape(self) -> str:
        return f"\x1b[{self.code}m"


@dataclass(frozen=True, slots=True)
class BackgroundHighIntensity:
    """High intensity background color, 100-107."""

    code: int

    @property
    def escape(self) -> str:
        return f"\x1b[{self.code}m"


@dataclass(frozen=True, slots=True)
class TrueColorFg:
    red: int
    green: int
    blue: int

    @property
    def escape(self) -> str:
        return f"\x1b[38;2;{self.red};{self.green};{self.blue}m"


@dataclass(frozen=True, slots=True)
class TrueColorBg:
    red: int
    green: int
    blue: int

    @property
    def escape(self) -> str:
        return f"\x1b[48;2;{self.red};{self.green};{self.blue}m"


@dataclass(frozen=True, slots=True)
class ResetFg:
    @property
    def escape(self) -> str:
        return "\x1b[39m"


@dataclass(frozen=True, slots=True)
class ResetBg:
    @property
    def escape(self) -> str:
        return "\x1b[49m"


@dataclass(frozen=True, slots=True)
class Reset:
    @property
    def escape(self) -> str:
        return "\x1b[0m"


@dataclass(frozen=True, slots=True)
class Bold:
    @property
    def escape(self) -> str:
        return "\x1b[1m"


@dataclass(frozen=True, slots=True)
class Italic:
    @property
    def escape(self) -> str:
        return "\x1b[3m"


ColorToken: TypeAlias = (
    Regular
    | Background
    | HighIntensity
    | BackgroundHighIntensity
    | TrueColorFg
    | TrueColorBg
    | ResetFg
    | ResetBg
    | Reset
    | Bold
    | Italic
)


# Commands: the structural (or attribute) effect of one escape sequence.


@dataclass(frozen=True, slots=True)
class CursorUp:
    count: int = 1


@dataclass(frozen=True, slots=True)
class CursorDown:
    count: int = 1


@dataclass(frozen=True, slots=True)
class CursorLeft:
    count: int = 1


@dataclass(frozen=True, slots=True)
class CursorRight:
    count: int = 1


@dataclass(frozen=True, slots=True)
class CursorColumn:
    """Move to an absolute column (1 based)."""

    column: int = 1


@dataclass(frozen=True, slots=True)
class CursorRow:
    """Move to an absolute row (1 based)."""

    row: int = 1


@dataclass(frozen=True, slots=True)
class ClearToEndOfLine:
    pass


@dataclass(frozen=True, slots=True)
class ClearToStartOfLine:
    pass


@dataclass(frozen=True, slots=True)
class ClearLine:
    pass


@dataclass(frozen=True, slots=True)
class ClearScrollback:
    pass


@dataclass(frozen=True, slots=True)
class ScrollUp:
    lines: int = 1


@dataclass(frozen=True, slots=True)
class ScrollDown:
    lines: int = 1


@dataclass(frozen=True, slots=True)
class SGR:
    """A style change, stored in the line rather than applied immediately."""

    token: ColorToken


@dataclass(frozen=True, slots=True)
class Char:
    """A character from an unrecognized escape, to be written literally."""

    character: str


Command: TypeAlias = (
    CursorUp
    | CursorDown
    | CursorLeft
    | CursorRight
    | CursorColumn
    | CursorRow
    | ClearToEndOfLine
    | ClearToStartOfLine
    | ClearLine
    | ClearScrollback
    | ScrollUp
    | ScrollDown
    | SGR
    | Char
)

DecoderState: TypeAlias = Literal["normal", "escape", "number"]


class SequenceDecoder:
    """Decodes a single escape sequence from a stream of characters.

    The decoder is stateless between calls; each call to `decode` reads one
    sequence starting at the escape character.
    """

    def __init__(self, color_table: ColorTable = DEFAULT_COLOR_TABLE) -> None:
        self.color_table = color_table

    def decode(self, text: str, offset: int = 0) -> tuple[int, list[Command]]:
        """Decode the escape sequence at `offset`.

        Args:
            text: Text containing the sequence.
            offset: Index of the escape character.

        Returns:
            A tuple of the number of characters consumed, and the decoded commands.
                If `text` doesn't have an escape at `offset`, nothing is consumed.
        """
        consumed, commands = self.decode_partial(text, offset)
        return consumed, commands or []

    def decode_partial(
        self, text: str, offset: int = 0
    ) -> tuple[int, list[Command] | None]:
        """Decode the escape sequence at `offset`, reporting unfinished sequences.

        Args:
            text: Text containing the sequence.
            offset: Index of the escape character.

        Returns:
            A tuple of the number of characters consumed, and the decoded commands,
                or `None` in place of the commands if `text` ends before the
                sequence is complete.
        """
        state: DecoderState = "normal"
        parameters: list[int] = []
        value: int | None = None
        index = offset
        length = len(text)

        while index < length:
            character = text[index]
            match state:
                case "normal":
                    if character != ESCAPE:
                        break
                    state = "escape"
                    parameters = []
                    value = None

                case "escape":
                    index += 1
                    if character == ESCAPE:
                        # A repeated escape starts the sequence again
                        log.warning("Dropping unterminated escape")
                        continue
                    if character != CSI_INTRODUCER:
                        log.warning("Unknown escape sequence", repr(character))
                        return index - offset, [Char(character)]
                    state = "number"
                    continue

                case "number":
                    if character in DIGITS:
                        value = (value or 0) * 10 + int(character)
                    elif character in SEPARATORS:
                        parameters.append(value or 0)
                        value = 0
                    elif character == ESCAPE:
                        log.warning("Dropping unterminated escape", parameters)
                        state = "escape"
                        parameters = []
                        value = None
                    else:
                        if value is not None:
                            parameters.append(value)
                        index += 1
                        return index - offset, self.decode_final(character, parameters)

            index += 1

        if state == "normal":
            return 0, []
        return index - offset, None

    def decode_final(self, final: str, parameters: Sequence[int]) -> list[Command]:
        """Get the commands for a final byte and its parameters.

        Args:
            final: The character that terminated the sequence.
            parameters: Numeric parameters.

        Returns:
            A list of commands (may be empty).
        """
        first = parameters[0] if parameters else None
        count = first or 1

        match final:
            case "A":
                return [CursorUp(count)]
            case "B" | "E":
                return [CursorDown(count)]
            case "C":
                return [CursorRight(count)]
            case "D" | "F":
                return [CursorLeft(count)]
            case "G":
                return [CursorColumn(count)]
            case "H":
                return [CursorRow(count)]
            case "J" | "K":
                match first:
                    case None | 0:
                        return [ClearToEndOfLine()]
                    case 1:
                        return [ClearToStartOfLine()]
                    case 2:
                        return [ClearLine()]
                    case 3 if final == "J":
                        return [ClearScrollback()]
                log.warning("Unknown escape sequence", f"{first}{final}")
                return []
            case "S":
                return [ScrollUp(count)]
            case "T":
                return [ScrollDown(count)]
            case "m":
                return [SGR(token) for token in self.decode_sgr(parameters)]

        log.warning("Unknown escape sequence", f"{list(parameters)}{final}")
        return []

    def decode_sgr(self, parameters: Sequence[int]) -> list[ColorToken]:
        """Decode SGR (Select Graphic Rendition) parameters in to color tokens.

        Args:
            parameters: Parameters from an `m` sequence.

        Returns:
            Tokens in the order they should be applied.
        """
        if not parameters:
            return [Reset()]

        color_table = self.color_table
        tokens: list[ColorToken] = []
        codes = list(parameters)
        while codes:
            match codes:
                case [38 | 48 as target, 5, index, *codes]:
                    if index > 255:
                        log.warning("256 color index out of range", index)
                        continue
                    color = color_table.resolve_256(index)
                    if target == 38:
                        tokens.append(TrueColorFg(*color.rgb))
                    else:
                        tokens.append(TrueColorBg(*color.rgb))
                case [38 | 48 as target, 2, red, green, blue, *codes]:
                    if color_table.resolve_truecolor(red, green, blue) is None:
                        log.warning("True color out of range", (red, green, blue))
                        continue
                    if target == 38:
                        tokens.append(TrueColorFg(red, green, blue))
                    else:
                        tokens.append(TrueColorBg(red, green, blue))
                case [38 | 48 as target, 2 | 5 as mode, *_]:
                    log.warning("Incomplete color sequence", f"{target};{mode}")
                    codes = []
                case [38 | 48 as target, mode, *codes]:
                    log.warning("Unsupported color sequence", f"{target};{mode}")
                case [0, *codes]:
                    tokens.append(Reset())
                case [1, *codes]:
                    tokens.append(Bold())
                case [3, *codes]:
                    tokens.append(Italic())
                case [22 | 23 | 24 | 27, *codes]:
                    # Attribute "off" codes reset everything, colors included.
                    tokens.append(Reset())
                case [39, *codes]:
                    tokens.append(ResetFg())
                case [49, *codes]:
                    tokens.append(ResetBg())
                case [code, *codes]:
                    if code not in color_table:
                        log.warning("Unknown SGR parameter", code)
                    elif 30 <= code <= 37:
                        tokens.append(Regular(code))
                    elif 40 <= code <= 47:
                        tokens.append(Background(code))
                    elif 90 <= code <= 97:
                        tokens.append(HighIntensity(code))
                    else:
                        tokens.append(BackgroundHighIntensity(code))
        return tokens


DEFAULT_DECODER = SequenceDecoder()
