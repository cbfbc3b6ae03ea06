from termtext.ansi import SequenceDecoder
from termtext.buffer import InvalidCursorDelta, TextBuffer, TextBufferError, Viewport
from termtext.colors import ColorTable
from termtext.line import Line

__all__ = [
    "ColorTable",
    "InvalidCursorDelta",
    "Line",
    "SequenceDecoder",
    "TextBuffer",
    "TextBufferError",
    "Viewport",
]
