"""Word wrapping of a chapter into virtual lines."""

import re
from bisect import bisect_left, bisect_right
from dataclasses import dataclass
from enum import Enum

from .model import TextPosition

_WORD = re.compile(r"[^ ]+")


class Linebreak(Enum):
    """How a virtual line ends."""
    WRAPPED = "wrapped"  # Soft wrap inside a paragraph
    EXISTING = "existing"  # Paragraph break in the text
    EOF = "eof"


@dataclass(frozen=True)
class VirtualLine:
    """One wrapped row of chapter text.

    ``line_number`` is a row number, not an index into the line list: an
    EXISTING break takes two rows so paragraphs are separated by a blank
    row.
    """
    line_number: int
    start: TextPosition
    end: TextPosition
    separator_length: TextPosition
    linebreak: Linebreak

    @property
    def next_start(self) -> TextPosition:
        return self.end + self.separator_length


def _wrap_paragraph(paragraph: str, offset: int, width: int) -> list[tuple[int, int]]:
    """Greedily pack the words of one paragraph into ``(start, end)`` spans.

    Breaks only at spaces. Words longer than ``width`` are cut into
    ``width``-sized pieces. Leading indentation stays on the first line;
    spaces after the last word of a line belong to the separator.
    """
    spans: list[tuple[int, int]] = []
    line_start = 0
    line_end = 0
    for match in _WORD.finditer(paragraph):
        word_start, word_end = match.span()
        if word_end - line_start <= width:
            line_end = word_end
            continue
        if line_end > line_start:
            spans.append((line_start, line_end))
            line_start = word_start
        while word_end - line_start > width:
            spans.append((line_start, line_start + width))
            line_start += width
        line_end = word_end
    spans.append((line_start, line_end))
    return [(start + offset, end + offset) for start, end in spans]


def wrap_text(text: str, width: int) -> list[tuple[int, int]]:
    """Return the char spans of every wrapped line of ``text``."""
    if width < 1:
        raise ValueError(f"wrap width must be positive, got {width}")
    spans: list[tuple[int, int]] = []
    offset = 0
    for paragraph in text.split("\n"):
        spans.extend(_wrap_paragraph(paragraph, offset, width))
        offset += len(paragraph) + 1
    return spans


class TextLayout:
    """Canonical text wrapped at a fixed width into virtual lines.

    Built once per chapter; never rewrapped.
    """

    def __init__(self, text: str, width: int):
        self.text = text
        self.width = width
        self.lines = self._build_lines(text, wrap_text(text, width))
        self._starts = [line.start.char_offset for line in self.lines]
        self._line_numbers = [line.line_number for line in self.lines]

    @staticmethod
    def _build_lines(text: str, spans: list[tuple[int, int]]) -> list[VirtualLine]:
        lines: list[VirtualLine] = []
        position = TextPosition()  # Running byte/char position of the line start
        line_number = 0
        for (start, end), (next_start, _) in zip(spans, spans[1:]):
            line_len = TextPosition.of(text[start:end])
            separator = text[end:next_start]
            separator_len = TextPosition.of(separator)
            if "\n" in separator:
                linebreak = Linebreak.EXISTING
                step = 2
            else:
                linebreak = Linebreak.WRAPPED
                step = 1
            lines.append(VirtualLine(line_number, position, position + line_len,
                                     separator_len, linebreak))
            position = position + line_len + separator_len
            line_number += step
        # Last line takes the rest of the text
        tail = text[position.char_offset:]
        lines.append(VirtualLine(line_number, position, position + TextPosition.of(tail),
                                 TextPosition(), Linebreak.EOF))
        return lines

    def __len__(self):
        return len(self.lines)

    def line_text(self, line: VirtualLine) -> str:
        return self.text[line.start.char_offset:line.end.char_offset]

    def line_index_for(self, char_offset: int) -> int:
        """Index of the line containing ``char_offset``.

        A position inside a separator belongs to the line before it.
        """
        return max(bisect_right(self._starts, char_offset) - 1, 0)

    def first_line_at_or_after(self, line_number: int) -> int:
        """Index of the first line whose row number is ``>= line_number``."""
        return bisect_left(self._line_numbers, line_number)
