"""Text styles and the per-chapter style index."""

from bisect import bisect_right
from enum import IntFlag
from typing import Iterable, Iterator


class Style(IntFlag):
    """Style bit flags attached to runs of chapter text."""
    NONE = 0
    ITALIC = 1
    BOLD = 2
    CENTER = 4


class StyleIndex:
    """Interval map from char ranges of a chapter to style bitmasks.

    Runs are stored as parallel lists: run ``i`` covers
    ``[starts[i], starts[i + 1])`` and the last run extends to the end of
    the text. Text not covered by any input range is plain.
    """

    def __init__(self, starts: list[int], styles: list[Style]):
        self._starts = starts
        self._styles = styles

    @classmethod
    def from_ranges(cls, ranges: Iterable[tuple[Style, int, int]]) -> "StyleIndex":
        """Compile ``(style, start, end)`` ranges given in text order.

        Adjacent runs with the same style are merged. Ranges must not
        overlap; that is the caller's contract.
        """
        starts = [0]
        styles = [Style.NONE]
        covered = 0  # End of the last range added
        for style, start, end in ranges:
            if end <= start:
                continue
            style = Style(style)
            if start > covered and styles[-1] != Style.NONE:
                # Gap between ranges is plain text
                starts.append(covered)
                styles.append(Style.NONE)
            if style != styles[-1]:
                if starts[-1] == start:
                    styles[-1] = style
                else:
                    starts.append(start)
                    styles.append(style)
            covered = end
        if styles[-1] != Style.NONE:
            starts.append(covered)
            styles.append(Style.NONE)
        # Replacing a zero-length run can leave equal neighbours behind
        merged_starts = [starts[0]]
        merged_styles = [styles[0]]
        for start, style in zip(starts[1:], styles[1:]):
            if style == merged_styles[-1]:
                continue
            merged_starts.append(start)
            merged_styles.append(style)
        return cls(merged_starts, merged_styles)

    @classmethod
    def empty(cls) -> "StyleIndex":
        return cls([0], [Style.NONE])

    def __len__(self):
        """Number of compiled runs, including the plain tail."""
        return len(self._starts)

    def style_at(self, offset: int) -> Style:
        return self._styles[bisect_right(self._starts, offset) - 1]

    def iter(self, start: int, end: int) -> Iterator[tuple[Style, int]]:
        """Yield ``(style, length)`` runs that exactly tile ``[start, end)``."""
        i = bisect_right(self._starts, start) - 1
        pos = start
        while pos < end:
            if i + 1 < len(self._starts):
                run_end = min(self._starts[i + 1], end)
            else:
                run_end = end
            yield self._styles[i], run_end - pos
            pos = run_end
            i += 1
