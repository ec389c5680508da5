"""Typing state: positions into the chapter text and the keystroke tracker."""

from bisect import bisect_left
from dataclasses import dataclass


@dataclass(frozen=True, order=True)
class TextPosition:
    """A position in a text, counted both in UTF-8 bytes and in characters.

    Both offsets advance together, so ordering by the pair is the same as
    ordering by either one.
    """
    byte_offset: int = 0
    char_offset: int = 0

    @classmethod
    def of(cls, text: str) -> "TextPosition":
        """Return the length of ``text`` as a position."""
        return cls(len(text.encode("utf-8")), len(text))

    def __add__(self, other: "TextPosition") -> "TextPosition":
        return TextPosition(self.byte_offset + other.byte_offset,
                            self.char_offset + other.char_offset)

    def __sub__(self, other: "TextPosition") -> "TextPosition":
        return TextPosition(self.byte_offset - other.byte_offset,
                            self.char_offset - other.char_offset)


# Typed characters that stand in for typographic variants in the text
_ALTERNATIVES = {
    "'": ("‘", "’"),
    '"': ("“", "”"),
    " ": (" ",),
}


def chars_match(expected: str, typed: str) -> bool:
    """Return True if ``typed`` is an acceptable keystroke for ``expected``."""
    if expected == typed:
        return True
    return expected in _ALTERNATIVES.get(typed, ())


class TypingTracker:
    """Tracks what the user typed against the canonical chapter text.

    Every accepted keystroke consumes exactly one canonical character,
    whether or not it matched, so the typed buffer and the cursor always
    hold the same number of characters. None of the operations can fail:
    at the start or end of the text they simply do nothing.
    """

    def __init__(self, text: str):
        self._text = text
        self._typed: list[str] = []
        self._cursor = TextPosition()
        self._previous_cursor = TextPosition()
        self._errors: list[TextPosition] = []
        self._deleted_errors: list[TextPosition] = []

    @property
    def text(self) -> str:
        return self._text

    @property
    def typed(self) -> str:
        return "".join(self._typed)

    @property
    def cursor(self) -> TextPosition:
        return self._cursor

    @property
    def previous_cursor(self) -> TextPosition:
        """Cursor before the most recent mutation."""
        return self._previous_cursor

    @property
    def errors(self) -> tuple[TextPosition, ...]:
        return tuple(self._errors)

    @property
    def deleted_errors(self) -> tuple[TextPosition, ...]:
        """Errors removed by the most recent backspace or word delete."""
        return tuple(self._deleted_errors)

    @property
    def is_finished(self) -> bool:
        return self._cursor.char_offset >= len(self._text)

    @property
    def last_error(self):
        return self._errors[-1] if self._errors else None

    def errors_between(self, start: int, end: int) -> list[TextPosition]:
        """Return recorded errors with a char offset in ``[start, end)``."""
        lo = bisect_left(self._errors, start, key=lambda p: p.char_offset)
        hi = bisect_left(self._errors, end, lo, key=lambda p: p.char_offset)
        return self._errors[lo:hi]

    def push(self, c: str):
        """Accept one typed character at the cursor."""
        if self.is_finished:
            return
        goal = self._text[self._cursor.char_offset]
        self._typed.append(c)
        if not chars_match(goal, c):
            self._errors.append(self._cursor)
        self._previous_cursor = self._cursor
        self._cursor = self._cursor + TextPosition.of(goal)

    def pop(self):
        """Undo the most recent keystroke (backspace)."""
        if not self._typed:
            return
        goal = self._text[self._cursor.char_offset - 1]
        self._delete_backwards(TextPosition.of(goal), 1)

    def delete_word_backwards(self):
        """Undo keystrokes back to the start of the previous typed word.

        The typed buffer decides where the word starts: trailing whitespace
        is consumed first, then the run of non-whitespace before it. The
        canonical text underneath is rewound by the same number of
        characters.
        """
        if not self._typed:
            return
        canonical = self._text[:self._cursor.char_offset]
        count = 0
        found_word = False
        for typed in reversed(self._typed):
            if typed.isspace():
                if found_word:
                    break
            else:
                found_word = True
            count += 1
        goal = canonical[len(canonical) - count:]
        self._delete_backwards(TextPosition.of(goal), count)

    def _delete_backwards(self, canonical_len: TextPosition, typed_len: int):
        del self._typed[len(self._typed) - typed_len:]
        self._previous_cursor = self._cursor
        self._cursor = self._cursor - canonical_len
        first_deleted = bisect_left(self._errors, self._cursor)
        self._deleted_errors = self._errors[first_deleted:]
        del self._errors[first_deleted:]

    def clear_per_update_data(self):
        """Forget per-keystroke data once a render pass has consumed it."""
        self._deleted_errors = []
