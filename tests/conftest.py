"""Shared fixtures: an in-memory screen that emulates a terminal grid."""

import pytest

from typemark.styles import Style
from typemark.terminal import Screen


class RecordingScreen(Screen):
    """Screen that keeps a character grid and counts the calls made on it.

    Each cell holds ``(char, attribute)`` where the attribute is a Style,
    ``'error'`` or ``'reverse'``. Scrolling moves rows like a terminal does.
    Keys queued with ``add_keys`` are returned by ``get_key``.
    """

    def __init__(self, width=20, height=6):
        self._width = width
        self._height = height
        self.grid = self._blank_grid()
        self.y = 0
        self.x = 0
        self.attr = Style.NONE
        self.cursor_visible = True
        self.calls = []
        self.setup_count = 0
        self.cleanup_count = 0
        self.keys = []

    def _blank_row(self):
        return [(' ', Style.NONE) for _ in range(self._width)]

    def _blank_grid(self):
        return [self._blank_row() for _ in range(self._height)]

    @property
    def width(self):
        return self._width

    @property
    def height(self):
        return self._height

    def setup(self):
        self.setup_count += 1
        self.calls.append('setup')

    def cleanup(self):
        self.cleanup_count += 1
        self.calls.append('cleanup')

    def clear(self):
        self.calls.append('clear')
        self.grid = self._blank_grid()

    def hide_cursor(self):
        self.cursor_visible = False

    def show_cursor(self):
        self.cursor_visible = True

    def move_to(self, y, x):
        self.y, self.x = y, x

    def scroll_up(self, rows):
        self.calls.append(('scroll_up', rows))
        self.grid = self.grid[rows:] + [self._blank_row() for _ in range(rows)]

    def scroll_down(self, rows):
        self.calls.append(('scroll_down', rows))
        self.grid = [self._blank_row() for _ in range(rows)] + self.grid[:-rows]

    def set_style(self, style):
        self.attr = Style(style)

    def set_error_style(self):
        self.attr = 'error'

    def set_reverse(self):
        self.attr = 'reverse'

    def reset_attributes(self):
        self.attr = Style.NONE

    def write(self, text):
        self.calls.append(('write', text))
        for ch in text:
            if 0 <= self.y < self._height and 0 <= self.x < self._width:
                self.grid[self.y][self.x] = (ch, self.attr)
            self.x += 1

    def flush(self):
        pass

    # Input side, used through KeyboardHandler

    def add_keys(self, *keys):
        self.keys.extend(keys)

    def get_key(self, timeout=None):
        if not self.keys:
            raise AssertionError("test ran out of keys")
        key = self.keys.pop(0)
        if isinstance(key, BaseException):
            raise key
        return key

    # Helpers for assertions

    def row_text(self, y):
        return ''.join(ch for ch, _ in self.grid[y])

    def attr_at(self, y, x):
        return self.grid[y][x][1]

    def count(self, name):
        return sum(1 for call in self.calls if call == name or
                   (isinstance(call, tuple) and call[0] == name))


@pytest.fixture
def make_screen():
    """Factory for RecordingScreen instances of a given size."""
    def factory(width=20, height=6):
        return RecordingScreen(width, height)
    return factory
