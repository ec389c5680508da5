"""Terminal interface using Blessed for display and Curtsies for input."""

import logging
import sys
from abc import ABC, abstractmethod
from typing import Optional, TextIO

import blessed

from .styles import Style

logger = logging.getLogger(__name__)


class Screen(ABC):
    """Drawing capability the renderer needs from a terminal.

    Output may be buffered until ``flush``. Write failures propagate as
    ``OSError``.
    """

    @property
    @abstractmethod
    def width(self) -> int:
        """Screen width in columns."""

    @property
    @abstractmethod
    def height(self) -> int:
        """Screen height in rows."""

    @abstractmethod
    def setup(self):
        """Enter the alternate screen and raw keyboard input."""

    @abstractmethod
    def cleanup(self):
        """Restore the terminal state saved by ``setup``."""

    @abstractmethod
    def clear(self):
        """Clear the whole screen."""

    @abstractmethod
    def hide_cursor(self):
        pass

    @abstractmethod
    def show_cursor(self):
        pass

    @abstractmethod
    def move_to(self, y: int, x: int):
        """Move the cursor to row ``y``, column ``x``."""

    @abstractmethod
    def scroll_up(self, rows: int):
        """Scroll the screen contents up, exposing blank rows at the bottom."""

    @abstractmethod
    def scroll_down(self, rows: int):
        """Scroll the screen contents down, exposing blank rows at the top."""

    @abstractmethod
    def set_style(self, style: Style):
        """Reset attributes, then enable those for ``style``."""

    @abstractmethod
    def set_error_style(self):
        """Reset attributes, then enable the mistyped-character attributes."""

    @abstractmethod
    def set_reverse(self):
        """Reset attributes, then enable reverse video."""

    @abstractmethod
    def reset_attributes(self):
        pass

    @abstractmethod
    def write(self, text: str):
        pass

    @abstractmethod
    def flush(self):
        pass

    def __enter__(self):
        self.setup()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.cleanup()
        return False


class TerminalInterface(Screen):
    """Handles terminal I/O using Blessed."""

    def __init__(self, terminal: Optional[blessed.Terminal] = None,
                 stream: Optional[TextIO] = None):
        """Initialize with a terminal instance (or create one)."""
        self.stream = stream or sys.stdout
        self.term = terminal or blessed.Terminal(stream=self.stream)
        self.is_fullscreen = False
        self._curtsies_input: Optional[object] = None

    def setup(self):
        """Enter fullscreen mode and raw keyboard input."""
        self._print(self.term.enter_fullscreen + self.term.hide_cursor + self.term.clear)
        self.is_fullscreen = True
        if self._curtsies_input is None:
            from curtsies import Input
            try:
                # Entering the input context switches the tty to raw mode
                self._curtsies_input = Input(keynames='curtsies')
                self._curtsies_input.__enter__()
            except BaseException:
                self._curtsies_input = None
                self.cleanup()
                raise
        self.flush()

    def cleanup(self):
        """Exit fullscreen mode and restore terminal.

        Safe to call more than once; only the first call after ``setup``
        does anything.
        """
        if self._curtsies_input is not None:
            curtsies_input, self._curtsies_input = self._curtsies_input, None
            try:
                curtsies_input.__exit__(None, None, None)
            except OSError as e:
                # The tty may already be gone when the process is torn down
                logger.warning(f"Could not restore keyboard mode: {e}")
        if self.is_fullscreen:
            self.is_fullscreen = False
            self._print(self.term.normal + self.term.normal_cursor + self.term.exit_fullscreen)
            self.flush()

    def _print(self, text: str):
        print(text, end='', file=self.stream)

    def clear(self):
        self._print(self.term.home + self.term.clear)

    def hide_cursor(self):
        self._print(self.term.hide_cursor)

    def show_cursor(self):
        self._print(self.term.normal_cursor)

    def move_to(self, y: int, x: int):
        self._print(self.term.move(y, x))

    def scroll_up(self, rows: int):
        if rows > 0:
            self._print(self.term.indn(rows))

    def scroll_down(self, rows: int):
        if rows > 0:
            self._print(self.term.rin(rows))

    def set_style(self, style: Style):
        out = self.term.normal
        if style & Style.BOLD:
            out += self.term.bold
        if style & Style.ITALIC:
            out += self.term.italic
        self._print(out)

    def set_error_style(self):
        self._print(self.term.normal + self.term.reverse + self.term.red)

    def set_reverse(self):
        self._print(self.term.normal + self.term.reverse)

    def reset_attributes(self):
        self._print(self.term.normal)

    def write(self, text: str):
        self._print(text)

    def flush(self):
        self.stream.flush()

    def get_key(self, timeout=None):
        """Get a single keypress from the user.

        Args:
            timeout: Timeout in seconds (None for blocking)

        Returns:
            The curtsies key name as a string, or None on timeout.
        """
        if self._curtsies_input is None:
            return None
        if timeout is None:
            return str(next(self._curtsies_input))
        evt = self._curtsies_input.send(timeout)
        return None if evt is None else str(evt)

    @property
    def width(self):
        """Terminal width in columns."""
        return self.term.width

    @property
    def height(self):
        """Terminal height in rows."""
        return self.term.height
