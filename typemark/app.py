"""Main controller: chapter selection and the typing loop."""

import logging
import signal
from typing import Optional

from .chapters import ChapterSelector, SelectionAction
from .constants import TypingConstants
from .content import ChapterText, ContentProvider
from .keyboard import KeyboardHandler, KeyEvent, KeyType
from .terminal import TerminalInterface
from .view import IncrementalRenderer

logger = logging.getLogger(__name__)


class TypingApp:
    """Runs a typing session over the chapters of one book.

    One blocking key read per iteration, then exactly one tracker mutation
    and one render pass. The terminal is restored on every way out of
    ``run``: normal quit, errors, Ctrl-C and SIGTERM.

    The app holds the terminal for the whole run, across the chapter list
    and every chapter, so chapter sessions are started with a full render
    instead of ``IncrementalRenderer.enter``.
    """

    def __init__(self, book: ContentProvider, width: int = TypingConstants.DEFAULT_WIDTH,
                 terminal: Optional[TerminalInterface] = None):
        self.book = book
        self.width = width
        self.terminal = terminal or TerminalInterface()
        self.keyboard = KeyboardHandler(self.terminal)
        self.selector = ChapterSelector(book.chapter_titles(), book.title)
        self.renderer: Optional[IncrementalRenderer] = None
        self.running = False

    def _handle_sigterm(self, signum, frame):
        """Turn SIGTERM into SystemExit so cleanup handlers run."""
        del frame  # Unused
        raise SystemExit(128 + signum)

    def run(self, chapter: Optional[int] = None):
        """Run until the user quits.

        Args:
            chapter: Chapter index to open directly instead of showing the list
        """
        original_term_handler = signal.signal(signal.SIGTERM, self._handle_sigterm)
        self.running = True
        try:
            with self.terminal:
                if chapter is None:
                    self.selector.render(self.terminal)
                else:
                    self.open_chapter(chapter)
                while self.running:
                    key_event = self.keyboard.get_key_event()
                    if key_event:
                        self._handle_key_event(key_event)
        except KeyboardInterrupt:
            logger.info("Interrupted")
        finally:
            signal.signal(signal.SIGTERM, original_term_handler)
            self.running = False

    def open_chapter(self, index: int):
        """Start typing chapter ``index``; the first frame is a full repaint."""
        chapter = ChapterText.collect(self.book, index)
        self.selector.selected = index
        self.renderer = IncrementalRenderer.for_chapter(
            chapter.text, chapter.styles, self.terminal.width, self.terminal.height, self.width)
        self.renderer.render(self.terminal)

    def close_chapter(self):
        self.renderer = None
        self.selector.render(self.terminal)

    def _handle_key_event(self, key_event: KeyEvent):
        if self.renderer is None:
            self._handle_selector_key(key_event)
            return

        if key_event.key_type == KeyType.SPECIAL and key_event.value == 'escape':
            self.close_chapter()
            return
        if key_event.key_type == KeyType.CTRL and key_event.value == 'q':
            self.running = False
            return

        if self.renderer.handle_input(key_event):
            self.renderer.render(self.terminal)
            tracker = self.renderer.tracker
            if tracker.is_finished:
                self.renderer.show_message(
                    self.terminal, TypingConstants.FINISHED_MESSAGE.format(len(tracker.errors)))

    def _handle_selector_key(self, key_event: KeyEvent):
        page_size = max(1, self.terminal.height - TypingConstants.MENU_TITLE_ROWS - 1)
        selection = self.selector.handle_key(key_event, page_size=page_size)
        if selection.action == SelectionAction.CONFIRM:
            self.open_chapter(selection.index)
        elif selection.action == SelectionAction.CANCEL:
            self.running = False
        elif selection.action == SelectionAction.MOVED:
            self.selector.render(self.terminal)
