"""Incremental terminal rendering of a typing session.

The cursor always sits on the same screen row (the anchor). Each keystroke
scrolls the text under it instead, so a frame only has to draw the rows
that scrolled into view plus the characters whose error state changed.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from .commands import CommandRegistry
from .constants import TypingConstants
from .keyboard import KeyEvent
from .layout import TextLayout, VirtualLine
from .model import TextPosition, TypingTracker
from .styles import Style, StyleIndex
from .terminal import Screen

logger = logging.getLogger(__name__)

_ERROR = "error"  # Attribute key for mistyped characters


@dataclass(frozen=True)
class Viewport:
    """Screen geometry, fixed for a session."""
    screen_width: int
    screen_height: int
    anchor_column: int
    anchor_row: int
    content_width: int

    @classmethod
    def centered(cls, screen_width: int, screen_height: int, width: int) -> "Viewport":
        """Center a column of ``width`` characters, cursor on the middle row."""
        content_width = max(1, min(width, screen_width))
        return cls(
            screen_width=screen_width,
            screen_height=screen_height,
            anchor_column=screen_width // 2 - content_width // 2,
            anchor_row=screen_height // 2,
            content_width=content_width,
        )


@dataclass
class RenderState:
    previous_line_index: int = 0
    needs_full_render: bool = True


@dataclass(frozen=True)
class ScreenLine:
    """A virtual line placed on a screen row for the current frame."""
    line: VirtualLine
    row: int


class IncrementalRenderer:
    """Draws a typing session and keeps the screen in sync with the tracker."""

    def __init__(self, tracker: TypingTracker, layout: TextLayout, styles: StyleIndex,
                 viewport: Viewport, commands: Optional[CommandRegistry] = None):
        self.tracker = tracker
        self.layout = layout
        self.styles = styles
        self.viewport = viewport
        self.commands = commands or CommandRegistry()
        self.state = RenderState()

    @classmethod
    def for_chapter(cls, text: str, styles: StyleIndex, screen_width: int,
                    screen_height: int, width: int) -> "IncrementalRenderer":
        """Build tracker, layout and viewport for a chapter's text."""
        viewport = Viewport.centered(screen_width, screen_height, width)
        layout = TextLayout(text, viewport.content_width)
        logger.info(f"Laid out {len(text)} chars into {len(layout)} lines "
                    f"at width {viewport.content_width}")
        return cls(TypingTracker(text), layout, styles, viewport)

    # --- Session -------------------------------------------------------

    def enter(self, screen: Screen):
        """Take over the terminal and draw the first frame.

        For a standalone session; ``TypingApp`` keeps the terminal itself.
        """
        screen.setup()
        try:
            self.state.needs_full_render = True
            self.render(screen)
        except BaseException:
            screen.cleanup()
            raise

    def exit(self, screen: Screen):
        screen.cleanup()

    @contextmanager
    def running(self, screen: Screen):
        """Context manager around ``enter``/``exit``."""
        self.enter(screen)
        try:
            yield self
        finally:
            self.exit(screen)

    def handle_input(self, key_event: KeyEvent) -> bool:
        """Apply a key event to the tracker. Returns True if it was consumed."""
        return self.commands.execute(self.tracker, key_event)

    # --- Geometry ------------------------------------------------------

    def cursor_location(self) -> tuple[int, int]:
        """Return (line index, column within that line) of the cursor."""
        cursor = self.tracker.cursor.char_offset
        y = self.layout.line_index_for(cursor)
        return y, cursor - self.layout.lines[y].start.char_offset

    def screen_lines(self, start_row: int = 0, end_row: Optional[int] = None) -> Iterator[ScreenLine]:
        """Yield the lines that land on rows ``[start_row, end_row)``."""
        height = self.viewport.screen_height
        start_row = max(0, min(start_row, height))
        end_row = height if end_row is None else max(0, min(end_row, height))
        lines = self.layout.lines
        y, _ = self.cursor_location()
        top = lines[y].line_number - self.viewport.anchor_row
        index = self.layout.first_line_at_or_after(max(top + start_row, 0))
        end_line_number = top + end_row
        while index < len(lines) and lines[index].line_number < end_line_number:
            yield ScreenLine(lines[index], lines[index].line_number - top)
            index += 1

    def _screen_position(self, position: TextPosition) -> Optional[tuple[int, int]]:
        """Screen (row, column) of a text position, or None if off screen."""
        lines = self.layout.lines
        line = lines[self.layout.line_index_for(position.char_offset)]
        cursor_line = lines[self.cursor_location()[0]]
        row = self.viewport.anchor_row + line.line_number - cursor_line.line_number
        col = self.viewport.anchor_column + position.char_offset - line.start.char_offset
        if 0 <= row < self.viewport.screen_height and 0 <= col < self.viewport.screen_width:
            return row, col
        return None

    # --- Frames --------------------------------------------------------

    def render(self, screen: Screen):
        """Bring the screen up to date after one tracker mutation."""
        y, x = self.cursor_location()
        if self.state.needs_full_render:
            return self.full_render(screen)
        lines = self.layout.lines
        delta = lines[y].line_number - lines[self.state.previous_line_index].line_number
        rows = abs(delta)
        if rows >= self.viewport.screen_height:
            logger.debug(f"Scroll of {delta} rows does not fit the screen; repainting")
            return self.full_render(screen)

        screen.hide_cursor()
        if delta > 0:
            screen.scroll_up(rows)
            exposed = self.screen_lines(self.viewport.screen_height - rows)
        elif delta < 0:
            screen.scroll_down(rows)
            exposed = self.screen_lines(0, rows)
        else:
            exposed = iter(())
        for screen_line in exposed:
            self._render_line(screen, screen_line)
        self._render_error_delta(screen)
        self._finish_frame(screen, y, x)

    def full_render(self, screen: Screen):
        """Clear the screen and draw every visible line."""
        y, x = self.cursor_location()
        screen.hide_cursor()
        screen.clear()
        for screen_line in self.screen_lines():
            self._render_line(screen, screen_line)
        self._finish_frame(screen, y, x)

    def show_message(self, screen: Screen, message: str):
        """Show a message on the bottom row until the next frame repaints."""
        width = self.viewport.screen_width
        row = self.viewport.screen_height - 1
        text = message[:width]
        screen.hide_cursor()
        screen.move_to(row, max(0, (width - len(text)) // 2))
        screen.set_reverse()
        screen.write(text)
        screen.reset_attributes()
        screen.flush()
        # The message row scrolls with the text, so the next frame starts clean
        self.state.needs_full_render = True

    def _finish_frame(self, screen: Screen, y: int, x: int):
        col = min(self.viewport.anchor_column + x, self.viewport.screen_width - 1)
        screen.move_to(self.viewport.anchor_row, col)
        screen.show_cursor()
        screen.flush()
        self.state.previous_line_index = y
        self.state.needs_full_render = False
        self.tracker.clear_per_update_data()

    # --- Drawing -------------------------------------------------------

    def _glyph(self, char_offset: int) -> str:
        ch = self.tracker.text[char_offset]
        if ch == "\n":
            return TypingConstants.PARAGRAPH_TERMINATOR
        return " " if ch.isspace() else ch

    def _render_line(self, screen: Screen, screen_line: ScreenLine):
        """Draw a whole line with its styles and any recorded errors on it."""
        line = screen_line.line
        start = line.start.char_offset
        end = line.end.char_offset
        text = self.tracker.text
        errors = [e.char_offset for e in
                  self.tracker.errors_between(start, line.next_start.char_offset)]
        screen.move_to(screen_line.row, self.viewport.anchor_column)

        current = Style.NONE
        pos = start
        e = 0
        for style, length in self.styles.iter(start, end):
            run_end = pos + length
            while pos < run_end:
                if e < len(errors) and errors[e] < run_end:
                    if errors[e] > pos:
                        current = self._set_attributes(screen, current, style)
                        screen.write(text[pos:errors[e]])
                    current = self._set_attributes(screen, current, _ERROR)
                    screen.write(self._glyph(errors[e]))
                    pos = errors[e] + 1
                    e += 1
                else:
                    current = self._set_attributes(screen, current, style)
                    screen.write(text[pos:run_end])
                    pos = run_end
        screen.reset_attributes()

        # Errors typed over the line's separator
        for offset in errors[e:]:
            screen.move_to(screen_line.row, self.viewport.anchor_column + offset - start)
            screen.set_error_style()
            screen.write(self._glyph(offset))
            screen.reset_attributes()

    @staticmethod
    def _set_attributes(screen: Screen, current, wanted):
        if wanted == current:
            return current
        if wanted == _ERROR:
            screen.set_error_style()
        else:
            screen.set_style(wanted)
        return wanted

    def _render_error_delta(self, screen: Screen):
        """Redraw only the characters whose error state the last keystroke changed."""
        cursor = self.tracker.cursor
        previous = self.tracker.previous_cursor
        if cursor > previous:
            newest = self.tracker.last_error
            if newest is not None and newest >= previous:
                self._render_glyph(screen, newest, error=True)
        else:
            for position in self.tracker.deleted_errors:
                self._render_glyph(screen, position, error=False)

    def _render_glyph(self, screen: Screen, position: TextPosition, error: bool):
        """Draw one character as an error, or exactly as a full repaint draws it."""
        location = self._screen_position(position)
        if location is None:
            return
        offset = position.char_offset
        screen.move_to(*location)
        if error:
            screen.set_error_style()
            glyph = self._glyph(offset)
        else:
            line = self.layout.lines[self.layout.line_index_for(offset)]
            if offset < line.end.char_offset:
                screen.set_style(self.styles.style_at(offset))
                glyph = self.tracker.text[offset]
            else:
                # Separator cells are blank and unstyled in a full repaint
                screen.set_style(Style.NONE)
                glyph = " "
        screen.write(glyph)
        screen.reset_attributes()
