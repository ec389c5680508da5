"""Chapter selection screen."""

from enum import Enum
from typing import NamedTuple, Optional

from .constants import TypingConstants
from .keyboard import KeyEvent, KeyType
from .styles import Style
from .terminal import Screen


class SelectionAction(Enum):
    """What a key press did to the chapter list."""
    NONE = "none"
    MOVED = "moved"
    CONFIRM = "confirm"
    CANCEL = "cancel"


class Selection(NamedTuple):
    action: SelectionAction
    index: Optional[int] = None


class ChapterSelector:
    """Indexed list navigation over chapter titles."""

    def __init__(self, titles: list[str], book_title: str = "", selected: int = 0):
        self.titles = titles
        self.book_title = book_title
        self.selected = max(0, min(selected, len(titles) - 1))
        self.scroll_offset = 0

    def move(self, delta: int):
        if self.titles:
            self.selected = max(0, min(self.selected + delta, len(self.titles) - 1))

    def handle_key(self, key_event: KeyEvent, page_size: int = 10) -> Selection:
        """Apply a key press.

        Returns:
            The action taken; for CONFIRM, ``index`` is the chosen chapter
        """
        if key_event.key_type == KeyType.SPECIAL:
            moves = {
                'up': -1,
                'down': 1,
                'page_up': -page_size,
                'page_down': page_size,
                'home': -len(self.titles),
                'end': len(self.titles),
            }
            if key_event.value in moves:
                self.move(moves[key_event.value])
                return Selection(SelectionAction.MOVED)
            if key_event.value == 'enter' and self.titles:
                return Selection(SelectionAction.CONFIRM, self.selected)
            if key_event.value == 'escape':
                return Selection(SelectionAction.CANCEL)
        elif key_event.key_type == KeyType.CTRL:
            # Emacs-style list movement
            if key_event.value in ('p', 'n'):
                self.move(-1 if key_event.value == 'p' else 1)
                return Selection(SelectionAction.MOVED)
            if key_event.value == 'q':
                return Selection(SelectionAction.CANCEL)
        elif key_event.key_type == KeyType.REGULAR and key_event.value in ('k', 'j'):
            self.move(-1 if key_event.value == 'k' else 1)
            return Selection(SelectionAction.MOVED)
        return Selection(SelectionAction.NONE)

    def _visible_rows(self, height: int) -> int:
        return max(1, height - TypingConstants.MENU_TITLE_ROWS - 1)

    def _scroll_to_selection(self, rows: int):
        if self.selected < self.scroll_offset:
            self.scroll_offset = self.selected
        elif self.selected >= self.scroll_offset + rows:
            self.scroll_offset = self.selected - rows + 1

    def render(self, screen: Screen):
        """Draw the list with the selected chapter in reverse video."""
        width, height = screen.width, screen.height
        rows = self._visible_rows(height)
        self._scroll_to_selection(rows)

        screen.hide_cursor()
        screen.clear()
        title = self.book_title[:width]
        screen.move_to(0, max(0, (width - len(title)) // 2))
        screen.set_style(Style.BOLD)
        screen.write(title)
        screen.reset_attributes()

        visible = self.titles[self.scroll_offset:self.scroll_offset + rows]
        for i, name in enumerate(visible, start=self.scroll_offset):
            label = f"{i + 1:3}. {name}"[:max(0, width - 2)]
            screen.move_to(TypingConstants.MENU_TITLE_ROWS + i - self.scroll_offset, 2)
            if i == self.selected:
                screen.set_reverse()
                screen.write(label)
                screen.reset_attributes()
            else:
                screen.write(label)

        help_text = "Enter: type chapter  Esc: quit"
        screen.move_to(height - 1, max(0, width - len(help_text) - 1))
        screen.write(help_text[:width])
        screen.flush()