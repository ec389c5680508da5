"""Command pattern mapping key events to typing actions."""

from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple, TYPE_CHECKING

from .keyboard import KeyType

if TYPE_CHECKING:
    from .keyboard import KeyEvent
    from .model import TypingTracker


class TypingCommand(ABC):
    """Base class for commands that act on the typing tracker."""

    @abstractmethod
    def execute(self, tracker: 'TypingTracker', key_event: 'KeyEvent') -> bool:
        """Execute the command.

        Returns:
            True if the key was consumed and the view needs a render pass
        """


class InsertCharCommand(TypingCommand):
    def execute(self, tracker, key_event):
        char = key_event.value
        # Filter out control characters
        if len(char) != 1 or (ord(char) < 32 and char != '\t'):
            return False
        tracker.push(char)
        return True


class NewlineCommand(TypingCommand):
    def execute(self, tracker, key_event):
        tracker.push('\n')
        return True


class BackspaceCommand(TypingCommand):
    def execute(self, tracker, key_event):
        tracker.pop()
        return True


class DeleteWordCommand(TypingCommand):
    def execute(self, tracker, key_event):
        tracker.delete_word_backwards()
        return True


class CommandRegistry:
    """Registry for mapping key combinations to commands."""

    def __init__(self):
        self._commands: Dict[Tuple[KeyType, str], TypingCommand] = {}
        self._insert = InsertCharCommand()
        self._setup_default_commands()

    def _setup_default_commands(self):
        """Set up the default command mappings."""
        self.register((KeyType.SPECIAL, 'enter'), NewlineCommand())
        self.register((KeyType.SPECIAL, 'backspace'), BackspaceCommand())
        # Terminals send Ctrl-H for Ctrl-Backspace; Ctrl-W is the readline binding
        delete_word = DeleteWordCommand()
        self.register((KeyType.CTRL, 'w'), delete_word)
        self.register((KeyType.CTRL, 'h'), delete_word)
        self.register((KeyType.CTRL, 'backspace'), delete_word)
        self.register((KeyType.ALT, 'backspace'), delete_word)

    def register(self, key: Tuple[KeyType, str], command: TypingCommand):
        """Register a command for a key combination."""
        self._commands[key] = command

    def get_command(self, key_type: KeyType, value: str) -> Optional[TypingCommand]:
        return self._commands.get((key_type, value))

    def execute(self, tracker: 'TypingTracker', key_event: 'KeyEvent') -> bool:
        """Execute the command for the given key event.

        Returns:
            True if the event changed (or tried to change) the tracker
        """
        command = self.get_command(key_event.key_type, key_event.value)
        if command:
            return command.execute(tracker, key_event)
        if key_event.key_type == KeyType.REGULAR:
            return self._insert.execute(tracker, key_event)
        return False
