"""Typemark CLI entry point.

Allows running via `python -m typemark` and provides the console script
defined in `pyproject.toml`.

Usage:
    typemark [BOOK] [--width N] [--chapter N] [--save-settings] [--log FILE]
    typemark --version
    typemark --keytest
"""

from __future__ import annotations

import importlib.metadata
import logging
import os
import sys
from typing import Optional

from .constants import TypingConstants

USAGE = ("usage: typemark [BOOK] [--width N] [--chapter N] [--save-settings] "
         "[--log FILE] [--version] [--keytest]")


def get_version_string() -> str:
    try:
        return importlib.metadata.version("typemark")
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


def _escape_bytes(s: str) -> str:
    """Return a printable representation of raw key string."""
    return s.encode('unicode_escape').decode('ascii')


def run_keyboard_test() -> None:
    """Print parsed key events until ESC, to check what the terminal sends."""
    from .terminal import TerminalInterface
    from .keyboard import KeyboardHandler, KeyType

    term = TerminalInterface()
    kb = KeyboardHandler(term)
    with term:
        term.write("Keyboard test mode: press keys to see parsed events. Quit with ESC.")
        term.flush()
        row = 2
        while True:
            ev = kb.get_key_event()
            if not ev:
                continue
            if ev.key_type == KeyType.SPECIAL and ev.value == 'escape':
                break
            parts = [f"type={ev.key_type.value}", f"value={_escape_bytes(ev.value)}",
                     f"raw='{_escape_bytes(ev.raw)}'"]
            flags = [name for name, on in (('alt', ev.is_alt), ('ctrl', ev.is_ctrl)) if on]
            if flags:
                parts.append(f"flags={'+'.join(flags)}")
            if row >= term.height - 1:
                term.clear()
                row = 0
            term.move_to(row, 0)
            term.write(' '.join(parts))
            term.flush()
            row += 1


class UsageError(Exception):
    pass


def parse_args(args: list[str]) -> dict:
    """Parse command-line arguments into an options dict."""
    options: dict = {
        'book': None, 'width': None, 'chapter': None,
        'save_settings': False, 'log': os.environ.get('TYPEMARK_LOG'),
        'version': False, 'keytest': False,
    }
    it = iter(args)
    for arg in it:
        if arg in ('--version', '-V'):
            options['version'] = True
        elif arg in ('--keytest', '--keyboard-test'):
            options['keytest'] = True
        elif arg == '--save-settings':
            options['save_settings'] = True
        elif arg in ('--width', '--chapter', '--log'):
            value = next(it, None)
            if value is None:
                raise UsageError(f"{arg} needs a value")
            key = arg[2:]
            if key == 'log':
                options[key] = value
                continue
            try:
                options[key] = int(value)
            except ValueError:
                raise UsageError(f"{arg} needs a number, got {value!r}") from None
        elif arg.startswith('-'):
            raise UsageError(f"unknown option {arg}")
        elif options['book'] is None:
            options['book'] = arg
        else:
            raise UsageError(f"unexpected argument {arg!r}")
    if options['width'] is not None and options['width'] < TypingConstants.MIN_WIDTH:
        raise UsageError(f"--width must be at least {TypingConstants.MIN_WIDTH}")
    if options['chapter'] is not None and options['chapter'] < 1:
        raise UsageError("--chapter counts from 1")
    return options


def configure_logging(log_file: Optional[str]) -> None:
    # stdout and stderr belong to the fullscreen terminal, so log to a file or not at all
    if log_file:
        logging.basicConfig(
            filename=log_file,
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


def main(argv: Optional[list[str]] = None) -> int:
    try:
        options = parse_args(sys.argv[1:] if argv is None else argv)
    except UsageError as e:
        print(f"typemark: {e}\n{USAGE}", file=sys.stderr)
        return 2
    if options['version']:
        print(get_version_string())
        return 0
    configure_logging(options['log'])
    if options['keytest']:
        run_keyboard_test()
        return 0

    # Lazy imports to avoid importing UI deps for --version
    from .app import TypingApp
    from .content import BookError, TextBook, find_books
    from .settings import SettingsStore

    store = SettingsStore()
    settings = store.load()
    if options['width'] is not None:
        settings.width = options['width']
    if options['save_settings']:
        store.save(settings)

    path = options['book']
    if path is None:
        books = find_books(settings.books_dir)
        if not books:
            print(TypingConstants.NO_BOOK_MESSAGE.format(settings.books_dir), file=sys.stderr)
            return 1
        path = books[0]
    try:
        book = TextBook(path)
    except BookError as e:
        print(f"Error loading book: {e}", file=sys.stderr)
        return 1

    chapter = options['chapter']
    if chapter is not None and chapter > len(book.chapter_titles()):
        print(f"Error loading book: {path} has only {len(book.chapter_titles())} chapters",
              file=sys.stderr)
        return 1

    app = TypingApp(book, width=settings.width)
    app.run(chapter=None if chapter is None else chapter - 1)
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
