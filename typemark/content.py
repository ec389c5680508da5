"""Chapter content: the provider contract, text collection, and text books.

A content provider walks one chapter in document order and reports what it
finds through a callback: runs of styled text, paragraph breaks and images.
``ChapterText.collect`` buffers that walk into the canonical text the user
types, since wrapping needs the whole chapter up front.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator, Optional, Union

from .constants import TypingConstants
from .styles import Style, StyleIndex

logger = logging.getLogger(__name__)


class BookError(Exception):
    """A book could not be read."""


@dataclass(frozen=True)
class Text:
    style: Style
    text: str


@dataclass(frozen=True)
class Linebreak:
    pass


@dataclass(frozen=True)
class Image:
    pass


Content = Union[Text, Linebreak, Image]


class ContentProvider(ABC):
    """A book that can replay a chapter as content events."""

    @property
    @abstractmethod
    def title(self) -> str:
        pass

    @abstractmethod
    def chapter_titles(self) -> list[str]:
        """Titles of the chapters, in reading order."""

    @abstractmethod
    def traverse(self, index: int, callback: Callable[[Content], None]) -> str:
        """Emit the content of chapter ``index`` in document order.

        Returns:
            The chapter title
        """


@dataclass
class ChapterText:
    """Canonical text of a chapter plus the styles of its runs."""
    title: str
    text: str
    styles: StyleIndex

    @classmethod
    def collect(cls, provider: ContentProvider, index: int) -> "ChapterText":
        builder = _ChapterTextBuilder()
        title = provider.traverse(index, builder.add)
        text, ranges = builder.finish()
        logger.info(f"Collected chapter {index} ({title!r}): {len(text)} chars, "
                    f"{len(ranges)} styled runs")
        return cls(title, text, StyleIndex.from_ranges(ranges))


def normalize_punctuation(text: str) -> str:
    for char, replacement in TypingConstants.TYPOGRAPHIC_REPLACEMENTS:
        if char in text:
            text = text.replace(char, replacement)
    return text


@dataclass
class _ChapterTextBuilder:
    """Accumulates content events into text and (style, start, end) ranges."""
    chunks: list[str] = field(default_factory=list)
    length: int = 0
    ranges: list[list] = field(default_factory=list)

    def add(self, content: Content):
        if isinstance(content, Text):
            text = normalize_punctuation(content.text)
            if content.style and text:
                self._extend_range(content.style, self.length, self.length + len(text))
            self._append(text)
        elif isinstance(content, Linebreak):
            self._rstrip()
            self._append("\n")
        elif isinstance(content, Image):
            self._append(TypingConstants.IMAGE_PLACEHOLDER)

    def _append(self, text: str):
        if text:
            self.chunks.append(text)
            self.length += len(text)

    def _extend_range(self, style: Style, start: int, end: int):
        if self.ranges and self.ranges[-1][0] == style and self.ranges[-1][2] == start:
            self.ranges[-1][2] = end
        else:
            self.ranges.append([style, start, end])

    def _rstrip(self):
        while self.chunks:
            last = self.chunks[-1]
            stripped = last.rstrip()
            if stripped:
                self.chunks[-1] = stripped
                self.length -= len(last) - len(stripped)
                break
            self.chunks.pop()
            self.length -= len(last)
        self._clip(0, self.length)

    def _clip(self, start: int, end: int):
        """Keep only the parts of the ranges inside ``[start, end)``, shifted by -start."""
        clipped = []
        for style, s, e in self.ranges:
            s, e = max(s, start), min(e, end)
            if s < e:
                clipped.append([style, s - start, e - start])
        self.ranges = clipped

    def finish(self) -> tuple[str, list[tuple[Style, int, int]]]:
        raw = "".join(self.chunks)
        text = raw.strip()
        leading = len(raw) - len(raw.lstrip())
        self._clip(leading, leading + len(text))
        return text, [(style, s, e) for style, s, e in self.ranges]


# --- Plain-text books ------------------------------------------------------

_HEADING = re.compile(TypingConstants.HEADING_PATTERN, re.IGNORECASE)
_ILLUSTRATION = re.compile(TypingConstants.ILLUSTRATION_PATTERN, re.IGNORECASE | re.DOTALL)


def parse_overstrike(text: str) -> Iterator[tuple[Style, str]]:
    """Split overstruck text into styled runs.

    ``c\\bc`` is bold and ``_\\bc`` underlined; underlining is how
    typescripts mark italics, so it maps to ``Style.ITALIC``.
    """
    run: list[str] = []
    run_style = Style.NONE
    i = 0
    while i < len(text):
        ch = text[i]
        style = Style.NONE
        if ch == '_' and i + 2 < len(text) and text[i + 1] == '\b':
            ch = text[i + 2]
            style = Style.ITALIC
            i += 3
            if i + 1 < len(text) and text[i] == '\b' and text[i + 1] == ch:
                style |= Style.BOLD
                i += 2
        elif i + 2 < len(text) and text[i + 1] == '\b' and text[i + 2] == ch:
            style = Style.BOLD
            i += 3
        else:
            i += 1
        if style != run_style and run:
            yield run_style, ''.join(run)
            run = []
        run_style = style
        run.append(ch)
    if run:
        yield run_style, ''.join(run)


def _plain(text: str) -> str:
    return ''.join(chunk for _, chunk in parse_overstrike(text))


@dataclass
class _Chapter:
    title: str
    paragraphs: list[str]


class TextBook(ContentProvider):
    """A UTF-8 plain-text book.

    Chapters are separated by form feeds or start at heading lines such as
    "Chapter 3" or "BOOK II". Paragraphs are separated by blank lines; the
    lines of a paragraph are joined with spaces. Overstrike sequences mark
    bold and italic text.
    """

    def __init__(self, path: Union[str, Path], title: Optional[str] = None):
        self.path = Path(path)
        try:
            raw = self.path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            raise BookError(f"Cannot read {self.path}: {e}") from e
        self._title = title or self.path.stem.replace('_', ' ')
        self._chapters = self._split_chapters(raw)
        logger.info(f"Loaded {self.path} with {len(self._chapters)} chapters")

    @property
    def title(self) -> str:
        return self._title

    def chapter_titles(self) -> list[str]:
        return [chapter.title for chapter in self._chapters]

    @staticmethod
    def _paragraphs(raw: str) -> list[str]:
        paragraphs = []
        for block in re.split(r'\n[ \t]*\n', raw.replace('\r\n', '\n')):
            lines = [line.replace('\t', ' ').rstrip() for line in block.split('\n')]
            lines = [line for line in lines if line.strip()]
            if not lines:
                continue
            # Keep the first line's indentation; it marks centered lines
            paragraphs.append(' '.join([lines[0]] + [line.strip() for line in lines[1:]]))
        return paragraphs

    @staticmethod
    def _is_heading(paragraph: str) -> bool:
        plain = _plain(paragraph).strip()
        return len(plain) <= TypingConstants.HEADING_MAX_LENGTH and bool(_HEADING.match(plain))

    def _split_chapters(self, raw: str) -> list[_Chapter]:
        chapters: list[_Chapter] = []
        for section in raw.split('\f'):
            current: Optional[_Chapter] = None
            for paragraph in self._paragraphs(section):
                if self._is_heading(paragraph) or current is None:
                    title = _plain(paragraph).strip()
                    if not self._is_heading(paragraph):
                        title = title[:40]
                    current = _Chapter(title, [])
                    chapters.append(current)
                current.paragraphs.append(paragraph)
        if not chapters:
            chapters.append(_Chapter(self._title, []))
        return chapters

    def traverse(self, index: int, callback: Callable[[Content], None]) -> str:
        try:
            chapter = self._chapters[index]
        except IndexError:
            raise BookError(f"{self.path} has no chapter {index + 1}") from None
        for paragraph in chapter.paragraphs:
            plain = _plain(paragraph)
            if _ILLUSTRATION.match(plain.strip()):
                callback(Image())
                callback(Linebreak())
                continue
            extra = Style.NONE
            if self._is_heading(paragraph):
                extra = Style.BOLD | Style.CENTER
            elif len(plain) - len(plain.lstrip()) >= TypingConstants.CENTER_INDENT:
                extra = Style.CENTER
            first = True
            for style, run in parse_overstrike(paragraph):
                if first:
                    run = run.lstrip()
                    first = False
                callback(Text(style | extra, run))
            callback(Linebreak())
        return chapter.title


def find_books(directory: Union[str, Path]) -> list[Path]:
    """Plain-text books in ``directory``, sorted by name."""
    directory = Path(directory)
    if not directory.is_dir():
        return []
    return sorted(p for p in directory.iterdir()
                  if p.is_file() and p.suffix == TypingConstants.BOOK_SUFFIX)
