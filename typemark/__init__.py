"""Typemark - Typing practice on the text of real books."""

from .model import TextPosition, TypingTracker
from .layout import TextLayout, VirtualLine, Linebreak
from .styles import Style, StyleIndex
from .view import IncrementalRenderer

__all__ = [
    'TextPosition',
    'TypingTracker',
    'TextLayout',
    'VirtualLine',
    'Linebreak',
    'Style',
    'StyleIndex',
    'IncrementalRenderer',
]
