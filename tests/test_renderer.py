"""Test incremental rendering: scrolling, error overlays and full repaints."""

import pytest

from typemark.keyboard import KeyEvent, KeyType
from typemark.styles import Style, StyleIndex
from typemark.view import IncrementalRenderer, Viewport


def create_renderer(text, screen, width=5, styles=None):
    return IncrementalRenderer.for_chapter(
        text, styles or StyleIndex.empty(), screen.width, screen.height, width)


def key(ch):
    if ch == '\n':
        return KeyEvent(KeyType.SPECIAL, 'enter', '\r')
    if ch == '\b':
        return KeyEvent(KeyType.SPECIAL, 'backspace', '\x7f')
    return KeyEvent(KeyType.REGULAR, ch, ch)


def type_keys(renderer, screen, keys):
    for ch in keys:
        assert renderer.handle_input(key(ch))
        renderer.render(screen)


def test_viewport_centers_column():
    viewport = Viewport.centered(80, 24, 60)
    assert viewport.anchor_column == 10
    assert viewport.anchor_row == 12
    assert viewport.content_width == 60


def test_viewport_width_clamped_to_screen():
    viewport = Viewport.centered(40, 10, 80)
    assert viewport.content_width == 40
    assert viewport.anchor_column == 0


def test_first_frame_is_full_render(make_screen):
    screen = make_screen(20, 6)
    renderer = create_renderer("hello world foo", screen)
    renderer.render(screen)
    assert screen.count('clear') == 1
    # Anchor row 3, column 10 - 2
    assert screen.row_text(3)[8:13] == "hello"
    assert screen.row_text(4)[8:13] == "world"
    assert screen.row_text(5)[8:11] == "foo"
    assert (screen.y, screen.x) == (3, 8)
    assert screen.cursor_visible


def test_wrapped_line_scrolls_one_row(make_screen):
    screen = make_screen(20, 6)
    renderer = create_renderer("hello world foo", screen)
    renderer.render(screen)
    type_keys(renderer, screen, "hello ")
    assert screen.count('clear') == 1
    assert ('scroll_up', 1) in screen.calls
    assert screen.row_text(2)[8:13] == "hello"
    assert screen.row_text(3)[8:13] == "world"
    assert (screen.y, screen.x) == (3, 8)


def test_paragraph_break_scrolls_two_rows(make_screen):
    screen = make_screen(20, 6)
    renderer = create_renderer("ab\ncd", screen)
    renderer.render(screen)
    type_keys(renderer, screen, "ab\n")
    assert ('scroll_up', 2) in screen.calls
    assert screen.count('clear') == 1
    assert screen.row_text(1)[8:10] == "ab"
    assert screen.row_text(3)[8:10] == "cd"


def test_no_scroll_within_line(make_screen):
    screen = make_screen(20, 6)
    renderer = create_renderer("hello world foo", screen)
    renderer.render(screen)
    type_keys(renderer, screen, "hel")
    assert screen.count('scroll_up') == 0
    assert screen.count('clear') == 1
    assert (screen.y, screen.x) == (3, 11)


def test_error_overlay_and_removal(make_screen):
    screen = make_screen(20, 6)
    renderer = create_renderer("hello", screen)
    renderer.render(screen)
    type_keys(renderer, screen, "x")
    assert screen.grid[3][8] == ('h', 'error')
    type_keys(renderer, screen, "\b")
    assert screen.grid[3][8] == ('h', Style.NONE)
    assert renderer.tracker.deleted_errors == ()


def test_deleted_error_restores_text_style(make_screen):
    screen = make_screen(20, 6)
    styles = StyleIndex.from_ranges([(Style.BOLD, 0, 5)])
    renderer = create_renderer("hello", screen, styles=styles)
    renderer.render(screen)
    assert screen.attr_at(3, 8) == Style.BOLD
    type_keys(renderer, screen, "x\b")
    assert screen.grid[3][8] == ('h', Style.BOLD)


def test_error_on_paragraph_break_shows_terminator(make_screen):
    screen = make_screen(20, 6)
    renderer = create_renderer("ab\ncd", screen)
    renderer.render(screen)
    type_keys(renderer, screen, "ab ")
    # The mistyped newline is drawn as a highlighted space after "ab", one row up
    assert screen.grid[1][10] == (' ', 'error')


def test_exposed_line_shows_recorded_errors(make_screen):
    screen = make_screen(10, 2)
    renderer = create_renderer("ab cd ef", screen, width=2)
    renderer.render(screen)
    type_keys(renderer, screen, "xb cd ")
    # The first line has scrolled off the top
    assert "ab" not in screen.row_text(0)
    type_keys(renderer, screen, "\b")
    assert ('scroll_down', 1) in screen.calls
    assert screen.grid[0][4] == ('a', 'error')
    assert screen.grid[0][5] == ('b', Style.NONE)


def test_large_jump_triggers_full_render(make_screen):
    screen = make_screen(20, 2)
    renderer = create_renderer("ab\ncd", screen)
    renderer.render(screen)
    type_keys(renderer, screen, "ab\n")
    assert screen.count('clear') == 2
    assert screen.count('scroll_up') == 0
    assert screen.row_text(1)[8:10] == "cd"


def test_show_message_forces_full_render(make_screen):
    screen = make_screen(40, 6)
    renderer = create_renderer("abc", screen)
    renderer.render(screen)
    renderer.show_message(screen, "Done")
    assert "Done" in screen.row_text(5)
    assert renderer.state.needs_full_render
    renderer.render(screen)
    assert screen.count('clear') == 2
    assert "Done" not in screen.row_text(5)


def test_screen_lines_rows(make_screen):
    screen = make_screen(20, 6)
    renderer = create_renderer("ab\ncd\nef", screen)
    rows = [(renderer.layout.line_text(sl.line), sl.row) for sl in renderer.screen_lines()]
    assert rows == [("ab", 3), ("cd", 5)]
    assert list(renderer.screen_lines(4, 5)) == []


def test_cursor_location_after_paragraph_break(make_screen):
    screen = make_screen(20, 6)
    renderer = create_renderer("ab\ncd", screen)
    type_keys(renderer, screen, "ab")
    assert renderer.cursor_location() == (0, 2)
    type_keys(renderer, screen, "\n")
    assert renderer.cursor_location() == (1, 0)


def test_running_context_sets_up_and_cleans_up(make_screen):
    screen = make_screen(20, 6)
    renderer = create_renderer("abc", screen)
    with renderer.running(screen):
        assert screen.setup_count == 1
        assert screen.count('clear') == 1
    assert screen.cleanup_count == 1


def test_enter_cleans_up_when_first_frame_fails(make_screen):
    screen = make_screen(20, 6)
    renderer = create_renderer("abc", screen)

    def broken_clear():
        raise OSError("terminal gone")
    screen.clear = broken_clear
    with pytest.raises(OSError):
        renderer.enter(screen)
    assert screen.cleanup_count == 1


def test_control_keys_are_not_consumed(make_screen):
    screen = make_screen(20, 6)
    renderer = create_renderer("abc", screen)
    assert not renderer.handle_input(KeyEvent(KeyType.SPECIAL, 'left', '<LEFT>'))
    assert renderer.tracker.cursor.char_offset == 0


def assert_matches_full_render(renderer, screen):
    """The incremental frame must equal a full repaint of the same state."""
    fresh = type(screen)(screen.width, screen.height)
    renderer.full_render(fresh)
    assert screen.grid == fresh.grid


def test_cleared_separator_error_is_plain(make_screen):
    screen = make_screen(10, 4)
    styles = StyleIndex.from_ranges([(Style.BOLD, 0, 5)])
    renderer = create_renderer("ab cd", screen, width=2, styles=styles)
    renderer.render(screen)
    type_keys(renderer, screen, "abx")
    assert screen.grid[1][6] == (' ', 'error')
    type_keys(renderer, screen, "\b")
    assert screen.grid[2][6] == (' ', Style.NONE)
    assert_matches_full_render(renderer, screen)


def test_cleared_error_restores_nbsp(make_screen):
    screen = make_screen(20, 6)
    styles = StyleIndex.from_ranges([(Style.BOLD, 0, 3)])
    renderer = create_renderer("a\u00a0b", screen, styles=styles)
    renderer.render(screen)
    type_keys(renderer, screen, "ax")
    assert screen.grid[3][9] == (' ', 'error')
    type_keys(renderer, screen, "\b")
    assert screen.grid[3][9] == ("\u00a0", Style.BOLD)
    assert_matches_full_render(renderer, screen)


def test_backspace_over_paragraph_break_scrolls_down_two_rows(make_screen):
    screen = make_screen(20, 6)
    renderer = create_renderer("ab\ncd", screen)
    renderer.render(screen)
    type_keys(renderer, screen, "ab\n")
    type_keys(renderer, screen, "\b")
    assert ('scroll_down', 2) in screen.calls
    assert screen.count('clear') == 1
    assert screen.row_text(3)[8:10] == "ab"
    assert screen.row_text(5)[8:10] == "cd"
    assert (screen.y, screen.x) == (3, 10)
    assert_matches_full_render(renderer, screen)
