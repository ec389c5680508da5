"""Test the style index over chapter text."""

from typemark.styles import Style, StyleIndex


def test_empty_index_is_plain():
    styles = StyleIndex.empty()
    assert styles.style_at(0) == Style.NONE
    assert list(styles.iter(0, 5)) == [(Style.NONE, 5)]


def test_gaps_between_ranges_are_plain():
    styles = StyleIndex.from_ranges([(Style.BOLD, 2, 4), (Style.ITALIC, 6, 8)])
    assert [styles.style_at(i) for i in range(10)] == [
        Style.NONE, Style.NONE, Style.BOLD, Style.BOLD, Style.NONE,
        Style.NONE, Style.ITALIC, Style.ITALIC, Style.NONE, Style.NONE]


def test_iter_tiles_requested_range():
    styles = StyleIndex.from_ranges([(Style.BOLD, 2, 4), (Style.ITALIC, 6, 8)])
    runs = list(styles.iter(1, 7))
    assert runs == [(Style.NONE, 1), (Style.BOLD, 2), (Style.NONE, 2), (Style.ITALIC, 1)]
    assert sum(length for _, length in runs) == 6


def test_iter_empty_range():
    styles = StyleIndex.from_ranges([(Style.BOLD, 0, 3)])
    assert list(styles.iter(2, 2)) == []


def test_adjacent_equal_styles_merge():
    styles = StyleIndex.from_ranges([(Style.BOLD, 0, 2), (Style.BOLD, 2, 4)])
    assert len(styles) == 2
    assert list(styles.iter(0, 6)) == [(Style.BOLD, 4), (Style.NONE, 2)]


def test_empty_ranges_are_skipped():
    styles = StyleIndex.from_ranges([(Style.ITALIC, 3, 3), (Style.BOLD, 3, 5)])
    assert styles.style_at(3) == Style.BOLD
    assert styles.style_at(2) == Style.NONE


def test_combined_flags():
    bold_center = Style.BOLD | Style.CENTER
    styles = StyleIndex.from_ranges([(bold_center, 0, 9)])
    assert styles.style_at(4) == bold_center
    assert styles.style_at(4) & Style.BOLD
    assert not styles.style_at(4) & Style.ITALIC
