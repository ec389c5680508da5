"""Constants and configuration for the typemark typing trainer."""


class TypingConstants:
    """Central configuration constants for the trainer."""

    # Layout
    DEFAULT_WIDTH = 80  # Wrap width used when no setting or option is given
    MIN_WIDTH = 20  # Narrowest wrap width accepted from settings or the CLI
    PARAGRAPH_TERMINATOR = " "  # Glyph drawn for a paragraph break

    # Chapter text collection
    TYPOGRAPHIC_REPLACEMENTS = (("—", "--"), ("…", " ... "))
    IMAGE_PLACEHOLDER = "img"

    # Plain-text books
    BOOK_SUFFIX = ".txt"
    BOOKS_DIRNAME = "books"  # Default books directory, under the home directory
    HEADING_PATTERN = (
        r"^\s*(chapter|book|part)\s+"
        r"(\d+|[ivxlcdm]+|one|two|three|four|five|six|seven|eight|nine|ten"
        r"|eleven|twelve|thirteen|fourteen|fifteen|sixteen|seventeen"
        r"|eighteen|nineteen|twenty)\b"
    )
    HEADING_MAX_LENGTH = 72
    CENTER_INDENT = 8  # Leading spaces that mark a single-line paragraph as centered
    ILLUSTRATION_PATTERN = r"^\[(illustration|image)\b.*\]$"

    # Chapter selection screen
    MENU_TITLE_ROWS = 2  # Rows reserved above the chapter list

    # Status messages
    FINISHED_MESSAGE = "Chapter complete: {} errors. Esc for chapters."
    NO_BOOK_MESSAGE = "No book given and none found in {}"
