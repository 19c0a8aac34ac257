"""Unified logging style constants."""


class LogStyle:
    """Separators and symbols shared by every log block."""

    # Session headers
    HEAVY = "━" * 80

    # Major sections
    DOUBLE = "═" * 80

    # Subsections
    LIGHT = "─" * 80

    ARROW = "»"
    BULLET = "•"
    WARNING = "⚠"
    SUCCESS = "✓"

    INDENT = "  "
    DOUBLE_INDENT = "    "
