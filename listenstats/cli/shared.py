# ==============================================================================
# Shared Utilities for CLI Commands
# ==============================================================================
"""
Shared constants and helper functions used across CLI command modules.

This module provides:
- ANSI colors and status icons
- A status box renderer for `listenstats status`
- Logging setup for CLI commands
"""

import logging
import re

from listenstats.utils.config import get_settings

BOX_WIDTH = 68

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Colors:
    """ANSI color codes for terminal output."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"
    BRIGHT_RED = "\033[91m"
    BRIGHT_GREEN = "\033[92m"
    BRIGHT_YELLOW = "\033[93m"


class Icons:
    """Status icons."""

    CHECK = "✓"
    CROSS = "✗"
    OPTIONAL = "□"


C, I = Colors, Icons

_ANSI_ESCAPE_PATTERN = re.compile(r"\033\[[0-9;]*m")


def setup_logging(verbose: bool = False) -> None:
    """Configure root logging from LOG_LEVEL (DEBUG when verbose)."""
    level = "DEBUG" if verbose else get_settings().log_level.upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)


# ==============================================================================
# Status Output
# ==============================================================================


def status_badge(text: str, is_ok: bool, is_optional: bool = False) -> str:
    """Green check when ok; yellow box for optional features, red cross otherwise."""
    if is_ok:
        return f"{C.BRIGHT_GREEN}{I.CHECK} {text}{C.RESET}"
    if is_optional:
        return f"{C.BRIGHT_YELLOW}{I.OPTIONAL} {text}{C.RESET}"
    return f"{C.BRIGHT_RED}{I.CROSS} {text}{C.RESET}"


def _frame(left: str, fill: str, right: str) -> str:
    return f"{C.CYAN}{left}{fill}{right}{C.RESET}"


def _titled_rule(left: str, right: str, title: str, width: int, centered: bool) -> str:
    label = f" {title} "
    remaining = width - 2 - len(label)
    before = remaining // 2 if centered else 1
    return (
        f"{C.CYAN}{left}{'─' * before}{C.BOLD}{C.WHITE}{label}{C.RESET}"
        f"{C.CYAN}{'─' * (remaining - before)}{right}{C.RESET}"
    )


def render_box(
    title: str,
    sections: list[tuple[str, list[str]]],
    width: int = BOX_WIDTH,
) -> list[str]:
    """
    Render a titled box of labelled sections.

    Args:
        title: Box title, centered in the top border
        sections: (section title, content lines) pairs; content may contain
                  ANSI colors, which are not counted toward the width
        width: Total box width including borders

    Returns:
        Lines ready to echo
    """
    blank = _frame("│", " " * (width - 2), "│")
    lines = [_titled_rule("┌", "┐", title, width, centered=True), blank]

    for section_title, content in sections:
        lines.append(_titled_rule("├", "┤", section_title, width, centered=False))
        for text in content:
            padding = width - 2 - len(_ANSI_ESCAPE_PATTERN.sub("", text))
            lines.append(f"{C.CYAN}│{C.RESET}{text}{' ' * padding}{C.CYAN}│{C.RESET}")
        lines.append(blank)

    lines.append(_frame("└", "─" * (width - 2), "┘"))
    return lines
