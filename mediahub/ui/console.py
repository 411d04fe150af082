"""
Console Management - Shared Rich console and color palette.

Every command prints through one console so that JSON output, tables and
error panels agree on width and color detection. Tables and panels go to
stdout; logging goes to stderr and is configured by the CLI.
"""

from dataclasses import dataclass
from typing import Optional

from rich.console import Console
from rich.theme import Theme


@dataclass(frozen=True)
class ColorPalette:
    """Colors used by tables and panels."""

    primary: str = "blue"
    secondary: str = "cyan"
    accent: str = "magenta"
    success: str = "green"
    warning: str = "yellow"
    error: str = "red"
    info: str = "blue"
    muted: str = "dim white"
    border: str = "blue"


_PALETTE = ColorPalette()

_THEME = Theme({
    "title": f"bold {_PALETTE.primary}",
    "provider": _PALETTE.accent,
    "muted": _PALETTE.muted,
    "ok": _PALETTE.success,
    "warn": _PALETTE.warning,
    "bad": _PALETTE.error,
})

# Global console instance
_console: Optional[Console] = None


def setup_console(force_terminal: Optional[bool] = None, width: Optional[int] = None) -> Console:
    """
    Set up and configure the global Rich console.

    Args:
        force_terminal: Force terminal mode detection
        width: Console width override

    Returns:
        Configured Rich Console instance
    """
    global _console

    console_kwargs = {
        "theme": _THEME,
        "force_terminal": force_terminal,
        "color_system": "auto",
    }
    if width is not None:
        console_kwargs["width"] = width

    _console = Console(**console_kwargs)
    return _console


def get_console() -> Console:
    """Get the global console, creating a default one on first use."""
    global _console

    if _console is None:
        _console = setup_console()
    return _console


def get_palette() -> ColorPalette:
    return _PALETTE


# Export console functions
__all__ = ["ColorPalette", "setup_console", "get_console", "get_palette"]
