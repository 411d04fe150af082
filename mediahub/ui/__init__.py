"""
UI Components - Rich console output for the MediaHub CLI.

Console setup, error panels, model tables and progress spinners.
"""

from .components import UIComponents
from .console import ColorPalette, get_console, get_palette, setup_console
from .error_handler import (
    ErrorHandler,
    display_info,
    display_warning,
    get_error_handler,
    handle_error,
)
from .progress import status_spinner

__all__ = [
    "UIComponents",
    "ColorPalette",
    "get_console",
    "get_palette",
    "setup_console",
    "ErrorHandler",
    "display_info",
    "display_warning",
    "get_error_handler",
    "handle_error",
    "status_spinner",
]
