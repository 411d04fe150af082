"""
Progress Indicators - Spinners for long-running network calls.
"""

from contextlib import contextmanager

from rich.status import Status

from mediahub.ui.console import get_console


@contextmanager
def status_spinner(message: str, spinner: str = "dots", enabled: bool = True):
    """
    Show a spinner while the block runs.

    Args:
        message: Text shown next to the spinner
        spinner: Rich spinner name
        enabled: False yields without drawing, used for JSON output
    """
    if not enabled:
        yield None
        return

    status = Status(message, spinner=spinner, console=get_console())
    try:
        status.start()
        yield status
    finally:
        status.stop()


# Export progress helpers
__all__ = ["status_spinner"]
