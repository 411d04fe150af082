"""
Error Handler - Rich error panels with context and suggestions.

Each MediaHub error class gets its own panel. Retry guidance comes from
the error's kind: retryable kinds (rate limits, transport failures) tell
the user to wait and try again, the rest point at trying another provider.
"""

import traceback
from typing import List, Optional

from rich.panel import Panel

from mediahub.core.exceptions import (
    ChapterImageError,
    ConfigurationError,
    ErrorKind,
    MediaHubError,
    NetworkError,
    ProviderError,
    ValidationError,
)
from mediahub.ui.console import get_console, get_palette


KIND_SUGGESTIONS = {
    ErrorKind.RATE_LIMITED: "The source is rate limiting requests, wait a minute and retry",
    ErrorKind.NETWORK: "Check your connection and that the scraping API is reachable",
    ErrorKind.NOT_AVAILABLE: "The item is not available on this provider, try another one",
    ErrorKind.FORMAT: "The source returned data in an unexpected shape, try another provider",
    ErrorKind.CRYPTO: "Decryption keys may be stale, retry later or use another provider",
}


class ErrorHandler:
    """Renders errors with consistent formatting and actionable hints."""

    def __init__(self):
        self.console = get_console()
        self.palette = get_palette()

    def handle_error(
        self,
        error: Exception,
        context: Optional[str] = None,
        show_traceback: bool = False
    ) -> None:
        """
        Display an error with formatting matched to its class.

        Args:
            error: Exception to display
            context: Where the error occurred
            show_traceback: Whether to append the current traceback
        """
        if isinstance(error, ConfigurationError):
            title, lines = "⚙️  Configuration Error", self._configuration_lines(error)
        elif isinstance(error, ProviderError):
            title, lines = "🔌 Unknown Provider", self._provider_lines(error)
        elif isinstance(error, ValidationError):
            title, lines = "✅ Invalid Input", self._validation_lines(error)
        elif isinstance(error, NetworkError):
            title, lines = "🌐 Network Error", self._network_lines(error)
        elif isinstance(error, ChapterImageError):
            title, lines = "📖 Chapter Error", self._chapter_lines(error)
        elif isinstance(error, MediaHubError):
            title, lines = "❌ Error", []
        else:
            self._display_generic_error(error, context, show_traceback)
            return

        self._display(title, error.message, lines, self._suggestions(error), context, show_traceback)

    def _configuration_lines(self, error: ConfigurationError) -> List[str]:
        if error.config_path:
            return [f"[dim]Config File:[/dim] [cyan]{error.config_path}[/cyan]"]
        return []

    def _validation_lines(self, error: ValidationError) -> List[str]:
        lines = []
        if error.field_name:
            lines.append(f"[dim]Field:[/dim] [cyan]{error.field_name}[/cyan]")
        if error.invalid_value is not None:
            lines.append(f"[dim]Invalid Value:[/dim] [red]{error.invalid_value}[/red]")
        return lines

    def _provider_lines(self, error: ProviderError) -> List[str]:
        if error.provider:
            return [f"[dim]Provider:[/dim] [cyan]{error.provider}[/cyan]"]
        return []

    def _network_lines(self, error: NetworkError) -> List[str]:
        lines = []
        if error.url:
            lines.append(f"[dim]URL:[/dim] [cyan]{error.url}[/cyan]")
        if error.status_code:
            lines.append(f"[dim]Status Code:[/dim] [red]{error.status_code}[/red]")
        return lines

    def _chapter_lines(self, error: ChapterImageError) -> List[str]:
        lines = [f"[dim]Kind:[/dim] [cyan]{error.kind}[/cyan]"]
        if error.chapter_id:
            lines.append(f"[dim]Chapter:[/dim] [cyan]{error.chapter_id}[/cyan]")
        return lines

    def _suggestions(self, error: MediaHubError) -> List[str]:
        if isinstance(error, ConfigurationError):
            return [
                "Check settings.json in the configuration directory",
                "Delete settings.json to regenerate defaults",
            ]
        if isinstance(error, ValidationError):
            return [
                "Run 'mediahub providers' to list valid provider names",
                "Check that the provider serves the requested category",
            ]

        suggestions = []
        hint = KIND_SUGGESTIONS.get(error.kind)
        if hint:
            suggestions.append(hint)
        if error.kind.retryable:
            suggestions.append("This failure is temporary, retrying usually helps")
        else:
            suggestions.append("Retrying the same provider is unlikely to help")
        return suggestions

    def _display(
        self,
        title: str,
        message: str,
        lines: List[str],
        suggestions: List[str],
        context: Optional[str],
        show_traceback: bool
    ) -> None:
        content_parts = [f"[{self.palette.error}]{message}[/{self.palette.error}]"]
        content_parts.extend(f"\n{line}" for line in lines)

        if context:
            content_parts.append(f"\n[dim]Context:[/dim] {context}")

        if suggestions:
            content_parts.append(f"\n\n[{self.palette.info}]💡 Suggestions:[/{self.palette.info}]")
            for suggestion in suggestions:
                content_parts.append(f"\n• {suggestion}")

        if show_traceback:
            content_parts.append(f"\n\n[dim]Traceback:[/dim]\n{traceback.format_exc()}")

        self.console.print(Panel(
            "".join(content_parts),
            title=title,
            border_style=self.palette.error,
            padding=(1, 2)
        ))

    def _display_generic_error(
        self,
        error: Exception,
        context: Optional[str] = None,
        show_traceback: bool = False
    ) -> None:
        """Handle exceptions that are not MediaHub errors."""
        suggestions = [
            "Check the command syntax and arguments",
            "Run again with --debug for details",
            "Report this issue if it persists",
        ]
        self._display(
            "💥 Unexpected Error",
            f"{error.__class__.__name__}: {error}",
            [],
            suggestions,
            context,
            show_traceback
        )

    def display_warning(self, message: str, title: str = "⚠️  Warning") -> None:
        """Display a warning message."""
        self.console.print(Panel(
            f"[{self.palette.warning}]{message}[/{self.palette.warning}]",
            title=f"[{self.palette.warning}]{title}[/{self.palette.warning}]",
            border_style=self.palette.warning,
            padding=(1, 2)
        ))

    def display_info(self, message: str, title: str = "ℹ️  Information") -> None:
        """Display an information message."""
        self.console.print(Panel(
            f"[{self.palette.info}]{message}[/{self.palette.info}]",
            title=f"[{self.palette.info}]{title}[/{self.palette.info}]",
            border_style=self.palette.info,
            padding=(1, 2)
        ))


# Global error handler instance
_error_handler: Optional[ErrorHandler] = None


def get_error_handler() -> ErrorHandler:
    """Get the global error handler instance."""
    global _error_handler
    if _error_handler is None:
        _error_handler = ErrorHandler()
    return _error_handler


def handle_error(
    error: Exception,
    context: Optional[str] = None,
    show_traceback: bool = False
) -> None:
    """Display an error using the global error handler."""
    get_error_handler().handle_error(error, context, show_traceback)


def display_warning(message: str, title: str = "⚠️  Warning") -> None:
    get_error_handler().display_warning(message, title)


def display_info(message: str, title: str = "ℹ️  Information") -> None:
    get_error_handler().display_info(message, title)


# Export error handling functions
__all__ = [
    "ErrorHandler",
    "KIND_SUGGESTIONS",
    "get_error_handler",
    "handle_error",
    "display_warning",
    "display_info",
]
