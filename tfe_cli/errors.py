"""Error types and recovery suggestions for the TFE CLI.

Every error raised by this package derives from ``TFEError`` so callers can
catch a single type. The CLI renders errors through ``ErrorHandler``, which
attaches recovery suggestions picked from the error message.
"""

import sys
from typing import Any, Dict, List, Optional, Self

from rich.console import Console
from rich.panel import Panel

console = Console(stderr=True)


class TFEError(Exception):
    """Base exception class for TFE client errors."""

    def __init__(self: Self, message: str, suggestions: Optional[List[str]] = None) -> None:
        """Initialize TFE error.

        Args:
            message: The error message to display.
            suggestions: Optional list of recovery suggestions.
        """
        super().__init__(message)
        self.message = message
        self.suggestions = suggestions or []


class ValidationError(TFEError):
    """Raised when an input fails local validation before any request is sent."""
    pass


class ConfigurationError(TFEError):
    """Raised when there are configuration issues."""
    pass


class APIError(TFEError):
    """Raised by the transport for any failed request."""

    def __init__(
        self: Self,
        message: str,
        status_code: Optional[int] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
        suggestions: Optional[List[str]] = None
    ) -> None:
        super().__init__(message, suggestions)
        self.status_code = status_code
        self.errors = errors or []


class APIConnectionError(APIError):
    """Raised when the API cannot be reached."""
    pass


class DecodeError(APIError):
    """Raised when a response body is not a valid JSON:API document."""
    pass


class ErrorHandler:
    """Handles and displays errors with recovery suggestions."""

    def __init__(self: Self) -> None:
        """Initialize the error handler."""
        self.error_patterns: Dict[str, Dict[str, Any]] = {
            "connection_refused": {
                "keywords": ["connection refused", "connection error", "timeout"],
                "suggestions": [
                    "Check that the API address is reachable",
                    "Verify the address in your configuration: tfe config --address <URL>",
                    "Check network connectivity and proxy settings"
                ]
            },
            "authentication_failed": {
                "keywords": ["401", "unauthorized", "invalid token"],
                "suggestions": [
                    "Check your API token: tfe config --token <TOKEN>",
                    "Generate a new user or team token",
                    "Make sure the TFE_TOKEN environment variable is not stale"
                ]
            },
            "not_found": {
                "keywords": ["404", "not found"],
                "suggestions": [
                    "Check the spelling of the organization name",
                    "List visible organizations: tfe org list",
                    "Verify your token can access this organization"
                ]
            },
            "invalid_input": {
                "keywords": ["invalid value", "is required"],
                "suggestions": [
                    "Organization names may only contain letters, digits, '-', '_' and '.'",
                    "An email address is required when creating an organization"
                ]
            }
        }

    def identify_error_type(self: Self, error_message: str) -> Optional[str]:
        """Identify the type of error based on the message.

        Args:
            error_message: The error message to analyze.

        Returns:
            The error type key if identified, None otherwise.
        """
        error_lower = error_message.lower()

        for error_type, pattern_data in self.error_patterns.items():
            for keyword in pattern_data["keywords"]:
                if keyword in error_lower:
                    return error_type

        return None

    def get_suggestions(self: Self, error_message: str) -> List[str]:
        """Get recovery suggestions for an error.

        Args:
            error_message: The error message to analyze.

        Returns:
            List of recovery suggestions.
        """
        error_type = self.identify_error_type(error_message)

        if error_type:
            return self.error_patterns[error_type]["suggestions"]

        return [
            "Verify your configuration: tfe config",
            "Re-run with --verbose for request details"
        ]

    def display_error(
        self: Self,
        error: Exception,
        context: Optional[str] = None,
        show_suggestions: bool = True
    ) -> None:
        """Display an error with formatting and suggestions.

        Args:
            error: The exception that occurred.
            context: Optional context about what was being attempted.
            show_suggestions: Whether to show recovery suggestions.
        """
        error_message = str(error)
        content = []

        if context:
            content.append(f"[bold]Context:[/bold] {context}")
            content.append("")

        content.append(f"[bold red]Error:[/bold red] {error_message}")

        if show_suggestions:
            if isinstance(error, TFEError) and error.suggestions:
                suggestions = error.suggestions
            else:
                suggestions = self.get_suggestions(error_message)

            if suggestions:
                content.append("")
                content.append("[bold blue]Suggested solutions:[/bold blue]")
                for i, suggestion in enumerate(suggestions, 1):
                    content.append(f"  {i}. {suggestion}")

        console.print(Panel(
            "\n".join(content),
            title="[bold red]TFE CLI Error[/bold red]",
            border_style="red",
            expand=False
        ))


def handle_exception(
    error: Exception,
    context: Optional[str] = None,
    exit_code: int = 1
) -> None:
    """Display an error and terminate the process.

    Args:
        error: The exception that occurred.
        context: Optional context about what was being attempted.
        exit_code: Exit code to use when terminating.
    """
    ErrorHandler().display_error(error, context)
    sys.exit(exit_code)
