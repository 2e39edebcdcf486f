"""
Error handling for CLI commands.

Maps library exceptions to exit codes and renders them with rich.
"""

import traceback
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from ..exceptions import (
    SeqHMMError,
    InvalidSampleError,
    DegenerateDistributionError,
    ModelStateError,
    ModelPersistenceError
)
from ..logger import get_logger

console = Console()
logger = get_logger(__name__)


EXIT_CODES = {
    "success": 0,
    "general_error": 1,
    "invalid_usage": 2,
    "sample_error": 10,
    "model_error": 11,
    "config_error": 13
}


class SeqHMMCLIError(SeqHMMError):
    """CLI-level error carrying an exit code and suggestions."""
    
    def __init__(self, message: str, exit_code: int = 1, suggestions: Optional[list] = None):
        self.message = message
        self.exit_code = exit_code
        self.suggestions = suggestions or []
        super().__init__(message)


def exit_code_for(error: Exception) -> int:
    """Pick the process exit code for an exception."""
    if isinstance(error, SeqHMMCLIError):
        return error.exit_code
    if isinstance(error, InvalidSampleError):
        return EXIT_CODES["sample_error"]
    if isinstance(error, (ModelPersistenceError, ModelStateError, DegenerateDistributionError)):
        return EXIT_CODES["model_error"]
    if isinstance(error, ValueError):
        return EXIT_CODES["invalid_usage"]
    return EXIT_CODES["general_error"]


def format_error_message(error: Exception, operation: str, debug: bool = False) -> str:
    """Format error message with context and suggestions."""
    message_parts = [
        f"[red]Error during {operation}:[/red]",
        f"[red]{type(error).__name__}: {escape(str(error))}[/red]"
    ]
    
    suggestions = getattr(error, 'suggestions', None)
    if suggestions:
        message_parts.append("")
        message_parts.append("[yellow]Suggestions:[/yellow]")
        for suggestion in suggestions:
            message_parts.append(f"  • {escape(str(suggestion))}")
    
    if debug:
        message_parts.append("")
        message_parts.append("[dim]Debug information:[/dim]")
        message_parts.append(f"[dim]{escape(traceback.format_exc())}[/dim]")
    
    return "\n".join(message_parts)


def handle_cli_error(error: Exception, operation: str, debug: bool = False) -> None:
    """Display an error and exit with the matching code."""
    console.print(format_error_message(error, operation, debug))
    logger.error(f"CLI error in {operation}: {error}", exc_info=debug)
    raise typer.Exit(exit_code_for(error))
