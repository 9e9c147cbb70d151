"""
Rich logging utilities for the manuscripts reader.
"""

import os

from rich.console import Console
from rich.theme import Theme

# Custom theme for the reader
custom_theme = Theme(
    {
        "info": "cyan",
        "success": "green",
        "warning": "yellow",
        "error": "red bold",
        "highlight": "magenta",
        "debug": "dim",
    }
)

# Global console instance
console = Console(theme=custom_theme)


def _debug_enabled() -> bool:
    return os.environ.get("MANUSCRIPTS_DEBUG", "").lower() in ["1", "true", "yes"]


def debug(message: str) -> None:
    """Print a debug message when MANUSCRIPTS_DEBUG is set."""
    if _debug_enabled():
        console.print(f"[debug]·[/debug] {message}")


def info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]ℹ[/info] {message}")


def success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]✓[/success] {message}")


def warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[warning]⚠[/warning] {message}")


def error(message: str) -> None:
    """Print an error message."""
    console.print(f"[error]✗[/error] {message}")


def header(message: str) -> None:
    """Print a header message."""
    console.print()
    console.rule(f"[bold]{message}[/bold]")
    console.print()
