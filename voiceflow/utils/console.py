"""
Symbol-prefixed terminal output shared by every command.
"""

import sys
from typing import NoReturn, Optional

from rich.console import Console

console = Console(highlight=False)


def quick_success(message: str) -> None:
    console.print(f"[green]✅ {message}[/green]")


def print_error(message: str, suggestion: Optional[str] = None) -> None:
    console.print()
    console.print(f"[red]❌ {message}[/red]")
    if suggestion:
        console.print(f"[cyan]💡 {suggestion}[/cyan]")
    console.print()


def quick_error(message: str, suggestion: Optional[str] = None, exit_code: int = 1) -> NoReturn:
    """Print an error with an optional remedy and exit."""
    print_error(message, suggestion)
    sys.exit(exit_code)


def quick_exit(message: str, suggestion: Optional[str] = None) -> NoReturn:
    """Print a neutral farewell (e.g. user cancellation) and exit 0."""
    console.print()
    console.print(f"[yellow]🔚 {message}[/yellow]")
    if suggestion:
        console.print(f"[cyan]💡 {suggestion}[/cyan]")
    console.print()
    sys.exit(0)
