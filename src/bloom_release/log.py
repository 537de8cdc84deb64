"""Severity-tagged run log printed through rich."""

from rich.console import Console
from rich.markup import escape

console = Console(highlight=False, soft_wrap=True)


def info(message: str) -> None:
    console.print(f"[green]\\[INFO][/green] {escape(message)}")


def warn(message: str) -> None:
    console.print(f"[yellow]\\[WARN][/yellow] {escape(message)}")


def error(message: str) -> None:
    console.print(f"[red]\\[ERROR][/red] {escape(message)}")


def section(title: str) -> None:
    """Print a banner separating the phases of a run."""
    rule = "=" * 40
    console.print()
    console.print(f"[blue]{rule}[/blue]")
    console.print(f"[bold blue]{escape(title)}[/bold blue]")
    console.print(f"[blue]{rule}[/blue]")
    console.print()


def output(text: str) -> None:
    """Echo raw command output without markup interpretation."""
    console.print(text, markup=False)
