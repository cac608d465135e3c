"""CLI renderer for the generation studio."""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from genstudio.types import ConversationTurn, Framework, GenerationResult


class Renderer:
    """CLI renderer using Rich for terminal output."""

    def __init__(self, console: Console | None = None) -> None:
        self.console: Console = console or Console()

    def info(self, message: str) -> None:
        """Render an info message."""
        self.console.print(message)

    def error(self, message: str) -> None:
        """Render an error message."""
        self.console.print(f"[bold red]Error:[/bold red] {message}")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]Warning:[/yellow] {message}")

    def welcome(self, framework: Framework) -> None:
        self.console.print(f"[bold blue]{framework.name}[/bold blue] [dim]({framework.kind.value})[/dim]")
        if framework.description:
            self.console.print(f"[dim]{framework.description}[/dim]")

    def fields(self, framework: Framework, required_count: int) -> None:
        """Render the framework's declared fields."""
        table = Table(title=f"{framework.name} fields")
        table.add_column("#", justify="right")
        table.add_column("Field")
        table.add_column("Type")
        table.add_column("Required")
        for index, spec in enumerate(framework.fields):
            table.add_row(str(index + 1), spec.name, spec.type, "yes" if index < required_count else "")
        self.console.print(table)

    def result(self, result: GenerationResult) -> None:
        """Render generated content with a status line."""
        self.console.print(Panel(Markdown(result.content), title="Generated content"))
        status = f"{result.word_count} words"
        if result.tokens_used:
            status += f" | {result.tokens_used} tokens"
        if result.model:
            status += f" | {result.model}"
        self.console.print(f"[dim]{status}[/dim]")

    def turns(self, turns: Sequence[ConversationTurn]) -> None:
        if not turns:
            self.console.print("[dim](no history yet)[/dim]")
            return
        for turn in turns:
            label = "[bold cyan]You:[/bold cyan]" if turn.type == "user" else "[bold yellow]AI:[/bold yellow]"
            self.console.print(f"{label} [dim]{turn.created_at}[/dim]")
            self.console.print(turn.content, markup=False)

    def transcript(self, text: str, active_version: int | None = None) -> None:
        if not text:
            self.console.print("[dim](no saved versions)[/dim]")
            return
        self.console.print(text, markup=False, highlight=False)
        if active_version is not None:
            self.console.print(f"[dim]Showing version {active_version}[/dim]")

    def get_user_input(self, prompt: str = "$") -> str:
        """Prompt user for input."""
        return Prompt.ask(prompt, console=self.console, default="", show_default=False)


def create_cli_renderer() -> Renderer:
    """Create and return a Renderer instance."""
    return Renderer()
