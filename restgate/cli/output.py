"""Rich-based output utilities for the restgate CLI."""

from rich.console import Console
from rich.markup import escape

from restgate.core.encoding import decode_text
from restgate.core.status import StatusCode

# Shared console instance
console = Console()


def print_error(message: str) -> None:
    """Print an error message in red."""
    console.print(f"[bold red]Error:[/bold red] {escape(message)}")


def print_info(message: str) -> None:
    """Print an informational message."""
    console.print(f"[dim]{escape(message)}[/dim]")


def print_payload(body: bytes) -> None:
    """Print a received request body.

    Payloads come from the network, so markup is escaped rather than
    rendered.
    """
    text = decode_text(body)
    console.print(f"[bold cyan]<-[/bold cyan] {escape(text)}", highlight=False)


def print_status(status: StatusCode | int, text: str) -> None:
    """Print a response status line, green for 2xx and red otherwise."""
    code = int(status)
    phrase = status.phrase if isinstance(status, StatusCode) else ""
    style = "green" if 200 <= code < 300 else "red"
    console.print(f"[{style}]{code} {escape(phrase)}[/{style}] {escape(text)}", highlight=False)
