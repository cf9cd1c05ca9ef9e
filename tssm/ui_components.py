"""
tssm - UI Components
Standardized headers and colors for command output (always on stderr)
"""

from rich.console import Console

LOGO = "tssm"


def show_header(
    title: str,
    subtitle: str = None,
    host: str = None,
    details: dict = None,
    console: Console = None,
):
    """
    Display a standardized tssm command header.

    Args:
        title: Main title (e.g., "Fanout", "Credentials")
        subtitle: Optional subtitle line
        host: Target host (if applicable)
        details: Additional key-value pairs to display
        console: Rich Console instance (creates a stderr console if None)

    Example:
        show_header(
            title="Fanout",
            host="web1",
            details={"Replicas": 4, "Mode": "vertical-split"}
        )
    """
    if console is None:
        console = Console(stderr=True)

    prefix = f" [bold color(214)]{LOGO}[/bold color(214)] [dim]›[/dim]"

    console.print(f"{prefix} [bold white]{title}[/bold white]")

    if subtitle:
        console.print(f"{prefix} [dim]{subtitle}[/dim]")

    if host:
        console.print(f"{prefix} Host: [cyan]{host}[/cyan]")

    if details:
        for key, value in details.items():
            console.print(f"{prefix} {key}: [cyan]{value}[/cyan]")

    console.print()
