"""Init command implementation"""

import typer
from rich.console import Console
from rich.panel import Panel

from legal_compliance.db import get_database
from legal_compliance.utils.config import get_settings

console = Console()


def init_command():
    """Initialize the compliance database"""
    settings = get_settings()
    console.print(Panel.fit(
        "[bold blue]Initializing Legal Compliance Store[/bold blue]",
        border_style="blue"
    ))

    console.print(f"\n[yellow]Initializing {settings.db_mode} database...[/yellow]")
    try:
        get_database().init_db()
        console.print("[green]   [OK] Users, attestations and audit log ready[/green]")
    except Exception as e:
        console.print(f"[red]   [FAIL] Failed to initialize database: {e}[/red]")
        raise typer.Exit(1)

    console.print(Panel.fit(
        "[bold green][OK] Initialization complete![/bold green]\n\n"
        "Next steps:\n"
        "1. Register a user: [cyan]python -m legal_compliance add-user alice --role lawyer[/cyan]\n"
        "2. Start the API: [cyan]python -m legal_compliance serve[/cyan]",
        border_style="green"
    ))
