"""Main CLI application"""

import json
from datetime import datetime
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from legal_compliance.errors import ComplianceError
from legal_compliance.models.audit import AuditEventType, AuditQuery
from legal_compliance.models.user import Caller, UserRole

app = typer.Typer(
    name="legal-compliance",
    help="Lawyer attestation and consent compliance tools",
    add_completion=False,
)

console = Console()

# Operator commands run with admin rights
OPERATOR = Caller(user_id="cli-operator", role=UserRole.ADMIN)


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override LOG_LEVEL"),
):
    """Configure logging before any command runs"""
    from legal_compliance.utils.logging import setup_logging

    setup_logging(log_level)


@app.command("init")
def init():
    """Initialize the database schema"""
    from legal_compliance.cli.init_cmd import init_command

    init_command()


@app.command("add-user")
def add_user(
    user_id: str = typer.Argument(..., help="User ID from the identity provider"),
    role: UserRole = typer.Option(UserRole.END_USER, "--role", "-r", help="User role"),
    name: Optional[str] = typer.Option(None, "--name", help="Display name"),
    email: Optional[str] = typer.Option(None, "--email", help="Email address"),
):
    """Register or update a user"""
    from legal_compliance.db import get_database

    db = get_database()
    db.upsert_user({"id": user_id, "role": role.value, "name": name, "email": email})
    console.print(f"[green][OK] User {user_id} saved as {role.value}[/green]")


@app.command("status")
def status(
    user_id: str = typer.Argument(..., help="User to check"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Show attestation and consent validity for a user"""
    from legal_compliance.db import get_database
    from legal_compliance.services import AttestationService, ConsentService

    db = get_database()
    if db.get_user(user_id) is None:
        console.print(f"[red]User not found: {user_id}[/red]")
        raise typer.Exit(1)

    attestation = AttestationService(db).status_for(user_id)
    consent_valid = ConsentService(db).has_valid_consent(user_id)

    if json_output:
        output = {
            "user_id": user_id,
            "attestation": attestation.model_dump(mode="json"),
            "consent_valid": consent_valid,
        }
        print(json.dumps(output, ensure_ascii=False, indent=2))
        return

    console.print(Panel(
        f"[bold]Attestation:[/bold] {_mark(attestation.is_valid)} {attestation.state.value}\n"
        f"[bold]LSA verified:[/bold] {attestation.lsa_verified}\n"
        f"[bold]Attested at:[/bold] {attestation.attested_at or '-'}\n"
        f"[bold]Consent:[/bold] {_mark(consent_valid)}",
        title=f"Compliance status: {user_id}",
        border_style="green" if attestation.is_valid and consent_valid else "red",
    ))


@app.command("attestations")
def attestations(
    limit: int = typer.Option(20, "--limit", "-l", help="Page size"),
    offset: int = typer.Option(0, "--offset", "-o", help="Rows to skip"),
    verified: Optional[bool] = typer.Option(None, "--verified/--unverified", help="Filter by LSA verification"),
):
    """List stored attestations, newest first"""
    from legal_compliance.db import get_database
    from legal_compliance.services import AttestationService

    page = AttestationService(get_database()).list_attestations(
        OPERATOR, limit=limit, offset=offset, verified=verified
    )
    if not page.records:
        console.print("[yellow]No attestations found[/yellow]")
        return

    table = Table(title=f"Attestations ({page.total} total)")
    table.add_column("Owner", style="cyan")
    table.add_column("Legal name", style="green")
    table.add_column("Bar number")
    table.add_column("Valid")
    table.add_column("LSA")
    table.add_column("Attested at")
    for record in page.records:
        table.add_row(
            record.owner_id,
            record.legal_name,
            record.bar_number,
            _mark(record.is_valid()),
            _mark(record.lsa_verified),
            str(record.attested_at)[:19],
        )
    console.print(table)
    if page.has_more:
        console.print(f"[dim]More results: --offset {offset + limit}[/dim]")


@app.command("audit")
def audit_command(
    user_id: str = typer.Argument(..., help="Owner of the audit trail"),
    event_type: Optional[AuditEventType] = typer.Option(None, "--event", "-e", help="Only this event kind"),
    limit: int = typer.Option(20, "--limit", "-l", help="Number of events"),
    since: Optional[datetime] = typer.Option(None, "--since", help="Earliest timestamp"),
    until: Optional[datetime] = typer.Option(None, "--until", help="Latest timestamp"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Show a user's compliance audit trail"""
    from legal_compliance.db import get_database
    from legal_compliance.services import AuditService

    db = get_database()
    if db.get_user(user_id) is None:
        console.print(f"[red]User not found: {user_id}[/red]")
        raise typer.Exit(1)

    query = AuditQuery(limit=limit, event_type=event_type, from_timestamp=since, to_timestamp=until)
    events = AuditService(db).query(user_id, query)

    if json_output:
        print(json.dumps([e.model_dump(mode="json") for e in events], ensure_ascii=False, indent=2))
        return

    if not events:
        console.print("[yellow]No audit events found[/yellow]")
        return

    table = Table(title=f"Audit trail: {user_id}")
    table.add_column("Timestamp")
    table.add_column("Event", style="magenta")
    table.add_column("Version")
    table.add_column("IP")
    table.add_column("Details", style="green")
    for event in events:
        details = event.metadata.get("consent_type") or event.metadata.get("action") or ""
        table.add_row(
            str(event.timestamp)[:19],
            event.event.value,
            event.version,
            event.ip_address or "",
            str(details),
        )
    console.print(table)


@app.command("db")
def db_command(
    action: str = typer.Argument(..., help="Action: migrate, status"),
):
    """Manage database connection and schema"""
    from legal_compliance.db import get_database
    from legal_compliance.db.supabase import MIGRATION_PATH
    from legal_compliance.utils.config import get_settings

    settings = get_settings()

    if action == "migrate":
        if settings.db_mode == "supabase":
            console.print(f"[blue]SQL migration file:[/blue] {MIGRATION_PATH}")
            console.print(
                "\n[yellow]Run this SQL in Supabase SQL Editor to create tables.[/yellow]"
            )
            console.print(
                "Then run [cyan]python -m legal_compliance db status[/cyan] to verify."
            )
        else:
            get_database().init_db()
            console.print("[green]SQLite database initialized.[/green]")

    elif action == "status":
        db_status = get_database().get_status()
        table = Table(title=f"Database Status ({db_status['mode']})")
        table.add_column("Key", style="cyan")
        table.add_column("Value", style="green")
        for k, v in db_status.items():
            table.add_row(str(k), str(v))
        console.print(table)

    else:
        console.print(f"[red]Unknown action: {action}[/red]")
        console.print("Available actions: migrate, status")
        raise typer.Exit(1)


@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes"),
):
    """Run the API server"""
    import uvicorn

    from legal_compliance.utils.config import get_settings

    settings = get_settings()
    uvicorn.run(
        "legal_compliance.api.app:create_app",
        factory=True,
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
    )


def _mark(value: Optional[bool]) -> str:
    return "[green]✓[/green]" if value else "[red]✗[/red]"


def run() -> None:
    """Console script entry point"""
    try:
        app()
    except ComplianceError as e:
        console.print(f"[red]Error: {e.message}[/red]")
        raise SystemExit(1)
