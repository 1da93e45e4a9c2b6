"""Typer-based CLI for Idea Vault."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .certificates import read_certificate, verify_certificate, write_certificate
from .config import VaultConfig
from .errors import VaultError
from .ledger import read_ledger_tail
from .models.certificate import CertificateCheck
from .models.feed import FeedFilters
from .models.idea import IdeaRecord, IdeaStatus
from .paths import VaultPaths
from .service import IdeaVault

app = typer.Typer(
    name="ideavault",
    help="Idea Vault - timestamped proof of creative ideas",
    add_completion=False,
)

console = Console()

VAULT_OPTION_HELP = "Path to vault directory (default: IDEAVAULT_PATH env or ./idea_vault)"


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
):
    """Idea Vault command line."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        )


def _format_ms(ms: Optional[int]) -> str:
    if ms is None:
        return "-"
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def _load_config(vault_path: Optional[str]) -> VaultConfig:
    try:
        return VaultConfig.from_env(cli_vault_path=vault_path)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)


def _require_initialized(config: VaultConfig) -> VaultPaths:
    paths = VaultPaths.from_config(config)
    if not paths.is_initialized():
        console.print(f"[red]Error: Vault not initialized at {config.vault_path}[/red]")
        console.print("[yellow]Run 'ideavault init' first[/yellow]")
        raise typer.Exit(code=1)
    return paths


def _open_vault(vault_path: Optional[str]) -> tuple[VaultPaths, IdeaVault]:
    config = _load_config(vault_path)
    paths = _require_initialized(config)

    if config.backend == "memory":
        console.print("[yellow]Warning: memory backend is not durable[/yellow]")

    return paths, IdeaVault.from_config(config)


def _fail(error: VaultError) -> NoReturn:
    console.print(f"[red]Error ({error.code}): {error.message}[/red]")
    raise typer.Exit(code=1)


def _print_record(record: IdeaRecord) -> None:
    console.print(f"[bold]{record.title}[/bold]")
    console.print(f"  [dim]ID:[/dim]          {record.id}")
    console.print(f"  [dim]Owner:[/dim]       {record.owner}")
    console.print(f"  [dim]Status:[/dim]      [magenta]{record.status.value}[/magenta]")
    console.print(f"  [dim]Created:[/dim]     {_format_ms(record.created_at)} UTC")
    if record.is_revealed:
        console.print(f"  [dim]Revealed:[/dim]    {_format_ms(record.revealed_at)} UTC")
    if record.attachment_ref:
        console.print(f"  [dim]Attachment:[/dim]  {record.attachment_ref}")
    if record.tags:
        console.print(f"  [dim]Tags:[/dim]        {', '.join(record.tags)}")
    console.print(f"  [dim]Proof hash:[/dim]  {record.proof_hash}")
    console.print()
    console.print(record.description)


def _records_table(title: str, records: list[IdeaRecord]) -> Table:
    table = Table(title=title)
    table.add_column("Created (UTC)", style="cyan", no_wrap=True)
    table.add_column("ID", style="yellow", no_wrap=True)
    table.add_column("Status", style="magenta")
    table.add_column("Title")
    table.add_column("Proof", style="dim")

    for record in records:
        title_str = record.title if len(record.title) <= 40 else record.title[:37] + "..."
        table.add_row(
            _format_ms(record.created_at),
            record.id,
            record.status.value,
            title_str,
            record.proof_hash[:19] + "...",
        )
    return table


@app.command()
def init(
    vault_path: str = typer.Option(None, "--vault", "-v", help=VAULT_OPTION_HELP),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Rewrite config.yaml even if it already exists",
    ),
):
    """Initialize a new vault with directory structure and system files.

    This command is idempotent - it will not touch existing records or the ledger.
    """
    config = _load_config(vault_path)
    paths = VaultPaths.from_config(config)

    if paths.is_initialized():
        console.print(f"[yellow]Vault already exists at:[/yellow] {config.vault_path}")
    else:
        console.print(f"[green]Initializing new Idea Vault at:[/green] {config.vault_path}")

    directories_created = []
    for directory in paths.get_all_directories():
        if not directory.exists():
            directory.mkdir(parents=True, exist_ok=True)
            directories_created.append(directory)

    if directories_created:
        console.print(f"[green]+[/green] Created {len(directories_created)} directories")
    else:
        console.print("[dim]All directories already exist[/dim]")

    if force or not paths.config_file.exists():
        paths.config_file.write_text(config.to_yaml_str(), encoding="utf-8")
        console.print(f"[green]+[/green] Wrote config: {paths.config_file}")
    else:
        console.print(f"[dim]Config already exists: {paths.config_file}[/dim]")

    if not paths.ledger_file.exists():
        paths.ledger_file.touch()
        console.print(f"[green]+[/green] Created ledger: {paths.ledger_file}")
    else:
        console.print(f"[dim]Ledger already exists: {paths.ledger_file}[/dim]")

    # Opening the vault creates the database schema
    IdeaVault.from_config(config)
    console.print("[bold green]Vault ready.[/bold green]")


@app.command()
def submit(
    owner: str = typer.Option(..., "--owner", "-o", help="Identity of the submitter"),
    title: str = typer.Option(..., "--title", "-t", help="Idea title"),
    description: str = typer.Option(..., "--description", "-d", help="Idea description"),
    attachment: str = typer.Option(None, "--attachment", "-a", help="Content hash of an attached file (e.g. IPFS CID)"),
    status: IdeaStatus = typer.Option(IdeaStatus.PUBLIC, "--status", "-s", help="Privacy state"),
    tags: Optional[List[str]] = typer.Option(None, "--tag", help="Feed tag (repeatable)"),
    vault_path: str = typer.Option(None, "--vault", "-v", help=VAULT_OPTION_HELP),
):
    """Submit a new idea and print its id and proof hash."""
    _, vault = _open_vault(vault_path)
    try:
        record = vault.submit(owner, title, description, attachment, status, tags or [])
    except VaultError as e:
        _fail(e)

    console.print(f"[green]Idea submitted successfully![/green] ID: {record.id}")
    console.print(f"  [dim]Proof hash:[/dim] {record.proof_hash}")
    console.print(f"  [dim]Created:[/dim]    {_format_ms(record.created_at)} UTC")


@app.command()
def show(
    idea_id: str = typer.Argument(..., help="Idea ID"),
    caller: str = typer.Option(None, "--as", help="Caller identity (required for non-public ideas)"),
    vault_path: str = typer.Option(None, "--vault", "-v", help=VAULT_OPTION_HELP),
):
    """Show an idea visible to the caller."""
    _, vault = _open_vault(vault_path)
    try:
        record = vault.get(idea_id, caller)
    except VaultError as e:
        _fail(e)
    _print_record(record)


@app.command("list")
def list_ideas(
    owner: str = typer.Option(..., "--owner", "-o", help="Owner identity"),
    vault_path: str = typer.Option(None, "--vault", "-v", help=VAULT_OPTION_HELP),
):
    """List an owner's ideas, newest first."""
    _, vault = _open_vault(vault_path)
    records = vault.list_by_owner(owner)
    if not records:
        console.print(f"[dim]No ideas for {owner}[/dim]")
        return
    console.print(_records_table(f"{len(records)} idea(s) by {owner}", records))
    summary = vault.owner_summary(owner)
    console.print(
        f"[green]Public: {summary.public}[/green]  "
        f"[yellow]Hidden: {summary.hidden}[/yellow]  "
        f"[red]Private: {summary.private}[/red]"
    )


@app.command()
def reveal(
    idea_id: str = typer.Argument(..., help="Idea ID"),
    caller: str = typer.Option(..., "--as", help="Caller identity (must be the owner)"),
    vault_path: str = typer.Option(None, "--vault", "-v", help=VAULT_OPTION_HELP),
):
    """Reveal a RevealLater idea, making it public. Works exactly once."""
    _, vault = _open_vault(vault_path)
    try:
        record = vault.reveal(idea_id, caller)
    except VaultError as e:
        _fail(e)
    console.print(f"[green]Revealed[/green] {record.id} at {_format_ms(record.revealed_at)} UTC")


@app.command()
def feed(
    text: str = typer.Option(None, "--text", help="Free-text match on title/description"),
    tags: Optional[List[str]] = typer.Option(None, "--tag", help="Required tag (repeatable)"),
    any_tag: bool = typer.Option(False, "--any-tag", help="Match any --tag instead of all"),
    cursor: str = typer.Option(None, "--cursor", help="Cursor from a previous page"),
    limit: int = typer.Option(None, "--limit", "-n", help="Page size (clamped to the configured maximum)"),
    vault_path: str = typer.Option(None, "--vault", "-v", help=VAULT_OPTION_HELP),
):
    """Show one page of the public feed."""
    _, vault = _open_vault(vault_path)
    filters = FeedFilters(text=text, tags=tags or [], tag_or=any_tag)
    try:
        page = vault.get_public_feed(filters=filters, cursor=cursor, limit=limit)
    except VaultError as e:
        _fail(e)

    if not page.items:
        console.print("[dim]No public ideas[/dim]")
    else:
        console.print(_records_table("Public feed", page.items))
    if page.next_cursor:
        console.print(f"[dim]Next page:[/dim] --cursor {page.next_cursor}")


@app.command()
def stats(
    vault_path: str = typer.Option(None, "--vault", "-v", help=VAULT_OPTION_HELP),
):
    """Show aggregate counters."""
    _, vault = _open_vault(vault_path)
    s = vault.get_stats()
    table = Table(title="Idea Vault stats")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Total ideas", str(s.total_ideas))
    table.add_row("Public ideas", str(s.public_ideas))
    table.add_row("Total users", str(s.total_users))
    console.print(table)


@app.command()
def certificate(
    idea_id: str = typer.Argument(..., help="Idea ID"),
    caller: str = typer.Option(..., "--as", help="Caller identity"),
    out: str = typer.Option(None, "--out", help="Output path (default: <vault>/certificates/creativevault-proof-<id>.json)"),
    vault_path: str = typer.Option(None, "--vault", "-v", help=VAULT_OPTION_HELP),
):
    """Generate a proof certificate and write it to a JSON file."""
    paths, vault = _open_vault(vault_path)
    try:
        cert = vault.generate_certificate(idea_id, caller)
    except VaultError as e:
        _fail(e)

    out_path = write_certificate(cert, Path(out) if out else paths.certificate_file(cert.id))
    console.print(f"[green]Certificate written:[/green] {out_path}")
    console.print(f"  [dim]Proof hash:[/dim]     {cert.proof_hash}")
    console.print(f"  [dim]Integrity hash:[/dim] {cert.integrity_hash}")


@app.command()
def verify(
    certificate_path: str = typer.Argument(..., help="Path to a certificate JSON file"),
    against_store: bool = typer.Option(
        False,
        "--against-store",
        help="Also compare with the live record (valid / stale / invalid)",
    ),
    vault_path: str = typer.Option(None, "--vault", "-v", help=VAULT_OPTION_HELP),
):
    """Verify a certificate file. Exits 1 unless the result is valid."""
    try:
        cert = read_certificate(Path(certificate_path))
    except FileNotFoundError:
        console.print(f"[red]Error: Certificate file not found: {certificate_path}[/red]")
        raise typer.Exit(code=1)
    except VaultError as e:
        _fail(e)

    if against_store:
        _, vault = _open_vault(vault_path)
        result = vault.verify_against_store(cert)
    else:
        result = CertificateCheck.VALID if verify_certificate(cert) else CertificateCheck.INVALID

    color = {"valid": "green", "stale": "yellow", "invalid": "red"}[result.value]
    console.print(f"[{color}]{result.value.upper()}[/{color}] {cert.id}")
    if result != CertificateCheck.VALID:
        raise typer.Exit(code=1)


ledger_app = typer.Typer(help="Ledger commands")
app.add_typer(ledger_app, name="ledger")


@ledger_app.command("tail")
def ledger_tail(
    n: int = typer.Option(20, "--n", help="Number of recent events to display"),
    full: bool = typer.Option(False, "--full", help="Print each event as JSON"),
    vault_path: str = typer.Option(None, "--vault", "-v", help=VAULT_OPTION_HELP),
):
    """Display the last N ledger events."""
    events = read_ledger_tail(_require_initialized(_load_config(vault_path)).ledger_file, n=n)
    if not events:
        console.print("[dim]No events in ledger[/dim]")
        return

    if full:
        for event in events:
            console.rule(f"[magenta]{event.event_type}[/magenta] {event.idea_id or ''}")
            console.print_json(event.model_dump_json())
        return

    table = Table(title=f"Last {len(events)} ledger event(s)")
    table.add_column("Time (UTC)", style="cyan", no_wrap=True)
    table.add_column("Event", style="magenta")
    table.add_column("Idea", style="yellow")
    table.add_column("Payload", style="dim")
    for event in events:
        payload = ", ".join(f"{k}={v}" for k, v in event.payload.items())
        table.add_row(
            event.ts.strftime("%Y-%m-%d %H:%M:%S"),
            event.event_type,
            event.idea_id or "-",
            payload if len(payload) <= 60 else payload[:57] + "...",
        )
    console.print(table)


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
