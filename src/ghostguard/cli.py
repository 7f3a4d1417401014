"""Typer CLI for GhostGuard."""

import asyncio

import typer
from rich.console import Console

app = typer.Typer(name="ghostguard", help="GhostGuard: license and ban backend for game-server agents")
console = Console()


async def _with_session(work):
    from ghostguard.common.config import get_settings
    from ghostguard.common.database import DatabaseManager

    db = DatabaseManager(get_settings())
    await db.init()
    try:
        await db.create_all()
        async with db.get_session() as session:
            return await work(session)
    finally:
        await db.close()


@app.command()
def serve(
    host: str = typer.Option(None, help="Bind host (default from settings)"),
    port: int = typer.Option(None, help="Bind port (default from settings)"),
):
    """Start the GhostGuard API server."""
    import uvicorn
    from ghostguard.app import create_app
    from ghostguard.common.config import get_settings

    settings = get_settings()
    host = host or settings.host
    port = port or settings.port
    console.print(f"[bold green]Starting GhostGuard on {host}:{port}[/bold green]")
    uvicorn.run(create_app(), host=host, port=port)


@app.command()
def keygen(
    prefix: str = typer.Option(None, help="Key prefix (default from settings)"),
):
    """Generate a license key (offline, not stored)."""
    from ghostguard.common.config import get_settings
    from ghostguard.licensing.keygen import generate_license_key

    key = generate_license_key(prefix or get_settings().license_prefix)
    console.print(f"[bold]{key}[/bold]")


@app.command("create-license")
def create_license(
    days: int = typer.Option(0, help="Days valid; 0 means permanent"),
):
    """Create and store an ACTIVE license."""
    from ghostguard.common.config import get_settings
    from ghostguard.licensing.service import LicenseAuthority

    authority = LicenseAuthority(get_settings())
    license_obj = asyncio.run(_with_session(lambda s: authority.issue_license(s, days)))
    expires = license_obj.expires_at.isoformat() if license_obj.expires_at else "never"
    console.print(f"[bold green]{license_obj.license_key}[/bold green] (expires {expires})")


@app.command("create-customer")
def create_customer(
    username: str = typer.Argument(..., help="Owner login name"),
    license_key: str = typer.Argument(..., help="License the owner manages"),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True),
):
    """Create an owner account for an existing license."""
    from ghostguard.common.exceptions import GhostGuardError
    from ghostguard.identity.resolver import IdentityResolver
    from ghostguard.identity.service import AccountService

    accounts = AccountService(IdentityResolver())
    try:
        customer = asyncio.run(_with_session(
            lambda s: accounts.create_customer(s, username, password, license_key)
        ))
    except GhostGuardError as e:
        console.print(f"[bold red]{e.code}[/bold red] — {e.message}")
        raise typer.Exit(1)
    console.print(f"[bold green]Created[/bold green] {customer.username} — token {customer.id}")


@app.command("verify-assertion")
def verify_assertion_cmd(
    payload: str = typer.Argument(..., help="Assertion payload exactly as returned by verify"),
    signature: str = typer.Argument(..., help="Hex signature returned alongside the payload"),
):
    """Check a license assertion offline with the shared license secret."""
    from ghostguard.common.config import get_settings
    from ghostguard.licensing.keygen import decode_assertion, verify_assertion

    if not verify_assertion(payload, signature, get_settings().license_secret):
        console.print("[bold red]BAD_SIGNATURE[/bold red]")
        raise typer.Exit(1)

    assertion = decode_assertion(payload)
    console.print("[bold green]VALID[/bold green]")
    if assertion is not None:
        console.print(f"  License: {assertion.license_key}")
        console.print(f"  Status: {assertion.status}")
        console.print(f"  Expires: {assertion.expires_at or 'never'}")


@app.command()
def health(
    url: str = typer.Option("http://localhost:3000", help="Server URL"),
):
    """Check GhostGuard server health."""
    import httpx

    try:
        resp = httpx.get(f"{url}/health", timeout=5)
        data = resp.json()
        version = httpx.get(f"{url}/version", timeout=5).json()
        state = "ok" if data.get("ok") else "unhealthy"
        console.print(f"[bold green]{state}[/bold green] — agent v{version.get('version')}")
    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
