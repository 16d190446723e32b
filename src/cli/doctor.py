"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from adapters.schema_catalog import WsdlSchemaCatalog
from core.config import AppSettings, write_user_env_vars
from core.errors import SchemaCatalogError
from core.resources_loader import get_default_wsdl_dir

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(url: str, settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.get(url)
        return True, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc)


def _check_catalog(settings: AppSettings) -> tuple[str, str]:
    directory = get_default_wsdl_dir(settings)
    if directory is None:
        return "MISSING", "No WSDL directory (set MATRIKKEL_WSDL_DIR) -> deep resolution leaves types unresolved"
    try:
        catalog = WsdlSchemaCatalog.from_directory(directory)
    except SchemaCatalogError as exc:
        return "FAIL", str(exc)
    return "OK", (
        f"{directory}: {catalog.document_count} document(s), "
        f"{catalog.type_count} type(s), {len(catalog.namespaces)} namespace(s)"
    )


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="matrikkel-resolver Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    table.add_row("Matrikkel base_url", "OK", settings.base_url)
    if settings.username and settings.password:
        table.add_row("Matrikkel credentials", "OK", settings.username)
    else:
        table.add_row("Matrikkel credentials", "MISSING", "Needed for `query`; run `doctor setup`")
    if settings.freg_base_url:
        table.add_row("FREG", "OK", settings.freg_base_url)
    else:
        table.add_row("FREG", "OPTIONAL", "Not configured -> FysiskPerson nodes are not enriched")

    status, detail = _check_catalog(settings)
    table.add_row("WSDL catalog", status, detail)

    # Connectivity (best-effort)
    ok_brreg, detail_brreg = asyncio.run(
        _check_http(f"{settings.brreg_base_url.rstrip('/')}/enhetsregisteret/api/enheter?size=1", settings)
    )
    table.add_row("Brreg connectivity", "OK" if ok_brreg else "FAIL", detail_brreg)
    ok_matrikkel, detail_matrikkel = asyncio.run(_check_http(settings.base_url, settings))
    table.add_row("Matrikkel connectivity", "OK" if ok_matrikkel else "FAIL", detail_matrikkel)

    _console.print(table)

    if not ok_brreg:
        _console.print(
            "\n[yellow]Note:[/yellow] Light resolution fails outright when Brreg is unreachable "
            "and the response contains JuridiskPerson owners."
        )


@app.command(name="setup")
def setup() -> None:
    """Interactive setup (stores config in the user config .env)."""

    username = typer.prompt("Matrikkel username").strip()
    password = typer.prompt("Matrikkel password", hide_input=True, confirmation_prompt=False).strip()
    base_url = typer.prompt(
        "Matrikkel base URL",
        default=AppSettings().base_url,
        show_default=True,
    ).strip()
    freg_base_url = typer.prompt("FREG lookup URL (blank to skip)", default="", show_default=False).strip()
    freg_api_key = ""
    if freg_base_url:
        freg_api_key = typer.prompt("FREG API key", hide_input=True, default="", show_default=False).strip()

    if not username or not password:
        raise typer.BadParameter("username and password are required")

    env_path = write_user_env_vars(
        {
            "MATRIKKEL_USERNAME": username,
            "MATRIKKEL_PASSWORD": password,
            "MATRIKKEL_BASE_URL": base_url,
            "MATRIKKEL_FREG_BASE_URL": freg_base_url or None,
            "MATRIKKEL_FREG_API_KEY": freg_api_key or None,
        }
    )

    _console.print(f"[green]Saved config to:[/green] {env_path}")
