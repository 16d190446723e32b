"""CLI entry point (Typer).

Commands:
- `resolve`: resolve a saved Matrikkel SOAP response.
- `query`: send a SOAP body to a Matrikkel endpoint and resolve the answer.
- `doctor`: diagnostics and interactive setup.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from adapters.brreg_client import BrregClient
from adapters.freg_client import FregClient
from adapters.json_exporter import export_tree_json
from adapters.matrikkel_client import MatrikkelClient, process_response
from adapters.schema_catalog import WsdlSchemaCatalog
from adapters.xml_reader import XmlTreeReader
from cli.doctor import app as doctor_app
from cli.ui_components import build_flags_panel, build_rows_table, print_banner
from core.config import AppSettings
from core.errors import MatrikkelResponseError, ResolutionError, SchemaCatalogError
from core.resources_loader import get_default_wsdl_dir
from core.services import TreeResolver

app = typer.Typer(
    no_args_is_help=True,
    help="Resolve Matrikkel SOAP responses into typed, enriched JSON.",
)
app.add_typer(doctor_app, name="doctor")

_console = Console()

_FLAG_KEYS = ("avviklet", "handleManually", "kanIkkeKontaktes")

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def build_resolver(settings: AppSettings, wsdl_dir: Path | None = None) -> TreeResolver:
    directory = wsdl_dir or get_default_wsdl_dir(settings)
    catalog = None
    if directory is not None:
        catalog = WsdlSchemaCatalog.from_directory(directory)
        logger.info("Loaded %d schema type(s) from %s", catalog.type_count, directory)
    else:
        logger.warning("No WSDL directory configured; deep resolution will leave types unresolved")

    return TreeResolver(
        reader=XmlTreeReader(),
        catalog=catalog,
        legal_registry=BrregClient(settings),
        person_registry=FregClient(settings) if settings.freg_base_url else None,
    )


def count_flags(tree: Any) -> dict[str, int]:
    counts = {key: 0 for key in _FLAG_KEYS}
    stack = [tree]
    while stack:
        node = stack.pop()
        if isinstance(node, list):
            stack.extend(node)
        elif isinstance(node, dict):
            for key in _FLAG_KEYS:
                if node.get(key) is True:
                    counts[key] += 1
            stack.extend(v for k, v in node.items() if k not in ("brreg", "freg"))
    return counts


def _emit(result: list[Any], *, output: Path | None, table: bool, flatten: bool) -> None:
    if output is not None:
        path = export_tree_json(tree=result, output_path=output)
        _console.print(f"[green]Saved:[/green] {path}")
    elif table and flatten:
        _console.print(build_rows_table(result))
    else:
        _console.print_json(data=result)

    if not flatten:
        flags = count_flags(result)
        if any(flags.values()):
            _console.print(build_flags_panel(flags))


def _fail(exc: Exception) -> typer.Exit:
    _console.print(f"[red]Error:[/red] {exc}")
    return typer.Exit(code=1)


@app.command()
def resolve(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Saved SOAP response (XML)."),
    deep: bool = typer.Option(False, "--deep", help="Annotate every node instead of only xsi:type nodes."),
    flatten: bool = typer.Option(False, "--flatten", help="Return the data items as flat key/value rows."),
    table: bool = typer.Option(False, "--table", help="Show flattened rows as a table."),
    wsdl_dir: Optional[Path] = typer.Option(None, "--wsdl-dir", file_okay=False, help="Directory with Matrikkel WSDL/XSD."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the result to a JSON file."),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Resolve a saved Matrikkel response."""

    _configure_logging(verbose)
    settings = AppSettings()
    raw = file.read_text(encoding="utf-8")

    try:
        resolver = build_resolver(settings, wsdl_dir)
        result = asyncio.run(process_response(raw, resolver, resolve=deep, flatten=flatten))
    except (ResolutionError, MatrikkelResponseError, SchemaCatalogError) as exc:
        raise _fail(exc) from exc

    _emit(result, output=output, table=table, flatten=flatten)


@app.command()
def query(
    endpoint: str = typer.Argument(..., help="Service path relative to the base URL, e.g. MatrikkelenhetServiceWS."),
    body_file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="SOAP request body."),
    deep: bool = typer.Option(False, "--deep"),
    flatten: bool = typer.Option(False, "--flatten"),
    table: bool = typer.Option(False, "--table"),
    wsdl_dir: Optional[Path] = typer.Option(None, "--wsdl-dir", file_okay=False),
    output: Optional[Path] = typer.Option(None, "--output", "-o"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Send a SOAP request to the Matrikkel API and resolve the response."""

    _configure_logging(verbose)
    settings = AppSettings()
    if verbose:
        print_banner(_console)

    try:
        client = MatrikkelClient(endpoint, resolver=build_resolver(settings, wsdl_dir), settings=settings)
        body = body_file.read_text(encoding="utf-8")
        result = asyncio.run(client.make_request(body, resolve=deep, flatten=flatten))
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    except (ResolutionError, MatrikkelResponseError, SchemaCatalogError) as exc:
        raise _fail(exc) from exc

    _emit(result, output=output, table=table, flatten=flatten)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
