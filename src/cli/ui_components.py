"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en `resolve`, `query` y `doctor`.
"""

from __future__ import annotations

from typing import Any, Sequence

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida (solo en modo interactivo)."""

    title = Text("matrikkel-resolver", style="bold cyan")
    subtitle = Text("Matrikkel • xsi:type • Brreg • FREG", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_rows_table(rows: Sequence[dict[str, Any]], *, max_columns: int = 12) -> Table:
    """Tabla Rich para filas aplanadas (`--flatten --table`).

    Las columnas salen de la unión de claves en orden de aparición; se cortan en
    `max_columns` para que la tabla siga siendo legible en un terminal.
    """

    columns: list[str] = []
    for row in rows:
        for key in row:
            if key not in columns:
                columns.append(key)

    table = Table(title=f"Items ({len(rows)})")
    shown = columns[:max_columns]
    for name in shown:
        table.add_column(name, overflow="fold")
    for row in rows:
        table.add_row(*("" if row.get(name) is None else str(row.get(name)) for name in shown))
    if len(columns) > max_columns:
        table.caption = f"{len(columns) - max_columns} more column(s) hidden; use --output for the full rows"
    return table


def build_flags_panel(flags: dict[str, int]) -> Panel:
    """Resumen de marcas de política (avviklet, handleManually, ...)."""

    body = Text()
    for name, count in flags.items():
        style = "yellow" if count else "dim"
        body.append(f"{name}: {count}\n", style=style)
    return Panel(body, title=Text("Flags", style="bold yellow"), border_style="yellow")
