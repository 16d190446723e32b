"""Exportación JSON del árbol resuelto.

Por qué JSON:
- Interoperabilidad con otros pipelines (GIS, saksbehandling).
- Permite persistir el resultado sin volver a consultar Matrikkel ni los registros.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def export_tree_json(*, tree: Any, output_path: Path) -> Path:
    """Exporta el árbol a JSON UTF-8 con formato estable (orden de claves preservado)."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(
        json.dumps(tree, ensure_ascii=False, indent=2) + "\n",
        encoding="utf-8",
    )
    return output_path
