"""Localización de recursos (documentos WSDL/XSD).

Este módulo vive en `core/` porque:
- centraliza *dónde* están los documentos de esquema sin acoplarse a la CLI
- evita duplicar lógica de paths en el catálogo y en `doctor`.

No incluye los WSDL de Matrikkel en el repo; se descargan del portal de
Kartverket y se apuntan con `MATRIKKEL_WSDL_DIR` o `--wsdl-dir`.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from core.config import AppSettings, get_user_config_dir

SCHEMA_SUFFIXES: tuple[str, ...] = (".wsdl", ".xsd")


def _project_root() -> Path:
    # core/resources_loader.py -> core -> src -> <project_root>
    return Path(__file__).resolve().parents[2]


def _data_dir() -> Path:
    """Directorio de datos en runtime.

    Reglas:
    - Si MATRIKKEL_DATA_DIR está definido, se usa tal cual.
    - Si estamos en modo "frozen" (PyInstaller), usar un path escribible del usuario.
    - En desarrollo, usar <project_root>/data.
    """

    override = (os.environ.get("MATRIKKEL_DATA_DIR") or "").strip()
    if override:
        return Path(override)

    if getattr(sys, "frozen", False):
        return get_user_config_dir() / "data"

    return _project_root() / "data"


def get_default_wsdl_dir(settings: AppSettings | None = None) -> Path | None:
    """Busca el directorio de WSDL en ubicaciones comunes.

    Orden:
    1) `settings.wsdl_dir` (MATRIKKEL_WSDL_DIR)
    2) <data_dir>/wsdl
    3) <project_root>/wsdl
    4) ./wsdl (cwd)
    """

    settings = settings or AppSettings()
    candidates: list[Path] = []
    if settings.wsdl_dir:
        candidates.append(settings.wsdl_dir)
    candidates.extend(
        [
            _data_dir() / "wsdl",
            _project_root() / "wsdl",
            Path.cwd() / "wsdl",
        ]
    )
    for p in candidates:
        if p.exists() and p.is_dir():
            return p
    return None


def list_schema_documents(directory: Path) -> list[Path]:
    """Documentos `*.wsdl` y `*.xsd` bajo `directory`, en orden estable."""

    return sorted(
        p for p in directory.rglob("*") if p.is_file() and p.suffix.lower() in SCHEMA_SUFFIXES
    )
