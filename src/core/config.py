"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (Matrikkel, Brreg, FREG) lean config de forma consistente.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "matrikkel-resolver"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "matrikkel-resolver"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "matrikkel-resolver"
    return Path.home() / ".config" / "matrikkel-resolver"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str | None]) -> Path:
    """Escribe/actualiza variables en el .env global del usuario."""

    env_path = get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# matrikkel-resolver user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="MATRIKKEL_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    base_url: str = Field(
        default="https://prodtest.matrikkel.no/matrikkelapi/wsapi/v1/",
        min_length=8,
        description="Base URL de la API SOAP de Matrikkel; los endpoints se concatenan.",
    )
    username: str | None = Field(
        default=None,
        description="Usuario de la API de Matrikkel.",
    )
    password: str | None = Field(
        default=None,
        description="Contraseña de la API de Matrikkel.",
    )

    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout por request (segundos).",
    )
    user_agent: str = Field(
        default="matrikkel-resolver/0.1",
        min_length=1,
        description="User-Agent para las peticiones salientes.",
    )

    brreg_base_url: str = Field(
        default="https://data.brreg.no",
        min_length=8,
        description="Base URL de Enhetsregisteret (Brønnøysundregistrene).",
    )
    freg_base_url: str | None = Field(
        default=None,
        description="Base URL del servicio de consulta a Folkeregisteret.",
    )
    freg_api_key: str | None = Field(
        default=None,
        description="Clave enviada en `x-functions-key` al servicio de FREG.",
    )

    wsdl_dir: Path | None = Field(
        default=None,
        description="Directorio con los documentos WSDL/XSD de Matrikkel.",
    )
