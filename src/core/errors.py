"""Excepciones del Core.

Por qué una jerarquía propia:
- El resolvedor necesita distinguir fallos recuperables (catálogo, registro en
  el camino profundo) de errores de programación, que deben propagarse.
- La CLI traduce estas excepciones a mensajes legibles sin conocer adaptadores.
"""

from __future__ import annotations


class ResolutionError(Exception):
    """Raised when a resolution pass cannot produce a tree."""


class SchemaCatalogError(Exception):
    """Raised by a schema catalog when a lookup cannot be answered."""


class RegistryError(Exception):
    """Raised when an identity registry is unreachable or answers unexpectedly."""

    def __init__(self, message: str, *, service: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.service = service
        self.status_code = status_code


class ExternalServiceError(ResolutionError):
    """A resolution pass failed because an external registry failed."""

    def __init__(self, message: str, *, service: str) -> None:
        super().__init__(message)
        self.service = service


class MatrikkelResponseError(Exception):
    """The Matrikkel API answered with something that is not a SOAP document."""
