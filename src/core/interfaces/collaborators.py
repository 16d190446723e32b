"""Contratos de los colaboradores del resolvedor.

Por qué Protocol:
- Contrato estructural (duck typing) sin herencia rígida.
- Los adaptadores (WSDL, Brreg, FREG, defusedxml) son intercambiables y
  testeables sin acoplar el Core a implementaciones concretas.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.attributed import AttributedNode
from core.domain.models import LegalEntityProfile, PersonProfile, ResolvedSchema


@runtime_checkable
class SchemaCatalog(Protocol):
    """Catálogo de tipos indexado por `(namespace, type_name)`.

    Reglas:
    - Debe estar completamente cargado antes de empezar una pasada.
    - `namespace=None` busca el nombre en cualquier namespace (tipos y elementos).
    - Devuelve `None` si no hay coincidencia; puede lanzar `SchemaCatalogError`.
    """

    def lookup(self, namespace: str | None, type_name: str) -> ResolvedSchema | None:
        ...


@runtime_checkable
class AttributedTreeReader(Protocol):
    def parse(self, raw_xml: str) -> AttributedNode:
        """Convierte el XML crudo en un árbol navegable con atributos."""

        ...


@runtime_checkable
class LegalEntityRegistry(Protocol):
    async def lookup_by_org_id(self, org_id: str) -> LegalEntityProfile | None:
        """Busca una entidad por número de organización; `None` si no existe.

        Puede lanzar `RegistryError` ante fallos de conectividad.
        """

        ...


@runtime_checkable
class PersonRegistry(Protocol):
    async def lookup_by_ssn(self, ssn: str, full: bool = False, light: bool = False) -> PersonProfile | None:
        """Busca una persona por identificador nacional; `None` si no existe."""

        ...
