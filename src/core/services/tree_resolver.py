"""Punto de entrada del motor de resolución.

`TreeResolver` une los colaboradores (lector XML, catálogo, registros) y abre
un `ResolutionContext` nuevo por llamada. Dos modos, elegidos por llamada:

- `deep_resolve`: exhaustivo, reescribe el árbol recibido in situ.
- `light_resolve`: selectivo, trabaja sobre una copia.
"""

from __future__ import annotations

from typing import Any

from core.interfaces import AttributedTreeReader, LegalEntityRegistry, PersonRegistry, SchemaCatalog
from core.services.context import ResolutionContext
from core.services.deep_resolver import DeepResolver
from core.services.light_resolver import LightResolver
from core.services.type_tags import extract_type_tags


class TreeResolver:
    def __init__(
        self,
        *,
        reader: AttributedTreeReader,
        catalog: SchemaCatalog | None = None,
        legal_registry: LegalEntityRegistry | None = None,
        person_registry: PersonRegistry | None = None,
    ) -> None:
        self._reader = reader
        self._catalog = catalog
        self._legal_registry = legal_registry
        self._person_registry = person_registry

    def _open_pass(self, raw_xml: str) -> ResolutionContext:
        root = self._reader.parse(raw_xml)
        return ResolutionContext(
            type_tags=extract_type_tags(root),
            catalog=self._catalog,
            legal_registry=self._legal_registry,
            person_registry=self._person_registry,
        )

    async def deep_resolve(self, raw_xml: str | None, tree: Any) -> Any:
        """Anota cada nodo con `_type`/`_namespace` (muta `tree`).

        Devuelve `tree` sin cambios si falta alguno de los dos argumentos.
        """

        if not raw_xml or not tree:
            return tree
        context = self._open_pass(raw_xml)
        return await DeepResolver(context).resolve(tree)

    async def light_resolve(self, raw_xml: str | None, tree: Any) -> list[Any] | None:
        """Anota solo los nodos con `xsi:type`; nunca muta `tree`.

        Lanza `ExternalServiceError` si Brreg no responde.
        """

        if not raw_xml or not tree:
            return None
        context = self._open_pass(raw_xml)
        return await LightResolver(context).resolve(tree)
