"""Estado de una pasada de resolución.

Una instancia por llamada a `deep_resolve`/`light_resolve`: guarda los tags
encontrados, la memoria de esquemas resueltos y las dos cachés de
enriquecimiento. Se descarta al terminar la llamada; nada se comparte entre
pasadas.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from core.domain.attributed import XSI_TYPE, split_qname
from core.domain.models import LegalEntityProfile, PersonProfile, ResolvedSchema, TypeTag
from core.errors import SchemaCatalogError
from core.interfaces import LegalEntityRegistry, PersonRegistry, SchemaCatalog

logger = logging.getLogger(__name__)

ATTRIBUTES_KEY = "$"
TYPE_KEY = "_type"
NAMESPACE_KEY = "_namespace"
METADATA_KEYS = frozenset({TYPE_KEY, NAMESPACE_KEY})


def declared_type(node: Any) -> str | None:
    """Nombre de la variante declarada en la bolsa de atributos del nodo JSON."""

    if not isinstance(node, dict):
        return None
    attributes = node.get(ATTRIBUTES_KEY)
    if not isinstance(attributes, dict):
        return None
    raw = attributes.get(XSI_TYPE)
    if not isinstance(raw, str) or not raw.strip():
        return None
    return split_qname(raw.strip())[1] or None


def identifier_of(node: dict[str, Any], key: str = "nummer") -> str | None:
    """Identificador escalar bajo `key` (org.nr o fødselsnummer)."""

    value = node.get(key)
    if isinstance(value, dict):
        # <nummer xsi:type="...">123</nummer> lands as {"$": {...}, "_": "123"}
        value = value.get("_", value.get("value"))
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (str, int)):
        text = str(value).strip()
        return text or None
    return None


@dataclass
class ResolutionContext:
    type_tags: dict[str, TypeTag]
    catalog: SchemaCatalog | None = None
    legal_registry: LegalEntityRegistry | None = None
    person_registry: PersonRegistry | None = None

    schemas: dict[str, ResolvedSchema | None] = field(default_factory=dict)
    legal_entities: dict[str, LegalEntityProfile | None] = field(default_factory=dict)
    persons: dict[str, PersonProfile | None] = field(default_factory=dict)

    def namespace_of(self, type_name: str) -> str | None:
        tag = self.type_tags.get(type_name)
        return tag.namespace if tag else None

    def schema_for(self, type_name: str) -> ResolvedSchema | None:
        """Esquema resuelto para un tipo, memorizado durante la pasada.

        Un fallo del catálogo se registra y deja el tipo como no resuelto.
        """

        if type_name in self.schemas:
            return self.schemas[type_name]

        schema: ResolvedSchema | None = None
        if self.catalog is not None:
            try:
                schema = self.catalog.lookup(self.namespace_of(type_name), type_name)
            except SchemaCatalogError as exc:
                logger.warning("Schema lookup failed for %s: %s", type_name, exc)
        self.schemas[type_name] = schema
        return schema

    async def legal_entity(self, org_id: str) -> LegalEntityProfile | None:
        """Consulta Brreg una sola vez por org.nr; los "no encontrado" también se cachean.

        Los fallos de conectividad (`RegistryError`) no se cachean y se propagan.
        """

        if org_id in self.legal_entities:
            return self.legal_entities[org_id]
        if self.legal_registry is None:
            return None
        profile = await self.legal_registry.lookup_by_org_id(org_id)
        self.legal_entities[org_id] = profile
        return profile

    async def person(self, ssn: str) -> PersonProfile | None:
        if ssn in self.persons:
            return self.persons[ssn]
        if self.person_registry is None:
            return None
        profile = await self.person_registry.lookup_by_ssn(ssn, full=False, light=True)
        self.persons[ssn] = profile
        return profile
