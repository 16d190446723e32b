"""Resolución exhaustiva (modo "deep").

Recorre *todos* los nodos del árbol JSON y anota `_type`/`_namespace` en cada
nivel, caminando el esquema del catálogo en paralelo al árbol:

- un `xsi:type` con esquema resuelto sustituye al esquema esperado
  (sustitución polimórfica);
- si no, se usa el esquema del campo en el tipo contenedor;
- sin coincidencia, el nodo queda `unresolved` (nunca es un error).

Efecto secundario: este modo reescribe el árbol del llamante *in situ*.
"""

from __future__ import annotations

import logging
from typing import Any

from core.domain.models import LEGAL_ENTITY_TYPE, UNRESOLVED, ResolvedSchema
from core.errors import RegistryError
from core.services.context import (
    ATTRIBUTES_KEY,
    METADATA_KEYS,
    NAMESPACE_KEY,
    TYPE_KEY,
    ResolutionContext,
    declared_type,
    identifier_of,
)

logger = logging.getLogger(__name__)

ENRICHMENT_KEYS = frozenset({"brreg", "freg", "dsf"})


def unwrap_body(tree: Any) -> Any:
    """`Envelope.Body` si el árbol aún trae el sobre SOAP."""

    if isinstance(tree, dict):
        envelope = tree.get("Envelope")
        if isinstance(envelope, dict) and envelope.get("Body") is not None:
            return envelope["Body"]
    return tree


def _type_metadata(schema: ResolvedSchema | None) -> dict[str, str]:
    if schema is None:
        return {TYPE_KEY: UNRESOLVED, NAMESPACE_KEY: UNRESOLVED}
    return {
        TYPE_KEY: schema.type_name or UNRESOLVED,
        NAMESPACE_KEY: schema.namespace or UNRESOLVED,
    }


def _child_schema(schema: ResolvedSchema | None, key: str) -> ResolvedSchema | None:
    if schema is None:
        return None
    return schema.field_schema(key)


class DeepResolver:
    def __init__(self, context: ResolutionContext) -> None:
        self._ctx = context

    async def resolve(self, tree: Any) -> list[Any]:
        body = unwrap_body(tree)
        responses = body if isinstance(body, list) else [body]

        for response in responses:
            if not isinstance(response, dict) or not response:
                continue
            # Each response is {<operationResponse>: {...}}
            name = next(iter(response))
            data = response[name]
            if not isinstance(data, dict):
                continue

            schema = self._ctx.schema_for(name)
            for key in [k for k in data if not k.startswith(ATTRIBUTES_KEY)]:
                data[key] = await self._visit_value(data[key], key, _child_schema(schema, key))

        return responses

    async def _visit_value(self, value: Any, key: str, expected: ResolvedSchema | None) -> Any:
        if isinstance(value, list):
            for index, element in enumerate(value):
                value[index] = await self._visit_node(element, key, expected)
            return value
        return await self._visit_node(value, key, expected)

    async def _visit_node(self, node: Any, key: str, expected: ResolvedSchema | None) -> Any:
        if node is None or key in ENRICHMENT_KEYS:
            return node

        schema = expected
        type_name = declared_type(node)
        if type_name:
            tagged = self._ctx.schema_for(type_name)
            if tagged is not None:
                schema = tagged

        metadata = _type_metadata(schema)

        if type_name == LEGAL_ENTITY_TYPE and isinstance(node, dict):
            await self._enrich_legal_entity(node)

        if isinstance(node, dict):
            node = {**metadata, **node}
            children = [
                k for k in node if not k.startswith(ATTRIBUTES_KEY) and k not in METADATA_KEYS
            ]
        else:
            node = {**metadata, "value": node}
            children = []

        for child in children:
            node[child] = await self._visit_value(node[child], child, _child_schema(schema, child))
        return node

    async def _enrich_legal_entity(self, node: dict[str, Any]) -> None:
        org_id = identifier_of(node)
        if not org_id:
            return
        try:
            profile = await self._ctx.legal_entity(org_id)
        except RegistryError as exc:
            logger.warning("Brreg lookup failed for %s, continuing without enrichment: %s", org_id, exc)
            return
        if profile is not None:
            node["brreg"] = profile.to_tree()
