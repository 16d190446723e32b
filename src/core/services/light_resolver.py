"""Resolución selectiva (modo "light") y redacción.

Solo los nodos con `xsi:type` explícito se anotan. Además:
- `JuridiskPerson` se enriquece con Brreg y se marca `avviklet` si la entidad
  está disuelta o no existe;
- `FysiskPerson` se enriquece con FREG y se aplica la política de contacto
  (`kanIkkeKontaktes`, `handleManually`, supresión de direcciones graduadas).

Trabaja sobre una copia profunda: el árbol del llamante nunca se modifica.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, MutableMapping, MutableSequence, Union

from core.domain.attributed import XSI_TYPE
from core.domain.models import LEGAL_ENTITY_TYPE, NATURAL_PERSON_TYPE, PersonProfile
from core.errors import ExternalServiceError, RegistryError
from core.services.context import (
    ATTRIBUTES_KEY,
    NAMESPACE_KEY,
    TYPE_KEY,
    ResolutionContext,
    declared_type,
    identifier_of,
)

logger = logging.getLogger(__name__)

ADDRESS_KEYS = ("bostedsadresse", "postadresse")

Container = Union[MutableMapping[str, Any], MutableSequence[Any]]


def merge_metadata(metadata: dict[str, Any], node: Any) -> Any:
    """`metadata` delante de los campos existentes; si no es posible, el nodo sin tocar."""

    try:
        return {**metadata, **node}
    except TypeError:
        logger.debug("Could not merge type metadata into %r", type(node).__name__)
        return node


def _attributes_redundant(attributes: Any) -> bool:
    if not isinstance(attributes, dict) or XSI_TYPE not in attributes:
        return False
    return all(k == XSI_TYPE or k.startswith("xmlns") for k in attributes)


def apply_contact_policy(node: dict[str, Any], profile: PersonProfile) -> None:
    """Marca al sujeto según FREG.

    - no contactable => `kanIkkeKontaktes`
    - contactable + gradering restringida => `handleManually` y sin direcciones
    - contactable + inaktiv (D-nummer) => `handleManually`, direcciones intactas
    """

    if profile.kan_kontaktes is False:
        node["kanIkkeKontaktes"] = True
    elif profile.must_handle_manually:
        node["handleManually"] = True
        if not profile.inactive:
            for key in ADDRESS_KEYS:
                node.pop(key, None)


class LightResolver:
    def __init__(self, context: ResolutionContext) -> None:
        self._ctx = context

    async def resolve(self, tree: Any) -> list[Any]:
        owned = copy.deepcopy(tree)
        items = owned if isinstance(owned, list) else [owned]
        for index in range(len(items)):
            await self._visit(items, index)
        return items

    async def _visit(self, container: Container, slot: Any) -> None:
        node = container[slot]
        if not node:
            return

        if isinstance(node, list):
            for index in range(len(node)):
                await self._visit(node, index)
            return
        if not isinstance(node, dict):
            return

        for key in list(node):
            await self._visit(node, key)

        type_name = declared_type(node)
        if type_name is None:
            return

        metadata: dict[str, Any] = {TYPE_KEY: type_name}
        if type_name == LEGAL_ENTITY_TYPE:
            await self._enrich_legal_entity(node)
        elif type_name == NATURAL_PERSON_TYPE:
            await self._enrich_person(node)

        namespace = self._ctx.namespace_of(type_name)
        if namespace:
            metadata[NAMESPACE_KEY] = namespace

        merged = merge_metadata(metadata, node)
        if isinstance(merged, dict) and _attributes_redundant(merged.get(ATTRIBUTES_KEY)):
            merged.pop(ATTRIBUTES_KEY)
        container[slot] = merged

    async def _enrich_legal_entity(self, node: dict[str, Any]) -> None:
        org_id = identifier_of(node)
        if not org_id:
            return
        try:
            profile = await self._ctx.legal_entity(org_id)
        except RegistryError as exc:
            raise ExternalServiceError(
                f"External service failure: could not reach Brønnøysundregistrene ({exc})",
                service=exc.service,
            ) from exc

        if profile is None:
            node["avviklet"] = True
            return
        node["brreg"] = profile.to_tree()
        if profile.dissolved:
            node["avviklet"] = True

    async def _enrich_person(self, node: dict[str, Any]) -> None:
        ssn = identifier_of(node)
        if not ssn:
            return
        try:
            profile = await self._ctx.person(ssn)
        except RegistryError as exc:
            logger.warning("FREG lookup failed for a FysiskPerson node, leaving it unenriched: %s", exc)
            return
        if profile is None:
            return
        node["freg"] = profile.to_tree()
        apply_contact_policy(node, profile)
