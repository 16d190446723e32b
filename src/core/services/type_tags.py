"""Extracción de variantes declaradas (`xsi:type`) en el árbol con atributos."""

from __future__ import annotations

from core.domain.attributed import AttributedNode, split_qname
from core.domain.models import TypeTag


def extract_type_tags(root: AttributedNode | None) -> dict[str, TypeTag]:
    """Devuelve los `TypeTag` distintos del árbol, indexados por `type_name`.

    - Deduplica por nombre de tipo; se conserva el namespace del primer nodo
      (recorrido pre-order) que declara ese tipo.
    - Sin efectos secundarios; árbol sin tags => dict vacío.
    """

    tags: dict[str, TypeTag] = {}
    if root is None:
        return tags

    for node in root.iter():
        raw = (node.xsi_type or "").strip()
        if not raw:
            continue
        prefix, type_name = split_qname(raw)
        if not type_name or type_name in tags:
            continue
        tags[type_name] = TypeTag(type_name=type_name, namespace=node.nsmap.get(prefix))
    return tags
