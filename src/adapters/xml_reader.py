"""Lectura de XML (defusedxml).

Dos vistas del mismo documento:
- `parse_attributed_tree`: árbol navegable con atributos y prefijos en alcance,
  usado para descubrir los `xsi:type`.
- `xml_to_tree`: árbol "tipo JSON" que el resolvedor reescribe. Reglas:
  nombres de elemento sin prefijo, atributos bajo `$`, texto junto a atributos
  bajo `_`, hijos repetidos como lista, hijo único sin lista, elemento vacío `""`.

defusedxml porque el XML llega de un servicio remoto (sin DTD/entidades).
"""

from __future__ import annotations

import io
from typing import Any

from defusedxml import DefusedXmlException
from defusedxml.ElementTree import ParseError, iterparse

from core.domain.attributed import XSI_NS, AttributedNode
from core.errors import MatrikkelResponseError

ATTRIBUTES_KEY = "$"
TEXT_KEY = "_"


def _split_clark(name: str) -> tuple[str | None, str]:
    # ElementTree uses "{uri}local"
    if name.startswith("{"):
        uri, local = name[1:].split("}", 1)
        return uri, local
    return None, name


def _attribute_name(name: str, nsmap: dict[str | None, str]) -> str:
    uri, local = _split_clark(name)
    if uri is None:
        return local
    if uri == XSI_NS:
        return f"xsi:{local}"
    for prefix, candidate in nsmap.items():
        if prefix and candidate == uri:
            return f"{prefix}:{local}"
    return local


def parse_attributed_tree(raw_xml: str) -> AttributedNode:
    """Parsea el XML y devuelve la raíz como `AttributedNode`.

    Lanza `MatrikkelResponseError` si el documento no es XML válido o contiene
    construcciones prohibidas (DTD, entidades).
    """

    stack: list[AttributedNode] = []
    root: AttributedNode | None = None
    pending: dict[str | None, str] = {}

    source = io.BytesIO(raw_xml.encode("utf-8"))
    try:
        for event, item in iterparse(source, events=("start-ns", "start", "end")):
            if event == "start-ns":
                prefix, uri = item
                pending[prefix or None] = uri
            elif event == "start":
                nsmap = dict(stack[-1].nsmap) if stack else {}
                nsmap.update(pending)
                pending = {}

                uri, tag = _split_clark(item.tag)
                node = AttributedNode(
                    tag=tag,
                    namespace=uri,
                    attributes={_attribute_name(k, nsmap): v for k, v in item.attrib.items()},
                    nsmap=nsmap,
                )
                if stack:
                    stack[-1].children.append(node)
                else:
                    root = node
                stack.append(node)
            else:
                node = stack.pop()
                text = (item.text or "").strip()
                node.text = text or None
    except (ParseError, DefusedXmlException) as exc:
        raise MatrikkelResponseError(f"Response is not valid XML: {exc}") from exc

    if root is None:
        raise MatrikkelResponseError("Response is not valid XML: empty document")
    return root


def _node_to_value(node: AttributedNode) -> Any:
    if not node.children:
        if not node.attributes:
            return node.text or ""
        out: dict[str, Any] = {ATTRIBUTES_KEY: dict(node.attributes)}
        if node.text:
            out[TEXT_KEY] = node.text
        return out

    out = {}
    if node.attributes:
        out[ATTRIBUTES_KEY] = dict(node.attributes)
    if node.text:
        out[TEXT_KEY] = node.text

    repeated: set[str] = set()
    for child in node.children:
        value = _node_to_value(child)
        if child.tag not in out:
            out[child.tag] = value
        elif child.tag in repeated:
            out[child.tag].append(value)
        else:
            out[child.tag] = [out[child.tag], value]
            repeated.add(child.tag)
    return out


def attributed_to_tree(root: AttributedNode) -> dict[str, Any]:
    return {root.tag: _node_to_value(root)}


def xml_to_tree(raw_xml: str) -> dict[str, Any]:
    return attributed_to_tree(parse_attributed_tree(raw_xml))


class XmlTreeReader:
    """Implementación de `AttributedTreeReader` basada en defusedxml."""

    def parse(self, raw_xml: str) -> AttributedNode:
        return parse_attributed_tree(raw_xml)
