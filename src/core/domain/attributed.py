"""Árbol XML con atributos (independiente del árbol JSON que se reescribe).

Por qué un modelo propio:
- El resolvedor solo necesita tag, atributos, hijos y los prefijos de
  namespace en alcance para interpretar `xsi:type="ns3:JuridiskPerson"`.
- Evita que el Core dependa de la API de ElementTree.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"
XSI_TYPE = "xsi:type"


def split_qname(value: str) -> tuple[str | None, str]:
    """Separa `prefijo:nombre`; sin separador el prefijo es `None`."""

    if ":" in value:
        prefix, local = value.split(":", 1)
        return prefix, local
    return None, value


@dataclass
class AttributedNode:
    tag: str
    namespace: str | None = None
    attributes: dict[str, str] = field(default_factory=dict)
    text: str | None = None
    children: list[AttributedNode] = field(default_factory=list)
    nsmap: dict[str | None, str] = field(default_factory=dict)

    @property
    def xsi_type(self) -> str | None:
        return self.attributes.get(XSI_TYPE)

    def iter(self) -> Iterator[AttributedNode]:
        """Recorrido pre-order (el nodo antes que sus hijos)."""

        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))
