"""Catálogo de tipos a partir de los WSDL/XSD de Matrikkel.

Indexa cada `xs:schema` (suelto o dentro de `wsdl:types`) en
namespace -> tipo -> campos, y construye `ResolvedSchema` anidados bajo demanda.

Soporta lo que usan los WSDL de Matrikkel:
- `complexType` con `sequence`/`all`/`choice`
- `complexContent`/`simpleContent` con `extension`/`restriction` (hereda campos)
- `element` con `type`, con `complexType` anónimo, o `ref`
- `simpleType` (tipo hoja)
- tipos builtin de XML Schema (hoja en el namespace de XSD)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from core.domain.attributed import AttributedNode, split_qname
from core.domain.models import ResolvedSchema
from core.errors import MatrikkelResponseError, SchemaCatalogError
from core.resources_loader import list_schema_documents
from adapters.xml_reader import parse_attributed_tree

logger = logging.getLogger(__name__)

XS_NS = "http://www.w3.org/2001/XMLSchema"

QName = tuple[str | None, str]

_GROUP_TAGS = frozenset({"sequence", "all", "choice", "complexContent", "simpleContent"})
_DERIVATION_TAGS = frozenset({"extension", "restriction"})


@dataclass(frozen=True)
class FieldRef:
    """Tipo de un campo: por nombre de tipo o vía un elemento global (`ref`)."""

    kind: str  # "type" | "element"
    qname: QName


@dataclass
class TypeDefinition:
    namespace: str | None
    name: str
    fields: dict[str, FieldRef | None] = field(default_factory=dict)
    base: QName | None = None


class WsdlSchemaCatalog:
    """Implementación de `SchemaCatalog` sobre documentos WSDL/XSD."""

    def __init__(self) -> None:
        self._types: dict[QName, TypeDefinition] = {}
        self._elements: dict[QName, FieldRef | None] = {}
        self._resolved: dict[QName, ResolvedSchema] = {}
        self._documents = 0

    @classmethod
    def from_directory(cls, directory: Path) -> WsdlSchemaCatalog:
        catalog = cls()
        catalog.load_directory(directory)
        return catalog

    @property
    def document_count(self) -> int:
        return self._documents

    @property
    def type_count(self) -> int:
        return len(self._types)

    @property
    def namespaces(self) -> set[str | None]:
        return {ns for ns, _ in self._types}

    def load_directory(self, directory: Path) -> None:
        if not directory.is_dir():
            raise SchemaCatalogError(f"Schema directory not found: {directory}")
        for path in list_schema_documents(directory):
            self.load_document(path.read_text(encoding="utf-8"), source=str(path))

    def load_document(self, text: str, *, source: str = "<string>") -> None:
        try:
            root = parse_attributed_tree(text)
        except MatrikkelResponseError as exc:
            raise SchemaCatalogError(f"Could not parse schema document {source}: {exc}") from exc

        schemas = [n for n in root.iter() if n.tag == "schema" and n.namespace == XS_NS]
        for schema in schemas:
            self._index_schema(schema)
        self._documents += 1
        self._resolved.clear()
        logger.debug("Indexed %d schema block(s) from %s", len(schemas), source)

    def _index_schema(self, schema: AttributedNode) -> None:
        target = schema.attributes.get("targetNamespace")
        for child in schema.children:
            if child.namespace != XS_NS:
                continue
            name = child.attributes.get("name")
            if not name:
                continue
            if child.tag == "complexType":
                self._index_complex_type(child, target, name)
            elif child.tag == "simpleType":
                self._types[(target, name)] = TypeDefinition(namespace=target, name=name)
            elif child.tag == "element":
                self._elements[(target, name)] = self._element_type(child, target, name)

    def _index_complex_type(self, node: AttributedNode, target: str | None, name: str) -> None:
        definition = TypeDefinition(namespace=target, name=name)
        self._collect(node, target, definition)
        self._types[(target, name)] = definition

    def _collect(self, node: AttributedNode, target: str | None, definition: TypeDefinition) -> None:
        for child in node.children:
            if child.namespace != XS_NS:
                continue
            if child.tag in _GROUP_TAGS:
                self._collect(child, target, definition)
            elif child.tag in _DERIVATION_TAGS:
                base = child.attributes.get("base")
                if base:
                    definition.base = self._qname(child, base, target)
                self._collect(child, target, definition)
            elif child.tag == "element":
                ref = child.attributes.get("ref")
                name = child.attributes.get("name")
                if name:
                    definition.fields[name] = self._element_type(child, target, f"{definition.name}.{name}")
                elif ref:
                    qname = self._qname(child, ref, target)
                    definition.fields[qname[1]] = FieldRef("element", qname)

    def _element_type(self, node: AttributedNode, target: str | None, anonymous_name: str) -> FieldRef | None:
        declared = node.attributes.get("type")
        if declared:
            return FieldRef("type", self._qname(node, declared, target))
        for child in node.children:
            if child.namespace == XS_NS and child.tag == "complexType":
                self._index_complex_type(child, target, anonymous_name)
                return FieldRef("type", (target, anonymous_name))
            if child.namespace == XS_NS and child.tag == "simpleType":
                self._types[(target, anonymous_name)] = TypeDefinition(namespace=target, name=anonymous_name)
                return FieldRef("type", (target, anonymous_name))
        return None

    @staticmethod
    def _qname(node: AttributedNode, value: str, target: str | None) -> QName:
        prefix, local = split_qname(value.strip())
        if prefix is None:
            return node.nsmap.get(None, target), local
        return node.nsmap.get(prefix, target), local

    def lookup(self, namespace: str | None, type_name: str) -> ResolvedSchema | None:
        """Esquema resuelto para `(namespace, type_name)`.

        Con `namespace=None` se busca el nombre en cualquier namespace, primero
        entre los tipos y después entre los elementos globales (p.ej. el nombre
        de la respuesta SOAP).
        """

        if not self._types and not self._elements:
            raise SchemaCatalogError("Schema catalog is empty; load WSDL documents first")

        if namespace is not None:
            if namespace == XS_NS:
                return self._build((namespace, type_name))
            if (namespace, type_name) in self._types:
                return self._build((namespace, type_name))
            return self._from_element((namespace, type_name))

        for key in self._types:
            if key[1] == type_name:
                return self._build(key)
        for key in self._elements:
            if key[1] == type_name:
                return self._from_element(key)
        return None

    def _from_element(self, key: QName) -> ResolvedSchema | None:
        if key not in self._elements:
            return None
        return self._resolve_ref(self._elements[key])

    def _resolve_ref(self, ref: FieldRef | None) -> ResolvedSchema | None:
        if ref is None:
            return None
        if ref.kind == "element":
            return self._from_element(ref.qname)
        return self._build(ref.qname)

    def _build(self, key: QName) -> ResolvedSchema | None:
        if key in self._resolved:
            return self._resolved[key]

        namespace, name = key
        if namespace == XS_NS:
            schema = ResolvedSchema(type_name=name, namespace=namespace)
            self._resolved[key] = schema
            return schema

        definition = self._types.get(key)
        if definition is None:
            return None

        # Registered before the fields so recursive types point back to it.
        schema = ResolvedSchema(type_name=name, namespace=namespace)
        self._resolved[key] = schema

        for field_name, ref in self._field_refs(definition).items():
            schema.fields[field_name] = self._resolve_ref(ref)
        return schema

    def _field_refs(self, definition: TypeDefinition) -> dict[str, FieldRef | None]:
        """Campos heredados (base primero) más los propios, sin construir la base.

        Trabaja sobre las definiciones indexadas, no sobre `ResolvedSchema`: una
        base aún a medio construir no puede truncar los campos del derivado.
        """

        chain: list[TypeDefinition] = []
        seen: set[QName] = set()
        current: TypeDefinition | None = definition
        while current is not None and (current.namespace, current.name) not in seen:
            seen.add((current.namespace, current.name))
            chain.append(current)
            current = self._types.get(current.base) if current.base is not None else None

        refs: dict[str, FieldRef | None] = {}
        for item in reversed(chain):
            refs.update(item.fields)
        return refs
