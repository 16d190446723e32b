"""Tests for the WSDL/XSD schema catalog."""

import pytest

from adapters.schema_catalog import XS_NS, WsdlSchemaCatalog
from core.errors import SchemaCatalogError

SCHEMA = """<?xml version="1.0" encoding="UTF-8"?>
<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema" xmlns:p="urn:person" targetNamespace="urn:person">
  <xs:complexType name="Person">
    <xs:sequence>
      <xs:element name="id" type="p:PersonId"/>
      <xs:element name="nummer" type="xs:string"/>
    </xs:sequence>
  </xs:complexType>
  <xs:complexType name="JuridiskPerson">
    <xs:complexContent>
      <xs:extension base="p:Person">
        <xs:sequence>
          <xs:element name="navn" type="xs:string"/>
          <xs:element name="forrige" type="p:Person" minOccurs="0"/>
        </xs:sequence>
      </xs:extension>
    </xs:complexContent>
  </xs:complexType>
  <xs:complexType name="PersonId">
    <xs:sequence><xs:element name="value" type="xs:long"/></xs:sequence>
  </xs:complexType>
  <xs:complexType name="Kjede">
    <xs:sequence><xs:element name="neste" type="p:Kjede" minOccurs="0"/></xs:sequence>
  </xs:complexType>
  <xs:complexType name="PersonList">
    <xs:sequence><xs:element name="item" type="p:Person" maxOccurs="unbounded"/></xs:sequence>
  </xs:complexType>
  <xs:element name="findEiereResponse">
    <xs:complexType>
      <xs:sequence><xs:element name="return" type="p:PersonList"/></xs:sequence>
    </xs:complexType>
  </xs:element>
</xs:schema>
"""

WSDL = """<?xml version="1.0" encoding="UTF-8"?>
<wsdl:definitions xmlns:wsdl="http://schemas.xmlsoap.org/wsdl/" xmlns:xs="http://www.w3.org/2001/XMLSchema"
                  xmlns:k="urn:kommune">
  <wsdl:types>
    <xs:schema targetNamespace="urn:kommune">
      <xs:simpleType name="Kommunenummer"><xs:restriction base="xs:string"/></xs:simpleType>
      <xs:complexType name="Kommune">
        <xs:sequence>
          <xs:element name="kommunenummer" type="k:Kommunenummer"/>
          <xs:element name="fylke">
            <xs:complexType><xs:sequence><xs:element name="navn" type="xs:string"/></xs:sequence></xs:complexType>
          </xs:element>
        </xs:sequence>
      </xs:complexType>
    </xs:schema>
  </wsdl:types>
</wsdl:definitions>
"""

# A base type whose field is typed with one of its own subtypes.
SELF_REFERENCING_BASE = """<?xml version="1.0" encoding="UTF-8"?>
<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema" xmlns:e="urn:eier" targetNamespace="urn:eier">
  <xs:complexType name="Eier">
    <xs:sequence>
      <xs:element name="representant" type="e:Selskap" minOccurs="0"/>
      <xs:element name="nummer" type="xs:string"/>
    </xs:sequence>
  </xs:complexType>
  <xs:complexType name="Selskap">
    <xs:complexContent>
      <xs:extension base="e:Eier">
        <xs:sequence><xs:element name="navn" type="xs:string"/></xs:sequence>
      </xs:extension>
    </xs:complexContent>
  </xs:complexType>
</xs:schema>
"""


@pytest.fixture
def catalog():
    catalog = WsdlSchemaCatalog()
    catalog.load_document(SCHEMA, source="person.xsd")
    return catalog


class TestLookup:
    def test_inherits_base_fields(self, catalog):
        schema = catalog.lookup("urn:person", "JuridiskPerson")

        assert schema.type_name == "JuridiskPerson"
        assert schema.namespace == "urn:person"
        assert list(schema.fields) == ["id", "nummer", "navn", "forrige"]

    def test_builtin_fields_are_leaf_schemas(self, catalog):
        schema = catalog.lookup("urn:person", "Person")

        nummer = schema.fields["nummer"]
        assert nummer.type_name == "string"
        assert nummer.namespace == XS_NS
        assert nummer.fields == {}
        assert schema.fields["id"].fields["value"].type_name == "long"

    def test_recursive_type_points_to_itself(self, catalog):
        schema = catalog.lookup("urn:person", "Kjede")

        assert schema.fields["neste"] is schema

    def test_memoized_between_lookups(self, catalog):
        assert catalog.lookup("urn:person", "Person") is catalog.lookup("urn:person", "Person")

    def test_without_namespace_finds_response_element(self, catalog):
        schema = catalog.lookup(None, "findEiereResponse")

        assert schema is not None
        item = schema.fields["return"].fields["item"]
        assert item.type_name == "Person"

    def test_unknown_type(self, catalog):
        assert catalog.lookup("urn:person", "Bygg") is None
        assert catalog.lookup(None, "Bygg") is None

    def test_wrong_namespace(self, catalog):
        assert catalog.lookup("urn:other", "Person") is None

    @pytest.mark.parametrize("first", ["Eier", "Selskap"])
    def test_inherited_fields_do_not_depend_on_lookup_order(self, first):
        catalog = WsdlSchemaCatalog()
        catalog.load_document(SELF_REFERENCING_BASE, source="eier.xsd")

        catalog.lookup("urn:eier", first)
        selskap = catalog.lookup("urn:eier", "Selskap")
        eier = catalog.lookup("urn:eier", "Eier")

        assert list(selskap.fields) == ["representant", "nummer", "navn"]
        assert eier.fields["representant"] is selskap
        assert selskap.fields["representant"] is selskap
        assert selskap.fields["nummer"].type_name == "string"

    def test_empty_catalog_raises(self):
        with pytest.raises(SchemaCatalogError):
            WsdlSchemaCatalog().lookup("urn:person", "Person")


class TestLoading:
    def test_schema_inside_wsdl(self):
        catalog = WsdlSchemaCatalog()
        catalog.load_document(WSDL, source="kommune.wsdl")

        schema = catalog.lookup("urn:kommune", "Kommune")
        assert schema.fields["kommunenummer"].type_name == "Kommunenummer"
        assert schema.fields["fylke"].fields["navn"].type_name == "string"

    def test_load_directory(self, tmp_path):
        (tmp_path / "person.xsd").write_text(SCHEMA, encoding="utf-8")
        nested = tmp_path / "kommune"
        nested.mkdir()
        (nested / "kommune.wsdl").write_text(WSDL, encoding="utf-8")
        (tmp_path / "README.txt").write_text("ignored", encoding="utf-8")

        catalog = WsdlSchemaCatalog.from_directory(tmp_path)

        assert catalog.document_count == 2
        assert catalog.namespaces == {"urn:person", "urn:kommune"}

    def test_missing_directory(self, tmp_path):
        with pytest.raises(SchemaCatalogError):
            WsdlSchemaCatalog.from_directory(tmp_path / "nope")

    def test_broken_document(self):
        with pytest.raises(SchemaCatalogError):
            WsdlSchemaCatalog().load_document("<xs:schema", source="broken.xsd")
