"""Shared fixtures: sample Matrikkel responses and in-memory collaborators."""

from __future__ import annotations

from typing import Any

import pytest

from adapters.xml_reader import XmlTreeReader, xml_to_tree
from core.config import AppSettings
from core.domain.models import LegalEntityProfile, PersonProfile, ResolvedSchema
from core.errors import SchemaCatalogError
from core.services import TreeResolver
from core.services.deep_resolver import unwrap_body

XS_NS = "http://www.w3.org/2001/XMLSchema"
SERVICE_NS = "http://matrikkel.no/wsapi/v1/service/person"
PERSON_NS = "http://matrikkel.no/wsapi/v1/domain/person"

ORG_ID = "938801363"
SSN = "01017012345"


def juridisk_person(org_id: str = ORG_ID, navn: str = "ACME AS") -> str:
    return (
        '<ns3:item xsi:type="ns3:JuridiskPerson">'
        f"<ns3:nummer>{org_id}</ns3:nummer>"
        f"<ns3:navn>{navn}</ns3:navn>"
        "</ns3:item>"
    )


def fysisk_person(ssn: str = SSN) -> str:
    return (
        '<ns3:item xsi:type="ns3:FysiskPerson">'
        f"<ns3:nummer>{ssn}</ns3:nummer>"
        "<ns3:navn>Kari Nordmann</ns3:navn>"
        "<ns3:bostedsadresse><ns3:adressenavn>Storgata 1</ns3:adressenavn></ns3:bostedsadresse>"
        "<ns3:postadresse><ns3:postnummer>3100</ns3:postnummer></ns3:postadresse>"
        "</ns3:item>"
    )


def soap_response(*items: str, operation: str = "findEiereResponse") -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/">'
        "<soap:Body>"
        f'<ns2:{operation} xmlns:ns2="{SERVICE_NS}" xmlns:ns3="{PERSON_NS}" '
        'xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">'
        f"<ns2:return>{''.join(items)}</ns2:return>"
        f"</ns2:{operation}>"
        "</soap:Body>"
        "</soap:Envelope>"
    )


def response_tree(raw: str) -> Any:
    return unwrap_body(xml_to_tree(raw))


def items_of(result: list[Any], operation: str = "findEiereResponse") -> list[dict[str, Any]]:
    items = result[0][operation]["return"]["item"]
    return items if isinstance(items, list) else [items]


class FakeLegalRegistry:
    def __init__(self, profiles: dict[str, LegalEntityProfile | None] | None = None, error: Exception | None = None):
        self.profiles = profiles or {}
        self.error = error
        self.calls: list[str] = []

    async def lookup_by_org_id(self, org_id: str) -> LegalEntityProfile | None:
        self.calls.append(org_id)
        if self.error is not None:
            raise self.error
        return self.profiles.get(org_id)


class FakePersonRegistry:
    def __init__(self, profiles: dict[str, PersonProfile | None] | None = None, error: Exception | None = None):
        self.profiles = profiles or {}
        self.error = error
        self.calls: list[tuple[str, bool, bool]] = []

    async def lookup_by_ssn(self, ssn: str, full: bool = False, light: bool = False) -> PersonProfile | None:
        self.calls.append((ssn, full, light))
        if self.error is not None:
            raise self.error
        return self.profiles.get(ssn)


class FakeCatalog:
    def __init__(self, schemas: dict[str, ResolvedSchema] | None = None, fail: bool = False):
        self.schemas = schemas or {}
        self.fail = fail
        self.calls: list[tuple[str | None, str]] = []

    def lookup(self, namespace: str | None, type_name: str) -> ResolvedSchema | None:
        self.calls.append((namespace, type_name))
        if self.fail:
            raise SchemaCatalogError("catalog backend unavailable")
        return self.schemas.get(type_name)


def string_schema() -> ResolvedSchema:
    return ResolvedSchema(type_name="string", namespace=XS_NS)


@pytest.fixture
def person_schemas() -> dict[str, ResolvedSchema]:
    person = ResolvedSchema(
        type_name="Person",
        namespace=PERSON_NS,
        fields={"nummer": string_schema(), "navn": string_schema()},
    )
    juridisk = ResolvedSchema(
        type_name="JuridiskPerson",
        namespace=PERSON_NS,
        fields={"nummer": string_schema(), "navn": string_schema()},
    )
    person_list = ResolvedSchema(type_name="PersonList", namespace=PERSON_NS, fields={"item": person})
    response = ResolvedSchema(
        type_name="findEiereResponse",
        namespace=SERVICE_NS,
        fields={"return": person_list},
    )
    return {"Person": person, "JuridiskPerson": juridisk, "findEiereResponse": response}


@pytest.fixture
def acme() -> LegalEntityProfile:
    return LegalEntityProfile.model_validate({"organisasjonsnummer": ORG_ID, "navn": "ACME AS"})


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(
        _env_file=None,
        base_url="https://matrikkel.test/wsapi/v1/",
        username="svc-user",
        password="secret",
        brreg_base_url="https://brreg.test",
        freg_base_url="https://freg.test/api",
        freg_api_key="key-123",
    )


def make_resolver(
    *,
    catalog: Any = None,
    legal: Any = None,
    persons: Any = None,
) -> TreeResolver:
    return TreeResolver(
        reader=XmlTreeReader(),
        catalog=catalog,
        legal_registry=legal,
        person_registry=persons,
    )
