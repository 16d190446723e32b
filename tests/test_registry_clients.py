"""Tests for the Brreg and FREG HTTP clients (httpx.MockTransport)."""

import json

import httpx
import pytest

from adapters.brreg_client import BrregClient
from adapters.freg_client import FregClient
from core.config import AppSettings
from core.errors import RegistryError

from conftest import ORG_ID, SSN


def transport(status: int, payload=None, seen: list | None = None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status, json=payload)

    return httpx.MockTransport(handler)


def failing_transport() -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    return httpx.MockTransport(handler)


class TestBrregClient:
    @pytest.mark.asyncio
    async def test_active_entity(self, settings):
        seen: list[httpx.Request] = []
        payload = {"organisasjonsnummer": ORG_ID, "navn": "ACME AS", "organisasjonsform": {"kode": "AS"}}
        client = BrregClient(settings, transport=transport(200, payload, seen))

        profile = await client.lookup_by_org_id(ORG_ID)

        assert str(seen[0].url) == f"https://brreg.test/enhetsregisteret/api/enheter/{ORG_ID}"
        assert profile.navn == "ACME AS"
        assert profile.dissolved is False
        assert profile.to_tree()["organisasjonsform"] == {"kode": "AS"}

    @pytest.mark.asyncio
    async def test_deleted_entity(self, settings):
        client = BrregClient(settings, transport=transport(410, {"organisasjonsnummer": ORG_ID, "slettedato": "2020-01-01"}))

        profile = await client.lookup_by_org_id(ORG_ID)

        assert profile.dissolved is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [400, 404])
    async def test_unknown_entity(self, settings, status):
        client = BrregClient(settings, transport=transport(status, {"feilmelding": "Ingen enhet"}))

        assert await client.lookup_by_org_id(ORG_ID) is None

    @pytest.mark.asyncio
    async def test_server_error(self, settings):
        client = BrregClient(settings, transport=transport(503, {}))

        with pytest.raises(RegistryError) as excinfo:
            await client.lookup_by_org_id(ORG_ID)

        assert excinfo.value.service == "brreg"
        assert excinfo.value.status_code == 503

    @pytest.mark.asyncio
    async def test_connection_error(self, settings):
        client = BrregClient(settings, transport=failing_transport())

        with pytest.raises(RegistryError, match="connection refused"):
            await client.lookup_by_org_id(ORG_ID)


class TestFregClient:
    @pytest.mark.asyncio
    async def test_posts_lookup(self, settings):
        seen: list[httpx.Request] = []
        payload = {"kanKontaktes": True, "status": "bosatt", "bostedsadresse": {"adressegradering": "ugradert"}}
        client = FregClient(settings, transport=transport(200, payload, seen))

        profile = await client.lookup_by_ssn(SSN, full=False, light=True)

        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == "https://freg.test/api/lookup"
        assert request.headers["x-functions-key"] == "key-123"
        assert json.loads(request.content) == {"ssn": SSN, "full": False, "light": True}
        assert profile.contactable is True
        assert profile.grading == "ugradert"

    @pytest.mark.asyncio
    async def test_not_found(self, settings):
        client = FregClient(settings, transport=transport(404, {}))

        assert await client.lookup_by_ssn(SSN, light=True) is None

    @pytest.mark.asyncio
    async def test_not_configured(self):
        client = FregClient(AppSettings(_env_file=None, freg_base_url=None))

        with pytest.raises(RegistryError, match="not configured"):
            await client.lookup_by_ssn(SSN)

    @pytest.mark.asyncio
    async def test_connection_error(self, settings):
        client = FregClient(settings, transport=failing_transport())

        with pytest.raises(RegistryError) as excinfo:
            await client.lookup_by_ssn(SSN)

        assert excinfo.value.service == "freg"
