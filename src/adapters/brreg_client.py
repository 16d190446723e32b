"""Cliente de Enhetsregisteret (Brønnøysundregistrene).

API pública y sin autenticación:
- 200 => enhet activa (o con `slettedato`)
- 410 => enhet borrada; el cuerpo trae `slettedato`
- 400/404 => número inválido o inexistente
"""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.models import LegalEntityProfile
from core.errors import RegistryError

logger = logging.getLogger(__name__)

SERVICE = "brreg"


class BrregClient:
    """Implementación de `LegalEntityRegistry`."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._transport = transport

    def _url(self, org_id: str) -> str:
        base = self._settings.brreg_base_url.rstrip("/")
        return f"{base}/enhetsregisteret/api/enheter/{org_id}"

    async def lookup_by_org_id(self, org_id: str) -> LegalEntityProfile | None:
        url = self._url(org_id)
        try:
            async with build_async_client(
                self._settings,
                extra_headers={"Accept": "application/json"},
                transport=self._transport,
            ) as client:
                resp = await client.get(url)
        except httpx.HTTPError as exc:
            raise RegistryError(f"Brreg request failed: {exc}", service=SERVICE) from exc

        if resp.status_code in (400, 404):
            logger.debug("Brreg has no entity %s (HTTP %s)", org_id, resp.status_code)
            return None
        if resp.status_code not in (200, 410):
            raise RegistryError(
                f"Brreg answered HTTP {resp.status_code} for {org_id}",
                service=SERVICE,
                status_code=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise RegistryError(f"Brreg answered with invalid JSON for {org_id}", service=SERVICE) from exc
        if not isinstance(data, dict):
            raise RegistryError("Brreg answered with an unexpected payload", service=SERVICE)
        data.setdefault("organisasjonsnummer", org_id)
        try:
            return LegalEntityProfile.model_validate(data)
        except ValidationError as exc:
            raise RegistryError(f"Brreg payload for {org_id} is invalid: {exc}", service=SERVICE) from exc
