"""Cliente del servicio de consulta a Folkeregisteret (FREG).

FREG no es público: se consulta a través de un servicio intermedio que
gestiona Maskinporten. Contrato:

    POST {freg_base_url}/lookup  {"ssn": ..., "full": bool, "light": bool}
    200 => perfil JSON, 404 => persona inexistente
"""

from __future__ import annotations

import httpx
from pydantic import ValidationError

from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.models import PersonProfile
from core.errors import RegistryError

SERVICE = "freg"


class FregClient:
    """Implementación de `PersonRegistry`."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._transport = transport

    async def lookup_by_ssn(self, ssn: str, full: bool = False, light: bool = False) -> PersonProfile | None:
        base_url = self._settings.freg_base_url
        if not base_url:
            raise RegistryError("FREG base URL is not configured (MATRIKKEL_FREG_BASE_URL)", service=SERVICE)

        headers = {"Accept": "application/json"}
        if self._settings.freg_api_key:
            headers["x-functions-key"] = self._settings.freg_api_key

        try:
            async with build_async_client(
                self._settings,
                extra_headers=headers,
                transport=self._transport,
            ) as client:
                resp = await client.post(
                    f"{base_url.rstrip('/')}/lookup",
                    json={"ssn": ssn, "full": full, "light": light},
                )
        except httpx.HTTPError as exc:
            raise RegistryError(f"FREG request failed: {exc}", service=SERVICE) from exc

        if resp.status_code == 404:
            return None
        if resp.status_code != 200:
            raise RegistryError(
                f"FREG answered HTTP {resp.status_code}",
                service=SERVICE,
                status_code=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as exc:
            raise RegistryError("FREG answered with invalid JSON", service=SERVICE) from exc
        if not data:
            return None
        if not isinstance(data, dict):
            raise RegistryError("FREG answered with an unexpected payload", service=SERVICE)
        try:
            return PersonProfile.model_validate(data)
        except ValidationError as exc:
            raise RegistryError(f"FREG payload is invalid: {exc}", service=SERVICE) from exc
