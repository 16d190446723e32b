"""Cliente SOAP de la API de Matrikkel (Kartverket).

Flujo de `make_request`:
1. Prettify del cuerpo SOAP y POST al endpoint (auth básica).
2. Rechazo de respuestas HTML/401 (Matrikkel devuelve 200 + HTML si no autoriza).
3. XML -> árbol JSON, sin el sobre `Envelope.Body`; `Fault` => error.
4. Resolución deep (`resolve=True`) o light.
5. Opcional: aplanado de los items.

Si la respuesta contiene personas se consulta FREG; si contiene empresas, Brreg.
"""

from __future__ import annotations

import logging
from typing import Any
from xml.parsers.expat import ExpatError

import httpx
from defusedxml import DefusedXmlException
from defusedxml.minidom import parseString

from adapters.flatten import extract_items, flatten_object
from adapters.http_client import build_async_client, describe_html_page
from adapters.xml_reader import xml_to_tree
from core.config import AppSettings
from core.errors import MatrikkelResponseError
from core.services.deep_resolver import unwrap_body
from core.services.tree_resolver import TreeResolver

logger = logging.getLogger(__name__)

NOT_OK_CONTENT: tuple[str, ...] = ("<!DOCTYPE HTML", "401 Unauthorized")


def prettify_xml(xml: str | None) -> str:
    if not xml:
        return ""
    try:
        document = parseString(xml.strip())
    except (ExpatError, DefusedXmlException) as exc:
        raise ValueError(f"SOAP body is not valid XML: {exc}") from exc
    pretty = document.toprettyxml(indent="  ", newl="\n")
    return "\n".join(line for line in pretty.splitlines() if line.strip()) + "\n"


def check_soap_response(raw: str) -> None:
    """Lanza `MatrikkelResponseError` si el cuerpo no es una respuesta SOAP."""

    upper = raw.upper()
    for phrase in NOT_OK_CONTENT:
        if phrase.upper() in upper:
            summary = describe_html_page(raw) or raw[:200]
            raise MatrikkelResponseError(
                "The returned response from the Matrikkel API was invalid; "
                f"the request might be unauthorized ({summary})"
            )


def _raise_on_fault(body: Any) -> None:
    if not isinstance(body, dict) or "Fault" not in body:
        return
    fault = body["Fault"]
    message = fault.get("faultstring") if isinstance(fault, dict) else fault
    if isinstance(message, dict):
        message = message.get("_")
    raise MatrikkelResponseError(f"Matrikkel SOAP fault: {message or 'unknown fault'}")


async def process_response(
    raw: str,
    resolver: TreeResolver,
    *,
    resolve: bool = False,
    flatten: bool = False,
) -> list[Any]:
    """Convierte una respuesta SOAP cruda en el árbol resuelto (o filas planas)."""

    check_soap_response(raw)
    tree = unwrap_body(xml_to_tree(raw))
    if not tree:
        raise MatrikkelResponseError("Matrikkel answered with an empty SOAP body")
    _raise_on_fault(tree)

    if resolve:
        result = await resolver.deep_resolve(raw, tree)
        if not result:
            result = tree
    else:
        result = await resolver.light_resolve(raw, tree)

    if not isinstance(result, list):
        result = [result]

    if flatten:
        return [flatten_object(item) for item in extract_items(result)]
    return result


class MatrikkelClient:
    def __init__(
        self,
        endpoint: str,
        *,
        resolver: TreeResolver,
        settings: AppSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not endpoint:
            raise ValueError("Endpoint must be specified")
        if endpoint.startswith("http"):
            raise ValueError("Endpoint cannot be a complete url")

        self._settings = settings or AppSettings()
        self._resolver = resolver
        self._transport = transport
        self.endpoint = self._settings.base_url + endpoint

    def _auth(self) -> tuple[str, str] | None:
        if not self._settings.username:
            return None
        return self._settings.username, self._settings.password or ""

    async def make_request(self, body: str, *, resolve: bool = False, flatten: bool = False) -> list[Any]:
        if not body:
            raise ValueError("make_request: body cannot be empty")

        payload = prettify_xml(body)
        try:
            async with build_async_client(
                self._settings,
                extra_headers={"Content-Type": "text/xml;charset=UTF-8", "Accept": "text/xml"},
                auth=self._auth(),
                transport=self._transport,
            ) as client:
                resp = await client.post(self.endpoint, content=payload.encode("utf-8"))
        except httpx.HTTPError as exc:
            raise MatrikkelResponseError(f"Could not reach the Matrikkel API: {exc}") from exc

        logger.debug("Matrikkel %s answered HTTP %s", self.endpoint, resp.status_code)
        return await process_response(resp.text, self._resolver, resolve=resolve, flatten=flatten)
