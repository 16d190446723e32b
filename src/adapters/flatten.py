"""Aplanado de resultados a filas clave-valor.

Se usa con `--flatten`: primero se extraen los items de datos (quitando el
envoltorio de la respuesta SOAP) y después cada item se aplana con claves
separadas por punto.
"""

from __future__ import annotations

from typing import Any, Iterable


def flatten_object(value: Any, parent_key: str = "", separator: str = ".") -> dict[str, Any]:
    """Aplana dicts/listas anidados: `{"a": {"b": [1]}}` -> `{"a.b.0": 1}`."""

    flat: dict[str, Any] = {}
    if isinstance(value, dict):
        if not value and parent_key:
            flat[parent_key] = {}
        for key, child in value.items():
            child_key = f"{parent_key}{separator}{key}" if parent_key else str(key)
            flat.update(flatten_object(child, child_key, separator))
    elif isinstance(value, list):
        if not value and parent_key:
            flat[parent_key] = []
        for index, child in enumerate(value):
            child_key = f"{parent_key}{separator}{index}" if parent_key else str(index)
            flat.update(flatten_object(child, child_key, separator))
    else:
        flat[parent_key or "value"] = value
    return flat


def _extend(items: list[Any], value: Any) -> None:
    if isinstance(value, list):
        items.extend(value)
    else:
        items.append(value)


def extract_items(responses: Iterable[Any]) -> list[Any]:
    """Items de datos de cada respuesta.

    Orden de búsqueda: `item`, `items`, `<primera clave>.return.item`; si no hay
    ninguno, la respuesta entera es un item. Un item `{"value": x}` se reduce a `x`.
    """

    items: list[Any] = []
    for response in responses:
        if not isinstance(response, dict) or not response:
            items.append(response)
            continue

        first = response[next(iter(response))]
        if "item" in response:
            _extend(items, response["item"])
        elif "items" in response:
            _extend(items, response["items"])
        elif isinstance(first, dict) and first.get("return"):
            returned = first["return"]
            if isinstance(returned, dict) and "item" in returned:
                value = returned["item"]
                if isinstance(value, list):
                    for item in value:
                        if isinstance(item, dict) and len(item) == 1 and "value" in item:
                            items.append(item["value"])
                        else:
                            items.append(item)
                else:
                    items.append(value)
        else:
            items.append(response)
    return items
