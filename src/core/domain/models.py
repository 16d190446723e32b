"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Los registros externos (Brreg, Folkeregisteret) devuelven JSON heterogéneo;
  validamos solo los campos que gobiernan la política y conservamos el resto.
- Facilita la serialización de vuelta al árbol (`model_dump(by_alias=True)`).

Nota:
- `ResolvedSchema` es un dataclass y no un modelo: el catálogo construye grafos
  con ciclos (tipos recursivos) que Pydantic no puede validar ni comparar.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

UNRESOLVED = "unresolved"

LEGAL_ENTITY_TYPE = "JuridiskPerson"
NATURAL_PERSON_TYPE = "FysiskPerson"

RESTRICTED_GRADINGS: frozenset[str] = frozenset({"fortrolig", "strengtFortrolig", "klientadresse"})
INACTIVE_STATUS = "inaktiv"


class TypeTag(BaseModel):
    """Variante declarada (`xsi:type`) en un nodo del XML."""

    model_config = ConfigDict(frozen=True)

    type_name: str = Field(
        ...,
        min_length=1,
        description="Nombre del tipo sin prefijo de namespace (p.ej. 'JuridiskPerson').",
    )
    namespace: str | None = Field(
        default=None,
        description="URI del namespace asociado al prefijo del tag, si se pudo resolver.",
    )


@dataclass(eq=False)
class ResolvedSchema:
    """Respuesta del catálogo para un tipo: identidad + mapa de campos."""

    type_name: str
    namespace: str | None
    fields: dict[str, ResolvedSchema | None] = field(default_factory=dict)

    def field_schema(self, name: str) -> ResolvedSchema | None:
        return self.fields.get(name)

    def __repr__(self) -> str:
        # The field graph may be cyclic.
        return f"ResolvedSchema({self.namespace!r}, {self.type_name!r}, fields={sorted(self.fields)!r})"


class LegalEntityProfile(BaseModel):
    """Perfil de una enhet en Enhetsregisteret (Brreg).

    Solo tipamos lo que usamos; el resto del JSON se conserva (`extra="allow"`)
    porque se adjunta tal cual bajo `brreg` en el árbol.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    organisasjonsnummer: str = Field(
        ...,
        min_length=1,
        description="Número de organización (9 dígitos).",
    )
    navn: str | None = Field(
        default=None,
        description="Nombre registrado de la entidad.",
    )
    slettedato: str | None = Field(
        default=None,
        description="Fecha de baja en el registro; presente si la entidad está disuelta.",
    )
    konkurs: bool | None = Field(default=None)
    under_avvikling: bool | None = Field(default=None, alias="underAvvikling")

    @property
    def dissolved(self) -> bool:
        return self.slettedato is not None

    def to_tree(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Address(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    adressegradering: str | None = Field(
        default=None,
        description="Gradering de confidencialidad (ugradert, fortrolig, strengtFortrolig, klientadresse).",
    )


class PersonProfile(BaseModel):
    """Perfil ligero de una persona en Folkeregisteret (FREG)."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    kan_kontaktes: bool | None = Field(
        default=None,
        alias="kanKontaktes",
        description="Si la persona puede ser contactada por la administración.",
    )
    status: str | None = Field(
        default=None,
        description="Estado en el registro (bosatt, inaktiv, doed, ...).",
    )
    bostedsadresse: Address | None = Field(
        default=None,
        description="Dirección de residencia, con su gradering.",
    )

    @property
    def contactable(self) -> bool:
        return self.kan_kontaktes is True

    @property
    def grading(self) -> str | None:
        if self.bostedsadresse is None:
            return None
        return self.bostedsadresse.adressegradering

    @property
    def inactive(self) -> bool:
        return self.status == INACTIVE_STATUS

    @property
    def must_handle_manually(self) -> bool:
        if not self.contactable:
            return False
        if self.inactive:
            return True
        return self.grading in RESTRICTED_GRADINGS

    def to_tree(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
