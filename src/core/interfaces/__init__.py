"""Interfaces/abstracciones del Core.

Por qué:
- Define contratos (Protocol) que implementan adaptadores concretos.
- Permite invertir dependencias: el resolvedor depende de abstracciones y los
  tests sustituyen catálogo y registros por fakes en memoria.
"""

from core.interfaces.collaborators import (
    AttributedTreeReader,
    LegalEntityRegistry,
    PersonRegistry,
    SchemaCatalog,
)

__all__ = [
    "AttributedTreeReader",
    "LegalEntityRegistry",
    "PersonRegistry",
    "SchemaCatalog",
]
