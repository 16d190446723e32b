"""Servicios del Core: extracción de tags y resolución del árbol."""

from core.services.tree_resolver import TreeResolver
from core.services.type_tags import extract_type_tags

__all__ = ["TreeResolver", "extract_type_tags"]
