"""Entity extraction for search results."""

from .entities import (
    EntityExtractor,
    NullEntityExtractor,
    SpacyEntityExtractor,
    apply_entities,
)

__all__ = ["EntityExtractor", "NullEntityExtractor", "SpacyEntityExtractor", "apply_entities"]
