"""Named-entity extraction for result snippets using spaCy."""
from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, List, Protocol, Sequence

from websearch.models import Entity, EntityType, NormalizedResult
from websearch.search.transform import strip_markup

logger = logging.getLogger(__name__)

LABEL_TYPES = {
    "PERSON": EntityType.PERSON,
    "PER": EntityType.PERSON,
    "GPE": EntityType.PLACE,
    "LOC": EntityType.PLACE,
    "FAC": EntityType.PLACE,
    "ORG": EntityType.ORGANIZATION,
    "NORP": EntityType.ORGANIZATION,
    "CARDINAL": EntityType.NUMBER,
    "QUANTITY": EntityType.NUMBER,
    "MONEY": EntityType.NUMBER,
    "PERCENT": EntityType.NUMBER,
    "ORDINAL": EntityType.NUMBER,
}


class EntityExtractor(Protocol):
    def extract(self, text: str) -> List[Entity]:
        ...


class NullEntityExtractor:
    """Used when extraction is switched off."""

    def extract(self, text: str) -> List[Entity]:
        return []


class SpacyEntityExtractor:
    """Loads the spaCy pipeline on first use; a missing model disables extraction."""

    def __init__(self, model: str = "en_core_web_sm"):
        self.model = model
        self._nlp: Any = None
        self._unavailable = False
        self._lock = threading.Lock()

    def _load_nlp(self) -> Any:
        if self._nlp is not None or self._unavailable:
            return self._nlp
        with self._lock:
            if self._nlp is None and not self._unavailable:
                import spacy

                try:
                    self._nlp = spacy.load(self.model)
                except OSError:
                    logger.warning(f"{self.model} model not found. Run: python -m spacy download {self.model}")
                    self._unavailable = True
        return self._nlp

    def extract(self, text: str) -> List[Entity]:
        """
        Extract named entities from text.

        Returns:
            Entities in document order, deduplicated by (lower-cased text, type)
        """
        if not text or not isinstance(text, str):
            return []

        nlp = self._load_nlp()
        if nlp is None:
            return []

        try:
            doc = nlp(text)
        except Exception as e:
            logger.error(f"Entity extraction failed: {e}")
            return []

        entities: List[Entity] = []
        seen = set()
        for ent in doc.ents:
            name = ent.text.strip()
            if not name:
                continue
            entity_type = LABEL_TYPES.get(ent.label_, EntityType.OTHER)
            key = (name.lower(), entity_type)
            if key in seen:
                continue
            seen.add(key)
            entities.append(Entity(text=name, type=entity_type))
        return entities


async def apply_entities(
    results: Sequence[NormalizedResult],
    extractor: EntityExtractor,
    limit: int = 5,
) -> list[NormalizedResult]:
    """
    Attach entities to the first ``limit`` results.

    Only the snippet is analysed, never the full body. Results past the limit
    keep an empty entity list. Extraction runs in worker threads, one per result.
    """
    head = list(results[:limit])
    if not head:
        return list(results)

    texts = [strip_markup(r.highlighted_body or r.snippet) for r in head]
    extracted = await asyncio.gather(
        *(asyncio.to_thread(extractor.extract, t) for t in texts),
        return_exceptions=True,
    )

    enriched = []
    for result, ents in zip(head, extracted):
        if isinstance(ents, Exception):
            logger.warning(f"Entity extraction failed for {result.url}: {ents}")
            ents = []
        enriched.append(result.model_copy(update={"entities": list(ents)}))
    return enriched + list(results[limit:])
