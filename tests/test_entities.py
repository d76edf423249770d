"""Tests for entity extraction and the bounded top-N application."""
from types import SimpleNamespace

import pytest

from websearch.models import Entity, EntityType, NormalizedResult
from websearch.nlp.entities import NullEntityExtractor, SpacyEntityExtractor, apply_entities

from .conftest import FakeExtractor


class FakeNLP:
    def __init__(self, ents):
        self.ents = ents
        self.calls = []

    def __call__(self, text):
        self.calls.append(text)
        return SimpleNamespace(ents=[SimpleNamespace(text=t, label_=label) for t, label in self.ents])


def _results(n):
    return [
        NormalizedResult(id=str(i), url=f"https://x.test/{i}", title=f"T{i}", snippet=f"<em>Snippet</em> {i}", body="x" * 2000)
        for i in range(n)
    ]


def test_spacy_labels_are_mapped():
    extractor = SpacyEntityExtractor()
    extractor._nlp = FakeNLP([
        ("Angela Merkel", "PERSON"),
        ("Berlin", "GPE"),
        ("Siemens", "ORG"),
        ("1989", "CARDINAL"),
        ("Monday", "DATE"),
        ("berlin", "GPE"),
        ("  ", "ORG"),
    ])

    entities = extractor.extract("Angela Merkel visited Siemens in Berlin on Monday, 1989.")
    assert entities == [
        Entity(text="Angela Merkel", type=EntityType.PERSON),
        Entity(text="Berlin", type=EntityType.PLACE),
        Entity(text="Siemens", type=EntityType.ORGANIZATION),
        Entity(text="1989", type=EntityType.NUMBER),
        Entity(text="Monday", type=EntityType.OTHER),
    ]


def test_empty_text_is_not_analysed():
    extractor = SpacyEntityExtractor()
    extractor._nlp = FakeNLP([("Berlin", "GPE")])
    assert extractor.extract("") == []
    assert extractor._nlp.calls == []


def test_missing_model_disables_extraction(monkeypatch):
    import spacy

    def _missing(name):
        raise OSError(f"[E050] Can't find model '{name}'")

    monkeypatch.setattr(spacy, "load", _missing)
    extractor = SpacyEntityExtractor("xx_missing_model")
    assert extractor.extract("Berlin is a city.") == []
    assert extractor.extract("Paris too.") == []


def test_null_extractor():
    assert NullEntityExtractor().extract("Berlin") == []


@pytest.mark.asyncio
async def test_apply_entities_is_bounded_to_top_n():
    extractor = FakeExtractor([Entity(text="Berlin", type=EntityType.PLACE)])
    results = await apply_entities(_results(12), extractor, limit=5)

    assert len(extractor.texts) == 5
    assert [len(r.entities) for r in results] == [1] * 5 + [0] * 7
    assert [r.id for r in results] == [str(i) for i in range(12)]
    # snippet text without markup, never the full body
    assert sorted(extractor.texts) == [f"Snippet {i}" for i in range(5)]


@pytest.mark.asyncio
async def test_failing_extractor_yields_empty_lists():
    class Broken:
        def extract(self, text):
            raise RuntimeError("model crashed")

    results = await apply_entities(_results(3), Broken(), limit=5)
    assert [r.entities for r in results] == [[], [], []]


@pytest.mark.asyncio
async def test_apply_entities_on_empty_page():
    assert await apply_entities([], FakeExtractor(), limit=5) == []
