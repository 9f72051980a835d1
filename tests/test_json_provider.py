import json

import pytest

from deck_monitor.errors import ProviderError
from deck_monitor.models.enums import ElementCapability, ElementType
from deck_monitor.providers.base import ALL_CAPABILITIES, read_field
from deck_monitor.providers.json_document import (
    DictDocumentProvider,
    JsonFileProvider,
    validate_document,
)

from deck_factory import document, element, slide, three_slide_deck


class TestDocumentSchema:
    def test_valid_document(self):
        validate_document(three_slide_deck())

    def test_missing_presentation_id(self):
        with pytest.raises(ProviderError) as excinfo:
            validate_document({"slides": []})
        assert excinfo.value.code == "provider.invalid_document"

    def test_error_reports_location(self):
        deck = document(slide("s1", element("e1")))
        deck["slides"][0]["elements"][0]["position"]["x"] = "left"
        with pytest.raises(ProviderError) as excinfo:
            validate_document(deck)
        assert "slides/0/elements/0/position/x" in excinfo.value.detail

    def test_table_content_rows_are_accepted(self):
        validate_document(
            document(slide("s1", element("t", [["a"]], element_type="TABLE")))
        )


class TestDictDocumentProvider:
    def test_raw_tree(self):
        deck = document(
            slide("s1", element("e1", "Hi"), background={"color": "#fff"})
        )
        raw = DictDocumentProvider(deck).get_document_snapshot()

        assert raw.presentation_id == "deck-1"
        assert raw.slides[0].object_id == "s1"
        assert read_field(raw.slides[0].readers["background"]) == {"color": "#fff"}
        item = raw.slides[0].elements[0]
        assert item.object_id == "e1"
        assert item.element_type == "SHAPE"
        assert read_field(item.readers["content"]) == "Hi"

    def test_callable_source_is_read_every_time(self):
        calls = []

        def source():
            calls.append(1)
            return three_slide_deck()

        provider = DictDocumentProvider(source)
        provider.get_document_snapshot()
        provider.get_document_snapshot()
        assert len(calls) == 2

    def test_source_errors_become_provider_errors(self):
        def source():
            raise ConnectionError("timeout")

        with pytest.raises(ProviderError) as excinfo:
            DictDocumentProvider(source).get_document_snapshot()
        assert "timeout" in excinfo.value.detail

    def test_capabilities_default_to_all(self):
        provider = DictDocumentProvider(three_slide_deck())
        assert provider.capabilities(ElementType.VIDEO) == ALL_CAPABILITIES

    def test_declared_capabilities(self):
        provider = DictDocumentProvider(
            three_slide_deck(),
            capabilities={
                ElementType.SHAPE: frozenset({ElementCapability.CONTENT})
            },
        )
        assert provider.capabilities(ElementType.SHAPE) == {
            ElementCapability.CONTENT
        }
        assert provider.capabilities(ElementType.TABLE) == frozenset()


class TestJsonFileProvider:
    def test_reads_file_on_every_call(self, tmp_path):
        path = tmp_path / "deck.json"
        path.write_text(json.dumps(three_slide_deck()), encoding="utf-8")
        provider = JsonFileProvider(path)
        assert len(provider.get_document_snapshot().slides) == 3

        deck = three_slide_deck()
        deck["slides"].pop()
        path.write_text(json.dumps(deck), encoding="utf-8")
        assert len(provider.get_document_snapshot().slides) == 2

    def test_missing_file(self, tmp_path):
        with pytest.raises(ProviderError) as excinfo:
            JsonFileProvider(tmp_path / "nope.json").get_document_snapshot()
        assert excinfo.value.code == "provider.failed"

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ProviderError) as excinfo:
            JsonFileProvider(path).get_document_snapshot()
        assert excinfo.value.code == "provider.invalid_document"
