"""Tests for BilingualWriter."""

import pytest

from bilingual import BilingualWriter
from schemas import BilingualText
from tests.conftest import FakeTranslator


class BrokenTranslator:
    """Behaves like a gateway whose provider is down: echoes the source."""

    def translate(self, text: str) -> str:
        return text


@pytest.fixture
def writer():
    return BilingualWriter(FakeTranslator())


class TestPair:
    def test_plain_text_is_translated(self, writer):
        assert writer.pair("Hello") == {"en": "Hello", "ar": "[ar] Hello"}

    def test_manual_arabic_is_kept(self, writer):
        pair = writer.pair(BilingualText(en="Hello", ar="مرحبا"))
        assert pair == {"en": "Hello", "ar": "مرحبا"}
        assert writer.translator.calls == []

    def test_dict_without_arabic_is_translated(self, writer):
        assert writer.pair({"en": "Hello", "ar": ""}) == {"en": "Hello", "ar": "[ar] Hello"}

    def test_empty_values_give_none(self, writer):
        assert writer.pair(None) is None
        assert writer.pair("") is None
        assert writer.pair("  ") is None
        assert writer.pair({"en": ""}) is None
        assert writer.translator.calls == []

    def test_failed_translation_mirrors_english(self):
        writer = BilingualWriter(BrokenTranslator())
        assert writer.pair("Great trip!") == {"en": "Great trip!", "ar": "Great trip!"}


class TestCompose:
    def test_only_translatable_fields_become_pairs(self, writer):
        doc = writer.compose(
            {"name": "Jane", "comment": "Great trip!", "order": 1},
            ("comment", "activityPackage"),
        )
        assert doc == {
            "name": "Jane",
            "comment": {"en": "Great trip!", "ar": "[ar] Great trip!"},
            "order": 1,
        }

    def test_absent_fields_are_not_added(self, writer):
        doc = writer.compose({"order": 3}, ("comment", "activityPackage"))
        assert doc == {"order": 3}
        assert writer.translator.calls == []

    def test_empty_optional_field_is_omitted(self, writer):
        doc = writer.compose({"comment": "Nice", "activityPackage": ""}, ("comment", "activityPackage"))
        assert "activityPackage" not in doc

    def test_empty_optional_field_clears_on_update(self, writer):
        doc = writer.compose(
            {"activityPackage": ""}, ("comment", "activityPackage"), clear_empty=True
        )
        assert doc == {"activityPackage": None}

    def test_one_call_per_field_in_order(self, writer):
        writer.compose({"title": "Born", "body": "In a small town"}, ("title", "body"))
        assert writer.translator.calls == ["Born", "In a small town"]
