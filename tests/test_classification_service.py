"""Tests for meal classification."""

import asyncio

from gastro_log.domain.analysis import MessageType
from gastro_log.services.classification import (
    ClassificationService,
    parse_ingredients,
    to_data_url,
)
from tests.conftest import FakeClassifier


def test_analyze_flags_ingredients_with_warning(classifier: FakeClassifier) -> None:
    service = ClassificationService(classifier=classifier, model="gemini-2.5-flash")

    result = asyncio.run(service.analyze(image=None, memo="  ミルクティー "))

    assert result.success
    assert result.ingredients == ["乳糖"]
    assert result.message is not None
    assert result.message.type is MessageType.WARNING
    assert classifier.calls == [
        {"image": None, "memo": "ミルクティー", "model": "gemini-2.5-flash"}
    ]


def test_analyze_with_nothing_flagged_reports_success() -> None:
    service = ClassificationService(classifier=FakeClassifier(ingredients=[]))

    result = asyncio.run(service.analyze(image="data:image/jpeg;base64,AA", memo=None))

    assert result.success
    assert result.ingredients == []
    assert result.message is not None
    assert result.message.type is MessageType.SUCCESS


def test_analyze_requires_image_or_memo(classifier: FakeClassifier) -> None:
    service = ClassificationService(classifier=classifier)

    result = asyncio.run(service.analyze(image=None, memo="   "))

    assert not result.success
    assert result.message is not None
    assert result.message.type is MessageType.ERROR
    assert classifier.calls == []


def test_analyze_surfaces_classifier_errors() -> None:
    service = ClassificationService(
        classifier=FakeClassifier(error=RuntimeError("quota exceeded"))
    )

    result = asyncio.run(service.analyze(image=None, memo="ramen"))

    assert not result.success
    assert result.message is not None
    assert result.message.type is MessageType.ERROR
    assert "quota exceeded" in result.message.text
    assert not service.is_analyzing


def test_analyze_ignores_reentrant_calls() -> None:
    class SlowClassifier(FakeClassifier):
        async def classify(self, *, image, memo, model):  # type: ignore[no-untyped-def]
            await asyncio.sleep(0.01)
            return await super().classify(image=image, memo=memo, model=model)

    classifier = SlowClassifier()
    service = ClassificationService(classifier=classifier)

    async def scenario():  # type: ignore[no-untyped-def]
        return await asyncio.gather(
            service.analyze(image=None, memo="a"),
            service.analyze(image=None, memo="b"),
        )

    first, second = asyncio.run(scenario())

    assert first.success
    assert not second.success
    assert second.message is None
    assert len(classifier.calls) == 1


def test_parse_ingredients_extracts_first_json_object() -> None:
    text = 'Sure!\n```json\n{"ingredients": ["オニオン", " "]}\n```'

    assert parse_ingredients(text) == ["オニオン"]
    assert parse_ingredients("no json here") == []
    assert parse_ingredients('{"ingredients": "oops"}') == []


def test_to_data_url_handles_bytes_and_bare_base64() -> None:
    assert to_data_url(b"\x89PNG\r\n\x1a\nrest").startswith("data:image/png;base64,")
    assert to_data_url("QUJD") == "data:image/jpeg;base64,QUJD"
    assert to_data_url("data:image/webp;base64,QQ") == "data:image/webp;base64,QQ"
