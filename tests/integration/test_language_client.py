r"""Integration tests against the live Cloud Natural Language API.

These tests are skipped unless ``GOOGLE_APPLICATION_CREDENTIALS``
points to a service account key with access to the API.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from langwire import LanguageClient, create_context

if TYPE_CHECKING:
    from collections.abc import Generator

    from langwire import ApplicationContext

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        not os.environ.get("GOOGLE_APPLICATION_CREDENTIALS"),
        reason="GOOGLE_APPLICATION_CREDENTIALS is not set",
    ),
]


@pytest.fixture(params=[False, True], ids=["grpc", "rest"])
def context(request: pytest.FixtureRequest) -> Generator[ApplicationContext, None, None]:
    properties = {
        "langwire.language-service.use-rest": str(request.param).lower(),
        "langwire.language-service.retry.max-attempts": "3",
        "langwire.language-service.retry.total-timeout": "PT30S",
    }
    with create_context(properties) as context:
        yield context


def test_analyze_sentiment(context: ApplicationContext) -> None:
    client = context.get(LanguageClient)
    response = client.analyze_sentiment(text="This is a wonderful day, I love it!")
    assert response.document_sentiment.score > 0


def test_analyze_entities(context: ApplicationContext) -> None:
    client = context.get(LanguageClient)
    response = client.analyze_entities(text="Paris is the capital of France.")
    names = {entity.name for entity in response.entities}
    assert "Paris" in names


def test_annotate_text(context: ApplicationContext) -> None:
    client = context.get(LanguageClient)
    response = client.annotate_text(text="The quick brown fox jumps over the lazy dog.")
    assert len(response.tokens) > 0
    assert response.language == "en"
