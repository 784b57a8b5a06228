r"""Language service client with settings bound from properties.

This module provides the ``LanguageClient`` class, a thin wrapper around
``google.cloud.language_v1.LanguageServiceClient`` that owns the vendor
client lifecycle and calls every method with the retry and timeout
settings resolved for it.
"""

from __future__ import annotations

__all__ = ["LanguageClient"]

import logging
from typing import TYPE_CHECKING, Any

from google.api_core.client_options import ClientOptions
from google.cloud import language_v1

from langwire.core.config import LanguageServiceProperties
from langwire.credentials import CredentialsProvider
from langwire.settings import LanguageServiceSettings

if TYPE_CHECKING:
    from types import TracebackType
    from typing import Self

logger: logging.Logger = logging.getLogger(__name__)


class LanguageClient:
    r"""Client for the Cloud Natural Language API.

    The vendor client is created when the ``LanguageClient`` is created,
    using the credentials of ``credentials_provider``. Each method call
    forwards the ``retry`` and ``timeout`` of the method settings unless
    the caller passes its own.

    Every analysis method accepts either a ``document`` (a
    ``language_v1.Document`` or a mapping) or a plain ``text`` that is
    wrapped into a plain-text document.

    Args:
        settings: The per-method settings. Defaults to the client
            library defaults.
        credentials_provider: The provider of the credentials.
        properties: The service properties used for the transport,
            endpoint and quota project.

    Example:
        ```pycon
        >>> from langwire.client import LanguageClient
        >>> from langwire.credentials import CredentialsProvider
        >>> provider = CredentialsProvider(location="file:/path/to/key.json")
        >>> with LanguageClient(credentials_provider=provider) as client:  # doctest: +SKIP
        ...     response = client.analyze_sentiment(text="I love this library")
        ...     response.document_sentiment.score
        ...

        ```
    """

    def __init__(
        self,
        settings: LanguageServiceSettings | None = None,
        credentials_provider: CredentialsProvider | None = None,
        *,
        properties: LanguageServiceProperties | None = None,
    ) -> None:
        credentials_provider = credentials_provider or CredentialsProvider()
        self._settings = settings or LanguageServiceSettings()
        self._credentials_provider = credentials_provider
        self._properties = properties or LanguageServiceProperties()
        self._transport_name = "rest" if self._properties.use_rest else "grpc"
        self._client = language_v1.LanguageServiceClient(
            credentials=credentials_provider.get_credentials(),
            transport=self._transport_name,
            client_options=ClientOptions(
                api_endpoint=self._properties.endpoint,
                quota_project_id=self._properties.quota_project_id,
            ),
        )
        logger.debug(
            f"Created language service client (transport: {self._transport_name}, "
            f"credentials: {credentials_provider.source})"
        )

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__qualname__}(transport={self._transport_name!r}, "
            f"credentials={self._credentials_provider.source!r})"
        )

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def settings(self) -> LanguageServiceSettings:
        r"""The per-method settings of the client."""
        return self._settings

    @property
    def credentials_provider(self) -> CredentialsProvider:
        r"""The provider of the client credentials."""
        return self._credentials_provider

    @property
    def transport_name(self) -> str:
        r"""The vendor transport in use, ``"grpc"`` or ``"rest"``."""
        return self._transport_name

    @property
    def vendor_client(self) -> language_v1.LanguageServiceClient:
        r"""The wrapped ``language_v1.LanguageServiceClient``."""
        return self._client

    def close(self) -> None:
        r"""Close the transport of the vendor client."""
        logger.debug("Closing language service client")
        self._client.transport.close()

    def _call(
        self,
        name: str,
        document: language_v1.Document | dict[str, Any] | None,
        text: str | None,
        **kwargs: Any,
    ) -> Any:
        method = self._settings.method(name)
        kwargs.setdefault("retry", method.retry)
        kwargs.setdefault("timeout", method.timeout)
        if "request" not in kwargs:
            kwargs["document"] = _make_document(document, text)
        return getattr(self._client, name)(**kwargs)

    def analyze_sentiment(
        self,
        document: language_v1.Document | dict[str, Any] | None = None,
        *,
        text: str | None = None,
        **kwargs: Any,
    ) -> language_v1.AnalyzeSentimentResponse:
        r"""Analyze the sentiment of the provided text.

        Args:
            document: The input document.
            text: Plain text used instead of ``document``.
            **kwargs: Additional keyword arguments passed to the vendor
                method (e.g. ``encoding_type``, ``retry``, ``timeout``).

        Returns:
            The vendor response.
        """
        return self._call("analyze_sentiment", document, text, **kwargs)

    def analyze_entities(
        self,
        document: language_v1.Document | dict[str, Any] | None = None,
        *,
        text: str | None = None,
        **kwargs: Any,
    ) -> language_v1.AnalyzeEntitiesResponse:
        r"""Find named entities in the text along with their properties."""
        return self._call("analyze_entities", document, text, **kwargs)

    def analyze_entity_sentiment(
        self,
        document: language_v1.Document | dict[str, Any] | None = None,
        *,
        text: str | None = None,
        **kwargs: Any,
    ) -> language_v1.AnalyzeEntitySentimentResponse:
        r"""Find entities and the sentiment expressed about each of them."""
        return self._call("analyze_entity_sentiment", document, text, **kwargs)

    def analyze_syntax(
        self,
        document: language_v1.Document | dict[str, Any] | None = None,
        *,
        text: str | None = None,
        **kwargs: Any,
    ) -> language_v1.AnalyzeSyntaxResponse:
        r"""Split the text into sentences and tokens with their
        linguistic information."""
        return self._call("analyze_syntax", document, text, **kwargs)

    def classify_text(
        self,
        document: language_v1.Document | dict[str, Any] | None = None,
        *,
        text: str | None = None,
        **kwargs: Any,
    ) -> language_v1.ClassifyTextResponse:
        r"""Classify the text into content categories."""
        return self._call("classify_text", document, text, **kwargs)

    def moderate_text(
        self,
        document: language_v1.Document | dict[str, Any] | None = None,
        *,
        text: str | None = None,
        **kwargs: Any,
    ) -> language_v1.ModerateTextResponse:
        r"""Moderate the text against a set of safety attributes."""
        return self._call("moderate_text", document, text, **kwargs)

    def annotate_text(
        self,
        document: language_v1.Document | dict[str, Any] | None = None,
        *,
        text: str | None = None,
        features: language_v1.AnnotateTextRequest.Features | dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> language_v1.AnnotateTextResponse:
        r"""Run several analyses in a single call.

        Args:
            document: The input document.
            text: Plain text used instead of ``document``.
            features: The analyses to run. Defaults to every feature
                except classification and moderation.
            **kwargs: Additional keyword arguments passed to the vendor
                method.

        Returns:
            The vendor response.
        """
        if "request" not in kwargs:
            if features is None:
                features = language_v1.AnnotateTextRequest.Features(
                    extract_syntax=True,
                    extract_entities=True,
                    extract_document_sentiment=True,
                    extract_entity_sentiment=True,
                )
            kwargs["features"] = features
        return self._call("annotate_text", document, text, **kwargs)


def _make_document(
    document: language_v1.Document | dict[str, Any] | None, text: str | None
) -> language_v1.Document | dict[str, Any]:
    if (document is None) == (text is None):
        msg = "exactly one of document and text must be provided"
        raise ValueError(msg)
    if document is not None:
        return document
    return language_v1.Document(content=text, type_=language_v1.Document.Type.PLAIN_TEXT)
