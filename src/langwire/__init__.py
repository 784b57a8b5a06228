r"""langwire - Property-driven wiring of the Cloud Natural Language client.

This package builds a ``google.cloud.language_v1`` client from
configuration properties and registers it as a managed component of an
application context. It binds the credentials location and the retry
settings from a property source, merges them field by field on top of
the client library defaults, and hands them to the vendor client.

Key Features:
    - Relaxed property binding from mappings, ``.properties`` files and
      environment variables
    - Service-specific, shared, encoded and ambient credentials
    - Credentials locations on disk, inside packages or behind a URL
    - Retry settings from properties, per method or for every method
    - User-supplied ``RetryConfig`` taking precedence over properties
    - Managed component lifecycle through ``ApplicationContext``

Example:
    ```pycon
    >>> from langwire import LanguageClient, RetryConfig, create_context
    >>> from datetime import timedelta
    >>> context = create_context(
    ...     {
    ...         "langwire.language-service.credentials.location": "file:/path/to/key.json",
    ...         "langwire.language-service.retry.retry-delay-multiplier": "2",
    ...     },
    ...     components={
    ...         "language_retry_settings": RetryConfig(
    ...             initial_retry_delay=timedelta(milliseconds=100)
    ...         )
    ...     },
    ... )  # doctest: +SKIP
    >>> client = context.get(LanguageClient)  # doctest: +SKIP
    >>> response = client.analyze_sentiment(text="What a great day!")  # doctest: +SKIP
    >>> context.close()  # doctest: +SKIP

    ```
"""

from __future__ import annotations

__all__ = [
    "ApplicationContext",
    "CredentialsLoadError",
    "CredentialsProvider",
    "LangwireError",
    "LanguageAutoConfig",
    "LanguageClient",
    "LanguageServiceProperties",
    "LanguageServiceSettings",
    "NoSuchComponentError",
    "NoUniqueComponentError",
    "PropertyBindingError",
    "PropertySource",
    "ResourceLoadError",
    "RetryConfig",
    "RetrySettings",
    "SharedProperties",
    "__version__",
    "create_context",
]

from importlib.metadata import PackageNotFoundError, version
from typing import Any

from langwire.autoconfig import LanguageAutoConfig, create_context
from langwire.context import ApplicationContext
from langwire.core.config import LanguageServiceProperties, RetryConfig, SharedProperties
from langwire.core.properties import PropertySource
from langwire.credentials import CredentialsProvider
from langwire.exceptions import (
    CredentialsLoadError,
    LangwireError,
    NoSuchComponentError,
    NoUniqueComponentError,
    PropertyBindingError,
    ResourceLoadError,
)
from langwire.settings import LanguageServiceSettings, RetrySettings

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # pragma: no cover
    # Package is not installed, fallback if needed
    __version__ = "0.0.0"


def __getattr__(name: str) -> Any:
    # the client module needs google-cloud-language, so it is only
    # imported when LanguageClient is requested
    if name == "LanguageClient":
        from langwire.client import LanguageClient

        return LanguageClient
    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
