r"""Autoconfiguration of the language service client.

This module is the composition point of langwire. ``create_context``
builds an ``ApplicationContext`` from a property source, registers the
user-supplied components and lets every autoconfiguration add the
components that are still missing.

``LanguageAutoConfig`` registers the following components:

- ``language_service_properties``: the bound ``LanguageServiceProperties``
- ``language_service_credentials``: the ``CredentialsProvider``
- ``language_service_settings``: the resolved ``LanguageServiceSettings``
- ``language_service_client``: the ``LanguageClient``

A component already registered under the same name (or, for the client,
with the same type) is left untouched. A ``RetryConfig`` registered as
``language_retry_settings`` overrides the retry properties field by
field.

Example:
    ```pycon
    >>> from langwire import LanguageClient, create_context
    >>> with create_context(
    ...     {"langwire.language-service.credentials.location": "file:/path/to/key.json"}
    ... ) as context:  # doctest: +SKIP
    ...     client = context.get(LanguageClient)
    ...

    ```
"""

from __future__ import annotations

__all__ = [
    "CLIENT_NAME",
    "CREDENTIALS_NAME",
    "PROPERTIES_NAME",
    "PROPERTY_SOURCE_NAME",
    "RETRY_SETTINGS_NAME",
    "SETTINGS_NAME",
    "LanguageAutoConfig",
    "create_context",
]

import importlib.util
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from langwire.context import ApplicationContext
from langwire.core.config import (
    SERVICE_PREFIX,
    SHARED_PREFIX,
    LanguageServiceProperties,
    RetryConfig,
    SharedProperties,
)
from langwire.core.properties import PropertySource
from langwire.credentials import CredentialsProvider
from langwire.settings import LanguageServiceSettings

if TYPE_CHECKING:
    from collections.abc import Iterable

logger: logging.Logger = logging.getLogger(__name__)

PROPERTY_SOURCE_NAME = "property_source"
PROPERTIES_NAME = "language_service_properties"
CREDENTIALS_NAME = "language_service_credentials"
SETTINGS_NAME = "language_service_settings"
CLIENT_NAME = "language_service_client"
RETRY_SETTINGS_NAME = "language_retry_settings"

VENDOR_MODULE = "google.cloud.language_v1"


def _vendor_available() -> bool:
    try:
        return importlib.util.find_spec(VENDOR_MODULE) is not None
    except ModuleNotFoundError:
        return False


class LanguageAutoConfig:
    r"""Registers a ``LanguageClient`` built from properties.

    The client is only created when the ``enabled`` property is not
    ``false`` and the ``google-cloud-language`` library is installed.

    Args:
        prefix: The prefix of the service properties.
        shared_prefix: The prefix of the properties shared by all
            clients.
    """

    def __init__(self, prefix: str = SERVICE_PREFIX, shared_prefix: str = SHARED_PREFIX) -> None:
        self.prefix = prefix
        self.shared_prefix = shared_prefix

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(prefix={self.prefix!r})"

    def apply(self, context: ApplicationContext, properties: PropertySource) -> None:
        r"""Register the language service components missing from
        ``context``.

        Args:
            context: The context to populate.
            properties: The property source to bind from.

        Raises:
            PropertyBindingError: If a property value is invalid.
            CredentialsLoadError: If the credentials cannot be loaded.
        """
        service = context.get_optional(PROPERTIES_NAME)
        if service is None:
            service = LanguageServiceProperties.from_properties(properties, self.prefix)
        if not service.enabled:
            logger.debug(f"Skipping language service client: {self.prefix}.enabled is false")
            return
        if not _vendor_available():
            logger.debug(f"Skipping language service client: {VENDOR_MODULE} is not installed")
            return
        from langwire.client import LanguageClient

        if context.contains(LanguageClient):
            logger.debug("Skipping language service client: a LanguageClient is already registered")
            return

        if not context.contains(PROPERTIES_NAME):
            context.register(PROPERTIES_NAME, service)
        if not context.contains(CREDENTIALS_NAME):
            context.register(CREDENTIALS_NAME, self.credentials_provider(service, properties))
        if not context.contains(SETTINGS_NAME):
            context.register(
                SETTINGS_NAME, self.settings(service, context.get_optional(RETRY_SETTINGS_NAME))
            )
        context.register(
            CLIENT_NAME,
            LanguageClient(
                settings=context.get(SETTINGS_NAME),
                credentials_provider=context.get(CREDENTIALS_NAME),
                properties=service,
            ),
        )

    def credentials_provider(
        self, service: LanguageServiceProperties, properties: PropertySource
    ) -> CredentialsProvider:
        r"""Create the credentials provider of the client.

        The service credentials win over the shared ones, which win over
        the ambient credentials.
        """
        shared = SharedProperties.from_properties(properties, self.shared_prefix).credentials
        return CredentialsProvider.from_properties(service.credentials, shared)

    def settings(
        self, service: LanguageServiceProperties, retry_override: RetryConfig | None = None
    ) -> LanguageServiceSettings:
        r"""Resolve the per-method settings of the client.

        Layers are applied on top of the client library defaults, each
        one overriding the fields it sets:

        1. the ``retry`` properties, for every method
        2. the ``<method>-retry`` properties, for their method
        3. ``retry_override``, for every method

        Args:
            service: The bound service properties.
            retry_override: Optional user-supplied retry configuration.

        Returns:
            The resolved settings.

        Raises:
            TypeError: If ``retry_override`` is not a ``RetryConfig``.
        """
        if retry_override is not None and not isinstance(retry_override, RetryConfig):
            msg = (
                f"{RETRY_SETTINGS_NAME!r} must be a RetryConfig, "
                f"got {type(retry_override).__qualname__}"
            )
            raise TypeError(msg)
        settings = LanguageServiceSettings().with_retry(service.retry)
        for method, config in service.method_retry.items():
            settings = settings.with_retry(config, methods=[method])
        if retry_override is not None:
            logger.debug(f"Applying user-supplied {RETRY_SETTINGS_NAME!r}")
            settings = settings.with_retry(retry_override)
        return settings


def _as_property_source(properties: PropertySource | Mapping[str, Any] | None) -> PropertySource:
    if properties is None:
        return PropertySource(name="empty")
    if isinstance(properties, PropertySource):
        return properties
    if isinstance(properties, Mapping):
        return PropertySource.from_mapping(properties)
    msg = f"properties must be a PropertySource or a mapping, got {type(properties).__qualname__}"
    raise TypeError(msg)


def create_context(
    properties: PropertySource | Mapping[str, Any] | None = None,
    *,
    components: Mapping[str, Any] | None = None,
    auto_configs: Iterable[LanguageAutoConfig] | None = None,
) -> ApplicationContext:
    r"""Create an application context populated by the
    autoconfigurations.

    Args:
        properties: The property source, or a mapping of dotted keys.
            The ``LANGWIRE_*`` environment variables fill the
            properties that are not set here.
        components: Optional user-supplied components registered before
            the autoconfigurations run, keyed by name.
        auto_configs: The autoconfigurations to apply. Defaults to a
            single ``LanguageAutoConfig``.

    Returns:
        The populated context. It must be closed by the caller.

    Raises:
        PropertyBindingError: If a property value is invalid.
        CredentialsLoadError: If the credentials cannot be loaded.

    Example:
        ```pycon
        >>> from langwire import create_context
        >>> context = create_context({"langwire.language-service.enabled": "false"})
        >>> context.names()
        ['property_source']
        >>> context.close()

        ```
    """
    source = _as_property_source(properties)
    context = ApplicationContext()
    try:
        context.register(PROPERTY_SOURCE_NAME, source)
        for name, component in (components or {}).items():
            context.register(name, component)
        for auto_config in auto_configs if auto_configs is not None else (LanguageAutoConfig(),):
            auto_config.apply(context, source)
    except Exception:
        _close_after_error(context)
        raise
    return context


def _close_after_error(context: ApplicationContext) -> None:
    try:
        context.close()
    except Exception:  # noqa: BLE001
        # the close failures are already logged by the context
        logger.debug("Ignoring close failure while handling a context creation error")
