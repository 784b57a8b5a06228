r"""Configuration models and defaults for the language client.

This module provides the property prefixes, the client library defaults
and the pydantic models bound from a ``PropertySource`` and from the
``LANGWIRE_*`` environment variables:

- ``RetryConfig``: partial retry settings where every field is optional
- ``CredentialsProperties``: where to load credentials from
- ``LanguageServiceProperties``: everything bound under the service
  prefix
- ``SharedProperties``: everything bound under the shared prefix

Explicit properties take precedence over environment variables. The
environment variable of a property is its dotted key in upper case with
``_`` between words and ``__`` between nested levels, e.g.
``LANGWIRE_LANGUAGE_SERVICE_RETRY__MAX_ATTEMPTS``.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_INITIAL_RETRY_DELAY",
    "DEFAULT_INITIAL_RPC_TIMEOUT",
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_MAX_RETRY_DELAY",
    "DEFAULT_MAX_RPC_TIMEOUT",
    "DEFAULT_RETRY_DELAY_MULTIPLIER",
    "DEFAULT_RPC_TIMEOUT_MULTIPLIER",
    "DEFAULT_SCOPES",
    "DEFAULT_TOTAL_TIMEOUT",
    "LANGUAGE_METHODS",
    "SERVICE_PREFIX",
    "SHARED_PREFIX",
    "CredentialsProperties",
    "LanguageServiceProperties",
    "RetryConfig",
    "SharedProperties",
    "env_prefix",
]

import re
from datetime import timedelta
from typing import TYPE_CHECKING, Annotated, Any

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from langwire.core.duration import Duration
from langwire.core.properties import bind_properties
from langwire.core.validation import validate_credentials_params, validate_retry_params

if TYPE_CHECKING:
    from langwire.core.properties import PropertySource


# Prefix of the properties bound to the language service client
SERVICE_PREFIX = "langwire.language-service"

# Prefix of the properties shared by all clients (e.g. core credentials)
SHARED_PREFIX = "langwire.shared"

# OAuth scopes requested when none are configured
DEFAULT_SCOPES = ("https://www.googleapis.com/auth/cloud-platform",)

# Client library defaults of the google.cloud.language.v1 methods.
# Wait time before retry n = min(initial * multiplier ** (n - 1), max)
DEFAULT_INITIAL_RETRY_DELAY = timedelta(milliseconds=100)
DEFAULT_RETRY_DELAY_MULTIPLIER = 1.3
DEFAULT_MAX_RETRY_DELAY = timedelta(minutes=1)

# 0 means the number of attempts is only bounded by the total timeout
DEFAULT_MAX_ATTEMPTS = 0

DEFAULT_INITIAL_RPC_TIMEOUT = timedelta(minutes=10)
DEFAULT_RPC_TIMEOUT_MULTIPLIER = 1.0
DEFAULT_MAX_RPC_TIMEOUT = timedelta(minutes=10)
DEFAULT_TOTAL_TIMEOUT = timedelta(minutes=10)

# RPC methods of the language service, in declaration order
LANGUAGE_METHODS = (
    "analyze_sentiment",
    "analyze_entities",
    "analyze_entity_sentiment",
    "analyze_syntax",
    "classify_text",
    "moderate_text",
    "annotate_text",
)


def env_prefix(prefix: str) -> str:
    r"""Return the environment variable prefix of a property prefix.

    Example:
        ```pycon
        >>> from langwire.core.config import env_prefix
        >>> env_prefix("langwire.language-service")
        'LANGWIRE_LANGUAGE_SERVICE_'

        ```
    """
    return re.sub(r"[.\-]", "_", prefix).upper() + "_"


class RetryConfig(BaseModel):
    """Partial retry settings applied on top of the client library
    defaults.

    Every field is optional: ``None`` means "not set at this level" and
    lets the value from a lower precedence level (or the client library
    default) show through. Duration fields accept ``timedelta`` objects,
    ISO-8601 strings, simple durations such as ``"500ms"`` and numbers
    of milliseconds.

    Example:
        ```pycon
        >>> from datetime import timedelta
        >>> from langwire.core.config import RetryConfig
        >>> config = RetryConfig(initial_retry_delay=timedelta(milliseconds=100))
        >>> config.retry_delay_multiplier is None
        True
        >>> merged = config.merge(RetryConfig(retry_delay_multiplier=2.0))
        >>> merged.initial_retry_delay, merged.retry_delay_multiplier
        (datetime.timedelta(microseconds=100000), 2.0)

        ```
    """

    total_timeout: Duration | None = Field(
        None, description="Overall time budget of a call including retries"
    )
    initial_retry_delay: Duration | None = Field(None, description="Delay before the first retry")
    retry_delay_multiplier: float | None = Field(
        None, description="Factor applied to the delay after each retry"
    )
    max_retry_delay: Duration | None = Field(None, description="Upper bound of the retry delay")
    max_attempts: int | None = Field(None, description="Maximum number of attempts, 0 for no limit")
    initial_rpc_timeout: Duration | None = Field(None, description="Timeout of the first attempt")
    rpc_timeout_multiplier: float | None = Field(
        None, description="Factor applied to the attempt timeout after each retry"
    )
    max_rpc_timeout: Duration | None = Field(None, description="Upper bound of the attempt timeout")

    @model_validator(mode="after")
    def check_retry_params(self) -> RetryConfig:
        validate_retry_params(**self.to_dict())
        return self

    @classmethod
    def from_properties(cls, source: PropertySource, prefix: str) -> RetryConfig:
        """Bind a retry configuration from the properties under
        ``prefix``.

        Args:
            source: The property source to read from.
            prefix: The dotted prefix, e.g.
                ``"langwire.language-service.retry"``.

        Returns:
            The bound configuration. Fields without a property are
            ``None``.

        Raises:
            PropertyBindingError: If a value cannot be converted.
        """
        return bind_properties(cls, source, prefix)

    def is_empty(self) -> bool:
        """Indicate whether no field is set."""
        return all(value is None for value in self.to_dict().values())

    def merge(self, other: RetryConfig | None = None, **overrides: Any) -> RetryConfig:
        """Create a new config where the set fields of ``other`` and the
        non-None ``overrides`` replace the current values.

        Args:
            other: Optional configuration with higher precedence.
            **overrides: Keyword arguments for fields to override.
                Only non-None values are applied, after ``other``.

        Returns:
            A new RetryConfig instance. The original is unchanged.

        Raises:
            pydantic.ValidationError: If an override is invalid.

        Example:
            ```pycon
            >>> from langwire.core.config import RetryConfig
            >>> config = RetryConfig(max_attempts=3, retry_delay_multiplier=1.5)
            >>> config.merge(RetryConfig(max_attempts=5)).max_attempts
            5
            >>> config.merge(max_attempts=None).max_attempts
            3

            ```
        """
        values = other.to_dict() if other is not None else {}
        values.update(overrides)
        filtered_overrides = {k: v for k, v in values.items() if v is not None}
        return self.model_validate({**self.to_dict(), **filtered_overrides})

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary format."""
        return self.model_dump()


class CredentialsProperties(BaseModel):
    """Location of the credentials used to authenticate the client.

    At most one of ``location`` and ``encoded_key`` can be set.
    ``scopes`` accepts a comma-separated string.
    """

    location: str | None = Field(
        None,
        description=(
            "Resource location of a service account JSON key, e.g. "
            "'file:/path/key.json', 'package:pkg/key.json' or an https:// URL"
        ),
    )
    encoded_key: str | None = Field(None, description="Base64-encoded service account JSON key")
    scopes: Annotated[tuple[str, ...], NoDecode] = Field(
        DEFAULT_SCOPES, description="OAuth scopes requested for the credentials"
    )

    @field_validator("scopes", mode="before")
    @classmethod
    def split_scopes(cls, value: Any) -> Any:
        if isinstance(value, str):
            return tuple(item.strip() for item in value.split(",") if item.strip())
        return value

    @model_validator(mode="after")
    def check_credentials_params(self) -> CredentialsProperties:
        validate_credentials_params(
            location=self.location, encoded_key=self.encoded_key, scopes=self.scopes
        )
        return self

    @classmethod
    def from_properties(cls, source: PropertySource, prefix: str) -> CredentialsProperties:
        """Bind the credentials properties under ``prefix``."""
        return bind_properties(cls, source, prefix)

    @property
    def is_configured(self) -> bool:
        """Indicate whether a location or an encoded key is set."""
        return bool(self.location or self.encoded_key)


class LanguageServiceProperties(BaseSettings):
    """Properties of the language service client.

    The ``<method>_retry`` fields hold the retry settings applied to a
    single method, and ``retry`` the ones applied to every method.

    Example:
        ```pycon
        >>> from langwire.core.config import LanguageServiceProperties
        >>> from langwire.core.properties import PropertySource
        >>> source = PropertySource.from_pairs(
        ...     "langwire.language-service.use-rest=true",
        ...     "langwire.language-service.annotate-text-retry.max-attempts=3",
        ... )
        >>> properties = LanguageServiceProperties.from_properties(source)
        >>> properties.enabled, properties.use_rest
        (True, True)
        >>> properties.method_retry["annotate_text"].max_attempts
        3

        ```
    """

    model_config = SettingsConfigDict(
        env_prefix=env_prefix(SERVICE_PREFIX),
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="forbid",
    )

    enabled: bool = Field(True, description="Whether the client is created")
    credentials: CredentialsProperties = Field(
        default_factory=CredentialsProperties,
        description="Service-specific credentials, before the shared and ambient ones",
    )
    quota_project_id: str | None = Field(None, description="Project billed for quota")
    endpoint: str | None = Field(None, description="Overrides the API endpoint")
    use_rest: bool = Field(False, description="Use the HTTP/JSON transport instead of gRPC")
    retry: RetryConfig = Field(default_factory=RetryConfig)

    analyze_sentiment_retry: RetryConfig = Field(default_factory=RetryConfig)
    analyze_entities_retry: RetryConfig = Field(default_factory=RetryConfig)
    analyze_entity_sentiment_retry: RetryConfig = Field(default_factory=RetryConfig)
    analyze_syntax_retry: RetryConfig = Field(default_factory=RetryConfig)
    classify_text_retry: RetryConfig = Field(default_factory=RetryConfig)
    moderate_text_retry: RetryConfig = Field(default_factory=RetryConfig)
    annotate_text_retry: RetryConfig = Field(default_factory=RetryConfig)

    @classmethod
    def from_properties(
        cls, source: PropertySource, prefix: str = SERVICE_PREFIX
    ) -> LanguageServiceProperties:
        """Bind the language service properties under ``prefix``.

        Environment variables under the matching prefix fill the fields
        that have no property.

        Args:
            source: The property source to read from.
            prefix: The dotted prefix of the service properties.

        Returns:
            The bound properties.

        Raises:
            PropertyBindingError: If a value cannot be converted.
        """
        return bind_properties(cls, source, prefix, _env_prefix=env_prefix(prefix))

    @property
    def method_retry(self) -> dict[str, RetryConfig]:
        """The non-empty method retry settings keyed by method name."""
        configs = {method: getattr(self, f"{method}_retry") for method in LANGUAGE_METHODS}
        return {method: config for method, config in configs.items() if not config.is_empty()}


class SharedProperties(BaseSettings):
    """Properties shared by all clients."""

    model_config = SettingsConfigDict(
        env_prefix=env_prefix(SHARED_PREFIX),
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="forbid",
    )

    credentials: CredentialsProperties = Field(
        default_factory=CredentialsProperties,
        description="Credentials used by every client without its own",
    )

    @classmethod
    def from_properties(
        cls, source: PropertySource, prefix: str = SHARED_PREFIX
    ) -> SharedProperties:
        """Bind the shared properties under ``prefix``."""
        return bind_properties(cls, source, prefix, _env_prefix=env_prefix(prefix))
