r"""Configuration building blocks shared by the langwire modules.

This package contains the property source, the duration type, the
configuration models and their validation.
"""

from __future__ import annotations

__all__ = [
    "LANGUAGE_METHODS",
    "SERVICE_PREFIX",
    "SHARED_PREFIX",
    "CredentialsProperties",
    "Duration",
    "LanguageServiceProperties",
    "PropertySource",
    "RetryConfig",
    "SharedProperties",
    "bind_properties",
    "canonical_key",
    "env_prefix",
    "parse_duration",
    "validate_credentials_params",
    "validate_retry_bounds",
    "validate_retry_params",
]

from langwire.core.config import (
    LANGUAGE_METHODS,
    SERVICE_PREFIX,
    SHARED_PREFIX,
    CredentialsProperties,
    LanguageServiceProperties,
    RetryConfig,
    SharedProperties,
    env_prefix,
)
from langwire.core.duration import Duration, parse_duration
from langwire.core.properties import PropertySource, bind_properties, canonical_key
from langwire.core.validation import (
    validate_credentials_params,
    validate_retry_bounds,
    validate_retry_params,
)
