r"""Unit tests for the configuration models.

This file contains tests for RetryConfig, CredentialsProperties,
LanguageServiceProperties and SharedProperties in core/config.py.
"""

from __future__ import annotations

from datetime import timedelta

import pytest
from coola.equality import objects_are_equal

from langwire.core import (
    LANGUAGE_METHODS,
    SERVICE_PREFIX,
    CredentialsProperties,
    LanguageServiceProperties,
    PropertySource,
    RetryConfig,
    SharedProperties,
    env_prefix,
)
from langwire.core.config import DEFAULT_SCOPES
from langwire.exceptions import PropertyBindingError

#################################
#     Tests for RetryConfig     #
#################################


def test_retry_config_defaults() -> None:
    config = RetryConfig()
    assert config.is_empty()
    assert all(value is None for value in config.to_dict().values())


def test_retry_config_to_dict() -> None:
    config = RetryConfig(max_attempts=3, retry_delay_multiplier=1.5)
    assert objects_are_equal(
        config.to_dict(),
        {
            "total_timeout": None,
            "initial_retry_delay": None,
            "retry_delay_multiplier": 1.5,
            "max_retry_delay": None,
            "max_attempts": 3,
            "initial_rpc_timeout": None,
            "rpc_timeout_multiplier": None,
            "max_rpc_timeout": None,
        },
    )
    assert not config.is_empty()


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (timedelta(seconds=2), timedelta(seconds=2)),
        ("PT0.5S", timedelta(milliseconds=500)),
        ("250ms", timedelta(milliseconds=250)),
        (100, timedelta(milliseconds=100)),
    ],
)
def test_retry_config_duration_normalization(value: object, expected: timedelta) -> None:
    assert RetryConfig(initial_retry_delay=value).initial_retry_delay == expected


def test_retry_config_merge_other() -> None:
    config = RetryConfig(max_attempts=3, retry_delay_multiplier=1.5)
    merged = config.merge(RetryConfig(max_attempts=5))
    assert merged == RetryConfig(max_attempts=5, retry_delay_multiplier=1.5)
    assert config.max_attempts == 3


def test_retry_config_merge_overrides() -> None:
    config = RetryConfig(max_attempts=3)
    assert config.merge(max_attempts=None, retry_delay_multiplier=2.0) == RetryConfig(
        max_attempts=3, retry_delay_multiplier=2.0
    )


def test_retry_config_merge_overrides_after_other() -> None:
    merged = RetryConfig().merge(RetryConfig(max_attempts=2), max_attempts=4)
    assert merged.max_attempts == 4


def test_retry_config_merge_nothing() -> None:
    config = RetryConfig(max_attempts=3)
    assert config.merge() == config


@pytest.mark.parametrize(
    ("kwargs", "message"),
    [
        ({"max_attempts": -1}, r"max_attempts must be >= 0"),
        ({"retry_delay_multiplier": 0.5}, r"retry_delay_multiplier must be >= 1.0"),
        ({"rpc_timeout_multiplier": 0.9}, r"rpc_timeout_multiplier must be >= 1.0"),
        ({"initial_retry_delay": timedelta(seconds=-1)}, r"initial_retry_delay must be >= 0"),
        ({"total_timeout": "-1000"}, r"total_timeout must be >= 0"),
    ],
)
def test_retry_config_validation(kwargs: dict, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        RetryConfig(**kwargs)


def test_retry_config_from_properties() -> None:
    source = PropertySource.from_pairs(
        "app.retry.total-timeout=PT30S",
        "app.retry.initial-retry-delay=PT0.5S",
        "app.retry.retry-delay-multiplier=2",
        "app.retry.max-retry-delay=10s",
        "app.retry.max-attempts=4",
        "app.retry.initial-rpc-timeout=5000",
        "app.retry.rpc-timeout-multiplier=1.5",
        "app.retry.max-rpc-timeout=PT20S",
    )
    assert RetryConfig.from_properties(source, "app.retry") == RetryConfig(
        total_timeout=timedelta(seconds=30),
        initial_retry_delay=timedelta(milliseconds=500),
        retry_delay_multiplier=2.0,
        max_retry_delay=timedelta(seconds=10),
        max_attempts=4,
        initial_rpc_timeout=timedelta(seconds=5),
        rpc_timeout_multiplier=1.5,
        max_rpc_timeout=timedelta(seconds=20),
    )


def test_retry_config_from_properties_partial() -> None:
    source = PropertySource.from_pairs("app.retry.retryDelayMultiplier=2")
    assert RetryConfig.from_properties(source, "app.retry") == RetryConfig(
        retry_delay_multiplier=2.0
    )


def test_retry_config_from_properties_empty() -> None:
    assert RetryConfig.from_properties(PropertySource(), "app.retry").is_empty()


def test_retry_config_from_properties_invalid() -> None:
    source = PropertySource.from_pairs("app.retry.max-retry-delay=later")
    with pytest.raises(PropertyBindingError, match=r"app.retry.max-retry-delay"):
        RetryConfig.from_properties(source, "app.retry")


###########################################
#     Tests for CredentialsProperties     #
###########################################


def test_credentials_properties_defaults() -> None:
    properties = CredentialsProperties()
    assert properties.location is None
    assert properties.encoded_key is None
    assert properties.scopes == DEFAULT_SCOPES
    assert not properties.is_configured


@pytest.mark.parametrize(
    "properties",
    [CredentialsProperties(location="file:key.json"), CredentialsProperties(encoded_key="e30=")],
)
def test_credentials_properties_is_configured(properties: CredentialsProperties) -> None:
    assert properties.is_configured


def test_credentials_properties_scopes_tuple() -> None:
    assert CredentialsProperties(scopes=["a", "b"]).scopes == ("a", "b")


def test_credentials_properties_location_and_encoded_key() -> None:
    with pytest.raises(ValueError, match=r"only one of location and encoded_key"):
        CredentialsProperties(location="file:key.json", encoded_key="e30=")


def test_credentials_properties_empty_scopes() -> None:
    with pytest.raises(ValueError, match=r"scopes must not be empty"):
        CredentialsProperties(scopes=())


def test_credentials_properties_from_properties() -> None:
    source = PropertySource.from_pairs(
        "app.credentials.location=file:key.json",
        "app.credentials.scopes=https://a.example.com,https://b.example.com",
    )
    assert CredentialsProperties.from_properties(source, "app.credentials") == (
        CredentialsProperties(
            location="file:key.json", scopes=("https://a.example.com", "https://b.example.com")
        )
    )


###############################################
#     Tests for LanguageServiceProperties     #
###############################################


def test_language_service_properties_defaults() -> None:
    properties = LanguageServiceProperties()
    assert properties.enabled
    assert properties.credentials == CredentialsProperties()
    assert properties.quota_project_id is None
    assert properties.endpoint is None
    assert not properties.use_rest
    assert properties.retry.is_empty()
    assert properties.method_retry == {}


def test_language_service_properties_from_properties() -> None:
    source = PropertySource(
        {
            f"{SERVICE_PREFIX}.enabled": "false",
            f"{SERVICE_PREFIX}.credentials.encoded-key": "e30=",
            f"{SERVICE_PREFIX}.quota-project-id": "billing",
            f"{SERVICE_PREFIX}.endpoint": "eu-language.googleapis.com",
            f"{SERVICE_PREFIX}.use-rest": "true",
            f"{SERVICE_PREFIX}.retry.max-attempts": "3",
            f"{SERVICE_PREFIX}.annotate-text-retry.max-attempts": "6",
            f"{SERVICE_PREFIX}.classifyTextRetry.retryDelayMultiplier": "1.5",
        }
    )
    properties = LanguageServiceProperties.from_properties(source)
    assert properties == LanguageServiceProperties(
        enabled=False,
        credentials=CredentialsProperties(encoded_key="e30="),
        quota_project_id="billing",
        endpoint="eu-language.googleapis.com",
        use_rest=True,
        retry=RetryConfig(max_attempts=3),
        annotate_text_retry=RetryConfig(max_attempts=6),
        classify_text_retry=RetryConfig(retry_delay_multiplier=1.5),
    )
    assert objects_are_equal(
        properties.method_retry,
        {
            "classify_text": RetryConfig(retry_delay_multiplier=1.5),
            "annotate_text": RetryConfig(max_attempts=6),
        },
    )


def test_language_service_properties_from_empty_properties() -> None:
    assert LanguageServiceProperties.from_properties(PropertySource()) == (
        LanguageServiceProperties()
    )


def test_language_service_properties_from_properties_invalid() -> None:
    source = PropertySource({f"{SERVICE_PREFIX}.annotate-text-retry.max-attempts": "many"})
    with pytest.raises(PropertyBindingError) as exc_info:
        LanguageServiceProperties.from_properties(source)
    assert exc_info.value.key == "langwire.language-service.annotate-text-retry.max-attempts"


def test_language_service_properties_unknown_method() -> None:
    with pytest.raises(ValueError, match=r"Extra inputs are not permitted"):
        LanguageServiceProperties(translate_retry=RetryConfig(max_attempts=1))


def test_language_service_properties_method_retry_skips_empty() -> None:
    properties = LanguageServiceProperties(
        analyze_syntax_retry=RetryConfig(), moderate_text_retry=RetryConfig(max_attempts=2)
    )
    assert objects_are_equal(
        properties.method_retry, {"moderate_text": RetryConfig(max_attempts=2)}
    )


def test_language_service_properties_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LANGWIRE_LANGUAGE_SERVICE_ENABLED", "false")
    monkeypatch.setenv("LANGWIRE_LANGUAGE_SERVICE_USE_REST", "true")
    monkeypatch.setenv("LANGWIRE_LANGUAGE_SERVICE_RETRY__MAX_ATTEMPTS", "4")
    monkeypatch.setenv("LANGWIRE_LANGUAGE_SERVICE_RETRY__TOTAL_TIMEOUT", "PT30S")
    monkeypatch.setenv("LANGWIRE_LANGUAGE_SERVICE_CLASSIFY_TEXT_RETRY__MAX_ATTEMPTS", "2")
    properties = LanguageServiceProperties.from_properties(PropertySource())
    assert not properties.enabled
    assert properties.use_rest
    assert properties.retry == RetryConfig(max_attempts=4, total_timeout=timedelta(seconds=30))
    assert properties.classify_text_retry == RetryConfig(max_attempts=2)


def test_language_service_properties_env_scopes(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LANGWIRE_LANGUAGE_SERVICE_CREDENTIALS__SCOPES", "a, b")
    properties = LanguageServiceProperties.from_properties(PropertySource())
    assert properties.credentials.scopes == ("a", "b")


def test_language_service_properties_properties_win_over_env(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("LANGWIRE_LANGUAGE_SERVICE_ENABLED", "false")
    monkeypatch.setenv("LANGWIRE_LANGUAGE_SERVICE_RETRY__MAX_ATTEMPTS", "4")
    monkeypatch.setenv("LANGWIRE_LANGUAGE_SERVICE_RETRY__RETRY_DELAY_MULTIPLIER", "2")
    source = PropertySource(
        {f"{SERVICE_PREFIX}.enabled": "true", f"{SERVICE_PREFIX}.retry.max-attempts": "3"}
    )
    properties = LanguageServiceProperties.from_properties(source)
    assert properties.enabled
    assert properties.retry == RetryConfig(max_attempts=3, retry_delay_multiplier=2.0)


def test_language_service_properties_env_custom_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_LANGUAGE_ENDPOINT", "eu-language.googleapis.com")
    monkeypatch.setenv("LANGWIRE_LANGUAGE_SERVICE_ENDPOINT", "ignored.googleapis.com")
    properties = LanguageServiceProperties.from_properties(PropertySource(), "app.language")
    assert properties.endpoint == "eu-language.googleapis.com"


def test_language_service_properties_env_invalid(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LANGWIRE_LANGUAGE_SERVICE_RETRY__MAX_ATTEMPTS", "many")
    with pytest.raises(PropertyBindingError, match=r"max-attempts"):
        LanguageServiceProperties.from_properties(PropertySource())


######################################
#     Tests for SharedProperties     #
######################################


def test_shared_properties_defaults() -> None:
    assert SharedProperties().credentials == CredentialsProperties()


def test_shared_properties_from_properties() -> None:
    source = PropertySource({"langwire.shared.credentials.location": "file:key.json"})
    assert SharedProperties.from_properties(source).credentials == CredentialsProperties(
        location="file:key.json"
    )


def test_shared_properties_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LANGWIRE_SHARED_CREDENTIALS__LOCATION", "file:env.json")
    properties = SharedProperties.from_properties(PropertySource())
    assert properties.credentials.location == "file:env.json"
    assert properties.credentials.is_configured


################################
#     Tests for env_prefix     #
################################


@pytest.mark.parametrize(
    ("prefix", "expected"),
    [
        ("langwire.language-service", "LANGWIRE_LANGUAGE_SERVICE_"),
        ("langwire.shared", "LANGWIRE_SHARED_"),
        ("app", "APP_"),
    ],
)
def test_env_prefix(prefix: str, expected: str) -> None:
    assert env_prefix(prefix) == expected


def test_language_methods() -> None:
    assert "annotate_text" in LANGUAGE_METHODS
    assert len(LANGUAGE_METHODS) == len(set(LANGUAGE_METHODS))
