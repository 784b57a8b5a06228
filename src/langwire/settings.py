r"""Resolved per-method settings of the language service client.

Unlike ``RetryConfig``, where every field is optional, the classes of
this module always carry a complete set of values: they start from the
client library defaults and are refined by merging ``RetryConfig``
layers on top of them. They are converted to ``google.api_core``
objects when a method is called.
"""

from __future__ import annotations

__all__ = ["LanguageServiceSettings", "MethodSettings", "RetrySettings"]

import itertools
import logging
from dataclasses import dataclass, field, fields, replace
from datetime import timedelta
from typing import TYPE_CHECKING

from google.api_core import exceptions as core_exceptions
from google.api_core import retry as retries
from google.api_core import timeout as timeouts

from langwire.core.config import (
    DEFAULT_INITIAL_RETRY_DELAY,
    DEFAULT_INITIAL_RPC_TIMEOUT,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_RETRY_DELAY,
    DEFAULT_MAX_RPC_TIMEOUT,
    DEFAULT_RETRY_DELAY_MULTIPLIER,
    DEFAULT_RPC_TIMEOUT_MULTIPLIER,
    DEFAULT_TOTAL_TIMEOUT,
    LANGUAGE_METHODS,
    RetryConfig,
)
from langwire.core.validation import validate_retry_bounds, validate_retry_params

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

logger: logging.Logger = logging.getLogger(__name__)

RETRYABLE_EXCEPTIONS: tuple[type[Exception], ...] = (
    core_exceptions.DeadlineExceeded,
    core_exceptions.ServiceUnavailable,
)


def _limit_attempts(
    predicate: Callable[[Exception], bool], max_attempts: int
) -> Callable[[Exception], bool]:
    attempts = itertools.count(1)

    def should_retry(exc: Exception) -> bool:
        # the predicate runs once per failed attempt
        return predicate(exc) and next(attempts) < max_attempts

    return should_retry


@dataclass(frozen=True)
class RetrySettings:
    """Complete retry settings of a single method.

    Example:
        ```pycon
        >>> from datetime import timedelta
        >>> from langwire.core.config import RetryConfig
        >>> from langwire.settings import RetrySettings
        >>> settings = RetrySettings()
        >>> settings.retry_delay_multiplier
        1.3
        >>> updated = settings.merge(RetryConfig(initial_retry_delay=timedelta(milliseconds=500)))
        >>> updated.initial_retry_delay
        datetime.timedelta(microseconds=500000)
        >>> updated.max_retry_delay
        datetime.timedelta(seconds=60)

        ```
    """

    total_timeout: timedelta = DEFAULT_TOTAL_TIMEOUT
    initial_retry_delay: timedelta = DEFAULT_INITIAL_RETRY_DELAY
    retry_delay_multiplier: float = DEFAULT_RETRY_DELAY_MULTIPLIER
    max_retry_delay: timedelta = DEFAULT_MAX_RETRY_DELAY
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    initial_rpc_timeout: timedelta = DEFAULT_INITIAL_RPC_TIMEOUT
    rpc_timeout_multiplier: float = DEFAULT_RPC_TIMEOUT_MULTIPLIER
    max_rpc_timeout: timedelta = DEFAULT_MAX_RPC_TIMEOUT
    retryable_exceptions: tuple[type[Exception], ...] = RETRYABLE_EXCEPTIONS

    def __post_init__(self) -> None:
        validate_retry_params(
            total_timeout=self.total_timeout,
            initial_retry_delay=self.initial_retry_delay,
            retry_delay_multiplier=self.retry_delay_multiplier,
            max_retry_delay=self.max_retry_delay,
            max_attempts=self.max_attempts,
            initial_rpc_timeout=self.initial_rpc_timeout,
            rpc_timeout_multiplier=self.rpc_timeout_multiplier,
            max_rpc_timeout=self.max_rpc_timeout,
        )
        validate_retry_bounds(
            initial_retry_delay=self.initial_retry_delay,
            max_retry_delay=self.max_retry_delay,
            initial_rpc_timeout=self.initial_rpc_timeout,
            max_rpc_timeout=self.max_rpc_timeout,
        )

    def merge(self, config: RetryConfig | None) -> RetrySettings:
        """Return new settings where the fields set in ``config`` replace
        the current values.

        Args:
            config: The partial configuration to apply. ``None`` or an
                empty configuration returns the settings unchanged.

        Returns:
            The merged settings.
        """
        if config is None:
            return self
        overrides = {k: v for k, v in config.to_dict().items() if v is not None}
        if not overrides:
            return self
        return replace(self, **overrides)

    def to_retry(self) -> retries.Retry:
        """Convert the settings to a ``google.api_core.retry.Retry``.

        A new object is built on every call: when ``max_attempts`` is
        positive, the predicate counts the failed attempts of a single
        call.

        Returns:
            The retry object to pass to a client method.
        """
        predicate = retries.if_exception_type(*self.retryable_exceptions)
        if self.max_attempts > 0:
            predicate = _limit_attempts(predicate, self.max_attempts)
        return retries.Retry(
            predicate=predicate,
            initial=self.initial_retry_delay.total_seconds(),
            maximum=self.max_retry_delay.total_seconds(),
            multiplier=self.retry_delay_multiplier,
            timeout=self.total_timeout.total_seconds(),
        )

    def to_timeout(self) -> timeouts.ExponentialTimeout:
        """Convert the settings to a
        ``google.api_core.timeout.ExponentialTimeout``.

        The first attempt gets ``initial_rpc_timeout``. Each retry
        multiplies it by ``rpc_timeout_multiplier``, up to
        ``max_rpc_timeout``, and never past the ``total_timeout``
        deadline.

        Returns:
            The timeout object to pass to a client method.
        """
        return timeouts.ExponentialTimeout(
            initial=self.initial_rpc_timeout.total_seconds(),
            maximum=self.max_rpc_timeout.total_seconds(),
            multiplier=self.rpc_timeout_multiplier,
            deadline=self.total_timeout.total_seconds(),
        )


@dataclass(frozen=True)
class MethodSettings:
    """Settings of a single client method.

    Args:
        name: The method name, e.g. ``"annotate_text"``.
        retry_settings: The resolved retry settings of the method.
    """

    name: str
    retry_settings: RetrySettings = field(default_factory=RetrySettings)

    @property
    def retry(self) -> retries.Retry:
        """The ``google.api_core`` retry object of the method."""
        return self.retry_settings.to_retry()

    @property
    def timeout(self) -> timeouts.ExponentialTimeout:
        """The ``google.api_core`` timeout object of the method."""
        return self.retry_settings.to_timeout()


def _default_method(name: str) -> MethodSettings:
    return field(default_factory=lambda: MethodSettings(name=name))


@dataclass(frozen=True)
class LanguageServiceSettings:
    """Settings of every method of the language service client.

    Instances are immutable: ``with_retry`` returns a new instance.

    Example:
        ```pycon
        >>> from langwire.core.config import RetryConfig
        >>> from langwire.settings import LanguageServiceSettings
        >>> settings = LanguageServiceSettings().with_retry(
        ...     RetryConfig(retry_delay_multiplier=2.0), methods=["annotate_text"]
        ... )
        >>> settings.annotate_text.retry_settings.retry_delay_multiplier
        2.0
        >>> settings.analyze_sentiment.retry_settings.retry_delay_multiplier
        1.3

        ```
    """

    analyze_sentiment: MethodSettings = _default_method("analyze_sentiment")
    analyze_entities: MethodSettings = _default_method("analyze_entities")
    analyze_entity_sentiment: MethodSettings = _default_method("analyze_entity_sentiment")
    analyze_syntax: MethodSettings = _default_method("analyze_syntax")
    classify_text: MethodSettings = _default_method("classify_text")
    moderate_text: MethodSettings = _default_method("moderate_text")
    annotate_text: MethodSettings = _default_method("annotate_text")

    def method(self, name: str) -> MethodSettings:
        """Return the settings of the method ``name``.

        Raises:
            KeyError: If ``name`` is not a language service method.
        """
        if name not in LANGUAGE_METHODS:
            msg = f"unknown language service method: {name!r}"
            raise KeyError(msg)
        return getattr(self, name)

    def methods(self) -> dict[str, MethodSettings]:
        """Return the settings of all methods keyed by name."""
        return {item.name: getattr(self, item.name) for item in fields(self)}

    def with_retry(
        self, config: RetryConfig | None, methods: Iterable[str] | None = None
    ) -> LanguageServiceSettings:
        """Apply a retry configuration to some or all methods.

        Args:
            config: The partial retry configuration to merge.
            methods: Names of the methods to update. Defaults to all.

        Returns:
            The updated settings.

        Raises:
            KeyError: If a method name is unknown.
        """
        if config is None or config.is_empty():
            return self
        names = LANGUAGE_METHODS if methods is None else tuple(methods)
        changes = {}
        for name in names:
            current = self.method(name)
            changes[name] = replace(
                current, retry_settings=current.retry_settings.merge(config)
            )
        logger.debug(f"Applied retry configuration {config} to {', '.join(names)}")
        return replace(self, **changes)

    def with_timeout(
        self,
        initial_rpc_timeout: timedelta | str | float | None = None,
        rpc_timeout_multiplier: float | None = None,
        max_rpc_timeout: timedelta | str | float | None = None,
        total_timeout: timedelta | str | float | None = None,
        methods: Iterable[str] | None = None,
    ) -> LanguageServiceSettings:
        """Apply timeout settings to some or all methods.

        Parameters left to ``None`` keep their current value. Durations
        accept the same values as ``RetryConfig``.

        Args:
            initial_rpc_timeout: Timeout of the first attempt.
            rpc_timeout_multiplier: Factor applied to the attempt
                timeout after each retry.
            max_rpc_timeout: Upper bound of the attempt timeout.
            total_timeout: Overall time budget of a call.
            methods: Names of the methods to update. Defaults to all.

        Returns:
            The updated settings.

        Raises:
            KeyError: If a method name is unknown.
            ValueError: If a parameter is invalid.

        Example:
            ```pycon
            >>> from datetime import timedelta
            >>> from langwire.settings import LanguageServiceSettings
            >>> settings = LanguageServiceSettings().with_timeout(
            ...     initial_rpc_timeout="PT5S", max_rpc_timeout="PT20S", rpc_timeout_multiplier=2.0
            ... )
            >>> settings.classify_text.retry_settings.initial_rpc_timeout
            datetime.timedelta(seconds=5)

            ```
        """
        config = RetryConfig(
            initial_rpc_timeout=initial_rpc_timeout,
            rpc_timeout_multiplier=rpc_timeout_multiplier,
            max_rpc_timeout=max_rpc_timeout,
            total_timeout=total_timeout,
        )
        return self.with_retry(config, methods=methods)
