r"""Parameter validation utilities for retry and credentials settings.

This module provides validation functions to ensure retry parameters
meet the constraints of the Google API client libraries before they are
handed over to them.
"""

from __future__ import annotations

__all__ = ["validate_credentials_params", "validate_retry_params", "validate_retry_bounds"]

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import timedelta


def _check_non_negative(name: str, value: timedelta | None) -> None:
    if value is not None and value.total_seconds() < 0:
        msg = f"{name} must be >= 0, got {value}"
        raise ValueError(msg)


def validate_retry_params(
    total_timeout: timedelta | None = None,
    initial_retry_delay: timedelta | None = None,
    retry_delay_multiplier: float | None = None,
    max_retry_delay: timedelta | None = None,
    max_attempts: int | None = None,
    initial_rpc_timeout: timedelta | None = None,
    rpc_timeout_multiplier: float | None = None,
    max_rpc_timeout: timedelta | None = None,
) -> None:
    """Validate retry parameters.

    ``None`` means the parameter is not set and is always accepted.

    Args:
        total_timeout: Overall time budget for a call including retries.
            Must be >= 0.
        initial_retry_delay: Delay before the first retry. Must be >= 0.
        retry_delay_multiplier: Factor applied to the delay after each
            retry. Must be >= 1.0.
        max_retry_delay: Upper bound of the retry delay. Must be >= 0.
        max_attempts: Maximum number of attempts. Must be >= 0, where 0
            means the number of attempts is only bounded by
            ``total_timeout``.
        initial_rpc_timeout: Timeout of the first attempt. Must be >= 0.
        rpc_timeout_multiplier: Factor applied to the attempt timeout
            after each retry. Must be >= 1.0.
        max_rpc_timeout: Upper bound of the attempt timeout. Must be >= 0.

    Raises:
        ValueError: If any parameter is out of range.

    Example:
        ```pycon
        >>> from datetime import timedelta
        >>> from langwire.core.validation import validate_retry_params
        >>> validate_retry_params(initial_retry_delay=timedelta(milliseconds=100))
        >>> validate_retry_params(retry_delay_multiplier=1.3, max_attempts=5)
        >>> validate_retry_params(max_attempts=-1)  # doctest: +SKIP
        Traceback (most recent call last):
        ...
        ValueError: max_attempts must be >= 0, got -1

        ```
    """
    _check_non_negative("total_timeout", total_timeout)
    _check_non_negative("initial_retry_delay", initial_retry_delay)
    _check_non_negative("max_retry_delay", max_retry_delay)
    _check_non_negative("initial_rpc_timeout", initial_rpc_timeout)
    _check_non_negative("max_rpc_timeout", max_rpc_timeout)
    if retry_delay_multiplier is not None and retry_delay_multiplier < 1.0:
        msg = f"retry_delay_multiplier must be >= 1.0, got {retry_delay_multiplier}"
        raise ValueError(msg)
    if rpc_timeout_multiplier is not None and rpc_timeout_multiplier < 1.0:
        msg = f"rpc_timeout_multiplier must be >= 1.0, got {rpc_timeout_multiplier}"
        raise ValueError(msg)
    if max_attempts is not None and max_attempts < 0:
        msg = f"max_attempts must be >= 0, got {max_attempts}"
        raise ValueError(msg)


def validate_retry_bounds(
    initial_retry_delay: timedelta,
    max_retry_delay: timedelta,
    initial_rpc_timeout: timedelta,
    max_rpc_timeout: timedelta,
) -> None:
    """Validate that the upper bounds of fully resolved retry settings
    are not below their initial values.

    Raises:
        ValueError: If a maximum is shorter than its initial value.
    """
    if max_retry_delay < initial_retry_delay:
        msg = (
            f"max_retry_delay ({max_retry_delay}) must not be shorter than "
            f"initial_retry_delay ({initial_retry_delay})"
        )
        raise ValueError(msg)
    if max_rpc_timeout < initial_rpc_timeout:
        msg = (
            f"max_rpc_timeout ({max_rpc_timeout}) must not be shorter than "
            f"initial_rpc_timeout ({initial_rpc_timeout})"
        )
        raise ValueError(msg)


def validate_credentials_params(
    location: str | None, encoded_key: str | None, scopes: Sequence[str]
) -> None:
    """Validate credentials parameters.

    Raises:
        ValueError: If both ``location`` and ``encoded_key`` are set, or
            if ``scopes`` is empty.
    """
    if location and encoded_key:
        msg = "only one of location and encoded_key can be set"
        raise ValueError(msg)
    if not scopes:
        msg = "scopes must not be empty"
        raise ValueError(msg)
