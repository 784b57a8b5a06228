r"""Shared test helpers for the langwire test suite.

This module contains the locations and expected values of the fake
service account keys stored in ``tests/resources``.
"""

from __future__ import annotations

__all__ = [
    "RESOURCES_DIR",
    "SERVICE_CREDENTIAL_CLIENT_ID",
    "SERVICE_CREDENTIAL_EMAIL",
    "SERVICE_CREDENTIAL_LOCATION",
    "SHARED_CREDENTIAL_CLIENT_ID",
    "SHARED_CREDENTIAL_EMAIL",
    "SHARED_CREDENTIAL_LOCATION",
    "create_mock_credentials_provider",
    "service_prefixed",
]

from pathlib import Path
from unittest.mock import Mock

from langwire.core.config import SERVICE_PREFIX
from langwire.credentials import CredentialsProvider

RESOURCES_DIR = Path(__file__).parent / "resources"

SERVICE_CREDENTIAL_LOCATION = f"file:{RESOURCES_DIR / 'fake-credential-key.json'}"
SERVICE_CREDENTIAL_CLIENT_ID = "45678"
SERVICE_CREDENTIAL_EMAIL = "language@fake-project.iam.gserviceaccount.com"

SHARED_CREDENTIAL_LOCATION = f"file:{RESOURCES_DIR / 'fake-credential-key-2.json'}"
SHARED_CREDENTIAL_CLIENT_ID = "12345"
SHARED_CREDENTIAL_EMAIL = "shared@fake-shared-project.iam.gserviceaccount.com"


def service_prefixed(**values: str) -> dict[str, str]:
    r"""Return a property mapping where every key is prefixed with the
    service prefix.

    Keyword names use ``__`` for the dots, e.g.
    ``retry__max_attempts="3"`` becomes
    ``langwire.language-service.retry.max_attempts``.
    """
    return {f"{SERVICE_PREFIX}.{key.replace('__', '.')}": value for key, value in values.items()}


def create_mock_credentials_provider(source: str = "mock") -> Mock:
    r"""Create a mock CredentialsProvider returning mock credentials."""
    return Mock(
        spec=CredentialsProvider,
        source=source,
        get_credentials=Mock(return_value=Mock(name="credentials")),
    )
