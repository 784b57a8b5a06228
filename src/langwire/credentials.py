r"""Credentials resolution for the language service client.

A ``CredentialsProvider`` knows where credentials come from and loads
them lazily through ``google.auth``. Sources are picked in this order by
``CredentialsProvider.from_properties``:

1. the service-specific credentials properties
2. the shared credentials properties
3. the ambient credentials found by ``google.auth.default`` (which
   honours ``GOOGLE_APPLICATION_CREDENTIALS``)
"""

from __future__ import annotations

__all__ = ["CredentialsProvider"]

import base64
import binascii
import json
import logging
from typing import TYPE_CHECKING, Any

import google.auth
from google.auth import exceptions as auth_exceptions

from langwire.core.config import DEFAULT_SCOPES
from langwire.exceptions import CredentialsLoadError, ResourceLoadError
from langwire.utils.resource import load_resource

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    import httpx
    from google.auth.credentials import Credentials

    from langwire.core.config import CredentialsProperties

logger: logging.Logger = logging.getLogger(__name__)

AMBIENT = "ambient"


class CredentialsProvider:
    r"""Lazily resolves ``google.auth`` credentials.

    At most one of ``location``, ``encoded_key`` and ``info`` can be set.
    When none is set, the ambient credentials are used.

    Args:
        location: Resource location of a JSON key, see
            ``langwire.utils.resource.load_resource``.
        encoded_key: Base64-encoded JSON key.
        info: Already parsed JSON key.
        scopes: OAuth scopes requested for the credentials.
        http_client: Optional httpx.Client used to fetch ``http(s)://``
            locations.

    Example:
        ```pycon
        >>> from langwire.credentials import CredentialsProvider
        >>> provider = CredentialsProvider(location="file:tests/resources/fake-credential-key.json")
        >>> provider.source
        'file:tests/resources/fake-credential-key.json'
        >>> provider.info["client_id"]  # doctest: +SKIP
        '45678'
        >>> CredentialsProvider().source
        'ambient'

        ```
    """

    def __init__(
        self,
        *,
        location: str | None = None,
        encoded_key: str | None = None,
        info: Mapping[str, Any] | None = None,
        scopes: Sequence[str] = DEFAULT_SCOPES,
        http_client: httpx.Client | None = None,
    ) -> None:
        if sum(value is not None for value in (location, encoded_key, info)) > 1:
            msg = "only one of location, encoded_key and info can be set"
            raise ValueError(msg)
        self._location = location
        self._encoded_key = encoded_key
        self._info: dict[str, Any] | None = dict(info) if info is not None else None
        self._scopes = tuple(scopes)
        self._http_client = http_client
        self._credentials: Credentials | None = None

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(source={self.source!r}, scopes={self._scopes})"

    @classmethod
    def from_properties(
        cls,
        service: CredentialsProperties,
        shared: CredentialsProperties | None = None,
        http_client: httpx.Client | None = None,
    ) -> CredentialsProvider:
        r"""Create a provider from the service and shared credentials
        properties.

        The service-specific properties win over the shared ones. When
        neither is configured, the ambient credentials are used with the
        service scopes.

        Args:
            service: The service-specific credentials properties.
            shared: The shared credentials properties.
            http_client: Optional httpx.Client for remote locations.

        Returns:
            The credentials provider.
        """
        if service.is_configured:
            selected, origin = service, "service"
        elif shared is not None and shared.is_configured:
            selected, origin = shared, "shared"
        else:
            logger.debug("No credentials configured, using ambient credentials")
            return cls(scopes=service.scopes, http_client=http_client)
        logger.debug(f"Using {origin} credentials from {selected.location or 'encoded key'}")
        return cls(
            location=selected.location,
            encoded_key=selected.encoded_key,
            scopes=selected.scopes,
            http_client=http_client,
        )

    @property
    def source(self) -> str:
        r"""Description of where the credentials come from."""
        if self._location is not None:
            return self._location
        if self._encoded_key is not None:
            return "encoded-key"
        if self._info is not None:
            return "info"
        return AMBIENT

    @property
    def scopes(self) -> tuple[str, ...]:
        r"""The OAuth scopes requested for the credentials."""
        return self._scopes

    @property
    def info(self) -> dict[str, Any] | None:
        r"""The parsed JSON key, or ``None`` for ambient credentials.

        Raises:
            CredentialsLoadError: If the key cannot be read or parsed.
        """
        if self._info is None and self.source != AMBIENT:
            self._info = self._read_info()
        return self._info

    def _read_info(self) -> dict[str, Any]:
        try:
            if self._location is not None:
                raw = load_resource(self._location, client=self._http_client)
            else:
                raw = base64.b64decode(self._encoded_key or "", validate=True)
            info = json.loads(raw)
        except ResourceLoadError as exc:
            raise CredentialsLoadError(
                f"Failed to read credentials from {self.source!r}: {exc}",
                source=self.source,
                cause=exc,
            ) from exc
        except (binascii.Error, ValueError) as exc:
            raise CredentialsLoadError(
                f"Credentials from {self.source!r} are not a valid JSON key: {exc}",
                source=self.source,
                cause=exc,
            ) from exc
        if not isinstance(info, dict):
            msg = (
                f"Credentials from {self.source!r} must be a JSON object, "
                f"got {type(info).__name__}"
            )
            raise CredentialsLoadError(msg, source=self.source)
        return info

    def get_credentials(self) -> Credentials:
        r"""Return the credentials, loading them on first use.

        Returns:
            The ``google.auth`` credentials.

        Raises:
            CredentialsLoadError: If the credentials cannot be loaded.
        """
        if self._credentials is None:
            self._credentials = self._load()
        return self._credentials

    def _load(self) -> Credentials:
        info = self.info
        try:
            if info is None:
                credentials, project_id = google.auth.default(scopes=list(self._scopes))
            else:
                credentials, project_id = google.auth.load_credentials_from_dict(
                    info, scopes=list(self._scopes)
                )
        except (auth_exceptions.GoogleAuthError, ValueError) as exc:
            raise CredentialsLoadError(
                f"Failed to load credentials from {self.source!r}: {exc}",
                source=self.source,
                cause=exc,
            ) from exc
        logger.debug(
            f"Loaded {type(credentials).__name__} from {self.source!r} (project: {project_id})"
        )
        return credentials
