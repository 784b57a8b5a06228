from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import Mock, patch

import pytest

if TYPE_CHECKING:
    from collections.abc import Generator


@pytest.fixture
def mock_vendor_client() -> Generator[Mock, None, None]:
    """Patch the vendor LanguageServiceClient class.

    The fixture yields the mock class. The client instance created by
    the code under test is ``mock_vendor_client.return_value``.
    """
    with patch("google.cloud.language_v1.LanguageServiceClient") as mock:
        yield mock
