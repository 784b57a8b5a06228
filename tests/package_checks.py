from __future__ import annotations

import logging
import sys

import langwire
from langwire import (
    ApplicationContext,
    LanguageClient,
    LanguageServiceSettings,
    RetryConfig,
    create_context,
)

logger: logging.Logger = logging.getLogger(__name__)


def check_settings() -> None:
    logger.info("Checking settings...")
    settings = LanguageServiceSettings().with_retry(RetryConfig(max_attempts=3))
    method = settings.method("analyze_sentiment")
    assert method.retry_settings.max_attempts == 3
    assert method.retry_settings.initial_rpc_timeout.total_seconds() == 600.0


def check_context() -> None:
    logger.info("Checking context...")
    with create_context({"langwire.language-service.enabled": "false"}) as context:
        assert isinstance(context, ApplicationContext)
        assert not context.contains(LanguageClient)


def main() -> None:
    r"""Run all package checks to validate installation and
    functionality."""
    logger.info(f"langwire {langwire.__version__}")
    try:
        check_settings()
        check_context()

        logger.info("All package checks passed successfully!")
    except Exception:
        logger.exception("Package check failed")
        sys.exit(1)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    main()
