"""Temporal worker entry point for production use."""

from __future__ import annotations

import asyncio
import logging
import sys

from chatflow.core.config import get_settings
from chatflow.core.logging import configure_logging
from chatflow.workflow_orchestration.client import TemporalConnectionError
from chatflow.workflow_orchestration.config import ConfigurationError
from chatflow.workflow_orchestration.worker import run_worker


def main() -> None:
    """Run the Temporal worker with service logging configuration."""
    configure_logging(get_settings())

    try:
        asyncio.run(run_worker())
    except KeyboardInterrupt:
        logging.info("temporal_worker_stopped")
    except (ConfigurationError, TemporalConnectionError) as exc:
        logging.error(str(exc))
        sys.exit(1)
    except Exception as exc:
        logging.error(f"Worker failed: {exc}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
