"""Run the HTTP gateway with ``python -m chatflow``."""

from __future__ import annotations

import logging
import sys

import uvicorn

from chatflow.core.config import get_settings
from chatflow.main import create_app
from chatflow.workflow_orchestration.config import ConfigurationError, get_temporal_config


def main() -> None:
    settings = get_settings()
    try:
        get_temporal_config(settings).require()
    except ConfigurationError as exc:
        logging.basicConfig(level=logging.ERROR)
        logging.error(str(exc))
        sys.exit(1)

    app = create_app(settings)
    logging.getLogger("chatflow.main").info("Starting API server on port %s", settings.server_port)
    # A failed Temporal connection aborts lifespan startup and uvicorn exits non-zero.
    uvicorn.run(app, host="0.0.0.0", port=settings.server_port, log_config=None)


if __name__ == "__main__":  # pragma: no cover
    main()
