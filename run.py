from __future__ import annotations

import logging
import os
import signal
import sys
from typing import Any, Mapping

from flask import Flask

from pastebox import create_app
from pastebox.db import close_db


logger = logging.getLogger("pastebox")


def _shutdown(signum, _frame) -> None:
    logger.info(
        f"Received {signal.Signals(signum).name}, shutting down",
        extra={"event": "shutdown"},
    )
    close_db()
    sys.exit(0)


def build_app(overrides: Mapping[str, Any] | None = None) -> Flask:
    """Create the served app; production settings unless APP_ENV says otherwise."""
    return create_app(os.getenv("APP_ENV", "production"), overrides)


def main() -> None:
    app = build_app()

    host = os.getenv("HOST", "0.0.0.0")
    port = int(app.config["PORT"])

    signal.signal(signal.SIGINT, _shutdown)
    signal.signal(signal.SIGTERM, _shutdown)

    logger.info(
        f"Server running on port {port}; admin panel at http://localhost:{port}/admin",
        extra={"event": "startup"},
    )
    app.run(host=host, port=port, debug=app.config["DEBUG"], use_reloader=False)


if __name__ == "__main__":
    main()
