"""Process-wide logging setup. Modules only ever call logging.getLogger(__name__)."""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the root logger (safe to call more than once)."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, force=True)
    # Socket.IO / engine.IO are chatty at INFO
    logging.getLogger("socketio").setLevel(logging.WARNING)
    logging.getLogger("engineio").setLevel(logging.WARNING)
