from __future__ import annotations

import logging

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Root logging setup. Safe to call more than once (uvicorn reload, tests)."""
    logging.basicConfig(level=level.upper(), format=_FORMAT)
    logging.getLogger("checkoutrelay").setLevel(level.upper())
