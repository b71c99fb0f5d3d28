import logging
import os
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DEFAULT_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# urllib3 logs every connection at DEBUG, including pooled reconnects
_NOISY_LOGGERS = ("urllib3",)


def configure_logging(level: Optional[str] = None, *, debug_http: bool = False) -> logging.Logger:
    """
    Give the root logger a stdout handler (only if it has none) and apply the level.
    The library never calls this on import; scripts and host applications do.
    debug_http keeps urllib3 connection logs when running at DEBUG.
    """
    resolved_level = (level or DEFAULT_LEVEL).upper()
    root_logger = logging.getLogger()

    if not root_logger.handlers:
        logging.basicConfig(
            level=resolved_level,
            format=LOG_FORMAT,
            handlers=[logging.StreamHandler(sys.stdout)],
        )
    else:
        root_logger.setLevel(resolved_level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(resolved_level if debug_http else logging.WARNING)

    logging.captureWarnings(True)
    return logging.getLogger("correios")
