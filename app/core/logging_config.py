# =============================================================================================
# APP/CORE/LOGGING_CONFIG.PY - STRUCTURED LOGGING WITH STRUCTLOG
# =============================================================================================
# Configures structlog once at startup. Every module then does:
#
#     logger = structlog.get_logger(__name__)
#     logger.info("currency_created", symbol="USD")
#
# Output is human-readable in development and one JSON object per line when LOG_JSON=true.
# Raw tokens and password material are never passed to the logger.
# =============================================================================================

import logging
import sys

import structlog


def configure_logging(log_level: str = "INFO", json_logs: bool = False) -> None:
    """
    Configure structlog and the stdlib root logger.

    Safe to call more than once (tests build the app repeatedly); the root handler
    is only attached the first time.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
    root.setLevel(level)

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if json_logs:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        # ConsoleRenderer formats exc_info itself
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
