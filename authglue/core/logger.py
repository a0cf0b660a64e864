"""
Logging for the login service.

Each component logs through its own named logger (``app_logger``,
``request_logger``, ``auth_logger`` in ``authglue.core.config``), writing to
``logs/<component>.log`` and to the console. When a Sentry DSN is
configured, ERROR records also become Sentry events.
"""

import logging
from logging.handlers import RotatingFileHandler
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3

_sentry_initialized = False


def init_sentry(
    dsn: str,
    environment: str = "development",
    traces_sample_rate: float = 1.0,
) -> bool:
    """
    Start Sentry error reporting for this process.

    Only the first call with a DSN has an effect. Records at INFO and above
    are kept as breadcrumbs; ERROR records, such as failed token exchanges,
    are sent as events. Request bodies, cookies and user data are not sent.

    Args:
        dsn (str): Project DSN. An empty value leaves Sentry off.
        environment (str): Environment label attached to events.
        traces_sample_rate (float): Share of requests traced, 0.0 to 1.0.

    Returns:
        bool: Whether this call started Sentry.
    """
    global _sentry_initialized

    if _sentry_initialized or not dsn:
        return False

    import sentry_sdk
    from sentry_sdk.integrations.asyncio import AsyncioIntegration
    from sentry_sdk.integrations.logging import LoggingIntegration

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        traces_sample_rate=traces_sample_rate,
        integrations=[
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
            AsyncioIntegration(),
        ],
        send_default_pii=False,
    )

    _sentry_initialized = True
    return True


def _build_handlers(log_file: str, level: int) -> list[logging.Handler]:
    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    formatter = logging.Formatter(LOG_FORMAT)
    handlers: list[logging.Handler] = [
        RotatingFileHandler(
            log_file,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        ),
        logging.StreamHandler(),
    ]
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def setup_logger(
    name: str,
    log_file: str,
    level: int = logging.INFO,
    sentry_tag: Optional[str] = None,
) -> logging.Logger:
    """
    Return the logger ``name``, attached to ``log_file`` and the console.

    The file rotates at 5 MB and keeps three backups. Asking again for a
    logger that already has handlers only updates its level.

    Args:
        name (str): Logger name, e.g. ``"auth_logger"``.
        log_file (str): Path of the rotating log file; its directory is created.
        level (int, optional): Minimum level recorded. Defaults to logging.INFO.
        sentry_tag (str, optional): ``component`` tag set on Sentry events
            once Sentry is running.

    Returns:
        logging.Logger: The configured logger.
    """
    if sentry_tag and _sentry_initialized:
        import sentry_sdk

        sentry_sdk.set_tag("component", sentry_tag)

    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        for handler in _build_handlers(log_file, level):
            logger.addHandler(handler)

    return logger
