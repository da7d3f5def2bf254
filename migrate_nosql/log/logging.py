"""
Loguru logger setup shared by every module.

Modules import ``logger`` from here and attach structured fields as keyword
arguments, e.g. ``logger.info("...", event_type="document_upgraded")``.
"""

import logging.handlers
import sys

from loguru import logger

from migrate_nosql.core.config import settings

TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level> | {extra}"
)


def configure_logging(config: dict | None = None) -> None:
    """
    Configure loguru sinks from the settings logging config.

    Args:
        config: Logging config dict (defaults to ``settings.logging_config``).
    """
    config = config or settings.logging_config

    logger.remove()
    logger.configure(extra={"app_name": config["app_name"]})

    if config["json_logs"]:
        logger.add(sys.stderr, level=config["log_level"], serialize=True)
    else:
        logger.add(sys.stderr, level=config["log_level"], format=TEXT_FORMAT)

    if config.get("enable_logstash") and config.get("syslog_host"):
        handler = logging.handlers.SysLogHandler(
            address=(config["syslog_host"], config["syslog_port"])
        )
        logger.add(handler, level=config["log_level"], serialize=True)


configure_logging()

__all__ = ["logger", "configure_logging"]
