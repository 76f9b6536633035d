"""
Logging configuration for GearGuard.

One call to ``setup_logging(app)`` wires console output plus two rotating
files under ``LOG_DIR``:
- app.log     (everything at LOG_LEVEL and above)
- errors.log  (ERROR and above)

Modules get their own logger with ``logging.getLogger(__name__)`` and share
this configuration through the root logger.
"""

import logging
import os
from logging.handlers import RotatingFileHandler


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

MAX_BYTES = 10 * 1024 * 1024
BACKUP_COUNT = 5


def setup_logging(app):
    """Configure the root logger from the application's config."""
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Avoid stacking handlers when create_app() runs more than once (tests)
    for handler in list(root_logger.handlers):
        if getattr(handler, "_gearguard", False):
            root_logger.removeHandler(handler)
            handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    console_handler._gearguard = True
    root_logger.addHandler(console_handler)

    if app.config.get("LOG_TO_FILE", True):
        log_dir = app.config.get("LOG_DIR", "logs")
        os.makedirs(log_dir, exist_ok=True)

        app_file_handler = RotatingFileHandler(
            os.path.join(log_dir, "app.log"),
            maxBytes=MAX_BYTES,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
        app_file_handler.setLevel(level)
        app_file_handler.setFormatter(formatter)
        app_file_handler._gearguard = True
        root_logger.addHandler(app_file_handler)

        error_file_handler = RotatingFileHandler(
            os.path.join(log_dir, "errors.log"),
            maxBytes=MAX_BYTES,
            backupCount=BACKUP_COUNT,
            encoding="utf-8",
        )
        error_file_handler.setLevel(logging.ERROR)
        error_file_handler.setFormatter(formatter)
        error_file_handler._gearguard = True
        root_logger.addHandler(error_file_handler)

    # werkzeug request lines are noisy at INFO
    logging.getLogger("werkzeug").setLevel(logging.WARNING)

    logging.getLogger(__name__).debug("Logging configured (level=%s)", logging.getLevelName(level))
