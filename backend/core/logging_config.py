"""
Logging setup for the API server and the command-line client.

Console output always; a daily rotating file (log_YYYY-MM-DD.txt) when a
log directory is configured.
"""

import logging
import os
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(funcName)s:%(lineno)d] - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logging(level: str = "INFO", log_dir: Optional[str] = None) -> logging.Logger:
    """
    Configure the root logger.

    Args:
        level: Log level name (e.g. "INFO", "DEBUG")
        log_dir: Directory for rotating log files, or None for console only

    Returns:
        The configured root logger
    """
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Avoid stacking handlers when called more than once (reload, tests)
    for handler in list(root_logger.handlers):
        if getattr(handler, "_image_editor_handler", False):
            root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)
    console_handler._image_editor_handler = True
    root_logger.addHandler(console_handler)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        today = datetime.now().strftime("%Y-%m-%d")
        file_handler = TimedRotatingFileHandler(
            filename=os.path.join(log_dir, f"log_{today}.txt"),
            when='midnight',
            interval=1,
            backupCount=30,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(log_level)
        file_handler._image_editor_handler = True
        root_logger.addHandler(file_handler)

    # httpx logs every request URL at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    return root_logger
