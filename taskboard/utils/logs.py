import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union


def setup_logger(
    log_dir: Optional[Union[str, Path]] = None,
    log_level: Union[int, str] = logging.INFO,
    log_file: str = "taskboard.log",
) -> logging.Logger:
    """Configure the ``taskboard`` logger.

    Logs go to the console and, when ``log_dir`` is given, to a rotating file
    in that directory.
    """
    logger = logging.getLogger("taskboard")
    logger.setLevel(log_level)

    # Remove any existing handlers
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(log_dir, log_file),
            maxBytes=1024 * 1024,  # 1 MB
            backupCount=5,
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
