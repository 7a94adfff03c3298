import logging
import os
from logging.handlers import RotatingFileHandler

from config import get_settings


def setup_api_logger(log_path: str | None = None) -> logging.Logger:
    """Setup and return the application-wide ``socialnet.api`` logger.

    Creates a rotating file handler at `log_path` (defaults to the LOG_PATH
    setting, then ./logs/api.log) plus a stream handler. Service modules log
    through child loggers (``socialnet.api.posts`` ...) and propagate here.
    """
    settings = get_settings()
    if log_path is None:
        log_path = settings.LOG_PATH
    if log_path is None:
        base = os.path.abspath(os.path.dirname(__file__))
        logs_dir = os.path.join(base, '..', 'logs')
        os.makedirs(logs_dir, exist_ok=True)
        log_path = os.path.join(logs_dir, 'api.log')
    else:
        os.makedirs(os.path.dirname(os.path.abspath(log_path)), exist_ok=True)

    logger = logging.getLogger('socialnet.api')
    logger.setLevel(settings.LOG_LEVEL.upper())

    # avoid adding multiple handlers if called multiple times
    if not logger.handlers:
        formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(name)s: %(message)s')

        file_handler = RotatingFileHandler(log_path, maxBytes=5 * 1024 * 1024, backupCount=5, encoding='utf-8')
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)

    return logger
