"""
promostudio/utils/logging.py
────────────────────────────
Configures structured logging for production.
"""
import os
import logging
from logging.handlers import RotatingFileHandler
from flask import has_request_context, request


class RequestFormatter(logging.Formatter):
    """
    Custom formatter that injects request info (URL, client IP)
    into logs if a request context is available.
    """
    def format(self, record):
        if has_request_context():
            record.url = request.url
            record.remote_addr = request.remote_addr
        else:
            record.url = None
            record.remote_addr = None
        return super().format(record)


def setup_logging(app):
    """
    Configure rotating file logging: logs/app.log
    Max size: 5MB
    Backup count: 5 files
    Format: timestamp | level | module | message

    Engine modules log through logging.getLogger(__name__); their records
    propagate to the app logger (also named "promostudio") and are
    filtered at PROMO_LOG_LEVEL.
    """
    level = getattr(logging, app.config.get('PROMO_LOG_LEVEL', 'INFO'), logging.INFO)
    handlers = []

    # 1. File Logger (skipped when the filesystem is read-only)
    if app.config.get('LOG_TO_FILE', True):
        log_dir = os.path.join(app.root_path, '..', 'logs')
        try:
            os.makedirs(log_dir, exist_ok=True)
            file_handler = RotatingFileHandler(
                os.path.join(log_dir, 'app.log'),
                maxBytes=5 * 1024 * 1024,
                backupCount=5
            )
        except OSError as e:
            app.logger.warning(f"File logging disabled: {e}")
        else:
            file_handler.setFormatter(RequestFormatter(
                '%(asctime)s | %(levelname)s | %(name)s | %(remote_addr)s | %(url)s | %(message)s'
            ))
            file_handler.setLevel(logging.INFO)
            handlers.append(file_handler)

    # 2. Stdout Logger (picked up by the platform's log collector)
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(
        '%(asctime)s | %(levelname)s | %(name)s | %(message)s'
    ))
    stream_handler.setLevel(level)
    handlers.append(stream_handler)

    # create_app runs once per test; drop handlers left by a previous app
    for old in list(app.logger.handlers):
        app.logger.removeHandler(old)
        old.close()
    for handler in handlers:
        app.logger.addHandler(handler)

    app.logger.setLevel(logging.INFO)
    logging.getLogger("promostudio.promotions").setLevel(level)
    app.logger.info("PromoStudio startup")
