"""
Logging configuration for the attendance reporting engine.
Provides console logging (coloured in development), optional JSON output
and an optional rotating file handler.
"""

import logging
import logging.config
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger.json import JsonFormatter

from attendance_engine.config.settings import Settings, settings as default_settings


class CustomJsonFormatter(JsonFormatter):
    """Custom JSON formatter with additional fields"""

    def __init__(self, *args: Any, environment: Optional[str] = None, **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.environment = environment or default_settings.ENVIRONMENT

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]):
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = datetime.now(timezone.utc).isoformat()
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['environment'] = self.environment

        # Request-scoped identifiers attached through `extra=`
        for attr in ('faculty_id', 'course_id', 'mode', 'request_id'):
            if hasattr(record, attr):
                log_record[attr] = getattr(record, attr)


def build_logging_config(config: Settings) -> Dict[str, Any]:
    """Create the dictConfig mapping for the given settings."""
    if config.LOG_JSON:
        console_formatter = 'json'
    elif config.is_development():
        console_formatter = 'colored'
    else:
        console_formatter = 'standard'

    handlers: Dict[str, Dict[str, Any]] = {
        'console': {
            'level': 'DEBUG' if config.DEBUG else config.LOG_LEVEL,
            'class': 'logging.StreamHandler',
            'formatter': console_formatter,
        },
    }
    if config.LOG_FILE:
        handlers['file'] = {
            'level': 'INFO',
            'class': 'logging.handlers.RotatingFileHandler',
            'filename': config.LOG_FILE,
            'maxBytes': 10485760,  # 10MB
            'backupCount': 10,
            'formatter': 'json' if config.LOG_JSON else 'standard',
            'encoding': 'utf8',
        }

    return {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'standard': {
                'format': '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
            },
            'json': {
                '()': CustomJsonFormatter,
                'environment': config.ENVIRONMENT,
                'format': '%(timestamp)s %(level)s %(logger)s %(message)s'
            },
            'colored': {
                '()': 'colorlog.ColoredFormatter',
                'format': '%(log_color)s%(asctime)s [%(levelname)s] %(name)s: %(message)s',
                'log_colors': {
                    'DEBUG': 'cyan',
                    'INFO': 'green',
                    'WARNING': 'yellow',
                    'ERROR': 'red',
                    'CRITICAL': 'red,bg_white',
                },
            },
        },
        'handlers': handlers,
        'loggers': {
            'attendance_engine': {
                'handlers': list(handlers),
                'level': 'DEBUG' if config.DEBUG else config.LOG_LEVEL,
                'propagate': False,
            },
            'httpx': {
                'handlers': ['console'],
                'level': 'WARNING',
                'propagate': False,
            },
        },
    }


def setup_logging(config: Optional[Settings] = None) -> None:
    """Apply the logging configuration."""
    config = config or default_settings
    logging.config.dictConfig(build_logging_config(config))
    logging.getLogger(__name__).debug(
        "Logging configured: level=%s json=%s", config.LOG_LEVEL, config.LOG_JSON
    )
