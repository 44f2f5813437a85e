"""
Logging configuration with secret masking.
"""

import logging
import logging.config
import threading
from typing import Any, Dict, Iterable, Set

from jobgate.config.provider import get_defaults

_secrets: Set[str] = set()
_secrets_lock = threading.Lock()


def register_secret(*values: str) -> None:
    """Register values that must never appear in log output."""
    with _secrets_lock:
        for value in values:
            if value and value.strip():
                _secrets.add(value)


def clear_secrets() -> None:
    """Forget all registered secrets."""
    with _secrets_lock:
        _secrets.clear()


def mask(text: str, secrets: Iterable[str] = ()) -> str:
    """Replace every registered (or given) secret in text with the mask token."""
    with _secrets_lock:
        candidates = set(_secrets)
    candidates.update(s for s in secrets if s)
    mask_string = get_defaults().mask_string
    # Longest first so a secret containing another is masked whole
    for secret in sorted(candidates, key=len, reverse=True):
        text = text.replace(secret, mask_string)
    return text


class SecretMaskingFilter(logging.Filter):
    """Filter that rewrites records so registered secrets are masked."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Mask secrets in the fully formatted message."""
        message = record.getMessage()
        masked = mask(message)
        if masked != message:
            record.msg = masked
            record.args = None
        return True  # Never drop records


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """Get logging configuration with secret masking applied to every handler."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "secret_masking_filter": {
                "()": SecretMaskingFilter
            }
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            },
            "stream": {
                "format": "%(asctime)s - %(name)s - %(message)s"
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stderr",
                "filters": ["secret_masking_filter"]
            },
            "stream": {
                "class": "logging.StreamHandler",
                "formatter": "stream",
                "stream": "ext://sys.stderr",
                "filters": ["secret_masking_filter"]
            }
        },
        "loggers": {
            "jobgate": {
                "handlers": ["default"],
                "level": level,
                "propagate": False
            },
            "jobgate.process": {
                "handlers": ["stream"],
                "level": level,
                "propagate": False
            }
        },
        "root": {
            "level": "WARNING",
            "handlers": ["default"]
        }
    }


def configure_logging(level: str = "INFO") -> None:
    """Apply the jobgate logging configuration."""
    logging.config.dictConfig(get_logging_config(level.upper()))
