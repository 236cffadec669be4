from __future__ import annotations

from .logging import JsonFormatter, KVLogger, configure_logging, get_logger

__all__ = ["JsonFormatter", "KVLogger", "configure_logging", "get_logger"]
