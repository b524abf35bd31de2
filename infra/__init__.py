# Infrastructure module - Configuration, logging and clipboard export
# infra.clipboard is imported directly, it depends on core

from .config import AppConfig, ConfigManager
from .logging import (
    get_logger, configure_logging, SessionContext,
    get_session_id, generate_session_id
)

__all__ = [
    # Config
    "AppConfig",
    "ConfigManager",
    # Logging
    "get_logger",
    "configure_logging",
    "SessionContext",
    "get_session_id",
    "generate_session_id",
]
