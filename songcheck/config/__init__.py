"""Configuration module for songcheck.

Public API:
----------
settings: Settings instance
    Pydantic settings object with nested configuration groups

get_logger(name: str) -> Logger
    Get a context-aware logger for your module

setup_loguru_logger(verbose: bool = False) -> None
    Configure Loguru logger for the application

resilient_operation(operation_name: str)
    Decorator for logging errors in external API calls

Usage:
------
```python
from songcheck.config import settings
threshold = settings.matching.song_match_threshold

from songcheck.config import get_logger
logger = get_logger(__name__)
logger.info("Starting comparison")
```
"""

from .logging import (
    get_logger,
    log_startup_info,
    resilient_operation,
    setup_loguru_logger,
)
from .settings import (
    APIConfig,
    CacheConfig,
    CredentialsConfig,
    DatabaseConfig,
    LoggingConfig,
    MatchingConfig,
    RetryConfig,
    Settings,
    settings,
)

__all__ = [
    "APIConfig",
    "CacheConfig",
    "CredentialsConfig",
    "DatabaseConfig",
    "LoggingConfig",
    "MatchingConfig",
    "RetryConfig",
    "Settings",
    "get_logger",
    "log_startup_info",
    "resilient_operation",
    "settings",
    "setup_loguru_logger",
]
