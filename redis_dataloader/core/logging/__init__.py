from .logger import (
    get_logger,
    log_stage,
    setup_logging,
    truncate_key,
)

__all__ = [
    "get_logger",
    "log_stage",
    "setup_logging",
    "truncate_key",
]
