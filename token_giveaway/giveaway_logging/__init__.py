"""
Structured logging for the token giveaway.

JSON logs with timestamp, event_type and per-event fields.
"""

from token_giveaway.giveaway_logging.logger import (
    bind_identity,
    bind_run_context,
    configure_logging,
    get_logger,
)

__all__ = ["bind_identity", "bind_run_context", "configure_logging", "get_logger"]
