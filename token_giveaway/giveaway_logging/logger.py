"""
Structured logging for giveaway runs.

One structlog pipeline for the whole process: every record carries an ISO
timestamp, the level, the emitting module, and a snake_case event_type.
Ledger values (Pubkey, Signature, Hash) may be passed as fields directly;
they are rendered in their base58 form. Run-wide context such as the RPC
endpoint is bound once with bind_run_context() and merged into every record.

LOG_LEVEL (default INFO) and LOG_FORMAT (json | console, default json) are
read when configure_logging() runs; that happens on first import.

No token_giveaway imports here, so any module can import this one.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog
from solders.hash import Hash
from solders.pubkey import Pubkey
from solders.signature import Signature

_LEDGER_VALUE_TYPES = (Pubkey, Signature, Hash)


def _render_ledger_values(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Base58 strings for ledger values, including inside lists (e.g. winner addresses)."""
    for key, value in event_dict.items():
        if isinstance(value, _LEDGER_VALUE_TYPES):
            event_dict[key] = str(value)
        elif isinstance(value, (list, tuple)) and value and isinstance(value[0], _LEDGER_VALUE_TYPES):
            event_dict[key] = [str(v) for v in value]
    return event_dict


def _event_type(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    if "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event", "")
    return event_dict


def configure_logging(level: str | None = None, fmt: str | None = None) -> None:
    """(Re)build the processor chain. Explicit arguments win over LOG_LEVEL / LOG_FORMAT."""
    level_name = (level or os.getenv("LOG_LEVEL") or "INFO").strip().upper()
    level_value = getattr(logging, level_name, logging.INFO)
    output = (fmt or os.getenv("LOG_FORMAT") or "json").strip().lower()

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
        structlog.processors.format_exc_info,
        _render_ledger_values,
    ]
    if output == "console":
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    else:
        processors.extend([_event_type, structlog.processors.JSONRenderer()])
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_value),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,
    )


if not structlog.is_configured():
    configure_logging()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Return a structured logger for the given module name.

        logger = get_logger(__name__)
        logger.info("transaction_finalized", signature=sig, size_bytes=412)
    Output (JSON): {"event_type": "transaction_finalized", "signature": "5h...", "size_bytes": 412,
                    "level": "info", "timestamp": "...", "logger": "token_giveaway.ledger.assembler"}
    """
    return structlog.get_logger(name).bind(logger=name)


def bind_identity(pubkey: Pubkey | str) -> structlog.BoundLogger:
    """Logger with the acting keypair's public key bound to every call."""
    return get_logger("token_giveaway").bind(identity=str(pubkey))


def bind_run_context(**context: Any) -> None:
    """Attach fields (rpc_url, commitment, ...) to every record for the rest of the run."""
    structlog.contextvars.bind_contextvars(**context)
