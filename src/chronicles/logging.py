"""Structured logging for the server and the game engine.

Engine modules log snake_case events with keyword context. While a command
runs, the session id is bound into structlog's context vars, so every event
a handler or hook emits carries it without passing it around.
"""

import hashlib
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import structlog

# Event keys that identify a player and are hashed before output
IDENTITY_KEYS = ("fingerprint", "session")

MAX_LOGGED_INPUT = 80


def _hash(value: str) -> str:
    return hashlib.sha256(value.encode()).hexdigest()[:12]


def hash_identity_processor(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Replace certificate fingerprints and session ids with short hashes."""
    for key in IDENTITY_KEYS:
        value = event_dict.pop(key, None)
        if value and value != "unknown":
            event_dict[f"{key}_hash"] = _hash(str(value))
    return event_dict


def clip_input_processor(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Keep free-text player input short in log lines."""
    raw = event_dict.get("raw_input")
    if isinstance(raw, str) and len(raw) > MAX_LOGGED_INPUT:
        event_dict["raw_input"] = raw[:MAX_LOGGED_INPUT] + "..."
    return event_dict


def configure_logging(
    log_level: str = "INFO",
    log_file: Path | None = None,
    json_logs: bool = False,
    hash_identities: bool = True,
) -> None:
    """Configure structlog once at process start."""
    output_stream = open(log_file, "a") if log_file else sys.stdout
    level = logging.getLevelNamesMapping().get(log_level.upper(), logging.INFO)

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(
            fmt="iso" if json_logs else "%Y-%m-%d %H:%M:%S"
        ),
        clip_input_processor,
    ]
    if hash_identities:
        processors.append(hash_identity_processor)

    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=output_stream.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output_stream),
        cache_logger_on_first_use=True,
    )


@contextmanager
def command_context(session_id: str, verb: str) -> Iterator[None]:
    """Bind the session and verb to every event logged inside the block."""
    with structlog.contextvars.bound_contextvars(session=session_id, verb=verb):
        yield


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a logger instance for a module."""
    return structlog.get_logger(name)
