# ============================================================================
# STRUCTURED LOGGING
# ============================================================================
# COMPONENT: INBOX HEALTHCHECK
# STATUS: Core - Structured logging with context
# PURPOSE: Consistent, queryable logging for probes and the listener
# CREATED: 17 OCT 2026
# ============================================================================
"""
Structured Logging

JSON or human-readable logging for the healthcheck. Every record emitted
while a probe runs carries the check name and category, so a failing
dependency can be traced from the orchestrator's probe log to the
underlying error.

Usage:
    from core.logging import get_logger, log_context

    logger = get_logger("health.server")

    with log_context(check_name="broker-tcp", category="readiness"):
        logger.warning("Probe failed")
"""

import json
import logging
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union


@dataclass
class LogContext:
    """
    Context for structured logging.

    Per-task storage for contextual fields.
    """
    check_name: Optional[str] = None
    category: Optional[str] = None
    request_path: Optional[str] = None
    component: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict, excluding None values."""
        result = {}
        for key, value in asdict(self).items():
            if value is not None and key != "extra":
                result[key] = value
        if self.extra:
            result.update(self.extra)
        return result


# Context-local storage; each asyncio task sees its own copy
_current_context: ContextVar[Optional[LogContext]] = ContextVar("log_context", default=None)


def get_current_context() -> LogContext:
    """Get current logging context."""
    context = _current_context.get()
    if context is None:
        return LogContext()
    return context


@contextmanager
def log_context(**kwargs):
    """
    Context manager for adding logging context.

    Fields not given are inherited from the enclosing context.

    Example:
        with log_context(category="readiness"):
            with log_context(check_name="database"):
                logger.info("Pinging")
    """
    parent = get_current_context()
    new_context = LogContext(
        check_name=kwargs.get("check_name", parent.check_name),
        category=kwargs.get("category", parent.category),
        request_path=kwargs.get("request_path", parent.request_path),
        component=kwargs.get("component", parent.component),
        extra={**parent.extra, **kwargs.get("extra", {})},
    )

    token = _current_context.set(new_context)
    try:
        yield new_context
    finally:
        _current_context.reset(token)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs log records as JSON for easy parsing by log aggregators.
    """

    def __init__(self, include_context: bool = True, include_source: bool = True):
        super().__init__()
        self.include_context = include_context
        self.include_source = include_source

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: Dict[str, Any] = {
            "timestamp": _utcnow().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_context:
            context_dict = get_current_context().to_dict()
            if context_dict:
                log_data["context"] = context_dict

        # Extra fields attached by ContextLogger
        if hasattr(record, "extra") and record.extra:
            log_data["data"] = record.extra

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if self.include_source:
            log_data["source"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        return json.dumps(log_data, default=str)


class HumanFormatter(logging.Formatter):
    """
    Human-readable formatter for development.

    Includes the check name and category inline.
    """

    def format(self, record: logging.LogRecord) -> str:
        timestamp = _utcnow().strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname.ljust(8)

        context = get_current_context()
        context_parts = []
        if context.category:
            context_parts.append(f"category={context.category}")
        if context.check_name:
            context_parts.append(f"check={context.check_name}")
        if context.request_path:
            context_parts.append(f"path={context.request_path}")

        context_str = f" [{', '.join(context_parts)}]" if context_parts else ""

        extra_str = ""
        if hasattr(record, "extra") and record.extra:
            extra_str = f" {record.extra}"

        result = f"{timestamp} {level} {record.name}{context_str}: {record.getMessage()}{extra_str}"

        if record.exc_info:
            result += f"\n{self.formatException(record.exc_info)}"

        return result


class ContextLogger(logging.LoggerAdapter):
    """
    Logger adapter that includes context in log records.

    Automatically includes the current context in all log messages.
    """

    def process(self, msg, kwargs):
        context = get_current_context()

        # Adapter fields (component), then call-site extras, then context
        extra = {k: v for k, v in (self.extra or {}).items() if v is not None}
        extra.update(kwargs.get("extra", {}))
        extra.update(context.to_dict())

        # Stored as an attribute for formatter access
        kwargs["extra"] = {"extra": extra}

        return msg, kwargs


def get_logger(name: str, component: Optional[str] = None) -> ContextLogger:
    """
    Get a context-aware logger.

    Args:
        name: Logger name (e.g., "health.server")
        component: Optional component label

    Returns:
        ContextLogger instance
    """
    base_logger = logging.getLogger(name)
    return ContextLogger(base_logger, {"component": component})


def configure_logging(
    level: Union[str, int] = "INFO",
    json_output: bool = False,
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_output: Use JSON format (for production)
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    if json_output or os.getenv("LOG_FORMAT", "").lower() == "json":
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = HumanFormatter()

    root = logging.getLogger()
    root.setLevel(level)

    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    root.addHandler(handler)


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "LogContext",
    "StructuredFormatter",
    "HumanFormatter",
    "ContextLogger",
    "get_logger",
    "configure_logging",
    "log_context",
    "get_current_context",
]
