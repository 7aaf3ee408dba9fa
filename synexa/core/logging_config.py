"""
Synexa-SIS logging

Plain text in development, one JSON object per line in production. Every
record carries the request id and, once authenticated, the acting user
and their school role.
"""

import json
import logging
import sys
import traceback
import uuid
from contextvars import ContextVar
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict

from synexa.core.config import settings


request_id_var: ContextVar[str] = ContextVar('request_id', default='')
actor_id_var: ContextVar[str] = ContextVar('actor_id', default='')
actor_role_var: ContextVar[str] = ContextVar('actor_role', default='')


def get_request_id() -> str:
    return request_id_var.get()


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def generate_request_id() -> str:
    return uuid.uuid4().hex[:8]


def set_actor(user_id: str, role: str = '') -> None:
    """Bind the authenticated user to the current request context"""
    actor_id_var.set(user_id)
    actor_role_var.set(role)


def clear_context() -> None:
    request_id_var.set('')
    actor_id_var.set('')
    actor_role_var.set('')


# LogRecord attributes that are not user supplied `extra=` fields
_RECORD_ATTRS = set(vars(logging.LogRecord('', 0, '', 0, '', None, None))) | {
    'message', 'asctime', 'request_id', 'actor', 'taskName',
}


class JSONFormatter(logging.Formatter):
    """Structured records for log aggregation in production"""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }
        if request_id_var.get():
            entry["request_id"] = request_id_var.get()
        if actor_id_var.get():
            entry["actor"] = {"id": actor_id_var.get(), "role": actor_role_var.get() or None}

        if record.exc_info and record.exc_info[0]:
            exc_type, exc_value, exc_tb = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": traceback.format_exception(exc_type, exc_value, exc_tb),
            }

        entry.update(
            (key, value) for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS and not key.startswith('_')
        )
        return json.dumps(entry, default=str, ensure_ascii=False)


class ContextualFormatter(logging.Formatter):
    """Readable development output with request and actor tags"""

    def format(self, record: logging.LogRecord) -> str:
        record.request_id = request_id_var.get() or '-'
        actor = actor_id_var.get()
        record.actor = f"{actor_role_var.get()}:{actor[:8]}" if actor else 'anon'
        return super().format(record)


class SynexaLogger(logging.Logger):
    """Logger with helpers for the event types the school system emits"""

    def log_auth_event(self, event: str, success: bool, user_email: str = None,
                       reason: str = None, **kwargs) -> None:
        outcome = 'ok' if success else 'falhou'
        message = f"Auth {event} {outcome}"
        if user_email:
            message += f" ({user_email})"
        if reason:
            message += f": {reason}"
        self.log(
            logging.INFO if success else logging.WARNING,
            message,
            extra={
                "event_type": "auth",
                "auth_event": event,
                "auth_success": success,
                "user_email": user_email,
                "failure_reason": reason,
                **kwargs
            }
        )

    def log_audit_event(self, action: str, entity: str, entity_id: str = None,
                        actor_id: str = None, **kwargs) -> None:
        """Log a state change on a school record (enrollment, invoice, route, ...)"""
        self.info(
            f"Audit {entity}.{action}" + (f" [{entity_id}]" if entity_id else ""),
            extra={
                "event_type": "audit",
                "audit_action": action,
                "audit_entity": entity,
                "entity_id": entity_id,
                "actor_id": actor_id or actor_id_var.get() or None,
                **kwargs
            }
        )

    def log_unhandled(self, error: Exception, where: str) -> None:
        self.error(
            f"Unhandled {type(error).__name__} in {where}: {error}",
            exc_info=error,
            extra={"event_type": "error", "error_type": type(error).__name__, "error_context": where},
        )

    def log_performance(self, operation: str, duration_ms: float,
                        threshold_ms: float = 1000, **kwargs) -> None:
        """DEBUG timing, promoted to WARNING once over ``threshold_ms``"""
        slow = duration_ms > threshold_ms
        self.log(
            logging.WARNING if slow else logging.DEBUG,
            f"{'Slow: ' if slow else ''}{operation} took {duration_ms:.2f}ms",
            extra={
                "event_type": "performance",
                "operation": operation,
                "duration_ms": duration_ms,
                "threshold_ms": threshold_ms,
                "exceeded_threshold": slow,
                **kwargs
            }
        )


def _build_formatters(json_logs: bool):
    if json_logs:
        formatter = JSONFormatter()
        return formatter, formatter
    console = ContextualFormatter("%(levelname)-8s | [%(request_id)s] %(actor)s | %(message)s")
    detailed = ContextualFormatter(
        "%(asctime)s | %(levelname)-8s | [%(request_id)s] %(actor)s | "
        "%(name)s:%(funcName)s:%(lineno)d | %(message)s"
    )
    return console, detailed


def setup_logging() -> SynexaLogger:
    logging.setLoggerClass(SynexaLogger)

    root = logging.getLogger("synexa")
    root.__class__ = SynexaLogger
    root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    root.handlers.clear()

    json_logs = settings.ENVIRONMENT == "production"
    console_formatter, file_formatter = _build_formatters(json_logs)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(console_formatter)
    root.addHandler(console_handler)

    if settings.LOG_FILE:
        log_file = Path(settings.LOG_FILE)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=5)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(file_formatter)
        root.addHandler(file_handler)

    for noisy in ("httpx", "httpcore", "uvicorn.access", "sqlalchemy.engine", "aiosqlite"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return root


logger: SynexaLogger = setup_logging()


def get_logger(name: str) -> SynexaLogger:
    """Child logger of ``synexa`` so module loggers share the configured handlers"""
    child = logger.getChild(name.replace("synexa.", "", 1))
    child.__class__ = SynexaLogger
    return child


__all__ = [
    'logger',
    'get_logger',
    'setup_logging',
    'get_request_id',
    'set_request_id',
    'generate_request_id',
    'set_actor',
    'clear_context',
    'SynexaLogger',
]
