"""
Key Auth Logging
================
Structured logging setup and the authentication outcome event.

Usage:
    from key_auth.observability import setup_logging

    setup_logging(service_name="items-api")
"""

import logging
import sys
from typing import Any, Dict, Optional

import structlog

from .credentials.rotation import mask_api_key
from .models import AuthRequest, AuthResult, AuthStatus

logger = structlog.get_logger(__name__)


def _add_service(service_name: str):
    def processor(_logger: Any, _method: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
        event_dict.setdefault("service", service_name)
        return event_dict
    return processor


def setup_logging(
    service_name: str = "key-auth",
    level: str = "INFO",
    json_output: bool = True,
) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        service_name: Name of the service, added to every event
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Whether to output JSON (for production)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            _add_service(service_name),
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
    )

    logger.info("logging_configured", service=service_name, level=level.upper())


def log_auth_outcome(
    result: AuthResult,
    request: AuthRequest,
    api_key: Optional[str] = None,
) -> None:
    """
    Emit the diagnostic outcome of an authentication attempt.

    The event mirrors the X-Key-Auth header. It is for debugging only and
    never carries the shared secret or the full API key.
    """
    if result.status is AuthStatus.UNAUTHENTICATED:
        logger.debug("key_auth_not_applicable", method=request.method, uri=request.uri)
        return

    log = logger.info if result.is_authenticated else logger.warning
    log(
        "key_auth_outcome",
        outcome=result.diagnostic,
        status=result.status.value,
        reason=result.reason.value if result.reason else None,
        principal_id=result.principal_id,
        api_key=mask_api_key(api_key) if api_key else None,
        method=request.method,
        uri=request.uri,
        remote_ip=request.remote_ip,
    )
