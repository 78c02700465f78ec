# Core infrastructure
from src.core.context import (
    RequestContext,
    clear_context,
    get_context,
    get_request_id,
    get_user_id,
    set_request_id,
    set_user_id,
)
from src.core.database import Database
from src.core.logging import configure_structlog, get_logger
from src.core.middleware import OptionsResponseMiddleware, RequestContextMiddleware
from src.core.schemas import ApiModel, MessageResponse


__all__ = [
    "ApiModel",
    "Database",
    "MessageResponse",
    "RequestContext",
    "OptionsResponseMiddleware",
    "RequestContextMiddleware",
    "clear_context",
    "configure_structlog",
    "get_context",
    "get_logger",
    "get_request_id",
    "get_user_id",
    "set_request_id",
    "set_user_id",
]
