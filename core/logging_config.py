"""
Structlog 日志配置模块

All modules log through `get_logger(__name__)` with an event name plus
keyword context. Context bound with `structlog.contextvars` (the gRPC
request id, for instance) is merged into every record of the current task,
and every record carries the service name, version and environment.
"""
import logging
import json
import structlog
from structlog.processors import TimeStamper, add_log_level, JSONRenderer
from structlog.dev import ConsoleRenderer
from structlog.contextvars import merge_contextvars
from structlog.stdlib import ProcessorFormatter
from typing import Any, List

from core.config import settings


def add_service_context(logger: Any, method_name: str, event_dict: dict) -> dict:
    """Stamp service identity so records from several deployments can be told apart."""
    event_dict.setdefault("service", settings.PROJECT_NAME)
    event_dict.setdefault("version", settings.VERSION)
    event_dict.setdefault("env", settings.ENVIRONMENT)
    return event_dict


def get_renderer() -> Any:
    fmt = settings.logging.format or ("console" if settings.DEBUG else "json")
    if fmt == "console":
        return ConsoleRenderer(colors=True)

    def _dumps(obj, default=None, **kwargs):
        return json.dumps(obj, ensure_ascii=False, default=default, **kwargs)
    return JSONRenderer(serializer=_dumps)


def resolve_level() -> int:
    if settings.logging.level:
        return logging.getLevelName(settings.logging.level.upper())
    return logging.DEBUG if settings.DEBUG else logging.INFO


def configure_logging() -> None:
    """配置 structlog，并把标准库 logging（含 grpc 自身日志）桥接到同一处理链。"""
    shared_pre_chain: List[Any] = [
        merge_contextvars,
        add_log_level,
        add_service_context,
        TimeStamper(fmt="iso", utc=True),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=[*shared_pre_chain, ProcessorFormatter.wrap_for_formatter],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(
        ProcessorFormatter(
            foreign_pre_chain=shared_pre_chain,
            processors=[ProcessorFormatter.remove_processors_meta, get_renderer()],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(resolve_level())

    # 降低第三方库噪音
    for name, level in settings.logging.quiet.items():
        logging.getLogger(name).setLevel(level.upper())


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    """获取 structlog logger 实例。"""
    return structlog.get_logger(name)


# 初始化配置
configure_logging()
