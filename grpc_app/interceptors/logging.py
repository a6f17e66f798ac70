from __future__ import annotations

import time
from typing import Callable, Awaitable

import grpc

from core.logging_config import get_logger
from grpc_app.interceptors.exceptions import is_mapped_error


logger = get_logger(__name__)


class LoggingInterceptor(grpc.aio.ServerInterceptor):
    """Access log per RPC. The request id comes from bound structlog contextvars."""

    async def intercept_service(
        self,
        continuation: Callable[[grpc.HandlerCallDetails], Awaitable[grpc.RpcMethodHandler]],
        handler_call_details: grpc.HandlerCallDetails,
    ) -> grpc.RpcMethodHandler:
        handler = await continuation(handler_call_details)
        if handler is None:
            return handler

        method = handler_call_details.method

        async def _unary_unary(request, context: grpc.aio.ServicerContext):
            start = time.perf_counter()
            outcome = "ok"
            try:
                logger.info("grpc_request", method=method, peer=context.peer())
                return await handler.unary_unary(request, context)
            except grpc.aio.AbortError:
                # Mapped to a status by ExceptionMappingInterceptor, already logged there
                outcome = "aborted"
                raise
            except Exception as exc:
                outcome = "error"
                if not is_mapped_error():
                    logger.error("grpc_unhandled_error", method=method, error=str(exc), exc_info=True)
                raise
            finally:
                elapsed_ms = (time.perf_counter() - start) * 1000
                logger.info(
                    "grpc_request_done",
                    method=method,
                    outcome=outcome,
                    elapsed_ms=round(elapsed_ms, 2),
                )

        if handler.unary_unary:
            return grpc.unary_unary_rpc_method_handler(
                _unary_unary,
                request_deserializer=handler.request_deserializer,
                response_serializer=handler.response_serializer,
            )
        return handler
