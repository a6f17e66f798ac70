from __future__ import annotations

from typing import Callable, Awaitable
import contextvars

import grpc

from core.logging_config import get_logger
from grpc_app.interceptors.request_id import REQUEST_ID_META_KEY, get_request_id
from domain.common.exceptions import BusinessException
from shared.codes import BusinessCode


logger = get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "internal server error"

# Mark that the current request has been mapped to a gRPC status
_mapped_error: contextvars.ContextVar[bool] = contextvars.ContextVar("grpc_mapped_error", default=False)


def set_mapped_error() -> None:
    _mapped_error.set(True)


def is_mapped_error() -> bool:
    return bool(_mapped_error.get())


_STATUS_BY_CODE = {
    BusinessCode.PARAM_ERROR: grpc.StatusCode.INVALID_ARGUMENT,
    BusinessCode.PARAM_MISSING: grpc.StatusCode.INVALID_ARGUMENT,
    BusinessCode.PARAM_TYPE_ERROR: grpc.StatusCode.INVALID_ARGUMENT,
    BusinessCode.PARAM_VALIDATION_ERROR: grpc.StatusCode.INVALID_ARGUMENT,

    BusinessCode.NOT_FOUND: grpc.StatusCode.NOT_FOUND,
    BusinessCode.BOOKING_NOT_FOUND: grpc.StatusCode.NOT_FOUND,
    BusinessCode.BOOKING_ALREADY_EXISTS: grpc.StatusCode.ALREADY_EXISTS,
    BusinessCode.BOOKING_PRECONDITION_FAILED: grpc.StatusCode.FAILED_PRECONDITION,
    BusinessCode.BUSINESS_ERROR: grpc.StatusCode.FAILED_PRECONDITION,

    BusinessCode.SERVICE_UNAVAILABLE: grpc.StatusCode.UNAVAILABLE,
    BusinessCode.SYSTEM_ERROR: grpc.StatusCode.INTERNAL,
}


def business_code_to_grpc_status(code: int) -> grpc.StatusCode:
    try:
        bc = BusinessCode(code)
    except ValueError:
        return grpc.StatusCode.FAILED_PRECONDITION
    return _STATUS_BY_CODE.get(bc, grpc.StatusCode.FAILED_PRECONDITION)


def _trailers(code: int, error_type: str, field: str | None = None) -> tuple:
    md = [
        ("x-biz-code", str(int(code))),
        ("x-error-type", error_type),
    ]
    if field:
        md.append(("x-error-field", field))
    request_id = get_request_id()
    if request_id:
        md.append((REQUEST_ID_META_KEY, request_id))
    return tuple(md)


class ExceptionMappingInterceptor(grpc.aio.ServerInterceptor):
    """Turn BusinessException (and anything unexpected) into a gRPC status.

    The status details carry the exception's human-readable message;
    trailing metadata carries the business code, error type and field.
    """

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
            try:
                return await handler.unary_unary(request, context)
            except BusinessException as exc:
                status = business_code_to_grpc_status(exc.code)
                trailers = _trailers(exc.code, exc.error_type or "BusinessError", exc.field)
                set_mapped_error()
                # Concise business error log (no stack)
                logger.warning(
                    "grpc_mapped_error",
                    method=method,
                    code=str(int(exc.code)),
                    status=status.name,
                    message=exc.message,
                    field=exc.field,
                )
                await context.abort(status, exc.message, trailing_metadata=trailers)
            except grpc.aio.AbortError:
                # Already aborted downstream
                raise
            except Exception as exc:
                trailers = _trailers(BusinessCode.SYSTEM_ERROR, "SystemError")
                set_mapped_error()
                logger.error(
                    "grpc_mapped_error",
                    method=method,
                    code=str(BusinessCode.SYSTEM_ERROR.value),
                    status=grpc.StatusCode.INTERNAL.name,
                    message=str(exc),
                    exc_info=True,
                )
                await context.abort(grpc.StatusCode.INTERNAL, INTERNAL_ERROR_MESSAGE, trailing_metadata=trailers)

        if handler.unary_unary:
            return grpc.unary_unary_rpc_method_handler(
                _unary_unary,
                request_deserializer=handler.request_deserializer,
                response_serializer=handler.response_serializer,
            )
        return handler
