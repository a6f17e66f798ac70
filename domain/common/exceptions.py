"""领域层业务异常定义，供领域、应用层与 gRPC 适配层使用。

gRPC 层只负责把 BusinessCode 映射为状态码，领域层不反向依赖传输层。
"""
from __future__ import annotations

from typing import Optional
from shared.codes import BusinessCode


class BusinessException(Exception):
    """业务异常基类"""

    def __init__(
        self,
        code: int,
        message: str,
        error_type: str = "BusinessError",
        details: Optional[dict] = None,
        field: Optional[str] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.error_type = error_type
        self.details = details
        self.field = field
        super().__init__(self.message)


class DomainValidationException(BusinessException):
    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        details: dict | None = None,
        code: int = BusinessCode.PARAM_VALIDATION_ERROR,
    ):
        super().__init__(
            code=code,
            message=message,
            error_type="DomainValidationError",
            details=details,
            field=field,
        )


class BookingNotFoundException(BusinessException):
    def __init__(self, booking_id: Optional[str] = None):
        details = {"booking_id": booking_id} if booking_id else None
        super().__init__(
            code=BusinessCode.BOOKING_NOT_FOUND,
            message=f"Booking {booking_id} not found" if booking_id else "Booking not found",
            error_type="BookingNotFound",
            details=details,
            field="booking_id",
        )


class BookingAlreadyExistsException(BusinessException):
    def __init__(self, booking_id: str):
        super().__init__(
            code=BusinessCode.BOOKING_ALREADY_EXISTS,
            message=f"Booking {booking_id} already exists",
            error_type="BookingAlreadyExists",
            details={"booking_id": booking_id},
            field="booking_id",
        )


class BookingPreconditionException(BusinessException):
    """请求格式正确，但在当前系统状态下无法满足（如库存或价格已失效）。"""

    def __init__(self, message: str, *, details: Optional[dict] = None):
        super().__init__(
            code=BusinessCode.BOOKING_PRECONDITION_FAILED,
            message=message,
            error_type="BookingPreconditionFailed",
            details=details,
        )
