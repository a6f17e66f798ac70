"""
Shared business codes used across layers (Domain/Application/gRPC).

This package exposes BusinessCode at `shared.codes` so the domain and the
transport layer agree on one classification of every failure.
"""
from enum import IntEnum


class BusinessCode(IntEnum):
    """Unified business status codes (single source of truth)."""

    # Success
    SUCCESS = 0

    # Parameter errors (1xxxx) -> INVALID_ARGUMENT
    PARAM_ERROR = 10000
    PARAM_MISSING = 10001
    PARAM_TYPE_ERROR = 10002
    PARAM_VALIDATION_ERROR = 10003

    # Business errors (2xxxx)
    BUSINESS_ERROR = 20000
    NOT_FOUND = 20006  # Generic resource not found
    BOOKING_NOT_FOUND = 20101
    BOOKING_ALREADY_EXISTS = 20102
    BOOKING_PRECONDITION_FAILED = 20103

    # System errors (4xxxx)
    SYSTEM_ERROR = 40000
    SERVICE_UNAVAILABLE = 40003


__all__ = ["BusinessCode"]
