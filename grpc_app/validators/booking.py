"""Request shape validation for booking.v1.

Pure predicates over wire messages: no store access, no side effects. Each
validator returns None to accept or a single Rejection; rules run in a fixed
order and the first failure wins.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional

from domain.booking.entity import MAX_SEGMENTS
from domain.common.exceptions import DomainValidationException
from grpc_app.schema import booking_v1 as pb
from shared.codes import BusinessCode


_CURRENCY_RE = re.compile(r"[A-Z]{3}")

# google.protobuf.Timestamp: 0001-01-01T00:00:00Z .. 9999-12-31T23:59:59.999999999Z
_MIN_SECONDS = -62_135_596_800
_MAX_SECONDS = 253_402_300_799
_MAX_NANOS = 999_999_999


@dataclass(frozen=True)
class Rejection:
    field: str
    reason: str
    code: BusinessCode = BusinessCode.PARAM_VALIDATION_ERROR
    details: dict = field(default_factory=dict)

    def to_exception(self) -> DomainValidationException:
        return DomainValidationException(
            self.reason, field=self.field, details=self.details or None, code=self.code
        )


def _blank(value: str) -> bool:
    return not value or not value.strip()


def _missing(path: str) -> Rejection:
    return Rejection(path, f"{path} is required", BusinessCode.PARAM_MISSING)


def check_passenger(request) -> Optional[Rejection]:
    if not request.HasField("passenger"):
        return _missing("passenger")
    p = request.passenger
    for name in ("first_name", "last_name", "email"):
        if _blank(getattr(p, name)):
            return _missing(f"passenger.{name}")
    return None


def check_segments(request) -> Optional[Rejection]:
    count = len(request.segments)
    if count == 0:
        return _missing("segments")
    if count > MAX_SEGMENTS:
        return Rejection(
            "segments",
            f"at most {MAX_SEGMENTS} segments are allowed, got {count}",
            details={"count": count, "max": MAX_SEGMENTS},
        )
    for i, seg in enumerate(request.segments):
        for name in ("flight_number", "origin_code", "destination_code"):
            if _blank(getattr(seg, name)):
                return _missing(f"segments[{i}].{name}")
    return None


def check_segment_times(request) -> Optional[Rejection]:
    for i, seg in enumerate(request.segments):
        for name in ("departure_utc", "arrival_utc"):
            if not seg.HasField(name):
                return _missing(f"segments[{i}].{name}")
            ts = getattr(seg, name)
            if not (_MIN_SECONDS <= ts.seconds <= _MAX_SECONDS and 0 <= ts.nanos <= _MAX_NANOS):
                return Rejection(
                    f"segments[{i}].{name}",
                    f"segments[{i}].{name} is not a valid timestamp",
                    details={"seconds": ts.seconds, "nanos": ts.nanos},
                )
        departure = (seg.departure_utc.seconds, seg.departure_utc.nanos)
        arrival = (seg.arrival_utc.seconds, seg.arrival_utc.nanos)
        if arrival < departure:
            return Rejection(
                f"segments[{i}].arrival_utc",
                f"segments[{i}] arrives before it departs",
            )
    return None


def check_currency(request) -> Optional[Rejection]:
    # unset means "use the server default"; an explicit value must be well formed
    if not request.HasField("currency_code"):
        return None
    value = request.currency_code.value
    if not _CURRENCY_RE.fullmatch(value):
        return Rejection(
            "currency_code",
            f"currency_code must be three upper-case letters, got {value!r}",
        )
    return None


_ITINERARY_RULES = (check_passenger, check_segments, check_segment_times, check_currency)


def validate_itinerary_request(request) -> Optional[Rejection]:
    """Shared rules for QuoteRequest and CreateBookingRequest."""
    for rule in _ITINERARY_RULES:
        rejection = rule(request)
        if rejection is not None:
            return rejection
    return None


def validate_quote_request(request: pb.QuoteRequest) -> Optional[Rejection]:
    return validate_itinerary_request(request)


def validate_create_request(request: pb.CreateBookingRequest) -> Optional[Rejection]:
    return validate_itinerary_request(request)


def validate_retrieve_request(request: pb.RetrieveBookingRequest) -> Optional[Rejection]:
    if _blank(request.booking_id):
        return _missing("booking_id")
    return None
