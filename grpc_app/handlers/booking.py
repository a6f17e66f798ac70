"""booking.v1 request handlers.

`BookingServiceV1` is the explicit per-operation interface the transport
adapter dispatches to; `BookingHandler` implements it by composing
validation, wire -> domain mapping, the application service and
domain -> wire mapping. Errors propagate as BusinessException subclasses and
are turned into gRPC statuses by ExceptionMappingInterceptor.
"""
from __future__ import annotations

from abc import ABC, abstractmethod

from application.services.booking_service import BookingApplicationService
from grpc_app.mappers.booking import (
    booking_to_proto,
    fare_to_proto,
    optional_string,
    passenger_from_proto,
    segments_from_proto,
)
from grpc_app.schema import booking_v1 as pb
from grpc_app.validators.booking import (
    validate_create_request,
    validate_quote_request,
    validate_retrieve_request,
)


class BookingServiceV1(ABC):
    """One coroutine per booking.v1 RPC."""

    @abstractmethod
    async def quote(self, request: pb.QuoteRequest) -> pb.QuoteReply:
        ...

    @abstractmethod
    async def create_booking(self, request: pb.CreateBookingRequest) -> pb.CreateBookingReply:
        ...

    @abstractmethod
    async def retrieve_booking(self, request: pb.RetrieveBookingRequest) -> pb.RetrieveBookingReply:
        ...


class BookingHandler(BookingServiceV1):
    def __init__(self, service: BookingApplicationService) -> None:
        self._svc = service

    async def quote(self, request: pb.QuoteRequest) -> pb.QuoteReply:  # type: ignore[override]
        rejection = validate_quote_request(request)
        if rejection is not None:
            raise rejection.to_exception()
        fare = await self._svc.quote(
            passenger_from_proto(request.passenger),
            segments_from_proto(request.segments),
            currency_code=optional_string(request, "currency_code"),
        )
        return pb.QuoteReply(fare=fare_to_proto(fare))

    async def create_booking(self, request: pb.CreateBookingRequest) -> pb.CreateBookingReply:  # type: ignore[override]
        rejection = validate_create_request(request)
        if rejection is not None:
            raise rejection.to_exception()
        booking = await self._svc.create_booking(
            passenger_from_proto(request.passenger),
            segments_from_proto(request.segments),
            currency_code=optional_string(request, "currency_code"),
        )
        return pb.CreateBookingReply(booking_id=booking.booking_id, fare=fare_to_proto(booking.fare))

    async def retrieve_booking(self, request: pb.RetrieveBookingRequest) -> pb.RetrieveBookingReply:  # type: ignore[override]
        rejection = validate_retrieve_request(request)
        if rejection is not None:
            raise rejection.to_exception()
        booking = await self._svc.get_booking(request.booking_id)
        return pb.RetrieveBookingReply(booking=booking_to_proto(booking))
