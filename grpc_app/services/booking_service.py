from __future__ import annotations

from typing import Awaitable, Callable

import grpc

from grpc_app.handlers.booking import BookingServiceV1
from grpc_app.schema import booking_v1 as pb


def _unary(
    call: Callable[[object], Awaitable[object]], request_type, reply_type
) -> grpc.RpcMethodHandler:
    async def _unary_unary(request, context: grpc.aio.ServicerContext):
        return await call(request)

    return grpc.unary_unary_rpc_method_handler(
        _unary_unary,
        request_deserializer=request_type.FromString,
        response_serializer=reply_type.SerializeToString,
    )


def add_booking_service_to_server(handler: BookingServiceV1, server: grpc.aio.Server) -> None:
    """Bind /booking.v1.BookingService/* to the handler's methods."""
    rpc_method_handlers = {
        "Quote": _unary(handler.quote, pb.QuoteRequest, pb.QuoteReply),
        "CreateBooking": _unary(handler.create_booking, pb.CreateBookingRequest, pb.CreateBookingReply),
        "RetrieveBooking": _unary(handler.retrieve_booking, pb.RetrieveBookingRequest, pb.RetrieveBookingReply),
    }
    generic_handler = grpc.method_handlers_generic_handler(pb.SERVICE_NAME, rpc_method_handlers)
    server.add_generic_rpc_handlers((generic_handler,))


class BookingServiceStub:
    """Client binding for booking.v1.BookingService over a grpc.aio channel."""

    def __init__(self, channel: grpc.aio.Channel) -> None:
        self.Quote = channel.unary_unary(
            pb.CONTRACT.method_path(pb.SERVICE, "Quote"),
            request_serializer=pb.QuoteRequest.SerializeToString,
            response_deserializer=pb.QuoteReply.FromString,
        )
        self.CreateBooking = channel.unary_unary(
            pb.CONTRACT.method_path(pb.SERVICE, "CreateBooking"),
            request_serializer=pb.CreateBookingRequest.SerializeToString,
            response_deserializer=pb.CreateBookingReply.FromString,
        )
        self.RetrieveBooking = channel.unary_unary(
            pb.CONTRACT.method_path(pb.SERVICE, "RetrieveBooking"),
            request_serializer=pb.RetrieveBookingRequest.SerializeToString,
            response_deserializer=pb.RetrieveBookingReply.FromString,
        )
