"""booking.v1 wire contract.

Published: tags below are permanent. Add fields on fresh tags only; when a
field goes away, move it to `reserved`. Anything that changes the meaning
or type of an existing tag belongs in a new `booking.v2` package served
next to this one. The human-readable copy lives in
`grpc_app/protos/booking/v1/booking.proto`.
"""
from __future__ import annotations

from grpc_app.schema.builder import (
    STRING_VALUE,
    TIMESTAMP,
    ContractSpec,
    FieldSpec as F,
    MessageSpec,
    MethodSpec,
    Reserved,
    ServiceSpec,
    load_contract,
)


SERVICE = "BookingService"

SPEC = ContractSpec(
    package="booking.v1",
    file_name="booking/v1/booking.proto",
    messages=(
        MessageSpec("Passenger", (
            F(1, "first_name", "string"),
            F(2, "last_name", "string"),
            F(3, "email", "string"),
        )),
        MessageSpec("ItinerarySegment", (
            F(1, "flight_number", "string"),
            F(2, "origin_code", "string"),
            F(3, "destination_code", "string"),
            F(4, "departure_utc", TIMESTAMP),
            F(5, "arrival_utc", TIMESTAMP),
        )),
        MessageSpec("Fare", (
            F(1, "currency_code", "string"),
            F(2, "base_cents", "int64"),
            F(3, "taxes_cents", "int64"),
            F(4, "total_cents", "int64"),
        )),
        MessageSpec(
            "Booking",
            (
                F(1, "booking_id", "string"),
                F(2, "passenger", "Passenger"),
                F(3, "segments", "ItinerarySegment", repeated=True),
                F(4, "fare", "Fare"),
                F(5, "created_utc", TIMESTAMP),
            ),
            # bookings are immutable, the lifecycle status field was dropped
            reserved=(Reserved(6, "status"),),
        ),
        MessageSpec("QuoteRequest", (
            F(1, "passenger", "Passenger"),
            F(2, "segments", "ItinerarySegment", repeated=True),
            # unset -> server default currency
            F(3, "currency_code", STRING_VALUE),
        )),
        MessageSpec("QuoteReply", (
            F(1, "fare", "Fare"),
        )),
        MessageSpec("CreateBookingRequest", (
            F(1, "passenger", "Passenger"),
            F(2, "segments", "ItinerarySegment", repeated=True),
            F(3, "currency_code", STRING_VALUE),
        )),
        MessageSpec("CreateBookingReply", (
            F(1, "booking_id", "string"),
            F(2, "fare", "Fare"),
        )),
        MessageSpec("RetrieveBookingRequest", (
            F(1, "booking_id", "string"),
        )),
        MessageSpec("RetrieveBookingReply", (
            F(1, "booking", "Booking"),
        )),
    ),
    services=(
        ServiceSpec(SERVICE, (
            MethodSpec("Quote", "QuoteRequest", "QuoteReply"),
            MethodSpec("CreateBooking", "CreateBookingRequest", "CreateBookingReply"),
            MethodSpec("RetrieveBooking", "RetrieveBookingRequest", "RetrieveBookingReply"),
        )),
    ),
)

CONTRACT = load_contract(SPEC)
DESCRIPTOR = CONTRACT.file_proto

Passenger = CONTRACT.messages["Passenger"]
ItinerarySegment = CONTRACT.messages["ItinerarySegment"]
Fare = CONTRACT.messages["Fare"]
Booking = CONTRACT.messages["Booking"]
QuoteRequest = CONTRACT.messages["QuoteRequest"]
QuoteReply = CONTRACT.messages["QuoteReply"]
CreateBookingRequest = CONTRACT.messages["CreateBookingRequest"]
CreateBookingReply = CONTRACT.messages["CreateBookingReply"]
RetrieveBookingRequest = CONTRACT.messages["RetrieveBookingRequest"]
RetrieveBookingReply = CONTRACT.messages["RetrieveBookingReply"]

SERVICE_NAME = CONTRACT.service_name(SERVICE)
