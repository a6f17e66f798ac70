"""Domain <-> booking.v1 wire mapping.

Every pair is an exact inverse for valid domain values. Instants go through
`google.protobuf.Timestamp` (never strings) and money is copied as int.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Tuple

from google.protobuf import timestamp_pb2

from domain.booking.entity import Booking, Fare, ItinerarySegment, Passenger, ensure_utc
from grpc_app.schema import booking_v1 as pb


def datetime_to_timestamp(dt: datetime) -> timestamp_pb2.Timestamp:
    ts = timestamp_pb2.Timestamp()
    ts.FromDatetime(ensure_utc(dt))
    return ts


def timestamp_to_datetime(ts: timestamp_pb2.Timestamp) -> datetime:
    return ts.ToDatetime(tzinfo=timezone.utc)


def passenger_to_proto(passenger: Passenger) -> pb.Passenger:
    return pb.Passenger(
        first_name=passenger.first_name,
        last_name=passenger.last_name,
        email=passenger.email,
    )


def passenger_from_proto(msg: pb.Passenger) -> Passenger:
    return Passenger(first_name=msg.first_name, last_name=msg.last_name, email=msg.email)


def segment_to_proto(segment: ItinerarySegment) -> pb.ItinerarySegment:
    msg = pb.ItinerarySegment(
        flight_number=segment.flight_number,
        origin_code=segment.origin_code,
        destination_code=segment.destination_code,
    )
    msg.departure_utc.CopyFrom(datetime_to_timestamp(segment.departure_utc))
    msg.arrival_utc.CopyFrom(datetime_to_timestamp(segment.arrival_utc))
    return msg


def segment_from_proto(msg: pb.ItinerarySegment) -> ItinerarySegment:
    return ItinerarySegment(
        flight_number=msg.flight_number,
        origin_code=msg.origin_code,
        destination_code=msg.destination_code,
        departure_utc=timestamp_to_datetime(msg.departure_utc),
        arrival_utc=timestamp_to_datetime(msg.arrival_utc),
    )


def segments_from_proto(msgs) -> Tuple[ItinerarySegment, ...]:
    return tuple(segment_from_proto(m) for m in msgs)


def fare_to_proto(fare: Fare) -> pb.Fare:
    return pb.Fare(
        currency_code=fare.currency_code,
        base_cents=fare.base_cents,
        taxes_cents=fare.taxes_cents,
        total_cents=fare.total_cents,
    )


def fare_from_proto(msg: pb.Fare) -> Fare:
    return Fare(
        currency_code=msg.currency_code,
        base_cents=int(msg.base_cents),
        taxes_cents=int(msg.taxes_cents),
        total_cents=int(msg.total_cents),
    )


def booking_to_proto(booking: Booking) -> pb.Booking:
    msg = pb.Booking(
        booking_id=booking.booking_id,
        passenger=passenger_to_proto(booking.passenger),
        segments=[segment_to_proto(s) for s in booking.segments],
        fare=fare_to_proto(booking.fare),
    )
    msg.created_utc.CopyFrom(datetime_to_timestamp(booking.created_utc))
    return msg


def booking_from_proto(msg: pb.Booking) -> Booking:
    return Booking(
        booking_id=msg.booking_id,
        passenger=passenger_from_proto(msg.passenger),
        segments=segments_from_proto(msg.segments),
        fare=fare_from_proto(msg.fare),
        created_utc=timestamp_to_datetime(msg.created_utc),
    )


def optional_string(msg, field: str) -> Optional[str]:
    """Read a StringValue field: None when unset, the value otherwise (even "")."""
    if not msg.HasField(field):
        return None
    return getattr(msg, field).value
