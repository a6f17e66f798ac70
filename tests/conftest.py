"""Pytest bootstrap configuration.

Pin the settings that shape fares and logging before application modules
are imported, and provide per-test stores, services and request builders.
"""
import os
from datetime import datetime, timedelta, timezone

import pytest

os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("BOOKING__DEFAULT_CURRENCY", "CAD")
os.environ.setdefault("BOOKING__BASE_FARE_CENTS_PER_SEGMENT", "15000")
os.environ.setdefault("BOOKING__TAX_RATE_PERCENT", "20")

from application.services.booking_service import BookingApplicationService  # noqa: E402
from domain.booking.entity import ItinerarySegment, Passenger  # noqa: E402
from grpc_app.handlers.booking import BookingHandler  # noqa: E402
from grpc_app.mappers.booking import datetime_to_timestamp  # noqa: E402
from grpc_app.schema import booking_v1 as pb  # noqa: E402
from infrastructure.repositories.booking_repository import InMemoryBookingRepository  # noqa: E402


DEPARTURE = datetime(2026, 5, 1, 13, 30, tzinfo=timezone.utc)
ARRIVAL = DEPARTURE + timedelta(hours=1, minutes=25)


@pytest.fixture
def departure() -> datetime:
    return DEPARTURE


@pytest.fixture
def passenger() -> Passenger:
    return Passenger(first_name="A", last_name="B", email="x@y.com")


@pytest.fixture
def segment() -> ItinerarySegment:
    return ItinerarySegment(
        flight_number="AC101",
        origin_code="YUL",
        destination_code="YYZ",
        departure_utc=DEPARTURE,
        arrival_utc=ARRIVAL,
    )


@pytest.fixture
def repository() -> InMemoryBookingRepository:
    return InMemoryBookingRepository()


@pytest.fixture
def booking_service(repository) -> BookingApplicationService:
    return BookingApplicationService(repository)


@pytest.fixture
def handler(booking_service) -> BookingHandler:
    return BookingHandler(booking_service)


@pytest.fixture
def make_segment_msg():
    def _make(
        flight_number="AC101",
        origin_code="YUL",
        destination_code="YYZ",
        departure=DEPARTURE,
        arrival=ARRIVAL,
    ):
        msg = pb.ItinerarySegment(
            flight_number=flight_number,
            origin_code=origin_code,
            destination_code=destination_code,
        )
        if departure is not None:
            msg.departure_utc.CopyFrom(datetime_to_timestamp(departure))
        if arrival is not None:
            msg.arrival_utc.CopyFrom(datetime_to_timestamp(arrival))
        return msg

    return _make


@pytest.fixture
def make_request(make_segment_msg):
    """Build a QuoteRequest / CreateBookingRequest for the scenario passenger."""

    def _make(
        request_type=pb.QuoteRequest,
        *,
        segments=1,
        passenger=("A", "B", "x@y.com"),
        currency=None,
    ):
        req = request_type()
        if passenger is not None:
            first, last, email = passenger
            req.passenger.CopyFrom(pb.Passenger(first_name=first, last_name=last, email=email))
        if isinstance(segments, int):
            segments = [make_segment_msg() for _ in range(segments)]
        req.segments.extend(segments)
        if currency is not None:
            req.currency_code.SetInParent()
            req.currency_code.value = currency
        return req

    return _make
