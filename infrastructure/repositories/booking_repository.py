"""In-memory implementation of BookingRepository.

Single-process only. A plain threading.Lock guards the map so the store is
safe whether the hosting server runs handlers as asyncio tasks or on a
thread pool; no operation holds the lock across an await.
"""
from __future__ import annotations

import threading
from typing import Dict, Optional

from core.logging_config import get_logger
from domain.booking.entity import Booking
from domain.booking.repository import BookingRepository
from domain.common.exceptions import BookingAlreadyExistsException


logger = get_logger(__name__)


class InMemoryBookingRepository(BookingRepository):
    def __init__(self) -> None:
        self._bookings: Dict[str, Booking] = {}
        self._lock = threading.Lock()

    def put(self, booking_id: str, booking: Booking) -> None:
        with self._lock:
            if booking_id in self._bookings:
                logger.warning("booking_store_duplicate_key", booking_id=booking_id)
                raise BookingAlreadyExistsException(booking_id)
            self._bookings[booking_id] = booking

    def get(self, booking_id: str) -> Optional[Booking]:
        with self._lock:
            return self._bookings.get(booking_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._bookings)
