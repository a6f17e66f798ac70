"""
预订应用服务（application/services）- 编排计价、ID 生成、时钟与仓储
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence

from core.config import settings
from core.logging_config import get_logger
from domain.booking.entity import Booking, Fare, ItinerarySegment, Passenger
from domain.booking.repository import BookingRepository
from domain.booking.service import FarePolicy
from domain.common.exceptions import BookingNotFoundException


logger = get_logger(__name__)


def _new_booking_id() -> str:
    return str(uuid.uuid4())


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def default_fare_policy() -> FarePolicy:
    return FarePolicy(
        base_cents_per_segment=settings.booking.base_fare_cents_per_segment,
        tax_rate_percent=settings.booking.tax_rate_percent,
    )


class BookingApplicationService:
    """预订应用服务 - 处理应用层逻辑

    Inputs arrive already validated and mapped to domain values. The store,
    pricing, id factory and clock are injected so each test can own them.
    """

    def __init__(
        self,
        repository: BookingRepository,
        *,
        fare_policy: Optional[FarePolicy] = None,
        id_factory: Callable[[], str] = _new_booking_id,
        clock: Callable[[], datetime] = _utc_now,
        default_currency: Optional[str] = None,
    ) -> None:
        self._repository = repository
        self._fare_policy = fare_policy or default_fare_policy()
        self._id_factory = id_factory
        self._clock = clock
        self._default_currency = default_currency or settings.booking.default_currency

    @property
    def default_currency(self) -> str:
        return self._default_currency

    async def quote(
        self,
        passenger: Passenger,
        segments: Sequence[ItinerarySegment],
        currency_code: Optional[str] = None,
    ) -> Fare:
        """报价：只计算票价，不访问仓储"""
        fare = self._fare_policy.price(len(segments), currency_code or self._default_currency)
        logger.debug("fare_quoted", segments=len(segments), total_cents=fare.total_cents)
        return fare

    async def create_booking(
        self,
        passenger: Passenger,
        segments: Sequence[ItinerarySegment],
        currency_code: Optional[str] = None,
    ) -> Booking:
        """创建预订：先构造完整的 Booking，再一次性写入仓储"""
        fare = self._fare_policy.price(len(segments), currency_code or self._default_currency)
        booking = Booking(
            booking_id=self._id_factory(),
            passenger=passenger,
            segments=tuple(segments),
            fare=fare,
            created_utc=self._clock(),
        )
        self._repository.put(booking.booking_id, booking)
        logger.info(
            "booking_created",
            booking_id=booking.booking_id,
            segments=len(booking.segments),
            total_cents=fare.total_cents,
            currency=fare.currency_code,
        )
        return booking

    async def get_booking(self, booking_id: str) -> Booking:
        """获取预订信息"""
        booking = self._repository.get(booking_id)
        if booking is None:
            raise BookingNotFoundException(booking_id)
        return booking
