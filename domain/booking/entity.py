"""
预订领域实体 - 与线上传输格式无关的业务值对象

All entities are frozen: a Booking keeps its own copies of the passenger,
segments and fare it was created from.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Tuple

from domain.common.exceptions import DomainValidationException


MAX_SEGMENTS = 6


def ensure_utc(dt: datetime) -> datetime:
    """确保时间为 UTC 时区（naive 视为 UTC）"""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _require_text(value: str, field: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise DomainValidationException(f"{field} must not be blank", field=field)


@dataclass(frozen=True)
class Passenger:
    first_name: str
    last_name: str
    email: str

    def __post_init__(self) -> None:
        _require_text(self.first_name, "passenger.first_name")
        _require_text(self.last_name, "passenger.last_name")
        _require_text(self.email, "passenger.email")


@dataclass(frozen=True)
class ItinerarySegment:
    flight_number: str
    origin_code: str
    destination_code: str
    departure_utc: datetime
    arrival_utc: datetime

    def __post_init__(self) -> None:
        # frozen: normalize through object.__setattr__
        object.__setattr__(self, "departure_utc", ensure_utc(self.departure_utc))
        object.__setattr__(self, "arrival_utc", ensure_utc(self.arrival_utc))


@dataclass(frozen=True)
class Fare:
    """
    票价快照，金额一律为最小货币单位的整数。

    业务规则：
    1. 三项金额均为非负整数（不允许 float）
    2. total_cents == base_cents + taxes_cents
    3. 货币代码为 3 位大写字母
    """

    currency_code: str
    base_cents: int
    taxes_cents: int
    total_cents: int

    def __post_init__(self) -> None:
        code = self.currency_code
        if len(code) != 3 or not (code.isascii() and code.isalpha() and code.isupper()):
            raise DomainValidationException(
                f"Invalid currency code: {self.currency_code!r}", field="fare.currency_code"
            )
        for name in ("base_cents", "taxes_cents", "total_cents"):
            value = getattr(self, name)
            # bool is an int subclass, but never a money amount
            if not isinstance(value, int) or isinstance(value, bool):
                raise DomainValidationException(f"{name} must be an integer", field=f"fare.{name}")
            if value < 0:
                raise DomainValidationException(f"{name} must not be negative", field=f"fare.{name}")
        if self.total_cents != self.base_cents + self.taxes_cents:
            raise DomainValidationException(
                "total_cents must equal base_cents + taxes_cents",
                field="fare.total_cents",
                details={
                    "base_cents": self.base_cents,
                    "taxes_cents": self.taxes_cents,
                    "total_cents": self.total_cents,
                },
            )


@dataclass(frozen=True)
class Booking:
    """预订聚合根 - 创建后不可变"""

    booking_id: str
    passenger: Passenger
    segments: Tuple[ItinerarySegment, ...]
    fare: Fare
    created_utc: datetime

    def __post_init__(self) -> None:
        _require_text(self.booking_id, "booking_id")
        segments = tuple(self.segments)
        if not 1 <= len(segments) <= MAX_SEGMENTS:
            raise DomainValidationException(
                f"A booking holds between 1 and {MAX_SEGMENTS} segments, got {len(segments)}",
                field="segments",
            )
        object.__setattr__(self, "segments", segments)
        object.__setattr__(self, "created_utc", ensure_utc(self.created_utc))
