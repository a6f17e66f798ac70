"""
预订仓储接口 - 定义数据访问的抽象接口
"""
from abc import ABC, abstractmethod
from typing import Optional
from .entity import Booking


class BookingRepository(ABC):
    """预订仓储抽象接口

    Implementations must make `put` and `get` atomic with respect to each
    other. There is deliberately no update or delete.
    """

    @abstractmethod
    def put(self, booking_id: str, booking: Booking) -> None:
        """写入预订；id 已存在时抛出 BookingAlreadyExistsException"""

    @abstractmethod
    def get(self, booking_id: str) -> Optional[Booking]:
        """根据ID获取预订，不存在返回 None"""

    @abstractmethod
    def __len__(self) -> int:
        """当前保存的预订数量"""
