"""
预订领域服务 - 票价计算（占位公式）
"""
from __future__ import annotations

from dataclasses import dataclass

from .entity import Fare


@dataclass(frozen=True)
class FarePolicy:
    """Placeholder pricing: a flat base per segment plus a percentage tax.

    base  = base_cents_per_segment * segment_count
    taxes = round(base * tax_rate_percent / 100), half-up, integer only
    total = base + taxes
    """

    base_cents_per_segment: int = 15000
    tax_rate_percent: int = 20

    def taxes_for(self, base_cents: int) -> int:
        return (base_cents * self.tax_rate_percent + 50) // 100

    def price(self, segment_count: int, currency_code: str) -> Fare:
        base = self.base_cents_per_segment * segment_count
        taxes = self.taxes_for(base)
        return Fare(
            currency_code=currency_code,
            base_cents=base,
            taxes_cents=taxes,
            total_cents=base + taxes,
        )
