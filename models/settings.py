# models/settings.py
"""
Commission rate table - percentage paid per upline level.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional, Tuple

from core.utils import check_fields, format_decimal, to_decimal


@dataclass(frozen=True)
class CommissionRateTable:
    """
    Ordered rates for levels 1..N, in percent.
    len(rates) is the maximum upline depth that earns commission.
    """
    rates: Tuple[Decimal, ...]

    FIELDS = ("commissionRates",)

    @classmethod
    def from_values(cls, values: Iterable[Any]) -> "CommissionRateTable":
        """
        Coerce raw values to a rate table.

        Raises:
            TypeError: If a value is not numeric
            ValueError: If a value is negative or not finite
        """
        if isinstance(values, (str, bytes)):
            raise TypeError("Rates must be a sequence of numbers, not a string")

        rates = []
        for level, value in enumerate(values, start=1):
            rate = to_decimal(value)
            if rate < 0:
                raise ValueError(f"Rate for level {level} is negative: {rate}")
            rates.append(rate)
        return cls(rates=tuple(rates))

    @property
    def levelCount(self) -> int:
        return len(self.rates)

    @property
    def total(self) -> Decimal:
        return sum(self.rates, Decimal("0"))

    def rate_for(self, level: int) -> Optional[Decimal]:
        """Rate for a 1-based level, None past the end of the table."""
        if 1 <= level <= len(self.rates):
            return self.rates[level - 1]
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {"commissionRates": [format_decimal(r) for r in self.rates]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CommissionRateTable":
        check_fields("Settings", data, cls.FIELDS)
        if not isinstance(data["commissionRates"], list):
            raise ValueError("Settings.commissionRates must be a list")
        return cls.from_values(data["commissionRates"])

    def __iter__(self):
        return iter(self.rates)

    def __len__(self):
        return len(self.rates)
