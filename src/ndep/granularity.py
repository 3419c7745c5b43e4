"""
Period granularities of the station records.

Each granularity knows the unit its precipitation depth is reported in and the
linear factor that turns ``kg/m3 * precipitation`` into ``kg/ha``:

- weekly:  kg/m3 * (P[mm] * 1e-3 m) * 1e4 m2/ha = P * 10
- monthly: kg/m3 * (P[cm] * 1e-2 m) * 1e4 m2/ha = P * 100
- annual:  same as monthly (precipitation in cm)
"""
from __future__ import annotations
from enum import Enum


class Granularity(Enum):
    WEEKLY = ("weekly", "mm", 10.0, ("year", "month"), 52)
    MONTHLY = ("monthly", "cm", 100.0, ("year", "month"), 12)
    ANNUAL = ("annual", "cm", 100.0, ("year",), 1)

    def __init__(self, label: str, precip_unit: str, period_factor: float,
                 calendar_keys: tuple, expected_periods_per_year: int):
        self.label = label
        self.precip_unit = precip_unit
        self.period_factor = period_factor
        self.calendar_keys = calendar_keys
        self.expected_periods_per_year = expected_periods_per_year

    @classmethod
    def parse(cls, value: "str | Granularity") -> "Granularity":
        """Accept a Granularity or its name ("weekly", "MONTHLY", ...)."""
        if isinstance(value, cls):
            return value
        name = str(value).strip().lower()
        for member in cls:
            if member.label == name:
                return member
        raise ValueError(
            f"Unknown granularity: {value!r}. Must be one of {[m.label for m in cls]}"
        )

    def __str__(self) -> str:
        return self.label
