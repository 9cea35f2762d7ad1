from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings

from ..models import Currency, UtilityReading, Village
from .money import ZERO, quantize_cent

logger = logging.getLogger(__name__)

DEFAULT_MAX_METER_VALUE = Decimal("999999")


def max_meter_value() -> Decimal:
    return Decimal(str(getattr(settings, "PORTFOLIO_METER_MAX_VALUE", DEFAULT_MAX_METER_VALUE)))


def utility_currency() -> Currency:
    return Currency(getattr(settings, "PORTFOLIO_UTILITY_CURRENCY", Currency.EGP))


def meter_usage(
    start: Decimal | None,
    end: Decimal | None,
    *,
    max_value: Decimal | None = None,
) -> Decimal:
    """Consumption between two meter readings.

    A missing reading means no consumption. An end reading below the start
    reading is treated as a meter that rolled over at ``max_value``.
    """
    if start is None or end is None:
        return ZERO
    start = Decimal(start)
    end = Decimal(end)
    if end >= start:
        return end - start
    if max_value is None:
        max_value = max_meter_value()
    return (max_value - start) + end


@dataclass(frozen=True, slots=True)
class UtilityCost:
    water_usage: Decimal
    electricity_usage: Decimal
    water_cost: Decimal
    electricity_cost: Decimal

    @property
    def total(self) -> Decimal:
        return self.water_cost + self.electricity_cost


def compute_utility_cost(reading: UtilityReading, village: Village) -> UtilityCost:
    water_usage = meter_usage(reading.water_start_reading, reading.water_end_reading)
    electricity_usage = meter_usage(
        reading.electricity_start_reading, reading.electricity_end_reading
    )
    return UtilityCost(
        water_usage=water_usage,
        electricity_usage=electricity_usage,
        water_cost=quantize_cent(water_usage * (village.water_price or ZERO)),
        electricity_cost=quantize_cent(electricity_usage * (village.electricity_price or ZERO)),
    )


def effective_utility_cost(reading: UtilityReading, village: Village) -> UtilityCost:
    """Cost used for reporting: cached columns win, computed only if the cache is empty."""
    computed = compute_utility_cost(reading, village)
    if reading.water_cost is None and reading.electricity_cost is None:
        return computed
    return UtilityCost(
        water_usage=computed.water_usage,
        electricity_usage=computed.electricity_usage,
        water_cost=quantize_cent(reading.water_cost),
        electricity_cost=quantize_cent(reading.electricity_cost),
    )


def fill_cost_cache(reading: UtilityReading) -> bool:
    """Populate the cached cost columns of a reading that has none yet."""
    if reading.water_cost is not None or reading.electricity_cost is not None:
        return False
    if reading.apartment_id is None:
        return False
    village = reading.apartment.village
    cost = compute_utility_cost(reading, village)
    reading.water_cost = cost.water_cost
    reading.electricity_cost = cost.electricity_cost
    return True


@dataclass(frozen=True, slots=True)
class UtilityCostMismatch:
    reading_id: int
    apartment_id: int
    cached_water_cost: Decimal | None
    cached_electricity_cost: Decimal | None
    expected_water_cost: Decimal
    expected_electricity_cost: Decimal


def find_cost_mismatches(*, apartment_id: int | None = None) -> list[UtilityCostMismatch]:
    readings = UtilityReading.objects.select_related("apartment__village").order_by("id")
    if apartment_id is not None:
        readings = readings.filter(apartment_id=apartment_id)

    mismatches: list[UtilityCostMismatch] = []
    for reading in readings:
        if reading.water_cost is None and reading.electricity_cost is None:
            continue
        expected = compute_utility_cost(reading, reading.apartment.village)
        cached_water = quantize_cent(reading.water_cost)
        cached_electricity = quantize_cent(reading.electricity_cost)
        if cached_water == expected.water_cost and cached_electricity == expected.electricity_cost:
            continue
        logger.warning(
            "Cached utility cost diverges for reading %s (apartment %s): "
            "water %s != %s, electricity %s != %s",
            reading.pk,
            reading.apartment_id,
            reading.water_cost,
            expected.water_cost,
            reading.electricity_cost,
            expected.electricity_cost,
        )
        mismatches.append(
            UtilityCostMismatch(
                reading_id=reading.pk,
                apartment_id=reading.apartment_id,
                cached_water_cost=reading.water_cost,
                cached_electricity_cost=reading.electricity_cost,
                expected_water_cost=expected.water_cost,
                expected_electricity_cost=expected.electricity_cost,
            )
        )
    return mismatches
