"""Read-only access to the financial ledger of apartments.

The ledger of an apartment is the union of its payments (money received),
its service requests (money owed, priced per village) and its utility
readings (consumption priced with the village unit prices). Every accessor
takes an optional :class:`DateWindow` and payer role so that all-time and
windowed views share one code path.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q, QuerySet
from django.db.models.functions import Coalesce, TruncDate

from ..models import (
    Booking,
    Currency,
    Payment,
    PayerRole,
    ServiceRequest,
    ServiceTypeVillagePrice,
    UtilityReading,
)
from .money import CurrencyTotals, Money
from .utility_costs import effective_utility_cost, utility_currency

logger = logging.getLogger(__name__)


class PricingGap(Exception):
    """A service request whose (service type, village) pair has no price row."""

    def __init__(
        self,
        *,
        service_type_id: int,
        village_id: int,
        service_request_id: int | None = None,
    ) -> None:
        self.service_type_id = service_type_id
        self.village_id = village_id
        self.service_request_id = service_request_id
        message = f"No price for service type {service_type_id} in village {village_id}"
        if service_request_id is not None:
            message += f" (service request {service_request_id})"
        super().__init__(message)


@dataclass(frozen=True, slots=True)
class DateWindow:
    """Inclusive date range; an open end means unbounded on that side."""

    date_from: date | None = None
    date_to: date | None = None

    def __post_init__(self) -> None:
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValidationError(
                {"date_to": "date_to must not be before date_from."},
                code="inverted_range",
            )

    @classmethod
    def for_year(cls, year: int) -> DateWindow:
        return cls(date(year, 1, 1), date(year, 12, 31))

    @classmethod
    def before_year(cls, year: int) -> DateWindow:
        return cls(None, date(year - 1, 12, 31))

    def filter(self, queryset: QuerySet, field_name: str) -> QuerySet:
        if self.date_from:
            queryset = queryset.filter(**{f"{field_name}__gte": self.date_from})
        if self.date_to:
            queryset = queryset.filter(**{f"{field_name}__lte": self.date_to})
        return queryset

    def as_dict(self) -> dict[str, str | None]:
        return {
            "date_from": self.date_from.isoformat() if self.date_from else None,
            "date_to": self.date_to.isoformat() if self.date_to else None,
        }


ALL_TIME = DateWindow()


class PriceLookup:
    """Resolves ``(service type, village) -> Money`` with a per-instance cache."""

    def __init__(self) -> None:
        self._cache: dict[tuple[int, int], Money | None] = {}

    def preload(self, pairs: Iterable[tuple[int, int]]) -> None:
        missing = {pair for pair in pairs if pair not in self._cache}
        if not missing:
            return
        type_ids = {type_id for type_id, _village_id in missing}
        village_ids = {village_id for _type_id, village_id in missing}
        rows = ServiceTypeVillagePrice.objects.filter(
            service_type_id__in=type_ids,
            village_id__in=village_ids,
        ).values_list("service_type_id", "village_id", "cost", "currency")
        for type_id, village_id, cost, currency in rows:
            self._cache[(type_id, village_id)] = Money(Decimal(cost), Currency(currency))
        for pair in missing:
            self._cache.setdefault(pair, None)

    def price(self, service_type_id: int, village_id: int) -> Money:
        key = (service_type_id, village_id)
        if key not in self._cache:
            self.preload([key])
        money = self._cache[key]
        if money is None:
            raise PricingGap(service_type_id=service_type_id, village_id=village_id)
        return money

    def price_request(self, service_request: ServiceRequest) -> Money:
        try:
            return self.price(service_request.type_id, service_request.apartment.village_id)
        except PricingGap as exc:
            raise PricingGap(
                service_type_id=exc.service_type_id,
                village_id=exc.village_id,
                service_request_id=service_request.pk,
            ) from None


def default_utility_payers() -> tuple[str, ...]:
    return tuple(getattr(settings, "PORTFOLIO_SUMMARY_UTILITY_PAYERS", (PayerRole.OWNER,)))


class LedgerEntryKind(models.TextChoices):
    PAYMENT = "payment", "Payment"
    SERVICE_REQUEST = "service_request", "Service Request"
    UTILITY_READING = "utility_reading", "Utility Reading"


_KIND_ORDER = {
    LedgerEntryKind.PAYMENT: 0,
    LedgerEntryKind.SERVICE_REQUEST: 1,
    LedgerEntryKind.UTILITY_READING: 2,
}


@dataclass(slots=True)
class LedgerEntry:
    kind: LedgerEntryKind
    object_id: int
    apartment_id: int
    apartment_name: str
    description: str
    amount: Decimal | None
    currency: Currency
    date: date
    payer_role: str
    booking_id: int | None = None
    booking_arrival: datetime | None = None
    person_id: int | None = None
    person_name: str = ""
    pricing_gap: bool = False
    in_totals: bool = True

    @property
    def id(self) -> str:
        return f"{self.kind.value}_{self.object_id}"

    def as_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "type": self.kind.label,
            "kind": self.kind.value,
            "apartment_id": self.apartment_id,
            "apartment_name": self.apartment_name,
            "description": self.description,
            "amount": self.amount,
            "currency": self.currency.value,
            "date": self.date,
            "payer_role": self.payer_role,
            "booking_id": self.booking_id,
            "booking_arrival_date": self.booking_arrival,
            "person_id": self.person_id,
            "person_name": self.person_name,
            "pricing_gap": self.pricing_gap,
            "in_totals": self.in_totals,
        }


def sort_entries(entries: list[LedgerEntry]) -> list[LedgerEntry]:
    """Newest first; same-day rows ordered by kind, then id."""
    entries.sort(key=lambda entry: (_KIND_ORDER[entry.kind], entry.object_id))
    entries.sort(key=lambda entry: entry.date, reverse=True)
    return entries


def totals_from_entries(entries: Iterable[LedgerEntry]) -> CurrencyTotals:
    totals = CurrencyTotals()
    for entry in entries:
        if entry.amount is None or not entry.in_totals:
            continue
        if entry.kind == LedgerEntryKind.PAYMENT:
            totals.total_money_spent.add(entry.currency, entry.amount)
        else:
            totals.total_money_requested.add(entry.currency, entry.amount)
    return totals


def _booking_person(booking: Booking | None) -> str:
    if booking is None:
        return ""
    return booking.occupant_name


def _person_id(row, fallback_field: str) -> int | None:
    """The user a row belongs to: its booking's occupant, else who entered it."""
    if row.booking_id is not None:
        return row.booking.user_id
    return getattr(row, fallback_field)


@dataclass
class LedgerReader:
    """Query builder over the ledger tables.

    Rows are restricted by window and payer role, and optionally to one
    booking or to the rows of one person. A row belongs to a person when its
    booking is theirs; rows without a booking belong to the user who entered
    them (``created_by`` for payments and readings, ``requester`` for
    service requests).
    """

    window: DateWindow = ALL_TIME
    payer: str | None = None
    person_id: int | None = None
    booking_id: int | None = None
    _utility_payers: tuple[str, ...] = field(default=(), init=False, repr=False)

    def __post_init__(self) -> None:
        if self.payer is not None and self.payer not in PayerRole.values:
            raise ValidationError({"user_type": f"Unsupported payer role: {self.payer!r}"})
        self._utility_payers = (self.payer,) if self.payer else default_utility_payers()

    def _restrict(self, queryset: QuerySet, apartment_ids, entered_by: str) -> QuerySet:
        if apartment_ids is not None:
            queryset = queryset.filter(apartment_id__in=apartment_ids)
        if self.booking_id is not None:
            queryset = queryset.filter(booking_id=self.booking_id)
        if self.person_id is not None:
            queryset = queryset.filter(
                Q(booking__user_id=self.person_id)
                | Q(booking__isnull=True, **{entered_by: self.person_id})
            )
        return queryset

    def payments(self, apartment_ids=None) -> QuerySet:
        queryset = self._restrict(Payment.objects.all(), apartment_ids, "created_by_id")
        if self.payer:
            queryset = queryset.filter(user_type=self.payer)
        return self.window.filter(queryset, "date")

    def service_requests(self, apartment_ids=None) -> QuerySet:
        queryset = self._restrict(ServiceRequest.objects.all(), apartment_ids, "requester_id").annotate(
            billing_day=TruncDate(Coalesce(F("date_action"), F("date_created"))),
        )
        if self.payer:
            queryset = queryset.filter(who_pays=self.payer)
        return self.window.filter(queryset, "billing_day")

    def utility_readings(self, apartment_ids=None) -> QuerySet:
        queryset = self._restrict(UtilityReading.objects.all(), apartment_ids, "created_by_id")
        if self.payer:
            queryset = queryset.filter(who_pays=self.payer)
        return self.window.filter(queryset, "end_date")

    def utility_counts(self, reading: UtilityReading) -> bool:
        return reading.who_pays in self._utility_payers

    def entries(
        self,
        apartment_ids,
        *,
        price_lookup: PriceLookup,
        include_utilities: bool = False,
    ) -> list[LedgerEntry]:
        entries: list[LedgerEntry] = []

        payments = self.payments(apartment_ids).select_related("apartment", "booking__user", "method")
        for payment in payments:
            if payment.description:
                description = payment.description
            elif payment.method:
                description = f"Payment via {payment.method.name}"
            else:
                description = f"Payment of {payment.amount} {payment.currency}"
            entries.append(
                LedgerEntry(
                    kind=LedgerEntryKind.PAYMENT,
                    object_id=payment.pk,
                    apartment_id=payment.apartment_id,
                    apartment_name=payment.apartment.name,
                    description=description,
                    amount=Decimal(payment.amount),
                    currency=Currency(payment.currency),
                    date=payment.date,
                    payer_role=payment.user_type,
                    booking_id=payment.booking_id,
                    booking_arrival=payment.booking.arrival if payment.booking else None,
                    person_id=_person_id(payment, "created_by_id"),
                    person_name=_booking_person(payment.booking),
                )
            )

        requests = list(
            self.service_requests(apartment_ids).select_related("apartment", "type", "booking__user")
        )
        price_lookup.preload((request.type_id, request.apartment.village_id) for request in requests)
        for request in requests:
            description = request.type.name
            if request.notes:
                description = f"{request.type.name} - {request.notes}"
            try:
                money = price_lookup.price_request(request)
            except PricingGap as exc:
                logger.warning("Service request listed without price: %s", exc)
                amount, currency, gap = None, Currency.EGP, True
            else:
                amount, currency, gap = money.amount, money.currency, False
            entries.append(
                LedgerEntry(
                    kind=LedgerEntryKind.SERVICE_REQUEST,
                    object_id=request.pk,
                    apartment_id=request.apartment_id,
                    apartment_name=request.apartment.name,
                    description=description,
                    amount=amount,
                    currency=currency,
                    date=request.billing_day,
                    payer_role=request.who_pays,
                    booking_id=request.booking_id,
                    booking_arrival=request.booking.arrival if request.booking else None,
                    person_id=_person_id(request, "requester_id"),
                    person_name=_booking_person(request.booking),
                    pricing_gap=gap,
                )
            )

        readings = self.utility_readings(apartment_ids).select_related("apartment__village", "booking__user")
        currency = utility_currency()
        for reading in readings:
            cost = effective_utility_cost(reading, reading.apartment.village)
            parts = []
            if cost.water_usage > 0:
                parts.append(f"Water {cost.water_usage:.2f} units")
            if cost.electricity_usage > 0:
                parts.append(f"Electricity {cost.electricity_usage:.2f} units")
            parts.append(reading.who_pays)
            entries.append(
                LedgerEntry(
                    kind=LedgerEntryKind.UTILITY_READING,
                    object_id=reading.pk,
                    apartment_id=reading.apartment_id,
                    apartment_name=reading.apartment.name,
                    description=f"Utility: {', '.join(parts)}",
                    amount=cost.total,
                    currency=currency,
                    date=reading.end_date,
                    payer_role=reading.who_pays,
                    booking_id=reading.booking_id,
                    booking_arrival=reading.booking.arrival if reading.booking else None,
                    person_id=_person_id(reading, "created_by_id"),
                    person_name=_booking_person(reading.booking),
                    in_totals=include_utilities and self.utility_counts(reading),
                )
            )

        return sort_entries(entries)
