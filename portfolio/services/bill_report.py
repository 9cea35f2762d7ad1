from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace

from django.core.exceptions import PermissionDenied
from django.db.models import Q, QuerySet

from ..models import Apartment, Booking, PayerRole, User, Village
from .access_scope import AccessScope, ScopeKind
from .financial_summary import ApartmentFinancialSummarizer, FinancialSummary
from .ledger import (
    ALL_TIME,
    DateWindow,
    LedgerEntry,
    LedgerReader,
    PriceLookup,
    totals_from_entries,
)
from .money import CurrencyTotals

logger = logging.getLogger(__name__)


class ReportCancelled(RuntimeError):
    """The caller went away before the report was complete."""


@dataclass(frozen=True, slots=True)
class BillFilters:
    window: DateWindow
    village_id: int | None = None
    user_type: str | None = None
    phase: int | None = None
    search: str = ""
    include_utilities: bool = False


@dataclass(slots=True)
class ApartmentSummaryRow:
    apartment_id: int
    apartment_name: str
    village_id: int
    village_name: str
    owner_id: int
    owner_name: str
    phase: int
    summary: FinancialSummary

    def as_dict(self) -> dict[str, object]:
        return {
            "apartment_id": self.apartment_id,
            "apartment_name": self.apartment_name,
            "village_id": self.village_id,
            "village_name": self.village_name,
            "owner_id": self.owner_id,
            "owner_name": self.owner_name,
            "phase": self.phase,
            **self.summary.totals.as_dict(),
            "pricing_gaps": list(self.summary.pricing_gaps),
        }


@dataclass(slots=True)
class BillReport:
    window: DateWindow
    summary: list[ApartmentSummaryRow] = field(default_factory=list)
    totals: CurrencyTotals = field(default_factory=CurrencyTotals)

    @property
    def pricing_gaps(self) -> list[int]:
        return [gap for row in self.summary for gap in row.summary.pricing_gaps]

    def as_dict(self) -> dict[str, object]:
        return {
            "window": self.window.as_dict(),
            "summary": [row.as_dict() for row in self.summary],
            "totals": self.totals.as_dict(),
            "pricing_gaps": self.pricing_gaps,
        }


@dataclass(slots=True)
class BillStatement:
    subject: dict[str, object]
    bills: list[LedgerEntry]
    totals: CurrencyTotals

    @property
    def pricing_gaps(self) -> list[int]:
        return [entry.object_id for entry in self.bills if entry.pricing_gap]

    def as_dict(self, subject_key: str) -> dict[str, object]:
        return {
            subject_key: self.subject,
            "bills": [entry.as_dict() for entry in self.bills],
            "totals": self.totals.as_dict(),
            "pricing_gaps": self.pricing_gaps,
        }


@dataclass(slots=True)
class RenterSummaryRow:
    user_id: int | None
    name: str
    booking_ids: list[int] = field(default_factory=list)
    totals: CurrencyTotals = field(default_factory=CurrencyTotals)

    def as_dict(self) -> dict[str, object]:
        return {
            "user_id": self.user_id,
            "name": self.name,
            "booking_ids": list(self.booking_ids),
            **self.totals.as_dict(),
        }


@dataclass(slots=True)
class RenterSummary:
    apartment: dict[str, object]
    window: DateWindow
    renters: list[RenterSummaryRow] = field(default_factory=list)
    totals: CurrencyTotals = field(default_factory=CurrencyTotals)
    pricing_gaps: list[int] = field(default_factory=list)

    def as_dict(self) -> dict[str, object]:
        return {
            "apartment": self.apartment,
            "window": self.window.as_dict(),
            "renters": [row.as_dict() for row in self.renters],
            "totals": self.totals.as_dict(),
            "pricing_gaps": list(self.pricing_gaps),
        }


class PortfolioBillReporter:
    """Per-apartment and portfolio-wide bill totals for one access scope."""

    def __init__(
        self,
        *,
        scope: AccessScope,
        cancel_check: Callable[[], bool] | None = None,
    ) -> None:
        self.scope = scope
        self.cancel_check = cancel_check
        self.price_lookup = PriceLookup()

    def _apartments(self, filters: BillFilters) -> QuerySet:
        queryset = self.scope.apartments(Apartment.objects.select_related("village", "owner"))
        if filters.village_id is not None:
            self.scope.check_village(filters.village_id)
            if not Village.objects.filter(pk=filters.village_id).exists():
                raise Village.DoesNotExist(f"Village {filters.village_id} does not exist.")
            queryset = queryset.filter(village_id=filters.village_id)
        if filters.phase is not None:
            queryset = queryset.filter(phase=filters.phase)
        search = (filters.search or "").strip()
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search)
                | Q(owner__name__icontains=search)
                | Q(owner__username__icontains=search)
                | Q(village__name__icontains=search)
            )
        return queryset.order_by("village__name", "name", "id")

    def _check_cancelled(self) -> None:
        if self.cancel_check is not None and self.cancel_check():
            raise ReportCancelled("Bill report cancelled before completion.")

    @staticmethod
    def _apartment_subject(apartment: Apartment) -> dict[str, object]:
        return {
            "id": apartment.pk,
            "name": apartment.name,
            "village_name": apartment.village.name,
            "owner_name": apartment.owner.display_name,
            "phase": apartment.phase,
        }

    def _summarizer(self, filters: BillFilters) -> ApartmentFinancialSummarizer:
        return ApartmentFinancialSummarizer(
            window=filters.window,
            payer=filters.user_type,
            include_utilities=filters.include_utilities,
            price_lookup=self.price_lookup,
        )

    def report(self, filters: BillFilters) -> BillReport:
        apartments = list(self._apartments(filters))
        summarizer = self._summarizer(filters)
        report = BillReport(window=filters.window)

        for apartment in apartments:
            self._check_cancelled()
            summary = summarizer.summarize_many([apartment.pk])[apartment.pk]
            report.summary.append(
                ApartmentSummaryRow(
                    apartment_id=apartment.pk,
                    apartment_name=apartment.name,
                    village_id=apartment.village_id,
                    village_name=apartment.village.name,
                    owner_id=apartment.owner_id,
                    owner_name=apartment.owner.display_name,
                    phase=apartment.phase,
                    summary=summary,
                )
            )
            report.totals.accumulate(summary.totals)

        if report.pricing_gaps:
            logger.warning(
                "Bill report excluded %d unpriced service request(s): %s",
                len(report.pricing_gaps),
                report.pricing_gaps,
            )
        return report

    def previous_years_total(
        self,
        before_year: int,
        filters: BillFilters | None = None,
    ) -> CurrencyTotals:
        """Totals of everything dated strictly before ``before_year``-01-01."""
        window = DateWindow.before_year(int(before_year))
        filters = replace(filters, window=window) if filters else BillFilters(window=window)
        apartment_ids = list(self._apartments(filters).values_list("pk", flat=True))
        totals = CurrencyTotals()
        summaries = self._summarizer(filters).summarize_many(apartment_ids)
        for summary in summaries.values():
            totals.accumulate(summary.totals)
        return totals

    def apartment_detail(self, apartment_id: int, filters: BillFilters) -> BillStatement:
        apartment = Apartment.objects.select_related("village", "owner").get(pk=apartment_id)
        self.scope.check_apartment(apartment)
        reader = LedgerReader(window=filters.window, payer=filters.user_type)
        bills = reader.entries(
            [apartment.pk],
            price_lookup=self.price_lookup,
            include_utilities=filters.include_utilities,
        )
        return BillStatement(
            subject=self._apartment_subject(apartment),
            bills=bills,
            totals=totals_from_entries(bills),
        )

    def user_detail(self, user_id: int, filters: BillFilters, *, actor: User) -> BillStatement:
        target = User.objects.get(pk=user_id)
        if not (actor.role in (User.Role.SUPER_ADMIN, User.Role.ADMIN) or actor.is_superuser):
            if actor.pk != target.pk:
                raise PermissionDenied("You can only access your own bills.")

        if target.role == User.Role.RENTER:
            apartments = Apartment.objects.filter(bookings__user=target).distinct()
            reader = LedgerReader(window=filters.window, payer=PayerRole.RENTER, person_id=target.pk)
        else:
            apartments = Apartment.objects.filter(owner=target)
            reader = LedgerReader(window=filters.window, payer=filters.user_type)
        apartment_ids = list(self.scope.apartments(apartments).values_list("pk", flat=True))

        bills = reader.entries(
            apartment_ids,
            price_lookup=self.price_lookup,
            include_utilities=filters.include_utilities,
        )
        for entry in bills:
            if not entry.person_name:
                entry.person_name = target.display_name
        return BillStatement(
            subject={
                "id": target.pk,
                "name": target.display_name,
                "email": target.email,
                "role": target.role,
            },
            bills=bills,
            totals=totals_from_entries(bills),
        )

    def booking_detail(self, booking_id: int, filters: BillFilters | None = None) -> BillStatement:
        """Statement of the rows tied to one booking; all time unless ``filters`` says otherwise."""
        booking = Booking.objects.select_related("apartment__village", "apartment__owner", "user").get(
            pk=booking_id
        )
        self.scope.check_booking(booking)
        filters = filters or BillFilters(window=ALL_TIME)

        reader = LedgerReader(window=filters.window, payer=filters.user_type, booking_id=booking.pk)
        bills = reader.entries(
            [booking.apartment_id],
            price_lookup=self.price_lookup,
            include_utilities=filters.include_utilities,
        )
        return BillStatement(
            subject={
                "id": booking.pk,
                "apartment_id": booking.apartment_id,
                "apartment_name": booking.apartment.name,
                "village_name": booking.apartment.village.name,
                "user_id": booking.user_id,
                "person_name": booking.occupant_name,
                "user_type": booking.user_type,
                "arrival": booking.arrival,
                "leaving": booking.leaving,
                "status": booking.status,
            },
            bills=bills,
            totals=totals_from_entries(bills),
        )

    def renter_summary(self, apartment_id: int, filters: BillFilters | None = None) -> RenterSummary:
        """Per-renter totals of the renter-paid rows of one apartment.

        Renter-paid utility readings always count as requested money. Owners
        and admins see every renter; a renter only sees their own row.
        """
        apartment = Apartment.objects.select_related("village", "owner").get(pk=apartment_id)
        self.scope.check_apartment(apartment)
        filters = filters or BillFilters(window=ALL_TIME)

        person_id = None
        if self.scope.kind is ScopeKind.OWN_RECORDS_ONLY and apartment.owner_id != self.scope.user_id:
            person_id = self.scope.user_id
        reader = LedgerReader(window=filters.window, payer=PayerRole.RENTER, person_id=person_id)
        entries = reader.entries([apartment.pk], price_lookup=self.price_lookup, include_utilities=True)

        rows: dict[int | None, RenterSummaryRow] = {}
        for entry in entries:
            row = rows.get(entry.person_id)
            if row is None:
                row = rows[entry.person_id] = RenterSummaryRow(user_id=entry.person_id, name="")
            if entry.booking_id is not None and entry.booking_id not in row.booking_ids:
                row.booking_ids.append(entry.booking_id)
            row.totals.accumulate(totals_from_entries([entry]))

        names = {
            user.pk: user.display_name
            for user in User.objects.filter(pk__in=[pk for pk in rows if pk is not None])
        }
        summary = RenterSummary(
            apartment=self._apartment_subject(apartment),
            window=filters.window,
            pricing_gaps=[entry.object_id for entry in entries if entry.pricing_gap],
        )
        for row in rows.values():
            row.name = names.get(row.user_id, "")
            row.booking_ids.sort()
            summary.totals.accumulate(row.totals)
        summary.renters = sorted(
            rows.values(),
            key=lambda row: (row.user_id is None, row.name.lower(), row.user_id or 0),
        )
        return summary
