from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from django.db.models import Sum

from ..models import Apartment
from .ledger import ALL_TIME, DateWindow, LedgerReader, PriceLookup, PricingGap
from .money import CurrencyMap, CurrencyTotals, quantize_cent
from .utility_costs import effective_utility_cost, utility_currency

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class FinancialSummary:
    apartment_id: int
    totals: CurrencyTotals = field(default_factory=CurrencyTotals)
    pricing_gaps: list[int] = field(default_factory=list)
    utility_cost_included: bool = False

    @property
    def total_money_spent(self) -> CurrencyMap:
        return self.totals.total_money_spent

    @property
    def total_money_requested(self) -> CurrencyMap:
        return self.totals.total_money_requested

    @property
    def net_money(self) -> CurrencyMap:
        return self.totals.net_money

    def as_dict(self) -> dict[str, object]:
        return {
            "apartment_id": self.apartment_id,
            **self.totals.as_dict(),
            "pricing_gaps": list(self.pricing_gaps),
            "utility_cost_included": self.utility_cost_included,
        }


class ApartmentFinancialSummarizer:
    """Money spent, requested and net balance per apartment and currency.

    Without a window the summary covers the whole ledger. Every call reads
    the current ledger state; the underlying queries are not wrapped in a
    transaction, so a concurrent write may or may not be reflected.

    Service requests without a village price are excluded from the totals,
    logged and reported in ``pricing_gaps``.
    """

    def __init__(
        self,
        *,
        window: DateWindow = ALL_TIME,
        payer: str | None = None,
        include_utilities: bool = False,
        price_lookup: PriceLookup | None = None,
    ) -> None:
        self.reader = LedgerReader(window=window, payer=payer)
        self.include_utilities = include_utilities
        self.price_lookup = price_lookup or PriceLookup()

    def summarize(self, apartment_id: int) -> FinancialSummary:
        if not Apartment.objects.filter(pk=apartment_id).exists():
            raise Apartment.DoesNotExist(f"Apartment {apartment_id} does not exist.")
        return self.summarize_many([apartment_id])[int(apartment_id)]

    def summarize_many(self, apartment_ids: Iterable[int]) -> dict[int, FinancialSummary]:
        ids = [int(apartment_id) for apartment_id in apartment_ids]
        summaries = {
            apartment_id: FinancialSummary(
                apartment_id=apartment_id,
                utility_cost_included=self.include_utilities,
            )
            for apartment_id in ids
        }
        if not ids:
            return summaries

        self._add_payments(summaries, ids)
        self._add_service_requests(summaries, ids)
        if self.include_utilities:
            self._add_utilities(summaries, ids)
        return summaries

    def _add_payments(self, summaries: dict[int, FinancialSummary], ids: list[int]) -> None:
        rows = (
            self.reader.payments(ids)
            .order_by()
            .values("apartment_id", "currency")
            .annotate(total=Sum("amount"))
        )
        for row in rows:
            summaries[row["apartment_id"]].total_money_spent.add(
                row["currency"], quantize_cent(row["total"])
            )

    def _add_service_requests(self, summaries: dict[int, FinancialSummary], ids: list[int]) -> None:
        rows = list(
            self.reader.service_requests(ids)
            .order_by("id")
            .values_list("id", "apartment_id", "type_id", "apartment__village_id")
        )
        self.price_lookup.preload((type_id, village_id) for _id, _apt, type_id, village_id in rows)
        for request_id, apartment_id, type_id, village_id in rows:
            summary = summaries[apartment_id]
            try:
                money = self.price_lookup.price(type_id, village_id)
            except PricingGap as exc:
                logger.warning(
                    "Service request %s of apartment %s excluded from totals: %s",
                    request_id,
                    apartment_id,
                    exc,
                )
                summary.pricing_gaps.append(request_id)
                continue
            summary.total_money_requested.add_money(money)

    def _add_utilities(self, summaries: dict[int, FinancialSummary], ids: list[int]) -> None:
        currency = utility_currency()
        readings = self.reader.utility_readings(ids).select_related("apartment__village")
        for reading in readings:
            if not self.reader.utility_counts(reading):
                continue
            cost = effective_utility_cost(reading, reading.apartment.village)
            summaries[reading.apartment_id].total_money_requested.add(currency, cost.total)


def summarize(apartment_id: int, *, include_utilities: bool = False) -> FinancialSummary:
    return ApartmentFinancialSummarizer(include_utilities=include_utilities).summarize(apartment_id)
