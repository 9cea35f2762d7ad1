from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP

from ..models import Currency

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def quantize_cent(value: Decimal | str | int | None) -> Decimal:
    return Decimal(value or ZERO).quantize(CENT, rounding=ROUND_HALF_UP)


def parse_currency(value: str | Currency) -> Currency:
    try:
        return Currency(value)
    except ValueError:
        raise ValueError(f"Unsupported currency: {value!r}") from None


@dataclass(frozen=True, slots=True)
class Money:
    amount: Decimal
    currency: Currency


@dataclass(slots=True)
class CurrencyMap:
    """Fixed-shape money record, one slot per supported currency."""

    EGP: Decimal = ZERO
    GBP: Decimal = ZERO

    def get(self, currency: str | Currency) -> Decimal:
        return getattr(self, parse_currency(currency).value)

    def add(self, currency: str | Currency, amount: Decimal) -> None:
        key = parse_currency(currency).value
        setattr(self, key, getattr(self, key) + Decimal(amount))

    def add_money(self, money: Money) -> None:
        self.add(money.currency, money.amount)

    def __add__(self, other: CurrencyMap) -> CurrencyMap:
        return CurrencyMap(EGP=self.EGP + other.EGP, GBP=self.GBP + other.GBP)

    def __sub__(self, other: CurrencyMap) -> CurrencyMap:
        return CurrencyMap(EGP=self.EGP - other.EGP, GBP=self.GBP - other.GBP)

    def is_zero(self) -> bool:
        return self.EGP == ZERO and self.GBP == ZERO

    def as_dict(self) -> dict[str, Decimal]:
        return {currency.value: getattr(self, currency.value) for currency in Currency}


@dataclass(slots=True)
class CurrencyTotals:
    total_money_spent: CurrencyMap = field(default_factory=CurrencyMap)
    total_money_requested: CurrencyMap = field(default_factory=CurrencyMap)

    @property
    def net_money(self) -> CurrencyMap:
        return self.total_money_requested - self.total_money_spent

    def accumulate(self, other: CurrencyTotals) -> None:
        self.total_money_spent = self.total_money_spent + other.total_money_spent
        self.total_money_requested = self.total_money_requested + other.total_money_requested

    def as_dict(self) -> dict[str, dict[str, Decimal]]:
        return {
            "total_money_spent": self.total_money_spent.as_dict(),
            "total_money_requested": self.total_money_requested.as_dict(),
            "net_money": self.net_money.as_dict(),
        }
