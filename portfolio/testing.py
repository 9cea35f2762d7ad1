from datetime import datetime
from decimal import Decimal

from django.utils import timezone

from .models import (
    Apartment,
    Booking,
    Payment,
    ServiceRequest,
    ServiceType,
    ServiceTypeVillagePrice,
    User,
    Village,
)


def aware(*args):
    return timezone.make_aware(datetime(*args))


class PortfolioDataMixin:
    """Village V with one apartment A owned by ``owner``; Cleaning costs 500 EGP."""

    def create_portfolio(self):
        self.admin = User.objects.create_user(
            username="root", password="pw", role=User.Role.SUPER_ADMIN
        )
        self.owner = User.objects.create_user(
            username="owner", password="pw", name="Olivia Owner", role=User.Role.OWNER
        )
        self.renter = User.objects.create_user(
            username="renter", password="pw", name="Rami Renter", role=User.Role.RENTER
        )
        self.village = Village.objects.create(
            name="V",
            phases=2,
            water_price=Decimal("2.00"),
            electricity_price=Decimal("3.00"),
        )
        self.apartment = Apartment.objects.create(
            name="A", village=self.village, phase=1, owner=self.owner
        )
        self.cleaning = ServiceType.objects.create(name="Cleaning")
        ServiceTypeVillagePrice.objects.create(
            service_type=self.cleaning,
            village=self.village,
            cost=Decimal("500.00"),
            currency="EGP",
        )

    def add_payment(self, amount, day, *, apartment=None, currency="EGP", user_type="owner", **extra):
        return Payment.objects.create(
            apartment=apartment or self.apartment,
            amount=Decimal(amount),
            currency=currency,
            user_type=user_type,
            date=day,
            **extra,
        )

    def add_service_request(self, moment, *, apartment=None, service_type=None, who_pays="owner", **extra):
        return ServiceRequest.objects.create(
            type=service_type or self.cleaning,
            apartment=apartment or self.apartment,
            requester=self.owner,
            who_pays=who_pays,
            date_created=moment,
            **extra,
        )

    def add_booking(self, arrival, leaving, *, user=None, user_type="renter", status=Booking.Status.IN_VILLAGE, **extra):
        return Booking.objects.create(
            apartment=extra.pop("apartment", self.apartment),
            user=user or self.renter,
            user_type=user_type,
            arrival=arrival,
            leaving=leaving,
            status=status,
            **extra,
        )
