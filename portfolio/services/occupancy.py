from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import date, datetime, time

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from ..models import Apartment, Booking, PayerRole

logger = logging.getLogger(__name__)


class OccupancyStatus(models.TextChoices):
    AVAILABLE = "available", _("Available")
    OCCUPIED_BY_OWNER = "occupied_by_owner", _("Occupied by Owner")
    OCCUPIED_BY_RENTER = "occupied_by_renter", _("Occupied by Renter")


def _as_instant(as_of: datetime | date | None) -> datetime:
    if as_of is None:
        return timezone.now()
    if not isinstance(as_of, datetime):
        as_of = datetime.combine(as_of, time.min)
    if timezone.is_naive(as_of):
        as_of = timezone.make_aware(as_of)
    return as_of


def _apartment_id(apartment: Apartment | int) -> int:
    if isinstance(apartment, Apartment):
        return apartment.pk
    apartment_id = int(apartment)
    if not Apartment.objects.filter(pk=apartment_id).exists():
        raise Apartment.DoesNotExist(f"Apartment {apartment_id} does not exist.")
    return apartment_id


def qualifying_bookings(instant: datetime):
    """Bookings whose half-open interval [arrival, leaving) contains ``instant``."""
    return (
        Booking.objects.filter(arrival__lte=instant, leaving__gt=instant)
        .exclude(status=Booking.Status.LEFT)
        .order_by("-created_at", "-id")
    )


def status_for_booking(booking: Booking | None) -> OccupancyStatus:
    if booking is None:
        return OccupancyStatus.AVAILABLE
    if booking.user_type == PayerRole.OWNER:
        return OccupancyStatus.OCCUPIED_BY_OWNER
    return OccupancyStatus.OCCUPIED_BY_RENTER


def current_booking(apartment: Apartment | int, as_of: datetime | date | None = None) -> Booking | None:
    """The booking that determines the occupancy of ``apartment`` at ``as_of``.

    Overlapping bookings are tolerated: the most recently created one wins.
    """
    apartment_id = _apartment_id(apartment)
    candidates = list(
        qualifying_bookings(_as_instant(as_of))
        .filter(apartment_id=apartment_id)
        .select_related("user")[:2]
    )
    if len(candidates) > 1:
        logger.debug(
            "Apartment %s has overlapping bookings; using booking %s",
            apartment_id,
            candidates[0].pk,
        )
    return candidates[0] if candidates else None


def resolve_status(apartment: Apartment | int, as_of: datetime | date | None = None) -> OccupancyStatus:
    return status_for_booking(current_booking(apartment, as_of))


def resolve_statuses(
    apartment_ids: Iterable[int],
    as_of: datetime | date | None = None,
) -> dict[int, OccupancyStatus]:
    ids = [int(apartment_id) for apartment_id in apartment_ids]
    statuses = {apartment_id: OccupancyStatus.AVAILABLE for apartment_id in ids}
    if not ids:
        return statuses

    seen: set[int] = set()
    bookings = qualifying_bookings(_as_instant(as_of)).filter(apartment_id__in=ids).only(
        "id", "apartment_id", "user_type", "created_at"
    )
    for booking in bookings:
        if booking.apartment_id in seen:
            continue
        seen.add(booking.apartment_id)
        statuses[booking.apartment_id] = status_for_booking(booking)
    return statuses
