from __future__ import annotations

import enum
from dataclasses import dataclass

from django.core.exceptions import PermissionDenied
from django.db.models import Q, QuerySet

from ..models import Apartment, Booking, User


class ScopeKind(enum.Enum):
    UNRESTRICTED = "unrestricted"
    RESTRICTED_TO = "restricted_to"
    OWN_RECORDS_ONLY = "own_records_only"


@dataclass(frozen=True, slots=True)
class AccessScope:
    """What part of the portfolio a caller may see; computed once per request."""

    kind: ScopeKind
    village_ids: frozenset[int] = frozenset()
    user_id: int | None = None

    @classmethod
    def unrestricted(cls) -> AccessScope:
        return cls(ScopeKind.UNRESTRICTED)

    @classmethod
    def restricted_to(cls, village_ids) -> AccessScope:
        return cls(ScopeKind.RESTRICTED_TO, village_ids=frozenset(int(pk) for pk in village_ids))

    @classmethod
    def own_records_only(cls, user_id: int) -> AccessScope:
        return cls(ScopeKind.OWN_RECORDS_ONLY, user_id=int(user_id))

    @property
    def is_unrestricted(self) -> bool:
        return self.kind is ScopeKind.UNRESTRICTED

    def apartments(self, queryset: QuerySet | None = None) -> QuerySet:
        if queryset is None:
            queryset = Apartment.objects.all()
        if self.kind is ScopeKind.RESTRICTED_TO:
            return queryset.filter(village_id__in=self.village_ids)
        if self.kind is ScopeKind.OWN_RECORDS_ONLY:
            booked = Apartment.objects.filter(bookings__user_id=self.user_id).values("pk")
            return queryset.filter(Q(owner_id=self.user_id) | Q(pk__in=booked))
        return queryset

    def check_village(self, village_id: int) -> None:
        if self.kind is ScopeKind.RESTRICTED_TO and int(village_id) not in self.village_ids:
            raise PermissionDenied("You can only access data of your responsible villages.")

    def check_apartment(self, apartment: Apartment) -> None:
        if not self.apartments(Apartment.objects.filter(pk=apartment.pk)).exists():
            raise PermissionDenied("You do not have access to this apartment.")

    def check_booking(self, booking: Booking) -> None:
        """Owners and renters only see their own bookings and bookings of apartments they own."""
        if self.kind is ScopeKind.OWN_RECORDS_ONLY:
            if self.user_id not in (booking.user_id, booking.apartment.owner_id):
                raise PermissionDenied("You can only access your own bookings.")
            return
        self.check_apartment(booking.apartment)


def scope_for(actor: User | None) -> AccessScope:
    if actor is None or not actor.is_authenticated or not actor.is_active:
        raise PermissionDenied("Authentication required.")
    if actor.role == User.Role.SUPER_ADMIN or actor.is_superuser:
        return AccessScope.unrestricted()
    if actor.role == User.Role.ADMIN:
        village_ids = list(actor.responsible_villages.values_list("pk", flat=True))
        if village_ids:
            return AccessScope.restricted_to(village_ids)
        return AccessScope.unrestricted()
    return AccessScope.own_records_only(actor.pk)
