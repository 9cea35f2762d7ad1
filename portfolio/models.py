from decimal import Decimal

from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from simple_history.models import HistoricalRecords

MAX_PAYMENT_AMOUNT = Decimal("99999999.99")
MAX_SERVICE_COST = Decimal("999999.99")


class Currency(models.TextChoices):
    EGP = "EGP", _("Egyptian pound")
    GBP = "GBP", _("British pound")


class PayerRole(models.TextChoices):
    OWNER = "owner", _("Owner")
    RENTER = "renter", _("Renter")


class User(AbstractUser):
    class Role(models.TextChoices):
        SUPER_ADMIN = "super_admin", _("Super admin")
        ADMIN = "admin", _("Admin")
        OWNER = "owner", _("Owner")
        RENTER = "renter", _("Renter")

    name = models.CharField(max_length=255, blank=True, verbose_name=_("Name"))
    phone_number = models.CharField(max_length=50, blank=True, verbose_name=_("Phone number"))
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.RENTER,
        verbose_name=_("Role"),
    )
    responsible_villages = models.ManyToManyField(
        "Village",
        blank=True,
        related_name="responsible_users",
        verbose_name=_("Responsible villages"),
        help_text=_("Admins with responsible villages only see data of these villages."),
    )

    class Meta:
        verbose_name = _("User")
        verbose_name_plural = _("Users")

    def __str__(self) -> str:
        return self.display_name

    @property
    def display_name(self) -> str:
        return self.name or self.get_full_name() or self.get_username()


class Village(models.Model):
    name = models.CharField(max_length=255, unique=True, verbose_name=_("Name"))
    electricity_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(0)],
        verbose_name=_("Electricity price per unit"),
    )
    water_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(0)],
        verbose_name=_("Water price per unit"),
    )
    phases = models.PositiveSmallIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
        verbose_name=_("Phases"),
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        verbose_name=_("Created by"),
    )
    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("Created at"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("Updated at"))

    class Meta:
        verbose_name = _("Village")
        verbose_name_plural = _("Villages")
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Apartment(models.Model):
    class PayingStatus(models.TextChoices):
        TRANSFER = "transfer", _("Transfer")
        RENT = "rent", _("Rent")
        NON_PAYER = "non_payer", _("Non-payer")

    class SalesStatus(models.TextChoices):
        FOR_SALE = "for_sale", _("For sale")
        NOT_FOR_SALE = "not_for_sale", _("Not for sale")

    name = models.CharField(max_length=255, verbose_name=_("Name"))
    village = models.ForeignKey(
        Village,
        on_delete=models.PROTECT,
        related_name="apartments",
        verbose_name=_("Village"),
    )
    phase = models.PositiveSmallIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
        verbose_name=_("Phase"),
    )
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="owned_apartments",
        verbose_name=_("Owner"),
    )
    purchase_date = models.DateField(null=True, blank=True, verbose_name=_("Purchase date"))
    paying_status = models.CharField(
        max_length=20,
        choices=PayingStatus.choices,
        default=PayingStatus.NON_PAYER,
        verbose_name=_("Paying status"),
    )
    sales_status = models.CharField(
        max_length=20,
        choices=SalesStatus.choices,
        default=SalesStatus.NOT_FOR_SALE,
        verbose_name=_("Sales status"),
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        verbose_name=_("Created by"),
    )
    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("Created at"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("Updated at"))

    class Meta:
        verbose_name = _("Apartment")
        verbose_name_plural = _("Apartments")
        ordering = ["village__name", "name", "id"]

    def __str__(self) -> str:
        return f"{self.name} ({self.village.name})"

    def clean(self):
        super().clean()
        if self.village_id is None or self.phase is None:
            return
        phases = self.village.phases
        if self.phase < 1 or self.phase > phases:
            raise ValidationError(
                {"phase": _("Phase must be between 1 and %(phases)s for this village.") % {"phases": phases}}
            )

    def delete(self, *args, **kwargs):
        blockers = (
            ("bookings", _("Cannot delete apartment with existing bookings.")),
            ("service_requests", _("Cannot delete apartment with existing service requests.")),
            ("payments", _("Cannot delete apartment with existing payments.")),
        )
        for relation, message in blockers:
            if getattr(self, relation).exists():
                raise ValidationError(message)
        return super().delete(*args, **kwargs)

    @property
    def status(self):
        from .services.occupancy import resolve_status

        return resolve_status(self)


class Booking(models.Model):
    class Status(models.TextChoices):
        NOT_ARRIVED = "not_arrived", _("Not arrived")
        IN_VILLAGE = "in_village", _("In village")
        LEFT = "left", _("Left")

    apartment = models.ForeignKey(
        Apartment,
        on_delete=models.PROTECT,
        related_name="bookings",
        verbose_name=_("Apartment"),
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="bookings",
        verbose_name=_("Occupant"),
    )
    user_type = models.CharField(
        max_length=10,
        choices=PayerRole.choices,
        verbose_name=_("Occupant role"),
    )
    arrival = models.DateTimeField(verbose_name=_("Arrival"))
    leaving = models.DateTimeField(verbose_name=_("Leaving"))
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.NOT_ARRIVED,
        verbose_name=_("Status"),
    )
    number_of_people = models.PositiveSmallIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
        verbose_name=_("Number of people"),
    )
    person_name = models.CharField(max_length=255, blank=True, verbose_name=_("Person name"))
    notes = models.TextField(blank=True, verbose_name=_("Notes"))
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        verbose_name=_("Created by"),
    )
    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("Created at"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("Updated at"))

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-arrival", "-id"]
        indexes = [
            models.Index(fields=["apartment", "arrival", "leaving"], name="booking_apartment_period_idx"),
            models.Index(fields=["apartment", "status"], name="booking_apartment_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.apartment} · {self.arrival:%d.%m.%Y}–{self.leaving:%d.%m.%Y}"

    def clean(self):
        super().clean()
        if self.arrival is None or self.leaving is None:
            return
        if self.leaving <= self.arrival:
            raise ValidationError({"leaving": _("Leaving must be after arrival.")})
        if not getattr(settings, "PORTFOLIO_REJECT_OVERLAPPING_BOOKINGS", False):
            return
        if self.apartment_id is None or self.status == self.Status.LEFT:
            return
        overlapping = (
            Booking.objects.filter(
                apartment_id=self.apartment_id,
                arrival__lt=self.leaving,
                leaving__gt=self.arrival,
            )
            .exclude(status=self.Status.LEFT)
            .exclude(pk=self.pk)
        )
        if overlapping.exists():
            raise ValidationError(
                _("The apartment already has a booking overlapping this period.")
            )

    @property
    def occupant_name(self) -> str:
        if self.person_name:
            return self.person_name
        return self.user.display_name if self.user_id else ""


class PaymentMethod(models.Model):
    name = models.CharField(max_length=100, unique=True, verbose_name=_("Name"))
    description = models.TextField(blank=True, verbose_name=_("Description"))
    is_active = models.BooleanField(default=True, verbose_name=_("Active"))

    class Meta:
        verbose_name = _("Payment method")
        verbose_name_plural = _("Payment methods")
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Payment(models.Model):
    apartment = models.ForeignKey(
        Apartment,
        on_delete=models.PROTECT,
        related_name="payments",
        verbose_name=_("Apartment"),
    )
    booking = models.ForeignKey(
        Booking,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payments",
        verbose_name=_("Booking"),
    )
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01")), MaxValueValidator(MAX_PAYMENT_AMOUNT)],
        verbose_name=_("Amount"),
    )
    currency = models.CharField(
        max_length=3,
        choices=Currency.choices,
        verbose_name=_("Currency"),
    )
    user_type = models.CharField(
        max_length=10,
        choices=PayerRole.choices,
        default=PayerRole.OWNER,
        verbose_name=_("Payer role"),
    )
    method = models.ForeignKey(
        PaymentMethod,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="payments",
        verbose_name=_("Payment method"),
    )
    date = models.DateField(verbose_name=_("Date"))
    description = models.CharField(max_length=255, blank=True, verbose_name=_("Description"))
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_payments",
        verbose_name=_("Created by"),
    )
    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("Created at"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("Updated at"))
    history = HistoricalRecords()

    class Meta:
        verbose_name = _("Payment")
        verbose_name_plural = _("Payments")
        ordering = ["-date", "-id"]
        indexes = [
            models.Index(fields=["apartment", "date"], name="payment_apartment_date_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=0),
                name="chk_payment_amount_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.date} · {self.apartment} · {self.amount} {self.currency}"


class ServiceType(models.Model):
    name = models.CharField(max_length=255, unique=True, verbose_name=_("Name"))
    description = models.TextField(blank=True, verbose_name=_("Description"))
    default_assignee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        verbose_name=_("Default assignee"),
    )
    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("Created at"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("Updated at"))

    class Meta:
        verbose_name = _("Service type")
        verbose_name_plural = _("Service types")
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class ServiceTypeVillagePrice(models.Model):
    service_type = models.ForeignKey(
        ServiceType,
        on_delete=models.CASCADE,
        related_name="village_prices",
        verbose_name=_("Service type"),
    )
    village = models.ForeignKey(
        Village,
        on_delete=models.CASCADE,
        related_name="service_prices",
        verbose_name=_("Village"),
    )
    cost = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01")), MaxValueValidator(MAX_SERVICE_COST)],
        verbose_name=_("Cost"),
    )
    currency = models.CharField(
        max_length=3,
        choices=Currency.choices,
        default=Currency.EGP,
        verbose_name=_("Currency"),
    )
    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("Created at"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("Updated at"))

    class Meta:
        verbose_name = _("Service price per village")
        verbose_name_plural = _("Service prices per village")
        constraints = [
            models.UniqueConstraint(
                fields=["service_type", "village"],
                name="uniq_service_type_village_price",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.service_type} · {self.village}: {self.cost} {self.currency}"


class ServiceRequest(models.Model):
    class WhoPays(models.TextChoices):
        OWNER = "owner", _("Owner")
        RENTER = "renter", _("Renter")
        COMPANY = "company", _("Company")

    class Status(models.TextChoices):
        CREATED = "created", _("Created")
        IN_PROGRESS = "in_progress", _("In Progress")
        DONE = "done", _("Done")

    type = models.ForeignKey(
        ServiceType,
        on_delete=models.PROTECT,
        related_name="requests",
        verbose_name=_("Service type"),
    )
    apartment = models.ForeignKey(
        Apartment,
        on_delete=models.PROTECT,
        related_name="service_requests",
        verbose_name=_("Apartment"),
    )
    booking = models.ForeignKey(
        Booking,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="service_requests",
        verbose_name=_("Booking"),
    )
    requester = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="requested_services",
        verbose_name=_("Requester"),
    )
    who_pays = models.CharField(
        max_length=10,
        choices=WhoPays.choices,
        default=WhoPays.OWNER,
        verbose_name=_("Who pays"),
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.CREATED,
        verbose_name=_("Status"),
    )
    assignee = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_services",
        verbose_name=_("Assignee"),
    )
    date_created = models.DateTimeField(default=timezone.now, verbose_name=_("Requested at"))
    date_action = models.DateTimeField(null=True, blank=True, verbose_name=_("Action date"))
    notes = models.TextField(blank=True, verbose_name=_("Notes"))
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        verbose_name=_("Created by"),
    )
    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("Created at"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("Updated at"))
    history = HistoricalRecords()

    class Meta:
        verbose_name = _("Service request")
        verbose_name_plural = _("Service requests")
        ordering = ["-date_created", "-id"]
        indexes = [
            models.Index(fields=["apartment", "date_created"], name="servicereq_apartment_date_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.type} · {self.apartment} · {self.date_created:%d.%m.%Y}"


class UtilityReading(models.Model):
    apartment = models.ForeignKey(
        Apartment,
        on_delete=models.PROTECT,
        related_name="utility_readings",
        verbose_name=_("Apartment"),
    )
    booking = models.ForeignKey(
        Booking,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="utility_readings",
        verbose_name=_("Booking"),
    )
    water_start_reading = models.DecimalField(
        max_digits=12, decimal_places=3, null=True, blank=True,
        validators=[MinValueValidator(0)], verbose_name=_("Water start reading"),
    )
    water_end_reading = models.DecimalField(
        max_digits=12, decimal_places=3, null=True, blank=True,
        validators=[MinValueValidator(0)], verbose_name=_("Water end reading"),
    )
    electricity_start_reading = models.DecimalField(
        max_digits=12, decimal_places=3, null=True, blank=True,
        validators=[MinValueValidator(0)], verbose_name=_("Electricity start reading"),
    )
    electricity_end_reading = models.DecimalField(
        max_digits=12, decimal_places=3, null=True, blank=True,
        validators=[MinValueValidator(0)], verbose_name=_("Electricity end reading"),
    )
    start_date = models.DateField(verbose_name=_("Start date"))
    end_date = models.DateField(verbose_name=_("End date"))
    who_pays = models.CharField(
        max_length=10,
        choices=ServiceRequest.WhoPays.choices,
        default=ServiceRequest.WhoPays.OWNER,
        verbose_name=_("Who pays"),
    )
    water_cost = models.DecimalField(
        max_digits=14, decimal_places=2, null=True, blank=True, verbose_name=_("Water cost"),
    )
    electricity_cost = models.DecimalField(
        max_digits=14, decimal_places=2, null=True, blank=True, verbose_name=_("Electricity cost"),
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        verbose_name=_("Created by"),
    )
    created_at = models.DateTimeField(auto_now_add=True, verbose_name=_("Created at"))
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_("Updated at"))

    class Meta:
        verbose_name = _("Utility reading")
        verbose_name_plural = _("Utility readings")
        ordering = ["-end_date", "-id"]
        indexes = [
            models.Index(fields=["apartment", "end_date"], name="utility_apartment_end_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.apartment} · {self.start_date}–{self.end_date}"

    def clean(self):
        super().clean()
        if self.start_date and self.end_date and self.end_date <= self.start_date:
            raise ValidationError({"end_date": _("End date must be after start date.")})
