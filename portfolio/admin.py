from django.contrib import admin, messages
from django.contrib.auth.admin import UserAdmin
from django.core.exceptions import ValidationError
from simple_history.admin import SimpleHistoryAdmin

from .models import (
    Apartment,
    Booking,
    Payment,
    PaymentMethod,
    ServiceRequest,
    ServiceType,
    ServiceTypeVillagePrice,
    User,
    UtilityReading,
    Village,
)


@admin.register(User)
class PortfolioUserAdmin(UserAdmin):
    list_display = ("username", "name", "email", "role", "is_active")
    list_filter = ("role", "is_active", "is_staff")
    search_fields = ("username", "name", "email", "phone_number")
    filter_horizontal = ("groups", "user_permissions", "responsible_villages")
    fieldsets = UserAdmin.fieldsets + (
        ("Portfolio", {"fields": ("name", "phone_number", "role", "responsible_villages")}),
    )


class ServiceTypeVillagePriceInline(admin.TabularInline):
    model = ServiceTypeVillagePrice
    extra = 0


@admin.register(Village)
class VillageAdmin(admin.ModelAdmin):
    list_display = ("name", "phases", "electricity_price", "water_price")
    search_fields = ("name",)


@admin.register(Apartment)
class ApartmentAdmin(admin.ModelAdmin):
    list_display = ("name", "village", "phase", "owner", "paying_status", "sales_status", "occupancy")
    list_filter = ("village", "paying_status", "sales_status")
    search_fields = ("name", "village__name", "owner__name", "owner__username")

    @admin.display(description="Status")
    def occupancy(self, obj):
        return obj.status.label

    def delete_model(self, request, obj):
        try:
            obj.delete()
        except ValidationError as exc:
            self.message_user(request, " ".join(exc.messages), level=messages.ERROR)

    def delete_queryset(self, request, queryset):
        for apartment in queryset:
            self.delete_model(request, apartment)


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ("apartment", "user", "user_type", "arrival", "leaving", "status")
    list_filter = ("status", "user_type", "apartment__village")
    search_fields = ("apartment__name", "user__name", "user__username", "person_name")


@admin.register(PaymentMethod)
class PaymentMethodAdmin(admin.ModelAdmin):
    list_display = ("name", "is_active")
    list_filter = ("is_active",)


@admin.register(Payment)
class PaymentAdmin(SimpleHistoryAdmin):
    list_display = ("date", "apartment", "amount", "currency", "user_type", "method")
    list_filter = ("currency", "user_type", "method", "apartment__village")
    search_fields = ("apartment__name", "description")
    history_list_display = ("amount", "currency", "date", "history_user", "history_date")

    def save_model(self, request, obj, form, change):
        if not change and obj.created_by_id is None:
            obj.created_by = request.user
        super().save_model(request, obj, form, change)


@admin.register(ServiceType)
class ServiceTypeAdmin(admin.ModelAdmin):
    list_display = ("name", "default_assignee")
    search_fields = ("name",)
    inlines = (ServiceTypeVillagePriceInline,)


@admin.register(ServiceTypeVillagePrice)
class ServiceTypeVillagePriceAdmin(admin.ModelAdmin):
    list_display = ("service_type", "village", "cost", "currency")
    list_filter = ("village", "currency")


@admin.register(ServiceRequest)
class ServiceRequestAdmin(SimpleHistoryAdmin):
    list_display = ("type", "apartment", "who_pays", "status", "date_created", "date_action")
    list_filter = ("status", "who_pays", "type", "apartment__village")
    search_fields = ("apartment__name", "notes")
    history_list_display = ("status", "who_pays", "date_action", "history_user", "history_date")


@admin.register(UtilityReading)
class UtilityReadingAdmin(admin.ModelAdmin):
    list_display = ("apartment", "start_date", "end_date", "who_pays", "water_cost", "electricity_cost")
    list_filter = ("who_pays", "apartment__village")
    search_fields = ("apartment__name",)
    readonly_fields = ("water_cost", "electricity_cost")
