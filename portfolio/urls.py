from django.urls import path

from .views import (
    ApartmentBillsView,
    ApartmentDetailView,
    ApartmentFinancialSummaryView,
    ApartmentListView,
    BillSummaryView,
    BookingBillsView,
    PreviousYearsTotalView,
    RenterSummaryView,
    UserBillsView,
)

app_name = "portfolio"

urlpatterns = [
    path("apartments/", ApartmentListView.as_view(), name="apartment_list"),
    path("apartments/<int:pk>/", ApartmentDetailView.as_view(), name="apartment_detail"),
    path(
        "apartments/<int:pk>/financial-summary/",
        ApartmentFinancialSummaryView.as_view(),
        name="apartment_financial_summary",
    ),
    path("bills/summary/", BillSummaryView.as_view(), name="bill_summary"),
    path("bills/apartment/<int:pk>/", ApartmentBillsView.as_view(), name="apartment_bills"),
    path("bills/user/<int:pk>/", UserBillsView.as_view(), name="user_bills"),
    path("bills/booking/<int:pk>/", BookingBillsView.as_view(), name="booking_bills"),
    path("bills/renter-summary/<int:pk>/", RenterSummaryView.as_view(), name="renter_summary"),
    path("bills/previous-years/", PreviousYearsTotalView.as_view(), name="previous_years_total"),
]
