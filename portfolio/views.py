import logging
import time

from django.conf import settings
from django.core.exceptions import ObjectDoesNotExist, PermissionDenied, ValidationError
from django.core.serializers.json import DjangoJSONEncoder
from django.http import Http404, JsonResponse
from django.views.generic import View

from .forms import (
    ApartmentListForm,
    BillFilterForm,
    FinancialSummaryForm,
    PreviousYearsForm,
    StatementFilterForm,
)
from .models import Apartment
from .services.access_scope import scope_for
from .services.bill_report import PortfolioBillReporter, ReportCancelled
from .services.financial_summary import ApartmentFinancialSummarizer
from .services.occupancy import current_booking, resolve_statuses, status_for_booking

logger = logging.getLogger(__name__)


def request_deadline():
    """Cancel check that fires once PORTFOLIO_REPORT_TIMEOUT seconds have passed."""
    timeout = getattr(settings, "PORTFOLIO_REPORT_TIMEOUT", None)
    if not timeout:
        return None
    deadline = time.monotonic() + float(timeout)
    return lambda: time.monotonic() > deadline


def _error(message, status, **extra):
    return JsonResponse({"success": False, "message": message, **extra}, status=status)


def _validation_payload(exc: ValidationError):
    if hasattr(exc, "error_dict"):
        return {"errors": exc.message_dict}
    return {"errors": {"__all__": exc.messages}}


class JsonApiView(View):
    """GET-only JSON endpoint bound to the caller's access scope."""

    http_method_names = ["get"]

    def dispatch(self, request, *args, **kwargs):
        if not request.user.is_authenticated:
            return _error("Authentication required.", 401)
        try:
            self.scope = scope_for(request.user)
            return super().dispatch(request, *args, **kwargs)
        except ValidationError as exc:
            return _error("Invalid request.", 400, **_validation_payload(exc))
        except PermissionDenied as exc:
            return _error(str(exc) or "Permission denied.", 403)
        except (ObjectDoesNotExist, Http404) as exc:
            return _error(str(exc) or "Not found.", 404)
        except ReportCancelled as exc:
            logger.info("Request %s cancelled: %s", request.path, exc)
            return _error(str(exc), 503)

    def render(self, data):
        return JsonResponse({"success": True, "data": data}, encoder=DjangoJSONEncoder)

    def reporter(self):
        return PortfolioBillReporter(scope=self.scope, cancel_check=request_deadline())


def _apartment_payload(apartment, status):
    return {
        "id": apartment.pk,
        "name": apartment.name,
        "village_id": apartment.village_id,
        "village_name": apartment.village.name,
        "phase": apartment.phase,
        "owner_id": apartment.owner_id,
        "owner_name": apartment.owner.display_name,
        "purchase_date": apartment.purchase_date,
        "paying_status": apartment.paying_status,
        "sales_status": apartment.sales_status,
        "status": status.value,
    }


class ApartmentListView(JsonApiView):
    def get(self, request):
        params = ApartmentListForm(request.GET).validated()
        apartments = self.scope.apartments(Apartment.objects.select_related("village", "owner"))
        if params.get("village_id"):
            self.scope.check_village(params["village_id"])
            apartments = apartments.filter(village_id=params["village_id"])
        if params.get("phase"):
            apartments = apartments.filter(phase=params["phase"])
        apartments = list(apartments.order_by("village__name", "name", "id"))
        statuses = resolve_statuses(apartment.pk for apartment in apartments)
        return self.render([_apartment_payload(apartment, statuses[apartment.pk]) for apartment in apartments])


class ApartmentDetailView(JsonApiView):
    def get(self, request, pk):
        apartment = Apartment.objects.select_related("village", "owner").get(pk=pk)
        self.scope.check_apartment(apartment)
        booking = current_booking(apartment)
        payload = _apartment_payload(apartment, status_for_booking(booking))
        payload["current_booking"] = None
        if booking is not None:
            payload["current_booking"] = {
                "id": booking.pk,
                "user_id": booking.user_id,
                "user_type": booking.user_type,
                "person_name": booking.occupant_name,
                "arrival": booking.arrival,
                "leaving": booking.leaving,
                "status": booking.status,
            }
        return self.render(payload)


class ApartmentFinancialSummaryView(JsonApiView):
    def get(self, request, pk):
        params = FinancialSummaryForm(request.GET).validated()
        apartment = Apartment.objects.get(pk=pk)
        self.scope.check_apartment(apartment)
        summarizer = ApartmentFinancialSummarizer(include_utilities=params["include_utilities"])
        return self.render(summarizer.summarize(apartment.pk).as_dict())


class BillSummaryView(JsonApiView):
    def get(self, request):
        filters = BillFilterForm(request.GET).to_filters()
        return self.render(self.reporter().report(filters).as_dict())


class ApartmentBillsView(JsonApiView):
    def get(self, request, pk):
        filters = BillFilterForm(request.GET).to_filters()
        statement = self.reporter().apartment_detail(pk, filters)
        return self.render(statement.as_dict("apartment"))


class UserBillsView(JsonApiView):
    def get(self, request, pk):
        filters = BillFilterForm(request.GET).to_filters()
        statement = self.reporter().user_detail(pk, filters, actor=request.user)
        return self.render(statement.as_dict("user"))


class PreviousYearsTotalView(JsonApiView):
    def get(self, request):
        form = PreviousYearsForm(request.GET)
        filters = form.to_filters()
        before_year = form.cleaned_data["before_year"]
        totals = self.reporter().previous_years_total(before_year, filters)
        return self.render({"before_year": before_year, **totals.as_dict()})


class BookingBillsView(JsonApiView):
    def get(self, request, pk):
        filters = StatementFilterForm(request.GET).to_filters()
        statement = self.reporter().booking_detail(pk, filters)
        return self.render(statement.as_dict("booking"))


class RenterSummaryView(JsonApiView):
    def get(self, request, pk):
        filters = StatementFilterForm(request.GET).to_filters()
        return self.render(self.reporter().renter_summary(pk, filters).as_dict())
