from django import forms
from django.core.exceptions import ValidationError
from django.utils import timezone

from .models import PayerRole
from .services.bill_report import BillFilters
from .services.ledger import DateWindow


class QueryForm(forms.Form):
    """Validates query-string parameters of the JSON API."""

    def validated(self):
        if not self.is_valid():
            raise ValidationError(self.errors.as_data())
        return self.cleaned_data


class ApartmentListForm(QueryForm):
    village_id = forms.IntegerField(required=False, min_value=1)
    phase = forms.IntegerField(required=False, min_value=1)


class FinancialSummaryForm(QueryForm):
    include_utilities = forms.BooleanField(required=False)


class BillFilterForm(QueryForm):
    year = forms.IntegerField(required=False, min_value=1900, max_value=9999)
    date_from = forms.DateField(required=False)
    date_to = forms.DateField(required=False)
    village_id = forms.IntegerField(required=False, min_value=1)
    user_type = forms.ChoiceField(required=False, choices=PayerRole.choices)
    phase = forms.IntegerField(required=False, min_value=1)
    search = forms.CharField(required=False, max_length=255, strip=True)
    include_utilities = forms.BooleanField(required=False)

    def clean(self):
        cleaned = super().clean()
        year = cleaned.get("year")
        date_from = cleaned.get("date_from")
        date_to = cleaned.get("date_to")
        if year:
            cleaned["window"] = DateWindow.for_year(year)
        elif date_from or date_to:
            try:
                cleaned["window"] = DateWindow(date_from, date_to)
            except ValidationError as exc:
                self.add_error(None, exc)
        else:
            cleaned["window"] = DateWindow.for_year(timezone.localdate().year)
        return cleaned

    def to_filters(self) -> BillFilters:
        cleaned = self.validated()
        return BillFilters(
            window=cleaned["window"],
            village_id=cleaned.get("village_id"),
            user_type=cleaned.get("user_type") or None,
            phase=cleaned.get("phase"),
            search=cleaned.get("search") or "",
            include_utilities=bool(cleaned.get("include_utilities")),
        )


class PreviousYearsForm(BillFilterForm):
    before_year = forms.IntegerField(required=False, min_value=1900, max_value=9999)

    def clean(self):
        cleaned = super().clean()
        if not cleaned.get("before_year"):
            cleaned["before_year"] = timezone.localdate().year
        return cleaned


class StatementFilterForm(QueryForm):
    """Optional date range for booking and renter statements; all time when omitted."""

    date_from = forms.DateField(required=False)
    date_to = forms.DateField(required=False)
    user_type = forms.ChoiceField(required=False, choices=PayerRole.choices)
    include_utilities = forms.BooleanField(required=False)

    def clean(self):
        cleaned = super().clean()
        try:
            cleaned["window"] = DateWindow(cleaned.get("date_from"), cleaned.get("date_to"))
        except ValidationError as exc:
            self.add_error(None, exc)
        return cleaned

    def to_filters(self) -> BillFilters:
        cleaned = self.validated()
        return BillFilters(
            window=cleaned["window"],
            user_type=cleaned.get("user_type") or None,
            include_utilities=bool(cleaned.get("include_utilities")),
        )
