from datetime import date, timedelta
from decimal import Decimal

from django.contrib.auth.models import AnonymousUser
from django.core.exceptions import PermissionDenied, ValidationError
from django.test import TestCase, override_settings
from django.utils import timezone

from .forms import BillFilterForm
from .models import Apartment, Booking, Payment, ServiceType, User, UtilityReading, Village
from .services.access_scope import AccessScope, ScopeKind, scope_for
from .services.bill_report import BillFilters, PortfolioBillReporter, ReportCancelled
from .services.financial_summary import ApartmentFinancialSummarizer, summarize
from .services.ledger import DateWindow, LedgerEntryKind, PriceLookup, PricingGap
from .services.money import CurrencyMap, quantize_cent
from .services.occupancy import OccupancyStatus, current_booking, resolve_status, resolve_statuses
from .services.utility_costs import effective_utility_cost, meter_usage
from .testing import PortfolioDataMixin, aware


def year_filters(year, **kwargs):
    return BillFilters(window=DateWindow.for_year(year), **kwargs)


class MoneyTests(TestCase):
    def test_quantize_cent_rounds_half_up(self):
        self.assertEqual(quantize_cent(Decimal("0.125")), Decimal("0.13"))
        self.assertEqual(quantize_cent(None), Decimal("0.00"))

    def test_currency_map_keeps_currencies_apart(self):
        amounts = CurrencyMap()
        amounts.add("EGP", Decimal("10.00"))
        amounts.add("GBP", Decimal("2.50"))
        amounts.add("EGP", Decimal("5.00"))

        self.assertEqual(amounts.as_dict(), {"EGP": Decimal("15.00"), "GBP": Decimal("2.50")})

    def test_unsupported_currency_is_rejected(self):
        with self.assertRaises(ValueError):
            CurrencyMap().add("USD", Decimal("1.00"))


class DateWindowTests(TestCase):
    def test_inverted_range_is_invalid(self):
        with self.assertRaises(ValidationError):
            DateWindow(date(2024, 2, 1), date(2024, 1, 1))

    def test_before_year_ends_on_new_years_eve(self):
        window = DateWindow.before_year(2024)
        self.assertIsNone(window.date_from)
        self.assertEqual(window.date_to, date(2023, 12, 31))


class FinancialSummaryTests(PortfolioDataMixin, TestCase):
    def setUp(self):
        self.create_portfolio()

    def test_payment_and_priced_service_request(self):
        self.add_payment("300.00", date(2024, 3, 1))
        self.add_service_request(aware(2024, 3, 15, 12, 0))

        summary = summarize(self.apartment.pk)

        self.assertEqual(summary.total_money_spent.as_dict(), {"EGP": Decimal("300"), "GBP": Decimal("0")})
        self.assertEqual(summary.total_money_requested.as_dict(), {"EGP": Decimal("500"), "GBP": Decimal("0")})
        self.assertEqual(summary.net_money.as_dict(), {"EGP": Decimal("200"), "GBP": Decimal("0")})
        self.assertEqual(summary.pricing_gaps, [])

    def test_currencies_are_never_mixed(self):
        self.add_payment("100.00", date(2024, 3, 1), currency="GBP")
        self.add_payment("40.00", date(2024, 3, 2), currency="EGP")

        summary = summarize(self.apartment.pk)

        self.assertEqual(summary.total_money_spent.GBP, Decimal("100.00"))
        self.assertEqual(summary.total_money_spent.EGP, Decimal("40.00"))
        self.assertEqual(summary.net_money.GBP, Decimal("-100.00"))
        self.assertEqual(summary.net_money.EGP, Decimal("-40.00"))

    def test_apartment_without_transactions_has_zero_totals(self):
        summary = summarize(self.apartment.pk)

        self.assertTrue(summary.total_money_spent.is_zero())
        self.assertTrue(summary.total_money_requested.is_zero())
        self.assertTrue(summary.net_money.is_zero())

    def test_unknown_apartment_raises_does_not_exist(self):
        with self.assertRaises(Apartment.DoesNotExist):
            summarize(999999)

    def test_unpriced_service_request_is_flagged_not_zero_priced(self):
        pool = ServiceType.objects.create(name="Pool")
        self.add_service_request(aware(2024, 3, 15, 12, 0))
        gap = self.add_service_request(aware(2024, 3, 16, 12, 0), service_type=pool)

        with self.assertLogs("portfolio.services.financial_summary", level="WARNING"):
            summary = summarize(self.apartment.pk)

        self.assertEqual(summary.total_money_requested.EGP, Decimal("500.00"))
        self.assertEqual(summary.pricing_gaps, [gap.pk])

    def test_price_lookup_raises_pricing_gap(self):
        pool = ServiceType.objects.create(name="Pool")
        with self.assertRaises(PricingGap):
            PriceLookup().price(pool.pk, self.village.pk)

    def test_utilities_only_in_combined_view(self):
        UtilityReading.objects.create(
            apartment=self.apartment,
            water_start_reading=Decimal("100"),
            water_end_reading=Decimal("110"),
            electricity_start_reading=Decimal("1000"),
            electricity_end_reading=Decimal("1050"),
            start_date=date(2024, 1, 1),
            end_date=date(2024, 2, 1),
            who_pays="owner",
        )
        UtilityReading.objects.create(
            apartment=self.apartment,
            water_start_reading=Decimal("0"),
            water_end_reading=Decimal("5"),
            start_date=date(2024, 2, 1),
            end_date=date(2024, 3, 1),
            who_pays="renter",
        )

        self.assertTrue(summarize(self.apartment.pk).total_money_requested.is_zero())
        combined = summarize(self.apartment.pk, include_utilities=True)
        self.assertEqual(combined.total_money_requested.EGP, Decimal("170.00"))
        self.assertTrue(combined.utility_cost_included)

        renter_view = ApartmentFinancialSummarizer(payer="renter", include_utilities=True)
        self.assertEqual(renter_view.summarize(self.apartment.pk).total_money_requested.EGP, Decimal("10.00"))

    def test_summarize_many_returns_one_summary_per_apartment(self):
        other = Apartment.objects.create(name="B", village=self.village, phase=1, owner=self.owner)
        self.add_payment("10.00", date(2024, 1, 5))

        summaries = ApartmentFinancialSummarizer().summarize_many([self.apartment.pk, other.pk])

        self.assertEqual(set(summaries), {self.apartment.pk, other.pk})
        self.assertEqual(summaries[self.apartment.pk].total_money_spent.EGP, Decimal("10.00"))
        self.assertTrue(summaries[other.pk].total_money_spent.is_zero())

    def test_unknown_payer_role_is_invalid(self):
        with self.assertRaises(ValidationError):
            ApartmentFinancialSummarizer(payer="company")


class OccupancyTests(PortfolioDataMixin, TestCase):
    def setUp(self):
        self.create_portfolio()

    def test_renter_booking_occupies_apartment_within_half_open_interval(self):
        self.add_booking(aware(2024, 6, 1), aware(2024, 6, 10))

        self.assertEqual(resolve_status(self.apartment, date(2024, 6, 5)), OccupancyStatus.OCCUPIED_BY_RENTER)
        self.assertEqual(resolve_status(self.apartment, aware(2024, 6, 1)), OccupancyStatus.OCCUPIED_BY_RENTER)
        self.assertEqual(resolve_status(self.apartment, aware(2024, 6, 10)), OccupancyStatus.AVAILABLE)
        self.assertEqual(resolve_status(self.apartment, date(2024, 7, 1)), OccupancyStatus.AVAILABLE)

    def test_owner_booking(self):
        self.add_booking(aware(2024, 6, 1), aware(2024, 6, 10), user=self.owner, user_type="owner")
        self.assertEqual(
            resolve_status(self.apartment.pk, date(2024, 6, 2)),
            OccupancyStatus.OCCUPIED_BY_OWNER,
        )

    def test_left_bookings_do_not_occupy(self):
        self.add_booking(aware(2024, 6, 1), aware(2024, 6, 10), status=Booking.Status.LEFT)
        self.assertEqual(resolve_status(self.apartment, date(2024, 6, 5)), OccupancyStatus.AVAILABLE)

    def test_overlapping_bookings_most_recently_created_wins(self):
        first = self.add_booking(aware(2024, 6, 1), aware(2024, 6, 10), user=self.owner, user_type="owner")
        second = self.add_booking(aware(2024, 6, 3), aware(2024, 6, 8))

        self.assertEqual(current_booking(self.apartment, date(2024, 6, 5)), second)

        Booking.objects.filter(pk=first.pk).update(created_at=timezone.now() + timedelta(days=1))
        self.assertEqual(current_booking(self.apartment, date(2024, 6, 5)), first)
        self.assertEqual(
            resolve_statuses([self.apartment.pk], date(2024, 6, 5)),
            {self.apartment.pk: OccupancyStatus.OCCUPIED_BY_OWNER},
        )

    def test_unknown_apartment_raises_does_not_exist(self):
        with self.assertRaises(Apartment.DoesNotExist):
            resolve_status(999999)

    def test_apartment_status_property(self):
        now = timezone.now()
        self.add_booking(now - timedelta(days=1), now + timedelta(days=1))
        self.assertEqual(self.apartment.status, OccupancyStatus.OCCUPIED_BY_RENTER)


class ModelValidationTests(PortfolioDataMixin, TestCase):
    def setUp(self):
        self.create_portfolio()

    def test_phase_must_lie_within_village_phases(self):
        apartment = Apartment(name="C", village=self.village, phase=3, owner=self.owner)
        with self.assertRaises(ValidationError) as ctx:
            apartment.full_clean()
        self.assertIn("phase", ctx.exception.message_dict)

    def test_apartment_with_payments_cannot_be_deleted(self):
        self.add_payment("10.00", date(2024, 1, 5))
        with self.assertRaises(ValidationError):
            self.apartment.delete()
        self.assertTrue(Apartment.objects.filter(pk=self.apartment.pk).exists())

    def test_apartment_without_ledger_can_be_deleted(self):
        empty = Apartment.objects.create(name="Empty", village=self.village, phase=1, owner=self.owner)
        empty.delete()
        self.assertFalse(Apartment.objects.filter(name="Empty").exists())

    def test_booking_must_end_after_arrival(self):
        booking = Booking(
            apartment=self.apartment,
            user=self.renter,
            user_type="renter",
            arrival=aware(2024, 6, 10),
            leaving=aware(2024, 6, 1),
        )
        with self.assertRaises(ValidationError):
            booking.full_clean()

    def test_overlapping_bookings_allowed_by_default(self):
        self.add_booking(aware(2024, 6, 1), aware(2024, 6, 10))
        overlapping = Booking(
            apartment=self.apartment,
            user=self.owner,
            user_type="owner",
            arrival=aware(2024, 6, 5),
            leaving=aware(2024, 6, 12),
        )
        overlapping.full_clean()

    @override_settings(PORTFOLIO_REJECT_OVERLAPPING_BOOKINGS=True)
    def test_overlapping_bookings_rejected_when_enabled(self):
        self.add_booking(aware(2024, 6, 1), aware(2024, 6, 10))
        overlapping = Booking(
            apartment=self.apartment,
            user=self.owner,
            user_type="owner",
            arrival=aware(2024, 6, 5),
            leaving=aware(2024, 6, 12),
        )
        with self.assertRaises(ValidationError):
            overlapping.full_clean()

        adjacent = Booking(
            apartment=self.apartment,
            user=self.owner,
            user_type="owner",
            arrival=aware(2024, 6, 10),
            leaving=aware(2024, 6, 12),
        )
        adjacent.full_clean()

    def test_payment_changes_are_recorded_in_history(self):
        payment = self.add_payment("10.00", date(2024, 1, 5))
        payment.amount = Decimal("12.00")
        payment.save()

        self.assertEqual(payment.history.count(), 2)
        self.assertEqual(payment.history.earliest().amount, Decimal("10.00"))
        self.assertEqual(Payment.history.filter(id=payment.pk).latest().amount, Decimal("12.00"))


class UtilityCostTests(PortfolioDataMixin, TestCase):
    def setUp(self):
        self.create_portfolio()

    def test_meter_usage(self):
        self.assertEqual(meter_usage(Decimal("100"), Decimal("110")), Decimal("10"))
        self.assertEqual(meter_usage(None, Decimal("110")), Decimal("0"))
        self.assertEqual(
            meter_usage(Decimal("999990"), Decimal("10"), max_value=Decimal("999999")),
            Decimal("19"),
        )

    @override_settings(PORTFOLIO_METER_MAX_VALUE=9999)
    def test_meter_rollover_uses_configured_maximum(self):
        self.assertEqual(meter_usage(Decimal("9990"), Decimal("5")), Decimal("14"))

    def test_cost_cache_is_filled_on_creation_only(self):
        reading = UtilityReading.objects.create(
            apartment=self.apartment,
            water_start_reading=Decimal("100"),
            water_end_reading=Decimal("110"),
            electricity_start_reading=Decimal("1000"),
            electricity_end_reading=Decimal("1050"),
            start_date=date(2024, 1, 1),
            end_date=date(2024, 2, 1),
        )
        reading.refresh_from_db()
        self.assertEqual(reading.water_cost, Decimal("20.00"))
        self.assertEqual(reading.electricity_cost, Decimal("150.00"))

        self.village.water_price = Decimal("5.00")
        self.village.save()
        reading.water_end_reading = Decimal("120")
        reading.save()
        reading.refresh_from_db()

        self.assertEqual(reading.water_cost, Decimal("20.00"))
        self.assertEqual(effective_utility_cost(reading, self.village).total, Decimal("170.00"))


class AccessScopeTests(PortfolioDataMixin, TestCase):
    def setUp(self):
        self.create_portfolio()
        self.other_village = Village.objects.create(name="W")
        self.other_owner = User.objects.create_user(username="other", password="pw", role=User.Role.OWNER)
        self.other_apartment = Apartment.objects.create(
            name="Z", village=self.other_village, phase=1, owner=self.other_owner
        )

    def test_super_admin_is_unrestricted(self):
        self.assertTrue(scope_for(self.admin).is_unrestricted)

    def test_admin_without_villages_is_unrestricted(self):
        admin = User.objects.create_user(username="a", password="pw", role=User.Role.ADMIN)
        self.assertTrue(scope_for(admin).is_unrestricted)

    def test_admin_with_villages_is_restricted(self):
        admin = User.objects.create_user(username="a", password="pw", role=User.Role.ADMIN)
        admin.responsible_villages.add(self.village)

        scope = scope_for(admin)

        self.assertEqual(scope.kind, ScopeKind.RESTRICTED_TO)
        self.assertEqual(list(scope.apartments()), [self.apartment])
        with self.assertRaises(PermissionDenied):
            scope.check_village(self.other_village.pk)
        with self.assertRaises(PermissionDenied):
            scope.check_apartment(self.other_apartment)

    def test_owner_sees_own_apartments(self):
        scope = scope_for(self.owner)
        self.assertEqual(scope.kind, ScopeKind.OWN_RECORDS_ONLY)
        self.assertEqual(list(scope.apartments()), [self.apartment])

    def test_renter_sees_booked_apartments(self):
        self.assertEqual(list(scope_for(self.renter).apartments()), [])
        self.add_booking(aware(2024, 6, 1), aware(2024, 6, 10))
        self.assertEqual(list(scope_for(self.renter).apartments()), [self.apartment])

    def test_anonymous_and_inactive_are_denied(self):
        with self.assertRaises(PermissionDenied):
            scope_for(AnonymousUser())
        self.owner.is_active = False
        with self.assertRaises(PermissionDenied):
            scope_for(self.owner)


class BillReportTests(PortfolioDataMixin, TestCase):
    def setUp(self):
        self.create_portfolio()
        self.reporter = PortfolioBillReporter(scope=AccessScope.unrestricted())
        self.add_payment("300.00", date(2024, 3, 1))
        self.add_service_request(aware(2024, 3, 15, 12, 0))

    def test_year_without_transactions_lists_apartment_with_zeros(self):
        report = self.reporter.report(year_filters(2023))

        self.assertEqual([row.apartment_id for row in report.summary], [self.apartment.pk])
        self.assertTrue(report.summary[0].summary.total_money_spent.is_zero())
        self.assertTrue(report.totals.total_money_requested.is_zero())

        carry_in = self.reporter.previous_years_total(2024)
        self.assertTrue(carry_in.total_money_spent.is_zero())

    def test_totals_are_the_sum_of_rows(self):
        other = Apartment.objects.create(name="B", village=self.village, phase=2, owner=self.owner)
        self.add_payment("50.00", date(2024, 4, 1), apartment=other, currency="GBP")

        report = self.reporter.report(year_filters(2024))

        self.assertEqual([row.apartment_name for row in report.summary], ["A", "B"])
        self.assertEqual(report.totals.total_money_spent.as_dict(), {"EGP": Decimal("300"), "GBP": Decimal("50")})
        self.assertEqual(report.totals.total_money_requested.EGP, Decimal("500"))
        self.assertEqual(report.totals.net_money.as_dict(), {"EGP": Decimal("200"), "GBP": Decimal("-50")})

    def test_filters_by_phase_payer_and_search(self):
        Apartment.objects.create(name="B", village=self.village, phase=2, owner=self.renter)
        self.add_payment("20.00", date(2024, 5, 1), user_type="renter")

        self.assertEqual(len(self.reporter.report(year_filters(2024, phase=2)).summary), 1)
        self.assertEqual(
            [row.apartment_name for row in self.reporter.report(year_filters(2024, search="olivia")).summary],
            ["A"],
        )
        renter_report = self.reporter.report(year_filters(2024, user_type="renter"))
        self.assertEqual(renter_report.totals.total_money_spent.EGP, Decimal("20.00"))
        self.assertTrue(renter_report.totals.total_money_requested.is_zero())

    def test_previous_years_total_is_disjoint_from_report(self):
        self.add_payment("100.00", date(2023, 12, 31))
        self.add_payment("7.00", date(2024, 1, 1))

        carry_in = self.reporter.previous_years_total(2024)
        report = self.reporter.report(year_filters(2024))

        self.assertEqual(carry_in.total_money_spent.EGP, Decimal("100.00"))
        self.assertEqual(report.totals.total_money_spent.EGP, Decimal("307.00"))

    def test_unknown_village_raises_does_not_exist(self):
        with self.assertRaises(Village.DoesNotExist):
            self.reporter.report(year_filters(2024, village_id=999999))

    def test_village_outside_scope_is_denied(self):
        other_village = Village.objects.create(name="W")
        reporter = PortfolioBillReporter(scope=AccessScope.restricted_to([self.village.pk]))

        with self.assertRaises(PermissionDenied):
            reporter.report(year_filters(2024, village_id=other_village.pk))

    def test_cancellation_never_returns_partial_results(self):
        Apartment.objects.create(name="B", village=self.village, phase=1, owner=self.owner)
        calls = []

        def cancel_after_first():
            calls.append(1)
            return len(calls) > 1

        reporter = PortfolioBillReporter(scope=AccessScope.unrestricted(), cancel_check=cancel_after_first)
        with self.assertRaises(ReportCancelled):
            reporter.report(year_filters(2024))

    def test_apartment_detail_lists_newest_first(self):
        same_day = self.add_payment("25.00", date(2024, 3, 15), description="Deposit")
        pool = ServiceType.objects.create(name="Pool")
        self.add_service_request(aware(2024, 2, 1, 9, 0), service_type=pool, notes="heating")

        detail = self.reporter.apartment_detail(self.apartment.pk, year_filters(2024))

        self.assertEqual(
            [(entry.kind, entry.date) for entry in detail.bills],
            [
                (LedgerEntryKind.PAYMENT, date(2024, 3, 15)),
                (LedgerEntryKind.SERVICE_REQUEST, date(2024, 3, 15)),
                (LedgerEntryKind.PAYMENT, date(2024, 3, 1)),
                (LedgerEntryKind.SERVICE_REQUEST, date(2024, 2, 1)),
            ],
        )
        self.assertEqual(detail.bills[0].id, f"payment_{same_day.pk}")
        self.assertEqual(detail.bills[0].description, "Deposit")
        gap = detail.bills[3]
        self.assertIsNone(gap.amount)
        self.assertTrue(gap.pricing_gap)
        self.assertEqual(gap.description, "Pool - heating")
        self.assertEqual(detail.pricing_gaps, [gap.object_id])
        self.assertEqual(detail.totals.total_money_spent.EGP, Decimal("325.00"))
        self.assertEqual(detail.totals.total_money_requested.EGP, Decimal("500.00"))

    def test_apartment_detail_lists_utilities_and_counts_them_when_combined(self):
        UtilityReading.objects.create(
            apartment=self.apartment,
            water_start_reading=Decimal("100"),
            water_end_reading=Decimal("110"),
            start_date=date(2024, 4, 1),
            end_date=date(2024, 5, 1),
        )

        detail = self.reporter.apartment_detail(self.apartment.pk, year_filters(2024))
        self.assertEqual(detail.bills[0].kind, LedgerEntryKind.UTILITY_READING)
        self.assertEqual(detail.bills[0].amount, Decimal("20.00"))
        self.assertFalse(detail.bills[0].in_totals)
        self.assertEqual(detail.totals.total_money_requested.EGP, Decimal("500.00"))

        combined = self.reporter.apartment_detail(
            self.apartment.pk, year_filters(2024, include_utilities=True)
        )
        self.assertEqual(combined.totals.total_money_requested.EGP, Decimal("520.00"))

    def test_apartment_detail_outside_scope_is_denied(self):
        reporter = PortfolioBillReporter(scope=AccessScope.own_records_only(self.renter.pk))
        with self.assertRaises(PermissionDenied):
            reporter.apartment_detail(self.apartment.pk, year_filters(2024))

    def test_user_detail_for_renter_only_contains_renter_charges(self):
        booking = self.add_booking(aware(2024, 6, 1), aware(2024, 6, 10))
        self.add_payment("80.00", date(2024, 6, 2), user_type="renter", booking=booking)
        self.add_service_request(aware(2024, 6, 3, 10, 0), who_pays="renter", booking=booking)

        reporter = PortfolioBillReporter(scope=scope_for(self.renter))
        statement = reporter.user_detail(self.renter.pk, year_filters(2024), actor=self.renter)

        self.assertEqual({entry.payer_role for entry in statement.bills}, {"renter"})
        self.assertEqual(statement.totals.total_money_spent.EGP, Decimal("80.00"))
        self.assertEqual(statement.totals.total_money_requested.EGP, Decimal("500.00"))
        self.assertEqual(statement.bills[0].person_name, "Rami Renter")

    def _share_apartment_with_other_renter(self):
        other = User.objects.create_user(
            username="other-renter", password="pw", name="Other Renter", role=User.Role.RENTER
        )
        own_booking = self.add_booking(aware(2024, 6, 1), aware(2024, 6, 10))
        other_booking = self.add_booking(aware(2024, 7, 1), aware(2024, 7, 10), user=other)
        self.add_payment("80.00", date(2024, 6, 2), user_type="renter", booking=own_booking)
        self.add_payment("999.00", date(2024, 7, 2), user_type="renter", booking=other_booking)
        return other, own_booking, other_booking

    def test_user_detail_for_renter_excludes_other_renters_of_the_apartment(self):
        other, _own_booking, _other_booking = self._share_apartment_with_other_renter()
        self.add_payment("5.00", date(2024, 8, 1), user_type="renter", created_by=other)

        reporter = PortfolioBillReporter(scope=scope_for(self.renter))
        statement = reporter.user_detail(self.renter.pk, year_filters(2024), actor=self.renter)

        self.assertEqual(statement.totals.total_money_spent.EGP, Decimal("80.00"))
        self.assertEqual({entry.person_name for entry in statement.bills}, {"Rami Renter"})
        self.assertEqual({entry.person_id for entry in statement.bills}, {self.renter.pk})

    def test_booking_detail_lists_only_rows_of_the_booking(self):
        _other, own_booking, _other_booking = self._share_apartment_with_other_renter()
        self.add_service_request(aware(2024, 6, 3, 10, 0), who_pays="renter", booking=own_booking)

        statement = self.reporter.booking_detail(own_booking.pk)

        self.assertEqual(
            [entry.kind for entry in statement.bills],
            [LedgerEntryKind.SERVICE_REQUEST, LedgerEntryKind.PAYMENT],
        )
        self.assertEqual({entry.booking_id for entry in statement.bills}, {own_booking.pk})
        self.assertEqual(statement.subject["person_name"], "Rami Renter")
        self.assertEqual(statement.totals.total_money_spent.EGP, Decimal("80.00"))
        self.assertEqual(statement.totals.net_money.EGP, Decimal("420.00"))

    def test_booking_detail_of_another_renter_is_denied(self):
        _other, own_booking, other_booking = self._share_apartment_with_other_renter()
        reporter = PortfolioBillReporter(scope=scope_for(self.renter))

        self.assertEqual(len(reporter.booking_detail(own_booking.pk).bills), 1)
        with self.assertRaises(PermissionDenied):
            reporter.booking_detail(other_booking.pk)
        owner_view = PortfolioBillReporter(scope=scope_for(self.owner)).booking_detail(other_booking.pk)
        self.assertEqual(owner_view.totals.total_money_spent.EGP, Decimal("999.00"))

    def test_unknown_booking_raises_does_not_exist(self):
        with self.assertRaises(Booking.DoesNotExist):
            self.reporter.booking_detail(999999)

    def test_renter_summary_totals_per_renter(self):
        other, own_booking, _other_booking = self._share_apartment_with_other_renter()
        self.add_service_request(aware(2024, 6, 3, 10, 0), who_pays="renter", booking=own_booking)
        self.add_payment("1.00", date(2024, 8, 1), user_type="renter", created_by=other)
        UtilityReading.objects.create(
            apartment=self.apartment,
            booking=own_booking,
            who_pays="renter",
            water_start_reading=Decimal("100"),
            water_end_reading=Decimal("110"),
            start_date=date(2024, 6, 1),
            end_date=date(2024, 6, 10),
        )

        summary = self.reporter.renter_summary(self.apartment.pk)

        self.assertEqual([row.name for row in summary.renters], ["Other Renter", "Rami Renter"])
        other_row, own_row = summary.renters
        self.assertEqual(other_row.totals.total_money_spent.EGP, Decimal("1000.00"))
        self.assertTrue(other_row.totals.total_money_requested.is_zero())
        self.assertEqual(own_row.booking_ids, [own_booking.pk])
        self.assertEqual(own_row.totals.total_money_spent.EGP, Decimal("80.00"))
        self.assertEqual(own_row.totals.total_money_requested.EGP, Decimal("520.00"))
        self.assertEqual(summary.totals.total_money_spent.EGP, Decimal("1080.00"))
        self.assertEqual(summary.totals.total_money_requested.EGP, Decimal("520.00"))

    def test_renter_summary_for_renter_only_shows_their_row(self):
        self._share_apartment_with_other_renter()

        summary = PortfolioBillReporter(scope=scope_for(self.renter)).renter_summary(self.apartment.pk)

        self.assertEqual([row.user_id for row in summary.renters], [self.renter.pk])
        self.assertEqual(summary.totals.total_money_spent.EGP, Decimal("80.00"))

    def test_missing_village_outside_scope_is_denied(self):
        reporter = PortfolioBillReporter(scope=AccessScope.restricted_to([self.village.pk]))

        with self.assertRaises(PermissionDenied):
            reporter.report(year_filters(2024, village_id=999999))

    def test_user_detail_of_someone_else_is_denied(self):
        with self.assertRaises(PermissionDenied):
            PortfolioBillReporter(scope=scope_for(self.renter)).user_detail(
                self.owner.pk, year_filters(2024), actor=self.renter
            )


class BillFilterFormTests(TestCase):
    def test_year_takes_precedence_over_dates(self):
        filters = BillFilterForm({"year": "2023", "date_from": "2024-01-01"}).to_filters()
        self.assertEqual(filters.window, DateWindow.for_year(2023))

    def test_current_year_is_the_default(self):
        filters = BillFilterForm({}).to_filters()
        self.assertEqual(filters.window, DateWindow.for_year(timezone.localdate().year))

    def test_explicit_range(self):
        filters = BillFilterForm(
            {"date_from": "2024-01-01", "date_to": "2024-06-30", "include_utilities": "true"}
        ).to_filters()
        self.assertEqual(filters.window, DateWindow(date(2024, 1, 1), date(2024, 6, 30)))
        self.assertTrue(filters.include_utilities)

    def test_invalid_parameters(self):
        for params in (
            {"date_from": "2024-06-30", "date_to": "2024-01-01"},
            {"user_type": "company"},
            {"village_id": "abc"},
        ):
            with self.subTest(params=params):
                with self.assertRaises(ValidationError):
                    BillFilterForm(params).to_filters()
