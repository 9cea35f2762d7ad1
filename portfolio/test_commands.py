from datetime import date
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from .models import PaymentMethod, UtilityReading
from .testing import PortfolioDataMixin, aware


class CheckUtilityCostsCommandTests(PortfolioDataMixin, TestCase):
    def setUp(self):
        self.create_portfolio()
        self.reading = UtilityReading.objects.create(
            apartment=self.apartment,
            water_start_reading=Decimal("100"),
            water_end_reading=Decimal("110"),
            start_date=date(2024, 1, 1),
            end_date=date(2024, 2, 1),
        )

    def test_consistent_cache(self):
        output = StringIO()
        call_command("check_utility_costs", stdout=output)
        self.assertIn("consistent", output.getvalue())

    def test_lists_diverging_readings(self):
        self.village.water_price = Decimal("3.00")
        self.village.save()

        output = StringIO()
        with self.assertLogs("portfolio.services.utility_costs", level="WARNING"):
            call_command("check_utility_costs", "--apartment", str(self.apartment.pk), stdout=output)

        self.assertIn(f"reading #{self.reading.pk}", output.getvalue())
        self.assertIn("20.00 != 30.00", output.getvalue())

    def test_strict_mode_fails_on_divergence(self):
        UtilityReading.objects.filter(pk=self.reading.pk).update(water_cost=Decimal("1.00"))

        with self.assertRaises(CommandError):
            call_command("check_utility_costs", "--strict", stdout=StringIO())

    def test_unknown_apartment(self):
        with self.assertRaises(CommandError):
            call_command("check_utility_costs", "--apartment", "999999", stdout=StringIO())


class BillReportCommandTests(PortfolioDataMixin, TestCase):
    def setUp(self):
        self.create_portfolio()
        self.add_payment("300.00", date(2024, 3, 1))
        self.add_payment("100.00", date(2023, 6, 1))
        self.add_service_request(aware(2024, 3, 15, 12, 0))

    def test_prints_rows_totals_and_carry_in(self):
        output = StringIO()
        call_command("bill_report", "--year", "2024", stdout=output)

        text = output.getvalue()
        self.assertIn("Bill report 2024: 1 apartment(s)", text)
        self.assertIn("V / A (Olivia Owner)", text)
        self.assertIn("Total spent: 300.00 EGP, 0.00 GBP", text)
        self.assertIn("Net: 200.00 EGP, 0.00 GBP", text)
        self.assertIn("Carried in from before 2024: -100.00 EGP, 0.00 GBP", text)

    def test_unknown_village(self):
        with self.assertRaises(CommandError):
            call_command("bill_report", "--year", "2024", "--village", "999999", stdout=StringIO())


class SeedPaymentMethodsMigrationTests(TestCase):
    def test_default_payment_methods_exist(self):
        self.assertTrue(
            set(PaymentMethod.objects.values_list("name", flat=True))
            >= {"Cash", "Bank transfer", "Credit card"}
        )
