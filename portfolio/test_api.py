from datetime import date
from decimal import Decimal
from unittest.mock import patch

from django.test import TestCase
from django.urls import reverse

from .models import Apartment, User, Village
from .testing import PortfolioDataMixin, aware


class PortfolioApiTests(PortfolioDataMixin, TestCase):
    def setUp(self):
        self.create_portfolio()
        self.add_payment("300.00", date(2024, 3, 1))
        self.add_service_request(aware(2024, 3, 15, 12, 0))

    def test_unauthenticated_requests_get_401(self):
        response = self.client.get(reverse("portfolio:bill_summary"))

        self.assertEqual(response.status_code, 401)
        self.assertFalse(response.json()["success"])

    def test_bill_summary(self):
        self.client.force_login(self.admin)

        response = self.client.get(reverse("portfolio:bill_summary"), {"year": "2024"})

        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertTrue(payload["success"])
        data = payload["data"]
        self.assertEqual(data["window"], {"date_from": "2024-01-01", "date_to": "2024-12-31"})
        self.assertEqual(len(data["summary"]), 1)
        row = data["summary"][0]
        self.assertEqual(row["apartment_name"], "A")
        self.assertEqual(Decimal(row["total_money_spent"]["EGP"]), Decimal("300"))
        self.assertEqual(Decimal(row["net_money"]["EGP"]), Decimal("200"))
        self.assertEqual(Decimal(data["totals"]["total_money_requested"]["EGP"]), Decimal("500"))
        self.assertEqual(Decimal(data["totals"]["total_money_spent"]["GBP"]), Decimal("0"))

    def test_invalid_parameters_get_400(self):
        self.client.force_login(self.admin)

        response = self.client.get(
            reverse("portfolio:bill_summary"),
            {"date_from": "2024-06-30", "date_to": "2024-01-01"},
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn("date_to", response.json()["errors"])

    def test_unknown_apartment_gets_404(self):
        self.client.force_login(self.admin)

        response = self.client.get(reverse("portfolio:apartment_bills", args=[999999]))

        self.assertEqual(response.status_code, 404)

    def test_apartment_outside_scope_gets_403(self):
        self.client.force_login(self.renter)

        response = self.client.get(reverse("portfolio:apartment_bills", args=[self.apartment.pk]))

        self.assertEqual(response.status_code, 403)

    def test_village_outside_admin_scope_gets_403(self):
        admin = User.objects.create_user(username="village-admin", password="pw", role=User.Role.ADMIN)
        admin.responsible_villages.add(self.village)
        other_village = Village.objects.create(name="W")
        self.client.force_login(admin)

        response = self.client.get(reverse("portfolio:bill_summary"), {"village_id": other_village.pk})

        self.assertEqual(response.status_code, 403)

    def test_cancelled_report_gets_503(self):
        self.client.force_login(self.admin)

        with patch("portfolio.views.request_deadline", return_value=lambda: True):
            response = self.client.get(reverse("portfolio:bill_summary"), {"year": "2024"})

        self.assertEqual(response.status_code, 503)

    def test_apartment_bills_detail(self):
        self.client.force_login(self.owner)

        response = self.client.get(
            reverse("portfolio:apartment_bills", args=[self.apartment.pk]),
            {"year": "2024"},
        )

        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["apartment"]["name"], "A")
        self.assertEqual([bill["kind"] for bill in data["bills"]], ["service_request", "payment"])
        self.assertEqual(data["bills"][0]["description"], "Cleaning")
        self.assertEqual(Decimal(data["bills"][0]["amount"]), Decimal("500"))
        self.assertEqual(Decimal(data["totals"]["net_money"]["EGP"]), Decimal("200"))

    def test_user_bills_of_another_user_get_403(self):
        self.client.force_login(self.renter)

        response = self.client.get(reverse("portfolio:user_bills", args=[self.owner.pk]))

        self.assertEqual(response.status_code, 403)

    def test_previous_years_total(self):
        self.add_payment("100.00", date(2023, 12, 31))
        self.client.force_login(self.admin)

        response = self.client.get(reverse("portfolio:previous_years_total"), {"before_year": "2024"})

        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["before_year"], 2024)
        self.assertEqual(Decimal(data["total_money_spent"]["EGP"]), Decimal("100"))
        self.assertEqual(Decimal(data["total_money_requested"]["EGP"]), Decimal("0"))

    def test_apartment_list_and_detail_show_status(self):
        other_owner = User.objects.create_user(username="other", password="pw", role=User.Role.OWNER)
        Apartment.objects.create(name="Z", village=self.village, phase=1, owner=other_owner)
        self.client.force_login(self.owner)

        response = self.client.get(reverse("portfolio:apartment_list"))

        self.assertEqual(response.status_code, 200)
        self.assertEqual([item["name"] for item in response.json()["data"]], ["A"])
        self.assertEqual(response.json()["data"][0]["status"], "available")

        detail = self.client.get(reverse("portfolio:apartment_detail", args=[self.apartment.pk]))
        self.assertEqual(detail.status_code, 200)
        self.assertIsNone(detail.json()["data"]["current_booking"])

    def test_financial_summary_endpoint(self):
        self.client.force_login(self.owner)

        response = self.client.get(reverse("portfolio:apartment_financial_summary", args=[self.apartment.pk]))

        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(Decimal(data["total_money_spent"]["EGP"]), Decimal("300"))
        self.assertEqual(Decimal(data["total_money_requested"]["EGP"]), Decimal("500"))
        self.assertFalse(data["utility_cost_included"])

    def test_booking_bills(self):
        booking = self.add_booking(aware(2024, 6, 1), aware(2024, 6, 10))
        self.add_payment("80.00", date(2024, 6, 2), user_type="renter", booking=booking)
        self.client.force_login(self.renter)

        response = self.client.get(reverse("portfolio:booking_bills", args=[booking.pk]))

        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["booking"]["id"], booking.pk)
        self.assertEqual([bill["booking_id"] for bill in data["bills"]], [booking.pk])
        self.assertEqual(Decimal(data["totals"]["total_money_spent"]["EGP"]), Decimal("80"))

    def test_booking_bills_of_another_renter_get_403(self):
        other = User.objects.create_user(username="other-renter", password="pw", role=User.Role.RENTER)
        booking = self.add_booking(aware(2024, 7, 1), aware(2024, 7, 10), user=other)
        self.add_booking(aware(2024, 6, 1), aware(2024, 6, 10))
        self.client.force_login(self.renter)

        response = self.client.get(reverse("portfolio:booking_bills", args=[booking.pk]))

        self.assertEqual(response.status_code, 403)

    def test_renter_summary(self):
        booking = self.add_booking(aware(2024, 6, 1), aware(2024, 6, 10))
        self.add_payment("80.00", date(2024, 6, 2), user_type="renter", booking=booking)
        self.client.force_login(self.owner)

        response = self.client.get(
            reverse("portfolio:renter_summary", args=[self.apartment.pk]),
            {"date_from": "2024-01-01"},
        )

        self.assertEqual(response.status_code, 200)
        data = response.json()["data"]
        self.assertEqual(data["window"], {"date_from": "2024-01-01", "date_to": None})
        self.assertEqual(len(data["renters"]), 1)
        self.assertEqual(data["renters"][0]["name"], "Rami Renter")
        self.assertEqual(data["renters"][0]["booking_ids"], [booking.pk])
        self.assertEqual(Decimal(data["totals"]["net_money"]["EGP"]), Decimal("-80"))
