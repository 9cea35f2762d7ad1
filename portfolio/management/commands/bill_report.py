from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from portfolio.models import Currency, Village
from portfolio.services.access_scope import AccessScope
from portfolio.services.bill_report import BillFilters, PortfolioBillReporter
from portfolio.services.ledger import DateWindow


class Command(BaseCommand):
    help = "Prints the bill report of the whole portfolio for one year."

    def add_arguments(self, parser):
        parser.add_argument(
            "--year",
            type=int,
            help="Year (YYYY) of the report. Defaults to the current year.",
        )
        parser.add_argument(
            "--village",
            type=int,
            help="Optional village id.",
        )
        parser.add_argument(
            "--include-utilities",
            action="store_true",
            help="Add utility costs to the requested totals.",
        )

    def handle(self, *args, **options):
        year = options.get("year") or timezone.localdate().year
        filters = BillFilters(
            window=DateWindow.for_year(year),
            village_id=options.get("village"),
            include_utilities=bool(options.get("include_utilities")),
        )
        reporter = PortfolioBillReporter(scope=AccessScope.unrestricted())
        try:
            report = reporter.report(filters)
        except Village.DoesNotExist as exc:
            raise CommandError(str(exc)) from exc
        carry_in = reporter.previous_years_total(year, filters)

        self.stdout.write(f"Bill report {year}: {len(report.summary)} apartment(s)")
        for row in report.summary:
            totals = row.summary.totals
            self.stdout.write(
                f"- {row.village_name} / {row.apartment_name} ({row.owner_name}): "
                f"spent {self._format(totals.total_money_spent)}, "
                f"requested {self._format(totals.total_money_requested)}, "
                f"net {self._format(totals.net_money)}"
            )
        self.stdout.write(f"Total spent: {self._format(report.totals.total_money_spent)}")
        self.stdout.write(f"Total requested: {self._format(report.totals.total_money_requested)}")
        self.stdout.write(f"Net: {self._format(report.totals.net_money)}")
        self.stdout.write(f"Carried in from before {year}: {self._format(carry_in.net_money)}")

        if report.pricing_gaps:
            self.stdout.write(
                self.style.WARNING(
                    f"Unpriced service requests excluded: {', '.join(str(pk) for pk in report.pricing_gaps)}"
                )
            )
        else:
            self.stdout.write(self.style.SUCCESS("Report complete."))

    @staticmethod
    def _format(money_map) -> str:
        return ", ".join(f"{money_map.get(currency)} {currency.value}" for currency in Currency)
