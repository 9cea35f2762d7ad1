from django.core.management.base import BaseCommand, CommandError

from portfolio.models import Apartment
from portfolio.services.utility_costs import find_cost_mismatches


class Command(BaseCommand):
    help = "Compares cached utility costs with consumption times the village unit prices."

    def add_arguments(self, parser):
        parser.add_argument(
            "--apartment",
            type=int,
            help="Optional apartment id to restrict the check to.",
        )
        parser.add_argument(
            "--strict",
            action="store_true",
            help="Exit with an error if any mismatch is found.",
        )

    def handle(self, *args, **options):
        apartment_id = options.get("apartment")
        if apartment_id and not Apartment.objects.filter(pk=apartment_id).exists():
            raise CommandError(f"Apartment {apartment_id} does not exist.")

        mismatches = find_cost_mismatches(apartment_id=apartment_id)
        if not mismatches:
            self.stdout.write(self.style.SUCCESS("All cached utility costs are consistent."))
            return

        for mismatch in mismatches:
            self.stdout.write(
                f"- reading #{mismatch.reading_id} (apartment {mismatch.apartment_id}): "
                f"water {mismatch.cached_water_cost} != {mismatch.expected_water_cost}, "
                f"electricity {mismatch.cached_electricity_cost} != {mismatch.expected_electricity_cost}"
            )
        summary = f"{len(mismatches)} utility reading(s) with diverging cached cost."
        if options.get("strict"):
            raise CommandError(summary)
        self.stdout.write(self.style.WARNING(summary))
