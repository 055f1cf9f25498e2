from django.core.management.base import BaseCommand, CommandError

from apps.inventory.services import find_ledger_mismatches


class Command(BaseCommand):
    help = "Compare every stock level with the sum of its ledger movements."

    def add_arguments(self, parser):
        parser.add_argument(
            "--fail-on-mismatch",
            action="store_true",
            help="Exit with an error when any stock level disagrees with the ledger.",
        )

    def handle(self, *args, **options):
        mismatches = find_ledger_mismatches()
        if not mismatches:
            self.stdout.write(self.style.SUCCESS("Stock levels match the movement ledger."))
            return

        for row in mismatches:
            self.stdout.write(
                self.style.WARNING(
                    f"product={row['product']} location={row['location']} "
                    f"quantity={row['quantity']} ledger={row['ledger_total']} difference={row['difference']}"
                )
            )
        message = f"{len(mismatches)} stock level(s) disagree with the ledger."
        if options["fail_on_mismatch"]:
            raise CommandError(message)
        self.stdout.write(self.style.ERROR(message))
