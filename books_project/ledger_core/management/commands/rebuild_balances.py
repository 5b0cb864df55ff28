from django.core.management.base import BaseCommand

from ledger_core.tasks import recompute_account_balances


class Command(BaseCommand):
    help = "Recompute cached account balances from posted journal lines."

    def add_arguments(self, parser):
        parser.add_argument(
            "--async",
            action="store_true",
            dest="run_async",
            help="Queue the rebuild on the Celery worker instead of running it here.",
        )

    def handle(self, *args, **options):
        if options["run_async"]:
            result = recompute_account_balances.delay()
            self.stdout.write(self.style.NOTICE(f"Queued balance rebuild (task {result.id})"))
            return

        corrected = recompute_account_balances()
        self.stdout.write(self.style.SUCCESS(f"Balances rebuilt, {corrected} account(s) corrected."))
