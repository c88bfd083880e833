# finance/management/commands/reconcile_bank_ledger.py

from django.core.management.base import BaseCommand, CommandError

from finance.stats import reconcile_bank_ledger


class Command(BaseCommand):
    help = 'Replay bank transactions and compare with the live account balance'

    def add_arguments(self, parser):
        parser.add_argument(
            '--fail-on-mismatch',
            action='store_true',
            help='Exit with an error when the ledger is out of balance',
        )

    def handle(self, *args, **options):
        result = reconcile_bank_ledger()

        self.stdout.write(f"Transactions replayed: {result['transactions']}")
        self.stdout.write(
            f"Bank balance:  replayed {result['replayed_bank_balance']}  "
            f"live {result['live_bank_balance']}  difference {result['bank_difference']}"
        )
        self.stdout.write(
            f"Petty cash:    replayed {result['replayed_petty_cash']}  "
            f"live {result['live_petty_cash']}  difference {result['petty_cash_difference']}"
        )

        if result['balanced']:
            self.stdout.write(self.style.SUCCESS('Bank ledger is balanced'))
            return

        message = 'Bank ledger is out of balance'
        if options['fail_on_mismatch']:
            raise CommandError(message)
        self.stdout.write(self.style.ERROR(message))
