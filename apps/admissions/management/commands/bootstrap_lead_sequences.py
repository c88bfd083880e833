# admissions/management/commands/bootstrap_lead_sequences.py

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from admissions.models import Lead, SequenceCounter
from admissions.utils import (
    bootstrap_counter, find_highest_sequence, get_counter_key, sequencer_setting,
)


class Command(BaseCommand):
    help = 'Create lead id counters for a year from the ids already issued'

    def add_arguments(self, parser):
        parser.add_argument('--year', type=int, help='Year to bootstrap (defaults to the current year)')
        parser.add_argument(
            '--repair',
            action='store_true',
            help='Raise existing counters that are behind the highest issued id',
        )

    def handle(self, *args, **options):
        year = options.get('year') or timezone.localdate().year
        if year < 2000 or year > 9999:
            raise CommandError(f'Invalid year: {year}')

        prefix = f"{sequencer_setting('LEAD_PREFIX')}-{year}-"
        category_keys = set()
        for lead_id in Lead.objects.filter(lead_id__startswith=prefix).values_list('lead_id', flat=True).iterator():
            category = lead_id[len(prefix):].split('-', 1)[0]
            if category:
                category_keys.add(category)

        if not category_keys:
            self.stdout.write(self.style.WARNING(f'No leads issued for {year}; nothing to bootstrap'))
            return

        self.stdout.write(f'Bootstrapping {len(category_keys)} counter(s) for {year}...')

        for category in sorted(category_keys):
            counter, created = bootstrap_counter(year, category)
            if created:
                self.stdout.write(self.style.SUCCESS(f'  {counter.key}: created at {counter.value}'))
                continue

            highest = find_highest_sequence(year, category)
            if counter.value >= highest:
                self.stdout.write(f'  {counter.key}: already at {counter.value}')
            elif options['repair']:
                SequenceCounter.objects.filter(
                    key=get_counter_key(year, category), value__lt=highest
                ).update(value=highest, updated_at=timezone.now())
                self.stdout.write(self.style.WARNING(f'  {counter.key}: raised {counter.value} -> {highest}'))
            else:
                self.stdout.write(self.style.ERROR(
                    f'  {counter.key}: at {counter.value} but {highest} already issued (use --repair)'
                ))

        self.stdout.write(self.style.SUCCESS('Lead sequences bootstrapped'))
