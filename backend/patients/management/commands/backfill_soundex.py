"""
Management command for Soundex backfill.

Usage:
    python manage.py backfill_soundex           # Run inline
    python manage.py backfill_soundex --async   # Queue the Celery task instead
"""

from django.core.management.base import BaseCommand

from patients.services import backfill_soundex
from patients.tasks import backfill_soundex_codes


class Command(BaseCommand):
    help = 'Fill in missing Soundex codes used by similar-patient matching'

    def add_arguments(self, parser):
        parser.add_argument(
            '--async', action='store_true', dest='run_async',
            help='Queue the Celery task instead of running inline',
        )

    def handle(self, *args, **options):
        if options['run_async']:
            result = backfill_soundex_codes.delay()
            self.stdout.write(f"Queued Soundex backfill task {result.id}")
            return

        count = backfill_soundex()
        self.stdout.write(self.style.SUCCESS(f"Backfilled Soundex codes for {count} patient(s)"))
