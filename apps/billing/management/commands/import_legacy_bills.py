"""
Import bills exported from the old system.

The file is a JSON array of bill objects in any of the legacy shapes
(bills, accounts or eid collections).

Usage:
    python manage.py import_legacy_bills bills.json
    python manage.py import_legacy_bills accounts.json --default-category Nercha --dry-run
"""

import json

from django.core.management.base import BaseCommand, CommandError

from apps.billing.models import BillCategory
from apps.billing.services import import_legacy_bills


class Command(BaseCommand):
    help = 'Import legacy bill records from a JSON file'

    def add_arguments(self, parser):
        parser.add_argument('path', help='JSON file with a list of bill records')
        parser.add_argument(
            '--default-category',
            choices=BillCategory.values,
            help='Category for account types listed under several categories (e.g. "Others")',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Validate records without saving anything',
        )

    def handle(self, *args, **options):
        try:
            with open(options['path'], encoding='utf-8') as fh:
                records = json.load(fh)
        except OSError as e:
            raise CommandError(f"Cannot read {options['path']}: {e}")
        except json.JSONDecodeError as e:
            raise CommandError(f"{options['path']} is not valid JSON: {e}")

        if not isinstance(records, list):
            raise CommandError('Expected a JSON array of bill records')

        summary = import_legacy_bills(
            records,
            default_category=options['default_category'],
            dry_run=options['dry_run'],
        )

        for index, message in summary['errors']:
            self.stdout.write(self.style.WARNING(f'  record {index}: {message}'))

        if options['dry_run']:
            self.stdout.write(self.style.WARNING(
                f"\n--dry-run mode: {summary['valid']} valid, {summary['failed']} invalid. No changes made."
            ))
            return

        self.stdout.write(self.style.SUCCESS(
            f"\nImported {summary['imported']} bill(s), "
            f"skipped {summary['skipped']} existing, {summary['failed']} failed."
        ))
