"""
Management command to load the 32 Dominican provinces.

Safe to run repeatedly: existing provinces are matched by code and
their names refreshed.

Usage:
    python manage.py seed_provinces
    python manage.py seed_provinces --dry-run
"""

from django.core.management.base import BaseCommand
from django.db import transaction

from apps.core.dominican import DR_PROVINCES, slugify_es
from apps.core.models import Province


class Command(BaseCommand):
    help = 'Create or update the Dominican Republic provinces'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would change without writing'
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        existing = {p.code: p for p in Province.objects.all()}

        created = 0
        updated = 0

        with transaction.atomic():
            for code, name in DR_PROVINCES:
                slug = slugify_es(name)
                province = existing.get(code)

                if province is None:
                    created += 1
                    self.stdout.write(f"  + {code} {name}")
                    if not dry_run:
                        Province.objects.create(code=code, name=name, slug=slug)
                elif province.name != name or province.slug != slug:
                    updated += 1
                    self.stdout.write(f"  ~ {code} {province.name} -> {name}")
                    if not dry_run:
                        province.name = name
                        province.slug = slug
                        province.save(update_fields=['name', 'slug', 'updated_at'])

        prefix = '[dry-run] ' if dry_run else ''
        self.stdout.write(self.style.SUCCESS(
            f"{prefix}Provinces: {created} created, {updated} updated, "
            f"{len(DR_PROVINCES) - created - updated} unchanged"
        ))
