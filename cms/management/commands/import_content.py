"""
Load an exported list (JSON array of records) into one of the ordered tables.

Older exports carry the picture under ``photo_url``/``photo``/``image``/
``foto``; the list serializers fold those into ``image_url`` so the
imported rows only use the canonical field.  Existing ``order`` values
are kept; records without one are left unordered and get a position the
next time the list is normalized.
"""
import json

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from cms.errors import CmsError
from cms.services.content import invalidate_public_cache
from cms.services.registry import LISTS, get_list


def _legacy_order(value):
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return None
    return value


class Command(BaseCommand):
    help = "Import a JSON export into an ordered list, consolidating legacy image keys into image_url"

    def add_arguments(self, parser):
        parser.add_argument('kind', choices=sorted(LISTS), help='list to import into')
        parser.add_argument('path', help='JSON file holding an array of records')
        parser.add_argument('--replace', action='store_true', help='delete the current rows first')

    def handle(self, *args, **options):
        try:
            spec = get_list(options['kind'])
        except CmsError as exc:
            raise CommandError(exc.message) from exc

        try:
            with open(options['path'], encoding='utf-8') as fh:
                rows = json.load(fh)
        except (OSError, ValueError) as exc:
            raise CommandError(f"cannot read {options['path']}: {exc}") from exc
        if not isinstance(rows, list):
            raise CommandError("expected a JSON array of records")

        errors = []
        with transaction.atomic():
            if options['replace']:
                deleted, _ = spec.model.objects.all().delete()
                self.stdout.write(f"{spec.kind}: removed {deleted} existing rows")
            created = 0
            for position, row in enumerate(rows, start=1):
                if not isinstance(row, dict):
                    errors.append(f"#{position}: not an object")
                    continue
                serializer = spec.serializer(data=row)
                if not serializer.is_valid():
                    errors.append(f"#{position}: {serializer.errors}")
                    continue
                serializer.save(order=_legacy_order(row.get('order')))
                created += 1
            if errors:
                transaction.set_rollback(True)

        if errors:
            for line in errors:
                self.stderr.write(line)
            raise CommandError(f"{len(errors)} invalid records, nothing imported")
        invalidate_public_cache()
        self.stdout.write(self.style.SUCCESS(f"{spec.kind}: imported {created} records"))
