"""
Management command to populate an empty database with the default site content.
"""
from django.core.management.base import BaseCommand
from django.db import transaction

from cms.models import AboutFeature, Faq, Service, SiteSettings
from cms.services import seeds


class Command(BaseCommand):
    help = "Insert default services, FAQs, about features and site texts where the tables are empty"

    def handle(self, *args, **options):
        with transaction.atomic():
            created = {
                'services': self.seed_list(Service, seeds.SERVICES),
                'faqs': self.seed_list(Faq, seeds.FAQS),
                'about-features': self.seed_list(AboutFeature, seeds.ABOUT_FEATURES),
            }
            site, site_created = SiteSettings.objects.get_or_create(pk=1, defaults=seeds.SITE)

        for kind, count in created.items():
            if count:
                self.stdout.write(f"{kind}: created {count}")
            else:
                self.stdout.write(f"{kind}: already populated, skipped")
        self.stdout.write("site settings: created" if site_created else "site settings: kept existing")
        self.stdout.write(self.style.SUCCESS("Seed content ready"))

    def seed_list(self, model, rows) -> int:
        if model.objects.exists():
            return 0
        model.objects.bulk_create([
            model(order=position, **row) for position, row in enumerate(rows, start=1)
        ])
        return len(rows)
