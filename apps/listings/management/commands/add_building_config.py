import logging

from django.conf import settings
from django.core.management.base import BaseCommand

from apps.listings.gateway import DocumentStoreGateway
from apps.listings.services import backfill_configuration

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Add a building configuration to every PG that lacks a layout'

    def add_arguments(self, parser):
        parser.add_argument(
            '--populated',
            action='store_true',
            help='Fill the new rooms with sample students instead of leaving them empty',
        )

    def handle(self, *args, **options):
        populated = options.get('populated', False)
        rooms_per_floor = settings.PG_DEFAULT_ROOMS_PER_FLOOR if populated else 4
        gateway = DocumentStoreGateway()
        updated = skipped = 0

        for document in gateway.fetch_all_properties():
            name = document.data.get('name') or document.id
            result = backfill_configuration(
                gateway,
                document,
                rooms_per_floor=rooms_per_floor,
                populated=populated,
            )
            if result is None:
                self.stdout.write(f'Skipping {name} - already has config')
                skipped += 1
                continue
            self.stdout.write(f'Added building config to: {name}')
            updated += 1

        logger.info(
            'Building configuration backfill (populated=%s): %s updated, %s skipped',
            populated,
            updated,
            skipped,
        )
        self.stdout.write(
            self.style.SUCCESS(f'Updated {updated} PGs with building configuration')
        )
