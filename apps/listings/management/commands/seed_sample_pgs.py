import logging

from django.core.management.base import BaseCommand

from apps.listings.gateway import DocumentStoreGateway
from apps.listings.samples import SAMPLE_OWNER, SAMPLE_PGS

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Insert the demo PG listings for the sample owner'

    def handle(self, *args, **options):
        gateway = DocumentStoreGateway()
        for fields in SAMPLE_PGS:
            document = gateway.create_property(SAMPLE_OWNER, fields)
            logger.info('Seeded PG %s (%s)', document.id, fields['name'])
            self.stdout.write(f'PG added with ID: {document.id}')

        self.stdout.write(
            self.style.SUCCESS(f'Added {len(SAMPLE_PGS)} sample PGs')
        )
