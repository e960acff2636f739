"""Create the PG document table."""
from __future__ import annotations

from django.db import migrations, models

import apps.listings.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="PGDocument",
            fields=[
                (
                    "id",
                    models.CharField(
                        default=apps.listings.models.generate_document_id,
                        editable=False,
                        max_length=40,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("owner_id", models.CharField(db_index=True, max_length=128)),
                ("data", models.JSONField(default=dict)),
                ("version", models.PositiveIntegerField(default=1)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["owner_id", "-created_at"], name="pgdoc_owner_created_idx")],
            },
        ),
    ]
