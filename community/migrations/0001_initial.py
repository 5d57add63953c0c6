import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("letterings", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Collection",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                ("name", models.CharField(max_length=120)),
                ("description", models.TextField(blank=True, default="")),
                ("creator_tag", models.CharField(max_length=30)),
                ("is_public", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "owner",
                    models.ForeignKey(to=settings.AUTH_USER_MODEL, on_delete=django.db.models.deletion.SET_NULL, null=True, blank=True, related_name="collections"),
                ),
            ],
            options={
                "db_table": "collections",
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["is_public", "-created_at"], name="collection_public_created_idx")],
            },
        ),
        migrations.CreateModel(
            name="CollectionItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("added_at", models.DateTimeField(auto_now_add=True)),
                ("collection", models.ForeignKey(to="community.collection", on_delete=django.db.models.deletion.CASCADE, related_name="items")),
                ("lettering", models.ForeignKey(to="letterings.lettering", on_delete=django.db.models.deletion.CASCADE, related_name="collection_items")),
            ],
            options={
                "db_table": "collection_items",
                "constraints": [models.UniqueConstraint(fields=("collection", "lettering"), name="uniq_collection_lettering")],
            },
        ),
    ]
