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
            name="Comment",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                ("content", models.TextField()),
                ("ip_hash", models.CharField(max_length=64, null=True, blank=True)),
                ("status", models.CharField(max_length=8, choices=[("VISIBLE", "Visible"), ("HIDDEN", "Hidden")], default="VISIBLE", db_index=True)),
                ("moderation_score", models.PositiveSmallIntegerField(default=0)),
                ("moderation_flags", models.JSONField(default=list, blank=True)),
                ("auto_flagged", models.BooleanField(default=False)),
                ("needs_review", models.BooleanField(default=False)),
                ("review_priority", models.PositiveSmallIntegerField(default=0)),
                ("moderated_at", models.DateTimeField(null=True, blank=True)),
                ("moderated_by", models.CharField(max_length=255, null=True, blank=True)),
                ("moderation_reason", models.TextField(null=True, blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("lettering", models.ForeignKey(to="letterings.lettering", on_delete=django.db.models.deletion.CASCADE, related_name="comments")),
                (
                    "user",
                    models.ForeignKey(to=settings.AUTH_USER_MODEL, on_delete=django.db.models.deletion.SET_NULL, null=True, blank=True, related_name="comments"),
                ),
            ],
            options={
                "db_table": "comments",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["lettering", "status", "-created_at"], name="comment_lettering_status_idx"),
                    models.Index(fields=["needs_review", "-review_priority"], name="comment_review_queue_idx"),
                ],
            },
        ),
    ]
