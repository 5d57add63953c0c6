import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Notification",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                (
                    "type",
                    models.CharField(
                        max_length=32,
                        choices=[
                            ("MODERATION_APPROVED", "Moderation approved"),
                            ("MODERATION_REJECTED", "Moderation rejected"),
                            ("MODERATION_DELETED", "Moderation deleted"),
                            ("REPORTS_CLEARED", "Reports cleared"),
                            ("COMMENT_HIDDEN", "Comment hidden"),
                            ("COMMENT_RESTORED", "Comment restored"),
                            ("COMMENT_DELETED", "Comment deleted"),
                        ],
                    ),
                ),
                ("title", models.CharField(max_length=200)),
                ("body", models.TextField()),
                ("metadata", models.JSONField(default=dict, blank=True)),
                ("is_read", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("user", models.ForeignKey(to=settings.AUTH_USER_MODEL, on_delete=django.db.models.deletion.CASCADE, db_index=True)),
            ],
            options={
                "db_table": "notifications",
                "indexes": [models.Index(fields=["user", "is_read", "-created_at"], name="notif_user_read_created_idx")],
            },
        ),
    ]
