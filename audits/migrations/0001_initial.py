import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                ("actor", models.CharField(max_length=255, db_index=True)),
                ("action", models.CharField(max_length=48, db_index=True)),
                # 삭제된 레터링도 추적하므로 FK가 아니다
                ("lettering_id", models.UUIDField(null=True, blank=True, db_index=True)),
                ("target_type", models.CharField(max_length=32, blank=True, default="")),
                ("target_id", models.CharField(max_length=64, blank=True, default="")),
                ("ip_hash", models.CharField(max_length=64, null=True, blank=True)),
                ("ua_hash", models.CharField(max_length=64, null=True, blank=True)),
                ("metadata", models.JSONField(default=dict, blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                (
                    "user",
                    models.ForeignKey(to=settings.AUTH_USER_MODEL, on_delete=django.db.models.deletion.SET_NULL, null=True, blank=True, related_name="audit_logs"),
                ),
            ],
            options={
                "db_table": "admin_audit_logs",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["action", "-created_at"], name="audit_action_created_idx"),
                    models.Index(fields=["lettering_id", "-created_at"], name="audit_lettering_created_idx"),
                    models.Index(fields=["target_type", "target_id"], name="audit_target_idx"),
                ],
            },
        ),
    ]
