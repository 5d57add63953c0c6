import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

STATUS_CHOICES = [("PENDING", "Pending"), ("APPROVED", "Approved"), ("REJECTED", "Rejected"), ("REPORTED", "Reported")]
ACTOR_CHOICES = [("SYSTEM", "System"), ("USER", "User"), ("ADMIN", "Admin"), ("AUTO", "Auto")]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("regions", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Lettering",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                ("contributor_tag", models.CharField(max_length=30)),
                ("image_url", models.URLField(max_length=500)),
                ("thumbnail_url", models.URLField(max_length=500, blank=True, default="")),
                ("storage_key", models.CharField(max_length=255, blank=True, default="")),
                ("latitude", models.FloatField(null=True, blank=True)),
                ("longitude", models.FloatField(null=True, blank=True)),
                ("pin_code", models.CharField(max_length=6)),
                ("detected_text", models.TextField(blank=True, default="")),
                ("description", models.TextField(blank=True, default="")),
                ("image_hash", models.CharField(max_length=64, unique=True)),
                ("status", models.CharField(max_length=16, choices=STATUS_CHOICES, default="PENDING", db_index=True)),
                ("moderation_reason", models.TextField(null=True, blank=True)),
                ("moderated_by", models.CharField(max_length=255, null=True, blank=True)),
                ("moderated_at", models.DateTimeField(null=True, blank=True)),
                ("report_count", models.PositiveIntegerField(default=0)),
                ("report_reasons", models.JSONField(default=list, blank=True)),
                ("likes_count", models.PositiveIntegerField(default=0)),
                ("comments_count", models.PositiveIntegerField(default=0)),
                ("uploaded_by_ip_hash", models.CharField(max_length=64, null=True, blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("city", models.ForeignKey(to="regions.city", on_delete=django.db.models.deletion.PROTECT, related_name="letterings")),
                # 레거시 익명 업로드는 NULL
                (
                    "user",
                    models.ForeignKey(to=settings.AUTH_USER_MODEL, on_delete=django.db.models.deletion.SET_NULL, null=True, blank=True, related_name="letterings"),
                ),
            ],
            options={
                "db_table": "letterings",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status", "created_at"], name="lettering_status_created_idx"),
                    models.Index(fields=["city", "status"], name="lettering_city_status_idx"),
                    models.Index(fields=["user", "-created_at"], name="lettering_user_created_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="LetteringStatusHistory",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                ("from_status", models.CharField(max_length=16, choices=STATUS_CHOICES, null=True, blank=True)),
                ("to_status", models.CharField(max_length=16, choices=STATUS_CHOICES)),
                ("reason", models.TextField(null=True, blank=True)),
                ("actor_type", models.CharField(max_length=8, choices=ACTOR_CHOICES, default="SYSTEM")),
                ("actor_sub", models.CharField(max_length=255, null=True, blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("lettering", models.ForeignKey(to="letterings.lettering", on_delete=django.db.models.deletion.CASCADE, related_name="status_history")),
            ],
            options={
                "db_table": "lettering_status_history",
                "ordering": ["created_at"],
                "indexes": [models.Index(fields=["lettering", "-created_at"], name="status_hist_lettering_idx")],
            },
        ),
        migrations.CreateModel(
            name="LetteringMetadataHistory",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                (
                    "field_name",
                    models.CharField(max_length=32, choices=[("description", "Description"), ("contributor_tag", "Contributor tag"), ("pin_code", "Pin code")]),
                ),
                ("old_value", models.TextField(null=True, blank=True)),
                ("new_value", models.TextField(null=True, blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("lettering", models.ForeignKey(to="letterings.lettering", on_delete=django.db.models.deletion.CASCADE, related_name="metadata_history")),
                (
                    "edited_by",
                    models.ForeignKey(to=settings.AUTH_USER_MODEL, on_delete=django.db.models.deletion.SET_NULL, null=True, blank=True, related_name="+"),
                ),
            ],
            options={
                "db_table": "lettering_metadata_history",
                "ordering": ["created_at"],
                "indexes": [models.Index(fields=["lettering", "-created_at"], name="meta_hist_lettering_idx")],
            },
        ),
        migrations.CreateModel(
            name="Like",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                ("ip_hash", models.CharField(max_length=64)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("lettering", models.ForeignKey(to="letterings.lettering", on_delete=django.db.models.deletion.CASCADE, related_name="likes")),
            ],
            options={
                "db_table": "likes",
                "constraints": [models.UniqueConstraint(fields=("lettering", "ip_hash"), name="uniq_like_lettering_ip")],
            },
        ),
        migrations.CreateModel(
            name="LocationRevisit",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                ("notes", models.TextField(null=True, blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "original_lettering",
                    models.ForeignKey(to="letterings.lettering", on_delete=django.db.models.deletion.CASCADE, related_name="revisits_as_original"),
                ),
                (
                    "revisit_lettering",
                    models.ForeignKey(to="letterings.lettering", on_delete=django.db.models.deletion.CASCADE, related_name="revisits_as_revisit"),
                ),
            ],
            options={
                "db_table": "location_revisits",
                "ordering": ["-created_at"],
                "constraints": [models.UniqueConstraint(fields=("original_lettering", "revisit_lettering"), name="uniq_location_revisit")],
            },
        ),
    ]
