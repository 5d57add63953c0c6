import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="City",
            fields=[
                ("id", models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, serialize=False)),
                ("name", models.CharField(max_length=120)),
                ("country_code", models.CharField(max_length=2, db_index=True)),
                ("center_lat", models.FloatField(null=True, blank=True)),
                ("center_lng", models.FloatField(null=True, blank=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "db_table": "cities",
                "ordering": ["name"],
                "constraints": [models.UniqueConstraint(fields=("name", "country_code"), name="uniq_city_name_country")],
            },
        ),
        # 행이 없는 국가는 기본 정책(전부 허용)
        migrations.CreateModel(
            name="RegionPolicy",
            fields=[
                ("country_code", models.CharField(max_length=2, primary_key=True, serialize=False)),
                ("uploads_enabled", models.BooleanField(default=True)),
                ("comments_enabled", models.BooleanField(default=True)),
                ("discoverability_enabled", models.BooleanField(default=True, db_index=True)),
                (
                    "auto_moderation_level",
                    models.CharField(max_length=16, choices=[("relaxed", "Relaxed"), ("standard", "Standard"), ("strict", "Strict")], default="standard"),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "region_policies",
                "ordering": ["country_code"],
            },
        ),
    ]
