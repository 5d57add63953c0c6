from io import StringIO

import pytest
from django.core.management import call_command
from django.db import connection


@pytest.mark.django_db
class TestMigrations:
    def test_models_have_no_pending_changes(self):
        out = StringIO()
        # 변경이 있으면 SystemExit(1)
        call_command("makemigrations", "--check", "--dry-run", stdout=out)
        assert "No changes detected" in out.getvalue()

    def test_tables_are_created_by_migrations(self):
        tables = set(connection.introspection.table_names())
        for table in ("users", "cities", "region_policies", "letterings", "location_revisits", "comments", "admin_audit_logs", "notifications", "collections", "collection_items"):
            assert table in tables
