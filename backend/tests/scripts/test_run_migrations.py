"""Tests for the migration runner's planning helpers."""

from run_migrations import MIGRATIONS_DIR, checksum_of, discover_migrations, pending_migrations


def write(directory, name: str, content: str):
    path = directory / name
    path.write_text(content, encoding="utf-8")
    return path


class TestDiscoverMigrations:
    def test_sorted_by_filename(self, tmp_path):
        write(tmp_path, "002_b.sql", "select 2;")
        write(tmp_path, "001_a.sql", "select 1;")
        write(tmp_path, "notes.txt", "ignored")

        migrations = discover_migrations(tmp_path)

        assert [m.name for m in migrations] == ["001_a.sql", "002_b.sql"]
        assert migrations[0].checksum == checksum_of("select 1;")

    def test_missing_directory(self, tmp_path):
        assert discover_migrations(tmp_path / "absent") == []

    def test_shipped_migrations(self):
        names = [m.name for m in discover_migrations(MIGRATIONS_DIR)]
        assert names == ["001_create_users.sql", "002_create_refresh_tokens.sql"]


class TestPendingMigrations:
    def test_splits_pending_and_changed(self, tmp_path):
        write(tmp_path, "001_a.sql", "select 1;")
        write(tmp_path, "002_b.sql", "select 2;")
        write(tmp_path, "003_c.sql", "select 3;")
        available = discover_migrations(tmp_path)
        applied = {
            "001_a.sql": checksum_of("select 1;"),
            "002_b.sql": checksum_of("select 'edited';"),
        }

        pending, changed = pending_migrations(available, applied)

        assert [m.name for m in pending] == ["003_c.sql"]
        assert [m.name for m in changed] == ["002_b.sql"]

    def test_nothing_applied(self, tmp_path):
        write(tmp_path, "001_a.sql", "select 1;")

        pending, changed = pending_migrations(discover_migrations(tmp_path), {})

        assert len(pending) == 1
        assert changed == []
