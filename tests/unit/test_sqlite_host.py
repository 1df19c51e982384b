"""Unit tests for the local SQLite archive host."""

import sqlite3
from pathlib import Path

import pytest

from archive_tag_merge.adapters.sqlite_host import SqliteTagHost, create_archive_database
from archive_tag_merge.core.exceptions import HostCallError


def _create_archive_db(db_path: Path) -> None:
    create_archive_database(db_path)
    conn = sqlite3.connect(db_path)
    try:
        conn.executemany(
            "INSERT INTO TAGS (tag_id, namespace, name) VALUES (?, ?, ?)",
            [(1, "artist", "Foo"), (2, "artist", "Bar"), (3, "other", "Foo")],
        )
        conn.executemany(
            "INSERT INTO TAG_TRANSLATIONS (tag_id, language, translation) VALUES (?, ?, ?)",
            [(1, "zh", "Bar"), (1, "ja", "フー"), (2, "en", "bar"), (3, "ja", "ふー")],
        )
        conn.executemany(
            "INSERT INTO ARCHIVE_TAGS (archive_id, tag_id) VALUES (?, ?)",
            [("a1", 1), ("a1", 2), ("a2", 2), ("a3", 3)],
        )
        conn.commit()
    finally:
        conn.close()


@pytest.fixture
def archive_db(tmp_path: Path) -> Path:
    db_path = tmp_path / "archive.db"
    _create_archive_db(db_path)
    return db_path


class TestListTags:
    """SqliteTagHost.list_tagsのテスト."""

    def test_page_with_translations(self, archive_db: Path) -> None:
        with SqliteTagHost(archive_db) as host:
            page = host.list_tags("zh", 2, 0)

        assert page["total"] == 3
        assert page["items"] == [
            {"id": 1, "namespace": "artist", "name": "Foo", "translation_text": "Bar"},
            {"id": 2, "namespace": "artist", "name": "Bar"},
        ]

    def test_offset(self, archive_db: Path) -> None:
        with SqliteTagHost(archive_db) as host:
            page = host.list_tags("ja", 2, 2)

        assert page["offset"] == 2
        assert page["items"] == [{"id": 3, "namespace": "other", "name": "Foo", "translation_text": "ふー"}]

    def test_missing_db(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="Archive DB not found"):
            SqliteTagHost(tmp_path / "missing.db")


class TestMergeTags:
    """SqliteTagHost.merge_tagsのテスト."""

    def test_merge_moves_links_and_translations(self, archive_db: Path) -> None:
        with SqliteTagHost(archive_db) as host:
            host.merge_tags(2, 1, delete_source=True)

        conn = sqlite3.connect(archive_db)
        try:
            links = conn.execute("SELECT archive_id, tag_id FROM ARCHIVE_TAGS ORDER BY archive_id").fetchall()
            assert links == [("a1", 1), ("a2", 1), ("a3", 3)]

            assert conn.execute("SELECT COUNT(*) FROM TAGS WHERE tag_id = 2").fetchone()[0] == 0

            translations = conn.execute(
                "SELECT language, translation FROM TAG_TRANSLATIONS WHERE tag_id = 1 ORDER BY language"
            ).fetchall()
            # target に無い en だけ引き継ぐ
            assert translations == [("en", "bar"), ("ja", "フー"), ("zh", "Bar")]
            assert conn.execute("SELECT COUNT(*) FROM TAG_TRANSLATIONS WHERE tag_id = 2").fetchone()[0] == 0
        finally:
            conn.close()

    def test_merge_keeps_source(self, archive_db: Path) -> None:
        with SqliteTagHost(archive_db) as host:
            host.merge_tags(3, 1, delete_source=False)

        conn = sqlite3.connect(archive_db)
        try:
            assert conn.execute("SELECT COUNT(*) FROM TAGS WHERE tag_id = 3").fetchone()[0] == 1
            assert conn.execute("SELECT COUNT(*) FROM ARCHIVE_TAGS WHERE tag_id = 3").fetchone()[0] == 0
            assert conn.execute("SELECT COUNT(*) FROM ARCHIVE_TAGS WHERE tag_id = 1").fetchone()[0] == 2
        finally:
            conn.close()

    def test_unknown_tag(self, archive_db: Path) -> None:
        with SqliteTagHost(archive_db) as host:
            with pytest.raises(HostCallError, match="tag not found"):
                host.merge_tags(2, 99, delete_source=True)

    def test_self_merge_rejected(self, archive_db: Path) -> None:
        with SqliteTagHost(archive_db) as host:
            with pytest.raises(HostCallError, match="same tag"):
                host.merge_tags(1, 1, delete_source=True)
