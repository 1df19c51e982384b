"""ローカルSQLiteのアーカイブDBをホストとして扱うアダプタ.

ホストプロセスを介さずに、手元のDBファイルに対してマージ計画の作成・適用を行うためのものです。

スキーマ:
    TAGS(tag_id, namespace, name)
    TAG_TRANSLATIONS(tag_id, language, translation)
    ARCHIVE_TAGS(archive_id, tag_id)
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

from loguru import logger

from ..core.exceptions import HostCallError
from .base_host import BaseHost, TagsPage

SCHEMA_SQL = [
    """
    CREATE TABLE IF NOT EXISTS TAGS (
        tag_id INTEGER NOT NULL PRIMARY KEY,
        namespace TEXT NOT NULL DEFAULT '',
        name TEXT NOT NULL,
        UNIQUE(namespace, name)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS TAG_TRANSLATIONS (
        tag_id INTEGER NOT NULL,
        language TEXT NOT NULL,
        translation TEXT NOT NULL,
        PRIMARY KEY (tag_id, language),
        FOREIGN KEY(tag_id) REFERENCES TAGS(tag_id)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS ARCHIVE_TAGS (
        archive_id TEXT NOT NULL,
        tag_id INTEGER NOT NULL,
        PRIMARY KEY (archive_id, tag_id),
        FOREIGN KEY(tag_id) REFERENCES TAGS(tag_id)
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_archive_tags_tag ON ARCHIVE_TAGS(tag_id);",
]


def create_archive_database(db_path: Path | str) -> None:
    """アーカイブDBのスキーマを作成する（既存テーブルはそのまま）."""
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    try:
        for sql in SCHEMA_SQL:
            conn.execute(sql)
        conn.commit()
    finally:
        conn.close()


class SqliteTagHost(BaseHost):
    """SQLiteファイル上で tags.list / tags.merge を実行するホスト.

    Args:
        db_path: アーカイブDBのパス

    Raises:
        FileNotFoundError: DBファイルが存在しない場合
    """

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path)
        if not self.db_path.exists():
            raise FileNotFoundError(f"Archive DB not found: {self.db_path}")
        self._conn = sqlite3.connect(self.db_path)

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> SqliteTagHost:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def list_tags(self, lang: str, limit: int, offset: int) -> TagsPage:
        try:
            total = self._conn.execute("SELECT COUNT(*) FROM TAGS").fetchone()[0]
            rows = self._conn.execute(
                """
                SELECT t.tag_id, t.namespace, t.name, tr.translation
                FROM TAGS t
                LEFT JOIN TAG_TRANSLATIONS tr ON tr.tag_id = t.tag_id AND tr.language = ?
                ORDER BY t.tag_id
                LIMIT ? OFFSET ?
                """,
                (lang, limit, offset),
            ).fetchall()
        except sqlite3.Error as e:
            raise HostCallError("tags.list", str(e)) from e

        items = []
        for tag_id, namespace, name, translation in rows:
            item = {"id": tag_id, "namespace": namespace, "name": name}
            if translation is not None:
                item["translation_text"] = translation
            items.append(item)

        return {"total": total, "limit": limit, "offset": offset, "items": items}

    def merge_tags(self, source_id: int, target_id: int, delete_source: bool) -> None:
        """source のアーカイブ紐付けと不足している翻訳を target へ移す.

        1トランザクションで実行し、失敗時はこのマージ分だけロールバックします。
        """
        if source_id == target_id:
            raise HostCallError("tags.merge", f"source and target are the same tag: {source_id}")

        conn = self._conn
        try:
            existing = {
                row[0]
                for row in conn.execute(
                    "SELECT tag_id FROM TAGS WHERE tag_id IN (?, ?)", (source_id, target_id)
                ).fetchall()
            }
            missing = [tag_id for tag_id in (source_id, target_id) if tag_id not in existing]
            if missing:
                raise HostCallError("tags.merge", f"tag not found: {missing}")

            with conn:
                conn.execute(
                    """
                    INSERT OR IGNORE INTO ARCHIVE_TAGS (archive_id, tag_id)
                    SELECT archive_id, ? FROM ARCHIVE_TAGS WHERE tag_id = ?
                    """,
                    (target_id, source_id),
                )
                moved = conn.execute("DELETE FROM ARCHIVE_TAGS WHERE tag_id = ?", (source_id,)).rowcount
                # target 側に無い言語の翻訳だけを引き継ぐ
                conn.execute(
                    """
                    INSERT OR IGNORE INTO TAG_TRANSLATIONS (tag_id, language, translation)
                    SELECT ?, language, translation FROM TAG_TRANSLATIONS WHERE tag_id = ?
                    """,
                    (target_id, source_id),
                )
                if delete_source:
                    conn.execute("DELETE FROM TAG_TRANSLATIONS WHERE tag_id = ?", (source_id,))
                    conn.execute("DELETE FROM TAGS WHERE tag_id = ?", (source_id,))
        except sqlite3.Error as e:
            raise HostCallError("tags.merge", str(e)) from e

        logger.debug(f"Merged tag {source_id} -> {target_id} ({moved} archive link(s), delete_source={delete_source})")
