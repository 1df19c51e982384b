"""共通フィクスチャ（メモリ上のホストとイベント送信先）."""

from __future__ import annotations

from typing import Any

import pytest

from archive_tag_merge.adapters.base_host import BaseHost
from archive_tag_merge.core.exceptions import HostCallError
from archive_tag_merge.reporting import PluginReporter


class FakeHost(BaseHost):
    """tags.list / tags.merge の呼び出しを記録するメモリ上のホスト."""

    def __init__(
        self,
        items: list[dict[str, Any]],
        total: int | None = None,
        fail_list_at: int | None = None,
        fail_merge_at: int | None = None,
    ) -> None:
        self.items = items
        self.total = len(items) if total is None else total
        self.fail_list_at = fail_list_at
        self.fail_merge_at = fail_merge_at
        self.list_calls: list[tuple[str, int, int]] = []
        self.merge_calls: list[tuple[int, int, bool]] = []

    def list_tags(self, lang: str, limit: int, offset: int) -> dict[str, Any]:
        self.list_calls.append((lang, limit, offset))
        if self.fail_list_at is not None and offset == self.fail_list_at:
            raise HostCallError("tags.list", f"connection reset at offset {offset}")
        return {
            "total": self.total,
            "limit": limit,
            "offset": offset,
            "items": self.items[offset : offset + limit],
        }

    def merge_tags(self, source_id: int, target_id: int, delete_source: bool) -> None:
        if self.fail_merge_at is not None and len(self.merge_calls) == self.fail_merge_at:
            raise HostCallError("tags.merge", f"tag {source_id} is locked")
        self.merge_calls.append((source_id, target_id, delete_source))


class RecordingSink:
    """送られたイベントを保持する."""

    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []

    def send(self, message: dict[str, Any]) -> None:
        self.messages.append(message)

    def of_type(self, event_type: str) -> list[dict[str, Any]]:
        return [m for m in self.messages if m["type"] == event_type]


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def reporter(sink: RecordingSink) -> PluginReporter:
    return PluginReporter(sink)


def make_item(tag_id: Any, namespace: str, name: str, translation: str | None = None) -> dict[str, Any]:
    item: dict[str, Any] = {"id": tag_id, "namespace": namespace, "name": name}
    if translation is not None:
        item["translation_text"] = translation
    return item
