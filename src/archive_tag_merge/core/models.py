"""tag merge で扱うレコード型."""

from __future__ import annotations

from dataclasses import dataclass

RULE_TRANSLATION = "translation"
RULE_OTHERLIKE = "otherlike"


@dataclass(frozen=True)
class Tag:
    """ホストから読み込んだタグ1件（正規化済み）.

    Attributes:
        id: ホストが採番した正のタグID
        namespace: 名前空間（空文字または "other" は otherlike）
        name: タグ名
        translation_text: 指定言語の翻訳（無い場合は空文字）
    """

    id: int
    namespace: str
    name: str
    translation_text: str = ""


@dataclass(frozen=True)
class MergeEdge:
    """チェーン解決前のマージ候補（source → target）."""

    source_id: int
    target_id: int
    rule: str


@dataclass(frozen=True)
class MergeEntry:
    """マージ計画の1件。target_id はチェーン解決後の最終的な統合先."""

    source_id: int
    target_id: int
    rule: str

    def to_payload(self) -> dict[str, int]:
        """ホストへ送る形式（camelCase）に変換する."""
        return {"sourceId": self.source_id, "targetId": self.target_id}


@dataclass(frozen=True)
class MergePlan:
    """source_id 昇順に並んだマージ計画.

    Attributes:
        entries: フィルタ済みのマージ計画
        candidates: チェーン解決・フィルタ前に提案されたエッジ数
    """

    entries: tuple[MergeEntry, ...]
    candidates: int

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)
