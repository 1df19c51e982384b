"""マージ候補のインデックス構築.

- 翻訳インデックス: (namespace, 正規化翻訳) → 統合先タグ（同名前空間ルール用）
- 正規候補インデックス: 正規化した name/翻訳 → タグIDの集合（otherlike 吸収ルール用）

otherlike（空文字 / "other"）のタグはどちらにも登録しません。
otherlike タグはマージ元にはなるが、マージ先にはならないためです。
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum

from .models import Tag
from .normalize import is_otherlike, normalize_key


class SlotState(str, Enum):
    """翻訳キーの状態."""

    UNSET = "unset"
    RESOLVED = "resolved"
    AMBIGUOUS = "ambiguous"


@dataclass(frozen=True)
class TranslationSlot:
    state: SlotState
    tag_id: int | None = None


UNSET_SLOT = TranslationSlot(SlotState.UNSET)
AMBIGUOUS_SLOT = TranslationSlot(SlotState.AMBIGUOUS)


class TranslationIndex:
    """(namespace, 正規化翻訳) → TranslationSlot.

    同じキーに別のタグIDが現れた時点で AMBIGUOUS になり、以後は戻りません。
    同じIDの重複登録は RESOLVED のまま維持します。
    """

    def __init__(self) -> None:
        self._slots: dict[tuple[str, str], TranslationSlot] = {}

    def add(self, namespace: str, key: str, tag_id: int) -> None:
        slot_key = (namespace, key)
        current = self._slots.get(slot_key, UNSET_SLOT)

        if current.state is SlotState.UNSET:
            self._slots[slot_key] = TranslationSlot(SlotState.RESOLVED, tag_id)
        elif current.state is SlotState.RESOLVED and current.tag_id != tag_id:
            self._slots[slot_key] = AMBIGUOUS_SLOT

    def slot(self, namespace: str, key: str) -> TranslationSlot:
        return self._slots.get((namespace, key), UNSET_SLOT)

    def lookup(self, namespace: str, key: str) -> int | None:
        """統合先に使えるタグIDを返す（未登録・曖昧なら None）."""
        slot = self.slot(namespace, key)
        if slot.state is SlotState.RESOLVED:
            return slot.tag_id
        return None

    def ambiguous_keys(self) -> list[tuple[str, str]]:
        return [k for k, slot in self._slots.items() if slot.state is SlotState.AMBIGUOUS]

    def __len__(self) -> int:
        return len(self._slots)


class CandidateIndex:
    """正規化文字列 → その文字列を持つ非 otherlike タグIDの集合."""

    def __init__(self) -> None:
        self._candidates: dict[str, set[int]] = {}

    def add(self, key: str, tag_id: int) -> None:
        self._candidates.setdefault(key, set()).add(tag_id)

    def unique(self, key: str) -> int | None:
        """候補がちょうど1件の場合のみ、そのIDを返す."""
        ids = self._candidates.get(key)
        if not ids or len(ids) != 1:
            return None
        return next(iter(ids))

    def as_dict(self) -> dict[str, frozenset[int]]:
        return {k: frozenset(v) for k, v in self._candidates.items()}

    def __len__(self) -> int:
        return len(self._candidates)


class TagIndex:
    """ロード中のタグを逐次登録するインデックスビルダー.

    Attributes:
        translations: 同名前空間ルール用の翻訳インデックス
        candidates: otherlike 吸収ルール用の正規候補インデックス
        namespaces: タグID → 名前空間（otherlike → otherlike の除外判定に使う）
    """

    def __init__(self) -> None:
        self.translations = TranslationIndex()
        self.candidates = CandidateIndex()
        self.namespaces: dict[int, str] = {}

    def add(self, tag: Tag) -> None:
        self.namespaces[tag.id] = tag.namespace

        if is_otherlike(tag.namespace):
            return

        name_key = normalize_key(tag.name)
        if name_key:
            self.candidates.add(name_key, tag.id)

        translation_key = normalize_key(tag.translation_text)
        if translation_key:
            self.candidates.add(translation_key, tag.id)
            self.translations.add(tag.namespace, translation_key, tag.id)

    def extend(self, tags: Iterable[Tag]) -> None:
        for tag in tags:
            self.add(tag)

    def namespace_of(self, tag_id: int) -> str:
        return self.namespaces.get(tag_id, "")


def build_tag_index(tags: Iterable[Tag]) -> TagIndex:
    """タグ一覧からインデックスを構築する."""
    index = TagIndex()
    index.extend(tags)
    return index


def iter_ambiguous_candidates(index: TagIndex) -> Iterator[tuple[str, frozenset[int]]]:
    """候補が複数ある（otherlike 吸収を抑止する）キーを列挙する."""
    for key, ids in index.candidates.as_dict().items():
        if len(ids) > 1:
            yield key, ids
