"""マージ計画の作成.

- ルール1（同名前空間）: tag.name が同じ名前空間の別タグの翻訳と一致 → そのタグへ統合
- ルール2（otherlike 吸収）: otherlike タグの name が非 otherlike タグの name/翻訳と一致し、
  候補がちょうど1件 → そのタグへ統合
- 提案エッジをチェーン解決し、自己マージと otherlike → otherlike を除外して source_id 昇順に並べる
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from loguru import logger

from .index import TagIndex
from .models import RULE_OTHERLIKE, RULE_TRANSLATION, MergeEdge, MergeEntry, MergePlan, Tag
from .normalize import is_otherlike, normalize_key


def propose_merge_edges(tags: Iterable[Tag], index: TagIndex) -> dict[int, MergeEdge]:
    """タグごとに最大1本のマージ候補エッジを提案する.

    Args:
        tags: ロード済みタグ（カタログ順）
        index: 同じタグ一覧から構築したインデックス

    Returns:
        source_id → MergeEdge（提案順を保持）
    """
    edges: dict[int, MergeEdge] = {}

    for tag in tags:
        name_key = normalize_key(tag.name)
        if not name_key:
            continue

        if is_otherlike(tag.namespace):
            target_id = index.candidates.unique(name_key)
            rule = RULE_OTHERLIKE
        else:
            target_id = index.translations.lookup(tag.namespace, name_key)
            rule = RULE_TRANSLATION

        if target_id is None or target_id == tag.id:
            continue
        edges[tag.id] = MergeEdge(source_id=tag.id, target_id=target_id, rule=rule)

    return edges


def resolve_final_target(edges: Mapping[int, MergeEdge], source_id: int) -> int:
    """source_id からエッジを辿り、最終的な統合先を返す.

    訪問済み集合で循環を検出し、再訪を検出した時点で直前のノードを返します。
    source 自身に戻ってくる循環（source が循環の一員）の場合は source_id を返すので、
    呼び出し側の自己マージ除外で落ちます。

    Examples:
        A→B→C→A の循環では A, B, C いずれも自分自身に解決される。
        D→A（A→B→C→A）の場合は D → C（A を再訪する直前のノード）。
    """
    visited = {source_id}
    current = source_id

    while True:
        edge = edges.get(current)
        if edge is None:
            return current
        if edge.target_id == source_id:
            return source_id
        if edge.target_id in visited:
            return current
        visited.add(edge.target_id)
        current = edge.target_id


def build_merge_plan(tags: Iterable[Tag], index: TagIndex) -> MergePlan:
    """ロード済みタグとインデックスからマージ計画を作る.

    Args:
        tags: ロード済みタグ
        index: build_tag_index() / loader が構築したインデックス

    Returns:
        source_id 昇順のマージ計画
    """
    edges = propose_merge_edges(tags, index)

    entries: list[MergeEntry] = []
    dropped_self = 0
    dropped_otherlike = 0

    for source_id, edge in edges.items():
        final_target = resolve_final_target(edges, source_id)
        if final_target == source_id:
            dropped_self += 1
            continue
        if is_otherlike(index.namespace_of(source_id)) and is_otherlike(index.namespace_of(final_target)):
            dropped_otherlike += 1
            continue
        entries.append(MergeEntry(source_id=source_id, target_id=final_target, rule=edge.rule))

    entries.sort(key=lambda e: e.source_id)

    if dropped_self or dropped_otherlike:
        logger.debug(
            f"Dropped {dropped_self} self-merge(s) after chain resolution, "
            f"{dropped_otherlike} otherlike -> otherlike merge(s)"
        )

    return MergePlan(entries=tuple(entries), candidates=len(edges))
