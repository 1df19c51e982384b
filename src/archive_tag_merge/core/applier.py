"""マージ計画の適用.

計画順（source_id 昇順）に tags.merge を1件ずつ呼び出します。
dry-run の場合はこのモジュールを呼び出さないこと。
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from loguru import logger

from .exceptions import MergeApplyError
from .models import MergeEntry

if TYPE_CHECKING:
    from ..adapters.base_host import BaseHost
    from ..reporting import PluginReporter

# 進捗は毎回ではなく、この件数ごとに報告する
PROGRESS_INTERVAL = 50
PROGRESS_START = 70
PROGRESS_SPAN = 30


def select_merges(entries: Sequence[MergeEntry], max_merges: int) -> list[MergeEntry]:
    """適用するマージを先頭から選ぶ（max_merges <= 0 なら全件）."""
    if max_merges > 0:
        return list(entries[:max_merges])
    return list(entries)


def apply_merge_plan(
    host: BaseHost,
    entries: Sequence[MergeEntry],
    delete_source: bool,
    max_merges: int = 0,
    reporter: PluginReporter | None = None,
) -> int:
    """マージ計画をホストへ適用する.

    Args:
        host: tags.merge を提供するホスト
        entries: source_id 昇順のマージ計画
        delete_source: マージ後に source タグを削除するか
        max_merges: 適用する最大件数（0 = 無制限）
        reporter: 進捗の報告先

    Returns:
        成功したマージ件数

    Raises:
        MergeApplyError: tags.merge が失敗した場合（適用済みの分はロールバックしない）
    """
    to_apply = select_merges(entries, max_merges)
    total = len(to_apply)
    applied = 0

    for entry in to_apply:
        if reporter is not None and applied % PROGRESS_INTERVAL == 0:
            reporter.progress(
                PROGRESS_START + (applied * PROGRESS_SPAN) // max(1, total),
                f"Merging {applied}/{total}",
            )
        try:
            host.merge_tags(entry.source_id, entry.target_id, delete_source)
        except Exception as e:
            raise MergeApplyError(entry, applied, e) from e
        applied += 1

    if reporter is not None:
        reporter.progress(100, f"Merged {applied}/{total}")

    logger.info(f"Applied {applied} merge(s) (delete_source={delete_source})")
    return applied
