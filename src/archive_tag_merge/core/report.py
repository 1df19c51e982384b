"""マージ計画の出力（プレビュー / CSVレポート）.

ホストへ送るプレビューは件数を絞り、全件は任意で CSV として出力します。
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path

import polars as pl
from loguru import logger

from .models import MergeEntry, Tag

PREVIEW_LIMIT = 200

REPORT_SCHEMA = {
    "source_id": pl.Int64,
    "source_namespace": pl.String,
    "source_name": pl.String,
    "target_id": pl.Int64,
    "target_namespace": pl.String,
    "target_name": pl.String,
    "rule": pl.String,
}


def plan_preview(entries: Sequence[MergeEntry], limit: int = PREVIEW_LIMIT) -> dict[str, object]:
    """merge_plan イベント用のプレビューを作る.

    Returns:
        {"merges": 先頭 limit 件, "total": 全件数}
    """
    return {
        "merges": [entry.to_payload() for entry in entries[:limit]],
        "total": len(entries),
    }


def merge_plan_frame(entries: Sequence[MergeEntry], tags: Iterable[Tag]) -> pl.DataFrame:
    """マージ計画にタグ名を付けた DataFrame を作る."""
    by_id = {tag.id: tag for tag in tags}

    def _describe(tag_id: int) -> tuple[str | None, str | None]:
        tag = by_id.get(tag_id)
        if tag is None:
            return None, None
        return tag.namespace, tag.name

    rows = []
    for entry in entries:
        source_ns, source_name = _describe(entry.source_id)
        target_ns, target_name = _describe(entry.target_id)
        rows.append(
            {
                "source_id": entry.source_id,
                "source_namespace": source_ns,
                "source_name": source_name,
                "target_id": entry.target_id,
                "target_namespace": target_ns,
                "target_name": target_name,
                "rule": entry.rule,
            }
        )

    return pl.DataFrame(rows, schema=REPORT_SCHEMA)


def export_merge_plan_report(
    entries: Sequence[MergeEntry],
    tags: Iterable[Tag],
    output_dir: Path | str,
) -> Path | None:
    """マージ計画をCSVファイルとして出力する.

    Args:
        entries: マージ計画
        tags: ロード済みタグ（名前の解決に使う）
        output_dir: 出力ディレクトリ

    Returns:
        出力した merge_plan.csv のパス（計画が空なら None）
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    if not entries:
        return None

    report_path = output_dir / "merge_plan.csv"
    merge_plan_frame(entries, tags).write_csv(report_path)
    logger.info(f"Merge plan report: {report_path} ({len(entries)} merges)")
    return report_path
