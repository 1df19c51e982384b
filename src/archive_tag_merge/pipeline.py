"""tag merge の実行（オーケストレーター）.

Load → Index → Plan → (dry-run: 報告のみ) / (apply: 計画順に tags.merge) の順に処理します。
結果の送出は成功・失敗どちらの経路でも最後の1回だけです。
"""

from __future__ import annotations

from typing import Any

from loguru import logger

from .adapters.base_host import BaseHost
from .config import MergeConfig
from .core.applier import apply_merge_plan
from .core.index import TagIndex, iter_ambiguous_candidates
from .core.planner import build_merge_plan
from .core.report import export_merge_plan_report, plan_preview
from .loader import load_tag_catalog
from .reporting import PluginReporter

PLAN_PROGRESS = 65


def run_tag_merge(host: BaseHost, config: MergeConfig, reporter: PluginReporter) -> dict[str, Any]:
    """重複タグのマージを1回実行する.

    Args:
        host: tags.list / tags.merge を提供するホスト
        config: 実行設定
        reporter: 進捗・ログ・データの送出先

    Returns:
        結果データ（dry_run, total_tags, planned_merges, 適用時は applied_merges）

    Raises:
        HostCallError / HostProtocolError: タグ一覧の取得に失敗した場合
        MergeApplyError: マージの適用に失敗した場合
    """
    reporter.log_info("tag_merge started", config.as_log_data())

    index = TagIndex()
    tags = load_tag_catalog(host, config.lang, config.page_size, reporter=reporter, index=index)

    reporter.progress(PLAN_PROGRESS, f"Building merge plan (tags={len(tags)})")
    plan = build_merge_plan(tags, index)

    ambiguous_translations = len(index.translations.ambiguous_keys())
    ambiguous_candidates = sum(1 for _ in iter_ambiguous_candidates(index))
    if ambiguous_translations or ambiguous_candidates:
        logger.warning(
            f"Ambiguous keys suppressed merges: {ambiguous_translations} translation key(s), "
            f"{ambiguous_candidates} candidate name(s)"
        )

    reporter.log_info("merge plan built", {"candidates": plan.candidates, "merges": len(plan)})
    reporter.emit_data("merge_plan", plan_preview(plan.entries))

    if config.report_dir is not None:
        export_merge_plan_report(plan.entries, tags, config.report_dir)

    if config.dry_run:
        return {"dry_run": True, "total_tags": len(tags), "planned_merges": len(plan)}

    applied = apply_merge_plan(
        host,
        plan.entries,
        delete_source=config.delete_source,
        max_merges=config.max_merges,
        reporter=reporter,
    )
    return {
        "dry_run": False,
        "total_tags": len(tags),
        "planned_merges": len(plan),
        "applied_merges": applied,
    }


def execute(host: BaseHost, config: MergeConfig, reporter: PluginReporter) -> bool:
    """run_tag_merge を実行し、結果を1件の result イベントとして送る.

    Returns:
        成功した場合 True
    """
    try:
        data = run_tag_merge(host, config, reporter)
    except Exception as e:
        logger.exception(f"tag_merge failed: {e}")
        reporter.output_result(False, error=str(e))
        return False

    reporter.output_result(True, data)
    return True
