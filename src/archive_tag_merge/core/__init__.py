"""tag merge のコア処理群.

- 正規化（ホストのレコード → Tag、マッチングキー）
- インデックス（翻訳インデックス、正規候補インデックス）
- マージ計画（候補提案、チェーン解決、フィルタ）と適用
"""

from .applier import apply_merge_plan
from .index import TagIndex, build_tag_index
from .normalize import is_otherlike, normalize_key, normalize_tag_record
from .planner import build_merge_plan, propose_merge_edges, resolve_final_target

__all__ = [
    "normalize_key",
    "normalize_tag_record",
    "is_otherlike",
    "TagIndex",
    "build_tag_index",
    "propose_merge_edges",
    "resolve_final_target",
    "build_merge_plan",
    "apply_merge_plan",
]
