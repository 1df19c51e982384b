"""archive-tag-merge: アーカイブ管理ホスト向けの重複タグ統合プラグイン."""

from .config import MergeConfig
from .pipeline import execute, run_tag_merge

__version__ = "1.0.0"

__all__ = [
    "MergeConfig",
    "run_tag_merge",
    "execute",
]
