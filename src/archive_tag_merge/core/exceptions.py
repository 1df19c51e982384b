"""Tag merge exceptions.

ホスト呼び出しの失敗やパラメータ不正など、実行全体を失敗させる例外を定義します。
曖昧な翻訳キーやマージ経路の循環はエラーではないため、ここには含めません。
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import MergeEntry


class TagMergeError(Exception):
    """tag merge 処理の基底例外."""


class HostCallError(TagMergeError):
    """ホスト操作（tags.list / tags.merge）が失敗した.

    リトライは行わず、実行全体を失敗として扱います。

    Attributes:
        method: 失敗したホストメソッド名
    """

    def __init__(self, method: str, message: str) -> None:
        self.method = method
        super().__init__(f"Host call failed: {method}: {message}")


class HostProtocolError(TagMergeError):
    """ホストからの応答が想定した形式ではない."""


class MergeApplyError(TagMergeError):
    """マージ適用中にホスト呼び出しが失敗した.

    失敗以前に確定したマージはロールバックしません。件数を残しておくことで、
    どこまで適用済みかを呼び出し側が報告できるようにします。

    Attributes:
        entry: 失敗したマージ
        applied: 失敗までに成功したマージ件数
    """

    def __init__(self, entry: MergeEntry, applied: int, cause: Exception) -> None:
        self.entry = entry
        self.applied = applied
        message = (
            f"Merge {entry.source_id} -> {entry.target_id} failed after {applied} applied merge(s): {cause}"
        )
        super().__init__(message)


class InvalidParameterError(ValueError):
    """プラグインパラメータが解釈できない."""

    def __init__(self, name: str, value: object, expected: str) -> None:
        self.name = name
        self.value = value
        super().__init__(f"Invalid value for parameter '{name}': {value!r} (expected {expected})")
