"""タグレコードとマッチングキーの正規化.

ホストの tags.list が返すレコードを Tag に変換し、マッチング用のキーを作る関数群です。

設計方針:
    - マッチングキーは「前後空白の除去 + 小文字化」のみ（アンダースコア置換などはしない）
    - 名前空間は前後空白の除去のみで、大文字小文字はホストの値をそのまま使う
    - 壊れたレコード（IDが無い・数値でない・0以下）は例外にせずスキップする
"""

from __future__ import annotations

import math
from collections.abc import Mapping

from .models import Tag

OTHERLIKE_NAMESPACES = frozenset({"", "other"})


def normalize_key(value: object) -> str:
    """マッチング用の正規化キーを返す.

    Examples:
        >>> normalize_key("  Foo Bar ")
        'foo bar'
        >>> normalize_key(None)
        ''
    """
    return coerce_text(value).lower()


def coerce_text(value: object) -> str:
    """任意の値を前後空白を除いた文字列にする（None は空文字）."""
    if value is None:
        return ""
    return str(value).strip()


def is_otherlike(namespace: str) -> bool:
    """名前空間が otherlike（空文字 or "other"）かどうか."""
    return namespace in OTHERLIKE_NAMESPACES


def coerce_tag_id(value: object) -> int | None:
    """タグIDを正の整数に変換する。変換できなければ None.

    数値文字列（"12"）や整数値の float（12.0）は受け付けます。
    bool・非有限値・小数・0以下は不正IDとして扱います。
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, int):
        tag_id = value
    elif isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            return None
        tag_id = int(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
        if not math.isfinite(number) or not number.is_integer():
            return None
        tag_id = int(number)
    else:
        return None

    return tag_id if tag_id > 0 else None


def normalize_tag_record(record: object) -> Tag | None:
    """tags.list の item 1件を Tag に変換する.

    Args:
        record: ホストから受け取った item（{id, namespace, name, translation_text?}）

    Returns:
        正規化済み Tag。ID が不正、または record が辞書でない場合は None
    """
    if not isinstance(record, Mapping):
        return None

    tag_id = coerce_tag_id(record.get("id"))
    if tag_id is None:
        return None

    return Tag(
        id=tag_id,
        namespace=coerce_text(record.get("namespace")),
        name=coerce_text(record.get("name")),
        translation_text=coerce_text(record.get("translation_text")),
    )
