"""tag merge の実行設定.

ホストから渡されるパラメータ（文字列のことも多い）を型付きの MergeConfig に変換します。
dry_run は既定で True で、明示的に false を指定しない限りホストのデータを変更しません。
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from .core.exceptions import InvalidParameterError

DEFAULT_LANG = "zh"
DEFAULT_PAGE_SIZE = 1000
MAX_PAGE_SIZE = 2000

_TRUE_STRINGS = {"true", "1", "yes", "on"}
_FALSE_STRINGS = {"false", "0", "no", "off"}

PLUGIN_INFO: dict[str, Any] = {
    "name": "Tag Merge",
    "type": "script",
    "namespace": "tag_merge",
    "author": "archive-tag-merge",
    "version": "1.0",
    "description": "Merge duplicate tags based on translation/name rules.",
    "parameters": [
        {"type": "string", "name": "lang", "desc": "Translation language to use", "default_value": DEFAULT_LANG},
        {
            "type": "int",
            "name": "page_size",
            "desc": "Pagination size for tags.list",
            "default_value": str(DEFAULT_PAGE_SIZE),
        },
        {"type": "bool", "name": "dry_run", "desc": "Only compute merges; do not change DB", "default_value": "true"},
        {"type": "bool", "name": "delete_source", "desc": "Delete source tag after merge", "default_value": "true"},
        {"type": "int", "name": "max_merges", "desc": "Max merges to apply (0 = unlimited)", "default_value": "0"},
    ],
    "cron_enabled": False,
    "cron_expression": "0 3 * * *",
    "cron_priority": 50,
    "cron_timeout_seconds": 3600,
}


def parse_bool(name: str, value: object, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        text = value.strip().lower()
        if not text:
            return default
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    raise InvalidParameterError(name, value, "a boolean")


def parse_int(name: str, value: object, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        raise InvalidParameterError(name, value, "an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return default
        try:
            return int(text)
        except ValueError:
            pass
    raise InvalidParameterError(name, value, "an integer")


@dataclass(frozen=True)
class MergeConfig:
    """tag merge の実行設定.

    Attributes:
        lang: translation_text に使う言語コード
        page_size: tags.list のページサイズ（1..2000）
        dry_run: True なら計画のみ作成し、ホストを変更しない
        delete_source: マージ後に source タグを削除するか
        max_merges: 適用する最大件数（0 = 無制限）
        report_dir: merge_plan.csv の出力先（None なら出力しない）
    """

    lang: str = DEFAULT_LANG
    page_size: int = DEFAULT_PAGE_SIZE
    dry_run: bool = True
    delete_source: bool = True
    max_merges: int = 0
    report_dir: Path | None = None

    @classmethod
    def from_params(cls, params: Mapping[str, Any] | None) -> MergeConfig:
        """ホストのパラメータ辞書から設定を作る.

        Raises:
            InvalidParameterError: 値が解釈できない場合
        """
        if params is None:
            params = {}
        if not isinstance(params, Mapping):
            raise InvalidParameterError("params", params, "an object")

        lang = str(params.get("lang") or "").strip() or DEFAULT_LANG
        page_size = parse_int("page_size", params.get("page_size"), DEFAULT_PAGE_SIZE)
        max_merges = parse_int("max_merges", params.get("max_merges"), 0)
        report_dir = params.get("report_dir")

        return cls(
            lang=lang,
            page_size=min(MAX_PAGE_SIZE, max(1, page_size)),
            dry_run=parse_bool("dry_run", params.get("dry_run"), True),
            delete_source=parse_bool("delete_source", params.get("delete_source"), True),
            max_merges=max(0, max_merges),
            report_dir=Path(report_dir) if report_dir else None,
        )

    def with_overrides(self, **overrides: Any) -> MergeConfig:
        """None 以外の値で上書きした設定を返す（CLI引数の反映用）."""
        values = {k: v for k, v in overrides.items() if v is not None}
        if not values:
            return self
        merged = {
            "lang": self.lang,
            "page_size": self.page_size,
            "dry_run": self.dry_run,
            "delete_source": self.delete_source,
            "max_merges": self.max_merges,
            "report_dir": self.report_dir,
            **values,
        }
        return type(self).from_params(merged)

    def as_log_data(self) -> dict[str, Any]:
        return {
            "lang": self.lang,
            "pageSize": self.page_size,
            "dryRun": self.dry_run,
            "deleteSource": self.delete_source,
            "maxMerges": self.max_merges,
        }


def load_config_file(config_path: Path | str) -> MergeConfig:
    """YAMLファイルから設定を読み込む.

    Raises:
        FileNotFoundError: ファイルが存在しない場合
        ValueError: YAMLのルートがマッピングでない、または値が不正な場合
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        msg = f"Failed to parse config file {config_path}: {e}"
        raise ValueError(msg) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        msg = f"Config file must contain a mapping, got {type(data).__name__}"
        raise ValueError(msg)

    logger.info(f"Loaded tag merge config from {config_path}")
    return MergeConfig.from_params(data)
