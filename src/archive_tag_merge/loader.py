"""タグカタログのロード（tags.list のページング）.

最初のページの total を終了条件として、offset 0 から page_size ずつ順番に取得します。
ページ取得の失敗はリトライせず、そのまま実行全体の失敗になります。
"""

from __future__ import annotations

from loguru import logger

from .adapters.base_host import BaseHost, TagsPage
from .core.exceptions import HostProtocolError
from .core.index import TagIndex
from .core.models import Tag
from .core.normalize import normalize_tag_record
from .reporting import PluginReporter

# ロードは全体進捗の 0〜60% に割り当てる
LOAD_PROGRESS_CAP = 60


def _page_items(page: TagsPage) -> list:
    if not isinstance(page, dict):
        raise HostProtocolError(f"tags.list page must be an object, got {type(page).__name__}")
    items = page.get("items")
    if items is None:
        return []
    if not isinstance(items, list):
        raise HostProtocolError(f"tags.list items must be a list, got {type(items).__name__}")
    return items


def _page_total(page: TagsPage) -> int:
    try:
        return max(0, int(page.get("total") or 0))
    except (TypeError, ValueError) as e:
        raise HostProtocolError(f"tags.list total is not a number: {page.get('total')!r}") from e


def load_tag_catalog(
    host: BaseHost,
    lang: str,
    page_size: int,
    reporter: PluginReporter | None = None,
    index: TagIndex | None = None,
) -> list[Tag]:
    """ホストから全タグを読み込む.

    Args:
        host: tags.list を提供するホスト
        lang: translation_text の言語コード
        page_size: 1ページの件数
        reporter: 進捗の報告先
        index: 指定した場合、読み込んだタグを逐次登録する

    Returns:
        正規化済みタグ（カタログ順、IDは一意）

    Raises:
        HostCallError: ページ取得に失敗した場合
        HostProtocolError: ページの形式が不正な場合
    """
    tags: list[Tag] = []
    seen_ids: set[int] = set()
    skipped_invalid = 0
    skipped_duplicate = 0

    def ingest(items: list) -> None:
        nonlocal skipped_invalid, skipped_duplicate
        for item in items:
            tag = normalize_tag_record(item)
            if tag is None:
                skipped_invalid += 1
                continue
            if tag.id in seen_ids:
                skipped_duplicate += 1
                continue
            seen_ids.add(tag.id)
            tags.append(tag)
            if index is not None:
                index.add(tag)

    first = host.list_tags(lang, page_size, 0)
    ingest(_page_items(first))
    total = _page_total(first)
    offset = page_size

    while offset < total:
        if reporter is not None:
            reporter.progress(
                min(LOAD_PROGRESS_CAP, (offset * LOAD_PROGRESS_CAP) // max(1, total)),
                f"Loading tags {offset}/{total}",
            )
        page = host.list_tags(lang, page_size, offset)
        ingest(_page_items(page))
        offset += page_size

    if skipped_invalid or skipped_duplicate:
        logger.debug(f"Skipped {skipped_invalid} invalid and {skipped_duplicate} duplicate tag record(s)")
    logger.info(f"Loaded {len(tags)} tags (reported total={total}, lang={lang})")
    return tags
