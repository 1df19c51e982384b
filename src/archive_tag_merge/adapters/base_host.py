"""ホスト操作の基底クラス.

tag merge がホスト（アーカイブ管理サーバー）に要求する操作は tags.list と tags.merge の2つだけです。
通信手段（stdio RPC / ローカルSQLite など）はサブクラスが担当します。
"""

from abc import ABC, abstractmethod

# tags.list の1ページ（{total, limit, offset, items}）
TagsPage = dict


class BaseHost(ABC):
    """ホストアダプタの基底クラス.

    全てのホストアダプタはこのクラスを継承し、list_tags()/merge_tags() を実装します。
    失敗は HostCallError（または HostProtocolError）として送出し、リトライは行いません。
    """

    @abstractmethod
    def list_tags(self, lang: str, limit: int, offset: int) -> TagsPage:
        """タグ一覧の1ページを取得する.

        Args:
            lang: translation_text に使う言語コード
            limit: ページサイズ
            offset: 先頭からのオフセット

        Returns:
            {"total": int, "limit": int, "offset": int, "items": [{id, namespace, name, translation_text?}]}

        Raises:
            HostCallError: ホストへの問い合わせに失敗した場合
        """
        ...

    @abstractmethod
    def merge_tags(self, source_id: int, target_id: int, delete_source: bool) -> None:
        """source タグを target タグへ統合する（必要なら source を削除）.

        Raises:
            HostCallError: 統合に失敗した場合
        """
        ...
