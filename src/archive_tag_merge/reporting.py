"""プラグインイベント（progress / log / data / result）の送出.

イベントは NDJSON としてホストへ送り、log は loguru にも同じ内容を出力します。
"""

from __future__ import annotations

from typing import Any, Protocol

from loguru import logger


class MessageSink(Protocol):
    def send(self, message: dict[str, Any]) -> None: ...


class PluginReporter:
    """ホストへのイベント送出.

    Args:
        sink: send(dict) を持つ送信先（NdjsonChannel など）
    """

    def __init__(self, sink: MessageSink) -> None:
        self.sink = sink
        self.result_sent = False

    def progress(self, percent: int, message: str) -> None:
        percent = max(0, min(100, int(percent)))
        self.sink.send({"type": "progress", "progress": percent, "message": message})

    def log(self, level: str, message: str, data: dict[str, Any] | None = None) -> None:
        logger.log(level.upper(), f"{message} {data}" if data else message)
        event: dict[str, Any] = {"type": "log", "level": level.lower(), "message": message}
        if data:
            event["data"] = data
        self.sink.send(event)

    def log_info(self, message: str, data: dict[str, Any] | None = None) -> None:
        self.log("info", message, data)

    def emit_data(self, key: str, data: Any) -> None:
        self.sink.send({"type": "data", "key": key, "data": data})

    def output_result(self, success: bool, data: Any = None, error: str | None = None) -> None:
        """最終結果を送る。1回の実行につき1度だけ呼ぶこと."""
        if self.result_sent:
            raise RuntimeError("Result has already been sent for this run")
        event: dict[str, Any] = {"type": "result", "success": success}
        if success:
            event["data"] = data
        else:
            event["error"] = error or "unknown error"
        self.sink.send(event)
        self.result_sent = True
