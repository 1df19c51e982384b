"""NDJSON stdio host.

The host process launches the plugin and talks to it over stdin/stdout, one JSON
object per line. The same stream carries host RPC calls (plugin -> host) and
plugin events (progress / log / data / result).
"""

from __future__ import annotations

import json
import sys
from typing import Any, TextIO

from loguru import logger

from ..core.exceptions import HostCallError, HostProtocolError
from .base_host import BaseHost, TagsPage


class NdjsonChannel:
    """Line-delimited JSON channel over a pair of text streams.

    Args:
        reader: Stream the host writes to (plugin stdin)
        writer: Stream the host reads from (plugin stdout)
    """

    def __init__(self, reader: TextIO | None = None, writer: TextIO | None = None) -> None:
        self.reader = reader if reader is not None else sys.stdin
        self.writer = writer if writer is not None else sys.stdout

    def send(self, message: dict[str, Any]) -> None:
        self.writer.write(json.dumps(message, ensure_ascii=False) + "\n")
        self.writer.flush()

    def receive(self) -> dict[str, Any] | None:
        """Read the next non-empty message. Returns None at end of stream.

        Raises:
            HostProtocolError: The line is not a JSON object
        """
        while True:
            line = self.reader.readline()
            if not line:
                return None
            line = line.strip()
            if not line:
                continue
            try:
                message = json.loads(line)
            except json.JSONDecodeError as e:
                raise HostProtocolError(f"Invalid JSON from host: {line[:200]}") from e
            if not isinstance(message, dict):
                raise HostProtocolError(f"Host message must be a JSON object, got {type(message).__name__}")
            return message


class StdioHost(BaseHost):
    """Host reached through NDJSON RPC calls on a channel.

    Request:  {"type": "call", "id": n, "method": "...", "params": {...}}
    Response: {"type": "call_result", "id": n, "ok": true, "result": ...}
              {"type": "call_result", "id": n, "ok": false, "error": "..."}
    """

    def __init__(self, channel: NdjsonChannel) -> None:
        self.channel = channel
        self._next_id = 0

    def call(self, method: str, params: dict[str, Any]) -> Any:
        """Send one RPC call and wait for its result.

        Raises:
            HostCallError: The host reported a failure or closed the stream
            HostProtocolError: The reply does not match the call
        """
        self._next_id += 1
        call_id = self._next_id
        self.channel.send({"type": "call", "id": call_id, "method": method, "params": params})

        reply = self.channel.receive()
        if reply is None:
            raise HostCallError(method, "host closed the stream before replying")
        if reply.get("type") != "call_result" or reply.get("id") != call_id:
            raise HostProtocolError(
                f"Unexpected reply to {method} (id={call_id}): type={reply.get('type')!r}, id={reply.get('id')!r}"
            )
        if not reply.get("ok", False):
            raise HostCallError(method, str(reply.get("error") or "unknown error"))

        logger.debug(f"Host call {method} (id={call_id}) succeeded")
        return reply.get("result")

    def list_tags(self, lang: str, limit: int, offset: int) -> TagsPage:
        result = self.call("tags.list", {"lang": lang, "limit": limit, "offset": offset})
        if not isinstance(result, dict):
            raise HostProtocolError(f"tags.list must return an object, got {type(result).__name__}")
        return result

    def merge_tags(self, source_id: int, target_id: int, delete_source: bool) -> None:
        self.call(
            "tags.merge",
            {"sourceId": source_id, "targetId": target_id, "deleteSource": delete_source},
        )
