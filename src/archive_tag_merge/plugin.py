"""tag merge プラグインのエントリポイント.

- plugin: ホストプロセスから起動され、stdin/stdout の NDJSON でやり取りする
- info: プラグイン情報を表示する
- run: ローカルのSQLiteアーカイブDBに対して実行する
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from loguru import logger

from .adapters.sqlite_host import SqliteTagHost
from .adapters.stdio_host import NdjsonChannel, StdioHost
from .config import PLUGIN_INFO, MergeConfig, load_config_file
from .core.exceptions import HostCallError, HostProtocolError, InvalidParameterError
from .pipeline import execute
from .reporting import PluginReporter


def configure_logging(level: str = "INFO") -> None:
    """loguru の出力先を stderr に限定する（stdout はプロトコル専用）."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def run_plugin(channel: NdjsonChannel) -> int:
    """ホストからのコマンドを1件受け取り、実行する.

    コマンド: {"type": "command", "command": "plugin_info" | "run", "params": {...}}

    Returns:
        終了コード（成功 0 / 失敗 1）
    """
    reporter = PluginReporter(channel)

    try:
        message = channel.receive()
    except HostProtocolError as e:
        logger.error(f"Invalid command from host: {e}")
        reporter.output_result(False, error=str(e))
        return 1

    if message is None:
        logger.error("Host closed the stream without sending a command")
        return 1

    command = message.get("command")
    if command == "plugin_info":
        reporter.output_result(True, PLUGIN_INFO)
        return 0

    if command != "run":
        reporter.output_result(False, error=f"Unknown command: {command}")
        return 1

    try:
        config = MergeConfig.from_params(message.get("params"))
    except InvalidParameterError as e:
        logger.error(str(e))
        reporter.output_result(False, error=str(e))
        return 1

    return 0 if execute(StdioHost(channel), config, reporter) else 1


def run_local(args: argparse.Namespace) -> int:
    """ローカルのアーカイブDBに対して実行する."""
    reporter = PluginReporter(NdjsonChannel())

    try:
        config = load_config_file(args.config) if args.config else MergeConfig()
        config = config.with_overrides(
            lang=args.lang,
            page_size=args.page_size,
            dry_run=False if args.apply else None,
            delete_source=False if args.keep_source else None,
            max_merges=args.max_merges,
            report_dir=args.report_dir,
        )
        host = SqliteTagHost(args.db)
    except (FileNotFoundError, ValueError, HostCallError) as e:
        logger.error(str(e))
        reporter.output_result(False, error=str(e))
        return 1

    with host:
        return 0 if execute(host, config, reporter) else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Merge duplicate archive tags")
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="loguru log level for stderr output",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("plugin", help="Run as a host plugin (NDJSON over stdin/stdout)")
    subparsers.add_parser("info", help="Print plugin info as JSON")

    run_parser = subparsers.add_parser("run", help="Run against a local SQLite archive DB")
    run_parser.add_argument("--db", type=Path, required=True, help="Archive database file path")
    run_parser.add_argument("--config", type=Path, default=None, help="Optional YAML config file")
    run_parser.add_argument("--lang", type=str, default=None, help="Translation language (default: zh)")
    run_parser.add_argument("--page-size", type=int, default=None, help="Pagination size for tags.list")
    run_parser.add_argument(
        "--apply",
        action="store_true",
        help="Apply merges (default is dry-run: only compute the plan)",
    )
    run_parser.add_argument(
        "--keep-source",
        action="store_true",
        help="Keep source tags after merging",
    )
    run_parser.add_argument("--max-merges", type=int, default=None, help="Max merges to apply (0 = unlimited)")
    run_parser.add_argument(
        "--report-dir",
        type=Path,
        default=None,
        help="Write merge_plan.csv to this directory",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI エントリポイント."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    if args.command == "info":
        print(json.dumps(PLUGIN_INFO, ensure_ascii=False, indent=2))
        sys.exit(0)

    if args.command == "plugin":
        sys.exit(run_plugin(NdjsonChannel()))

    sys.exit(run_local(args))


if __name__ == "__main__":
    main()
