from __future__ import annotations

import argparse
from typing import Callable, Sequence

from sqlbundle.config import load_help_text


BuildHandler = Callable[[str | None, str | None, list[str] | None, bool | None, bool, str | None], int]
ListHandler = Callable[[str | None, list[str] | None], int]
ShowHandler = Callable[[str | None, str], int]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=load_help_text(
            "cli_description.txt",
            fallback="Bundle versioned per-database SQL migrations into idempotent deployment scripts",
        )
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_build = sub.add_parser(
        "build",
        help=load_help_text("build_help.txt", fallback="全データベースの配布用スクリプトを生成"),
        epilog=(
            "例:\n"
            "  python main.py build --source migrations --dest build\n"
            "  python main.py build --database Sales --dry-run"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p_build.add_argument("--source", type=str, default=None, help="マイグレーションのルートディレクトリ")
    p_build.add_argument("--dest", type=str, default=None, help="出力先ディレクトリ")
    p_build.add_argument("--database", action="append", default=None, help="対象データベース（複数指定可）")
    p_build.add_argument(
        "--keep-going",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="失敗したデータベースがあっても残りを処理する",
    )
    p_build.add_argument("--dry-run", action="store_true", help="検証と組み立てのみ行い、書き込まない")
    p_build.add_argument("--log-level", type=str, default=None)

    p_list = sub.add_parser("list", help="適用順にマイグレーションを一覧表示")
    p_list.add_argument("--source", type=str, default=None)
    p_list.add_argument("--database", action="append", default=None)

    p_show = sub.add_parser("show", help="1データベース分のスクリプトを標準出力へ出す")
    p_show.add_argument("--source", type=str, default=None)
    p_show.add_argument("--database", type=str, required=True)
    return parser


def dispatch(
    argv: Sequence[str],
    *,
    cmd_build: BuildHandler,
    cmd_list: ListHandler,
    cmd_show: ShowHandler,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.cmd == "build":
        return cmd_build(args.source, args.dest, args.database, args.keep_going, args.dry_run, args.log_level)
    if args.cmd == "list":
        return cmd_list(args.source, args.database)
    if args.cmd == "show":
        return cmd_show(args.source, args.database)
    return 2
