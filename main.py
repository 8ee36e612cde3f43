#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
SQLマイグレーション バンドラー
- ソースルート直下の各ディレクトリ = 1データベース
- 各ファイル = 1マイグレーション（<major>.<minor>.<patch>-<label>.sql）
- バージョン順に並べ、冪等ガードで包んで <database>-migrations.sql を1本出力
- 不正なファイル名・重複バージョンがあるデータベースは出力しない
"""

from __future__ import annotations

import logging
import os
import sys
from functools import partial
from pathlib import Path
from typing import List, Optional

from sqlbundle.cli import dispatch
from sqlbundle.config import load_app_config
from sqlbundle.errors import BundleError, SourceLayoutError
from sqlbundle.infra.discover import DatabaseSource, list_databases
from sqlbundle.infra.loggers import configure_logger
from sqlbundle.infra.script_writer import write_script
from sqlbundle.orchestrator import execute_bundle_run
from sqlbundle.service.version_parse import format_version
from sqlbundle.usecase.assemble import DatabaseScript, build_database_script


# =========================
# 設定
# =========================
APP_CONFIG = load_app_config()

ROOT = Path(__file__).resolve().parent
SOURCE_DIR = Path(APP_CONFIG.source_dir)
DEST_DIR = Path(APP_CONFIG.dest_dir)
LOG_PATH = ROOT / APP_CONFIG.log_path
LOG_LEVEL = os.getenv("SQLBUNDLE_LOG_LEVEL", APP_CONFIG.log_level).upper()

SOURCE_ENCODING = APP_CONFIG.source_encoding
OUTPUT_ENCODING = APP_CONFIG.output_encoding
FILE_SUFFIX = APP_CONFIG.file_suffix
PRINT_ON_APPLY = APP_CONFIG.print_on_apply
KEEP_GOING = APP_CONFIG.keep_going


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    return configure_logger(LOG_PATH, (level or LOG_LEVEL).upper())


def _resolve_dir(value: Optional[str], default: Path) -> Path:
    return Path(value) if value else default


def _build(source: DatabaseSource) -> DatabaseScript:
    return build_database_script(source, encoding=SOURCE_ENCODING, print_on_apply=PRINT_ON_APPLY)


def _write(dest_dir: Path, script: DatabaseScript) -> Path:
    return write_script(dest_dir, script.database, script.text, suffix=FILE_SUFFIX, encoding=OUTPUT_ENCODING)


# =========================
# CLI
# =========================
def cmd_build(
    source: Optional[str],
    dest: Optional[str],
    databases: Optional[List[str]],
    keep_going: Optional[bool],
    dry_run: bool,
    log_level: Optional[str],
) -> int:
    logger = configure_logging(log_level)
    source_dir = _resolve_dir(source, SOURCE_DIR)
    dest_dir = _resolve_dir(dest, DEST_DIR)
    keep_going = KEEP_GOING if keep_going is None else keep_going
    logger.info(
        "bundle_start source=%s dest=%s databases=%s keep_going=%s dry_run=%s",
        source_dir,
        dest_dir,
        ",".join(databases) if databases else "*",
        keep_going,
        dry_run,
    )

    try:
        targets = list_databases(source_dir, databases)
    except SourceLayoutError as e:
        logger.error("bundle_failed error=%s", e)
        print(f"[ERROR] {e}")
        return 2

    try:
        result = execute_bundle_run(
            targets,
            build=_build,
            write=None if dry_run else partial(_write, dest_dir),
            keep_going=keep_going,
            logger=logger,
        )
    except Exception as e:
        logger.error("bundle_failed error=%s", e, exc_info=logger.isEnabledFor(logging.DEBUG))
        print(f"[ERROR] {e}")
        return 1

    for outcome in result.outcomes:
        if outcome.status == "written":
            print(f"[OK] {outcome.database}: migrations={outcome.migrations} out={outcome.out_path}")
        elif outcome.status == "checked":
            print(f"[OK] {outcome.database}: migrations={outcome.migrations} (dry-run)")
        elif outcome.status == "failed":
            print(f"[ERROR] {outcome.database}: {outcome.error}")
        else:
            print(f"[SKIP] {outcome.database}: not processed after earlier failure")

    succeeded = len(result.outcomes) - len(result.failed) - sum(1 for o in result.outcomes if o.status == "skipped")
    logger.info(
        "bundle_finish databases=%s succeeded=%s failed=%s aborted=%s",
        len(result.outcomes),
        succeeded,
        len(result.failed),
        result.aborted,
    )
    print(f"[{'OK' if result.ok else 'ERROR'}] build: databases={len(result.outcomes)} succeeded={succeeded} failed={len(result.failed)}")
    return 0 if result.ok else 1


def cmd_list(source: Optional[str], databases: Optional[List[str]]) -> int:
    source_dir = _resolve_dir(source, SOURCE_DIR)
    try:
        targets = list_databases(source_dir, databases)
    except SourceLayoutError as e:
        print(f"[ERROR] {e}")
        return 2

    exit_code = 0
    for target in targets:
        try:
            script = _build(target)
        except BundleError as e:
            print(f"[ERROR] {target.name}: {e}")
            exit_code = 1
            continue
        for migration in script.migrations:
            print(f"{target.name}\t{format_version(migration.version)}\t{migration.name}")
    return exit_code


def cmd_show(source: Optional[str], database: str) -> int:
    source_dir = _resolve_dir(source, SOURCE_DIR)
    try:
        (target,) = list_databases(source_dir, [database])
        script = _build(target)
    except BundleError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1
    sys.stdout.write(script.text)
    return 0


def main(argv: List[str]) -> int:
    return dispatch(
        argv,
        cmd_build=cmd_build,
        cmd_list=cmd_list,
        cmd_show=cmd_show,
    )


def cli_entry() -> int:
    return main(sys.argv[1:])


if __name__ == "__main__":
    raise SystemExit(cli_entry())
