from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from sqlbundle.errors import InvalidDatabaseName, SourceLayoutError, UnreadableFile


# 生成SQLでは [name] / N'name' にそのまま埋め込むため、壊れる文字は事前に弾く
FORBIDDEN_NAME_CHARS = re.compile(r"['\"\[\]\x00-\x1f]")


@dataclass(frozen=True)
class DatabaseSource:
    name: str
    path: Path


def _is_hidden(path: Path) -> bool:
    return path.name.startswith(".")


def validate_database_name(name: str) -> str:
    if not name.strip():
        raise InvalidDatabaseName("database name must not be empty")
    if FORBIDDEN_NAME_CHARS.search(name):
        raise InvalidDatabaseName(f"database name contains forbidden characters: {name!r}")
    return name


def list_databases(source_root: Path, only: Sequence[str] | None = None) -> list[DatabaseSource]:
    if not source_root.is_dir():
        raise SourceLayoutError(f"source directory not found: {source_root}")

    found = {
        p.name: DatabaseSource(name=p.name, path=p)
        for p in source_root.iterdir()
        if p.is_dir() and not _is_hidden(p)
    }
    if not only:
        return [found[name] for name in sorted(found)]

    missing = [name for name in only if name not in found]
    if missing:
        raise SourceLayoutError(f"database directory not found: {', '.join(missing)}")
    return [found[name] for name in dict.fromkeys(only)]


def read_migration_sources(source: DatabaseSource, encoding: str = "utf-8-sig") -> list[tuple[str, str]]:
    """データベースディレクトリ直下の全ファイルを (filename, text) で返す。

    ファイル名の妥当性はここでは見ない。隠しファイルとサブディレクトリは対象外。
    """
    sources: list[tuple[str, str]] = []
    for path in sorted(source.path.iterdir(), key=lambda p: p.name):
        if _is_hidden(path) or not path.is_file():
            continue
        try:
            text = path.read_text(encoding=encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise UnreadableFile(f"cannot read migration file {path}: {e}") from e
        sources.append((path.name, text))
    return sources
