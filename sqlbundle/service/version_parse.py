from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

from sqlbundle.errors import DuplicateVersion, InvalidFilenameFormat


MIGRATION_FILENAME_PATTERN = re.compile(r"([0-9]+)\.([0-9]+)\.([0-9]+)-([^/\\\x00-\x1f]+)\.sql")

VersionKey = tuple[int, int, int]


@dataclass(frozen=True)
class MigrationFile:
    version: VersionKey
    name: str
    raw_sql: str
    filename: str


def format_version(version: VersionKey) -> str:
    return ".".join(str(part) for part in version)


def parse_migration_filename(filename: str) -> tuple[VersionKey, str]:
    """ファイル名から (version, name) を取り出す。

    name は拡張子を除いたファイル名そのもので、冪等ガードのキーとして使う。
    """
    match = MIGRATION_FILENAME_PATTERN.fullmatch(filename)
    if match is None:
        raise InvalidFilenameFormat(filename)
    version = (int(match.group(1)), int(match.group(2)), int(match.group(3)))
    return version, filename[: match.end(4)]


def load_migration(filename: str, raw_sql: str) -> MigrationFile:
    version, name = parse_migration_filename(filename)
    return MigrationFile(version=version, name=name, raw_sql=raw_sql, filename=filename)


def order_migrations(migrations: Iterable[MigrationFile]) -> list[MigrationFile]:
    ordered = sorted(migrations, key=lambda item: item.version)
    # 隣接要素の比較だけで重複を検出できる
    for prev, current in zip(ordered, ordered[1:]):
        if prev.version == current.version:
            first, second = sorted((prev.filename, current.filename))
            raise DuplicateVersion(format_version(current.version), first, second)
    return ordered
