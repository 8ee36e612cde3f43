from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from sqlbundle.infra.discover import DatabaseSource, read_migration_sources, validate_database_name
from sqlbundle.service.migration_script import build_migration_script
from sqlbundle.service.sql_guard import (
    BATCH_SEPARATOR,
    MIGRATIONS_TABLE,
    migrations_table_ref,
    sql_literal,
    wrap_existence_guard,
)
from sqlbundle.service.version_parse import MigrationFile, load_migration, order_migrations


@dataclass(frozen=True)
class DatabaseScript:
    database: str
    text: str
    migrations: tuple[MigrationFile, ...]


def database_preamble(database: str) -> str:
    return "\n".join(
        [
            f"IF NOT EXISTS (SELECT 1 FROM sys.databases WHERE [name] = {sql_literal(database)})",
            f"    CREATE DATABASE [{database}]",
            BATCH_SEPARATOR,
            f"USE [{database}]",
        ]
    )


def metadata_table_bootstrap() -> str:
    create_table = "\n".join(
        [
            f"CREATE TABLE {migrations_table_ref()} (",
            "    [Name] NVARCHAR(MAX) NOT NULL,",
            "    [DateApplied] DATETIME NOT NULL",
            ")",
        ]
    )
    return wrap_existence_guard(MIGRATIONS_TABLE, create_table)


def assemble_database_script(
    database: str,
    sources: Iterable[tuple[str, str]],
    *,
    print_on_apply: bool = True,
) -> DatabaseScript:
    """1データベース分の (filename, text) 群から配布用スクリプトを組み立てる。

    不正なファイル名・重複バージョンがあれば例外で全体を打ち切る。
    部分的に正しいスクリプトは返さない。
    """
    migrations = order_migrations(load_migration(filename, text) for filename, text in sources)

    stages = [database_preamble(database), metadata_table_bootstrap()]
    stages.extend(build_migration_script(m, print_on_apply=print_on_apply) for m in migrations)
    text = f"\n{BATCH_SEPARATOR}\n".join(stages) + "\n"
    return DatabaseScript(database=database, text=text, migrations=tuple(migrations))


def build_database_script(
    source: DatabaseSource,
    *,
    encoding: str = "utf-8-sig",
    print_on_apply: bool = True,
) -> DatabaseScript:
    database = validate_database_name(source.name)
    return assemble_database_script(
        database,
        read_migration_sources(source, encoding),
        print_on_apply=print_on_apply,
    )
