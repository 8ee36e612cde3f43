from __future__ import annotations

from pathlib import Path

import pytest

from sqlbundle.errors import InvalidDatabaseName, SourceLayoutError
from sqlbundle.infra.discover import DatabaseSource, list_databases, read_migration_sources, validate_database_name


def test_list_databases_sorted_and_skips_hidden(source_root: Path, make_database) -> None:
    make_database("Sales", {})
    make_database("Audit", {})
    make_database(".git", {})
    (source_root / "README.md").write_text("notes", encoding="utf-8")

    assert [db.name for db in list_databases(source_root)] == ["Audit", "Sales"]


def test_list_databases_filters_selection(source_root: Path, make_database) -> None:
    make_database("Sales", {})
    make_database("Audit", {})

    assert [db.name for db in list_databases(source_root, ["Sales"])] == ["Sales"]


def test_list_databases_unknown_selection(source_root: Path, make_database) -> None:
    make_database("Sales", {})

    with pytest.raises(SourceLayoutError):
        list_databases(source_root, ["Missing"])


def test_list_databases_missing_root(tmp_path: Path) -> None:
    with pytest.raises(SourceLayoutError):
        list_databases(tmp_path / "nope")


def test_read_migration_sources_skips_hidden_and_subdirs(make_database) -> None:
    db_dir = make_database("Sales", {"1.0.1-B.sql": "B", "1.0.0-A.sql": "A", ".DS_Store": "x"})
    (db_dir / "archive").mkdir()

    sources = read_migration_sources(DatabaseSource(name="Sales", path=db_dir))

    assert sources == [("1.0.0-A.sql", "A"), ("1.0.1-B.sql", "B")]


def test_read_migration_sources_keeps_nonconforming_files(make_database) -> None:
    db_dir = make_database("Sales", {"init.sql": "SELECT 1"})

    assert read_migration_sources(DatabaseSource(name="Sales", path=db_dir)) == [("init.sql", "SELECT 1")]


@pytest.mark.parametrize("name", ["Sa'les", 'Sa"les', "Sa]les", "Sa[les", "", "  ", "Sa\tles"])
def test_validate_database_name_rejects(name: str) -> None:
    with pytest.raises(InvalidDatabaseName):
        validate_database_name(name)


def test_validate_database_name_accepts_plain_names() -> None:
    assert validate_database_name("Sales-EU 2024") == "Sales-EU 2024"
