from __future__ import annotations

from users_api.schema import Column, Table, USERS_TABLE


def test_users_table_statement_is_guarded() -> None:
    statement = USERS_TABLE.create_statement()

    assert statement.startswith("CREATE TABLE IF NOT EXISTS users (")
    assert "id INTEGER PRIMARY KEY AUTOINCREMENT" in statement
    assert "name TEXT NOT NULL" in statement
    assert "email TEXT NOT NULL" in statement
    assert "created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP" in statement


def test_column_names_follow_declaration_order() -> None:
    assert USERS_TABLE.column_names == ("id", "name", "email", "created_at")


def test_column_definition_variants() -> None:
    assert Column("note", "TEXT").definition() == "note TEXT"
    assert Column("count", "INTEGER", nullable=False, default="0").definition() == "count INTEGER NOT NULL DEFAULT 0"
    assert Column("key", "INTEGER", primary_key=True).definition() == "key INTEGER PRIMARY KEY"


def test_custom_table_statement() -> None:
    table = Table(name="notes", columns=(Column("id", "INTEGER", primary_key=True), Column("body", "TEXT")))

    assert table.create_statement() == (
        "CREATE TABLE IF NOT EXISTS notes (\n"
        "    id INTEGER PRIMARY KEY,\n"
        "    body TEXT\n"
        ")"
    )
