"""Explicit table definitions used by the data layer."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Column:
    name: str
    type: str
    primary_key: bool = False
    autoincrement: bool = False
    nullable: bool = True
    default: Optional[str] = None

    def definition(self) -> str:
        parts = [self.name, self.type]
        if self.primary_key:
            parts.append("PRIMARY KEY")
            if self.autoincrement:
                parts.append("AUTOINCREMENT")
        elif not self.nullable:
            parts.append("NOT NULL")
        if self.default is not None:
            parts.append(f"DEFAULT {self.default}")
        return " ".join(parts)


@dataclass(frozen=True)
class Table:
    name: str
    columns: Tuple[Column, ...]

    @property
    def column_names(self) -> Tuple[str, ...]:
        return tuple(column.name for column in self.columns)

    def create_statement(self) -> str:
        """Render an idempotent ``CREATE TABLE`` statement for this table."""

        body = ",\n    ".join(column.definition() for column in self.columns)
        return f"CREATE TABLE IF NOT EXISTS {self.name} (\n    {body}\n)"


# Validation keeps name/email non-empty; storage only requires presence.
USERS_TABLE = Table(
    name="users",
    columns=(
        Column("id", "INTEGER", primary_key=True, autoincrement=True),
        Column("name", "TEXT", nullable=False),
        Column("email", "TEXT", nullable=False),
        Column("created_at", "TIMESTAMP", default="CURRENT_TIMESTAMP"),
    ),
)


__all__ = ["Column", "Table", "USERS_TABLE"]
