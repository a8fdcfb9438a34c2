"""
SQL text used by the scenarios.

The scripts are kept in ``.sql`` files referenced from the YAML configuration
and checked once at scenario start instead of on every call.
"""

import re
import sqlite3
from dataclasses import dataclass
from pathlib import Path

from sqlite_spike.errors import SchemaError

INSERT_PARAMETERS = ("id", "created")


@dataclass(frozen=True)
class SqlTemplates:

    create_tables: str
    drop_tables: str
    insert_message: str

    @classmethod
    def from_files(cls, create_tables: Path, drop_tables: Path, insert_message: Path) -> "SqlTemplates":
        return cls(
            create_tables=create_tables.read_text(encoding="utf-8"),
            drop_tables=drop_tables.read_text(encoding="utf-8"),
            insert_message=insert_message.read_text(encoding="utf-8"),
        )

    def validate(self) -> None:
        """
        Check that every script is complete SQL and that the insert binds
        the ``:id`` and ``:created`` parameters.

        Raises:
            SchemaError: If a script is empty or incomplete
        """
        for name in ("create_tables", "drop_tables", "insert_message"):
            text = getattr(self, name).strip()
            if not text:
                raise SchemaError(f"SQL template '{name}' is empty")
            if not sqlite3.complete_statement(text):
                raise SchemaError(f"SQL template '{name}' is not a complete statement")

        bound = set(re.findall(r"[:@$](\w+)", self.insert_message))
        missing = [p for p in INSERT_PARAMETERS if p not in bound]
        if missing:
            raise SchemaError(f"Insert template does not bind parameter(s): {', '.join(missing)}")
