#!/usr/bin/env python
"""
rollback.py
===========
Shows that rolling a record back appends a new UPDATE version whose
content equals the chosen one; no earlier version is touched.
"""

import os

from dotenv import load_dotenv
from sqlalchemy import text

from chronicle import Chronicle, VersionNotFoundError

load_dotenv()

db_url = os.environ.get("CHRONICLE_DATABASE_URL", "sqlite://")


def main() -> None:
    chronicle = Chronicle.from_url(db_url)
    with chronicle.transaction() as conn:
        conn.execute(
            text(
                "CREATE TABLE IF NOT EXISTS users ("
                " id INTEGER PRIMARY KEY, name TEXT NOT NULL, email TEXT NOT NULL)"
            )
        )
    chronicle.register_table(
        [{"name": "id", "storage_class": "integer", "primary_key": True}, {"name": "name"}, {"name": "email"}],
        "users",
    )

    chronicle.insert("users", {"id": 1, "name": "Bob", "email": "bob@example.com"})
    good = chronicle.update("users", {"email": "bob@work.example"}, {"id": 1})
    chronicle.update("users", {"name": "B0b!!", "email": "oops"}, {"id": 1})

    print(f"→ Rolling back to v{good}")
    chronicle.rollback("users", good, {"id": 1})

    for version in chronicle.get_versions("users", {"id": 1}):
        print(f"  v{version.version_id} {version.operation.value:<6} {version.attributes}")

    try:
        chronicle.rollback("users", 10_000, {"id": 1})
    except VersionNotFoundError as exc:
        print(f"✗ {exc}")


if __name__ == "__main__":
    main()
