#!/usr/bin/env python
"""
basic_crud.py
=============
Walks one `users` row through insert → update → update → delete and prints
the history Chronicle recorded for it.

Reads CHRONICLE_DATABASE_URL from the environment (or a .env file);
defaults to an in-memory SQLite database.
"""

import os
from pprint import pprint

from dotenv import load_dotenv
from sqlalchemy import text

from chronicle import Chronicle, ColumnDescriptor, VersionEvent

load_dotenv()

db_url = os.environ.get("CHRONICLE_DATABASE_URL", "sqlite://")

print(f"\nConnecting to {db_url}\n")


# ────────────────────────────────── 1. Live table + Chronicle ─────────────────────────
chronicle = Chronicle.from_url(db_url)

with chronicle.transaction() as conn:
    conn.execute(
        text(
            "CREATE TABLE IF NOT EXISTS users ("
            " id INTEGER PRIMARY KEY,"
            " name TEXT NOT NULL,"
            " email TEXT NOT NULL,"
            " role TEXT NOT NULL)"
        )
    )

chronicle.register_table(
    [
        ColumnDescriptor(name="id", storage_class="integer", primary_key=True),
        ColumnDescriptor(name="name"),
        ColumnDescriptor(name="email"),
        ColumnDescriptor(name="role"),
    ],
    "users",
)


# ────────────────────────────────── 2. Event handlers ────────────────────────────────
@chronicle.on.insert("users")
def log_new_user(event: VersionEvent) -> None:
    print(f"🆕 users v{event.version_id}: {event.attributes['name']} created")


@chronicle.on.delete("users")
def log_deleted_user(event: VersionEvent) -> None:
    print(f"🗑  users v{event.version_id}: {event.attributes['name']} deleted")


# ────────────────────────────────── 3. Lifecycle ─────────────────────────────────────
def main() -> None:
    chronicle.insert("users", {"id": 1, "name": "John Doe", "email": "john@example.com", "role": "user"})
    chronicle.update("users", {"role": "admin"}, {"id": 1})
    chronicle.update("users", {"email": "john.doe@example.com"}, {"id": 1})
    chronicle.delete("users", {"id": 1})

    print("\nHistory for id=1:")
    for version in chronicle.get_versions("users", {"id": 1}):
        print(f"  v{version.version_id} {version.operation.value:<6} @ {version.created_at}")
        pprint(version.attributes, indent=4, width=80)


if __name__ == "__main__":
    main()
